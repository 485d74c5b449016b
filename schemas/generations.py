from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class GenerationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: datetime | None
    mode: str
    topics: List[str]
    exam_scope: Optional[str] = None
    page_count: int
    failed_images: int = 0
    duration_ms: int | None = None
    # usually excluded in list views
    question_ids: List[str] | None = None
