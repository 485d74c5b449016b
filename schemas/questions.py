# schemas/questions.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class QuestionOut(BaseModel):
    model_config = ConfigDict(frozen=True)
    question_id: str
    number: int
    topic: str
    exam: Optional[str] = None
    exam_scope: Optional[str] = None
    # always a list; the store normalizes the legacy string/list column on read
    image_refs: List[str] = []
