# schemas/exams.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateTestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topics: List[str] = []
    mix_exams: bool = Field(default=False, alias="mixExams")
    exam_scope: Optional[str] = Field(default=None, alias="examScope")
    # explicit mode falls back to the configured quota; mixed mode only accepts 1
    per_topic_quota: Optional[int] = Field(default=None, alias="perTopicQuota")


class ErrorResponse(BaseModel):
    error: str
    bucket: Optional[str] = None
    needed: Optional[int] = None
    available: Optional[int] = None
