from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from deps.auth import require_client
from deps.services import get_store
from store import QuestionStore

router = APIRouter(tags=["topics"], dependencies=[Depends(require_client)])


@router.get("/topics", response_model=List[str])
def list_topics(
    store: Annotated[QuestionStore, Depends(get_store)],
    exam_scope: Optional[str] = Query(default=None, alias="examScope"),
):
    # Menu order: by the first question number that carries each topic
    return store.ordered_topics(exam_scope)
