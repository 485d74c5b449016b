from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from deps.auth import require_client
from deps.services import get_store
from schemas.questions import QuestionOut
from store import QuestionStore

router = APIRouter(tags=["questions"], dependencies=[Depends(require_client)])


@router.get("/questions", response_model=List[QuestionOut])
def list_questions(
    store: Annotated[QuestionStore, Depends(get_store)],
    topic: Optional[str] = None,
    exam_scope: Optional[str] = Query(default=None, alias="examScope"),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
):
    return store.find(topic=topic, exam_scope=exam_scope, limit=limit)


@router.get("/questions/{question_id}", response_model=QuestionOut)
def get_question_detail(
    question_id: str,
    store: Annotated[QuestionStore, Depends(get_store)],
):
    q = store.get(question_id)
    if not q:
        raise HTTPException(status_code=404, detail="question not found")
    return q
