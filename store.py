"""
SQLAlchemy-backed question store.

Each public call opens its own short-lived session, so no connection is held
between the selector's queries or while images are being fetched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import StoreError
from models import Question
from schemas.questions import QuestionOut

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleFilter:
    topic: str
    exam_scope: Optional[str] = None


def normalize_image_refs(value: Any) -> List[str]:
    """Collapse the stored image field (None, one URL, or a list) to a list of URLs."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return []


def _to_question(row: Question) -> QuestionOut:
    return QuestionOut(
        question_id=row.question_id,
        number=row.number,
        topic=row.topic,
        exam=row.exam,
        exam_scope=row.exam_scope,
        image_refs=normalize_image_refs(row.image_url),
    )


class QuestionStore:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _run(self, what: str, fn: Callable[[Session], Any]) -> Any:
        try:
            with self._session_factory() as db:
                return fn(db)
        except SQLAlchemyError as e:
            logger.exception("question store query failed: %s", what)
            raise StoreError(f"Question store unavailable ({what}).") from e

    def distinct_topics(self, scope: Optional[str] = None) -> Set[str]:
        stmt = select(Question.topic).distinct()
        if scope is not None:
            stmt = stmt.where(Question.exam_scope == scope)
        return self._run("distinct_topics", lambda db: set(db.scalars(stmt).all()))

    def ordered_topics(self, scope: Optional[str] = None) -> List[str]:
        """Topics ordered by the lowest question number carrying them (ties: storage order)."""
        first_number = func.min(Question.number)
        stmt = select(Question.topic).group_by(Question.topic)
        if scope is not None:
            stmt = stmt.where(Question.exam_scope == scope)
        stmt = stmt.order_by(first_number, func.min(Question.id))
        return self._run("ordered_topics", lambda db: list(db.scalars(stmt).all()))

    def sample(self, filter: SampleFilter, count: int) -> List[QuestionOut]:
        """Up to ``count`` random questions matching ``filter``, no repeats within the call."""
        if count < 1:
            return []
        stmt = select(Question).where(Question.topic == filter.topic)
        if filter.exam_scope is not None:
            stmt = stmt.where(Question.exam_scope == filter.exam_scope)
        stmt = stmt.order_by(func.random()).limit(count)
        return self._run(
            "sample", lambda db: [_to_question(r) for r in db.scalars(stmt).all()]
        )

    def get(self, question_id: str) -> Optional[QuestionOut]:
        stmt = select(Question).where(Question.question_id == question_id)

        def _get(db: Session) -> Optional[QuestionOut]:
            row = db.scalars(stmt).first()
            return _to_question(row) if row is not None else None

        return self._run("get", _get)

    def find(
        self,
        topic: Optional[str] = None,
        exam_scope: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[QuestionOut]:
        stmt = select(Question)
        if topic:
            stmt = stmt.where(Question.topic == topic)
        if exam_scope:
            stmt = stmt.where(Question.exam_scope == exam_scope)
        stmt = stmt.order_by(Question.number, Question.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._run("find", lambda db: [_to_question(r) for r in db.scalars(stmt).all()])

    def count(self) -> int:
        stmt = select(func.count()).select_from(Question)
        return self._run("count", lambda db: int(db.scalar(stmt) or 0))
