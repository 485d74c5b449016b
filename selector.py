"""
Question selection.

Turns a SelectionRequest into the ordered list of questions for one exam:

    1. Validate the request (quota, scope, topic list); mixed mode always
       draws MIXED_QUOTA per topic
    2. Resolve the buckets: the caller's topics (explicit) or every topic
       in the exam scope (mixed)
    3. Sample each bucket from the store; a short bucket aborts the request
    4. Concatenate the batches and stable-sort them by question number

No retries and no partial results: either every bucket is satisfied or an
InsufficientData error names the first one that was not.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence, Set, Tuple

from errors import (
    EmptySelection,
    InsufficientData,
    InvalidQuota,
    MissingScope,
    NoTopicsAvailable,
    RequestCancelled,
)
from schemas.questions import QuestionOut
from store import SampleFilter

logger = logging.getLogger(__name__)

# mixed exams sample one question from every topic in scope
MIXED_QUOTA = 1


class SelectionMode(str, enum.Enum):
    EXPLICIT = "explicit"
    MIXED = "mixed"


class QuestionSource(Protocol):
    def distinct_topics(self, scope: Optional[str] = None) -> Set[str]: ...

    def sample(self, filter: SampleFilter, count: int) -> List[QuestionOut]: ...


@dataclass(frozen=True)
class SelectionRequest:
    mode: SelectionMode
    topics: Tuple[str, ...] = field(default_factory=tuple)
    exam_scope: Optional[str] = None
    per_topic_quota: int = 1


class Selector:
    def __init__(self, store: QuestionSource, *, require_scope: bool = False):
        self.store = store
        self.require_scope = require_scope

    def select(
        self,
        request: SelectionRequest,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ) -> List[QuestionOut]:
        quota = request.per_topic_quota
        if isinstance(quota, bool) or not isinstance(quota, int) or quota < 1:
            raise InvalidQuota(quota)
        if request.mode is SelectionMode.MIXED and quota != MIXED_QUOTA:
            raise InvalidQuota(
                quota, f"Mixed exams draw exactly {MIXED_QUOTA} question per topic (got {quota!r})."
            )
        if self.require_scope and not request.exam_scope:
            raise MissingScope()

        if request.mode is SelectionMode.MIXED:
            self._check_cancelled(is_cancelled)
            universe = self.store.distinct_topics(request.exam_scope)
            if not universe:
                raise NoTopicsAvailable(request.exam_scope)
            buckets: Sequence[str] = sorted(universe)
        else:
            if not request.topics:
                raise EmptySelection()
            # duplicates are honored as repeated buckets
            buckets = request.topics

        picked: List[QuestionOut] = []
        for topic in buckets:
            self._check_cancelled(is_cancelled)
            batch = self.store.sample(SampleFilter(topic, request.exam_scope), quota)
            if len(batch) < quota:
                logger.info(
                    "bucket %r short: needed %d, available %d (scope=%r)",
                    topic,
                    quota,
                    len(batch),
                    request.exam_scope,
                )
                raise InsufficientData(bucket=topic, needed=quota, available=len(batch))
            picked.extend(batch)

        # sorted() is stable: equal numbers keep bucket order
        return sorted(picked, key=lambda q: q.number)

    @staticmethod
    def _check_cancelled(is_cancelled: Optional[Callable[[], bool]]) -> None:
        if is_cancelled is not None and is_cancelled():
            raise RequestCancelled()


def select_questions(
    request: SelectionRequest,
    store: QuestionSource,
    *,
    require_scope: bool = False,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> List[QuestionOut]:
    return Selector(store, require_scope=require_scope).select(request, is_cancelled)
