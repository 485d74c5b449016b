import random

import pytest

from errors import (
    EmptySelection,
    InsufficientData,
    InvalidQuota,
    MissingScope,
    NoTopicsAvailable,
    RequestCancelled,
)
from schemas.questions import QuestionOut
from selector import SelectionMode, SelectionRequest, Selector, select_questions


class FakeStore:
    def __init__(self, questions, topics=None):
        self.questions = list(questions)
        self._topics = topics
        self.sample_calls = []

    def distinct_topics(self, scope=None):
        if self._topics is not None:
            return set(self._topics)
        return {q.topic for q in self.questions if scope is None or q.exam_scope == scope}

    def sample(self, filter, count):
        self.sample_calls.append((filter.topic, filter.exam_scope, count))
        pool = [
            q
            for q in self.questions
            if q.topic == filter.topic
            and (filter.exam_scope is None or q.exam_scope == filter.exam_scope)
        ]
        return random.sample(pool, min(count, len(pool)))


def q(qid, number, topic, scope="2024A"):
    return QuestionOut(question_id=qid, number=number, topic=topic, exam="Paper", exam_scope=scope)


POOL = [
    q("a1", 9, "Algebra"),
    q("a2", 3, "Algebra"),
    q("a3", 12, "Algebra"),
    q("g1", 5, "Geometry"),
    q("g2", 1, "Geometry"),
    q("t1", 7, "Trig", scope="2023B"),
]


def explicit(topics, quota=2, scope=None):
    return SelectionRequest(
        mode=SelectionMode.EXPLICIT, topics=tuple(topics), exam_scope=scope, per_topic_quota=quota
    )


def mixed(scope=None, quota=1):
    return SelectionRequest(mode=SelectionMode.MIXED, exam_scope=scope, per_topic_quota=quota)


def test_explicit_returns_topics_times_quota_sorted():
    for _ in range(20):
        result = select_questions(explicit(["Algebra", "Geometry"]), FakeStore(POOL))
        assert len(result) == 4
        numbers = [x.number for x in result]
        assert numbers == sorted(numbers)
        assert sum(1 for x in result if x.topic == "Algebra") == 2
        assert sum(1 for x in result if x.topic == "Geometry") == 2
        assert len({x.question_id for x in result}) == 4


def test_explicit_short_bucket_names_topic():
    store = FakeStore(POOL)
    with pytest.raises(InsufficientData) as ei:
        select_questions(explicit(["Algebra", "Trig", "Geometry"]), store)
    err = ei.value
    assert (err.bucket, err.needed, err.available) == ("Trig", 2, 1)
    # aborted at the short bucket, Geometry never queried
    assert [c[0] for c in store.sample_calls] == ["Algebra", "Trig"]


def test_explicit_empty_topics_rejected():
    with pytest.raises(EmptySelection):
        select_questions(explicit([]), FakeStore(POOL))


@pytest.mark.parametrize("quota", [0, -1])
def test_non_positive_quota_rejected(quota):
    store = FakeStore(POOL)
    with pytest.raises(InvalidQuota):
        select_questions(explicit(["Algebra"], quota=quota), store)
    assert store.sample_calls == []


def test_duplicate_topics_are_separate_buckets():
    store = FakeStore(POOL)
    result = select_questions(explicit(["Algebra", "Algebra"], quota=1), store)
    assert len(result) == 2
    assert [c[0] for c in store.sample_calls] == ["Algebra", "Algebra"]


def test_scope_passed_to_every_sample():
    store = FakeStore(POOL)
    select_questions(explicit(["Algebra", "Geometry"], quota=1, scope="2024A"), store)
    assert {c[1] for c in store.sample_calls} == {"2024A"}


def test_mixed_one_per_topic_in_scope():
    store = FakeStore(POOL)
    result = select_questions(mixed("2024A"), store)
    assert sorted(x.topic for x in result) == ["Algebra", "Geometry"]
    assert [x.number for x in result] == sorted(x.number for x in result)
    assert {c[2] for c in store.sample_calls} == {1}


@pytest.mark.parametrize("quota", [2, 5])
def test_mixed_rejects_quota_other_than_one(quota):
    store = FakeStore(POOL)
    with pytest.raises(InvalidQuota) as ei:
        select_questions(mixed("2024A", quota=quota), store)
    assert "exactly 1" in str(ei.value)
    assert store.sample_calls == []


def test_mixed_topic_with_no_questions_aborts():
    store = FakeStore([q("a1", 1, "Algebra")], topics={"Algebra", "Trig"})
    with pytest.raises(InsufficientData) as ei:
        select_questions(mixed("2024A"), store)
    assert ei.value.bucket == "Trig"
    assert ei.value.available == 0


def test_mixed_empty_universe():
    with pytest.raises(NoTopicsAvailable) as ei:
        select_questions(mixed("1999Z"), FakeStore(POOL))
    assert ei.value.bucket == "1999Z"


def test_required_scope_missing():
    selector = Selector(FakeStore(POOL), require_scope=True)
    with pytest.raises(MissingScope):
        selector.select(mixed(None))
    with pytest.raises(MissingScope):
        selector.select(explicit(["Algebra"]))


def test_ties_keep_bucket_order():
    pool = [q("x", 4, "Algebra"), q("y", 4, "Geometry"), q("z", 2, "Trig")]
    result = select_questions(explicit(["Geometry", "Algebra", "Trig"], quota=1), FakeStore(pool))
    assert [x.question_id for x in result] == ["z", "y", "x"]


def test_cancelled_before_querying():
    store = FakeStore(POOL)
    with pytest.raises(RequestCancelled):
        select_questions(explicit(["Algebra"]), store, is_cancelled=lambda: True)
    assert store.sample_calls == []
