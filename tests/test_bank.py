import json

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from bank import load_records, reload_bank
from db import Base
from models import Question


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{(tmp_path / 'bank.db').as_posix()}")
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


def _write_pool(data_dir):
    data_dir.mkdir()
    (data_dir / "paper-a.json").write_text(
        json.dumps(
            [
                {
                    "question_id": "a1",
                    "number": 1,
                    "topic": "Algebra",
                    "exam": "Paper A",
                    "examScope": "2024A",
                    "image_url": "https://github.com/org/repo/blob/main/a1.png",
                },
                {"question_id": "bad", "topic": "Algebra"},  # no number
            ]
        ),
        encoding="utf-8",
    )
    (data_dir / "paper-b.jsonl").write_text(
        "\n".join(
            [
                "# exported 2024-05-01",
                json.dumps(
                    {
                        "question_id": "b2",
                        "number": 2,
                        "topic": "Trig",
                        "exam_scope": "2023B",
                        "image_url": ["https://img.example/1.png", "https://img.example/2.png"],
                    }
                ),
                "{not json",
                json.dumps({"question_id": "c3", "number": 3, "topic": "   "}),
            ]
        ),
        encoding="utf-8",
    )
    (data_dir / "notes.txt").write_text("ignored", encoding="utf-8")


def test_load_records_skips_invalid(tmp_path):
    data_dir = tmp_path / "questions"
    _write_pool(data_dir)
    records = load_records(data_dir)
    assert [r.question_id for r in records] == ["a1", "b2"]
    assert records[0].exam_scope == "2024A"
    assert records[1].image_url == ["https://img.example/1.png", "https://img.example/2.png"]


def test_reload_replaces_table(tmp_path, session_factory):
    with session_factory() as db:
        db.add(Question(question_id="old", number=9, topic="Old"))
        db.commit()

    data_dir = tmp_path / "questions"
    _write_pool(data_dir)
    assert reload_bank(session_factory, data_dir) == 2

    with session_factory() as db:
        rows = db.scalars(select(Question).order_by(Question.number)).all()
        assert [r.question_id for r in rows] == ["a1", "b2"]
        assert rows[0].image_url == "https://github.com/org/repo/blob/main/a1.png"


def test_reload_with_nothing_valid_keeps_table(tmp_path, session_factory):
    with session_factory() as db:
        db.add(Question(question_id="keep", number=1, topic="Algebra"))
        db.commit()

    assert reload_bank(session_factory, tmp_path / "missing") == 0
    with session_factory() as db:
        assert db.scalars(select(Question.question_id)).all() == ["keep"]
