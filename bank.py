# Question pool import: JSON / JSONL files -> questions table.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import StoreError
from models import Question

logger = logging.getLogger(__name__)


class QuestionRecord(BaseModel):
    question_id: str = Field(min_length=1)
    number: int
    topic: str = Field(min_length=1)
    exam: Optional[str] = None
    exam_scope: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("exam_scope", "examScope")
    )
    image_url: Union[str, List[str], None] = None

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("topic must not be blank")
        return v


def _iter_jsonl(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        for idx, line in enumerate(f, 1):
            s = line.strip()
            if not s or s.startswith("#") or s.startswith("//"):
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError:
                logger.warning("%s:%d: skipping malformed JSON line", p, idx)
                continue


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("%s: not valid JSON, skipping file", p)
            data = []
    if isinstance(data, list):
        for obj in data:
            yield obj
    else:
        # Non-list root -> ignore
        return


def load_records(data_dir: Path) -> List[QuestionRecord]:
    records: List[QuestionRecord] = []
    if not data_dir.exists():
        logger.warning("question data dir %s does not exist", data_dir)
        return records

    for p in sorted(data_dir.rglob("*")):
        if not p.is_file():
            continue
        suf = p.suffix.lower()
        if suf == ".jsonl":
            source = _iter_jsonl(p)
        elif suf == ".json":
            source = _iter_json(p)
        else:
            continue

        for raw in source:
            if not isinstance(raw, dict):
                continue
            try:
                records.append(QuestionRecord.model_validate(raw))
            except ValidationError:
                # Skip invalid records
                continue
    return records


def reload_bank(session_factory: Callable[[], Session], data_dir: Path) -> int:
    """
    Replace the questions table with the records found under ``data_dir``.

    Later files win on duplicate question_id. If nothing valid is found the
    table is left as it is and 0 is returned.
    """
    by_id: Dict[str, QuestionRecord] = {}
    for rec in load_records(data_dir):
        by_id[rec.question_id] = rec
    if not by_id:
        return 0

    try:
        with session_factory() as db:
            db.execute(delete(Question))
            db.add_all(Question(**rec.model_dump()) for rec in by_id.values())
            db.commit()
    except SQLAlchemyError as e:
        logger.exception("question reload failed")
        raise StoreError("Failed to reload question bank.") from e

    logger.info("reloaded %d questions from %s", len(by_id), data_dir)
    return len(by_id)
