# Generation history: one row per produced test (metadata only, never the PDF).
from __future__ import annotations

import logging
from typing import List, Optional

from db import SessionLocal
from models import Generation

logger = logging.getLogger(__name__)


def record_generation(
    *,
    mode: str,
    topics: List[str],
    exam_scope: Optional[str],
    question_ids: List[str],
    page_count: int,
    failed_images: int,
    duration_ms: int,
    session_factory=SessionLocal,
) -> Optional[int]:
    """
    Persist a generation record. Runs as a background task after the response,
    so failures are logged here and never reach the caller.
    """
    try:
        with session_factory() as db:
            row = Generation(
                mode=mode,
                topics=topics,
                exam_scope=exam_scope,
                question_ids=question_ids,
                page_count=page_count,
                failed_images=failed_images,
                duration_ms=duration_ms,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return row.id
    except Exception:
        logger.exception("failed to record generation (mode=%s, topics=%s)", mode, topics)
        return None
