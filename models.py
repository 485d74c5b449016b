from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


class Question(Base):
    __tablename__ = "questions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[str] = mapped_column(String(64), unique=True)
    number: Mapped[int] = mapped_column(Integer, index=True)
    topic: Mapped[str] = mapped_column(String(255), index=True)
    exam: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    exam_scope: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    # legacy shape: a single URL string, a list of URLs, or null
    image_url: Mapped[Any] = mapped_column(JSON, nullable=True)


class Generation(Base):
    __tablename__ = "generations"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), index=True
    )
    mode: Mapped[str] = mapped_column(String(16))
    topics: Mapped[list] = mapped_column(JSON)
    exam_scope: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    question_ids: Mapped[list] = mapped_column(JSON)
    page_count: Mapped[int] = mapped_column(Integer)
    failed_images: Mapped[int] = mapped_column(Integer, default=0)
    duration_ms: Mapped[int] = mapped_column(sa.Integer, nullable=True)
