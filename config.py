from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

_BASE = Path(__file__).resolve().parent

_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Database
    database_url: str = "sqlite:///./mathtest.db"
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=0, ge=0)

    # Selection
    explicit_per_topic_quota: int = Field(default=2, ge=1)
    require_exam_scope: bool = False

    # Images / PDF
    image_fetch_timeout: float = Field(default=10.0, gt=0)
    image_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    image_box_size: int = Field(default=500, ge=50)
    pdf_filename: str = "math-test.pdf"

    # Question import
    questions_data_dir: Path = _BASE / "data" / "questions"

    # Auth collaborator
    api_key: str = ""
    admin_token: str = ""

    cors_origins: List[str] = Field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", _DEFAULT_ORIGINS)
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./mathtest.db"),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "0")),
            explicit_per_topic_quota=int(os.getenv("EXPLICIT_PER_TOPIC_QUOTA", "2")),
            require_exam_scope=_env_bool("REQUIRE_EXAM_SCOPE"),
            image_fetch_timeout=float(os.getenv("IMAGE_FETCH_TIMEOUT", "10")),
            image_max_bytes=int(os.getenv("IMAGE_MAX_BYTES", str(10 * 1024 * 1024))),
            image_box_size=int(os.getenv("IMAGE_BOX_SIZE", "500")),
            pdf_filename=os.getenv("PDF_FILENAME", "math-test.pdf"),
            questions_data_dir=Path(
                os.getenv("QUESTIONS_DATA_DIR", str(_BASE / "data" / "questions"))
            ),
            api_key=os.getenv("MATHTEST_API_KEY", ""),
            admin_token=os.getenv("ADMIN_TOKEN", ""),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


def get_settings() -> Settings:
    """
    FastAPI dependency. Re-read on every request so env changes (and test
    monkeypatching) take effect without a restart.
    """
    return Settings.from_env()
