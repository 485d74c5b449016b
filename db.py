from __future__ import annotations

from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from config import Settings


def normalize_database_url(url: str) -> str:
    """Map hosted-Postgres style URLs onto the psycopg3 driver; others pass through."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


# stable names for constraints/indexes across DBs
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def make_engine(settings: Settings) -> Engine:
    url = normalize_database_url(settings.database_url)
    connect_args = {}
    if url.startswith("sqlite"):
        # sessions are opened from FastAPI's worker threads
        connect_args = {"check_same_thread": False}
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


# Process-wide singletons; every request borrows short-lived sessions from these.
_settings = Settings.from_env()
DATABASE_URL = normalize_database_url(_settings.database_url)
engine = make_engine(_settings)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
