import pytest

from config import Settings
from db import engine, make_engine, normalize_database_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@host/db", "postgresql+psycopg://u:p@host/db"),
        ("postgresql://u:p@host/db", "postgresql+psycopg://u:p@host/db"),
        ("postgresql+psycopg://u:p@host/db", "postgresql+psycopg://u:p@host/db"),
        ("sqlite:///./mathtest.db", "sqlite:///./mathtest.db"),
    ],
)
def test_normalize_database_url(url, expected):
    assert normalize_database_url(url) == expected


def test_pool_sized_from_settings(tmp_path):
    settings = Settings(
        database_url=f"sqlite:///{(tmp_path / 'pool.db').as_posix()}",
        db_pool_size=3,
        db_max_overflow=2,
    )
    eng = make_engine(settings)
    try:
        assert eng.pool.size() == 3
        assert eng.pool._max_overflow == 2
    finally:
        eng.dispose()


def test_app_engine_uses_env_url():
    assert engine.url.database.endswith("test.db")
