import io
import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database before anything imports db.py
_TMP_DIR = Path(tempfile.mkdtemp(prefix="mathtest-"))
os.environ["DATABASE_URL"] = f"sqlite:///{(_TMP_DIR / 'test.db').as_posix()}"
os.environ["MATHTEST_API_KEY"] = "test-key"
os.environ["ADMIN_TOKEN"] = "admin-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402

from db import Base, SessionLocal, engine  # noqa: E402
from deps.services import get_image_fetcher  # noqa: E402
from errors import FetchError  # noqa: E402
from main import app  # noqa: E402
from models import Question  # noqa: E402

API_HEADERS = {"x-api-key": "test-key"}

SEED_QUESTIONS = [
    dict(
        question_id="alg-1",
        number=1,
        topic="Algebra",
        exam="2024 Paper A",
        exam_scope="2024A",
        image_url="https://github.com/org/repo/blob/main/alg-1.png",
    ),
    dict(question_id="geo-2", number=2, topic="Geometry", exam="2024 Paper A", exam_scope="2024A"),
    dict(
        question_id="trig-3",
        number=3,
        topic="Trig",
        exam="2023 Paper B",
        exam_scope="2023B",
        image_url="https://img.example/broken/trig-3.png",
    ),
    dict(question_id="alg-4", number=4, topic="Algebra", exam="2024 Paper A", exam_scope="2024A"),
    dict(question_id="geo-5", number=5, topic="Geometry", exam="2023 Paper B", exam_scope="2023B"),
    dict(
        question_id="calc-6",
        number=6,
        topic="Calculus",
        exam="2024 Paper A",
        exam_scope="2024A",
        image_url=["https://img.example/calc-6a.png", "https://img.example/calc-6b.png"],
    ),
    dict(
        question_id="alg-7",
        number=7,
        topic="Algebra",
        exam="2023 Paper B",
        exam_scope="2023B",
        image_url=[],
    ),
]


def png_bytes(size=(120, 80), color="navy") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="PNG")
    return buf.getvalue()


class FakeFetcher:
    """Serves a small PNG for every URL; URLs containing 'broken' fail."""

    def __init__(self):
        self.calls = []

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if "broken" in url:
            raise FetchError(url, "404 Not Found")
        return png_bytes()


@pytest.fixture(scope="session", autouse=True)
def _database():
    Base.metadata.create_all(engine)
    with SessionLocal() as db:
        db.add_all(Question(**q) for q in SEED_QUESTIONS)
        db.commit()
    yield
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def fake_fetcher():
    fetcher = FakeFetcher()
    app.dependency_overrides[get_image_fetcher] = lambda: fetcher
    yield fetcher
    app.dependency_overrides.pop(get_image_fetcher, None)


@pytest.fixture
def client(fake_fetcher):
    return TestClient(app, headers=API_HEADERS)


@pytest.fixture
def sample_png():
    return png_bytes()
