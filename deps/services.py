from typing import Annotated, Iterator

from fastapi import Depends

from config import Settings, get_settings
from db import SessionLocal
from fetcher import ImageFetcher
from store import QuestionStore


def get_store() -> QuestionStore:
    return QuestionStore(SessionLocal)


def get_image_fetcher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Iterator[ImageFetcher]:
    # one HTTP client per request, closed once the route is done with it
    with ImageFetcher(
        timeout=settings.image_fetch_timeout, max_bytes=settings.image_max_bytes
    ) as fetcher:
        yield fetcher
