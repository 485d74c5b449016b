"""
Remote image fetching for exam documents.

Image references are normalized (GitHub "blob" pages rewritten to their raw
content URL) and fetched with a bounded total time. Failures surface as
FetchError for the assembler to turn into a placeholder; nothing is retried.
"""

from __future__ import annotations

import logging
import re
import time
from typing import List, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx

from errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_BYTES = 10 * 1024 * 1024

BLOB_HOST_TOKEN = "github.com"
RAW_HOST = "raw.githubusercontent.com"

# /{owner}/{repo}/blob/... -> /{owner}/{repo}/...
_BLOB_SEGMENT = re.compile(r"^(/[^/]+/[^/]+)/blob(?=/)")


def normalize_image_url(url: str) -> str:
    """
    Rewrite a GitHub blob-view URL to the raw file URL; anything else is returned as-is.

    >>> normalize_image_url("https://github.com/org/repo/blob/main/img.png")
    'https://raw.githubusercontent.com/org/repo/main/img.png'
    """
    if BLOB_HOST_TOKEN not in url or "/blob/" not in url:
        return url

    # The raw host does not contain the blob token, so a second pass is a no-op.
    rewritten = url.replace(BLOB_HOST_TOKEN, RAW_HOST)
    parts = urlsplit(rewritten)
    path, n = _BLOB_SEGMENT.subn(r"\1", parts.path, count=1)
    if not n:
        path = parts.path.replace("/blob/", "/", 1)
    return urlunsplit(parts._replace(path=path))


class ImageFetcher:
    """
    Fetch image bytes over HTTP(S).

    ``timeout`` is the budget for the whole download. Each connect/read/write
    phase may wait at most half of it, and the deadline is checked once the
    headers arrive and after every body chunk. Connect plus headers therefore
    fit in ``timeout``; a drip-fed body can overrun by one phase wait, so a
    fetch never takes longer than 1.5x ``timeout``. Bodies larger than
    ``max_bytes`` are rejected. Pass ``transport`` to plug in an
    ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_bytes: int = DEFAULT_MAX_BYTES,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=transport,
            headers={"User-Agent": "mathtest-generator/0.1"},
        )

    def fetch(self, url: str) -> bytes:
        deadline = time.monotonic() + self.timeout
        chunks: List[bytes] = []
        size = 0
        try:
            with self._client.stream("GET", url, timeout=self._phase_timeout(deadline)) as resp:
                resp.raise_for_status()
                self._check_deadline(url, deadline)
                for chunk in resp.iter_bytes():
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise FetchError(url, f"response larger than {self.max_bytes} bytes")
                    self._check_deadline(url, deadline)
                    chunks.append(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, e) from e
        except ValueError as e:
            # UnicodeError from IDNA host encoding (e.g. a label over 63 chars)
            raise FetchError(url, e) from e

        if not chunks:
            raise FetchError(url, "empty response body")
        logger.debug("fetched %s (%d bytes)", url, size)
        return b"".join(chunks)

    def _phase_timeout(self, deadline: float) -> httpx.Timeout:
        remaining = max(deadline - time.monotonic(), 0.001)
        return httpx.Timeout(min(self.timeout / 2, remaining))

    def _check_deadline(self, url: str, deadline: float) -> None:
        if time.monotonic() > deadline:
            raise FetchError(url, f"download exceeded {self.timeout:g}s")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ImageFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
