"""
Error taxonomy for test generation.

Every error carries the HTTP status it maps to and a JSON-ready body, so the
app registers a single exception handler for the whole family.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MathTestError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


# ---------- Caller input (4xx) ----------


class InvalidRequest(MathTestError):
    status_code = 400


class EmptySelection(InvalidRequest):
    def __init__(self, message: str = "Please select at least one topic."):
        super().__init__(message)


class MissingScope(InvalidRequest):
    def __init__(self, message: str = "An exam scope is required for this request."):
        super().__init__(message)


class InvalidQuota(InvalidRequest):
    def __init__(self, quota: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Per-topic quota must be a positive integer (got {quota!r})."
        )
        self.quota = quota


class InsufficientData(MathTestError):
    status_code = 400

    def __init__(self, bucket: str, needed: int, available: int, message: Optional[str] = None):
        super().__init__(
            message
            or f"Not enough questions for topic: {bucket} (needed {needed}, available {available})"
        )
        self.bucket = bucket
        self.needed = needed
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "bucket": self.bucket,
            "needed": self.needed,
            "available": self.available,
        }


class NoTopicsAvailable(InsufficientData):
    def __init__(self, scope: Optional[str]):
        label = scope if scope is not None else "*"
        super().__init__(
            bucket=label,
            needed=1,
            available=0,
            message=f"No topics available for exam scope: {label}",
        )


# ---------- Infrastructure (5xx) ----------


class StoreError(MathTestError):
    status_code = 503

    def __init__(self, message: str = "Question store unavailable."):
        super().__init__(message)


class DocumentError(MathTestError):
    status_code = 500

    def __init__(self, message: str = "Failed to generate PDF."):
        super().__init__(message)


class RequestCancelled(MathTestError):
    # nginx-style "client closed request"
    status_code = 499

    def __init__(self, message: str = "Client disconnected."):
        super().__init__(message)


# ---------- Recovered inside the assembler ----------


class FetchError(Exception):
    def __init__(self, url: str, cause: Any):
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class ImageDecodeError(Exception):
    pass
