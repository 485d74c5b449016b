from __future__ import annotations

import logging
import tempfile
import time
from typing import Annotated, BinaryIO, Callable, Iterator

import anyio.from_thread
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import StreamingResponse

from assembler import render_exam
from config import Settings, get_settings
from deps.auth import require_client
from deps.services import get_image_fetcher, get_store
from errors import DocumentError, RequestCancelled
from fetcher import ImageFetcher
from history import record_generation
from schemas.exams import ErrorResponse, GenerateTestRequest
from selector import MIXED_QUOTA, SelectionMode, SelectionRequest, select_questions
from store import QuestionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["exams"], dependencies=[Depends(require_client)])

_CHUNK_SIZE = 64 * 1024


def _disconnect_probe(request: Request) -> Callable[[], bool]:
    def is_cancelled() -> bool:
        try:
            return anyio.from_thread.run(request.is_disconnected)
        except RuntimeError:
            # not running in a worker thread (no event loop to ask)
            return False

    return is_cancelled


def _iter_spool(f: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = f.read(_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        f.close()


@router.post(
    "/generate-test",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"application/pdf": {}}},
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def generate_test(
    body: GenerateTestRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[QuestionStore, Depends(get_store)],
    fetcher: Annotated[ImageFetcher, Depends(get_image_fetcher)],
):
    t0 = time.perf_counter()
    is_cancelled = _disconnect_probe(request)

    mode = SelectionMode.MIXED if body.mix_exams else SelectionMode.EXPLICIT
    if body.per_topic_quota is not None:
        quota = body.per_topic_quota
    elif mode is SelectionMode.MIXED:
        quota = MIXED_QUOTA
    else:
        quota = settings.explicit_per_topic_quota
    selection = SelectionRequest(
        mode=mode,
        topics=tuple(body.topics),
        exam_scope=body.exam_scope,
        per_topic_quota=quota,
    )

    # Every bucket is checked before a single PDF byte exists, so selection
    # errors still reach the caller as JSON with a 4xx status.
    questions = select_questions(
        selection,
        store,
        require_scope=settings.require_exam_scope,
        is_cancelled=is_cancelled,
    )

    # Render fully into a temp file (deleted on close) before opening the response.
    sink = tempfile.NamedTemporaryFile(prefix="mathtest-", suffix=".pdf")
    try:
        report = render_exam(
            questions,
            sink,
            fetcher,
            image_box=(settings.image_box_size, settings.image_box_size),
            is_cancelled=is_cancelled,
        )
    except RequestCancelled:
        sink.close()
        logger.info("client disconnected during render; abandoning document")
        raise
    except Exception as e:
        sink.close()
        logger.exception("PDF render failed for %d questions", len(questions))
        raise DocumentError() from e
    sink.seek(0)

    duration_ms = int(round((time.perf_counter() - t0) * 1000))
    logger.info(
        "generated test: mode=%s questions=%d pages=%d failed_images=%d in %dms",
        mode.value,
        report.question_count,
        report.page_count,
        len(report.failed_images),
        duration_ms,
    )

    background_tasks.add_task(
        record_generation,
        mode=mode.value,
        topics=(
            sorted({q.topic for q in questions})
            if mode is SelectionMode.MIXED
            else list(body.topics)
        ),
        exam_scope=body.exam_scope,
        question_ids=[q.question_id for q in questions],
        page_count=report.page_count,
        failed_images=len(report.failed_images),
        duration_ms=duration_ms,
    )

    return StreamingResponse(
        _iter_spool(sink),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{settings.pdf_filename}"'},
    )
