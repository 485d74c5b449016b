"""
Exam document assembly with ReportLab.

Layout rules:
    - every question starts on a new page with its header
      ("Question {number} - {topic}:" / "Exam: {exam}")
    - each image gets its own page; the first shares the header page
    - images are fit-scaled into a square box, centered horizontally
    - an image that cannot be fetched or decoded becomes a one-line
      placeholder; the rest of the document still renders

The header is always drawn before any fetch for that question starts.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, List, Optional, Protocol, Sequence, Tuple

from PIL import Image, UnidentifiedImageError
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from errors import FetchError, ImageDecodeError, RequestCancelled
from fetcher import normalize_image_url
from schemas.questions import QuestionOut

logger = logging.getLogger(__name__)

PAGE_SIZE = letter
MARGIN_PT = 72
DEFAULT_IMAGE_BOX = (500, 500)

HEADER_FONT = ("Helvetica-Bold", 14)
EXAM_FONT = ("Helvetica", 12)
PLACEHOLDER_FONT = ("Helvetica-Oblique", 11)

PLACEHOLDER_TEMPLATE = "Failed to load image: {url}"


class DocumentFinalizedError(RuntimeError):
    """Raised when writing to a document that has already been finalized."""


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


@dataclass
class RenderReport:
    question_count: int = 0
    page_count: int = 0
    images_rendered: int = 0
    failed_images: List[str] = field(default_factory=list)


def fit_within(width: float, height: float, box: Tuple[float, float]) -> Tuple[float, float]:
    """Scale (width, height) to the largest size inside ``box`` keeping the aspect ratio."""
    if width <= 0 or height <= 0:
        raise ValueError("image has no area")
    scale = min(box[0] / width, box[1] / height)
    return width * scale, height * scale


def decode_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(str(e)) from e

    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
    elif img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    return img


class ExamDocument:
    """Append-only PDF writer; ``finalize()`` flushes the PDF into ``sink`` exactly once."""

    def __init__(
        self,
        sink: BinaryIO,
        *,
        image_box: Tuple[float, float] = DEFAULT_IMAGE_BOX,
        compress: bool = True,
        title: str = "Math Test",
    ):
        self._canvas = canvas.Canvas(
            sink, pagesize=PAGE_SIZE, pageCompression=1 if compress else 0
        )
        self._canvas.setTitle(title)
        self._page_w, self._page_h = PAGE_SIZE
        self._y = self._page_h - MARGIN_PT
        self._image_box = image_box
        self._finalized = False
        self._started = False
        self.page_count = 0

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _ensure_open(self) -> None:
        if self._finalized:
            raise DocumentFinalizedError("document already finalized")

    def _touch(self) -> None:
        if not self._started:
            self._started = True
            self.page_count = 1

    def new_page(self) -> None:
        self._ensure_open()
        self._canvas.showPage()
        self._y = self._page_h - MARGIN_PT
        self.page_count += 1

    def write_text(self, text: str, font: Tuple[str, int] = EXAM_FONT, gap: float = 0) -> None:
        self._ensure_open()
        self._touch()
        name, size = font
        width = self._page_w - 2 * MARGIN_PT
        self._canvas.setFont(name, size)
        for line in simpleSplit(text, name, size, width) or [""]:
            self._y -= size
            self._canvas.drawString(MARGIN_PT, self._y, line)
            self._y -= size * 0.2
        self._y -= gap

    def write_header(self, question: QuestionOut) -> None:
        self.write_text(
            f"Question {question.number} - {question.topic}:", HEADER_FONT, gap=HEADER_FONT[1]
        )
        if question.exam:
            self.write_text(f"Exam: {question.exam}", EXAM_FONT, gap=EXAM_FONT[1])

    def write_placeholder(self, url: str) -> None:
        self._ensure_open()
        self._canvas.saveState()
        self._canvas.setFillColorRGB(0.7, 0.1, 0.1)
        self.write_text(PLACEHOLDER_TEMPLATE.format(url=url), PLACEHOLDER_FONT, gap=6)
        self._canvas.restoreState()

    def place_image(self, data: bytes) -> Tuple[float, float]:
        """Decode and draw ``data``; raises ImageDecodeError without touching the page."""
        self._ensure_open()
        img = decode_image(data)

        box_w = min(self._image_box[0], self._page_w - 2 * MARGIN_PT)
        box_h = min(self._image_box[1], self._y - MARGIN_PT)
        try:
            draw_w, draw_h = fit_within(img.width, img.height, (box_w, box_h))
        except ValueError as e:
            raise ImageDecodeError(str(e)) from e

        box_x = (self._page_w - box_w) / 2
        x = box_x + (box_w - draw_w) / 2
        y = self._y - draw_h
        self._touch()
        self._canvas.drawImage(ImageReader(img), x, y, width=draw_w, height=draw_h, mask="auto")
        self._y = y - 12
        return draw_w, draw_h

    def finalize(self) -> None:
        self._ensure_open()
        self._canvas.save()
        self._finalized = True


def render_exam(
    questions: Sequence[QuestionOut],
    sink: BinaryIO,
    fetcher: Fetcher,
    *,
    image_box: Tuple[float, float] = DEFAULT_IMAGE_BOX,
    compress: bool = True,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> RenderReport:
    """
    Write ``questions`` (already ordered) into ``sink`` as a PDF.

    Images are fetched one at a time in document order. Fetch/decode failures
    are logged and replaced by a placeholder line. If ``is_cancelled`` returns
    True the render stops with RequestCancelled and the document is left
    unfinalized.
    """
    doc = ExamDocument(sink, image_box=image_box, compress=compress)
    report = RenderReport()

    for i, question in enumerate(questions):
        if is_cancelled is not None and is_cancelled():
            raise RequestCancelled()
        if i:
            doc.new_page()
        doc.write_header(question)
        report.question_count += 1

        for j, ref in enumerate(question.image_refs):
            if j:
                doc.new_page()
            if is_cancelled is not None and is_cancelled():
                raise RequestCancelled()
            url = normalize_image_url(ref)
            try:
                doc.place_image(fetcher.fetch(url))
                report.images_rendered += 1
            except (FetchError, ImageDecodeError) as e:
                logger.warning("question %s: image %s not rendered: %s", question.question_id, ref, e)
                doc.write_placeholder(ref)
                report.failed_images.append(ref)

    doc.finalize()
    report.page_count = doc.page_count
    return report
