from __future__ import annotations

import logging
from io import BytesIO
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .instructions import Box, ImagePlacement, Page, Rule, TextRun


logger = logging.getLogger(__name__)


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except Exception:
        return default


def _draw_text(canv: canvas.Canvas, item: TextRun, page_h: float) -> None:
    canv.setFont(item.font, item.size)
    canv.setFillColor(_hex(item.color))
    x = item.x * mm
    y = page_h - item.y * mm
    if item.align == "center":
        canv.drawCentredString(x, y, item.text)
    elif item.align == "right":
        canv.drawRightString(x, y, item.text)
    else:
        canv.drawString(x, y, item.text)


def _draw_image(canv: canvas.Canvas, item: ImagePlacement, page_h: float) -> None:
    if item.width <= 0 or item.height <= 0:
        return
    try:
        reader = ImageReader(BytesIO(item.data))
        canv.drawImage(
            reader,
            item.x * mm,
            page_h - (item.y + item.height) * mm,
            width=item.width * mm,
            height=item.height * mm,
            mask="auto",
        )
    except Exception as exc:
        # sizes were probed already; a back-end refusal only loses the picture
        logger.warning("Image at (%.1f, %.1f) not drawn: %s", item.x, item.y, exc)


def _draw_rule(canv: canvas.Canvas, item: Rule, page_h: float) -> None:
    canv.setStrokeColor(colors.black)
    canv.setLineWidth(item.width * mm)
    canv.line(item.x1 * mm, page_h - item.y1 * mm, item.x2 * mm, page_h - item.y2 * mm)


def _draw_box(canv: canvas.Canvas, item: Box, page_h: float) -> None:
    canv.setStrokeColor(colors.black)
    canv.setLineWidth(item.line_width * mm)
    if item.fill:
        canv.setFillColor(_hex(item.fill))
    canv.rect(
        item.x * mm,
        page_h - (item.y + item.height) * mm,
        item.width * mm,
        item.height * mm,
        stroke=1,
        fill=1 if item.fill else 0,
    )


def draw_page(canv: canvas.Canvas, page: Page) -> None:
    page_h = page.height * mm
    canv.setPageSize((page.width * mm, page_h))
    for item in page.items:
        if isinstance(item, TextRun):
            _draw_text(canv, item, page_h)
        elif isinstance(item, ImagePlacement):
            _draw_image(canv, item, page_h)
        elif isinstance(item, Rule):
            _draw_rule(canv, item, page_h)
        elif isinstance(item, Box):
            _draw_box(canv, item, page_h)
        else:
            raise TypeError(f"Unknown drawing instruction: {type(item).__name__}")
    canv.showPage()


def render_pdf(pages: Sequence[Page], title: str = "") -> bytes:
    """Draw the page list onto a reportlab canvas and return the PDF bytes."""
    if not pages:
        raise ValueError("Nothing to render")
    buffer = BytesIO()
    first = pages[0]
    canv = canvas.Canvas(buffer, pagesize=(first.width * mm, first.height * mm))
    if title:
        canv.setTitle(title)
    for page in pages:
        draw_page(canv, page)
    canv.save()
    return buffer.getvalue()
