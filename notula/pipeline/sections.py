from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from ..config import TemplateConfig
from .attachments import ImageAsset
from .instructions import Box, ImagePlacement, Page, Rule, TextRun
from .layout import fit_box


FONT = "Times-Roman"
FONT_BOLD = "Times-Bold"
FONT_ITALIC = "Times-Italic"

MARGIN_X = 14.0
PT_TO_MM = 25.4 / 72.0
LINE_HEIGHT_FACTOR = 1.15


def line_height(size: float) -> float:
    return size * LINE_HEIGHT_FACTOR * PT_TO_MM


def cap_height(size: float) -> float:
    # approximate cap height of Times, used to center a line vertically
    return size * 0.66 * PT_TO_MM


def parse_date(value: str) -> Optional[date]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value[:10]).date()
    except ValueError:
        return None


def day_name(value: str, template: TemplateConfig) -> str:
    parsed = parse_date(value)
    return template.weekdays[parsed.weekday()] if parsed else ""


def format_date(value: str, template: TemplateConfig) -> str:
    parsed = parse_date(value)
    if parsed is None:
        return value or template.empty_value
    return f"{parsed.day} {template.months[parsed.month - 1]} {parsed.year}"


def day_date_label(value: str, template: TemplateConfig) -> str:
    weekday = day_name(value, template)
    formatted = format_date(value, template)
    return f"{weekday} / {formatted}" if weekday else formatted


def time_label(value: str, template: TemplateConfig) -> str:
    return f"{value or template.empty_value} {template.time_suffix}"


def or_dash(value: str, template: TemplateConfig) -> str:
    return value.strip() if value and value.strip() else template.empty_value


def place_image(page: Page, asset: ImageAsset, x: float, y: float, box_w: float, box_h: float) -> ImagePlacement:
    fit = fit_box(asset.width, asset.height, box_w, box_h)
    placement = ImagePlacement(
        x=x + fit.offset_x,
        y=y + fit.offset_y,
        width=fit.width,
        height=fit.height,
        data=asset.data,
    )
    page.add(placement)
    return placement


def draw_header(
    page: Page,
    logo: Optional[ImageAsset],
    code: str,
    fixed_date: str,
    logo_size: float,
    text_x_with_logo: float,
    rule_y: float,
) -> None:
    """Logo, form code and the form's fixed date, closed by a rule."""
    if logo is not None:
        place_image(page, logo, MARGIN_X, 5.0, logo_size, logo_size)
    text_x = text_x_with_logo if logo is not None else MARGIN_X
    page.add(TextRun(text_x, 15.0, code, font=FONT_BOLD, size=12))
    page.add(TextRun(text_x, 20.0, fixed_date, font=FONT_BOLD, size=12))
    page.add(Rule(MARGIN_X, rule_y, page.width - MARGIN_X, rule_y, width=0.5))


def draw_cell(
    page: Page,
    x: float,
    top: float,
    w: float,
    h: float,
    lines: List[str],
    font: str,
    size: float,
    padding: float,
    align: str = "left",
    fill: Optional[str] = None,
    color: str = "#000000",
    valign: str = "top",
) -> None:
    page.add(Box(x, top, w, h, line_width=0.1, fill=fill))
    lh = line_height(size)
    if align == "center":
        tx = x + w / 2
    elif align == "right":
        tx = x + w - padding
    else:
        tx = x + padding

    if valign == "middle":
        block = lh * (len(lines) - 1)
        first = top + (h - block) / 2 + cap_height(size) / 2
    else:
        first = top + padding + cap_height(size) + (lh - cap_height(size)) / 2

    for i, line in enumerate(lines):
        if line:
            page.add(TextRun(tx, first + i * lh, line, font=font, size=size, color=color, align=align))
