from __future__ import annotations

from typing import List, Sequence

from ..config import TemplateConfig
from ..models import MeetingRecord
from .attachments import IMAGE, ResolvedAssets
from .instructions import Page, TextRun
from .layout import clip_to_width, font_measure, strip_markup, wrap_text
from .sections import (
    FONT,
    FONT_BOLD,
    MARGIN_X,
    day_date_label,
    draw_cell,
    draw_header,
    line_height,
    or_dash,
    place_image,
    time_label,
)


PAGE_KIND = "report"

CONTINUATION_TOP = 20.0
BOTTOM_GAP = 10.0

# meta block
META_TOP = 40.0
META_SIZE = 11
META_LABEL_W = 20.0
META_VALUE_W = 120.0
RIGHT_COL_X = 160.0
RIGHT_LABEL_W = 35.0

# agenda table
AGENDA_WIDTHS = (12.0, 50.0, 65.0, 65.0, 35.0, 40.0)
AGENDA_SIZE = 10
AGENDA_PADDING = 3.0

# signature block
SIGN_X = 230.0
SIGN_BLOCK_H = 40.0
SIGN_LIMIT = 190.0
SIGN_IMAGE_W = 30.0
SIGN_IMAGE_H = 15.0

# attachment gallery
GALLERY_NEW_PAGE_Y = 170.0
DOC_LINE_LIMIT = 190.0
GALLERY_COLUMNS = 3
GALLERY_GAP = 5.0
GALLERY_ROW_H = 75.0
GALLERY_CAPTION_H = 10.0
CAPTION_SIZE = 8


class _Flow:
    """Vertical cursor over a growing list of report pages."""

    def __init__(self) -> None:
        self.pages: List[Page] = []
        self.y = 0.0
        self.new_page(0.0)

    @property
    def page(self) -> Page:
        return self.pages[-1]

    @property
    def limit(self) -> float:
        return self.page.height - BOTTOM_GAP

    def new_page(self, y: float = CONTINUATION_TOP) -> None:
        self.pages.append(Page(kind=PAGE_KIND))
        self.y = y


def _draw_meta(flow: _Flow, meeting: MeetingRecord, template: TemplateConfig) -> float:
    page = flow.page
    lh = line_height(META_SIZE)
    measure = font_measure(FONT, META_SIZE)
    colon_x = MARGIN_X + META_LABEL_W
    value_x = colon_x + 3

    def left_row(label: str, lines: Sequence[str], y: float) -> float:
        # a very long title or venue carries over to the next page
        for i, line in enumerate(lines):
            if y > flow.limit:
                flow.new_page()
                y = flow.y
            if i == 0:
                flow.page.add(TextRun(MARGIN_X, y, label, font=FONT_BOLD, size=META_SIZE))
                flow.page.add(TextRun(colon_x, y, ":", font=FONT_BOLD, size=META_SIZE))
            flow.page.add(TextRun(value_x, y, line, font=FONT, size=META_SIZE))
            y += lh
        return y

    title_lines = wrap_text(or_dash(meeting.title, template), META_VALUE_W, measure)
    venue_lines = wrap_text(or_dash(meeting.location, template), META_VALUE_W, measure)

    row2_y = left_row(template.label_event, title_lines, META_TOP) + 2
    row3_y = left_row(template.label_venue, venue_lines, row2_y) + 2
    if row3_y > flow.limit:
        flow.new_page()
        row3_y = flow.y
    left_row(template.label_participants, [template.participants_note], row3_y)

    right_value_x = RIGHT_COL_X + RIGHT_LABEL_W + 3
    right_value_w = page.width - MARGIN_X - right_value_x
    right_rows = (
        (template.label_day_date, day_date_label(meeting.date, template)),
        (template.label_time, time_label(meeting.time, template)),
        (template.label_pic, or_dash(meeting.pic_name, template)),
    )
    for i, (label, value) in enumerate(right_rows):
        y = META_TOP + i * 7
        page.add(TextRun(RIGHT_COL_X, y, label, font=FONT_BOLD, size=META_SIZE))
        page.add(TextRun(RIGHT_COL_X + RIGHT_LABEL_W, y, ":", font=FONT_BOLD, size=META_SIZE))
        page.add(TextRun(right_value_x, y, clip_to_width(value, right_value_w, measure), font=FONT, size=META_SIZE))

    if flow.page is page:
        row3_y = max(row3_y, META_TOP + 14)
    return row3_y + 10


def agenda_rows(meeting: MeetingRecord, template: TemplateConfig) -> List[List[str]]:
    """Plain-text agenda rows in source order, or one placeholder row."""
    rows = [
        [
            str(index),
            item.topic,
            strip_markup(item.decision),
            strip_markup(item.action),
            item.executor,
            item.monitoring_note,
        ]
        for index, item in enumerate(meeting.agenda_items, start=1)
    ]
    if not rows:
        dash = template.empty_value
        rows.append([dash, template.empty_agenda_text, dash, dash, dash, dash])
    return rows


class _AgendaTable:
    def __init__(self, flow: _Flow, template: TemplateConfig) -> None:
        self.flow = flow
        self.fill = template.header_fill
        self.headers = list(template.agenda_headers)
        self.lh = line_height(AGENDA_SIZE)
        self.table_top = flow.y
        self._fresh_page: Page | None = None
        self._body_measure = font_measure(FONT, AGENDA_SIZE)
        self._head_measure = font_measure(FONT_BOLD, AGENDA_SIZE)

    def _wrap(self, cells: Sequence[str], bold: bool) -> List[List[str]]:
        measure = self._head_measure if bold else self._body_measure
        return [
            wrap_text(text, width - 2 * AGENDA_PADDING, measure)
            for text, width in zip(cells, AGENDA_WIDTHS)
        ]

    def _height(self, cell_lines: Sequence[Sequence[str]]) -> float:
        return max(len(lines) for lines in cell_lines) * self.lh + 2 * AGENDA_PADDING

    def _draw(self, cell_lines: Sequence[Sequence[str]], header: bool) -> None:
        flow = self.flow
        h = self._height(cell_lines)
        x = MARGIN_X
        for col, (lines, width) in enumerate(zip(cell_lines, AGENDA_WIDTHS)):
            draw_cell(
                flow.page, x, flow.y, width, h, list(lines),
                font=FONT_BOLD if header else FONT,
                size=AGENDA_SIZE,
                padding=AGENDA_PADDING,
                align="center" if header or col == 0 else "left",
                fill=self.fill if header else None,
                valign="middle" if header else "top",
            )
            x += width
        flow.y += h

    def draw_header(self) -> None:
        self._draw(self._wrap(self.headers, bold=True), header=True)
        self.table_top = self.flow.y

    def start(self) -> None:
        """Header row, on a new page unless it fits with one body line under it."""
        header_h = self._height(self._wrap(self.headers, bold=True))
        if self.flow.y + header_h + self.lh + 2 * AGENDA_PADDING > self.flow.limit:
            self.flow.new_page()
        self.draw_header()

    def _break_page(self) -> None:
        self.flow.new_page()
        self._fresh_page = self.flow.page
        self.draw_header()

    def draw_row(self, cells: Sequence[str]) -> None:
        remaining = self._wrap(cells, bold=False)
        while True:
            flow = self.flow
            if flow.y + self._height(remaining) <= flow.limit:
                self._draw(remaining, header=False)
                return
            if flow.y > self.table_top:
                self._break_page()
                continue
            # taller than a whole page: emit what fits, carry the rest over
            fit = int((flow.limit - flow.y - 2 * AGENDA_PADDING) // self.lh)
            if fit < 1:
                if flow.page is not self._fresh_page:
                    self._break_page()
                    continue
                # the header alone fills a fresh page; one line is all that can be done
                fit = 1
            self._draw([lines[:fit] for lines in remaining], header=False)
            remaining = [lines[fit:] for lines in remaining]
            self._break_page()


def _draw_signature(flow: _Flow, meeting: MeetingRecord, assets: ResolvedAssets, template: TemplateConfig) -> None:
    flow.y += 10
    if flow.y + SIGN_BLOCK_H > SIGN_LIMIT:
        flow.new_page()

    page = flow.page
    y = flow.y
    page.add(TextRun(SIGN_X, y, template.sign_acknowledged, font=FONT, size=META_SIZE))
    page.add(TextRun(SIGN_X, y + 5, template.sign_role, font=FONT, size=META_SIZE))
    if assets.pic_signature is not None:
        place_image(page, assets.pic_signature, SIGN_X, y + 10, SIGN_IMAGE_W, SIGN_IMAGE_H)
    else:
        page.add(TextRun(SIGN_X, y + 30, template.sign_blank_line, font=FONT, size=META_SIZE))
    page.add(TextRun(SIGN_X, y + 35, f"( {or_dash(meeting.pic_name, template)} )", font=FONT, size=META_SIZE))
    flow.y = y + 45


def _draw_gallery(flow: _Flow, assets: ResolvedAssets, template: TemplateConfig) -> None:
    if not assets.attachments:
        return

    if flow.y > GALLERY_NEW_PAGE_Y:
        flow.new_page()
    else:
        flow.y += 10

    flow.page.add(TextRun(MARGIN_X, flow.y, template.attachments_heading, font=FONT_BOLD, size=12))
    flow.y += 10

    documents = assets.documents
    for item in documents:
        if flow.y > DOC_LINE_LIMIT:
            flow.new_page()
        flow.page.add(TextRun(MARGIN_X, flow.y, f"- {item.file_name} {template.document_suffix}", font=FONT, size=META_SIZE))
        flow.y += 6
    if documents:
        flow.y += 5

    gallery = assets.gallery
    if not gallery:
        return

    col_w = (flow.page.width - 2 * MARGIN_X - GALLERY_GAP * (GALLERY_COLUMNS - 1)) / GALLERY_COLUMNS
    box_h = GALLERY_ROW_H - GALLERY_CAPTION_H
    caption_measure = font_measure(FONT, CAPTION_SIZE)
    caption_lh = line_height(CAPTION_SIZE)

    col = 0
    for item in gallery:
        if col == 0 and flow.y + GALLERY_ROW_H > flow.limit:
            flow.new_page()

        page = flow.page
        cell_x = MARGIN_X + col * (col_w + GALLERY_GAP)
        if item.kind == IMAGE and item.image is not None:
            place_image(page, item.image, cell_x, flow.y, col_w, box_h)
            for i, line in enumerate(wrap_text(item.file_name, col_w, caption_measure)):
                page.add(TextRun(
                    cell_x + col_w / 2, flow.y + box_h + 5 + i * caption_lh, line,
                    font=FONT, size=CAPTION_SIZE, align="center",
                ))
        else:
            message = template.image_failed_caption.format(name=item.file_name)
            for i, line in enumerate(wrap_text(message, col_w, caption_measure)):
                page.add(TextRun(cell_x, flow.y + 10 + i * caption_lh, line, font=FONT, size=CAPTION_SIZE))

        if col == GALLERY_COLUMNS - 1:
            col = 0
            flow.y += GALLERY_ROW_H
        else:
            col += 1

    if col:
        flow.y += GALLERY_ROW_H


def build_report(
    meeting: MeetingRecord,
    assets: ResolvedAssets,
    template: TemplateConfig,
) -> List[Page]:
    """
    Minutes report: header, meta block, agenda table, PIC signature and the
    attachment gallery, flowing over as many pages as needed.
    """
    flow = _Flow()
    draw_header(flow.page, assets.logo, template.report_code, template.report_date,
                logo_size=25.0, text_x_with_logo=45.0, rule_y=32.0)
    flow.y = _draw_meta(flow, meeting, template)

    table = _AgendaTable(flow, template)
    table.start()
    for row in agenda_rows(meeting, template):
        table.draw_row(row)

    _draw_signature(flow, meeting, assets, template)
    _draw_gallery(flow, assets, template)
    return flow.pages
