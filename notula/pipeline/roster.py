from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import TemplateConfig
from ..models import AttendanceState, MeetingRecord, Participant, UnitRecord, UserRecord
from .attachments import ImageAsset, ResolvedAssets
from .instructions import Page, Rule, TextRun
from .layout import clip_to_width, font_measure, truncate
from .resolve import UnitIndex
from .sections import (
    FONT,
    FONT_BOLD,
    FONT_ITALIC,
    MARGIN_X,
    day_date_label,
    draw_cell,
    draw_header,
    or_dash,
    place_image,
    time_label,
)


SLOTS_PER_PAGE = 60
COLUMNS_PER_PAGE = 3
ROWS_PER_COLUMN = 20

PAGE_KIND = "roster"

INFO_TOP = 33.0
INFO_STEP = 6.0
INFO_SIZE = 12
INFO_LABEL_X = 80.0
INFO_COLON_X = INFO_LABEL_X + 35
INFO_VALUE_X = INFO_COLON_X + 2
INFO_LINE_LEN = 110.0

TABLE_TOP = 52.0
TABLE_GAP = 5.0
ROW_H = 6.5
CELL_SIZE = 9
CELL_PADDING = 1.0
ABSENT_SIZE = 7
NUMBER_W = 8.0
UNIT_W = 20.0
MARK_W = 18.0


@dataclass(frozen=True)
class RosterSlot:
    page: int
    column: int
    row: int
    display_number: int  # 1..60 within the page
    global_index: int
    participant: Optional[Participant] = None

    @property
    def is_empty(self) -> bool:
        return self.participant is None


def roster_page_count(participant_count: int) -> int:
    """At least one roster page is always printed, even with nobody on it."""
    return max(1, math.ceil(max(participant_count, 0) / SLOTS_PER_PAGE))


def slot_position(global_index: int) -> Tuple[int, int, int]:
    """(page, column, row) of a participant index, column-major within a page."""
    page, offset = divmod(global_index, SLOTS_PER_PAGE)
    column, row = divmod(offset, ROWS_PER_COLUMN)
    return page, column, row


def roster_slots(participants: Sequence[Participant], page: int) -> List[RosterSlot]:
    """
    All 60 slots of one page, column by column: numbers 1-20 run down the
    first column, 21-40 the second and 41-60 the third.
    """
    slots: List[RosterSlot] = []
    for column in range(COLUMNS_PER_PAGE):
        for row in range(ROWS_PER_COLUMN):
            display_number = column * ROWS_PER_COLUMN + row + 1
            global_index = page * SLOTS_PER_PAGE + display_number - 1
            participant = participants[global_index] if global_index < len(participants) else None
            slots.append(RosterSlot(page, column, row, display_number, global_index, participant))
    return slots


def slot_mark(slot: RosterSlot, assets: ResolvedAssets, template: TemplateConfig) -> Tuple[str, Optional[ImageAsset]]:
    """Text and signature for the PARAF cell. Absent people never get a signature."""
    participant = slot.participant
    if participant is None:
        return "", None
    if participant.attendance == AttendanceState.ABSENT:
        return template.absent_mark, None
    return "", assets.signatures.get(slot.global_index)


def _draw_info(page: Page, meeting: MeetingRecord, template: TemplateConfig) -> None:
    measure = font_measure(FONT, INFO_SIZE)
    rows = (
        (template.label_roster_day_date, day_date_label(meeting.date, template)),
        (template.label_time, time_label(meeting.time, template)),
        (template.label_venue, clip_to_width(or_dash(meeting.location, template), INFO_LINE_LEN, measure)),
        # single line on every roster page, so the title is cut, not wrapped
        (template.label_event, truncate(or_dash(meeting.title, template), template.roster_title_limit)),
    )
    for i, (label, value) in enumerate(rows):
        y = INFO_TOP + i * INFO_STEP
        page.add(TextRun(INFO_LABEL_X, y, label, font=FONT_BOLD, size=INFO_SIZE))
        page.add(TextRun(INFO_COLON_X, y, ":", font=FONT_BOLD, size=INFO_SIZE))
        page.add(TextRun(INFO_VALUE_X, y, value, font=FONT, size=INFO_SIZE))
        page.add(Rule(INFO_VALUE_X, y + 1, INFO_VALUE_X + INFO_LINE_LEN, y + 1, width=0.1))


def _draw_column(
    page: Page,
    x: float,
    column_w: float,
    slots: Sequence[RosterSlot],
    units: UnitIndex,
    assets: ResolvedAssets,
    template: TemplateConfig,
) -> None:
    name_w = column_w - NUMBER_W - UNIT_W - MARK_W
    widths = (NUMBER_W, name_w, UNIT_W, MARK_W)
    measure = font_measure(FONT, CELL_SIZE)

    y = TABLE_TOP
    cx = x
    for title, width in zip(template.roster_headers, widths):
        draw_cell(page, cx, y, width, ROW_H, [title], font=FONT_BOLD, size=CELL_SIZE,
                  padding=CELL_PADDING, align="center", fill=template.header_fill, valign="middle")
        cx += width
    y += ROW_H

    for slot in slots:
        name = unit = ""
        if slot.participant is not None:
            name = clip_to_width(slot.participant.display_name, name_w - 2 * CELL_PADDING, measure)
            unit = clip_to_width(units.resolve(slot.participant), UNIT_W - 2 * CELL_PADDING, measure)
        mark, signature = slot_mark(slot, assets, template)

        cx = x
        draw_cell(page, cx, y, NUMBER_W, ROW_H, [f"{slot.display_number}."], font=FONT, size=CELL_SIZE,
                  padding=CELL_PADDING, align="center", valign="middle")
        cx += NUMBER_W
        draw_cell(page, cx, y, name_w, ROW_H, [name], font=FONT, size=CELL_SIZE,
                  padding=CELL_PADDING, valign="middle")
        cx += name_w
        draw_cell(page, cx, y, UNIT_W, ROW_H, [unit], font=FONT, size=CELL_SIZE,
                  padding=CELL_PADDING, valign="middle")
        cx += UNIT_W
        if mark:
            draw_cell(page, cx, y, MARK_W, ROW_H, [mark], font=FONT_ITALIC, size=ABSENT_SIZE,
                      padding=CELL_PADDING, align="center", color=template.absent_color, valign="middle")
        else:
            draw_cell(page, cx, y, MARK_W, ROW_H, [], font=FONT, size=CELL_SIZE,
                      padding=CELL_PADDING, valign="middle")
        if signature is not None:
            place_image(page, signature, cx + CELL_PADDING, y + CELL_PADDING,
                        MARK_W - 2 * CELL_PADDING, ROW_H - 2 * CELL_PADDING)
        y += ROW_H


def build_roster_page(
    meeting: MeetingRecord,
    page_index: int,
    assets: ResolvedAssets,
    units: UnitIndex,
    template: TemplateConfig,
) -> Page:
    page = Page(kind=PAGE_KIND)
    draw_header(page, assets.logo, template.roster_code, template.roster_date,
                logo_size=20.0, text_x_with_logo=40.0, rule_y=27.0)
    _draw_info(page, meeting, template)

    slots = roster_slots(meeting.participants, page_index)
    available = page.width - 2 * MARGIN_X
    column_w = (available - TABLE_GAP * (COLUMNS_PER_PAGE - 1)) / COLUMNS_PER_PAGE
    for column in range(COLUMNS_PER_PAGE):
        x = MARGIN_X + column * (column_w + TABLE_GAP)
        column_slots = slots[column * ROWS_PER_COLUMN:(column + 1) * ROWS_PER_COLUMN]
        _draw_column(page, x, column_w, column_slots, units, assets, template)
    return page


def build_roster_pages(
    meeting: MeetingRecord,
    assets: ResolvedAssets,
    users: Sequence[UserRecord],
    units: Sequence[UnitRecord],
    template: TemplateConfig,
) -> List[Page]:
    index = UnitIndex(users, units)
    return [
        build_roster_page(meeting, page_index, assets, index, template)
        for page_index in range(roster_page_count(len(meeting.participants)))
    ]
