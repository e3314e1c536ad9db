from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from ..config import TemplateConfig
from ..directory import ReferenceSource, fetch_reference_data
from ..errors import RenderError
from ..models import MeetingRecord, MinuteStatus, ReferenceData
from ..storage import artifact_path, write_document
from .assemble import render_async, title_slug
from .render_preview import count_pages, render_preview


logger = logging.getLogger(__name__)


def meeting_slug(meeting: MeetingRecord) -> str:
    return title_slug(meeting.id) if meeting.id else title_slug(meeting.title).lower()


def _write_error(slug: str, message: str) -> None:
    error_path = artifact_path(slug, "error")
    error_path.write_text(message, encoding="utf-8")


def filter_meetings(
    meetings: Iterable[MeetingRecord],
    status: Optional[MinuteStatus] = None,
    meeting_id: Optional[str] = None,
) -> List[MeetingRecord]:
    selected = []
    for meeting in meetings:
        if status is not None and meeting.status != status:
            continue
        if meeting_id is not None and meeting.id != meeting_id:
            continue
        selected.append(meeting)
    return selected


async def _process_meeting(
    meeting: MeetingRecord,
    refs: ReferenceData,
    preview: bool,
    template: Optional[TemplateConfig],
) -> None:
    slug = meeting_slug(meeting)
    document = await render_async(meeting, refs.users, refs.units, refs.branding, template)
    pages = count_pages(document.data)
    if pages != document.page_count:
        raise RenderError(f"PDF has {pages} pages, layout produced {document.page_count}")
    pdf_path = write_document(slug, document.filename, document.data)
    if preview:
        render_preview(slug, pdf_path)


async def run_batch_async(
    meetings: Iterable[MeetingRecord],
    source: ReferenceSource,
    preview: bool = False,
    template: Optional[TemplateConfig] = None,
) -> dict[str, list[str]]:
    results: dict[str, list[str]] = {"READY": [], "FAILED": []}
    meetings = list(meetings)
    try:
        refs = await fetch_reference_data(source)
    except RenderError as exc:
        for meeting in meetings:
            slug = meeting_slug(meeting)
            _write_error(slug, str(exc))
            results["FAILED"].append(slug)
        return results

    # one meeting at a time; each render owns its own input snapshot
    for meeting in meetings:
        slug = meeting_slug(meeting)
        try:
            await _process_meeting(meeting, refs, preview, template)
        except Exception as exc:
            logger.exception("Render error for %s", slug)
            _write_error(slug, str(exc))
            results["FAILED"].append(slug)
            continue
        results["READY"].append(slug)
    return results


def run_batch(
    meetings: Iterable[MeetingRecord],
    source: ReferenceSource,
    preview: bool = False,
    template: Optional[TemplateConfig] = None,
) -> dict[str, list[str]]:
    return asyncio.run(run_batch_async(meetings, source, preview=preview, template=template))
