from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from slugify import slugify

from ..config import DEFAULT_TEMPLATE, TemplateConfig
from ..directory import ReferenceSource, fetch_reference_data
from ..errors import RenderError
from ..models import BrandingAssets, MeetingRecord, UnitRecord, UserRecord
from .attachments import ResolvedAssets, resolve_assets
from .instructions import Page
from .render_pdf import render_pdf
from .report import build_report
from .roster import build_roster_pages


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedDocument:
    data: bytes = field(repr=False)
    filename: str
    report_pages: int
    roster_pages: int

    @property
    def page_count(self) -> int:
        return self.report_pages + self.roster_pages


def title_slug(title: str) -> str:
    slug = slugify(title or "", lowercase=False)
    slug = re.sub(r"[^A-Za-z0-9-]+", "-", slug).strip("-")
    if not slug:
        slug = hashlib.md5((title or "").encode("utf-8")).hexdigest()[:12]
    return slug


def document_filename(title: str, template: TemplateConfig = DEFAULT_TEMPLATE) -> str:
    return f"{template.filename_prefix}-{title_slug(title)}{template.filename_extension}"


def layout_document(
    meeting: MeetingRecord,
    assets: ResolvedAssets,
    users: Sequence[UserRecord],
    units: Sequence[UnitRecord],
    template: TemplateConfig = DEFAULT_TEMPLATE,
) -> tuple[List[Page], List[Page]]:
    """Synchronous layout stage: only consumes already-probed images."""
    report = build_report(meeting, assets, template)
    roster = build_roster_pages(meeting, assets, users, units, template)
    return report, roster


async def render_async(
    meeting: MeetingRecord,
    users: Sequence[UserRecord],
    units: Sequence[UnitRecord],
    branding: Optional[BrandingAssets] = None,
    template: Optional[TemplateConfig] = None,
) -> RenderedDocument:
    """
    Minutes report followed by the attendance roster, as one PDF.

    Images are probed first (concurrently, order preserved), then the pages
    are laid out and drawn. Anything going wrong surfaces as RenderError.
    """
    template = template or DEFAULT_TEMPLATE
    try:
        assets = await resolve_assets(meeting, branding)
        report, roster = layout_document(meeting, assets, users, units, template)
        data = render_pdf(report + roster, title=meeting.title)
    except Exception as exc:
        logger.exception("Rendering failed for %r", meeting.title)
        raise RenderError(f"Could not render minutes {meeting.title!r}: {exc}") from exc

    logger.info(
        "Rendered %r: %d report page(s), %d roster page(s)",
        meeting.title, len(report), len(roster),
    )
    return RenderedDocument(
        data=data,
        filename=document_filename(meeting.title, template),
        report_pages=len(report),
        roster_pages=len(roster),
    )


def render(
    meeting: MeetingRecord,
    users: Sequence[UserRecord],
    units: Sequence[UnitRecord],
    branding: Optional[BrandingAssets] = None,
    template: Optional[TemplateConfig] = None,
) -> RenderedDocument:
    return asyncio.run(render_async(meeting, users, units, branding, template))


async def render_from_source(
    meeting: MeetingRecord,
    source: ReferenceSource,
    template: Optional[TemplateConfig] = None,
) -> RenderedDocument:
    refs = await fetch_reference_data(source)
    return await render_async(meeting, refs.users, refs.units, refs.branding, template)
