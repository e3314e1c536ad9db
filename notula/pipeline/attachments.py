from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, List, Optional, Sequence

from PIL import Image

from ..errors import ImageDecodeError
from ..models import AttendanceState, Attachment, BrandingAssets, MeetingRecord, Payload


logger = logging.getLogger(__name__)

DOCUMENT = "document"
IMAGE = "image"
FAILED = "failed"

_MAGIC = (
    b"\x89PNG\r\n\x1a\n",
    b"\xff\xd8\xff",
    b"GIF87a",
    b"GIF89a",
    b"II*\x00",
    b"MM\x00*",
)


@dataclass(frozen=True)
class ImageAsset:
    data: bytes = field(repr=False)
    width: int
    height: int


@dataclass(frozen=True)
class ResolvedAttachment:
    attachment: Attachment
    kind: str  # document | image | failed
    image: Optional[ImageAsset] = None
    error: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.attachment.file_name


@dataclass
class ResolvedAssets:
    logo: Optional[ImageAsset] = None
    pic_signature: Optional[ImageAsset] = None
    signatures: Dict[int, ImageAsset] = field(default_factory=dict)  # participant index -> image
    attachments: List[ResolvedAttachment] = field(default_factory=list)

    @property
    def documents(self) -> List[ResolvedAttachment]:
        return [a for a in self.attachments if a.kind == DOCUMENT]

    @property
    def gallery(self) -> List[ResolvedAttachment]:
        return [a for a in self.attachments if a.kind != DOCUMENT]


def has_image_signature(raw: bytes) -> bool:
    if raw[:4] == b"RIFF" and raw[8:12] == b"WEBP":
        return True
    # "BM" alone is too common a prefix; the BMP header's reserved words are zero
    if raw[:2] == b"BM" and raw[6:10] == b"\x00\x00\x00\x00":
        return True
    return any(raw.startswith(magic) for magic in _MAGIC)


def _split_data_url(value: str) -> tuple[str, bool, str]:
    header, _, body = value.partition(",")
    params = header[len("data:"):].split(";")
    media_type = params[0].strip().lower()
    return media_type, "base64" in params[1:], body


def is_image_payload(data: Optional[Payload]) -> bool:
    """Classify by what the payload holds, never by the file name."""
    if not data:
        return False
    if isinstance(data, (bytes, bytearray)):
        return has_image_signature(bytes(data))
    value = data.strip()
    if value.startswith("data:"):
        media_type, _, _ = _split_data_url(value)
        return media_type.startswith("image/")
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return has_image_signature(raw)


def decode_payload(data: Optional[Payload]) -> Optional[bytes]:
    """
    Raw image bytes of a payload, or None when the payload is not an image.
    Raises ImageDecodeError for an image payload whose encoding is broken.
    """
    if not is_image_payload(data):
        return None
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    value = data.strip()
    if value.startswith("data:"):
        _, is_base64, body = _split_data_url(value)
        if not is_base64:
            raise ImageDecodeError("image data URL is not base64 encoded")
        value = body
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f"invalid base64 image payload: {exc}") from exc


def probe_image(data: Optional[Payload]) -> ImageAsset:
    raw = decode_payload(data)
    if raw is None:
        raise ImageDecodeError("payload is not an image")
    try:
        with Image.open(BytesIO(raw)) as img:
            img.load()
            width, height = img.size
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(str(exc) or exc.__class__.__name__) from exc
    if width <= 0 or height <= 0:
        raise ImageDecodeError("image has no area")
    return ImageAsset(data=raw, width=width, height=height)


async def _resolve_one(attachment: Attachment) -> ResolvedAttachment:
    if not is_image_payload(attachment.data):
        return ResolvedAttachment(attachment=attachment, kind=DOCUMENT)
    try:
        image = await asyncio.to_thread(probe_image, attachment.data)
    except ImageDecodeError as exc:
        logger.warning("Attachment %s could not be decoded: %s", attachment.file_name, exc)
        return ResolvedAttachment(attachment=attachment, kind=FAILED, error=str(exc))
    return ResolvedAttachment(attachment=attachment, kind=IMAGE, image=image)


async def resolve_attachments(attachments: Sequence[Attachment]) -> List[ResolvedAttachment]:
    # gather keeps argument order, so the grid sees the source order
    return list(await asyncio.gather(*(_resolve_one(a) for a in attachments)))


async def _probe_optional(data: Optional[Payload], what: str) -> Optional[ImageAsset]:
    if not data:
        return None
    try:
        return await asyncio.to_thread(probe_image, data)
    except ImageDecodeError as exc:
        logger.warning("Skipping %s: %s", what, exc)
        return None


async def resolve_assets(meeting: MeetingRecord, branding: Optional[BrandingAssets]) -> ResolvedAssets:
    """
    Probe every image the layout needs before any placement happens.
    Signatures of absent participants are never decoded.
    """
    branding = branding or BrandingAssets()
    present = [
        (index, p)
        for index, p in enumerate(meeting.participants)
        if p.attendance == AttendanceState.PRESENT and p.signature_image
    ]

    logo, pic_signature, attachments, *signatures = await asyncio.gather(
        _probe_optional(branding.document_logo, "document logo"),
        _probe_optional(meeting.pic_signature, "PIC signature"),
        resolve_attachments(meeting.attachments),
        *(_probe_optional(p.signature_image, f"signature of {p.display_name}") for _, p in present),
    )

    return ResolvedAssets(
        logo=logo,
        pic_signature=pic_signature,
        signatures={
            index: asset
            for (index, _), asset in zip(present, signatures)
            if asset is not None
        },
        attachments=attachments,
    )
