from __future__ import annotations

import base64
from io import BytesIO
from typing import Callable, Sequence

import pytest
from PIL import Image

from notula.models import (
    AgendaItem,
    Attachment,
    AttendanceState,
    MeetingRecord,
    Participant,
)


def make_png(width: int = 40, height: int = 20, color=(0, 0, 0)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def as_data_url(raw: bytes, media_type: str = "image/png") -> str:
    return f"data:{media_type};base64," + base64.b64encode(raw).decode("ascii")


@pytest.fixture
def png() -> Callable[..., bytes]:
    return make_png


@pytest.fixture
def data_url() -> Callable[..., str]:
    return as_data_url


@pytest.fixture
def make_participants() -> Callable[..., tuple]:
    def factory(count: int, absent: Sequence[int] = (), signature=None) -> tuple:
        participants = []
        for index in range(count):
            state = AttendanceState.ABSENT if index in absent else AttendanceState.PRESENT
            participants.append(
                Participant(
                    user_id=f"user-{index}",
                    display_name=f"Peserta {index}",
                    attendance=state,
                    cached_unit_label="UMUM",
                    signature_image=signature,
                )
            )
        return tuple(participants)

    return factory


@pytest.fixture
def make_meeting() -> Callable[..., MeetingRecord]:
    def factory(
        title: str = "Rapat Koordinasi",
        participants: Sequence[Participant] = (),
        attachments: Sequence[Attachment] = (),
        items: Sequence[AgendaItem] = (),
        pic_signature=None,
    ) -> MeetingRecord:
        return MeetingRecord(
            id="m-1",
            title=title,
            date="2026-10-17",
            time="09:00",
            location="Ruang Rapat Utama",
            pic_id="user-0",
            pic_name="Budi Santoso",
            pic_signature=pic_signature,
            agenda_items=tuple(items),
            participants=tuple(participants),
            attachments=tuple(attachments),
        )

    return factory
