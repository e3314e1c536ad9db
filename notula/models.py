from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from sqlalchemy.engine import Engine
from sqlmodel import Field, SQLModel, Session, create_engine


Payload = Union[str, bytes]


class AttendanceState(str, Enum):
    PRESENT = "hadir"
    ABSENT = "tidak_hadir"


class MinuteStatus(str, Enum):
    DRAFT = "draft"
    FINAL = "final"


def _text(value) -> str:
    return "" if value is None else str(value)


def _optional(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value or None


@dataclass(frozen=True)
class AgendaItem:
    topic: str
    decision: str = ""
    action: str = ""
    executor: str = ""
    monitoring_note: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AgendaItem":
        return cls(
            topic=_text(data.get("topic")),
            decision=_text(data.get("decision")),
            action=_text(data.get("action")),
            executor=_text(data.get("pic", data.get("executor"))),
            monitoring_note=_text(data.get("monitoring", data.get("monitoring_note"))),
        )


@dataclass(frozen=True)
class Participant:
    user_id: str
    display_name: str
    attendance: AttendanceState
    cached_unit_label: Optional[str] = None
    signature_image: Optional[Payload] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        return cls(
            user_id=_text(data.get("userId", data.get("user_id"))),
            display_name=_text(data.get("name", data.get("display_name"))),
            attendance=AttendanceState(data.get("attendance", AttendanceState.PRESENT.value)),
            cached_unit_label=_optional(data.get("unitName", data.get("cached_unit_label"))),
            signature_image=data.get("signature") or None,
        )


@dataclass(frozen=True)
class Attachment:
    file_name: str
    data: Payload
    uploaded_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Attachment":
        return cls(
            file_name=_text(data.get("fileName", data.get("file_name"))),
            data=data.get("filePath", data.get("data")) or "",
            uploaded_at=_text(data.get("uploadedAt", data.get("uploaded_at"))),
        )


@dataclass(frozen=True)
class MeetingRecord:
    title: str
    date: str
    time: str = ""
    location: str = ""
    pic_id: str = ""
    pic_name: str = ""
    pic_signature: Optional[Payload] = None
    agenda_items: Tuple[AgendaItem, ...] = ()
    status: MinuteStatus = MinuteStatus.DRAFT
    unit_id: str = ""
    participants: Tuple[Participant, ...] = ()
    attachments: Tuple[Attachment, ...] = ()
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "MeetingRecord":
        return cls(
            id=_optional(data.get("id")),
            title=_text(data.get("title")),
            date=_text(data.get("date")),
            time=_text(data.get("time")),
            location=_text(data.get("location")),
            pic_id=_text(data.get("picId", data.get("pic_id"))),
            pic_name=_text(data.get("picName", data.get("pic_name"))),
            pic_signature=data.get("picSignature", data.get("pic_signature")) or None,
            agenda_items=tuple(AgendaItem.from_dict(item) for item in data.get("items") or []),
            status=MinuteStatus(data.get("status", MinuteStatus.DRAFT.value)),
            unit_id=_text(data.get("unitId", data.get("unit_id"))),
            participants=tuple(Participant.from_dict(p) for p in data.get("participants") or []),
            attachments=tuple(Attachment.from_dict(a) for a in data.get("attachments") or []),
        )


@dataclass(frozen=True)
class UnitRecord:
    id: str
    name: str
    abbreviation: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.abbreviation or self.name

    @classmethod
    def from_dict(cls, data: dict) -> "UnitRecord":
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            abbreviation=_optional(data.get("abbreviation")),
        )


@dataclass(frozen=True)
class UserRecord:
    id: str
    unit_id: Optional[str] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "UserRecord":
        return cls(
            id=_text(data.get("id")),
            unit_id=_optional(data.get("unitId", data.get("unit_id"))),
            name=_text(data.get("name")),
        )


@dataclass(frozen=True)
class BrandingAssets:
    document_logo: Optional[Payload] = None
    sidebar_logo: Optional[Payload] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "BrandingAssets":
        data = data or {}
        return cls(
            document_logo=data.get("logoBase64", data.get("document_logo")) or None,
            sidebar_logo=data.get("sidebarLogoBase64", data.get("sidebar_logo")) or None,
        )


@dataclass
class ReferenceData:
    users: List[UserRecord] = field(default_factory=list)
    units: List[UnitRecord] = field(default_factory=list)
    branding: BrandingAssets = field(default_factory=BrandingAssets)


# Read-only mirror of the record store's reference tables.


class UnitRow(SQLModel, table=True):
    __tablename__ = "unit"

    id: str = Field(primary_key=True)
    name: str
    abbreviation: Optional[str] = None


class UserRow(SQLModel, table=True):
    __tablename__ = "user"

    id: str = Field(primary_key=True)
    name: str = ""
    unit_id: Optional[str] = Field(default=None, index=True)


class SettingRow(SQLModel, table=True):
    __tablename__ = "setting"

    key: str = Field(primary_key=True)
    value: Optional[str] = None


def create_store_engine(db_path: Path) -> Engine:
    return create_engine(f"sqlite:///{db_path}")


def init_store(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Session:
    return Session(engine, expire_on_commit=False)
