from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import select

from .errors import ReferenceFetchError
from .models import (
    BrandingAssets,
    MeetingRecord,
    ReferenceData,
    SettingRow,
    UnitRecord,
    UnitRow,
    UserRecord,
    UserRow,
    get_session,
)


logger = logging.getLogger(__name__)

LOGO_KEY = "logoBase64"
SIDEBAR_LOGO_KEY = "sidebarLogoBase64"


class ReferenceSource(Protocol):
    async def fetch_users(self) -> List[UserRecord]: ...

    async def fetch_units(self) -> List[UnitRecord]: ...

    async def fetch_branding(self) -> BrandingAssets: ...


class SnapshotSource:
    """Reference data from an exported JSON snapshot of the record store."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: dict | None = None

    def _load(self) -> dict:
        if self._data is None:
            if not self.path.exists():
                raise FileNotFoundError(f"Snapshot not found: {self.path}")
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            if not isinstance(data, dict):
                raise ValueError("Snapshot must be a JSON object")
            self._data = data
        return self._data

    def meetings(self) -> List[MeetingRecord]:
        return [MeetingRecord.from_dict(row) for row in self._load().get("minutes") or []]

    async def fetch_users(self) -> List[UserRecord]:
        data = await asyncio.to_thread(self._load)
        return [UserRecord.from_dict(row) for row in data.get("users") or []]

    async def fetch_units(self) -> List[UnitRecord]:
        data = await asyncio.to_thread(self._load)
        return [UnitRecord.from_dict(row) for row in data.get("units") or []]

    async def fetch_branding(self) -> BrandingAssets:
        data = await asyncio.to_thread(self._load)
        return BrandingAssets.from_dict(data.get("settings"))


class SqlReferenceSource:
    """Read-only view over the unit, user and setting tables."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _users(self) -> List[UserRecord]:
        with get_session(self.engine) as session:
            rows = session.exec(select(UserRow)).all()
        return [UserRecord(id=row.id, unit_id=row.unit_id or None, name=row.name) for row in rows]

    def _units(self) -> List[UnitRecord]:
        with get_session(self.engine) as session:
            rows = session.exec(select(UnitRow)).all()
        return [UnitRecord(id=row.id, name=row.name, abbreviation=row.abbreviation or None) for row in rows]

    def _branding(self) -> BrandingAssets:
        with get_session(self.engine) as session:
            rows = session.exec(select(SettingRow).where(SettingRow.key.in_([LOGO_KEY, SIDEBAR_LOGO_KEY]))).all()
        values = {row.key: row.value for row in rows}
        return BrandingAssets.from_dict(values)

    async def fetch_users(self) -> List[UserRecord]:
        return await asyncio.to_thread(self._users)

    async def fetch_units(self) -> List[UnitRecord]:
        return await asyncio.to_thread(self._units)

    async def fetch_branding(self) -> BrandingAssets:
        return await asyncio.to_thread(self._branding)


async def fetch_reference_data(source: ReferenceSource) -> ReferenceData:
    try:
        users, units, branding = await asyncio.gather(
            source.fetch_users(),
            source.fetch_units(),
            source.fetch_branding(),
        )
    except Exception as exc:
        logger.exception("Reference data fetch failed")
        raise ReferenceFetchError(f"Reference data unavailable: {exc}") from exc
    return ReferenceData(users=list(users), units=list(units), branding=branding)
