from __future__ import annotations

from typing import Dict, Iterable

from ..models import Participant, UnitRecord, UserRecord


class UnitIndex:
    """
    Lookup tables over one reference snapshot. The first record wins when
    ids or names repeat, same as scanning the lists in order.
    """

    def __init__(self, users: Iterable[UserRecord], units: Iterable[UnitRecord]) -> None:
        self.users_by_id: Dict[str, UserRecord] = {}
        self.units_by_id: Dict[str, UnitRecord] = {}
        self.units_by_name: Dict[str, UnitRecord] = {}
        for user in users:
            self.users_by_id.setdefault(user.id, user)
        for unit in units:
            self.units_by_id.setdefault(unit.id, unit)
            self.units_by_name.setdefault(unit.name, unit)

    def resolve(self, participant: Participant) -> str:
        user = self.users_by_id.get(participant.user_id)
        if user is not None and user.unit_id:
            unit = self.units_by_id.get(user.unit_id)
            if unit is not None:
                return unit.display_label
        elif participant.cached_unit_label:
            unit = self.units_by_name.get(participant.cached_unit_label)
            if unit is not None:
                return unit.display_label
        return participant.cached_unit_label or ""


def resolve_unit_label(
    participant: Participant,
    users: Iterable[UserRecord],
    units: Iterable[UnitRecord],
) -> str:
    """
    Display label of a participant's unit.

    1. user id -> user's unit id -> unit (abbreviation, else name)
    2. cached unit label matched exactly against unit names
    3. the cached label itself, or "" when there is none
    """
    return UnitIndex(users, units).resolve(participant)
