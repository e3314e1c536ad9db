from __future__ import annotations

from notula.models import AttendanceState, Participant, UnitRecord, UserRecord
from notula.pipeline.resolve import UnitIndex, resolve_unit_label


UNITS = [
    UnitRecord(id="u-keu", name="Bagian Keuangan", abbreviation="KEU"),
    UnitRecord(id="u-umum", name="Bagian Umum", abbreviation=None),
    UnitRecord(id="u-hukum", name="Bagian Hukum", abbreviation=""),
]
USERS = [
    UserRecord(id="ani", unit_id="u-keu"),
    UserRecord(id="budi", unit_id=None),
    UserRecord(id="citra", unit_id="u-gone"),
    UserRecord(id="dewi", unit_id="u-hukum"),
]


def _participant(user_id: str, cached: str | None) -> Participant:
    return Participant(
        user_id=user_id,
        display_name=user_id.title(),
        attendance=AttendanceState.PRESENT,
        cached_unit_label=cached,
    )


def test_live_unit_abbreviation_wins_over_stale_cache() -> None:
    assert resolve_unit_label(_participant("ani", "Bagian Umum"), USERS, UNITS) == "KEU"


def test_live_unit_without_abbreviation_uses_name() -> None:
    assert resolve_unit_label(_participant("dewi", None), USERS, UNITS) == "Bagian Hukum"


def test_cached_label_matched_by_exact_name() -> None:
    assert resolve_unit_label(_participant("budi", "Bagian Keuangan"), USERS, UNITS) == "KEU"
    assert resolve_unit_label(_participant("nobody", "Bagian Umum"), USERS, UNITS) == "Bagian Umum"


def test_cached_label_match_is_case_sensitive() -> None:
    assert resolve_unit_label(_participant("nobody", "bagian keuangan"), USERS, UNITS) == "bagian keuangan"


def test_dangling_unit_id_falls_back_to_cached_label_verbatim() -> None:
    assert resolve_unit_label(_participant("citra", "Bagian Keuangan"), USERS, UNITS) == "Bagian Keuangan"


def test_nothing_known_gives_empty_label() -> None:
    assert resolve_unit_label(_participant("nobody", None), USERS, UNITS) == ""
    assert resolve_unit_label(_participant("ani", None), [], []) == ""


def test_first_record_wins_on_duplicate_ids() -> None:
    units = [
        UnitRecord(id="u-keu", name="Bagian Keuangan", abbreviation="KEU"),
        UnitRecord(id="u-keu", name="Keuangan Lama", abbreviation="OLD"),
    ]
    index = UnitIndex(USERS, units)
    assert index.resolve(_participant("ani", None)) == "KEU"
