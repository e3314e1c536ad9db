from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Tuple
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
TEMPLATE_PATH = BASE_DIR / "assets" / "template.json"

WEEKDAYS_ID: Tuple[str, ...] = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")
MONTHS_ID_SHORT: Tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
)


@dataclass(frozen=True)
class TemplateConfig:
    """Fixed strings and limits of the printed minutes form.

    The document codes and dates belong to the paper template, not to the
    meeting, so they never change with the meeting data.
    """

    report_code: str = "No.BO.29.3.1-V3 Borang Notulen"
    report_date: str = "30 Agustus 2017"
    roster_code: str = "No.BO.29.3.2-V1 Borang Daftar Hadir"
    roster_date: str = "27 November 2017"

    label_event: str = "Acara"
    label_venue: str = "Tempat"
    label_participants: str = "Peserta"
    participants_note: str = "Sesuai Daftar Hadir (Terlampir)"
    label_day_date: str = "Hari/Tanggal"
    label_roster_day_date: str = "Hari / Tanggal"
    label_time: str = "Jam"
    label_pic: str = "PIC"
    time_suffix: str = "WIB"
    empty_value: str = "-"

    agenda_headers: Tuple[str, ...] = ("No", "Pokok Bahasan", "Keputusan", "Tindakan", "PIC", "Monitoring")
    empty_agenda_text: str = "Tidak ada item pembahasan"

    sign_acknowledged: str = "Mengetahui,"
    sign_role: str = "Penanggung Jawab Rapat"
    sign_blank_line: str = ".........................................."

    attachments_heading: str = "Lampiran:"
    document_suffix: str = "(Dokumen/File)"
    image_failed_caption: str = "(Gagal memuat gambar: {name})"

    roster_headers: Tuple[str, ...] = ("No.", "NAMA", "BAGIAN", "PARAF")
    absent_mark: str = "Tidak Hadir"
    absent_color: str = "#DC2626"
    header_fill: str = "#F2F2F2"
    roster_title_limit: int = 55

    weekdays: Tuple[str, ...] = WEEKDAYS_ID
    months: Tuple[str, ...] = MONTHS_ID_SHORT

    filename_prefix: str = "Daftar-Hadir"
    filename_extension: str = ".pdf"


DEFAULT_TEMPLATE = TemplateConfig()


def validate_template(template: TemplateConfig) -> list[str]:
    errors: list[str] = []
    for name in ("report_code", "report_date", "roster_code", "roster_date", "absent_mark"):
        if not str(getattr(template, name)).strip():
            errors.append(f"Template field {name} must not be empty")
    if template.roster_title_limit <= 0:
        errors.append("roster_title_limit must be positive")
    if len(template.weekdays) != 7:
        errors.append("weekdays must list 7 names (Monday first)")
    if len(template.months) != 12:
        errors.append("months must list 12 names")
    if len(template.agenda_headers) != 6:
        errors.append("agenda_headers must list 6 column titles")
    if len(template.roster_headers) != 4:
        errors.append("roster_headers must list 4 column titles")
    if "{name}" not in template.image_failed_caption:
        errors.append("image_failed_caption must contain {name}")
    return errors


def load_template(path: Path | None = None) -> TemplateConfig:
    """Overlay a JSON file on the default template.

    A missing file yields the defaults; unknown keys are rejected.
    """
    target = path or TEMPLATE_PATH
    if not target.exists():
        if path is not None:
            raise FileNotFoundError(f"Template not found: {target}")
        return DEFAULT_TEMPLATE
    with target.open("r", encoding="utf-8") as handle:
        overrides = json.load(handle)
    if not isinstance(overrides, dict):
        raise ValueError("Template file must contain a JSON object")

    known = {f.name: f for f in fields(TemplateConfig)}
    unknown = sorted(set(overrides) - set(known))
    if unknown:
        raise ValueError(f"Unknown template keys: {', '.join(unknown)}")

    values = {}
    for key, value in overrides.items():
        default = getattr(DEFAULT_TEMPLATE, key)
        values[key] = tuple(value) if isinstance(default, tuple) else value
    return replace(DEFAULT_TEMPLATE, **values)


def set_out_dir(path: Path) -> None:
    global OUT_DIR
    OUT_DIR = path
