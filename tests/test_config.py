from __future__ import annotations

import json
from dataclasses import replace

import pytest

from notula import config


def test_default_template_is_valid() -> None:
    assert config.validate_template(config.DEFAULT_TEMPLATE) == []


def test_shipped_template_file_loads() -> None:
    template = config.load_template()
    assert template.report_code == "No.BO.29.3.1-V3 Borang Notulen"
    assert template.roster_date == "27 November 2017"


def test_overrides_are_applied(tmp_path) -> None:
    path = tmp_path / "template.json"
    path.write_text(json.dumps({"report_code": "FORM-9", "weekdays": ["a", "b", "c", "d", "e", "f", "g"]}), encoding="utf-8")
    template = config.load_template(path)
    assert template.report_code == "FORM-9"
    assert template.weekdays == ("a", "b", "c", "d", "e", "f", "g")
    assert template.roster_code == config.DEFAULT_TEMPLATE.roster_code


def test_unknown_keys_are_rejected(tmp_path) -> None:
    path = tmp_path / "template.json"
    path.write_text(json.dumps({"colour": "red"}), encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_template(path)


def test_explicit_missing_template_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        config.load_template(tmp_path / "nope.json")


def test_validate_template_reports_problems() -> None:
    broken = replace(
        config.DEFAULT_TEMPLATE,
        report_code=" ",
        roster_title_limit=0,
        months=("Jan",),
        image_failed_caption="failed",
    )
    problems = config.validate_template(broken)
    assert len(problems) == 4
    assert any("report_code" in problem for problem in problems)
