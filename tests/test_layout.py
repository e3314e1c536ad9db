from __future__ import annotations

import pytest

from notula.pipeline.layout import (
    clip_to_width,
    fit_box,
    font_measure,
    strip_markup,
    truncate,
    wrap_text,
)


def test_fit_box_scales_and_centers() -> None:
    fit = fit_box(200, 100, 50, 50)
    assert fit.scale == pytest.approx(0.25)
    assert fit.width == pytest.approx(50)
    assert fit.height == pytest.approx(25)
    assert fit.offset_x == pytest.approx(0)
    assert fit.offset_y == pytest.approx(12.5)


@pytest.mark.parametrize(
    "natural, box",
    [
        ((200, 100), (50, 50)),
        ((100, 400), (86.3, 65)),
        ((1, 1), (16, 4.5)),
        ((3000, 2000), (30, 15)),
        ((12, 5), (12, 5)),
        ((7, 900), (25, 25)),
    ],
)
def test_fit_box_never_exceeds_box_and_keeps_ratio(natural, box) -> None:
    fit = fit_box(natural[0], natural[1], box[0], box[1])
    assert fit.scale >= 0
    assert fit.width <= box[0] + 1e-9
    assert fit.height <= box[1] + 1e-9
    assert fit.width / fit.height == pytest.approx(natural[0] / natural[1], rel=1e-6)
    assert fit.offset_x >= 0
    assert fit.offset_y >= 0


def test_fit_box_upscales_small_images() -> None:
    fit = fit_box(10, 5, 30, 15)
    assert fit.scale == pytest.approx(3)
    assert (fit.width, fit.height) == pytest.approx((30, 15))


def test_fit_box_degenerate_input() -> None:
    fit = fit_box(0, 10, 5, 5)
    assert fit.scale == 0
    assert (fit.width, fit.height) == (0, 0)


def test_wrap_text_greedy() -> None:
    assert wrap_text("aaa bbb ccc", 7) == ["aaa bbb", "ccc"]


def test_wrap_text_keeps_long_token_whole() -> None:
    lines = wrap_text("hi supercalifragilistic yo", 5)
    assert lines == ["hi", "supercalifragilistic", "yo"]


def test_wrap_text_is_deterministic_with_font_metrics() -> None:
    measure = font_measure("Times-Roman", 10)
    text = "Pembahasan anggaran tahunan dan rencana kerja unit " * 6
    first = wrap_text(text, 60, measure)
    assert first == wrap_text(text, 60, measure)
    assert len(first) > 1
    assert all(measure(line) <= 60 for line in first)
    assert " ".join(first) == " ".join(text.split())


def test_wrap_text_newlines_and_empty() -> None:
    assert wrap_text("a\nb", 10) == ["a", "b"]
    assert wrap_text("", 10) == [""]


def test_truncate() -> None:
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"


def test_clip_to_width() -> None:
    assert clip_to_width("abcdef", 3) == "abc"
    assert clip_to_width("ab", 3) == "ab"


def test_strip_markup_blocks_become_lines() -> None:
    html = "<p>Hello <b>world</b></p><ul><li>one</li><li>two</li></ul>"
    assert strip_markup(html) == "Hello world\none\ntwo"


def test_strip_markup_decodes_entities_and_skips_scripts() -> None:
    assert strip_markup("Fish &amp; chips<script>alert(1)</script>") == "Fish & chips"


def test_strip_markup_keeps_escaped_angle_brackets() -> None:
    assert strip_markup("<p>Anggaran &lt;Rp5 juta disetujui</p>") == "Anggaran <Rp5 juta disetujui"
    assert strip_markup("<p>a &lt;b&gt; c</p>") == "a <b> c"


@pytest.mark.parametrize(
    "plain, expected",
    [
        ("nilai a<b dan c", "nilai a<b dan c"),
        ("R&D anggaran", "R&D anggaran"),
        ("laba <5%", "laba <5%"),
    ],
)
def test_strip_markup_keeps_bare_angle_brackets_in_text(plain, expected) -> None:
    assert strip_markup(plain) == expected


@pytest.mark.parametrize(
    "broken, expected",
    [
        ("<b>bold <i>text", "bold text"),
        ("broken <p class='x", "broken"),
        ("</div>closing only", "closing only"),
        ("", ""),
        (None, ""),
    ],
)
def test_strip_markup_malformed_is_best_effort(broken, expected) -> None:
    assert strip_markup(broken) == expected
