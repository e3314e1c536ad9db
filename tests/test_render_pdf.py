from __future__ import annotations

import fitz
import pytest

from notula.pipeline.instructions import Box, ImagePlacement, Page, Rule, TextRun
from notula.pipeline.render_pdf import render_pdf


def test_render_pdf_draws_every_page(png) -> None:
    first = Page(kind="report")
    first.add(TextRun(14, 15, "Notulen", font="Times-Bold", size=12))
    first.add(Rule(14, 32, 283, 32, width=0.5))
    first.add(Box(14, 40, 50, 10, fill="#F2F2F2"))
    first.add(ImagePlacement(14, 60, 20, 10, png(40, 20)))
    second = Page(kind="roster")
    second.add(TextRun(148.5, 20, "Daftar Hadir", align="center"))

    data = render_pdf([first, second], title="Rapat")
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert doc.page_count == 2
        page = doc.load_page(0)
        # 297 x 210 mm in points
        assert page.rect.width == pytest.approx(841.89, abs=0.1)
        assert page.rect.height == pytest.approx(595.28, abs=0.1)
        assert "Notulen" in page.get_text()
        assert len(page.get_images()) == 1
        assert "Daftar Hadir" in doc.load_page(1).get_text()
        assert doc.metadata["title"] == "Rapat"


def test_undecodable_image_is_skipped() -> None:
    page = Page(kind="report")
    page.add(ImagePlacement(14, 60, 20, 10, b"not an image"))
    page.add(TextRun(14, 15, "tetap"))
    with fitz.open(stream=render_pdf([page]), filetype="pdf") as doc:
        assert "tetap" in doc.load_page(0).get_text()


def test_render_pdf_rejects_empty_page_list() -> None:
    with pytest.raises(ValueError):
        render_pdf([])


def test_render_pdf_rejects_unknown_instruction() -> None:
    page = Page(kind="report")
    page.items.append(object())
    with pytest.raises(TypeError):
        render_pdf([page])
