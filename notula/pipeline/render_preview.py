from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF

from ..storage import artifact_path


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1600) -> None:
    page = doc.load_page(page_index)

    # scale so the short side of the bitmap reaches at least min_px
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(2.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_preview(slug: str, pdf_path: Path, base_dir: Path | None = None) -> Path:
    """First page of a rendered minutes PDF as a PNG next to it."""
    out_path = artifact_path(slug, "preview", base_dir=base_dir)
    with fitz.open(str(pdf_path)) as doc:
        _render_page_to_png(doc, 0, out_path)
    return out_path


def count_pages(data: bytes) -> int:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc.page_count
