from __future__ import annotations

import html
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Callable, List, Optional

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth


Measure = Callable[[str], float]

ELLIPSIS = "..."

_BLOCK_TAGS = {
    "p", "div", "br", "li", "ul", "ol", "tr", "table",
    "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre",
}
_SKIP_TAGS = {"script", "style"}
# an unterminated tag: "<!..", "</..", "<name" at the end, or "<name attr=.."
_TAG_FRAGMENT = re.compile(r"<(?:[!/?]|[A-Za-z][\w:-]*(?:\s+[\w:-]+\s*=|\s*$))", re.S)
_SPACES = re.compile(r"[ \t\r\f\v\u00a0]+")


@dataclass(frozen=True)
class FitResult:
    width: float
    height: float
    offset_x: float
    offset_y: float
    scale: float


def fit_box(natural_w: float, natural_h: float, box_w: float, box_h: float) -> FitResult:
    """
    Scale (natural_w, natural_h) uniformly so it fits inside the box, then
    center it. Never stretches; degenerate sizes give a zero-size result.
    """
    if natural_w <= 0 or natural_h <= 0 or box_w <= 0 or box_h <= 0:
        return FitResult(0.0, 0.0, max(box_w, 0.0) / 2, max(box_h, 0.0) / 2, 0.0)

    scale = min(box_w / natural_w, box_h / natural_h)
    width = min(natural_w * scale, box_w)
    height = min(natural_h * scale, box_h)
    return FitResult(width, height, (box_w - width) / 2, (box_h - height) / 2, scale)


def font_measure(font_name: str, font_size: float) -> Measure:
    """Width function in millimetres for one of the standard PDF fonts."""

    def measure(text: str) -> float:
        return stringWidth(text, font_name, font_size) / mm

    return measure


def _char_count(text: str) -> float:
    return float(len(text))


def wrap_text(text: str, max_width: float, measure: Optional[Measure] = None) -> List[str]:
    """
    Greedy word wrap. A word wider than max_width keeps its own line as-is.
    Newlines in the input always start a new line.
    """
    measure = measure or _char_count
    lines: List[str] = []

    for paragraph in (text or "").split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        cur: List[str] = []
        for w in words:
            test = " ".join(cur + [w])
            if measure(test) <= max_width:
                cur.append(w)
                continue
            if cur:
                lines.append(" ".join(cur))
            cur = [w]
        if cur:
            lines.append(" ".join(cur))

    return lines or [""]


def truncate(text: str, max_chars: int, ellipsis: str = ELLIPSIS) -> str:
    if len(text) > max_chars:
        return text[:max_chars] + ellipsis
    return text


def clip_to_width(text: str, max_width: float, measure: Optional[Measure] = None) -> str:
    measure = measure or _char_count
    if measure(text) <= max_width:
        return text
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if measure(text[:mid]) <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo].rstrip()


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):  # noqa: ANN001 - HTMLParser hook
        if tag in _SKIP_TAGS:
            self.skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_startendtag(self, tag, attrs):  # noqa: ANN001 - HTMLParser hook
        if tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_endtag(self, tag):  # noqa: ANN001 - HTMLParser hook
        if tag in _SKIP_TAGS:
            self.skip_depth = max(0, self.skip_depth - 1)
        elif tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_data(self, data):  # noqa: ANN001 - HTMLParser hook
        if not self.skip_depth:
            self.parts.append(data)


def strip_markup(rich_text: Optional[str]) -> str:
    """
    Plain text of a rich-text field. Block tags become line breaks. Input the
    parser holds back at the end is dropped when it is an unterminated tag
    and kept as text otherwise (a bare "a<b" is text, not markup).
    """
    if not rich_text:
        return ""

    parser = _TextExtractor()
    parser.feed(rich_text)
    leftover = parser.rawdata
    if leftover and not parser.skip_depth and not _TAG_FRAGMENT.match(leftover):
        parser.parts.append(html.unescape(leftover))
    text = "".join(parser.parts)

    lines = (_SPACES.sub(" ", line).strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)
