from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


# Millimetres, origin at the top-left corner of the page, y grows downward.
A4_LANDSCAPE = (297.0, 210.0)

BLACK = "#000000"


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float  # baseline
    text: str
    font: str = "Times-Roman"
    size: float = 11.0
    color: str = BLACK
    align: str = "left"  # left | center | right


@dataclass(frozen=True)
class ImagePlacement:
    x: float
    y: float
    width: float
    height: float
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class Rule:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.1


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float
    line_width: float = 0.1
    fill: Optional[str] = None


Instruction = Union[TextRun, ImagePlacement, Rule, Box]


@dataclass
class Page:
    kind: str  # report | roster
    width: float = A4_LANDSCAPE[0]
    height: float = A4_LANDSCAPE[1]
    items: List[Instruction] = field(default_factory=list)

    def add(self, item: Instruction) -> None:
        self.items.append(item)

    def texts(self) -> List[str]:
        return [item.text for item in self.items if isinstance(item, TextRun)]

    def images(self) -> List[ImagePlacement]:
        return [item for item in self.items if isinstance(item, ImagePlacement)]
