from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class DocumentPlacement:
    """
    Absolute placement on a PDF page (points; 1 pt = 1/72 inch), origin bottom-left.
    ``y`` is the text baseline.
    """
    page_index: int
    x: float
    y: float
    font_size: float
    width: float
    scale: float
