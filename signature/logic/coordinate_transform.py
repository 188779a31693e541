# signature/logic/coordinate_transform.py
"""
Screen space -> PDF space for a single target page.

The editor renders page 0 at a fixed pixel width; PDF pages have their
origin bottom-left and text is anchored at its baseline:

    scale     = page_width / render_width
    x_pdf     = x_screen * scale
    y_pdf     = page_height - y_screen * scale - font_size * scale
    size_pdf  = font_size * scale

Out-of-page input is rejected (PlacementError), never clamped.
"""
from __future__ import annotations

import math
from typing import Tuple

from ..exceptions.errors import PageIndexError, PlacementError
from ..models.annotation import Annotation
from ..models.signature_placement import DocumentPlacement

SUPPORTED_PAGE_INDEX = 0
_EPS = 1e-9


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise PlacementError(f"{name} must be a finite number, got {value!r}")


def compute_scale(render_width: float, page_width: float) -> float:
    _require_finite(render_width=render_width, page_width=page_width)
    if render_width <= 0:
        raise PlacementError(f"render width must be positive, got {render_width}")
    scale = float(page_width) / float(render_width)
    if scale <= 0:
        raise PlacementError(f"page width must be positive, got {page_width}")
    return scale


def to_document_space(
    annotation: Annotation,
    *,
    render_width: float,
    page_width: float,
    page_height: float,
    page_index: int = SUPPORTED_PAGE_INDEX,
    font_bounds: Tuple[float, float] = (12.0, 60.0),
) -> DocumentPlacement:
    if page_index != SUPPORTED_PAGE_INDEX:
        raise PageIndexError(f"only page {SUPPORTED_PAGE_INDEX} can be annotated, got {page_index}")
    _require_finite(
        x=annotation.x,
        y=annotation.y,
        width=annotation.width,
        font_size=annotation.font_size,
        page_height=page_height,
    )

    lo, hi = font_bounds
    if not lo <= annotation.font_size <= hi:
        raise PlacementError(f"font size {annotation.font_size} outside {lo}..{hi}")

    scale = compute_scale(render_width, page_width)
    x = annotation.x * scale
    size = annotation.font_size * scale
    y = page_height - annotation.y * scale - size
    width = annotation.width * scale
    _require_finite(x_pdf=x, y_pdf=y, width_pdf=width)

    if y < -_EPS or y > page_height + _EPS:
        raise PlacementError(f"baseline y={y:.2f} outside page height 0..{page_height}")
    if x < -_EPS or x + width > page_width + _EPS:
        raise PlacementError(
            f"annotation x-extent {x:.2f}..{x + width:.2f} outside page width 0..{page_width}"
        )

    return DocumentPlacement(
        page_index=page_index,
        x=x,
        y=y,
        font_size=size,
        width=width,
        scale=scale,
    )


def to_screen_space(placement: DocumentPlacement, *, page_height: float) -> Tuple[float, float]:
    """Inverse projection: PDF baseline placement -> (x, y) on the rendered page."""
    s = placement.scale
    return (placement.x / s, (page_height - placement.y - placement.font_size) / s)
