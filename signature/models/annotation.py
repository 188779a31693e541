from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Tuple

from PIL import ImageColor

from .signature_enums import FontFamily


@dataclass(frozen=True)
class Color:
    """RGB colour with fractional channels (0.0 - 1.0), as PDF content expects."""
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0.0 <= float(value) <= 1.0:
                raise ValueError(f"colour channel {name}={value!r} outside 0..1")

    @classmethod
    def from_hex(cls, hexstr: str) -> "Color":
        """``#RRGGBB`` / ``#RGB`` (or any CSS colour name) -> Color."""
        s = (hexstr or "#000000").strip()
        if not s.startswith("#") and all(c in "0123456789abcdefABCDEF" for c in s):
            s = "#" + s
        r, g, b = ImageColor.getrgb(s)[:3]
        return cls(r / 255.0, g / 255.0, b / 255.0)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*(round(c * 255) for c in self.as_tuple()))


BLACK = Color(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Annotation:
    """
    One pending text annotation in screen space (pixels, origin top-left of
    the rendered page). Produced by the editor, consumed by the commit.
    """
    x: float = 50.0
    y: float = 50.0
    width: float = 200.0
    height: float = 60.0
    text: str = "Double Click to Edit"
    color: Color = field(default=BLACK)
    font_family: FontFamily = FontFamily.CURSIVE
    font_size: float = 24.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"box size must be positive, got {self.width}x{self.height}")
        # accept plain strings from the toolbar ("serif", ...)
        if not isinstance(self.font_family, FontFamily):
            object.__setattr__(self, "font_family", FontFamily(self.font_family))

    # Editor operations return new values; the annotation itself never mutates.
    def moved_by(self, dx: float, dy: float) -> "Annotation":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def resized(self, width: float, height: float) -> "Annotation":
        return replace(self, width=width, height=height)

    def with_text(self, text: str) -> "Annotation":
        return replace(self, text=text)

    def styled(self, *, color: Color | None = None, font_family: FontFamily | str | None = None,
               font_size: float | None = None) -> "Annotation":
        return replace(
            self,
            color=self.color if color is None else color,
            font_family=self.font_family if font_family is None else FontFamily(font_family),
            font_size=self.font_size if font_size is None else font_size,
        )
