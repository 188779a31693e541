# signature/models/signature_enums.py
from __future__ import annotations
from enum import Enum


class FontFamily(str, Enum):
    """Font families offered by the editor toolbar."""
    CURSIVE = "cursive"          # "Handwritten"
    SERIF = "serif"              # "Formal (Serif)"
    SANS_SERIF = "sans-serif"    # "Clean (Sans)"
    MONOSPACE = "monospace"      # "Code (Mono)"


# Standard PDF fonts (no font file needed, always embeddable by name)
STANDARD_FONTS: dict[FontFamily, str] = {
    FontFamily.CURSIVE: "Times-Italic",
    FontFamily.SERIF: "Times-Roman",
    FontFamily.SANS_SERIF: "Helvetica",
    FontFamily.MONOSPACE: "Courier",
}
