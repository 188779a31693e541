"""Signature adapter abstraction.

Bridges the documents feature to the signature feature: takes the base
artifact and a screen-space annotation, returns the composited bytes.
Implementations must not write anywhere.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from signature.logic.coordinate_transform import to_document_space
from signature.logic.pdf_signer import PdfSigner
from signature.models.annotation import Annotation
from signature.models.signature_placement import DocumentPlacement


class SignatureAdapter(ABC):
    """Abstract signature adapter for the commit protocol."""

    @abstractmethod
    def place(self, *, payload: bytes, annotation: Annotation, render_width: float,
              page_index: int) -> DocumentPlacement:
        """Map the annotation into the page's PDF coordinates."""
        raise NotImplementedError

    @abstractmethod
    def sign(self, *, payload: bytes, annotation: Annotation, placement: DocumentPlacement) -> bytes:
        """Return new artifact bytes with the annotation burned in."""
        raise NotImplementedError


class BurnInSignatureAdapter(SignatureAdapter):
    """Flattens the annotation into page content (pypdf + reportlab)."""

    def __init__(self, *, font_bounds: Tuple[float, float] = (12.0, 60.0)) -> None:
        self._font_bounds = font_bounds

    def place(self, *, payload: bytes, annotation: Annotation, render_width: float,
              page_index: int) -> DocumentPlacement:
        page_width, page_height = PdfSigner.page_size(payload, page_index)
        return to_document_space(
            annotation,
            render_width=render_width,
            page_width=page_width,
            page_height=page_height,
            page_index=page_index,
            font_bounds=self._font_bounds,
        )

    def sign(self, *, payload: bytes, annotation: Annotation, placement: DocumentPlacement) -> bytes:
        return PdfSigner.composite(
            payload,
            placement,
            text=annotation.text,
            color=annotation.color,
            font_family=annotation.font_family,
        )
