from __future__ import annotations

import logging
from io import BytesIO
from typing import Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..exceptions.errors import FontError, FormatError, PageIndexError
from ..models.annotation import Color
from ..models.signature_enums import FontFamily, STANDARD_FONTS
from ..models.signature_placement import DocumentPlacement

logger = logging.getLogger(__name__)


class PdfSigner:
    """
    Burns a text annotation into a PDF page.

    The text is drawn on an overlay page with reportlab and merged into the
    target page's content stream, so the result is plain page content: no
    annotation object, nothing to move or remove later. Input bytes are only
    read; a new document is written.
    """

    @staticmethod
    def _open(pdf_bytes: bytes) -> PdfReader:
        try:
            reader = PdfReader(BytesIO(pdf_bytes))
            # force page tree parsing so broken files fail here
            len(reader.pages)
        except (PyPdfError, ValueError, KeyError, TypeError) as exc:
            raise FormatError(f"Artifact is not a readable PDF: {exc}") from exc
        return reader

    @staticmethod
    def _page(reader: PdfReader, page_index: int):
        count = len(reader.pages)
        if page_index < 0 or page_index >= count:
            raise PageIndexError(f"page {page_index} requested, artifact has {count} page(s)")
        return reader.pages[page_index]

    @staticmethod
    def resolve_font(font_family: FontFamily | str) -> str:
        """Font family -> registered standard PDF font name."""
        try:
            name = STANDARD_FONTS[FontFamily(font_family)]
            pdfmetrics.getFont(name)
        except Exception as exc:
            raise FontError(f"Cannot embed font for family {font_family!r}: {exc}") from exc
        return name

    @staticmethod
    def page_size(pdf_bytes: bytes, page_index: int = 0) -> Tuple[float, float]:
        """Native (width, height) of a page in PDF points."""
        page = PdfSigner._page(PdfSigner._open(pdf_bytes), page_index)
        box = page.mediabox
        return float(box.width), float(box.height)

    @staticmethod
    def _make_overlay(
        page_right: float,
        page_top: float,
        origin: Tuple[float, float],
        placement: DocumentPlacement,
        text: str,
        color: Color,
        font_name: str,
    ) -> bytes:
        """
        Erzeugt eine Overlay-Seite (gleich groß wie Zielseite) mit dem Text
        an der Baseline-Position der Platzierung.
        """
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(page_right, page_top))
        c.setFillColorRGB(*color.as_tuple())
        c.setFont(font_name, placement.font_size)
        c.drawString(origin[0] + placement.x, origin[1] + placement.y, text)
        c.showPage()
        c.save()
        return buf.getvalue()

    @staticmethod
    def composite(
        pdf_bytes: bytes,
        placement: DocumentPlacement,
        *,
        text: str,
        color: Color,
        font_family: FontFamily | str,
    ) -> bytes:
        """
        Liest das PDF, malt den Text auf die Ziel-Seite und liefert neue Bytes.
        """
        reader = PdfSigner._open(pdf_bytes)
        target = PdfSigner._page(reader, placement.page_index)
        font_name = PdfSigner.resolve_font(font_family)

        box = target.mediabox
        overlay_pdf = PdfSigner._make_overlay(
            float(box.right),
            float(box.top),
            (float(box.left), float(box.bottom)),
            placement,
            text,
            color,
            font_name,
        )
        target.merge_page(PdfReader(BytesIO(overlay_pdf)).pages[0])

        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)
        if reader.metadata:
            writer.add_metadata(dict(reader.metadata))

        out = BytesIO()
        writer.write(out)
        data = out.getvalue()
        logger.debug(
            "Composited %r on page %d at (%.2f, %.2f) size %.2f with %s: %d -> %d bytes",
            text, placement.page_index, placement.x, placement.y, placement.font_size,
            font_name, len(pdf_bytes), len(data),
        )
        return data
