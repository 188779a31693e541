"""Signature feature exceptions.

Raised while mapping an annotation onto a page and burning it into the PDF.
None of these is raised after anything was written.
"""
from __future__ import annotations


class SignatureError(Exception):
    """Base exception for signature placement and compositing."""


class PlacementError(SignatureError):
    """Annotation would land (partly) outside the page or has an invalid size."""


class PageIndexError(SignatureError):
    """Requested page is not supported or not present in the artifact."""


class FormatError(SignatureError):
    """Artifact bytes cannot be parsed as PDF."""


class FontError(SignatureError):
    """Font family cannot be resolved to an embeddable standard font."""
