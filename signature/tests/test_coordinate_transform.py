"""
signature/tests/test_coordinate_transform.py

Screen -> PDF mapping for the fixed-width editor rendering.
"""

from __future__ import annotations

import itertools
import unittest

from signature.exceptions.errors import PageIndexError, PlacementError
from signature.logic.coordinate_transform import to_document_space, to_screen_space
from signature.models.annotation import Annotation, BLACK
from signature.models.signature_enums import FontFamily


class TestToDocumentSpace(unittest.TestCase):
    def test_letter_page_rendered_at_600px(self) -> None:
        ann = Annotation(x=50, y=50, width=200, height=60, text="John Doe",
                         color=BLACK, font_family=FontFamily.SERIF, font_size=24)
        p = to_document_space(ann, render_width=600, page_width=612, page_height=792)

        self.assertAlmostEqual(p.scale, 1.02)
        self.assertAlmostEqual(p.font_size, 24.48)
        self.assertAlmostEqual(p.x, 51.0)
        self.assertAlmostEqual(p.y, 716.52)
        self.assertAlmostEqual(p.width, 204.0)
        self.assertEqual(p.page_index, 0)

    def test_projection_round_trip(self) -> None:
        cases = itertools.product(
            (300, 600, 1024),           # render width
            ((612, 792), (595, 842)),   # letter, A4
            (0, 13.5, 100),             # screen x
            (0, 40.25, 300),            # screen y
            (12, 24, 60),               # font size
        )
        for render_width, (pw, ph), sx, sy, fs in cases:
            ann = Annotation(x=sx, y=sy, width=50, height=20, font_size=fs)
            p = to_document_space(ann, render_width=render_width, page_width=pw, page_height=ph)
            bx, by = to_screen_space(p, page_height=ph)
            self.assertAlmostEqual(bx, sx, places=9)
            self.assertAlmostEqual(by, sy, places=9)

    def test_box_reaching_right_edge_is_allowed(self) -> None:
        ann = Annotation(x=400, y=10, width=200, height=60, font_size=24)
        p = to_document_space(ann, render_width=600, page_width=612, page_height=792)
        self.assertAlmostEqual(p.x + p.width, 612.0)

    def test_box_past_right_edge_fails(self) -> None:
        ann = Annotation(x=450, y=10, width=200, height=60, font_size=24)
        with self.assertRaises(PlacementError):
            to_document_space(ann, render_width=600, page_width=612, page_height=792)

    def test_negative_x_fails(self) -> None:
        ann = Annotation(x=-5, y=10, font_size=24)
        with self.assertRaises(PlacementError):
            to_document_space(ann, render_width=600, page_width=612, page_height=792)

    def test_baseline_below_page_fails(self) -> None:
        # 776 px * 1.02 = 791.52 pt from the top; baseline ends below 0
        ann = Annotation(x=10, y=776, width=100, height=30, font_size=24)
        with self.assertRaises(PlacementError):
            to_document_space(ann, render_width=600, page_width=612, page_height=792)

    def test_baseline_above_page_fails(self) -> None:
        ann = Annotation(x=10, y=-40, width=100, height=30, font_size=24)
        with self.assertRaises(PlacementError):
            to_document_space(ann, render_width=600, page_width=612, page_height=792)

    def test_font_size_bounds(self) -> None:
        for size in (11.9, 60.5):
            ann = Annotation(font_size=size)
            with self.assertRaises(PlacementError):
                to_document_space(ann, render_width=600, page_width=612, page_height=792)
        for size in (12, 60):
            to_document_space(Annotation(font_size=size), render_width=600, page_width=612, page_height=792)

    def test_custom_font_bounds(self) -> None:
        with self.assertRaises(PlacementError):
            to_document_space(Annotation(font_size=24), render_width=600, page_width=612,
                              page_height=792, font_bounds=(8, 20))

    def test_invalid_render_width(self) -> None:
        for width in (0, -600):
            with self.assertRaises(PlacementError):
                to_document_space(Annotation(), render_width=width, page_width=612, page_height=792)

    def test_non_finite_input_is_rejected(self) -> None:
        nan, inf = float("nan"), float("inf")
        annotations = [
            Annotation(x=nan), Annotation(y=nan), Annotation(x=inf), Annotation(y=-inf),
            Annotation(width=nan), Annotation(width=inf), Annotation(font_size=nan),
        ]
        for ann in annotations:
            with self.subTest(annotation=ann):
                with self.assertRaises(PlacementError):
                    to_document_space(ann, render_width=600, page_width=612, page_height=792)
        for render_width in (nan, inf):
            with self.subTest(render_width=render_width):
                with self.assertRaises(PlacementError):
                    to_document_space(Annotation(), render_width=render_width, page_width=612, page_height=792)
        with self.assertRaises(PlacementError):
            to_document_space(Annotation(), render_width=600, page_width=nan, page_height=792)
        with self.assertRaises(PlacementError):
            to_document_space(Annotation(), render_width=600, page_width=612, page_height=inf)

    def test_only_first_page_supported(self) -> None:
        with self.assertRaises(PageIndexError):
            to_document_space(Annotation(), render_width=600, page_width=612, page_height=792, page_index=1)


if __name__ == "__main__":
    unittest.main()
