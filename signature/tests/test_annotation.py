from __future__ import annotations

import unittest

from signature.models.annotation import Annotation, Color
from signature.models.signature_enums import FontFamily


class TestColor(unittest.TestCase):
    def test_from_hex(self) -> None:
        c = Color.from_hex("#1d4ed8")
        self.assertAlmostEqual(c.r, 0x1D / 255)
        self.assertAlmostEqual(c.g, 0x4E / 255)
        self.assertAlmostEqual(c.b, 0xD8 / 255)
        self.assertEqual(c.to_hex(), "#1d4ed8")

    def test_from_short_hex_and_without_hash(self) -> None:
        self.assertEqual(Color.from_hex("#fff").as_tuple(), (1.0, 1.0, 1.0))
        self.assertEqual(Color.from_hex("000000").as_tuple(), (0.0, 0.0, 0.0))

    def test_channel_range(self) -> None:
        with self.assertRaises(ValueError):
            Color(1.2, 0, 0)
        with self.assertRaises(ValueError):
            Color(0, -0.1, 0)

    def test_bad_hex(self) -> None:
        with self.assertRaises(ValueError):
            Color.from_hex("#12345z")


class TestAnnotation(unittest.TestCase):
    def test_defaults_match_editor(self) -> None:
        a = Annotation()
        self.assertEqual((a.x, a.y, a.width, a.height), (50, 50, 200, 60))
        self.assertEqual(a.font_size, 24)
        self.assertEqual(a.font_family, FontFamily.CURSIVE)

    def test_drag_and_edit_return_new_values(self) -> None:
        a = Annotation()
        b = a.moved_by(10, -5).with_text("Jane Roe").resized(150, 40)
        self.assertEqual((a.x, a.y, a.text), (50, 50, "Double Click to Edit"))
        self.assertEqual((b.x, b.y, b.width, b.height, b.text), (60, 45, 150, 40, "Jane Roe"))

    def test_font_family_from_string(self) -> None:
        a = Annotation(font_family="monospace")
        self.assertIs(a.font_family, FontFamily.MONOSPACE)
        self.assertIs(a.styled(font_family="serif").font_family, FontFamily.SERIF)
        with self.assertRaises(ValueError):
            Annotation(font_family="fantasy")

    def test_box_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            Annotation(width=0)


if __name__ == "__main__":
    unittest.main()
