"""
Tests for text measurement and multi-line layout.

Tests cover:
- Field drawing rules and line spacing
- Font loading with the embedded fallback
- Line placement for centered and right-anchored fields
- Drawing onto an image
"""

import numpy as np
import pytest
from PIL import Image

from PM_Libs.ImageEditingLib.text_layout import (
    TEXT_FIELDS,
    FontSet,
    draw_multiline,
    layout_multiline,
    load_font,
    measure_line,
    spacing_factor,
)
from PM_Libs.ProjStoreLib.config_store import Config


@pytest.fixture
def font():
    return FontSet().get("quote", 25.0)


class TestFieldSpecs:
    def test_field_order_and_anchors(self):
        assert [spec.name for spec in TEXT_FIELDS] == ["quote", "subquote", "subquote2", "tag", "tag2"]
        assert [spec.anchor for spec in TEXT_FIELDS] == ["center", "center", "center", "right", "right"]

    def test_only_quote_is_boxed(self):
        assert [spec.name for spec in TEXT_FIELDS if spec.boxed] == ["quote"]

    def test_spacing_factor(self):
        quote, tag = TEXT_FIELDS[0], TEXT_FIELDS[3]

        assert spacing_factor(quote, True) == 1.12
        assert spacing_factor(tag, True) == 1.2
        assert spacing_factor(tag, False) == 1.0


class TestFonts:
    def test_missing_font_file_falls_back(self, tmp_path):
        font = load_font(str(tmp_path / "missing.ttf"), 20.0)

        assert font.getlength("abc") > 0

    def test_corrupt_font_file_falls_back(self, tmp_path):
        path = tmp_path / "broken.ttf"
        path.write_bytes(b"not a font")

        assert load_font(str(path), 20.0).getlength("abc") > 0

    def test_font_set_from_config(self):
        fonts = FontSet.from_config(Config(tag_font="/fonts/tag.ttf"))

        assert fonts.path("tag") == "/fonts/tag.ttf"
        assert fonts.path("quote") == ""

    def test_font_set_rejects_unknown_field(self):
        with pytest.raises(ValueError):
            FontSet({"title": "/fonts/a.ttf"})
        with pytest.raises(ValueError):
            FontSet().get("title", 10.0)

    def test_font_is_cached(self):
        fonts = FontSet()

        assert fonts.get("quote", 25.0) is fonts.get("quote", 25.0)

    def test_larger_size_measures_wider(self):
        fonts = FontSet()

        assert fonts.get("quote", 50.0).getlength("Hello") > fonts.get("quote", 25.0).getlength("Hello")


class TestMeasureLine:
    def test_height_is_independent_of_text(self, font):
        assert measure_line(font, "ace")[1] == measure_line(font, "Jgy")[1]

    def test_height_is_face_line_height(self, font):
        """Line height includes the line gap of the face."""
        assert measure_line(font, "x")[1] == float(font.font.height)

    def test_empty_line_has_no_width(self, font):
        width, height = measure_line(font, "")

        assert width == 0.0
        assert height > 0


class TestLayoutMultiline:
    """Tests for layout_multiline."""

    def test_first_line_is_scaled_from_original_space(self, font):
        """Position 3500 on a 5000px original lands at y=350 on a 500px preview."""
        block = layout_multiline((400, 500), font, 3500.0, 5000.0, "center", "Hello")

        assert block.top == pytest.approx(350.0)

    def test_centered_lines(self, font):
        block = layout_multiline((400, 500), font, 0.0, 500.0, "center", "Hello\nHi")

        for line in block.lines:
            assert line.x == pytest.approx((400 - line.width) / 2.0)

    def test_right_anchored_lines(self, font):
        block = layout_multiline((400, 500), font, 0.0, 500.0, "right", "#brand\n@me", 1.2, 0.9)

        for line in block.lines:
            assert line.x + line.width == pytest.approx(360.0)

    def test_line_spacing(self, font):
        block = layout_multiline((400, 500), font, 100.0, 500.0, "center", "a\nb\nc", 1.12)
        line_height = block.lines[0].height

        assert [line.y for line in block.lines] == pytest.approx(
            [100.0, 100.0 + line_height * 1.12, 100.0 + 2 * line_height * 1.12]
        )
        assert block.height == pytest.approx(line_height + 2 * line_height * 1.12)
        assert block.width == max(line.width for line in block.lines)

    def test_empty_text(self, font):
        block = layout_multiline((400, 500), font, 100.0, 500.0, "center", "")

        assert block.lines == []
        assert block.width == 0.0
        assert block.height == 0.0
        assert block.top is None

    def test_invalid_arguments(self, font):
        with pytest.raises(ValueError):
            layout_multiline((400, 500), font, 0.0, 500.0, "left", "x")
        with pytest.raises(ValueError):
            layout_multiline((400, 500), font, 0.0, 0.0, "center", "x")


class TestDrawMultiline:
    def test_draws_below_position(self, font):
        image = Image.new("RGBA", (400, 500), (0, 0, 0, 255))

        draw_multiline(image, font, 3500.0, 5000.0, "center", "Hello")

        pixels = np.asarray(image.convert("L"))
        rows = np.nonzero(pixels.max(axis=1))[0]
        assert rows.size > 0
        assert rows.min() >= 350

    def test_empty_text_draws_nothing(self, font):
        image = Image.new("RGBA", (100, 100), (0, 0, 0, 255))

        block = draw_multiline(image, font, 10.0, 100.0, "center", "")

        assert block.lines == []
        assert image.getextrema()[0] == (0, 0)
