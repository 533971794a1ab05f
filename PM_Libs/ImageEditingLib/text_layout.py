"""
Text measurement and multi-line layout for Post Maker.

All five text fields share one layout routine; only the font, size,
anchoring rule, line spacing and position differ per field. Vertical
positions are given in original-image coordinates and scaled to whatever
image is being drawn on, so the same properties render identically on the
500px preview and on the full resolution export.

Example:
    >>> fonts = FontSet.from_config(config)
    >>> font = fonts.get("quote", 25.0)
    >>> block = draw_multiline(image, font, 3500.0, 5000.0, ANCHOR_CENTER,
    ...                        "Stay hungry\\nStay foolish", 1.12)
    >>> block.width, block.height
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from PM_Libs.pillow_compat import ImageDraw, ImageFont
from PM_Libs.constants import (
    ANCHOR_CENTER,
    ANCHOR_RIGHT,
    DEFAULT_TAG_X_POSITION_RATIO,
    FIELD_QUOTE,
    FIELD_SUBQUOTE,
    FIELD_SUBQUOTE2,
    FIELD_TAG,
    FIELD_TAG2,
    QUOTE_LINE_SPACING,
    TAG_LINE_SPACING,
    TEXT_COLOR,
    TEXT_FIELD_NAMES,
)

if TYPE_CHECKING:
    from PM_Libs.ProjStoreLib.config_store import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    """Drawing rules of one text field."""
    name: str
    anchor: str
    boxed: bool = False
    spacing: float = QUOTE_LINE_SPACING


TEXT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec(FIELD_QUOTE, ANCHOR_CENTER, boxed=True),
    FieldSpec(FIELD_SUBQUOTE, ANCHOR_CENTER),
    FieldSpec(FIELD_SUBQUOTE2, ANCHOR_CENTER),
    FieldSpec(FIELD_TAG, ANCHOR_RIGHT, spacing=TAG_LINE_SPACING),
    FieldSpec(FIELD_TAG2, ANCHOR_RIGHT, spacing=TAG_LINE_SPACING),
)


def spacing_factor(spec: FieldSpec, line_spacing: bool) -> float:
    return spec.spacing if line_spacing else 1.0


@dataclass
class LinePlacement:
    text: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class TextBlock:
    """Placed lines of a field plus its bounding size.

    Attributes:
        lines: One placement per text line
        width: Widest line
        height: Sum of line heights, later lines scaled by the spacing factor
    """
    lines: List[LinePlacement] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0

    @property
    def top(self) -> Optional[float]:
        return self.lines[0].y if self.lines else None


# ============================================================================
# Fonts
# ============================================================================

def load_font(path: str, size: float) -> Any:
    """
    Load a TrueType font, falling back to the embedded default font.

    Args:
        path: Font file path ("" selects the embedded font directly)
        size: Font size in pixels

    Returns:
        A Pillow FreeTypeFont; never raises for a missing or bad font file
    """
    if path:
        try:
            return ImageFont.truetype(path, size)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load font '{path}', using embedded font: {e}")
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=64)
def _cached_font(path: str, size: float) -> Any:
    return load_font(path, size)


class FontSet:
    """Per-field fonts, loaded on demand and memoised by (path, size)."""

    def __init__(self, font_paths: Optional[Dict[str, str]] = None):
        font_paths = font_paths or {}
        unknown = set(font_paths) - set(TEXT_FIELD_NAMES)
        if unknown:
            raise ValueError(f"Unknown text fields: {sorted(unknown)}")
        self._paths = {name: font_paths.get(name, "") for name in TEXT_FIELD_NAMES}

    @classmethod
    def from_config(cls, config: "Config") -> "FontSet":
        return cls({name: config.font_path(name) for name in TEXT_FIELD_NAMES})

    def path(self, field_name: str) -> str:
        return self._paths[field_name]

    def get(self, field_name: str, size: float) -> Any:
        if field_name not in self._paths:
            raise ValueError(f"Unknown text field: {field_name}")
        # round so that near-identical sizes share a cache entry
        return _cached_font(self._paths[field_name], max(1.0, round(size, 1)))


# ============================================================================
# Measurement and layout
# ============================================================================

def measure_line(font: Any, text: str) -> Tuple[float, float]:
    """
    Measure one line of text.

    Args:
        font: Sized Pillow font
        text: Single line of text

    Returns:
        (width, height): width is the sum of glyph advances, height is the
        face line height (ascent, descent and line gap) and is the same for
        every line of a font
    """
    width = font.getlength(text) if text else 0.0
    height = getattr(getattr(font, "font", None), "height", None)
    if height is None:
        height = sum(font.getmetrics())
    return float(width), float(height)


def layout_multiline(
    image_size: Tuple[int, int],
    font: Any,
    position: float,
    original_height: float,
    anchor: str,
    text: str,
    spacing: float = 1.0,
    right_margin_ratio: float = DEFAULT_TAG_X_POSITION_RATIO,
) -> TextBlock:
    """
    Place every line of a text field without drawing it.

    Args:
        image_size: (width, height) of the image that will be drawn on
        font: Sized Pillow font
        position: Vertical offset of the first line in original coordinates
        original_height: Height of the original image
        anchor: ANCHOR_CENTER or ANCHOR_RIGHT
        text: Text, possibly multi-line
        spacing: Line spacing factor for lines after the first
        right_margin_ratio: Right edge of right-anchored text as a fraction
                            of the image width

    Returns:
        TextBlock with one placement per line (empty for empty text)

    Raises:
        ValueError: If anchor is unknown or original_height is not positive
    """
    if anchor not in (ANCHOR_CENTER, ANCHOR_RIGHT):
        raise ValueError(f"Unknown anchor: {anchor}")
    if original_height <= 0:
        raise ValueError(f"original_height must be positive, got {original_height}")

    width, height = image_size
    scale = height / original_height
    block = TextBlock()

    for index, line in enumerate(text.splitlines()):
        text_width, text_height = measure_line(font, line)

        if anchor == ANCHOR_CENTER:
            x = (width - text_width) / 2.0
        else:
            x = width * right_margin_ratio - text_width
        y = position * scale + index * text_height * spacing

        block.lines.append(LinePlacement(line, x, y, text_width, text_height))
        block.width = max(block.width, text_width)
        block.height += text_height * (1.0 if index == 0 else spacing)

    return block


def draw_multiline(
    image: Any,
    font: Any,
    position: float,
    original_height: float,
    anchor: str,
    text: str,
    spacing: float = 1.0,
    right_margin_ratio: float = DEFAULT_TAG_X_POSITION_RATIO,
    fill: Tuple[int, int, int, int] = TEXT_COLOR,
) -> TextBlock:
    """
    Lay out and draw a text field on an image, in place.

    Takes the same arguments as layout_multiline plus the target image and
    the text fill color.

    Returns:
        The TextBlock that was drawn
    """
    block = layout_multiline(
        image.size, font, position, original_height, anchor, text, spacing, right_margin_ratio
    )
    if not block.lines:
        return block

    draw = ImageDraw.Draw(image)
    for line in block.lines:
        draw.text((int(line.x), int(line.y)), line.text, font=font, fill=fill)
    return block
