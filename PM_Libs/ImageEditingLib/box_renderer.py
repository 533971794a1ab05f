"""
Decorative box behind the primary quote.

The box is a blurred, darkened copy of the photo region under the quote,
with a soft drop shadow and a thin border whose color is taken from the
panel's own corners. All pixel constants are expressed at original-image
scale and multiplied by the canvas/original ratio, so the box looks the
same on the preview and on the export.

Example:
    >>> block = layout_multiline(canvas.size, font, 3500.0, 5000.0,
    ...                          ANCHOR_CENTER, quote, 1.12)
    >>> if draw_quote_box(canvas, block.width, block.height, 3500.0, (4000.0, 5000.0)):
    ...     draw_multiline(canvas, font, 3500.0, 5000.0, ANCHOR_CENTER, quote, 1.12)
"""

import logging
from typing import Any, Optional, Tuple

import numpy as np

from PM_Libs.pillow_compat import Image, ImageDraw, ImageFilter
from PM_Libs.constants import (
    BORDER_DARKEN_ALPHA,
    BOX_BLUR_RADIUS,
    BOX_GAP,
    BOX_TINT_COLOR,
    SHADOW_BLUR_FACTOR,
    SHADOW_COLOR,
    SHADOW_OFFSET,
)

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]


def panel_rect(
    canvas_size: Tuple[int, int],
    box_width: float,
    box_height: float,
    position: float,
    original_size: Tuple[float, float],
) -> Optional[Rect]:
    """
    Compute the panel rectangle (x, y, w, h) around a centered text block.

    The rectangle is clipped to the canvas. Returns None when the box is
    empty or starts outside the canvas.
    """
    if box_width <= 0:
        return None

    width, height = canvas_size
    original_width, original_height = original_size
    delta_x, delta_y = width / original_width, height / original_height
    x_gap, y_gap = BOX_GAP[0] * delta_x, BOX_GAP[1] * delta_y

    x = max(int((width - box_width) / 2.0 - x_gap), 0)
    y = max(int(position * delta_y - y_gap), 0)
    if x >= width or y >= height:
        return None

    w = min(int(box_width + x_gap * 2.0), width - x)
    h = min(int(box_height + y_gap * 2.0), height - y)
    if w <= 0 or h <= 0:
        return None
    return x, y, w, h


def border_color(panel: Any) -> Tuple[int, int, int, int]:
    """Blend the four corner pixels of the panel into one opaque color."""
    pixels = np.asarray(panel.convert("RGB"), dtype=np.float64)
    corners = pixels[[0, -1, -1, 0], [0, 0, -1, -1]]
    r, g, b = np.rint(corners.mean(axis=0)).astype(int)
    return int(r), int(g), int(b), 255


def _darken(color: Tuple[int, int, int, int], alpha: int) -> Tuple[int, int, int, int]:
    # black blended over the color with the given alpha
    keep = 1.0 - alpha / 255.0
    r, g, b, a = color
    return int(r * keep), int(g * keep), int(b * keep), a


def _composite_at(canvas: Any, overlay: Any, x: int, y: int) -> None:
    """Alpha composite an RGBA overlay onto the canvas, clipping at the edges."""
    source_x, source_y = max(-x, 0), max(-y, 0)
    dest_x, dest_y = max(x, 0), max(y, 0)
    if source_x >= overlay.width or source_y >= overlay.height:
        return
    if dest_x >= canvas.width or dest_y >= canvas.height:
        return
    canvas.alpha_composite(overlay, dest=(dest_x, dest_y), source=(source_x, source_y))


def _hollow_rect(draw: Any, x: int, y: int, w: int, h: int, color: Tuple[int, int, int, int]) -> None:
    if w <= 0 or h <= 0:
        return
    draw.rectangle([x, y, x + w - 1, y + h - 1], outline=color, width=1)


def draw_quote_box(
    canvas: Any,
    box_width: float,
    box_height: float,
    position: float,
    original_size: Tuple[float, float],
) -> bool:
    """
    Draw the decorative box behind a centered text block, in place.

    Args:
        canvas: RGBA image being rendered
        box_width: Widest line of the text block
        box_height: Total height of the text block
        position: Vertical position of the text in original coordinates
        original_size: (width, height) of the original image

    Returns:
        True if the box was drawn, False if it was skipped (empty text or
        a panel outside the canvas)

    Raises:
        ValueError: If canvas is not RGBA
    """
    if canvas.mode != "RGBA":
        raise ValueError(f"canvas must be RGBA, got {canvas.mode}")

    rect = panel_rect(canvas.size, box_width, box_height, position, original_size)
    if rect is None:
        logger.debug("Quote box skipped: empty text or panel outside image")
        return False
    x, y, w, h = rect

    width, height = canvas.size
    delta_x, delta_y = width / original_size[0], height / original_size[1]

    panel = canvas.crop((x, y, x + w, y + h))
    panel = Image.alpha_composite(panel, Image.new("RGBA", panel.size, BOX_TINT_COLOR))
    panel = panel.filter(ImageFilter.GaussianBlur(BOX_BLUR_RADIUS))

    shadow_dx, shadow_dy = int(SHADOW_OFFSET[0] * delta_x), int(SHADOW_OFFSET[1] * delta_y)
    shadow = Image.new("RGBA", (w + shadow_dx * 2, h + shadow_dy * 2), (0, 0, 0, 0))
    _hollow_rect(ImageDraw.Draw(shadow), shadow_dx, shadow_dy, w, h, SHADOW_COLOR)
    shadow_radius = SHADOW_BLUR_FACTOR * delta_x
    if shadow_radius > 0:
        shadow = shadow.filter(ImageFilter.GaussianBlur(shadow_radius))

    _composite_at(canvas, shadow, x - shadow_dx, y - shadow_dy)
    canvas.paste(panel, (x, y))

    color = border_color(panel)
    outset = int(delta_x)
    draw = ImageDraw.Draw(canvas)
    _hollow_rect(draw, x - outset, y - outset, w + outset * 2, h + outset * 2, color)
    _hollow_rect(draw, x, y, w, h, _darken(color, BORDER_DARKEN_ALPHA))
    return True
