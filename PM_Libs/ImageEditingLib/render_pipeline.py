"""
Rendering pipeline for Post Maker quote cards.

Two modes share one drawing routine, draw_layer_and_text:

- Preview: the cropped working image is resized to a fixed 500px height once,
  then every redraw copies it and draws the layer and text on the copy.
- Export: the full resolution decode is cropped at the persisted crop
  position, downscaled to the maximum export width if needed, and only then
  drawn on, so text sharpness follows the output resolution.

Functions:
    apply_translucent_layer: Cover an image with an RGBA color layer
    draw_layer_and_text: Draw the layer, the five text fields and the box
    crop_to_ratio: Ratio crop at an original-space position
    resize_for_preview: Exact resize to the preview height
    fit_to_maximum_width: Downscale to the maximum export width
    build_export_frame: Full resolution export frame
"""

import logging
from typing import TYPE_CHECKING, Any, Optional, Tuple

from PM_Libs.pillow_compat import Image
from PM_Libs.ImageEditingLib.box_renderer import draw_quote_box
from PM_Libs.ImageEditingLib.geometry import (
    clamp_crop_position,
    centered_crop_position,
    cropped_size,
    font_size_for_height,
    height_from_width,
)
from PM_Libs.ImageEditingLib.image_models import RgbaColor
from PM_Libs.ImageEditingLib.text_layout import (
    TEXT_FIELDS,
    FontSet,
    draw_multiline,
    layout_multiline,
    spacing_factor,
)
from PM_Libs.constants import PREVIEW_HEIGHT

if TYPE_CHECKING:
    from PM_Libs.ProjStoreLib.config_store import Config
    from PM_Libs.ProjStoreLib.properties import ImageProperties

logger = logging.getLogger(__name__)

Size = Tuple[float, float]


def apply_translucent_layer(image: Any, color: RgbaColor) -> Any:
    """
    Cover an image with a uniform translucent color.

    Args:
        image: PIL Image (any mode)
        color: RGBA layer color; alpha 0 leaves the photo unchanged

    Returns:
        New RGBA image
    """
    canvas = image.convert("RGBA")
    layer = Image.new("RGBA", canvas.size, tuple(color))
    return Image.alpha_composite(canvas, layer)


def draw_layer_and_text(
    image: Any,
    props: "ImageProperties",
    config: "Config",
    fonts: FontSet,
) -> Any:
    """
    Draw the translucent layer and every text field on a copy of an image.

    Font sizes follow the height of ``image``; positions are read in original
    coordinates and scaled by ``image.height / original_height``. With the
    box flag set, the quote is measured first, the decorative box drawn
    behind it, and the quote drawn on top.

    Args:
        image: Cropped image, preview or export sized
        props: Properties snapshot to render
        config: Configuration profile
        fonts: Fonts per text field

    Returns:
        New RGB image

    Raises:
        ValueError: If props has no original dimension
    """
    original_width, original_height = props.original_dimension
    if original_width <= 0 or original_height <= 0:
        raise ValueError(f"original_dimension must be set, got {props.original_dimension}")

    canvas = apply_translucent_layer(image, props.translucent_layer_color)

    for spec in TEXT_FIELDS:
        text = props.text(spec.name)
        if not text:
            continue

        size = font_size_for_height(config.font_ratio(spec.name), canvas.height)
        font = fonts.get(spec.name, size)
        spacing = spacing_factor(spec, config.line_spacing)
        position = props.position(spec.name)

        if spec.boxed and config.draw_box_around_quote:
            block = layout_multiline(
                canvas.size, font, position, original_height, spec.anchor, text,
                spacing, config.tag_x_position_ratio,
            )
            draw_quote_box(canvas, block.width, block.height, position, props.original_dimension)

        draw_multiline(
            canvas, font, position, original_height, spec.anchor, text,
            spacing, config.tag_x_position_ratio,
        )

    return canvas.convert("RGB")


def crop_to_ratio(
    image: Any,
    ratio: Size,
    original_size: Size,
    position: Optional[Size] = None,
) -> Tuple[Any, Size]:
    """
    Crop an image to the target ratio at a position given in original space.

    The image may be the original itself or a scaled copy of it; the position
    is converted with the image/original scale.

    Args:
        image: PIL Image to crop
        ratio: Target (width, height) ratio
        original_size: (width, height) of the original image
        position: Top-left of the crop in original coordinates, or None to
                  center the crop

    Returns:
        (cropped image, crop position actually used in original coordinates)
    """
    original_width, original_height = original_size
    if position is None:
        x, y = centered_crop_position(original_width, original_height, ratio)
    else:
        x, y = clamp_crop_position(position[0], position[1], original_width, original_height, ratio)

    scaled_width, scaled_height = image.size
    crop_width, crop_height = cropped_size(scaled_width, scaled_height, *ratio)
    cx = int((x * scaled_width) / original_width)
    cy = int((y * scaled_height) / original_height)

    logger.debug(f"Cropping {image.size} at ({cx}, {cy}) to ({crop_width:.0f}, {crop_height:.0f})")
    cropped = image.crop((cx, cy, cx + int(crop_width), cy + int(crop_height)))
    return cropped, (x, y)


def resize_for_preview(image: Any, preview_height: float = PREVIEW_HEIGHT) -> Tuple[Any, Size]:
    """
    Resize an image to the preview height, keeping its aspect ratio.

    Returns:
        (resized image, (width, height) as floats)
    """
    width, height = image.size
    scaled_width = (width * preview_height) / height
    resized = image.resize(
        (max(int(scaled_width), 1), int(preview_height)),
        Image.Resampling.LANCZOS,
    )
    return resized, (scaled_width, float(preview_height))


def fit_to_maximum_width(image: Any, maximum_width: float, ratio: Size) -> Any:
    """Downscale an image with a high quality filter if wider than maximum_width."""
    if image.width <= maximum_width:
        return image
    target = (int(maximum_width), int(height_from_width(maximum_width, ratio)))
    logger.debug(f"Downscaling export frame from {image.size} to {target}")
    return image.resize(target, Image.Resampling.LANCZOS)


def build_export_frame(
    original: Any,
    props: "ImageProperties",
    config: "Config",
    fonts: FontSet,
) -> Any:
    """
    Render the final export frame from the full resolution decode.

    Args:
        original: Full resolution source image
        props: Properties snapshot; its crop position is used (centered if None)
        config: Configuration profile
        fonts: Fonts per text field

    Returns:
        RGB image no wider than config.maximum_width_limit
    """
    frame, _ = crop_to_ratio(original, config.image_ratio, original.size, props.crop_position)
    frame = fit_to_maximum_width(frame, config.maximum_width_limit, config.image_ratio)
    return draw_layer_and_text(frame, props, config, fonts)
