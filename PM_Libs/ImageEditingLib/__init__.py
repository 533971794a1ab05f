"""
ImageEditingLib - Core image rendering functionality

This module provides the crop geometry, image models, text layout,
decorative box and rendering pipeline of Post Maker.
"""

from PM_Libs.ImageEditingLib.image_models import (
    ImageDecodeError,
    ImageInfo,
    ImageKind,
    RgbaColor,
    list_images,
    load_image,
    resolve_image_info,
)
from PM_Libs.ImageEditingLib.geometry import (
    centered_crop_position,
    clamp_crop_position,
    cropped_size,
    is_too_small,
)
from PM_Libs.ImageEditingLib.text_layout import (
    TEXT_FIELDS,
    FontSet,
    TextBlock,
    draw_multiline,
    layout_multiline,
)
from PM_Libs.ImageEditingLib.box_renderer import draw_quote_box
from PM_Libs.ImageEditingLib.render_pipeline import (
    build_export_frame,
    crop_to_ratio,
    draw_layer_and_text,
    fit_to_maximum_width,
    resize_for_preview,
)

__all__ = [
    "ImageDecodeError",
    "ImageInfo",
    "ImageKind",
    "RgbaColor",
    "list_images",
    "load_image",
    "resolve_image_info",
    "centered_crop_position",
    "clamp_crop_position",
    "cropped_size",
    "is_too_small",
    "TEXT_FIELDS",
    "FontSet",
    "TextBlock",
    "draw_multiline",
    "layout_multiline",
    "draw_quote_box",
    "build_export_frame",
    "crop_to_ratio",
    "draw_layer_and_text",
    "fit_to_maximum_width",
    "resize_for_preview",
]
