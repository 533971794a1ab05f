"""
Aspect-ratio crop geometry for Post Maker.

All functions are pure and work in floating point. The same computation is
used at full resolution (export) and at preview resolution, so the two
crops differ only by scale.

Functions:
    cropped_size: Largest ratio-correct size that fits inside an image
    width_from_height: Width matching a height for a ratio
    height_from_width: Height matching a width for a ratio
    is_too_small: Check a source photo against the minimum export width
    centered_crop_position: Top-left of a centered ratio crop
    clamp_crop_position: Keep a crop rectangle inside the image
    font_size_for_height: Scale a reference font ratio to an image height
"""

from typing import Tuple

from PM_Libs.constants import FONT_REFERENCE_HEIGHT

Ratio = Tuple[float, float]


def _check_ratio(ratio_w: float, ratio_h: float) -> None:
    if ratio_w <= 0 or ratio_h <= 0:
        raise ValueError(f"image ratio must be positive, got ({ratio_w}, {ratio_h})")


def width_from_height(height: float, ratio: Ratio) -> float:
    ratio_w, ratio_h = ratio
    _check_ratio(ratio_w, ratio_h)
    return (ratio_w * height) / ratio_h


def height_from_width(width: float, ratio: Ratio) -> float:
    ratio_w, ratio_h = ratio
    _check_ratio(ratio_w, ratio_h)
    return (ratio_h * width) / ratio_w


def cropped_size(width: float, height: float, ratio_w: float, ratio_h: float) -> Tuple[float, float]:
    """
    Get the size of the largest crop with the given ratio.

    Args:
        width: Image width
        height: Image height
        ratio_w: Ratio width component
        ratio_h: Ratio height component

    Returns:
        (crop_width, crop_height), never larger than (width, height)

    Raises:
        ValueError: If a ratio component is not positive
    """
    ratio = (ratio_w, ratio_h)
    if width > width_from_height(height, ratio):
        # height is the limiting dimension
        return width_from_height(height, ratio), float(height)
    return float(width), height_from_width(width, ratio)


def is_too_small(width: float, height: float, ratio: Ratio, minimum_width_limit: float) -> bool:
    """Check whether the ratio crop of an image is narrower than the export minimum."""
    crop_width, _ = cropped_size(width, height, *ratio)
    return crop_width < minimum_width_limit


def centered_crop_position(width: float, height: float, ratio: Ratio) -> Tuple[float, float]:
    crop_width, crop_height = cropped_size(width, height, *ratio)
    return (width - crop_width) / 2.0, (height - crop_height) / 2.0


def clamp_crop_position(x: float, y: float, width: float, height: float, ratio: Ratio) -> Tuple[float, float]:
    """
    Clamp a crop position so the ratio crop stays inside the image.

    Args:
        x: Requested left edge
        y: Requested top edge
        width: Image width
        height: Image height
        ratio: Target (width, height) ratio

    Returns:
        (x, y) moved the minimum distance needed to keep the crop in bounds
    """
    crop_width, crop_height = cropped_size(width, height, *ratio)
    x = min(max(x, 0.0), max(width - crop_width, 0.0))
    y = min(max(y, 0.0), max(height - crop_height, 0.0))
    return x, y


def font_size_for_height(font_ratio: float, height: float) -> float:
    # font ratios are sizes at a 5000px tall reference image
    return (height * font_ratio) / FONT_REFERENCE_HEIGHT
