"""
Image data models for Post Maker.

This module defines the source-image descriptors and the decode step that
every other component starts from.

Classes:
    ImageKind: Detected image format of a source file
    ImageInfo: A source file path together with its detected kind
    ImageDecodeError: Raised when a source image cannot be decoded

Functions:
    detect_image_kind: Detect the image kind from file content
    resolve_image_info: Build an ImageInfo for a supported image file
    list_images: List the supported images of a directory
    load_image: Decode a source image to RGB

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from PM_Libs.pillow_compat import Image, ImageClass

logger = logging.getLogger(__name__)

RgbaColor = Tuple[int, int, int, int]


class ImageDecodeError(ValueError):
    """Raised when a source image is corrupt or of an unsupported kind."""


class ImageKind(Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    UNSUPPORTED = "none"

    @property
    def extension(self) -> str:
        return {
            ImageKind.JPEG: "jpg",
            ImageKind.PNG: "png",
            ImageKind.WEBP: "webp",
            ImageKind.UNSUPPORTED: "none",
        }[self]

    @classmethod
    def from_pillow_format(cls, pillow_format: Optional[str]) -> "ImageKind":
        return {
            "JPEG": cls.JPEG,
            "MPO": cls.JPEG,  # camera JPEGs with extra frames
            "PNG": cls.PNG,
            "WEBP": cls.WEBP,
        }.get((pillow_format or "").upper(), cls.UNSUPPORTED)


@dataclass(frozen=True)
class ImageInfo:
    path: Path
    kind: ImageKind

    @property
    def name(self) -> str:
        return self.path.name


def detect_image_kind(path: Path) -> ImageKind:
    """
    Detect the kind of an image file from its content.

    The file extension is ignored: a PNG named ``photo.jpg`` is a PNG.

    Args:
        path: Path to the file

    Returns:
        The detected ImageKind, UNSUPPORTED for unreadable or other files
    """
    try:
        with Image.open(path) as img:
            return ImageKind.from_pillow_format(img.format)
    except (OSError, ValueError):
        return ImageKind.UNSUPPORTED


def resolve_image_info(path: Path) -> Optional[ImageInfo]:
    path = Path(path)
    if not path.is_file():
        return None
    kind = detect_image_kind(path)
    if kind is ImageKind.UNSUPPORTED:
        return None
    return ImageInfo(path=path, kind=kind)


def list_images(directory: Path) -> List[ImageInfo]:
    """
    List all supported images in a directory, sorted by file name.

    Args:
        directory: Directory to scan (not recursive)

    Returns:
        ImageInfo for every JPEG, PNG or WebP file found

    Raises:
        OSError: If the directory cannot be read
    """
    directory = Path(directory)
    images: List[ImageInfo] = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        info = resolve_image_info(path)
        if info is not None:
            images.append(info)
    logger.debug(f"Found {len(images)} images in {directory}")
    return images


def load_image(image_info: ImageInfo) -> ImageClass:
    """
    Decode a source image to an RGB Pillow image.

    Args:
        image_info: Image to decode

    Returns:
        Fully loaded RGB image

    Raises:
        ImageDecodeError: If the kind is unsupported or decoding fails
    """
    if image_info.kind is ImageKind.UNSUPPORTED:
        raise ImageDecodeError(f"Unsupported image format: {image_info.path}")

    try:
        with Image.open(image_info.path) as img:
            img.load()
            return img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Failed to decode image {image_info.path}: {e}") from e
