"""
Export encoder for Post Maker.

Encodes a rendered frame to PNG or JPEG and writes it to the export
directory next to its source image.

Export layout:
    <source dir>/export/<name_prefix><dashed file name>.<png|jpg>

Classes:
    ExportFormat: Supported export formats

Functions:
    get_export_image_path: Export path of a source image
    get_save_kwargs: Pillow save() arguments for a format
    encode_image: Encode a frame to bytes
    export_image: Encode a frame and write it to disk
"""

import io
import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Union

from PM_Libs.ImageEditingLib.image_models import ImageInfo
from PM_Libs.ProjStoreLib.sidecar_store import dashed_name
from PM_Libs.constants import (
    EXPORT_DIR_NAME,
    FORMAT_JPEG,
    FORMAT_PNG,
    JPEG_QUALITY,
    JPEG_SMOOTHING,
    PNG_COMPRESS_LEVEL,
)

if TYPE_CHECKING:
    from PM_Libs.ProjStoreLib.config_store import Config

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    PNG = FORMAT_PNG
    JPEG = FORMAT_JPEG

    @property
    def extension(self) -> str:
        return "png" if self is ExportFormat.PNG else "jpg"

    @classmethod
    def parse(cls, value: Union[str, "ExportFormat"]) -> "ExportFormat":
        """
        Parse a format name ("png", "jpeg" or "jpg", any case).

        Raises:
            ValueError: If the format is not supported
        """
        if isinstance(value, cls):
            return value
        name = str(value).lower()
        if name == "jpg":
            name = FORMAT_JPEG
        return cls(name)

    @classmethod
    def from_config(cls, config: "Config") -> "ExportFormat":
        return cls.parse(config.image_format)


def get_export_image_path(
    image_info: ImageInfo,
    name_prefix: str,
    image_format: Union[str, ExportFormat],
    create_dir: bool = True,
) -> Path:
    """
    Get the export path of a source image.

    Args:
        image_info: Source image
        name_prefix: Prefix prepended to the exported file name
        image_format: Export format
        create_dir: Create the export directory if it does not exist

    Returns:
        Path of the exported file (which may not exist)

    Raises:
        OSError: If create_dir is set and the directory cannot be created
    """
    export_format = ExportFormat.parse(image_format)
    export_dir = image_info.path.parent / EXPORT_DIR_NAME
    if create_dir:
        export_dir.mkdir(parents=True, exist_ok=True)
    return export_dir / f"{name_prefix}{dashed_name(image_info.name)}.{export_format.extension}"


def get_save_kwargs(image_format: Union[str, ExportFormat]) -> Dict[str, Any]:
    """Get PIL Image.save() kwargs for an export format."""
    export_format = ExportFormat.parse(image_format)
    if export_format is ExportFormat.JPEG:
        return {"format": "JPEG", "quality": JPEG_QUALITY, "smooth": JPEG_SMOOTHING}
    return {"format": "PNG", "compress_level": PNG_COMPRESS_LEVEL}


def encode_image(image: Any, image_format: Union[str, ExportFormat]) -> bytes:
    """
    Encode a rendered frame.

    PNG is written as RGBA with maximum compression; JPEG as RGB at
    quality 100 with light smoothing.

    Args:
        image: PIL Image to encode
        image_format: Export format

    Returns:
        Encoded file content

    Raises:
        TypeError: If image is not a PIL Image
        OSError: If the encoder fails
    """
    if not hasattr(image, "save") or not hasattr(image, "mode"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    export_format = ExportFormat.parse(image_format)
    mode = "RGB" if export_format is ExportFormat.JPEG else "RGBA"
    if image.mode != mode:
        image = image.convert(mode)

    buffer = io.BytesIO()
    try:
        image.save(buffer, **get_save_kwargs(export_format))
    except (OSError, ValueError) as e:
        raise OSError(f"Failed to encode image as {export_format.value}: {e}") from e
    return buffer.getvalue()


def export_image(image: Any, path: Path, image_format: Union[str, ExportFormat]) -> Path:
    """
    Encode a frame and write it to disk.

    The frame is fully encoded before the file is opened, so an encoder
    failure leaves any previous export untouched.

    Args:
        image: PIL Image to export
        path: Destination file
        image_format: Export format

    Returns:
        Path where the image was saved

    Raises:
        OSError: If encoding or writing fails
    """
    data = encode_image(image, image_format)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise OSError(f"Failed to save image to {path}: {e}") from e
    logger.info(f"Exported {path} ({image.width}x{image.height}, {len(data)} bytes)")
    return path
