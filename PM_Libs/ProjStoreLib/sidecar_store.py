"""
Sidecar property files for Post Maker.

Every source image may have a JSON sidecar next to it storing its persisted
edit state. A missing sidecar, or a missing field inside one, is not an error.

Functions:
    dashed_name: File name with its last '.' replaced by '-'
    sidecar_name: Sidecar file name for an image file name
    get_properties_path: Path of the sidecar of an image
    read_properties_file: Strict read, None when absent or corrupt
    load_properties_file: Lenient read that repairs corrupt sidecars
    save_properties_file: Write a sidecar
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Optional

from PM_Libs.ImageEditingLib.image_models import ImageInfo
from PM_Libs.ProjStoreLib.properties import ImagePropertiesFile
from PM_Libs.constants import PROPERTIES_EXTENSION

logger = logging.getLogger(__name__)


def dashed_name(file_name: str) -> str:
    """Replace the last '.' of a file name with '-' (``a.b.jpg`` -> ``a.b-jpg``)."""
    stem, dot, extension = file_name.rpartition(".")
    if not dot:
        return file_name
    return f"{stem}-{extension}"


def sidecar_name(file_name: str) -> str:
    return f"{dashed_name(file_name)}{PROPERTIES_EXTENSION}"


def get_properties_path(image_info: ImageInfo) -> Path:
    """
    Get the sidecar path of an image.

    The sidecar of ``photo.jpg`` is ``photo-jpg.prop``, so ``photo.jpg`` and
    ``photo.png`` never share one. A sidecar still using the older
    ``photo.prop`` name is moved to the new name.

    Args:
        image_info: Source image

    Returns:
        Path of the sidecar (which may not exist)
    """
    image_path = image_info.path
    default_path = image_path.with_name(sidecar_name(image_path.name))
    if default_path.exists():
        return default_path

    legacy_path = image_path.with_suffix(PROPERTIES_EXTENSION)
    if legacy_path != default_path and legacy_path.exists():
        try:
            shutil.copyfile(legacy_path, default_path)
        except OSError as e:
            logger.warning(f"Failed to copy deprecated properties file {legacy_path}: {e}")
            return default_path
        try:
            legacy_path.unlink()
        except OSError as e:
            logger.warning(f"Failed to delete deprecated properties file {legacy_path}: {e}")

    return default_path


def _parse(path: Path) -> ImagePropertiesFile:
    payload = json.loads(path.read_text(encoding="utf-8"))
    return ImagePropertiesFile.from_dict(payload)


def read_properties_file(path: Path) -> Optional[ImagePropertiesFile]:
    """
    Read a sidecar without repairing it.

    Returns:
        The parsed file, or None if it is absent, unreadable or corrupt
    """
    if not path.exists():
        return None
    try:
        return _parse(path)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Skipping unreadable properties file {path}: {e}")
        return None


def load_properties_file(path: Path, fix_corrupt: bool = True) -> ImagePropertiesFile:
    """
    Read a sidecar, falling back to an empty one.

    Args:
        path: Sidecar path
        fix_corrupt: Delete a corrupt sidecar so defaults are restored

    Returns:
        The parsed file, or an empty ImagePropertiesFile when the sidecar is
        absent or corrupt
    """
    try:
        return _parse(path)
    except FileNotFoundError:
        return ImagePropertiesFile()
    except (OSError, UnicodeDecodeError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning(f"Properties file {path} is corrupt: {e}")
        if fix_corrupt:
            try:
                path.unlink()
            except OSError as unlink_error:
                logger.warning(f"Failed to delete image properties file {path}: {unlink_error}")
        return ImagePropertiesFile()


def save_properties_file(path: Path, props_file: ImagePropertiesFile) -> None:
    """
    Write a sidecar.

    Raises:
        OSError: If the file cannot be written
    """
    path.write_text(json.dumps(props_file.to_dict()), encoding="utf-8")
