"""
Container holding one open image and its working buffers.

The container owns the pristine full resolution decode, the cropped and
resized working image, and the rendered preview buffer. Its properties live
in a SharedProperties object so that edit handlers on other threads can
change them between redraws.

Decoding is the only fatal failure. Every file operation after that (write
sidecar, write export, copy, delete) is logged, recorded in ``warnings``
and the session goes on.

Classes:
    ImageContainer: One open image

Functions:
    open_image: Open an image with its sidecar, crop, resize and draw it
"""

import logging
import shutil
from pathlib import Path
from typing import Any, List, Optional, Tuple

from PM_Libs.ImageEditingLib import geometry
from PM_Libs.ImageEditingLib.image_models import ImageInfo, load_image
from PM_Libs.ImageEditingLib.render_pipeline import (
    build_export_frame,
    crop_to_ratio,
    draw_layer_and_text,
    resize_for_preview,
)
from PM_Libs.ImageEditingLib.text_layout import FontSet
from PM_Libs.ExportLib.export_encoder import export_image, get_export_image_path
from PM_Libs.ProjStoreLib.config_store import Config
from PM_Libs.ProjStoreLib.properties import ImagePropertiesFile, SharedProperties
from PM_Libs.ProjStoreLib.sidecar_store import (
    get_properties_path,
    load_properties_file,
    save_properties_file,
    sidecar_name,
)
from PM_Libs.constants import CLONE_SUFFIX

logger = logging.getLogger(__name__)


class ImageContainer:
    """
    One open image.

    Attributes:
        image_info: Source image
        shared: Properties shared with the edit handlers
        config: Configuration profile
        fonts: Fonts per text field
        original: Pristine full resolution decode, never modified
        image: Working image (cropped, then resized for preview)
        buffer: Last rendered preview, None until the first redraw
        warnings: Non-fatal failures of file operations, oldest first

    Example:
        >>> shared = SharedProperties()
        >>> container = ImageContainer(info, shared, config, FontSet.from_config(config))
        >>> container.apply_crop()
        >>> container.apply_resize()
        >>> container.redraw_to_buffer()
    """

    def __init__(
        self,
        image_info: ImageInfo,
        shared: SharedProperties,
        config: Config,
        fonts: FontSet,
    ):
        """
        Decode the source image and seed the shared properties.

        Raises:
            ImageDecodeError: If the source image cannot be decoded
        """
        self.image_info = image_info
        self.shared = shared
        self.config = config
        self.fonts = fonts
        self.warnings: List[str] = []

        self.original = load_image(image_info)
        self.image = self.original.copy()
        self.buffer: Optional[Any] = None

        width, height = self.original.size
        with shared.write() as props:
            props.image_info = image_info
            props.original_dimension = (float(width), float(height))
            props.dimension = (float(width), float(height))
            props.seed_positions(config)

        logger.debug(f"Opened {image_info.path} ({width}x{height}, {image_info.kind.value})")

    # ------------------------------------------------------------------
    # Crop, resize and redraw
    # ------------------------------------------------------------------

    def apply_crop(self) -> Tuple[float, float]:
        """Crop the working image to the configured ratio, centered."""
        return self._crop(None)

    def apply_crop_position(self, x: float, y: float) -> Tuple[float, float]:
        """
        Crop the working image at a position given in original coordinates.

        The position is clamped so the crop stays inside the image.

        Returns:
            The crop position actually used
        """
        return self._crop((x, y))

    def _crop(self, position: Optional[Tuple[float, float]]) -> Tuple[float, float]:
        with self.shared.write() as props:
            self.image, used = crop_to_ratio(
                self.original, self.config.image_ratio, props.original_dimension, position
            )
            props.crop_position = used
            props.dimension = (float(self.image.width), float(self.image.height))
        return used

    def apply_resize(self) -> None:
        """Resize the cropped working image to the preview height."""
        self.image, dimension = resize_for_preview(self.image)
        with self.shared.write() as props:
            props.dimension = dimension

    def redraw_to_buffer(self) -> Any:
        """Render the current properties on the working image into the preview buffer."""
        snapshot = self.shared.snapshot()
        self.buffer = draw_layer_and_text(self.image, snapshot, self.config, self.fonts)
        return self.buffer

    def buffer_bytes(self) -> Optional[bytes]:
        """Raw RGB bytes of the preview buffer, or None before the first redraw."""
        if self.buffer is None:
            return None
        return self.buffer.tobytes()

    def is_too_small(self) -> bool:
        width, height = self.original.size
        return geometry.is_too_small(
            width, height, self.config.image_ratio, self.config.minimum_width_limit
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load_sidecar(self, tag_default: str, tag2_default: str) -> None:
        """Merge the sidecar of the image into the shared properties and mark them saved."""
        props_file = load_properties_file(get_properties_path(self.image_info))
        with self.shared.write() as props:
            props.merge(props_file, tag_default, tag2_default, self.config.color_layer)
            props.is_saved = True

    def save(self) -> bool:
        """
        Write the sidecar, then render and write the export.

        Returns:
            True if both files were written
        """
        snapshot = self.shared.snapshot()
        saved = ImagePropertiesFile.from_properties(snapshot)
        ok = True

        properties_path = get_properties_path(self.image_info)
        try:
            save_properties_file(properties_path, saved)
        except OSError as e:
            self._warn(f"Failed to write properties file {properties_path}: {e}")
            ok = False
        else:
            # edits made while writing stay unsaved
            with self.shared.write() as props:
                if ImagePropertiesFile.from_properties(props) == saved:
                    props.is_saved = True

        try:
            frame = build_export_frame(self.original, snapshot, self.config, self.fonts)
            export_path = get_export_image_path(
                self.image_info, snapshot.name_prefix, self.config.image_format
            )
            export_image(frame, export_path, self.config.image_format)
        except OSError as e:
            self._warn(f"Failed to export {self.image_info.name}: {e}")
            ok = False

        return ok

    def clone_img(self) -> Optional[ImageInfo]:
        """
        Copy the source image, and its sidecar if present, to an unused name.

        ``photo.jpg`` is cloned to ``photo-copy.jpg``, then
        ``photo-copy-copy.jpg`` and so on.

        Returns:
            ImageInfo of the clone, or None if the image could not be copied
        """
        source = self.image_info.path
        stem, suffix = source.stem + CLONE_SUFFIX, source.suffix
        target = source.with_name(f"{stem}{suffix}")
        while target.exists():
            stem += CLONE_SUFFIX
            target = source.with_name(f"{stem}{suffix}")

        try:
            shutil.copyfile(source, target)
        except OSError as e:
            self._warn(f"Failed to clone {source}: {e}")
            return None

        properties_path = get_properties_path(self.image_info)
        if properties_path.exists():
            try:
                shutil.copyfile(properties_path, target.with_name(sidecar_name(target.name)))
            except OSError as e:
                self._warn(f"Failed to clone properties file {properties_path}: {e}")

        logger.info(f"Cloned {source.name} to {target.name}")
        return ImageInfo(path=target, kind=self.image_info.kind)

    def delete(self) -> bool:
        """
        Delete the source image, its sidecar and its export.

        Each file is removed independently; a file that is already gone is
        not an error.

        Returns:
            True if every existing file was removed
        """
        snapshot = self.shared.snapshot()
        paths = [
            self.image_info.path,
            get_properties_path(self.image_info),
            get_export_image_path(
                self.image_info, snapshot.name_prefix, self.config.image_format, create_dir=False
            ),
        ]
        ok = True
        for path in paths:
            if not _remove(path):
                self._warn(f"Failed to delete {path}")
                ok = False
        return ok

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def _remove(path: Path) -> bool:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"unlink {path}: {e}")
        return False
    return True


def open_image(
    image_info: ImageInfo,
    shared: SharedProperties,
    config: Config,
    fonts: FontSet,
    tag_default: str,
    tag2_default: str,
    crop: Optional[Tuple[float, float]] = None,
) -> ImageContainer:
    """
    Open an image ready for display.

    The sidecar is merged, then the image is cropped at ``crop`` if given,
    else at the persisted crop position, else centered; finally it is
    resized for preview and drawn.

    Raises:
        ImageDecodeError: If the source image cannot be decoded
    """
    container = ImageContainer(image_info, shared, config, fonts)
    container.load_sidecar(tag_default, tag2_default)

    if crop is None:
        with shared.read() as props:
            crop = props.crop_position
    if crop is None:
        container.apply_crop()
    else:
        container.apply_crop_position(*crop)

    container.apply_resize()
    container.redraw_to_buffer()
    return container
