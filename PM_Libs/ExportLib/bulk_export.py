"""
Bulk export of every edited image of a folder.

The exporter runs on its own thread and checks a cooperative cancel flag
between images, so a cancel takes effect after the current save at the
latest and never interrupts an encode.

Only images that were edited before are exported: an image is skipped if
it cannot be decoded, has no readable sidecar, or its quote is blank.

Example:
    >>> exporter = BulkExporter(list_images(folder), config, FontSet.from_config(config))
    >>> future = exporter.start()
    >>> result = future.result()
    >>> print(f"{len(result.exported)} exported, {len(result.skipped)} skipped")
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

from PM_Libs.ImageEditingLib.image_models import ImageDecodeError, ImageInfo
from PM_Libs.ImageEditingLib.text_layout import FontSet
from PM_Libs.ProjStoreLib.config_store import Config
from PM_Libs.ProjStoreLib.properties import SharedProperties
from PM_Libs.ProjStoreLib.sidecar_store import get_properties_path, read_properties_file

if TYPE_CHECKING:
    from PM_Libs.ContainerLib.image_container import ImageContainer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class BulkExportResult:
    exported: List[ImageInfo] = field(default_factory=list)
    skipped: List[ImageInfo] = field(default_factory=list)
    cancelled: bool = False
    warnings: List[str] = field(default_factory=list)


class BulkExporter:
    """Export a list of images one after another on a background thread."""

    def __init__(
        self,
        images: Sequence[ImageInfo],
        config: Config,
        fonts: FontSet,
        progress: Optional[ProgressCallback] = None,
    ):
        self.images = list(images)
        self.config = config
        self.fonts = fonts
        self.progress = progress
        self._cancel = threading.Event()
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None
        self._future: Optional[concurrent.futures.Future] = None

    def start(self) -> concurrent.futures.Future:
        """
        Start exporting in the background.

        Returns:
            Future resolving to a BulkExportResult

        Raises:
            RuntimeError: If the export was already started
        """
        if self._future is not None:
            raise RuntimeError("Bulk export already started")
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="bulk-export"
        )
        self._future = self._executor.submit(self.run)
        self._executor.shutdown(wait=False)
        return self._future

    def cancel(self) -> None:
        """Ask the export to stop before the next image."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def finished(self) -> bool:
        return self._future is not None and self._future.done()

    def run(self) -> BulkExportResult:
        """Export every image on the calling thread."""
        result = BulkExportResult()
        total = len(self.images)
        logger.info(f"Bulk export of {total} images started")

        for index, image_info in enumerate(self.images):
            if self._cancel.is_set():
                result.cancelled = True
                logger.info(f"Bulk export cancelled after {index} of {total} images")
                break

            container = self._export_one(image_info, result)
            if container is None:
                result.skipped.append(image_info)
            else:
                result.warnings.extend(container.warnings)
                if container.warnings:
                    result.skipped.append(image_info)
                else:
                    result.exported.append(image_info)

            if self.progress is not None:
                self.progress(index + 1, total, image_info.name)

        logger.info(
            f"Bulk export finished: {len(result.exported)} exported, {len(result.skipped)} skipped"
        )
        return result

    def _export_one(self, image_info: ImageInfo, result: BulkExportResult) -> Optional["ImageContainer"]:
        # imported here, ContainerLib depends on ExportLib
        from PM_Libs.ContainerLib.image_container import ImageContainer

        props_file = read_properties_file(get_properties_path(image_info))
        if props_file is None:
            logger.debug(f"Skipping {image_info.name}: no properties file")
            return None
        if not (props_file.quote or "").strip():
            logger.debug(f"Skipping {image_info.name}: empty quote")
            return None

        shared = SharedProperties()
        try:
            container = ImageContainer(image_info, shared, self.config, self.fonts)
        except ImageDecodeError as e:
            message = f"Skipping {image_info.name}: {e}"
            logger.warning(message)
            result.warnings.append(message)
            return None

        with shared.write() as props:
            props.merge(props_file, "", "", self.config.color_layer)

        container.save()
        return container
