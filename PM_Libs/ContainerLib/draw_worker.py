"""
Single draw worker consuming an ordered command queue.

All decode, crop, draw, encode, save, clone and delete work runs on one
daemon thread, one command at a time, so the working image and the shared
properties are only ever mutated by that thread (edit handlers excepted,
which hold the properties write lock briefly and then send REDRAW_TO_BUFFER
and FLUSH).

Classes:
    DrawCommand: Commands understood by the worker
    DrawMessage: One queued command with its arguments
    DrawWorker: The worker thread
"""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from PM_Libs.ImageEditingLib.image_models import ImageDecodeError, ImageInfo
from PM_Libs.ImageEditingLib.text_layout import FontSet
from PM_Libs.ContainerLib.image_container import ImageContainer, open_image
from PM_Libs.ProjStoreLib.config_store import Config
from PM_Libs.ProjStoreLib.properties import SharedProperties

logger = logging.getLogger(__name__)

FlushCallback = Callable[[Optional[bytes], Tuple[float, float]], None]


class DrawCommand(Enum):
    OPEN = "open"
    CHANGE_CROP = "change_crop"
    REDRAW_TO_BUFFER = "redraw_to_buffer"
    FLUSH = "flush"
    SAVE = "save"
    CLONE = "clone"
    DELETE = "delete"


@dataclass(frozen=True)
class DrawMessage:
    command: DrawCommand
    image_info: Optional[ImageInfo] = None
    crop: Optional[Tuple[float, float]] = None


_STOP = object()


def _ignore(*args: Any) -> None:
    pass


class DrawWorker:
    """
    Worker thread owning the open ImageContainer.

    Commands that need an open image are ignored (with a debug log) while no
    image is open. An exception raised by a command is logged and reported
    through ``on_error``; the worker keeps draining the queue.

    Example:
        >>> worker = DrawWorker(shared, config, fonts, on_flush=show_preview)
        >>> worker.start()
        >>> worker.send(DrawMessage(DrawCommand.OPEN, image_info=info))
        >>> worker.send(DrawMessage(DrawCommand.FLUSH))
        >>> worker.stop()
        >>> worker.join()
    """

    def __init__(
        self,
        shared: SharedProperties,
        config: Config,
        fonts: FontSet,
        on_flush: Optional[FlushCallback] = None,
        on_status: Optional[Callable[[str], None]] = None,
        on_warning: Optional[Callable[[str], None]] = None,
        on_cloned: Optional[Callable[[ImageInfo], None]] = None,
        on_deleted: Optional[Callable[[ImageInfo], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.shared = shared
        self.config = config
        self.fonts = fonts
        self.on_flush = on_flush or _ignore
        self.on_status = on_status or _ignore
        self.on_warning = on_warning or _ignore
        self.on_cloned = on_cloned or _ignore
        self.on_deleted = on_deleted or _ignore
        self.on_error = on_error or _ignore

        self.container: Optional[ImageContainer] = None
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread = threading.Thread(target=self._run, name="draw-worker", daemon=True)
        self._handlers: Dict[DrawCommand, Callable[[DrawMessage], None]] = {
            DrawCommand.OPEN: self._open,
            DrawCommand.CHANGE_CROP: self._change_crop,
            DrawCommand.REDRAW_TO_BUFFER: self._redraw,
            DrawCommand.FLUSH: self._flush,
            DrawCommand.SAVE: self._save,
            DrawCommand.CLONE: self._clone,
            DrawCommand.DELETE: self._delete,
        }

    def start(self) -> None:
        self._thread.start()

    def send(self, message: DrawMessage) -> None:
        """Queue a command; commands run strictly in the order they were sent."""
        if not isinstance(message, DrawMessage):
            raise TypeError(f"Expected DrawMessage, got {type(message)}")
        self._queue.put(message)

    def stop(self) -> None:
        """Stop the worker once every command already queued has run."""
        self._queue.put(_STOP)

    def wait_idle(self) -> None:
        """Block until every command sent so far has run."""
        self._queue.join()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            try:
                if message is _STOP:
                    return
                self._dispatch(message)
            finally:
                self._queue.task_done()

    def _dispatch(self, message: DrawMessage) -> None:
        logger.debug(f"Draw command {message.command.value}")
        try:
            self._handlers[message.command](message)
        except Exception as e:
            logger.exception(f"Draw command {message.command.value} failed: {e}")
            self.on_error(e)

    def _require_container(self, message: DrawMessage) -> Optional[ImageContainer]:
        if self.container is None:
            logger.debug(f"Ignoring {message.command.value}: no image open")
        return self.container

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _open(self, message: DrawMessage) -> None:
        if message.image_info is None:
            raise ValueError("OPEN requires image_info")

        self.on_status("Loading...")
        with self.shared.read() as props:
            tag_default, tag2_default = props.tag, props.tag2

        try:
            self.container = open_image(
                message.image_info, self.shared, self.config, self.fonts,
                tag_default, tag2_default, message.crop,
            )
        except ImageDecodeError as e:
            self.container = None
            logger.error(f"Failed to open {message.image_info.path}: {e}")
            self.on_error(e)
            self.on_flush(None, (0.0, 0.0))
            return
        finally:
            self.on_status("")

        if self.container.is_too_small():
            self._warn(f"{message.image_info.name} is smaller than the minimum export width")

    def _change_crop(self, message: DrawMessage) -> None:
        container = self._require_container(message)
        if container is None:
            return
        if message.crop is None:
            container.apply_crop()
        else:
            container.apply_crop_position(*message.crop)
        container.apply_resize()
        with self.shared.write() as props:
            props.is_saved = False
        container.redraw_to_buffer()

    def _redraw(self, message: DrawMessage) -> None:
        container = self._require_container(message)
        if container is not None:
            container.redraw_to_buffer()

    def _flush(self, message: DrawMessage) -> None:
        with self.shared.read() as props:
            dimension = props.dimension
        data = self.container.buffer_bytes() if self.container is not None else None
        self.on_flush(data, dimension)

    def _save(self, message: DrawMessage) -> None:
        container = self._require_container(message)
        if container is None:
            return
        self.on_status("Saving...")
        try:
            self._collect_warnings(container, container.save)
        finally:
            self.on_status("")

    def _clone(self, message: DrawMessage) -> None:
        container = self._require_container(message)
        if container is None:
            return
        cloned = self._collect_warnings(container, container.clone_img)
        if cloned is not None:
            self.on_cloned(cloned)

    def _delete(self, message: DrawMessage) -> None:
        container = self._require_container(message)
        if container is None:
            return
        self._collect_warnings(container, container.delete)
        self.container = None
        self.on_deleted(container.image_info)

    def _collect_warnings(self, container: ImageContainer, operation: Callable[[], Any]) -> Any:
        start = len(container.warnings)
        result = operation()
        for warning in container.warnings[start:]:
            self.on_warning(warning)
        return result

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.on_warning(message)
