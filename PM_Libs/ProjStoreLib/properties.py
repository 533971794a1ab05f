"""
Edit state of an open image.

ImageProperties is the live, fully populated state shared between the
rendering pipeline and its observers. ImagePropertiesFile is the persisted
counterpart where every field is optional, so a sidecar file can override
only some fields. Going from the file form to the live form always goes
through ImageProperties.merge.

Classes:
    ImageProperties: Live edit state of one image
    ImagePropertiesFile: Persisted, partially populated edit state
    SharedProperties: Lock-guarded ImageProperties shared between threads

Functions:
    default_position: Default vertical position of a text field
"""

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterator, Optional, Tuple

from PM_Libs.ImageEditingLib.image_models import ImageInfo, RgbaColor
from PM_Libs.ProjStoreLib.config_store import Config
from PM_Libs.constants import TEXT_FIELD_NAMES

Position = Tuple[float, float]


def default_position(field_name: str, original_height: float, config: Config) -> float:
    """Vertical position of a text field derived from the config ratio."""
    return original_height * config.position_ratio(field_name)


@dataclass
class ImageProperties:
    """Live properties of the loaded image.

    Attributes:
        image_info: Source image (not persisted)
        dimension: Current working buffer size after crop/resize
        original_dimension: Decoded source size, set once at open
        crop_position: Top-left of the crop rectangle in original coordinates
        name_prefix: Prefix of the exported file name
        quote, subquote, subquote2, tag, tag2: Text fields
        *_position: Vertical offset of each field in original coordinates
        translucent_layer_color: RGBA color of the layer over the photo
        is_saved: False when there are unsaved edits
    """
    image_info: Optional[ImageInfo] = None
    dimension: Position = (0.0, 0.0)
    original_dimension: Position = (0.0, 0.0)
    crop_position: Optional[Position] = None
    name_prefix: str = ""
    quote: str = ""
    subquote: str = ""
    subquote2: str = ""
    tag: str = ""
    tag2: str = ""
    quote_position: float = 0.0
    subquote_position: float = 0.0
    subquote2_position: float = 0.0
    tag_position: float = 0.0
    tag2_position: float = 0.0
    translucent_layer_color: RgbaColor = (0, 0, 0, 0)
    is_saved: bool = True

    def copy(self) -> "ImageProperties":
        return copy.copy(self)

    def text(self, field_name: str) -> str:
        return getattr(self, _check_field(field_name))

    def position(self, field_name: str) -> float:
        return getattr(self, f"{_check_field(field_name)}_position")

    def seed_positions(self, config: Config) -> None:
        """Set every field position to its config default for the original height."""
        height = self.original_dimension[1]
        for field_name in TEXT_FIELD_NAMES:
            setattr(self, f"{field_name}_position", default_position(field_name, height, config))

    def reset_position(self, field_name: str, config: Config) -> float:
        position = default_position(field_name, self.original_dimension[1], config)
        setattr(self, f"{_check_field(field_name)}_position", position)
        self.is_saved = False
        return position

    def reset_translucent_layer(self, config: Config) -> RgbaColor:
        self.translucent_layer_color = tuple(config.color_layer)
        self.is_saved = False
        return self.translucent_layer_color

    def merge(
        self,
        props: "ImagePropertiesFile",
        tag_default: str,
        tag2_default: str,
        color_default: RgbaColor,
    ) -> None:
        """
        Merge a persisted properties file into the live state.

        A value present in the file always wins. For an absent field the
        fallback is, in order: the caller default for tag and tag2, the
        current value for the position fields, and the config default for
        the translucent layer color. Absent crop position becomes None and
        absent name prefix and quotes become empty.

        Merging the same file twice gives the same state as merging once.

        Args:
            props: Persisted properties, possibly partial
            tag_default: Tag used when the file has none
            tag2_default: Second tag used when the file has none
            color_default: Layer color used when the file has none
        """
        self.crop_position = props.crop_position
        self.name_prefix = _or(props.name_prefix, "")
        self.quote = _or(props.quote, "")
        self.subquote = _or(props.subquote, "")
        self.subquote2 = _or(props.subquote2, "")
        self.tag = _or(props.tag, tag_default)
        self.tag2 = _or(props.tag2, tag2_default)
        self.quote_position = _or(props.quote_position, self.quote_position)
        self.subquote_position = _or(props.subquote_position, self.subquote_position)
        self.subquote2_position = _or(props.subquote2_position, self.subquote2_position)
        self.tag_position = _or(props.tag_position, self.tag_position)
        self.tag2_position = _or(props.tag2_position, self.tag2_position)
        self.translucent_layer_color = tuple(_or(props.translucent_layer_color, color_default))


def _or(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value


def _check_field(field_name: str) -> str:
    if field_name not in TEXT_FIELD_NAMES:
        raise ValueError(f"Unknown text field: {field_name}")
    return field_name


@dataclass
class ImagePropertiesFile:
    """Structure of the sidecar properties file; every field is optional."""
    crop_position: Optional[Position] = None
    name_prefix: Optional[str] = None
    quote: Optional[str] = None
    subquote: Optional[str] = None
    subquote2: Optional[str] = None
    tag: Optional[str] = None
    tag2: Optional[str] = None
    quote_position: Optional[float] = None
    subquote_position: Optional[float] = None
    subquote2_position: Optional[float] = None
    tag_position: Optional[float] = None
    tag2_position: Optional[float] = None
    translucent_layer_color: Optional[RgbaColor] = None

    @classmethod
    def from_properties(cls, props: ImageProperties) -> "ImagePropertiesFile":
        return cls(
            crop_position=props.crop_position,
            name_prefix=props.name_prefix,
            quote=props.quote,
            subquote=props.subquote,
            subquote2=props.subquote2,
            tag=props.tag,
            tag2=props.tag2,
            quote_position=props.quote_position,
            subquote_position=props.subquote_position,
            subquote2_position=props.subquote2_position,
            tag_position=props.tag_position,
            tag2_position=props.tag2_position,
            translucent_layer_color=tuple(props.translucent_layer_color),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON friendly dictionary (absent fields become null)."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if self.crop_position is not None:
            data["crop_position"] = list(self.crop_position)
        if self.translucent_layer_color is not None:
            data["translucent_layer_color"] = list(self.translucent_layer_color)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImagePropertiesFile":
        """
        Create from a parsed sidecar dictionary.

        Unknown keys are ignored and null values count as absent.

        Raises:
            ValueError: If data is not an object or a value has the wrong shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Properties must be a JSON object, got {type(data).__name__}")

        values: Dict[str, Any] = {}
        for key in ("name_prefix",) + TEXT_FIELD_NAMES:
            value = data.get(key)
            if value is not None:
                if not isinstance(value, str):
                    raise ValueError(f"'{key}' must be a string, got {value!r}")
                values[key] = value

        for key in (f"{name}_position" for name in TEXT_FIELD_NAMES):
            value = data.get(key)
            if value is not None:
                values[key] = _as_number(key, value)

        crop_position = data.get("crop_position")
        if crop_position is not None:
            if not isinstance(crop_position, (list, tuple)) or len(crop_position) != 2:
                raise ValueError(f"'crop_position' must be [x, y], got {crop_position!r}")
            values["crop_position"] = tuple(_as_number("crop_position", v) for v in crop_position)

        color = data.get("translucent_layer_color")
        if color is not None:
            if not isinstance(color, (list, tuple)) or len(color) != 4:
                raise ValueError(f"'translucent_layer_color' must be [r, g, b, a], got {color!r}")
            channels = tuple(int(_as_number("translucent_layer_color", c)) for c in color)
            if not all(0 <= c <= 255 for c in channels):
                raise ValueError(f"'translucent_layer_color' values must be 0-255, got {color!r}")
            values["translucent_layer_color"] = channels

        return cls(**values)


def _as_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    return float(value)


class SharedProperties:
    """
    ImageProperties shared by reference between the draw worker and observers.

    Edit handlers hold ``write()`` briefly to change a field; the display path
    holds ``read()`` briefly to read the dimension. Both sides use the same
    re-entrant lock.

    Example:
        >>> shared = SharedProperties()
        >>> with shared.write() as props:
        ...     props.quote = "Stay hungry"
        ...     props.is_saved = False
    """

    def __init__(self, properties: Optional[ImageProperties] = None):
        self._properties = properties if properties is not None else ImageProperties()
        self._lock = threading.RLock()

    @contextmanager
    def read(self) -> Iterator[ImageProperties]:
        with self._lock:
            yield self._properties

    @contextmanager
    def write(self) -> Iterator[ImageProperties]:
        with self._lock:
            yield self._properties

    def snapshot(self) -> ImageProperties:
        with self._lock:
            return self._properties.copy()

    def replace(self, properties: ImageProperties) -> None:
        with self._lock:
            self._properties = properties
