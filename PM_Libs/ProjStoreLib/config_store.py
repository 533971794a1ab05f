"""
Configuration profiles for Post Maker.

The configuration file is a JSON object mapping a profile name to a config
object. Every consumer receives a Config value explicitly; there is no
process-wide configuration.

Classes:
    Config: One configuration profile

Functions:
    get_config_dir: Directory holding the configuration and log files
    get_config_path: Path of the configuration file
    load_configs: Load all profiles from a configuration file
    save_configs: Save all profiles to a configuration file
    load_config: Load one profile, creating a default one when missing
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PM_Libs.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_COLOR_LAYER,
    DEFAULT_FONT_RATIOS,
    DEFAULT_IMAGE_FORMAT,
    DEFAULT_IMAGE_RATIO,
    DEFAULT_MAXIMUM_WIDTH_LIMIT,
    DEFAULT_MINIMUM_WIDTH_LIMIT,
    DEFAULT_POSITION_RATIOS,
    DEFAULT_PROFILE_NAME,
    DEFAULT_TAG_X_POSITION_RATIO,
    SUPPORTED_EXPORT_FORMATS,
    TEXT_FIELD_NAMES,
)

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Configuration profile.

    Attributes:
        *_font: Path of the TrueType font per text field ("" = embedded default)
        *_font_ratio: Font size per text field at a 5000px tall image
        *_position_ratio: Default vertical position per field as a fraction of
                          the original image height
        tag_x_position_ratio: Right edge of tag fields as a fraction of width
        image_ratio: Target (width, height) aspect ratio of the card
        color_layer: Default RGBA translucent layer color
        minimum_width_limit: Crops narrower than this are flagged as too small
        maximum_width_limit: Exports wider than this are downscaled
        image_format: Export format, "png" or "jpeg"
        draw_box_around_quote: Draw the decorative box behind the quote
        line_spacing: Add extra spacing between lines of multi-line fields
    """
    quote_font: str = ""
    subquote_font: str = ""
    subquote2_font: str = ""
    tag_font: str = ""
    tag2_font: str = ""
    quote_font_ratio: float = DEFAULT_FONT_RATIOS["quote"]
    subquote_font_ratio: float = DEFAULT_FONT_RATIOS["subquote"]
    subquote2_font_ratio: float = DEFAULT_FONT_RATIOS["subquote2"]
    tag_font_ratio: float = DEFAULT_FONT_RATIOS["tag"]
    tag2_font_ratio: float = DEFAULT_FONT_RATIOS["tag2"]
    quote_position_ratio: float = DEFAULT_POSITION_RATIOS["quote"]
    subquote_position_ratio: float = DEFAULT_POSITION_RATIOS["subquote"]
    subquote2_position_ratio: float = DEFAULT_POSITION_RATIOS["subquote2"]
    tag_position_ratio: float = DEFAULT_POSITION_RATIOS["tag"]
    tag2_position_ratio: float = DEFAULT_POSITION_RATIOS["tag2"]
    tag_x_position_ratio: float = DEFAULT_TAG_X_POSITION_RATIO
    image_ratio: Tuple[float, float] = DEFAULT_IMAGE_RATIO
    color_layer: Tuple[int, int, int, int] = DEFAULT_COLOR_LAYER
    minimum_width_limit: float = DEFAULT_MINIMUM_WIDTH_LIMIT
    maximum_width_limit: float = DEFAULT_MAXIMUM_WIDTH_LIMIT
    image_format: str = DEFAULT_IMAGE_FORMAT
    draw_box_around_quote: bool = False
    line_spacing: bool = True

    def font_path(self, field_name: str) -> str:
        return getattr(self, f"{_check_field(field_name)}_font")

    def font_ratio(self, field_name: str) -> float:
        return getattr(self, f"{_check_field(field_name)}_font_ratio")

    def position_ratio(self, field_name: str) -> float:
        return getattr(self, f"{_check_field(field_name)}_position_ratio")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON friendly dictionary."""
        data = asdict(self)
        data["image_ratio"] = list(self.image_ratio)
        data["color_layer"] = list(self.color_layer)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        Create from dictionary.

        Unknown keys are ignored. A value of the wrong shape falls back to
        that field's default and is logged; the rest of the profile is kept.
        """
        defaults = cls()
        values: Dict[str, Any] = {}
        for config_field in fields(cls):
            if config_field.name not in data:
                continue
            default = getattr(defaults, config_field.name)
            try:
                values[config_field.name] = _coerce(config_field.name, data[config_field.name], default)
            except (TypeError, ValueError) as e:
                logger.warning(f"Invalid config value for '{config_field.name}', using default: {e}")
        return cls(**values)


def _check_field(field_name: str) -> str:
    if field_name not in TEXT_FIELD_NAMES:
        raise ValueError(f"Unknown text field: {field_name}")
    return field_name


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError(f"expected a boolean, got {value!r}")
        return value
    if isinstance(default, str):
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {value!r}")
        if name == "image_format":
            value = value.lower()
            if value == "jpg":
                value = "jpeg"
            if value not in SUPPORTED_EXPORT_FORMATS:
                raise ValueError(f"unsupported image format {value!r}")
        return value
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected a number, got {value!r}")
        return float(value)
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"expected a list, got {value!r}")
    if name == "image_ratio":
        ratio = tuple(float(v) for v in value)
        if len(ratio) != 2 or min(ratio) <= 0:
            raise ValueError(f"expected two positive numbers, got {value!r}")
        return ratio
    if name == "color_layer":
        color = tuple(int(v) for v in value)
        if len(color) != 4 or not all(0 <= c <= 255 for c in color):
            raise ValueError(f"expected four values 0-255, got {value!r}")
        return color
    return value


def get_config_dir(base_dir: Optional[Path] = None) -> Path:
    config_dir = (base_dir or Path.home() / ".config") / CONFIG_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path(base_dir: Optional[Path] = None) -> Path:
    return get_config_dir(base_dir) / CONFIG_FILE_NAME


def load_configs(config_path: Path) -> Dict[str, Config]:
    """
    Load every profile from a configuration file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Mapping of profile name to Config; empty if the file is missing
        or is not a JSON object
    """
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Config file {config_path} is corrupt, ignoring it: {e}")
        return {}

    if not isinstance(payload, dict):
        logger.warning(f"Config file {config_path} is not a profile map, ignoring it")
        return {}

    configs: Dict[str, Config] = {}
    for name, data in payload.items():
        if not isinstance(data, dict):
            logger.warning(f"Config profile '{name}' is not an object, skipping it")
            continue
        configs[str(name)] = Config.from_dict(data)
    return configs


def save_configs(config_path: Path, configs: Dict[str, Config]) -> None:
    payload = {name: config.to_dict() for name, config in configs.items()}
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_config(config_path: Path, profile: str = DEFAULT_PROFILE_NAME) -> Config:
    """
    Load one configuration profile.

    When the profile does not exist, a default profile is added under that
    name and the file is rewritten.

    Args:
        config_path: Path to the configuration file
        profile: Profile name

    Returns:
        The Config for the profile
    """
    configs = load_configs(config_path)
    if profile in configs:
        return configs[profile]

    logger.info(f"Creating default config profile '{profile}' in {config_path}")
    config = Config()
    configs[profile] = config
    try:
        save_configs(config_path, configs)
    except OSError as e:
        logger.warning(f"Can't write config {config_path}: {e}")
    return config
