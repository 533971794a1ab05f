"""
ProjStoreLib - Edit state and file storage

This module holds the live and persisted edit state of an image, the
sidecar property files stored beside each source image, and the
configuration profiles.
"""

from PM_Libs.ProjStoreLib.config_store import (
    Config,
    get_config_dir,
    get_config_path,
    load_config,
    load_configs,
    save_configs,
)
from PM_Libs.ProjStoreLib.properties import (
    ImageProperties,
    ImagePropertiesFile,
    SharedProperties,
)
from PM_Libs.ProjStoreLib.sidecar_store import (
    get_properties_path,
    load_properties_file,
    read_properties_file,
    save_properties_file,
)

__all__ = [
    "Config",
    "get_config_dir",
    "get_config_path",
    "load_config",
    "load_configs",
    "save_configs",
    "ImageProperties",
    "ImagePropertiesFile",
    "SharedProperties",
    "get_properties_path",
    "load_properties_file",
    "read_properties_file",
    "save_properties_file",
]
