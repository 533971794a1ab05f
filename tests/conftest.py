"""
Pytest configuration and shared fixtures for Post Maker tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import json
from pathlib import Path

import pytest
from PIL import Image

from PM_Libs.ImageEditingLib.image_models import ImageInfo, ImageKind
from PM_Libs.ImageEditingLib.text_layout import FontSet
from PM_Libs.ProjStoreLib.config_store import Config
from PM_Libs.ProjStoreLib.sidecar_store import sidecar_name


@pytest.fixture
def config():
    """Default configuration profile (embedded font, PNG export)."""
    return Config()


@pytest.fixture
def fonts():
    """Embedded default font for every text field."""
    return FontSet()


@pytest.fixture
def make_image(tmp_path):
    """
    Factory writing a solid color source image into tmp_path.

    Returns:
        Callable (name, size, color, image_format) -> ImageInfo
    """
    def _make(name="photo.png", size=(400, 500), color=(90, 120, 150), image_format="PNG"):
        path = tmp_path / name
        Image.new("RGB", size, color).save(path, format=image_format)
        kind = ImageKind.from_pillow_format(image_format)
        return ImageInfo(path=path, kind=kind)

    return _make


@pytest.fixture
def write_sidecar():
    """
    Factory writing a JSON sidecar next to an image.

    Returns:
        Callable (image_info, data) -> Path
    """
    def _write(image_info, data):
        path = image_info.path.with_name(sidecar_name(image_info.path.name))
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
