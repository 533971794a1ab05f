"""
Unit tests for image_models module.

Tests format detection, folder listing and decoding.
"""

import pytest
from PIL import Image

from PM_Libs.ImageEditingLib.image_models import (
    ImageDecodeError,
    ImageInfo,
    ImageKind,
    detect_image_kind,
    list_images,
    load_image,
    resolve_image_info,
)


class TestImageKind:
    def test_extensions(self):
        assert ImageKind.JPEG.extension == "jpg"
        assert ImageKind.PNG.extension == "png"
        assert ImageKind.WEBP.extension == "webp"

    def test_from_pillow_format(self):
        assert ImageKind.from_pillow_format("JPEG") is ImageKind.JPEG
        assert ImageKind.from_pillow_format("MPO") is ImageKind.JPEG
        assert ImageKind.from_pillow_format("GIF") is ImageKind.UNSUPPORTED
        assert ImageKind.from_pillow_format(None) is ImageKind.UNSUPPORTED


class TestDetectImageKind:
    def test_detects_from_content_not_extension(self, tmp_path):
        """A PNG named .jpg is still a PNG."""
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (8, 8)).save(path, format="PNG")

        assert detect_image_kind(path) is ImageKind.PNG

    def test_detects_jpeg(self, make_image):
        info = make_image("photo.jpg", image_format="JPEG")
        assert detect_image_kind(info.path) is ImageKind.JPEG

    def test_text_file_is_unsupported(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("not an image")

        assert detect_image_kind(path) is ImageKind.UNSUPPORTED

    def test_missing_file_is_unsupported(self, tmp_path):
        assert detect_image_kind(tmp_path / "missing.png") is ImageKind.UNSUPPORTED


class TestListImages:
    def test_lists_supported_images_sorted(self, tmp_path, make_image):
        make_image("b.png")
        make_image("a.jpg", image_format="JPEG")
        (tmp_path / "readme.txt").write_text("hello")
        (tmp_path / "sub").mkdir()

        images = list_images(tmp_path)

        assert [info.name for info in images] == ["a.jpg", "b.png"]
        assert images[0].kind is ImageKind.JPEG

    def test_resolve_unsupported_returns_none(self, tmp_path):
        path = tmp_path / "readme.txt"
        path.write_text("hello")

        assert resolve_image_info(path) is None
        assert resolve_image_info(tmp_path) is None


class TestLoadImage:
    def test_decodes_to_rgb(self, tmp_path):
        path = tmp_path / "alpha.png"
        Image.new("RGBA", (10, 20), (1, 2, 3, 4)).save(path)

        image = load_image(ImageInfo(path=path, kind=ImageKind.PNG))

        assert image.mode == "RGB"
        assert image.size == (10, 20)

    def test_corrupt_image_raises(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"garbage" * 10)

        with pytest.raises(ImageDecodeError):
            load_image(ImageInfo(path=path, kind=ImageKind.PNG))

    def test_unsupported_kind_raises(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            load_image(ImageInfo(path=tmp_path / "x.gif", kind=ImageKind.UNSUPPORTED))
