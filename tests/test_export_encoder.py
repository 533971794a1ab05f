"""
Tests for the export encoder.

Tests cover:
- Export format parsing
- Export path layout and lazy directory creation
- PNG and JPEG encoding
- Writing files and encoder failures
"""

import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from PIL import Image

from PM_Libs.ExportLib.export_encoder import (
    ExportFormat,
    encode_image,
    export_image,
    get_export_image_path,
    get_save_kwargs,
)
from PM_Libs.ImageEditingLib.image_models import ImageInfo, ImageKind
from PM_Libs.ProjStoreLib.config_store import Config


class TestExportFormat(unittest.TestCase):
    def test_extensions(self):
        self.assertEqual(ExportFormat.PNG.extension, "png")
        self.assertEqual(ExportFormat.JPEG.extension, "jpg")

    def test_parse(self):
        self.assertIs(ExportFormat.parse("JPG"), ExportFormat.JPEG)
        self.assertIs(ExportFormat.parse("jpeg"), ExportFormat.JPEG)
        self.assertIs(ExportFormat.parse(ExportFormat.PNG), ExportFormat.PNG)
        with self.assertRaises(ValueError):
            ExportFormat.parse("gif")

    def test_from_config(self):
        self.assertIs(ExportFormat.from_config(Config(image_format="jpeg")), ExportFormat.JPEG)

    def test_save_kwargs(self):
        self.assertEqual(get_save_kwargs("png"), {"format": "PNG", "compress_level": 9})
        self.assertEqual(get_save_kwargs("jpeg"), {"format": "JPEG", "quality": 100, "smooth": 1})


class TestExportPath(unittest.TestCase):
    """Test export path layout."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)
        self.info = ImageInfo(path=self.base / "my.photo.jpg", kind=ImageKind.JPEG)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_export_path_layout(self):
        path = get_export_image_path(self.info, "ig_", "png")

        self.assertEqual(path, self.base / "export" / "ig_my.photo-jpg.png")
        self.assertTrue(path.parent.is_dir())

    def test_jpeg_extension(self):
        self.assertEqual(get_export_image_path(self.info, "", "jpeg").name, "my.photo-jpg.jpg")

    def test_directory_not_created_on_request(self):
        path = get_export_image_path(self.info, "", "png", create_dir=False)

        self.assertFalse(path.parent.exists())


class TestEncodeImage(unittest.TestCase):
    """Test in-memory encoding."""

    def test_png_is_rgba(self):
        data = encode_image(Image.new("RGB", (20, 10), (1, 2, 3)), "png")

        self.assertTrue(data.startswith(b"\x89PNG"))
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.mode, "RGBA")
            self.assertEqual(img.getpixel((0, 0)), (1, 2, 3, 255))

    def test_jpeg_is_rgb(self):
        data = encode_image(Image.new("RGBA", (20, 10), (200, 10, 10, 255)), ExportFormat.JPEG)

        self.assertTrue(data.startswith(b"\xff\xd8"))
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.mode, "RGB")
            self.assertEqual(img.size, (20, 10))

    def test_rejects_non_image(self):
        with self.assertRaises(TypeError):
            encode_image("not an image", "png")

    def test_encoder_failure_is_os_error(self):
        with mock.patch.object(Image.Image, "save", side_effect=ValueError("encoder error")):
            with self.assertRaises(OSError):
                encode_image(Image.new("RGB", (4, 4)), "png")


class TestExportImage(unittest.TestCase):
    """Test writing exports."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_writes_file(self):
        target = self.base / "export" / "card.jpg"

        result = export_image(Image.new("RGB", (30, 20)), target, "jpeg")

        self.assertEqual(result, target)
        with Image.open(target) as img:
            self.assertEqual(img.size, (30, 20))

    def test_failed_encode_keeps_previous_export(self):
        target = self.base / "card.png"
        target.write_bytes(b"previous")

        with mock.patch.object(Image.Image, "save", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                export_image(Image.new("RGB", (4, 4)), target, "png")

        self.assertEqual(target.read_bytes(), b"previous")


if __name__ == "__main__":
    unittest.main()
