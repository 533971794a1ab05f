"""
ExportLib - Export encoding

This module encodes rendered frames to PNG or JPEG and exports whole
folders of edited images in the background.
"""

from PM_Libs.ExportLib.export_encoder import (
    ExportFormat,
    encode_image,
    export_image,
    get_export_image_path,
)
from PM_Libs.ExportLib.bulk_export import BulkExporter, BulkExportResult

__all__ = [
    "ExportFormat",
    "encode_image",
    "export_image",
    "get_export_image_path",
    "BulkExporter",
    "BulkExportResult",
]
