"""
PM_Libs - Post Maker Library Modules

This package contains the quote card rendering engine,
organized into specialized sub-packages:

- ImageEditingLib: Geometry, text layout, decorative box and rendering pipeline
- ProjStoreLib: Edit state, sidecar property files and configuration profiles
- ExportLib: PNG/JPEG export encoding and bulk export
- ContainerLib: Per-image lifecycle and the serialized draw worker
"""

__version__ = "0.1.0"
