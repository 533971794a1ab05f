"""
ContainerLib - Open image lifecycle

Modules:
    image_container: One open image with its working buffers
    draw_worker: Single worker thread running draw commands in order
"""

from PM_Libs.ContainerLib.image_container import ImageContainer, open_image
from PM_Libs.ContainerLib.draw_worker import DrawCommand, DrawMessage, DrawWorker

__all__ = [
    "ImageContainer",
    "open_image",
    "DrawCommand",
    "DrawMessage",
    "DrawWorker",
]
