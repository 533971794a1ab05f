"""
Demonstration of preview and export rendering.

Renders the same quote card twice, once on the 500px preview and once as the
full resolution export, and prints how long each takes. Text and box are
positioned in original-image coordinates, so both outputs look the same.

Run from the repository root:
    python examples/preview_vs_export_demo.py [--box]
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import tempfile
import time

from PIL import Image

from PM_Libs.ContainerLib.image_container import open_image
from PM_Libs.ImageEditingLib.image_models import resolve_image_info
from PM_Libs.ImageEditingLib.text_layout import FontSet
from PM_Libs.ProjStoreLib.config_store import Config
from PM_Libs.ProjStoreLib.properties import SharedProperties


def make_gradient(path, size=(4000, 5000)):
    """Write a vertical gradient photo stand-in."""
    width, height = size
    column = Image.linear_gradient("L").resize((1, height))
    Image.merge("RGB", (column, column, column)).resize((width, height)).save(path)


def main():
    config = Config(draw_box_around_quote="--box" in sys.argv)
    fonts = FontSet.from_config(config)

    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "demo.png"
        make_gradient(source)
        shared = SharedProperties()

        start = time.time()
        container = open_image(resolve_image_info(source), shared, config, fonts, "#postmaker", "")
        print(f"Open + first preview: {time.time() - start:.3f}s")

        with shared.write() as props:
            props.quote = "Stay hungry\nStay foolish"
            props.subquote = "Steve Jobs"

        start = time.time()
        container.redraw_to_buffer()
        print(f"Preview redraw {container.buffer.size}: {time.time() - start:.3f}s")

        start = time.time()
        container.save()
        print(f"Export at {config.maximum_width_limit:.0f}px width: {time.time() - start:.3f}s")

        for warning in container.warnings:
            print(f"warning: {warning}")


if __name__ == "__main__":
    main()
