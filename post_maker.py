"""
Post Maker command line.

Usage:
    post_maker.py list DIR
    post_maker.py export DIR
    post_maker.py render IMAGE [--tag TAG] [--tag2 TAG2]

Options common to every command:
    --config FILE    Configuration file (default: ~/.config/post_maker/post_maker.config)
    --profile NAME   Configuration profile (default: "default")
    --verbose        Log debug messages
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PM_Libs.ImageEditingLib.image_models import (
    ImageDecodeError,
    list_images,
    resolve_image_info,
)
from PM_Libs.ImageEditingLib.geometry import is_too_small
from PM_Libs.ImageEditingLib.text_layout import FontSet
from PM_Libs.ContainerLib.image_container import open_image
from PM_Libs.ExportLib.bulk_export import BulkExporter
from PM_Libs.ProjStoreLib.config_store import Config, get_config_path, load_config
from PM_Libs.ProjStoreLib.properties import SharedProperties
from PM_Libs.constants import DEFAULT_PROFILE_NAME, LOG_FILE_NAME
from PM_Libs.pillow_compat import Image

logger = logging.getLogger("post_maker")


def setup_logging(log_file: Optional[Path], level: int = logging.INFO) -> None:
    """Log to the console and, when possible, to log_file."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    root_logger.addHandler(console_handler)

    if log_file is None:
        return
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.warning(f"Could not create log file: {e}. Logging to console only.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="post_maker", description="Render quote cards from photos.")
    parser.add_argument("--config", type=Path, help="Configuration file.")
    parser.add_argument("--profile", default=DEFAULT_PROFILE_NAME, help="Configuration profile.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages.")

    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", help="List the supported images of a folder.")
    list_parser.add_argument("directory", type=Path)

    export_parser = commands.add_parser("export", help="Export every edited image of a folder.")
    export_parser.add_argument("directory", type=Path)

    render_parser = commands.add_parser("render", help="Open one image with its properties and save it.")
    render_parser.add_argument("image", type=Path)
    render_parser.add_argument("--tag", default="", help="Tag used when the image has none.")
    render_parser.add_argument("--tag2", default="", help="Second tag used when the image has none.")
    return parser


def cmd_list(args: argparse.Namespace, config: Config) -> int:
    for image_info in list_images(args.directory):
        try:
            with Image.open(image_info.path) as img:
                width, height = img.size
        except OSError as e:
            print(f"{image_info.name}\t{image_info.kind.value}\tunreadable: {e}")
            continue
        flag = "too small" if is_too_small(width, height, config.image_ratio, config.minimum_width_limit) else ""
        print(f"{image_info.name}\t{image_info.kind.value}\t{width}x{height}\t{flag}".rstrip())
    return 0


def cmd_export(args: argparse.Namespace, config: Config) -> int:
    def report(index: int, total: int, name: str) -> None:
        print(f"[{index}/{total}] {name}")

    exporter = BulkExporter(list_images(args.directory), config, FontSet.from_config(config), report)
    future = exporter.start()
    try:
        result = future.result()
    except KeyboardInterrupt:
        print("Cancelling after the current image...")
        exporter.cancel()
        result = future.result()

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    status = "cancelled" if result.cancelled else "done"
    print(f"{status}: {len(result.exported)} exported, {len(result.skipped)} skipped")
    return 1 if result.cancelled else 0


def cmd_render(args: argparse.Namespace, config: Config) -> int:
    image_info = resolve_image_info(args.image)
    if image_info is None:
        print(f"error: {args.image} is not a supported image", file=sys.stderr)
        return 2

    try:
        container = open_image(
            image_info, SharedProperties(), config, FontSet.from_config(config), args.tag, args.tag2
        )
    except ImageDecodeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if container.is_too_small():
        print(f"warning: {image_info.name} is smaller than the minimum export width", file=sys.stderr)
    saved = container.save()
    for warning in container.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0 if saved else 1


COMMANDS = {
    "list": cmd_list,
    "export": cmd_export,
    "render": cmd_render,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config_path = args.config
    if config_path is None:
        config_path = get_config_path()
    config_dir = config_path.parent
    setup_logging(config_dir / LOG_FILE_NAME, logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(config_path, args.profile)
    logger.debug(f"Using profile '{args.profile}' from {config_path}")
    try:
        return COMMANDS[args.command](args, config)
    except OSError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
