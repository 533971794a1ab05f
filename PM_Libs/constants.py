"""
Constants and configuration values for Post Maker.

This module centralizes all constant values, magic numbers, and
default settings used throughout the rendering engine.
"""

# Configuration file constants
CONFIG_DIR_NAME = "post_maker"
CONFIG_FILE_NAME = "post_maker.config"
LOG_FILE_NAME = "post_maker.log"
DEFAULT_PROFILE_NAME = "default"

# Sidecar and export file naming
PROPERTIES_EXTENSION = ".prop"
EXPORT_DIR_NAME = "export"
CLONE_SUFFIX = "-copy"

# Rendering constants
PREVIEW_HEIGHT = 500.0
FONT_REFERENCE_HEIGHT = 5000.0
TEXT_COLOR = (255, 255, 255, 255)
QUOTE_LINE_SPACING = 1.12
TAG_LINE_SPACING = 1.2

# Decorative box around the quote (pixel values at original scale)
BOX_GAP = (30.0, 10.0)
BOX_TINT_COLOR = (20, 22, 25, 80)
BOX_BLUR_RADIUS = 15.0
SHADOW_OFFSET = (20.0, 20.0)
SHADOW_COLOR = (30, 30, 30, 255)
SHADOW_BLUR_FACTOR = 5.0
BORDER_DARKEN_ALPHA = 2

# Export encoder settings
PNG_COMPRESS_LEVEL = 9
JPEG_QUALITY = 100
JPEG_SMOOTHING = 1

# Text fields, in drawing order
FIELD_QUOTE = "quote"
FIELD_SUBQUOTE = "subquote"
FIELD_SUBQUOTE2 = "subquote2"
FIELD_TAG = "tag"
FIELD_TAG2 = "tag2"
TEXT_FIELD_NAMES = (FIELD_QUOTE, FIELD_SUBQUOTE, FIELD_SUBQUOTE2, FIELD_TAG, FIELD_TAG2)

# Horizontal anchoring of text fields
ANCHOR_CENTER = "center"
ANCHOR_RIGHT = "right"

# Config defaults
DEFAULT_FONT_RATIOS = {
    FIELD_QUOTE: 250.0,
    FIELD_SUBQUOTE: 230.0,
    FIELD_SUBQUOTE2: 230.0,
    FIELD_TAG: 150.0,
    FIELD_TAG2: 150.0,
}
DEFAULT_POSITION_RATIOS = {
    FIELD_QUOTE: 0.7,
    FIELD_SUBQUOTE: 0.8,
    FIELD_SUBQUOTE2: 0.9,
    FIELD_TAG: 0.5,
    FIELD_TAG2: 0.95,
}
DEFAULT_TAG_X_POSITION_RATIO = 0.95
DEFAULT_IMAGE_RATIO = (4.0, 5.0)
DEFAULT_COLOR_LAYER = (20, 22, 25, 197)
DEFAULT_MINIMUM_WIDTH_LIMIT = 650.0
DEFAULT_MAXIMUM_WIDTH_LIMIT = 1080.0
DEFAULT_IMAGE_FORMAT = "png"

# Export formats
FORMAT_PNG = "png"
FORMAT_JPEG = "jpeg"
SUPPORTED_EXPORT_FORMATS = (FORMAT_PNG, FORMAT_JPEG)
