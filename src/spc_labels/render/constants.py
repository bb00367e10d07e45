"""Rendering constants (inches unless stated otherwise)."""

DPI = 96.0

# Space around the data panel
MARGIN_LEFT = 0.6
MARGIN_BOTTOM = 0.45
MARGIN_TOP = 0.25
TITLE_HEIGHT = 0.45
LABEL_GUTTER = 2.2  # right-hand space for the summary labels
LABEL_GUTTER_PAD = 0.08

# Data range expansion (fraction of range on each side)
Y_EXPANSION = 0.05
FLAT_RANGE_PADDING = 1.0  # data units when all values are equal

# Text
BASE_LABEL_SIZE = 6.0
TITLE_SIZE_RATIO = 1.1
NOTE_SIZE_RATIO = 0.55
NOTE_MAX_LENGTH = 100
NOTE_OFFSET_PX = 10
REFERENCE_DASH = "6,4"
