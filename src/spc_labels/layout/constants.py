"""Default values for label measurement and placement.

All gaps, pads and heights are fractions of the panel height (NPC) unless
stated otherwise. The gap-reduction and shelf values are empirically tuned.
"""

# Label offset from the line it annotates, as a fraction of label height
RELATIVE_GAP_LINE = 0.05

# Minimum space between two stacked label blocks, fraction of label height
RELATIVE_GAP_LABELS = 0.30

# Panel padding kept free of labels (top and bottom)
PAD_TOP = 0.01
PAD_BOT = 0.01

# Anchors closer than this many label heights merge into one block
COINCIDENT_THRESHOLD_FACTOR = 0.3

# Successive multipliers for the inter-label gap when stacking overflows
GAP_REDUCTION_FACTORS = (0.75, 0.5, 0.25, 0.1)

# Max distance from the panel center for shelved placement
SHELF_CENTER_THRESHOLD = 0.10

# Text metrics
LABEL_LINEHEIGHT = 0.9
HEIGHT_SAFETY_MARGIN = 1.0
HEIGHT_FALLBACK_NPC = 0.08
PARAGRAPH_SPACING_LINES = 0.5  # extra space per blank-line paragraph break
POINTS_PER_INCH = 72.0
CHAR_WIDTH_EM = 0.6  # average glyph advance for the fixed-metrics estimate

# Measurement cache
CACHE_TTL_SECONDS = 300.0
CACHE_MAX_ENTRIES = 100
CACHE_CLEANUP_INTERVAL = 50
CACHE_EVICT_FRACTION = 0.25

# Responsive font scaling
FONT_SCALING_DIVISOR = 3.5
FONT_SCALING_MIN_SIZE = 8.0
FONT_SCALING_MAX_SIZE = 48.0
FONT_SCALING_FALLBACK = 14.0
LABEL_SIZE_HEIGHT_BASELINE = 7.8  # inches (751px @ 96dpi)
GGPLOT_PT = 72.27 / 25.4  # points per label-size unit

# Arrow targets sit this fraction of the data range inside the panel
ARROW_INSET_FACTOR = 0.01
