"""
PHOTO ALIGN - Configuration Constants

Centralized tuning constants for detection, interaction, preview and overlays.
Import from here instead of hardcoding values throughout the codebase.

Usage:
    from config import Detection, Interaction

    threshold = Interaction.HANDLE_HIT_THRESHOLD
"""


class Detection:
    """Skew detection parameters."""

    MAX_DIMENSION = 1000        # Longer side is downsampled to this before Sobel
    EDGE_PERCENTILE = 0.8       # Keep the strongest 20% of edge pixels
    BIN_COUNT = 180             # Angle histogram bins over [-45, 45]
    DOMINANCE_RATIO = 2.0       # Peak must beat the average bin weight by this factor

    # Rec. 709 luma weights
    LUMA_R = 0.2126
    LUMA_G = 0.7152
    LUMA_B = 0.0722


class Interaction:
    """Pointer and transform interaction limits."""

    HANDLE_HIT_THRESHOLD = 10.0  # px, per axis
    MIN_RESIZE_SIZE = 1.0        # px, smallest width/height a resize can produce

    ROTATION_MIN = -180.0
    ROTATION_MAX = 180.0
    ROTATION_STEP = 0.1          # Fine-rotation nudge

    SCALE_MIN = 0.1
    SCALE_MAX = 5.0
    ZOOM_STEP = 0.05             # Scale change per wheel notch


class Preview:
    """Interactive preview sizing."""

    MAX_DIMENSION = 1000         # Downsampled working copy for color previews
    CANVAS_MAX_HEIGHT = 600
    CANVAS_DEFAULT_WIDTH = 800
    CANVAS_DEFAULT_HEIGHT = 600


class Overlay:
    """Preview overlay appearance (RGB tuples)."""

    CHECKER_SIZE = 12
    CHECKER_DARK = (224, 224, 224)   # #e0e0e0
    CHECKER_LIGHT = (255, 255, 255)

    DIM_ALPHA = 0.45                 # Darkening outside the crop rect

    BORDER_COLOR = (255, 255, 255)
    BORDER_WIDTH = 1
    DASH_ON = 6
    DASH_OFF = 4

    THIRDS_COLOR = (255, 255, 255)
    THIRDS_ALPHA = 0.3

    HANDLE_SIZE = 8
    HANDLE_FILL = (255, 255, 255)
    HANDLE_OUTLINE = (51, 51, 51)    # #333333

    GRID_DEFAULT_COLOR = (0, 170, 255)  # #00aaff
