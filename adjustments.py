"""
PHOTO ALIGN - Color Adjustment Pipeline

Deterministic color corrections applied in a fixed order:
auto-levels -> white balance -> brightness -> contrast -> saturation -> temperature.

Every stage takes a PixelBuffer and returns a new one; inputs are never
modified. Stages at their neutral value are skipped entirely, so untouched
controls give back an exact copy instead of a lossy round trip.
"""

from dataclasses import dataclass, fields, replace
from typing import Callable, List, Tuple

import numpy as np
from loguru import logger

from color_space import hsl_to_rgb, rgb_to_hsl, to_uint8
from histogram import channel_histograms, find_percentile
from pixel_buffer import PixelBuffer

# Percentile marks for the auto-levels stretch
LEVELS_LOW = 0.01
LEVELS_HIGH = 0.99

# Brightness maps +/-100 to a +/-128 offset
BRIGHTNESS_RANGE = 128.0

# Temperature maps +/-100 to a +/-30 shift on red/blue (empirical, open to tuning)
TEMPERATURE_RANGE = 30.0

CONTRAST_PIVOT = 128.0


@dataclass(frozen=True)
class ColorAdjustments:
    """User color controls. Defaults are the neutral identity."""
    brightness: float = 0.0         # -100 to +100
    contrast: float = 0.0           # -100 to +100
    saturation: float = 100.0       # 0 to 200 (100 = unchanged)
    temperature: float = 0.0        # -100 to +100 (neg = cool, pos = warm)
    auto_levels: bool = False
    auto_white_balance: bool = False

    # field -> (min, max) for the numeric controls
    RANGES = {
        'brightness': (-100.0, 100.0),
        'contrast': (-100.0, 100.0),
        'saturation': (0.0, 200.0),
        'temperature': (-100.0, 100.0),
    }

    def clamped(self) -> "ColorAdjustments":
        """Copy with every numeric control pulled into its valid range."""
        values = {
            name: max(lo, min(hi, getattr(self, name)))
            for name, (lo, hi) in self.RANGES.items()
        }
        return replace(self, **values)

    def merged(self, overrides: dict) -> "ColorAdjustments":
        """Copy with the given fields replaced. Unknown keys raise ValueError."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown adjustment(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_ADJUSTMENTS = ColorAdjustments()


def is_default_adjustments(adj: ColorAdjustments) -> bool:
    """True when every control is at its neutral value."""
    return adj == DEFAULT_ADJUSTMENTS


# =============================================================================
# STAGES
# =============================================================================

def apply_auto_levels(buffer: PixelBuffer) -> PixelBuffer:
    """
    Per-channel 1st/99th percentile stretch.

    Each channel's [lo, hi] range is remapped linearly onto [0, 255].
    """
    hist = channel_histograms(buffer)
    total = buffer.pixel_count
    rgb = buffer.data[:, :, :3].astype(np.float64)

    for c in range(3):
        lo = find_percentile(hist[c], total, LEVELS_LOW)
        hi = find_percentile(hist[c], total, LEVELS_HIGH)
        span = (hi - lo) or 1
        rgb[:, :, c] = (rgb[:, :, c] - lo) / span * 255.0

    return buffer.with_rgb(to_uint8(rgb))


def apply_gray_world_white_balance(buffer: PixelBuffer) -> PixelBuffer:
    """
    Gray-world white balance.

    Scales R, G and B so each channel's mean equals the mean of all three.
    """
    rgb = buffer.data[:, :, :3].astype(np.float64)
    means = rgb.reshape(-1, 3).mean(axis=0)
    gray = means.mean()

    # An all-zero channel cannot be scaled; treat its mean as 1
    safe_means = np.where(means == 0, 1.0, means)
    gains = gray / safe_means

    return buffer.with_rgb(to_uint8(rgb * gains))


def apply_brightness(buffer: PixelBuffer, amount: float) -> PixelBuffer:
    """Additive offset of amount/100 * 128 on all color channels."""
    offset = amount / 100.0 * BRIGHTNESS_RANGE
    rgb = buffer.data[:, :, :3].astype(np.float64)
    return buffer.with_rgb(to_uint8(rgb + offset))


def apply_contrast(buffer: PixelBuffer, amount: float) -> PixelBuffer:
    """Scale around mid-gray; -100 flattens to gray, +100 doubles contrast."""
    factor = (amount + 100.0) / 100.0
    rgb = buffer.data[:, :, :3].astype(np.float64)
    return buffer.with_rgb(to_uint8(CONTRAST_PIVOT + (rgb - CONTRAST_PIVOT) * factor))


def apply_saturation(buffer: PixelBuffer, amount: float) -> PixelBuffer:
    """
    Multiply HSL saturation by amount/100.

    0 = fully desaturated, 100 = unchanged, 200 = double saturation.
    """
    factor = amount / 100.0
    hue, sat, lightness = rgb_to_hsl(buffer.data[:, :, :3])
    sat = np.clip(sat * factor, 0.0, 1.0)
    return buffer.with_rgb(hsl_to_rgb(hue, sat, lightness))


def apply_temperature(buffer: PixelBuffer, amount: float) -> PixelBuffer:
    """Warm (positive) pushes red up and blue down; cool does the opposite."""
    shift = amount / 100.0 * TEMPERATURE_RANGE
    rgb = buffer.data[:, :, :3].astype(np.float64)
    rgb[:, :, 0] += shift
    rgb[:, :, 2] -= shift
    return buffer.with_rgb(to_uint8(rgb))


# =============================================================================
# PIPELINE
# =============================================================================

# (name, is_active, apply) in pipeline order
Stage = Tuple[str, Callable[[ColorAdjustments], bool], Callable[[PixelBuffer, ColorAdjustments], PixelBuffer]]

PIPELINE: List[Stage] = [
    ('auto_levels',
     lambda adj: adj.auto_levels,
     lambda buf, adj: apply_auto_levels(buf)),
    ('auto_white_balance',
     lambda adj: adj.auto_white_balance,
     lambda buf, adj: apply_gray_world_white_balance(buf)),
    ('brightness',
     lambda adj: adj.brightness != DEFAULT_ADJUSTMENTS.brightness,
     lambda buf, adj: apply_brightness(buf, adj.brightness)),
    ('contrast',
     lambda adj: adj.contrast != DEFAULT_ADJUSTMENTS.contrast,
     lambda buf, adj: apply_contrast(buf, adj.contrast)),
    ('saturation',
     lambda adj: adj.saturation != DEFAULT_ADJUSTMENTS.saturation,
     lambda buf, adj: apply_saturation(buf, adj.saturation)),
    ('temperature',
     lambda adj: adj.temperature != DEFAULT_ADJUSTMENTS.temperature,
     lambda buf, adj: apply_temperature(buf, adj.temperature)),
]

ADJUSTMENT_ORDER = [name for name, _, _ in PIPELINE]


def active_stages(adj: ColorAdjustments) -> List[str]:
    """Names of the stages that would run for these adjustments, in order."""
    return [name for name, is_active, _ in PIPELINE if is_active(adj)]


def apply_all_adjustments(buffer: PixelBuffer, adj: ColorAdjustments) -> PixelBuffer:
    """
    Run every active stage in pipeline order.

    Returns:
        A new buffer. When no stage is active this is an exact copy of the input.
    """
    result = buffer
    ran = []
    for name, is_active, apply in PIPELINE:
        if is_active(adj):
            result = apply(result, adj)
            ran.append(name)

    if not ran:
        return buffer.copy()

    logger.debug(f"[Adjust] {buffer.width}x{buffer.height} stages={','.join(ran)}")
    return result
