"""
Color Presets for PHOTO ALIGN

A preset is a partial override merged onto DEFAULT_ADJUSTMENTS; anything it
does not mention stays neutral.
"""

from loguru import logger

from adjustments import DEFAULT_ADJUSTMENTS, ColorAdjustments


def _make_preset(name: str, description: str, adjustments: dict = None) -> dict:
    """Helper to create a preset with defaults filled in."""
    overrides = dict(adjustments or {})
    return {
        'name': name,
        'description': description,
        'overrides': overrides,
        'adjustments': DEFAULT_ADJUSTMENTS.merged(overrides),
    }


# ============================================================================
# COLOR PRESETS
# ============================================================================

PRESETS = {
    # None preset - restores to default
    'none': _make_preset(
        'None',
        'No preset applied - neutral settings',
    ),

    'vivid': _make_preset(
        'Vivid',
        'Punchier contrast and richer colors',
        adjustments={
            'contrast': 20,
            'saturation': 140,
        },
    ),

    'bw': _make_preset(
        'B&W',
        'Fully desaturated black and white',
        adjustments={
            'saturation': 0,
        },
    ),

    'warm': _make_preset(
        'Warm',
        'Golden shift with a slight saturation boost',
        adjustments={
            'temperature': 40,
            'saturation': 110,
        },
    ),

    'cool': _make_preset(
        'Cool',
        'Blue shift with a slight saturation boost',
        adjustments={
            'temperature': -40,
            'saturation': 110,
        },
    ),
}

# Ordered list for UI display
PRESET_ORDER = [
    'none',
    'vivid',
    'bw',
    'warm',
    'cool',
]


def get_preset(key: str) -> dict:
    """Get a preset by key. Returns the None preset if not found."""
    preset = PRESETS.get(key)
    if preset is None:
        logger.warning(f"[Presets] Unknown preset '{key}', using 'none'")
        return PRESETS['none']
    return preset


def get_preset_list() -> list:
    """Get list of (key, name, description) tuples in display order."""
    return [
        (key, PRESETS[key]['name'], PRESETS[key]['description'])
        for key in PRESET_ORDER
    ]


def apply_preset(key: str) -> ColorAdjustments:
    """Adjustments for a preset: its overrides on top of the neutral defaults."""
    adjustments = get_preset(key)['adjustments']
    logger.debug(f"[Presets] Applied '{key}': {adjustments.to_dict()}")
    return adjustments


def auto_enhance(current: ColorAdjustments) -> ColorAdjustments:
    """One-click enhance: switch on auto-levels and auto white balance, keep the rest."""
    return current.merged({'auto_levels': True, 'auto_white_balance': True})
