"""
Ambit Color Harmony Engine

This module implements the color theory rules for deriving a palette from a
single base color: complementary, analogous, triadic, tetradic,
split-complementary, monochromatic and square harmonies, plus adaptive rule
selection from the base color's own saturation and lightness.
"""

import math
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from ..errors import validate_count
from ..models import ColorPalette, PaletteSource, PaletteStyle
from ..space import Color, clamp01, from_hsl, to_hsl


class HarmonyType(str, Enum):
    COMPLEMENTARY = "complementary"
    ANALOGOUS = "analogous"
    TRIADIC = "triadic"
    TETRADIC = "tetradic"
    SPLIT_COMPLEMENTARY = "split_complementary"
    MONOCHROMATIC = "monochromatic"
    SQUARE = "square"

    @property
    def display_name(self) -> str:
        return "-".join(part.capitalize() for part in self.value.split("_"))


# Hue offsets in degrees; position 0 is the base color itself
HARMONY_STOPS: Dict[HarmonyType, Tuple[float, ...]] = {
    HarmonyType.COMPLEMENTARY: (0.0, 180.0),
    HarmonyType.ANALOGOUS: (0.0, -30.0, 30.0, -60.0, 60.0, -90.0, 90.0,
                            -120.0, 120.0, -150.0, 150.0, 180.0),
    HarmonyType.TRIADIC: (0.0, 120.0, 240.0),
    HarmonyType.TETRADIC: (0.0, 90.0, 180.0, 270.0),
    HarmonyType.SPLIT_COMPLEMENTARY: (0.0, 150.0, 210.0),
    HarmonyType.SQUARE: (0.0, 90.0, 180.0, 270.0),
}

NATURAL_SIZES: Dict[HarmonyType, int] = {
    HarmonyType.COMPLEMENTARY: 2,
    HarmonyType.ANALOGOUS: 5,
    HarmonyType.TRIADIC: 3,
    HarmonyType.TETRADIC: 4,
    HarmonyType.SPLIT_COMPLEMENTARY: 3,
    HarmonyType.MONOCHROMATIC: 5,
    HarmonyType.SQUARE: 4,
}

MONOCHROMATIC_LIGHTNESS_RANGE = (0.25, 0.85)

# Lightness offset applied to each repeat of a rule's hue stops
CYCLE_LIGHTNESS_STEP = 0.15
CYCLE_LIGHTNESS_BOUNDS = (0.1, 0.9)

# Adaptive selection thresholds
ADAPTIVE_LOW_SATURATION = 0.25
ADAPTIVE_HIGH_SATURATION = 0.6
ADAPTIVE_MID_LIGHTNESS = (0.3, 0.7)

# Hue spread cutoffs used by determine_best_harmony
BEST_HARMONY_WIDE_RANGE = 180.0
BEST_HARMONY_MEDIUM_RANGE = 90.0

_STYLE_FOR_HARMONY = {
    HarmonyType.COMPLEMENTARY: PaletteStyle.COMPLEMENTARY,
    HarmonyType.ANALOGOUS: PaletteStyle.ANALOGOUS,
    HarmonyType.TRIADIC: PaletteStyle.TRIADIC,
    HarmonyType.MONOCHROMATIC: PaletteStyle.MONOCHROMATIC,
}

HarmonyLike = Union[HarmonyType, str]


def select_adaptive_harmony(base: Color) -> HarmonyType:
    """
    Pick a harmony rule from the base color's saturation and lightness.

    Muted bases get monochromatic so the result stays cohesive. Vivid bases
    get triadic at mid lightness and complementary otherwise. Everything in
    between gets analogous.
    """
    _, s, l = to_hsl(base)
    if s < ADAPTIVE_LOW_SATURATION:
        return HarmonyType.MONOCHROMATIC
    if s >= ADAPTIVE_HIGH_SATURATION:
        low, high = ADAPTIVE_MID_LIGHTNESS
        if low <= l <= high:
            return HarmonyType.TRIADIC
        return HarmonyType.COMPLEMENTARY
    return HarmonyType.ANALOGOUS


def _cycle_lightness(lightness: float, cycle: int) -> float:
    """Lightness for the given repeat of the stop pattern (cycle 0 keeps it)."""
    if cycle == 0:
        return lightness
    sign = 1.0 if cycle % 2 == 1 else -1.0
    low, high = CYCLE_LIGHTNESS_BOUNDS
    return min(high, max(low, lightness + sign * CYCLE_LIGHTNESS_STEP * math.ceil(cycle / 2)))


def _monochromatic(base: Color, count: int) -> List[Color]:
    if count == 1:
        return [base]
    h, s, _ = to_hsl(base)
    low, high = MONOCHROMATIC_LIGHTNESS_RANGE
    return [from_hsl(h, s, float(l), base.alpha) for l in np.linspace(low, high, count)]


def generate_harmony(base: Color, harmony_type: HarmonyLike, count: Optional[int] = None) -> List[Color]:
    """
    Generate harmony colors for a base color.

    Args:
        base: Seed color, returned unchanged at position 0 for hue rules
        harmony_type: Rule to apply
        count: Number of colors; defaults to the rule's natural size. Counts
            beyond the rule's stops repeat the pattern with lightness stepped
            alternately lighter and darker per repeat.

    Returns:
        List of exactly `count` colors

    Raises:
        InvalidCountError: If count < 1
    """
    harmony_type = HarmonyType(harmony_type)
    if count is None:
        count = NATURAL_SIZES[harmony_type]
    count = validate_count(count)

    if harmony_type is HarmonyType.MONOCHROMATIC:
        return _monochromatic(base, count)

    stops = HARMONY_STOPS[harmony_type]
    h, s, l = to_hsl(base)

    colors = []
    for i in range(count):
        cycle, position = divmod(i, len(stops))
        if i == 0:
            colors.append(base)
            continue
        colors.append(from_hsl(h + stops[position], s, _cycle_lightness(l, cycle), base.alpha))

    logger.debug(f"Generated {harmony_type.value} harmony with {len(colors)} colors")
    return colors


def generate_harmonized_palette(base: Color, harmony_type: Optional[HarmonyLike] = None,
                                count: int = 5) -> Tuple[ColorPalette, str]:
    """
    Build a named palette from a base color.

    Args:
        base: Seed color (the palette hero)
        harmony_type: Rule to apply; None selects one adaptively
        count: Number of colors

    Returns:
        Tuple of (palette, harmony display name)
    """
    count = validate_count(count)
    if harmony_type is None:
        chosen = select_adaptive_harmony(base)
        style = PaletteStyle.ADAPTIVE
    else:
        chosen = HarmonyType(harmony_type)
        style = _STYLE_FOR_HARMONY.get(chosen, PaletteStyle.HARMONIC)

    colors = generate_harmony(base, chosen, count)
    palette = ColorPalette(
        name=f"{chosen.display_name} Palette",
        colors=tuple(colors),
        style=style,
        source=PaletteSource.GENERATED,
    )
    logger.info(f"Harmonized palette: {chosen.display_name}, {count} colors")
    return palette, chosen.display_name


def generate_harmony_variations(base: Color, harmony_type: HarmonyLike,
                                variations: int = 3) -> List[List[Color]]:
    """
    The base harmony followed by saturation/lightness variations of it.

    Variation i of n scales saturation by 0.8 + 0.4 * i/n and lightness by
    0.9 + 0.2 * i/n. Hues never change.
    """
    base_harmony = generate_harmony(base, harmony_type)
    if variations <= 1:
        return [base_harmony]

    harmonies = [base_harmony]
    for variation in range(1, variations):
        factor = variation / variations
        varied = []
        for color in base_harmony:
            h, s, l = to_hsl(color)
            varied.append(from_hsl(
                h,
                clamp01(s * (0.8 + factor * 0.4)),
                clamp01(l * (0.9 + factor * 0.2)),
                color.alpha,
            ))
        harmonies.append(varied)
    return harmonies


def determine_best_harmony(colors: Sequence[Color]) -> HarmonyType:
    """
    Guess which rule best describes a set of colors from their hue spread.
    """
    if len(colors) < 2:
        return HarmonyType.COMPLEMENTARY

    hues = [to_hsl(c)[0] for c in colors]
    hue_range = max(hues) - min(hues)
    if hue_range > BEST_HARMONY_WIDE_RANGE:
        return HarmonyType.COMPLEMENTARY
    if hue_range > BEST_HARMONY_MEDIUM_RANGE:
        return HarmonyType.TRIADIC
    return HarmonyType.ANALOGOUS
