"""
Palette generation from an image.

Extracts representative colors with weighted clustering, then shapes them
into a palette according to the requested style. Every style returns exactly
`count` colors, padding with the hero's adaptive harmony when extraction
yields too few.
"""

from typing import List, Optional, Sequence

from loguru import logger

from ambit.config import config

from .errors import validate_count
from .extraction import extract_clustered_colors
from .harmony import HarmonyType, determine_best_harmony, generate_harmony, select_adaptive_harmony
from .models import ColorPalette, PaletteSource, PaletteStyle
from .pixels import PixelBuffer
from .space import Color, distance, to_hsl
from ..observability import performance_monitor


MIN_EXTRACTION_COUNT = 8
PROMINENCE_PRECISION = 9
LOW_CONFIDENCE_THRESHOLD = 0.35
DUPLICATE_DISTANCE = 0.05

_STYLE_HARMONY = {
    PaletteStyle.MONOCHROMATIC: HarmonyType.MONOCHROMATIC,
    PaletteStyle.COMPLEMENTARY: HarmonyType.COMPLEMENTARY,
    PaletteStyle.TRIADIC: HarmonyType.TRIADIC,
    PaletteStyle.ANALOGOUS: HarmonyType.ANALOGOUS,
}


def prominence(color: Color) -> float:
    """Perceptual prominence: favors saturated, light and mid-lightness colors."""
    _, s, l = to_hsl(color)
    # rounded so cluster means carrying float noise tie with exact colors
    return round(s * 0.4 + l * 0.4 + (1.0 - abs(l - 0.5) * 2.0) * 0.2, PROMINENCE_PRECISION)


def sort_by_prominence(colors: Sequence[Color]) -> List[Color]:
    """Most prominent first; equal scores keep their input order."""
    return sorted(colors, key=prominence, reverse=True)


def _dedupe(colors: Sequence[Color]) -> List[Color]:
    kept: List[Color] = []
    for color in colors:
        if all(distance(color, other) >= DUPLICATE_DISTANCE for other in kept):
            kept.append(color)
    return kept


def _pad(colors: List[Color], hero: Color, count: int) -> List[Color]:
    """Top up to `count` colors from the hero's adaptive harmony."""
    if len(colors) >= count:
        return colors[:count]
    missing = count - len(colors)
    harmony = select_adaptive_harmony(hero)
    filler = generate_harmony(hero, harmony, missing + 1)[1:]
    logger.debug(f"Padding palette with {missing} {harmony.value} colors")
    return colors + filler[:missing]


def generate_palette(pixels: PixelBuffer, style: PaletteStyle = PaletteStyle.ADAPTIVE,
                     count: int = 5, rng_seed: Optional[int] = None) -> ColorPalette:
    """
    Generate a palette from an image.

    Args:
        pixels: Source pixel buffer
        style: Palette style
        count: Number of colors in the result
        rng_seed: Seed for clustered extraction; defaults to AMBIT_CLUSTER_SEED

    Returns:
        ColorPalette with exactly `count` colors

    Raises:
        InvalidCountError: If count < 1
    """
    count = validate_count(count)
    style = PaletteStyle(style)
    extract_count = max(count, MIN_EXTRACTION_COUNT)
    if rng_seed is None:
        rng_seed = config.CLUSTER_SEED
    max_samples = config.CLUSTER_MAX_SAMPLES

    with performance_monitor("generate_palette", pixel_count=pixels.pixel_count, color_count=count):
        extracted, confidence = extract_clustered_colors(
            pixels, extract_count, avoid_dark=True, rng_seed=rng_seed, max_samples=max_samples
        )
        if confidence < LOW_CONFIDENCE_THRESHOLD:
            alt, alt_confidence = extract_clustered_colors(
                pixels, extract_count, avoid_dark=False, rng_seed=rng_seed, max_samples=max_samples
            )
            logger.info(f"Low extraction confidence {confidence:.2f}, retry without dark filter "
                        f"gave {alt_confidence:.2f}")
            if alt_confidence > confidence:
                extracted, confidence = alt, alt_confidence

        hero = extracted[0]

        if style is PaletteStyle.ADAPTIVE:
            colors = sort_by_prominence(extracted)[:count]
            name = "Adaptive Palette"
            source = PaletteSource.IMAGE
        elif style is PaletteStyle.HARMONIC:
            harmony = determine_best_harmony(extracted)
            merged = _dedupe(list(extracted) + generate_harmony(hero, harmony))
            colors = sort_by_prominence(merged)[:count]
            name = f"{harmony.display_name} Palette"
            source = PaletteSource.IMAGE
        else:
            colors = generate_harmony(hero, _STYLE_HARMONY[style], count)
            name = f"{style.display_name} Palette"
            source = PaletteSource.GENERATED

        colors = _pad(list(colors), colors[0] if colors else hero, count)

    logger.info(f"Generated {style.value} palette '{name}' with {len(colors)} colors "
                f"(confidence {confidence:.2f})")
    return ColorPalette(name=name, colors=tuple(colors), style=style, source=source)
