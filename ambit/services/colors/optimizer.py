"""
Purpose-driven palette optimization.

Every transform keeps the palette length, each member's hue and alpha, and
only moves saturation and lightness. Each purpose has a score that the
transform never lowers: when a candidate would score below its input, the
input colors are kept.
"""

from typing import Callable, Dict, List, Sequence, Tuple

from loguru import logger

from .analysis import (
    ACHROMATIC_SATURATION,
    WCAG_AA_NORMAL_TEXT,
    PaletteAnalysis,
    analyze_palette,
    min_pairwise_contrast,
    vision_issues,
    worst_pair,
)
from .errors import EmptyInputError
from .models import ColorPalette, PalettePurpose, PaletteSource
from .space import Color, contrast_ratio, from_hsl, hue_separation, relative_luminance, to_hsl
from .vision import VisionType, delta_e, simulate_color
from ..observability import performance_monitor


OPTIMIZED_SUFFIX = " (Optimized)"

# Shared lightness bounds and step
LIGHTNESS_BOUNDS = (0.05, 0.95)
OPTIMIZER_LIGHTNESS_STEP = 0.05

# Branding
BRAND_SATURATION_BAND = 0.15
BRAND_MIN_CHROMATIC_SATURATION = 0.2
BRAND_MIN_HUE_SEPARATION = 15.0
BRAND_MIN_LIGHTNESS_SEPARATION = 0.12

# Artistic
ARTISTIC_SPREAD_FACTOR = 1.35
SATURATION_BOUNDS = (0.05, 0.95)

# Accessible
ACCESSIBLE_MAX_LIGHTNESS_SHIFT = 0.35
ACCESSIBLE_MAX_ITERATIONS = 60

# Color-vision separation for the accessible purpose
COLOR_VISION_TYPES = (VisionType.DEUTERANOPIA, VisionType.PROTANOPIA)
VISION_SATURATION_BOOST = 1.3
VISION_LIGHTNESS_STEP = 0.1


class _Members:
    """Mutable HSL working copy of a palette. Unchanged members keep their original Color."""

    def __init__(self, colors: Sequence[Color]):
        self.original = list(colors)
        hsl = [to_hsl(c) for c in colors]
        self.h = [c[0] for c in hsl]
        self.s = [c[1] for c in hsl]
        self.l = [c[2] for c in hsl]
        self._s0 = list(self.s)
        self._l0 = list(self.l)

    def __len__(self):
        return len(self.original)

    def set_saturation(self, i: int, value: float):
        self.s[i] = value

    def set_lightness(self, i: int, value: float):
        self.l[i] = value

    def color(self, i: int) -> Color:
        if self.s[i] == self._s0[i] and self.l[i] == self._l0[i]:
            return self.original[i]
        return from_hsl(self.h[i], self.s[i], self.l[i], self.original[i].alpha)

    def colors(self) -> List[Color]:
        return [self.color(i) for i in range(len(self))]


def _is_chromatic(saturation: float) -> bool:
    return saturation >= ACHROMATIC_SATURATION


def _luminance_extremes(colors: Sequence[Color]) -> Tuple[int, int]:
    """Indices of the lightest and darkest member by relative luminance."""
    lum = [relative_luminance(c) for c in colors]
    light = max(range(len(lum)), key=lambda i: (lum[i], -i))
    dark = min(range(len(lum)), key=lambda i: (lum[i], i))
    if light == dark and len(colors) > 1:
        dark = 1 if light == 0 else 0
    return light, dark


# Purpose scores

def _ui_score(colors: Sequence[Color]) -> float:
    if len(colors) < 2:
        return 1.0
    light, dark = _luminance_extremes(colors)
    return contrast_ratio(colors[light], colors[dark])


def _branding_score(colors: Sequence[Color]) -> float:
    hero_s = to_hsl(colors[0])[1]
    supporting = [to_hsl(c)[1] for c in colors[1:]]
    chromatic = [s for s in supporting if _is_chromatic(s)]
    if not chromatic:
        return 1.0
    within = sum(1 for s in chromatic if abs(s - hero_s) <= BRAND_SATURATION_BAND + 1e-9)
    return within / len(chromatic)


def _artistic_score(colors: Sequence[Color]) -> float:
    hsl = [to_hsl(c) for c in colors]
    s = [c[1] for c in hsl]
    l = [c[2] for c in hsl]
    return (max(s) - min(s)) + (max(l) - min(l))


def _accessible_score(colors: Sequence[Color]) -> float:
    return min_pairwise_contrast(colors)


_SCORERS: Dict[PalettePurpose, Callable[[Sequence[Color]], float]] = {
    PalettePurpose.UI: _ui_score,
    PalettePurpose.BRANDING: _branding_score,
    PalettePurpose.ARTISTIC: _artistic_score,
    PalettePurpose.ACCESSIBLE: _accessible_score,
}


def purpose_score(palette: ColorPalette, purpose: PalettePurpose) -> float:
    """
    The number an optimization for `purpose` is guaranteed not to lower.

    - ui: contrast between the lightest and darkest member
    - branding: share of chromatic supporting members within the hero's
      saturation band
    - artistic: saturation range plus lightness range
    - accessible: minimum pairwise contrast
    """
    if not palette.colors:
        raise EmptyInputError("Cannot score an empty palette")
    return _SCORERS[PalettePurpose(purpose)](palette.colors)


# Transforms

def _push_lightness(members: _Members, i: int, direction: float, target: Callable[[], bool]):
    """Step member i's lightness in `direction` until target() holds or a bound is hit."""
    low, high = LIGHTNESS_BOUNDS
    while not target():
        current = members.l[i]
        if direction > 0:
            if current >= high:
                return
            members.set_lightness(i, min(high, current + OPTIMIZER_LIGHTNESS_STEP))
        else:
            if current <= low:
                return
            members.set_lightness(i, max(low, current - OPTIMIZER_LIGHTNESS_STEP))


def _optimize_ui(colors: Sequence[Color]) -> List[Color]:
    members = _Members(colors)
    if len(members) < 2:
        return members.colors()

    light, dark = _luminance_extremes(colors)

    if light == 0:
        first = dark
    elif dark == 0:
        first = light
    else:
        first = light if members.s[light] < members.s[dark] else dark
    second = dark if first == light else light

    def reached() -> bool:
        return contrast_ratio(members.color(light), members.color(dark)) >= WCAG_AA_NORMAL_TEXT

    for i in (first, second):
        _push_lightness(members, i, 1.0 if i == light else -1.0, reached)
    return members.colors()


def _optimize_branding(colors: Sequence[Color]) -> List[Color]:
    members = _Members(colors)
    hero_s = members.s[0]
    band_low = max(0.0, hero_s - BRAND_SATURATION_BAND)
    band_high = min(1.0, hero_s + BRAND_SATURATION_BAND)

    for i in range(1, len(members)):
        s = members.s[i]
        if not _is_chromatic(s):
            continue
        clamped = min(band_high, max(band_low, s))
        members.set_saturation(i, max(BRAND_MIN_CHROMATIC_SATURATION, clamped))

    low, high = LIGHTNESS_BOUNDS
    for i in range(1, len(members)):
        if not _is_chromatic(members.s[i]):
            continue
        for j in range(i):
            if not _is_chromatic(members.s[j]):
                continue
            if hue_separation(members.h[i], members.h[j]) >= BRAND_MIN_HUE_SEPARATION:
                continue
            gap = members.l[i] - members.l[j]
            if abs(gap) >= BRAND_MIN_LIGHTNESS_SEPARATION:
                continue
            up = members.l[j] + BRAND_MIN_LIGHTNESS_SEPARATION
            down = members.l[j] - BRAND_MIN_LIGHTNESS_SEPARATION
            if gap >= 0:
                members.set_lightness(i, up if up <= high else max(low, down))
            else:
                members.set_lightness(i, down if down >= low else min(high, up))
    return members.colors()


def _spread(value: float, mean: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    if value < low or value > high:
        return value
    return min(high, max(low, mean + (value - mean) * ARTISTIC_SPREAD_FACTOR))


def _optimize_artistic(colors: Sequence[Color]) -> List[Color]:
    members = _Members(colors)
    n = len(members)
    chromatic = [i for i in range(n) if _is_chromatic(members.s[i])]

    if chromatic:
        mean_s = sum(members.s[i] for i in chromatic) / len(chromatic)
        for i in chromatic:
            members.set_saturation(i, _spread(members.s[i], mean_s, SATURATION_BOUNDS))

    mean_l = sum(members.l) / n
    for i in range(n):
        members.set_lightness(i, _spread(members.l[i], mean_l, LIGHTNESS_BOUNDS))
    return members.colors()


def _optimize_accessible(colors: Sequence[Color]) -> List[Color]:
    members = _Members(colors)
    if len(members) < 2:
        return members.colors()

    low, high = LIGHTNESS_BOUNDS
    start = list(members.l)
    floor = [max(low, l - ACCESSIBLE_MAX_LIGHTNESS_SHIFT) for l in start]
    ceiling = [min(high, l + ACCESSIBLE_MAX_LIGHTNESS_SHIFT) for l in start]

    for _ in range(ACCESSIBLE_MAX_ITERATIONS):
        current = members.colors()
        pair = worst_pair(current)
        if pair is None or pair[2] >= WCAG_AA_NORMAL_TEXT:
            break

        i, j, _ = pair
        if relative_luminance(current[i]) >= relative_luminance(current[j]):
            lighter, darker = i, j
        else:
            lighter, darker = j, i

        up = min(ceiling[lighter], members.l[lighter] + OPTIMIZER_LIGHTNESS_STEP)
        down = max(floor[darker], members.l[darker] - OPTIMIZER_LIGHTNESS_STEP)
        moves = []
        if up > members.l[lighter] and down < members.l[darker]:
            moves.append(((lighter, up), (darker, down)))
        if up > members.l[lighter]:
            moves.append(((lighter, up),))
        if down < members.l[darker]:
            moves.append(((darker, down),))

        baseline = min_pairwise_contrast(current)
        accepted = False
        for move in moves:
            saved = [(k, members.l[k]) for k, _ in move]
            for k, value in move:
                members.set_lightness(k, value)
            if min_pairwise_contrast(members.colors()) >= baseline:
                accepted = True
                break
            for k, value in saved:
                members.set_lightness(k, value)
        if not accepted:
            break

    _separate_confused(members, floor, ceiling, COLOR_VISION_TYPES)
    return members.colors()


def _separate_confused(members: _Members, floor: Sequence[float], ceiling: Sequence[float],
                       vision_types: Sequence[VisionType]):
    """
    Pull apart pairs that collapse under a red-green deficiency.

    The later member of each confused pair gets a saturation boost and a
    lightness step away from its partner. A move is kept only when the pair's
    simulated difference grows and the minimum pairwise contrast does not drop.
    """
    adjusted = set()
    for issue in vision_issues(members.colors(), vision_types):
        i, j = issue.indices
        if j in adjusted:
            continue
        current = members.colors()
        baseline = min_pairwise_contrast(current)
        before = delta_e(simulate_color(current[i], issue.vision_type),
                         simulate_color(current[j], issue.vision_type))
        saved = (members.s[j], members.l[j])

        if _is_chromatic(members.s[j]):
            members.set_saturation(j, min(1.0, members.s[j] * VISION_SATURATION_BOOST))
        if relative_luminance(current[j]) >= relative_luminance(current[i]):
            members.set_lightness(j, min(ceiling[j], members.l[j] + VISION_LIGHTNESS_STEP))
        else:
            members.set_lightness(j, max(floor[j], members.l[j] - VISION_LIGHTNESS_STEP))

        candidate = members.colors()
        separated = delta_e(simulate_color(candidate[i], issue.vision_type),
                            simulate_color(candidate[j], issue.vision_type))
        if separated > before and min_pairwise_contrast(candidate) >= baseline:
            adjusted.add(j)
            logger.debug(f"Separated colors {i + 1} and {j + 1} for {issue.vision_type.value}: "
                         f"delta E {before:.1f} -> {separated:.1f}")
        else:
            members.set_saturation(j, saved[0])
            members.set_lightness(j, saved[1])


def separate_for_color_vision(colors: Sequence[Color],
                              vision_types: Sequence[VisionType] = COLOR_VISION_TYPES) -> List[Color]:
    """Make pairs that collapse under the given deficiencies easier to tell apart. Hues are kept."""
    members = _Members(colors)
    low, high = LIGHTNESS_BOUNDS
    _separate_confused(members, [low] * len(members), [high] * len(members), vision_types)
    return members.colors()


_TRANSFORMS: Dict[PalettePurpose, Callable[[Sequence[Color]], List[Color]]] = {
    PalettePurpose.UI: _optimize_ui,
    PalettePurpose.BRANDING: _optimize_branding,
    PalettePurpose.ARTISTIC: _optimize_artistic,
    PalettePurpose.ACCESSIBLE: _optimize_accessible,
}


def _optimized_name(name: str) -> str:
    return name if name.endswith(OPTIMIZED_SUFFIX) else f"{name}{OPTIMIZED_SUFFIX}"


def optimize_palette(palette: ColorPalette, purpose: PalettePurpose) -> ColorPalette:
    """
    Re-tune a palette for a purpose.

    Args:
        palette: Palette to optimize (at least one color)
        purpose: ui, branding, artistic or accessible

    Returns:
        New palette with the same length, hues and alphas, named with an
        " (Optimized)" suffix and source `optimized`

    Raises:
        EmptyInputError: If the palette has no colors
    """
    if not palette.colors:
        raise EmptyInputError("Cannot optimize an empty palette")
    purpose = PalettePurpose(purpose)
    colors = list(palette.colors)

    with performance_monitor(f"optimize_{purpose.value}", color_count=len(colors)):
        candidate = _TRANSFORMS[purpose](colors)
        before = _SCORERS[purpose](colors)
        after = _SCORERS[purpose](candidate)
        if after < before:
            logger.info(f"{purpose.value} optimization would lower its score "
                        f"({before:.3f} -> {after:.3f}), keeping input colors")
            candidate = colors
            after = before

    logger.info(f"Optimized '{palette.name}' for {purpose.value}: score {before:.3f} -> {after:.3f}")
    return palette.with_colors(
        candidate,
        name=_optimized_name(palette.name),
        source=PaletteSource.OPTIMIZED,
    )


def optimize_and_analyze(palette: ColorPalette,
                         purpose: PalettePurpose) -> Tuple[ColorPalette, PaletteAnalysis]:
    """Optimize a palette and analyze the result."""
    optimized = optimize_palette(palette, purpose)
    return optimized, analyze_palette(optimized)
