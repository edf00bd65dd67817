"""
Palette analysis: harmony score, WCAG contrast, accessibility issues,
rule-based strengths and suggestions, and color-vision confusions.

All functions are pure. The single-color palette is a defined baseline:
harmony 100, max contrast 1, no accessibility issues.
"""

from dataclasses import dataclass, field
from itertools import combinations
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .errors import EmptyInputError, validate_count
from .models import ColorPalette
from .space import Color, contrast_ratio, from_hsb, hue_separation, relative_luminance, to_hex, to_hsb, to_hsl
from .vision import VisionType, simulate_color, to_lab
from ..observability import performance_tracked


# Harmony scoring
NICE_ANGLES = (0.0, 30.0, 60.0, 90.0, 120.0, 150.0, 180.0)
HARMONY_ANGLE_TOLERANCE = 5.0
ACHROMATIC_SATURATION = 0.08

# WCAG 2.x contrast thresholds
WCAG_AA_NORMAL_TEXT = 4.5
WCAG_AA_LARGE_TEXT = 3.0
WCAG_AAA_NORMAL_TEXT = 7.0
WCAG_AAA_LARGE_TEXT = 4.5
LARGE_TEXT_SIZE = 18.0
LARGE_BOLD_TEXT_SIZE = 14.0

# Accessible color suggestions
SUGGESTION_BRIGHTNESS_STEP = 0.3
SUGGESTION_MIN_BRIGHTNESS = 0.1

# Strength / suggestion rules
COMPLEMENTARY_MIN_SEPARATION = 170.0
TRIADIC_SEPARATION_RANGE = (110.0, 130.0)
ANALOGOUS_SEPARATION_RANGE = (20.0, 40.0)
SIMILAR_HUE_RANGE = 30.0
BALANCED_VARIANCE_RANGE = (0.01, 0.1)
WIDE_LIGHTNESS_RANGE = 0.5
NARROW_LIGHTNESS_RANGE = 0.2
HIGH_SATURATION_THRESHOLD = 0.7
NEUTRAL_MEMBER_SATURATION = 0.3

# Color-vision confusion: distinct to normal vision, close once simulated
VISION_CHECK_TYPES = (VisionType.DEUTERANOPIA, VisionType.PROTANOPIA, VisionType.TRITANOPIA)
VISION_DISTINCT_DELTA_E = 20.0
VISION_CONFUSED_DELTA_E = 10.0

# Overall quality weights
QUALITY_HARMONY_WEIGHT = 0.3
QUALITY_CONTRAST_WEIGHT = 0.3
QUALITY_ACCESSIBILITY_WEIGHT = 0.4
QUALITY_ISSUE_PENALTY = 0.15


@dataclass(frozen=True)
class AccessibilityIssue:
    """A color pair below the WCAG normal-text contrast threshold."""
    message: str
    suggestion: str
    severity: str  # "severe" below 3:1, "moderate" below 4.5:1
    indices: Tuple[int, int]
    hexes: Tuple[str, str]
    ratio: float


@dataclass(frozen=True)
class VisionIssue:
    """A color pair that collapses under a color-vision deficiency."""
    vision_type: VisionType
    indices: Tuple[int, int]
    message: str
    original_delta_e: float
    simulated_delta_e: float


@dataclass
class PaletteAnalysis:
    color_count: int = 0
    harmony_score: float = 0.0
    max_contrast_ratio: float = 1.0
    min_contrast_ratio: float = 1.0
    contrast_ratios: List[float] = field(default_factory=list)
    accessibility_issues: List[AccessibilityIssue] = field(default_factory=list)
    harmony_strengths: List[str] = field(default_factory=list)
    harmony_suggestions: List[str] = field(default_factory=list)
    vision_issues: List[VisionIssue] = field(default_factory=list)
    average_brightness: float = 0.0
    average_saturation: float = 0.0
    has_warm_colors: bool = False
    has_cool_colors: bool = False
    has_neutral_colors: bool = False

    @property
    def harmony_grade(self) -> str:
        score = self.harmony_score
        if score >= 90:
            return "Excellent"
        if score >= 80:
            return "Very Good"
        if score >= 70:
            return "Good"
        if score >= 60:
            return "Fair"
        return "Needs Improvement"

    @property
    def overall_score(self) -> float:
        """Weighted blend of harmony, contrast (normalized to 7:1) and issue count, in [0, 1]."""
        harmony = min(100.0, self.harmony_score) / 100.0
        contrast = min(1.0, self.max_contrast_ratio / WCAG_AAA_NORMAL_TEXT)
        accessibility = max(0.0, 1.0 - len(self.accessibility_issues) * QUALITY_ISSUE_PENALTY)
        return (harmony * QUALITY_HARMONY_WEIGHT
                + contrast * QUALITY_CONTRAST_WEIGHT
                + accessibility * QUALITY_ACCESSIBILITY_WEIGHT)

    @property
    def overall_quality(self) -> str:
        total = self.overall_score
        if total >= 0.8:
            return "Excellent"
        if total >= 0.6:
            return "Good"
        if total >= 0.4:
            return "Fair"
        if total >= 0.2:
            return "Poor"
        return "Needs Improvement"


def _is_achromatic(saturation: float) -> bool:
    return saturation < ACHROMATIC_SATURATION


def _pair_is_harmonious(hsl_a, hsl_b) -> bool:
    if _is_achromatic(hsl_a[1]) or _is_achromatic(hsl_b[1]):
        return True
    separation = hue_separation(hsl_a[0], hsl_b[0])
    return any(abs(separation - angle) <= HARMONY_ANGLE_TOLERANCE for angle in NICE_ANGLES)


def harmony_score(colors: Sequence[Color]) -> float:
    """
    Share of color pairs at a harmonious hue angle, scaled to 0-100.

    A pair is harmonious when its hue separation is within
    HARMONY_ANGLE_TOLERANCE of a multiple of 30 degrees, or when either
    member is achromatic. A single color scores 100.
    """
    hsl = [to_hsl(c) for c in colors]
    pairs = list(combinations(range(len(hsl)), 2))
    if not pairs:
        return 100.0
    harmonious = sum(1 for i, j in pairs if _pair_is_harmonious(hsl[i], hsl[j]))
    return harmonious / len(pairs) * 100.0


def accessibility_issues(colors: Sequence[Color]) -> List[AccessibilityIssue]:
    """
    One issue per unordered pair below the WCAG AA normal-text threshold.

    Each issue names both colors by hex and suggests which member to lighten
    or darken.
    """
    issues = []
    for i, j in combinations(range(len(colors)), 2):
        ratio = contrast_ratio(colors[i], colors[j])
        if ratio >= WCAG_AA_NORMAL_TEXT:
            continue
        hex_i, hex_j = to_hex(colors[i]), to_hex(colors[j])
        if relative_luminance(colors[i]) >= relative_luminance(colors[j]):
            lighter, darker = hex_i, hex_j
        else:
            lighter, darker = hex_j, hex_i
        if ratio < WCAG_AA_LARGE_TEXT:
            severity = "severe"
            message = f"Very low contrast between {hex_i} and {hex_j} ({ratio:.1f}:1)"
            suggestion = f"Lighten {lighter} or darken {darker}, or avoid pairing them for text"
        else:
            severity = "moderate"
            message = f"Low contrast between {hex_i} and {hex_j} ({ratio:.1f}:1)"
            suggestion = (f"Use this pair for large text only, or lighten {lighter} "
                          f"or darken {darker} to reach 4.5:1")
        issues.append(AccessibilityIssue(
            message=message,
            suggestion=suggestion,
            severity=severity,
            indices=(i, j),
            hexes=(hex_i, hex_j),
            ratio=ratio,
        ))
    return issues


@dataclass(frozen=True)
class WCAGCompliance:
    normal: bool
    large: bool

    @property
    def overall(self) -> bool:
        return self.normal or self.large


@dataclass(frozen=True)
class ContrastAnalysis:
    """WCAG compliance of one text/background pair."""
    ratio: float
    is_large_text: bool
    wcag_aa: WCAGCompliance
    wcag_aaa: WCAGCompliance
    recommendations: List[str]

    def _passes(self, compliance: WCAGCompliance) -> bool:
        return compliance.large if self.is_large_text else compliance.normal

    @property
    def grade(self) -> str:
        """AAA, AA or Fail for the pair's own text size."""
        if self._passes(self.wcag_aaa):
            return "AAA"
        if self._passes(self.wcag_aa):
            return "AA"
        return "Fail"


def is_large_text(font_size: float, bold: bool = False) -> bool:
    """WCAG large text: 18pt and up, or 14pt and up when bold."""
    return font_size >= LARGE_TEXT_SIZE or (bold and font_size >= LARGE_BOLD_TEXT_SIZE)


def analyze_contrast(text: Color, background: Color,
                     font_size: float = 14.0, bold: bool = False) -> ContrastAnalysis:
    """
    Check a text color against its background.

    Args:
        text: Foreground color
        background: Background color
        font_size: Text size in points
        bold: Whether the text is bold

    Returns:
        ContrastAnalysis with AA/AAA compliance for normal and large text
    """
    ratio = contrast_ratio(text, background)
    aa = WCAGCompliance(normal=ratio >= WCAG_AA_NORMAL_TEXT, large=ratio >= WCAG_AA_LARGE_TEXT)
    aaa = WCAGCompliance(normal=ratio >= WCAG_AAA_NORMAL_TEXT, large=ratio >= WCAG_AAA_LARGE_TEXT)

    recommendations = []
    if not aa.overall:
        recommendations.append("Does not meet WCAG AA standards")
    if not aaa.overall:
        recommendations.append("Does not meet WCAG AAA standards")
    if ratio < WCAG_AA_NORMAL_TEXT:
        if relative_luminance(text) >= relative_luminance(background):
            recommendations.append("Consider using a lighter text color or darker background")
        else:
            recommendations.append("Consider using a darker text color or lighter background")

    return ContrastAnalysis(
        ratio=ratio,
        is_large_text=is_large_text(font_size, bold),
        wcag_aa=aa,
        wcag_aaa=aaa,
        recommendations=recommendations,
    )


def _hue_arc(hues: List[float]) -> float:
    """Smallest arc of the hue circle containing every hue."""
    if len(hues) < 2:
        return 0.0
    ordered = sorted(hues)
    gaps = [b - a for a, b in zip(ordered, ordered[1:])]
    gaps.append(360.0 - ordered[-1] + ordered[0])
    return 360.0 - max(gaps)


def harmony_observations(colors: Sequence[Color]) -> Tuple[List[str], List[str]]:
    """
    Rule-based strengths and suggestions for a palette.

    Returns:
        Tuple of (strengths, suggestions)
    """
    strengths: List[str] = []
    suggestions: List[str] = []
    hsl = [to_hsl(c) for c in colors]
    chromatic = [i for i, (_, s, _) in enumerate(hsl) if not _is_achromatic(s)]

    triadic = analogous = False
    for i, j in combinations(chromatic, 2):
        separation = hue_separation(hsl[i][0], hsl[j][0])
        if separation >= COMPLEMENTARY_MIN_SEPARATION:
            strengths.append(f"Strong complementary pairing between color {i + 1} and color {j + 1}")
        if TRIADIC_SEPARATION_RANGE[0] <= separation <= TRIADIC_SEPARATION_RANGE[1]:
            triadic = True
        if ANALOGOUS_SEPARATION_RANGE[0] <= separation <= ANALOGOUS_SEPARATION_RANGE[1]:
            analogous = True
    if triadic:
        strengths.append("Triadic harmony detected")
    if analogous:
        strengths.append("Analogous colors work well together")

    if len(chromatic) >= 2 and _hue_arc([hsl[i][0] for i in chromatic]) < SIMILAR_HUE_RANGE:
        suggestions.append("Colors are too similar - consider adding more variety")

    saturations = np.array([s for _, s, _ in hsl])
    lightnesses = np.array([l for _, _, l in hsl])

    if len(colors) >= 2:
        low, high = BALANCED_VARIANCE_RANGE
        sat_var = float(np.var(saturations))
        if low < sat_var < high:
            strengths.append("Good saturation balance")
        elif sat_var <= low:
            suggestions.append("Saturation is too uniform - consider varying saturation levels")

        light_var = float(np.var(lightnesses))
        if low < light_var < high:
            strengths.append("Good lightness balance")
        elif light_var <= low:
            suggestions.append("Lightness is too uniform - consider varying lightness levels")

        light_range = float(lightnesses.max() - lightnesses.min())
        if light_range > WIDE_LIGHTNESS_RANGE:
            strengths.append("Good contrast range")
        elif light_range < NARROW_LIGHTNESS_RANGE:
            suggestions.append("Low contrast - consider adding darker and lighter shades")

    if float(saturations.mean()) > HIGH_SATURATION_THRESHOLD and not np.any(saturations < NEUTRAL_MEMBER_SATURATION):
        suggestions.append("Consider adding a neutral to balance saturation")

    return strengths, suggestions


def vision_issues(colors: Sequence[Color],
                  vision_types: Sequence[VisionType] = VISION_CHECK_TYPES) -> List[VisionIssue]:
    """Pairs that are clearly distinct in normal vision but collapse under a deficiency."""
    if len(colors) < 2:
        return []

    original = to_lab(colors)
    issues = []
    for vision_type in vision_types:
        simulated = to_lab([simulate_color(c, vision_type) for c in colors])
        for i, j in combinations(range(len(colors)), 2):
            before = float(np.linalg.norm(original[i] - original[j]))
            if before < VISION_DISTINCT_DELTA_E:
                continue
            after = float(np.linalg.norm(simulated[i] - simulated[j]))
            if after < VISION_CONFUSED_DELTA_E:
                issues.append(VisionIssue(
                    vision_type=vision_type,
                    indices=(i, j),
                    message=(f"Color {i + 1} and color {j + 1} may be hard to tell apart "
                             f"with {vision_type.value}"),
                    original_delta_e=before,
                    simulated_delta_e=after,
                ))
    return issues


@performance_tracked("analyze_palette")
def analyze_palette(palette: ColorPalette) -> PaletteAnalysis:
    """
    Analyze a palette for harmony and accessibility.

    Args:
        palette: Palette to analyze (at least one color)

    Returns:
        PaletteAnalysis

    Raises:
        EmptyInputError: If the palette has no colors
    """
    colors = list(palette.colors)
    if not colors:
        raise EmptyInputError("Cannot analyze an empty palette")

    ratios = sorted(
        (contrast_ratio(a, b) for a, b in combinations(colors, 2)),
        reverse=True,
    )
    strengths, suggestions = harmony_observations(colors)
    hsl = [to_hsl(c) for c in colors]

    analysis = PaletteAnalysis(
        color_count=len(colors),
        harmony_score=harmony_score(colors),
        max_contrast_ratio=ratios[0] if ratios else 1.0,
        min_contrast_ratio=ratios[-1] if ratios else 1.0,
        contrast_ratios=ratios,
        accessibility_issues=accessibility_issues(colors),
        harmony_strengths=strengths,
        harmony_suggestions=suggestions,
        vision_issues=vision_issues(colors),
        average_brightness=sum(l for _, _, l in hsl) / len(hsl),
        average_saturation=sum(s for _, s, _ in hsl) / len(hsl),
        has_warm_colors=any(c.is_warm for c in colors),
        has_cool_colors=any(c.is_cool for c in colors),
        has_neutral_colors=any(c.is_neutral for c in colors),
    )

    logger.debug(f"Analyzed '{palette.name}': harmony {analysis.harmony_score:.0f}, "
                 f"max contrast {analysis.max_contrast_ratio:.2f}, "
                 f"{len(analysis.accessibility_issues)} accessibility issues")
    return analysis


def min_pairwise_contrast(colors: Sequence[Color]) -> float:
    """Lowest contrast over all pairs; 1.0 for fewer than two colors."""
    ratios = [contrast_ratio(a, b) for a, b in combinations(colors, 2)]
    return min(ratios) if ratios else 1.0


def worst_pair(colors: Sequence[Color]) -> Optional[Tuple[int, int, float]]:
    """The pair with the lowest contrast as (i, j, ratio), or None."""
    best = None
    for i, j in combinations(range(len(colors)), 2):
        ratio = contrast_ratio(colors[i], colors[j])
        if best is None or ratio < best[2]:
            best = (i, j, ratio)
    return best


def suggest_accessible_colors(base: Color, count: int = 5) -> List[Color]:
    """
    High-contrast variants of a color for text and backgrounds.

    Returns the base followed by two darker and two lighter HSB brightness
    steps, at most `count` colors and never more than five. Hue, saturation
    and alpha are kept.
    """
    count = validate_count(count)
    hue, saturation, brightness = to_hsb(base)

    suggestions = [base]
    for step in (1, 2):
        value = max(SUGGESTION_MIN_BRIGHTNESS, brightness - step * SUGGESTION_BRIGHTNESS_STEP)
        suggestions.append(from_hsb(hue, saturation, value, base.alpha))
    for step in (1, 2):
        value = min(1.0, brightness + step * SUGGESTION_BRIGHTNESS_STEP)
        suggestions.append(from_hsb(hue, saturation, value, base.alpha))
    return suggestions[:count]
