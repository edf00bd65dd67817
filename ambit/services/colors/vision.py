"""
Color vision deficiency simulation.

Linear per-channel approximations of the common deficiencies, applied to
single colors or whole RGBA pixel buffers, plus a CIE76 confusion measure.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import cv2
import numpy as np

from .pixels import PixelBuffer
from .space import Color


class VisionType(str, Enum):
    NORMAL = "normal"
    PROTANOPIA = "protanopia"
    DEUTERANOPIA = "deuteranopia"
    TRITANOPIA = "tritanopia"
    ACHROMATOPSIA = "achromatopsia"
    PROTANOMALY = "protanomaly"
    DEUTERANOMALY = "deuteranomaly"
    TRITANOMALY = "tritanomaly"


class ConfusionSeverity(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def description(self) -> str:
        return _SEVERITY_DESCRIPTIONS[self]


_SEVERITY_DESCRIPTIONS = {
    ConfusionSeverity.NONE: "No confusion",
    ConfusionSeverity.MILD: "Mild confusion possible",
    ConfusionSeverity.MODERATE: "Moderate confusion likely",
    ConfusionSeverity.SEVERE: "Severe confusion expected",
}

# Rows map (r, g, b) input to each output channel
VISION_MATRICES: Dict[VisionType, np.ndarray] = {
    VisionType.NORMAL: np.eye(3),
    VisionType.PROTANOPIA: np.array([[0.567, 0.433, 0.0],
                                     [0.558, 0.442, 0.0],
                                     [0.0, 0.0, 1.0]]),
    VisionType.DEUTERANOPIA: np.array([[0.625, 0.375, 0.0],
                                       [0.7, 0.3, 0.0],
                                       [0.0, 0.0, 1.0]]),
    VisionType.TRITANOPIA: np.array([[0.95, 0.0, 0.05],
                                     [0.0, 1.0, 0.0],
                                     [0.433, 0.0, 0.567]]),
    VisionType.ACHROMATOPSIA: np.array([[0.299, 0.587, 0.114],
                                        [0.299, 0.587, 0.114],
                                        [0.299, 0.587, 0.114]]),
    VisionType.PROTANOMALY: np.array([[0.817, 0.183, 0.0],
                                      [0.333, 0.667, 0.0],
                                      [0.0, 0.0, 1.0]]),
    VisionType.DEUTERANOMALY: np.array([[0.8, 0.2, 0.0],
                                        [0.258, 0.742, 0.0],
                                        [0.0, 0.0, 1.0]]),
    VisionType.TRITANOMALY: np.array([[0.967, 0.0, 0.033],
                                      [0.0, 1.0, 0.0],
                                      [0.733, 0.0, 0.267]]),
}

# CIE76 delta E band edges: none < 5 <= mild < 15 <= moderate < 30 <= severe
MILD_DELTA_E = 5.0
MODERATE_DELTA_E = 15.0
SEVERE_DELTA_E = 30.0


@dataclass(frozen=True)
class VisionAnalysis:
    vision_type: VisionType
    simulated_color: Color
    color_difference: float
    confusion_severity: ConfusionSeverity


@dataclass(frozen=True)
class VisionTypeInfo:
    name: str
    description: str
    prevalence: str
    characteristics: str


_VISION_INFO = {
    VisionType.NORMAL: VisionTypeInfo(
        "Normal Vision", "Standard human color vision", "Standard",
        "Full color perception across visible spectrum"),
    VisionType.PROTANOPIA: VisionTypeInfo(
        "Protanopia", "Red-blind color vision deficiency", "1.3% of males, 0.02% of females",
        "Difficulty distinguishing red and green hues"),
    VisionType.DEUTERANOPIA: VisionTypeInfo(
        "Deuteranopia", "Green-blind color vision deficiency", "1.2% of males, 0.01% of females",
        "Difficulty distinguishing red and green hues"),
    VisionType.TRITANOPIA: VisionTypeInfo(
        "Tritanopia", "Blue-blind color vision deficiency", "0.003% of population",
        "Difficulty distinguishing blue and yellow hues"),
    VisionType.ACHROMATOPSIA: VisionTypeInfo(
        "Achromatopsia", "Complete color blindness", "0.00003% of population",
        "No color perception, only shades of gray"),
    VisionType.PROTANOMALY: VisionTypeInfo(
        "Protanomaly", "Reduced red sensitivity", "1.3% of males, 0.02% of females",
        "Reduced sensitivity to red light"),
    VisionType.DEUTERANOMALY: VisionTypeInfo(
        "Deuteranomaly", "Reduced green sensitivity", "5.0% of males, 0.35% of females",
        "Reduced sensitivity to green light"),
    VisionType.TRITANOMALY: VisionTypeInfo(
        "Tritanomaly", "Reduced blue sensitivity", "0.01% of population",
        "Reduced sensitivity to blue light"),
}


def simulate_color(color: Color, vision_type: VisionType) -> Color:
    """Simulate how a color appears under the given vision type. Alpha is kept."""
    matrix = VISION_MATRICES[VisionType(vision_type)]
    r, g, b = matrix @ np.array(color.rgb)
    return Color(float(r), float(g), float(b), color.alpha)


def simulate_pixels(pixels: PixelBuffer, vision_type: VisionType) -> PixelBuffer:
    """
    Simulate a vision type over a whole RGBA buffer.

    Returns:
        New PixelBuffer of the same size with alpha untouched
    """
    matrix = VISION_MATRICES[VisionType(vision_type)]
    src = pixels.array
    rgb = src[..., :3].astype(np.float64) / 255.0
    simulated = np.clip(rgb @ matrix.T, 0.0, 1.0)

    out = src.copy()
    out[..., :3] = np.rint(simulated * 255.0).astype(np.uint8)
    return PixelBuffer(pixels.width, pixels.height, out)


def to_lab(colors: Sequence[Color]) -> np.ndarray:
    """CIE Lab for a sequence of colors as an (N, 3) float array."""
    rgb = np.array([c.rgb for c in colors], dtype=np.float32).reshape(-1, 1, 3)
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2Lab).reshape(-1, 3).astype(np.float64)


def delta_e(a: Color, b: Color) -> float:
    """CIE76 color difference between two colors."""
    lab = to_lab([a, b])
    return float(np.linalg.norm(lab[0] - lab[1]))


def confusion_severity(difference: float) -> ConfusionSeverity:
    if difference < MILD_DELTA_E:
        return ConfusionSeverity.NONE
    if difference < MODERATE_DELTA_E:
        return ConfusionSeverity.MILD
    if difference < SEVERE_DELTA_E:
        return ConfusionSeverity.MODERATE
    return ConfusionSeverity.SEVERE


def analyze_color_confusion(color: Color,
                            vision_types: Optional[Iterable[VisionType]] = None) -> List[VisionAnalysis]:
    """
    Measure how far a color shifts under each vision type.

    Args:
        color: Color to analyze
        vision_types: Types to check; defaults to all of them

    Returns:
        One VisionAnalysis per vision type, in the order given
    """
    types = list(VisionType) if vision_types is None else [VisionType(v) for v in vision_types]
    analyses = []
    for vision_type in types:
        simulated = simulate_color(color, vision_type)
        difference = delta_e(color, simulated)
        analyses.append(VisionAnalysis(
            vision_type=vision_type,
            simulated_color=simulated,
            color_difference=difference,
            confusion_severity=confusion_severity(difference),
        ))
    return analyses


def vision_type_info(vision_type: VisionType) -> VisionTypeInfo:
    return _VISION_INFO[VisionType(vision_type)]
