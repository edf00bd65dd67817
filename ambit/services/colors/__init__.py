"""
Ambit Colors Module

Color science engine: color space conversions, extraction from pixel
buffers, harmony generation, palette analysis and purpose-driven
optimization.
"""

from .analysis import (
    AccessibilityIssue,
    ContrastAnalysis,
    PaletteAnalysis,
    VisionIssue,
    analyze_contrast,
    analyze_palette,
    suggest_accessible_colors,
)
from .errors import (
    ColorEngineError,
    EmptyInputError,
    InvalidCountError,
    InvalidHexFormatError,
    PixelBufferError,
)
from .extraction import extract_clustered_colors, extract_prominent_colors, extract_random_colors
from .harmony import (
    HarmonyType,
    determine_best_harmony,
    generate_harmonized_palette,
    generate_harmony,
    generate_harmony_variations,
    select_adaptive_harmony,
)
from .models import ColorPalette, PalettePurpose, PaletteSource, PaletteStyle
from .optimizer import optimize_and_analyze, optimize_palette, purpose_score, separate_for_color_vision
from .palette import generate_palette
from .pixels import PixelBuffer, Region
from .space import (
    BLACK,
    WHITE,
    Color,
    contrast_ratio,
    distance,
    from_hsb,
    from_hsl,
    parse_hex,
    relative_luminance,
    to_hex,
    to_hsb,
    to_hsl,
    try_parse_hex,
)
from .vision import VisionType, analyze_color_confusion, simulate_color, simulate_pixels, vision_type_info

__version__ = "1.0.0"

__all__ = [
    "AccessibilityIssue", "ContrastAnalysis", "PaletteAnalysis", "VisionIssue",
    "analyze_contrast", "analyze_palette", "suggest_accessible_colors",
    "ColorEngineError", "EmptyInputError", "InvalidCountError", "InvalidHexFormatError", "PixelBufferError",
    "extract_clustered_colors", "extract_prominent_colors", "extract_random_colors",
    "HarmonyType", "determine_best_harmony", "generate_harmonized_palette", "generate_harmony",
    "generate_harmony_variations", "select_adaptive_harmony",
    "ColorPalette", "PalettePurpose", "PaletteSource", "PaletteStyle",
    "optimize_and_analyze", "optimize_palette", "purpose_score", "separate_for_color_vision",
    "generate_palette",
    "PixelBuffer", "Region",
    "BLACK", "WHITE", "Color", "contrast_ratio", "distance", "from_hsb", "from_hsl", "parse_hex",
    "relative_luminance", "to_hex", "to_hsb", "to_hsl", "try_parse_hex",
    "VisionType", "analyze_color_confusion", "simulate_color", "simulate_pixels", "vision_type_info",
]
