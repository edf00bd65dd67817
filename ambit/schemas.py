"""
Ambit API Schemas
Pydantic models for color extraction, harmony, analysis and optimization
request/response validation.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ambit.config import config

HEX_PATTERN = r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$"


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("ambit-color-engine", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


# ============================================================================
# SHARED
# ============================================================================

class PixelPayload(BaseModel):
    """Raw RGBA8 pixels; the engine performs no image decoding."""
    width: int = Field(..., gt=0, description="Image width in pixels")
    height: int = Field(..., gt=0, description="Image height in pixels")
    rgba_b64: str = Field(
        ...,
        min_length=1,
        description="Base64 of width*height*4 bytes in RGBA order, row-major"
    )


class RegionModel(BaseModel):
    """Pixel rectangle; clipped to the image bounds."""
    x: int = Field(..., description="Left edge in pixels")
    y: int = Field(..., description="Top edge in pixels")
    width: int = Field(..., gt=0, description="Region width in pixels")
    height: int = Field(..., gt=0, description="Region height in pixels")


class ColorOut(BaseModel):
    """Single color as hex and normalized RGBA."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-F]{6}$",
        description="Hex color code in format #RRGGBB"
    )
    rgba: List[float] = Field(
        ...,
        min_length=4,
        max_length=4,
        description="Normalized [r, g, b, a] floats in 0.0-1.0"
    )


class PaletteIn(BaseModel):
    """Palette supplied by the client."""
    name: str = Field("Custom Palette", description="Palette display name")
    colors: List[str] = Field(
        ...,
        min_length=1,
        description="Hex colors (#RGB, #RRGGBB or #AARRGGBB); position 0 is the hero"
    )


class PaletteOut(BaseModel):
    """Palette returned by the engine."""
    name: str = Field(..., description="Palette display name")
    colors: List[ColorOut] = Field(..., description="Ordered colors; position 0 is the hero")
    style: Optional[str] = Field(None, description="Generation style, if any")
    source: str = Field(..., description="image, generated, optimized or custom")


class AccessibilityIssueOut(BaseModel):
    message: str = Field(..., description="What is wrong")
    suggestion: str = Field(..., description="How to fix it")
    severity: Literal["severe", "moderate"] = Field(..., description="severe below 3:1, moderate below 4.5:1")
    indices: List[int] = Field(..., min_length=2, max_length=2, description="0-based color positions")
    hexes: List[str] = Field(..., min_length=2, max_length=2, description="Hex codes of the pair")
    ratio: float = Field(..., ge=1.0, description="WCAG contrast ratio of the pair")


class VisionIssueOut(BaseModel):
    vision_type: str = Field(..., description="Color vision deficiency checked")
    indices: List[int] = Field(..., min_length=2, max_length=2, description="0-based color positions")
    message: str = Field(..., description="Human-readable finding")
    original_delta_e: float = Field(..., description="CIE76 difference in normal vision")
    simulated_delta_e: float = Field(..., description="CIE76 difference under the deficiency")


class AnalysisOut(BaseModel):
    """Palette analysis."""
    color_count: int
    harmony_score: float = Field(..., ge=0.0, le=100.0, description="Share of harmonious pairs, 0-100")
    harmony_grade: str
    max_contrast_ratio: float = Field(..., ge=1.0)
    min_contrast_ratio: float = Field(..., ge=1.0)
    contrast_ratios: List[float] = Field(..., description="All pairwise contrast ratios, descending")
    accessibility_issues: List[AccessibilityIssueOut]
    vision_issues: List[VisionIssueOut]
    harmony_strengths: List[str]
    harmony_suggestions: List[str]
    average_brightness: float = Field(..., description="Mean HSL lightness")
    average_saturation: float = Field(..., description="Mean HSL saturation")
    has_warm_colors: bool
    has_cool_colors: bool
    has_neutral_colors: bool
    overall_quality: str


# ============================================================================
# REQUESTS / RESPONSES
# ============================================================================

class ExtractRequest(BaseModel):
    """Color extraction request."""
    pixels: PixelPayload
    count: int = Field(
        config.DEFAULT_COLOR_COUNT,
        ge=1,
        le=config.MAX_COLORS,
        description="Number of colors to return"
    )
    avoid_dark: bool = Field(False, description="Skip very dark pixels/buckets")
    mode: Literal["random", "dominant"] = Field("dominant", description="Extraction strategy")
    region: Optional[RegionModel] = Field(None, description="Dominant mode only: sub-rectangle to scan")
    seed: Optional[int] = Field(None, description="Random mode only: seed for reproducible sampling")


class ExtractResponse(BaseModel):
    colors: List[ColorOut]
    mode: str
    processing_time_ms: float


class HarmonyRequest(BaseModel):
    """Harmony palette request."""
    base_hex: str = Field(..., pattern=HEX_PATTERN, description="Seed color")
    harmony: Optional[
        Literal["complementary", "analogous", "triadic", "tetradic", "split_complementary", "monochromatic", "square"]
    ] = Field(None, description="Harmony rule; omitted means adaptive")
    count: int = Field(
        config.DEFAULT_COLOR_COUNT,
        ge=1,
        le=config.MAX_COLORS,
        description="Number of colors"
    )


class HarmonyResponse(BaseModel):
    palette: PaletteOut
    harmony: str = Field(..., description="Display name of the rule used")


class GenerateRequest(BaseModel):
    """Image palette generation request."""
    pixels: PixelPayload
    style: Literal["adaptive", "harmonic", "monochromatic", "complementary", "triadic", "analogous"] = "adaptive"
    count: int = Field(
        config.DEFAULT_COLOR_COUNT,
        ge=1,
        le=config.MAX_COLORS,
        description="Number of colors"
    )


class AnalyzeRequest(BaseModel):
    palette: PaletteIn


class OptimizeRequest(BaseModel):
    palette: PaletteIn
    purpose: Literal["ui", "branding", "artistic", "accessible"]


class PaletteWithAnalysisResponse(BaseModel):
    palette: PaletteOut
    analysis: AnalysisOut
    purpose_score: Optional[float] = Field(None, description="Optimization target score, when optimized")


class ContrastRequest(BaseModel):
    """Text/background contrast check."""
    text_hex: str = Field(..., pattern=HEX_PATTERN, description="Text color")
    background_hex: str = Field(..., pattern=HEX_PATTERN, description="Background color")
    font_size: float = Field(14.0, gt=0, description="Text size in points")
    bold: bool = Field(False, description="Whether the text is bold")


class ComplianceOut(BaseModel):
    normal: bool = Field(..., description="Passes for normal-size text")
    large: bool = Field(..., description="Passes for large text")


class ContrastResponse(BaseModel):
    ratio: float = Field(..., ge=1.0, description="WCAG contrast ratio")
    grade: Literal["AAA", "AA", "Fail"] = Field(..., description="Grade for the given text size")
    is_large_text: bool
    wcag_aa: ComplianceOut
    wcag_aaa: ComplianceOut
    recommendations: List[str]
    alternatives: List[ColorOut] = Field(
        ...,
        description="Variants of the text color that pass at least AA on this background"
    )
