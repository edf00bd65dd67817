"""
Ambit v1 API Routes
JSON surface over the color engine: extraction, harmony, palette generation,
analysis and optimization.
"""
import base64
import binascii
import time
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from ambit.config import config
from ambit.schemas import (
    AccessibilityIssueOut,
    AnalysisOut,
    AnalyzeRequest,
    ColorOut,
    ComplianceOut,
    ContrastRequest,
    ContrastResponse,
    ExtractRequest,
    ExtractResponse,
    GenerateRequest,
    HarmonyRequest,
    HarmonyResponse,
    HealthResponse,
    OptimizeRequest,
    PaletteIn,
    PaletteOut,
    PaletteWithAnalysisResponse,
    PixelPayload,
    VisionIssueOut,
)
from ambit.services.colors import (
    ColorEngineError,
    ColorPalette,
    PalettePurpose,
    PaletteSource,
    PaletteStyle,
    PixelBuffer,
    PixelBufferError,
    Region,
    analyze_contrast,
    analyze_palette,
    generate_harmonized_palette,
    optimize_and_analyze,
    parse_hex,
    purpose_score,
    suggest_accessible_colors,
)
from ambit.services.colors.analysis import PaletteAnalysis
from ambit.services.colors.space import Color, to_hex
from ambit.services.observability import get_performance_collector
from ambit.services.reliability import (
    ExtractionTimeoutError,
    extract_prominent_colors_async,
    extract_random_colors_async,
    generate_palette_async,
)
from ambit.utils.ids import generate_request_id
from ambit.utils.logging import log_request, log_request_complete, log_request_error
from ambit.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Color Engine"])


# ============================================================================
# CONVERSION HELPERS
# ============================================================================

def decode_pixels(payload: PixelPayload) -> PixelBuffer:
    """Decode a base64 RGBA payload into a validated PixelBuffer."""
    if not config.validate_pixel_count(payload.width, payload.height):
        raise PixelBufferError(
            f"Image of {payload.width}x{payload.height} exceeds the {config.MAX_PIXELS} pixel limit"
        )
    try:
        data = base64.b64decode(payload.rgba_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PixelBufferError(f"rgba_b64 is not valid base64: {e}")
    return PixelBuffer(payload.width, payload.height, data)


def color_out(color: Color) -> ColorOut:
    return ColorOut(hex=to_hex(color), rgba=list(color.rgba))


def palette_out(palette: ColorPalette) -> PaletteOut:
    return PaletteOut(
        name=palette.name,
        colors=[color_out(c) for c in palette.colors],
        style=palette.style.value if palette.style else None,
        source=palette.source.value,
    )


def palette_in(payload: PaletteIn) -> ColorPalette:
    return ColorPalette(
        name=payload.name,
        colors=tuple(parse_hex(h) for h in payload.colors),
        source=PaletteSource.CUSTOM,
    )


def analysis_out(analysis: PaletteAnalysis) -> AnalysisOut:
    return AnalysisOut(
        color_count=analysis.color_count,
        harmony_score=analysis.harmony_score,
        harmony_grade=analysis.harmony_grade,
        max_contrast_ratio=analysis.max_contrast_ratio,
        min_contrast_ratio=analysis.min_contrast_ratio,
        contrast_ratios=analysis.contrast_ratios,
        accessibility_issues=[
            AccessibilityIssueOut(
                message=issue.message,
                suggestion=issue.suggestion,
                severity=issue.severity,
                indices=list(issue.indices),
                hexes=list(issue.hexes),
                ratio=issue.ratio,
            )
            for issue in analysis.accessibility_issues
        ],
        vision_issues=[
            VisionIssueOut(
                vision_type=issue.vision_type.value,
                indices=list(issue.indices),
                message=issue.message,
                original_delta_e=issue.original_delta_e,
                simulated_delta_e=issue.simulated_delta_e,
            )
            for issue in analysis.vision_issues
        ],
        harmony_strengths=analysis.harmony_strengths,
        harmony_suggestions=analysis.harmony_suggestions,
        average_brightness=analysis.average_brightness,
        average_saturation=analysis.average_saturation,
        has_warm_colors=analysis.has_warm_colors,
        has_cool_colors=analysis.has_cool_colors,
        has_neutral_colors=analysis.has_neutral_colors,
        overall_quality=analysis.overall_quality,
    )


def _fail(request_id: str, operation: str, error: Exception) -> HTTPException:
    """Log, count and translate an engine error into an HTTP error."""
    log_request_error(request_id, operation, error)
    get_metrics().increment_failure_count(type(error).__name__)
    if isinstance(error, ExtractionTimeoutError):
        return HTTPException(status_code=504, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


def _finish(request_id: str, operation: str, start_time: float) -> float:
    duration_ms = (time.time() - start_time) * 1000
    get_metrics().record_timing(operation, duration_ms)
    log_request_complete(request_id, operation, duration_ms)
    return duration_ms


# ============================================================================
# ROUTES
# ============================================================================

@router.get("/healthz",
            response_model=HealthResponse,
            summary="Health Check",
            description="Liveness probe for the color engine")
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(ok=True, version=config.API_VERSION or "unknown")


@router.post("/extract",
             response_model=ExtractResponse,
             summary="Extract Colors",
             description="Extract colors from raw RGBA pixels by random sampling or bucket dominance")
async def extract_colors(request: ExtractRequest) -> ExtractResponse:
    request_id = generate_request_id("ext")
    start_time = time.time()
    get_metrics().increment_request_count("extract")
    get_metrics().increment_mode_count("extract", request.mode)
    log_request(request_id, "extract", mode=request.mode, count=request.count,
                width=request.pixels.width, height=request.pixels.height)

    try:
        pixels = decode_pixels(request.pixels)
        if request.mode == "random":
            colors = await extract_random_colors_async(
                pixels, request.count, request.avoid_dark, rng_seed=request.seed
            )
        else:
            region = None
            if request.region is not None:
                region = Region(request.region.x, request.region.y, request.region.width, request.region.height)
            colors = await extract_prominent_colors_async(
                pixels, request.count, request.avoid_dark, region=region,
                bucket_bits=config.BUCKET_BITS, workers=config.EXTRACTION_WORKERS,
            )
    except (ColorEngineError, ExtractionTimeoutError) as e:
        raise _fail(request_id, "extract", e)

    duration_ms = _finish(request_id, "extract", start_time)
    return ExtractResponse(
        colors=[color_out(c) for c in colors],
        mode=request.mode,
        processing_time_ms=round(duration_ms, 2),
    )


@router.post("/harmony",
             response_model=HarmonyResponse,
             summary="Harmony Palette",
             description="Generate a harmony palette from a base color; omit harmony for adaptive selection")
async def harmony_palette(request: HarmonyRequest) -> HarmonyResponse:
    request_id = generate_request_id("har")
    start_time = time.time()
    get_metrics().increment_request_count("harmony")
    get_metrics().increment_mode_count("harmony", request.harmony or "adaptive")
    log_request(request_id, "harmony", base_hex=request.base_hex, harmony=request.harmony)

    try:
        base = parse_hex(request.base_hex)
        palette, harmony_name = generate_harmonized_palette(base, request.harmony, request.count)
    except ColorEngineError as e:
        raise _fail(request_id, "harmony", e)

    _finish(request_id, "harmony", start_time)
    return HarmonyResponse(palette=palette_out(palette), harmony=harmony_name)


@router.post("/palette/generate",
             response_model=PaletteWithAnalysisResponse,
             summary="Generate Palette From Pixels",
             description="Cluster image colors and shape them into a palette of the requested style")
async def generate_palette_route(request: GenerateRequest) -> PaletteWithAnalysisResponse:
    request_id = generate_request_id("gen")
    start_time = time.time()
    get_metrics().increment_request_count("generate")
    get_metrics().increment_mode_count("generate", request.style)
    log_request(request_id, "generate", style=request.style, count=request.count)

    try:
        pixels = decode_pixels(request.pixels)
        palette = await generate_palette_async(pixels, PaletteStyle(request.style), request.count)
        analysis = analyze_palette(palette)
    except (ColorEngineError, ExtractionTimeoutError) as e:
        raise _fail(request_id, "generate", e)

    _finish(request_id, "generate", start_time)
    return PaletteWithAnalysisResponse(palette=palette_out(palette), analysis=analysis_out(analysis))


@router.post("/palette/analyze",
             response_model=AnalysisOut,
             summary="Analyze Palette",
             description="Score a palette for harmony, contrast and accessibility")
async def analyze_palette_route(request: AnalyzeRequest) -> AnalysisOut:
    request_id = generate_request_id("ana")
    start_time = time.time()
    get_metrics().increment_request_count("analyze")
    log_request(request_id, "analyze", colors=len(request.palette.colors))

    try:
        analysis = analyze_palette(palette_in(request.palette))
    except ColorEngineError as e:
        raise _fail(request_id, "analyze", e)

    _finish(request_id, "analyze", start_time)
    return analysis_out(analysis)


@router.post("/contrast",
             response_model=ContrastResponse,
             summary="Check Text Contrast",
             description="WCAG AA/AAA compliance of a text color on a background, with passing alternatives")
async def check_contrast(request: ContrastRequest) -> ContrastResponse:
    request_id = generate_request_id("con")
    start_time = time.time()
    get_metrics().increment_request_count("contrast")
    log_request(request_id, "contrast", text_hex=request.text_hex, background_hex=request.background_hex)

    try:
        text = parse_hex(request.text_hex)
        background = parse_hex(request.background_hex)
        result = analyze_contrast(text, background, request.font_size, request.bold)
        alternatives = [
            color for color in suggest_accessible_colors(text)[1:]
            if analyze_contrast(color, background, request.font_size, request.bold).grade != "Fail"
        ]
    except ColorEngineError as e:
        raise _fail(request_id, "contrast", e)

    _finish(request_id, "contrast", start_time)
    return ContrastResponse(
        ratio=result.ratio,
        grade=result.grade,
        is_large_text=result.is_large_text,
        wcag_aa=ComplianceOut(normal=result.wcag_aa.normal, large=result.wcag_aa.large),
        wcag_aaa=ComplianceOut(normal=result.wcag_aaa.normal, large=result.wcag_aaa.large),
        recommendations=result.recommendations,
        alternatives=[color_out(c) for c in alternatives],
    )


@router.post("/palette/optimize",
             response_model=PaletteWithAnalysisResponse,
             summary="Optimize Palette",
             description="Re-tune a palette for ui, branding, artistic or accessible use")
async def optimize_palette_route(request: OptimizeRequest) -> PaletteWithAnalysisResponse:
    request_id = generate_request_id("opt")
    start_time = time.time()
    get_metrics().increment_request_count("optimize")
    get_metrics().increment_mode_count("optimize", request.purpose)
    log_request(request_id, "optimize", purpose=request.purpose, colors=len(request.palette.colors))

    try:
        purpose = PalettePurpose(request.purpose)
        optimized, analysis = optimize_and_analyze(palette_in(request.palette), purpose)
        score = purpose_score(optimized, purpose)
    except ColorEngineError as e:
        raise _fail(request_id, "optimize", e)

    _finish(request_id, "optimize", start_time)
    return PaletteWithAnalysisResponse(
        palette=palette_out(optimized),
        analysis=analysis_out(analysis),
        purpose_score=score,
    )


@router.get("/metrics",
            summary="Service Metrics",
            description="In-process request counters, timings and engine performance")
async def get_service_metrics() -> Dict[str, Any]:
    """Metrics snapshot."""
    summary = get_metrics().get_summary()
    if config.METRICS_ENABLED:
        summary["engine"] = get_performance_collector().get_all_stats()
    return summary
