"""
Ambit Color Space

This module defines the immutable Color value used throughout the engine and
the conversions between RGB, HSL and HSB, the hex and CSS-style string codecs,
WCAG relative luminance and contrast ratio, and plain RGB distance.
"""

import colorsys
import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .errors import ColorEngineError, InvalidHexFormatError


HSL = Tuple[float, float, float]
HSB = Tuple[float, float, float]

# WCAG 2.x linearization breakpoint and channel weights
LINEARIZE_BREAKPOINT = 0.03928
LUMINANCE_WEIGHTS = (0.2126, 0.7152, 0.0722)

# Hue classification
WARM_HUE_MAX = 60.0
WARM_HUE_MIN = 300.0
NEUTRAL_SATURATION = 0.1

_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]+)$")
_RGB_RE = re.compile(r"^rgb\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*\)$", re.IGNORECASE)
_HSL_RE = re.compile(r"^hsl\(\s*([\d.]+)\s*,\s*([\d.]+)%?\s*,\s*([\d.]+)%?\s*\)$", re.IGNORECASE)


def clamp01(value: float) -> float:
    """Clamp a float to [0, 1]; NaN becomes 0."""
    value = float(value)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def wrap_hue(degrees: float) -> float:
    """
    Wrap a hue angle into [0, 360).

    Args:
        degrees: Hue in degrees, any sign or magnitude

    Returns:
        Equivalent hue in [0, 360)
    """
    h = math.fmod(float(degrees), 360.0)
    if h < 0.0:
        h += 360.0
    # fmod of tiny negatives can land exactly on 360.0
    if h >= 360.0:
        h = 0.0
    return h


def hue_separation(h1: float, h2: float) -> float:
    """Minimum angular separation between two hues in degrees, in [0, 180]."""
    diff = abs(wrap_hue(h1) - wrap_hue(h2))
    return min(diff, 360.0 - diff)


@dataclass(frozen=True)
class Color:
    """An RGBA color with normalized float channels in [0, 1]."""
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def __post_init__(self):
        # Clamp instead of rejecting: sliders and pickers produce boundary noise
        for channel in ("red", "green", "blue", "alpha"):
            object.__setattr__(self, channel, clamp01(getattr(self, channel)))

    @classmethod
    def from_rgb255(cls, red: int, green: int, blue: int, alpha: int = 255) -> "Color":
        """Build a color from 8-bit channel values."""
        return cls(red / 255.0, green / 255.0, blue / 255.0, alpha / 255.0)

    @classmethod
    def from_hex(cls, hex_color: str) -> "Color":
        return parse_hex(hex_color)

    @classmethod
    def from_hsl(cls, hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> "Color":
        return from_hsl(hue, saturation, lightness, alpha)

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    @property
    def rgba(self) -> Tuple[float, float, float, float]:
        return (self.red, self.green, self.blue, self.alpha)

    @property
    def hsl(self) -> HSL:
        return to_hsl(self)

    @property
    def hsb(self) -> HSB:
        return to_hsb(self)

    @property
    def hue(self) -> float:
        return to_hsl(self)[0]

    @property
    def saturation(self) -> float:
        return to_hsl(self)[1]

    @property
    def lightness(self) -> float:
        return to_hsl(self)[2]

    @property
    def brightness(self) -> float:
        """HSB brightness (value): the largest channel."""
        return max(self.red, self.green, self.blue)

    @property
    def relative_luminance(self) -> float:
        return relative_luminance(self)

    @property
    def is_warm(self) -> bool:
        hue = self.hue
        return hue <= WARM_HUE_MAX or hue >= WARM_HUE_MIN

    @property
    def is_cool(self) -> bool:
        return not self.is_warm

    @property
    def is_neutral(self) -> bool:
        return self.saturation < NEUTRAL_SATURATION

    def to_hex(self, include_alpha: bool = False) -> str:
        return to_hex(self, include_alpha=include_alpha)

    def with_hue(self, hue: float) -> "Color":
        _, s, l = to_hsl(self)
        return from_hsl(hue, s, l, self.alpha)

    def with_saturation(self, saturation: float) -> "Color":
        h, _, l = to_hsl(self)
        return from_hsl(h, saturation, l, self.alpha)

    def with_lightness(self, lightness: float) -> "Color":
        h, s, _ = to_hsl(self)
        return from_hsl(h, s, lightness, self.alpha)

    def adjusted_hue(self, degrees: float) -> "Color":
        """Rotate hue by the given degrees, wrapping modulo 360."""
        h, s, l = to_hsl(self)
        return from_hsl(h + degrees, s, l, self.alpha)

    def __str__(self) -> str:
        return to_hex(self)


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)


def to_hsl(color: Color) -> HSL:
    """
    Convert a color to HSL.

    Args:
        color: Color to convert

    Returns:
        Tuple of (hue, saturation, lightness) with hue in [0, 360) and the
        others in [0, 1]. Achromatic colors report hue 0 and saturation 0.
    """
    h, l, s = colorsys.rgb_to_hls(color.red, color.green, color.blue)
    return wrap_hue(h * 360.0), s, l


def from_hsl(hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> Color:
    """
    Build a color from HSL components.

    Args:
        hue: Hue in degrees (wrapped modulo 360)
        saturation: Saturation (clamped to [0, 1])
        lightness: Lightness (clamped to [0, 1])
        alpha: Alpha (clamped to [0, 1])

    Returns:
        The corresponding Color
    """
    h = wrap_hue(hue) / 360.0
    r, g, b = colorsys.hls_to_rgb(h, clamp01(lightness), clamp01(saturation))
    return Color(r, g, b, alpha)


def to_hsb(color: Color) -> HSB:
    """Convert a color to HSB (HSV): hue in degrees, saturation and brightness in [0, 1]."""
    h, s, v = colorsys.rgb_to_hsv(color.red, color.green, color.blue)
    return wrap_hue(h * 360.0), s, v


def from_hsb(hue: float, saturation: float, brightness: float, alpha: float = 1.0) -> Color:
    """Build a color from HSB (HSV) components."""
    r, g, b = colorsys.hsv_to_rgb(wrap_hue(hue) / 360.0, clamp01(saturation), clamp01(brightness))
    return Color(r, g, b, alpha)


def _linearize(channel: float) -> float:
    if channel <= LINEARIZE_BREAKPOINT:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    """
    WCAG relative luminance of a color.

    Args:
        color: Color to measure

    Returns:
        Luminance in [0, 1]
    """
    wr, wg, wb = LUMINANCE_WEIGHTS
    return (wr * _linearize(color.red)
            + wg * _linearize(color.green)
            + wb * _linearize(color.blue))


def contrast_ratio(a: Color, b: Color) -> float:
    """
    WCAG contrast ratio between two colors.

    The ratio is symmetric in its arguments and lies in [1, 21].
    """
    la = relative_luminance(a)
    lb = relative_luminance(b)
    lighter = max(la, lb)
    darker = min(la, lb)
    return (lighter + 0.05) / (darker + 0.05)


def distance(a: Color, b: Color) -> float:
    """Euclidean distance over normalized RGB. Alpha is ignored."""
    dr = a.red - b.red
    dg = a.green - b.green
    db = a.blue - b.blue
    return math.sqrt(dr * dr + dg * dg + db * db)


def _to_byte(channel: float) -> int:
    return max(0, min(255, int(round(channel * 255.0))))


def to_hex(color: Color, include_alpha: bool = False) -> str:
    """
    Format a color as uppercase hex.

    Args:
        color: Color to format
        include_alpha: Emit #AARRGGBB instead of #RRGGBB

    Returns:
        Hex string that parse_hex reads back to the same bytes
    """
    r, g, b = _to_byte(color.red), _to_byte(color.green), _to_byte(color.blue)
    if include_alpha:
        return f"#{_to_byte(color.alpha):02X}{r:02X}{g:02X}{b:02X}"
    return f"#{r:02X}{g:02X}{b:02X}"


def parse_hex(hex_color: str) -> Color:
    """
    Parse a hex color string.

    Accepts RGB, RRGGBB and AARRGGBB digit groups with an optional leading '#'.

    Args:
        hex_color: Hex string such as "#3366CC", "36C" or "#FF3366CC"

    Returns:
        Parsed Color

    Raises:
        InvalidHexFormatError: On any other length or a non-hex character
    """
    if not isinstance(hex_color, str):
        raise InvalidHexFormatError(f"Invalid hex color format: {hex_color!r}")

    match = _HEX_RE.match(hex_color.strip())
    if match is None:
        raise InvalidHexFormatError(f"Invalid hex color format: {hex_color!r}")

    digits = match.group(1)
    if len(digits) == 3:
        r, g, b = (int(d, 16) * 17 for d in digits)
        a = 255
    elif len(digits) == 6:
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        a = 255
    elif len(digits) == 8:
        a, r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4, 6))
    else:
        raise InvalidHexFormatError(
            f"Invalid hex color format: {hex_color!r} (expected 3, 6 or 8 hex digits)"
        )

    return Color.from_rgb255(r, g, b, a)


def try_parse_hex(hex_color: str) -> Optional[Color]:
    """Parse a hex color, returning None instead of raising on bad input."""
    try:
        return parse_hex(hex_color)
    except InvalidHexFormatError:
        return None


def to_rgb_string(color: Color) -> str:
    return f"rgb({_to_byte(color.red)}, {_to_byte(color.green)}, {_to_byte(color.blue)})"


def parse_rgb_string(value: str) -> Color:
    """Parse an 'rgb(r, g, b)' string with 0-255 channels."""
    match = _RGB_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ColorEngineError(f"Invalid rgb() color format: {value!r}")
    r, g, b = (float(x) / 255.0 for x in match.groups())
    return Color(r, g, b)


def to_hsl_string(color: Color) -> str:
    h, s, l = to_hsl(color)
    return f"hsl({h:.0f}, {s * 100:.0f}%, {l * 100:.0f}%)"


def parse_hsl_string(value: str) -> Color:
    """Parse an 'hsl(h, s%, l%)' string."""
    match = _HSL_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ColorEngineError(f"Invalid hsl() color format: {value!r}")
    h, s, l = (float(x) for x in match.groups())
    return from_hsl(h, s / 100.0, l / 100.0)


def sorted_by_hue(colors: Iterable[Color]) -> List[Color]:
    return sorted(colors, key=lambda c: c.hue)


def sorted_by_lightness(colors: Iterable[Color]) -> List[Color]:
    return sorted(colors, key=lambda c: c.lightness)


def sorted_by_saturation(colors: Iterable[Color]) -> List[Color]:
    return sorted(colors, key=lambda c: c.saturation)
