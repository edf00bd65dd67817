"""
Ambit Color Engine Errors

Typed error conditions raised by the color engine. All of them derive from
ValueError so callers that only care about "bad input" can catch that.
"""

import numbers


class ColorEngineError(ValueError):
    """Base class for color engine input errors."""
    pass


class InvalidHexFormatError(ColorEngineError):
    """Hex color string has the wrong length or non-hex characters."""
    pass


class InvalidCountError(ColorEngineError):
    """Requested color count is not a positive integer."""
    pass


class EmptyInputError(ColorEngineError):
    """Pixel buffer or region contains no pixels."""
    pass


class PixelBufferError(ColorEngineError):
    """Pixel buffer data does not match its declared dimensions."""
    pass


def validate_count(count: int) -> int:
    """
    Fail fast on non-positive color counts.

    Args:
        count: Requested number of colors

    Returns:
        The count as an int

    Raises:
        InvalidCountError: If count is not an integer >= 1
    """
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise InvalidCountError(f"Color count must be an integer, got {count!r}")
    if count <= 0:
        raise InvalidCountError(f"Color count must be >= 1, got {count}")
    return int(count)
