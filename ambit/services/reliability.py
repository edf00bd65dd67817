"""
Ambit Reliability & Timeout Management
Runs the synchronous extraction engine off the event loop under timeouts.
"""
import asyncio
from contextlib import asynccontextmanager
from functools import wraps
from typing import Dict, List, Optional

from loguru import logger

from ambit.config import config
from ambit.services.colors.extraction import extract_prominent_colors, extract_random_colors
from ambit.services.colors.palette import generate_palette
from ambit.services.colors.models import ColorPalette, PaletteStyle
from ambit.services.colors.pixels import PixelBuffer, Region
from ambit.services.colors.space import Color


class ExtractionTimeoutError(Exception):
    """Raised when an off-thread engine call exceeds its time budget."""
    pass


class TimeoutManager:
    """Manages timeouts for engine operations."""

    def __init__(self, default_timeout: float = 30.0, timeouts: Optional[Dict[str, float]] = None):
        self.default_timeout = default_timeout
        self.timeouts = timeouts if timeouts is not None else {
            "extraction": config.TIMEOUT_EXTRACTION_MS / 1000.0,
            "palette": config.TIMEOUT_PALETTE_MS / 1000.0,
        }

    @asynccontextmanager
    async def timeout(self, operation: str, custom_timeout: Optional[float] = None):
        """Context manager for timeout handling."""
        timeout_value = custom_timeout if custom_timeout is not None else self.timeouts.get(operation, self.default_timeout)

        try:
            async with asyncio.timeout(timeout_value):
                yield
        except TimeoutError:
            logger.error(f"Timeout in {operation} after {timeout_value}s")
            raise ExtractionTimeoutError(f"Operation {operation} timed out after {timeout_value}s")

    def with_timeout(self, operation: str, timeout: Optional[float] = None):
        """Decorator adding a timeout to a coroutine function."""
        def decorator(func):
            @wraps(func)
            async def wrapper(*args, **kwargs):
                async with self.timeout(operation, timeout):
                    return await func(*args, **kwargs)
            return wrapper
        return decorator


# Global timeout manager
timeout_manager = TimeoutManager()


async def extract_random_colors_async(pixels: PixelBuffer, count: int, avoid_dark: bool = False,
                                      rng_seed: Optional[int] = None,
                                      timeout: Optional[float] = None) -> List[Color]:
    """
    Run extract_random_colors in a worker thread.

    Raises:
        ExtractionTimeoutError: If the call exceeds the extraction timeout
    """
    async with timeout_manager.timeout("extraction", timeout):
        return await asyncio.to_thread(extract_random_colors, pixels, count, avoid_dark, rng_seed)


async def extract_prominent_colors_async(pixels: PixelBuffer, count: int, avoid_dark: bool = False,
                                         region: Optional[Region] = None, bucket_bits: int = 4,
                                         workers: int = 1, timeout: Optional[float] = None) -> List[Color]:
    """
    Run extract_prominent_colors in a worker thread.

    Raises:
        ExtractionTimeoutError: If the call exceeds the extraction timeout
    """
    async with timeout_manager.timeout("extraction", timeout):
        return await asyncio.to_thread(
            extract_prominent_colors, pixels, count, avoid_dark, region, bucket_bits, workers
        )


async def generate_palette_async(pixels: PixelBuffer, style: PaletteStyle = PaletteStyle.ADAPTIVE,
                                 count: int = 5, timeout: Optional[float] = None) -> ColorPalette:
    """Run generate_palette in a worker thread under the palette timeout."""
    async with timeout_manager.timeout("palette", timeout):
        return await asyncio.to_thread(generate_palette, pixels, style, count)
