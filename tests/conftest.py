"""
Test configuration and fixtures for the Ambit color engine tests.
"""
import base64

import numpy as np
import pytest
from fastapi.testclient import TestClient

from ambit.services.colors.pixels import PixelBuffer
from main import app


RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def make_buffer(pixels, width, height=None) -> PixelBuffer:
    """Build a PixelBuffer from a row-major list of RGBA tuples."""
    if height is None:
        height = len(pixels) // width
    data = bytes(channel for pixel in pixels for channel in pixel)
    return PixelBuffer(width, height, data)


def encode_pixels(buffer: PixelBuffer) -> dict:
    """JSON payload for a PixelBuffer as the API expects it."""
    return {
        "width": buffer.width,
        "height": buffer.height,
        "rgba_b64": base64.b64encode(buffer.to_bytes()).decode("ascii"),
    }


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from ambit.utils.metrics import reset_metrics
    from ambit.services.observability import get_performance_collector
    reset_metrics()
    get_performance_collector().reset()


@pytest.fixture
def four_pixel_image():
    """2x2 image with four distinct colors."""
    return make_buffer([RED, GREEN, BLUE, WHITE], width=2)


@pytest.fixture
def noisy_image():
    """Deterministic 37x23 image of random colors."""
    rng = np.random.default_rng(7)
    array = rng.integers(0, 256, size=(23, 37, 4), dtype=np.uint8)
    array[..., 3] = 255
    return PixelBuffer.from_array(array)


@pytest.fixture
def two_tone_image():
    """16x16 image: left 10 columns red, right 6 columns blue."""
    array = np.zeros((16, 16, 4), dtype=np.uint8)
    array[:, :10] = RED
    array[:, 10:] = BLUE
    return PixelBuffer.from_array(array)
