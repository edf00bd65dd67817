"""
Unit tests for pixel buffers and the color extractors.

Covers:
- PixelBuffer validation and Region clipping
- seeded random sampling with dark rejection
- bucket-frequency dominance, single and multi-threaded
- weighted Lab clustering used by palette generation
"""

import numpy as np
import pytest

from ambit.services.colors.errors import (
    ColorEngineError,
    EmptyInputError,
    InvalidCountError,
    PixelBufferError,
)
from ambit.services.colors.extraction import (
    extract_clustered_colors,
    extract_prominent_colors,
    extract_random_colors,
)
from ambit.services.colors.pixels import PixelBuffer, Region
from ambit.services.colors.space import to_hex
from ambit.services.observability import get_performance_collector

from conftest import BLACK, BLUE, GREEN, RED, WHITE, make_buffer


class TestPixelBuffer:
    """Test pixel buffer validation"""

    def test_accepts_bytes_and_bytearray(self):
        data = bytes(RED + GREEN)
        assert PixelBuffer(2, 1, data).pixel_count == 2
        assert PixelBuffer(1, 2, bytearray(data)).array.shape == (2, 1, 4)

    def test_round_trips_bytes(self):
        data = bytes(RED + GREEN + BLUE + WHITE)
        assert PixelBuffer(2, 2, data).to_bytes() == data

    def test_zero_area_is_empty(self):
        with pytest.raises(EmptyInputError):
            PixelBuffer(0, 4, b"")
        with pytest.raises(EmptyInputError):
            PixelBuffer(4, 0, b"")

    def test_empty_data_is_empty(self):
        with pytest.raises(EmptyInputError):
            PixelBuffer(1, 1, b"")

    def test_length_mismatch(self):
        """A buffer one byte short is rejected"""
        with pytest.raises(PixelBufferError):
            PixelBuffer(2, 2, bytes(15))

    def test_rejects_non_uint8_arrays_and_other_types(self):
        with pytest.raises(PixelBufferError):
            PixelBuffer(1, 1, np.zeros(4, dtype=np.float32))
        with pytest.raises(PixelBufferError):
            PixelBuffer(1, 1, [0, 0, 0, 255])

    def test_from_array_shape_check(self):
        with pytest.raises(PixelBufferError):
            PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_region_clip(self):
        assert Region(2, 3, 4, 5).clip(10, 10) == (2, 3, 6, 8)
        assert Region(-5, -5, 10, 10).clip(8, 8) == (0, 0, 5, 5)
        assert Region(6, 6, 10, 10).clip(8, 8) == (6, 6, 8, 8)
        assert Region(20, 20, 5, 5).clip(8, 8) is None


class TestRandomExtraction:
    """Test seeded random sampling"""

    def test_returns_exact_count(self, noisy_image):
        for count in (1, 5, 64):
            assert len(extract_random_colors(noisy_image, count, rng_seed=1)) == count

    def test_same_seed_same_colors(self, noisy_image):
        first = extract_random_colors(noisy_image, 12, rng_seed=99)
        second = extract_random_colors(noisy_image, 12, rng_seed=99)
        assert first == second

    def test_small_image_yields_every_pixel_before_repeating(self, four_pixel_image):
        """Count above the pixel count still covers every pixel"""
        colors = extract_random_colors(four_pixel_image, 6, rng_seed=3)
        assert len(colors) == 6
        assert set(to_hex(c) for c in colors[:4]) == {"#FF0000", "#00FF00", "#0000FF", "#FFFFFF"}

    def test_preserves_pixel_alpha(self):
        buffer = make_buffer([(10, 20, 30, 128)], width=1)
        (color,) = extract_random_colors(buffer, 1, rng_seed=0)
        assert color.alpha == pytest.approx(128 / 255)
        assert to_hex(color) == "#0A141E"

    def test_avoid_dark_skips_dark_pixels(self):
        """One dark pixel among light ones is never returned"""
        buffer = make_buffer([BLACK] + [WHITE] * 15, width=4)
        colors = extract_random_colors(buffer, 40, avoid_dark=True, rng_seed=5)
        assert all(to_hex(c) == "#FFFFFF" for c in colors)

    def test_avoid_dark_on_all_dark_image_still_returns(self):
        buffer = make_buffer([BLACK] * 9, width=3)
        colors = extract_random_colors(buffer, 4, avoid_dark=True, rng_seed=5)
        assert [to_hex(c) for c in colors] == ["#000000"] * 4

    @pytest.mark.parametrize("count", [0, -3, True, 2.5])
    def test_invalid_count(self, four_pixel_image, count):
        with pytest.raises(InvalidCountError):
            extract_random_colors(four_pixel_image, count)


class TestProminentExtraction:
    """Test bucket-frequency dominance"""

    def test_ranked_by_frequency_then_first_occurrence(self):
        """Green and blue tie on count; green appears first"""
        pixels = [GREEN, RED, BLUE, RED, RED, BLUE, GREEN, RED, BLUE, GREEN, RED, RED]
        buffer = make_buffer(pixels, width=4)
        colors = extract_prominent_colors(buffer, 3)
        assert [to_hex(c) for c in colors] == ["#FF0000", "#00FF00", "#0000FF"]

    def test_cycles_when_fewer_buckets_than_count(self, two_tone_image):
        colors = extract_prominent_colors(two_tone_image, 5)
        assert [to_hex(c) for c in colors] == ["#FF0000", "#0000FF", "#FF0000", "#0000FF", "#FF0000"]

    def test_reports_bucket_mean(self):
        """(250,0,0) and (240,0,0) share a 4-bit bucket"""
        buffer = make_buffer([(250, 0, 0, 255), (240, 0, 0, 255)], width=2)
        (color,) = extract_prominent_colors(buffer, 1)
        assert to_hex(color) == "#F50000"

    def test_output_is_opaque(self):
        buffer = make_buffer([(0, 128, 255, 0)] * 4, width=2)
        (color,) = extract_prominent_colors(buffer, 1)
        assert color.alpha == 1.0

    def test_region_restricts_scan(self, two_tone_image):
        colors = extract_prominent_colors(two_tone_image, 1, region=Region(10, 0, 6, 16))
        assert to_hex(colors[0]) == "#0000FF"

    def test_region_is_clipped(self, two_tone_image):
        colors = extract_prominent_colors(two_tone_image, 2, region=Region(-4, -4, 8, 8))
        assert [to_hex(c) for c in colors] == ["#FF0000", "#FF0000"]

    def test_region_outside_image(self, two_tone_image):
        with pytest.raises(EmptyInputError):
            extract_prominent_colors(two_tone_image, 1, region=Region(100, 100, 4, 4))

    def test_avoid_dark_drops_dark_buckets(self):
        buffer = make_buffer([BLACK] * 10 + [WHITE] * 2, width=4)
        assert to_hex(extract_prominent_colors(buffer, 1)[0]) == "#000000"
        assert to_hex(extract_prominent_colors(buffer, 1, avoid_dark=True)[0]) == "#FFFFFF"

    def test_avoid_dark_on_all_dark_image_still_returns(self):
        buffer = make_buffer([BLACK] * 4, width=2)
        assert to_hex(extract_prominent_colors(buffer, 1, avoid_dark=True)[0]) == "#000000"

    @pytest.mark.parametrize("workers", [2, 3, 4, 64])
    def test_threaded_matches_single_threaded(self, noisy_image, workers):
        expected = extract_prominent_colors(noisy_image, 10)
        assert extract_prominent_colors(noisy_image, 10, workers=workers) == expected

    def test_threaded_with_region_matches(self, noisy_image):
        region = Region(3, 2, 20, 15)
        expected = extract_prominent_colors(noisy_image, 6, region=region)
        assert extract_prominent_colors(noisy_image, 6, region=region, workers=4) == expected

    @pytest.mark.parametrize("bits", [0, 9])
    def test_bucket_bits_bounds(self, four_pixel_image, bits):
        with pytest.raises(ColorEngineError):
            extract_prominent_colors(four_pixel_image, 1, bucket_bits=bits)

    def test_full_resolution_buckets(self):
        buffer = make_buffer([(1, 2, 3, 255), (1, 2, 3, 255), (4, 5, 6, 255)], width=3)
        colors = extract_prominent_colors(buffer, 2, bucket_bits=8)
        assert [to_hex(c) for c in colors] == ["#010203", "#040506"]

    def test_records_performance_sample(self, four_pixel_image):
        extract_prominent_colors(four_pixel_image, 2)
        stats = get_performance_collector().get_operation_stats("extract_prominent")
        assert stats["count"] == 1
        assert stats["error_count"] == 0

    def test_invalid_count(self, four_pixel_image):
        with pytest.raises(InvalidCountError):
            extract_prominent_colors(four_pixel_image, 0)


class TestClusteredExtraction:
    """Test weighted Lab clustering"""

    def test_two_tone_image(self, two_tone_image):
        colors, confidence = extract_clustered_colors(two_tone_image, 2)
        assert [to_hex(c) for c in colors] == ["#FF0000", "#0000FF"]
        assert 0.5 < confidence < 1.0

    def test_single_color_image(self):
        array = np.zeros((8, 8, 4), dtype=np.uint8)
        array[:] = (200, 50, 50, 255)
        colors, confidence = extract_clustered_colors(PixelBuffer.from_array(array), 5)
        assert [to_hex(c) for c in colors] == ["#C83232"]
        assert confidence == pytest.approx(1.0)

    def test_white_image_relaxes_filter(self):
        buffer = make_buffer([WHITE] * 16, width=4)
        colors, confidence = extract_clustered_colors(buffer, 3)
        assert [to_hex(c) for c in colors] == ["#FFFFFF"]
        assert confidence == pytest.approx(1.0)

    def test_black_image_relaxes_filter(self):
        buffer = make_buffer([BLACK] * 16, width=4)
        colors, _ = extract_clustered_colors(buffer, 3, avoid_dark=True)
        assert [to_hex(c) for c in colors] == ["#000000"]

    def test_near_white_pixels_are_ignored(self):
        """A few saturated pixels win over a white background"""
        array = np.full((10, 10, 4), 255, dtype=np.uint8)
        array[4:6, 4:6] = (30, 160, 60, 255)
        colors, confidence = extract_clustered_colors(PixelBuffer.from_array(array), 3)
        assert [to_hex(c) for c in colors] == ["#1EA03C"]
        assert confidence == pytest.approx(1.0)

    def test_at_most_count_colors_and_deterministic(self, noisy_image):
        first, conf_a = extract_clustered_colors(noisy_image, 5, rng_seed=11)
        second, conf_b = extract_clustered_colors(noisy_image, 5, rng_seed=11)
        assert 1 <= len(first) <= 5
        assert [to_hex(c) for c in first] == [to_hex(c) for c in second]
        assert conf_a == pytest.approx(conf_b)
        assert 0.0 < conf_a <= 1.0

    def test_sample_cap(self, noisy_image):
        colors, _ = extract_clustered_colors(noisy_image, 4, max_samples=100)
        assert 1 <= len(colors) <= 4

    def test_invalid_count(self, four_pixel_image):
        with pytest.raises(InvalidCountError):
            extract_clustered_colors(four_pixel_image, 0)
