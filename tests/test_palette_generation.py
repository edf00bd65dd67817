"""
Palette generation from images.
"""

import numpy as np
import pytest

from ambit.config import config
from ambit.services.colors.errors import InvalidCountError
from ambit.services.colors.models import PaletteSource, PaletteStyle
from ambit.services.colors.palette import generate_palette, prominence, sort_by_prominence
from ambit.services.colors.pixels import PixelBuffer
from ambit.services.colors.space import Color, from_hsl, hue_separation, parse_hex, to_hex, to_hsl


@pytest.fixture
def single_color_image():
    array = np.zeros((6, 6, 4), dtype=np.uint8)
    array[:] = (220, 40, 40, 255)
    return PixelBuffer.from_array(array)


class TestProminence:
    def test_vivid_mid_colors_rank_first(self):
        vivid = from_hsl(10, 1.0, 0.5)
        muted = from_hsl(10, 0.2, 0.3)
        assert prominence(vivid) > prominence(muted)
        assert sort_by_prominence([muted, vivid]) == [vivid, muted]

    def test_ties_keep_input_order(self):
        red, blue = parse_hex("#FF0000"), parse_hex("#0000FF")
        assert sort_by_prominence([blue, red]) == [blue, red]

    def test_float_noise_does_not_break_ties(self):
        """Cluster means can land a hair below an exact channel value"""
        noisy_blue = Color(0.0, 0.0, 0.9999999999999999)
        cyan = parse_hex("#00FFFF")
        assert prominence(noisy_blue) == prominence(cyan)
        assert sort_by_prominence([noisy_blue, cyan]) == [noisy_blue, cyan]


class TestGeneratePalette:
    """Test each style on a red and blue image"""

    def test_adaptive(self, two_tone_image):
        palette = generate_palette(two_tone_image, PaletteStyle.ADAPTIVE, 5)
        assert len(palette) == 5
        assert palette.hex_colors()[:2] == ["#FF0000", "#0000FF"]
        assert palette.name == "Adaptive Palette"
        assert palette.style is PaletteStyle.ADAPTIVE
        assert palette.source is PaletteSource.IMAGE

    def test_harmonic_merges_extracted_and_harmony_colors(self, two_tone_image):
        """Red and blue span 240 degrees, so the red hero gets a complementary partner"""
        palette = generate_palette(two_tone_image, PaletteStyle.HARMONIC, 3)
        assert palette.name == "Complementary Palette"
        assert palette.hex_colors() == ["#FF0000", "#0000FF", "#00FFFF"]
        assert palette.style is PaletteStyle.HARMONIC
        assert palette.source is PaletteSource.IMAGE

    @pytest.mark.parametrize("style, name", [
        (PaletteStyle.COMPLEMENTARY, "Complementary Palette"),
        (PaletteStyle.TRIADIC, "Triadic Palette"),
        (PaletteStyle.ANALOGOUS, "Analogous Palette"),
        (PaletteStyle.MONOCHROMATIC, "Monochromatic Palette"),
    ])
    def test_rule_styles_derive_from_hero(self, two_tone_image, style, name):
        palette = generate_palette(two_tone_image, style, 4)
        assert len(palette) == 4
        assert palette.name == name
        assert palette.style is style
        assert palette.source is PaletteSource.GENERATED
        assert hue_separation(palette.colors[0].hue, 0.0) < 1.0

    def test_monochromatic_keeps_hero_hue(self, two_tone_image):
        palette = generate_palette(two_tone_image, "monochromatic", 5)
        assert all(hue_separation(to_hsl(c)[0], 0.0) < 1.0 for c in palette.colors)

    @pytest.mark.parametrize("style", list(PaletteStyle))
    @pytest.mark.parametrize("count", [1, 3, 7, 12])
    def test_exact_count_on_noisy_image(self, noisy_image, style, count):
        assert len(generate_palette(noisy_image, style, count)) == count

    def test_pads_when_image_has_few_colors(self, single_color_image):
        palette = generate_palette(single_color_image, PaletteStyle.ADAPTIVE, 4)
        assert len(palette) == 4
        assert to_hex(palette.colors[0]) == "#DC2828"
        # vivid mid-lightness hero pads with its triadic partners
        assert hue_separation(palette.colors[1].hue, palette.colors[0].hue) == pytest.approx(120.0, abs=1.0)
        assert hue_separation(palette.colors[2].hue, palette.colors[0].hue) == pytest.approx(120.0, abs=1.0)

    def test_single_color_request(self, two_tone_image):
        palette = generate_palette(two_tone_image, PaletteStyle.ADAPTIVE, 1)
        assert palette.hex_colors() == ["#FF0000"]

    def test_deterministic(self, noisy_image):
        first = generate_palette(noisy_image, PaletteStyle.HARMONIC, 5)
        second = generate_palette(noisy_image, PaletteStyle.HARMONIC, 5)
        assert first.hex_colors() == second.hex_colors()
        assert first.name == second.name

    @pytest.mark.parametrize("count", [0, -2])
    def test_invalid_count(self, two_tone_image, count):
        with pytest.raises(InvalidCountError):
            generate_palette(two_tone_image, PaletteStyle.ADAPTIVE, count)

    def test_unknown_style(self, two_tone_image):
        with pytest.raises(ValueError):
            generate_palette(two_tone_image, "psychedelic", 5)

    def test_default_seed_comes_from_config(self, noisy_image):
        default = generate_palette(noisy_image, PaletteStyle.ADAPTIVE, 5)
        seeded = generate_palette(noisy_image, PaletteStyle.ADAPTIVE, 5, rng_seed=config.CLUSTER_SEED)
        assert default.hex_colors() == seeded.hex_colors()
        assert default.name == seeded.name
