"""
Purpose-driven optimizer tests.

Every purpose must keep the palette length, member hues and alphas, tag the
result as optimized, and never lower its own purpose score.
"""

import pytest

from ambit.services.colors.errors import EmptyInputError
from ambit.services.colors.models import ColorPalette, PalettePurpose, PaletteSource, PaletteStyle
from ambit.services.colors.optimizer import (
    optimize_and_analyze,
    optimize_palette,
    purpose_score,
    separate_for_color_vision,
)
from ambit.services.colors.space import BLACK, WHITE, Color, contrast_ratio, from_hsl, hue_separation, parse_hex, to_hsl
from ambit.services.colors.vision import VisionType, delta_e, simulate_color


PALETTES = {
    "mixed": ColorPalette.from_hex("Mixed", ["#3366CC", "#CC9933", "#808080", "#F5F5F5", "#123456"]),
    "warm_run": ColorPalette.from_hex("Warm Run", ["#FF0000", "#FF3300", "#FF6600"]),
    "greys": ColorPalette.from_hex("Greys", ["#777777", "#888888"]),
    "translucent": ColorPalette.from_hex("Translucent", ["#803366CC", "#40CC9933"]),
    "close_hues": ColorPalette(
        "Close Hues",
        (from_hsl(0, 0.5, 0.5), from_hsl(5, 0.5, 0.52), from_hsl(180, 0.9, 0.5)),
    ),
    "red_green": ColorPalette("Red Green", (Color(0.7, 0.2, 0.4), Color(0.3, 0.7238, 0.4))),
    "single": ColorPalette.from_hex("Single", ["#3366CC"]),
}


@pytest.fixture(params=list(PALETTES), ids=list(PALETTES))
def palette(request):
    return PALETTES[request.param]


@pytest.fixture(params=list(PalettePurpose), ids=[p.value for p in PalettePurpose])
def purpose(request):
    return request.param


class TestOptimizerContract:
    """Guarantees shared by every purpose"""

    def test_length_preserved(self, palette, purpose):
        assert len(optimize_palette(palette, purpose)) == len(palette)

    def test_hues_preserved(self, palette, purpose):
        optimized = optimize_palette(palette, purpose)
        for before, after in zip(palette.colors, optimized.colors):
            h0, s0, _ = to_hsl(before)
            if s0 < 0.08:
                continue
            assert hue_separation(h0, to_hsl(after)[0]) < 1.0

    def test_alpha_preserved(self, palette, purpose):
        optimized = optimize_palette(palette, purpose)
        assert [c.alpha for c in optimized.colors] == [c.alpha for c in palette.colors]

    def test_score_never_lowered(self, palette, purpose):
        optimized = optimize_palette(palette, purpose)
        assert purpose_score(optimized, purpose) >= purpose_score(palette, purpose)

    def test_reoptimizing_never_lowers(self, palette, purpose):
        once = optimize_palette(palette, purpose)
        twice = optimize_palette(once, purpose)
        assert purpose_score(twice, purpose) >= purpose_score(once, purpose)

    def test_name_and_source(self, palette, purpose):
        optimized = optimize_palette(palette, purpose)
        assert optimized.name == f"{palette.name} (Optimized)"
        assert optimized.source is PaletteSource.OPTIMIZED
        assert optimize_palette(optimized, purpose).name == optimized.name

    def test_style_is_kept(self, purpose):
        palette = ColorPalette.from_hex("Styled", ["#3366CC", "#CC9933"], style=PaletteStyle.COMPLEMENTARY)
        assert optimize_palette(palette, purpose).style is PaletteStyle.COMPLEMENTARY

    def test_empty_palette(self, purpose):
        with pytest.raises(EmptyInputError):
            optimize_palette(ColorPalette("Empty", ()), purpose)
        with pytest.raises(EmptyInputError):
            purpose_score(ColorPalette("Empty", ()), purpose)

    def test_single_color_is_unchanged(self, purpose):
        single = PALETTES["single"]
        assert optimize_palette(single, purpose).colors == single.colors


class TestUiOptimization:
    """UI: push the lightest and darkest members apart"""

    def test_reaches_normal_text_contrast(self):
        optimized = optimize_palette(PALETTES["greys"], PalettePurpose.UI)
        assert purpose_score(optimized, PalettePurpose.UI) >= 4.5

    def test_already_contrasting_palette_is_untouched(self):
        palette = ColorPalette.from_hex("Ink", ["#000000", "#FFFFFF", "#3366CC"])
        assert optimize_palette(palette, "ui").colors == palette.colors


class TestBrandingOptimization:
    """Branding: supporting saturations follow the hero"""

    def test_saturation_pulled_into_hero_band(self):
        palette = ColorPalette(
            "Brand",
            (from_hsl(200, 0.9, 0.5), from_hsl(20, 0.3, 0.5), parse_hex("#808080")),
        )
        assert purpose_score(palette, PalettePurpose.BRANDING) == 0.0

        optimized = optimize_palette(palette, PalettePurpose.BRANDING)
        assert purpose_score(optimized, PalettePurpose.BRANDING) == 1.0
        assert to_hsl(optimized.colors[1])[1] == pytest.approx(0.75, abs=0.01)
        # achromatic members keep their saturation
        assert optimized.colors[2] == palette.colors[2]
        assert optimized.colors[0] is palette.colors[0]

    def test_close_hues_are_separated_by_lightness(self):
        palette = ColorPalette("Brand", (from_hsl(200, 0.9, 0.5), from_hsl(205, 0.9, 0.52)))
        optimized = optimize_palette(palette, PalettePurpose.BRANDING)
        l0 = to_hsl(optimized.colors[0])[2]
        l1 = to_hsl(optimized.colors[1])[2]
        assert abs(l1 - l0) >= 0.12 - 1e-6


class TestArtisticOptimization:
    """Artistic: widen saturation and lightness spread"""

    def test_spread_increases(self):
        palette = ColorPalette("Art", (from_hsl(0, 0.5, 0.4), from_hsl(120, 0.6, 0.6)))
        optimized = optimize_palette(palette, PalettePurpose.ARTISTIC)
        assert purpose_score(optimized, "artistic") > purpose_score(palette, "artistic")
        saturations = [to_hsl(c)[1] for c in optimized.colors]
        lightness = [to_hsl(c)[2] for c in optimized.colors]
        assert max(saturations) - min(saturations) == pytest.approx(0.135, abs=0.01)
        assert max(lightness) - min(lightness) == pytest.approx(0.27, abs=0.01)


class TestAccessibleOptimization:
    """Accessible: raise the minimum pairwise contrast"""

    def test_min_contrast_improves(self):
        palette = ColorPalette("Low", (from_hsl(210, 0.5, 0.45), from_hsl(30, 0.5, 0.55)))
        optimized = optimize_palette(palette, PalettePurpose.ACCESSIBLE)
        before = contrast_ratio(*palette.colors)
        after = contrast_ratio(*optimized.colors)
        assert after > before

    def test_lightness_shift_is_bounded(self):
        palette = ColorPalette.from_hex("Greys", ["#777777", "#787878", "#797979"])
        optimized = optimize_palette(palette, PalettePurpose.ACCESSIBLE)
        for before, after in zip(palette.colors, optimized.colors):
            assert abs(to_hsl(after)[2] - to_hsl(before)[2]) <= 0.35 + 1e-6


class TestOptimizeAndAnalyze:
    def test_returns_analysis_of_result(self):
        optimized, analysis = optimize_and_analyze(PALETTES["mixed"], PalettePurpose.UI)
        assert analysis.color_count == len(optimized)
        assert analysis.max_contrast_ratio >= purpose_score(optimized, PalettePurpose.UI) - 1e-9


class TestColorVisionSeparation:
    """Pairs that collapse for red-green deficiencies are pulled apart"""

    PAIR = (Color(0.7, 0.2, 0.4), Color(0.3, 0.7238, 0.4))

    @staticmethod
    def protan_difference(a, b):
        return delta_e(simulate_color(a, VisionType.PROTANOPIA), simulate_color(b, VisionType.PROTANOPIA))

    def test_confused_pair_is_separated(self):
        first, second = self.PAIR
        separated = separate_for_color_vision(self.PAIR)

        assert separated[0] == first
        assert separated[1] != second
        assert hue_separation(to_hsl(separated[1])[0], to_hsl(second)[0]) < 1.0
        assert self.protan_difference(*separated) > self.protan_difference(first, second)
        assert contrast_ratio(*separated) >= contrast_ratio(first, second)

    def test_distinct_pair_is_untouched(self):
        assert separate_for_color_vision([BLACK, WHITE]) == [BLACK, WHITE]

    def test_single_color(self):
        assert separate_for_color_vision([self.PAIR[0]]) == [self.PAIR[0]]
