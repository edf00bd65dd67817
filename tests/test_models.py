"""
Palette value type tests.
"""

import pytest

from ambit.services.colors.errors import InvalidHexFormatError
from ambit.services.colors.models import ColorPalette, PalettePurpose, PaletteSource, PaletteStyle
from ambit.services.colors.space import parse_hex


class TestColorPalette:
    def test_from_hex(self):
        palette = ColorPalette.from_hex("Sea", ["#3366CC", "#CC9933"], style=PaletteStyle.COMPLEMENTARY)
        assert len(palette) == 2
        assert palette.hex_colors() == ["#3366CC", "#CC9933"]
        assert palette.hero == parse_hex("#3366CC")
        assert palette.style is PaletteStyle.COMPLEMENTARY
        assert palette.source is PaletteSource.CUSTOM

    def test_from_hex_rejects_bad_input(self):
        with pytest.raises(InvalidHexFormatError):
            ColorPalette.from_hex("Bad", ["#3366CC", "#12"])

    def test_colors_are_stored_as_tuple(self):
        palette = ColorPalette("List", [parse_hex("#FFF")])
        assert isinstance(palette.colors, tuple)

    def test_empty_palette_has_no_hero(self):
        assert ColorPalette("Empty", ()).hero is None

    def test_with_colors_copies(self):
        palette = ColorPalette.from_hex("Sea", ["#3366CC"])
        changed = palette.with_colors([parse_hex("#000000")], name="Night", source=PaletteSource.OPTIMIZED)
        assert changed.hex_colors() == ["#000000"]
        assert changed.name == "Night"
        assert changed.source is PaletteSource.OPTIMIZED
        assert palette.hex_colors() == ["#3366CC"]
        assert palette.name == "Sea"

    def test_alpha_hex(self):
        palette = ColorPalette.from_hex("Glass", ["#803366CC"])
        assert palette.hex_colors(include_alpha=True) == ["#803366CC"]


class TestEnums:
    def test_values(self):
        assert PaletteStyle("harmonic") is PaletteStyle.HARMONIC
        assert PalettePurpose("accessible") is PalettePurpose.ACCESSIBLE
        assert PaletteSource.IMAGE.value == "image"

    def test_style_display_name(self):
        assert PaletteStyle.MONOCHROMATIC.display_name == "Monochromatic"
