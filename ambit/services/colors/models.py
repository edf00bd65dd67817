"""
Palette value types shared by the harmony, analysis, optimizer and
generation modules.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .space import Color, to_hex


class PaletteStyle(str, Enum):
    """Generation rule selected by the caller."""
    ADAPTIVE = "adaptive"
    HARMONIC = "harmonic"
    MONOCHROMATIC = "monochromatic"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"
    ANALOGOUS = "analogous"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class PalettePurpose(str, Enum):
    """Target an optimized palette is tuned for."""
    UI = "ui"
    BRANDING = "branding"
    ARTISTIC = "artistic"
    ACCESSIBLE = "accessible"


class PaletteSource(str, Enum):
    """Where a palette came from."""
    IMAGE = "image"
    GENERATED = "generated"
    OPTIMIZED = "optimized"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ColorPalette:
    """
    Named ordered list of colors. Position 0 is the hero color.
    """
    name: str
    colors: Tuple[Color, ...]
    style: Optional[PaletteStyle] = None
    source: PaletteSource = PaletteSource.CUSTOM

    def __post_init__(self):
        object.__setattr__(self, "colors", tuple(self.colors))

    @classmethod
    def from_hex(cls, name: str, hex_colors: Iterable[str], **kwargs) -> "ColorPalette":
        return cls(name=name, colors=tuple(Color.from_hex(h) for h in hex_colors), **kwargs)

    @property
    def hero(self) -> Optional[Color]:
        return self.colors[0] if self.colors else None

    def hex_colors(self, include_alpha: bool = False) -> List[str]:
        return [to_hex(c, include_alpha=include_alpha) for c in self.colors]

    def with_colors(self, colors: Iterable[Color], **changes) -> "ColorPalette":
        """Copy of this palette with new colors and optional field changes."""
        return replace(self, colors=tuple(colors), **changes)

    def __len__(self) -> int:
        return len(self.colors)
