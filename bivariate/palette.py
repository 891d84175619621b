"""Fixed 3x3 bivariate color palettes and class-to-color lookup.

Each palette maps the 9 labels ``"{rate_class}-{count_class}"`` to a
distinct hex color; ``"1-1"`` is the light neutral corner and ``"3-3"``
the darkest mix of both hues.
"""
from __future__ import annotations

from typing import Dict, List

from bivariate.classify import CANONICAL_CLASSES, legend_position, parse_class
from bivariate.errors import UnknownClassError
from bivariate.models import LegendCell

DEFAULT_PALETTE = "DkBlue"

PALETTES: Dict[str, Dict[str, str]] = {
    "DkBlue": {
        "1-1": "#e8e8e8", "2-1": "#b5c0da", "3-1": "#6c83b5",
        "1-2": "#b8d6be", "2-2": "#90b2b3", "3-2": "#567994",
        "1-3": "#73ae80", "2-3": "#5a9178", "3-3": "#2a5a5b",
    },
    "GrPink": {
        "1-1": "#e8e8e8", "2-1": "#e4acac", "3-1": "#c85a5a",
        "1-2": "#b0d5df", "2-2": "#ad9ea5", "3-2": "#985356",
        "1-3": "#64acbe", "2-3": "#627f8c", "3-3": "#574249",
    },
    "DkViolet": {
        "1-1": "#e8e8e8", "2-1": "#ace4e4", "3-1": "#5ac8c8",
        "1-2": "#dfb0d6", "2-2": "#a5add3", "3-2": "#5698b9",
        "1-3": "#be64ac", "2-3": "#8c62aa", "3-3": "#3b4994",
    },
}


class PaletteMapper:
    """Lookup from bivariate class label to color for map and legend.

    Args:
        name: Palette name, one of ``PALETTES`` (default: "DkBlue").

    Raises:
        ValueError: If the palette name is unknown.
    """

    def __init__(self, name: str = DEFAULT_PALETTE):
        if name not in PALETTES:
            raise ValueError(f"Unknown palette: {name}. Must be one of: {', '.join(PALETTES)}")
        self.name = name
        self.colors = PALETTES[name]

    def color_of(self, label: str) -> str:
        """Return the color of a label.

        Raises:
            UnknownClassError: If the label is outside the 9-class enumeration.
        """
        if label not in self.colors:
            raise UnknownClassError(f"Unknown bivariate class: {label!r}")
        return self.colors[label]

    def classes(self) -> List[str]:
        return list(CANONICAL_CLASSES)

    def legend(self) -> List[LegendCell]:
        """Return the 9 legend cells in canonical class order."""
        cells = []
        for label in CANONICAL_CLASSES:
            rate_class, count_class = parse_class(label)
            row, col = legend_position(label)
            cells.append(
                LegendCell(
                    bin=label,
                    color=self.color_of(label),
                    row=row,
                    col=col,
                    rate_class=rate_class,
                    count_class=count_class,
                )
            )
        return cells


def color_of(label: str, palette: str = DEFAULT_PALETTE) -> str:
    return PaletteMapper(palette).color_of(label)


def build_legend(palette: str = DEFAULT_PALETTE) -> List[LegendCell]:
    return PaletteMapper(palette).legend()
