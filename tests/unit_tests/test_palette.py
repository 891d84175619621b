"""Unit tests for bivariate.palette module."""

import re

import pytest

from bivariate.classify import CANONICAL_CLASSES, legend_position
from bivariate.errors import UnknownClassError
from bivariate.palette import (
    DEFAULT_PALETTE,
    PALETTES,
    PaletteMapper,
    build_legend,
    color_of,
)

HEX = re.compile(r"^#[0-9a-f]{6}$")


class TestPaletteTables:
    """Test suite for the constant palette tables.

    Tests that every palette is a bijection between the 9 classes and
    9 distinct colors.
    """

    @pytest.mark.parametrize("name", sorted(PALETTES))
    def test_nine_entries(self, name):
        """Test each palette covers exactly the canonical classes."""
        assert set(PALETTES[name]) == set(CANONICAL_CLASSES)
        assert len(PALETTES[name]) == 9

    @pytest.mark.parametrize("name", sorted(PALETTES))
    def test_colors_distinct(self, name):
        """Test no two classes share a color."""
        assert len(set(PALETTES[name].values())) == 9

    @pytest.mark.parametrize("name", sorted(PALETTES))
    def test_colors_are_hex(self, name):
        """Test colors are lowercase RGB hex triples."""
        assert all(HEX.match(c) for c in PALETTES[name].values())

    def test_default_palette(self):
        """Test the default palette exists."""
        assert DEFAULT_PALETTE in PALETTES


class TestPaletteMapper:
    """Test suite for PaletteMapper class and module helpers."""

    def test_color_of(self):
        """Test lookup of a known class."""
        mapper = PaletteMapper("GrPink")

        assert mapper.color_of("3-3") == "#574249"
        assert color_of("1-1") == PALETTES[DEFAULT_PALETTE]["1-1"]

    @pytest.mark.parametrize("label", ["0-0", "4-1", "1-4", "", None, "3_3"])
    def test_color_of_unknown_raises(self, label):
        """Test unknown labels raise UnknownClassError."""
        with pytest.raises(UnknownClassError):
            PaletteMapper().color_of(label)

    def test_unknown_palette_raises(self):
        """Test unknown palette names raise ValueError."""
        with pytest.raises(ValueError):
            PaletteMapper("Rainbow")

    def test_classes_canonical(self):
        """Test mapper exposes the canonical ordering."""
        assert PaletteMapper().classes() == list(CANONICAL_CLASSES)

    def test_legend_order_and_colors(self):
        """Test legend cells follow canonical order with matching colors."""
        mapper = PaletteMapper("DkViolet")
        legend = mapper.legend()

        assert [cell.bin for cell in legend] == list(CANONICAL_CLASSES)
        for cell in legend:
            assert cell.color == mapper.color_of(cell.bin)
            assert (cell.row, cell.col) == legend_position(cell.bin)
            assert cell.bin == f"{cell.rate_class}-{cell.count_class}"

    def test_legend_grid(self):
        """Test legend fills a 3x3 grid with distinct colors."""
        legend = build_legend()

        assert {(c.row, c.col) for c in legend} == {(r, c) for r in range(3) for c in range(3)}
        assert len({c.color for c in legend}) == 9
