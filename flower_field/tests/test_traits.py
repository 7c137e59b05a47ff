"""
Tests for flower trait rolls and color palettes.
"""

import random

import pytest

from flower_field.head import LayeredWhorlsLayout, PhyllotaxisLayout, RadialLayout
from flower_field.palettes import PALETTES, palette_for_mode, roll_colors, validate_color_mode
from flower_field.traits import depth_scale_for, roll_layout, roll_traits, stem_thickness


class TestTraits:
    """Tests for roll_traits."""

    def test_seeded_rolls_repeat(self):
        """Test equal seeds roll equal traits."""
        assert roll_traits(random.Random(5)) == roll_traits(random.Random(5))

    def test_ranges(self, rng):
        """Test rolled traits stay within their ranges."""
        for _ in range(200):
            t = roll_traits(rng)
            assert 0.02 <= t.x <= 0.98
            assert 0.05 <= t.y <= 0.98
            assert 0.3 - 1e-9 <= t.depth_scale <= 1.2 + 1e-9
            assert t.petal_count >= 4
            assert 0.0 <= t.pointiness <= 1.0
            assert 1 <= t.segments <= 4
            assert len(t.tendrils) <= 2
            assert t.pitch_direction in (-1.0, 1.0)

    def test_petal_count_per_layout(self, rng):
        """Test petal counts match each layout's range."""
        for _ in range(300):
            layout, count, _ = roll_layout(rng)
            if isinstance(layout, RadialLayout):
                assert 4 <= count <= 8
            elif isinstance(layout, PhyllotaxisLayout):
                assert 13 <= count <= 34
            elif isinstance(layout, LayeredWhorlsLayout):
                assert count == layout.total_petals

    def test_every_layout_reachable(self, rng):
        """Test every layout variant gets rolled."""
        names = {roll_layout(rng)[0].name for _ in range(500)}
        assert names == {"radial", "phyllotaxis", "rose", "superformula", "whorls"}

    def test_depth_scale(self):
        """Test far flowers are small and near flowers large."""
        assert depth_scale_for(0.05) == pytest.approx(0.3)
        assert depth_scale_for(0.98) == pytest.approx(1.2)
        assert depth_scale_for(0.2) < depth_scale_for(0.8)

    def test_stem_thickness_grows_with_depth(self):
        """Test stem thickness grows from 1.5 to 4 with depth."""
        assert stem_thickness(0.0) == pytest.approx(1.5)
        assert stem_thickness(1.0) == pytest.approx(4.0)


class TestPalettes:
    """Tests for color modes."""

    def test_fixed_modes(self):
        """Test modes 1-8 select a fixed palette."""
        for mode in range(1, 9):
            assert palette_for_mode(mode, 123.0, 20.0) is PALETTES[mode - 1]

    def test_cycle_mode_advances_over_time(self):
        """Test mode 0 advances a palette every cycle and wraps."""
        assert palette_for_mode(0, 0.0, 20.0) is PALETTES[0]
        assert palette_for_mode(0, 25.0, 20.0) is PALETTES[1]
        assert palette_for_mode(0, 20.0 * len(PALETTES), 20.0) is PALETTES[0]

    @pytest.mark.parametrize("mode", range(10))
    def test_colors_valid(self, rng, mode):
        """Test every mode rolls channels within 0-1."""
        for color in roll_colors(rng, mode):
            for channel in color.to_tuple():
                assert 0.0 <= channel <= 1.0

    def test_monochrome_is_grey(self, rng):
        """Test the monochrome palette rolls near-grey petals."""
        petal, _, _ = roll_colors(rng, 8)
        assert max(petal.r, petal.g, petal.b) - min(petal.r, petal.g, petal.b) < 0.06

    @pytest.mark.parametrize("bad", [-1, 10, 1.0, "2", False])
    def test_validate_rejects(self, bad):
        """Test non-integer and out-of-range modes are rejected."""
        with pytest.raises(ValueError):
            validate_color_mode(bad)

    def test_validate_accepts(self):
        """Test valid modes are returned unchanged."""
        assert validate_color_mode(9) == 9
