"""
Tests for stem centerline, ribbon outline, node bumps and tendrils.
"""

import math

import numpy as np
import pytest

from flower_field.draw import Color, FillPath, Line
from flower_field.stem import Stem, StemShape, TendrilSpec, arc_fractions, node_profile

GREEN = Color(0.2, 0.6, 0.2)


class TestCenterline:
    """Tests for the bezier centerline."""

    def test_base_at_origin(self):
        """Test the stem base sits at the local origin."""
        stem = Stem(StemShape(height=100.0, curvature=0.5))
        assert stem.point_at(0.0) == pytest.approx((0.0, 0.0))

    def test_top_offset_by_curvature(self):
        """Test the tip sits at (curvature * height * 0.3, -height)."""
        stem = Stem(StemShape(height=100.0, curvature=0.5))
        assert stem.top() == pytest.approx((15.0, -100.0))

    def test_straight_stem_points_up(self):
        """Test a stem without curvature grows straight up."""
        stem = Stem(StemShape(height=80.0, curvature=0.0))
        assert stem.top() == pytest.approx((0.0, -80.0))
        assert stem.tangent_at(0.5) == pytest.approx((0.0, -1.0))

    def test_tangent_is_unit(self):
        """Test tangents are unit length and point upward."""
        stem = Stem(StemShape(height=120.0, curvature=-0.8))
        for t in (0.0, 0.25, 0.5, 0.9, 1.0):
            tx, ty = stem.tangent_at(t)
            assert math.hypot(tx, ty) == pytest.approx(1.0)
            assert ty < 0

    def test_zero_height_tangent_defaults_up(self):
        """Test a degenerate stem reports an upward tangent."""
        stem = Stem(StemShape(height=0.0))
        assert stem.tangent_at(0.5) == (0.0, -1.0)


class TestOutline:
    """Tests for the tapered ribbon outline."""

    def test_sample_count(self):
        """Test samples scale with segments with a floor of 20."""
        assert Stem(StemShape(segments=1)).sample_count() == 20
        assert Stem(StemShape(segments=4)).sample_count() == 32

    def test_anchor_count_is_both_sides(self):
        """Test the outline walks up one side and down the other."""
        outline = Stem(StemShape(segments=4)).outline()
        assert len(outline.anchor_points()) == 64
        assert outline.is_closed

    def test_taper(self):
        """Test half-width 2 at the base is halved at the tip by taper_ratio 0.5."""
        stem = Stem(StemShape(height=100.0, thickness=4.0, taper_ratio=0.5, curvature=0.0))
        anchors = stem.outline().anchor_points()
        n = stem.sample_count()
        assert anchors[0] == pytest.approx((-2.0, 0.0))
        assert anchors[n - 1] == pytest.approx((-1.0, -100.0))
        assert anchors[n] == pytest.approx((1.0, -100.0))
        assert anchors[-1] == pytest.approx((2.0, 0.0))

    def test_node_bump_sits_at_half_the_stem_length(self):
        """Test a two-segment node swells halfway up the stem, not at curve parameter 0.5."""
        stem = Stem(StemShape(height=100.0, thickness=4.0, taper_ratio=1.0, curvature=0.0, segments=2, node_width=2.0))
        n = stem.sample_count()
        left = stem.outline().anchor_points()[:n]
        widest = min(left, key=lambda p: p[0])
        assert widest[0] < -2.0
        # point_at(0.5) is 65 units up; the halfway node must be near 50
        assert stem.point_at(0.5)[1] == pytest.approx(-65.0)
        assert abs(widest[1] + 50.0) <= 5.0

    def test_rebuild_only_when_shape_changes(self):
        """Test an equal shape keeps the cache and a new one rebuilds it."""
        stem = Stem(StemShape(height=100.0))
        stem.outline()
        stem.set_shape(StemShape(height=100.0))
        assert not stem.dirty
        stem.set_shape(StemShape(height=90.0))
        assert stem.dirty
        stem.outline()
        assert stem.rebuild_count == 2

    def test_rebuild_idempotent(self):
        """Test rebuilding with the same shape gives the same outline."""
        stem = Stem(StemShape(height=100.0, curvature=0.3, segments=3, node_width=1.4))
        first = stem.outline()
        stem.rebuild()
        assert stem.outline() == first


class TestArcFractions:
    """Tests for normalized arc length along the centerline."""

    def test_uneven_spacing(self):
        """Test fractions follow distance travelled, not point index."""
        points = np.array([[0.0, 0.0], [0.0, -10.0], [0.0, -40.0]])
        assert np.allclose(arc_fractions(points), [0.0, 0.25, 1.0])

    def test_straight_stem_matches_height(self):
        """Test fractions of a straight stem equal the height fraction of each sample."""
        stem = Stem(StemShape(height=100.0, curvature=0.0))
        points = np.array([stem.point_at(t) for t in np.linspace(0.0, 1.0, 21)])
        s = arc_fractions(points)
        assert s[0] == 0.0
        assert s[-1] == pytest.approx(1.0)
        assert np.all(np.diff(s) >= 0.0)
        assert np.allclose(s, -points[:, 1] / 100.0)

    def test_zero_length_falls_back_to_even_spacing(self):
        """Test a collapsed polyline spreads fractions evenly."""
        points = np.zeros((5, 2))
        assert np.allclose(arc_fractions(points), [0.0, 0.25, 0.5, 0.75, 1.0])


class TestNodeProfile:
    """Tests for node bumps at segment boundaries."""

    def test_single_segment_flat(self):
        """Test a single segment has no nodes."""
        s = np.linspace(0.0, 1.0, 11)
        assert np.allclose(node_profile(s, 1, 1.5), 1.0)

    def test_unit_node_width_flat(self):
        """Test node_width 1.0 leaves the thickness unchanged."""
        s = np.linspace(0.0, 1.0, 11)
        assert np.allclose(node_profile(s, 4, 1.0), 1.0)

    def test_bump_peak_and_falloff(self):
        """Test the cosine bump peaks at the boundary and vanishes outside its radius."""
        s = np.array([0.5, 0.47, 0.53, 0.57, 0.2])
        profile = node_profile(s, 2, 1.5)
        assert profile[0] == pytest.approx(1.5)
        assert profile[1] == pytest.approx(1.25)
        assert profile[2] == pytest.approx(1.25)
        assert profile[3] == 1.0
        assert profile[4] == 1.0


class TestTendrils:
    """Tests for curling tendril polylines."""

    def _stem(self, **tendril):
        spec = TendrilSpec(**tendril)
        return Stem(StemShape(height=100.0, curvature=0.0, tendrils=(spec,)))

    def test_point_count(self):
        """Test each tendril is a 16-point polyline."""
        polylines = self._stem().tendril_polylines()
        assert len(polylines) == 1
        assert len(polylines[0]) == 16

    def test_starts_on_stem(self):
        """Test a tendril starts on the centerline at its attachment parameter."""
        stem = self._stem(stem_t=0.5)
        assert stem.tendril_polylines()[0][0] == pytest.approx(stem.point_at(0.5))

    @pytest.mark.parametrize("direction,expected_x", [(1, 12.2), (-1, -12.2)])
    def test_uncurled_tendril_extends_sideways(self, direction, expected_x):
        """Test tapered segments of a straight tendril sum to 15 - 0.4 * 7 = 12.2."""
        stem = self._stem(stem_t=0.5, length=15.0, curl_amount=0.0, start_angle=0.0, direction=direction)
        end = stem.tendril_polylines()[0][-1]
        assert end == pytest.approx((expected_x, stem.point_at(0.5)[1]))

    def test_curl_bends_toward_direction(self):
        """Test curl moves the tendril tip away from the straight path."""
        straight = self._stem(curl_amount=0.0, start_angle=0.0)
        curled = self._stem(curl_amount=2.5, start_angle=0.0)
        assert curled.tendril_polylines()[0][-1] != pytest.approx(straight.tendril_polylines()[0][-1])

    def test_tendril_scale(self):
        """Test tendril_scale shrinks the tendril length."""
        spec = TendrilSpec(length=15.0, curl_amount=0.0, start_angle=0.0)
        stem = Stem(StemShape(height=100.0, tendrils=(spec,), tendril_scale=0.5))
        end = stem.tendril_polylines()[0][-1]
        assert end[0] == pytest.approx(6.1)


class TestDraw:
    """Tests for stem draw commands."""

    def test_ribbon_then_tendril_lines(self):
        """Test the ribbon is drawn first, then 15 line segments per tendril."""
        spec = TendrilSpec()
        stem = Stem(StemShape(height=100.0, tendrils=(spec,)))
        commands = stem.draw(50.0, 300.0, GREEN)
        assert isinstance(commands[0], FillPath)
        assert commands[0].transform.x == 50.0 and commands[0].transform.y == 300.0
        assert len(commands) == 1 + 15
        assert all(isinstance(c, Line) for c in commands[1:])

    def test_zero_height_draws_nothing(self):
        """Test a zero-height stem emits no commands."""
        assert Stem(StemShape(height=0.0)).draw(0.0, 0.0, GREEN) == []

    def test_alpha_premultiplied(self):
        """Test the ribbon color is premultiplied by alpha."""
        commands = Stem(StemShape(height=10.0)).draw(0.0, 0.0, Color(1.0, 1.0, 1.0), alpha=0.25)
        assert commands[0].color.to_tuple() == pytest.approx((0.25, 0.25, 0.25, 0.25))
