"""
Tests for petal outline construction.
"""

import pytest

from flower_field.petal import PetalShape, build_petal_outline


class TestPetalOutline:
    """Tests for build_petal_outline."""

    def test_outline_is_closed_two_arc_path(self):
        """Test outline is move, two bezier arcs, close."""
        path = build_petal_outline(PetalShape())
        ops = [cmd[0] for cmd in path.commands]
        assert ops == ["move", "bezier", "bezier", "close"]
        assert path.is_closed

    @pytest.mark.parametrize("length", [0.5, 10.0, 60.0, 240.0])
    def test_tip_at_length_along_growth_axis(self, length):
        """Test base sits at origin and tip straight up at distance length."""
        path = build_petal_outline(PetalShape(length=length))
        base, tip, back = path.anchor_points()
        assert base == (0.0, 0.0)
        assert tip == pytest.approx((0.0, -length))
        assert back == (0.0, 0.0)

    def test_control_points_mirror_without_edge_curvature(self):
        """Test left and right arcs mirror each other when edges are straight."""
        path = build_petal_outline(PetalShape(length=100.0, width=0.3, edge_curvature=0.0))
        _, left, right, _ = path.commands
        # left = (cp1 bulge, cp2 near tip); right = (cp1 near tip, cp2 bulge)
        assert left[1] == pytest.approx(-right[3])
        assert left[2] == pytest.approx(right[4])
        assert left[3] == pytest.approx(-right[1])
        assert left[4] == pytest.approx(right[2])

    def test_control_point_values(self):
        """Test bulge and near-tip control points for a known shape."""
        shape = PetalShape(length=100.0, width=0.3, tip_pointiness=0.5, bulge_position=0.5, edge_curvature=0.0)
        _, left, _, _ = build_petal_outline(shape).commands
        assert left[1:5] == pytest.approx((-30.0, -50.0, -15.0, -92.0))

    def test_edge_curvature_pushes_bulge_outward(self):
        """Test convex edges widen the bulge and concave edges narrow it."""
        flat = build_petal_outline(PetalShape(length=100.0, width=0.3, edge_curvature=0.0))
        convex = build_petal_outline(PetalShape(length=100.0, width=0.3, edge_curvature=0.4))
        concave = build_petal_outline(PetalShape(length=100.0, width=0.3, edge_curvature=-0.4))
        assert convex.commands[1][1] == pytest.approx(-36.0)
        assert concave.commands[1][1] == pytest.approx(-24.0)
        assert flat.commands[1][1] == pytest.approx(-30.0)

    def test_sharp_tip_collapses_tip_width(self):
        """Test full pointiness puts the near-tip control points on the axis."""
        _, left, right, _ = build_petal_outline(PetalShape(tip_pointiness=1.0)).commands
        assert left[3] == pytest.approx(0.0)
        assert right[1] == pytest.approx(0.0)

    def test_out_of_range_parameters_are_clamped(self):
        """Test pointiness and bulge position are clamped to their ranges."""
        shape = PetalShape(length=100.0, tip_pointiness=3.0, bulge_position=-1.0)
        _, left, _, _ = build_petal_outline(shape).commands
        assert left[2] == pytest.approx(-5.0)  # bulge clamped to 0.05
        assert left[3] == pytest.approx(0.0)  # pointiness clamped to 1

    def test_deterministic(self):
        """Test the same shape always builds the same outline."""
        shape = PetalShape(length=42.0, width=0.4, tip_pointiness=0.3, bulge_position=0.6, edge_curvature=0.1)
        assert build_petal_outline(shape) == build_petal_outline(shape)
