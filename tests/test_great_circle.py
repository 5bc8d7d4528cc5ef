"""Tests for great-circle interpolation and outlines."""

from __future__ import annotations

import math

import numpy as np
import pytest

from sphereplates.great_circle import interpolate_arc, outline_positions, polygon_outline
from sphereplates.models import GeoPoint, SphericalPolygon
from sphereplates.sphere import angular_distance


# ═══════════════════════════════════════════════════════════════════
# interpolate_arc
# ═══════════════════════════════════════════════════════════════════


class TestInterpolateArc:
    def test_coincident_points_repeat(self):
        a = GeoPoint(12.5, -40.0)
        for n in range(6):
            assert interpolate_arc(a, a, n) == [a] * (n + 1)

    def test_antipodal_points_repeat_start(self):
        a = GeoPoint(0, 0)
        b = GeoPoint(0, 180)
        pts = interpolate_arc(a, b, 4)
        assert pts == [a] * 5

    def test_endpoints_exact(self):
        a = GeoPoint(10, -10)
        b = GeoPoint(-20, 35)
        pts = interpolate_arc(a, b, 7)
        assert len(pts) == 8
        assert pts[0] == a
        assert pts[-1] == b

    def test_points_lie_on_arc(self):
        a = GeoPoint(50, -120)
        b = GeoPoint(-10, 30)
        total = angular_distance(a, b)
        for p in interpolate_arc(a, b, 25):
            assert not math.isnan(p.lat) and not math.isnan(p.lon)
            assert angular_distance(a, p) + angular_distance(p, b) == pytest.approx(total, abs=1e-9)

    def test_even_spacing(self):
        a = GeoPoint(0, 0)
        b = GeoPoint(0, 60)
        pts = interpolate_arc(a, b, 6)
        for p, q in zip(pts, pts[1:]):
            assert math.degrees(angular_distance(p, q)) == pytest.approx(10.0)

    def test_equator_arc_stays_on_equator(self):
        pts = interpolate_arc(GeoPoint(0, -30), GeoPoint(0, 30), 6)
        assert [p.lat for p in pts] == pytest.approx([0.0] * 7, abs=1e-12)
        assert [p.lon for p in pts] == pytest.approx([-30, -20, -10, 0, 10, 20, 30])

    def test_crosses_antimeridian_the_short_way(self):
        pts = interpolate_arc(GeoPoint(0, 170), GeoPoint(0, -170), 2)
        assert abs(pts[1].lon) == pytest.approx(180.0)

    def test_zero_segments(self):
        a = GeoPoint(1, 2)
        assert interpolate_arc(a, GeoPoint(3, 4), 0) == [a]

    def test_negative_segments_rejected(self):
        with pytest.raises(ValueError):
            interpolate_arc(GeoPoint(0, 0), GeoPoint(1, 1), -1)

    def test_result_is_restartable(self):
        pts = interpolate_arc(GeoPoint(0, 0), GeoPoint(5, 5), 3)
        assert list(pts) == list(pts)


# ═══════════════════════════════════════════════════════════════════
# Outlines
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture()
def triangle():
    return SphericalPolygon.from_lat_lon([(0, 0), (0, 20), (15, 10)])


class TestOutline:
    def test_outline_is_closed(self, triangle):
        line = polygon_outline(triangle, segments=5)
        assert len(line) == 3 * 5 + 1
        assert line[0] == triangle.vertices[0]
        assert line[-1] == triangle.vertices[0]

    def test_outline_passes_through_corners(self, triangle):
        line = polygon_outline(triangle, segments=4)
        assert line[4] == triangle.vertices[1]
        assert line[8] == triangle.vertices[2]

    def test_empty_polygon(self):
        assert polygon_outline(SphericalPolygon(()), 10) == []
        assert outline_positions(SphericalPolygon(()), 1.0).shape == (0, 3)

    def test_outline_positions_on_shell(self, triangle):
        pos = outline_positions(triangle, radius=1.02, segments=8)
        assert pos.shape == (25, 3)
        np.testing.assert_allclose(np.linalg.norm(pos, axis=1), 1.02)
