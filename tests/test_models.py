"""Tests for the plain data types."""

from __future__ import annotations

import numpy as np
import pytest

from sphereplates.models import GeoPoint, Mesh, PointCloud, SphericalPolygon


# ═══════════════════════════════════════════════════════════════════
# SphericalPolygon
# ═══════════════════════════════════════════════════════════════════


class TestSphericalPolygon:
    def test_from_lat_lon(self):
        poly = SphericalPolygon.from_lat_lon([(1, 2), (3, 4), (5, 6)])
        assert len(poly) == 3
        assert poly.vertices[1] == GeoPoint(3.0, 4.0)

    def test_edges_close_the_ring(self):
        poly = SphericalPolygon.from_lat_lon([(0, 0), (0, 1), (1, 1)])
        edges = list(poly.edges())
        assert len(edges) == 3
        assert edges[-1] == (GeoPoint(1, 1), GeoPoint(0, 0))

    def test_rotated_and_reversed(self):
        poly = SphericalPolygon.from_lat_lon([(0, 0), (0, 1), (1, 1), (1, 0)])
        assert poly.rotated(1).vertices[0] == GeoPoint(0, 1)
        assert poly.rotated(5) == poly.rotated(1)
        assert poly.reversed().vertices == tuple(reversed(poly.vertices))
        assert SphericalPolygon(()).rotated(3) == SphericalPolygon(())


# ═══════════════════════════════════════════════════════════════════
# PointCloud
# ═══════════════════════════════════════════════════════════════════


class TestPointCloud:
    def test_near_duplicates_collapse(self):
        cloud = PointCloud()
        assert cloud.add(GeoPoint(1.0000001, 2.0))
        assert not cloud.add(GeoPoint(1.0000002, 2.0))
        assert len(cloud) == 1

    def test_distinct_at_precision_kept(self):
        cloud = PointCloud([GeoPoint(1.000001, 2.0), GeoPoint(1.000002, 2.0)])
        assert len(cloud) == 2

    def test_insertion_order(self):
        pts = [GeoPoint(3, 3), GeoPoint(1, 1), GeoPoint(2, 2), GeoPoint(1, 1)]
        cloud = PointCloud(pts)
        assert cloud.points() == [GeoPoint(3, 3), GeoPoint(1, 1), GeoPoint(2, 2)]

    def test_extend_counts_new_points(self):
        cloud = PointCloud([GeoPoint(0, 0)])
        assert cloud.extend([GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(0, 2)]) == 2

    def test_values_snapped(self):
        cloud = PointCloud([GeoPoint(12.34567891, -0.0000004)])
        (p,) = cloud.points()
        assert p.lat == pytest.approx(12.345679, abs=1e-12)
        assert p.lon == 0.0

    def test_contains(self):
        cloud = PointCloud([GeoPoint(5, 5)])
        assert GeoPoint(5.0000001, 5) in cloud
        assert GeoPoint(5.1, 5) not in cloud
        assert (5, 5) not in cloud

    def test_coarser_precision(self):
        cloud = PointCloud([GeoPoint(1.01, 1.0), GeoPoint(1.04, 1.0)], precision=1)
        assert len(cloud) == 1
        assert "precision=1" in repr(cloud)


# ═══════════════════════════════════════════════════════════════════
# Mesh
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture()
def quad():
    positions = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ])
    triangles = np.array([[0, 1, 2], [0, 2, 3]])
    return Mesh(positions=positions, triangles=triangles)


class TestMesh:
    def test_empty(self):
        mesh = Mesh.empty()
        assert mesh.vertex_count == 0
        assert mesh.triangle_count == 0
        assert mesh.is_empty
        assert mesh.surface_area() == 0.0
        assert mesh.validate() == []

    def test_counts_and_area(self, quad):
        assert quad.vertex_count == 4
        assert quad.triangle_count == 2
        assert quad.surface_area() == pytest.approx(1.0)
        np.testing.assert_allclose(quad.triangle_areas(), [0.5, 0.5])

    def test_normals_follow_winding(self, quad):
        np.testing.assert_allclose(quad.vertex_normals(), [[0, 0, 1]] * 4, atol=1e-12)

    def test_orphan_vertex_normal_is_radial(self):
        mesh = Mesh(positions=np.array([[0.0, 2.0, 0.0]]))
        np.testing.assert_allclose(mesh.vertex_normals(), [[0, 1, 0]])

    def test_validate_flags_bad_index(self, quad):
        quad.triangles = np.array([[0, 1, 4]])
        errors = quad.validate()
        assert len(errors) == 1
        assert "out of range" in errors[0]

    def test_validate_flags_color_shape(self, quad):
        quad.colors = np.zeros((3, 3))
        assert any("colors" in e for e in quad.validate())
