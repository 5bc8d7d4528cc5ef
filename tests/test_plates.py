"""Tests for the per-plate meshing pipeline."""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np
import pytest

from sphereplates.errors import InsufficientVerticesError, PlateError, PolygonExtentError
from sphereplates.models import GeoPoint, Mesh, Plate, SphericalPolygon
from sphereplates.plates import (
    DEFAULT_PLATE,
    OUTLINE_ONLY,
    build_plate_mesh,
    build_plate_meshes,
    shade_by_distance,
    spawn_rngs,
    validate_polygon,
)
from sphereplates.shapes import circular_plate, square_plate


@pytest.fixture()
def square_plate_fixture():
    polygon = SphericalPolygon.from_lat_lon([(10, -10), (10, 10), (-10, 10), (-10, -10)])
    return Plate("square", polygon, (0.5, 0.5, 1.0))


@pytest.fixture()
def plates():
    return [
        Plate("a", circular_plate(GeoPoint(30, -40), 15.0)),
        Plate("b", square_plate(GeoPoint(-10, 20), 20.0)),
        Plate("c", circular_plate(GeoPoint(-60, 150), 8.0, segments=12)),
    ]


# ═══════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════


class TestValidatePolygon:
    def test_returns_extent(self, square_plate_fixture):
        extent = validate_polygon(square_plate_fixture.polygon)
        assert 27.0 < extent < 29.0

    def test_too_few_vertices(self):
        with pytest.raises(InsufficientVerticesError) as info:
            validate_polygon(SphericalPolygon.from_lat_lon([(0, 0), (1, 1)]))
        assert info.value.count == 2

    @pytest.mark.parametrize("lat", [100.0, -90.5, float("nan")])
    def test_latitude_out_of_range(self, lat):
        polygon = SphericalPolygon.from_lat_lon([(0, 0), (0, 10), (lat, 5)])
        with pytest.raises(PlateError, match="Vertex 2 latitude"):
            validate_polygon(polygon)

    def test_pole_latitudes_accepted(self):
        polygon = SphericalPolygon.from_lat_lon([(90, 0), (80, 0), (80, 90)])
        assert validate_polygon(polygon) > 0

    def test_extent_limit(self):
        wide = SphericalPolygon.from_lat_lon([(0, 0), (0, 100), (60, 50)])
        with pytest.raises(PolygonExtentError) as info:
            validate_polygon(wide, max_extent_deg=90.0)
        assert info.value.extent_deg == pytest.approx(100.0)
        assert isinstance(info.value, ValueError)


# ═══════════════════════════════════════════════════════════════════
# Single plate
# ═══════════════════════════════════════════════════════════════════


class TestBuildPlateMesh:
    def test_full_mesh(self, square_plate_fixture):
        result = build_plate_mesh(square_plate_fixture, DEFAULT_PLATE, rng=42)
        assert result.plate_id == "square"
        assert result.color == (0.5, 0.5, 1.0)
        assert result.mesh.triangle_count > 100
        assert result.mesh.validate() == []
        assert result.point_count == result.mesh.vertex_count
        np.testing.assert_allclose(np.linalg.norm(result.mesh.positions, axis=1), 1.02)

    def test_outline(self, square_plate_fixture):
        result = build_plate_mesh(square_plate_fixture, DEFAULT_PLATE, rng=0)
        assert result.outline.shape == (4 * 30 + 1, 3)
        np.testing.assert_allclose(np.linalg.norm(result.outline, axis=1), 1.02)
        np.testing.assert_allclose(result.outline[0], result.outline[-1])

    def test_outline_only(self, square_plate_fixture):
        result = build_plate_mesh(square_plate_fixture, OUTLINE_ONLY)
        assert result.mesh.vertex_count == 4
        assert result.mesh.triangle_count == 2
        assert result.point_count == 4

    def test_two_vertices_returns_none(self, caplog):
        plate = Plate("tiny", SphericalPolygon.from_lat_lon([(0, 0), (1, 1)]))
        with caplog.at_level(logging.WARNING, logger="sphereplates"):
            assert build_plate_mesh(plate) is None
        assert "tiny" in caplog.text

    def test_extent_error_propagates(self, square_plate_fixture):
        config = replace(DEFAULT_PLATE, max_extent_deg=20.0)
        with pytest.raises(PolygonExtentError):
            build_plate_mesh(square_plate_fixture, config, rng=0)

    def test_reproducible(self, square_plate_fixture):
        a = build_plate_mesh(square_plate_fixture, rng=5)
        b = build_plate_mesh(square_plate_fixture, rng=5)
        np.testing.assert_array_equal(a.mesh.positions, b.mesh.positions)
        np.testing.assert_array_equal(a.mesh.triangles, b.mesh.triangles)

    def test_shading_attached(self, square_plate_fixture):
        config = replace(DEFAULT_PLATE, shade_vertices=True)
        result = build_plate_mesh(square_plate_fixture, config, rng=1)
        assert result.mesh.colors.shape == result.mesh.positions.shape


class TestShadeByDistance:
    def test_anchor_brightest(self):
        mesh = Mesh(
            positions=np.array([[0.0, 0.0, 1.0], [1.0, 0.0, 1.0], [2.0, 0.0, 1.0]]),
            triangles=np.zeros((0, 3), dtype=np.int64),
        )
        shaded = shade_by_distance(mesh, (1.0, 0.5, 0.0), falloff=0.4)
        np.testing.assert_allclose(shaded.colors[0], [1.0, 0.5, 0.0])
        np.testing.assert_allclose(shaded.colors[2], [0.6, 0.3, 0.0])
        assert mesh.colors is None

    def test_empty_mesh(self):
        assert shade_by_distance(Mesh.empty(), (1, 1, 1)).colors.shape == (0, 3)


# ═══════════════════════════════════════════════════════════════════
# Batches
# ═══════════════════════════════════════════════════════════════════


class TestBuildPlateMeshes:
    def test_all_plates_built(self, plates):
        results = build_plate_meshes(plates, seed=3)
        assert [r.plate_id for r in results] == ["a", "b", "c"]
        assert all(not r.mesh.is_empty for r in results)

    def test_bad_plates_skipped(self, plates, caplog):
        bad = [
            Plate("short", SphericalPolygon.from_lat_lon([(0, 0), (5, 5)])),
            Plate("wide", SphericalPolygon.from_lat_lon([(0, 0), (0, 120), (40, 60)])),
            Plate("tilted", SphericalPolygon.from_lat_lon([(0, 0), (0, 10), (100, 5)])),
        ]
        config = replace(DEFAULT_PLATE, max_extent_deg=90.0)
        with caplog.at_level(logging.WARNING, logger="sphereplates"):
            results = build_plate_meshes(bad + plates, config, seed=3)
        assert [r.plate_id for r in results] == ["a", "b", "c"]
        assert "short" in caplog.text
        assert "wide" in caplog.text
        assert "tilted" in caplog.text

    def test_plate_stream_independent_of_batch(self, plates):
        alone = build_plate_meshes(plates[:1], seed=11)[0]
        batch = build_plate_meshes(plates, seed=11)[0]
        np.testing.assert_array_equal(alone.mesh.positions, batch.mesh.positions)

    def test_seed_reproducible(self, plates):
        a = build_plate_meshes(plates, seed=99)
        b = build_plate_meshes(plates, seed=99)
        for x, y in zip(a, b):
            np.testing.assert_array_equal(x.mesh.triangles, y.mesh.triangles)

    def test_spawned_streams_differ(self):
        first, second = spawn_rngs(1, 2)
        assert first.random() != second.random()
