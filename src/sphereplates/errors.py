"""Exceptions raised at the boundary between plate ingestion and meshing."""

from __future__ import annotations


class PlateError(ValueError):
    """Base class for plates the mesher cannot accept."""


class InsufficientVerticesError(PlateError):
    """Polygon has fewer than three vertices."""

    def __init__(self, count: int) -> None:
        super().__init__(f"Polygon needs at least 3 vertices, got {count}")
        self.count = count


class PolygonExtentError(PlateError):
    """Polygon spans too much of the sphere to have a well-defined interior."""

    def __init__(self, extent_deg: float, limit_deg: float) -> None:
        super().__init__(
            f"Polygon angular extent {extent_deg:.3f}° reaches the limit of {limit_deg:.3f}°"
        )
        self.extent_deg = extent_deg
        self.limit_deg = limit_deg


class PayloadError(ValueError):
    """A plates or mesh JSON payload is malformed."""
