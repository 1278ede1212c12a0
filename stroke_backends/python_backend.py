from __future__ import annotations

from typing import List, Sequence

from stroke_geometry import Point, polygon_contains


def points_in_polygon(polygon: Sequence[Point], points: Sequence[Point]) -> List[bool]:
    return [polygon_contains(polygon, p) for p in points]
