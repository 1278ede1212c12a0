from __future__ import annotations

import importlib.util
from typing import List, Sequence

from stroke_backends import python_backend
from stroke_geometry import Point

NUMBA_AVAILABLE = importlib.util.find_spec("numba") is not None
if NUMBA_AVAILABLE:
    import numba
    import numpy as np


if NUMBA_AVAILABLE:

    @numba.njit(cache=True)
    def _points_in_polygon_numba(
        poly_x: np.ndarray,
        poly_y: np.ndarray,
        px: np.ndarray,
        py: np.ndarray,
    ) -> np.ndarray:
        n = len(poly_x)
        m = len(px)
        out = np.zeros(m, dtype=np.bool_)
        if n < 3:
            return out
        for k in range(m):
            x = px[k]
            y = py[k]
            inside = False
            j = n - 1
            for i in range(n):
                xi = poly_x[i]
                yi = poly_y[i]
                xj = poly_x[j]
                yj = poly_y[j]
                if (yi > y) != (yj > y):
                    cx = xi + (y - yi) * (xj - xi) / (yj - yi)
                    if x < cx:
                        inside = not inside
                j = i
            out[k] = inside
        return out


def points_in_polygon(polygon: Sequence[Point], points: Sequence[Point]) -> List[bool]:
    if not NUMBA_AVAILABLE:
        return python_backend.points_in_polygon(polygon, points)
    if not points:
        return []
    poly = np.asarray(polygon, dtype=np.float64).reshape(-1, 2)
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    result = _points_in_polygon_numba(
        np.ascontiguousarray(poly[:, 0]),
        np.ascontiguousarray(poly[:, 1]),
        np.ascontiguousarray(pts[:, 0]),
        np.ascontiguousarray(pts[:, 1]),
    )
    return [bool(v) for v in result]
