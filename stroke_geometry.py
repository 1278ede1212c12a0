from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]

ORIGIN: Point = (0.0, 0.0)


def lerp(a: float, b: float, t: float) -> float:
    return a * (1.0 - t) + b * t


def point_lerp(p0: Point, p1: Point, t: float) -> Point:
    return (p0[0] * (1.0 - t) + p1[0] * t, p0[1] * (1.0 - t) + p1[1] * t)


def mid(p0: Point, p1: Point) -> Point:
    return ((p0[0] + p1[0]) * 0.5, (p0[1] + p1[1]) * 0.5)


def add(p0: Point, p1: Point) -> Point:
    return (p0[0] + p1[0], p0[1] + p1[1])


def sub(p0: Point, p1: Point) -> Point:
    return (p0[0] - p1[0], p0[1] - p1[1])


def scale(p: Point, s: float) -> Point:
    return (p[0] * s, p[1] * s)


def dot(v0: Point, v1: Point) -> float:
    return v0[0] * v1[0] + v0[1] * v1[1]


def cross(v0: Point, v1: Point) -> float:
    return v0[0] * v1[1] - v0[1] * v1[0]


def distance(p0: Point, p1: Point) -> float:
    return math.hypot(p1[0] - p0[0], p1[1] - p0[1])


def distance_squared(p0: Point, p1: Point) -> float:
    dx = p1[0] - p0[0]
    dy = p1[1] - p0[1]
    return dx * dx + dy * dy


def angle(p0: Point, p1: Point) -> float:
    return math.atan2(p1[1] - p0[1], p1[0] - p0[0])


def difference_angle(v0: Point, v1: Point) -> float:
    """Signed rotation from ``v0`` to ``v1`` in ``(-pi, pi]``."""
    return math.atan2(cross(v0, v1), dot(v0, v1))


def moved_with(p: Point, dist: float, theta: float) -> Point:
    return (p[0] + dist * math.cos(theta), p[1] + dist * math.sin(theta))


def clipped(value: float, lo: float, hi: float, new_lo: float, new_hi: float) -> float:
    """Linear remap of ``[lo, hi]`` onto ``[new_lo, new_hi]`` with clamping."""
    if value <= lo:
        return new_lo
    if value >= hi:
        return new_hi
    return new_lo + (new_hi - new_lo) * (value - lo) / (hi - lo)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


@dataclass(frozen=True)
class Rect:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Optional["Rect"]:
        xs: List[float] = []
        ys: List[float] = []
        for x, y in points:
            xs.append(x)
            ys.append(y)
        if not xs:
            return None
        return cls(min(xs), min(ys), max(xs), max(ys))

    def union(self, other: Optional["Rect"]) -> "Rect":
        if other is None:
            return self
        return Rect(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def intersects(self, other: Optional["Rect"]) -> bool:
        if other is None:
            return False
        return (
            self.min_x <= other.max_x
            and other.min_x <= self.max_x
            and self.min_y <= other.max_y
            and other.min_y <= self.max_y
        )

    def contains(self, p: Point) -> bool:
        return self.min_x <= p[0] <= self.max_x and self.min_y <= p[1] <= self.max_y


def union_rects(rects: Iterable[Optional[Rect]]) -> Optional[Rect]:
    result: Optional[Rect] = None
    for rect in rects:
        if rect is None:
            continue
        result = rect if result is None else result.union(rect)
    return result


@dataclass(frozen=True)
class Edge:
    p0: Point
    p1: Point

    @property
    def vector(self) -> Point:
        return sub(self.p1, self.p0)

    @property
    def is_empty(self) -> bool:
        return self.p0 == self.p1

    @property
    def bounds(self) -> Rect:
        return Rect(
            min(self.p0[0], self.p1[0]),
            min(self.p0[1], self.p1[1]),
            max(self.p0[0], self.p1[0]),
            max(self.p0[1], self.p1[1]),
        )

    def position(self, t: float) -> Point:
        return point_lerp(self.p0, self.p1, t)

    def _ratio(self, p: Point) -> float:
        v = self.vector
        return dot(v, sub(p, self.p0)) / dot(v, v)

    def nearest_t(self, p: Point) -> float:
        if self.is_empty:
            return 0.5
        return clamp(self._ratio(p), 0.0, 1.0)

    def nearest_point(self, p: Point) -> Point:
        if self.is_empty:
            return self.p0
        r = self._ratio(p)
        if r <= 0:
            return self.p0
        if r >= 1:
            return self.p1
        return add(self.p0, scale(self.vector, r))

    def distance_squared_from(self, p: Point) -> float:
        if self.is_empty:
            return distance_squared(self.p0, p)
        v = self.vector
        w = sub(p, self.p0)
        r = dot(v, w) / dot(v, v)
        if r <= 0:
            return distance_squared(self.p0, p)
        if r > 1:
            return distance_squared(self.p1, p)
        c = cross(v, w)
        return c * c / dot(v, v)

    def distance_from(self, p: Point) -> float:
        return math.sqrt(self.distance_squared_from(p))

    def intersection_t(self, other: "Edge") -> Optional[Tuple[float, float]]:
        """Parameters on both edges of a proper crossing, end points included."""
        v0 = self.vector
        v1 = other.vector
        denom = cross(v0, v1)
        if denom == 0:
            return None
        w = sub(other.p0, self.p0)
        t0 = cross(w, v1) / denom
        t1 = cross(w, v0) / denom
        if t0 < 0 or t0 > 1 or t1 < 0 or t1 > 1:
            return None
        return t0, t1


def edges_from(points: Sequence[Point]) -> List[Edge]:
    edges = []
    for i in range(1, len(points)):
        edge = Edge(points[i - 1], points[i])
        if not edge.is_empty:
            edges.append(edge)
    return edges


@dataclass(frozen=True)
class BezierIntersection:
    t: float
    other_t: float
    point: Point


@dataclass(frozen=True)
class Bezier:
    """Quadratic Bezier segment ``(p0, cp, p1)``."""

    p0: Point
    cp: Point
    p1: Point

    @classmethod
    def linear(cls, p0: Point, p1: Point) -> "Bezier":
        return cls(p0, mid(p0, p1), p1)

    @classmethod
    def point(cls, p: Point) -> "Bezier":
        return cls(p, p, p)

    def position(self, t: float) -> Point:
        u = 1.0 - t
        a = u * u
        b = 2.0 * u * t
        c = t * t
        return (
            a * self.p0[0] + b * self.cp[0] + c * self.p1[0],
            a * self.p0[1] + b * self.cp[1] + c * self.p1[1],
        )

    def derivative(self, t: float) -> Point:
        u = 1.0 - t
        return (
            2.0 * (u * (self.cp[0] - self.p0[0]) + t * (self.p1[0] - self.cp[0])),
            2.0 * (u * (self.cp[1] - self.p0[1]) + t * (self.p1[1] - self.cp[1])),
        )

    @property
    def control_bounds(self) -> Rect:
        return Rect(
            min(self.p0[0], self.cp[0], self.p1[0]),
            min(self.p0[1], self.cp[1], self.p1[1]),
            max(self.p0[0], self.cp[0], self.p1[0]),
            max(self.p0[1], self.cp[1], self.p1[1]),
        )

    bounds = control_bounds

    def split(self, t: float) -> Tuple["Bezier", "Bezier"]:
        c0 = point_lerp(self.p0, self.cp, t)
        c1 = point_lerp(self.cp, self.p1, t)
        p = point_lerp(c0, c1, t)
        return Bezier(self.p0, c0, p), Bezier(p, c1, self.p1)

    def clip(self, start_t: float, end_t: float) -> "Bezier":
        if start_t == 0 and end_t == 1:
            return self
        if start_t == end_t:
            return Bezier.point(self.position(start_t))
        p0 = self.position(start_t)
        p1 = self.position(end_t)
        d = self.derivative(start_t)
        h = (end_t - start_t) * 0.5
        return Bezier(p0, (p0[0] + d[0] * h, p0[1] + d[1] * h), p1)

    def length(self) -> float:
        """Exact arc length."""
        ax = self.p0[0] - 2.0 * self.cp[0] + self.p1[0]
        ay = self.p0[1] - 2.0 * self.cp[1] + self.p1[1]
        bx = self.cp[0] - self.p0[0]
        by = self.cp[1] - self.p0[1]
        qa = ax * ax + ay * ay
        qb = ax * bx + ay * by
        qc = bx * bx + by * by
        if qa <= 1e-24 * max(qc, 1e-300):
            return 2.0 * math.sqrt(qc)
        k = max(0.0, qc / qa - (qb / qa) ** 2)
        u0 = qb / qa
        u1 = 1.0 + qb / qa
        return 2.0 * math.sqrt(qa) * (_sqrt_integral(u1, k) - _sqrt_integral(u0, k))

    def length_with_flatness(self, flatness: int) -> float:
        count = max(1, int(flatness))
        total = 0.0
        old = self.p0
        for i in range(1, count + 1):
            p = self.position(i / count)
            total += distance(old, p)
            old = p
        return total

    def t_with_length(self, length: float, tolerance: float = 1e-9) -> Optional[float]:
        total = self.length()
        if total <= 0:
            return None
        if length <= 0:
            return 0.0
        if length >= total:
            return 1.0
        lo, hi = 0.0, 1.0
        for _ in range(64):
            t = (lo + hi) * 0.5
            l = self.clip(0.0, t).length()
            if abs(l - length) <= tolerance:
                return t
            if l < length:
                lo = t
            else:
                hi = t
        return (lo + hi) * 0.5

    def nearest(self, p: Point) -> Tuple[float, float]:
        """Returns ``(t, distance_squared)`` of the closest point to ``p``."""
        ax = self.p0[0] - 2.0 * self.cp[0] + self.p1[0]
        ay = self.p0[1] - 2.0 * self.cp[1] + self.p1[1]
        bx = self.cp[0] - self.p0[0]
        by = self.cp[1] - self.p0[1]
        mx = self.p0[0] - p[0]
        my = self.p0[1] - p[1]
        coefficients = [
            ax * ax + ay * ay,
            3.0 * (ax * bx + ay * by),
            2.0 * (bx * bx + by * by) + ax * mx + ay * my,
            bx * mx + by * my,
        ]
        candidates = [0.0, 1.0]
        if any(c != 0 for c in coefficients):
            for root in np.roots(coefficients):
                if abs(root.imag) < 1e-9 and 0.0 < root.real < 1.0:
                    candidates.append(float(root.real))
        best_t = 0.0
        best_d = math.inf
        for t in candidates:
            d = distance_squared(self.position(t), p)
            if d < best_d:
                best_d = d
                best_t = t
        return best_t, best_d

    def min_distance_squared(self, p: Point) -> float:
        return self.nearest(p)[1]

    def max_distance_squared(self, p: Point) -> float:
        return max(
            distance_squared(self.p0, p),
            distance_squared(self.p1, p),
            distance_squared(self.position(0.5), p),
        )

    def intersections(self, other: "Bezier", tolerance: float = 1e-7) -> List[BezierIntersection]:
        found: List[BezierIntersection] = []
        _subdivide_intersections(self, 0.0, 1.0, other, 0.0, 1.0, tolerance, 0, found)
        found.sort(key=lambda v: v.t)
        result: List[BezierIntersection] = []
        merge = max(tolerance * 100.0, 1e-9)
        for v in found:
            if result and abs(result[-1].t - v.t) <= merge and abs(result[-1].other_t - v.other_t) <= merge:
                continue
            result.append(v)
        return result

    def intersects(self, other: "Bezier") -> bool:
        if not self.control_bounds.intersects(other.control_bounds):
            return False
        return bool(self.intersections(other))

    def intersects_edge(self, edge: Edge) -> bool:
        return self.intersects(Bezier.linear(edge.p0, edge.p1))

    def flatness(self) -> float:
        return Edge(self.p0, self.p1).distance_from(self.cp)


def _sqrt_integral(u: float, k: float) -> float:
    """Antiderivative of ``sqrt(u**2 + k)``."""
    if k <= 1e-30:
        return 0.5 * u * abs(u)
    root = math.sqrt(u * u + k)
    return 0.5 * (u * root + k * math.asinh(u / math.sqrt(k)))


_MAX_INTERSECTION_DEPTH = 32


def _subdivide_intersections(
    b0: Bezier,
    t0: float,
    t1: float,
    b1: Bezier,
    s0: float,
    s1: float,
    tolerance: float,
    depth: int,
    found: List[BezierIntersection],
) -> None:
    if not b0.control_bounds.intersects(b1.control_bounds):
        return
    flat0 = b0.flatness() <= tolerance
    flat1 = b1.flatness() <= tolerance
    if (flat0 and flat1) or depth >= _MAX_INTERSECTION_DEPTH:
        e0 = Edge(b0.p0, b0.p1)
        e1 = Edge(b1.p0, b1.p1)
        if e0.is_empty or e1.is_empty:
            return
        ts = e0.intersection_t(e1)
        if ts is None:
            return
        p = e0.position(ts[0])
        # chord parameters are not curve parameters when speed varies
        found.append(
            BezierIntersection(
                t=lerp(t0, t1, b0.nearest(p)[0]),
                other_t=lerp(s0, s1, b1.nearest(p)[0]),
                point=p,
            )
        )
        return
    if flat0 or (not flat1 and b1.flatness() > b0.flatness()):
        c0, c1 = b1.split(0.5)
        sm = (s0 + s1) * 0.5
        _subdivide_intersections(b0, t0, t1, c0, s0, sm, tolerance, depth + 1, found)
        _subdivide_intersections(b0, t0, t1, c1, sm, s1, tolerance, depth + 1, found)
    else:
        c0, c1 = b0.split(0.5)
        tm = (t0 + t1) * 0.5
        _subdivide_intersections(c0, t0, tm, b1, s0, s1, tolerance, depth + 1, found)
        _subdivide_intersections(c1, tm, t1, b1, s0, s1, tolerance, depth + 1, found)


@dataclass(frozen=True)
class BezierInterpolation:
    """Scalar quadratic ``(x0, cx, x1)`` running alongside a Bezier segment."""

    x0: float
    cx: float
    x1: float

    @classmethod
    def linear(cls, x0: float, x1: float) -> "BezierInterpolation":
        return cls(x0, (x0 + x1) * 0.5, x1)

    def position(self, t: float) -> float:
        u = 1.0 - t
        return u * u * self.x0 + 2.0 * u * t * self.cx + t * t * self.x1

    def split(self, t: float) -> Tuple["BezierInterpolation", "BezierInterpolation"]:
        c0 = lerp(self.x0, self.cx, t)
        c1 = lerp(self.cx, self.x1, t)
        x = lerp(c0, c1, t)
        return BezierInterpolation(self.x0, c0, x), BezierInterpolation(x, c1, self.x1)

    def clip(self, start_t: float, end_t: float) -> "BezierInterpolation":
        if start_t == 0 and end_t == 1:
            return self
        x0 = self.position(start_t)
        x1 = self.position(end_t)
        d = 2.0 * ((1.0 - start_t) * (self.cx - self.x0) + start_t * (self.x1 - self.cx))
        return BezierInterpolation(x0, x0 + d * (end_t - start_t) * 0.5, x1)


def polygon_contains(polygon: Sequence[Point], p: Point) -> bool:
    """Even-odd ray casting test against a closed polyline."""
    inside = False
    n = len(polygon)
    if n < 3:
        return False
    x, y = p
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            cx = xi + (y - yi) * (xj - xi) / (yj - yi)
            if x < cx:
                inside = not inside
        j = i
    return inside


__all__ = [
    "Bezier",
    "BezierInterpolation",
    "BezierIntersection",
    "Edge",
    "ORIGIN",
    "Point",
    "Rect",
    "add",
    "angle",
    "clamp",
    "clipped",
    "cross",
    "difference_angle",
    "distance",
    "distance_squared",
    "dot",
    "edges_from",
    "lerp",
    "mid",
    "moved_with",
    "point_lerp",
    "polygon_contains",
    "scale",
    "sub",
    "union_rects",
]
