from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List, Optional, Tuple

from stroke_geometry import (
    Bezier,
    BezierInterpolation,
    Edge,
    Point,
    clamp,
    clipped,
    difference_angle,
    distance,
    distance_squared,
    edges_from,
    lerp,
    sub,
)
from stroke_line import Line
from stroke_math import DEFAULT_LINE_WIDTH, DEFAULT_TUNING, EngineTuning


@dataclass(frozen=True)
class DistancePoint:
    """Polyline vertex carrying the stroke half-width at that point."""

    point: Point
    distance: float = 0.0

    def contains(self, other: "DistancePoint", distance: float = 0.0) -> bool:
        reach = distance + self.distance + other.distance
        return distance_squared(self.point, other.point) < reach * reach


@dataclass(frozen=True)
class DistanceEdge:
    p0: DistancePoint
    p1: DistancePoint

    @property
    def is_empty(self) -> bool:
        return self.p0.point == self.p1.point

    @property
    def edge(self) -> Edge:
        return Edge(self.p0.point, self.p1.point)

    def reversed(self) -> "DistanceEdge":
        return DistanceEdge(self.p1, self.p0)

    def position(self, t: float) -> DistancePoint:
        return DistancePoint(self.edge.position(t), lerp(self.p0.distance, self.p1.distance, t))

    def nearest_t(self, p: Point) -> float:
        return self.edge.nearest_t(p)

    def nearest_position(self, p: DistancePoint) -> DistancePoint:
        return self.position(self.nearest_t(p.point))

    def intersection(self, other: "DistanceEdge") -> Optional[Tuple[DistancePoint, DistancePoint]]:
        """Crossing as seen from both edges; both share the same point."""
        ts = self.edge.intersection_t(other.edge)
        if ts is None:
            return None
        dp0 = self.position(ts[0])
        dp1 = DistancePoint(dp0.point, other.position(ts[1]).distance)
        return dp0, dp1


def distance_edges_from(points: List[DistancePoint]) -> List[DistanceEdge]:
    edges = []
    for i in range(1, len(points)):
        edge = DistanceEdge(points[i - 1], points[i])
        if not edge.is_empty:
            edges.append(edge)
    return edges


def _split_t(b: Bezier) -> float:
    """Split parameter that evens out a segment's two control chords."""
    d0 = distance(b.p0, b.cp)
    d1 = distance(b.cp, b.p1)
    ratio = d0 / d1 if d0 < d1 else (d0 - d1) / d0
    return (ratio + 0.5) / 2


def _chord_ratio(b: Bezier) -> float:
    d0 = distance(b.p0, b.cp)
    d1 = distance(b.cp, b.p1)
    return d0 / d1 if d0 < d1 else d1 / d0


def _turn_density(da: float, tuning: EngineTuning) -> float:
    if da < tuning.flat_turn:
        return clipped(da, 0.0, tuning.low_turn, 0.0, tuning.low_density)
    return clipped(da, tuning.low_turn, tuning.sharp_turn, tuning.low_density, tuning.high_density)


def _sample_count(b: Bezier, da: float, rlw: float, quality: float, tuning: EngineTuning) -> int:
    l = b.length_with_flatness(tuning.flatness_samples)
    c = l * _turn_density(da, tuning) * rlw * quality
    if math.isnan(c):
        return tuning.min_samples
    return int(clamp(c, tuning.min_samples, tuning.max_samples))


def _reciprocal_width(line: Line) -> float:
    return DEFAULT_LINE_WIDTH / line.width if line.width > 0 else math.inf


def path_points(line: Line, quality: float = 1.0, tuning: EngineTuning = DEFAULT_TUNING) -> List[Point]:
    """Polyline approximation of ``line`` for rendering and hit-testing.

    Sampling density grows with segment length, turn angle, ``quality`` and
    thinness of the stroke. The true first and last points are always kept.
    """
    cs = line.controls
    if not cs:
        return []
    s = line.width / 2
    rlw = _reciprocal_width(line)
    if len(cs) < 3:
        p0, p1 = line.first_point, line.last_point
        return [] if p0 == p1 else [p0, p1]

    ps: List[Point] = []
    mini_cross_limit = (tuning.mini_cross_ratio * s) ** 2

    def append_bezier(b: Bezier) -> None:
        da = abs(difference_angle(sub(b.cp, b.p0), sub(b.p1, b.cp)))
        mini_cross = da > tuning.mini_cross_turn and (
            distance_squared(b.p0, b.cp) < mini_cross_limit
            or distance_squared(b.cp, b.p1) < mini_cross_limit
        )
        if da > tuning.sharp_turn or mini_cross:
            ps.append(b.p0)
            ps.append(b.position(0.5))
            return
        count = _sample_count(b, da, rlw, quality, tuning)
        for i in range(count):
            ps.append(b.position(i / count))

    old: Optional[Bezier] = None
    for b in line.beziers():
        first_equal = b.p0 == b.cp
        last_equal = b.cp == b.p1
        if old is not None and (old.cp == old.p1 or first_equal):
            ps.append(old.p1)
            ps.append(b.p0)
        old = b
        if first_equal or last_equal:
            ps.append(b.p0)
            continue
        if _chord_ratio(b) < tuning.chord_ratio:
            b0, b1 = b.split(_split_t(b))
            append_bezier(b0)
            append_bezier(b1)
        else:
            append_bezier(b)
    ps.append(line.last_point)
    return ps


def path_distance_points(
    line: Line,
    quality: float = 1.0,
    tuning: EngineTuning = DEFAULT_TUNING,
) -> List[DistancePoint]:
    """Like :func:`path_points`, each vertex annotated with the local half-width."""
    cs = line.controls
    if not cs:
        return []
    s = line.width / 2
    rlw = _reciprocal_width(line)
    if len(cs) < 3:
        p0, p1 = line.first_point, line.last_point
        if p0 == p1:
            return []
        return [DistancePoint(p0, s * cs[0].pressure), DistancePoint(p1, s * cs[-1].pressure)]

    ps: List[DistancePoint] = []

    def append_bezier(b: Bezier, pi: BezierInterpolation) -> None:
        da = abs(difference_angle(sub(b.cp, b.p0), sub(b.p1, b.cp)))
        count = _sample_count(b, da, rlw, quality, tuning)
        for i in range(count):
            t = i / count
            ps.append(DistancePoint(b.position(t), s * pi.position(t)))

    old: Optional[Bezier] = None
    old_pi: Optional[BezierInterpolation] = None
    for b, pi in zip(line.beziers(), line.pressure_interpolations()):
        first_equal = b.p0 == b.cp
        last_equal = b.cp == b.p1
        if old is not None and old_pi is not None and (old.cp == old.p1 or first_equal):
            ps.append(DistancePoint(old.p1, s * old_pi.x1))
            ps.append(DistancePoint(b.p0, s * pi.x0))
        old = b
        old_pi = pi
        if first_equal or last_equal:
            ps.append(DistancePoint(b.p0, s * pi.x0))
            continue
        t = _split_t(b)
        b0, b1 = b.split(t)
        pi0, pi1 = pi.split(t)
        append_bezier(b0, pi0)
        append_bezier(b1, pi1)
    ps.append(DistancePoint(line.last_point, s * cs[-1].pressure))
    return ps


def path_edges(line: Line, quality: float = 1.0, tuning: EngineTuning = DEFAULT_TUNING) -> List[Edge]:
    return edges_from(path_points(line, quality, tuning))


def path_distance_edges(
    line: Line,
    quality: float = 1.0,
    tuning: EngineTuning = DEFAULT_TUNING,
) -> List[DistanceEdge]:
    return distance_edges_from(path_distance_points(line, quality, tuning))


__all__ = [
    "DistanceEdge",
    "DistancePoint",
    "distance_edges_from",
    "path_distance_edges",
    "path_distance_points",
    "path_edges",
    "path_points",
]
