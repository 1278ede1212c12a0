from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, List, Optional, Tuple

from stroke_geometry import Bezier, Edge, Point, Rect, distance_squared, lerp, union_rects
from stroke_line import Line, LineIndexValue


@dataclass(frozen=True)
class Nearest:
    index: int
    t: float
    point: Point
    distance_squared: float

    @property
    def index_value(self) -> LineIndexValue:
        return LineIndexValue(self.index, self.t)


def bounds(line: Line) -> Optional[Rect]:
    return line.bounds


def lines_bounds(lines: Iterable[Line]) -> Optional[Rect]:
    return union_rects(line.bounds for line in lines)


def nearest(line: Line, p: Point) -> Nearest:
    """Closest position on ``line`` to ``p`` over all segments."""
    if line.is_empty:
        raise ValueError("nearest() on an empty line")
    min_d = math.inf
    min_index = 0
    min_t = 0.0
    for i, b in enumerate(line.beziers()):
        t, d = b.nearest(p)
        if d <= min_d:
            min_d = d
            min_index = i
            min_t = t
    return Nearest(min_index, min_t, line.bezier(min_index).position(min_t), min_d)


def nearest_index_value(line: Line, p: Point) -> LineIndexValue:
    return nearest(line, p).index_value


def nearest_with_min_distance(
    line: Line,
    p: Point,
    min_distance: float,
    is_reversed: bool = False,
) -> Optional[Nearest]:
    """Closest position whose arc length from the near end exceeds ``min_distance``.

    The end segment the arc length is measured from is never a candidate.
    Returns None when no segment qualifies.
    """
    beziers = list(line.beziers())
    if not beziers:
        return None
    lengths = [b.length() for b in beziers]
    min_d = math.inf
    best: Optional[Tuple[int, float]] = None
    if is_reversed:
        skip = len(beziers) - 1
        after = 0.0
        for i in range(len(beziers) - 1, -1, -1):
            b = beziers[i]
            if i != skip:
                t, d = b.nearest(p)
                if d <= min_d and after + b.clip(t, 1.0).length() > min_distance:
                    min_d = d
                    best = (i, t)
            after += lengths[i]
    else:
        before = 0.0
        for i, b in enumerate(beziers):
            if i != 0:
                t, d = b.nearest(p)
                if d <= min_d and before + b.clip(0.0, t).length() > min_distance:
                    min_d = d
                    best = (i, t)
            before += lengths[i]
    if best is None:
        return None
    index, t = best
    return Nearest(index, t, beziers[index].position(t), min_d)


def min_distance_squared(line: Line, p: Point) -> float:
    cs = line.controls
    if not cs:
        return math.inf
    if len(cs) == 1:
        return distance_squared(cs[0].point, p)
    if len(cs) == 2:
        return Edge(cs[0].point, cs[1].point).distance_squared_from(p)
    return min(b.min_distance_squared(p) for b in line.beziers())


def max_distance_squared(line: Line, p: Point) -> float:
    return max((b.max_distance_squared(p) for b in line.beziers()), default=0.0)


def contains_pressure(line: Line, p: Point) -> bool:
    """True when ``p`` lies under the stroke's variable-width body."""
    cs = line.controls
    if not cs:
        return False
    half = line.width / 2
    if len(cs) == 1:
        return distance_squared(cs[0].point, p) < (half * cs[0].pressure) ** 2
    if len(cs) == 2:
        edge = Edge(cs[0].point, cs[1].point)
        t = edge.nearest_t(p)
        pressure = lerp(cs[0].pressure, cs[1].pressure, t)
        return distance_squared(edge.position(t), p) < (half * pressure) ** 2
    for b, pi in zip(line.beziers(), line.pressure_interpolations()):
        t, d = b.nearest(p)
        if d < (half * pi.position(t)) ** 2:
            return True
    return False


def intersects_edge(line: Line, edge: Edge) -> bool:
    lb = line.bounds
    if lb is None or not lb.intersects(edge.bounds):
        return False
    return any(b.intersects_edge(edge) for b in line.beziers())


def intersects_bezier(line: Line, bezier: Bezier) -> bool:
    lb = line.bounds
    if lb is None or not lb.intersects(bezier.control_bounds):
        return False
    return any(bezier.intersects(b) for b in line.beziers())


def intersects_line(line: Line, other: Line) -> bool:
    lb = line.bounds
    if lb is None or not lb.intersects(other.bounds):
        return False
    return any(intersects_bezier(other, b) for b in line.beziers())


def intersects_rect(line: Line, rect: Rect) -> bool:
    lb = line.bounds
    if lb is None or not lb.intersects(rect):
        return False
    if rect.contains(line.first_point):
        return True
    x0y0 = (rect.min_x, rect.min_y)
    x1y0 = (rect.max_x, rect.min_y)
    x1y1 = (rect.max_x, rect.max_y)
    x0y1 = (rect.min_x, rect.max_y)
    return (
        intersects_bezier(line, Bezier.linear(x0y0, x1y0))
        or intersects_bezier(line, Bezier.linear(x1y0, x1y1))
        or intersects_bezier(line, Bezier.linear(x1y1, x0y1))
        or intersects_bezier(line, Bezier.linear(x0y1, x0y0))
    )


def index_values(line: Line, split_line: Line) -> List[Tuple[LineIndexValue, LineIndexValue]]:
    """Crossings as ``(position on line, position on split_line)`` pairs."""
    sb = split_line.bounds
    values: List[Tuple[LineIndexValue, LineIndexValue]] = []
    if sb is None:
        return values
    split_beziers = list(split_line.beziers())
    for i0, b0 in enumerate(line.beziers()):
        if not sb.intersects(b0.control_bounds):
            continue
        for i1, b1 in enumerate(split_beziers):
            for v in b0.intersections(b1):
                values.append((LineIndexValue(i0, v.t), LineIndexValue(i1, v.other_t)))
    return values


__all__ = [
    "Nearest",
    "bounds",
    "contains_pressure",
    "index_values",
    "intersects_bezier",
    "intersects_edge",
    "intersects_line",
    "intersects_rect",
    "lines_bounds",
    "max_distance_squared",
    "min_distance_squared",
    "nearest",
    "nearest_index_value",
    "nearest_with_min_distance",
]
