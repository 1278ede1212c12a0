from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import List, Optional, Sequence, Tuple

from stroke_geometry import Bezier, BezierIntersection, Edge, Point, Rect, distance_squared
from stroke_line import Line, LineIndexValue, LineRange, union_ranges
from stroke_math import DEFAULT_TUNING, EngineTuning, polygon_contains
import stroke_query

_LOGGER = logging.getLogger(__name__)

_SAME_CROSSING = 1e-7


class LassoKind(Enum):
    AROUND = "around"
    SPLIT = "split"


@dataclass(frozen=True)
class LassoType:
    kind: LassoKind
    ranges: Tuple[LineRange, ...] = ()


@dataclass(frozen=True)
class LassoSplit:
    kind: LassoKind
    in_lines: Tuple[Line, ...]
    out_lines: Tuple[Line, ...] = ()


class Lasso:
    """Closed selection outline built from a line.

    The outline is closed implicitly from the last point back to the first.
    """

    def __init__(self, line: Line, tuning: EngineTuning = DEFAULT_TUNING) -> None:
        self._line = line
        self.tuning = tuning
        self._polygon = self._flatten(line, tuning.lasso_flatness)
        self._beziers = list(line.beziers())

    @staticmethod
    def _flatten(line: Line, flatness: int) -> List[Point]:
        if line.is_empty:
            return []
        count = max(1, flatness)
        points: List[Point] = []
        for b in line.beziers():
            for k in range(count):
                points.append(b.position(k / count))
        points.append(line.last_point)
        return points

    @property
    def line(self) -> Line:
        return self._line

    @property
    def polygon(self) -> List[Point]:
        return list(self._polygon)

    @property
    def bounds(self) -> Optional[Rect]:
        return self._line.bounds

    def contains(self, p: Point) -> bool:
        return polygon_contains(self._polygon, p)

    def is_straight(self, max_distance: float = 1.0, max_line_width: float = 2.0) -> bool:
        """True for a short, nearly straight outline (a click rather than a loop)."""
        if self._line.is_empty or self._line.length() >= max_line_width:
            return False
        edge = Edge(self._line.first_point, self._line.last_point)
        d2 = max_distance * max_distance
        return all(edge.distance_squared_from(c.point) <= d2 for c in self._line.controls)

    def _crossings(self, b0: Bezier) -> List[BezierIntersection]:
        line = self._line
        tolerance = self.tuning.intersection_tolerance
        found: List[BezierIntersection] = []
        if line.last_point != line.first_point:
            found.extend(b0.intersections(Bezier.linear(line.last_point, line.first_point), tolerance))
        for b1 in self._beziers:
            found.extend(b0.intersections(b1, tolerance))
        found.sort(key=lambda v: v.t)
        return found

    def lasso_type(self, other: Line) -> Optional[LassoType]:
        """Classifies ``other`` against the outline with an even-odd walk."""
        bb = self.bounds
        if other.is_empty or bb is None or not bb.intersects(other.bounds):
            return None
        first_inside = self.contains(other.first_point)
        last_inside = self.contains(other.last_point)
        parity = 1 if first_inside else 0
        old = other.first_index_value
        last_crossing: Optional[Point] = None
        ranges: List[LineRange] = []
        is_split = False
        for i0, b0 in enumerate(other.beziers()):
            if not bb.intersects(b0.control_bounds):
                continue
            crossings = self._crossings(b0)
            for v in crossings:
                if last_crossing is not None and distance_squared(v.point, last_crossing) <= _SAME_CROSSING ** 2:
                    continue
                last_crossing = v.point
                here = LineIndexValue(i0, v.t)
                parity += 1
                if parity % 2 == 0:
                    if old != here:
                        ranges.append(LineRange(old, here))
                else:
                    old = here
                is_split = True
        if is_split and parity % 2 == 1:
            end = other.last_index_value
            if old != end:
                ranges.append(LineRange(old, end))
        if ranges:
            return LassoType(LassoKind.SPLIT, tuple(union_ranges(ranges)))
        if not is_split and first_inside and last_inside:
            return LassoType(LassoKind.AROUND)
        return None

    def _snap_values(self, other: Line, split_lines: Sequence[Line]) -> List[Tuple[float, LineIndexValue]]:
        ivs: List[Tuple[float, LineIndexValue]] = []
        for split_line in split_lines:
            for l0, l1 in stroke_query.index_values(other, split_line):
                ivs.append((split_line.width_at(l1) / 2, l0))
        ivs.sort(key=lambda v: v[1])
        return ivs

    def _end_snap_ranges(self, other: Line, split_lines: Sequence[Line], d: float) -> List[LineRange]:
        """Pieces between a stroke end and the nearest cut when only an end cap touches the outline."""
        first_edge = other.first_rounded_edge()
        last_edge = other.last_rounded_edge()
        first_snap = first_edge is not None and stroke_query.intersects_edge(self._line, first_edge)
        last_snap = last_edge is not None and stroke_query.intersects_edge(self._line, last_edge)
        if not (first_snap or last_snap):
            return []
        ivs = self._snap_values(other, split_lines)
        if not ivs:
            return []
        min_length = other.width * self.tuning.snap_min_length_ratio
        ranges: List[LineRange] = []
        ivd, iv = ivs[0]
        head = LineRange(other.first_index_value, iv)
        head_length = other.length(head)
        if min_length < head_length < d + ivd:
            ranges.append(head)
        ivd, iv = ivs[-1]
        if iv != ivs[0][1]:
            tail = LineRange(iv, other.last_index_value)
            tail_length = other.length(tail)
            if min_length < tail_length < d + ivd:
                ranges.append(tail)
        return ranges

    def _nearest_snap(
        self,
        other: Line,
        ivs: Sequence[Tuple[float, LineIndexValue]],
        at: LineIndexValue,
        d: float,
    ) -> Optional[LineIndexValue]:
        best: Optional[LineIndexValue] = None
        best_length = math.inf
        for ivd, iv in ivs:
            r = LineRange(iv, at) if iv < at else LineRange(at, iv)
            l = other.length(r)
            if l < d + ivd and l < best_length:
                best_length = l
                best = iv
        return best

    def _snapped_ranges(
        self,
        other: Line,
        ranges: Sequence[LineRange],
        split_lines: Sequence[Line],
        d: float,
    ) -> List[LineRange]:
        ivs = self._snap_values(other, split_lines)
        snapped = list(ranges)
        for i, r in enumerate(ranges):
            pre = other.first_index_value if i == 0 else snapped[i - 1].end
            nxt = other.last_index_value if i == len(ranges) - 1 else ranges[i + 1].start
            start, end = r.start, r.end
            if r.start != other.first_index_value:
                iv = self._nearest_snap(other, ivs, r.start, d)
                if iv is not None and pre < iv < r.end:
                    start = iv
            if r.end != other.last_index_value:
                iv = self._nearest_snap(other, ivs, r.end, d)
                if iv is not None and r.start < iv < nxt:
                    end = iv
            if (start, end) != (r.start, r.end):
                _LOGGER.debug("snapped range %s to %s..%s", r, start, end)
            snapped[i] = LineRange(start, end)
        return union_ranges([r for r in snapped if r.start < r.end])

    def _split_by(self, other: Line, in_ranges: Sequence[LineRange]) -> LassoSplit:
        out_ranges = other.reversed_ranges(in_ranges)
        in_ranges = other.reversed_ranges(out_ranges)
        return LassoSplit(
            LassoKind.SPLIT,
            tuple(other.split_range(r) for r in in_ranges),
            tuple(other.split_range(r) for r in out_ranges),
        )

    def split_line(
        self,
        other: Line,
        split_lines: Sequence[Line] = (),
        distance: float = 0.0,
    ) -> Optional[LassoSplit]:
        """Cuts ``other`` into the pieces inside and outside the outline.

        With ``distance > 0`` and ``split_lines`` given, cut positions close to
        a crossing with one of ``split_lines`` snap onto that crossing.
        """
        lasso_type = self.lasso_type(other)
        snapping = distance > 0 and bool(split_lines)
        if lasso_type is None:
            if not snapping:
                return None
            in_ranges = self._end_snap_ranges(other, split_lines, distance)
            if not in_ranges:
                return None
            _LOGGER.debug("end cap snap produced %d range(s)", len(in_ranges))
            return self._split_by(other, in_ranges)
        if lasso_type.kind is LassoKind.AROUND:
            return LassoSplit(LassoKind.AROUND, (other,))
        in_ranges = list(lasso_type.ranges)
        if snapping:
            in_ranges = self._snapped_ranges(other, in_ranges, split_lines, distance)
        return self._split_by(other, in_ranges)

    def intersects_line(self, other: Line) -> bool:
        bb = self.bounds
        if other.is_empty or bb is None or not bb.intersects(other.bounds):
            return False
        if stroke_query.intersects_line(self._line, other):
            return True
        return any(self.contains(p) for p in other.main_points())

    def intersects_lasso(self, other: "Lasso") -> bool:
        bb = self.bounds
        if bb is None or not bb.intersects(other.bounds):
            return False
        if stroke_query.intersects_line(other.line, self._line):
            return True
        return other.contains(self._line.first_point) or other.contains(self._line.last_point)


__all__ = [
    "Lasso",
    "LassoKind",
    "LassoSplit",
    "LassoType",
]
