from __future__ import annotations

from bisect import insort
from dataclasses import dataclass, field, replace
from enum import IntEnum
import math
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
import uuid

from stroke_geometry import (
    ORIGIN,
    Bezier,
    BezierInterpolation,
    Edge,
    Point,
    Rect,
    angle,
    distance,
    lerp,
    mid,
    moved_with,
    point_lerp,
    union_rects,
)
from stroke_math import DEFAULT_LINE_WIDTH, DEFAULT_PRESSURE, MAX_LINE_WIDTH, NEUTRAL_WEIGHT

Color = Tuple[float, float, float, float]
DEFAULT_COLOR: Color = (0.0, 0.0, 0.0, 1.0)


def _finite(value: float, default: float = 0.0) -> float:
    value = float(value)
    return value if math.isfinite(value) else default


def _unit(value: float, default: float) -> float:
    value = float(value)
    if math.isnan(value):
        return default
    return min(max(value, 0.0), 1.0)


def _inverse_weight(numerator: float, denominator: float) -> float:
    return NEUTRAL_WEIGHT if denominator == 0 else numerator / denominator


@dataclass(frozen=True, order=True)
class LineIndexValue:
    """Position on a line: segment ``index`` and local parameter ``t``."""

    index: int = 0
    t: float = 0.0


@dataclass(frozen=True)
class LineRange:
    start: LineIndexValue
    end: LineIndexValue

    @classmethod
    def make(cls, start_index: int, start_t: float, end_index: int, end_t: float) -> "LineRange":
        return cls(LineIndexValue(start_index, start_t), LineIndexValue(end_index, end_t))

    @property
    def start_index(self) -> int:
        return self.start.index

    @property
    def start_t(self) -> float:
        return self.start.t

    @property
    def end_index(self) -> int:
        return self.end.index

    @property
    def end_t(self) -> float:
        return self.end.t

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def intersects(self, other: "LineRange") -> bool:
        return self.end >= other.start and self.start <= other.end

    def union(self, other: "LineRange") -> Optional["LineRange"]:
        if not self.intersects(other):
            return None
        return LineRange(min(self.start, other.start), max(self.end, other.end))


def union_ranges(ranges: Sequence[LineRange]) -> List[LineRange]:
    """Coalesces ranges into a sorted list of disjoint ranges."""
    result: List[LineRange] = []
    for r in sorted(ranges, key=lambda r: (r.start, r.end)):
        if result:
            merged = result[-1].union(r)
            if merged is not None:
                result[-1] = merged
                continue
        result.append(r)
    return result


class InterType(IntEnum):
    NONE = 0
    KEY = 1
    INTERPOLATED = 2


@dataclass(frozen=True)
class Control:
    """One node of a line. Values are repaired, never rejected."""

    point: Point = ORIGIN
    weight: float = NEUTRAL_WEIGHT
    pressure: float = DEFAULT_PRESSURE

    def __post_init__(self) -> None:
        x, y = self.point
        object.__setattr__(self, "point", (_finite(x), _finite(y)))
        object.__setattr__(self, "weight", _unit(self.weight, NEUTRAL_WEIGHT))
        object.__setattr__(self, "pressure", _unit(self.pressure, DEFAULT_PRESSURE))

    @classmethod
    def linear(cls, c0: "Control", c1: "Control", t: float) -> "Control":
        return cls(
            point_lerp(c0.point, c1.point, t),
            lerp(c0.weight, c1.weight, t),
            lerp(c0.pressure, c1.pressure, t),
        )

    def mid(self, other: "Control") -> "Control":
        return Control.linear(self, other, 0.5)

    def distance(self, other: "Control") -> float:
        return distance(self.point, other.point)

    def with_weight(self, weight: float) -> "Control":
        return replace(self, weight=weight)


def _sanitized_color(color: Sequence[float]) -> Color:
    values = [_unit(v, 1.0) for v in color]
    while len(values) < 4:
        values.append(1.0)
    return (values[0], values[1], values[2], values[3])


@dataclass(frozen=True)
class Line:
    controls: Tuple[Control, ...] = ()
    width: float = DEFAULT_LINE_WIDTH
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    inter_type: InterType = InterType.NONE
    color: Color = DEFAULT_COLOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "controls", tuple(self.controls))
        width = float(self.width)
        width = DEFAULT_LINE_WIDTH if math.isnan(width) else min(max(width, 0.0), MAX_LINE_WIDTH)
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "inter_type", InterType(self.inter_type))
        object.__setattr__(self, "color", _sanitized_color(self.color))

    # Construction

    @classmethod
    def from_points(
        cls,
        points: Sequence[Point],
        width: float = DEFAULT_LINE_WIDTH,
        color: Color = DEFAULT_COLOR,
    ) -> "Line":
        return cls(tuple(Control(p) for p in points), width=width, color=color)

    @classmethod
    def from_beziers(
        cls,
        beziers: Sequence[Bezier],
        pressures: Sequence[float] = (),
        width: float = DEFAULT_LINE_WIDTH,
        color: Color = DEFAULT_COLOR,
    ) -> "Line":
        if not beziers:
            return cls(width=width, color=color)
        if not pressures:
            pressures = [DEFAULT_PRESSURE] * (len(beziers) + 2)
        if len(beziers) == 1:
            b = beziers[0]
            return cls(
                (
                    Control(b.p0, pressure=pressures[0]),
                    Control(b.cp, pressure=pressures[1]),
                    Control(b.p1, pressure=pressures[2]),
                ),
                width=width,
                color=color,
            )
        controls = [Control(beziers[0].p0, pressure=pressures[0])]
        for i in range(len(beziers) - 1):
            b = beziers[i]
            weight = Edge(b.cp, beziers[i + 1].cp).nearest_t(b.p1)
            controls.append(Control(b.cp, weight, pressures[i + 1]))
        controls.append(Control(beziers[-1].cp, pressure=pressures[-2]))
        controls.append(Control(beziers[-1].p1, pressure=pressures[-1]))
        return cls(tuple(controls), width=width, color=color)

    @classmethod
    def from_spline_points(
        cls,
        points: Sequence[Point],
        width: float = DEFAULT_LINE_WIDTH,
        color: Color = DEFAULT_COLOR,
    ) -> "Line":
        """Catmull-Rom spline through ``points``."""
        if len(points) <= 2:
            return cls.from_points(points, width=width, color=color)
        beziers: List[Bezier] = []
        last = len(points) - 2
        for i in range(len(points) - 1):
            p1 = points[i]
            p2 = points[i + 1]
            if i == 0:
                c0 = p1
            else:
                p0 = points[i - 1]
                c0 = (p1[0] + (p2[0] - p0[0]) / 6.0, p1[1] + (p2[1] - p0[1]) / 6.0)
            if i == last:
                c1 = p2
            else:
                p3 = points[i + 2]
                c1 = (p2[0] + (p1[0] - p3[0]) / 6.0, p2[1] + (p1[1] - p3[1]) / 6.0)
            beziers.extend(_quadratics_from_cubic(p1, c0, c1, p2))
        return cls.from_beziers(beziers, width=width, color=color)

    @classmethod
    def circle(
        cls,
        center: Point = ORIGIN,
        radius: float = 50.0,
        width: float = DEFAULT_LINE_WIDTH,
        color: Color = DEFAULT_COLOR,
    ) -> "Line":
        count = 8
        theta = math.pi / count
        first = (center[0], center[1] + radius)
        r = radius / math.cos(theta)
        points = [first]
        for i in range(count):
            a = math.pi / 2 + theta + 2.0 * math.pi * i / count
            points.append((center[0] + r * math.cos(a), center[1] + r * math.sin(a)))
        points.append(first)
        return cls.from_points(points, width=width, color=color)

    @classmethod
    def from_rect(
        cls,
        rect: Rect,
        width: float = DEFAULT_LINE_WIDTH,
        color: Color = DEFAULT_COLOR,
    ) -> "Line":
        tl = (rect.min_x, rect.max_y)
        bl = (rect.min_x, rect.min_y)
        br = (rect.max_x, rect.min_y)
        tr = (rect.max_x, rect.max_y)
        return cls.from_points([tl, tl, bl, bl, br, br, tr, tr], width=width, color=color)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "controls": [[c.point[0], c.point[1], c.weight, c.pressure] for c in self.controls],
            "width": self.width,
            "id": str(self.id),
            "inter_type": int(self.inter_type),
            "color": list(self.color),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Line":
        controls = []
        for values in data.get("controls", []):
            x, y = values[0], values[1]
            weight = values[2] if len(values) > 2 else NEUTRAL_WEIGHT
            pressure = values[3] if len(values) > 3 else DEFAULT_PRESSURE
            controls.append(Control((x, y), weight, pressure))
        raw_id = data.get("id")
        inter_type = data.get("inter_type", 0)
        if inter_type not in (t.value for t in InterType):
            inter_type = InterType.NONE
        return cls(
            tuple(controls),
            width=data.get("width", DEFAULT_LINE_WIDTH),
            id=uuid.UUID(raw_id) if raw_id else uuid.uuid4(),
            inter_type=InterType(inter_type),
            color=tuple(data.get("color", DEFAULT_COLOR)),
        )

    def with_controls(self, controls: Sequence[Control]) -> "Line":
        return replace(self, controls=tuple(controls))

    def with_width(self, width: float) -> "Line":
        return replace(self, width=width)

    # Basic accessors

    @property
    def count(self) -> int:
        return len(self.controls)

    @property
    def is_empty(self) -> bool:
        return not self.controls

    @property
    def first_point(self) -> Point:
        return self.controls[0].point

    @property
    def last_point(self) -> Point:
        return self.controls[-1].point

    @property
    def first_distance(self) -> float:
        return self.width / 2 * self.controls[0].pressure

    @property
    def last_distance(self) -> float:
        return self.width / 2 * self.controls[-1].pressure

    @property
    def max_bezier_index(self) -> int:
        return max(0, len(self.controls) - 3)

    @property
    def first_index_value(self) -> LineIndexValue:
        return LineIndexValue(0, 0.0)

    @property
    def last_index_value(self) -> LineIndexValue:
        return LineIndexValue(self.max_bezier_index, 1.0)

    @property
    def full_range(self) -> LineRange:
        return LineRange(self.first_index_value, self.last_index_value)

    def connecting_point(self, i: int) -> Point:
        c0 = self.controls[i]
        return point_lerp(c0.point, self.controls[i + 1].point, c0.weight)

    def connecting_pressure(self, i: int) -> float:
        c0 = self.controls[i]
        return lerp(c0.pressure, self.controls[i + 1].pressure, c0.weight)

    # Segment derivation

    def _check_index(self, i: int) -> None:
        if not self.controls or i < 0 or i > self.max_bezier_index:
            raise IndexError(f"segment index {i} out of range for {len(self.controls)} controls")

    def bezier(self, i: int) -> Bezier:
        self._check_index(i)
        cs = self.controls
        n = len(cs)
        if n == 1:
            return Bezier.point(cs[0].point)
        if n == 2:
            return Bezier.linear(cs[0].point, cs[1].point)
        if n == 3:
            return Bezier(cs[0].point, cs[1].point, cs[2].point)
        p0 = cs[0].point if i == 0 else self.connecting_point(i)
        p1 = cs[-1].point if i == n - 3 else self.connecting_point(i + 1)
        return Bezier(p0, cs[i + 1].point, p1)

    def pressure_interpolation(self, i: int) -> BezierInterpolation:
        self._check_index(i)
        cs = self.controls
        n = len(cs)
        if n < 3:
            return BezierInterpolation.linear(cs[0].pressure, cs[-1].pressure)
        if n == 3:
            return BezierInterpolation(cs[0].pressure, cs[1].pressure, cs[2].pressure)
        x0 = cs[0].pressure if i == 0 else self.connecting_pressure(i)
        x1 = cs[-1].pressure if i == n - 3 else self.connecting_pressure(i + 1)
        return BezierInterpolation(x0, cs[i + 1].pressure, x1)

    def beziers(self) -> Iterator[Bezier]:
        cs = self.controls
        n = len(cs)
        if n == 0:
            return
        if n <= 3:
            yield self.bezier(0)
            return
        old = cs[0].point
        for i in range(n - 3):
            connect = self.connecting_point(i + 1)
            yield Bezier(old, cs[i + 1].point, connect)
            old = connect
        yield Bezier(old, cs[-2].point, cs[-1].point)

    def pressure_interpolations(self) -> Iterator[BezierInterpolation]:
        cs = self.controls
        n = len(cs)
        if n == 0:
            return
        if n <= 3:
            yield self.pressure_interpolation(0)
            return
        old = cs[0].pressure
        for i in range(n - 3):
            connect = self.connecting_pressure(i + 1)
            yield BezierInterpolation(old, cs[i + 1].pressure, connect)
            old = connect
        yield BezierInterpolation(old, cs[-2].pressure, cs[-1].pressure)

    def position(self, liv: LineIndexValue) -> Point:
        return self.bezier(liv.index).position(liv.t)

    def pressure_at(self, liv: LineIndexValue) -> float:
        return self.pressure_interpolation(liv.index).position(liv.t)

    def width_at(self, liv: LineIndexValue) -> float:
        return self.width * self.pressure_at(liv)

    @property
    def bounds(self) -> Optional[Rect]:
        """Union of the segments' control hulls."""
        return union_rects(b.control_bounds for b in self.beziers())

    @property
    def is_empty_bounds(self) -> bool:
        """True when the line has no extent (fewer than two distinct points)."""
        if len(self.controls) < 2:
            return True
        fp = self.controls[0].point
        return all(c.point == fp for c in self.controls[1:])

    @property
    def centroid(self) -> Optional[Point]:
        if not self.controls:
            return None
        n = len(self.controls)
        return (
            sum(c.point[0] for c in self.controls) / n,
            sum(c.point[1] for c in self.controls) / n,
        )

    def main_points(self) -> List[Point]:
        """End points plus the midpoint of every segment."""
        if not self.controls:
            return []
        if len(self.controls) == 1:
            return [self.first_point]
        points = [self.first_point]
        if len(self.controls) > 2:
            points.extend(b.position(0.5) for b in self.beziers())
        points.append(self.last_point)
        return points

    @property
    def first_angle(self) -> float:
        cs = self.controls
        if len(cs) < 2:
            return 0.0
        if len(cs) >= 3 and cs[0].point == cs[1].point:
            return angle(cs[0].point, cs[2].point)
        return angle(cs[0].point, cs[1].point)

    @property
    def last_angle(self) -> float:
        cs = self.controls
        if len(cs) < 2:
            return 0.0
        if len(cs) >= 3 and cs[-2].point == cs[-1].point:
            if len(cs) >= 4 and cs[-3].point == cs[-1].point:
                return angle(cs[-4].point, cs[-1].point)
            return angle(cs[-3].point, cs[-1].point)
        return angle(cs[-2].point, cs[-1].point)

    def first_rounded_edge(self) -> Optional[Edge]:
        """Edge covering the round cap before the first point."""
        if len(self.controls) < 2:
            return None
        fc = self.controls[0]
        ep = moved_with(fc.point, self.width * fc.pressure, self.first_angle - math.pi)
        return Edge(ep, fc.point)

    def last_rounded_edge(self) -> Optional[Edge]:
        if len(self.controls) < 2:
            return None
        lc = self.controls[-1]
        ep = moved_with(lc.point, self.width * lc.pressure, self.last_angle)
        return Edge(lc.point, ep)

    def reversed(self) -> "Line":
        rcs = list(reversed(self.controls))
        if len(rcs) >= 4:
            for i in range(2, len(rcs) - 1):
                rcs[i - 1] = rcs[i - 1].with_weight(1.0 - rcs[i].weight)
        return self.with_controls(rcs)

    # Length & ranges

    def _check_range(self, r: LineRange) -> None:
        self._check_index(r.start_index)
        self._check_index(r.end_index)
        if not (0.0 <= r.start_t <= 1.0 and 0.0 <= r.end_t <= 1.0):
            raise ValueError(f"range parameters out of [0, 1]: {r}")
        if r.end < r.start:
            raise ValueError(f"inverted range: {r}")

    def length(self, r: Optional[LineRange] = None) -> float:
        if r is None:
            return sum(b.length() for b in self.beziers())
        self._check_range(r)
        if r.start_index == r.end_index:
            return self.bezier(r.start_index).clip(r.start_t, r.end_t).length()
        total = self.bezier(r.start_index).clip(r.start_t, 1.0).length()
        for i in range(r.start_index + 1, r.end_index):
            total += self.bezier(i).length()
        total += self.bezier(r.end_index).clip(0.0, r.end_t).length()
        return total

    def reversed_ranges(self, ranges: Sequence[LineRange]) -> List[LineRange]:
        """Gaps between sorted disjoint ``ranges`` over the full extent."""
        siv = self.first_index_value
        eiv = self.last_index_value
        if not ranges:
            return [LineRange(siv, eiv)]
        iv = siv
        gaps: List[LineRange] = []
        for r in ranges:
            if iv < r.start:
                gaps.append(LineRange(iv, r.start))
            iv = r.end
        if iv != eiv:
            gaps.append(LineRange(iv, eiv))
        return gaps

    def extension_range(self, r: LineRange, distance: float, tolerance: float = 0.1) -> LineRange:
        """Grows ``r`` by ``distance`` of arc length on both sides, stopping at the ends."""
        self._check_range(r)
        return LineRange(
            self._extended_start(r.start, distance, tolerance),
            self._extended_end(r.end, distance, tolerance),
        )

    def _extended_start(self, start: LineIndexValue, dist: float, tolerance: float) -> LineIndexValue:
        nd = 0.0
        end_t = start.t
        for i in range(start.index, -1, -1):
            b = self.bezier(i)
            l = nd + b.clip(0.0, end_t).length()
            if abs(l - dist) < tolerance:
                return LineIndexValue(i, 0.0)
            if l < dist:
                nd = l
                end_t = 1.0
                continue
            min_t, max_t = 0.0, end_t
            t = (min_t + max_t) / 2
            for _ in range(64):
                t = (min_t + max_t) / 2
                l = nd + b.clip(t, end_t).length()
                if abs(l - dist) <= tolerance or max_t - min_t <= 1e-6:
                    break
                if l < dist:
                    max_t = t
                else:
                    min_t = t
            return LineIndexValue(i, t)
        return self.first_index_value

    def _extended_end(self, end: LineIndexValue, dist: float, tolerance: float) -> LineIndexValue:
        nd = 0.0
        start_t = end.t
        for i in range(end.index, self.max_bezier_index + 1):
            b = self.bezier(i)
            l = nd + b.clip(start_t, 1.0).length()
            if abs(l - dist) < tolerance:
                return LineIndexValue(i, 1.0)
            if l < dist:
                nd = l
                start_t = 0.0
                continue
            min_t, max_t = start_t, 1.0
            t = (min_t + max_t) / 2
            for _ in range(64):
                t = (min_t + max_t) / 2
                l = nd + b.clip(start_t, t).length()
                if abs(l - dist) <= tolerance or max_t - min_t <= 1e-6:
                    break
                if l < dist:
                    min_t = t
                else:
                    max_t = t
            return LineIndexValue(i, t)
        return self.last_index_value

    def extended(self, length: float) -> "Line":
        """Adds straight pieces of ``length`` before the first and after the last point."""
        if len(self.controls) < 2:
            return self
        cs = list(self.controls)
        fp = moved_with(self.first_point, length, self.first_angle - math.pi)
        lp = moved_with(self.last_point, length, self.last_angle)
        cs.insert(0, Control(fp, NEUTRAL_WEIGHT, cs[0].pressure))
        cs[1] = cs[1].with_weight(0.0)
        cs.append(Control(lp, NEUTRAL_WEIGHT, cs[-1].pressure))
        cs[-3] = cs[-3].with_weight(1.0)
        return self.with_controls(cs)

    def sub_line(self, start: int, end: int) -> "Line":
        """Line made of the controls ``start`` through ``end`` inclusive."""
        if start < 0 or end >= len(self.controls) or start > end:
            raise IndexError(f"control slice [{start}, {end}] out of range")
        return self.with_controls(self.controls[start:end + 1])

    # Splitting

    def split_range(self, r: LineRange) -> "Line":
        """Sub-line covering ``r`` with the original shape."""
        if r.start == self.first_index_value and r.end == self.last_index_value:
            return self
        self._check_range(r)
        cs = self.controls
        si, st = r.start_index, r.start_t
        ei, et = r.end_index, r.end_t

        if si == ei:
            b = self.bezier(si).clip(st, et)
            pb = self.pressure_interpolation(si).clip(st, et)
            return self.with_controls(
                (
                    Control(b.p0, NEUTRAL_WEIGHT, pb.x0),
                    Control(b.cp, NEUTRAL_WEIGHT, pb.cx),
                    Control(b.p1, NEUTRAL_WEIGHT, pb.x1),
                )
            )

        if si + 1 == ei:
            p0 = self.bezier(si).position(st)
            p1 = point_lerp(cs[si + 1].point, self.connecting_point(si + 1), st)
            p2 = point_lerp(self.connecting_point(ei), cs[ei + 1].point, et)
            p3 = self.bezier(ei).position(et)
            pr0 = self.pressure_interpolation(si).position(st)
            pr1 = lerp(cs[si + 1].pressure, self.connecting_pressure(si + 1), st)
            pr2 = lerp(self.connecting_pressure(ei), cs[ei + 1].pressure, et)
            pr3 = self.pressure_interpolation(ei).position(et)
            w0 = cs[si + 1].weight
            w = _inverse_weight(w0 * st - w0, et * w0 - et - w0 + w0 * st)
            return self.with_controls(
                (
                    Control(p0, NEUTRAL_WEIGHT, pr0),
                    Control(p1, w, pr1),
                    Control(p2, NEUTRAL_WEIGHT, pr2),
                    Control(p3, NEUTRAL_WEIGHT, pr3),
                )
            )

        new = list(cs[si:ei + 3])
        if si == 0 and st == 0:
            new[0] = new[0].with_weight(NEUTRAL_WEIGHT)
        else:
            w0 = cs[si + 1].weight
            new[0] = Control(
                self.bezier(si).position(st),
                NEUTRAL_WEIGHT,
                self.pressure_interpolation(si).position(st),
            )
            new[1] = Control(
                point_lerp(cs[si + 1].point, self.connecting_point(si + 1), st),
                _inverse_weight(w0 - w0 * st, 1 - w0 * st),
                lerp(cs[si + 1].pressure, self.connecting_pressure(si + 1), st),
            )
        if ei == len(cs) - 3 and et == 1:
            new[-2] = new[-2].with_weight(NEUTRAL_WEIGHT)
            new[-1] = new[-1].with_weight(NEUTRAL_WEIGHT)
        else:
            w1 = cs[ei].weight
            new[-3] = new[-3].with_weight(_inverse_weight(w1, et - et * w1 + w1))
            new[-2] = Control(
                point_lerp(self.connecting_point(ei), cs[ei + 1].point, et),
                NEUTRAL_WEIGHT,
                lerp(self.connecting_pressure(ei), cs[ei + 1].pressure, et),
            )
            new[-1] = Control(
                self.bezier(ei).position(et),
                NEUTRAL_WEIGHT,
                self.pressure_interpolation(ei).position(et),
            )
        return self.with_controls(new)

    def split_at(self, fraction: float) -> Tuple["Line", "Line"]:
        """Splits at an arc-length ``fraction`` of the whole line."""
        cs = self.controls
        if len(cs) < 2:
            raise ValueError("cannot split a line with fewer than two controls")
        fraction = min(max(fraction, 0.0), 1.0)
        if len(cs) == 2:
            mid_control = Control.linear(cs[0], cs[1], fraction)
            return (
                self.with_controls((cs[0], mid_control)),
                self.with_controls((mid_control, cs[1])),
            )
        target = self.length() * fraction
        d = 0.0
        liv: Optional[LineIndexValue] = None
        for bi, b in enumerate(self.beziers()):
            nd = d + b.length()
            if nd >= target:
                t = b.t_with_length(target - d)
                liv = LineIndexValue(bi, 1.0 if t is None else t)
                break
            d = nd
        if liv is None:
            liv = self.last_index_value
        return (
            self.split_range(LineRange(self.first_index_value, liv)),
            self.split_range(LineRange(liv, self.last_index_value)),
        )

    def insert_point(self, t: float, at: int) -> "Line":
        """Inserts a control inside segment ``at`` without changing the shape."""
        cs = list(self.controls)
        n = len(cs)
        if n < 2:
            raise ValueError("cannot insert a control into a line with fewer than two controls")
        if n == 2:
            cs.insert(1, Control.linear(cs[0], cs[1], t))
            return self.with_controls(cs)
        self._check_index(at)
        if n == 3:
            c0, c1, c2 = cs
            cs[1] = Control(point_lerp(c0.point, c1.point, t), t, lerp(c0.pressure, c1.pressure, t))
            cs.insert(
                2,
                Control(point_lerp(c1.point, c2.point, t), NEUTRAL_WEIGHT, lerp(c1.pressure, c2.pressure, t)),
            )
        elif at == 0:
            c0, c1, c2 = cs[0], cs[1], cs[2]
            cs[1] = Control(point_lerp(c0.point, c1.point, t), t, lerp(c0.pressure, c1.pressure, t))
            cp = point_lerp(c1.point, c2.point, c1.weight)
            cpr = lerp(c1.pressure, c2.pressure, c1.weight)
            w = c1.weight
            cs.insert(
                2,
                Control(
                    point_lerp(c1.point, cp, t),
                    _inverse_weight(w - w * t, 1 - w * t),
                    lerp(c1.pressure, cpr, t),
                ),
            )
        elif at == n - 3:
            c0, c1, c2 = cs[-3], cs[-2], cs[-1]
            cp = point_lerp(c0.point, c1.point, c0.weight)
            cpr = lerp(c0.pressure, c1.pressure, c0.weight)
            w = c0.weight
            cs[-3] = c0.with_weight(_inverse_weight(w, t - t * w + w))
            cs[-2] = Control(point_lerp(cp, c1.point, t), t, lerp(cpr, c1.pressure, t))
            cs.insert(
                n - 1,
                Control(point_lerp(c1.point, c2.point, t), NEUTRAL_WEIGHT, lerp(c1.pressure, c2.pressure, t)),
            )
        else:
            c0, c1, c2 = cs[at], cs[at + 1], cs[at + 2]
            cp0 = point_lerp(c0.point, c1.point, c0.weight)
            cpr0 = lerp(c0.pressure, c1.pressure, c0.weight)
            cp1 = point_lerp(c1.point, c2.point, c1.weight)
            cpr1 = lerp(c1.pressure, c2.pressure, c1.weight)
            w0 = c0.weight
            w1 = c1.weight
            cs[at] = c0.with_weight(_inverse_weight(w0, t - t * w0 + w0))
            cs[at + 1] = Control(point_lerp(cp0, c1.point, t), t, lerp(cpr0, c1.pressure, t))
            cs.insert(
                at + 2,
                Control(
                    point_lerp(c1.point, cp1, t),
                    _inverse_weight(w1 - w1 * t, 1 - w1 * t),
                    lerp(c1.pressure, cpr1, t),
                ),
            )
        return self.with_controls(cs)

    def with_count(self, count: int) -> "Line":
        """Grows the line to ``count`` controls, keeping its shape."""
        cs = self.controls
        n = len(cs)
        if count == n:
            return self
        if count < n:
            raise ValueError(f"cannot reduce {n} controls to {count}")
        if n == 0:
            raise ValueError("cannot resample an empty line")
        if n == 1:
            return self.with_controls([cs[0]] * count)
        if n == 2:
            edge = Edge(cs[0].point, cs[1].point)
            controls = []
            for i in range(count):
                t = i / (count - 1)
                controls.append(
                    Control(edge.position(t), NEUTRAL_WEIGHT, lerp(cs[0].pressure, cs[1].pressure, t))
                )
            return self.with_controls(controls)

        line = self
        chords = sorted(
            (cs[i].distance(cs[i + 1]) + cs[i + 1].distance(cs[i + 2]), i) for i in range(n - 2)
        )
        for _ in range(count - n):
            d, i = chords.pop()
            line = line.insert_point(0.5, i)
            chords = [(cd, j + 1 if j > i else j) for cd, j in chords]
            insort(chords, (d / 2, i))
            insort(chords, (d / 2, i + 1))
        return line


def _quadratics_from_cubic(p0: Point, c0: Point, c1: Point, p1: Point) -> Tuple[Bezier, Bezier]:
    """Approximates a cubic Bezier by two quadratics split at its midpoint."""
    m01 = mid(p0, c0)
    m12 = mid(c0, c1)
    m23 = mid(c1, p1)
    a = mid(m01, m12)
    b = mid(m12, m23)
    m = mid(a, b)
    halves = ((p0, m01, a, m), (m, b, m23, p1))
    result = []
    for q0, q1, q2, q3 in halves:
        cp = (
            (3.0 * (q1[0] + q2[0]) - q0[0] - q3[0]) / 4.0,
            (3.0 * (q1[1] + q2[1]) - q0[1] - q3[1]) / 4.0,
        )
        result.append(Bezier(q0, cp, q3))
    return result[0], result[1]


__all__ = [
    "Color",
    "Control",
    "DEFAULT_COLOR",
    "InterType",
    "Line",
    "LineIndexValue",
    "LineRange",
    "union_ranges",
]
