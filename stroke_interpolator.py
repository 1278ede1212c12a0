from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

import stroke_interpolation as interpolation
from stroke_geometry import Bezier, Edge
from stroke_interpolation import Interpolation, Key, Monospline, point_with
from stroke_line import Color, Control, InterType, Line, LineIndexValue, LineRange
from stroke_math import DEFAULT_TUNING, EngineTuning

_LOGGER = logging.getLogger(__name__)

Scalar = Callable[..., float]


def _feature_split(line: Line, tuning: EngineTuning) -> Optional[Tuple[Line, Line, float]]:
    """Splits ``line`` at its corner, if it has one.

    The control farthest from the end-point chord is taken as the apex of a
    quadratic arc through both ends. When some control strays from that arc
    by more than ``feature_deviation_ratio`` of the line length, the line is
    cut in the middle of the apex control's segment.
    """
    cs = line.controls
    n = len(cs)
    if n < 3:
        return None
    edge = Edge(line.first_point, line.last_point)
    max_d = 0.0
    min_i = 1
    for i in range(1, n - 1):
        d = edge.distance_squared_from(cs[i].point)
        if d > max_d:
            max_d = d
            min_i = i
    min_p = cs[min_i].point
    near = edge.nearest_point(min_p)
    arc = Bezier(edge.p0, (2.0 * min_p[0] - near[0], 2.0 * min_p[1] - near[1]), edge.p1)
    deviation = max(arc.min_distance_squared(cs[i].point) for i in range(1, n - 1))
    length = line.length()
    if math.sqrt(deviation) <= length * tuning.feature_deviation_ratio:
        return None
    liv = LineIndexValue(min_i - 1, 0.5)
    r0 = LineRange(line.first_index_value, liv)
    r1 = LineRange(liv, line.last_index_value)
    t = line.length(r0) / length if length > 0 else 0.5
    return line.split_range(r0), line.split_range(r1), t


def _split_groups(lines: Sequence[Line], depth: int, tuning: EngineTuning) -> List[List[Line]]:
    """Cuts all keyframe lines at matching features, recursively."""
    if depth >= tuning.max_feature_depth:
        _LOGGER.debug("feature split depth %d reached, interpolating as is", depth)
        return [list(lines)]
    features = [_feature_split(line, tuning) for line in lines]
    keys = [Key(f[2], float(i)) for i, f in enumerate(features) if f is not None]
    if not keys:
        return [list(lines)]
    _LOGGER.debug("feature split at depth %d on %d of %d line(s)", depth, len(keys), len(lines))
    ip = Interpolation(keys)
    before: List[Line] = []
    after: List[Line] = []
    for i, (line, feature) in enumerate(zip(lines, features)):
        if feature is not None:
            l0, l1 = feature[0], feature[1]
        elif line.count < 2:
            l0 = l1 = line
        else:
            t = ip.mono_value(float(i))
            l0, l1 = line.split_at(0.5 if t is None else t)
        before.append(l0)
        after.append(l1)
    return _split_groups(before, depth + 1, tuning) + _split_groups(after, depth + 1, tuning)


def _blend_color(colors: Sequence[Color], scalar: Scalar) -> Color:
    if all(c == colors[0] for c in colors[1:]):
        return colors[0]
    r, g, b, a = (scalar(*[c[k] for c in colors]) for k in range(4))
    return (r, g, b, a)


def _blend(fs: Sequence[Line], scalar: Scalar, primary: int) -> Line:
    count = max(f.count for f in fs)
    ls = [f.with_count(count) for f in fs]
    controls = []
    for i in range(count):
        cs = [l.controls[i] for l in ls]
        controls.append(
            Control(
                point_with(scalar, [c.point for c in cs]),
                scalar(*[c.weight for c in cs]),
                scalar(*[c.pressure for c in cs]),
            )
        )
    return Line(
        tuple(controls),
        width=scalar(*[f.width for f in fs]),
        id=fs[primary].id,
        inter_type=InterType.INTERPOLATED,
        color=_blend_color([f.color for f in fs], scalar),
    )


def _interpolate(lines: Sequence[Line], scalar: Scalar, primary: int, tuning: EngineTuning) -> Line:
    for line in lines:
        if line.is_empty:
            raise ValueError("cannot interpolate an empty line")
    groups = _split_groups(lines, 0, tuning)
    return join_lines([_blend(g, scalar, primary) for g in groups])


def join_lines(lines: Sequence[Line]) -> Line:
    """Concatenates lines that share their end points into one line.

    Each weld point is dropped and the weight of the control before it is set
    so the connecting point lands on the weld.
    """
    if not lines:
        raise ValueError("nothing to join")
    if len(lines) == 1:
        return lines[0]
    cs: List[Control] = [lines[0].controls[0]]
    for line in lines:
        if line.count <= 1:
            continue
        if len(cs) >= 2:
            weld = cs[-1].point
            w = Edge(cs[-2].point, line.controls[1].point).nearest_t(weld)
            cs[-2] = cs[-2].with_weight(w)
            cs.pop()
        cs.extend(line.controls[1:])
    return lines[0].with_controls(cs)


def linear(f0: Line, f1: Line, t: float, tuning: EngineTuning = DEFAULT_TUNING) -> Line:
    return _interpolate([f0, f1], lambda a, b: interpolation.linear(a, b, t), 0, tuning)


def first_spline(f1: Line, f2: Line, f3: Line, t: float, tuning: EngineTuning = DEFAULT_TUNING) -> Line:
    return _interpolate(
        [f1, f2, f3],
        lambda a, b, c: interpolation.first_spline(a, b, c, t),
        0,
        tuning,
    )


def spline(f0: Line, f1: Line, f2: Line, f3: Line, t: float, tuning: EngineTuning = DEFAULT_TUNING) -> Line:
    return _interpolate(
        [f0, f1, f2, f3],
        lambda a, b, c, d: interpolation.spline(a, b, c, d, t),
        1,
        tuning,
    )


def last_spline(f0: Line, f1: Line, f2: Line, t: float, tuning: EngineTuning = DEFAULT_TUNING) -> Line:
    return _interpolate(
        [f0, f1, f2],
        lambda a, b, c: interpolation.last_spline(a, b, c, t),
        1,
        tuning,
    )


def first_monospline(
    f1: Line, f2: Line, f3: Line, ms: Monospline, tuning: EngineTuning = DEFAULT_TUNING
) -> Line:
    return _interpolate(
        [f1, f2, f3],
        lambda a, b, c: interpolation.first_monospline(a, b, c, ms),
        0,
        tuning,
    )


def monospline(
    f0: Line, f1: Line, f2: Line, f3: Line, ms: Monospline, tuning: EngineTuning = DEFAULT_TUNING
) -> Line:
    return _interpolate(
        [f0, f1, f2, f3],
        lambda a, b, c, d: interpolation.monospline(a, b, c, d, ms),
        1,
        tuning,
    )


def last_monospline(
    f0: Line, f1: Line, f2: Line, ms: Monospline, tuning: EngineTuning = DEFAULT_TUNING
) -> Line:
    return _interpolate(
        [f0, f1, f2],
        lambda a, b, c: interpolation.last_monospline(a, b, c, ms),
        1,
        tuning,
    )


__all__ = [
    "first_monospline",
    "first_spline",
    "join_lines",
    "last_monospline",
    "last_spline",
    "linear",
    "monospline",
    "spline",
]
