import math

import pytest

from stroke_interpolation import Monospline
from stroke_line import Control, InterType, Line
import stroke_interpolator
from stroke_math import EngineTuning


def _arch(dx: float = 0.0, dy: float = 0.0, width: float = 1.0) -> Line:
    return Line.from_points([(0.0 + dx, 0.0 + dy), (1.0 + dx, 1.0 + dy), (2.0 + dx, 0.0 + dy)], width=width)


def _points(line: Line):
    return [c.point for c in line.controls]


def test_linear_returns_keys_at_the_ends():
    f0 = _arch()
    f1 = Line.from_points([(0.0, 1.0), (2.0, 3.0), (4.0, 1.0)])
    at0 = stroke_interpolator.linear(f0, f1, 0.0)
    at1 = stroke_interpolator.linear(f0, f1, 1.0)
    assert _points(at0) == _points(f0)
    assert _points(at1) == _points(f1)
    assert at0.id == f0.id
    assert at1.id == f0.id
    assert at0.inter_type == InterType.INTERPOLATED


def test_linear_midway():
    f0 = _arch(width=2.0)
    f1 = _arch(dy=2.0, width=4.0)
    mid = stroke_interpolator.linear(f0, f1, 0.5)
    assert _points(mid) == [(0.0, 1.0), (1.0, 2.0), (2.0, 1.0)]
    assert mid.width == 3.0


def test_color_blends_only_when_keys_differ():
    f0 = Line(_arch().controls, color=(1.0, 0.0, 0.0, 1.0))
    f1 = Line(_arch(dy=1.0).controls, color=(1.0, 0.0, 0.0, 1.0))
    assert stroke_interpolator.linear(f0, f1, 0.3).color == (1.0, 0.0, 0.0, 1.0)
    f2 = Line(_arch(dy=1.0).controls, color=(0.0, 0.0, 1.0, 1.0))
    color = stroke_interpolator.linear(f0, f2, 0.5).color
    assert color == (0.5, 0.0, 0.5, 1.0)


def test_counts_are_equalised():
    f0 = Line.from_points([(0.0, 0.0), (5.0, 0.0), (10.0, 0.0)])
    f1 = Line.from_points([(0.0, 2.0), (2.5, 2.0), (5.0, 2.0), (7.5, 2.0), (10.0, 2.0)])
    mid = stroke_interpolator.linear(f0, f1, 0.5)
    assert mid.count == 5
    assert math.isclose(mid.first_point[1], 1.0)
    assert math.isclose(mid.last_point[0], 10.0)


def test_spline_family_of_identical_keys_is_identity():
    f = _arch(dx=3.0)
    ms = Monospline.with_time(0.0, 1.0, 2.0, 3.0, 1.5)
    results = [
        (stroke_interpolator.spline(_arch(dx=3.0), f, _arch(dx=3.0), _arch(dx=3.0), 0.4), f),
        (stroke_interpolator.first_spline(f, _arch(dx=3.0), _arch(dx=3.0), 0.4), f),
        (stroke_interpolator.last_spline(_arch(dx=3.0), f, _arch(dx=3.0), 0.4), f),
        (stroke_interpolator.monospline(_arch(dx=3.0), f, _arch(dx=3.0), _arch(dx=3.0), ms), f),
        (stroke_interpolator.first_monospline(f, _arch(dx=3.0), _arch(dx=3.0), ms), f),
        (stroke_interpolator.last_monospline(_arch(dx=3.0), f, _arch(dx=3.0), ms), f),
    ]
    for result, primary in results:
        assert result.id == primary.id
        for p, q in zip(_points(result), _points(f)):
            assert math.isclose(p[0], q[0], abs_tol=1e-12)
            assert math.isclose(p[1], q[1], abs_tol=1e-12)


def test_cornered_line_survives_feature_splits():
    zigzag = Line.from_points([(0.0, 0.0), (10.0, 0.0), (0.0, 5.0), (10.0, 10.0), (0.0, 15.0)])
    result = stroke_interpolator.linear(zigzag, zigzag, 0.5)
    assert result.first_point == zigzag.first_point
    assert math.isclose(result.last_point[0], zigzag.last_point[0], abs_tol=1e-9)
    assert math.isclose(result.last_point[1], zigzag.last_point[1], abs_tol=1e-9)
    assert math.isclose(result.length(), zigzag.length(), rel_tol=1e-6)
    assert result.count >= zigzag.count


def test_depth_cap_disables_feature_splits():
    zigzag = Line.from_points([(0.0, 0.0), (10.0, 0.0), (0.0, 5.0), (10.0, 10.0), (0.0, 15.0)])
    result = stroke_interpolator.linear(zigzag, zigzag, 0.5, EngineTuning(max_feature_depth=0))
    assert _points(result) == _points(zigzag)


def test_join_lines_welds_shared_points():
    a = Line.from_points([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)])
    b = Line.from_points([(2.0, 0.0), (3.0, 0.0), (4.0, 0.0)])
    joined = stroke_interpolator.join_lines([a, b])
    assert _points(joined) == [(0.0, 0.0), (1.0, 0.0), (3.0, 0.0), (4.0, 0.0)]
    assert joined.controls[1].weight == 0.5
    assert math.isclose(joined.length(), 4.0)
    assert joined.id == a.id
    assert stroke_interpolator.join_lines([a]) is a
    with pytest.raises(ValueError):
        stroke_interpolator.join_lines([])


def test_empty_keys_are_rejected():
    with pytest.raises(ValueError):
        stroke_interpolator.linear(Line(), _arch(), 0.5)


def test_weights_and_pressures_are_interpolated():
    f0 = Line((Control((0.0, 0.0), 0.5, 0.2), Control((1.0, 1.0), 0.2, 0.4), Control((2.0, 0.0), 0.5, 0.6)))
    f1 = Line((Control((0.0, 0.0), 0.5, 0.6), Control((1.0, 1.0), 0.6, 0.8), Control((2.0, 0.0), 0.5, 1.0)))
    mid = stroke_interpolator.linear(f0, f1, 0.5)
    assert math.isclose(mid.controls[1].weight, 0.4)
    assert [round(c.pressure, 9) for c in mid.controls] == [0.4, 0.6, 0.8]
