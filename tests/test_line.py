import math
import uuid

import pytest

from stroke_geometry import Rect, distance
from stroke_line import Control, InterType, Line, LineIndexValue, LineRange
from stroke_query import min_distance_squared
from stroke_sampler import path_points


def _wavy_line() -> Line:
    return Line(
        (
            Control((0.0, 0.0), 0.5, 0.2),
            Control((2.0, 3.0), 0.3, 0.6),
            Control((5.0, 4.0), 0.7, 1.0),
            Control((7.0, 1.0), 0.4, 0.8),
            Control((9.0, 2.0), 0.6, 0.5),
            Control((12.0, 0.0), 0.5, 0.3),
        ),
        width=2.0,
    )


def _assert_lies_on(line: Line, other: Line, samples: int = 6) -> None:
    for b in other.beziers():
        for k in range(samples + 1):
            p = b.position(k / samples)
            assert min_distance_squared(line, p) < 1e-9


def test_segment_derivation_small_counts():
    assert list(Line().beziers()) == []
    one = Line.from_points([(1.0, 2.0)])
    assert one.bezier(0).p0 == one.bezier(0).p1 == (1.0, 2.0)
    two = Line.from_points([(0.0, 0.0), (4.0, 2.0)])
    assert two.bezier(0).cp == (2.0, 1.0)
    three = Line.from_points([(0.0, 0.0), (1.0, 2.0), (3.0, 0.0)])
    b = three.bezier(0)
    assert (b.p0, b.cp, b.p1) == ((0.0, 0.0), (1.0, 2.0), (3.0, 0.0))


def test_segments_are_continuous():
    line = _wavy_line()
    beziers = list(line.beziers())
    assert len(beziers) == line.count - 2
    for i in range(len(beziers) - 1):
        assert beziers[i].p1 == beziers[i + 1].p0
    for i, b in enumerate(beziers):
        assert b == line.bezier(i)
    assert beziers[0].p0 == line.first_point
    assert beziers[-1].p1 == line.last_point
    assert beziers[0].p1 == line.connecting_point(1)


def test_segment_index_out_of_range():
    line = _wavy_line()
    with pytest.raises(IndexError):
        line.bezier(4)
    with pytest.raises(IndexError):
        line.pressure_interpolation(-1)
    with pytest.raises(IndexError):
        Line().bezier(0)


def test_control_sanitisation():
    c = Control((math.nan, math.inf), weight=2.0, pressure=math.nan)
    assert c.point == (0.0, 0.0)
    assert c.weight == 1.0
    assert c.pressure == 1.0
    c = Control((1.0, 1.0), weight=math.nan, pressure=-3.0)
    assert c.weight == 0.5
    assert c.pressure == 0.0


def test_line_width_sanitisation():
    assert Line(width=-5.0).width == 0.0
    assert Line(width=2e6).width == 1_000_000.0
    assert Line(width=math.nan).width == 1.0
    assert Line().color == (0.0, 0.0, 0.0, 1.0)


def test_dict_round_trip():
    line = _wavy_line()
    data = line.to_dict()
    assert data["controls"][1] == [2.0, 3.0, 0.3, 0.6]
    assert Line.from_dict(data) == line

    data["controls"][1][2] = 3.0
    data["inter_type"] = 9
    loaded = Line.from_dict(data)
    assert loaded.controls[1].weight == 1.0
    assert loaded.inter_type == InterType.NONE


def test_bounds_cover_controls():
    line = _wavy_line()
    assert line.bounds == Rect(0.0, 0.0, 12.0, 4.0)
    assert Line().bounds is None


def test_full_range_split_is_identity():
    line = Line.from_points([(0.0, 0.0), (1.0, 2.0), (3.0, 2.0), (4.0, 0.0)], width=2.0)
    r = LineRange.make(0, 0.0, 1, 1.0)
    assert line.split_range(r) is line
    assert path_points(line.split_range(r)) == path_points(line)


@pytest.mark.parametrize(
    "r",
    [
        LineRange.make(1, 0.2, 1, 0.9),
        LineRange.make(1, 0.4, 2, 0.3),
        LineRange.make(0, 0.3, 2, 0.6),
        LineRange.make(0, 0.0, 2, 0.5),
        LineRange.make(1, 0.5, 3, 1.0),
        LineRange.make(0, 0.25, 3, 0.75),
    ],
)
def test_split_range_keeps_shape(r):
    line = _wavy_line()
    part = line.split_range(r)
    assert math.isclose(part.length(), line.length(r), abs_tol=1e-7)
    start = line.position(r.start)
    end = line.position(r.end)
    assert math.isclose(distance(part.first_point, start), 0.0, abs_tol=1e-9)
    assert math.isclose(distance(part.last_point, end), 0.0, abs_tol=1e-9)
    assert math.isclose(part.controls[0].pressure, line.pressure_at(r.start), abs_tol=1e-9)
    assert math.isclose(part.controls[-1].pressure, line.pressure_at(r.end), abs_tol=1e-9)
    assert part.id == line.id
    _assert_lies_on(line, part)


def test_split_range_rejects_bad_ranges():
    line = _wavy_line()
    with pytest.raises(IndexError):
        line.split_range(LineRange.make(0, 0.0, 5, 0.5))
    with pytest.raises(ValueError):
        line.split_range(LineRange.make(2, 0.5, 1, 0.5))


def test_split_at_halves_length():
    line = _wavy_line()
    l0, l1 = line.split_at(0.5)
    assert math.isclose(l0.length(), line.length() / 2, abs_tol=1e-6)
    assert math.isclose(l1.length(), line.length() / 2, abs_tol=1e-6)
    assert math.isclose(distance(l0.last_point, l1.first_point), 0.0, abs_tol=1e-12)

    two = Line.from_points([(0.0, 0.0), (4.0, 0.0)])
    a, b = two.split_at(0.25)
    assert a.last_point == (1.0, 0.0)
    assert b.first_point == (1.0, 0.0)


@pytest.mark.parametrize("at", [0, 1, 2, 3])
def test_insert_point_keeps_shape(at):
    line = _wavy_line()
    inserted = line.insert_point(0.3, at)
    assert inserted.count == line.count + 1
    assert math.isclose(inserted.length(), line.length(), abs_tol=1e-7)
    assert inserted.first_point == line.first_point
    assert inserted.last_point == line.last_point
    _assert_lies_on(line, inserted)


def test_insert_point_small_lines():
    two = Line.from_points([(0.0, 0.0), (4.0, 0.0)])
    assert two.insert_point(0.5, 0).controls[1].point == (2.0, 0.0)

    three = Line.from_points([(0.0, 0.0), (1.0, 2.0), (3.0, 0.0)])
    inserted = three.insert_point(0.4, 0)
    assert inserted.count == 4
    assert math.isclose(inserted.length(), three.length(), abs_tol=1e-9)
    _assert_lies_on(three, inserted)

    with pytest.raises(ValueError):
        Line.from_points([(0.0, 0.0)]).insert_point(0.5, 0)
    with pytest.raises(IndexError):
        _wavy_line().insert_point(0.5, 4)


def test_with_count_on_quadratic():
    line = Line.from_points([(0.0, 0.0), (1.0, 2.0), (3.0, 0.0)])
    grown = line.with_count(5)
    assert grown.count == 5
    assert grown.first_point == line.first_point
    assert grown.last_point == line.last_point
    assert abs(grown.length() - line.length()) < 1e-6


def test_with_count_keeps_length():
    line = _wavy_line()
    grown = line.with_count(11)
    assert grown.count == 11
    assert math.isclose(grown.length(), line.length(), abs_tol=1e-6)
    _assert_lies_on(line, grown)
    assert line.with_count(line.count) is line
    with pytest.raises(ValueError):
        line.with_count(3)


def test_with_count_degenerate_lines():
    one = Line.from_points([(1.0, 1.0)]).with_count(3)
    assert [c.point for c in one.controls] == [(1.0, 1.0)] * 3

    two = Line((Control((0.0, 0.0), pressure=0.0), Control((4.0, 0.0), pressure=1.0)))
    grown = two.with_count(5)
    assert [c.point for c in grown.controls] == [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0), (4.0, 0.0)]
    assert math.isclose(grown.controls[2].pressure, 0.5)


def test_reversed_keeps_shape():
    line = _wavy_line()
    rev = line.reversed()
    assert rev.first_point == line.last_point
    assert rev.last_point == line.first_point
    assert math.isclose(rev.length(), line.length(), abs_tol=1e-7)
    _assert_lies_on(line, rev)


def test_from_beziers_round_trip():
    line = _wavy_line()
    rebuilt = Line.from_beziers(list(line.beziers()))
    for b0, b1 in zip(line.beziers(), rebuilt.beziers()):
        for p, q in ((b0.p0, b1.p0), (b0.cp, b1.cp), (b0.p1, b1.p1)):
            assert math.isclose(distance(p, q), 0.0, abs_tol=1e-9)


def test_from_spline_points_ends():
    line = Line.from_spline_points([(0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (3.0, 1.0)])
    assert line.count == 8
    assert line.first_point == (0.0, 0.0)
    assert line.last_point == (3.0, 1.0)


def test_circle_stays_near_radius():
    circle = Line.circle((0.0, 0.0), 10.0)
    assert circle.count == 10
    assert math.isclose(circle.first_point[0], 0.0, abs_tol=1e-12)
    assert math.isclose(circle.first_point[1], 10.0)
    for p in circle.main_points():
        assert abs(distance(p, (0.0, 0.0)) - 10.0) < 0.1


def test_from_rect():
    line = Line.from_rect(Rect(0.0, 0.0, 4.0, 2.0))
    assert line.count == 8
    assert line.bounds == Rect(0.0, 0.0, 4.0, 2.0)


def test_extension_range_grows_both_sides():
    line = Line.from_points([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0)])
    r = LineRange.make(0, 0.5, 1, 0.5)
    grown = line.extension_range(r, 0.2, tolerance=1e-4)
    assert math.isclose(line.length(grown), line.length(r) + 0.4, abs_tol=1e-3)
    assert line.extension_range(r, 100.0) == line.full_range


def test_extended_adds_straight_ends():
    line = Line.from_points([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)])
    ext = line.extended(1.0)
    assert ext.count == 5
    assert math.isclose(ext.first_point[0], -1.0)
    assert math.isclose(ext.last_point[0], 3.0)
    assert math.isclose(ext.length(), 4.0, abs_tol=1e-9)


def test_accessors():
    line = Line.from_points([(0.0, 0.0), (2.0, 2.0), (4.0, 0.0)], width=4.0)
    assert line.main_points() == [(0.0, 0.0), (2.0, 1.0), (4.0, 0.0)]
    assert line.centroid == (2.0, 2.0 / 3.0)
    assert not line.is_empty_bounds
    assert Line.from_points([(1.0, 1.0), (1.0, 1.0)]).is_empty_bounds
    assert line.first_distance == 2.0
    assert line.width_at(LineIndexValue(0, 0.5)) == 4.0
    assert line.sub_line(1, 2).controls == line.controls[1:]
    assert math.isclose(line.first_angle, math.pi / 4)
    edge = line.first_rounded_edge()
    assert edge.p1 == (0.0, 0.0)
    assert math.isclose(distance(edge.p0, edge.p1), 4.0)
    assert isinstance(line.id, uuid.UUID)
