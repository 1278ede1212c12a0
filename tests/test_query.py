import math

from stroke_geometry import Edge, Rect
from stroke_line import Control, Line
import stroke_query


def test_nearest_on_straight_line():
    line = Line.from_points([(0.0, 0.0), (10.0, 0.0)])
    n = stroke_query.nearest(line, (3.0, 2.0))
    assert n.index == 0
    assert math.isclose(n.t, 0.3, abs_tol=1e-9)
    assert math.isclose(n.point[0], 3.0, abs_tol=1e-9)
    assert math.isclose(n.distance_squared, 4.0, abs_tol=1e-9)
    assert stroke_query.nearest_index_value(line, (3.0, 2.0)) == n.index_value


def test_nearest_picks_the_closest_segment():
    line = Line.from_points([(0.0, 0.0), (2.0, 0.0), (4.0, 0.0), (6.0, 0.0)])
    n = stroke_query.nearest(line, (5.0, 1.0))
    assert n.index == 1
    assert math.isclose(n.point[0], 5.0, abs_tol=1e-9)
    assert math.isclose(n.distance_squared, 1.0, abs_tol=1e-9)


def test_nearest_with_min_distance():
    line = Line.from_points([(0.0, 0.0), (2.0, 0.0), (4.0, 0.0), (6.0, 0.0)])
    n = stroke_query.nearest_with_min_distance(line, (1.0, 1.0), 1.0)
    assert n is not None
    assert n.index == 1
    assert math.isclose(n.t, 0.0, abs_tol=1e-9)
    assert math.isclose(n.point[0], 3.0, abs_tol=1e-9)
    assert stroke_query.nearest_with_min_distance(line, (1.0, 1.0), 10.0) is None

    r = stroke_query.nearest_with_min_distance(line, (5.0, 1.0), 1.0, is_reversed=True)
    assert r is not None
    assert r.index == 0
    assert math.isclose(r.t, 1.0, abs_tol=1e-9)


def test_distance_squared_bounds():
    line = Line.from_points([(0.0, 0.0), (10.0, 0.0)])
    assert math.isclose(stroke_query.min_distance_squared(line, (5.0, 3.0)), 9.0)
    assert math.isclose(stroke_query.max_distance_squared(line, (0.0, 0.0)), 100.0)
    assert stroke_query.min_distance_squared(Line.from_points([(1.0, 1.0)]), (4.0, 5.0)) == 25.0


def test_contains_pressure():
    two = Line.from_points([(0.0, 0.0), (10.0, 0.0)], width=2.0)
    assert stroke_query.contains_pressure(two, (3.0, 0.5))
    assert not stroke_query.contains_pressure(two, (3.0, 1.5))

    three = Line(
        (Control((0.0, 0.0), pressure=0.5), Control((5.0, 0.0), pressure=0.5), Control((10.0, 0.0), pressure=0.5)),
        width=4.0,
    )
    assert stroke_query.contains_pressure(three, (5.0, 0.9))
    assert not stroke_query.contains_pressure(three, (5.0, 1.1))

    dot = Line.from_points([(0.0, 0.0)], width=2.0)
    assert stroke_query.contains_pressure(dot, (0.5, 0.0))
    assert not stroke_query.contains_pressure(Line(), (0.0, 0.0))


def test_intersects():
    line = Line.from_points([(0.0, 0.0), (10.0, 10.0)])
    assert stroke_query.intersects_edge(line, Edge((0.0, 10.0), (10.0, 0.0)))
    assert not stroke_query.intersects_edge(line, Edge((20.0, 0.0), (30.0, 0.0)))
    assert stroke_query.intersects_line(line, Line.from_points([(0.0, 10.0), (10.0, 0.0)]))
    assert not stroke_query.intersects_line(line, Line.from_points([(1.0, 0.0), (11.0, 10.0)]))
    assert stroke_query.intersects_rect(line, Rect(4.0, 3.0, 6.0, 7.0))
    assert stroke_query.intersects_rect(line, Rect(-1.0, -1.0, 1.0, 1.0))
    assert not stroke_query.intersects_rect(line, Rect(6.0, 0.0, 9.0, 3.0))


def test_index_values_pairs_positions():
    line = Line.from_points([(0.0, 0.0), (10.0, 10.0)])
    cutter = Line.from_points([(0.0, 10.0), (10.0, 0.0)])
    values = stroke_query.index_values(line, cutter)
    assert len(values) == 1
    l0, l1 = values[0]
    assert math.isclose(l0.t, 0.5, abs_tol=1e-6)
    assert math.isclose(l1.t, 0.5, abs_tol=1e-6)


def test_lines_bounds():
    a = Line.from_points([(0.0, 0.0), (1.0, 1.0)])
    b = Line.from_points([(3.0, -1.0), (4.0, 0.0)])
    assert stroke_query.lines_bounds([a, b]) == Rect(0.0, -1.0, 4.0, 1.0)
    assert stroke_query.bounds(Line()) is None
