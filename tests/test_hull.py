import numpy as np
import pytest

from ZULIMrpePy.hull import buffer_hull, convex_hull, points_in_polygon


def _signed_area(ring):
    a = 0.0
    for p, q in zip(ring, ring[1:] + ring[:1]):
        a += p.lng * q.lat - q.lng * p.lat
    return a / 2.0


def test_square_with_interior_point(square_with_center):
    hull = convex_hull(square_with_center)
    assert [(p.lat, p.lng) for p in hull] == [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]
    # counter-clockwise in (lng, lat)
    assert _signed_area(hull) == pytest.approx(1.0)


def test_hull_is_order_independent(square_with_center):
    a = convex_hull(square_with_center)
    b = convex_hull(list(reversed(square_with_center)))
    assert [(p.lat, p.lng) for p in a] == [(p.lat, p.lng) for p in b]


def test_fewer_than_three_points_returned_unchanged(make_points):
    pts = make_points([(3.0, 1.0), (0.0, 0.0)], [1.0, 2.0])
    assert convex_hull(pts) == pts


def test_collinear_points_collapse(make_points):
    pts = make_points([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)], [1.0, 1.0, 1.0])
    assert len(convex_hull(pts)) == 2


def test_buffer_pushes_vertices_outward(square_with_center):
    ring = buffer_hull(convex_hull(square_with_center), 0.1)
    coords = [(p.lat, p.lng) for p in ring]
    expected = [(-0.1, -0.1), (-0.1, 1.1), (1.1, 1.1), (1.1, -0.1)]
    for got, want in zip(coords, expected):
        assert got == pytest.approx(want)
    # properties survive the move
    assert ring[1].properties == {"z": 10.0}


def test_buffer_of_empty_hull():
    assert buffer_hull([], 0.5) == []


def test_points_in_polygon(square_with_center):
    ring = convex_hull(square_with_center)
    lat = np.array([0.5, 0.9, 2.0, -0.5, 0.5])
    lng = np.array([0.5, 0.1, 0.5, 0.5, 1.5])
    inside = points_in_polygon(lat, lng, ring)
    assert inside.tolist() == [True, True, False, False, False]


def test_points_in_degenerate_ring_is_empty(make_points):
    ring = make_points([(0.0, 0.0), (1.0, 1.0)], [1.0, 1.0])
    inside = points_in_polygon(np.array([0.5, 0.2]), np.array([0.5, 0.8]), ring)
    assert not inside.any()
