import numpy as np
import pytest

from ZULIMrpePy.exceptions import InsufficientData
from ZULIMrpePy.grid import Grid, build_grid
from ZULIMrpePy.uncertainty import DENSITY_RADIUS, estimate_uncertainty


@pytest.fixture
def cluster(make_points):
    """Five samples packed within 0.01 of the origin."""
    coords = [(0.0, 0.0), (0.0, 0.01), (0.01, 0.0), (0.01, 0.01), (0.005, 0.005)]
    return make_points(coords, [1.0, 2.0, 3.0, 4.0, 5.0])


def test_uncertainty_extremes(cluster):
    g = Grid(lat=np.array([0.0, 1.0]), lng=np.array([0.0, 1.0]), shape=(1, 2), resolution=1.0)
    u = estimate_uncertainty(cluster, g)
    # on a sample with 5 neighbours: nothing uncertain
    assert u[0] == pytest.approx(0.0)
    # farthest node, no neighbours
    assert u[1] == pytest.approx(1.0)


def test_uncertainty_in_unit_interval(ten_points):
    u = estimate_uncertainty(ten_points, build_grid(ten_points, 0.005))
    assert np.all(u >= 0.0) and np.all(u <= 1.0)


def test_uncertainty_zero_max_distance(make_points):
    """Every node on a sample: the distance term is 0, not NaN."""
    pts = make_points([(0.0, 0.0)], [1.0])
    g = Grid(lat=np.array([0.0]), lng=np.array([0.0]), shape=(1, 1), resolution=1.0)
    u = estimate_uncertainty(pts, g)
    assert u[0] == pytest.approx(0.4 * (1.0 - 1.0 / 5.0))


def test_uncertainty_requires_samples():
    g = Grid(lat=np.array([0.0]), lng=np.array([0.0]), shape=(1, 1), resolution=1.0)
    with pytest.raises(InsufficientData):
        estimate_uncertainty([], g)


def test_density_radius_is_exclusive(make_points):
    """A sample exactly DENSITY_RADIUS away does not count as a neighbour."""
    pts = make_points([(0.0, 0.0), (0.0, DENSITY_RADIUS), (3.0, 3.0)], [1.0, 2.0, 3.0])
    g = Grid(lat=np.array([0.0]), lng=np.array([0.0]), shape=(1, 1), resolution=1.0)
    u = estimate_uncertainty(pts, g)
    # on a sample (distance term 0), one neighbour: 0.4 * (1 - 1/5)
    assert u[0] == pytest.approx(0.32)
