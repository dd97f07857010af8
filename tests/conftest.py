import pytest

from ZULIMrpePy.data import SamplePoint


def _make_points(coords, values, target="z", **extra):
    pts = []
    for i, ((lat, lng), v) in enumerate(zip(coords, values)):
        props = {target: v}
        for name, col in extra.items():
            props[name] = col[i]
        pts.append(SamplePoint(lat=lat, lng=lng, properties=props))
    return pts


@pytest.fixture
def make_points():
    """Factory: SamplePoint list from ``(lat, lng)`` pairs and target values."""
    return _make_points


@pytest.fixture
def square_with_center():
    """Unit square corners plus its center; corners alternate 0/10, center 5."""
    coords = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0), (0.5, 0.5)]
    return _make_points(coords, [0.0, 10.0, 0.0, 10.0, 5.0])


@pytest.fixture
def ten_points():
    """10 scattered points with distinct locations and values."""
    coords = [(0.013 * i + 0.002 * (i % 3), 0.021 * (i % 4) + 0.001 * i) for i in range(10)]
    values = [3.0, 7.5, 1.2, 9.9, 4.4, 6.1, 2.8, 8.3, 5.5, 0.7]
    return _make_points(coords, values)
