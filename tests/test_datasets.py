import numpy as np
import pandas as pd
import pytest

from ZULIMrpePy.data import numeric_fields, require_min_samples, target_values
from ZULIMrpePy.datasets import demo_frame, demo_points, detect_coordinate_columns, points_from_frame
from ZULIMrpePy.exceptions import InsufficientSamples, MissingTargetField


def test_detect_coordinate_columns():
    assert detect_coordinate_columns(["Latitude", "Longitude", "v"]) == ("Latitude", "Longitude")
    assert detect_coordinate_columns(["X", "Y", "v"]) == ("Y", "X")
    assert detect_coordinate_columns(["lat", "lng"]) == ("lat", "lng")
    assert detect_coordinate_columns(["a", "b"]) is None


def test_points_from_frame_drops_missing_properties():
    df = pd.DataFrame(
        {
            "LAT": [1.0, 2.0],
            "LON": [3.0, 4.0],
            "yield": [10.0, np.nan],
            "crop": ["maize", "rice"],
        }
    )
    pts = points_from_frame(df)
    assert len(pts) == 2
    assert (pts[0].lat, pts[0].lng) == (1.0, 3.0)
    assert pts[0].properties == {"yield": 10.0, "crop": "maize"}
    assert "yield" not in pts[1].properties
    assert isinstance(pts[0].properties["yield"], float)


def test_points_from_frame_errors():
    with pytest.raises(ValueError):
        points_from_frame(pd.DataFrame({"a": [1], "b": [2]}))
    with pytest.raises(ValueError):
        points_from_frame(pd.DataFrame({"lat": ["north"], "lon": [1.0]}))
    with pytest.raises(ValueError):
        points_from_frame(pd.DataFrame({"lat": [1.0], "lon": [1.0]}), lat_col="lat", lon_col="long")


def test_demo_points():
    pts = demo_points()
    assert len(pts) == 30
    assert len(demo_frame()) == 30
    fields = numeric_fields(pts)
    for name in ("yield_kg", "rainfall_mm", "soil_ph", "elevation_m", "ndvi"):
        assert name in fields
    y = target_values(pts, "yield_kg")
    assert y.min() == 2200 and y.max() == 3200


def test_target_values_rejects_bad_entries():
    pts = points_from_frame(pd.DataFrame({"lat": [0.0, 1.0], "lng": [0.0, 1.0], "z": ["a", "b"]}))
    with pytest.raises(MissingTargetField):
        target_values(pts, "z")
    with pytest.raises(MissingTargetField):
        target_values(pts, "absent")


def test_require_min_samples():
    with pytest.raises(InsufficientSamples):
        require_min_samples(demo_points()[:2])
