import numpy as np
import pandas as pd
import pytest

from ZULIMrpePy.data import coordinates, target_values
from ZULIMrpePy.exceptions import InsufficientSamples, InvalidConfig
from ZULIMrpePy.grid import build_grid
from ZULIMrpePy.interpolation import idw_estimate
from ZULIMrpePy.kfold import (
    cross_validate,
    fold_bounds,
    propagate_residuals,
    residual_key,
    residual_lookup,
    residual_surface,
)


# ---------------------------------------------------------------------
# Fold layout
# ---------------------------------------------------------------------


def test_fold_bounds_even_split():
    assert fold_bounds(10, 5) == [(0, 2), (2, 4), (4, 6), (6, 8), (8, 10)]


def test_fold_bounds_last_fold_absorbs_remainder():
    assert fold_bounds(11, 3) == [(0, 3), (3, 6), (6, 11)]


def test_fold_bounds_validation():
    with pytest.raises(InvalidConfig):
        fold_bounds(10, 1)
    with pytest.raises(InsufficientSamples):
        fold_bounds(4, 5)


def test_residual_key_four_decimals():
    assert residual_key(1.23449, -2.0) == "1.2345_-2.0000"


# ---------------------------------------------------------------------
# Cross-validation table
# ---------------------------------------------------------------------


def test_cross_validate_one_row_per_point(ten_points):
    cv = cross_validate(ten_points, "z", k=5)
    assert isinstance(cv, pd.DataFrame)
    assert list(cv.columns) == ["fold", "lat", "lng", "y_true", "y_pred", "residual"]
    assert len(cv) == 10
    assert cv["fold"].tolist() == [0, 0, 1, 1, 2, 2, 3, 3, 4, 4]
    np.testing.assert_allclose(cv["residual"], cv["y_true"] - cv["y_pred"])


def test_cross_validate_holds_out_each_fold(ten_points):
    """Fold 0 is predicted from points 2..9 only."""
    lat, lng = coordinates(ten_points)
    y = target_values(ten_points, "z")
    cv = cross_validate(ten_points, "z", k=5, power=2.0)

    expected = idw_estimate(lat[:2], lng[:2], lat[2:], lng[2:], y[2:], 2.0)
    np.testing.assert_allclose(cv["y_pred"].to_numpy()[:2], expected)


def test_cross_validate_uses_coincident_training_point(make_points):
    pts = make_points(
        [(0.0, 0.0), (1.0, 1.0), (0.0, 0.0), (2.0, 0.0)],
        [1.0, 2.0, 8.0, 3.0],
    )
    cv = cross_validate(pts, "z", k=2)
    # point 0 (fold 0) sits on point 2 (fold 1)
    assert cv.loc[0, "y_pred"] == 8.0
    assert cv.loc[0, "residual"] == -7.0


def test_residual_lookup_later_duplicate_wins():
    table = pd.DataFrame({"lat": [1.0, 1.00001], "lng": [2.0, 2.0], "residual": [0.5, -0.5]})
    assert residual_lookup(table) == {"1.0000_2.0000": -0.5}


# ---------------------------------------------------------------------
# Residuals on the lattice
# ---------------------------------------------------------------------


def test_grid_residual_is_nearest_sample_residual(ten_points):
    grid = build_grid(ten_points, 0.01)
    residual, cv = residual_surface(ten_points, "z", grid, k=5)

    assert len(cv) == 10
    lat, lng = coordinates(ten_points)
    d = np.hypot(grid.lat[:, None] - lat[None, :], grid.lng[:, None] - lng[None, :])
    nearest = np.argmin(d, axis=1)
    np.testing.assert_array_equal(residual, cv["residual"].to_numpy()[nearest])


def test_propagate_residuals_length(ten_points):
    grid = build_grid(ten_points, 0.02)
    cv = cross_validate(ten_points, "z", k=2)
    out = propagate_residuals(grid, ten_points, cv)
    assert out.shape == (grid.size,)
    assert np.all(np.abs(out) <= np.abs(cv["residual"]).max())


def test_fold_bounds_integer_types():
    assert fold_bounds(6, np.int64(3)) == [(0, 2), (2, 4), (4, 6)]
    with pytest.raises(InvalidConfig):
        fold_bounds(6, True)
