# tests/test_metrics.py

import numpy as np
import pandas as pd
import pytest

from ZULIMrpePy.metrics import (
    AnalysisMetrics,
    compute_metrics,
    kge,
    nse,
    regression_metrics,
)


def test_kge_perfect_match_is_one():
    """KGE should be 1.0 for a perfect match."""
    y = [1.0, 2.0, 3.0, 4.0]
    assert kge(y, y) == pytest.approx(1.0, rel=1e-6)


def test_nse_perfect_match_is_one():
    """NSE should be 1.0 for a perfect match."""
    y = [0.0, 1.0, 2.0, 3.0]
    assert nse(y, y) == pytest.approx(1.0, rel=1e-6)


def test_kge_nse_undefined_cases_are_nan():
    assert np.isnan(kge([1.0], [1.0]))
    assert np.isnan(kge([2.0, 2.0, 2.0], [1.0, 2.0, 3.0]))
    assert np.isnan(nse([5.0, 5.0], [4.0, 6.0]))


def test_regression_metrics_constant_offset():
    """Prediction = observation + 1: perfect correlation, unit bias."""
    m = regression_metrics([1.0, 2.0, 3.0, 4.0], [2.0, 3.0, 4.0, 5.0])
    assert m["MAE"] == pytest.approx(1.0)
    assert m["RMSE"] == pytest.approx(1.0)
    assert m["bias"] == pytest.approx(1.0)
    assert m["R2"] == pytest.approx(0.2)
    assert m["NSE"] == pytest.approx(0.2)
    assert m["PearsonR2"] == pytest.approx(1.0)
    assert m["KGE"] == pytest.approx(0.6)


def test_r2_penalises_constant_offset():
    """Perfectly correlated but 10 units off: R2 must not read as a perfect fit."""
    m = regression_metrics([1.0, 2.0, 3.0, 4.0], [11.0, 12.0, 13.0, 14.0])
    # SS_res = 4 * 100, SS_tot = 5
    assert m["R2"] == pytest.approx(-79.0)
    assert m["PearsonR2"] == pytest.approx(1.0)


def test_r2_undefined_for_constant_observations():
    m = regression_metrics([3.0, 3.0, 3.0], [2.0, 3.0, 4.0])
    assert np.isnan(m["R2"])


def test_regression_metrics_empty_is_nan():
    m = regression_metrics([], [])
    assert set(m) == {"MAE", "RMSE", "R2", "bias", "KGE", "NSE", "PearsonR2"}
    assert all(np.isnan(v) for v in m.values())


def test_regression_metrics_shape_mismatch():
    with pytest.raises(ValueError):
        regression_metrics([1.0, 2.0], [1.0])


def test_compute_metrics_from_cv_table():
    table = pd.DataFrame(
        {
            "y_true": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
            "y_pred": [1.5, 2.0, 2.5, 4.5, 5.0, 5.5],
        }
    )
    m = compute_metrics(table, cv_folds=3)
    assert isinstance(m, AnalysisMetrics)
    assert m.sample_size == 6
    assert m.cv_folds == 3
    assert m.mae == pytest.approx(2.0 / 6.0)
    assert m.rmse == pytest.approx(np.sqrt(1.0 / 6.0))
    assert m.bias == pytest.approx(0.0)
    assert m.r2 == pytest.approx(1.0 - 1.0 / 17.5)
    assert m.r2 == m.nse


def test_formatted_metrics():
    m = AnalysisMetrics(
        rmse=1.23456, mae=0.5, r2=float("nan"), bias=-0.0001,
        kge=0.9, nse=0.8, sample_size=10, cv_folds=5,
    )
    f = m.formatted()
    assert f["rmse"] == "1.235"
    assert f["mae"] == "0.500"
    assert f["r2"] == "nan"
    assert f["sample_size"] == 10
