# src/ZULIMrpePy/metrics.py
# SPDX-License-Identifier: MIT
"""
Accuracy metrics computed from cross-validation hold-out predictions.

- :func:`kge`: Kling–Gupta efficiency (Gupta et al., 2009).
- :func:`nse`: Nash–Sutcliffe efficiency.
- :func:`regression_metrics`: MAE, RMSE, R², bias, KGE, NSE and squared
  Pearson correlation in one dict.
- :func:`compute_metrics`: :class:`AnalysisMetrics` for a run, built from
  the table returned by :func:`ZULIMrpePy.kfold.cross_validate`.

Conventions
-----------
* R² is the coefficient of determination of the hold-out predictions,
  ``1 - SS_res / SS_tot`` (numerically the same as NSE), so a constant offset
  is penalised. The squared Pearson correlation is reported separately as
  ``PearsonR2``.
* Bias is ``mean(predicted - observed)``: positive means over-prediction.
* Undefined metrics (too few pairs, zero variance) are ``numpy.nan``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error

__all__ = [
    "kge",
    "nse",
    "regression_metrics",
    "AnalysisMetrics",
    "compute_metrics",
]

_METRIC_KEYS = ("MAE", "RMSE", "R2", "bias", "KGE", "NSE", "PearsonR2")


def _as_arrays(y_true: Iterable[float], y_pred: Iterable[float]) -> Tuple[np.ndarray, np.ndarray]:
    """Float arrays of equal shape, or ``ValueError``."""
    yt = np.asarray(y_true, dtype=float)
    yp = np.asarray(y_pred, dtype=float)
    if yt.shape != yp.shape:
        raise ValueError(f"Shapes of y_true {yt.shape} and y_pred {yp.shape} do not match.")
    return yt, yp


def kge(y_true: Iterable[float], y_pred: Iterable[float]) -> float:
    """
    Kling–Gupta efficiency.

    .. math::

        \\mathrm{KGE} = 1 - \\sqrt{(r - 1)^2 + (\\alpha - 1)^2 + (\\beta - 1)^2}

    with ``r`` the Pearson correlation, ``alpha`` the ratio of standard
    deviations and ``beta`` the ratio of means (predicted / observed).
    NaN for fewer than 2 pairs, a constant series, or a zero observed mean.
    """
    yt, yp = _as_arrays(y_true, y_pred)
    if yt.size < 2:
        return np.nan

    sd_t, sd_p = float(np.std(yt, ddof=1)), float(np.std(yp, ddof=1))
    mu_t, mu_p = float(np.mean(yt)), float(np.mean(yp))
    if sd_t == 0.0 or sd_p == 0.0 or mu_t == 0.0:
        return np.nan

    r = float(np.corrcoef(yt, yp)[0, 1])
    if not np.isfinite(r):
        return np.nan
    return float(1.0 - np.sqrt((r - 1.0) ** 2 + (sd_p / sd_t - 1.0) ** 2 + (mu_p / mu_t - 1.0) ** 2))


def nse(y_true: Iterable[float], y_pred: Iterable[float]) -> float:
    """Nash–Sutcliffe efficiency: ``1 - SS_res / SS_tot``. NaN if ``SS_tot`` is 0."""
    yt, yp = _as_arrays(y_true, y_pred)
    if yt.size < 2:
        return np.nan
    ss_tot = float(np.sum((yt - yt.mean()) ** 2))
    if ss_tot == 0.0:
        return np.nan
    return float(1.0 - np.sum((yt - yp) ** 2) / ss_tot)


def regression_metrics(y_true: Iterable[float], y_pred: Iterable[float]) -> Dict[str, float]:
    """
    MAE, RMSE, R² (``1 - SS_res / SS_tot``), bias, KGE, NSE and the squared
    Pearson correlation for paired values.

    Empty input gives all-NaN metrics rather than an error.
    """
    yt, yp = _as_arrays(y_true, y_pred)
    if yt.size == 0:
        return {k: np.nan for k in _METRIC_KEYS}

    mae = float(mean_absolute_error(yt, yp))
    # sqrt of MSE: the `squared=` keyword is gone from recent scikit-learn
    rmse = float(np.sqrt(mean_squared_error(yt, yp)))
    bias = float(np.mean(yp - yt))

    efficiency = nse(yt, yp)

    pearson_r2 = np.nan
    if yt.size >= 2 and np.std(yt) > 0.0 and np.std(yp) > 0.0:
        r = float(np.corrcoef(yt, yp)[0, 1])
        pearson_r2 = r * r if np.isfinite(r) else np.nan

    return {
        "MAE": mae,
        "RMSE": rmse,
        "R2": efficiency,
        "bias": bias,
        "KGE": kge(yt, yp),
        "NSE": efficiency,
        "PearsonR2": float(pearson_r2),
    }


@dataclass(frozen=True)
class AnalysisMetrics:
    """Summary accuracy of one run (hold-out based)."""

    rmse: float
    mae: float
    r2: float
    bias: float
    kge: float
    nse: float
    sample_size: int
    cv_folds: int
    pearson_r2: float = float("nan")

    def formatted(self, digits: int = 3) -> Dict[str, object]:
        """Display strings with fixed decimals; counts stay integers."""
        out: Dict[str, object] = {}
        for k, v in asdict(self).items():
            if isinstance(v, int):
                out[k] = v
            else:
                out[k] = "nan" if not np.isfinite(v) else f"{v:.{digits}f}"
        return out


def compute_metrics(cv_table: pd.DataFrame, cv_folds: int) -> AnalysisMetrics:
    """Metrics from a hold-out table with ``y_true`` / ``y_pred`` columns."""
    m = regression_metrics(cv_table["y_true"].to_numpy(), cv_table["y_pred"].to_numpy())
    return AnalysisMetrics(
        rmse=m["RMSE"],
        mae=m["MAE"],
        r2=m["R2"],
        bias=m["bias"],
        kge=m["KGE"],
        nse=m["NSE"],
        sample_size=int(len(cv_table)),
        cv_folds=int(cv_folds),
        pearson_r2=m["PearsonR2"],
    )
