# SPDX-License-Identifier: MIT
"""
Surface estimation: inverse-distance weighting and its predictor-weighted
variant.

Both estimators sit behind the small :class:`SpatialPredictor` interface
(``fit(points, target, predictors) -> FittedSurface`` and
``predict(model, grid) -> ndarray``) so the orchestrator never needs to know
which one it is driving, and a genuine regression backend can be plugged in
later.

IDW
---
The weight of sample *p* at query *q* is ``1 / d(q, p) ** power``. A sample
closer than :data:`COINCIDENT_EPS` is treated as coincident: the estimate is
that sample's value and every other weight is discarded (with several
coincident samples, the last one in input order wins). A zero weight sum
yields the fallback value (``0`` by default).

Heuristic regression
--------------------
:class:`HeuristicRegressionPredictor` is *not* a fitted regressor. Each
predictor receives a pseudo-importance derived from its absolute Pearson
correlation with the target (``0.1 + 0.4 * |r|``, normalised to sum to 1),
and each sample's IDW weight is scaled by
``1 + 0.01 * sum(importance * predictor_value)``. The result stays an
interpolator: query nodes carry no predictor values.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import numpy as np

from .data import (
    FeatureImportance,
    SamplePoint,
    coordinates,
    predictor_values,
    target_values,
)
from .grid import Grid
from .spatial import DEFAULT_CHUNK, distance_matrix

__all__ = [
    "COINCIDENT_EPS",
    "idw_estimate",
    "feature_importance",
    "FittedSurface",
    "SpatialPredictor",
    "IDWPredictor",
    "HeuristicRegressionPredictor",
]

COINCIDENT_EPS = 1e-4
PREDICTOR_GAIN = 0.01


# ---------------------------------------------------------------------
# Core IDW kernel
# ---------------------------------------------------------------------


def idw_estimate(
    q_lat: np.ndarray,
    q_lng: np.ndarray,
    s_lat: np.ndarray,
    s_lng: np.ndarray,
    values: np.ndarray,
    power: float = 2.0,
    *,
    multipliers: Optional[np.ndarray] = None,
    fallback: Union[float, np.ndarray] = 0.0,
    chunk_size: int = DEFAULT_CHUNK,
) -> np.ndarray:
    """Inverse-distance-weighted estimate at each query node.

    Parameters
    ----------
    q_lat, q_lng :
        Query coordinates.
    s_lat, s_lng, values :
        Sample coordinates and the values to interpolate.
    power :
        Distance-decay exponent.
    multipliers :
        Optional per-sample weight scale (used by the predictor-weighted mode).
    fallback :
        Value (scalar or per-query array) returned where the weight sum is 0.

    Returns
    -------
    np.ndarray
        One estimate per query node.
    """
    q_lat = np.asarray(q_lat, dtype=float)
    q_lng = np.asarray(q_lng, dtype=float)
    values = np.asarray(values, dtype=float)
    n_q, n_s = q_lat.size, values.size
    fb = np.broadcast_to(np.asarray(fallback, dtype=float), (n_q,))

    out = np.empty(n_q, dtype=float)
    if n_s == 0:
        out[:] = fb
        return out

    for i0 in range(0, n_q, int(chunk_size)):
        sl = slice(i0, i0 + int(chunk_size))
        d = distance_matrix(q_lat[sl], q_lng[sl], s_lat, s_lng)
        coincident = d < COINCIDENT_EPS

        with np.errstate(divide="ignore", over="ignore"):
            w = 1.0 / np.power(d, power)
        w[coincident] = 0.0
        if multipliers is not None:
            w = w * multipliers[None, :]

        num = w @ values
        den = w.sum(axis=1)
        est = np.array(fb[sl], dtype=float)
        np.divide(num, den, out=est, where=den != 0.0)

        hit = coincident.any(axis=1)
        if hit.any():
            last = n_s - 1 - np.argmax(coincident[hit, ::-1], axis=1)
            est[hit] = values[last]
        out[sl] = est
    return out


# ---------------------------------------------------------------------
# Feature importance heuristic
# ---------------------------------------------------------------------


def _abs_pearson(x: np.ndarray, y: np.ndarray) -> float:
    if x.size < 2 or np.std(x) == 0.0 or np.std(y) == 0.0:
        return 0.0
    r = float(np.corrcoef(x, y)[0, 1])
    return abs(r) if np.isfinite(r) else 0.0


def feature_importance(
    points: Sequence[SamplePoint],
    target: str,
    predictors: Sequence[str],
) -> List[FeatureImportance]:
    """Pseudo-importance per predictor, summing to 1, sorted descending.

    Ties keep the order in which predictors were given.
    """
    names = list(dict.fromkeys(predictors))
    if not names:
        return []
    y = target_values(points, target)
    raw = np.array(
        [0.1 + 0.4 * _abs_pearson(predictor_values(points, n), y) for n in names],
        dtype=float,
    )
    share = raw / raw.sum()
    ranked = [FeatureImportance(feature=n, importance=float(s)) for n, s in zip(names, share)]
    return sorted(ranked, key=lambda f: -f.importance)


# ---------------------------------------------------------------------
# Predictor interface
# ---------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class FittedSurface:
    """What a :class:`SpatialPredictor` learns from the samples."""

    lat: np.ndarray
    lng: np.ndarray
    values: np.ndarray
    power: float
    multipliers: Optional[np.ndarray] = None
    feature_importance: List[FeatureImportance] = field(default_factory=list)


class SpatialPredictor(abc.ABC):
    """Estimator boundary used by the pipeline."""

    @abc.abstractmethod
    def fit(
        self,
        points: Sequence[SamplePoint],
        target: str,
        predictors: Sequence[str] = (),
    ) -> FittedSurface:
        """Learn whatever the estimator needs from *points*."""

    def predict(self, model: FittedSurface, grid: Grid) -> np.ndarray:
        """Estimate the target at every node of *grid*."""
        return idw_estimate(
            grid.lat,
            grid.lng,
            model.lat,
            model.lng,
            model.values,
            model.power,
            multipliers=model.multipliers,
        )

    def fit_predict(
        self,
        points: Sequence[SamplePoint],
        target: str,
        grid: Grid,
        predictors: Sequence[str] = (),
    ):
        model = self.fit(points, target, predictors)
        return self.predict(model, grid), model


class IDWPredictor(SpatialPredictor):
    """Plain inverse-distance weighting of the target variable."""

    def __init__(self, power: float = 2.0):
        self.power = float(power)

    def fit(self, points, target, predictors=()):
        lat, lng = coordinates(points)
        return FittedSurface(
            lat=lat,
            lng=lng,
            values=target_values(points, target),
            power=self.power,
        )


class HeuristicRegressionPredictor(SpatialPredictor):
    """IDW whose sample weights are scaled by importance-weighted predictor values."""

    def __init__(self, power: float = 2.0):
        self.power = float(power)

    def fit(self, points, target, predictors=()):
        if not predictors:
            raise ValueError("HeuristicRegressionPredictor needs at least one predictor.")
        lat, lng = coordinates(points)
        values = target_values(points, target)
        importances = feature_importance(points, target, predictors)

        boost = np.zeros(len(points), dtype=float)
        for fi in importances:
            boost += fi.importance * predictor_values(points, fi.feature)

        return FittedSurface(
            lat=lat,
            lng=lng,
            values=values,
            power=self.power,
            multipliers=1.0 + PREDICTOR_GAIN * boost,
            feature_importance=importances,
        )
