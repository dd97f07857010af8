# SPDX-License-Identifier: MIT
"""
K-fold hold-out validation of the IDW surface.

The sample list is cut, in input order and without shuffling, into *k*
contiguous folds of ``n // k`` points; the last fold absorbs the remainder.
Each fold is held out in turn and its points are re-estimated by IDW from
the other folds only. The signed residual ``observed - predicted`` of every
point ends up in a long table (one row per sample), the same shape the
station hold-out tools return:

    fold | lat | lng | y_true | y_pred | residual

Residuals are then carried onto the lattice by *nearest sample* lookup, not
interpolated: each node takes the residual of its closest sample. With sparse
samples the resulting error map is blocky and biased; it is meant as a quick
visual error surface, not a rigorous CV error field.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .data import SamplePoint, coordinates, is_integer, target_values
from .exceptions import InsufficientSamples, InvalidConfig
from .grid import Grid
from .interpolation import idw_estimate
from .spatial import nearest_sample

__all__ = [
    "fold_bounds",
    "residual_key",
    "cross_validate",
    "residual_lookup",
    "propagate_residuals",
    "residual_surface",
]


def fold_bounds(n: int, k: int) -> List[Tuple[int, int]]:
    """Half-open ``(start, end)`` index ranges of the *k* contiguous folds.

    Raises
    ------
    InvalidConfig
        If ``k < 2``.
    InsufficientSamples
        If ``k > n``.
    """
    if not is_integer(k) or k < 2:
        raise InvalidConfig(f"Fold count must be an integer >= 2, got {k!r}.")
    if k > n:
        raise InsufficientSamples(f"{k} folds requested but only {n} sample points available.")
    size = n // k
    return [(i * size, n if i == k - 1 else (i + 1) * size) for i in range(k)]


def residual_key(lat: float, lng: float) -> str:
    """Fixed-precision location key (4 decimals) used to index residuals."""
    return f"{lat:.4f}_{lng:.4f}"


def cross_validate(
    points: Sequence[SamplePoint],
    target: str,
    *,
    k: int = 5,
    power: float = 2.0,
) -> pd.DataFrame:
    """Hold out each fold and re-estimate its points from the others.

    Returns
    -------
    DataFrame
        One row per sample, in input order, with columns
        ``[fold, lat, lng, y_true, y_pred, residual]``. When a held-out point
        receives no weight at all, its prediction falls back to the observed
        value (residual 0).
    """
    lat, lng = coordinates(points)
    y = target_values(points, target)
    bounds = fold_bounds(len(points), k)

    fold = np.empty(len(points), dtype=int)
    y_pred = np.empty(len(points), dtype=float)
    for f, (lo, hi) in enumerate(bounds):
        train = np.ones(len(points), dtype=bool)
        train[lo:hi] = False
        y_pred[lo:hi] = idw_estimate(
            lat[lo:hi],
            lng[lo:hi],
            lat[train],
            lng[train],
            y[train],
            power,
            fallback=y[lo:hi],
        )
        fold[lo:hi] = f

    return pd.DataFrame(
        {
            "fold": fold,
            "lat": lat,
            "lng": lng,
            "y_true": y,
            "y_pred": y_pred,
            "residual": y - y_pred,
        }
    )


def residual_lookup(cv_table: pd.DataFrame) -> Dict[str, float]:
    """Map location keys to residuals; a later row with the same key wins."""
    return {
        residual_key(la, ln): float(r)
        for la, ln, r in zip(cv_table["lat"], cv_table["lng"], cv_table["residual"])
    }


def propagate_residuals(
    grid: Grid,
    points: Sequence[SamplePoint],
    cv_table: pd.DataFrame,
) -> np.ndarray:
    """Residual of the nearest sample for every grid node."""
    lat, lng = coordinates(points)
    idx, _ = nearest_sample(grid.lat, grid.lng, lat, lng)
    lookup = residual_lookup(cv_table)
    keys = [residual_key(la, ln) for la, ln in zip(lat, lng)]
    return np.array([lookup.get(keys[j], 0.0) for j in idx], dtype=float)


def residual_surface(
    points: Sequence[SamplePoint],
    target: str,
    grid: Grid,
    *,
    k: int = 5,
    power: float = 2.0,
) -> Tuple[np.ndarray, pd.DataFrame]:
    """Run :func:`cross_validate` and spread its residuals over *grid*.

    Returns ``(residual_per_node, cv_table)``; the accuracy surface is
    ``np.abs(residual_per_node)``.
    """
    table = cross_validate(points, target, k=k, power=power)
    return propagate_residuals(grid, points, table), table
