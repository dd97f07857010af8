# SPDX-License-Identifier: MIT
"""Distance/density uncertainty score in [0, 1] for every grid node."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .data import SamplePoint, coordinates
from .exceptions import InsufficientData
from .grid import Grid
from .spatial import count_within, nearest_sample

__all__ = ["DENSITY_RADIUS", "DENSITY_SATURATION", "estimate_uncertainty"]

DENSITY_RADIUS = 0.05
DENSITY_SATURATION = 5
DISTANCE_WEIGHT = 0.6
DENSITY_WEIGHT = 0.4


def estimate_uncertainty(points: Sequence[SamplePoint], grid: Grid) -> np.ndarray:
    """
    ``0.6 * distance_factor + 0.4 * density_factor`` per node.

    ``distance_factor`` is the distance to the nearest sample divided by the
    largest such distance over the grid (divisor 1 when that maximum is 0).
    ``density_factor`` is ``1 - min(count / 5, 1)`` where *count* is the
    number of samples closer than :data:`DENSITY_RADIUS`.
    """
    if len(points) == 0:
        raise InsufficientData("Uncertainty needs at least one sample point.")
    lat, lng = coordinates(points)

    _, dist = nearest_sample(grid.lat, grid.lng, lat, lng)
    max_dist = float(dist.max()) if dist.size else 0.0
    distance_factor = dist / (max_dist or 1.0)

    nearby = count_within(grid.lat, grid.lng, lat, lng, DENSITY_RADIUS)
    density_factor = 1.0 - np.minimum(nearby / DENSITY_SATURATION, 1.0)

    return DISTANCE_WEIGHT * distance_factor + DENSITY_WEIGHT * density_factor
