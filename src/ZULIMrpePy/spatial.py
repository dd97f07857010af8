# SPDX-License-Identifier: MIT
"""
Planar distance utilities on (lat, lng).

Distances are plain Euclidean on degrees, not geodesic: at the extents the
engine targets (a field, a district) the approximation is accepted.

- :func:`distance_matrix`: dense query × sample distances.
- :func:`nearest_sample`: index and distance of the closest sample,
  computed in chunks; ties go to the first sample in input order.
- :func:`count_within`: number of samples strictly inside a radius, via
  :class:`sklearn.neighbors.KDTree`.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from sklearn.neighbors import KDTree

__all__ = ["distance_matrix", "nearest_sample", "count_within"]

DEFAULT_CHUNK = 4096


def distance_matrix(
    q_lat: np.ndarray,
    q_lng: np.ndarray,
    s_lat: np.ndarray,
    s_lng: np.ndarray,
) -> np.ndarray:
    """Return the ``(n_query, n_sample)`` Euclidean distance matrix."""
    q_lat = np.asarray(q_lat, dtype=float)
    q_lng = np.asarray(q_lng, dtype=float)
    s_lat = np.asarray(s_lat, dtype=float)
    s_lng = np.asarray(s_lng, dtype=float)
    return np.hypot(q_lat[:, None] - s_lat[None, :], q_lng[:, None] - s_lng[None, :])


def nearest_sample(
    q_lat: np.ndarray,
    q_lng: np.ndarray,
    s_lat: np.ndarray,
    s_lng: np.ndarray,
    *,
    chunk_size: int = DEFAULT_CHUNK,
) -> Tuple[np.ndarray, np.ndarray]:
    """Closest sample for every query node.

    Returns
    -------
    idx : np.ndarray of int
        Index into the sample arrays (first one wins on exact ties).
    dist : np.ndarray of float
        Distance to that sample.
    """
    q_lat = np.asarray(q_lat, dtype=float)
    q_lng = np.asarray(q_lng, dtype=float)
    n = q_lat.size
    if np.asarray(s_lat).size == 0:
        raise ValueError("No samples to search.")

    idx = np.empty(n, dtype=int)
    dist = np.empty(n, dtype=float)
    for i0 in range(0, n, int(chunk_size)):
        sl = slice(i0, i0 + int(chunk_size))
        d = distance_matrix(q_lat[sl], q_lng[sl], s_lat, s_lng)
        j = np.argmin(d, axis=1)
        idx[sl] = j
        dist[sl] = d[np.arange(d.shape[0]), j]
    return idx, dist


def count_within(
    q_lat: np.ndarray,
    q_lng: np.ndarray,
    s_lat: np.ndarray,
    s_lng: np.ndarray,
    radius: float,
) -> np.ndarray:
    """Number of samples at distance strictly ``< radius`` from each query node."""
    samples = np.column_stack([np.asarray(s_lat, dtype=float), np.asarray(s_lng, dtype=float)])
    queries = np.column_stack([np.asarray(q_lat, dtype=float), np.asarray(q_lng, dtype=float)])
    radius = float(radius)
    if samples.shape[0] == 0 or radius <= 0.0:
        return np.zeros(queries.shape[0], dtype=int)
    tree = KDTree(samples, metric="euclidean")
    # query_radius is inclusive: drop hits sitting exactly on the radius
    _, dists = tree.query_radius(queries, r=radius, return_distance=True)
    return np.array([int(np.count_nonzero(d < radius)) for d in dists], dtype=int)
