# SPDX-License-Identifier: MIT
"""
Hull geometry for the Reliable Prediction Extent.

- :func:`convex_hull`: Andrew's monotone chain on ``(lng, lat)``.
- :func:`buffer_hull`: axis-aligned outward push of every hull vertex.
- :func:`points_in_polygon`: vectorised even-odd ray casting.

Coordinates are treated as planar with ``x = lng`` and ``y = lat``.
"""

from __future__ import annotations

import dataclasses
from typing import List, Sequence

import numpy as np

from .data import SamplePoint

__all__ = ["convex_hull", "buffer_hull", "points_in_polygon"]


def _cross(o: SamplePoint, a: SamplePoint, b: SamplePoint) -> float:
    return (a.lng - o.lng) * (b.lat - o.lat) - (a.lat - o.lat) * (b.lng - o.lng)


def convex_hull(points: Sequence[SamplePoint]) -> List[SamplePoint]:
    """Convex hull of *points* in counter-clockwise order.

    Collinear vertices are dropped (a turn with ``cross <= 0`` is rejected).
    With fewer than 3 points the input is returned unchanged. Collinear or
    identical inputs collapse to fewer than 3 vertices.
    """
    if len(points) < 3:
        return list(points)

    pts = sorted(points, key=lambda p: (p.lng, p.lat))

    lower: List[SamplePoint] = []
    for p in pts:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: List[SamplePoint] = []
    for p in reversed(pts):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # each chain ends where the other starts
    return lower[:-1] + upper[:-1]


def buffer_hull(hull: Sequence[SamplePoint], buffer: float) -> List[SamplePoint]:
    """Push each vertex ``buffer`` away from the hull centroid, per axis.

    A vertex strictly north of the centroid moves north, otherwise south;
    likewise east/west. This is an approximation of a polygon offset, good
    enough for display and coarse containment tests.
    """
    if not hull:
        return []
    c_lat = sum(p.lat for p in hull) / len(hull)
    c_lng = sum(p.lng for p in hull) / len(hull)
    return [
        dataclasses.replace(
            p,
            lat=p.lat + (buffer if p.lat > c_lat else -buffer),
            lng=p.lng + (buffer if p.lng > c_lng else -buffer),
        )
        for p in hull
    ]


def points_in_polygon(lat: np.ndarray, lng: np.ndarray, ring: Sequence[SamplePoint]) -> np.ndarray:
    """Even-odd containment of each ``(lat, lng)`` query in *ring*."""
    y = np.asarray(lat, dtype=float)
    x = np.asarray(lng, dtype=float)
    inside = np.zeros(y.shape, dtype=bool)
    n = len(ring)
    j = n - 1
    for i in range(n):
        xi, yi = ring[i].lng, ring[i].lat
        xj, yj = ring[j].lng, ring[j].lat
        straddles = (yi > y) != (yj > y)
        if yj != yi:
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            inside ^= straddles & (x < x_cross)
        j = i
    return inside
