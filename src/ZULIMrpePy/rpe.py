# SPDX-License-Identifier: MIT
"""
Reliable Prediction Extent (RPE).

Every grid node is flagged reliable or not by one of five rules. Each rule is
its own small frozen dataclass carrying exactly the parameters it needs:

=====================  ==================================================
Rule                   Node is reliable when
=====================  ==================================================
``ConvexHullRule``     inside the buffered hull
``DistanceRule``       nearest sample is at most ``3 * buffer`` away
``KernelDensityRule``  at least 2 samples closer than ``5 * buffer``
``UncertaintyRule``    uncertainty ``< threshold``
``CombinedRule``       inside hull, >= 1 sample closer than ``4 * buffer`` and
                       uncertainty ``< threshold``
=====================  ==================================================

Whatever the rule, the buffered hull ring is returned for display.
Collinear or identical samples give a hull with no area: a
:class:`~ZULIMrpePy.exceptions.DegenerateGeometryWarning` is issued and
hull-based rules flag nothing as reliable.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from .data import SamplePoint, coordinates
from .exceptions import DegenerateGeometryWarning, InvalidConfig
from .grid import Grid
from .hull import buffer_hull, convex_hull, points_in_polygon
from .spatial import count_within, nearest_sample
from .uncertainty import estimate_uncertainty

__all__ = [
    "RPEContext",
    "ConvexHullRule",
    "DistanceRule",
    "KernelDensityRule",
    "UncertaintyRule",
    "CombinedRule",
    "RPERule",
    "RPEResult",
    "make_rule",
    "compute_rpe",
]


@dataclass(frozen=True, eq=False)
class RPEContext:
    """Everything a rule may look at."""

    grid: Grid
    sample_lat: np.ndarray
    sample_lng: np.ndarray
    ring: List[SamplePoint]
    uncertainty: np.ndarray

    def samples_within(self, radius: float) -> np.ndarray:
        return count_within(self.grid.lat, self.grid.lng, self.sample_lat, self.sample_lng, radius)

    def in_ring(self) -> np.ndarray:
        return points_in_polygon(self.grid.lat, self.grid.lng, self.ring)


@dataclass(frozen=True)
class ConvexHullRule:
    buffer: float = 0.01
    method = "convex-hull"

    def evaluate(self, ctx: RPEContext) -> np.ndarray:
        return ctx.in_ring()


@dataclass(frozen=True)
class DistanceRule:
    buffer: float = 0.01
    method = "distance"

    def evaluate(self, ctx: RPEContext) -> np.ndarray:
        _, dist = nearest_sample(ctx.grid.lat, ctx.grid.lng, ctx.sample_lat, ctx.sample_lng)
        return dist <= 3.0 * self.buffer


@dataclass(frozen=True)
class KernelDensityRule:
    buffer: float = 0.01
    method = "kernel-density"

    def evaluate(self, ctx: RPEContext) -> np.ndarray:
        return ctx.samples_within(5.0 * self.buffer) >= 2


@dataclass(frozen=True)
class UncertaintyRule:
    threshold: float = 0.3
    buffer: float = 0.01
    method = "uncertainty"

    def evaluate(self, ctx: RPEContext) -> np.ndarray:
        return ctx.uncertainty < self.threshold


@dataclass(frozen=True)
class CombinedRule:
    buffer: float = 0.01
    threshold: float = 0.3
    method = "combined"

    def evaluate(self, ctx: RPEContext) -> np.ndarray:
        near = ctx.samples_within(4.0 * self.buffer) >= 1
        return ctx.in_ring() & near & (ctx.uncertainty < self.threshold)


RPERule = Union[ConvexHullRule, DistanceRule, KernelDensityRule, UncertaintyRule, CombinedRule]


def make_rule(method: str, *, buffer: float = 0.01, uncertainty_threshold: float = 0.3) -> RPERule:
    """Build the rule variant named *method*."""
    if method == "convex-hull":
        return ConvexHullRule(buffer=buffer)
    if method == "distance":
        return DistanceRule(buffer=buffer)
    if method == "kernel-density":
        return KernelDensityRule(buffer=buffer)
    if method == "uncertainty":
        return UncertaintyRule(threshold=uncertainty_threshold, buffer=buffer)
    if method == "combined":
        return CombinedRule(buffer=buffer, threshold=uncertainty_threshold)
    raise InvalidConfig(f"Unknown RPE method '{method}'.")


@dataclass(frozen=True, eq=False)
class RPEResult:
    reliable: np.ndarray
    polygon: List[SamplePoint]
    uncertainty: np.ndarray


def compute_rpe(
    points: Sequence[SamplePoint],
    grid: Grid,
    rule: RPERule,
    uncertainty: Optional[np.ndarray] = None,
) -> RPEResult:
    """Flag every node of *grid* with *rule*.

    Parameters
    ----------
    points :
        Sample points.
    grid :
        Lattice to flag.
    rule :
        One of the rule dataclasses (see :func:`make_rule`).
    uncertainty :
        Per-node uncertainty; computed with
        :func:`~ZULIMrpePy.uncertainty.estimate_uncertainty` when omitted.

    Returns
    -------
    RPEResult
        Boolean flags, the buffered hull ring and the uncertainty used.
    """
    hull = convex_hull(points)
    if len(hull) < 3:
        warnings.warn(
            f"Convex hull has {len(hull)} vertices (collinear or identical samples); "
            "hull-based reliability is empty.",
            DegenerateGeometryWarning,
            stacklevel=2,
        )
    ring = buffer_hull(hull, rule.buffer)

    if uncertainty is None:
        uncertainty = estimate_uncertainty(points, grid)
    lat, lng = coordinates(points)

    ctx = RPEContext(
        grid=grid,
        sample_lat=lat,
        sample_lng=lng,
        ring=ring,
        uncertainty=np.asarray(uncertainty, dtype=float),
    )
    reliable = np.asarray(rule.evaluate(ctx), dtype=bool)
    return RPEResult(reliable=reliable, polygon=ring, uncertainty=ctx.uncertainty)
