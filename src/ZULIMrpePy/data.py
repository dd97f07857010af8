# SPDX-License-Identifier: MIT
"""
Record types shared by every stage of the engine.

- :class:`SamplePoint`: an observed location with its attribute table.
- :class:`GridCell`: one lattice node plus the annotations produced by the
  pipeline (class, accuracy, residual, uncertainty, reliability).
- :class:`FeatureImportance`: relative weight of one predictor.

Records are frozen: each stage produces new cells instead of mutating the
ones it received. The helpers at the bottom turn a list of points into the
NumPy arrays the numerical stages work on, and enforce the input contract
(numeric target on every point, minimum sample count).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import InsufficientSamples, MissingTargetField

MIN_SAMPLES = 3

PropertyValue = Union[float, int, str]


@dataclass(frozen=True)
class SamplePoint:
    """An irregularly spaced observation.

    Attributes
    ----------
    lat, lng :
        Planar-ish coordinates (degrees). No reprojection is performed.
    properties :
        Attribute table; must contain the target variable as a number.
    """

    lat: float
    lng: float
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)


@dataclass(frozen=True)
class GridCell:
    """A lattice node and its (optional) annotations.

    ``class_`` carries the ordinal class; it is exported as ``"class"`` by
    :meth:`to_dict`.
    """

    lat: float
    lng: float
    value: float
    class_: Optional[int] = None
    accuracy: Optional[float] = None
    residual: Optional[float] = None
    uncertainty: Optional[float] = None
    reliable: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["class"] = d.pop("class_")
        return d


@dataclass(frozen=True)
class FeatureImportance:
    feature: str
    importance: float


# ---------------------------------------------------------------------
# Array extraction helpers
# ---------------------------------------------------------------------


def _is_number(v: Any) -> bool:
    return isinstance(v, Real) and not isinstance(v, bool) and math.isfinite(float(v))


def is_integer(v: Any) -> bool:
    """Python or NumPy integer; booleans excluded."""
    return isinstance(v, (int, np.integer)) and not isinstance(v, (bool, np.bool_))


def require_min_samples(points: Sequence[SamplePoint], minimum: int = MIN_SAMPLES) -> None:
    """Raise :class:`InsufficientSamples` when fewer than *minimum* points are given."""
    if len(points) < minimum:
        raise InsufficientSamples(
            f"At least {minimum} sample points are required, got {len(points)}."
        )


def coordinates(points: Iterable[SamplePoint]) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(lat, lng)`` float arrays for *points*."""
    pts = list(points)
    lat = np.fromiter((p.lat for p in pts), dtype=float, count=len(pts))
    lng = np.fromiter((p.lng for p in pts), dtype=float, count=len(pts))
    return lat, lng


def target_values(points: Sequence[SamplePoint], target: str) -> np.ndarray:
    """Return the target variable of every point as a float array.

    Raises
    ------
    MissingTargetField
        If any point lacks *target* or holds a non-numeric / non-finite value.
    """
    bad: List[int] = []
    out = np.empty(len(points), dtype=float)
    for i, p in enumerate(points):
        v = p.properties.get(target)
        if not _is_number(v):
            bad.append(i)
            continue
        out[i] = float(v)
    if bad:
        preview = bad[:10]
        raise MissingTargetField(
            f"Target '{target}' is missing or non-numeric on {len(bad)} point(s) "
            f"(indices {preview}{'...' if len(bad) > len(preview) else ''})."
        )
    return out


def predictor_values(points: Sequence[SamplePoint], predictor: str) -> np.ndarray:
    """Return a predictor column; missing or non-numeric entries count as 0."""
    return np.array(
        [float(p.properties[predictor]) if _is_number(p.properties.get(predictor)) else 0.0
         for p in points],
        dtype=float,
    )


def numeric_fields(points: Sequence[SamplePoint]) -> List[str]:
    """Property names that are numeric on every point (candidate targets/predictors)."""
    if not points:
        return []
    names = list(points[0].properties.keys())
    return [n for n in names if all(_is_number(p.properties.get(n)) for p in points)]


__all__ = [
    "MIN_SAMPLES",
    "SamplePoint",
    "GridCell",
    "FeatureImportance",
    "is_integer",
    "require_min_samples",
    "coordinates",
    "target_values",
    "predictor_values",
    "numeric_fields",
]
