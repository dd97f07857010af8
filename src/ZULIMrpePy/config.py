# SPDX-License-Identifier: MIT
"""
Run configuration for an analysis.

:class:`AnalysisConfig` is a frozen dataclass carrying every knob of the
pipeline. Defaults match the interactive application the engine was built
for (5 quantile classes, 5 folds, IDW power 2, combined RPE with a 0.01°
buffer and a 0.3 uncertainty threshold).

The configuration can be round-tripped through plain dictionaries; both the
snake_case field names and the camelCase keys used by the web front-end
(``gridResolution``, ``numClasses``, ...) are accepted by
:meth:`AnalysisConfig.from_dict`.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .data import is_integer
from .exceptions import InvalidConfig

ALGORITHMS = ("idw", "rf", "svr", "kriging", "regression-kriging")
CLASSIFICATION_METHODS = ("equal", "quantile", "natural-breaks")
RPE_METHODS = ("convex-hull", "distance", "kernel-density", "uncertainty", "combined")

# legacy names still sent by older front-ends
_METHOD_ALIASES = {"jenks": "natural-breaks"}

_CAMEL_KEYS = {
    "gridResolution": "grid_resolution",
    "numClasses": "num_classes",
    "classificationMethod": "classification_method",
    "cvFolds": "cv_folds",
    "idwPower": "idw_power",
    "rfTrees": "rf_trees",
    "rpeMethod": "rpe_method",
    "rpeBuffer": "rpe_buffer",
    "uncertaintyThreshold": "uncertainty_threshold",
}


def _finite(x: Any) -> bool:
    try:
        return math.isfinite(float(x))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one analysis run.

    Attributes
    ----------
    algorithm :
        Requested algorithm. Informational only: the engine always uses
        IDW-style weighting (plain or predictor-weighted).
    grid_resolution :
        Lattice step in degrees (> 0).
    num_classes :
        Number of ordinal classes for the classified surface (>= 1).
    classification_method :
        ``"equal"``, ``"quantile"`` or ``"natural-breaks"``.
    cv_folds :
        Number of contiguous cross-validation folds (2 <= k <= n).
    idw_power :
        Distance-decay exponent.
    rf_trees :
        Tree count shown by the UI; carried but unused.
    rpe_method :
        One of :data:`RPE_METHODS`.
    rpe_buffer :
        Hull buffer / distance scale for the RPE rules (degrees).
    uncertainty_threshold :
        Cells with uncertainty below this value count as reliable.
    """

    algorithm: str = "rf"
    grid_resolution: float = 0.005
    num_classes: int = 5
    classification_method: str = "quantile"
    cv_folds: int = 5
    idw_power: float = 2.0
    rf_trees: int = 100
    rpe_method: str = "combined"
    rpe_buffer: float = 0.01
    uncertainty_threshold: float = 0.3

    def __post_init__(self) -> None:
        method = _METHOD_ALIASES.get(self.classification_method, self.classification_method)
        object.__setattr__(self, "classification_method", method)

    def validate(self) -> "AnalysisConfig":
        """Check every field; return ``self`` so calls can be chained."""
        if self.algorithm not in ALGORITHMS:
            raise InvalidConfig(f"Unknown algorithm '{self.algorithm}'. Use one of {ALGORITHMS}.")
        if not _finite(self.grid_resolution) or float(self.grid_resolution) <= 0.0:
            raise InvalidConfig(
                f"grid_resolution must be a finite positive number, got {self.grid_resolution!r}."
            )
        if not is_integer(self.num_classes) or self.num_classes < 1:
            raise InvalidConfig(f"num_classes must be a positive integer, got {self.num_classes!r}.")
        if self.classification_method not in CLASSIFICATION_METHODS:
            raise InvalidConfig(
                f"Unknown classification method '{self.classification_method}'. "
                f"Use one of {CLASSIFICATION_METHODS}."
            )
        if not is_integer(self.cv_folds) or self.cv_folds < 2:
            raise InvalidConfig(f"cv_folds must be an integer >= 2, got {self.cv_folds!r}.")
        if not _finite(self.idw_power) or float(self.idw_power) < 0.0:
            raise InvalidConfig(f"idw_power must be finite and >= 0, got {self.idw_power!r}.")
        if not is_integer(self.rf_trees) or self.rf_trees < 1:
            raise InvalidConfig(f"rf_trees must be a positive integer, got {self.rf_trees!r}.")
        if self.rpe_method not in RPE_METHODS:
            raise InvalidConfig(f"Unknown RPE method '{self.rpe_method}'. Use one of {RPE_METHODS}.")
        if not _finite(self.rpe_buffer) or float(self.rpe_buffer) < 0.0:
            raise InvalidConfig(f"rpe_buffer must be finite and >= 0, got {self.rpe_buffer!r}.")
        if not _finite(self.uncertainty_threshold):
            raise InvalidConfig(
                f"uncertainty_threshold must be finite, got {self.uncertainty_threshold!r}."
            )
        return self

    def replace(self, **changes: Any) -> "AnalysisConfig":
        return dataclasses.replace(self, **changes)

    def rpe_rule(self):
        """Build the RPE rule variant selected by :attr:`rpe_method`."""
        from .rpe import make_rule

        return make_rule(
            self.rpe_method,
            buffer=float(self.rpe_buffer),
            uncertainty_threshold=float(self.uncertainty_threshold),
        )

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "AnalysisConfig":
        """Build a config from snake_case or camelCase keys; unknown keys are rejected."""
        names = {f.name for f in dataclasses.fields(AnalysisConfig)}
        kwargs: Dict[str, Any] = {}
        for key, value in d.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in names:
                raise InvalidConfig(f"Unknown configuration key '{key}'.")
            kwargs[name] = value
        return AnalysisConfig(**kwargs)


__all__ = [
    "ALGORITHMS",
    "CLASSIFICATION_METHODS",
    "RPE_METHODS",
    "AnalysisConfig",
]
