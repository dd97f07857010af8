# SPDX-License-Identifier: MIT
"""
End-to-end analysis pipeline.

:func:`run_analysis` chains every stage of the engine, strictly in sequence:

1. Lattice construction (:func:`ZULIMrpePy.grid.build_grid`).
2. Surface estimation: plain IDW, or the predictor-weighted heuristic when
   predictor variables are given (any :class:`SpatialPredictor` can be
   injected instead).
3. Classification of the continuous surface.
4. K-fold hold-out validation: an accuracy map (``|residual|``) for
   single-variable runs; a residual map plus an uncertainty map for
   predictor-based runs.
5. Reliable Prediction Extent, fed by the uncertainty map when there is
   one, otherwise by a freshly computed one.
6. Hold-out accuracy metrics.

Progress is reported as ``(percent, message)`` through a callback, or as a
``tqdm`` bar when ``show_progress=True`` and no callback is given. A
:class:`CancellationToken` is checked before each stage; stages themselves are
never interrupted, so there is no partial result.

Each stage returns plain arrays aligned with the lattice; they are merged
into immutable :class:`~ZULIMrpePy.data.GridCell` layers here, at the
boundary, so no stage ever sees another stage's cells.

Example
-------
    >>> from ZULIMrpePy import AnalysisConfig, demo_points, run_analysis
    >>> res = run_analysis(
    ...     demo_points(),
    ...     "yield_kg",
    ...     predictors=["rainfall_mm", "ndvi"],
    ...     config=AnalysisConfig(grid_resolution=0.005, rpe_method="combined"),
    ... )
    >>> res.metrics.rmse, len(res.continuous)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from .classify import classify
from .config import AnalysisConfig
from .data import FeatureImportance, GridCell, SamplePoint, require_min_samples, target_values
from .exceptions import AnalysisCancelled
from .grid import RasterGrid, build_grid, grid_to_raster
from .interpolation import HeuristicRegressionPredictor, IDWPredictor, SpatialPredictor
from .kfold import fold_bounds, residual_surface
from .metrics import AnalysisMetrics, compute_metrics
from .rpe import compute_rpe
from .uncertainty import estimate_uncertainty

__all__ = [
    "SINGLE_VARIABLE",
    "PREDICTOR_BASED",
    "LAYER_FIELDS",
    "ProgressCallback",
    "CancellationToken",
    "AnalysisResults",
    "run_analysis",
]

SINGLE_VARIABLE = "single-variable"
PREDICTOR_BASED = "predictor-based"

# output layer -> GridCell attribute it displays
LAYER_FIELDS: Dict[str, str] = {
    "continuous": "value",
    "classified": "class_",
    "accuracy": "accuracy",
    "residuals": "residual",
    "uncertainty": "uncertainty",
    "rpe": "reliable",
}

ProgressCallback = Callable[[int, str], None]


# ---------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------


class CancellationToken:
    """Thread-safe flag a caller can set to stop a run between stages."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("Analysis cancelled by caller.")


# ---------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisResults:
    """Everything a renderer or exporter needs from one run.

    Equality ignores :attr:`timestamp` and :attr:`cv_table`, so two runs on
    the same input compare equal. Instances are not hashable (list fields).
    """

    __hash__ = None  # type: ignore[assignment]

    analysis_type: str
    target_variable: str
    predictors: Tuple[str, ...]
    continuous: List[GridCell]
    min_value: float
    max_value: float
    metrics: AnalysisMetrics
    classified: Optional[List[GridCell]] = None
    accuracy: Optional[List[GridCell]] = None
    residuals: Optional[List[GridCell]] = None
    uncertainty: Optional[List[GridCell]] = None
    rpe: Optional[List[GridCell]] = None
    rpe_polygon: List[SamplePoint] = field(default_factory=list)
    feature_importance: Optional[List[FeatureImportance]] = None
    cv_table: Optional[pd.DataFrame] = field(default=None, compare=False, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    def layer(self, name: str) -> Optional[List[GridCell]]:
        """Cells of output layer *name* (see :data:`LAYER_FIELDS`)."""
        if name not in LAYER_FIELDS:
            raise KeyError(f"Unknown layer '{name}'. Use one of {list(LAYER_FIELDS)}.")
        return getattr(self, name)

    def raster(self, name: str = "continuous") -> RasterGrid:
        """Dense north-to-south raster of layer *name*."""
        cells = self.layer(name)
        if cells is None:
            raise ValueError(f"Layer '{name}' was not produced by this {self.analysis_type} run.")
        return grid_to_raster(cells, LAYER_FIELDS[name])

    def to_frame(self) -> pd.DataFrame:
        """One row per lattice node with every annotation produced by the run.

        Columns: ``lat, lng, value, class, accuracy, residual, uncertainty,
        reliable``; annotations the run did not produce are absent.
        """
        df = pd.DataFrame(
            {
                "lat": [c.lat for c in self.continuous],
                "lng": [c.lng for c in self.continuous],
                "value": [c.value for c in self.continuous],
            }
        )
        sources = [
            ("class", self.classified, "class_"),
            ("accuracy", self.accuracy, "accuracy"),
            ("residual", self.accuracy or self.residuals, "residual"),
            ("uncertainty", self.uncertainty or self.rpe, "uncertainty"),
            ("reliable", self.rpe, "reliable"),
        ]
        for col, cells, attr in sources:
            if cells is not None:
                df[col] = [getattr(c, attr) for c in cells]
        return df


# ---------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------


def run_analysis(
    points: Sequence[SamplePoint],
    target: str,
    predictors: Sequence[str] = (),
    config: Optional[AnalysisConfig] = None,
    *,
    on_progress: Optional[ProgressCallback] = None,
    show_progress: bool = False,
    cancel_token: Optional[CancellationToken] = None,
    predictor: Optional[SpatialPredictor] = None,
) -> AnalysisResults:
    """
    Run the full interpolation / validation / reliability pipeline.

    Parameters
    ----------
    points :
        Sample points (at least 3), each holding *target* as a number.
    target :
        Name of the variable to map.
    predictors :
        Optional predictor variable names. A non-empty list switches the run
        to ``"predictor-based"`` mode.
    config :
        Run settings; defaults to :class:`AnalysisConfig()`.
    on_progress :
        Called with ``(percent, message)`` before each stage and at the end.
    show_progress :
        Draw a ``tqdm`` bar when *on_progress* is not given.
    cancel_token :
        Checked before every stage; raises
        :class:`~ZULIMrpePy.exceptions.AnalysisCancelled` once set.
    predictor :
        Surface estimator to use instead of the built-in choice.

    Returns
    -------
    AnalysisResults

    Raises
    ------
    InvalidConfig, InsufficientSamples, MissingTargetField, AnalysisCancelled
    """
    config = (config or AnalysisConfig()).validate()
    predictors = tuple(dict.fromkeys(predictors))
    analysis_type = PREDICTOR_BASED if predictors else SINGLE_VARIABLE

    require_min_samples(points)
    target_values(points, target)
    fold_bounds(len(points), config.cv_folds)

    bar = tqdm(total=100, desc="Analysis", unit="%") if show_progress and on_progress is None else None
    done = 0

    def stage(pct: int, message: str) -> None:
        nonlocal done
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if on_progress is not None:
            on_progress(pct, message)
        elif bar is not None:
            bar.update(pct - done)
            tqdm.write(f"[{pct:3d}%] {message}")
        done = pct

    try:
        stage(10, "Generating interpolation grid...")
        grid = build_grid(points, config.grid_resolution)

        stage(25, "Running spatial interpolation...")
        if predictor is None:
            predictor = (
                HeuristicRegressionPredictor(config.idw_power)
                if predictors
                else IDWPredictor(config.idw_power)
            )
        values, model = predictor.fit_predict(points, target, grid, predictors)
        continuous = grid.cells(values)

        stage(45, "Generating classified map...")
        classes, _ = classify(values, config.num_classes, config.classification_method)
        classified = grid.cells(values, class_=classes)

        stage(55, "Calculating cross-validation metrics...")
        residual, cv_table = residual_surface(
            points, target, grid, k=config.cv_folds, power=config.idw_power
        )
        accuracy_cells = residual_cells = uncertainty_cells = None
        node_uncertainty = None
        if analysis_type == SINGLE_VARIABLE:
            accuracy_cells = grid.cells(values, residual=residual, accuracy=np.abs(residual))
        else:
            residual_cells = grid.cells(values, residual=residual)
            node_uncertainty = estimate_uncertainty(points, grid)
            uncertainty_cells = grid.cells(values, uncertainty=node_uncertainty)

        stage(75, "Computing Reliable Prediction Extent...")
        rpe = compute_rpe(points, grid, config.rpe_rule(), uncertainty=node_uncertainty)
        rpe_cells = grid.cells(values, uncertainty=rpe.uncertainty, reliable=rpe.reliable)

        stage(90, "Calculating final metrics...")
        metrics = compute_metrics(cv_table, config.cv_folds)

        stage(100, "Analysis complete!")
    finally:
        if bar is not None:
            bar.close()

    return AnalysisResults(
        analysis_type=analysis_type,
        target_variable=target,
        predictors=predictors,
        continuous=continuous,
        min_value=float(np.min(values)),
        max_value=float(np.max(values)),
        metrics=metrics,
        classified=classified,
        accuracy=accuracy_cells,
        residuals=residual_cells,
        uncertainty=uncertainty_cells,
        rpe=rpe_cells,
        rpe_polygon=list(rpe.polygon),
        feature_importance=list(model.feature_importance) if predictors else None,
        cv_table=cv_table,
    )
