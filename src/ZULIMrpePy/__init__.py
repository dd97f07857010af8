"""
ZULIMrpePy
==========

Spatial interpolation with a Reliable Prediction Extent (RPE).

Given irregularly spaced sample points carrying a numeric target (and,
optionally, numeric predictor variables), the package:

1. Builds a regular lattice over the padded sample bounding box.
2. Estimates the target on every node by inverse-distance weighting, or by a
   predictor-weighted IDW heuristic when predictors are given.
3. Classifies the surface into ordinal bands (equal, quantile, natural
   breaks).
4. Validates the estimator with contiguous k-fold hold-out and spreads the
   residuals onto the lattice (accuracy / residual maps).
5. Scores per-node uncertainty from sample distance and density.
6. Flags the nodes where predictions can be trusted (RPE), using the
   buffered convex hull of the samples, distance, density, uncertainty, or
   all of them combined.

Main entry points
-----------------
- :func:`run_analysis` / :class:`AnalysisResults`
- :class:`AnalysisConfig`
- :func:`points_from_frame`, :func:`demo_points`
- stage functions: :func:`build_grid`, :func:`idw_estimate`,
  :func:`cross_validate`, :func:`estimate_uncertainty`, :func:`classify`,
  :func:`convex_hull`, :func:`compute_rpe`, :func:`compute_metrics`

Example
-------
    >>> from ZULIMrpePy import AnalysisConfig, demo_points, run_analysis
    >>> res = run_analysis(demo_points(), "yield_kg", config=AnalysisConfig(grid_resolution=0.005))
    >>> res.metrics.formatted()
    >>> res.to_frame().head()
"""

from __future__ import annotations

# Public version (update in sync with pyproject.toml)
__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Records, configuration and errors
# ---------------------------------------------------------------------------

from .exceptions import (
    ZulimError,
    InvalidConfig,
    InsufficientData,
    InsufficientSamples,
    MissingTargetField,
    AnalysisCancelled,
    DegenerateGeometryWarning,
)
from .data import SamplePoint, GridCell, FeatureImportance, numeric_fields
from .config import AnalysisConfig

# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------

from .grid import Grid, RasterGrid, build_grid, grid_to_raster
from .interpolation import (
    SpatialPredictor,
    IDWPredictor,
    HeuristicRegressionPredictor,
    idw_estimate,
    feature_importance,
)
from .kfold import cross_validate, residual_surface
from .uncertainty import estimate_uncertainty
from .classify import classify, compute_breaks
from .hull import convex_hull, buffer_hull, points_in_polygon
from .rpe import (
    ConvexHullRule,
    DistanceRule,
    KernelDensityRule,
    UncertaintyRule,
    CombinedRule,
    make_rule,
    compute_rpe,
)
from .metrics import AnalysisMetrics, compute_metrics, regression_metrics

# ---------------------------------------------------------------------------
# Orchestration and data helpers
# ---------------------------------------------------------------------------

from .pipeline import AnalysisResults, CancellationToken, LAYER_FIELDS, run_analysis
from .datasets import demo_frame, demo_points, detect_coordinate_columns, points_from_frame

__all__ = [
    "__version__",
    # errors
    "ZulimError",
    "InvalidConfig",
    "InsufficientData",
    "InsufficientSamples",
    "MissingTargetField",
    "AnalysisCancelled",
    "DegenerateGeometryWarning",
    # records / config
    "SamplePoint",
    "GridCell",
    "FeatureImportance",
    "numeric_fields",
    "AnalysisConfig",
    # stages
    "Grid",
    "RasterGrid",
    "build_grid",
    "grid_to_raster",
    "SpatialPredictor",
    "IDWPredictor",
    "HeuristicRegressionPredictor",
    "idw_estimate",
    "feature_importance",
    "cross_validate",
    "residual_surface",
    "estimate_uncertainty",
    "classify",
    "compute_breaks",
    "convex_hull",
    "buffer_hull",
    "points_in_polygon",
    "ConvexHullRule",
    "DistanceRule",
    "KernelDensityRule",
    "UncertaintyRule",
    "CombinedRule",
    "make_rule",
    "compute_rpe",
    "AnalysisMetrics",
    "compute_metrics",
    "regression_metrics",
    # orchestration
    "AnalysisResults",
    "CancellationToken",
    "LAYER_FIELDS",
    "run_analysis",
    "demo_frame",
    "demo_points",
    "detect_coordinate_columns",
    "points_from_frame",
]
