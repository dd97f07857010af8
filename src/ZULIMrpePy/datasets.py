# SPDX-License-Identifier: MIT
"""
Sample-point ingestion and the bundled demo dataset.

:func:`points_from_frame` turns any tabular source already loaded into a
pandas DataFrame (CSV, Excel, a GeoJSON property table, ...) into
:class:`~ZULIMrpePy.data.SamplePoint` records. Coordinate columns are
detected case-insensitively when not given. File parsing itself is left to
pandas or the caller.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .data import SamplePoint

__all__ = [
    "detect_coordinate_columns",
    "points_from_frame",
    "demo_frame",
    "demo_points",
]


def detect_coordinate_columns(columns: Sequence[str]) -> Optional[Tuple[str, str]]:
    """Return ``(lat_col, lon_col)`` guessed from *columns*, or ``None``.

    Latitude: first name containing ``lat`` or equal to ``y``.
    Longitude: first name containing ``lon`` / ``lng`` or equal to ``x``.
    """
    lat_col = next((c for c in columns if "lat" in str(c).lower() or str(c).lower() == "y"), None)
    lon_col = next(
        (
            c
            for c in columns
            if any(t in str(c).lower() for t in ("lon", "lng")) or str(c).lower() == "x"
        ),
        None,
    )
    if lat_col is None or lon_col is None:
        return None
    return lat_col, lon_col


def _clean(v: Any) -> Any:
    if isinstance(v, (np.integer, np.floating)):
        return v.item()
    return v


def points_from_frame(
    df: pd.DataFrame,
    *,
    lat_col: Optional[str] = None,
    lon_col: Optional[str] = None,
) -> List[SamplePoint]:
    """
    Convert a DataFrame into sample points.

    Parameters
    ----------
    df :
        One row per sample.
    lat_col, lon_col :
        Coordinate columns; detected with :func:`detect_coordinate_columns`
        when omitted.

    Returns
    -------
    list of SamplePoint
        Every non-coordinate column becomes a property. Missing cells (NaN)
        are left out of the property map.

    Raises
    ------
    ValueError
        If coordinate columns cannot be found or hold non-numeric values.
    """
    if lat_col is None or lon_col is None:
        found = detect_coordinate_columns(list(df.columns))
        if found is None:
            raise ValueError(
                "Could not detect latitude/longitude columns. "
                f"Available (first 10): {list(df.columns)[:10]}"
            )
        lat_col = lat_col or found[0]
        lon_col = lon_col or found[1]

    missing = [c for c in (lat_col, lon_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Input DataFrame is missing columns: {missing}")

    lat = pd.to_numeric(df[lat_col], errors="coerce")
    lon = pd.to_numeric(df[lon_col], errors="coerce")
    if lat.isna().any() or lon.isna().any():
        raise ValueError("Some coordinates could not be converted to numeric (NaN present).")

    props_df = df.drop(columns=[lat_col, lon_col])
    points: List[SamplePoint] = []
    for la, lo, rec in zip(lat, lon, props_df.to_dict("records")):
        props: Dict[str, Any] = {k: _clean(v) for k, v in rec.items() if not pd.isna(v)}
        points.append(SamplePoint(lat=float(la), lng=float(lo), properties=props))
    return points


# ---------------------------------------------------------------------
# Demo dataset: 30 crop-yield plots with field covariates
# ---------------------------------------------------------------------

_DEMO_COLUMNS = ["lat", "lng", "id", "yield_kg", "rainfall_mm", "soil_ph", "elevation_m", "ndvi"]

_DEMO_ROWS = [
    (9.082, 8.675, 1, 2500, 1200, 6.5, 350, 0.65),
    (9.095, 8.690, 2, 2800, 1250, 6.8, 360, 0.72),
    (9.070, 8.660, 3, 2200, 1180, 6.2, 340, 0.58),
    (9.110, 8.705, 4, 3100, 1300, 7.0, 380, 0.78),
    (9.088, 8.680, 5, 2650, 1220, 6.6, 355, 0.68),
    (9.100, 8.695, 6, 2900, 1270, 6.9, 370, 0.74),
    (9.075, 8.670, 7, 2400, 1190, 6.4, 345, 0.62),
    (9.105, 8.700, 8, 3000, 1290, 6.95, 375, 0.76),
    (9.092, 8.685, 9, 2750, 1240, 6.7, 362, 0.70),
    (9.078, 8.665, 10, 2350, 1170, 6.3, 342, 0.60),
    (9.115, 8.710, 11, 3200, 1320, 7.1, 385, 0.80),
    (9.085, 8.678, 12, 2600, 1210, 6.55, 352, 0.66),
    (9.098, 8.692, 13, 2850, 1260, 6.85, 368, 0.73),
    (9.072, 8.668, 14, 2300, 1185, 6.35, 343, 0.59),
    (9.108, 8.703, 15, 3050, 1295, 6.98, 378, 0.77),
    (9.090, 8.683, 16, 2700, 1230, 6.65, 358, 0.69),
    (9.080, 8.673, 17, 2450, 1195, 6.45, 348, 0.63),
    (9.112, 8.708, 18, 3150, 1310, 7.05, 382, 0.79),
    (9.087, 8.681, 19, 2620, 1215, 6.58, 354, 0.67),
    (9.095, 8.688, 20, 2820, 1255, 6.82, 365, 0.71),
    (9.073, 8.662, 21, 2250, 1175, 6.25, 338, 0.57),
    (9.103, 8.698, 22, 2950, 1280, 6.92, 372, 0.75),
    (9.084, 8.676, 23, 2550, 1205, 6.52, 350, 0.64),
    (9.097, 8.691, 24, 2880, 1265, 6.88, 367, 0.72),
    (9.077, 8.671, 25, 2380, 1188, 6.38, 346, 0.61),
    (9.107, 8.702, 26, 3020, 1292, 6.96, 376, 0.76),
    (9.089, 8.682, 27, 2680, 1225, 6.62, 356, 0.68),
    (9.101, 8.696, 28, 2920, 1275, 6.90, 371, 0.74),
    (9.074, 8.664, 29, 2280, 1178, 6.28, 341, 0.58),
    (9.113, 8.707, 30, 3180, 1315, 7.08, 384, 0.79),
]


def demo_frame() -> pd.DataFrame:
    """The demo dataset as a DataFrame (``lat``, ``lng`` + 6 attributes)."""
    return pd.DataFrame(_DEMO_ROWS, columns=_DEMO_COLUMNS)


def demo_points() -> List[SamplePoint]:
    """The demo dataset as sample points; ``yield_kg`` is the usual target."""
    return points_from_frame(demo_frame(), lat_col="lat", lon_col="lng")
