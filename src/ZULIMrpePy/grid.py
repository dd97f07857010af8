# src/ZULIMrpePy/grid.py
# =============================================================================
# MIT License
#
# (c) 2025 The ZULIMrpePy authors.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.
# =============================================================================
"""
Regular prediction lattice and its raster view.

This module provides two entry points:

1) :func:`build_grid`
   Derives a padded rectangular lattice from the bounding box of the sample
   points. Each bound is pushed outwards by ``2 * resolution`` and nodes are
   laid every ``resolution`` degrees in both axes, latitude-major
   (south → north rows, west → east inside each row).

2) :func:`grid_to_raster`
   Converts any list of :class:`~ZULIMrpePy.data.GridCell` back into a dense
   north-to-south 2-D array, the layout expected by raster writers
   (ESRI ASCII grid, GeoTIFF). Writing files is left to the caller.

Node coordinates are computed as ``start + i * resolution`` rather than by
repeated addition, so the lattice is reproducible bit-for-bit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .data import GridCell, SamplePoint, coordinates
from .exceptions import InsufficientData, InvalidConfig

__all__ = [
    "PAD_CELLS",
    "NODATA",
    "Grid",
    "build_grid",
    "RasterGrid",
    "grid_to_raster",
]

PAD_CELLS = 2
NODATA = -9999.0

# absorbs float noise in span / resolution before flooring
_STEP_TOL = 1e-9


# ---------------------------------------------------------------------
# Lattice
# ---------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Grid:
    """Flat lattice of query nodes.

    Attributes
    ----------
    lat, lng :
        1-D arrays of node coordinates, row-major (latitude outer).
    shape :
        ``(n_lat, n_lng)``; ``lat.size == n_lat * n_lng``.
    resolution :
        Step between neighbouring nodes.
    """

    lat: np.ndarray
    lng: np.ndarray
    shape: Tuple[int, int]
    resolution: float

    @property
    def size(self) -> int:
        return int(self.lat.size)

    def cells(
        self,
        value: np.ndarray,
        *,
        class_: Optional[np.ndarray] = None,
        accuracy: Optional[np.ndarray] = None,
        residual: Optional[np.ndarray] = None,
        uncertainty: Optional[np.ndarray] = None,
        reliable: Optional[np.ndarray] = None,
    ) -> List[GridCell]:
        """Merge per-node stage outputs into immutable :class:`GridCell` records."""
        n = self.size
        cols = {
            "class_": class_,
            "accuracy": accuracy,
            "residual": residual,
            "uncertainty": uncertainty,
            "reliable": reliable,
        }
        for name, arr in [("value", value)] + list(cols.items()):
            if arr is not None and len(arr) != n:
                raise ValueError(f"'{name}' has {len(arr)} entries, grid has {n} nodes.")

        casts = {"class_": int, "reliable": bool}
        out: List[GridCell] = []
        for i in range(n):
            extra = {
                k: casts.get(k, float)(a[i]) for k, a in cols.items() if a is not None
            }
            out.append(
                GridCell(lat=float(self.lat[i]), lng=float(self.lng[i]), value=float(value[i]), **extra)
            )
        return out


def _axis(lo: float, hi: float, step: float) -> np.ndarray:
    start = lo - PAD_CELLS * step
    stop = hi + PAD_CELLS * step
    n = int(math.floor((stop - start) / step + _STEP_TOL)) + 1
    return start + np.arange(n, dtype=float) * step


def build_grid(points: Sequence[SamplePoint], resolution: float) -> Grid:
    """Build the padded lattice covering *points*.

    Parameters
    ----------
    points :
        Sample points (at least one).
    resolution :
        Finite, strictly positive step in degrees.

    Returns
    -------
    Grid
        Identical bounds on one axis (all points share a latitude, say)
        still yield a valid lattice thanks to the padding.

    Raises
    ------
    InvalidConfig
        If *resolution* is not a finite positive number.
    InsufficientData
        If *points* is empty.
    """
    try:
        r = float(resolution)
    except (TypeError, ValueError):
        raise InvalidConfig(f"Grid resolution must be numeric, got {resolution!r}.") from None
    if not math.isfinite(r) or r <= 0.0:
        raise InvalidConfig(f"Grid resolution must be finite and > 0, got {resolution!r}.")
    if len(points) == 0:
        raise InsufficientData("Cannot build a grid without sample points.")

    lat, lng = coordinates(points)
    lat_axis = _axis(float(lat.min()), float(lat.max()), r)
    lng_axis = _axis(float(lng.min()), float(lng.max()), r)

    glat, glng = np.meshgrid(lat_axis, lng_axis, indexing="ij")
    return Grid(
        lat=glat.ravel(),
        lng=glng.ravel(),
        shape=(lat_axis.size, lng_axis.size),
        resolution=r,
    )


# ---------------------------------------------------------------------
# Raster view
# ---------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class RasterGrid:
    """Dense raster built from grid cells.

    ``data[0]`` is the northernmost row; columns run west to east.
    ``bounds`` holds ``min_lat``, ``max_lat``, ``min_lng``, ``max_lng`` of the
    node centres. ``cell_size`` is the mean of the two axis spacings.
    """

    data: np.ndarray
    bounds: Dict[str, float]
    cell_size: float
    nodata: float = NODATA

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])


def grid_to_raster(cells: Sequence[GridCell], field: str = "value") -> RasterGrid:
    """Rasterise *cells* on attribute *field*.

    Booleans become 1/0, missing annotations (``None``) and absent nodes
    become :data:`NODATA`. Coordinates are matched on 6 decimals.
    """
    if not cells:
        raise InsufficientData("No grid cells to rasterise.")
    if field == "class":
        field = "class_"

    lats = sorted({c.lat for c in cells}, reverse=True)
    lngs = sorted({c.lng for c in cells})
    row_of = {round(v, 6): i for i, v in enumerate(lats)}
    col_of = {round(v, 6): j for j, v in enumerate(lngs)}

    data = np.full((len(lats), len(lngs)), NODATA, dtype=float)
    for c in cells:
        v = getattr(c, field)
        if v is None:
            continue
        data[row_of[round(c.lat, 6)], col_of[round(c.lng, 6)]] = float(v)

    bounds = {
        "min_lat": float(min(lats)),
        "max_lat": float(max(lats)),
        "min_lng": float(min(lngs)),
        "max_lng": float(max(lngs)),
    }
    # single row/column: no spacing to measure
    dx = (bounds["max_lng"] - bounds["min_lng"]) / (len(lngs) - 1) if len(lngs) > 1 else 0.001
    dy = (bounds["max_lat"] - bounds["min_lat"]) / (len(lats) - 1) if len(lats) > 1 else 0.001
    return RasterGrid(data=data, bounds=bounds, cell_size=(dx + dy) / 2.0)
