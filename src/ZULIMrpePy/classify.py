# SPDX-License-Identifier: MIT
"""
Ordinal classification of a continuous surface.

Three break-point schemes are available:

- ``"equal"``: ``k + 1`` evenly spaced breaks between min and max.
- ``"quantile"``: the ``floor(n * i / k)``-th order statistic, ``i = 0..k``.
- ``"natural-breaks"``: breaks at evenly stepped *indices* of the sorted
  values (step ``n // k``). This is a cheap stand-in, not a Jenks
  optimisation; the legacy name ``"jenks"`` maps to it.

A value belongs to the first class ``i`` with ``breaks[i] <= v < breaks[i+1]``;
values at or above the last break fall in the top class, so every interval is
right-open except the last one. A surface with no spread (max == min up to
rounding) puts every node in class 0.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .data import is_integer
from .exceptions import InvalidConfig

__all__ = ["compute_breaks", "assign_classes", "classify"]

_ALIASES = {"jenks": "natural-breaks"}
_FLAT_RTOL = 1e-9


def compute_breaks(values: np.ndarray, num_classes: int, method: str = "quantile") -> np.ndarray:
    """Return ``num_classes + 1`` non-decreasing break points."""
    if not is_integer(num_classes) or num_classes < 1:
        raise InvalidConfig(f"num_classes must be a positive integer, got {num_classes!r}.")
    v = np.asarray(values, dtype=float)
    if v.size == 0:
        raise ValueError("Cannot classify an empty surface.")
    method = _ALIASES.get(method, method)
    k = int(num_classes)
    i = np.arange(k + 1)

    if method == "equal":
        lo, hi = float(v.min()), float(v.max())
        return lo + (hi - lo) * i / k

    s = np.sort(v)
    n = s.size
    if method == "quantile":
        idx = (n * i) // k
    elif method == "natural-breaks":
        idx = i * (n // k)
    else:
        raise InvalidConfig(f"Unknown classification method '{method}'.")
    return s[np.minimum(idx, n - 1)]


def assign_classes(values: np.ndarray, breaks: np.ndarray) -> np.ndarray:
    """Class index per value for the given *breaks* (see module docstring)."""
    v = np.asarray(values, dtype=float)
    k = len(breaks) - 1
    out = np.zeros(v.size, dtype=int)
    done = np.zeros(v.size, dtype=bool)
    for i in range(k):
        m = (v >= breaks[i]) & (v < breaks[i + 1]) & ~done
        out[m] = i
        done |= m
    out[v >= breaks[-1]] = k - 1
    return out


def classify(values: np.ndarray, num_classes: int, method: str = "quantile") -> Tuple[np.ndarray, np.ndarray]:
    """Classify *values*; returns ``(classes, breaks)``."""
    v = np.asarray(values, dtype=float)
    breaks = compute_breaks(v, num_classes, method)
    lo, hi = float(v.min()), float(v.max())
    if hi - lo <= _FLAT_RTOL * max(1.0, abs(hi)):
        return np.zeros(v.size, dtype=int), breaks
    return assign_classes(v, breaks), breaks
