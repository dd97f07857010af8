# SPDX-License-Identifier: MIT
"""
Error taxonomy for ZULIMrpePy.

Every error raised by the engine derives from :class:`ZulimError`, itself a
:class:`ValueError`, so code that already guards against bad input with
``except ValueError`` keeps working.

Arithmetic edge cases (zero weight sums, zero variance, zero maximum
distance) are *not* errors: stages guard them in place with numeric
fallbacks. Degenerate hull geometry is reported with
:class:`DegenerateGeometryWarning` and the run continues.
"""

from __future__ import annotations


class ZulimError(ValueError):
    """Base class for all engine errors."""


class InvalidConfig(ZulimError):
    """Non-positive resolution, fold count < 2, non-positive class count, etc."""


class InsufficientData(ZulimError):
    """A stage received fewer samples than it needs."""


class InsufficientSamples(InsufficientData):
    """Fewer than 3 points, or fewer points than requested folds."""


class MissingTargetField(ZulimError):
    """The target variable is absent or non-numeric on one or more points."""


class AnalysisCancelled(ZulimError):
    """The run was cancelled between two stages."""


class DegenerateGeometryWarning(UserWarning):
    """Collinear or identical points: the convex hull has no area."""


__all__ = [
    "ZulimError",
    "InvalidConfig",
    "InsufficientData",
    "InsufficientSamples",
    "MissingTargetField",
    "AnalysisCancelled",
    "DegenerateGeometryWarning",
]
