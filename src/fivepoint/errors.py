from __future__ import annotations


class FivePointError(ValueError):
    """Base class for failures of a single five-point solve."""


class InputCountError(FivePointError):
    """Exactly five correspondences per image are required."""


class DegenerateConfigurationError(FivePointError):
    """Rank deficiency in the epipolar system or in the elimination template."""


class NumericOverflowError(FivePointError):
    """Normalization by a quantity too close to zero."""
