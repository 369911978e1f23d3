"""Exception types raised by model setup routines."""

from __future__ import annotations


class GeosetupError(Exception):
    """Base class for model setup failures."""


class ConfigurationError(GeosetupError, ValueError):
    """Raised when parameters are missing, unknown, or mutually inconsistent."""


class NumericDegeneracyError(GeosetupError, ArithmeticError):
    """Raised when inputs make a geometric or numerical computation undefined."""
