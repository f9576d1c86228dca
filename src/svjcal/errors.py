"""Centralized error types for the svjcal package."""

from __future__ import annotations


class SvjcalError(Exception):
    """Base exception for the svjcal package."""

    pass


class DomainError(SvjcalError, ValueError):
    """Raised when an input lies outside the domain of a structure or formula.

    Examples are negative tenors, strikes outside a surface's strike range
    without extrapolation permission, or an end date not after its start.
    """

    pass


class ConfigurationError(SvjcalError):
    """Raised when objects are wired together inconsistently.

    Examples are inverted strike bounds, an engine bound to a model of the
    wrong family, or a parameter vector of the wrong arity.
    """

    pass


class CalculationError(SvjcalError):
    """Raised when a numerical calculation cannot produce a result."""

    pass


class NumericalWarning(UserWarning):
    """Non-fatal numerical condition (reported, never raised)."""

    pass


__all__ = [
    "SvjcalError",
    "DomainError",
    "ConfigurationError",
    "CalculationError",
    "NumericalWarning",
]
