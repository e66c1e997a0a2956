"""Validation and sanity checks for liquidator simulation."""

from .sanity_checks import SanityChecker, ValidationWarning, validate_simulation_results

__all__ = [
    "SanityChecker",
    "ValidationWarning",
    "validate_simulation_results"
]
