"""Analysis tools for liquidator simulation."""

from .sensitivity import (
    ParameterSweep,
    SensitivityAnalyzer,
    SensitivityResult,
    TornadoEntry,
    compute_parameter_importance,
)

__all__ = [
    "SensitivityAnalyzer",
    "SensitivityResult",
    "ParameterSweep",
    "TornadoEntry",
    "compute_parameter_importance",
]
