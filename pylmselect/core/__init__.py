"""
Core infrastructure for pylmselect.

This module provides shared abstractions, utilities, and numeric
infrastructure used by all domain-specific submodules (regression,
inference, selection, montecarlo, transform).

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    config: Worker count and rank tolerance settings
    datasource: Tabular input container
    compute: Timing, tolerances, linear algebra kernels
"""

from pylmselect.core.protocols import Backend
from pylmselect.core.result import Result
from pylmselect.core.datasource import DataSource
from pylmselect.core.exceptions import (
    PyLMSelectError,
    ValidationError,
    DimensionError,
    UnknownTermError,
    NotNestedError,
    InconsistentSampleError,
    NonPositiveResponseError,
    NumericalError,
    SingularMatrixError,
    RankDeficiencyError,
)

__all__ = [
    # Protocols
    "Backend",
    # Containers
    "Result",
    "DataSource",
    # Exceptions
    "PyLMSelectError",
    "ValidationError",
    "DimensionError",
    "UnknownTermError",
    "NotNestedError",
    "InconsistentSampleError",
    "NonPositiveResponseError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficiencyError",
]
