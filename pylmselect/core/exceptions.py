"""
Exception hierarchy for pylmselect.

All exceptions inherit from PyLMSelectError to allow catching any
library-specific error. Domain-specific exceptions inherit from the
appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyLMSelectError(Exception):
    """Base exception for all pylmselect errors."""
    pass


class ValidationError(PyLMSelectError):
    """
    Input validation failed.
    
    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    
    Raised when array shapes don't match expected dimensions, when
    multiple arrays have inconsistent shapes, or when a design has
    fewer observations than columns (n < p).
    """
    pass


class UnknownTermError(ValidationError):
    """
    A requested term is not an estimable coefficient of the model.
    
    Attributes:
        term: The term that was requested
        available: Terms that could have been requested
    """
    
    def __init__(
        self,
        message: str,
        term: str | int | None = None,
        available: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.term = term
        self.available = available


class NotNestedError(ValidationError):
    """
    Two models passed to a comparison are not nested.
    
    Attributes:
        extra_terms: Terms of the reduced model missing from the full model
    """
    
    def __init__(self, message: str, extra_terms: tuple[str, ...] = ()):
        super().__init__(message)
        self.extra_terms = extra_terms


class InconsistentSampleError(ValidationError):
    """
    Two models were not fit on the same observations.
    
    Attributes:
        n_full: Observations behind the full model
        n_reduced: Observations behind the reduced model
    """
    
    def __init__(
        self,
        message: str,
        n_full: int | None = None,
        n_reduced: int | None = None,
    ):
        super().__init__(message)
        self.n_full = n_full
        self.n_reduced = n_reduced


class NonPositiveResponseError(ValidationError):
    """
    A power transform requires a strictly positive response.
    
    Attributes:
        n_nonpositive: Number of responses <= 0
        min_value: Smallest response value
    """
    
    def __init__(
        self,
        message: str,
        n_nonpositive: int | None = None,
        min_value: float | None = None,
    ):
        super().__init__(message)
        self.n_nonpositive = n_nonpositive
        self.min_value = min_value


class NumericalError(PyLMSelectError):
    """
    Numerical computation failed.
    
    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.
    
    Raised when a matrix operation requires invertibility but the matrix
    is singular or numerically rank-deficient.
    
    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """
    
    def __init__(
        self, 
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class RankDeficiencyError(SingularMatrixError):
    """
    Design matrix does not have full column rank.
    
    Detected by the pivoting QR factorization, never by a failed inverse.
    
    Attributes:
        aliased: Names of the columns that depend linearly on earlier ones
    """
    
    def __init__(
        self,
        message: str,
        matrix_name: str | None = 'X',
        rank: int | None = None,
        expected_rank: int | None = None,
        aliased: tuple[str, ...] = (),
    ):
        super().__init__(
            message,
            matrix_name=matrix_name,
            rank=rank,
            expected_rank=expected_rank,
        )
        self.aliased = aliased
