"""
Solver dispatch for regression.

This module provides the fit() function (public API), backend selection,
and the naive normal-equations routine kept for numerical comparison.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylmselect.core.config import resolve_rank_tol
from pylmselect.core.exceptions import SingularMatrixError, ValidationError
from pylmselect.core.protocols import Backend
from pylmselect.regression.design import Design
from pylmselect.regression.solution import LinearParams, LinearSolution
from pylmselect.regression.backends.cpu import CPUQRBackend

logger = logging.getLogger(__name__)

# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu', 'cpu_qr']


def fit(
    X: ArrayLike | Design,
    y: ArrayLike | None = None,
    *,
    names: Sequence[str] | None = None,
    intercept: bool = False,
    singular_ok: bool = False,
    tol: float | None = None,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear regression model.
    
    Solves the ordinary least squares problem:
        min_β ||y - Xβ||²
    
    This is the primary public API for linear regression. All input validation,
    backend selection, and result wrapping happens here.
    
    Args:
        X: Design matrix (n x p) or a prebuilt Design.
        y: Response vector (n,). Required unless X is a Design.
        names: Column names when X is an array.
        intercept: Prepend an intercept column when X is an array.
        singular_ok: If False (default), a rank-deficient X raises
            RankDeficiencyError. If True, dependent columns are dropped in
            reverse order of appearance and their coefficients are NaN.
        tol: Rank tolerance for the pivoting QR (default from
            pylmselect.core.config, 1e-7).
        backend: 'auto', 'cpu' or 'cpu_qr' (all the pivoted QR backend).
            
    Returns:
        LinearSolution with coefficients, diagnostics, and summary methods
        
    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions or n < p
        RankDeficiencyError: If X is rank-deficient and singular_ok=False
        
    Example:
        >>> import numpy as np
        >>> from pylmselect.regression import fit
        >>> 
        >>> X = np.random.randn(100, 2)
        >>> y = 1 + X @ [2, 3] + np.random.randn(100) * 0.1
        >>> 
        >>> result = fit(X, y, intercept=True)
        >>> print(result.summary())
    """
    design = _as_design(X, y, names=names, intercept=intercept)
    backend_impl = _get_backend(
        backend, tol=resolve_rank_tol(tol), singular_ok=singular_ok,
    )
    result = backend_impl.solve(design)
    logger.debug(
        "fit: n=%d p=%d rank=%d backend=%s",
        design.n, design.p, result.params.rank, backend_impl.name,
    )
    return LinearSolution(_result=result, _design=design)


def fit_normal_equations(
    X: ArrayLike | Design,
    y: ArrayLike | None = None,
    *,
    names: Sequence[str] | None = None,
    intercept: bool = False,
) -> NDArray[np.floating[Any]]:
    """
    Naive OLS: β = (X'X)⁻¹ X'y by explicit inversion.
    
    Forming X'X squares the condition number of X, so this loses roughly
    twice as many digits as the QR path. It exists only as a comparison
    routine for numerical tests and is never used internally.
    
    Returns:
        Coefficient vector (p,)
        
    Raises:
        SingularMatrixError: If X'X cannot be inverted
    """
    design = _as_design(X, y, names=names, intercept=intercept)
    XtX = design.XtX()
    try:
        XtX_inv = np.linalg.inv(XtX)
    except np.linalg.LinAlgError as e:
        raise SingularMatrixError(
            f"X'X is singular: {e}",
            matrix_name="X'X",
            expected_rank=design.p,
        ) from e
    return XtX_inv @ design.Xty()


def _as_design(
    X: ArrayLike | Design,
    y: ArrayLike | None,
    *,
    names: Sequence[str] | None,
    intercept: bool,
) -> Design:
    """Boundary: validate once here, trust everywhere else."""
    if isinstance(X, Design):
        if y is not None:
            return X.with_response(y)
        return X
    if y is None:
        raise ValidationError("y required when X is an array")
    return Design.from_arrays(X, y, names=names, intercept=intercept)


def _get_backend(
    choice: BackendChoice,
    *,
    tol: float,
    singular_ok: bool,
) -> Backend[Design, LinearParams]:
    """
    Select and instantiate the appropriate backend.
    
    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend(tol=tol, singular_ok=singular_ok)
    raise ValueError(f"Unknown backend: {choice!r}")
