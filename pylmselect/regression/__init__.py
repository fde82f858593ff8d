"""
Ordinary least squares regression.

Public API:
    fit(X, y, ...) -> LinearSolution
    fit_normal_equations(X, y) -> coefficients (naive comparison only)
    
The fit() function is the only entry point for fitting. It handles:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

Example:
    >>> from pylmselect.regression import fit, Design
    >>> design = Design.from_dataframe(df, y='mpg', x=['wt', 'hp'])
    >>> result = fit(design)
    >>> print(result.coef_table())
    >>> print(result.summary())
"""

from pylmselect.regression.design import Design, INTERCEPT
from pylmselect.regression.solution import LinearSolution, LinearParams
from pylmselect.regression.solvers import fit, fit_normal_equations

__all__ = [
    "fit",
    "fit_normal_equations",
    "Design",
    "INTERCEPT",
    "LinearSolution",
    "LinearParams",
]
