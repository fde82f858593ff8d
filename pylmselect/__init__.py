"""
pylmselect: least squares regression and model selection.

A QR-based OLS solver with the inference, subset selection, resampling
and transform search built on top of it.

Submodules:
    regression: Designs, the pivoted-QR solver and fitted models
    inference: F-tests, t-tests, confidence intervals and ellipses
    selection: Branch-and-bound best subsets scored by AIC, BIC,
        adjusted R² and Mallows' Cp
    montecarlo: Residual bootstrap and permutation tests
    transform: Box-Cox and shifted-log profile likelihood
"""

__version__ = "0.1.0"

from pylmselect import inference, montecarlo, regression, selection, transform
from pylmselect.core.config import get_n_jobs, get_rank_tol, set_n_jobs, set_rank_tol
from pylmselect.regression import Design, LinearSolution, fit

__all__ = [
    "__version__",
    "regression",
    "inference",
    "selection",
    "montecarlo",
    "transform",
    "Design",
    "LinearSolution",
    "fit",
    "get_n_jobs",
    "set_n_jobs",
    "get_rank_tol",
    "set_rank_tol",
]
