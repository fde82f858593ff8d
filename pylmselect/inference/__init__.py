"""
Inference on fitted linear models: nested F-tests, coefficient t-tests,
marginal confidence intervals and joint confidence ellipses.
"""

from pylmselect.inference._common import ConfidenceEllipse, FTestResult, TTestResult
from pylmselect.inference.solvers import (
    conf_int,
    confidence_region,
    drop_term_test,
    f_test,
    t_test,
)

__all__ = [
    "f_test",
    "t_test",
    "drop_term_test",
    "conf_int",
    "confidence_region",
    "FTestResult",
    "TTestResult",
    "ConfidenceEllipse",
]
