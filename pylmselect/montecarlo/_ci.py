"""
Bootstrap confidence interval computation.

Three interval types, as in R's boot.ci():
- perc: percentile method
- basic: basic (pivotal) bootstrap interval
- normal: bias-corrected normal approximation

Failed (NaN) replicates are dropped column by column before any
quantile is taken.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylmselect.core.exceptions import ValidationError

CI_TYPES = ("perc", "basic", "normal")


def compute_ci(
    t0: NDArray,
    t: NDArray,
    types: list[str],
    conf_level: float,
) -> dict[str, NDArray]:
    """
    Compute bootstrap confidence intervals.

    Args:
        t0: Observed statistics, shape (k,)
        t: Replicates, shape (R, k)
        types: CI types to compute
        conf_level: Confidence level (e.g., 0.95)

    Returns:
        Dict mapping CI type name to NDArray of shape (k, 2).
    """
    alpha = 1.0 - conf_level
    ci_dict: dict[str, NDArray] = {}

    for ci_type in types:
        if ci_type == "normal":
            ci_dict["normal"] = _ci_normal(t0, t, alpha)
        elif ci_type == "basic":
            ci_dict["basic"] = _ci_basic(t0, t, alpha)
        elif ci_type == "perc":
            ci_dict["perc"] = _ci_percentile(t, alpha)
        else:
            raise ValidationError(
                f"Unknown CI type: {ci_type!r}; expected one of {CI_TYPES}"
            )

    return ci_dict


def _finite(column: NDArray) -> NDArray:
    return column[np.isfinite(column)]


def _ci_normal(t0: NDArray, t: NDArray, alpha: float) -> NDArray:
    """
    Normal approximation CI with bias correction.

    CI = [2*t0 - mean(t) + z_{alpha/2} * se,
          2*t0 - mean(t) + z_{1-alpha/2} * se]

    Centered at 2*t0 - mean(t) (bias-corrected), not at t0.
    """
    k = len(t0)
    ci = np.full((k, 2), np.nan, dtype=np.float64)

    z_lo = sp_stats.norm.ppf(alpha / 2.0)
    z_hi = sp_stats.norm.ppf(1.0 - alpha / 2.0)

    for j in range(k):
        t_j = _finite(t[:, j])
        if len(t_j) < 2:
            continue
        center = 2.0 * t0[j] - np.mean(t_j)
        se = np.std(t_j, ddof=1)
        ci[j, 0] = center + z_lo * se
        ci[j, 1] = center + z_hi * se

    return ci


def _ci_basic(t0: NDArray, t: NDArray, alpha: float) -> NDArray:
    """
    Basic (pivotal) bootstrap CI.

    CI = [2*t0 - Q(1-alpha/2), 2*t0 - Q(alpha/2)]

    Note: upper quantile of bootstrap gives lower bound.
    """
    k = len(t0)
    ci = np.full((k, 2), np.nan, dtype=np.float64)

    for j in range(k):
        t_j = _finite(t[:, j])
        if len(t_j) == 0:
            continue
        q_lo = np.quantile(t_j, alpha / 2.0)
        q_hi = np.quantile(t_j, 1.0 - alpha / 2.0)
        ci[j, 0] = 2.0 * t0[j] - q_hi
        ci[j, 1] = 2.0 * t0[j] - q_lo

    return ci


def _ci_percentile(t: NDArray, alpha: float) -> NDArray:
    """
    Percentile bootstrap CI.

    CI = [Q(alpha/2), Q(1-alpha/2)]
    """
    k = t.shape[1]
    ci = np.full((k, 2), np.nan, dtype=np.float64)

    for j in range(k):
        t_j = _finite(t[:, j])
        if len(t_j) == 0:
            continue
        ci[j, 0] = np.quantile(t_j, alpha / 2.0)
        ci[j, 1] = np.quantile(t_j, 1.0 - alpha / 2.0)

    return ci
