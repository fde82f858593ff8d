"""
Profile log-likelihoods for response transformations.

Box-Cox works on the geometric-mean-scaled response

    z_λ = (y^λ − 1) / (λ·ẏ^(λ−1)),   z_0 = ẏ·ln y,

where ẏ is the geometric mean of y. The Jacobian is absorbed into the
scaling, so ℓ(λ) = −(n/2)·ln(RSS(z_λ)/n), which equals
−(n/2)·ln(RSS_λ/n) + (λ − 1)·Σ ln yᵢ for the unscaled transform.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


def boxcox_transform(y: NDArray[np.floating[Any]], lam: float) -> NDArray[np.floating[Any]]:
    """(y^λ − 1)/λ, or ln y at λ = 0. y must be positive."""
    log_y = np.log(y)
    if lam == 0.0:
        return log_y
    # expm1 keeps precision for λ near zero
    return np.expm1(lam * log_y) / lam


def boxcox_scaled(y: NDArray[np.floating[Any]], lam: float) -> NDArray[np.floating[Any]]:
    """Box-Cox transform divided by ẏ^(λ−1)."""
    mean_log = float(np.mean(np.log(y)))
    return boxcox_transform(y, lam) / np.exp((lam - 1.0) * mean_log)


def logshift_transform(y: NDArray[np.floating[Any]], alpha: float) -> NDArray[np.floating[Any]]:
    """ln(y + α). Requires y + α > 0."""
    return np.log(y + alpha)


def gaussian_profile(rss: float, n: int) -> float:
    """−(n/2)·ln(RSS/n); +inf for a perfect fit."""
    if rss <= 0.0:
        return float('inf')
    return -0.5 * n * float(np.log(rss / n))
