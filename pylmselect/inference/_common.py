"""
Result types for model-based inference.

Each test returns a frozen record in the spirit of R's htest/anova
objects: the statistic, its reference distribution parameters and the
p-value, plus the ingredients a caller needs to recompute them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import cholesky, solve_triangular


VALID_ALTERNATIVES = ("two.sided", "less", "greater")


@dataclass(frozen=True)
class FTestResult:
    """
    Nested-model F-test.

    F = ((RSS₀ − RSS₁)/(df₀ − df₁)) / (RSS₁/df₁), referred to
    F(df₀ − df₁, df₁).

    Attributes:
        statistic: F value
        df_num: df₀ − df₁
        df_den: df₁, residual df of the full model
        p_value: Upper-tail probability
        rss_full: RSS₁
        rss_reduced: RSS₀
        dropped_terms: Terms in the full model but not in the reduced one
    """
    statistic: float
    df_num: int
    df_den: int
    p_value: float
    rss_full: float
    rss_reduced: float
    dropped_terms: tuple[str, ...]

    def summary(self) -> str:
        """Two-row analysis of variance table."""
        ss = self.rss_reduced - self.rss_full
        lines = [
            "Analysis of Variance Table",
            "",
            f"Dropped terms: {', '.join(self.dropped_terms) or '(none)'}",
            f"{'':<10} {'Res.Df':>8} {'RSS':>14} {'Df':>4} {'Sum of Sq':>14} {'F':>10} {'Pr(>F)':>10}",
            f"{'reduced':<10} {self.df_num + self.df_den:>8d} {self.rss_reduced:14.6g}",
            f"{'full':<10} {self.df_den:>8d} {self.rss_full:14.6g} {self.df_num:>4d} "
            f"{ss:14.6g} {self.statistic:10.4g} {self.p_value:10.4g}",
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class TTestResult:
    """
    Single-coefficient t-test tᵢ = (β̂ᵢ − c)/se(β̂ᵢ) on t(n − rank).
    """
    term: str
    estimate: float
    std_error: float
    null_value: float
    statistic: float
    df: int
    p_value: float
    alternative: str

    def summary(self) -> str:
        return (
            f"t-test for {self.term}: estimate={self.estimate:.6g}, "
            f"se={self.std_error:.6g}, H0 value={self.null_value:.6g}\n"
            f"t = {self.statistic:.6g}, df = {self.df}, "
            f"p-value ({self.alternative}) = {self.p_value:.4g}"
        )


@dataclass(frozen=True)
class ConfidenceEllipse:
    """
    Joint confidence region for two coefficients.

    The region is {β : (β̂ − β)ᵗ M (β̂ − β) ≤ radius_squared} with
    radius_squared = 2σ̂²F_{2,df}(level).

    Attributes:
        terms: The two coefficient names
        center: β̂ for the two terms
        shape: M, the 2x2 positive definite matrix
        radius_squared: Right-hand side of the defining inequality
        level: Confidence level
        df: Residual degrees of freedom
    """
    terms: tuple[str, str]
    center: NDArray[np.floating[Any]]
    shape: NDArray[np.floating[Any]]
    radius_squared: float
    level: float
    df: int

    def contains(self, point: ArrayLike) -> bool:
        """True if the point lies inside or on the ellipse."""
        d = np.asarray(point, dtype=np.float64) - self.center
        return bool(d @ self.shape @ d <= self.radius_squared)

    @property
    def semi_axes(self) -> NDArray[np.floating[Any]]:
        """Semi-axis lengths, largest first."""
        eigvals = np.linalg.eigvalsh(self.shape)
        return np.sort(np.sqrt(self.radius_squared / eigvals))[::-1]

    def boundary(self, n_points: int = 100) -> NDArray[np.floating[Any]]:
        """
        Points on the ellipse boundary, shape (n_points, 2).

        With M = LLᵗ, x = √r²·L⁻ᵗu maps the unit circle onto the boundary.
        """
        theta = np.linspace(0.0, 2.0 * np.pi, n_points)
        u = np.vstack([np.cos(theta), np.sin(theta)])
        L = cholesky(self.shape, lower=True)
        x = solve_triangular(L.T, u, lower=False)
        return (self.center[:, None] + np.sqrt(self.radius_squared) * x).T
