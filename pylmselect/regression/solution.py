"""
Regression solution types.

Contains the parameter payload and the user-facing solution wrapper
(the fitted model). Both are immutable: derived quantities are computed
on first access from the stored factorization, and a new response
always produces a new LinearSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats

from pylmselect.core.result import Result
from pylmselect.core.compute.linalg.qr import QRResult, qr_pivoted
from pylmselect.core.exceptions import UnknownTermError
from pylmselect.core.validation import check_probability
from pylmselect.regression.design import INTERCEPT

if TYPE_CHECKING:
    import pandas as pd
    from pylmselect.regression.design import Design


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for linear regression.

    This is the immutable data computed by backends. `qr` carries the
    pivot order and R11_inv, the unscaled covariance basis from which
    standard errors are derived without refactoring X.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int
    qr: QRResult


@dataclass(frozen=True)
class LinearSolution:
    """
    User-facing regression results (the fitted model).

    Wraps the backend Result and provides accessors for all regression
    outputs. Aliased (non-estimable) coefficients are NaN, as are their
    standard errors, t-statistics and p-values.
    """
    _result: Result[LinearParams]
    _design: 'Design'

    # === Stored fit ===

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        """Total sum of squares; centered when the model has an intercept."""
        return self._result.params.tss

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def qr(self) -> QRResult:
        return self._result.params.qr

    @property
    def design(self) -> 'Design':
        return self._design

    @property
    def n(self) -> int:
        return self._design.n

    @property
    def p(self) -> int:
        return self._design.p

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._design.column_names

    @property
    def has_intercept(self) -> bool:
        return self._design.has_intercept

    @property
    def aliased(self) -> NDArray[np.bool_]:
        """Boolean mask of non-estimable coefficients."""
        mask = np.zeros(self.p, dtype=bool)
        mask[self.qr.aliased] = True
        return mask

    # === Goodness of fit ===

    @property
    def sigma_squared(self) -> float:
        """Residual variance estimate RSS / (n - rank); NaN with no residual df."""
        df = self.df_residual
        if df <= 0:
            return float('nan')
        return self.rss / df

    @property
    def residual_std_error(self) -> float:
        return float(np.sqrt(self.sigma_squared))

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        df = self.df_residual
        n_eff = self.n - (1 if self.has_intercept else 0)
        if df <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * n_eff / df

    @property
    def f_statistic(self) -> float:
        """
        Overall F against the intercept-only model (or the empty model
        when there is no intercept). NaN when undefined.
        """
        df_model = self.rank - (1 if self.has_intercept else 0)
        df = self.df_residual
        if df_model <= 0 or df <= 0 or self.rss == 0:
            return float('nan')
        return ((self.tss - self.rss) / df_model) / (self.rss / df)

    @property
    def f_p_value(self) -> float:
        f = self.f_statistic
        if np.isnan(f):
            return float('nan')
        df_model = self.rank - (1 if self.has_intercept else 0)
        return float(sp_stats.f.sf(f, df_model, self.df_residual))

    @property
    def log_likelihood(self) -> float:
        """Gaussian log-likelihood at the MLE of the error variance."""
        n = self.n
        return -0.5 * n * (np.log(2.0 * np.pi * self.rss / n) + 1.0)

    @property
    def aic(self) -> float:
        """AIC on the log-likelihood scale, counting the variance (rank + 1)."""
        return -2.0 * self.log_likelihood + 2.0 * (self.rank + 1)

    @property
    def bic(self) -> float:
        return -2.0 * self.log_likelihood + np.log(self.n) * (self.rank + 1)

    # === Coefficient inference ===

    @cached_property
    def unscaled_covariance(self) -> NDArray[np.floating[Any]]:
        """
        (X'X)⁻¹ in original column order, computed as R⁻¹R⁻ᵀ.

        Rows and columns of aliased coefficients are NaN.
        """
        p = self.p
        cov = np.full((p, p), np.nan, dtype=np.float64)
        est = self.qr.estimable
        R_inv = self.qr.R11_inv
        cov[np.ix_(est, est)] = R_inv @ R_inv.T
        return cov

    @cached_property
    def vcov(self) -> NDArray[np.floating[Any]]:
        """Estimated covariance matrix of the coefficients, σ̂²(X'X)⁻¹."""
        return self.sigma_squared * self.unscaled_covariance

    @cached_property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

        Computed as SE(βᵢ) = σ̂·‖row i of R⁻¹‖, never by inverting X'X.
        Aliased coefficients get NaN standard errors.
        """
        se = np.full(self.p, np.nan, dtype=np.float64)
        row_norms = np.linalg.norm(self.qr.R11_inv, axis=1)
        se[self.qr.estimable] = self.residual_std_error * row_norms
        return se

    @cached_property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """t-statistics for coefficients against zero."""
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / self.standard_errors
            t = np.where(np.isfinite(t), t, np.nan)
        return t

    @cached_property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values from t(n - rank)."""
        df = self.df_residual
        if df <= 0:
            return np.full(self.p, np.nan, dtype=np.float64)
        return 2.0 * sp_stats.t.sf(np.abs(self.t_statistics), df)

    def conf_int(self, level: float = 0.95) -> NDArray[np.floating[Any]]:
        """
        Confidence intervals β̂ᵢ ± t_{1−α/2, n−rank}·se(β̂ᵢ), shape (p, 2).
        """
        check_probability(level, 'level')
        q = sp_stats.t.ppf(0.5 + level / 2.0, self.df_residual) if self.df_residual > 0 else np.nan
        half = q * self.standard_errors
        return np.column_stack([self.coefficients - half, self.coefficients + half])

    def coef_table(self, level: float = 0.95) -> 'pd.DataFrame':
        """
        Coefficient table with one row per term.

        Columns: term, estimate, std_error, t_value, p_value, lower, upper.
        Values are the exact float64 results; nothing is rounded.
        """
        import pandas as pd

        ci = self.conf_int(level)
        return pd.DataFrame({
            'term': list(self.column_names),
            'estimate': self.coefficients,
            'std_error': self.standard_errors,
            't_value': self.t_statistics,
            'p_value': self.p_values,
            'lower': ci[:, 0],
            'upper': ci[:, 1],
        })

    def term_index(self, term: str | int) -> int:
        """
        Position of an estimable term.

        Raises:
            UnknownTermError: If the term is not in the model or is aliased
        """
        j = self._design.column_index(term)
        if self.aliased[j]:
            raise UnknownTermError(
                f"term {self.column_names[j]!r} is aliased and has no estimate",
                term=term,
                available=tuple(c for c, a in zip(self.column_names, self.aliased) if not a),
            )
        return j

    # === Diagnostics ===

    @cached_property
    def leverage(self) -> NDArray[np.floating[Any]]:
        """Hat values hᵢᵢ = ‖row i of Q‖²."""
        return np.sum(self.qr.Q ** 2, axis=1)

    @cached_property
    def standardized_residuals(self) -> NDArray[np.floating[Any]]:
        """Internally studentized residuals eᵢ / (σ̂·√(1 − hᵢᵢ))."""
        with np.errstate(divide='ignore', invalid='ignore'):
            r = self.residuals / (self.residual_std_error * np.sqrt(1.0 - self.leverage))
        return np.where(np.isfinite(r), r, np.nan)

    @property
    def tol(self) -> float:
        """Rank tolerance the factorization was computed with."""
        return self._result.info['tol']

    @property
    def condition_number(self) -> float:
        """2-norm condition number of the estimable columns of X."""
        return self._result.info['condition_number']

    @cached_property
    def vif(self) -> NDArray[np.floating[Any]]:
        """
        Variance inflation factors 1 / (1 − R²ⱼ).

        R²ⱼ comes from regressing column j on the other estimable columns
        (intercept included when present). NaN for the intercept and for
        aliased columns; inf for a column perfectly explained by the rest.
        """
        X = self._design.X
        est = [j for j in self.qr.estimable if self.column_names[j] != INTERCEPT]
        out = np.full(self.p, np.nan, dtype=np.float64)
        tol = 1e-7
        for j in est:
            others = [k for k in self.qr.estimable if k != j]
            xj = X[:, j]
            if self.has_intercept:
                tss_j = float(np.sum((xj - xj.mean()) ** 2))
            else:
                tss_j = float(xj @ xj)
            if not others:
                out[j] = 1.0
                continue
            qr_j = qr_pivoted(X[:, others], tol=tol)
            resid = xj - qr_j.Q @ (qr_j.Q.T @ xj)
            rss_j = float(resid @ resid)
            if tss_j == 0:
                out[j] = np.nan
            elif rss_j == 0:
                out[j] = np.inf
            else:
                out[j] = tss_j / rss_j
        return out

    # === Refitting ===

    def refit(self, y: ArrayLike) -> LinearSolution:
        """
        Fit a new response on the same design, reusing the factorization.

        Returns a new LinearSolution; this one is unchanged. Metadata and
        warnings depend on X only and carry over.
        """
        from pylmselect.regression.backends.cpu import params_from_factorization

        design = self._design.with_response(y)
        params = params_from_factorization(design, self.qr, design.y)
        result = Result(
            params=params,
            info=dict(self._result.info),
            timing=None,
            backend_name=self.backend_name,
            warnings=self._result.warnings,
        )
        return LinearSolution(_result=result, _design=design)

    # === Metadata ===

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Generate R-style summary output."""
        width = max(12, max(len(c) for c in self.column_names) + 2)
        lines = [
            "Linear Regression Results",
            "=" * (width + 56),
            f"Observations: {self.n}",
            f"Columns: {self.p}",
            f"Rank: {self.rank}",
            "",
            "Coefficients:",
            f"{'':<{width}} {'Estimate':>14} {'Std. Error':>12} {'t value':>10} {'Pr(>|t|)':>12}",
        ]

        for name, coef, se, t, pv in zip(
            self.column_names, self.coefficients, self.standard_errors,
            self.t_statistics, self.p_values,
        ):
            if np.isnan(coef):
                lines.append(f"{name:<{width}} {'NA':>14} {'NA':>12} {'NA':>10} {'NA':>12}")
            else:
                se_str = f"{se:12.6g}" if not np.isnan(se) else f"{'NA':>12}"
                t_str = f"{t:10.3f}" if not np.isnan(t) else f"{'NA':>10}"
                p_str = f"{pv:12.4g}" if not np.isnan(pv) else f"{'NA':>12}"
                lines.append(f"{name:<{width}} {coef:14.6g} {se_str} {t_str} {p_str}")

        lines.append("-" * (width + 56))
        lines.append(
            f"Residual standard error: {self.residual_std_error:.6g} "
            f"on {self.df_residual} degrees of freedom"
        )
        lines.append(
            f"Multiple R-squared: {self.r_squared:.6f}, "
            f"Adjusted R-squared: {self.adjusted_r_squared:.6f}"
        )
        if not np.isnan(self.f_statistic):
            df_model = self.rank - (1 if self.has_intercept else 0)
            lines.append(
                f"F-statistic: {self.f_statistic:.6g} on {df_model} and "
                f"{self.df_residual} DF, p-value: {self.f_p_value:.4g}"
            )
        lines.append(f"Condition number: {self.condition_number:.4g}")
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self.n}, p={self.p}, "
            f"rank={self.rank}, r_squared={self.r_squared:.4f})"
        )
