"""
Inference on fitted linear models.

Every routine here takes a LinearSolution and reuses its factorization:
standard errors and covariance blocks come from R⁻¹, never from a fresh
inversion of X'X.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylmselect.core.exceptions import (
    InconsistentSampleError,
    NotNestedError,
    ValidationError,
)
from pylmselect.core.validation import check_probability
from pylmselect.inference._common import (
    VALID_ALTERNATIVES,
    ConfidenceEllipse,
    FTestResult,
    TTestResult,
)
from pylmselect.regression.solution import LinearSolution
from pylmselect.regression.solvers import fit

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


def f_test(full: LinearSolution, reduced: LinearSolution) -> FTestResult:
    """
    F-test of a reduced model against the full model that contains it.

    Args:
        full: The larger model
        reduced: A model whose columns are a subset of full's columns,
            fit to the same response

    Returns:
        FTestResult

    Raises:
        InconsistentSampleError: If the models were fit to different samples
        NotNestedError: If reduced has a column that full lacks, or a shared
            column whose values differ, or no fewer residual df
    """
    if full.n != reduced.n:
        raise InconsistentSampleError(
            f"models were fit to different samples: n={full.n} vs n={reduced.n}",
            n_full=full.n, n_reduced=reduced.n,
        )
    if not np.array_equal(full.design.y, reduced.design.y):
        raise InconsistentSampleError(
            "models were fit to different responses",
            n_full=full.n, n_reduced=reduced.n,
        )

    full_names = full.column_names
    extra = tuple(c for c in reduced.column_names if c not in full_names)
    if extra:
        raise NotNestedError(
            f"reduced model has terms not in the full model: {list(extra)}",
            extra_terms=extra,
        )
    for k, name in enumerate(reduced.column_names):
        j = full_names.index(name)
        if not np.array_equal(full.design.X[:, j], reduced.design.X[:, k]):
            raise NotNestedError(
                f"column {name!r} differs between the two models",
                extra_terms=(name,),
            )

    df_full = full.df_residual
    df_reduced = reduced.df_residual
    if df_full <= 0:
        raise ValidationError(
            f"full model has {df_full} residual degrees of freedom; F undefined"
        )
    if df_reduced <= df_full:
        raise NotNestedError(
            f"reduced model must have more residual df than the full model "
            f"(got {df_reduced} vs {df_full})"
        )

    dropped = tuple(c for c in full_names if c not in reduced.column_names)
    return _f_from_rss(
        rss_full=full.rss, rss_reduced=reduced.rss,
        df_full=df_full, df_reduced=df_reduced, dropped=dropped,
    )


def drop_term_test(model: LinearSolution, term: str | int) -> FTestResult:
    """
    F-test for removing one term from the model.

    The statistic equals the square of the term's t-statistic. The
    reduced model keeps the estimable columns of the full model other
    than the term, so aliased columns never re-enter it, and it is fit
    with the full model's rank tolerance.
    """
    j = model.term_index(term)
    name = model.column_names[j]
    if model.df_residual <= 0:
        raise ValidationError("model has no residual degrees of freedom")

    kept = sorted(int(c) for c in model.qr.estimable if c != j)
    if not kept:
        # The reduced model is empty: RSS₀ = y'y on n df.
        y = model.design.y
        return _f_from_rss(
            rss_full=model.rss, rss_reduced=float(y @ y),
            df_full=model.df_residual, df_reduced=model.n, dropped=(name,),
        )

    reduced = fit(model.design.select(kept), singular_ok=True, tol=model.tol)
    return _f_from_rss(
        rss_full=model.rss, rss_reduced=reduced.rss,
        df_full=model.df_residual, df_reduced=reduced.df_residual,
        dropped=(name,),
    )


def t_test(
    model: LinearSolution,
    term: str | int,
    null_value: float = 0.0,
    alternative: str = "two.sided",
) -> TTestResult:
    """
    t-test of H₀: βᵢ = null_value.

    Args:
        model: Fitted model
        term: Coefficient name or position
        null_value: Hypothesized value c
        alternative: 'two.sided', 'less' or 'greater'
    """
    if alternative not in VALID_ALTERNATIVES:
        raise ValidationError(
            f"alternative must be one of {VALID_ALTERNATIVES}, got {alternative!r}"
        )
    j = model.term_index(term)
    df = model.df_residual
    if df <= 0:
        raise ValidationError("model has no residual degrees of freedom")

    estimate = float(model.coefficients[j])
    se = float(model.standard_errors[j])
    with np.errstate(divide='ignore', invalid='ignore'):
        t = (estimate - null_value) / se

    if alternative == "two.sided":
        p = 2.0 * sp_stats.t.sf(abs(t), df)
    elif alternative == "greater":
        p = sp_stats.t.sf(t, df)
    else:
        p = sp_stats.t.cdf(t, df)

    return TTestResult(
        term=model.column_names[j],
        estimate=estimate,
        std_error=se,
        null_value=float(null_value),
        statistic=float(t),
        df=df,
        p_value=float(min(p, 1.0)),
        alternative=alternative,
    )


def conf_int(
    model: LinearSolution,
    level: float = 0.95,
    terms: Sequence[str | int] | None = None,
) -> 'pd.DataFrame':
    """
    Marginal confidence intervals β̂ᵢ ± t_{1−α/2, n−rank}·se(β̂ᵢ).

    Returns:
        DataFrame with columns term, estimate, lower, upper. Aliased terms
        are included with NaN bounds when terms is None.
    """
    import pandas as pd

    check_probability(level, 'level')
    ci = model.conf_int(level)
    if terms is None:
        idx = list(range(model.p))
    else:
        idx = [model.term_index(t) for t in terms]
    return pd.DataFrame({
        'term': [model.column_names[j] for j in idx],
        'estimate': model.coefficients[idx],
        'lower': ci[idx, 0],
        'upper': ci[idx, 1],
    })


def confidence_region(
    model: LinearSolution,
    terms: Sequence[str | int],
    level: float = 0.95,
) -> ConfidenceEllipse:
    """
    Joint confidence ellipse for two coefficients.

    M is the inverse of the 2x2 block of (X'X)⁻¹ for the chosen terms, read
    off R⁻¹R⁻ᵗ. When the model has exactly these two columns M is the X'X
    block itself.

    Raises:
        ValidationError: If terms does not name two distinct coefficients
        UnknownTermError: If a term is unknown or aliased
    """
    check_probability(level, 'level')
    if len(terms) != 2:
        raise ValidationError(f"confidence_region needs exactly 2 terms, got {len(terms)}")
    idx = [model.term_index(t) for t in terms]
    if idx[0] == idx[1]:
        raise ValidationError("confidence_region needs two distinct terms")
    df = model.df_residual
    if df <= 0:
        raise ValidationError("model has no residual degrees of freedom")

    block = model.unscaled_covariance[np.ix_(idx, idx)]
    M = np.linalg.inv(block)
    M = 0.5 * (M + M.T)
    radius_squared = 2.0 * model.sigma_squared * sp_stats.f.ppf(level, 2, df)

    logger.debug(
        "confidence_region: terms=%s level=%.3f radius^2=%.6g",
        [model.column_names[j] for j in idx], level, radius_squared,
    )
    return ConfidenceEllipse(
        terms=(model.column_names[idx[0]], model.column_names[idx[1]]),
        center=model.coefficients[idx].copy(),
        shape=M,
        radius_squared=float(radius_squared),
        level=float(level),
        df=df,
    )


def _f_from_rss(
    *,
    rss_full: float,
    rss_reduced: float,
    df_full: int,
    df_reduced: int,
    dropped: tuple[str, ...],
) -> FTestResult:
    df_num = df_reduced - df_full
    # Rounding can leave RSS₀ a hair below RSS₁ for a useless term.
    ss = max(rss_reduced - rss_full, 0.0)
    if df_num <= 0:
        F = float("nan")
    elif rss_full <= 0.0:
        # Exact fit: any reduction is infinitely significant.
        F = float("inf") if ss > 0.0 else float("nan")
    else:
        F = (ss / df_num) / (rss_full / df_full)
    if np.isnan(F):
        p = float("nan")
    elif np.isinf(F):
        p = 0.0
    else:
        p = float(sp_stats.f.sf(F, df_num, df_full))
    return FTestResult(
        statistic=float(F),
        df_num=df_num,
        df_den=df_full,
        p_value=p,
        rss_full=float(rss_full),
        rss_reduced=float(rss_reduced),
        dropped_terms=dropped,
    )
