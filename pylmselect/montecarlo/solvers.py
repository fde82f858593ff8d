"""
Public API for resampling a fitted linear model.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pylmselect.core.config import resolve_n_jobs, resolve_rank_tol
from pylmselect.core.exceptions import ValidationError
from pylmselect.core.protocols import Backend
from pylmselect.core.validation import check_probability
from pylmselect.montecarlo._ci import CI_TYPES, compute_ci
from pylmselect.montecarlo._common import BootParams, PermutationParams
from pylmselect.montecarlo.backends.cpu import CPUBootstrapBackend, CPUPermutationBackend
from pylmselect.montecarlo.design import (
    PermutationDesign,
    ResidualBootstrapDesign,
    Statistic,
)
from pylmselect.montecarlo.solution import BootstrapSolution, PermutationSolution
from pylmselect.regression.design import Design
from pylmselect.regression.solution import LinearSolution

logger = logging.getLogger(__name__)


def bootstrap(
    model: LinearSolution,
    statistic: Statistic | None = None,
    R: int = 999,
    *,
    seed: int | None = None,
    n_jobs: int | None = None,
    names: Sequence[str] | None = None,
) -> BootstrapSolution:
    """
    Residual bootstrap of a fitted linear model.

    Each replicate draws n residuals with replacement, forms
    y* = fitted + resampled residuals, refits on the same X and records
    statistic(refit).

    Args:
        model: Fitted LinearSolution
        statistic: fn(LinearSolution) -> array; defaults to the coefficients
        R: Number of replicates
        seed: Random seed; identical seeds give identical replicates for
            any n_jobs
        n_jobs: joblib workers; default from pylmselect.core.config
        names: Labels for the statistics

    Returns:
        BootstrapSolution

    Example:
        >>> model = fit(X, y, intercept=True)
        >>> boot = bootstrap(model, R=2000, seed=1)
        >>> boot_ci(boot, type=['perc', 'normal']).ci['perc']
    """
    design = ResidualBootstrapDesign.for_bootstrap(
        model, statistic, R, seed=seed,
        names=tuple(names) if names is not None else None,
    )
    backend: Backend[ResidualBootstrapDesign, BootParams] = CPUBootstrapBackend(
        n_jobs=resolve_n_jobs(n_jobs),
    )
    result = backend.solve(design)
    logger.debug("bootstrap: R=%d failed=%d", design.R, result.params.n_failed)
    return BootstrapSolution(_result=result, _design=design)


def boot_ci(
    boot_out: BootstrapSolution,
    conf_level: float = 0.95,
    type: str | Sequence[str] = "perc",
) -> BootstrapSolution:
    """
    Bootstrap confidence intervals.

    Args:
        boot_out: Result of bootstrap()
        conf_level: Confidence level
        type: 'perc', 'basic', 'normal', 'all', or a list of these

    Returns:
        New BootstrapSolution whose ci dict maps each type to a (k, 2) array
    """
    check_probability(conf_level, 'conf_level')
    if isinstance(type, str):
        types = list(CI_TYPES) if type == "all" else [type]
    else:
        types = list(type)
    if not types:
        raise ValidationError("type must name at least one interval type")

    ci = compute_ci(boot_out.t0, boot_out.t, types, conf_level)
    return boot_out.with_ci(ci, conf_level)


def permutation_test(
    design: Design,
    target: str | int | None = None,
    statistic: Statistic | None = None,
    R: int = 999,
    *,
    seed: int | None = None,
    n_jobs: int | None = None,
    tol: float | None = None,
) -> PermutationSolution:
    """
    Permutation test for a linear model.

    With target None the response is shuffled, testing the global null of
    no relationship (default statistic: overall F). With a predictor name
    only that column is shuffled while the others keep their observed
    values (default statistic: |t| of that predictor).

    The p-value is the fraction of permutations whose statistic is at
    least the observed one in absolute value.

    Raises:
        RankDeficiencyError: If the unpermuted design is rank-deficient
        UnknownTermError: If target is not a column
    """
    tol = resolve_rank_tol(tol)
    perm_design = PermutationDesign.for_permutation(
        design, target, statistic, R, seed=seed, tol=tol,
    )
    backend: Backend[PermutationDesign, PermutationParams] = CPUPermutationBackend(
        n_jobs=resolve_n_jobs(n_jobs), tol=tol,
    )
    result = backend.solve(perm_design)
    logger.debug(
        "permutation_test: target=%s R=%d p=%.4g",
        perm_design.target_name, perm_design.R, result.params.p_value,
    )
    return PermutationSolution(_result=result, _design=perm_design)
