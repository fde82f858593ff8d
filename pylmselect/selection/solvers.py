"""
Public API for best-subset selection.
"""

from __future__ import annotations

import logging
import warnings
from typing import Sequence

from pylmselect.core.config import resolve_n_jobs, resolve_rank_tol
from pylmselect.core.protocols import Backend
from pylmselect.regression.design import Design
from pylmselect.selection._common import SubsetParams
from pylmselect.selection.backends.cpu import CPUSubsetBackend
from pylmselect.selection.design import SubsetDesign
from pylmselect.selection.solution import SubsetSolution

logger = logging.getLogger(__name__)

_MANY_CANDIDATES = 20


def best_subsets(
    design: Design,
    max_size: int | None = None,
    *,
    candidates: Sequence[str | int] | None = None,
    force_in: Sequence[str | int] = (),
    nbest: int = 1,
    method: str = "branch_and_bound",
    n_jobs: int | None = None,
    tol: float | None = None,
) -> SubsetSolution:
    """
    Find the lowest-RSS subsets of each size and score them.

    For every size k = 1..max_size the search returns the nbest subsets of
    k candidate columns with the smallest residual sum of squares, and
    scores each by AIC, BIC, adjusted R² and Mallows' Cp. The intercept
    and force_in columns are in every model and do not count toward k.

    Args:
        design: Regression Design containing every column
        max_size: Largest subset size (default: all candidates)
        candidates: Columns to choose from (default: every predictor not
            in force_in)
        force_in: Columns kept in every model
        nbest: Subsets kept per size
        method: 'branch_and_bound' (default) or 'exhaustive'
        n_jobs: joblib workers; default from pylmselect.core.config
        tol: Rank tolerance for each fit

    Returns:
        SubsetSolution

    Raises:
        UnknownTermError: If a named column is not in the design
        ValidationError: If the search arguments are inconsistent

    Example:
        >>> sol = best_subsets(Design.from_dataframe(df, y='y'), max_size=3)
        >>> sol.best('aic').subset
        ('x1',)
    """
    subset_design = SubsetDesign.for_search(
        design, max_size, candidates=candidates, force_in=force_in, nbest=nbest,
    )
    if subset_design.n_candidates > _MANY_CANDIDATES:
        warnings.warn(
            f"searching subsets of {subset_design.n_candidates} candidates; "
            f"the search may take a long time even with pruning",
            UserWarning,
            stacklevel=2,
        )

    backend: Backend[SubsetDesign, SubsetParams] = CPUSubsetBackend(
        method=method, n_jobs=resolve_n_jobs(n_jobs), tol=resolve_rank_tol(tol),
    )
    result = backend.solve(subset_design)
    logger.debug(
        "best_subsets: %d candidates, max_size=%d, backend=%s",
        subset_design.n_candidates, subset_design.max_size, backend.name,
    )
    return SubsetSolution(_result=result, _design=subset_design)
