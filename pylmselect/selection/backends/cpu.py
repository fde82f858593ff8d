"""
CPU backend for best-subset selection.

Runs the branch-and-bound (or exhaustive) search, optionally splitting
the subsets by their first candidate across joblib workers, then scores
the surviving subsets on every criterion.
"""

from __future__ import annotations

import logging
import math
from functools import reduce

from joblib import Parallel, delayed

from pylmselect.core.result import Result
from pylmselect.core.compute.timing import Timer
from pylmselect.regression.solvers import fit
from pylmselect.selection._common import CriterionScore, SubsetParams
from pylmselect.selection._leaps import (
    SearchOutcome,
    SubsetFitter,
    branch_and_bound,
    exhaustive,
    root_node,
    search_branch,
)
from pylmselect.selection.design import SubsetDesign

logger = logging.getLogger(__name__)

VALID_METHODS = ("branch_and_bound", "exhaustive")


class CPUSubsetBackend:
    """
    CPU backend for subset search.

    Args:
        method: 'branch_and_bound' or 'exhaustive'
        n_jobs: joblib worker count; 1 runs in the calling thread
        tol: Rank tolerance passed to every fit
    """

    def __init__(self, method: str = "branch_and_bound", n_jobs: int = 1, tol: float = 1e-7):
        if method not in VALID_METHODS:
            raise ValueError(f"method must be one of {VALID_METHODS}, got {method!r}")
        self._method = method
        self._n_jobs = n_jobs
        self._tol = tol

    @property
    def name(self) -> str:
        return 'cpu_leaps' if self._method == "branch_and_bound" else 'cpu_exhaustive'

    def solve(self, design: SubsetDesign) -> Result[SubsetParams]:
        """Search and score; returns Result[SubsetParams]."""
        timer = Timer()
        timer.start()

        fitter = SubsetFitter(design, self._tol)
        base = design.design
        warnings_list: list[str] = []

        with timer.section('full_model'):
            full_cols = design.columns(range(design.n_candidates))
            full = fit(base.select(full_cols), tol=self._tol, singular_ok=True)
            sigma2_full = full.sigma_squared
            tss = full.tss

        if not (sigma2_full > 0):
            warnings_list.append(
                "full model leaves no residual variance; Cp is undefined"
            )

        with timer.section('search'):
            outcome = self._search(fitter, design)

        with timer.section('scoring'):
            scores = tuple(
                score_subset(design, rss, subset, sigma2_full, tss)
                for k in sorted(outcome.best)
                for rss, subset in outcome.best[k]
            )

        if outcome.n_invalid:
            warnings_list.append(
                f"{outcome.n_invalid} rank-deficient subset(s) skipped"
            )

        timer.stop()
        logger.debug(
            "subset search: method=%s evaluated=%d pruned=%d invalid=%d",
            self._method, outcome.n_evaluated, outcome.n_pruned, outcome.n_invalid,
        )

        return Result(
            params=SubsetParams(
                scores=scores,
                n_evaluated=outcome.n_evaluated,
                n_invalid=outcome.n_invalid,
                n_pruned=outcome.n_pruned,
                sigma_squared_full=float(sigma2_full),
                tss=float(tss),
            ),
            info={
                'method': self._method,
                'n_candidates': design.n_candidates,
                'max_size': design.max_size,
                'nbest': design.nbest,
                'n_jobs': self._n_jobs,
                'forced': [base.column_names[j] for j in design.forced],
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )

    def _search(self, fitter: SubsetFitter, design: SubsetDesign) -> SearchOutcome:
        max_size, nbest = design.max_size, design.nbest

        if self._n_jobs == 1:
            if self._method == "exhaustive":
                return exhaustive(fitter, max_size, nbest)
            return branch_and_bound(fitter, [root_node(fitter)], max_size, nbest)

        # Subsets partition by their smallest candidate; each part is
        # searched independently and the partial tables are merged.
        if self._method == "exhaustive":
            parts = Parallel(n_jobs=self._n_jobs, prefer="threads")(
                delayed(exhaustive)(fitter, max_size, nbest, [first])
                for first in range(design.n_candidates)
            )
        else:
            parts = Parallel(n_jobs=self._n_jobs, prefer="threads")(
                delayed(search_branch)(fitter, first, max_size, nbest)
                for first in range(design.n_candidates)
            )
        return reduce(SearchOutcome.merge, parts)


def score_subset(
    design: SubsetDesign,
    rss: float,
    subset: tuple[int, ...],
    sigma2_full: float,
    tss: float,
) -> CriterionScore:
    """
    Compute every criterion for one subset.

    m counts estimated coefficients (intercept and forced columns
    included). AIC and BIC drop the constant n(1 + ln 2π), so only
    differences between subsets are meaningful.
    """
    base = design.design
    n = base.n
    cols = design.columns(subset)
    m = len(cols)
    indices = tuple(design.candidates[i] for i in subset)

    log_term = n * math.log(rss / n) if rss > 0 else -math.inf
    df_tss = n - 1 if base.has_intercept else n
    if n - m > 0 and tss > 0:
        adj_r2 = 1.0 - (rss / (n - m)) / (tss / df_tss)
    else:
        adj_r2 = math.nan
    cp = rss / sigma2_full + 2 * m - n if sigma2_full > 0 else math.nan

    return CriterionScore(
        indices=indices,
        subset=tuple(base.column_names[j] for j in indices),
        terms=tuple(base.column_names[j] for j in cols),
        size=len(subset),
        n_params=m,
        rss=float(rss),
        aic=log_term + 2 * m,
        bic=log_term + math.log(n) * m,
        adjusted_r_squared=adj_r2,
        cp=cp,
    )
