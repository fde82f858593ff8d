"""
CPU backend for profile-likelihood transform search.

X is factored once; every grid point refits a transformed response
through that factorization.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats
from scipy.optimize import minimize_scalar

from pylmselect.core.result import Result
from pylmselect.core.compute.timing import Timer
from pylmselect.regression.solution import LinearSolution
from pylmselect.regression.solvers import fit
from pylmselect.transform._common import TransformCandidate, TransformParams
from pylmselect.transform._profile import (
    boxcox_scaled,
    boxcox_transform,
    gaussian_profile,
    logshift_transform,
)
from pylmselect.transform.design import TransformDesign

logger = logging.getLogger(__name__)


class CPUProfileBackend:
    """
    Scores every grid point, picks the maximizer and builds the
    likelihood interval.
    """

    def __init__(self, tol: float = 1e-7):
        self._tol = tol

    @property
    def name(self) -> str:
        return 'cpu_profile'

    def solve(self, design: TransformDesign) -> Result[TransformParams]:
        timer = Timer()
        timer.start()

        y = design.design.y
        n = design.design.n

        with timer.section('factorization'):
            base = fit(design.design, tol=self._tol)

        profile = _profile_function(design.family, base, y, n)
        transform = _transform_function(design.family)

        with timer.section('grid'):
            grid = design.grid
            loglik = np.array([profile(float(v)) for v in grid])

        i_best = int(np.argmax(loglik))
        best_param = float(grid[i_best])
        best_ll = float(loglik[i_best])

        if design.refine and len(grid) > 1:
            with timer.section('refine'):
                lo = float(grid[max(i_best - 1, 0)])
                hi = float(grid[min(i_best + 1, len(grid) - 1)])
                opt = minimize_scalar(
                    lambda v: -profile(v), bounds=(lo, hi), method='bounded',
                )
                if opt.success and -opt.fun > best_ll:
                    best_param, best_ll = float(opt.x), float(-opt.fun)

        cutoff = best_ll - 0.5 * sp_stats.chi2.ppf(design.conf_level, 1)
        in_interval = loglik >= cutoff
        if np.any(in_interval):
            conf_int = (float(grid[in_interval].min()), float(grid[in_interval].max()))
        else:
            conf_int = (float('nan'), float('nan'))

        with timer.section('refit'):
            best_model = base.refit(transform(y, best_param))

        warnings_list: list[str] = []
        if len(design.excluded):
            warnings_list.append(
                f"{len(design.excluded)} grid value(s) excluded because y + alpha <= 0"
            )
        if i_best in (0, len(grid) - 1) and len(grid) > 1:
            warnings_list.append(
                "maximum is at the edge of the grid; widen the grid"
            )
        elif in_interval[0] or in_interval[-1]:
            warnings_list.append(
                "likelihood interval reaches the edge of the grid and may be truncated"
            )

        timer.stop()
        logger.debug(
            "%s: %d grid points, best=%.6g, loglik=%.6g",
            design.family, len(grid), best_param, best_ll,
        )

        return Result(
            params=TransformParams(
                family=design.family,
                parameters=grid.copy(),
                log_likelihoods=loglik,
                best=TransformCandidate(best_param, best_ll, best_model),
                conf_int=conf_int,
                conf_level=design.conf_level,
                in_interval=in_interval,
            ),
            info={
                'family': design.family,
                'n_grid': int(len(grid)),
                'refine': design.refine,
                'excluded': design.excluded.tolist(),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def _profile_function(
    family: str,
    base: LinearSolution,
    y: NDArray[np.floating[Any]],
    n: int,
) -> Callable[[float], float]:
    if family == 'boxcox':
        def profile(lam: float) -> float:
            return gaussian_profile(base.refit(boxcox_scaled(y, lam)).rss, n)
    else:
        def profile(alpha: float) -> float:
            z = logshift_transform(y, alpha)
            return gaussian_profile(base.refit(z).rss, n) - float(np.sum(z))
    return profile


def _transform_function(family: str):
    return boxcox_transform if family == 'boxcox' else logshift_transform
