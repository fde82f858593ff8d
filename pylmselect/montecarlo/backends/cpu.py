"""
CPU backends for residual bootstrap and permutation test.

Each replicate is a pure function of its own spawned SeedSequence, so the
replicate statistics do not depend on how work is split across joblib
workers. Replicates run in contiguous chunks, one chunk per task, and
the chunks are stacked back in replicate order.
"""

from __future__ import annotations

import logging

import numpy as np
from joblib import Parallel, delayed
from numpy.typing import NDArray

from pylmselect.core.exceptions import NumericalError, ValidationError
from pylmselect.core.result import Result
from pylmselect.core.compute.timing import Timer
from pylmselect.regression.solvers import fit
from pylmselect.montecarlo._common import BootParams, PermutationParams
from pylmselect.montecarlo.design import PermutationDesign, ResidualBootstrapDesign

logger = logging.getLogger(__name__)


def _as_vector(value) -> NDArray:
    return np.atleast_1d(np.asarray(value, dtype=np.float64)).ravel()


def _as_scalar(value) -> float:
    arr = np.asarray(value, dtype=np.float64)
    if arr.size != 1:
        raise ValidationError(
            f"permutation statistic must return a scalar, got shape {arr.shape}"
        )
    return float(arr.reshape(()))


def _run_chunks(chunk_fn, seeds: list[np.random.SeedSequence], n_jobs: int) -> list:
    if n_jobs == 1:
        return [chunk_fn(seeds)]
    n_tasks = len(seeds) if n_jobs == -1 else min(len(seeds), 4 * n_jobs)
    chunks = [c.tolist() for c in np.array_split(np.arange(len(seeds)), n_tasks)]
    return Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(chunk_fn)([seeds[i] for i in chunk]) for chunk in chunks
    )


class CPUBootstrapBackend:
    """
    CPU backend for residual bootstrap.

    y* = fitted + residuals[idx] with idx drawn with replacement; each
    replicate refits through the original factorization of X.
    """

    def __init__(self, n_jobs: int = 1):
        self._n_jobs = n_jobs

    @property
    def name(self) -> str:
        return 'cpu_bootstrap'

    def solve(self, design: ResidualBootstrapDesign) -> Result[BootParams]:
        """Run bootstrap and return Result[BootParams]."""
        timer = Timer()
        timer.start()

        model = design.model
        statistic = design.statistic
        fitted = model.fitted_values
        residuals = model.residuals
        n = model.n

        with timer.section('t0_computation'):
            t0 = _as_vector(statistic(model))
        k = len(t0)
        if design.names and len(design.names) != k:
            raise ValidationError(
                f"names has {len(design.names)} labels but the statistic "
                f"returned {k} values"
            )

        def run_chunk(seeds: list[np.random.SeedSequence]) -> tuple[NDArray, int]:
            out = np.full((len(seeds), k), np.nan, dtype=np.float64)
            failed = 0
            for row, ss in enumerate(seeds):
                rng = np.random.default_rng(ss)
                idx = rng.integers(0, n, size=n)
                try:
                    value = _as_vector(statistic(model.refit(fitted + residuals[idx])))
                except NumericalError as e:
                    failed += 1
                    logger.debug("bootstrap replicate failed: %s", e)
                    continue
                if value.shape != (k,):
                    raise ValidationError(
                        f"statistic returned {value.shape[0]} values on a "
                        f"replicate but {k} on the original fit"
                    )
                out[row] = value
            return out, failed

        seeds = np.random.SeedSequence(design.seed).spawn(design.R)
        with timer.section('bootstrap_replicates'):
            parts = _run_chunks(run_chunk, seeds, self._n_jobs)

        t = np.vstack([p[0] for p in parts])
        n_failed = sum(p[1] for p in parts)

        with timer.section('summary_statistics'):
            bias = np.full(k, np.nan)
            se = np.full(k, np.nan)
            for j in range(k):
                t_j = t[:, j][np.isfinite(t[:, j])]
                if len(t_j) >= 2:
                    bias[j] = np.mean(t_j) - t0[j]
                    se[j] = np.std(t_j, ddof=1)

        warnings_list: list[str] = []
        if n_failed:
            warnings_list.append(
                f"{n_failed} of {design.R} bootstrap replicates failed and were excluded"
            )

        timer.stop()

        return Result(
            params=BootParams(
                t0=t0, t=t, R=design.R, bias=bias, se=se, n_failed=n_failed,
            ),
            info={
                'method': 'residual',
                'n_jobs': self._n_jobs,
                'seed': design.seed,
                'names': list(design.names),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


class CPUPermutationBackend:
    """
    CPU backend for regression permutation tests.

    Shuffling the response reuses the factorization of X; shuffling one
    predictor column needs a fresh fit per permutation.
    """

    def __init__(self, n_jobs: int = 1, tol: float = 1e-7):
        self._n_jobs = n_jobs
        self._tol = tol

    @property
    def name(self) -> str:
        return 'cpu_permutation'

    def solve(self, design: PermutationDesign) -> Result[PermutationParams]:
        """Run permutation test and return Result[PermutationParams]."""
        timer = Timer()
        timer.start()

        base = design.design
        model = design.model
        statistic = design.statistic
        target = design.target
        n = base.n
        tol = self._tol

        with timer.section('observed_statistic'):
            observed = _as_scalar(statistic(model))

        if target is None:
            y = base.y

            def refit(perm: NDArray):
                return model.refit(y[perm])
        else:
            column = base.X[:, target]

            def refit(perm: NDArray):
                return fit(base.with_column(target, column[perm]), tol=tol)

        def run_chunk(seeds: list[np.random.SeedSequence]) -> tuple[NDArray, int]:
            out = np.full(len(seeds), np.nan, dtype=np.float64)
            failed = 0
            for row, ss in enumerate(seeds):
                perm = np.random.default_rng(ss).permutation(n)
                try:
                    out[row] = _as_scalar(statistic(refit(perm)))
                except NumericalError as e:
                    failed += 1
                    logger.debug("permutation replicate failed: %s", e)
            return out, failed

        seeds = np.random.SeedSequence(design.seed).spawn(design.R)
        with timer.section('permutations'):
            parts = _run_chunks(run_chunk, seeds, self._n_jobs)

        perm_stats = np.concatenate([p[0] for p in parts])
        n_failed = sum(p[1] for p in parts)

        with timer.section('p_value'):
            ok = perm_stats[np.isfinite(perm_stats)]
            if len(ok) == 0 or not np.isfinite(observed):
                p_value = float('nan')
            else:
                # Relative slack so that exact ties survive rounding.
                threshold = abs(observed) * (1.0 - 1e-12)
                p_value = float(np.mean(np.abs(ok) >= threshold))

        warnings_list: list[str] = []
        if n_failed:
            warnings_list.append(
                f"{n_failed} of {design.R} permutations failed and were excluded"
            )

        timer.stop()

        return Result(
            params=PermutationParams(
                observed_stat=observed,
                perm_stats=perm_stats,
                p_value=p_value,
                R=design.R,
                n_failed=n_failed,
            ),
            info={
                'target': design.target_name,
                'n_jobs': self._n_jobs,
                'seed': design.seed,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
