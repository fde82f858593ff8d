"""
CPU reference backend for linear regression.

Uses Householder QR with limited column pivoting to solve the least
squares problem without ever forming X'X. This is the reference
implementation that replicates R's lm() behavior, including its rule
for aliasing linearly dependent columns.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylmselect.core.result import Result
from pylmselect.core.compute.timing import Timer
from pylmselect.core.compute.tolerances import CONDITION_THRESHOLD
from pylmselect.core.compute.linalg.qr import QRResult, qr_pivoted, qr_solve
from pylmselect.core.exceptions import RankDeficiencyError
from pylmselect.regression.design import Design
from pylmselect.regression.solution import LinearParams


class CPUQRBackend:
    """
    CPU backend using pivoted QR decomposition.

    Implements the Backend protocol for Design -> LinearParams.

    Args:
        tol: Relative rank tolerance for the pivoting QR
        singular_ok: If False (default), a rank-deficient design raises
            RankDeficiencyError. If True, dependent columns are aliased in
            reverse order of appearance and get NaN coefficients.
    """

    def __init__(self, tol: float = 1e-7, singular_ok: bool = False):
        self._tol = tol
        self._singular_ok = singular_ok

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: Design) -> Result[LinearParams]:
        """
        Solve OLS via pivoted QR decomposition.

        Algorithm:
            1. Compute QR decomposition: X[:, pivot] = QR
            2. Solve: β = R⁻¹ Q'y by back substitution
            3. Compute residuals, fitted values, and diagnostics

        Raises:
            RankDeficiencyError: If X is rank-deficient and singular_ok=False
        """
        timer = Timer()
        timer.start()

        with timer.section('qr_decomposition'):
            qr = qr_pivoted(design.X, tol=self._tol)

        if qr.rank < design.p and not self._singular_ok:
            aliased = tuple(design.column_names[j] for j in qr.aliased)
            raise RankDeficiencyError(
                f"Design matrix is rank-deficient: rank={qr.rank}, expected={design.p}. "
                f"Columns {list(aliased)} are linear combinations of earlier columns.",
                rank=qr.rank,
                expected_rank=design.p,
                aliased=aliased,
            )

        with timer.section('solve'):
            params = params_from_factorization(design, qr, design.y)

        with timer.section('diagnostics'):
            cond = condition_number(qr)

        timer.stop()

        return Result(
            params=params,
            info=factorization_info(design, qr, tol=self._tol, cond=cond),
            timing=timer.result(),
            backend_name=self.name,
            warnings=factorization_warnings(design, qr, cond=cond),
        )


def params_from_factorization(
    design: Design,
    qr: QRResult,
    y: NDArray[np.floating[Any]],
) -> LinearParams:
    """
    Build LinearParams for response y from an existing factorization of X.

    Only Q'y and one triangular solve depend on y, so refitting a new
    response costs O(np) instead of a new factorization.
    """
    p = design.p
    coefficients = np.full(p, np.nan, dtype=np.float64)
    if qr.rank > 0:
        coefficients[qr.estimable] = qr_solve(qr, y)

    fitted_values = qr.Q @ (qr.Q.T @ y)
    residuals = y - fitted_values
    rss = float(residuals @ residuals)

    if design.has_intercept:
        tss = float(np.sum((y - np.mean(y)) ** 2))
    else:
        tss = float(y @ y)

    return LinearParams(
        coefficients=coefficients,
        residuals=residuals,
        fitted_values=fitted_values,
        rss=rss,
        tss=tss,
        rank=qr.rank,
        df_residual=design.n - qr.rank,
        qr=qr,
    )


def factorization_info(
    design: Design,
    qr: QRResult,
    *,
    tol: float,
    cond: float,
) -> dict[str, Any]:
    """
    Metadata shared by every fit that uses this factorization.

    Depends on X only, so a refit with a new response reuses it as is.
    """
    return {
        'method': 'qr',
        'tol': tol,
        'rank': qr.rank,
        'pivot': qr.pivot.tolist(),
        'aliased': [design.column_names[j] for j in qr.aliased],
        'condition_number': cond,
    }


def factorization_warnings(
    design: Design,
    qr: QRResult,
    *,
    cond: float,
) -> tuple[str, ...]:
    """Non-fatal diagnostics: aliasing and ill-conditioning."""
    warnings_list: list[str] = []
    if qr.rank < design.p:
        aliased = [design.column_names[j] for j in qr.aliased]
        warnings_list.append(
            f"{len(aliased)} coefficient(s) not estimable because of "
            f"singularities: {aliased}"
        )
    if cond > CONDITION_THRESHOLD:
        warnings_list.append(
            f"ill-conditioned design: condition number {cond:.3g} exceeds "
            f"{CONDITION_THRESHOLD:.0e}; check variance inflation factors"
        )
    return tuple(warnings_list)


def condition_number(qr: QRResult) -> float:
    # cond(X[:, estimable]) == cond(R11): same singular values
    if qr.rank == 0:
        return float('inf')
    return float(np.linalg.cond(qr.R11))
