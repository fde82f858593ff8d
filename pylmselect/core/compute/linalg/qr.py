"""
QR decomposition with limited column pivoting.

Householder QR in which a column whose remaining norm collapses below
``tol`` times its original norm is moved to the end of the pivot order.
This is the LINPACK ``dqrdc2`` rule that R's ``lm`` relies on: linearly
dependent columns are aliased in reverse order of appearance (a later
column is dropped before an earlier one), and the relative order of all
estimable columns is preserved.

Used by the regression backend, and through it by every refit in the
resampling and transform modules, and directly by the subset search.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular


@dataclass(frozen=True)
class QRResult:
    """
    Result of a pivoted QR decomposition X[:, pivot] = Q R.
    
    Attributes:
        Q: Orthonormal basis of the column space (n x rank)
        R: Upper triangular factor in pivoted column order (p x p for n >= p);
           only the leading rank x rank block is meaningful for estimation
        pivot: Column permutation; the first `rank` entries are the
               estimable columns in their original relative order
        rank: Numerical rank
        R11_inv: Inverse of the leading rank x rank block of R;
                 R11_inv @ R11_inv.T is the unscaled covariance of the
                 estimable coefficients
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    pivot: NDArray[np.intp]
    rank: int
    R11_inv: NDArray[np.floating[Any]]
    
    @property
    def R11(self) -> NDArray[np.floating[Any]]:
        """Leading rank x rank block of R (the estimable part)."""
        return self.R[:self.rank, :self.rank]
    
    @property
    def estimable(self) -> NDArray[np.intp]:
        """Original indices of the estimable columns, in original order."""
        return self.pivot[:self.rank]
    
    @property
    def aliased(self) -> NDArray[np.intp]:
        """Original indices of the aliased (dropped) columns."""
        return np.sort(self.pivot[self.rank:])


def qr_pivoted(
    X: NDArray[np.floating[Any]],
    tol: float = 1e-7,
) -> QRResult:
    """
    Householder QR with limited column pivoting.
    
    At step l the remaining norm of the candidate column (rows l..n-1 after
    the previous reflections) is compared with its original norm. If it
    falls below ``tol`` times that norm, the column is rotated to the end
    and the next candidate is tried at the same step.
    
    Args:
        X: Matrix to decompose (n x p)
        tol: Relative tolerance for declaring a column dependent
        
    Returns:
        QRResult with Q (n x rank), R (pivoted), pivot and rank
    """
    A = np.array(X, dtype=np.float64, copy=True)
    n, p = A.shape
    pivot = np.arange(p)
    original_norms = np.linalg.norm(A, axis=0)
    reflectors: list[NDArray[np.floating[Any]]] = []
    
    k = p  # columns not yet rotated to the end
    l = 0
    while l < k and l < n:
        remaining = np.linalg.norm(A[l:, l])
        if remaining <= tol * original_norms[l] or original_norms[l] == 0.0:
            # rotate column l to the end
            order = np.r_[np.arange(l), np.arange(l + 1, p), l]
            A = A[:, order]
            pivot = pivot[order]
            original_norms = original_norms[order]
            k -= 1
            continue
        
        v = A[l:, l].copy()
        alpha = -np.copysign(remaining, v[0])
        v[0] -= alpha
        v /= np.linalg.norm(v)
        A[l:, l:] -= 2.0 * np.outer(v, v @ A[l:, l:])
        A[l + 1:, l] = 0.0
        reflectors.append(v)
        l += 1
    
    rank = l
    R = np.triu(A[:min(n, p), :])
    
    # Q = H_0 H_1 ... H_{rank-1} applied to the first `rank` unit vectors
    Q = np.eye(n, rank)
    for j in range(rank - 1, -1, -1):
        v = reflectors[j]
        Q[j:, :] -= 2.0 * np.outer(v, v @ Q[j:, :])
    
    R11_inv = (
        solve_triangular(R[:rank, :rank], np.eye(rank), lower=False)
        if rank > 0 else np.empty((0, 0))
    )
    
    return QRResult(Q=Q, R=R, pivot=pivot, rank=rank, R11_inv=R11_inv)


def qr_solve(
    qr: QRResult,
    y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Back-substitute for the estimable coefficients given a factorization.
    
    Solves R11 b = Q'y. y may be a vector (n,) or a matrix (n, k) of
    responses sharing the same design; the factorization is reused.
    
    Returns:
        Coefficients of the estimable columns in pivot order,
        shape (rank,) or (rank, k)
    """
    Qty = qr.Q.T @ y
    if qr.rank == 0:
        return Qty
    return solve_triangular(qr.R11, Qty, lower=False)
