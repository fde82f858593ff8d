"""Runtime configuration for pylmselect.

Two settings are resolved at call time rather than import time:

``n_jobs``
    Worker count for the embarrassingly parallel loops (bootstrap and
    permutation replicates, root branches of the subset search).

``rank_tol``
    Relative tolerance used by the pivoting QR to declare a column
    linearly dependent on the ones before it. The default ``1e-7``
    matches R's ``lm``.

Resolution order (first match wins):
    1. An explicit keyword argument passed to the computing function.
    2. Programmatic override via :func:`set_n_jobs` / :func:`set_rank_tol`.
    3. The ``PYLMSELECT_N_JOBS`` / ``PYLMSELECT_RANK_TOL`` environment
       variables.
    4. Built-in defaults (``1`` worker, ``1e-7``).

Examples:
    Use every core for resampling from the shell::

        export PYLMSELECT_N_JOBS=-1

    Or programmatically::

        import pylmselect
        pylmselect.set_n_jobs(-1)
"""

from __future__ import annotations

import os

from pylmselect.core.exceptions import ValidationError

DEFAULT_N_JOBS = 1
DEFAULT_RANK_TOL = 1e-7

_n_jobs_override: int | None = None
_rank_tol_override: float | None = None


def get_n_jobs() -> int:
    """Return the active worker count (``-1`` means all cores)."""
    if _n_jobs_override is not None:
        return _n_jobs_override

    env = os.environ.get("PYLMSELECT_N_JOBS", "").strip()
    if env:
        try:
            value = int(env)
        except ValueError:
            raise ValidationError(
                f"PYLMSELECT_N_JOBS must be an integer, got {env!r}"
            ) from None
        _check_n_jobs(value)
        return value

    return DEFAULT_N_JOBS


def set_n_jobs(n_jobs: int | None) -> None:
    """Override the worker count.

    Args:
        n_jobs: Positive worker count, ``-1`` for all cores, or ``None``
            to restore the default resolution order.

    Raises:
        ValidationError: If *n_jobs* is zero or below ``-1``.
    """
    global _n_jobs_override
    if n_jobs is not None:
        _check_n_jobs(n_jobs)
    _n_jobs_override = n_jobs


def get_rank_tol() -> float:
    """Return the active rank-detection tolerance."""
    if _rank_tol_override is not None:
        return _rank_tol_override

    env = os.environ.get("PYLMSELECT_RANK_TOL", "").strip()
    if env:
        try:
            value = float(env)
        except ValueError:
            raise ValidationError(
                f"PYLMSELECT_RANK_TOL must be a float, got {env!r}"
            ) from None
        _check_rank_tol(value)
        return value

    return DEFAULT_RANK_TOL


def set_rank_tol(tol: float | None) -> None:
    """Override the rank-detection tolerance (``None`` restores default)."""
    global _rank_tol_override
    if tol is not None:
        _check_rank_tol(tol)
    _rank_tol_override = tol


def resolve_n_jobs(n_jobs: int | None) -> int:
    """Explicit argument if given, else the configured value."""
    if n_jobs is None:
        return get_n_jobs()
    _check_n_jobs(n_jobs)
    return n_jobs


def resolve_rank_tol(tol: float | None) -> float:
    """Explicit argument if given, else the configured value."""
    if tol is None:
        return get_rank_tol()
    _check_rank_tol(tol)
    return tol


def _check_n_jobs(n_jobs: int) -> None:
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs == 0 or n_jobs < -1:
        raise ValidationError(
            f"n_jobs must be a positive integer or -1, got {n_jobs!r}"
        )


def _check_rank_tol(tol: float) -> None:
    if not 0.0 < tol < 1.0:
        raise ValidationError(f"rank tolerance must be in (0, 1), got {tol}")
