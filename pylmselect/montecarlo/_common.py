"""
Common data structures for resampling.

BootParams and PermutationParams are the parameter payloads wrapped by
Result[P] and exposed through Solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class BootParams:
    """
    Parameter payload for bootstrap results.

    - t0: statistic(s) on the original fit
    - t: replicate statistics (R rows, k columns); failed replicates are NaN
    - bias: mean(t) - t0 over successful replicates
    - se: sd(t) over successful replicates
    - ci: confidence intervals (populated by boot_ci)
    """
    t0: NDArray[np.floating[Any]]              # shape (k,)
    t: NDArray[np.floating[Any]]               # shape (R, k)
    R: int
    bias: NDArray[np.floating[Any]]            # shape (k,)
    se: NDArray[np.floating[Any]]              # shape (k,)
    n_failed: int = 0
    ci: dict[str, NDArray] | None = None       # keyed by CI type, each (k, 2)
    ci_conf_level: float | None = None


@dataclass(frozen=True)
class PermutationParams:
    """
    Parameter payload for permutation test results.

    - observed_stat: statistic on the unpermuted data
    - perm_stats: statistics from R permutations; failed ones are NaN
    - p_value: fraction of successful permutations with
      |perm_stat| >= |observed_stat|
    """
    observed_stat: float
    perm_stats: NDArray[np.floating[Any]]      # shape (R,)
    p_value: float
    R: int
    n_failed: int = 0
