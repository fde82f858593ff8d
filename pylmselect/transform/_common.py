"""
Payload types for response-transform search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from pylmselect.regression.solution import LinearSolution


@dataclass(frozen=True)
class TransformCandidate:
    """
    One point of the profile likelihood.

    Attributes:
        parameter: λ for Box-Cox, α for the shifted log
        log_likelihood: Profile log-likelihood ℓ at the parameter
        model: Fit on the transformed response; set only for the maximizer
    """
    parameter: float
    log_likelihood: float
    model: 'LinearSolution | None' = None


@dataclass(frozen=True)
class TransformParams:
    """
    Parameter payload for a transform search.

    Attributes:
        family: 'boxcox' or 'logshift'
        parameters: Grid points that were scored, ascending
        log_likelihoods: ℓ at each grid point
        best: Maximizer (refined off the grid when requested)
        conf_int: (lower, upper) grid points bounding the likelihood
            interval; NaN when the interval is empty
        conf_level: Level of the likelihood interval
        in_interval: Mask of grid points with ℓ ≥ max ℓ − ½χ²₁(conf_level)
    """
    family: str
    parameters: NDArray[np.floating[Any]]
    log_likelihoods: NDArray[np.floating[Any]]
    best: TransformCandidate
    conf_int: tuple[float, float]
    conf_level: float
    in_interval: NDArray[np.bool_]
