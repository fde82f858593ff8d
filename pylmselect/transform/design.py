"""
Design for response-transform search.

TransformDesign holds the regression Design, the transform family and
the grid of parameters to score. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylmselect.core.exceptions import NonPositiveResponseError, ValidationError
from pylmselect.core.validation import check_array, check_finite, check_probability
from pylmselect.regression.design import Design

DEFAULT_LAMBDAS = np.round(np.linspace(-2.0, 2.0, 41), 10)
DEFAULT_ALPHA_OFFSETS = np.arange(0.5, 6.01, 0.25)


@dataclass(frozen=True)
class TransformDesign:
    """
    Frozen transform search specification.

    Attributes:
        design: Regression Design with the untransformed response
        family: 'boxcox' or 'logshift'
        grid: Parameter values to score, ascending and unique
        conf_level: Level of the likelihood-based interval
        refine: Polish the maximizer with a bounded scalar search
        excluded: Grid points dropped because y + α ≤ 0 for some y
    """
    design: Design
    family: str
    grid: NDArray[np.floating[Any]]
    conf_level: float
    refine: bool
    excluded: NDArray[np.floating[Any]]

    @classmethod
    def for_boxcox(
        cls,
        design: Design,
        lambdas: ArrayLike | None = None,
        *,
        conf_level: float = 0.95,
        refine: bool = False,
    ) -> TransformDesign:
        """
        Box-Cox search over λ.

        Raises:
            NonPositiveResponseError: If any yᵢ ≤ 0; use the shifted log
        """
        y = design.y
        bad = y <= 0
        if np.any(bad):
            raise NonPositiveResponseError(
                f"Box-Cox requires a positive response; {int(bad.sum())} "
                f"value(s) <= 0 (min {float(y.min()):.6g}). Use logshift instead.",
                n_nonpositive=int(bad.sum()),
                min_value=float(y.min()),
            )
        grid = DEFAULT_LAMBDAS if lambdas is None else _check_grid(lambdas, 'lambdas')
        check_probability(conf_level, 'conf_level')
        return cls(
            design=design, family='boxcox', grid=grid, conf_level=float(conf_level),
            refine=bool(refine), excluded=np.empty(0),
        )

    @classmethod
    def for_logshift(
        cls,
        design: Design,
        alphas: ArrayLike | None = None,
        *,
        conf_level: float = 0.95,
        refine: bool = False,
    ) -> TransformDesign:
        """
        Shifted-log search over α.

        The default grid starts 0.5 above the smallest admissible shift
        max(0, −min y). Grid points with y + α ≤ 0 for some y are dropped.

        Raises:
            ValidationError: If no grid point is admissible
        """
        y_min = float(design.y.min())
        if alphas is None:
            grid = max(0.0, -y_min) + DEFAULT_ALPHA_OFFSETS
        else:
            grid = _check_grid(alphas, 'alphas')
        check_probability(conf_level, 'conf_level')

        ok = grid + y_min > 0
        if not np.any(ok):
            raise ValidationError(
                f"no admissible shift in alphas: need alpha > {-y_min:.6g}"
            )
        return cls(
            design=design, family='logshift', grid=grid[ok],
            conf_level=float(conf_level), refine=bool(refine), excluded=grid[~ok],
        )


def _check_grid(values: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    grid = check_array(values, name)
    grid = np.atleast_1d(grid).ravel()
    check_finite(grid, name)
    if grid.size == 0:
        raise ValidationError(f"{name}: grid is empty")
    return np.unique(grid)
