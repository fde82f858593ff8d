"""
Design classes for resampling a fitted regression.

ResidualBootstrapDesign and PermutationDesign encapsulate all inputs
needed by backends to perform resampling. Immutable, validated at
construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike

from pylmselect.core.exceptions import ValidationError
from pylmselect.core.validation import check_positive_int
from pylmselect.regression.design import INTERCEPT, Design
from pylmselect.regression.solution import LinearSolution
from pylmselect.regression.solvers import fit

Statistic = Callable[[LinearSolution], ArrayLike]


def _coefficients(model: LinearSolution) -> np.ndarray:
    return model.coefficients


def _global_f(model: LinearSolution) -> float:
    return model.f_statistic


@dataclass(frozen=True)
class ResidualBootstrapDesign:
    """
    Frozen design for residual bootstrap.

    Attributes:
        model: The fitted model whose residuals are resampled
        statistic: fn(LinearSolution) -> (k,) array or scalar
        names: Labels of the k statistics
        R: Number of bootstrap replicates
        seed: Root seed; replicate i uses the i-th spawned child
    """
    model: LinearSolution
    statistic: Statistic
    names: tuple[str, ...]
    R: int
    seed: int | None

    @classmethod
    def for_bootstrap(
        cls,
        model: LinearSolution,
        statistic: Statistic | None = None,
        R: int = 999,
        *,
        seed: int | None = None,
        names: tuple[str, ...] | None = None,
    ) -> ResidualBootstrapDesign:
        """
        Create a bootstrap design with validation.

        Args:
            model: Fitted LinearSolution
            statistic: Function of a refit model; defaults to the coefficients
            R: Number of bootstrap replicates, >= 2
            seed: Random seed
            names: Labels for the statistics; defaults to the column names
                for the default statistic and t1, t2, ... otherwise
        """
        check_positive_int(R, 'R')
        if R < 2:
            raise ValidationError(f"R must be >= 2, got {R}")
        if model.df_residual <= 0:
            raise ValidationError(
                "model has no residual degrees of freedom; nothing to resample"
            )

        if statistic is None:
            statistic = _coefficients
            if names is None:
                names = model.column_names
        elif not callable(statistic):
            raise ValidationError("statistic must be callable")

        return cls(
            model=model,
            statistic=statistic,
            names=tuple(names) if names is not None else (),
            R=int(R),
            seed=seed,
        )


@dataclass(frozen=True)
class PermutationDesign:
    """
    Frozen design for a regression permutation test.

    Attributes:
        design: Regression Design
        model: The fit on the unpermuted data
        target: Column position to shuffle, or None to shuffle the response
        statistic: fn(LinearSolution) -> scalar
        R: Number of permutations
        seed: Root seed; permutation i uses the i-th spawned child
    """
    design: Design
    model: LinearSolution
    target: int | None
    statistic: Statistic
    R: int
    seed: int | None

    @classmethod
    def for_permutation(
        cls,
        design: Design,
        target: str | int | None = None,
        statistic: Statistic | None = None,
        R: int = 999,
        *,
        seed: int | None = None,
        tol: float | None = None,
    ) -> PermutationDesign:
        """
        Create a permutation design with validation.

        With target None the response is shuffled and the default statistic
        is the overall F. With a named predictor that column is shuffled,
        the others stay fixed, and the default statistic is |t| of the
        column.

        Raises:
            UnknownTermError: If target is not a column
            ValidationError: If target is the intercept or R is invalid
        """
        check_positive_int(R, 'R')
        target_idx = None
        if target is not None:
            target_idx = design.column_index(target)
            if design.column_names[target_idx] == INTERCEPT:
                raise ValidationError("cannot permute the intercept column")

        if statistic is None:
            if target_idx is None:
                statistic = _global_f
            else:
                statistic = _AbsT(design.column_names[target_idx])
        elif not callable(statistic):
            raise ValidationError("statistic must be callable")

        model = fit(design, tol=tol)
        return cls(
            design=design,
            model=model,
            target=target_idx,
            statistic=statistic,
            R=int(R),
            seed=seed,
        )

    @property
    def target_name(self) -> str | None:
        if self.target is None:
            return None
        return self.design.column_names[self.target]


@dataclass(frozen=True)
class _AbsT:
    term: str

    def __call__(self, model: LinearSolution) -> float:
        return abs(float(model.t_statistics[model.term_index(self.term)]))
