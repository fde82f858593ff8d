"""
Shared payload types for best-subset selection.
"""

from __future__ import annotations

from dataclasses import dataclass
import math


CRITERIA = ("aic", "bic", "adjusted_r_squared", "cp")


@dataclass(frozen=True)
class CriterionScore:
    """
    Score of one candidate subset.

    Attributes:
        indices: Design column positions of the chosen candidates, ascending
        subset: Names of the chosen candidates
        terms: Every column in the fitted model (intercept and forced
            columns included), in design order
        size: k, number of chosen candidates
        n_params: m, number of estimated coefficients
        rss: Residual sum of squares
        aic: n·ln(RSS/n) + 2m
        bic: n·ln(RSS/n) + ln(n)·m
        adjusted_r_squared: 1 − (RSS/(n − m))/(TSS/df_tss)
        cp: RSS/σ̂²_full + 2m − n
    """
    indices: tuple[int, ...]
    subset: tuple[str, ...]
    terms: tuple[str, ...]
    size: int
    n_params: int
    rss: float
    aic: float
    bic: float
    adjusted_r_squared: float
    cp: float

    def value(self, criterion: str) -> float:
        """Criterion value oriented so that smaller is better."""
        if criterion == "adjusted_r_squared":
            return -self.adjusted_r_squared
        return getattr(self, criterion)

    def sort_key(self, criterion: str) -> tuple:
        """Explicit ranking: criterion, then smaller subset, then index order."""
        v = self.value(criterion)
        return (math.inf if math.isnan(v) else v, self.size, self.indices)


@dataclass(frozen=True)
class SubsetParams:
    """
    Parameter payload for a subset search.

    Attributes:
        scores: Up to nbest CriterionScore per size, ordered by size then
            RSS then indices
        n_evaluated: Number of subsets actually fitted and scored
        n_invalid: Subsets skipped because they were rank-deficient
        n_pruned: Search nodes discarded by the RSS bound
        sigma_squared_full: σ̂² of the model holding every candidate
        tss: Total sum of squares used by adjusted R²
    """
    scores: tuple[CriterionScore, ...]
    n_evaluated: int
    n_invalid: int
    n_pruned: int
    sigma_squared_full: float
    tss: float
