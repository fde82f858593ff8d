"""
Solution type for best-subset selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from pylmselect.core.exceptions import ValidationError
from pylmselect.core.result import Result
from pylmselect.selection._common import CRITERIA, CriterionScore, SubsetParams

if TYPE_CHECKING:
    import pandas as pd
    from pylmselect.selection.design import SubsetDesign


@dataclass(frozen=True)
class SubsetSolution:
    """
    Ranked subsets from a best-subset search.

    `scores` holds up to nbest subsets per size, ordered by size, then
    RSS, then column-index order. The first entry for each size has the
    minimal RSS among all valid subsets of that size.
    """
    _result: Result[SubsetParams]
    _design: 'SubsetDesign'

    @property
    def scores(self) -> tuple[CriterionScore, ...]:
        return self._result.params.scores

    @property
    def n_evaluated(self) -> int:
        """Number of subsets fitted and scored."""
        return self._result.params.n_evaluated

    @property
    def n_invalid(self) -> int:
        """Number of rank-deficient subsets skipped."""
        return self._result.params.n_invalid

    @property
    def n_pruned(self) -> int:
        return self._result.params.n_pruned

    @property
    def sigma_squared_full(self) -> float:
        """σ̂² of the model holding every candidate (the Cp denominator)."""
        return self._result.params.sigma_squared_full

    @property
    def candidates(self) -> tuple[str, ...]:
        names = self._design.design.column_names
        return tuple(names[j] for j in self._design.candidates)

    @property
    def forced(self) -> tuple[str, ...]:
        names = self._design.design.column_names
        return tuple(names[j] for j in self._design.forced)

    def best_per_size(self) -> dict[int, CriterionScore]:
        """Lowest-RSS subset of each size."""
        out: dict[int, CriterionScore] = {}
        for s in self.scores:
            out.setdefault(s.size, s)
        return out

    def ranked(self, criterion: str = "aic") -> list[CriterionScore]:
        """
        All scored subsets, best first under the given criterion.

        Ties go to the smaller subset, then to the lower column indices.
        """
        _check_criterion(criterion)
        return sorted(self.scores, key=lambda s: s.sort_key(criterion))

    def best(self, criterion: str = "aic") -> CriterionScore:
        """Best subset under 'aic', 'bic', 'adjusted_r_squared' or 'cp'."""
        ranked = self.ranked(criterion)
        if not ranked:
            raise ValidationError("no valid subsets were found")
        return ranked[0]

    def to_dataframe(self) -> 'pd.DataFrame':
        """One row per scored subset, exact values."""
        import pandas as pd

        return pd.DataFrame({
            'size': [s.size for s in self.scores],
            'subset': [", ".join(s.subset) for s in self.scores],
            'n_params': [s.n_params for s in self.scores],
            'rss': [s.rss for s in self.scores],
            'aic': [s.aic for s in self.scores],
            'bic': [s.bic for s in self.scores],
            'adjusted_r_squared': [s.adjusted_r_squared for s in self.scores],
            'cp': [s.cp for s in self.scores],
        })

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        lines = [
            "Best Subset Selection",
            "=" * 72,
            f"Method: {self.info.get('method')}   Candidates: {len(self.candidates)}"
            f"   Forced: {', '.join(self.forced) or '(none)'}",
            f"Evaluated: {self.n_evaluated}   Pruned: {self.n_pruned}"
            f"   Invalid: {self.n_invalid}",
            "",
            f"{'Size':>4}  {'RSS':>12} {'AIC':>10} {'BIC':>10} {'Adj R2':>8} {'Cp':>9}  Subset",
        ]
        for s in self.scores:
            lines.append(
                f"{s.size:>4}  {s.rss:12.6g} {s.aic:10.4f} {s.bic:10.4f} "
                f"{s.adjusted_r_squared:8.4f} {s.cp:9.3f}  {', '.join(s.subset)}"
            )
        if self.scores:
            lines.append("")
            for crit in CRITERIA:
                lines.append(f"Best by {crit}: {', '.join(self.best(crit).subset)}")
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SubsetSolution(candidates={len(self.candidates)}, "
            f"max_size={self._design.max_size}, scored={len(self.scores)})"
        )


def _check_criterion(criterion: str) -> None:
    if criterion not in CRITERIA:
        raise ValidationError(f"criterion must be one of {CRITERIA}, got {criterion!r}")
