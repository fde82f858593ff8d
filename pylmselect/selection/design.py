"""
Design for best-subset selection.

SubsetDesign pins down the search space: which columns are candidates,
which are always in the model, the largest subset size and how many
subsets to keep per size. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from pylmselect.core.exceptions import ValidationError
from pylmselect.core.validation import check_positive_int
from pylmselect.regression.design import INTERCEPT, Design


@dataclass(frozen=True)
class SubsetDesign:
    """
    Frozen search specification.

    Attributes:
        design: The full regression Design
        candidates: Column positions eligible for selection, ascending
        forced: Column positions present in every model (intercept
            included), ascending
        max_size: Largest number of candidates in a subset
        nbest: Subsets kept per size
    """
    design: Design
    candidates: tuple[int, ...]
    forced: tuple[int, ...]
    max_size: int
    nbest: int

    @classmethod
    def for_search(
        cls,
        design: Design,
        max_size: int | None = None,
        *,
        candidates: Sequence[str | int] | None = None,
        force_in: Sequence[str | int] = (),
        nbest: int = 1,
    ) -> SubsetDesign:
        """
        Create a validated SubsetDesign.

        Args:
            design: Regression Design holding every column
            max_size: Largest subset size; defaults to the number of candidates
            candidates: Columns to choose from; defaults to every predictor
                not in force_in
            force_in: Columns kept in every model besides the intercept
            nbest: Number of subsets to keep per size

        Raises:
            UnknownTermError: If a column is not in the design
            ValidationError: If the candidate and forced sets overlap, or a
                size argument is out of range
        """
        forced = {design.column_index(t) for t in force_in}
        if design.has_intercept:
            forced.add(design.column_index(INTERCEPT))

        if candidates is None:
            cand = [j for j in range(design.p) if j not in forced]
        else:
            cand = [design.column_index(t) for t in candidates]
            if len(set(cand)) != len(cand):
                raise ValidationError("duplicate entries in candidates")
            overlap = forced.intersection(cand)
            if overlap:
                names = [design.column_names[j] for j in sorted(overlap)]
                raise ValidationError(
                    f"columns {names} are both candidates and forced into the model"
                )

        if not cand:
            raise ValidationError("no candidate columns to select from")

        if max_size is None:
            max_size = len(cand)
        check_positive_int(max_size, 'max_size')
        if max_size > len(cand):
            raise ValidationError(
                f"max_size={max_size} exceeds the number of candidates ({len(cand)})"
            )
        check_positive_int(nbest, 'nbest')

        return cls(
            design=design,
            candidates=tuple(sorted(cand)),
            forced=tuple(sorted(forced)),
            max_size=int(max_size),
            nbest=int(nbest),
        )

    @property
    def n_candidates(self) -> int:
        return len(self.candidates)

    def columns(self, subset: Sequence[int]) -> list[int]:
        """Design column positions for a subset of candidate ordinals."""
        chosen = {self.candidates[i] for i in subset}
        return sorted(chosen.union(self.forced))
