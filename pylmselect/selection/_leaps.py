"""
Branch-and-bound search for the lowest-RSS subsets of each size.

Subsets are tuples of candidate ordinals (0..q-1). Adding a column never
increases RSS, so the RSS of a node's subset together with every
candidate it could still add bounds the RSS of all its descendants from
below. A node whose bound cannot beat the current nbest-th RSS for any
size it can still reach is discarded with its whole subtree.

The search walks an explicit stack of immutable _Node records. Children
are pushed in reverse, so subsets are visited in lexicographic order.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, Sequence

from pylmselect.core.compute.linalg.qr import QRResult, qr_pivoted
from pylmselect.core.exceptions import RankDeficiencyError
from pylmselect.selection.design import SubsetDesign

logger = logging.getLogger(__name__)

# size -> ((rss, subset), ...) sorted ascending, at most nbest long
BestTable = dict[int, tuple[tuple[float, tuple[int, ...]], ...]]


@dataclass(frozen=True)
class _Node:
    subset: tuple[int, ...]
    next_index: int
    lower_bound: float


@dataclass(frozen=True)
class SearchOutcome:
    """Partial search result; merge() is associative."""
    best: BestTable
    n_evaluated: int
    n_invalid: int
    n_pruned: int
    nbest: int

    def merge(self, other: SearchOutcome) -> SearchOutcome:
        nbest = self.nbest
        sizes = set(self.best) | set(other.best)
        merged = {
            k: tuple(sorted(self.best.get(k, ()) + other.best.get(k, ()))[:nbest])
            for k in sizes
        }
        return SearchOutcome(
            best=merged,
            n_evaluated=self.n_evaluated + other.n_evaluated,
            n_invalid=self.n_invalid + other.n_invalid,
            n_pruned=self.n_pruned + other.n_pruned,
            nbest=nbest,
        )


class SubsetFitter:
    """
    Fits candidate subsets of a SubsetDesign with the pivoted QR kernel.

    Only RSS is needed, so subsets are factored directly from the columns
    of the validated design without building a Design or LinearSolution.
    """

    def __init__(self, design: SubsetDesign, tol: float):
        self._design = design
        self._tol = tol
        self._X = design.design.X
        self._y = design.design.y

    @property
    def design(self) -> SubsetDesign:
        return self._design

    def rss(self, subset: Sequence[int]) -> float:
        """
        RSS of a subset model.

        Raises:
            RankDeficiencyError: If the subset's columns are dependent
        """
        cols = self._design.columns(subset)
        qr = qr_pivoted(self._X[:, cols], tol=self._tol)
        if qr.rank < len(cols):
            names = self._design.design.column_names
            aliased = tuple(names[cols[i]] for i in qr.aliased)
            raise RankDeficiencyError(
                f"subset {[names[c] for c in cols]} is rank-deficient: "
                f"rank={qr.rank}, expected={len(cols)}",
                rank=qr.rank,
                expected_rank=len(cols),
                aliased=aliased,
            )
        return self._residual_ss(qr)

    def bound(self, subset: Iterable[int]) -> float:
        """RSS of the projection onto the subset's span, rank deficiency allowed."""
        cols = self._design.columns(tuple(subset))
        return self._residual_ss(qr_pivoted(self._X[:, cols], tol=self._tol))

    def _residual_ss(self, qr: QRResult) -> float:
        resid = self._y - qr.Q @ (qr.Q.T @ self._y)
        return float(resid @ resid)


def _insert(
    entries: tuple[tuple[float, tuple[int, ...]], ...],
    rss: float,
    subset: tuple[int, ...],
    nbest: int,
) -> tuple[tuple[float, tuple[int, ...]], ...]:
    updated = list(entries)
    bisect.insort(updated, (rss, subset))
    return tuple(updated[:nbest])


def _prunable(best: BestTable, node: _Node, q: int, max_size: int, nbest: int) -> bool:
    lo = len(node.subset)
    hi = min(max_size, lo + q - node.next_index)
    for k in range(max(lo, 1), hi + 1):
        entries = best[k]
        if len(entries) < nbest or node.lower_bound <= entries[-1][0]:
            return False
    return True


def branch_and_bound(
    fitter: SubsetFitter,
    roots: Sequence[_Node],
    max_size: int,
    nbest: int,
) -> SearchOutcome:
    """Depth-first branch-and-bound from the given root nodes."""
    q = fitter.design.n_candidates
    best: BestTable = {k: () for k in range(1, max_size + 1)}
    n_evaluated = n_invalid = n_pruned = 0
    stack = list(reversed(roots))

    while stack:
        node = stack.pop()
        if node.subset and _prunable(best, node, q, max_size, nbest):
            n_pruned += 1
            continue

        if node.subset:
            try:
                rss = fitter.rss(node.subset)
            except RankDeficiencyError as e:
                n_invalid += 1
                logger.debug("subset %s skipped: rank %s", node.subset, e.rank)
            else:
                n_evaluated += 1
                k = len(node.subset)
                best[k] = _insert(best[k], rss, node.subset, nbest)

        if len(node.subset) == max_size:
            continue

        children = []
        for i in range(node.next_index, q):
            child = node.subset + (i,)
            if i == node.next_index:
                bound = node.lower_bound
            else:
                bound = fitter.bound(child + tuple(range(i + 1, q)))
            children.append(_Node(child, i + 1, bound))
        stack.extend(reversed(children))

    return SearchOutcome(best, n_evaluated, n_invalid, n_pruned, nbest)


def root_node(fitter: SubsetFitter) -> _Node:
    q = fitter.design.n_candidates
    return _Node((), 0, fitter.bound(range(q)))


def branch_node(fitter: SubsetFitter, first: int) -> _Node:
    """Root of the subtree of subsets whose smallest ordinal is `first`."""
    q = fitter.design.n_candidates
    return _Node((first,), first + 1, fitter.bound(range(first, q)))


def search_branch(fitter: SubsetFitter, first: int, max_size: int, nbest: int) -> SearchOutcome:
    """One unit of parallel work: branch-and-bound below `first`."""
    return branch_and_bound(fitter, [branch_node(fitter, first)], max_size, nbest)


def exhaustive(
    fitter: SubsetFitter,
    max_size: int,
    nbest: int,
    firsts: Iterable[int] | None = None,
) -> SearchOutcome:
    """Fit every subset up to max_size whose smallest ordinal is in `firsts`."""
    q = fitter.design.n_candidates
    if firsts is None:
        firsts = range(q)
    best: BestTable = {k: () for k in range(1, max_size + 1)}
    n_evaluated = n_invalid = 0

    for first in firsts:
        for k in range(1, max_size + 1):
            for rest in combinations(range(first + 1, q), k - 1):
                subset = (first,) + rest
                try:
                    rss = fitter.rss(subset)
                except RankDeficiencyError:
                    n_invalid += 1
                    continue
                n_evaluated += 1
                best[k] = _insert(best[k], rss, subset, nbest)

    return SearchOutcome(best, n_evaluated, n_invalid, 0, nbest)
