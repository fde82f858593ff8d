"""
Best-subset selection by branch-and-bound, scored by AIC, BIC,
adjusted R² and Mallows' Cp.
"""

from pylmselect.selection._common import CRITERIA, CriterionScore
from pylmselect.selection.design import SubsetDesign
from pylmselect.selection.solution import SubsetSolution
from pylmselect.selection.solvers import best_subsets

__all__ = [
    "best_subsets",
    "SubsetDesign",
    "SubsetSolution",
    "CriterionScore",
    "CRITERIA",
]
