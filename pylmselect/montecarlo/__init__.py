"""
Resampling for fitted linear models.

Residual bootstrap of any statistic of the refit model, bootstrap
confidence intervals, and permutation tests that shuffle either the
response or a single predictor.

Usage:
    from pylmselect.montecarlo import bootstrap, boot_ci, permutation_test

    boot = bootstrap(model, R=999, seed=42)
    ci = boot_ci(boot, type="perc")

    perm = permutation_test(design, target="x1", R=999, seed=42)
"""

from pylmselect.montecarlo.design import PermutationDesign, ResidualBootstrapDesign
from pylmselect.montecarlo.solution import BootstrapSolution, PermutationSolution
from pylmselect.montecarlo.solvers import boot_ci, bootstrap, permutation_test

__all__ = [
    "bootstrap",
    "boot_ci",
    "permutation_test",
    "BootstrapSolution",
    "PermutationSolution",
    "ResidualBootstrapDesign",
    "PermutationDesign",
]
