"""
Public API for response-transform search.
"""

from __future__ import annotations

from numpy.typing import ArrayLike

from pylmselect.core.config import resolve_rank_tol
from pylmselect.core.protocols import Backend
from pylmselect.regression.design import Design
from pylmselect.transform._common import TransformParams
from pylmselect.transform.backends.cpu import CPUProfileBackend
from pylmselect.transform.design import TransformDesign
from pylmselect.transform.solution import TransformSolution


def boxcox(
    design: Design,
    lambdas: ArrayLike | None = None,
    *,
    conf_level: float = 0.95,
    refine: bool = False,
    tol: float | None = None,
) -> TransformSolution:
    """
    Box-Cox profile likelihood over a grid of λ.

    g_λ(y) = (y^λ − 1)/λ for λ ≠ 0 and ln y for λ = 0, scored by
    ℓ(λ) = −(n/2)·ln(RSS_λ/n) + (λ − 1)·Σ ln yᵢ.

    Args:
        design: Design with a strictly positive response
        lambdas: Grid of λ values (default −2 to 2 by 0.1)
        conf_level: Level of the likelihood interval
            {λ : ℓ(λ) ≥ max ℓ − ½χ²₁(conf_level)}
        refine: Polish the maximizer between its grid neighbours
        tol: Rank tolerance for the fit

    Returns:
        TransformSolution

    Raises:
        NonPositiveResponseError: If any yᵢ ≤ 0
        RankDeficiencyError: If X is rank-deficient
    """
    t_design = TransformDesign.for_boxcox(
        design, lambdas, conf_level=conf_level, refine=refine,
    )
    backend: Backend[TransformDesign, TransformParams] = CPUProfileBackend(
        tol=resolve_rank_tol(tol),
    )
    return TransformSolution(_result=backend.solve(t_design), _design=t_design)


def logshift(
    design: Design,
    alphas: ArrayLike | None = None,
    *,
    conf_level: float = 0.95,
    refine: bool = False,
    tol: float | None = None,
) -> TransformSolution:
    """
    Shifted-log profile likelihood over a grid of α.

    g_α(y) = ln(y + α), scored by ℓ(α) = −(n/2)·ln(RSS_α/n) − Σ ln(yᵢ + α).
    Works for responses with zero or negative values.

    Raises:
        ValidationError: If no α in the grid makes every y + α positive
        RankDeficiencyError: If X is rank-deficient
    """
    t_design = TransformDesign.for_logshift(
        design, alphas, conf_level=conf_level, refine=refine,
    )
    backend: Backend[TransformDesign, TransformParams] = CPUProfileBackend(
        tol=resolve_rank_tol(tol),
    )
    return TransformSolution(_result=backend.solve(t_design), _design=t_design)
