"""
Response transformations chosen by profile likelihood: Box-Cox power
transforms and the shifted log.
"""

from pylmselect.transform._common import TransformCandidate
from pylmselect.transform._profile import boxcox_transform, logshift_transform
from pylmselect.transform.design import TransformDesign
from pylmselect.transform.solution import TransformSolution
from pylmselect.transform.solvers import boxcox, logshift

__all__ = [
    "boxcox",
    "logshift",
    "boxcox_transform",
    "logshift_transform",
    "TransformCandidate",
    "TransformDesign",
    "TransformSolution",
]
