"""
Linear algebra kernels for pylmselect.

All functions follow these conventions:
    - NumPy/SciPy (LAPACK for the triangular solves)
    - Each decomposition returns a structured, frozen result dataclass
    - Errors are raised immediately with clear messages

Submodules:
    qr: Householder QR with limited column pivoting
"""

from pylmselect.core.compute.linalg.qr import (
    QRResult,
    qr_pivoted,
    qr_solve,
)

__all__ = [
    "QRResult",
    "qr_pivoted",
    "qr_solve",
]
