"""
Regression backends.

Available backends:
    CPUQRBackend: CPU reference implementation using pivoted QR
"""

from pylmselect.regression.backends.cpu import CPUQRBackend

__all__ = [
    "CPUQRBackend",
]
