"""
Shared compute infrastructure for pylmselect.

Timing utilities, tolerance tiers and linear algebra kernels shared by
every domain backend.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Conditioning threshold for solver diagnostics
    linalg: Linear algebra kernels (pivoted QR)
"""

from pylmselect.core.compute.timing import Timer

__all__ = [
    "Timer",
]
