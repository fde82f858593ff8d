"""Subset search backends."""

from pylmselect.selection.backends.cpu import CPUSubsetBackend

__all__ = ["CPUSubsetBackend"]
