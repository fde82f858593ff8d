"""Resampling backends."""

from pylmselect.montecarlo.backends.cpu import CPUBootstrapBackend, CPUPermutationBackend

__all__ = ["CPUBootstrapBackend", "CPUPermutationBackend"]
