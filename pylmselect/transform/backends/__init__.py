"""Transform search backends."""

from pylmselect.transform.backends.cpu import CPUProfileBackend

__all__ = ["CPUProfileBackend"]
