"""
Tests that every domain backend satisfies the Backend protocol.
"""

import pytest

from pylmselect.core.protocols import Backend
from pylmselect.montecarlo.backends import CPUBootstrapBackend, CPUPermutationBackend
from pylmselect.regression.backends import CPUQRBackend
from pylmselect.selection.backends import CPUSubsetBackend
from pylmselect.transform.backends import CPUProfileBackend


@pytest.mark.parametrize("backend, name", [
    (CPUQRBackend(), 'cpu_qr'),
    (CPUSubsetBackend(), 'cpu_leaps'),
    (CPUSubsetBackend(method='exhaustive'), 'cpu_exhaustive'),
    (CPUBootstrapBackend(), 'cpu_bootstrap'),
    (CPUPermutationBackend(), 'cpu_permutation'),
    (CPUProfileBackend(), 'cpu_profile'),
])
def test_backend_satisfies_protocol(backend, name):
    """Each backend exposes a name and a solve(design) method."""
    assert isinstance(backend, Backend)
    assert backend.name == name


def test_plain_object_is_not_a_backend():
    """An object without name and solve fails the structural check."""
    assert not isinstance(object(), Backend)
