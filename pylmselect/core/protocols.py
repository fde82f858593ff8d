"""
Core protocols for pylmselect.

Structural interfaces that domain-specific implementations satisfy.
Protocol (structural typing) rather than ABC (nominal typing) keeps
backends decoupled from the designs they consume.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pylmselect.core.result import Result

D = TypeVar('D', contravariant=True)  # Design type
P = TypeVar('P', covariant=True)      # Parameter payload type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.
    
    Each backend takes a domain-specific design and produces a
    domain-specific parameter payload wrapped in a Result.
    
    Backends are stateless: all configuration is passed via the design
    or at construction time. This makes them easy to test, swap and run
    from many workers at once.
    """
    
    @property
    def name(self) -> str:
        """
        Backend identifier.
        
        Convention: '{device}_{algorithm}'
        Examples: 'cpu_qr', 'cpu_bootstrap', 'cpu_leaps'
        """
        ...
    
    def solve(self, design: D) -> Result[P]:
        """
        Execute the statistical computation.
        
        Raises:
            NumericalError: If numerical issues prevent solution
            ValidationError: If design is invalid for this backend
        """
        ...
