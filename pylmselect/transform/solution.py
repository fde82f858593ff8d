"""
Solution type for response-transform search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pylmselect.core.result import Result
from pylmselect.transform._common import TransformCandidate, TransformParams

if TYPE_CHECKING:
    import pandas as pd
    from pylmselect.regression.solution import LinearSolution
    from pylmselect.transform.design import TransformDesign


@dataclass(frozen=True)
class TransformSolution:
    """
    Result of a Box-Cox or shifted-log search.

    `best.model` is the fit on the (unscaled) transformed response at the
    maximizing parameter.
    """
    _result: Result[TransformParams]
    _design: 'TransformDesign'

    @property
    def family(self) -> str:
        return self._result.params.family

    @property
    def best(self) -> TransformCandidate:
        return self._result.params.best

    @property
    def parameter(self) -> float:
        """Maximizing λ (Box-Cox) or α (shifted log)."""
        return self.best.parameter

    @property
    def model(self) -> 'LinearSolution':
        return self.best.model

    @property
    def conf_int(self) -> tuple[float, float]:
        """Smallest and largest grid values inside the likelihood interval."""
        return self._result.params.conf_int

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    @property
    def parameters(self) -> NDArray[np.floating[Any]]:
        return self._result.params.parameters

    @property
    def log_likelihoods(self) -> NDArray[np.floating[Any]]:
        return self._result.params.log_likelihoods

    @property
    def profile(self) -> tuple[TransformCandidate, ...]:
        """Every scored grid point, in grid order."""
        return tuple(
            TransformCandidate(float(v), float(ll))
            for v, ll in zip(self.parameters, self.log_likelihoods)
        )

    def to_dataframe(self) -> 'pd.DataFrame':
        """Profile table: parameter, log_likelihood, in_interval."""
        import pandas as pd

        name = 'lambda' if self.family == 'boxcox' else 'alpha'
        return pd.DataFrame({
            name: self.parameters,
            'log_likelihood': self.log_likelihoods,
            'in_interval': self._result.params.in_interval,
        })

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        symbol = 'lambda' if self.family == 'boxcox' else 'alpha'
        title = 'Box-Cox' if self.family == 'boxcox' else 'Shifted log'
        lo, hi = self.conf_int
        lines = [
            f"{title} transformation",
            "",
            f"Grid: {len(self.parameters)} values in "
            f"[{self.parameters.min():.4g}, {self.parameters.max():.4g}]",
            f"Best {symbol}: {self.parameter:.6g}   "
            f"log-likelihood: {self.best.log_likelihood:.6g}",
            f"{int(round(self.conf_level * 100))}% likelihood interval: "
            f"[{lo:.4g}, {hi:.4g}]",
        ]
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"TransformSolution(family={self.family!r}, best={self.parameter:.4g})"
