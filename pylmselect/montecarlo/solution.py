"""
Solution wrappers for resampling results.

BootstrapSolution and PermutationSolution wrap Result[P] and provide
convenient accessors and R-style summary output.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Sequence, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pylmselect.core.result import Result
from pylmselect.core.validation import check_probability
from pylmselect.montecarlo._ci import compute_ci
from pylmselect.montecarlo._common import BootParams, PermutationParams

if TYPE_CHECKING:
    import pandas as pd
    from pylmselect.montecarlo.design import PermutationDesign, ResidualBootstrapDesign


@dataclass(frozen=True)
class BootstrapSolution:
    """
    User-facing bootstrap results.

    Matches R's boot object output: t0, t, bias, SE, plus CI if computed.
    summary() produces R's print.boot format.
    """
    _result: Result[BootParams]
    _design: 'ResidualBootstrapDesign'

    # --- Core boot fields ---

    @property
    def t0(self) -> NDArray[np.floating[Any]]:
        """Statistic(s) on the original fit, shape (k,)."""
        return self._result.params.t0

    @property
    def t(self) -> NDArray[np.floating[Any]]:
        """Bootstrap replicates, shape (R, k); failed rows are NaN."""
        return self._result.params.t

    @property
    def R(self) -> int:
        """Number of bootstrap replicates."""
        return self._result.params.R

    @property
    def bias(self) -> NDArray[np.floating[Any]]:
        """Bootstrap bias estimate: mean(t) - t0, shape (k,)."""
        return self._result.params.bias

    @property
    def se(self) -> NDArray[np.floating[Any]]:
        """Bootstrap standard error: sd(t), shape (k,)."""
        return self._result.params.se

    @property
    def n_failed(self) -> int:
        return self._result.params.n_failed

    @property
    def ci(self) -> dict[str, NDArray] | None:
        """Confidence intervals keyed by type, or None if not computed."""
        return self._result.params.ci

    @property
    def ci_conf_level(self) -> float | None:
        """Confidence level used for CI computation."""
        return self._result.params.ci_conf_level

    @property
    def names(self) -> tuple[str, ...]:
        """Labels of the statistics."""
        if self._design.names:
            return self._design.names
        return tuple(f"t{i + 1}" for i in range(len(self.t0)))

    # --- Metadata ---

    @property
    def seed(self) -> int | None:
        """Random seed used."""
        return self._design.seed

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

    # --- Derived tables ---

    def conf_int(self, level: float = 0.95, type: str = "perc") -> NDArray[np.floating[Any]]:
        """Bootstrap confidence intervals, shape (k, 2)."""
        check_probability(level, 'level')
        return compute_ci(self.t0, self.t, [type], level)[type]

    def quantiles(self, probs: Sequence[float] = (0.025, 0.5, 0.975)) -> 'pd.DataFrame':
        """
        Empirical quantile table of the replicates.

        One row per statistic; exact float64 values.
        """
        import pandas as pd

        for p in probs:
            check_probability(p, 'probs', open_interval=False)
        rows = []
        for j, name in enumerate(self.names):
            t_j = self.t[:, j]
            t_j = t_j[np.isfinite(t_j)]
            row: dict[str, Any] = {'statistic': name, 'original': self.t0[j]}
            for p in probs:
                row[f"q{p:g}"] = float(np.quantile(t_j, p)) if len(t_j) else np.nan
            rows.append(row)
        return pd.DataFrame(rows)

    def with_ci(self, ci: dict[str, NDArray], conf_level: float) -> BootstrapSolution:
        """New solution carrying the given intervals; this one is unchanged."""
        params = dataclasses.replace(
            self._result.params, ci=ci, ci_conf_level=conf_level,
        )
        result = dataclasses.replace(self._result, params=params)
        return BootstrapSolution(_result=result, _design=self._design)

    # --- Display ---

    def summary(self) -> str:
        """
        R-style print.boot output.

        Produces:
            RESIDUAL BOOTSTRAP

            Bootstrap Statistics :
                         original       bias    std. error
            (Intercept)   5.12345    0.01234     0.56789
            x1            3.45678   -0.00567     0.34567
        """
        lines = ["\nRESIDUAL BOOTSTRAP\n"]
        lines.append(f"Replicates: {self.R}   Failed: {self.n_failed}   Seed: {self.seed}")
        lines.append("")
        lines.append("Bootstrap Statistics :")

        width = max(8, max((len(n) for n in self.names), default=0))
        header = f"{'':<{width}s} {'original':>14s} {'bias':>14s} {'std. error':>14s}"
        lines.append(header)

        for i, label in enumerate(self.names):
            lines.append(
                f"{label:<{width}s} {self.t0[i]:14.5f} {self.bias[i]:14.5f} "
                f"{self.se[i]:14.5f}"
            )

        if self.ci is not None:
            lines.append("")
            conf_pct = int(round((self.ci_conf_level or 0.95) * 100))
            for ci_type, ci_vals in self.ci.items():
                lines.append(f"{conf_pct}% {ci_type} CI:")
                for i, label in enumerate(self.names):
                    lines.append(
                        f"  {label}: ({ci_vals[i, 0]:.5f}, "
                        f"{ci_vals[i, 1]:.5f})"
                    )

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BootstrapSolution(R={self.R}, k={len(self.t0)}, "
            f"backend={self.backend_name!r})"
        )


@dataclass(frozen=True)
class PermutationSolution:
    """
    User-facing permutation test results.

    Provides observed statistic, permutation distribution, and p-value.
    """
    _result: Result[PermutationParams]
    _design: 'PermutationDesign'

    # --- Core fields ---

    @property
    def observed_stat(self) -> float:
        """Test statistic on the unpermuted data."""
        return self._result.params.observed_stat

    @property
    def perm_stats(self) -> NDArray[np.floating[Any]]:
        """Permutation distribution, shape (R,)."""
        return self._result.params.perm_stats

    @property
    def p_value(self) -> float:
        """Fraction of permutations with |stat| at least |observed|."""
        return self._result.params.p_value

    @property
    def R(self) -> int:
        """Number of permutations."""
        return self._result.params.R

    @property
    def n_failed(self) -> int:
        return self._result.params.n_failed

    @property
    def target(self) -> str | None:
        """Shuffled column, or None when the response was shuffled."""
        return self._design.target_name

    # --- Metadata ---

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

    # --- Display ---

    def summary(self) -> str:
        """Permutation test summary."""
        shuffled = self.target if self.target is not None else "response"
        lines = [
            "\nPERMUTATION TEST",
            "",
            f"Shuffled: {shuffled}",
            f"Number of permutations: {self.R} ({self.n_failed} failed)",
            f"Observed statistic: {self.observed_stat:.6g}",
            f"p-value: {self.p_value:.4g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PermutationSolution(R={self.R}, "
            f"observed={self.observed_stat:.4g}, "
            f"p_value={self.p_value:.4g})"
        )
