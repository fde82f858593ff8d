"""
Numerical properties of the QR solver.

- Agreement with the normal equations on well-conditioned data
- Stability where the normal equations break down
- Invariance of fit statistics under rescaling a predictor
"""

import numpy as np
import pytest

from pylmselect.core.exceptions import SingularMatrixError
from pylmselect.regression import Design, fit, fit_normal_equations


class TestAgainstNormalEquations:

    def test_agree_on_well_conditioned(self, noisy_design):
        """Both paths give the same coefficients on well-conditioned data."""
        qr_beta = fit(noisy_design).coefficients
        naive_beta = fit_normal_equations(noisy_design)
        np.testing.assert_allclose(qr_beta, naive_beta, rtol=1e-10)

    def test_qr_stable_when_naive_is_not(self, rng):
        """Near-collinear columns: QR stays accurate and flags the conditioning."""
        n = 100
        x1 = rng.standard_normal(n)
        x2 = x1 + 1e-7 * rng.standard_normal(n)
        X = np.column_stack([x1, x2])
        beta_true = np.array([1.0, 2.0, -1.0])
        A = np.column_stack([np.ones(n), X])
        y = A @ beta_true
        design = Design.from_arrays(X, y, intercept=True)

        model = fit(design, tol=1e-10)
        assert model.condition_number > 1e6
        assert any("ill-conditioned" in w for w in model.warnings)

        qr_err = np.max(np.abs(model.coefficients - beta_true))
        assert qr_err < 1e-5

        try:
            naive_beta = fit_normal_equations(design)
        except SingularMatrixError:
            return
        naive_err = np.max(np.abs(naive_beta - beta_true))
        assert naive_err > qr_err

    def test_naive_raises_on_exact_collinearity(self, collinear_data):
        """XᵀX is singular for duplicate columns."""
        X, y = collinear_data
        X = X.copy()
        X[:, 2] = X[:, 0]
        with pytest.raises(SingularMatrixError):
            fit_normal_equations(X, y)


class TestRescalingInvariance:
    """Scaling a column by b scales its coefficient and SE by 1/b only."""

    @pytest.mark.parametrize("b", [1000.0, -0.01])
    def test_rescale(self, noisy_design, b):
        """Only the rescaled column's estimate and SE change."""
        base = fit(noisy_design)
        scaled_design = noisy_design.with_column('x2', noisy_design.X[:, 2] * b)
        scaled = fit(scaled_design)

        j = 2
        assert scaled.coefficients[j] == pytest.approx(base.coefficients[j] / b, rel=1e-9)
        assert scaled.standard_errors[j] == pytest.approx(
            base.standard_errors[j] / abs(b), rel=1e-9,
        )
        others = [0, 1, 3]
        np.testing.assert_allclose(scaled.coefficients[others], base.coefficients[others], rtol=1e-9)
        np.testing.assert_allclose(
            np.abs(scaled.t_statistics), np.abs(base.t_statistics), rtol=1e-9,
        )
        np.testing.assert_allclose(scaled.residuals, base.residuals, atol=1e-10)
        assert scaled.r_squared == pytest.approx(base.r_squared, rel=1e-12)
        assert scaled.f_statistic == pytest.approx(base.f_statistic, rel=1e-9)
