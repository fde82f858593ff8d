"""
Tests for regression fit().

Tests the complete pipeline: Design construction, backend selection,
and solution properties.
"""

import pytest
import numpy as np

from pylmselect.regression import INTERCEPT, fit, Design
from pylmselect.regression.solution import LinearSolution
from pylmselect.core.exceptions import (
    DimensionError,
    RankDeficiencyError,
    UnknownTermError,
    ValidationError,
)


class TestFitBasic:
    """Basic fit() functionality tests."""

    def test_fit_from_arrays(self, simple_regression_data):
        """X and y arrays are accepted directly."""
        X, y, _ = simple_regression_data
        result = fit(X, y)
        assert isinstance(result, LinearSolution)
        assert result.coefficients.shape == (3,)
        assert result.column_names == ('x0', 'x1', 'x2')

    def test_fit_from_design(self, simple_regression_data):
        """A prebuilt Design is used as is."""
        X, y, _ = simple_regression_data
        design = Design.from_arrays(X, y)
        result = fit(design)
        assert isinstance(result, LinearSolution)
        assert result.design is design

    def test_fit_requires_y_with_arrays(self, simple_regression_data):
        """Array input needs a response."""
        X, _, _ = simple_regression_data
        with pytest.raises(ValidationError, match="y required"):
            fit(X)

    def test_unknown_backend(self, simple_regression_data):
        """Only the CPU backend exists."""
        X, y, _ = simple_regression_data
        with pytest.raises(ValueError, match="Unknown backend"):
            fit(X, y, backend='gpu')

    def test_coefficients_close_to_truth(self, simple_regression_data):
        """Estimates land near the generating coefficients."""
        X, y, beta_true = simple_regression_data
        result = fit(X, y)
        np.testing.assert_allclose(result.coefficients, beta_true, atol=0.1)

    def test_matches_numpy_lstsq(self, simple_regression_data):
        """Coefficients agree with numpy least squares."""
        X, y, _ = simple_regression_data
        result = fit(X, y, intercept=True)
        A = np.column_stack([np.ones(len(y)), X])
        expected = np.linalg.lstsq(A, y, rcond=None)[0]
        np.testing.assert_allclose(result.coefficients, expected, rtol=1e-10)

    def test_intercept_flag(self, simple_regression_data):
        """With an intercept the residuals sum to zero."""
        X, y, _ = simple_regression_data
        result = fit(X, y, intercept=True)
        assert result.column_names[0] == INTERCEPT
        assert result.has_intercept
        assert abs(result.residuals.sum()) < 1e-10

    def test_n_less_than_p(self, rng):
        """Fewer rows than columns is rejected."""
        X = rng.standard_normal((3, 5))
        y = rng.standard_normal(3)
        with pytest.raises(DimensionError):
            fit(X, y)

    def test_shape_mismatch(self, rng):
        """X and y row counts must agree."""
        with pytest.raises(DimensionError):
            fit(rng.standard_normal((10, 2)), rng.standard_normal(9))


class TestFitProperties:
    """Test derived properties of LinearSolution."""

    def test_standard_errors_positive(self, simple_regression_data):
        """Every SE of a full-rank fit is positive and finite."""
        X, y, _ = simple_regression_data
        se = fit(X, y).standard_errors
        assert np.all(se > 0)
        assert np.all(np.isfinite(se))

    def test_standard_errors_match_covariance_diagonal(self, noisy_design):
        """SEs equal sqrt(σ̂² diag((XᵀX)⁻¹)) and the vcov diagonal."""
        result = fit(noisy_design)
        X = noisy_design.X
        expected = np.sqrt(result.sigma_squared * np.diag(np.linalg.inv(X.T @ X)))
        np.testing.assert_allclose(result.standard_errors, expected, rtol=1e-10)
        np.testing.assert_allclose(
            np.sqrt(np.diag(result.vcov)), result.standard_errors, rtol=1e-12,
        )

    def test_p_values_in_zero_one(self, simple_regression_data):
        """p-values are probabilities."""
        X, y, _ = simple_regression_data
        pv = fit(X, y).p_values
        assert np.all((pv >= 0.0) & (pv <= 1.0))

    def test_fitted_plus_residuals_equals_y(self, simple_regression_data):
        """ŷ + e = y."""
        X, y, _ = simple_regression_data
        result = fit(X, y)
        np.testing.assert_allclose(result.fitted_values + result.residuals, y, atol=1e-12)

    def test_rss_matches_residuals(self, simple_regression_data):
        """RSS is the squared residual norm."""
        X, y, _ = simple_regression_data
        result = fit(X, y)
        assert abs(result.rss - float(result.residuals @ result.residuals)) < 1e-12

    def test_sigma_squared(self, noisy_design):
        """σ̂² = RSS / (n − p)."""
        result = fit(noisy_design)
        assert result.df_residual == noisy_design.n - 4
        assert result.sigma_squared == pytest.approx(result.rss / result.df_residual)

    def test_r_squared_formula(self, noisy_design):
        """R² = 1 − RSS/TSS around the mean."""
        result = fit(noisy_design)
        y = noisy_design.y
        tss = float(np.sum((y - y.mean()) ** 2))
        assert result.tss == pytest.approx(tss)
        assert result.r_squared == pytest.approx(1.0 - result.rss / tss)

    def test_adjusted_r_squared(self, noisy_design):
        """Adjusted R² uses n − 1 and the residual df."""
        result = fit(noisy_design)
        n, df = result.n, result.df_residual
        expected = 1.0 - (result.rss / df) / (result.tss / (n - 1))
        assert result.adjusted_r_squared == pytest.approx(expected)

    def test_conf_int_contains_estimate(self, noisy_design):
        """Each interval brackets its estimate."""
        result = fit(noisy_design)
        ci = result.conf_int(0.95)
        assert ci.shape == (4, 2)
        assert np.all(ci[:, 0] < result.coefficients)
        assert np.all(result.coefficients < ci[:, 1])

    def test_leverage_sums_to_rank(self, noisy_design):
        """Hat values sum to the rank."""
        result = fit(noisy_design)
        assert result.leverage.sum() == pytest.approx(result.rank)

    def test_vif_near_one_for_independent_columns(self, noisy_design):
        """Independent predictors have VIF near 1; the intercept has none."""
        vif = fit(noisy_design).vif
        assert np.isnan(vif[0])
        assert np.all(vif[1:] < 1.5)

    def test_coef_table_exact(self, noisy_design):
        """The table holds the exact solution arrays."""
        result = fit(noisy_design)
        table = result.coef_table()
        assert list(table.columns) == [
            'term', 'estimate', 'std_error', 't_value', 'p_value', 'lower', 'upper',
        ]
        assert list(table['term']) == list(result.column_names)
        np.testing.assert_array_equal(table['estimate'].to_numpy(), result.coefficients)
        np.testing.assert_array_equal(table['std_error'].to_numpy(), result.standard_errors)

    def test_summary_runs(self, noisy_design):
        """The summary has the R-style headings."""
        s = fit(noisy_design).summary()
        assert "R-squared" in s
        assert "Pr(>|t|)" in s
        assert "Backend" in s

    def test_timing_recorded(self, noisy_design):
        """Backend name and QR timing are reported."""
        result = fit(noisy_design)
        assert result.backend_name == 'cpu_qr'
        assert 'qr_decomposition' in result.timing


class TestRefit:
    """refit() reuses the factorization and returns a new model."""

    def test_refit_matches_fresh_fit(self, noisy_design, rng):
        """Same answer as fitting the new response from scratch."""
        model = fit(noisy_design)
        y_new = rng.standard_normal(noisy_design.n)
        refit = model.refit(y_new)
        fresh = fit(noisy_design.with_response(y_new))
        np.testing.assert_allclose(refit.coefficients, fresh.coefficients, rtol=1e-12)
        assert refit.rss == pytest.approx(fresh.rss)

    def test_original_unchanged(self, noisy_design, rng):
        """refit leaves the original model alone."""
        model = fit(noisy_design)
        before = model.coefficients.copy()
        model.refit(rng.standard_normal(noisy_design.n))
        np.testing.assert_array_equal(model.coefficients, before)

    def test_diagnostics_carry_over(self, collinear_data, rng):
        """Condition number, tolerance and warnings depend on X only."""
        X, y = collinear_data
        model = fit(X, y, singular_ok=True, tol=1e-9)
        refit = model.refit(rng.standard_normal(X.shape[0]))
        assert refit.condition_number == model.condition_number
        assert refit.tol == 1e-9
        assert refit.warnings == model.warnings
        assert refit.timing is None

    def test_condition_number_computed_once(self, noisy_design, rng, monkeypatch):
        """One SVD per fit, none on refit."""
        from pylmselect.regression.backends import cpu

        calls = []
        original = cpu.condition_number

        def counting(qr):
            calls.append(1)
            return original(qr)

        monkeypatch.setattr(cpu, 'condition_number', counting)
        model = fit(noisy_design)
        assert len(calls) == 1
        model.refit(rng.standard_normal(noisy_design.n))
        assert len(calls) == 1

    def test_refit_rejects_wrong_length(self, noisy_design):
        """The new response must match the design rows."""
        with pytest.raises(ValidationError):
            fit(noisy_design).refit(np.zeros(noisy_design.n - 1))


class TestTolerance:
    """The rank tolerance used for a fit is recorded on the result."""

    def test_default_tolerance_recorded(self, noisy_design):
        """info['tol'] holds the resolved default."""
        model = fit(noisy_design)
        assert model.info['tol'] == model.tol
        assert model.tol > 0

    def test_explicit_tolerance_recorded(self, noisy_design):
        """An explicit tol is stored unchanged."""
        assert fit(noisy_design, tol=1e-10).tol == 1e-10


class TestFitRankDeficient:
    """Rank deficiency raises by default; singular_ok aliases later columns."""

    def test_raises_by_default(self, collinear_data):
        """Dependent columns raise, naming the aliased one."""
        X, y = collinear_data
        with pytest.raises(RankDeficiencyError) as exc_info:
            fit(X, y)
        assert exc_info.value.rank == 2
        assert exc_info.value.aliased == ('x2',)

    def test_singular_ok_aliases_last_column(self, collinear_data):
        """The dependent column gets NaN and the df use the rank."""
        X, y = collinear_data
        result = fit(X, y, singular_ok=True)
        assert result.rank == 2
        np.testing.assert_array_equal(result.aliased, [False, False, True])
        assert np.isnan(result.coefficients[2])
        assert np.isnan(result.standard_errors[2])
        assert np.all(np.isfinite(result.standard_errors[:2]))
        assert result.df_residual == X.shape[0] - 2
        assert any("singularities" in w for w in result.warnings)

    def test_aliased_term_lookup(self, collinear_data):
        """Aliased terms cannot be looked up for inference."""
        X, y = collinear_data
        result = fit(X, y, singular_ok=True)
        with pytest.raises(UnknownTermError, match="aliased"):
            result.term_index('x2')
