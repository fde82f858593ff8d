"""
Tests for residual bootstrap.

Validates replicate shapes, reproducibility, independence from the
worker count, agreement with normal-theory standard errors and the
coverage of percentile intervals.
"""

import numpy as np
import pytest

from pylmselect.core.exceptions import ValidationError
from pylmselect.montecarlo import boot_ci, bootstrap
from pylmselect.regression import Design, fit


@pytest.fixture
def model(noisy_design):
    return fit(noisy_design)


# ---------------------------------------------------------------------------
# Tests: Basic bootstrap
# ---------------------------------------------------------------------------

class TestBootstrap:

    def test_default_statistic_is_coefficients(self, model):
        """Without a statistic the coefficients are resampled."""
        result = bootstrap(model, R=50, seed=1)
        assert result.t.shape == (50, 4)
        np.testing.assert_array_equal(result.t0, model.coefficients)
        assert result.names == model.column_names
        assert result.R == 50
        assert result.n_failed == 0

    def test_bias_and_se(self, model):
        """Bias and SE come from the replicate mean and sd."""
        result = bootstrap(model, R=200, seed=2)
        np.testing.assert_allclose(result.bias, result.t.mean(axis=0) - result.t0)
        np.testing.assert_allclose(result.se, result.t.std(axis=0, ddof=1))

    def test_custom_scalar_statistic(self, model):
        """A scalar statistic gives one column named t1."""
        result = bootstrap(model, lambda m: m.r_squared, R=30, seed=3)
        assert result.t.shape == (30, 1)
        assert result.names == ('t1',)
        assert result.t0[0] == pytest.approx(model.r_squared)

    def test_custom_names(self, model):
        """Labels can be supplied."""
        result = bootstrap(model, lambda m: m.coefficients[1:3], R=10, seed=3, names=['b1', 'b2'])
        assert result.names == ('b1', 'b2')

    def test_names_length_must_match_statistic(self, model):
        """One label per statistic value."""
        with pytest.raises(ValidationError, match="names has 1 labels"):
            bootstrap(model, lambda m: m.coefficients[1:3], R=10, seed=1, names=['a'])

    def test_reproducible(self, model):
        """Same seed, same replicates."""
        a = bootstrap(model, R=40, seed=11)
        b = bootstrap(model, R=40, seed=11)
        np.testing.assert_array_equal(a.t, b.t)

    def test_different_seeds_differ(self, model):
        """Different seeds give different replicates."""
        a = bootstrap(model, R=40, seed=11)
        b = bootstrap(model, R=40, seed=12)
        assert not np.array_equal(a.t, b.t)

    def test_independent_of_n_jobs(self, model):
        """Worker count does not change the replicates."""
        serial = bootstrap(model, R=60, seed=5, n_jobs=1)
        parallel = bootstrap(model, R=60, seed=5, n_jobs=3)
        np.testing.assert_array_equal(serial.t, parallel.t)

    def test_prefix_stable_in_r(self, model):
        """Replicate i depends only on (seed, i)."""
        short = bootstrap(model, R=20, seed=9)
        long = bootstrap(model, R=40, seed=9)
        np.testing.assert_array_equal(short.t, long.t[:20])

    def test_invalid_r(self, model):
        """At least two replicates are required."""
        with pytest.raises(ValidationError):
            bootstrap(model, R=1)
        with pytest.raises(ValidationError):
            bootstrap(model, R=0)

    def test_summary(self, model):
        """The report has the R print.boot heading and term names."""
        text = bootstrap(model, R=20, seed=1).summary()
        assert "RESIDUAL BOOTSTRAP" in text
        assert "x1" in text

    def test_quantile_table(self, model):
        """Quantiles per statistic match numpy."""
        result = bootstrap(model, R=100, seed=4)
        table = result.quantiles([0.05, 0.5, 0.95])
        assert list(table['statistic']) == list(model.column_names)
        assert table['q0.05'].iloc[1] == pytest.approx(np.quantile(result.t[:, 1], 0.05))


# ---------------------------------------------------------------------------
# Tests: Agreement with normal theory
# ---------------------------------------------------------------------------

class TestNormalTheory:

    def test_se_close_to_model_se(self, rng):
        """Bootstrap SEs approach the model SEs for homoscedastic errors."""
        n = 200
        X = rng.standard_normal((n, 2))
        y = 1.0 + X @ [0.5, -0.5] + rng.standard_normal(n)
        model = fit(X, y, intercept=True)
        result = bootstrap(model, R=1000, seed=21)
        np.testing.assert_allclose(result.se, model.standard_errors, rtol=0.2)

    def test_percentile_coverage(self):
        """Percentile intervals cover the true slope near the nominal rate."""
        rng = np.random.default_rng(123)
        n, trials, beta = 60, 50, 1.5
        covered = 0
        for trial in range(trials):
            x = rng.standard_normal(n)
            y = 0.3 + beta * x + rng.standard_normal(n)
            model = fit(x, y, intercept=True)
            ci = boot_ci(bootstrap(model, R=200, seed=trial), 0.9).ci['perc']
            covered += ci[1, 0] <= beta <= ci[1, 1]
        assert covered / trials >= 0.75


# ---------------------------------------------------------------------------
# Tests: Rank-deficient model
# ---------------------------------------------------------------------------

class TestAliasedModel:

    def test_aliased_coefficient_stays_nan(self, collinear_data):
        """Aliased coefficients stay NaN without counting as failures."""
        X, y = collinear_data
        model = fit(Design.from_arrays(X, y, intercept=True), singular_ok=True)
        result = bootstrap(model, R=30, seed=0)
        assert np.all(np.isnan(result.t[:, 3]))
        assert np.all(np.isfinite(result.t[:, :3]))
        assert np.isnan(result.se[3])
        assert np.all(np.isfinite(result.se[:3]))
