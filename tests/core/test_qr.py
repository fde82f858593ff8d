"""
Tests for the pivoted Householder QR.

Validates:
    - X[:, pivot] = Q R with orthonormal Q on full-rank input
    - Limited pivoting: dependent columns are moved to the end, later
      columns first, estimable columns keep their order
    - qr_solve reuses a factorization for several responses
    - On rank-deficient input qr_solve fits the estimable columns only
"""

import numpy as np

from pylmselect.core.compute.linalg import qr_pivoted, qr_solve


# ═══════════════════════════════════════════════════════════════════════
# Full rank
# ═══════════════════════════════════════════════════════════════════════


class TestFullRank:

    def test_reconstruction(self, rng):
        """Q·R11 reproduces the pivoted columns."""
        X = rng.standard_normal((50, 4))
        qr = qr_pivoted(X)
        assert qr.rank == 4
        np.testing.assert_array_equal(qr.pivot, np.arange(4))
        np.testing.assert_allclose(qr.Q @ qr.R11, X[:, qr.pivot], atol=1e-12)

    def test_q_orthonormal(self, rng):
        """Q has orthonormal columns."""
        X = rng.standard_normal((30, 5))
        qr = qr_pivoted(X)
        np.testing.assert_allclose(qr.Q.T @ qr.Q, np.eye(5), atol=1e-12)

    def test_r11_inverse(self, rng):
        """R11_inv inverts R11."""
        X = rng.standard_normal((30, 3))
        qr = qr_pivoted(X)
        np.testing.assert_allclose(qr.R11 @ qr.R11_inv, np.eye(3), atol=1e-12)

    def test_unscaled_covariance_equals_xtx_inverse(self, rng):
        """R⁻¹R⁻ᵀ equals (XᵀX)⁻¹."""
        X = rng.standard_normal((40, 3))
        qr = qr_pivoted(X)
        np.testing.assert_allclose(
            qr.R11_inv @ qr.R11_inv.T, np.linalg.inv(X.T @ X), rtol=1e-10,
        )

    def test_matches_numpy_lstsq(self, rng):
        """Full-rank solve agrees with numpy."""
        X = rng.standard_normal((60, 4))
        y = rng.standard_normal(60)
        expected = np.linalg.lstsq(X, y, rcond=None)[0]
        np.testing.assert_allclose(qr_solve(qr_pivoted(X), y), expected, rtol=1e-10)


# ═══════════════════════════════════════════════════════════════════════
# Rank deficiency
# ═══════════════════════════════════════════════════════════════════════


class TestLimitedPivoting:

    def test_dependent_column_moved_to_end(self, collinear_data):
        """x1 + x2 is found dependent and pivoted last."""
        X, _ = collinear_data
        qr = qr_pivoted(X)
        assert qr.rank == 2
        np.testing.assert_array_equal(qr.pivot, [0, 1, 2])
        np.testing.assert_array_equal(qr.aliased, [2])

    def test_later_duplicate_dropped_not_earlier(self, rng):
        """Of two equal columns the later one is aliased."""
        a = rng.standard_normal(20)
        b = rng.standard_normal(20)
        X = np.column_stack([a, a, b])
        qr = qr_pivoted(X)
        assert qr.rank == 2
        np.testing.assert_array_equal(qr.estimable, [0, 2])
        np.testing.assert_array_equal(qr.aliased, [1])

    def test_zero_column_aliased(self, rng):
        """An all-zero column is aliased."""
        X = np.column_stack([rng.standard_normal(10), np.zeros(10)])
        qr = qr_pivoted(X)
        assert qr.rank == 1
        np.testing.assert_array_equal(qr.aliased, [1])

    def test_solve_uses_estimable_columns(self, collinear_data):
        """Coefficients come from the estimable columns alone."""
        X, y = collinear_data
        qr = qr_pivoted(X)
        expected = np.linalg.lstsq(X[:, qr.estimable], y, rcond=None)[0]
        np.testing.assert_allclose(qr_solve(qr, y), expected, rtol=1e-10)


class TestSolve:

    def test_multiple_responses(self, rng):
        """A response matrix is solved column by column."""
        X = rng.standard_normal((25, 3))
        Y = rng.standard_normal((25, 4))
        qr = qr_pivoted(X)
        B = qr_solve(qr, Y)
        assert B.shape == (3, 4)
        for j in range(4):
            np.testing.assert_allclose(
                B[:, j], np.linalg.lstsq(X, Y[:, j], rcond=None)[0], rtol=1e-10,
            )
