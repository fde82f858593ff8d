"""
Tests for best-subset selection.

Covers the per-size minimal-RSS guarantee, agreement of the pruned
search with exhaustive enumeration, criterion formulas, the tie-break
rule and the handling of rank-deficient subsets.
"""

import math
import warnings
from itertools import combinations

import numpy as np
import pytest

from pylmselect.core.exceptions import RankDeficiencyError, UnknownTermError, ValidationError
from pylmselect.regression import INTERCEPT, Design, fit
from pylmselect.selection import CriterionScore, best_subsets
from pylmselect.selection._leaps import SubsetFitter
from pylmselect.selection.design import SubsetDesign


def _rss(design, names):
    return fit(design.select([INTERCEPT, *names])).rss


# ═══════════════════════════════════════════════════════════════════════
# Scenario: y = 2·x1 + noise
# ═══════════════════════════════════════════════════════════════════════


class TestAICScenario:

    def test_x1_best_single_predictor(self, aic_scenario):
        """x1 heads the size-one ranking and has the lowest AIC of that size."""
        sol = best_subsets(aic_scenario, max_size=3, nbest=3)
        size_one = [s for s in sol.scores if s.size == 1]
        assert [s.subset for s in size_one][0] == ('x1',)
        assert min(size_one, key=lambda s: s.aic).subset == ('x1',)

    def test_full_model_does_not_improve_aic(self, aic_scenario):
        """Adding the null predictors raises AIC."""
        sol = best_subsets(aic_scenario, max_size=3)
        per_size = sol.best_per_size()
        assert per_size[3].aic > per_size[1].aic
        assert 'x1' in sol.best('aic').subset


# ═══════════════════════════════════════════════════════════════════════
# Minimal RSS per size
# ═══════════════════════════════════════════════════════════════════════


class TestPlantedSubset:

    def test_exhaustive_finds_planted_pair(self, planted_pair_design):
        """Every pair is scored and the planted one has the smallest RSS."""
        sol = best_subsets(planted_pair_design, max_size=2, nbest=15, method='exhaustive')
        size_two = [s for s in sol.scores if s.size == 2]
        assert len(size_two) == 15
        assert size_two[0].subset == ('x1', 'x4')
        assert all(s.rss > size_two[0].rss for s in size_two[1:])

    def test_branch_and_bound_finds_planted_pair(self, planted_pair_design):
        """Branch and bound recovers the planted pair."""
        sol = best_subsets(planted_pair_design, max_size=4)
        assert sol.best_per_size()[2].subset == ('x1', 'x4')

    def test_first_per_size_is_global_minimum(self, planted_pair_design):
        """The best of each size is the brute-force RSS minimum."""
        sol = best_subsets(planted_pair_design, max_size=3)
        names = planted_pair_design.predictor_names
        for k, score in sol.best_per_size().items():
            min_rss = min(_rss(planted_pair_design, c) for c in combinations(names, k))
            assert score.rss == pytest.approx(min_rss, rel=1e-12)

    @pytest.mark.parametrize("nbest", [1, 3])
    def test_pruned_search_matches_exhaustive(self, planted_pair_design, nbest):
        """Pruning does not change the nbest tables."""
        bb = best_subsets(planted_pair_design, nbest=nbest)
        ex = best_subsets(planted_pair_design, nbest=nbest, method='exhaustive')
        assert [s.indices for s in bb.scores] == [s.indices for s in ex.scores]
        np.testing.assert_allclose([s.rss for s in bb.scores], [s.rss for s in ex.scores])

    def test_pruning_saves_fits(self, planted_pair_design):
        """Branch and bound fits fewer subsets than enumeration."""
        bb = best_subsets(planted_pair_design)
        ex = best_subsets(planted_pair_design, method='exhaustive')
        assert ex.n_evaluated == 2 ** 6 - 1
        assert bb.n_pruned > 0
        assert bb.n_evaluated < ex.n_evaluated

    def test_parallel_matches_serial(self, planted_pair_design):
        """Splitting root branches over workers gives the same ranking."""
        serial = best_subsets(planted_pair_design, nbest=2, n_jobs=1)
        parallel = best_subsets(planted_pair_design, nbest=2, n_jobs=2)
        assert [s.indices for s in serial.scores] == [s.indices for s in parallel.scores]

    def test_parallel_exhaustive(self, planted_pair_design):
        """Parallel enumeration evaluates the same subsets."""
        serial = best_subsets(planted_pair_design, method='exhaustive', max_size=2)
        parallel = best_subsets(planted_pair_design, method='exhaustive', max_size=2, n_jobs=2)
        assert [s.indices for s in serial.scores] == [s.indices for s in parallel.scores]
        assert serial.n_evaluated == parallel.n_evaluated


# ═══════════════════════════════════════════════════════════════════════
# Criteria
# ═══════════════════════════════════════════════════════════════════════


class TestCriteria:

    def test_formulas(self, noisy_design):
        """RSS, AIC, BIC, adjusted R² and Cp match their definitions."""
        sol = best_subsets(noisy_design, max_size=3)
        full = fit(noisy_design)
        n = noisy_design.n
        for s in sol.scores:
            m = s.size + 1
            model = fit(noisy_design.select(list(s.terms)))
            assert s.rss == pytest.approx(model.rss, rel=1e-12)
            assert s.n_params == m
            assert s.aic == pytest.approx(n * math.log(s.rss / n) + 2 * m)
            assert s.bic == pytest.approx(n * math.log(s.rss / n) + math.log(n) * m)
            assert s.adjusted_r_squared == pytest.approx(model.adjusted_r_squared)
            assert s.cp == pytest.approx(s.rss / full.sigma_squared + 2 * m - n)

    def test_cp_of_full_model_equals_parameter_count(self, noisy_design):
        """Cp of the model holding every candidate is its parameter count."""
        sol = best_subsets(noisy_design, max_size=3)
        full = sol.best_per_size()[3]
        assert full.cp == pytest.approx(full.n_params)

    def test_unknown_criterion(self, noisy_design):
        """best() only knows the four criteria."""
        with pytest.raises(ValidationError):
            best_subsets(noisy_design).best('r2')

    def test_tie_break_prefers_smaller_then_lower_indices(self):
        """Equal scores order by size, then column indices."""
        def score(indices, aic):
            return CriterionScore(
                indices=indices, subset=(), terms=(), size=len(indices),
                n_params=len(indices) + 1, rss=1.0, aic=aic, bic=0.0,
                adjusted_r_squared=0.0, cp=0.0,
            )

        a = score((1, 2), 10.0)
        b = score((3,), 10.0)
        c = score((0, 4), 10.0)
        ranked = sorted([a, b, c], key=lambda s: s.sort_key('aic'))
        assert ranked == [b, c, a]

    def test_adjusted_r_squared_larger_is_better(self, noisy_design):
        """Adjusted R² is maximized, not minimized."""
        sol = best_subsets(noisy_design, max_size=3)
        best = sol.best('adjusted_r_squared')
        assert best.adjusted_r_squared == max(s.adjusted_r_squared for s in sol.scores)


# ═══════════════════════════════════════════════════════════════════════
# Search options
# ═══════════════════════════════════════════════════════════════════════


class TestOptions:

    def test_force_in(self, planted_pair_design):
        """Forced columns appear in every subset and are not candidates."""
        sol = best_subsets(planted_pair_design, max_size=2, force_in=['x0'])
        assert 'x0' not in sol.candidates
        assert sol.forced == (INTERCEPT, 'x0')
        for s in sol.scores:
            assert 'x0' in s.terms
            assert s.n_params == s.size + 2

    def test_candidates_subset(self, planted_pair_design):
        """Candidates are restricted and kept in design order."""
        sol = best_subsets(planted_pair_design, candidates=['x4', 'x1', 'x2'])
        assert sol.candidates == ('x1', 'x2', 'x4')
        assert sol.best_per_size()[2].subset == ('x1', 'x4')

    def test_default_max_size(self, noisy_design):
        """Without max_size every candidate can enter."""
        sol = best_subsets(noisy_design)
        assert max(s.size for s in sol.scores) == 3

    def test_max_size_too_large(self, noisy_design):
        """max_size cannot exceed the number of candidates."""
        with pytest.raises(ValidationError, match="max_size"):
            best_subsets(noisy_design, max_size=4)

    def test_overlapping_candidates_and_forced(self, noisy_design):
        """A column cannot be both forced and a candidate."""
        with pytest.raises(ValidationError, match="both"):
            best_subsets(noisy_design, candidates=['x1', 'x2'], force_in=['x1'])

    def test_unknown_candidate(self, noisy_design):
        """Candidate names must be design columns."""
        with pytest.raises(UnknownTermError):
            best_subsets(noisy_design, candidates=['nope'])

    def test_bad_method(self, noisy_design):
        """Only leaps and exhaustive are supported."""
        with pytest.raises(ValueError, match="method"):
            best_subsets(noisy_design, method='greedy')

    def test_many_candidates_warns(self, rng):
        """More than 20 candidates triggers a UserWarning."""
        X = rng.standard_normal((60, 21))
        design = Design.from_arrays(X, rng.standard_normal(60), intercept=True)
        with pytest.warns(UserWarning, match="21 candidates"):
            best_subsets(design, max_size=1)


# ═══════════════════════════════════════════════════════════════════════
# Rank-deficient subsets
# ═══════════════════════════════════════════════════════════════════════


class TestRankDeficientSubsets:

    @pytest.fixture
    def design(self, rng):
        n = 50
        X = rng.standard_normal((n, 3))
        X = np.column_stack([X, X[:, 0] + X[:, 1]])
        y = X[:, 0] - X[:, 2] + rng.standard_normal(n)
        return Design.from_arrays(X, y, names=['a', 'b', 'c', 'ab'], intercept=True)

    def test_invalid_subsets_skipped(self, design):
        """Singular subsets are counted and left out of the scores."""
        sol = best_subsets(design, method='exhaustive')
        # {a, b, ab} and {a, b, c, ab} are singular
        assert sol.n_invalid == 2
        assert sol.n_evaluated == 2 ** 4 - 1 - 2
        assert any("rank-deficient" in w for w in sol.warnings)
        assert all(s.size <= 3 for s in sol.scores)
        assert 4 not in sol.best_per_size()

    def test_branch_and_bound_survives(self, design):
        """Branch and bound handles singular subsets like enumeration does."""
        sol = best_subsets(design)
        ex = best_subsets(design, method='exhaustive')
        assert sol.best_per_size().keys() == ex.best_per_size().keys()
        for k, s in ex.best_per_size().items():
            assert sol.best_per_size()[k].indices == s.indices


class TestSubsetFitter:
    """Subset RSS straight from the QR kernel."""

    @pytest.fixture
    def fitter(self, rng):
        n = 50
        X = rng.standard_normal((n, 3))
        X = np.column_stack([X, X[:, 0] + X[:, 1]])
        y = X[:, 0] - X[:, 2] + rng.standard_normal(n)
        design = Design.from_arrays(X, y, names=['a', 'b', 'c', 'ab'], intercept=True)
        return SubsetFitter(SubsetDesign.for_search(design), 1e-7)

    @pytest.mark.parametrize("subset", [(0,), (0, 2), (1, 2, 3)])
    def test_rss_matches_fit(self, fitter, subset):
        """Same RSS as a full fit of the selected columns."""
        base = fitter.design.design
        expected = fit(base.select(fitter.design.columns(subset))).rss
        assert fitter.rss(subset) == pytest.approx(expected, rel=1e-10)

    def test_dependent_subset_raises(self, fitter):
        """A singular subset raises with the aliased name."""
        with pytest.raises(RankDeficiencyError) as exc_info:
            fitter.rss((0, 1, 3))
        assert exc_info.value.rank == 3
        assert exc_info.value.aliased == ('ab',)

    def test_bound_allows_dependence(self, fitter):
        """The bound projects onto the span, so {a, b, ab} equals {a, b}."""
        assert fitter.bound((0, 1, 3)) == pytest.approx(fitter.rss((0, 1)), rel=1e-10)


# ═══════════════════════════════════════════════════════════════════════
# Output
# ═══════════════════════════════════════════════════════════════════════


class TestOutput:

    def test_to_dataframe(self, noisy_design):
        """One row per score with the criterion columns."""
        sol = best_subsets(noisy_design, nbest=2)
        df = sol.to_dataframe()
        assert list(df.columns) == [
            'size', 'subset', 'n_params', 'rss', 'aic', 'bic', 'adjusted_r_squared', 'cp',
        ]
        assert len(df) == len(sol.scores)
        np.testing.assert_array_equal(df['rss'].to_numpy(), [s.rss for s in sol.scores])

    def test_summary(self, noisy_design):
        """The report names the best subset per criterion."""
        text = best_subsets(noisy_design).summary()
        assert "Best Subset Selection" in text
        assert "Best by aic" in text

    def test_timing_and_backend(self, noisy_design):
        """The backend and search timing are recorded."""
        sol = best_subsets(noisy_design)
        assert sol.backend_name == 'cpu_leaps'
        assert 'search' in sol.timing
