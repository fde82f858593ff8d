"""
Tests for runtime configuration: explicit argument, override,
environment variable, default.
"""

import pytest

from pylmselect.core import config
from pylmselect.core.exceptions import ValidationError


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch):
    monkeypatch.delenv("PYLMSELECT_N_JOBS", raising=False)
    monkeypatch.delenv("PYLMSELECT_RANK_TOL", raising=False)
    config.set_n_jobs(None)
    config.set_rank_tol(None)
    yield
    config.set_n_jobs(None)
    config.set_rank_tol(None)


class TestNJobs:

    def test_default(self):
        """Serial by default."""
        assert config.get_n_jobs() == 1

    def test_env_var(self, monkeypatch):
        """PYLMSELECT_N_JOBS is read when no override is set."""
        monkeypatch.setenv("PYLMSELECT_N_JOBS", "4")
        assert config.get_n_jobs() == 4

    def test_override_beats_env(self, monkeypatch):
        """A programmatic override wins over the environment."""
        monkeypatch.setenv("PYLMSELECT_N_JOBS", "4")
        config.set_n_jobs(-1)
        assert config.get_n_jobs() == -1

    def test_explicit_beats_override(self):
        """An explicit argument wins over the override."""
        config.set_n_jobs(3)
        assert config.resolve_n_jobs(2) == 2
        assert config.resolve_n_jobs(None) == 3

    def test_bad_env_value(self, monkeypatch):
        """A non-integer env value names the variable."""
        monkeypatch.setenv("PYLMSELECT_N_JOBS", "many")
        with pytest.raises(ValidationError, match="PYLMSELECT_N_JOBS"):
            config.get_n_jobs()

    @pytest.mark.parametrize("value", [0, -2, 1.5])
    def test_invalid_values(self, value):
        """Zero, values below -1 and floats are rejected."""
        with pytest.raises(ValidationError):
            config.set_n_jobs(value)


class TestRankTol:

    def test_default_matches_lm(self):
        """Same default tolerance as R's lm."""
        assert config.get_rank_tol() == 1e-7

    def test_env_var(self, monkeypatch):
        """PYLMSELECT_RANK_TOL is parsed as a float."""
        monkeypatch.setenv("PYLMSELECT_RANK_TOL", "1e-9")
        assert config.get_rank_tol() == 1e-9

    def test_override(self):
        """set_rank_tol applies when no argument is given."""
        config.set_rank_tol(1e-10)
        assert config.resolve_rank_tol(None) == 1e-10

    @pytest.mark.parametrize("value", [0.0, 1.0, -1e-7])
    def test_invalid_values(self, value):
        """The tolerance must lie in (0, 1)."""
        with pytest.raises(ValidationError):
            config.resolve_rank_tol(value)
