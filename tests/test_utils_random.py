"""Tests for utils.random (seed management)."""

import random

import numpy as np
import pytest
from mint_tune.utils.random import apply_seed_global, set_random_seed


def test_set_random_seed_is_deterministic():
    """Python and NumPy generators repeat after reseeding."""
    set_random_seed(7)
    a = (np.random.random(3), random.random())
    set_random_seed(7)
    b = (np.random.random(3), random.random())
    np.testing.assert_array_equal(a[0], b[0])
    assert a[1] == b[1]


class TestApplySeedGlobal:
    """SEED_GLOBAL environment handling."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        monkeypatch.delenv("SEED_GLOBAL", raising=False)

    def test_unset(self):
        assert apply_seed_global() is None

    @pytest.mark.parametrize("value", ["", "   ", "abc", "-1", str(2**32)])
    def test_invalid_values_ignored(self, monkeypatch, value):
        """Empty, non-integer and out-of-range seeds are ignored."""
        monkeypatch.setenv("SEED_GLOBAL", value)
        assert apply_seed_global() is None

    @pytest.mark.parametrize("value, expected", [("0", 0), ("42", 42), ("  42  ", 42)])
    def test_valid_values(self, monkeypatch, value, expected):
        monkeypatch.setenv("SEED_GLOBAL", value)
        assert apply_seed_global() == expected

    def test_seeds_numpy(self, monkeypatch):
        """The applied seed makes NumPy draws reproducible."""
        monkeypatch.setenv("SEED_GLOBAL", "123")
        apply_seed_global()
        a = np.random.random(4)
        apply_seed_global()
        b = np.random.random(4)
        np.testing.assert_array_equal(a, b)
