"""
Tests for the component-by-component search and its accumulator.
"""

import numpy as np
import pytest
from conftest import FakeFactory, make_multistudy_data
from mint_tune.data.groups import make_logo_folds
from mint_tune.errors import FoldEvaluationError
from mint_tune.tuning.logocv import run_logocv
from mint_tune.tuning.sequential import SearchAccumulator, sequential_search


@pytest.fixture
def setup():
    X, y, study = make_multistudy_data()
    return X, y, study, make_logo_folds(y, study), np.unique(y)


def _search(setup, factory, ncomp=3, grid=(5, 10, 20), **kwargs):
    X, y, study, folds, classes = setup
    return sequential_search(
        X, y, study, folds, list(grid), ncomp, classes, factory, dist=["max.dist"], **kwargs
    )


class TestSearchAccumulator:
    """Test the write-once accumulator."""

    def test_start_presized(self):
        """Slots are pre-sized with the prefix filled."""
        acc = SearchAccumulator.start(4, [10, 5])
        assert acc.choice_keepx == (10, 5, None, None)
        assert acc.next_component == 3
        assert acc.prefix == (10, 5)
        assert not acc.complete

    def test_prefix_too_long(self):
        """The prefix must leave a component to search."""
        with pytest.raises(ValueError, match="no component to search"):
            SearchAccumulator.start(2, [10, 5])

    def test_commit_returns_new_accumulator(self, setup):
        """commit() leaves the original untouched."""
        X, y, study, folds, classes = setup
        acc = SearchAccumulator.start(2)
        search = run_logocv(
            X, y, study, folds, [5, 10], [], "BER", ["max.dist"], FakeFactory({5: 0.5}), classes
        )
        new = acc.commit(search)
        assert acc.choice_keepx == (None, None)
        assert new.choice_keepx == (10, None)
        assert new.searched == (search,)

    def test_commit_refuses_overwrite(self, setup):
        """A filled slot cannot be written again."""
        X, y, study, folds, classes = setup
        search = run_logocv(
            X, y, study, folds, [5, 10], [], "BER", ["max.dist"], FakeFactory(), classes
        )
        acc = SearchAccumulator.start(2).commit(search)
        with pytest.raises(ValueError, match="already committed"):
            acc.commit(search)

    def test_commit_refuses_out_of_order(self, setup):
        """Components are committed in increasing order."""
        X, y, study, folds, classes = setup
        search = run_logocv(
            X, y, study, folds, [5, 10], [7], "BER", ["max.dist"], FakeFactory(), classes
        )
        with pytest.raises(ValueError, match="out of order"):
            SearchAccumulator.start(3).commit(search)


class TestSequentialSearch:
    """Test the sequential driver."""

    def test_fills_every_component(self, setup, fake_factory):
        """Every component gets a keepX."""
        acc = _search(setup, fake_factory)
        assert acc.complete
        assert acc.choice_keepx == (10, 10, 10)
        assert [s.component for s in acc.searched] == [1, 2, 3]

    def test_prefix_invariant(self, setup):
        """Component k is fitted with exactly the committed choices for 1..k-1."""
        factory = FakeFactory({5: 0.4, 10: 0.5, 20: 0.0})
        acc = _search(setup, factory, ncomp=3)
        chosen = acc.choice_keepx
        assert chosen == (20, 20, 20)
        for ncomp, keepx in factory.calls:
            assert len(keepx) == ncomp
            assert keepx[: ncomp - 1] == chosen[: ncomp - 1]

    def test_already_tested_prefix_is_not_searched(self, setup, fake_factory):
        """Components fixed by the caller are used as the prefix only."""
        acc = _search(setup, fake_factory, ncomp=3, already_tested_x=[50, 40])
        assert acc.choice_keepx == (50, 40, 10)
        assert [s.component for s in acc.searched] == [3]
        assert all(keepx[:2] == (50, 40) for _, keepx in fake_factory.calls)

    def test_components_run_in_order(self, setup, fake_factory):
        """All fits for component k happen before any for k+1."""
        _search(setup, fake_factory, ncomp=3)
        ncomps = [c[0] for c in fake_factory.calls]
        assert ncomps == sorted(ncomps)

    def test_failure_carries_partial_accumulator(self, setup):
        """A fold failure keeps the components completed before it."""
        factory = FakeFactory({5: 0.5, 10: 0.2, 20: 0.4}, fail_when=lambda ncomp, keepx: ncomp == 2)
        with pytest.raises(FoldEvaluationError) as exc_info:
            _search(setup, factory, ncomp=3)
        partial = exc_info.value.partial
        assert isinstance(partial, SearchAccumulator)
        assert partial.choice_keepx == (10, None, None)
        assert exc_info.value.component == 2

    def test_idempotent(self, setup):
        """Two identical runs give identical choices and errors."""
        a = _search(setup, FakeFactory({5: 0.5, 10: 0.2, 20: 0.4}))
        b = _search(setup, FakeFactory({5: 0.5, 10: 0.2, 20: 0.4}))
        assert a.choice_keepx == b.choice_keepx
        for sa, sb in zip(a.searched, b.searched, strict=True):
            assert sa.error_mean.equals(sb.error_mean)
            assert sa.best.per_group.equals(sb.best.per_group)
