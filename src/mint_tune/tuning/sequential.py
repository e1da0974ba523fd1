"""
Component-by-component keepX search.

Components are searched in increasing order. Each search sees the keepX
values already chosen for the earlier components as a frozen prefix, and
its winner is committed into an immutable accumulator before the next
component starts.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np

from mint_tune.data.groups import Fold
from mint_tune.errors import FoldEvaluationError
from mint_tune.tuning.logocv import ComponentSearch, run_logocv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchAccumulator:
    """Pre-sized, write-once record of the chosen keepX per component.

    Attributes:
        ncomp: Total number of components
        choice_keepx: One slot per component; None until committed
        components: Search outcome per component; None for unsearched slots
            and for components fixed by the caller
        n_prefix: Number of components fixed by the caller
    """

    ncomp: int
    choice_keepx: tuple[int | None, ...]
    components: tuple[ComponentSearch | None, ...]
    n_prefix: int = 0

    @classmethod
    def start(cls, ncomp: int, prefix: Sequence[int] = ()) -> "SearchAccumulator":
        prefix = tuple(int(k) for k in prefix)
        if len(prefix) >= ncomp:
            raise ValueError(
                f"prefix of length {len(prefix)} leaves no component to search (ncomp={ncomp})"
            )
        slots = prefix + (None,) * (ncomp - len(prefix))
        return cls(
            ncomp=ncomp,
            choice_keepx=slots,
            components=(None,) * ncomp,
            n_prefix=len(prefix),
        )

    @property
    def next_component(self) -> int | None:
        """1-based index of the next component to search, or None when full."""
        for i, k in enumerate(self.choice_keepx):
            if k is None:
                return i + 1
        return None

    @property
    def complete(self) -> bool:
        return self.next_component is None

    @property
    def prefix(self) -> tuple[int, ...]:
        """keepX values committed so far, in component order."""
        stop = self.next_component
        filled = self.choice_keepx if stop is None else self.choice_keepx[: stop - 1]
        return tuple(int(k) for k in filled)

    @property
    def searched(self) -> tuple[ComponentSearch, ...]:
        return tuple(c for c in self.components if c is not None)

    def commit(self, search: ComponentSearch) -> "SearchAccumulator":
        """Return a new accumulator with `search` written into its slot."""
        slot = search.component - 1
        if not 0 <= slot < self.ncomp:
            raise IndexError(f"component {search.component} outside 1..{self.ncomp}")
        if self.choice_keepx[slot] is not None:
            raise ValueError(f"component {search.component} is already committed")
        if search.component != self.next_component:
            raise ValueError(
                f"component {search.component} committed out of order "
                f"(next is {self.next_component})"
            )

        choice = list(self.choice_keepx)
        components = list(self.components)
        choice[slot] = int(search.keepx_opt)
        components[slot] = search
        return replace(self, choice_keepx=tuple(choice), components=tuple(components))


def sequential_search(
    X: np.ndarray,
    y: np.ndarray,
    study: np.ndarray,
    folds: list[Fold],
    grid: Sequence[int],
    ncomp: int,
    classes: np.ndarray,
    model_factory,
    already_tested_x: Sequence[int] = (),
    measure: str = "BER",
    dist: Sequence[str] = ("max.dist",),
    auc: bool = False,
    light_output: bool = True,
    n_jobs: int = 1,
    backend: str = "loky",
) -> SearchAccumulator:
    """
    Search keepX for every component not fixed by `already_tested_x`.

    Returns:
        A complete SearchAccumulator.

    Raises:
        FoldEvaluationError: If a fold fails. `exc.partial` holds the
            accumulator with every component completed before the failure.
    """
    acc = SearchAccumulator.start(ncomp, already_tested_x)
    if acc.n_prefix:
        logger.info("keepX fixed for components 1-%d: %s", acc.n_prefix, list(acc.prefix))

    while not acc.complete:
        component = acc.next_component
        logger.info("Tuning component %d/%d", component, ncomp)
        try:
            search = run_logocv(
                X,
                y,
                study,
                folds,
                grid,
                acc.prefix,
                measure,
                dist,
                model_factory,
                classes,
                auc=auc,
                light_output=light_output,
                n_jobs=n_jobs,
                backend=backend,
            )
        except FoldEvaluationError as exc:
            logger.error("Component %d aborted: %s", component, exc)
            exc.partial = acc
            raise
        acc = acc.commit(search)

    return acc
