"""
Tuning result container and assembly.

assemble_result only reshapes what the sequential search produced into
component-indexed tables; it does no computation of its own.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from mint_tune.tuning.logocv import ComponentSearch
from mint_tune.tuning.sequential import SearchAccumulator
from mint_tune.tuning.stopping import StoppingDecision
from mint_tune.utils.serialization import to_native


def comp_label(component: int) -> str:
    return f"comp{component}"


def error_per_group_table(searched: Sequence[ComponentSearch], groups: Sequence[str]) -> pd.DataFrame:
    """Error of each component's chosen keepX, component × group."""
    return pd.DataFrame(
        [s.best.per_group.reindex(list(groups)).to_numpy(dtype=float) for s in searched],
        index=[comp_label(s.component) for s in searched],
        columns=list(groups),
        dtype=float,
    )


@dataclass(frozen=True)
class TuneResult:
    """Outcome of a keepX / ncomp tuning run.

    Tables cover the searched components only (components fixed through
    `already_tested_x` are not re-evaluated); `choice_keepx` covers all.

    Attributes:
        error_rate: Mean error across groups, keepX grid × component
        error_rate_sd: Standard deviation across groups, keepX grid × component
        choice_keepx: Chosen keepX per component (comp1..compN); missing
            entries in a partial result are <NA>
        choice_ncomp: Recommended number of components, or None when the
            stopping rule could not run
        error_per_group: Error of the chosen keepX, component × group
        error_rate_class: Per-class error of the chosen keepX, class × component
        confusion: Confusion table of the chosen keepX per component
        measure: Error measure used for the selection
        dist: Prediction distances; the first one drove the selection
        stopping_policy: Policy of the component-count rule
        p_values: One-sided paired t-test p-value per adjacent component pair
        auc: AUC summary of the chosen keepX per component, if requested
        predictions: Decision scores per component (n × classes × grid),
            when full output was requested
        classes: Predicted labels per component and distance (n × grid),
            when full output was requested
        partial: True if the run stopped early on a fold failure
    """

    error_rate: pd.DataFrame
    error_rate_sd: pd.DataFrame
    choice_keepx: pd.Series
    choice_ncomp: int | None
    error_per_group: pd.DataFrame
    error_rate_class: pd.DataFrame
    confusion: dict[str, pd.DataFrame]
    measure: str
    dist: tuple[str, ...]
    stopping_policy: str
    p_values: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))
    auc: dict[str, pd.DataFrame] | None = None
    predictions: dict[str, np.ndarray] | None = None
    classes: dict[str, dict[str, pd.DataFrame]] | None = None
    partial: bool = False

    @property
    def ncomp(self) -> int:
        return len(self.choice_keepx)

    def optimal_keepx(self) -> list[int]:
        """keepX values of the recommended components (all if no recommendation)."""
        n = self.choice_ncomp or self.ncomp
        return [int(k) for k in self.choice_keepx.iloc[:n].dropna()]

    def to_dict(self, include_traces: bool = False) -> dict[str, Any]:
        """JSON-ready view of the result."""
        out = {
            "measure": self.measure,
            "dist": list(self.dist),
            "stopping_policy": self.stopping_policy,
            "partial": self.partial,
            "choice_keepx": {k: (None if pd.isna(v) else int(v)) for k, v in self.choice_keepx.items()},
            "choice_ncomp": self.choice_ncomp,
            "p_values": self.p_values,
            "error_rate": self.error_rate,
            "error_rate_sd": self.error_rate_sd,
            "error_per_group": self.error_per_group.T,
            "error_rate_class": self.error_rate_class,
            "confusion": {comp: table.T for comp, table in self.confusion.items()},
            "auc": None
            if self.auc is None
            else {comp: table.T for comp, table in self.auc.items()},
        }
        if include_traces:
            out["predictions"] = self.predictions
            out["classes"] = self.classes
        return to_native(out)


def assemble_result(
    accumulator: SearchAccumulator,
    decision: StoppingDecision | None,
    *,
    grid: Sequence[int],
    groups: Sequence[str],
    classes: Sequence,
    measure: str,
    dist: Sequence[str],
    stopping_policy: str,
    auc: bool = False,
    light_output: bool = True,
) -> TuneResult:
    """
    Package a search accumulator into a TuneResult.

    An incomplete accumulator (fold failure with partial output requested)
    yields a result with `partial=True` covering the committed components.
    """
    searched = accumulator.searched
    labels = [comp_label(s.component) for s in searched]
    grid = [int(k) for k in grid]
    classes = list(classes)
    groups = list(groups)

    error_rate = pd.DataFrame(
        {comp_label(s.component): s.error_mean.reindex(grid) for s in searched},
        index=grid,
        columns=labels,
        dtype=float,
    )
    error_rate.index.name = "keepX"
    error_rate_sd = pd.DataFrame(
        {comp_label(s.component): s.error_sd.reindex(grid) for s in searched},
        index=grid,
        columns=labels,
        dtype=float,
    )
    error_rate_sd.index.name = "keepX"

    error_per_group = error_per_group_table(searched, groups)
    error_rate_class = pd.DataFrame(
        {comp_label(s.component): s.best.per_class.reindex(classes) for s in searched},
        index=classes,
        columns=labels,
        dtype=float,
    )

    choice_keepx = pd.Series(
        pd.array(list(accumulator.choice_keepx), dtype="Int64"),
        index=[comp_label(i + 1) for i in range(accumulator.ncomp)],
        name="keepX",
    )

    return TuneResult(
        error_rate=error_rate,
        error_rate_sd=error_rate_sd,
        choice_keepx=choice_keepx,
        choice_ncomp=None if decision is None else decision.ncomp,
        error_per_group=error_per_group,
        error_rate_class=error_rate_class,
        confusion={comp_label(s.component): s.confusion for s in searched},
        measure=measure,
        dist=tuple(dist),
        stopping_policy=stopping_policy,
        p_values=pd.Series(dtype=float) if decision is None else decision.p_values,
        auc={comp_label(s.component): s.auc for s in searched} if auc else None,
        predictions=None
        if light_output
        else {comp_label(s.component): s.predictions for s in searched},
        classes=None if light_output else {comp_label(s.component): s.classes for s in searched},
        partial=not accumulator.complete,
    )
