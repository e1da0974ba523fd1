"""
Choice of the number of components from per-group errors.

Adjacent components (k, k+1) are compared with a one-sided paired t-test
across groups, H1: component k+1 has lower error than component k.

Policies:
    first_non_significant: walk forward from the first searched component
        and stop at the first k whose successor is not significantly better.
    last_significant: test every adjacent pair and return k+1 of the last
        significant pair (the first searched component when none is).

A NaN p-value (identical errors in every group) counts as not
significant.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.stats import ttest_rel

from mint_tune.config.validation import check_alpha, check_stopping_policy
from mint_tune.errors import StoppingRuleUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoppingDecision:
    """Outcome of the stopping rule.

    Attributes:
        ncomp: Recommended number of components, or None when unavailable
        policy: Stopping policy used
        alpha: Significance threshold
        p_values: One-sided p-value per adjacent pair, indexed "compK vs compK+1"
        reason: Why the rule was not run, when unavailable
    """

    ncomp: int | None
    policy: str
    alpha: float
    p_values: pd.Series
    reason: str | None = None

    @property
    def available(self) -> bool:
        return self.ncomp is not None


def paired_improvement_pvalue(err_k: np.ndarray, err_next: np.ndarray) -> float:
    """One-sided paired t-test p-value for err_next being lower than err_k."""
    err_k = np.asarray(err_k, dtype=float)
    err_next = np.asarray(err_next, dtype=float)
    keep = ~(np.isnan(err_k) | np.isnan(err_next))
    if keep.sum() < 2:
        return np.nan
    with np.errstate(divide="ignore", invalid="ignore"):
        result = ttest_rel(err_k[keep], err_next[keep], alternative="greater")
    return float(result.pvalue)


def _check_available(error_per_group: pd.DataFrame) -> None:
    n_components, n_groups = error_per_group.shape
    if n_groups <= 2:
        raise StoppingRuleUnavailable(f"{n_groups} group(s); more than 2 are needed")
    if n_components <= 1:
        raise StoppingRuleUnavailable(
            f"{n_components} searched component(s); more than 1 is needed"
        )


def select_ncomp(
    error_per_group: pd.DataFrame,
    alpha: float = 0.01,
    policy: str = "first_non_significant",
    first_component: int = 1,
) -> StoppingDecision:
    """
    Recommend the number of components.

    Args:
        error_per_group: Searched components × groups error matrix, rows in
            component order
        alpha: Significance threshold in (0, 1)
        policy: "first_non_significant" or "last_significant"
        first_component: Absolute number of the first row's component

    Returns:
        StoppingDecision. When there are 2 groups or fewer, or a single
        searched component, `ncomp` is None and `reason` says why.
    """
    alpha = check_alpha(alpha)
    policy = check_stopping_policy(policy)
    components = list(range(first_component, first_component + len(error_per_group)))

    try:
        _check_available(error_per_group)
    except StoppingRuleUnavailable as exc:
        logger.info("Component count not selected: %s", exc)
        return StoppingDecision(
            ncomp=None,
            policy=policy,
            alpha=alpha,
            p_values=pd.Series(dtype=float, name="p_value"),
            reason=str(exc),
        )

    values = error_per_group.to_numpy(dtype=float)
    labels = [f"comp{components[i]} vs comp{components[i + 1]}" for i in range(len(values) - 1)]
    p_values = pd.Series(
        [paired_improvement_pvalue(values[i], values[i + 1]) for i in range(len(values) - 1)],
        index=labels,
        dtype=float,
        name="p_value",
    )
    significant = (p_values < alpha).to_numpy()

    if policy == "first_non_significant":
        stop = len(components) - 1
        for i, sig in enumerate(significant):
            if not sig:
                stop = i
                break
        ncomp = components[stop]
    else:
        hits = np.flatnonzero(significant)
        ncomp = components[int(hits[-1]) + 1] if len(hits) else components[0]

    logger.info("Recommended number of components: %d (%s, alpha=%g)", ncomp, policy, alpha)
    for label, p in p_values.items():
        logger.debug("  %s: p = %.4g", label, p)

    return StoppingDecision(ncomp=ncomp, policy=policy, alpha=alpha, p_values=p_values)
