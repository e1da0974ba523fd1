"""Tuning curve plots.

Functions:
    plot_tuning_curve: mean error (± SD across studies) against keepX, one
        line per searched component, chosen keepX highlighted
    plot_component_errors: global error against the number of components,
        one line per prediction distance (components-only assessment)
"""

import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pandas as pd

from mint_tune.tuning.performance import PerformanceResult
from mint_tune.tuning.result import TuneResult

logger = logging.getLogger(__name__)


def _apply_meta(fig, meta_lines: Sequence[str] | None) -> float:
    lines = [str(line) for line in (meta_lines or []) if line]
    if not lines:
        return 0.12
    fig.text(0.5, 0.005, "\n".join(lines), ha="center", va="bottom", fontsize=8, wrap=True)
    return min(0.12 + 0.022 * len(lines), 0.30)


def plot_tuning_curve(
    result: TuneResult,
    out_path: str | Path,
    meta_lines: Sequence[str] | None = None,
) -> None:
    """Plot mean error against keepX for every searched component.

    Args:
        result: Tuning result
        out_path: Output image path
        meta_lines: Optional metadata lines for plot annotation
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    if result.error_rate.empty:
        logger.warning("No searched component to plot")
        return

    keepx = result.error_rate.index.to_numpy(dtype=float)
    fig, ax = plt.subplots(figsize=(10, 6))
    colors = plt.cm.tab10(np.arange(result.error_rate.shape[1]) % 10)

    for color, comp in zip(colors, result.error_rate.columns, strict=True):
        mean = result.error_rate[comp].to_numpy(dtype=float)
        sd = result.error_rate_sd[comp].to_numpy(dtype=float)
        ax.plot(keepx, mean, "-o", color=color, linewidth=2, markersize=4, label=comp)
        ax.fill_between(keepx, mean - sd, mean + sd, color=color, alpha=0.12)

        chosen = result.choice_keepx.get(comp)
        if chosen is not None and not pd.isna(chosen):
            ax.scatter(
                [float(chosen)],
                [result.error_rate.loc[int(chosen), comp]],
                s=140,
                facecolors="none",
                edgecolors=color,
                linewidths=2,
                zorder=5,
            )

    ax.set_xscale("log")
    ax.set_xticks(keepx)
    ax.set_xticklabels([str(int(k)) for k in keepx], fontsize=9)
    ax.set_xlabel("Number of selected variables (keepX)", fontsize=12)
    ax.set_ylabel(f"{result.measure} (lower is better)", fontsize=12)
    title = "Tuning curve"
    if result.choice_ncomp is not None:
        title += f" (recommended ncomp = {result.choice_ncomp})"
    ax.set_title(title, fontsize=14)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", fontsize=10)

    bottom_margin = _apply_meta(fig, meta_lines)
    plt.subplots_adjust(left=0.12, right=0.95, top=0.9, bottom=bottom_margin)
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_component_errors(
    result: PerformanceResult,
    out_path: str | Path,
    measure: str = "BER",
    meta_lines: Sequence[str] | None = None,
) -> None:
    """Plot global error against the number of components, per distance."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    table = result.global_ber if measure == "BER" else result.global_overall
    components = np.arange(1, result.ncomp + 1)

    fig, ax = plt.subplots(figsize=(8, 6))
    for dist in table.columns:
        ax.plot(components, table[dist].to_numpy(dtype=float), "-o", linewidth=2, label=dist)

    ax.set_xticks(components)
    ax.set_xlabel("Number of components", fontsize=12)
    ax.set_ylabel(f"{measure} (lower is better)", fontsize=12)
    ax.set_title("Leave-one-study-out error", fontsize=14)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", fontsize=10)

    bottom_margin = _apply_meta(fig, meta_lines)
    plt.subplots_adjust(left=0.12, right=0.95, top=0.9, bottom=bottom_margin)
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
