"""Model factory construction.

Builds the callable that the tuning core uses to create unfitted models for
a given number of components and keepX vector.
"""

from collections.abc import Sequence
from functools import partial

from mint_tune.config.schema import ModelConfig
from mint_tune.models.splsda import MintSPLSDA


def _build_mint_splsda(
    *,
    n_components: int,
    keepx: Sequence[int] | None,
    scale: bool = True,
    tol: float = 1e-06,
    max_iter: int = 100,
) -> MintSPLSDA:
    return MintSPLSDA(
        n_components=n_components,
        keepx=None if keepx is None else list(keepx),
        scale=scale,
        tol=tol,
        max_iter=max_iter,
    )


def build_model_factory(
    config: ModelConfig | None = None,
    *,
    scale: bool | None = None,
    tol: float | None = None,
    max_iter: int | None = None,
):
    """
    Return a picklable factory for MintSPLSDA models.

    Explicit keyword arguments win over values from `config`.

    Examples:
        >>> factory = build_model_factory(ModelConfig(tol=1e-9))
        >>> factory(n_components=2, keepx=[10, 5]).tol
        1e-09
    """
    config = config or ModelConfig()
    return partial(
        _build_mint_splsda,
        scale=config.scale if scale is None else scale,
        tol=config.tol if tol is None else tol,
        max_iter=config.max_iter if max_iter is None else max_iter,
    )
