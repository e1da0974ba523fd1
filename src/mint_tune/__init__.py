"""
mint-tune: hyper-parameter tuning for MINT sPLS-DA

Chooses the number of selected variables per component (keepX) and the
number of components of a multi-study sparse PLS-DA model with
leave-one-study-out cross-validation.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from mint_tune import config, data, metrics, models, tuning, utils  # noqa: E402
from mint_tune.errors import (  # noqa: E402
    DegenerateGroupError,
    FoldEvaluationError,
    InputValidationError,
    InvalidGroupingError,
    MintTuneError,
    MintTuneWarning,
    SparseGroupWarning,
    StoppingRuleUnavailable,
)
from mint_tune.tuning import PerformanceResult, TuneResult, tune_mint_splsda  # noqa: E402

__all__ = [
    "__version__",
    "config",
    "data",
    "metrics",
    "models",
    "tuning",
    "utils",
    "tune_mint_splsda",
    "TuneResult",
    "PerformanceResult",
    "MintTuneError",
    "InputValidationError",
    "InvalidGroupingError",
    "DegenerateGroupError",
    "FoldEvaluationError",
    "StoppingRuleUnavailable",
    "MintTuneWarning",
    "SparseGroupWarning",
]
