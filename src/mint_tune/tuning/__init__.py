"""
Tuning core for MINT sPLS-DA.

Leave-one-group-out keepX search, sequential component search, the
component-count rule, and result assembly.
"""

from mint_tune.tuning.api import tune_mint_splsda
from mint_tune.tuning.evaluator import FoldPrediction, evaluate_fold
from mint_tune.tuning.logocv import CandidateError, ComponentSearch, run_logocv, select_keepx
from mint_tune.tuning.performance import PerformanceResult, evaluate_components
from mint_tune.tuning.registry import TUNERS, MintPLSDATuner, MintSPLSDATuner, get_tuner
from mint_tune.tuning.result import TuneResult, assemble_result, error_per_group_table
from mint_tune.tuning.sequential import SearchAccumulator, sequential_search
from mint_tune.tuning.stopping import StoppingDecision, paired_improvement_pvalue, select_ncomp

__all__ = [
    "tune_mint_splsda",
    "FoldPrediction",
    "evaluate_fold",
    "CandidateError",
    "ComponentSearch",
    "run_logocv",
    "select_keepx",
    "PerformanceResult",
    "evaluate_components",
    "TUNERS",
    "MintPLSDATuner",
    "MintSPLSDATuner",
    "get_tuner",
    "TuneResult",
    "assemble_result",
    "error_per_group_table",
    "SearchAccumulator",
    "sequential_search",
    "StoppingDecision",
    "paired_improvement_pvalue",
    "select_ncomp",
]
