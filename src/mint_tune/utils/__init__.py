"""Utility functions for mint-tune."""

from mint_tune.utils.logging import log_section, setup_logger, verbosity_to_level
from mint_tune.utils.random import apply_seed_global, set_random_seed
from mint_tune.utils.serialization import (
    load_joblib,
    load_json,
    save_joblib,
    save_json,
    to_native,
)

__all__ = [
    "setup_logger",
    "log_section",
    "verbosity_to_level",
    "set_random_seed",
    "apply_seed_global",
    "save_joblib",
    "load_joblib",
    "save_json",
    "load_json",
    "to_native",
]
