"""Configuration management for mint-tune."""

from mint_tune.config.defaults import (
    DEFAULT_TUNE_CONFIG,
    MIN_GROUP_SIZE_WARN,
    VALID_DISTS,
    VALID_MEASURES,
    VALID_METHODS,
    VALID_STOPPING_POLICIES,
)
from mint_tune.config.loader import (
    apply_overrides,
    format_config_summary,
    load_tune_config,
    load_yaml,
    save_config,
)
from mint_tune.config.schema import (
    ComputeConfig,
    DataConfig,
    ModelConfig,
    OutputConfig,
    TuneConfig,
)
from mint_tune.config.validation import TuneInputs, check_alpha, validate_tune_inputs

__all__ = [
    "DEFAULT_TUNE_CONFIG",
    "MIN_GROUP_SIZE_WARN",
    "VALID_DISTS",
    "VALID_MEASURES",
    "VALID_METHODS",
    "VALID_STOPPING_POLICIES",
    "apply_overrides",
    "format_config_summary",
    "load_tune_config",
    "load_yaml",
    "save_config",
    "ComputeConfig",
    "DataConfig",
    "ModelConfig",
    "OutputConfig",
    "TuneConfig",
    "TuneInputs",
    "check_alpha",
    "validate_tune_inputs",
]
