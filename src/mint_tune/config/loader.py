"""
Configuration loading and merging logic.

Supports:
1. Loading from YAML files (with ``_base`` inheritance)
2. CLI argument overrides (dot-notation: e.g., model.tol=1e-9)
3. Validation into a TuneConfig
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mint_tune.config.defaults import (
    DEFAULT_COMPUTE_CONFIG,
    DEFAULT_DATA_CONFIG,
    DEFAULT_MODEL_CONFIG,
    DEFAULT_OUTPUT_CONFIG,
    DEFAULT_TUNE_CONFIG,
)
from mint_tune.config.schema import TuneConfig
from mint_tune.errors import InputValidationError

# Keys that should always be parsed as lists
LIST_KEYS = {
    "test_keepx",
    "already_tested_x",
    "dist",
    "feature_cols",
}

# Keys that should always stay strings
STRING_KEYS = {
    "outcome_col",
    "study_col",
    "id_col",
}

PATH_KEYS = {"infile", "outdir"}


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into *base* (overlay wins on leaf conflicts).

    Returns a new dict; neither input is mutated.
    """
    merged = base.copy()
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml(file_path: str | Path) -> dict[str, Any]:
    """Load configuration from YAML file.

    A ``_base`` key names another YAML file (relative to this one) that is
    loaded first; the current file's values are deep-merged on top.
    """
    file_path = Path(file_path).resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path) as f:
        config_dict = yaml.safe_load(f) or {}

    base_ref = config_dict.pop("_base", None)
    if base_ref is not None:
        base_path = (file_path.parent / base_ref).resolve()
        config_dict = _deep_merge(load_yaml(base_path), config_dict)

    return config_dict


def resolve_paths_relative_to_config(
    config_dict: dict[str, Any], config_file: Path
) -> dict[str, Any]:
    """
    Resolve relative ``infile``/``outdir`` entries against the config file directory.

    Args:
        config_dict: Configuration dictionary
        config_file: Path to the config file

    Returns:
        New config dict with relative paths resolved
    """
    config_dir = Path(config_file).resolve().parent

    def resolve(d: dict[str, Any]) -> dict[str, Any]:
        out = {}
        for key, value in d.items():
            if isinstance(value, dict):
                out[key] = resolve(value)
            elif key in PATH_KEYS and isinstance(value, str) and not Path(value).is_absolute():
                out[key] = str(config_dir / value)
            else:
                out[key] = value
        return out

    return resolve(config_dict)


def apply_overrides(config_dict: dict[str, Any], overrides: list[str]) -> dict[str, Any]:
    """
    Apply CLI overrides to config dictionary.

    Supports dot-notation for nested keys:
        ncomp=3 -> config_dict['ncomp'] = 3
        model.tol=1e-9 -> config_dict['model']['tol'] = 1e-9
        test_keepx=5,10,20 -> config_dict['test_keepx'] = [5, 10, 20]

    Args:
        config_dict: Base configuration dictionary
        overrides: List of "key=value" or "nested.key=value" strings

    Returns:
        Updated config dictionary

    Raises:
        InputValidationError: If an override is not of the form key=value
    """
    for override in overrides:
        if "=" not in override:
            raise InputValidationError(
                f"Invalid override format: {override}. Expected 'key=value'"
            )

        key_path, value_str = override.split("=", 1)
        keys = key_path.split(".")

        target = config_dict
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]

        final_key = keys[-1]
        target[final_key] = _parse_value(
            value_str,
            force_list=final_key in LIST_KEYS,
            force_string=final_key in STRING_KEYS,
        )

    return config_dict


def _parse_scalar(value_str: str) -> Any:
    """Parse a single token as int, float, or string."""
    try:
        return int(value_str)
    except ValueError:
        pass
    try:
        return float(value_str)
    except ValueError:
        pass
    return value_str


def _parse_value(value_str: str, force_list: bool = False, force_string: bool = False) -> Any:
    """
    Parse string value to appropriate Python type.

    Args:
        value_str: String to parse
        force_list: If True, always return a list (comma-separated or single value)
        force_string: If True, always return a string
    """
    if force_string:
        return value_str

    lowered = value_str.lower()
    if lowered in ("none", "null"):
        return None

    if force_list or "," in value_str:
        return [_parse_scalar(v.strip()) for v in value_str.split(",") if v.strip()]

    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False

    return _parse_scalar(value_str)


def default_config_dict() -> dict[str, Any]:
    """Return a fresh nested dict holding every default value."""
    config_dict = {
        key: (list(value) if isinstance(value, list) else value)
        for key, value in DEFAULT_TUNE_CONFIG.items()
    }
    config_dict["model"] = DEFAULT_MODEL_CONFIG.copy()
    config_dict["compute"] = DEFAULT_COMPUTE_CONFIG.copy()
    config_dict["data"] = DEFAULT_DATA_CONFIG.copy()
    config_dict["output"] = DEFAULT_OUTPUT_CONFIG.copy()
    return config_dict


def load_tune_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
    cli_args: dict[str, Any] | None = None,
) -> TuneConfig:
    """
    Load tuning configuration from defaults, a YAML file, CLI args and overrides.

    Precedence (last wins): defaults < YAML file < cli_args < overrides.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of CLI overrides in "key=value" format (optional)
        cli_args: Flat or nested dict of explicit CLI options; None values are skipped

    Returns:
        Validated TuneConfig instance

    Raises:
        InputValidationError: If the merged configuration is invalid
    """
    config_dict = default_config_dict()

    if config_file is not None:
        config_file_path = Path(config_file)
        file_config = load_yaml(config_file_path)
        file_config = resolve_paths_relative_to_config(file_config, config_file_path)
        config_dict = _deep_merge(config_dict, file_config)

    if cli_args:
        cleaned = _drop_none(cli_args)
        config_dict = _deep_merge(config_dict, cleaned)

    if overrides:
        config_dict = apply_overrides(config_dict, list(overrides))

    try:
        return TuneConfig(**config_dict)
    except ValidationError as e:
        raise InputValidationError(f"Invalid tuning configuration:\n{e}") from e


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    out = {}
    for key, value in d.items():
        if isinstance(value, dict):
            nested = _drop_none(value)
            if nested:
                out[key] = nested
        elif value is not None:
            out[key] = value
    return out


def save_config(config: TuneConfig, output_path: str | Path):
    """Save resolved configuration to YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="json")

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def format_config_summary(config: TuneConfig) -> str:
    """Return a human-readable configuration summary."""
    lines = ["=" * 80, "Configuration Summary", "=" * 80]

    def format_dict(d, indent=0):
        result = []
        for key, value in d.items():
            if isinstance(value, dict):
                result.append(f"{'  ' * indent}{key}:")
                result.extend(format_dict(value, indent + 1))
            else:
                result.append(f"{'  ' * indent}{key}: {value}")
        return result

    lines.extend(format_dict(config.model_dump(mode="json")))
    lines.append("=" * 80)
    return "\n".join(lines)
