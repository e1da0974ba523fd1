"""
Seeding for reproducible runs.

The tuning core itself draws no random numbers; seeding matters only for
model collaborators that do. Set SEED_GLOBAL in the environment to seed
every CLI run.
"""

import logging
import os
import random

import numpy as np

logger = logging.getLogger(__name__)

SEED_ENV_VAR = "SEED_GLOBAL"
MAX_SEED = 2**32 - 1


def set_random_seed(seed: int):
    """Seed the Python and NumPy global generators."""
    random.seed(seed)
    np.random.seed(seed)


def _parse_seed(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        seed = int(raw.strip())
    except ValueError:
        logger.warning("%s=%r is not an integer; ignoring.", SEED_ENV_VAR, raw)
        return None
    if not 0 <= seed <= MAX_SEED:
        logger.warning("%s=%d outside [0, %d]; ignoring.", SEED_ENV_VAR, seed, MAX_SEED)
        return None
    return seed


def apply_seed_global() -> int | None:
    """
    Seed the global generators from SEED_GLOBAL, if set.

    Returns:
        The applied seed, or None when the variable is unset, empty or invalid

    Examples:
        >>> import os
        >>> os.environ["SEED_GLOBAL"] = "42"
        >>> apply_seed_global()
        42
        >>> del os.environ["SEED_GLOBAL"]
    """
    seed = _parse_seed(os.environ.get(SEED_ENV_VAR))
    if seed is None:
        return None
    set_random_seed(seed)
    logger.info("%s=%d applied.", SEED_ENV_VAR, seed)
    return seed
