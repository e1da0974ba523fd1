"""
Models package for mint-tune.

Contains the model collaborator contract, the reference MINT sPLS-DA
estimator, and the factory used by the tuning core.
"""

from .base import DiscriminantModel, ModelFactory
from .registry import build_model_factory
from .splsda import DISTANCES, MintSPLSDA, soft_threshold_keep

__all__ = [
    "DiscriminantModel",
    "ModelFactory",
    "build_model_factory",
    "DISTANCES",
    "MintSPLSDA",
    "soft_threshold_keep",
]
