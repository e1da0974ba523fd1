"""
Default configuration values for mint-tune.

These mirror the defaults of the tuning routine so a YAML file only needs to
name the values it changes.
"""

VALID_METHODS = ["mint.splsda", "mint.plsda"]
VALID_MEASURES = ["BER", "overall"]
VALID_DISTS = ["max.dist", "centroids.dist", "mahalanobis.dist"]
VALID_STOPPING_POLICIES = ["first_non_significant", "last_significant"]

# Groups smaller than this trigger a SparseGroupWarning (centring is unreliable)
MIN_GROUP_SIZE_WARN = 5

DEFAULT_MODEL_CONFIG = {
    "scale": True,
    "tol": 1e-06,
    "max_iter": 100,
}

DEFAULT_COMPUTE_CONFIG = {
    "n_jobs": 1,
    "backend": "loky",
    "seed": None,
}

DEFAULT_DATA_CONFIG = {
    "infile": None,
    "outcome_col": "outcome",
    "study_col": "study",
    "feature_cols": None,
    "id_col": None,
}

DEFAULT_OUTPUT_CONFIG = {
    "outdir": "results",
    "save_joblib": False,
    "plot": False,
}

DEFAULT_TUNE_CONFIG = {
    "method": "mint.splsda",
    "ncomp": 1,
    "test_keepx": None,
    "already_tested_x": [],
    "measure": "BER",
    "dist": list(VALID_DISTS),
    "signif_threshold": 0.01,
    "stopping_policy": "first_non_significant",
    "auc": False,
    "light_output": True,
    "partial_results": False,
}
