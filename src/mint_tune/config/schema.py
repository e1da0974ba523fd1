"""
Configuration schema for mint-tune.

Pydantic models for the tuning run. Field-level constraints catch obviously
malformed values at load time; data-dependent checks (grid against the number
of features, prefix against ncomp) live in config.validation.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

Measure = Literal["BER", "overall"]
Dist = Literal["max.dist", "centroids.dist", "mahalanobis.dist"]
StoppingPolicy = Literal["first_non_significant", "last_significant"]


class ModelConfig(BaseModel):
    """Parameters forwarded to the MINT sPLS-DA model collaborator."""

    scale: bool = True
    tol: float = Field(default=1e-06, gt=0.0)
    max_iter: int = Field(default=100, ge=1)


class ComputeConfig(BaseModel):
    """Parallel execution and seeding."""

    n_jobs: int = Field(default=1, description="joblib n_jobs (-1 = all cores)")
    backend: Literal["loky", "threading", "multiprocessing"] = "loky"
    seed: int | None = Field(default=None, ge=0)

    @field_validator("n_jobs")
    @classmethod
    def validate_n_jobs(cls, v: int) -> int:
        if v == 0 or v < -1:
            raise ValueError(f"n_jobs must be a positive integer or -1, got {v}")
        return v


class DataConfig(BaseModel):
    """Input table layout."""

    infile: Path | None = None
    outcome_col: str = "outcome"
    study_col: str = "study"
    feature_cols: list[str] | None = None
    id_col: str | None = None


class OutputConfig(BaseModel):
    """Output artifacts."""

    outdir: Path = Field(default=Path("results"))
    save_joblib: bool = False
    plot: bool = False


class TuneConfig(BaseModel):
    """Complete configuration for one tuning run."""

    method: Literal["mint.splsda", "mint.plsda"] = "mint.splsda"
    ncomp: int = Field(default=1, ge=1)
    test_keepx: list[int] | None = None
    already_tested_x: list[int] = Field(default_factory=list)
    measure: Measure = "BER"
    dist: list[Dist] = Field(
        default_factory=lambda: ["max.dist", "centroids.dist", "mahalanobis.dist"]
    )
    signif_threshold: float = Field(default=0.01, gt=0.0, lt=1.0)
    stopping_policy: StoppingPolicy = "first_non_significant"
    auc: bool = False
    light_output: bool = True
    partial_results: bool = False

    model: ModelConfig = Field(default_factory=ModelConfig)
    compute: ComputeConfig = Field(default_factory=ComputeConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("dist")
    @classmethod
    def validate_dist(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("dist must name at least one prediction distance")
        # Keep first occurrence: the first distance drives the optimisation
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_prefix_length(self):
        """already_tested_x must leave at least one component to tune."""
        if len(self.already_tested_x) >= self.ncomp:
            raise ValueError(
                f"ncomp ({self.ncomp}) needs to be higher than the number of components "
                f"already tuned ({len(self.already_tested_x)})"
            )
        return self
