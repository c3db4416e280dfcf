"""Execution options for the mapper."""

from pydantic import BaseModel, Field, field_validator

JOBLIB_BACKENDS = {"threading", "loky", "multiprocessing", "sequential"}


class MapperConfig(BaseModel):
    """
    Options controlling how a batch is executed. They never change results:
    the i-th output always corresponds to the i-th input.
    """
    # Performance
    n_jobs: int = Field(default=1, description="Parallel jobs (-1 for all CPUs)")
    backend: str = "threading"
    show_progress: bool = False

    # Reporting
    warn_unmapped: bool = True

    @field_validator("n_jobs")
    @classmethod
    def validate_n_jobs(cls, v: int) -> int:
        if v == 0 or v < -1:
            raise ValueError(f"n_jobs must be >= 1 or -1 for all CPUs, got {v}")
        return v

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in JOBLIB_BACKENDS:
            raise ValueError(f"Unknown backend {v!r}; expected one of {sorted(JOBLIB_BACKENDS)}")
        return v

    @property
    def is_sequential(self) -> bool:
        return self.n_jobs == 1 or self.backend == "sequential"
