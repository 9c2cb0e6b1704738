"""Models for the student iterators (records and iterator configuration)."""

import os
import logging
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


MAX_RETRIES_ENV = "STUDENT_ITER_MAX_RETRIES"
LOG_LEVEL_ENV = "STUDENT_ITER_LOG_LEVEL"


class Student(BaseModel):
    """One student record as returned by the page source."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Student identifier, increasing in API order")
    name: str = Field(..., min_length=1, description="Student name")
    unit: str = Field(..., min_length=1, description="Unit code the mark belongs to")
    mark: Optional[float] = Field(None, ge=0, le=100, description="Mark for the unit, if graded")


class IteratorConfig(BaseModel):
    """Settings for a paginated student iterator."""
    max_retries: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Attempts allowed per page fetch before the API is declared unreachable"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level name"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure the level is one logging knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "IteratorConfig":
        """Build a config from STUDENT_ITER_* environment variables."""
        values = {}
        if os.environ.get(MAX_RETRIES_ENV):
            values["max_retries"] = os.environ[MAX_RETRIES_ENV]
        if os.environ.get(LOG_LEVEL_ENV):
            values["log_level"] = os.environ[LOG_LEVEL_ENV]
        return cls(**values)
