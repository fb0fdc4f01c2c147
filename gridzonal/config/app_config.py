"""
Top-level gridzonal settings.

Holds the process-wide switches and one section per concern:
    - ExtractionConfig (membership, missing values, parallelism)
    - LoaderConfig (NetCDF backend, metadata diagnostics, CSV export)

Exports:
    AppConfig: Process settings plus the extraction and loader sections
"""

import os
from pydantic import BaseModel, Field, field_validator

from .extraction_config import ExtractionConfig
from .loader_config import LoaderConfig
from .defaults import AppDefaults, parse_bool


class AppConfig(BaseModel):
    """Settings for one process; sections are nested models, not subclasses."""

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Log psutil memory checkpoints around extraction runs (DEBUG_MODE=true).",
        examples=[True, False]
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)"
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Logging level",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @classmethod
    def from_environment(cls):
        """Read DEBUG_MODE, ENVIRONMENT, LOG_LEVEL and every section's GRIDZONAL_* variables."""
        return cls(
            debug_mode=parse_bool(os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE))),
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            extraction=ExtractionConfig.from_environment(),
            loader=LoaderConfig.from_environment()
        )
