"""
Loader and Export Configuration.

Provides configuration for:
    - xarray backend used to open NetCDF sources
    - Source metadata diagnostics (logged summary of the opened dataset)
    - CSV missing-value marker

Exports:
    LoaderConfig: Pydantic configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import LoaderDefaults, parse_bool


class LoaderConfig(BaseModel):
    """
    Loader configuration.

    The metadata summary replaces printing the whole NetCDF header: it is
    only logged when log_source_metadata is enabled.
    """

    netcdf_engine: Optional[str] = Field(
        default=LoaderDefaults.NETCDF_ENGINE,
        description="xarray backend for NetCDF sources (None = auto-detect)",
        examples=["netcdf4", "h5netcdf", "scipy"]
    )

    log_source_metadata: bool = Field(
        default=LoaderDefaults.LOG_SOURCE_METADATA,
        description="Log dimensions, variables and attributes of opened grid sources"
    )

    export_na_rep: str = Field(
        default=LoaderDefaults.EXPORT_NA_REP,
        description="String written for missing values in CSV exports",
        examples=["NA", "", "nan"]
    )

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            netcdf_engine=os.environ.get("GRIDZONAL_NETCDF_ENGINE") or LoaderDefaults.NETCDF_ENGINE,
            log_source_metadata=parse_bool(os.environ.get(
                "GRIDZONAL_LOG_SOURCE_METADATA", str(LoaderDefaults.LOG_SOURCE_METADATA)
            )),
            export_na_rep=os.environ.get("GRIDZONAL_EXPORT_NA_REP", LoaderDefaults.EXPORT_NA_REP)
        )

    def debug_dict(self) -> dict:
        """Plain dict for logging."""
        return {
            'netcdf_engine': self.netcdf_engine,
            'log_source_metadata': self.log_source_metadata,
            'export_na_rep': self.export_na_rep
        }
