"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - ExtractionDefaults: membership policy, missing-value handling, parallelism
    - LoaderDefaults: NetCDF engine, metadata diagnostics, CSV export
    - AppDefaults: debug mode, logging, environment name

Usage:
    from gridzonal.config.defaults import ExtractionDefaults

    # In Pydantic Field definitions:
    remove_missing: bool = Field(default=ExtractionDefaults.REMOVE_MISSING, ...)
"""


def parse_bool(value: str) -> bool:
    """Parse boolean from environment variable."""
    return str(value).strip().lower() in ("true", "1", "yes")


# =============================================================================
# EXTRACTION DEFAULTS
# =============================================================================

class ExtractionDefaults:
    """
    Zonal extraction defaults.

    Environment Variable Naming Convention:
        GRIDZONAL_*  - every extraction setting

    Membership:
        - centroid containment is the default policy (binary weights)
        - centres exactly on a polygon boundary count as inside
    """

    DEFAULT_AGGREGATION = "mean"
    REMOVE_MISSING = True

    MEMBERSHIP_POLICY = "centroid"
    BOUNDARY_RULE = "inclusive"

    # CENTROID regions that cover no cell centre take the cells they overlap
    SMALL_POLYGON_FALLBACK = True

    # Fractional weights at or below this are floating-point slivers, not coverage
    WEIGHT_EPSILON = 1e-12

    # None = os.cpu_count()
    MAX_WORKERS = None

    # Region count at which per-region work moves to the thread pool
    PARALLEL_MIN_REGIONS = 8


# =============================================================================
# LOADER DEFAULTS
# =============================================================================

class LoaderDefaults:
    """
    Loader and export defaults.
    """

    # None lets xarray pick an installed backend (netcdf4, h5netcdf, scipy)
    NETCDF_ENGINE = None

    LOG_SOURCE_METADATA = False

    # Missing-value marker in CSV output
    EXPORT_NA_REP = "NA"


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """
    Application-wide defaults.

    Controls debug mode and logging.
    """

    DEBUG_MODE = False
    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
