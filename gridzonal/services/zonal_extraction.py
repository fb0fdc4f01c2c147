# ============================================================================
# ZONAL EXTRACTION SERVICE
# ============================================================================
# STATUS: Service - File-to-table pipeline
# PURPOSE: Regions file + NetCDF variable -> aggregated table (+ optional CSV)
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: extract_gridded
# DEPENDENCIES: geopandas, xarray, pandas (via infrastructure)
# ============================================================================
"""
Zonal Extraction Service.

Pipeline:
    1. Load regions and check the state/district fields
    2. Open the NetCDF variable as a Grid
    3. Aggregate every layer over every region
    4. Optionally write the table as CSV

Regions are loaded first, so a misnamed field fails before the grid
file is opened.

Usage:
    table = extract_gridded(
        "districts.shp", "rainfall.nc", "rf",
        state_field="ST_NM", district_field="DISTRICT",
        fun="sum", output_csv="rainfall_by_district.csv"
    )
"""

from pathlib import Path
from typing import Callable, Optional, Union

from gridzonal.config import AppConfig, get_config
from gridzonal.core.engine import extract
from gridzonal.core.logic.reducers import Reducer
from gridzonal.core.models.enums import BoundaryRule, MembershipPolicy
from gridzonal.core.models.results import OutputTable
from gridzonal.infrastructure import export_table, load_grid, load_region_set
from gridzonal.infrastructure.grid_source import MetadataCallback
from gridzonal.util_logger import LoggerFactory, ComponentType, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "zonal_extraction")


@log_exceptions(logger=logger)
def extract_gridded(
    shapefile_path: Union[str, Path],
    netcdf_path: Union[str, Path],
    varname: str,
    state_field: str,
    district_field: str,
    fun: Union[str, Callable, Reducer, None] = "mean",
    na_rm: bool = True,
    output_csv: Optional[Union[str, Path]] = None,
    membership_policy: Union[MembershipPolicy, str, None] = None,
    boundary_rule: Union[BoundaryRule, str, None] = None,
    max_workers: Optional[int] = None,
    on_metadata: Optional[MetadataCallback] = None,
    config: Optional[AppConfig] = None
) -> OutputTable:
    """
    Aggregate a NetCDF variable over the polygons of a vector file.

    Args:
        shapefile_path: Region polygons (any geopandas-readable format)
        netcdf_path: Gridded data
        varname: NetCDF variable to aggregate
        state_field: Region attribute holding the state name
        district_field: Region attribute holding the district name
        fun: Reducer name, callable or Reducer (None = configured default)
        na_rm: Drop missing cells before reducing
        output_csv: Optional CSV destination
        membership_policy: centroid (default), fractional or all_touched
        boundary_rule: inclusive (default) or exclusive
        max_workers: Thread count for per-region work
        on_metadata: Receives the NetCDF metadata summary
        config: AppConfig (default: get_config())

    Returns:
        OutputTable (state, district, one column per layer)
    """
    config = config or get_config()
    run_logger = LoggerFactory.create_with_context(
        ComponentType.SERVICE, "zonal_extraction_run",
        variable=varname, source=str(netcdf_path)
    )
    run_logger.info(f"🚀 Zonal extraction: {varname} from {Path(netcdf_path).name} over {Path(shapefile_path).name}")

    regions = load_region_set(shapefile_path, state_field, district_field)
    grid = load_grid(netcdf_path, varname, on_metadata=on_metadata, config=config)

    table = extract(
        grid,
        regions,
        state_field,
        district_field,
        aggregation=fun,
        remove_missing=na_rm,
        membership_policy=membership_policy,
        boundary_rule=boundary_rule,
        max_workers=max_workers,
        config=config
    )

    if output_csv is not None:
        written = export_table(table, output_csv, config=config)
        run_logger.info(f"✅ Table written to {written}")
    return table
