"""
Infrastructure Package - File sources and sinks.

Exports:
    load_region_set: Vector file (geopandas) -> RegionSet
    load_grid: NetCDF variable (xarray) -> Grid
    load_geotiff_grid: GeoTIFF bands (rasterio) -> Grid
    export_table: OutputTable -> CSV (pandas)
"""

from .region_source import load_region_set
from .grid_source import load_grid, load_geotiff_grid
from .table_export import export_table

__all__ = [
    'load_region_set',
    'load_grid',
    'load_geotiff_grid',
    'export_table'
]
