# ============================================================================
# GRID SOURCE
# ============================================================================
# STATUS: Infrastructure - NetCDF and GeoTIFF readers
# PURPOSE: Open a gridded file and build an in-memory Grid
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: load_grid, load_geotiff_grid
# DEPENDENCIES: xarray, netCDF4, rasterio, numpy
# ============================================================================
"""
Grid Source - Gridded files to Grid.

NetCDF (xarray):
    - Spatial dimensions: x/lon/longitude and y/lat/latitude
    - At most one further dimension (time, band, level) becomes the layer axis
    - Coordinates are cell centres and must be regularly spaced; a single
      row or column takes its cell size from CF bounds or a resolution attribute
    - South-up and east-to-west grids are flipped to north-up, west-to-east
    - _FillValue / missing_value decode to NaN
    - Layer names come from the layer coordinate (dates as YYYY-MM-DD, or
      YYYY-MM-DDTHH:MM:SS for sub-daily steps), or the variable name for a
      single 2-D field

GeoTIFF (rasterio):
    - Nodata decodes to NaN
    - Rotated transforms are rejected
    - Layer names come from band descriptions, else band_<n>

Source metadata (dimensions, variables, attributes) is passed to the
optional `on_metadata` callback, and logged when
config.loader.log_source_metadata is enabled.

Exports:
    load_grid: NetCDF variable to Grid
    load_geotiff_grid: GeoTIFF bands to Grid
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import rasterio
import xarray as xr

from gridzonal.config import AppConfig, get_config
from gridzonal.core.models.grid import Grid
from gridzonal.exceptions import GridValidationError, ResourceNotFoundError, VariableNotFoundError
from gridzonal.util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "grid_source")

X_DIMS = ("x", "lon", "longitude")
Y_DIMS = ("y", "lat", "latitude")

MetadataCallback = Callable[[Dict[str, Any]], None]


def _require_file(path: Union[str, Path]) -> Path:
    path = Path(path)
    if not path.exists():
        raise ResourceNotFoundError(f"Grid file not found: {path}")
    return path


def _find_dim(dims: Sequence[str], candidates: Sequence[str], axis: str, variable: str) -> str:
    for dim in dims:
        if str(dim).lower() in candidates:
            return dim
    raise GridValidationError(
        f"Variable '{variable}' has no {axis} dimension. "
        f"Dimensions: {list(dims)}, expected one of {list(candidates)}"
    )


def _regular_step(coords: np.ndarray, name: str) -> float:
    """Spacing of a regularly spaced coordinate (negative when descending)."""
    steps = np.diff(coords)
    step = float(steps[0])
    if step == 0 or not np.allclose(steps, step, rtol=1e-5, atol=0.0):
        raise GridValidationError(f"Coordinate '{name}' is not regularly spaced")
    return step


def _cell_step(ds: xr.Dataset, coord: xr.DataArray, name: str) -> float:
    """
    Cell size along one spatial coordinate.

    Taken from the coordinate spacing; a single-valued coordinate falls back
    to its CF `bounds` variable, then to a `resolution` attribute.
    """
    values = np.asarray(coord.values, dtype=np.float64)
    if values.size >= 2:
        return _regular_step(values, name)

    bounds_name = coord.attrs.get("bounds") or coord.encoding.get("bounds")
    if values.size == 1 and bounds_name in ds.variables:
        lower, upper = np.asarray(ds[bounds_name].values, dtype=np.float64).reshape(-1)[:2]
        step = float(upper - lower)
    elif values.size == 1 and "resolution" in coord.attrs:
        step = float(coord.attrs["resolution"])
    else:
        raise GridValidationError(
            f"Coordinate '{name}' has {values.size} value(s); cell size cannot be inferred "
            f"without a 'bounds' variable or 'resolution' attribute"
        )
    if step == 0 or not np.isfinite(step):
        raise GridValidationError(f"Coordinate '{name}' has an invalid cell size: {step}")
    return step


def _layer_labels(values: np.ndarray) -> List[str]:
    """Dates as YYYY-MM-DD, or full timestamps when any step is off midnight."""
    if np.issubdtype(values.dtype, np.datetime64):
        days = values.astype("datetime64[D]")
        if np.all(values == days):
            return [str(v) for v in np.datetime_as_string(days)]
        return [str(v) for v in np.datetime_as_string(values, unit="s")]
    if values.size and all(hasattr(v, "strftime") for v in values):
        # cftime dates
        sub_daily = any((v.hour, v.minute, v.second) != (0, 0, 0) for v in values)
        return [v.strftime("%Y-%m-%dT%H:%M:%S" if sub_daily else "%Y-%m-%d") for v in values]
    return [str(v) for v in values]


def _publish_metadata(
    summary: Dict[str, Any],
    on_metadata: Optional[MetadataCallback],
    config: AppConfig
) -> None:
    if on_metadata is not None:
        on_metadata(summary)
    if config.loader.log_source_metadata:
        logger.info(
            f"📊 Grid source metadata: {summary['source']}",
            extra={'custom_dimensions': {'metadata': summary}}
        )


def load_grid(
    path: Union[str, Path],
    variable: str,
    on_metadata: Optional[MetadataCallback] = None,
    config: Optional[AppConfig] = None
) -> Grid:
    """
    Load one variable of a NetCDF file as a Grid.

    Args:
        path: NetCDF file
        variable: Data variable to load
        on_metadata: Called once with a summary dict of the opened dataset
        config: AppConfig (default: get_config())

    Returns:
        Grid with one layer per step of the non-spatial dimension

    Raises:
        ResourceNotFoundError: Path does not exist
        VariableNotFoundError: Variable not in the file (lists available ones)
        GridValidationError: Missing spatial dims, irregular coordinates,
                             more than one non-spatial dimension
    """
    path = _require_file(path)
    config = config or get_config()

    with xr.open_dataset(path, engine=config.loader.netcdf_engine, mask_and_scale=True) as ds:
        available = [str(name) for name in ds.data_vars]
        if variable not in ds.data_vars:
            logger.error(f"❌ Variable '{variable}' not in {path.name} (available: {available})")
            raise VariableNotFoundError(variable, available=available, source=path.name)

        da = ds[variable]
        _publish_metadata(
            {
                "source": str(path),
                "dimensions": {str(k): int(v) for k, v in ds.sizes.items()},
                "variables": available,
                "attributes": dict(ds.attrs),
                "variable_attributes": dict(da.attrs),
            },
            on_metadata,
            config
        )

        x_dim = _find_dim(da.dims, X_DIMS, "x/longitude", variable)
        y_dim = _find_dim(da.dims, Y_DIMS, "y/latitude", variable)
        extra: List[str] = [d for d in da.dims if d not in (x_dim, y_dim)]
        if len(extra) > 1:
            # Length-1 dimensions (e.g. a single level) carry no layers
            for dim in [d for d in extra if da.sizes[d] == 1]:
                if len(extra) == 1:
                    break
                da = da.isel({dim: 0}, drop=True)
                extra.remove(dim)
        if len(extra) > 1:
            raise GridValidationError(
                f"Variable '{variable}' has {len(extra)} non-spatial dimensions {extra}; "
                f"at most one can become the layer axis"
            )

        da = da.transpose(*extra, y_dim, x_dim)
        xs = np.asarray(da[x_dim].values, dtype=np.float64)
        ys = np.asarray(da[y_dim].values, dtype=np.float64)
        dx = _cell_step(ds, da[x_dim], x_dim)
        dy = _cell_step(ds, da[y_dim], y_dim)
        values = np.asarray(da.values, dtype=np.float64)

        if extra:
            layer_names = _layer_labels(np.asarray(da[extra[0]].values))
        else:
            layer_names = [variable]
        crs = da.attrs.get("crs") or ds.attrs.get("crs")
        if crs is None and "spatial_ref" in ds.variables:
            crs = ds["spatial_ref"].attrs.get("crs_wkt")

    if dx < 0:
        values = values[..., ::-1]
        xs = xs[::-1]
        dx = -dx
    if dy > 0:
        # South-up: row 0 must be the northernmost row
        values = values[..., ::-1, :]
        ys = ys[::-1]
    else:
        dy = -dy

    origin = (xs[0] - dx / 2.0, ys[0] + dy / 2.0)
    grid = Grid(origin, (dx, dy), values, layer_names=layer_names, crs=crs)
    logger.info(
        f"✅ Loaded '{variable}' from {path.name}: {grid.rows}x{grid.cols} cells, "
        f"{grid.n_layers} layer(s)"
    )
    return grid


def load_geotiff_grid(
    path: Union[str, Path],
    bands: Optional[Sequence[int]] = None,
    on_metadata: Optional[MetadataCallback] = None,
    config: Optional[AppConfig] = None
) -> Grid:
    """
    Load GeoTIFF bands as a Grid.

    Args:
        path: GeoTIFF file
        bands: 1-based band indexes (default: all bands)
        on_metadata: Called once with a summary dict of the raster
        config: AppConfig (default: get_config())

    Raises:
        ResourceNotFoundError: Path does not exist
        GridValidationError: Rotated transform or band index out of range
    """
    path = _require_file(path)
    config = config or get_config()

    with rasterio.open(path) as src:
        transform = src.transform
        if transform.b != 0 or transform.d != 0:
            raise GridValidationError(f"Rotated raster transforms are not supported: {path.name}")

        band_indexes = list(bands) if bands else list(range(1, src.count + 1))
        invalid = [b for b in band_indexes if not 1 <= b <= src.count]
        if invalid:
            raise GridValidationError(
                f"Band(s) {invalid} out of range for {path.name} with {src.count} band(s)"
            )

        _publish_metadata(
            {
                "source": str(path),
                "dimensions": {"band": src.count, "y": src.height, "x": src.width},
                "variables": [src.descriptions[b - 1] or f"band_{b}" for b in range(1, src.count + 1)],
                "attributes": dict(src.tags()),
                "variable_attributes": {"nodata": src.nodata, "dtypes": list(src.dtypes)},
            },
            on_metadata,
            config
        )

        data = src.read(band_indexes, masked=True).astype(np.float64)
        values = np.ma.filled(data, np.nan)
        layer_names = [src.descriptions[b - 1] or f"band_{b}" for b in band_indexes]
        crs = src.crs.to_string() if src.crs else None

    dx = transform.a
    dy = -transform.e
    x0, y0 = transform.c, transform.f
    if dx < 0:
        values = values[..., ::-1]
        x0 = x0 + dx * values.shape[-1]
        dx = -dx
    if dy < 0:
        # South-up raster: origin is the bottom-left corner
        values = values[..., ::-1, :]
        y0 = y0 - dy * values.shape[-2]
        dy = -dy

    grid = Grid((x0, y0), (dx, dy), values, layer_names=layer_names, crs=crs)
    logger.info(
        f"✅ Loaded {grid.n_layers} band(s) from {path.name}: {grid.rows}x{grid.cols} cells"
    )
    return grid
