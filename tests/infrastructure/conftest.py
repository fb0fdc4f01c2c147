"""
Infrastructure fixtures - small files written to tmp_path.

All fixtures describe the same 2x2 field over x in [0, 2], y in [0, 2]:
row 0 (north) holds [1, 2], row 1 holds [3, 4]; the second time step
doubles every value and loses the south-east cell.
"""

import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box


@pytest.fixture
def netcdf_path(tmp_path):
    """NetCDF with variable 'rf' (time, lat, lon); latitude stored south-up."""
    xr = pytest.importorskip("xarray")
    north_up = np.array([
        [[1.0, 2.0], [3.0, 4.0]],
        [[2.0, 4.0], [6.0, np.nan]],
    ])
    ds = xr.Dataset(
        {
            "rf": (("time", "lat", "lon"), north_up[:, ::-1, :]),
            "other": (("lat", "lon"), np.zeros((2, 2))),
        },
        coords={
            "time": pd.date_range("2020-01-01", periods=2, freq="D"),
            "lat": [0.5, 1.5],
            "lon": [0.5, 1.5],
        },
        attrs={"title": "test rainfall"},
    )
    path = tmp_path / "rain.nc"
    ds.to_netcdf(path)
    return path


@pytest.fixture
def geotiff_path(tmp_path):
    """Two-band GeoTIFF with nodata -9999 in band 2 at the south-east cell."""
    rasterio = pytest.importorskip("rasterio")
    from rasterio.transform import from_origin

    data = np.array([
        [[1.0, 2.0], [3.0, 4.0]],
        [[2.0, 4.0], [6.0, -9999.0]],
    ], dtype="float32")
    path = tmp_path / "rain.tif"
    with rasterio.open(
        path, "w", driver="GTiff", height=2, width=2, count=2, dtype="float32",
        crs="EPSG:4326", transform=from_origin(0.0, 2.0, 1.0, 1.0), nodata=-9999.0,
    ) as dst:
        dst.write(data)
        dst.set_band_description(1, "jan")
    return path


@pytest.fixture
def regions_path(tmp_path):
    """GeoJSON with two districts: the west and east halves of the grid."""
    gpd = pytest.importorskip("geopandas")
    gdf = gpd.GeoDataFrame(
        {"ST_NM": ["A", "B"], "DISTRICT": ["X", "Y"], "CODE": [11, 12]},
        geometry=[box(0, 0, 1, 2), box(1, 0, 2, 2)],
        crs="EPSG:4326",
    )
    path = tmp_path / "districts.geojson"
    gdf.to_file(path, driver="GeoJSON")
    return path
