"""
Region Source - Polygon layers to RegionSet.

Reads any vector format geopandas can open (Shapefile, GeoPackage,
GeoJSON) and builds a RegionSet. The state and district fields are
checked against the column list before geometries are converted, so a
misnamed field fails fast.

Exports:
    load_region_set: Read a polygon layer into a RegionSet
"""

from pathlib import Path
from typing import Optional, Union

import geopandas as gpd

from gridzonal.core.models.regions import RegionSet
from gridzonal.exceptions import RegionFieldMissingError, ResourceNotFoundError
from gridzonal.util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "region_source")


def load_region_set(
    path: Union[str, Path],
    state_field: str,
    district_field: str,
    layer: Optional[str] = None
) -> RegionSet:
    """
    Load polygon regions with their attributes.

    Args:
        path: Vector file (.shp, .gpkg, .geojson, ...)
        state_field: Column holding the state label
        district_field: Column holding the district label
        layer: Layer name for multi-layer sources (GeoPackage)

    Returns:
        RegionSet with one region per feature, in file order

    Raises:
        ResourceNotFoundError: Path does not exist
        RegionFieldMissingError: state_field or district_field is not a column
        RegionValidationError: A feature is not a polygon
    """
    path = Path(path)
    if not path.exists():
        raise ResourceNotFoundError(f"Region file not found: {path}")

    read_kwargs = {"layer": layer} if layer is not None else {}
    gdf = gpd.read_file(path, **read_kwargs)
    logger.info(
        f"Read {len(gdf)} features from {path.name}, "
        f"geometry type: {gdf.geometry.geom_type.dropna().unique().tolist()}"
    )

    try:
        regions = RegionSet.from_geodataframe(gdf, required_fields=(state_field, district_field))
    except RegionFieldMissingError as e:
        logger.error(f"❌ {e}")
        raise

    logger.info(f"✅ Loaded {len(regions)} regions (fields: {state_field}, {district_field})")
    return regions
