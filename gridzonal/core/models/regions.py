# ============================================================================
# REGION MODELS
# ============================================================================
# STATUS: Core - Immutable polygons with attribute tables
# PURPOSE: Region and RegionSet with eager attribute-field validation
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: Region, RegionSet
# DEPENDENCIES: shapely
# ============================================================================
"""
Region models.

A Region is one polygon (or multipolygon) plus its attributes. A RegionSet is
the ordered, immutable collection of regions; its order is the output order.

Field validation is eager: a RegionSet built with `required_fields` (and
every extract() call) checks that each region carries the label fields
before any geometry or grid work begins.

Usage:
    regions = RegionSet(
        [Region(0, box(0, 0, 1, 1), {"state": "A", "district": "X"})],
        required_fields=("state", "district")
    )
    regions.field_value(regions[0], "state")    # "A"
"""

import math
import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import shapely
from shapely.geometry import LinearRing, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from gridzonal.exceptions import RegionFieldMissingError, RegionValidationError
from .grid import Bounds

Ring = Sequence[Tuple[float, float]]


def _attribute_text(value: Any) -> str:
    """Attribute values are strings; None and NaN become the empty string."""
    if value is None:
        return ""
    if isinstance(value, numbers.Real) and math.isnan(value):
        return ""
    return str(value)


def _close_ring(ring: Ring, region_id: int) -> List[Tuple[float, float]]:
    coords = [(float(x), float(y)) for x, y in ring]
    if coords and coords[0] != coords[-1]:
        coords.append(coords[0])
    if len(set(coords)) < 3:
        raise RegionValidationError(
            f"Ring needs at least three distinct vertices, got {len(set(coords))}",
            region_id=region_id
        )
    return coords


@dataclass(frozen=True)
class Region:
    """
    One polygon region.

    Attributes:
        id: Position in the original input order
        geometry: shapely Polygon or MultiPolygon (holes as interior rings);
            a private prepared copy of the geometry passed in
        attributes: Field name -> string value (read-only)
    """
    id: int
    geometry: BaseGeometry
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.geometry, (Polygon, MultiPolygon)):
            raise RegionValidationError(
                f"Region geometry must be Polygon or MultiPolygon, got {self.geometry.geom_type}",
                region_id=self.id
            )
        geometry = shapely.transform(self.geometry, lambda coords: coords)
        shapely.prepare(geometry)
        object.__setattr__(self, "geometry", geometry)
        object.__setattr__(
            self,
            "attributes",
            MappingProxyType({str(k): _attribute_text(v) for k, v in dict(self.attributes).items()})
        )

    @classmethod
    def from_rings(
        cls,
        region_id: int,
        rings: Sequence[Ring],
        attributes: Optional[Mapping[str, Any]] = None,
        hole_flags: Optional[Sequence[bool]] = None
    ) -> 'Region':
        """
        Build a region from raw vertex rings.

        Without `hole_flags`, a ring wound opposite to the first ring is a hole
        of the exterior that contains it; any other ring starts a new part.
        With `hole_flags`, the flags decide (the first ring is always an exterior).

        Args:
            region_id: Region identifier
            rings: Vertex sequences; closed automatically when first != last
            attributes: Field name -> value
            hole_flags: Optional explicit hole marker per ring

        Raises:
            RegionValidationError: No rings, degenerate ring, or flag count mismatch
        """
        if not rings:
            raise RegionValidationError("Region needs at least one ring", region_id=region_id)
        if hole_flags is not None and len(hole_flags) != len(rings):
            raise RegionValidationError(
                f"Got {len(hole_flags)} hole flags for {len(rings)} rings",
                region_id=region_id
            )

        closed = [_close_ring(ring, region_id) for ring in rings]
        first_ccw = LinearRing(closed[0]).is_ccw
        parts: List[Tuple[List[Tuple[float, float]], List[List[Tuple[float, float]]]]] = []

        for index, ring in enumerate(closed):
            if hole_flags is not None:
                is_hole = bool(hole_flags[index]) and index > 0
            else:
                is_hole = index > 0 and LinearRing(ring).is_ccw != first_ccw

            if is_hole:
                ring_polygon = Polygon(ring)
                for shell, holes in reversed(parts):
                    if Polygon(shell).contains(ring_polygon):
                        holes.append(ring)
                        break
                else:
                    parts.append((ring, []))
            else:
                parts.append((ring, []))

        polygons = [Polygon(shell, holes) for shell, holes in parts]
        geometry = polygons[0] if len(polygons) == 1 else MultiPolygon(polygons)
        return cls(region_id, geometry, attributes or {})


class RegionSet:
    """
    Ordered, immutable collection of regions.

    Args:
        regions: Regions in output order; ids must be unique
        required_fields: Attribute fields every region must carry

    Raises:
        RegionFieldMissingError: A required field is absent from some region
        RegionValidationError: Duplicate region ids
    """

    def __init__(self, regions: Iterable[Region], required_fields: Sequence[str] = ()):
        self._regions: Tuple[Region, ...] = tuple(regions)
        seen = set()
        for region in self._regions:
            if region.id in seen:
                raise RegionValidationError(f"Duplicate region id {region.id}", region_id=region.id)
            seen.add(region.id)
        if required_fields:
            self.require_fields(*required_fields)

    @classmethod
    def from_geodataframe(cls, gdf, required_fields: Sequence[str] = ()) -> 'RegionSet':
        """
        Build a RegionSet from a geopandas GeoDataFrame, one region per row.

        Required fields are checked against the column list before any
        geometry is converted. Missing geometries become empty polygons.
        """
        geometry_column = gdf.geometry.name
        columns = [c for c in gdf.columns if c != geometry_column]
        for name in required_fields:
            if name not in columns:
                raise RegionFieldMissingError(name, available=columns)

        import pandas as pd

        records = [
            {k: (None if pd.api.types.is_scalar(v) and pd.isna(v) else v) for k, v in record.items()}
            for record in gdf[columns].to_dict(orient="records")
        ]
        regions = []
        for index, (geometry, attributes) in enumerate(zip(gdf.geometry, records)):
            regions.append(Region(index, geometry if geometry is not None else Polygon(), attributes))
        return cls(regions)

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self._regions

    @property
    def field_names(self) -> Tuple[str, ...]:
        """Fields present in every region, in first-region order."""
        if not self._regions:
            return ()
        common = set(self._regions[0].attributes)
        for region in self._regions[1:]:
            common &= set(region.attributes)
        return tuple(name for name in self._regions[0].attributes if name in common)

    def require_fields(self, *field_names: str) -> None:
        """Raise RegionFieldMissingError for the first field some region lacks."""
        for name in field_names:
            for region in self._regions:
                if name not in region.attributes:
                    raise RegionFieldMissingError(
                        name,
                        available=self.field_names,
                        region_id=region.id
                    )

    def field_value(self, region: Region, field_name: str) -> str:
        """Attribute value of `region`; RegionFieldMissingError when absent."""
        try:
            return region.attributes[field_name]
        except KeyError:
            raise RegionFieldMissingError(
                field_name,
                available=tuple(region.attributes),
                region_id=region.id
            ) from None

    def bounding_box(self, region: Region) -> Bounds:
        """Bounding rectangle of the region geometry (NaN bounds when empty)."""
        if region.geometry.is_empty:
            return Bounds(math.nan, math.nan, math.nan, math.nan)
        return Bounds(*region.geometry.bounds)

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __getitem__(self, index: int) -> Region:
        return self._regions[index]

    def __repr__(self) -> str:
        return f"RegionSet({len(self._regions)} regions, fields={list(self.field_names)})"
