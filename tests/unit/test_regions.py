"""
Region and RegionSet tests.
"""

import math

import pytest
import shapely
from shapely.geometry import LineString, MultiPolygon, Polygon, box

from gridzonal.core.models.regions import Region, RegionSet
from gridzonal.exceptions import MissingFieldError, RegionFieldMissingError, RegionValidationError
from tests.factories.model_factories import make_region, make_region_set


class TestRegion:

    def test_attributes_are_strings(self):
        region = Region(0, box(0, 0, 1, 1), {"state": "A", "code": 7, "note": None})
        assert region.attributes["code"] == "7"
        assert region.attributes["note"] == ""

    def test_nan_attribute_becomes_empty(self):
        region = Region(0, box(0, 0, 1, 1), {"state": math.nan})
        assert region.attributes["state"] == ""

    def test_attributes_read_only(self):
        region = make_region(0)
        with pytest.raises(TypeError):
            region.attributes["state"] = "changed"

    def test_non_polygon_rejected(self):
        with pytest.raises(RegionValidationError):
            Region(3, LineString([(0, 0), (1, 1)]), {})

    def test_region_id_on_validation_error(self):
        with pytest.raises(RegionValidationError) as exc_info:
            Region(3, LineString([(0, 0), (1, 1)]), {})
        assert exc_info.value.region_id == 3

    def test_geometry_is_a_prepared_private_copy(self):
        source = box(0, 0, 1, 1)
        region = Region(0, source, {})
        assert shapely.is_prepared(region.geometry)
        assert not shapely.is_prepared(source)
        assert region.geometry is not source
        assert region.geometry.equals(source)


class TestRegionFromRings:

    def test_ring_closed_automatically(self):
        region = Region.from_rings(0, [[(0, 0), (2, 0), (2, 2), (0, 2)]])
        assert isinstance(region.geometry, Polygon)
        assert region.geometry.area == 4.0

    def test_opposite_winding_ring_is_hole(self):
        shell = [(0, 0), (3, 0), (3, 3), (0, 3)]    # counter-clockwise
        hole = [(1, 1), (1, 2), (2, 2), (2, 1)]     # clockwise
        region = Region.from_rings(0, [shell, hole])
        assert len(region.geometry.interiors) == 1
        assert region.geometry.area == 8.0

    def test_same_winding_ring_is_new_part(self):
        first = [(0, 0), (1, 0), (1, 1), (0, 1)]
        second = [(5, 5), (6, 5), (6, 6), (5, 6)]
        region = Region.from_rings(0, [first, second])
        assert isinstance(region.geometry, MultiPolygon)
        assert len(region.geometry.geoms) == 2

    def test_hole_flags_override_winding(self):
        shell = [(0, 0), (3, 0), (3, 3), (0, 3)]
        inner = [(1, 1), (2, 1), (2, 2), (1, 2)]    # same winding as shell
        region = Region.from_rings(0, [shell, inner], hole_flags=[False, True])
        assert len(region.geometry.interiors) == 1

    def test_degenerate_ring_rejected(self):
        with pytest.raises(RegionValidationError):
            Region.from_rings(0, [[(0, 0), (1, 1), (0, 0)]])

    def test_no_rings_rejected(self):
        with pytest.raises(RegionValidationError):
            Region.from_rings(0, [])


class TestRegionSet:

    def test_preserves_order(self):
        regions = make_region_set([box(i, 0, i + 1, 1) for i in range(5)])
        assert [r.id for r in regions] == [0, 1, 2, 3, 4]
        assert len(regions) == 5

    def test_duplicate_ids_rejected(self):
        with pytest.raises(RegionValidationError):
            RegionSet([make_region(0), make_region(0)])

    def test_missing_required_field(self):
        regions = [
            Region(0, box(0, 0, 1, 1), {"state": "A", "district": "X"}),
            Region(1, box(1, 0, 2, 1), {"region": "B", "district": "Y"}),
        ]
        with pytest.raises(RegionFieldMissingError) as exc_info:
            RegionSet(regions, required_fields=("state", "district"))
        assert exc_info.value.field_name == "state"
        assert exc_info.value.region_id == 1

    def test_missing_field_alias(self):
        assert MissingFieldError is RegionFieldMissingError

    def test_field_names_common_to_all(self):
        regions = RegionSet([
            Region(0, box(0, 0, 1, 1), {"state": "A", "district": "X", "extra": "1"}),
            Region(1, box(1, 0, 2, 1), {"state": "B", "district": "Y"}),
        ])
        assert regions.field_names == ("state", "district")

    def test_field_value(self):
        regions = RegionSet([Region(0, box(0, 0, 1, 1), {"state": "A", "district": "X"})])
        assert regions.field_value(regions[0], "district") == "X"
        with pytest.raises(RegionFieldMissingError):
            regions.field_value(regions[0], "zone")

    def test_bounding_box(self):
        regions = make_region_set([box(1, 2, 3, 5)])
        assert tuple(regions.bounding_box(regions[0])) == (1.0, 2.0, 3.0, 5.0)

    def test_bounding_box_of_empty_geometry(self):
        regions = RegionSet([Region(0, Polygon(), {})])
        assert not regions.bounding_box(regions[0]).is_finite


class TestRegionSetFromGeoDataFrame:

    def test_required_fields_checked_on_columns(self):
        gpd = pytest.importorskip("geopandas")
        gdf = gpd.GeoDataFrame({"region": ["A"], "district": ["X"]}, geometry=[box(0, 0, 1, 1)])
        with pytest.raises(RegionFieldMissingError) as exc_info:
            RegionSet.from_geodataframe(gdf, required_fields=("state", "district"))
        assert "region" in exc_info.value.available

    def test_rows_become_regions(self):
        gpd = pytest.importorskip("geopandas")
        gdf = gpd.GeoDataFrame(
            {"state": ["A", "B"], "district": ["X", None]},
            geometry=[box(0, 0, 1, 1), box(1, 0, 2, 1)],
        )
        regions = RegionSet.from_geodataframe(gdf, required_fields=("state", "district"))
        assert [r.id for r in regions] == [0, 1]
        assert regions[1].attributes["district"] == ""
        assert "geometry" not in regions[0].attributes
