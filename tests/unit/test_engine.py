"""
extract() tests.

End-to-end behaviour of the engine on in-memory grids: aggregation
results, NO_DATA handling, field validation order, determinism and
order preservation under parallel execution.
"""

import math
import random
import time
from unittest.mock import patch

import numpy as np
import pytest
from shapely.geometry import box

from gridzonal.config import AppConfig
from gridzonal.config.extraction_config import ExtractionConfig
from gridzonal.core.engine import extract
from gridzonal.core.logic.reducers import UnweightedReducer
from gridzonal.core.models.enums import MembershipPolicy
from gridzonal.core.models.grid import Grid
from gridzonal.core.models.regions import Region, RegionSet
from gridzonal.core.models.results import NO_DATA
from gridzonal.exceptions import (
    ConfigurationError,
    ContractViolationError,
    RegionFieldMissingError,
)
from tests.factories.model_factories import make_grid, make_region_set, make_tiled_region_set


def _parallel_config(min_regions: int = 2) -> AppConfig:
    return AppConfig(extraction=ExtractionConfig(max_workers=4, parallel_min_regions=min_regions))


class TestConcreteScenarios:

    def test_top_left_cell_centroid_mean(self, grid_2x2):
        regions = make_region_set([box(0, 1, 1, 2)])
        table = extract(grid_2x2, regions, "state", "district", aggregation="mean")
        assert table.rows[0].values == (1.0,)

    def test_half_cover_fractional_mean(self, grid_2x2):
        regions = make_region_set([box(0, 0.5, 2, 1.5)])
        table = extract(
            grid_2x2, regions, "state", "district",
            aggregation="mean", membership_policy=MembershipPolicy.FRACTIONAL
        )
        assert table.rows[0].values[0] == pytest.approx(2.5)

    def test_renamed_state_field_fails_before_grid_access(self, grid_2x2):
        regions = RegionSet([
            Region(0, box(0, 0, 1, 1), {"region": "A", "district": "X"}),
            Region(1, box(1, 0, 2, 1), {"region": "B", "district": "Y"}),
        ])
        with patch.object(Grid, "window_for_bounds") as window, \
                patch.object(Grid, "layer_values") as values:
            with pytest.raises(RegionFieldMissingError) as exc_info:
                extract(grid_2x2, regions, "state", "district")
        assert exc_info.value.field_name == "state"
        window.assert_not_called()
        values.assert_not_called()


class TestAggregationProperties:

    def test_full_extent_mean_equals_nanmean(self):
        data = np.array([
            [[1.0, np.nan, 3.0], [4.0, 5.0, 6.0]],
            [[10.0, 20.0, np.nan], [np.nan, 50.0, 60.0]],
        ])
        grid = make_grid(data, layer_names=["a", "b"])
        regions = make_region_set([box(0, 0, 3, 2)])
        table = extract(grid, regions, "state", "district", aggregation="mean")
        expected = tuple(float(np.nanmean(layer)) for layer in data)
        assert table.rows[0].values == pytest.approx(expected)

    def test_disjoint_region_is_no_data_and_keeps_position(self, grid_2x2):
        regions = make_region_set([box(0, 0, 1, 1), box(10, 10, 11, 11), box(1, 1, 2, 2)])
        table = extract(grid_2x2, regions, "state", "district")
        assert [row.region_id for row in table] == [0, 1, 2]
        assert table.rows[1].values == (NO_DATA,)
        assert table.rows[0].values == (3.0,)
        assert table.rows[2].values == (2.0,)

    def test_missing_only_cell_with_removal(self):
        grid = make_grid([[np.nan, 1.0]])
        regions = make_region_set([box(0, 0, 1, 1)])
        table = extract(grid, regions, "state", "district", remove_missing=True)
        assert table.rows[0].values == (NO_DATA,)

    def test_missing_only_cell_without_removal(self):
        grid = make_grid([[np.nan, 1.0]])
        regions = make_region_set([box(0, 0, 1, 1)])
        table = extract(grid, regions, "state", "district", remove_missing=False)
        assert math.isnan(table.rows[0].values[0])

    def test_hole_excluded_from_sum(self):
        grid = make_grid(np.arange(1, 10, dtype=float).reshape(3, 3))
        donut = Region.from_rings(0, [
            [(0, 0), (3, 0), (3, 3), (0, 3)],
            [(1, 1), (1, 2), (2, 2), (2, 1)],
        ], {"state": "A", "district": "X"})
        table = extract(grid, RegionSet([donut]), "state", "district", aggregation="sum")
        assert table.rows[0].values == (40.0,)

    def test_labels_come_from_named_fields(self, grid_2x2):
        regions = RegionSet([Region(0, box(0, 0, 2, 2), {"ST_NM": "Kerala", "DIST": "Idukki"})])
        table = extract(grid_2x2, regions, "ST_NM", "DIST")
        assert table.to_records()[0]["state"] == "Kerala"
        assert table.to_records()[0]["district"] == "Idukki"

    def test_custom_callable_aggregation(self, grid_2x2):
        regions = make_region_set([box(0, 0, 2, 2)])
        table = extract(grid_2x2, regions, "state", "district", aggregation=lambda v: float(np.ptp(v)))
        assert table.rows[0].values == (3.0,)

    def test_layer_columns_follow_grid(self):
        grid = make_grid(np.ones((3, 2, 2)), layer_names=["2020-01-01", "2020-02-01", "2020-03-01"])
        table = extract(grid, make_region_set([box(0, 0, 2, 2)]), "state", "district")
        assert table.columns == ("state", "district", "2020-01-01", "2020-02-01", "2020-03-01")


class TestDeterminism:

    def test_idempotent_across_parallel_runs(self):
        rng = np.random.default_rng(7)
        grid = make_grid(rng.random((2, 6, 6)))
        regions = make_tiled_region_set(3, 3, cell=2.0)
        config = _parallel_config()
        first = extract(grid, regions, "state", "district", config=config)
        second = extract(grid, regions, "state", "district", config=config)
        assert first.to_dataframe().equals(second.to_dataframe())

    def test_parallel_matches_sequential(self):
        rng = np.random.default_rng(11)
        grid = make_grid(rng.random((6, 6)))
        regions = make_tiled_region_set(6, 6)
        parallel = extract(grid, regions, "state", "district", config=_parallel_config())
        sequential = extract(grid, regions, "state", "district", max_workers=1)
        assert parallel.to_records(include_id=True) == sequential.to_records(include_id=True)

    def test_order_preserved_when_completion_order_scrambled(self):
        grid = make_grid(np.arange(16, dtype=float).reshape(4, 4))
        regions = make_tiled_region_set(4, 4)

        def slow_first(values):
            time.sleep(random.uniform(0, 0.02))
            return float(values[0])

        table = extract(
            grid, regions, "state", "district",
            aggregation=UnweightedReducer(slow_first), config=_parallel_config()
        )
        assert [row.region_id for row in table] == list(range(16))
        assert [row.values[0] for row in table] == [float(v) for v in range(16)]


class TestEngineErrors:

    def test_unweighted_callable_with_fractional(self, grid_2x2):
        regions = make_region_set([box(0, 0, 1, 1)])
        with pytest.raises(ConfigurationError):
            extract(grid_2x2, regions, "state", "district",
                    aggregation=np.max, membership_policy="fractional")

    @pytest.mark.parametrize("option", ["membership_policy", "boundary_rule"])
    def test_unknown_option_value_is_configuration_error(self, grid_2x2, option):
        regions = make_region_set([box(0, 0, 1, 1)])
        with pytest.raises(ConfigurationError, match="bogus"):
            extract(grid_2x2, regions, "state", "district", **{option: "bogus"})

    def test_wrong_argument_types(self, grid_2x2):
        with pytest.raises(ContractViolationError):
            extract([[1, 2]], make_region_set([]), "state", "district")
        with pytest.raises(ContractViolationError):
            extract(grid_2x2, [box(0, 0, 1, 1)], "state", "district")

    def test_reducer_error_propagates_unchanged(self, grid_2x2):
        def broken(values):
            raise ZeroDivisionError("boom")

        with pytest.raises(ZeroDivisionError):
            extract(grid_2x2, make_region_set([box(0, 0, 2, 2)]), "state", "district", aggregation=broken)

    def test_package_error_gets_region_id(self, grid_2x2):
        from gridzonal.exceptions import OutOfBoundsError

        regions = make_region_set([box(0, 0, 1, 1), box(1, 1, 2, 2)])
        with patch.object(Grid, "layer_values", side_effect=OutOfBoundsError("bad index")):
            with pytest.raises(OutOfBoundsError) as exc_info:
                extract(grid_2x2, regions, "state", "district", max_workers=1)
        assert exc_info.value.region_id == 0


class TestConfigDefaults:

    def test_defaults_come_from_config(self, grid_2x2):
        config = AppConfig(extraction=ExtractionConfig(default_aggregation="max"))
        table = extract(grid_2x2, make_region_set([box(0, 0, 2, 2)]), "state", "district", config=config)
        assert table.rows[0].values == (4.0,)

    def test_environment_policy_applies(self, grid_2x2, monkeypatch):
        monkeypatch.setenv("GRIDZONAL_MEMBERSHIP_POLICY", "fractional")
        regions = make_region_set([box(0, 0.5, 2, 1.5)])
        table = extract(grid_2x2, regions, "state", "district")
        assert table.rows[0].values[0] == pytest.approx(2.5)

    def test_region_smaller_than_a_cell_gets_the_cell_value(self, grid_2x2):
        regions = make_region_set([box(0.1, 1.1, 0.4, 1.4)])
        table = extract(grid_2x2, regions, "state", "district")
        assert table.rows[0].values == (1.0,)

    def test_small_polygon_fallback_can_be_disabled(self, grid_2x2, monkeypatch):
        monkeypatch.setenv("GRIDZONAL_SMALL_POLYGON_FALLBACK", "false")
        regions = make_region_set([box(0.1, 1.1, 0.4, 1.4)])
        table = extract(grid_2x2, regions, "state", "district")
        assert table.rows[0].values == (NO_DATA,)
