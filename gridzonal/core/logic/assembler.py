"""
Result Assembler.

Builds the OutputTable from per-region aggregates. Row order is the
region-set order, independent of the order results were computed in.
A region with no entry in the zonal result is kept with NO_DATA in
every layer column.

Exports:
    ResultAssembler
"""

from typing import Sequence

from gridzonal.core.models.regions import RegionSet
from gridzonal.core.models.results import NO_DATA, OutputRow, OutputTable, ZonalResult


class ResultAssembler:
    """Join region labels with their aggregates."""

    def __init__(
        self,
        region_set: RegionSet,
        state_field: str,
        district_field: str,
        layer_names: Sequence[str]
    ):
        self.region_set = region_set
        self.state_field = state_field
        self.district_field = district_field
        self.layer_names = tuple(layer_names)

    def assemble(self, zonal_result: ZonalResult) -> OutputTable:
        missing = (NO_DATA,) * len(self.layer_names)
        rows = [
            OutputRow(
                region_id=region.id,
                state=self.region_set.field_value(region, self.state_field),
                district=self.region_set.field_value(region, self.district_field),
                values=tuple(zonal_result.get(region.id, missing))
            )
            for region in self.region_set
        ]
        return OutputTable(("state", "district") + self.layer_names, rows)
