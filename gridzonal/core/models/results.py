# ============================================================================
# EXTRACTION RESULT MODELS
# ============================================================================
# STATUS: Core - Membership, per-layer aggregates and the output table
# PURPOSE: Pure data structures passed between resolver, aggregator and assembler
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: NO_DATA, AggregateValue, CellMembership, ZonalResult, OutputRow, OutputTable
# DEPENDENCIES: numpy, pydantic, pandas (to_dataframe only)
# ============================================================================
"""
Extraction Result Data Models.

No business logic - pure data structures.

Exports:
    NO_DATA: Marker for "no cells contributed" (distinct from a NaN result)
    CellMembership: Cells of one region with their weights
    OutputRow: One region's labels and per-layer values
    OutputTable: Ordered rows plus column names
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .enums import MembershipPolicy


class _NoDataType:
    """Singleton marker: a region/layer pair with no contributing cells."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_DATA"

    def __reduce__(self):
        return (_NoDataType, ())


NO_DATA = _NoDataType()

AggregateValue = Union[float, _NoDataType]


@dataclass(frozen=True, eq=False)
class CellMembership:
    """
    Cells belonging to one region.

    Attributes:
        region_id: Region the cells belong to
        rows: Row indices (int array)
        cols: Column indices (int array)
        weights: Weight per cell, each in (0, 1]
        policy: Membership policy that produced the weights
    """
    region_id: int
    rows: np.ndarray
    cols: np.ndarray
    weights: np.ndarray
    policy: MembershipPolicy = MembershipPolicy.CENTROID

    @classmethod
    def empty(cls, region_id: int, policy: MembershipPolicy = MembershipPolicy.CENTROID) -> 'CellMembership':
        return cls(
            region_id,
            np.empty(0, dtype=np.intp),
            np.empty(0, dtype=np.intp),
            np.empty(0, dtype=np.float64),
            policy
        )

    def triples(self) -> List[Tuple[int, int, float]]:
        """(row, col, weight) per member cell, row-major."""
        return [
            (int(r), int(c), float(w))
            for r, c, w in zip(self.rows, self.cols, self.weights)
        ]

    @property
    def total_weight(self) -> float:
        return float(self.weights.sum())

    @property
    def is_empty(self) -> bool:
        return self.rows.size == 0

    def __len__(self) -> int:
        return int(self.rows.size)


# Region id -> one aggregate per grid layer
ZonalResult = Dict[int, Tuple[AggregateValue, ...]]


def _plain(value: AggregateValue) -> float:
    return math.nan if value is NO_DATA else value


class OutputRow(BaseModel):
    """One region's labels and per-layer aggregates (grid layer order)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    region_id: int = Field(..., ge=0, description="Region position in the input")
    state: str = Field(..., description="Value of the state field")
    district: str = Field(..., description="Value of the district field")
    values: Tuple[Any, ...] = Field(default=(), description="Aggregate per layer (float or NO_DATA)")


class OutputTable:
    """
    Immutable extraction result.

    Columns are ("state", "district", *layer_names); rows follow the
    region-set order.
    """

    def __init__(self, columns: Sequence[str], rows: Sequence[OutputRow]):
        self._columns = tuple(columns)
        self._rows = tuple(rows)
        width = len(self._columns) - 2
        for row in self._rows:
            if len(row.values) != width:
                raise ValueError(
                    f"Row for region {row.region_id} has {len(row.values)} values, expected {width}"
                )

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    @property
    def layer_names(self) -> Tuple[str, ...]:
        return self._columns[2:]

    @property
    def rows(self) -> Tuple[OutputRow, ...]:
        return self._rows

    def column(self, name: str) -> Tuple[Any, ...]:
        """All values of one column, in row order."""
        if name == "state":
            return tuple(row.state for row in self._rows)
        if name == "district":
            return tuple(row.district for row in self._rows)
        try:
            index = self.layer_names.index(name)
        except ValueError:
            raise KeyError(f"No column named '{name}'. Columns: {list(self._columns)}") from None
        return tuple(row.values[index] for row in self._rows)

    def to_records(self, include_id: bool = False) -> List[Dict[str, Any]]:
        """One dict per row keyed by column name; NO_DATA values are kept as-is."""
        records = []
        for row in self._rows:
            record: Dict[str, Any] = {"region_id": row.region_id} if include_id else {}
            record["state"] = row.state
            record["district"] = row.district
            record.update(zip(self.layer_names, row.values))
            records.append(record)
        return records

    def to_dataframe(self, include_id: bool = False):
        """pandas DataFrame with NO_DATA rendered as NaN."""
        import pandas as pd

        columns = (("region_id",) if include_id else ()) + self._columns
        data = []
        for row in self._rows:
            prefix = [row.region_id] if include_id else []
            data.append(prefix + [row.state, row.district] + [_plain(v) for v in row.values])
        frame = pd.DataFrame(data, columns=list(columns))
        for name in self.layer_names:
            frame[name] = frame[name].astype("float64")
        return frame

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[OutputRow]:
        return iter(self._rows)

    def __repr__(self) -> str:
        return f"OutputTable({len(self._rows)} rows, columns={list(self._columns)})"
