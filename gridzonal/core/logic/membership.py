# ============================================================================
# CELL MEMBERSHIP RESOLVER
# ============================================================================
# STATUS: Core logic - Polygon to grid-cell assignment
# PURPOSE: Decide which cells belong to a region and with what weight
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: CellMembershipResolver
# DEPENDENCIES: numpy, shapely>=2
# ============================================================================
"""
Cell Membership Resolver.

Two phases per region:
    1. Broad phase: region bounding box -> candidate window of grid cells
    2. Exact phase: shapely vectorised predicates on the candidates

Policies:
    CENTROID     cell centre in polygon (weight 1.0). INCLUSIVE counts centres
                 exactly on the boundary, EXCLUSIVE does not.
    FRACTIONAL   weight = area(cell ∩ polygon) / cell area
    ALL_TOUCHED  cell interior overlaps polygon interior (weight 1.0);
                 cells sharing only an edge or corner are left out

With `small_polygon_fallback`, a CENTROID region that covers no cell
centre (a district smaller than a cell) takes the cells whose interiors it
overlaps instead, as the ALL_TOUCHED policy would.

Holes are honoured by every policy. Polygons with zero area, empty
geometries and regions outside the grid extent resolve to an empty
membership.

Usage:
    resolver = CellMembershipResolver(grid, MembershipPolicy.FRACTIONAL)
    membership = resolver.resolve(region)
    membership.triples()    # [(row, col, weight), ...]
"""

from typing import Union

import numpy as np
import shapely

from gridzonal.core.models.enums import BoundaryRule, MembershipPolicy
from gridzonal.core.models.grid import Bounds, Grid
from gridzonal.core.models.regions import Region
from gridzonal.core.models.results import CellMembership
from gridzonal.exceptions import ContractViolationError


class CellMembershipResolver:
    """
    Resolve regions to weighted grid cells.

    Args:
        grid: Grid the regions are resolved against
        policy: MembershipPolicy (member or its string value)
        boundary_rule: BoundaryRule for the CENTROID policy
        weight_epsilon: Weights at or below this value are dropped
        small_polygon_fallback: CENTROID regions covering no cell centre
            fall back to the cells their interior overlaps
    """

    def __init__(
        self,
        grid: Grid,
        policy: Union[MembershipPolicy, str] = MembershipPolicy.CENTROID,
        boundary_rule: Union[BoundaryRule, str] = BoundaryRule.INCLUSIVE,
        weight_epsilon: float = 1e-12,
        small_polygon_fallback: bool = False
    ):
        if not isinstance(grid, Grid):
            raise ContractViolationError(
                f"grid must be a Grid, got {type(grid).__name__}"
            )
        self.grid = grid
        self.policy = MembershipPolicy(policy)
        self.boundary_rule = BoundaryRule(boundary_rule)
        self.weight_epsilon = float(weight_epsilon)
        self.small_polygon_fallback = bool(small_polygon_fallback)

    def resolve(self, region: Region) -> CellMembership:
        """Cells of `region`, row-major, each with weight > weight_epsilon."""
        geometry = region.geometry
        if geometry.is_empty or geometry.area <= 0:
            return CellMembership.empty(region.id, self.policy)

        window = self.grid.window_for_bounds(Bounds(*geometry.bounds))
        if window is None:
            return CellMembership.empty(region.id, self.policy)

        rows, cols = window.indices()

        if self.policy is MembershipPolicy.CENTROID:
            weights = self._centroid_weights(geometry, rows, cols)
            if self.small_polygon_fallback and not (weights > self.weight_epsilon).any():
                weights = self._touched_weights(geometry, rows, cols)
        elif self.policy is MembershipPolicy.FRACTIONAL:
            weights = self._fractional_weights(geometry, rows, cols)
        else:
            weights = self._touched_weights(geometry, rows, cols)

        keep = weights > self.weight_epsilon
        return CellMembership(
            region.id,
            rows[keep],
            cols[keep],
            weights[keep],
            self.policy
        )

    def _centroid_weights(self, geometry, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        x, y = self.grid.cell_centers(rows, cols)
        if self.boundary_rule is BoundaryRule.INCLUSIVE:
            inside = shapely.intersects_xy(geometry, x, y)
        else:
            inside = shapely.contains_xy(geometry, x, y)
        return inside.astype(np.float64)

    def _cell_boxes(self, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        minx, miny, maxx, maxy = self.grid.cell_rectangles(rows, cols)
        return shapely.box(minx, miny, maxx, maxy)

    def _fractional_weights(self, geometry, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        boxes = self._cell_boxes(rows, cols)
        weights = np.zeros(rows.size, dtype=np.float64)
        hit = shapely.intersects(geometry, boxes)
        if hit.any():
            overlap = shapely.area(shapely.intersection(boxes[hit], geometry))
            weights[hit] = overlap / self.grid.cell_area
        return np.minimum(weights, 1.0)

    def _touched_weights(self, geometry, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        boxes = self._cell_boxes(rows, cols)
        overlaps = shapely.intersects(geometry, boxes) & ~shapely.touches(geometry, boxes)
        return overlaps.astype(np.float64)
