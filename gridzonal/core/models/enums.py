"""
Enumerations for cell membership resolution.

Exports:
    MembershipPolicy: How grid cells are assigned to a polygon
    BoundaryRule: Whether a cell centre exactly on a polygon boundary is inside
"""

from enum import Enum


class MembershipPolicy(str, Enum):
    """
    Cell membership policy.

    CENTROID: cell belongs to the polygon when its centre does (weight 1.0)
    FRACTIONAL: weight = overlap area / cell area
    ALL_TOUCHED: every cell whose interior overlaps the polygon interior (weight 1.0)
    """
    CENTROID = "centroid"
    FRACTIONAL = "fractional"
    ALL_TOUCHED = "all_touched"

    @property
    def is_binary(self) -> bool:
        """True when every member cell carries weight 1.0."""
        return self is not MembershipPolicy.FRACTIONAL


class BoundaryRule(str, Enum):
    """
    Treatment of cell centres lying exactly on the polygon boundary.

    Only consulted by the CENTROID policy.
    """
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"
