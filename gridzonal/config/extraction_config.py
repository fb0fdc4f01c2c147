# ============================================================================
# ZONAL EXTRACTION CONFIGURATION
# ============================================================================
# STATUS: Configuration - Membership policy, missing values, parallelism
# PURPOSE: Defaults applied by extract() when the caller leaves options unset
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: ExtractionConfig
# DEPENDENCIES: pydantic
# ============================================================================
"""
Zonal extraction configuration.

Provides configuration for:
    - Default aggregation name
    - Missing-value removal
    - Membership policy (centroid / fractional / all_touched) and boundary rule
    - Thread pool sizing for per-region fan-out

Exports:
    ExtractionConfig: Pydantic configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from gridzonal.core.models.enums import MembershipPolicy, BoundaryRule
from .defaults import ExtractionDefaults, parse_bool


class ExtractionConfig(BaseModel):
    """
    Zonal extraction configuration.

    Field Naming Convention:
        Field names match environment variable names minus the GRIDZONAL_ prefix.

    Configuration Fields:
    ---------------------
    default_aggregation: Reducer name used when extract() gets no aggregation
    remove_missing: Drop missing cells before reducing (R's na.rm)
    membership_policy: How cells are assigned to polygons
    boundary_rule: Whether centres on a polygon boundary count (centroid policy)
    small_polygon_fallback: Centroid regions covering no cell centre use the cells they overlap
    weight_epsilon: Fractional weights at or below this are discarded
    max_workers: Thread count for per-region work (None = CPU count)
    parallel_min_regions: Region count below which work stays on the caller thread
    """

    default_aggregation: str = Field(
        default=ExtractionDefaults.DEFAULT_AGGREGATION,
        description="Named reducer used when no aggregation is supplied",
        examples=["mean", "sum", "max"]
    )

    remove_missing: bool = Field(
        default=ExtractionDefaults.REMOVE_MISSING,
        description="Discard missing cells before aggregation. "
                    "A layer with no remaining cells reports NO_DATA."
    )

    membership_policy: MembershipPolicy = Field(
        default=MembershipPolicy(ExtractionDefaults.MEMBERSHIP_POLICY),
        description="Cell membership policy",
        examples=["centroid", "fractional", "all_touched"]
    )

    boundary_rule: BoundaryRule = Field(
        default=BoundaryRule(ExtractionDefaults.BOUNDARY_RULE),
        description="Treatment of cell centres lying exactly on a polygon boundary",
        examples=["inclusive", "exclusive"]
    )

    small_polygon_fallback: bool = Field(
        default=ExtractionDefaults.SMALL_POLYGON_FALLBACK,
        description="Under the centroid policy, a region whose polygon contains no cell "
                    "centre is assigned the cells its interior overlaps instead of NO_DATA"
    )

    weight_epsilon: float = Field(
        default=ExtractionDefaults.WEIGHT_EPSILON,
        ge=0.0,
        lt=1.0,
        description="Coverage weights at or below this value are treated as no coverage"
    )

    max_workers: Optional[int] = Field(
        default=ExtractionDefaults.MAX_WORKERS,
        ge=1,
        description="Threads for per-region aggregation (None = os.cpu_count())"
    )

    parallel_min_regions: int = Field(
        default=ExtractionDefaults.PARALLEL_MIN_REGIONS,
        ge=1,
        description="Minimum region count before the thread pool is used"
    )

    @field_validator('default_aggregation')
    @classmethod
    def validate_aggregation_name(cls, v):
        from gridzonal.core.logic.reducers import available_reducers
        if v not in available_reducers():
            raise ValueError(f"Unknown aggregation: {v}. Must be one of {available_reducers()}")
        return v

    def resolved_max_workers(self) -> int:
        """Worker count with the CPU-count fallback applied."""
        return self.max_workers or os.cpu_count() or 1

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        max_workers = os.environ.get("GRIDZONAL_MAX_WORKERS")
        return cls(
            default_aggregation=os.environ.get(
                "GRIDZONAL_DEFAULT_AGGREGATION", ExtractionDefaults.DEFAULT_AGGREGATION
            ),
            remove_missing=parse_bool(os.environ.get(
                "GRIDZONAL_REMOVE_MISSING", str(ExtractionDefaults.REMOVE_MISSING)
            )),
            membership_policy=os.environ.get(
                "GRIDZONAL_MEMBERSHIP_POLICY", ExtractionDefaults.MEMBERSHIP_POLICY
            ),
            boundary_rule=os.environ.get(
                "GRIDZONAL_BOUNDARY_RULE", ExtractionDefaults.BOUNDARY_RULE
            ),
            small_polygon_fallback=parse_bool(os.environ.get(
                "GRIDZONAL_SMALL_POLYGON_FALLBACK", str(ExtractionDefaults.SMALL_POLYGON_FALLBACK)
            )),
            weight_epsilon=float(os.environ.get(
                "GRIDZONAL_WEIGHT_EPSILON", str(ExtractionDefaults.WEIGHT_EPSILON)
            )),
            max_workers=int(max_workers) if max_workers else ExtractionDefaults.MAX_WORKERS,
            parallel_min_regions=int(os.environ.get(
                "GRIDZONAL_PARALLEL_MIN_REGIONS", str(ExtractionDefaults.PARALLEL_MIN_REGIONS)
            ))
        )

    def debug_dict(self) -> dict:
        """Plain dict for logging."""
        return {
            'default_aggregation': self.default_aggregation,
            'remove_missing': self.remove_missing,
            'membership_policy': self.membership_policy.value,
            'boundary_rule': self.boundary_rule.value,
            'small_polygon_fallback': self.small_polygon_fallback,
            'weight_epsilon': self.weight_epsilon,
            'max_workers': self.max_workers,
            'parallel_min_regions': self.parallel_min_regions
        }
