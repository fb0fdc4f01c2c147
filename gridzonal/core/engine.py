# ============================================================================
# ZONAL EXTRACTION ENGINE
# ============================================================================
# STATUS: Core - Orchestrates resolver, aggregator and assembler
# PURPOSE: Aggregate every grid layer over every region into an OutputTable
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: extract
# DEPENDENCIES: numpy, shapely (via core.logic)
# ============================================================================
"""
Zonal Extraction Engine.

Flow:
    1. Validate the label fields on every region (before any grid access)
    2. Resolve the aggregation into a Reducer compatible with the policy
    3. Per region: resolve member cells, aggregate each layer
    4. Assemble rows in region-set order

Per-region work only reads the shared grid, so regions fan out on a
ThreadPoolExecutor when there are enough of them. Results are collected
by region id; completion order never reaches the output.

The call is atomic: the first fatal error aborts the run and no partial
table is returned.

Usage:
    from gridzonal.core.engine import extract
    table = extract(grid, regions, "ST_NM", "DISTRICT", aggregation="max")
"""

import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Tuple, Union

from gridzonal.config import AppConfig, get_config
from gridzonal.core.logic.aggregation import ZonalAggregator
from gridzonal.core.logic.assembler import ResultAssembler
from gridzonal.core.logic.membership import CellMembershipResolver
from gridzonal.core.logic.reducers import Reducer, resolve_reducer
from gridzonal.core.models.enums import BoundaryRule, MembershipPolicy
from gridzonal.core.models.grid import Grid
from gridzonal.core.models.regions import Region, RegionSet
from gridzonal.core.models.results import AggregateValue, OutputTable, ZonalResult
from gridzonal.exceptions import (
    BusinessLogicError,
    ConfigurationError,
    ContractViolationError,
    OutOfBoundsError,
)
from gridzonal.util_logger import (
    ComponentType,
    LoggerFactory,
    clear_checkpoint_context,
    log_memory_checkpoint,
)

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "zonal_engine")

# Errors that carry a region_id slot
_REGION_ERRORS = (BusinessLogicError, OutOfBoundsError)


def _option(enum_type, value):
    try:
        return enum_type(value)
    except ValueError:
        choices = [member.value for member in enum_type]
        raise ConfigurationError(
            f"Unknown {enum_type.__name__}: {value!r}. Must be one of {choices}"
        ) from None


def _process_region(
    region: Region,
    resolver: CellMembershipResolver,
    aggregator: ZonalAggregator
) -> Tuple[int, Tuple[AggregateValue, ...]]:
    try:
        membership = resolver.resolve(region)
        return region.id, aggregator.aggregate(membership)
    except _REGION_ERRORS as e:
        if e.region_id is None:
            e.region_id = region.id
        raise


def extract(
    grid: Grid,
    region_set: RegionSet,
    state_field: str,
    district_field: str,
    aggregation: Union[str, Callable, Reducer, None] = None,
    remove_missing: Optional[bool] = None,
    membership_policy: Union[MembershipPolicy, str, None] = None,
    boundary_rule: Union[BoundaryRule, str, None] = None,
    max_workers: Optional[int] = None,
    config: Optional[AppConfig] = None
) -> OutputTable:
    """
    Aggregate every grid layer over every region.

    Options left as None take their value from `config.extraction`
    (defaults: "mean", remove missing, centroid policy, inclusive boundary).

    Args:
        grid: Gridded field (one or more layers)
        region_set: Regions in output order
        state_field: Attribute holding the state label
        district_field: Attribute holding the district label
        aggregation: Reducer name, callable over a value array, or Reducer
        remove_missing: Drop missing cells before reducing
        membership_policy: centroid, fractional or all_touched
        boundary_rule: inclusive or exclusive (centroid policy only)
        max_workers: Thread count for per-region work
        config: AppConfig (default: get_config())

    Returns:
        OutputTable with one row per region, columns (state, district, *layers)

    Raises:
        RegionFieldMissingError: A label field is absent (before grid access)
        ConfigurationError: Unknown policy or boundary rule, or an unweighted
                            reducer with the fractional policy
        ContractViolationError: Wrong argument types
    """
    if not isinstance(grid, Grid):
        raise ContractViolationError(f"grid must be a Grid, got {type(grid).__name__}")
    if not isinstance(region_set, RegionSet):
        raise ContractViolationError(
            f"region_set must be a RegionSet, got {type(region_set).__name__}"
        )

    region_set.require_fields(state_field, district_field)

    config = config or get_config()
    settings = config.extraction
    aggregation = settings.default_aggregation if aggregation is None else aggregation
    remove_missing = settings.remove_missing if remove_missing is None else remove_missing
    policy = _option(MembershipPolicy, membership_policy or settings.membership_policy)
    rule = _option(BoundaryRule, boundary_rule or settings.boundary_rule)

    reducer = resolve_reducer(aggregation, policy)
    resolver = CellMembershipResolver(
        grid, policy, rule, settings.weight_epsilon,
        small_polygon_fallback=settings.small_polygon_fallback
    )
    aggregator = ZonalAggregator(grid, reducer, remove_missing=remove_missing)

    workers = max_workers or settings.resolved_max_workers()
    parallel = workers > 1 and len(region_set) >= settings.parallel_min_regions
    run_id = uuid.uuid4().hex[:8]

    logger.info(
        f"📊 Extracting {reducer.name} over {len(region_set)} regions x {grid.n_layers} layers "
        f"(policy={policy.value}, workers={workers if parallel else 1})"
    )
    log_memory_checkpoint(logger, "extract start", context_id=run_id, regions=len(region_set))

    results: ZonalResult = {}
    try:
        if parallel:
            with ThreadPoolExecutor(max_workers=min(workers, len(region_set))) as executor:
                futures = {
                    executor.submit(_process_region, region, resolver, aggregator): region.id
                    for region in region_set
                }
                try:
                    for future in as_completed(futures):
                        region_id, values = future.result()
                        results[region_id] = values
                except BaseException:
                    for future in futures:
                        future.cancel()
                    raise
        else:
            for region in region_set:
                region_id, values = _process_region(region, resolver, aggregator)
                results[region_id] = values
    except Exception as e:
        logger.error(
            f"❌ Extraction failed: {type(e).__name__}: {e}",
            extra={'custom_dimensions': {'region_id': getattr(e, 'region_id', None)}}
        )
        raise
    finally:
        log_memory_checkpoint(logger, "extract end", context_id=run_id, regions_done=len(results))
        clear_checkpoint_context(run_id)

    assembler = ResultAssembler(region_set, state_field, district_field, grid.layer_names)
    table = assembler.assemble(results)
    logger.info(f"✅ Extraction complete: {len(table)} rows, {len(table.columns)} columns")
    return table
