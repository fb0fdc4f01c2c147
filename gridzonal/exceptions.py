# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by core, infrastructure and services
# PURPOSE: Exception hierarchy separating contract violations from expected failures
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: ContractViolationError, OutOfBoundsError, BusinessLogicError,
#          ValidationError, GridValidationError, RegionValidationError,
#          RegionFieldMissingError, MissingFieldError, ResourceNotFoundError,
#          VariableNotFoundError, ConfigurationError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues: bad inputs, missing fields)

An empty intersection between a region and the grid is NOT an error. It is
encoded in the result table as NO_DATA values and processing continues.

Every fatal error is raised to the caller unmodified. Errors raised while a
specific region was being processed carry that region's id in `region_id`.
"""

from typing import Optional, Sequence


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - An aggregation argument that is neither a name, a callable nor a Reducer

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class OutOfBoundsError(IndexError):
    """
    Grid index outside the grid's dimensions or layer count.

    The resolver only ever produces in-range indices, so seeing this
    during an extraction means an indexing defect, not bad input data.
    """

    def __init__(self, message: str, region_id: Optional[int] = None):
        super().__init__(message)
        self.region_id = region_id


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    These are normal failures caused by inputs (missing attribute columns,
    unknown variables, malformed grids) and are reported to the caller.
    """

    def __init__(self, message: str, region_id: Optional[int] = None):
        super().__init__(message)
        self.region_id = region_id


class ValidationError(BusinessLogicError):
    """
    Input validation failed.

    Note: This is different from ContractViolationError.
    This is for data validation, not type contracts.
    """
    pass


class GridValidationError(ValidationError):
    """
    Grid cannot be constructed from the given arrays or source.

    Examples:
        - Non-positive cell size
        - Layers with differing dimensions
        - Irregularly spaced coordinates in a NetCDF source
        - Rotated GeoTIFF transform
    """
    pass


class RegionValidationError(ValidationError):
    """
    Region geometry is unusable.

    Examples:
        - Point or line geometry in a polygon layer
        - Ring with fewer than three distinct vertices
    """
    pass


class RegionFieldMissingError(ValidationError):
    """
    Required attribute field absent from the region attributes.

    Fatal and raised before any geometry or grid work begins.
    """

    def __init__(
        self,
        field_name: str,
        available: Sequence[str] = (),
        region_id: Optional[int] = None
    ):
        where = f" (region {region_id})" if region_id is not None else ""
        message = f"Field '{field_name}' does not exist in the region attributes{where}."
        if available:
            message += f" Available fields: {', '.join(sorted(available))}"
        super().__init__(message, region_id=region_id)
        self.field_name = field_name
        self.available = tuple(available)


# Name used by the RegionSet contract
MissingFieldError = RegionFieldMissingError


class ResourceNotFoundError(BusinessLogicError):
    """
    Requested resource does not exist.

    Examples:
        - Vector or grid file path does not exist
        - Layer not found in a GeoPackage
    """
    pass


class VariableNotFoundError(ResourceNotFoundError):
    """
    Requested variable is not present in the gridded source.
    """

    def __init__(self, variable: str, available: Sequence[str] = (), source: Optional[str] = None):
        origin = f" in {source}" if source else ""
        message = f"Variable '{variable}' not found{origin}."
        if available:
            message += f" Available variables: {', '.join(available)}"
        super().__init__(message)
        self.variable = variable
        self.available = tuple(available)


class ConfigurationError(Exception):
    """
    Invalid configuration or option combination.

    Examples:
        - Unweighted reducer combined with the fractional membership policy
        - Unknown membership policy or aggregation name
    """
    pass
