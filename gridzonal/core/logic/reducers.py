# ============================================================================
# REDUCERS
# ============================================================================
# STATUS: Core logic - Aggregation strategies
# PURPOSE: Named and user-supplied reductions of cell values to one number
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: Reducer, UnweightedReducer, WeightedReducer, get_reducer,
#          available_reducers, resolve_reducer
# DEPENDENCIES: numpy
# ============================================================================
"""
Reducer strategies.

A reducer is either unweighted (sees only the values) or weighted (sees
values and their coverage weights). The membership policy decides which
kind is acceptable: binary policies accept both, FRACTIONAL needs a
weighted reducer.

Built-in reductions propagate NaN; missing-value removal happens in the
aggregator before the reducer is called.

Usage:
    reducer = resolve_reducer("mean", MembershipPolicy.FRACTIONAL)
    reducer.reduce(np.array([1.0, 4.0]), np.array([1.0, 0.5]))    # 2.0
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

from gridzonal.core.models.enums import MembershipPolicy
from gridzonal.exceptions import ConfigurationError, ContractViolationError


class Reducer(ABC):
    """Reduce a 1-D array of cell values to a single number."""

    weighted: bool = False

    def __init__(self, func: Callable, name: Optional[str] = None):
        if not callable(func):
            raise ContractViolationError(
                f"Reducer function must be callable, got {type(func).__name__}"
            )
        self.func = func
        self.name = name or getattr(func, "__name__", type(self).__name__)

    @abstractmethod
    def reduce(self, values: np.ndarray, weights: Optional[np.ndarray] = None):
        """Reduce `values` (and `weights` for weighted reducers)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class UnweightedReducer(Reducer):
    """Reducer over values only. Weights, when given, are ignored."""

    weighted = False

    def reduce(self, values: np.ndarray, weights: Optional[np.ndarray] = None):
        return self.func(values)


class WeightedReducer(Reducer):
    """Reducer over values and their coverage weights."""

    weighted = True

    def reduce(self, values: np.ndarray, weights: Optional[np.ndarray] = None):
        if weights is None:
            weights = np.ones(values.shape, dtype=np.float64)
        return self.func(values, weights)


def _weighted_mean(values: np.ndarray, weights: np.ndarray) -> float:
    return float(np.sum(values * weights) / np.sum(weights))


def _weighted_sum(values: np.ndarray, weights: np.ndarray) -> float:
    return float(np.sum(values * weights))


def _weighted_count(values: np.ndarray, weights: np.ndarray) -> float:
    return float(np.sum(weights))


_UNWEIGHTED: Dict[str, UnweightedReducer] = {
    "mean": UnweightedReducer(np.mean, "mean"),
    "sum": UnweightedReducer(np.sum, "sum"),
    "min": UnweightedReducer(np.min, "min"),
    "max": UnweightedReducer(np.max, "max"),
    "median": UnweightedReducer(np.median, "median"),
    "std": UnweightedReducer(np.std, "std"),
    "count": UnweightedReducer(np.size, "count"),
}

_WEIGHTED: Dict[str, WeightedReducer] = {
    "mean": WeightedReducer(_weighted_mean, "mean"),
    "sum": WeightedReducer(_weighted_sum, "sum"),
    "count": WeightedReducer(_weighted_count, "count"),
}


def available_reducers(weighted: bool = False) -> Tuple[str, ...]:
    """Names in the built-in catalogue (unweighted by default)."""
    return tuple(_WEIGHTED if weighted else _UNWEIGHTED)


def get_reducer(name: str, weighted: bool = False) -> Reducer:
    """
    Look up a built-in reducer.

    Raises:
        ConfigurationError: Unknown name, or no weighted variant exists
    """
    catalogue = _WEIGHTED if weighted else _UNWEIGHTED
    try:
        return catalogue[name]
    except KeyError:
        kind = "weighted" if weighted else "unweighted"
        raise ConfigurationError(
            f"Unknown {kind} aggregation '{name}'. Available: {', '.join(catalogue)}"
        ) from None


def resolve_reducer(
    aggregation: Union[str, Callable, Reducer],
    policy: Union[MembershipPolicy, str] = MembershipPolicy.CENTROID
) -> Reducer:
    """
    Turn an aggregation argument into a Reducer compatible with `policy`.

    Strings select from the catalogue (the weighted variant under
    FRACTIONAL), bare callables become UnweightedReducer, Reducer
    instances pass through.

    Raises:
        ConfigurationError: Unknown name or unweighted reducer with FRACTIONAL
        ContractViolationError: Argument is not a name, callable or Reducer
    """
    policy = MembershipPolicy(policy)

    if isinstance(aggregation, Reducer):
        reducer = aggregation
    elif isinstance(aggregation, str):
        reducer = get_reducer(aggregation, weighted=not policy.is_binary)
    elif callable(aggregation):
        reducer = UnweightedReducer(aggregation)
    else:
        raise ContractViolationError(
            f"aggregation must be a name, a callable or a Reducer, got {type(aggregation).__name__}"
        )

    if not policy.is_binary and not reducer.weighted:
        raise ConfigurationError(
            f"Reducer '{reducer.name}' is unweighted and cannot be used with the "
            f"{policy.value} membership policy. Use a WeightedReducer or a binary policy."
        )
    return reducer
