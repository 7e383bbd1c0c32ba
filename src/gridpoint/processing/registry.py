"""
Reducer Registry System

This module provides a registry for the reduction functions used by temporal
aggregation, tracking their:
- Calculation functions
- Descriptions

Reducers are called as ``func(stack, axis=0)`` on a float stack of layers in
which no-data cells are NaN, and must ignore NaN values.
"""

from typing import Callable, Dict, List, Optional, Union
from dataclasses import dataclass
import logging
import numpy as np

from ..core.exceptions import ParameterError

logger = logging.getLogger(__name__)

ReduceFunc = Callable[..., np.ndarray]

# ============================================================================
# Registry Data Structures
# ============================================================================

@dataclass
class Reducer:
    """
    A named reduction over the layer axis.

    Attributes:
        name: Reducer name (e.g., 'mean', 'max')
        func: Function called as ``func(stack, axis=0)``
        description: Short description
    """
    name: str
    func: ReduceFunc
    description: str = ""

    def __call__(self, stack: np.ndarray) -> np.ndarray:
        return self.func(stack, axis=0)


class ReducerRegistry:
    """Registry of reduction functions available to temporal aggregation."""

    def __init__(self):
        """Initialize empty registry."""
        self._registry: Dict[str, Reducer] = {}
        logger.debug("Initialized reducer registry")

    def register(self, name: str, func: ReduceFunc, description: str = "") -> None:
        """
        Register a reducer.

        Args:
            name: Reducer name
            func: Function called as ``func(stack, axis=0)``, ignoring NaN
            description: Short description
        """
        if name in self._registry:
            logger.warning(f"Reducer '{name}' already registered, overwriting")

        self._registry[name] = Reducer(name=name, func=func, description=description)
        logger.debug(f"Registered reducer: {name}")

    def is_registered(self, name: str) -> bool:
        """Check if a reducer is registered."""
        return name in self._registry

    def get(self, name: str) -> Optional[Reducer]:
        """Get a registered reducer."""
        return self._registry.get(name)

    def list_reducers(self) -> List[str]:
        """List all registered reducer names."""
        return sorted(self._registry.keys())

    def resolve(self, reducer: Union[str, Reducer, ReduceFunc]) -> Reducer:
        """
        Resolve a reducer specification.

        Args:
            reducer: Registered name, Reducer, or callable ``f(stack, axis=0)``

        Returns:
            Reducer: Resolved reducer

        Raises:
            ParameterError: If the name is not registered or the value is not callable
        """
        if isinstance(reducer, Reducer):
            return reducer

        if isinstance(reducer, str):
            found = self.get(reducer.lower())
            if found is None:
                raise ParameterError(
                    "reduce_fn", reducer, f"Available reducers: {', '.join(self.list_reducers())}"
                )
            return found

        if callable(reducer):
            return Reducer(name=getattr(reducer, "__name__", "custom"), func=reducer)

        raise ParameterError("reduce_fn", repr(reducer), "Expected a reducer name or callable")


# ============================================================================
# Global Registry Instance
# ============================================================================

_global_registry = ReducerRegistry()

_global_registry.register("mean", np.nanmean, "Arithmetic mean ignoring no-data")
_global_registry.register("median", np.nanmedian, "Median ignoring no-data")
_global_registry.register("sum", np.nansum, "Sum ignoring no-data")
_global_registry.register("min", np.nanmin, "Minimum ignoring no-data")
_global_registry.register("max", np.nanmax, "Maximum ignoring no-data")
_global_registry.register("std", np.nanstd, "Population standard deviation ignoring no-data")


def get_registry() -> ReducerRegistry:
    """Get the global reducer registry."""
    return _global_registry


def register_reducer(name: str, func: ReduceFunc, description: str = "") -> None:
    """Register a reducer in the global registry."""
    _global_registry.register(name, func, description)


def list_available_reducers() -> List[str]:
    """List reducers available in the global registry."""
    return _global_registry.list_reducers()
