"""Adapters — bindings for every external effect.

Public re-exports for convenient access.
"""

from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.adapters.mock import MockAdapter
from shellstrap.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
