"""
Conversion Adapter Registry

This module keeps the catalog of named conversion adapters, one per
neighbouring format and direction. Adapters are selected by an explicit
format tag, never by inspecting the runtime type of the source.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.config import CONVERSION_DIRECTIONS, FROM_SFTIME, TO_SFTIME
from ..core.exceptions import ConversionError, ParameterError
from ..core.logging_config import get_logger

logger = get_logger('conversion.registry')

# ============================================================================
# Registry Data Structures
# ============================================================================

@dataclass
class ConversionAdapter:
    """
    One named conversion between a neighbouring format and feature tables.

    Attributes:
        name: Format tag (e.g. 'dataframe', 'tracks', 'xarray')
        func: Conversion function
        direction: 'to_sftime' or 'from_sftime'
        description: What the adapter maps and its side effects
    """
    name: str
    func: Callable
    direction: str
    description: str = ""

    def __post_init__(self):
        """Validate the direction."""
        if self.direction not in CONVERSION_DIRECTIONS:
            raise ValueError(f"direction must be one of {CONVERSION_DIRECTIONS}, got '{self.direction}'")


class ConversionRegistry:
    """
    Registry of conversion adapters keyed by (format tag, direction).
    """

    def __init__(self):
        """Initialize empty registry."""
        self._registry: Dict[Tuple[str, str], ConversionAdapter] = {}
        logger.debug("Initialized conversion adapter registry")

    def register(self, name: str, func: Callable, direction: str, description: str = "") -> None:
        """
        Register a conversion adapter.

        Args:
            name: Format tag
            func: Conversion function
            direction: 'to_sftime' or 'from_sftime'
            description: What the adapter maps and its side effects
        """
        key = (name, direction)
        if key in self._registry:
            logger.warning(f"Conversion adapter '{name}' ({direction}) already registered, overwriting")

        self._registry[key] = ConversionAdapter(name=name, func=func, direction=direction, description=description)
        logger.debug(f"Registered conversion adapter: {name} ({direction})")

    def is_registered(self, name: str, direction: str) -> bool:
        """Check if an adapter is registered."""
        return (name, direction) in self._registry

    def get(self, name: str, direction: str) -> ConversionAdapter:
        """
        Get a conversion adapter.

        Raises:
            ConversionError: If no adapter is registered for the format and direction
        """
        adapter = self._registry.get((name, direction))
        if adapter is None:
            raise ConversionError(
                name,
                f"no '{direction}' adapter registered; available: {', '.join(self.list_formats(direction))}"
            )
        return adapter

    def list_formats(self, direction: Optional[str] = None) -> List[str]:
        """List registered format tags, optionally for one direction."""
        if direction is not None and direction not in CONVERSION_DIRECTIONS:
            raise ParameterError("direction", direction, f"Must be one of {CONVERSION_DIRECTIONS}")
        return sorted({name for name, d in self._registry if direction is None or d == direction})

    def __repr__(self) -> str:
        """String representation of registry."""
        return f"ConversionRegistry({len(self._registry)} adapters registered)"


# ============================================================================
# Global Registry Instance
# ============================================================================

# Global registry instance (populated by adapter modules)
_global_registry = ConversionRegistry()


def get_registry() -> ConversionRegistry:
    """Get the global conversion adapter registry."""
    return _global_registry


def register_adapter(name: str, direction: str, description: str = ""):
    """
    Decorator to register a conversion function.

    Example:
        @register_adapter('dataframe', TO_SFTIME, description='Plain table with coordinate columns')
        def from_dataframe(frame, time_column, coords=None, ...):
            ...

    Args:
        name: Format tag
        direction: 'to_sftime' or 'from_sftime'
        description: What the adapter maps and its side effects

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        _global_registry.register(name=name, func=func, direction=direction, description=description)
        return func

    return decorator

# ============================================================================
# Dispatch by Format Tag
# ============================================================================

def convert(source: Any, format: str, **kwargs):
    """
    Convert a source container into a feature table using a named adapter.

    Args:
        source: Source container
        format: Format tag of the source (see ``list_formats('to_sftime')``)
        **kwargs: Adapter arguments

    Returns:
        SpatiotemporalFeatureTable: Converted table

    Examples:
        >>> st = convert(df, "dataframe", time_column="time", coords=("lon", "lat"))
        >>> st = convert(tracks, "tracks")
    """
    adapter = _global_registry.get(format, TO_SFTIME)
    logger.debug(f"Converting {type(source).__name__} with adapter '{format}'")
    return adapter.func(source, **kwargs)


def export(table, format: str, **kwargs):
    """
    Convert a feature table into another format using a named adapter.

    Args:
        table: Feature table
        format: Target format tag (see ``list_formats('from_sftime')``)
        **kwargs: Adapter arguments

    Returns:
        Converted container
    """
    adapter = _global_registry.get(format, FROM_SFTIME)
    logger.debug(f"Exporting table with adapter '{format}'")
    return adapter.func(table, **kwargs)


def list_formats(direction: Optional[str] = None) -> List[str]:
    """List registered format tags."""
    return _global_registry.list_formats(direction)


__all__ = [
    'ConversionAdapter',
    'ConversionRegistry',
    'get_registry',
    'register_adapter',
    'convert',
    'export',
    'list_formats',
]
