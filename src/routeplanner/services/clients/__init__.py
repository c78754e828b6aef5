"""Client registry helpers."""

from .registry import ClientRegistry, get_registry, has_valid_coordinates

__all__ = [
    "ClientRegistry",
    "get_registry",
    "has_valid_coordinates",
]
