"""Route group exports."""

from . import clients, health, routes

__all__ = ["clients", "routes", "health"]
