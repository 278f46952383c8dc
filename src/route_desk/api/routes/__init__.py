"""Route group exports."""

from . import console, health

__all__ = ["console", "health"]
