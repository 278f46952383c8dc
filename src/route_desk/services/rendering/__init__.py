"""Map rendering exports."""

from .canvas import CanvasOverlay, InMemoryCanvas, MapCanvas, OverlayKind
from .coordinator import RenderCoordinator

__all__ = ["CanvasOverlay", "InMemoryCanvas", "MapCanvas", "OverlayKind", "RenderCoordinator"]
