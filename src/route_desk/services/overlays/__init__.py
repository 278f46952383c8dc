"""Overlay tracking exports."""

from .registry import Overlay, OverlayRegistry

__all__ = ["Overlay", "OverlayRegistry"]
