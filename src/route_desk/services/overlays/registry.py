"""Lifecycle tracking for everything drawn on the map."""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Protocol

from ...models.domain import Stop

logger = logging.getLogger(__name__)


class Overlay(Protocol):
    stop: Optional[Stop]

    def detach(self) -> None:
        ...


class OverlayRegistry:
    """Tracks drawn overlays so a redraw can start from an empty map."""

    def __init__(self) -> None:
        self._overlays: list[Overlay] = []

    def register(self, overlay: Overlay) -> Overlay:
        self._overlays.append(overlay)
        return overlay

    def clear_all(self) -> None:
        """Detach every tracked overlay and forget all of them."""
        overlays, self._overlays = self._overlays, []
        for overlay in overlays:
            overlay.detach()
        if overlays:
            logger.debug(f"Cleared {len(overlays)} overlays from the map")

    def stops(self) -> list[Stop]:
        """Stops carried by the tracked overlays, in drawing order."""
        return [overlay.stop for overlay in self._overlays if getattr(overlay, "stop", None) is not None]

    def __len__(self) -> int:
        return len(self._overlays)

    def __iter__(self) -> Iterator[Overlay]:
        return iter(list(self._overlays))
