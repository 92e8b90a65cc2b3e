from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime import Runtime


class GCPolicy(ABC):
    @abstractmethod
    def should_trigger(self, runtime: "Runtime", reason: str) -> bool:
        """Return True if GC should run given the current reason."""

    def notify_gc(self, runtime: "Runtime", event: dict) -> None:
        """Called after GC completes; `event` contains GC statistics."""

    @property
    def threshold(self) -> int:
        """Live-object count at which the next collection is due."""
        return 0


class AdaptiveThresholdPolicy(GCPolicy):
    """
    Collect when the live count reaches the threshold, then reset the
    threshold to growth_factor times the survivors.

    Small live sets collect often and cheaply; large live sets push the next
    collection out in proportion to heap occupancy.
    """

    def __init__(self, initial_threshold: int = 8, growth_factor: int = 2) -> None:
        if growth_factor < 1:
            raise ValueError("AdaptiveThresholdPolicy requires growth_factor >= 1")
        self.initial_threshold = initial_threshold
        self.growth_factor = growth_factor
        self._threshold = initial_threshold

    @property
    def threshold(self) -> int:
        return self._threshold

    def should_trigger(self, runtime: "Runtime", reason: str) -> bool:
        if reason != "allocation":
            return False
        return runtime.heap.live_count >= self._threshold

    def notify_gc(self, runtime: "Runtime", event: dict) -> None:
        self._threshold = event["live"] * self.growth_factor


class StressPolicy(GCPolicy):
    """Collect before every allocation. Slow, but exposes missing roots immediately."""

    def should_trigger(self, runtime: "Runtime", reason: str) -> bool:
        return reason == "allocation"
