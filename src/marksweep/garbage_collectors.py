from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

from .heap_object import ObjectRef
from .heap_space import HeapSpace

if TYPE_CHECKING:
    from .runtime import Runtime


class GarbageCollector(ABC):
    """Common interface for all GC strategies."""

    name: str

    @abstractmethod
    def collect(self, runtime: "Runtime") -> List[ObjectRef]:
        """
        Execute a collection cycle.

        Returns:
            handles of the objects that were freed during the cycle.
        """


class MarkAndSweepCollector(GarbageCollector):
    """
    Tracing collector: mark everything reachable from the root stack, then
    sweep the allocation list and reclaim whatever stayed unmarked.

    Reachability comes from graph connectivity alone, so a cycle with no path
    from a root is reclaimed like any other garbage.
    """

    def __init__(self) -> None:
        self.name = "mark_and_sweep"

    def collect(self, runtime: "Runtime") -> List[ObjectRef]:
        self.mark_all(runtime)
        return self.sweep(runtime.heap)

    def mark_all(self, runtime: "Runtime") -> int:
        marked = 0
        for ref in runtime.stack:
            marked += self.mark(runtime.heap, ref.slot)
        return marked

    def mark(self, heap: HeapSpace, slot: int) -> int:
        """Mark the object at `slot` and everything it reaches; return how many were newly marked."""
        marked = 0
        frontier: List[int] = [slot]
        while frontier:
            obj = heap.get(frontier.pop())
            if obj.marked:
                continue
            obj.marked = True
            marked += 1
            frontier.extend(obj.children())
        return marked

    def sweep(self, heap: HeapSpace) -> List[ObjectRef]:
        return heap.sweep_unmarked()
