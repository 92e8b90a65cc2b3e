from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Tunables for a Runtime.

    stack_capacity: number of root stack slots.
    initial_threshold: live-object count that triggers the first collection.
    growth_factor: after each collection the threshold becomes
        growth_factor * survivors.
    heap_limit: hard cap on live objects; None means unbounded.
    """

    stack_capacity: int = 256
    initial_threshold: int = 8
    growth_factor: int = 2
    heap_limit: Optional[int] = None

    def validate(self) -> "RuntimeConfig":
        if self.stack_capacity <= 0:
            raise ValueError(f"stack_capacity must be positive, got {self.stack_capacity}")
        if self.initial_threshold < 0:
            raise ValueError(f"initial_threshold must be non-negative, got {self.initial_threshold}")
        if self.growth_factor < 1:
            raise ValueError(f"growth_factor must be at least 1, got {self.growth_factor}")
        if self.heap_limit is not None and self.heap_limit <= 0:
            raise ValueError(f"heap_limit must be positive when set, got {self.heap_limit}")
        return self

    def replace(self, **changes: object) -> "RuntimeConfig":
        return replace(self, **changes)
