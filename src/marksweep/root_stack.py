from __future__ import annotations

from typing import Iterator, List

from .errors import RootStackOverflowError, RootStackUnderflowError
from .heap_object import ObjectRef


class RootStack:
    """Bounded operand stack; its contents are the collector's only roots."""

    def __init__(self, capacity: int = 256) -> None:
        if capacity <= 0:
            raise ValueError("RootStack capacity must be positive")
        self.capacity = capacity
        self._items: List[ObjectRef] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ObjectRef]:
        """Iterate bottom to top."""
        return iter(list(self._items))

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def push(self, ref: ObjectRef) -> None:
        self.ensure_room("push")
        self._items.append(ref)

    def pop(self) -> ObjectRef:
        if not self._items:
            raise RootStackUnderflowError("Cannot pop from an empty root stack")
        return self._items.pop()

    def peek(self, depth: int = 0) -> ObjectRef:
        self.require(depth + 1, "peek")
        return self._items[-1 - depth]

    def require(self, count: int, operation: str) -> None:
        if len(self._items) < count:
            raise RootStackUnderflowError(
                f"{operation} needs {count} value(s) on the root stack, found {len(self._items)}"
            )

    def clear(self) -> None:
        self._items.clear()

    def ensure_room(self, operation: str) -> None:
        if self.is_full():
            raise RootStackOverflowError(
                f"{operation} would overflow the root stack (capacity {self.capacity})"
            )
