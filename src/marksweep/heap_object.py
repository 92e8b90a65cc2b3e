from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, NamedTuple, Optional


class ObjectKind(Enum):
    LEAF = "leaf"
    COMPOSITE = "composite"


class ObjectRef(NamedTuple):
    """
    Client-visible handle to a heap object.

    The slot is the arena index; the generation changes whenever the slot is
    reused, so a handle kept past its object's reclamation can be detected.
    """

    slot: int
    generation: int


@dataclass(slots=True)
class HeapObject:
    """
    A single allocation unit in the arena.

    Leaves carry an integer payload in `value`. Composites hold two references
    (`first`, `second`) expressed as arena slot indices; they stay None until
    the runtime wires them. `next` threads the allocation list and is not part
    of the value graph.
    """

    kind: ObjectKind
    slot: int
    generation: int
    marked: bool = False
    next: Optional[int] = None
    value: Optional[int] = None
    first: Optional[int] = None
    second: Optional[int] = None

    @property
    def ref(self) -> ObjectRef:
        return ObjectRef(self.slot, self.generation)

    def is_leaf(self) -> bool:
        return self.kind is ObjectKind.LEAF

    def is_composite(self) -> bool:
        return self.kind is ObjectKind.COMPOSITE

    def children(self) -> Iterator[int]:
        """Yield the slots this object references, first before second."""
        if self.kind is not ObjectKind.COMPOSITE:
            return
        if self.first is not None:
            yield self.first
        if self.second is not None:
            yield self.second
