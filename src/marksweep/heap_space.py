from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .errors import StaleReferenceError
from .heap_object import HeapObject, ObjectKind, ObjectRef


class HeapSpace:
    """
    Index-addressed arena holding every live heap object.

    Slots of reclaimed objects go onto a free list and are handed out again
    before the arena grows. Live objects are additionally threaded through an
    intrusive singly-linked allocation list (newest first) via
    `HeapObject.next`; the sweep walks that list.
    """

    def __init__(self) -> None:
        self._slots: List[Optional[HeapObject]] = []
        self._generations: List[int] = []
        self._free_slots: List[int] = []
        self.head: Optional[int] = None
        self.live_count = 0

    @property
    def capacity(self) -> int:
        """Number of slots created so far, live or free."""
        return len(self._slots)

    def free_slots(self) -> List[int]:
        """Return a copy of the free list for inspection."""
        return list(self._free_slots)

    def allocate(self, kind: ObjectKind) -> HeapObject:
        if self._free_slots:
            slot = self._free_slots.pop()
            self._generations[slot] += 1
        else:
            slot = len(self._slots)
            self._slots.append(None)
            self._generations.append(0)
        obj = HeapObject(kind=kind, slot=slot, generation=self._generations[slot], next=self.head)
        self._slots[slot] = obj
        self.head = slot
        self.live_count += 1
        return obj

    def get(self, slot: int) -> HeapObject:
        obj = self._slots[slot] if 0 <= slot < len(self._slots) else None
        if obj is None:
            raise StaleReferenceError(f"Slot {slot} holds no live object")
        return obj

    def resolve(self, ref: ObjectRef) -> HeapObject:
        obj = self._slots[ref.slot] if 0 <= ref.slot < len(self._slots) else None
        if obj is None or obj.generation != ref.generation:
            raise StaleReferenceError(
                f"Object at slot {ref.slot} (generation {ref.generation}) has been reclaimed"
            )
        return obj

    def contains(self, ref: ObjectRef) -> bool:
        if not 0 <= ref.slot < len(self._slots):
            return False
        obj = self._slots[ref.slot]
        return obj is not None and obj.generation == ref.generation

    def iter_allocation_list(self) -> Iterator[HeapObject]:
        slot = self.head
        while slot is not None:
            obj = self._slots[slot]
            yield obj
            slot = obj.next

    def sweep_unmarked(self) -> List[ObjectRef]:
        """
        Walk the allocation list once, reclaiming unmarked objects.

        Marked objects survive and have their mark bit cleared for the next
        cycle. Returns handles of the reclaimed objects in list order.
        """
        freed: List[ObjectRef] = []
        previous: Optional[HeapObject] = None
        slot = self.head
        while slot is not None:
            obj = self._slots[slot]
            following = obj.next
            if obj.marked:
                obj.marked = False
                previous = obj
            else:
                if previous is None:
                    self.head = following
                else:
                    previous.next = following
                freed.append(obj.ref)
                self._release(obj)
            slot = following
        return freed

    def snapshot(self) -> Dict[str, List[int]]:
        """Expose allocation order and free slots for diagnostics."""
        return {
            "allocated": [obj.slot for obj in self.iter_allocation_list()],
            "free": list(self._free_slots),
        }

    def _release(self, obj: HeapObject) -> None:
        self._slots[obj.slot] = None
        self._free_slots.append(obj.slot)
        obj.next = None
        self.live_count -= 1
