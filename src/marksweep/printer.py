from __future__ import annotations

from typing import TYPE_CHECKING, List, Set, Tuple, Union

from .errors import CyclicValueError
from .heap_object import ObjectRef

if TYPE_CHECKING:
    from .runtime import Runtime


def render(runtime: "Runtime", ref: ObjectRef) -> str:
    """
    Render a value as text: leaves as their integer, composites as
    "(first, second)".

    Read-only: mark bits and the allocation list are never touched. Shared
    substructure is rendered at every occurrence; a composite that reaches
    itself raises CyclicValueError.
    """
    heap = runtime.heap
    root = heap.resolve(ref)
    parts: List[str] = []
    on_path: Set[int] = set()
    # ("visit", slot) renders an object, ("text", s) emits s, ("leave", slot) closes a composite.
    work: List[Tuple[str, Union[int, str]]] = [("visit", root.slot)]
    while work:
        action, item = work.pop()
        if action == "text":
            parts.append(item)
            continue
        if action == "leave":
            on_path.discard(item)
            continue
        obj = heap.get(item)
        if obj.is_leaf():
            parts.append(str(obj.value))
            continue
        if obj.slot in on_path:
            raise CyclicValueError(f"Composite at slot {obj.slot} reaches itself; cannot render")
        on_path.add(obj.slot)
        parts.append("(")
        work.append(("leave", obj.slot))
        work.append(("text", ")"))
        work.append(("visit", obj.second))
        work.append(("text", ", "))
        work.append(("visit", obj.first))
    return "".join(parts)
