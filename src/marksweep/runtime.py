from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .config import RuntimeConfig
from .errors import HeapExhaustedError, HeapObjectKindError, RuntimeClosedError
from .garbage_collectors import GarbageCollector, MarkAndSweepCollector
from .gc_policy import AdaptiveThresholdPolicy, GCPolicy
from .heap_object import HeapObject, ObjectKind, ObjectRef
from .heap_space import HeapSpace
from .printer import render as render_value
from .root_stack import RootStack

if TYPE_CHECKING:
    from experiments.instrumentation import HeapProfiler


class Runtime:
    """
    A small stack VM whose heap is managed by a tracing collector.

    The runtime owns the arena, the bounded root stack, the collector and the
    policy deciding when to collect. Every allocation consults the policy
    first; reclamation only ever happens inside a collection cycle.
    """

    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        *,
        collector: Optional[GarbageCollector] = None,
        policy: Optional[GCPolicy] = None,
        profiler: Optional["HeapProfiler"] = None,
    ) -> None:
        self.config = (config or RuntimeConfig()).validate()
        self.heap = HeapSpace()
        self.stack = RootStack(self.config.stack_capacity)
        self.collector = collector or MarkAndSweepCollector()
        self.policy = policy or AdaptiveThresholdPolicy(
            self.config.initial_threshold, self.config.growth_factor
        )
        self.profiler = profiler
        self.gc_events: List[Dict[str, Any]] = []
        self._closed = False
        self._final_event: Optional[Dict[str, Any]] = None

    def __enter__(self) -> "Runtime":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def live_count(self) -> int:
        return self.heap.live_count

    @property
    def threshold(self) -> int:
        return self.policy.threshold

    # -- Allocation -----------------------------------------------------------------
    def allocate(self, kind: ObjectKind) -> HeapObject:
        """Create an unmarked object, collecting first if the policy asks for it."""
        self._ensure_open()
        if self.policy.should_trigger(self, "allocation"):
            self._run_gc_cycle(trigger=f"policy:{self.policy.__class__.__name__}")
        limit = self.config.heap_limit
        if limit is not None and self.heap.live_count >= limit:
            self._run_gc_cycle(trigger="heap_limit")
            if self.heap.live_count >= limit:
                raise HeapExhaustedError(
                    f"Unable to allocate {kind.value}: {self.heap.live_count} live objects at heap limit {limit}"
                )
        obj = self.heap.allocate(kind)
        if self.profiler:
            self.profiler.record_event(
                "allocation",
                {
                    "slot": obj.slot,
                    "kind": kind.value,
                    "live": self.heap.live_count,
                    "threshold": self.policy.threshold,
                },
            )
        return obj

    def push_integer(self, value: int) -> ObjectRef:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Leaf payload must be an int, got {type(value).__name__}")
        self._ensure_open()
        self.stack.ensure_room("push_integer")
        obj = self.allocate(ObjectKind.LEAF)
        obj.value = value
        self.stack.push(obj.ref)
        return obj.ref

    def make_pair(self) -> ObjectRef:
        """Consume the two topmost values into a composite: [..., X, Y] -> [..., (X, Y)]."""
        self._ensure_open()
        self.stack.require(2, "make_pair")
        obj = self.allocate(ObjectKind.COMPOSITE)
        obj.second = self.stack.pop().slot
        obj.first = self.stack.pop().slot
        self.stack.push(obj.ref)
        return obj.ref

    # -- Root stack ----------------------------------------------------------------
    def push(self, ref: ObjectRef) -> None:
        """Root an existing live object again."""
        self._ensure_open()
        self.heap.resolve(ref)
        self.stack.push(ref)

    def pop(self) -> ObjectRef:
        self._ensure_open()
        return self.stack.pop()

    def peek(self, depth: int = 0) -> ObjectRef:
        return self.stack.peek(depth)

    # -- Object access -------------------------------------------------------------
    def resolve(self, ref: ObjectRef) -> HeapObject:
        return self.heap.resolve(ref)

    def is_live(self, ref: ObjectRef) -> bool:
        return self.heap.contains(ref)

    def kind(self, ref: ObjectRef) -> ObjectKind:
        return self.heap.resolve(ref).kind

    def value(self, ref: ObjectRef) -> int:
        obj = self.heap.resolve(ref)
        if not obj.is_leaf():
            raise HeapObjectKindError(f"Object at slot {obj.slot} is a composite and has no scalar value")
        return obj.value

    def first(self, ref: ObjectRef) -> ObjectRef:
        return self.heap.get(self._composite(ref).first).ref

    def second(self, ref: ObjectRef) -> ObjectRef:
        return self.heap.get(self._composite(ref).second).ref

    def set_first(self, pair: ObjectRef, target: ObjectRef) -> None:
        self._ensure_open()
        obj = self._composite(pair)
        obj.first = self.heap.resolve(target).slot

    def set_second(self, pair: ObjectRef, target: ObjectRef) -> None:
        self._ensure_open()
        obj = self._composite(pair)
        obj.second = self.heap.resolve(target).slot

    def render(self, ref: ObjectRef) -> str:
        return render_value(self, ref)

    def _composite(self, ref: ObjectRef) -> HeapObject:
        obj = self.heap.resolve(ref)
        if not obj.is_composite():
            raise HeapObjectKindError(f"Object at slot {obj.slot} is a leaf, expected a composite")
        return obj

    # -- Garbage collection --------------------------------------------------------
    def collect(self, trigger: str = "manual") -> Dict[str, Any]:
        self._ensure_open()
        return self._run_gc_cycle(trigger=trigger)

    def shutdown(self) -> Dict[str, Any]:
        """Drop every root and collect, reclaiming the whole heap. Safe to call twice."""
        if self._closed:
            return self._final_event
        self.stack.clear()
        self._final_event = self._run_gc_cycle(trigger="shutdown")
        self._closed = True
        return self._final_event

    def _run_gc_cycle(self, trigger: str) -> Dict[str, Any]:
        before = self.heap.live_count
        cycle_start = time.time()
        freed = self.collector.collect(self)
        pause_duration = time.time() - cycle_start
        live = self.heap.live_count
        event = {
            "trigger": trigger,
            "collector": self.collector.name,
            "before": before,
            "freed": before - live,
            "live": live,
            "freed_refs": freed,
            "timestamp": time.time(),
            "pause_duration": pause_duration,
        }
        self.policy.notify_gc(self, event)
        event["threshold"] = self.policy.threshold
        self.gc_events.append(event)
        if self.profiler:
            self.profiler.record_event(
                "gc_cycle",
                {
                    "trigger": trigger,
                    "before": before,
                    "freed": event["freed"],
                    "live": live,
                    "threshold": event["threshold"],
                    "pause_duration": pause_duration,
                },
            )
        return event

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeClosedError("Runtime has been shut down")

    # -- Introspection -------------------------------------------------------------
    def stats(self) -> Dict[str, Any]:
        return {
            "objects": self.heap.live_count,
            "stack_depth": len(self.stack),
            "stack_capacity": self.stack.capacity,
            "threshold": self.policy.threshold,
            "heap_slots": self.heap.capacity,
            "free_slots": len(self.heap.free_slots()),
            "collections": len(self.gc_events),
            "closed": self._closed,
        }

    def debug_snapshot(self) -> Dict[str, Any]:
        object_summaries = [
            {
                "slot": obj.slot,
                "generation": obj.generation,
                "kind": obj.kind.value,
                "marked": obj.marked,
                "value": obj.value,
                "first": obj.first,
                "second": obj.second,
            }
            for obj in self.heap.iter_allocation_list()
        ]
        return {
            "objects": object_summaries,
            "space": self.heap.snapshot(),
            "roots": [ref.slot for ref in self.stack],
        }


def create_runtime(
    config: Optional[RuntimeConfig] = None,
    *,
    profiler: Optional["HeapProfiler"] = None,
    **overrides: Any,
) -> Runtime:
    """Build a Runtime, applying keyword overrides on top of `config`."""
    config = config or RuntimeConfig()
    if overrides:
        config = config.replace(**overrides)
    return Runtime(config, profiler=profiler)


def push_integer(runtime: Runtime, value: int) -> ObjectRef:
    return runtime.push_integer(value)


def pop(runtime: Runtime) -> ObjectRef:
    return runtime.pop()


def make_pair(runtime: Runtime) -> ObjectRef:
    return runtime.make_pair()


def collect(runtime: Runtime) -> Dict[str, Any]:
    return runtime.collect()


def shutdown(runtime: Runtime) -> Dict[str, Any]:
    return runtime.shutdown()
