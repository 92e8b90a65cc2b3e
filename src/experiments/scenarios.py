from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from marksweep import Runtime, RuntimeConfig, create_runtime
from experiments.instrumentation import HeapProfiler


@dataclass
class ScenarioResult:
    title: str
    gc_events: List[Dict[str, Any]] = field(default_factory=list)
    rendered: List[str] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_freed(self) -> int:
        return sum(event["freed"] for event in self.gc_events)


def _finish(title: str, runtime: Runtime, rendered: Optional[List[str]] = None) -> ScenarioResult:
    runtime.shutdown()
    return ScenarioResult(
        title=title,
        gc_events=list(runtime.gc_events),
        rendered=rendered or [],
        stats=runtime.stats(),
    )


def objects_on_stack_are_preserved(config: Optional[RuntimeConfig] = None, profiler: Optional[HeapProfiler] = None) -> ScenarioResult:
    runtime = create_runtime(config, profiler=profiler)
    runtime.push_integer(1)
    runtime.push_integer(2)
    runtime.collect()
    return _finish("Objects on the stack are preserved.", runtime)


def unreached_objects_are_collected(config: Optional[RuntimeConfig] = None, profiler: Optional[HeapProfiler] = None) -> ScenarioResult:
    runtime = create_runtime(config, profiler=profiler)
    runtime.push_integer(1)
    runtime.push_integer(2)
    runtime.pop()
    runtime.pop()
    runtime.collect()
    return _finish("Unreached objects are collected.", runtime)


def nested_objects_are_reached(config: Optional[RuntimeConfig] = None, profiler: Optional[HeapProfiler] = None) -> ScenarioResult:
    runtime = create_runtime(config, profiler=profiler)
    runtime.push_integer(1)
    runtime.push_integer(2)
    runtime.make_pair()
    runtime.push_integer(3)
    runtime.push_integer(4)
    runtime.make_pair()
    outer = runtime.make_pair()
    rendered = [runtime.render(outer)]
    runtime.collect()
    return _finish("Reach the nested objects.", runtime, rendered)


def cycles_are_collected(config: Optional[RuntimeConfig] = None, profiler: Optional[HeapProfiler] = None) -> ScenarioResult:
    """
    Build a = (1, 2) and b = (3, 4), then point a.second at b and b.second at a.
    Both pairs stay rooted for the first collection; after dropping the roots
    the cycle has no path from the stack and a second collection reclaims it.
    """
    runtime = create_runtime(config, profiler=profiler)
    runtime.push_integer(1)
    runtime.push_integer(2)
    a = runtime.make_pair()
    runtime.push_integer(3)
    runtime.push_integer(4)
    b = runtime.make_pair()
    runtime.set_second(a, b)
    runtime.set_second(b, a)
    runtime.collect()
    runtime.pop()
    runtime.pop()
    runtime.collect()
    return _finish("Cycles.", runtime)


def allocation_churn(
    config: Optional[RuntimeConfig] = None,
    profiler: Optional[HeapProfiler] = None,
    *,
    rounds: int = 1000,
    burst: int = 20,
) -> ScenarioResult:
    """Push `burst` integers and pop them again, `rounds` times over."""
    runtime = create_runtime(config, profiler=profiler)
    for i in range(rounds):
        for _ in range(burst):
            runtime.push_integer(i)
        for _ in range(burst):
            runtime.pop()
    return _finish("Performance of GC.", runtime)


SCENARIOS: Dict[str, Callable[..., ScenarioResult]] = {
    "preserved": objects_on_stack_are_preserved,
    "unreached": unreached_objects_are_collected,
    "nested": nested_objects_are_reached,
    "cycles": cycles_are_collected,
    "performance": allocation_churn,
}
