"""
Mark-and-sweep garbage collection over a small stack VM.

Expose the runtime, its collaborators and the functional API used by the
demonstration scenarios.
"""

from .config import RuntimeConfig
from .errors import (
    CyclicValueError,
    HeapExhaustedError,
    HeapObjectKindError,
    MarkSweepError,
    RootStackOverflowError,
    RootStackUnderflowError,
    RuntimeClosedError,
    StaleReferenceError,
)
from .garbage_collectors import GarbageCollector, MarkAndSweepCollector
from .gc_policy import AdaptiveThresholdPolicy, GCPolicy, StressPolicy
from .heap_object import HeapObject, ObjectKind, ObjectRef
from .heap_space import HeapSpace
from .printer import render
from .root_stack import RootStack
from .runtime import (
    Runtime,
    collect,
    create_runtime,
    make_pair,
    pop,
    push_integer,
    shutdown,
)

__all__ = [
    "RuntimeConfig",
    "MarkSweepError",
    "RootStackOverflowError",
    "RootStackUnderflowError",
    "HeapExhaustedError",
    "StaleReferenceError",
    "HeapObjectKindError",
    "CyclicValueError",
    "RuntimeClosedError",
    "GarbageCollector",
    "MarkAndSweepCollector",
    "GCPolicy",
    "AdaptiveThresholdPolicy",
    "StressPolicy",
    "HeapObject",
    "ObjectKind",
    "ObjectRef",
    "HeapSpace",
    "RootStack",
    "Runtime",
    "create_runtime",
    "push_integer",
    "pop",
    "make_pair",
    "collect",
    "render",
    "shutdown",
]
