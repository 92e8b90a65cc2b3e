from __future__ import annotations


class MarkSweepError(Exception):
    """Base exception for all runtime and heap errors."""


class RootStackOverflowError(MarkSweepError):
    """Raised when pushing onto a root stack that is already at capacity."""


class RootStackUnderflowError(MarkSweepError):
    """Raised when an operation needs more values than the root stack holds."""


class HeapExhaustedError(MarkSweepError, MemoryError):
    """Raised when the heap limit is still reached after a full collection."""


class StaleReferenceError(MarkSweepError):
    """Raised when a handle refers to an object that has been reclaimed."""


class HeapObjectKindError(MarkSweepError):
    """Raised when a composite-only operation is applied to a leaf."""


class CyclicValueError(MarkSweepError):
    """Raised when rendering a value that contains a reference cycle."""


class RuntimeClosedError(MarkSweepError):
    """Raised when a runtime is used after shutdown."""
