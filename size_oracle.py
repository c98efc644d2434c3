"""
size_oracle.py

Shallow object size measurement for the leak demo.

A SizeOracle wraps a measurement handle (any callable returning a byte size).
The driver gets one passed in at construction; the module-level
initialize()/measure() pair keeps a single process-wide oracle for code that
has no other way to reach it.
"""

import sys
from typing import Any, Callable, Optional

SizeHandle = Callable[[Any], int]


class OracleNotInitializedError(RuntimeError):
    pass


def shallow_size(value: Any) -> int:
    # Size of the object itself, not of what it references
    return sys.getsizeof(value)


class SizeOracle:
    def __init__(self, handle: SizeHandle):
        if handle is None or not callable(handle):
            raise TypeError(f"size handle must be callable, got {handle!r}")
        self.handle = handle

    def measure(self, value: Any) -> int:
        return self.handle(value)


_instance: Optional[SizeOracle] = None


def initialize(handle: SizeHandle) -> SizeOracle:
    """Store the process-wide oracle. Last call wins."""
    global _instance
    _instance = SizeOracle(handle)
    return _instance


def current() -> SizeOracle:
    if _instance is None:
        raise OracleNotInitializedError("Size oracle not initialized.")
    return _instance


def measure(value: Any) -> int:
    return current().measure(value)
