"""chararray AllocationAccumulator — opt-in accounting of buffer memory traffic.

This module provides accumulated metrics while buffers grow:
- Allocations and reallocations requested, with their byte totals
- Blocks freed
- Bytes copied by aligned growth (allocate-new, copy, free-old)

Zero overhead when disabled (get_allocation_accumulator() returns None).

Example:
    from chararray import CharArray
    from chararray.profiling import profiled_allocations

    with profiled_allocations() as metrics:
        sb = CharArray(1)
        sb.cat("hello world")

    print(metrics.summary())
    # {"allocations": 1, "reallocations": 4, ...}

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any


@dataclass
class AllocationAccumulator:
    """Accumulated allocator traffic of the buffers in a context.

    Attributes:
        allocations: Number of fresh blocks requested.
        reallocations: Number of growth steps.
        frees: Number of blocks released.
        bytes_allocated: Total bytes requested by allocations and growth.
        bytes_copied: Bytes moved by aligned growth.

    """

    allocations: int = 0
    reallocations: int = 0
    frees: int = 0
    bytes_allocated: int = 0
    bytes_copied: int = 0

    def record_allocation(self, nbytes: int) -> None:
        self.allocations += 1
        self.bytes_allocated += nbytes

    def record_reallocation(self, nbytes: int) -> None:
        self.reallocations += 1
        self.bytes_allocated += nbytes

    def record_free(self) -> None:
        self.frees += 1

    def record_copy(self, nbytes: int) -> None:
        self.bytes_copied += nbytes

    def summary(self) -> dict[str, Any]:
        """Get summary of allocation metrics."""
        return {
            "allocations": self.allocations,
            "reallocations": self.reallocations,
            "frees": self.frees,
            "bytes_allocated": self.bytes_allocated,
            "bytes_copied": self.bytes_copied,
        }


# Module-level ContextVar
_accumulator: ContextVar[AllocationAccumulator | None] = ContextVar(
    "allocation_accumulator",
    default=None,
)


def get_allocation_accumulator() -> AllocationAccumulator | None:
    """Get current accumulator (None if accounting disabled)."""
    return _accumulator.get()


@contextmanager
def profiled_allocations() -> Iterator[AllocationAccumulator]:
    """Context manager for allocation accounting.

    Creates an AllocationAccumulator and makes it available via
    get_allocation_accumulator() for the duration of the with block.

    Yields:
        AllocationAccumulator populated by every buffer operation that
        touches the allocator.

    """
    acc = AllocationAccumulator()
    token: Token[AllocationAccumulator | None] = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)
