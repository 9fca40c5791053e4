"""ctypes-backed allocators.

HeapAllocator hands out ctypes ``c_char`` arrays. Aligned blocks are carved
out of an over-allocated raw array with ``from_buffer``, the same
over-allocate-and-offset approach used for cache-line aligned numpy
arrays, so the raw array stays alive for as long as the aligned view does.

LimitedAllocator wraps another allocator and refuses requests that would
push the bytes it has outstanding past a budget. Useful for capping the
memory a builder may take, and for exercising failure paths in tests.

"""

from __future__ import annotations

import ctypes

from chararray.protocols import Allocator, Block
from chararray.utils.logger import get_logger

logger = get_logger(__name__)


def is_power_of_two(value: int) -> bool:
    """Return True for 1, 2, 4, 8, ..."""
    return value > 0 and value & (value - 1) == 0


class HeapAllocator:
    """Allocator over the Python-managed heap.

    ``free`` only drops the allocator's bookkeeping; the storage itself is
    reclaimed once the last reference to the block goes away.

    Attributes:
        live_blocks: Blocks handed out and not yet freed or reallocated.

    """

    __slots__ = ("live_blocks",)

    def __init__(self) -> None:
        self.live_blocks = 0

    def allocate(self, size: int) -> Block | None:
        try:
            block = (ctypes.c_char * size)()
        except (MemoryError, OverflowError):
            logger.warning("heap allocation of %d bytes failed", size)
            return None
        self.live_blocks += 1
        return block

    def reallocate(self, block: Block, size: int) -> Block | None:
        if size <= ctypes.sizeof(block):
            return block
        new_block = self.allocate(size)
        if new_block is None:
            return None
        ctypes.memmove(
            ctypes.addressof(new_block), ctypes.addressof(block), ctypes.sizeof(block)
        )
        self.free(block)
        return new_block

    def free(self, block: Block) -> None:
        self.live_blocks -= 1

    def allocate_aligned(self, size: int, alignment: int) -> Block | None:
        if not is_power_of_two(alignment):
            logger.warning("rejected alignment %d (not a power of two)", alignment)
            return None
        try:
            raw = (ctypes.c_char * (size + alignment - 1))()
        except (MemoryError, OverflowError):
            logger.warning(
                "aligned allocation of %d bytes (alignment %d) failed", size, alignment
            )
            return None
        offset = -ctypes.addressof(raw) % alignment
        self.live_blocks += 1
        # The view keeps a reference to ``raw`` through its buffer export.
        return (ctypes.c_char * size).from_buffer(raw, offset)


class LimitedAllocator:
    """Allocator enforcing a budget on the bytes it has outstanding.

    Args:
        limit: Maximum number of bytes live at any one time
        inner: Allocator doing the actual work (a fresh HeapAllocator
            when omitted)

    Example:
        >>> alloc = LimitedAllocator(64)
        >>> alloc.allocate(128) is None
        True

    """

    __slots__ = ("_sizes", "in_use", "inner", "limit")

    def __init__(self, limit: int, inner: Allocator | None = None) -> None:
        self.limit = limit
        self.inner: Allocator = inner if inner is not None else HeapAllocator()
        self.in_use = 0
        self._sizes: dict[int, int] = {}

    def _fits(self, size: int) -> bool:
        if self.in_use + size > self.limit:
            logger.warning(
                "allocation of %d bytes exceeds budget (%d of %d in use)",
                size,
                self.in_use,
                self.limit,
            )
            return False
        return True

    def _track(self, block: Block | None) -> Block | None:
        if block is not None:
            size = ctypes.sizeof(block)
            self._sizes[id(block)] = size
            self.in_use += size
        return block

    def allocate(self, size: int) -> Block | None:
        if not self._fits(size):
            return None
        return self._track(self.inner.allocate(size))

    def reallocate(self, block: Block, size: int) -> Block | None:
        old_size = self._sizes.get(id(block), ctypes.sizeof(block))
        if not self._fits(size - old_size):
            return None
        new_block = self.inner.reallocate(block, size)
        if new_block is None:
            return None
        self._sizes.pop(id(block), None)
        self.in_use -= old_size
        return self._track(new_block)

    def free(self, block: Block) -> None:
        self.in_use -= self._sizes.pop(id(block), ctypes.sizeof(block))
        self.inner.free(block)

    def allocate_aligned(self, size: int, alignment: int) -> Block | None:
        if not self._fits(size):
            return None
        return self._track(self.inner.allocate_aligned(size, alignment))


# Module-level default allocator (reused, never recreated)
_DEFAULT_ALLOCATOR = HeapAllocator()


def default_allocator() -> HeapAllocator:
    """Return the process-wide HeapAllocator used when none is configured."""
    return _DEFAULT_ALLOCATOR


__all__ = [
    "HeapAllocator",
    "LimitedAllocator",
    "default_allocator",
    "is_power_of_two",
]
