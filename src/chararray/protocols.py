"""Protocols for chararray.

Defines the allocator contract the buffers are written against.
"""

from __future__ import annotations

import ctypes
from typing import Protocol, TypeAlias

#: A block handed out by an allocator: a ctypes ``c_char`` array whose
#: address (``ctypes.addressof``) is the start of the storage.
Block: TypeAlias = "ctypes.Array[ctypes.c_char]"


class Allocator(Protocol):
    """Protocol for the memory service backing the buffers.

    Every method reports failure by returning None instead of raising;
    the buffers turn that into AllocationError. Blocks are owned by
    whoever holds them until passed to free() or reallocate().

    Thread Safety:
        Implementations are only called by the buffer that owns the block,
        so they need not be thread-safe for a single block.

    """

    def allocate(self, size: int) -> Block | None:
        """Allocate a block of ``size`` bytes."""
        ...

    def reallocate(self, block: Block, size: int) -> Block | None:
        """Resize ``block`` to ``size`` bytes, preserving its prefix.

        On success the returned block replaces ``block``, which must not
        be used again. On failure ``block`` is untouched.
        """
        ...

    def free(self, block: Block) -> None:
        """Release ``block``."""
        ...

    def allocate_aligned(self, size: int, alignment: int) -> Block | None:
        """Allocate ``size`` bytes starting at a multiple of ``alignment``."""
        ...
