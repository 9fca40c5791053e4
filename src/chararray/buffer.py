"""Growable buffers over allocator-owned blocks.

GrowableBuffer is a dynamic array of fixed-size elements, described by a
ctypes type (``c_char`` by default). It tracks ``capacity`` (elements the
block can hold) and ``length`` (elements in use), doubles its capacity when
a push finds it full, and never shrinks.

AlignedGrowableBuffer keeps the block start on a power-of-two boundary.
Reallocation primitives do not preserve alignment, so it grows by
allocating a new aligned block, copying the live elements and freeing the
old block.

Ownership:
    A buffer exclusively owns its block. Growth may move the block, so
    ``data`` and ``address`` must be re-read after every mutation.
    Calling anything on a buffer after destroy() or release() is a
    precondition violation and is not checked.

Thread Safety:
    Not thread-safe. Each instance must be used by one thread at a time.

"""

from __future__ import annotations

import ctypes
from collections.abc import Iterable, Iterator
from typing import Any

from chararray.allocator import is_power_of_two
from chararray.config import get_buffer_config
from chararray.errors import AllocationError
from chararray.profiling import get_allocation_accumulator
from chararray.protocols import Allocator, Block
from chararray.utils.logger import get_logger

logger = get_logger(__name__)

_BYTE_LIKE = (bytes, bytearray, memoryview)


class GrowableBuffer:
    """Dynamic array over a single allocator block.

    Usage:
            >>> buf = GrowableBuffer(2)
            >>> for ch in b"abc":
            ...     buf.push(ch)
            >>> buf.capacity, len(buf)
            (4, 3)
            >>> buf.tobytes()
            b'abc'

    Args:
        capacity: Initial capacity in elements (config default if None,
            raised to 1 if smaller)
        ctype: ctypes type of one element
        allocator: Allocator to use (config allocator if None)

    Raises:
        AllocationError: The initial block could not be allocated.

    """

    __slots__ = ("_allocator", "_block", "_capacity", "_length", "ctype", "item_size")

    def __init__(
        self,
        capacity: int | None = None,
        *,
        ctype: Any = ctypes.c_char,
        allocator: Allocator | None = None,
    ) -> None:
        config = get_buffer_config()
        if capacity is None:
            capacity = config.default_capacity
        self.ctype = ctype
        self.item_size = ctypes.sizeof(ctype)
        self._allocator = allocator if allocator is not None else config.get_allocator()
        self._capacity = max(capacity, 1)
        self._length = 0
        self._block: Block | None = None
        self._block = self._allocate(self._capacity * self.item_size)

    @classmethod
    def from_block(
        cls,
        block: Block,
        length: int,
        *,
        ctype: Any = ctypes.c_char,
        allocator: Allocator | None = None,
        **kwargs: Any,
    ) -> GrowableBuffer:
        """Wrap an existing block without copying.

        The buffer takes ownership of ``block``: it will free or
        reallocate it through ``allocator``, which must be the allocator
        the block came from. ``capacity`` and ``length`` are both set to
        ``length``.

        Raises:
            ValueError: ``length`` elements do not fit in ``block``.

        """
        buf = cls.__new__(cls)
        buf._adopt(block, length, ctype, allocator, **kwargs)
        return buf

    def _adopt(
        self,
        block: Block,
        length: int,
        ctype: Any,
        allocator: Allocator | None,
    ) -> None:
        self.ctype = ctype
        self.item_size = ctypes.sizeof(ctype)
        if length * self.item_size > ctypes.sizeof(block):
            raise ValueError(
                f"block of {ctypes.sizeof(block)} bytes cannot hold {length} elements"
            )
        if allocator is None:
            allocator = get_buffer_config().get_allocator()
        self._allocator = allocator
        self._block = block
        self._capacity = length
        self._length = length

    # -- allocation hooks ----------------------------------------------------

    def _allocate(self, nbytes: int) -> Block:
        block = self._allocator.allocate(nbytes)
        if block is None:
            logger.warning("allocation of %d bytes failed", nbytes)
            raise AllocationError(nbytes)
        acc = get_allocation_accumulator()
        if acc is not None:
            acc.record_allocation(nbytes)
        return block

    def _reallocate(self, nbytes: int) -> Block:
        block = self._allocator.reallocate(self._block, nbytes)
        if block is None:
            logger.warning(
                "reallocation to %d bytes failed, keeping %d-element block",
                nbytes,
                self._capacity,
            )
            raise AllocationError(nbytes)
        acc = get_allocation_accumulator()
        if acc is not None:
            acc.record_reallocation(nbytes)
        return block

    def _grow(self, new_capacity: int) -> None:
        # The new block is fully built before any field changes, so a
        # failing allocator leaves the buffer as it was.
        block = self._reallocate(new_capacity * self.item_size)
        logger.debug("grew buffer from %d to %d elements", self._capacity, new_capacity)
        self._block = block
        self._capacity = new_capacity

    def _empty_like(self, capacity: int) -> GrowableBuffer:
        return GrowableBuffer(capacity, ctype=self.ctype, allocator=self._allocator)

    # -- properties ----------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Number of elements the current block can hold."""
        return self._capacity

    @property
    def length(self) -> int:
        """Number of elements in use."""
        return self._length

    @length.setter
    def length(self, value: int) -> None:
        if not 0 <= value <= self._capacity:
            raise ValueError(f"length {value} outside 0..{self._capacity}")
        self._length = value

    @property
    def data(self) -> Block:
        """The owned block. Invalidated by any mutation that grows the buffer."""
        return self._block

    @property
    def address(self) -> int:
        """Start address of the owned block."""
        return ctypes.addressof(self._block)

    @property
    def allocator(self) -> Allocator:
        return self._allocator

    # -- operations ----------------------------------------------------------

    def resize(self, new_capacity: int) -> None:
        """Ensure ``capacity >= new_capacity``. Never shrinks.

        Raises:
            AllocationError: The block could not be grown; the buffer is
                left unchanged.

        """
        if new_capacity > self._capacity:
            self._grow(new_capacity)

    def reserve(self, count: int) -> None:
        """Ensure room for ``count`` more elements, doubling at least."""
        needed = self._length + count
        if needed > self._capacity:
            self._grow(max(self._capacity * 2, needed))

    def push(self, element: Any) -> None:
        """Append one element, doubling the capacity first when full."""
        if self._length == self._capacity:
            self._grow(max(self._capacity * 2, 1))
        self._store(self._length, element)
        self._length += 1

    def extend(self, elements: Iterable[Any]) -> None:
        """Append every element of ``elements``.

        Byte-like input to a one-byte element buffer is copied in one
        move after a single reservation.
        """
        if self.item_size == 1 and isinstance(elements, _BYTE_LIKE):
            data = bytes(elements)
            self.reserve(len(data))
            ctypes.memmove(self.address + self._length, data, len(data))
            self._length += len(data)
            return
        for element in elements:
            self.push(element)

    def pop(self) -> Any:
        """Remove and return the last element."""
        if self._length == 0:
            raise IndexError("pop from empty buffer")
        self._length -= 1
        return self._load(self._length)

    def clear(self) -> None:
        """Drop all elements, keeping the block."""
        self._length = 0

    def copy(self) -> GrowableBuffer:
        """Return an independent buffer with the same capacity and contents."""
        other = self._empty_like(self._capacity)
        ctypes.memmove(other.address, self.address, self._length * self.item_size)
        other._length = self._length
        return other

    def tobytes(self) -> bytes:
        """Return the raw bytes of the elements in use."""
        return ctypes.string_at(self.address, self._length * self.item_size)

    def release(self) -> Block:
        """Hand the block to the caller without freeing it.

        The buffer is invalid afterwards; the caller owns the block.
        """
        block = self._block
        self._block = None
        self._capacity = self._length = 0
        return block

    def destroy(self) -> None:
        """Free the block. The buffer must not be used afterwards."""
        self._allocator.free(self._block)
        acc = get_allocation_accumulator()
        if acc is not None:
            acc.record_free()
        self._block = None
        self._capacity = self._length = 0

    # -- element access ------------------------------------------------------

    def _store(self, index: int, value: Any) -> None:
        self.ctype.from_address(self.address + index * self.item_size).value = value

    def _load(self, index: int) -> Any:
        return self.ctype.from_address(self.address + index * self.item_size).value

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index: int) -> Any:
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("buffer index out of range")
        return self._load(index)

    def __iter__(self) -> Iterator[Any]:
        for i in range(self._length):
            yield self._load(i)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(length={self._length}, capacity={self._capacity}, "
            f"ctype={self.ctype.__name__})"
        )


class AlignedGrowableBuffer(GrowableBuffer):
    """GrowableBuffer whose block always starts on an ``alignment`` boundary.

    Args:
        capacity: Initial capacity in elements (config default if None)
        alignment: Power-of-two byte alignment (config default if None)
        ctype: ctypes type of one element
        allocator: Allocator to use (config allocator if None)

    Raises:
        AllocationError: The alignment is not a power of two, or the
            aligned block could not be allocated.

    """

    __slots__ = ("alignment",)

    def __init__(
        self,
        capacity: int | None = None,
        *,
        alignment: int | None = None,
        ctype: Any = ctypes.c_char,
        allocator: Allocator | None = None,
    ) -> None:
        if alignment is None:
            alignment = get_buffer_config().default_alignment
        self.alignment = alignment
        super().__init__(capacity, ctype=ctype, allocator=allocator)

    def _adopt(
        self,
        block: Block,
        length: int,
        ctype: Any,
        allocator: Allocator | None,
        alignment: int | None = None,
    ) -> None:
        if alignment is None:
            alignment = get_buffer_config().default_alignment
        if not is_power_of_two(alignment) or ctypes.addressof(block) % alignment:
            raise AllocationError(
                ctypes.sizeof(block), alignment, "adopted block is not aligned"
            )
        self.alignment = alignment
        super()._adopt(block, length, ctype, allocator)

    def _allocate(self, nbytes: int) -> Block:
        block = self._allocate_aligned(nbytes)
        acc = get_allocation_accumulator()
        if acc is not None:
            acc.record_allocation(nbytes)
        return block

    def _allocate_aligned(self, nbytes: int) -> Block:
        if not is_power_of_two(self.alignment):
            raise AllocationError(
                nbytes,
                self.alignment,
                f"alignment {self.alignment} is not a power of two",
            )
        block = self._allocator.allocate_aligned(nbytes, self.alignment)
        if block is None:
            logger.warning(
                "aligned allocation of %d bytes (alignment %d) failed",
                nbytes,
                self.alignment,
            )
            raise AllocationError(nbytes, self.alignment)
        if ctypes.addressof(block) % self.alignment:
            self._allocator.free(block)
            raise AllocationError(
                nbytes, self.alignment, "allocator returned a misaligned block"
            )
        return block

    def _reallocate(self, nbytes: int) -> Block:
        block = self._allocate_aligned(nbytes)
        used = self._length * self.item_size
        ctypes.memmove(ctypes.addressof(block), self.address, used)
        self._allocator.free(self._block)
        acc = get_allocation_accumulator()
        if acc is not None:
            acc.record_reallocation(nbytes)
            acc.record_free()
            acc.record_copy(used)
        return block

    def _empty_like(self, capacity: int) -> AlignedGrowableBuffer:
        return AlignedGrowableBuffer(
            capacity, alignment=self.alignment, ctype=self.ctype, allocator=self._allocator
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(length={self._length}, capacity={self._capacity}, "
            f"alignment={self.alignment}, ctype={self.ctype.__name__})"
        )


__all__ = [
    "AlignedGrowableBuffer",
    "GrowableBuffer",
]
