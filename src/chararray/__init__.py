"""
chararray — growable byte buffers and a NUL-terminated string builder.

Two buffer flavours share one contract: GrowableBuffer doubles a plain
heap block as it fills, AlignedGrowableBuffer keeps its block on a
power-of-two boundary across growth. CharArray layers C-string semantics
on either one: append, strcat-style concatenation, joining with a
separator and printf-style formatted append that grows until the output
fits.

Quick Start:
    >>> from chararray import CharArray
    >>> sb = CharArray()
    >>> sb.cat("hello ").cat_len("world!!!", 5).get_string().value
    b'hello world'
    >>> sb.cat_printf("%d", 42).get_string().value
    b'hello world42'
    >>> sb.to_string().value
    b'hello world42'

Aligned storage:
    >>> from chararray import AlignedCharArray
    >>> with AlignedCharArray(alignment=64) as sb:
    ...     sb.add_joined("/", True, "usr/", "local", "lib").get_string().value
    b'usr/local/lib'
"""

from chararray.allocator import HeapAllocator, LimitedAllocator, default_allocator
from chararray.buffer import AlignedGrowableBuffer, GrowableBuffer
from chararray.chararray import AlignedCharArray, CharArray, format_into
from chararray.config import (
    BufferConfig,
    buffer_config_context,
    get_buffer_config,
    reset_buffer_config,
    set_buffer_config,
)
from chararray.errors import AllocationError, CharArrayError, FormatOverflowError
from chararray.profiling import (
    AllocationAccumulator,
    get_allocation_accumulator,
    profiled_allocations,
)
from chararray.protocols import Allocator, Block

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022 — grouped by category for maintainability
    # Version
    "__version__",
    # String builder
    "AlignedCharArray",
    "CharArray",
    "format_into",
    # Buffers
    "AlignedGrowableBuffer",
    "GrowableBuffer",
    # Allocators
    "Allocator",
    "Block",
    "HeapAllocator",
    "LimitedAllocator",
    "default_allocator",
    # Configuration
    "BufferConfig",
    "buffer_config_context",
    "get_buffer_config",
    "reset_buffer_config",
    "set_buffer_config",
    # Errors
    "AllocationError",
    "CharArrayError",
    "FormatOverflowError",
    # Profiling
    "AllocationAccumulator",
    "get_allocation_accumulator",
    "profiled_allocations",
]
