"""ContextVar-based buffer configuration for chararray.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Buffers and builders read the active config once, when they are created.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed and race conditions are impossible.

Usage:
    from chararray import CharArray
    from chararray.config import BufferConfig, buffer_config_context

    with buffer_config_context(BufferConfig(default_capacity=256)):
        sb = CharArray()  # starts with room for 256 bytes

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

from chararray.allocator import default_allocator
from chararray.protocols import Allocator


@dataclass(frozen=True, slots=True)
class BufferConfig:
    """Immutable buffer configuration.

    Attributes:
        default_capacity: Elements allocated when no capacity is given
        default_alignment: Alignment of aligned buffers when none is given
        encoding: Encoding applied to ``str`` arguments of the builder
        max_format_attempts: Retry bound of the printf-style appends
        allocator: Allocator for new buffers (None means the shared
            HeapAllocator)

    """

    default_capacity: int = 8
    default_alignment: int = 16
    encoding: str = "utf-8"
    max_format_attempts: int = 8
    allocator: Allocator | None = None

    def get_allocator(self) -> Allocator:
        """Return the configured allocator, falling back to the default."""
        if self.allocator is not None:
            return self.allocator
        return default_allocator()

    @classmethod
    def from_dict(cls, config_dict: dict) -> BufferConfig:
        """Create BufferConfig from dictionary.

        Only includes keys that are valid BufferConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = BufferConfig.from_dict({
            ...     "default_capacity": 64,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.default_capacity
            64

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: BufferConfig = BufferConfig()

_buffer_config: ContextVar[BufferConfig] = ContextVar(
    "buffer_config",
    default=_DEFAULT_CONFIG,
)


def get_buffer_config() -> BufferConfig:
    """Get current buffer configuration (thread-local)."""
    return _buffer_config.get()


def set_buffer_config(config: BufferConfig) -> None:
    """Set buffer configuration for current context.

    Thread Safety:
        Only affects the current thread's context. Other threads are unaffected.

    """
    _buffer_config.set(config)


def reset_buffer_config() -> None:
    """Reset to default configuration."""
    _buffer_config.set(_DEFAULT_CONFIG)


@contextmanager
def buffer_config_context(config: BufferConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with buffer_config_context(BufferConfig(default_alignment=64)):
        ...     buf = AlignedGrowableBuffer()
        >>> buf.alignment
        64

    """
    previous = _buffer_config.get()
    _buffer_config.set(config)
    try:
        yield
    finally:
        _buffer_config.set(previous)


__all__ = [
    "BufferConfig",
    "buffer_config_context",
    "get_buffer_config",
    "reset_buffer_config",
    "set_buffer_config",
]
