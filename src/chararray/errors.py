"""Exception classes for chararray.

Provides standardized exceptions for error handling throughout chararray.
"""

from __future__ import annotations


class CharArrayError(Exception):
    """Base exception for all chararray errors.
    
    Subclass this for specific error categories.
    """

    pass


class AllocationError(CharArrayError, MemoryError):
    """The allocator could not satisfy a construction or growth request.
    
    Raised by buffers when an allocate, reallocate or aligned allocation
    fails. The buffer that raised it keeps its previous block intact.
    """

    def __init__(
        self,
        size: int,
        alignment: int | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize allocation error.
        
        Args:
            size: Requested block size in bytes
            alignment: Requested alignment (aligned allocations only)
            message: Optional description overriding the default
        """
        self.size = size
        self.alignment = alignment

        if message is None:
            message = f"could not allocate {size} bytes"
            if alignment is not None:
                message += f" aligned to {alignment}"
        super().__init__(message)


class FormatOverflowError(CharArrayError):
    """Formatted output kept outgrowing the buffer.
    
    Raised by the printf-style appends when every retry still reported
    truncation, which only happens when the formatted arguments render
    differently from one attempt to the next.
    """

    def __init__(self, attempts: int, required: int) -> None:
        self.attempts = attempts
        self.required = required
        super().__init__(
            f"formatted output still truncated after {attempts} attempts "
            f"({required} bytes required)"
        )
