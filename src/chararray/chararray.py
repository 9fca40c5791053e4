"""CharArray: a NUL-terminated string builder over a growable buffer.

The builder stores raw bytes and can be read as a C string at any time.
Whether the contents end in a terminator is never stored; it is read off
the last byte on demand, which is what tells the method families apart:

- ``append*`` push bytes and leave termination alone
- ``cat*`` strip a trailing NUL, push, then terminate (strcat semantics)
- ``add*`` push then terminate without stripping first

``str`` arguments are encoded with the configured encoding; a multi-byte
character counts as several elements.

The same code serves every backing buffer: CharArray grows a plain
GrowableBuffer, AlignedCharArray an AlignedGrowableBuffer.

Thread Safety:
    Not thread-safe. A builder and any views into it belong to one thread.

"""

from __future__ import annotations

import ctypes
from collections.abc import Mapping
from typing import Any, ClassVar, TypeAlias

from chararray.buffer import AlignedGrowableBuffer, GrowableBuffer
from chararray.config import get_buffer_config
from chararray.errors import FormatOverflowError
from chararray.protocols import Allocator, Block
from chararray.utils.logger import get_logger

logger = get_logger(__name__)

StrLike: TypeAlias = str | bytes | bytearray | memoryview

NUL = b"\x00"


def format_into(address: int, size: int, output: bytes) -> int:
    """Write ``output`` into ``size`` bytes at ``address``, snprintf style.

    At most ``size - 1`` bytes of ``output`` are written, followed by a
    NUL, and nothing at all when ``size`` is 0.

    Returns:
        The length of the complete output. A result ``>= size`` means the
        write was truncated.

    """
    if size > 0:
        count = min(len(output), size - 1)
        ctypes.memmove(address, output, count)
        ctypes.memset(address + count, 0, 1)
    return len(output)


class CharArray:
    """Growable byte string with C-string semantics.

    Usage:
            >>> sb = CharArray()
            >>> sb.cat("hello ").cat_len("world!!!", 5).get_string().value
            b'hello world'
            >>> sb.cat_printf("%d", 42).get_string().value
            b'hello world42'
            >>> sb.destroy()

    Args:
        capacity: Initial capacity in bytes (config default if None)
        allocator: Allocator for the backing buffer (config if None)
        **buffer_kwargs: Passed to the backing buffer class

    """

    buffer_factory: ClassVar[type[GrowableBuffer]] = GrowableBuffer

    __slots__ = ("buffer", "encoding", "max_format_attempts")

    def __init__(
        self,
        capacity: int | None = None,
        *,
        allocator: Allocator | None = None,
        **buffer_kwargs: Any,
    ) -> None:
        self._configure()
        self.buffer = self.buffer_factory(capacity, allocator=allocator, **buffer_kwargs)

    def _configure(self) -> None:
        config = get_buffer_config()
        self.encoding = config.encoding
        self.max_format_attempts = config.max_format_attempts

    @classmethod
    def from_string(cls, s: StrLike, **kwargs: Any) -> CharArray:
        """Create a builder holding a copy of ``s`` and one terminator."""
        sb = cls.__new__(cls)
        sb._configure()
        data = sb._encode(s)
        sb.buffer = cls.buffer_factory(len(data) + 1, **kwargs)
        sb.buffer.extend(data)
        return sb.terminate()

    @classmethod
    def from_block(
        cls,
        block: Block,
        length: int,
        *,
        allocator: Allocator | None = None,
        **buffer_kwargs: Any,
    ) -> CharArray:
        """Wrap ``length`` bytes of an existing block without copying.

        Ownership of ``block`` moves to the builder; the caller must not
        free it. ``allocator`` must be the one the block came from.
        """
        sb = cls.__new__(cls)
        sb._configure()
        sb.buffer = cls.buffer_factory.from_block(
            block, length, allocator=allocator, **buffer_kwargs
        )
        return sb

    def _encode(self, s: StrLike) -> bytes:
        if isinstance(s, str):
            return s.encode(self.encoding)
        return bytes(s)

    def _ends_with_nul(self) -> bool:
        return self.buffer.length > 0 and self.buffer[-1] == NUL

    # -- buffer passthrough --------------------------------------------------

    @property
    def length(self) -> int:
        """Bytes in use, counting a trailing terminator."""
        return self.buffer.length

    @property
    def capacity(self) -> int:
        return self.buffer.capacity

    @property
    def data(self) -> Block:
        """The backing block. Re-read after every mutation."""
        return self.buffer.data

    @property
    def address(self) -> int:
        return self.buffer.address

    # -- termination ---------------------------------------------------------

    def terminate(self) -> CharArray:
        """Push a NUL, whether or not one is already there."""
        self.buffer.push(NUL)
        return self

    def strip_terminator(self) -> CharArray:
        """Drop a trailing NUL if there is one."""
        if self._ends_with_nul():
            self.buffer.length -= 1
        return self

    def logical_length(self) -> int:
        """String length: ``length`` minus a trailing terminator, no scan."""
        if self._ends_with_nul():
            return self.buffer.length - 1
        return self.buffer.length

    def __len__(self) -> int:
        return self.logical_length()

    # -- append / cat / add --------------------------------------------------

    def append(self, s: StrLike) -> CharArray:
        """Push the bytes of ``s``. Does not terminate."""
        self.buffer.extend(self._encode(s))
        return self

    def append_len(self, s: StrLike, n: int) -> CharArray:
        """Push the first ``n`` bytes of ``s``. Does not terminate."""
        if n < 0:
            raise ValueError(f"negative length {n}")
        self.buffer.extend(self._encode(s)[:n])
        return self

    def cat(self, s: StrLike) -> CharArray:
        """strcat: strip the terminator, append ``s``, terminate."""
        return self.strip_terminator().append(s).terminate()

    def cat_len(self, s: StrLike, n: int) -> CharArray:
        if n < 0:
            raise ValueError(f"negative length {n}")
        return self.strip_terminator().append_len(s, n).terminate()

    def add(self, s: StrLike) -> CharArray:
        """Append ``s`` and terminate, keeping any existing terminator."""
        return self.append(s).terminate()

    def add_len(self, s: StrLike, n: int) -> CharArray:
        return self.append_len(s, n).terminate()

    # -- joined --------------------------------------------------------------

    def add_joined(
        self, separator: StrLike, strip_separator: bool, *parts: StrLike
    ) -> CharArray:
        """Append ``parts`` with ``separator`` between them, then terminate.

        With ``strip_separator`` set, a part other than the last that
        already ends in ``separator`` loses that tail, so
        ``add_joined("/", True, "usr/", "lib")`` gives ``usr/lib``.
        No parts is a no-op.
        """
        if not parts:
            return self
        sep = self._encode(separator)
        for part in parts[:-1]:
            data = self._encode(part)
            if strip_separator and sep and (
                (len(sep) == 1 and data[-1:] == sep)
                or (len(data) > len(sep) and data.endswith(sep))
            ):
                data = data[: -len(sep)]
            self.append(data).append(sep)
        return self.append(parts[-1]).terminate()

    def cat_joined(
        self, separator: StrLike, strip_separator: bool, *parts: StrLike
    ) -> CharArray:
        """add_joined after stripping the terminator."""
        return self.strip_terminator().add_joined(separator, strip_separator, *parts)

    # -- printf --------------------------------------------------------------

    def cat_printf(self, format: StrLike, *args: Any) -> CharArray:
        """Append ``format % args`` strcat style.

        A single mapping argument is used for ``%(name)s`` formats. A
        bytes ``format`` needs bytes for its ``%s`` arguments.
        """
        return self.cat_vprintf(format, _format_args(args))

    def add_printf(self, format: StrLike, *args: Any) -> CharArray:
        """Append ``format % args`` without stripping first."""
        return self.add_vprintf(format, _format_args(args))

    def cat_vprintf(self, format: StrLike, args: tuple[Any, ...] | Mapping[str, Any]) -> CharArray:
        self.strip_terminator()
        return self._vprintf(format, args)

    def add_vprintf(self, format: StrLike, args: tuple[Any, ...] | Mapping[str, Any]) -> CharArray:
        return self._vprintf(format, args)

    def _format(self, format: StrLike, args: tuple[Any, ...] | Mapping[str, Any]) -> bytes:
        if isinstance(format, str):
            return (format % args).encode(self.encoding)
        return bytes(format) % args

    def _vprintf(self, format: StrLike, args: tuple[Any, ...] | Mapping[str, Any]) -> CharArray:
        buf = self.buffer
        start = buf.length
        size = buf.capacity * 2 if buf.capacity - start <= 2 else buf.capacity
        required = 0
        for attempt in range(self.max_format_attempts):
            buf.resize(size)
            room = buf.capacity - start
            required = format_into(buf.address + start, room, self._format(format, args))
            if required < room:
                buf.length = start + required
                return self.terminate()
            logger.debug(
                "formatted output truncated (attempt %d: %d bytes, room for %d)",
                attempt + 1,
                required,
                room,
            )
            size = max(buf.capacity * 2, start + required + 1)
        raise FormatOverflowError(self.max_format_attempts, required)

    # -- consumption ---------------------------------------------------------

    def get_string(self) -> Block:
        """Terminate if needed and return a live view of the string.

        The view is a ``c_char`` array over the builder's own storage,
        covering the string without its terminator: ``.value`` is the C
        string, ``.raw`` every byte. Writes through ``data`` show up in
        it. Any call that may grow the builder invalidates the view.
        """
        if not self._ends_with_nul():
            self.terminate()
        return (ctypes.c_char * (self.buffer.length - 1)).from_buffer(self.buffer.data)

    def to_string(self) -> Block:
        """Terminate if needed and hand the block to the caller.

        The returned ``c_char`` array is owned by the caller; its
        ``.value`` is the C string. The builder is invalid afterwards.
        """
        if not self._ends_with_nul():
            self.terminate()
        block = self.buffer.release()
        self.buffer = None
        return block

    def destroy(self) -> None:
        """Free the backing block. The builder is invalid afterwards."""
        self.buffer.destroy()
        self.buffer = None

    def copy(self) -> CharArray:
        """Return an independent builder with the same bytes."""
        other = type(self).__new__(type(self))
        other.encoding = self.encoding
        other.max_format_attempts = self.max_format_attempts
        other.buffer = self.buffer.copy()
        return other

    def __bytes__(self) -> bytes:
        return ctypes.string_at(self.buffer.address, self.logical_length())

    def __enter__(self) -> CharArray:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.buffer is not None:
            self.destroy()

    def __repr__(self) -> str:
        if self.buffer is None:
            return f"{type(self).__name__}(<released>)"
        return f"{type(self).__name__}({bytes(self)!r}, capacity={self.buffer.capacity})"


class AlignedCharArray(CharArray):
    """CharArray over an AlignedGrowableBuffer.

    Usage:
            >>> sb = AlignedCharArray(alignment=64)
            >>> sb.cat("abc").address % 64
            0

    """

    buffer_factory = AlignedGrowableBuffer

    __slots__ = ()

    @property
    def alignment(self) -> int:
        return self.buffer.alignment


def _format_args(args: tuple[Any, ...]) -> tuple[Any, ...] | Mapping[str, Any]:
    if len(args) == 1 and isinstance(args[0], Mapping):
        return args[0]
    return args


__all__ = [
    "AlignedCharArray",
    "CharArray",
    "format_into",
]
