"""
Growable, mutable byte buffer.

BytesMut accumulates bytes as they arrive from a stream and hands out
immutable SharedBytes windows over what it has collected. Nothing is
copied when a window is handed out:

- The buffer reads from a start offset into its storage. Removing a
  prefix (split_to, advance) only moves that offset.
- Once a window has been handed out the storage is sealed: it is never
  written again. The next append moves the unconsumed remainder into
  fresh storage, which after a decode pass is normally a short
  incomplete tail.

All windows carved between two appends share one backing object, so the
storage pinned by handed-out windows stays proportional to the input.
"""

from __future__ import annotations

from typing import Iterable

from strchunk.app.buffers.shared_bytes import BytesLike, SharedBytes


class BytesMut:
    """
    Exclusively-owned append buffer.

    NOT thread-safe. A BytesMut must only be mutated by its owner.
    """

    __slots__ = ("_buf", "_start", "_sealed")

    def __init__(self, data: BytesLike = b"") -> None:
        self._buf = bytearray(data)
        self._start = 0
        self._sealed = False

    def __len__(self) -> int:
        return len(self._buf) - self._start

    def __bool__(self) -> bool:
        return len(self) > 0

    def is_empty(self) -> bool:
        return len(self) == 0

    def __bytes__(self) -> bytes:
        return bytes(self._buf[self._start:])

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BytesMut):
            return bytes(self) == bytes(other)
        if isinstance(other, (bytes, bytearray, memoryview, SharedBytes)):
            return bytes(self) == bytes(other)
        return NotImplemented

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"BytesMut({bytes(self)!r})"

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------

    def extend(self, data: BytesLike | SharedBytes) -> None:
        """Append bytes to the end of the buffer."""
        if isinstance(data, SharedBytes):
            data = data.as_memoryview()

        if self._sealed:
            # Windows over the old storage are live; never write into it.
            self._buf = bytearray(memoryview(self._buf)[self._start:])
            self._start = 0
            self._sealed = False
        elif self._start and self._start * 2 >= len(self._buf):
            del self._buf[:self._start]
            self._start = 0

        self._buf += data

    put = extend

    def extend_from(self, chunks: Iterable[BytesLike]) -> None:
        for data in chunks:
            self.extend(data)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def view(self) -> memoryview:
        """
        Read-only view over the current contents.

        The view pins the storage: release it (use it as a context manager)
        before mutating the buffer again, otherwise the mutation may raise
        BufferError.
        """
        return memoryview(self._buf)[self._start:].toreadonly()

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def split_to(self, at: int) -> SharedBytes:
        """
        Remove bytes [0, at) from the front and return them frozen.

        Neither the returned prefix nor the remaining bytes are copied.
        """
        if not 0 <= at <= len(self):
            raise ValueError(
                f"split_to out of bounds: {at} not in [0, {len(self)}]"
            )
        if at == len(self):
            return self.take()

        start = self._start
        window = memoryview(self._buf)[start:start + at]
        self._start = start + at
        self._sealed = True
        return SharedBytes._adopt(window)

    def take(self) -> SharedBytes:
        """Drain the whole buffer into a frozen window. No copy is made."""
        window = memoryview(self._buf)[self._start:]
        self._buf = bytearray()
        self._start = 0
        self._sealed = False
        return SharedBytes._adopt(window)

    freeze = take

    def advance(self, count: int) -> None:
        """Discard `count` bytes from the front."""
        if not 0 <= count <= len(self):
            raise ValueError(
                f"advance out of bounds: {count} not in [0, {len(self)}]"
            )
        self._start += count

    def clear(self) -> None:
        self._buf = bytearray()
        self._start = 0
        self._sealed = False
