"""
Immutable, zero-copy byte ranges.

A SharedBytes is a window over a backing byte object. Sub-slicing and
prefix removal produce new windows over the same backing storage; the
bytes themselves are never duplicated.

IMPORTANT:
- The backing object MUST NOT be mutated once a SharedBytes refers to it.
  BytesMut upholds this by handing over its storage instead of writing
  into frozen regions.
- Storage is released by the garbage collector once the last window
  referring to it is dropped.
"""

from __future__ import annotations

from functools import total_ordering
from typing import Iterator, Union

BytesLike = Union[bytes, bytearray, memoryview]


@total_ordering
class SharedBytes:
    """
    Cheaply-shareable immutable view over a contiguous byte range.

    Equality, ordering and hashing are defined over the viewed contents,
    never over the backing object identity.

    Construction from `bytes` (or another SharedBytes) shares the storage.
    Mutable inputs (`bytearray`, writable `memoryview`) are copied, since
    their owner could otherwise change the contents underneath us.
    """

    __slots__ = ("_view", "_hash")

    def __init__(self, data: BytesLike | "SharedBytes" = b"") -> None:
        if isinstance(data, SharedBytes):
            view = data._view
        elif isinstance(data, bytes):
            view = memoryview(data)
        elif (
            isinstance(data, memoryview)
            and isinstance(data.obj, bytes)
            and data.c_contiguous
        ):
            view = data if data.format == "B" else data.cast("B")
        elif isinstance(data, (bytearray, memoryview)):
            view = memoryview(bytes(data))
        else:
            raise TypeError(
                f"SharedBytes requires a bytes-like object, "
                f"got {type(data).__name__}"
            )

        self._view: memoryview = view.toreadonly()
        self._hash: int | None = None

    @classmethod
    def from_static(cls, data: bytes) -> "SharedBytes":
        """Wrap an immutable `bytes` constant. No copy is made."""
        if not isinstance(data, bytes):
            raise TypeError("from_static requires an immutable bytes object")
        return cls(data)

    @classmethod
    def _adopt(cls, view: memoryview) -> "SharedBytes":
        # Trusted path: the caller guarantees nobody writes through `view`'s
        # backing object again.
        shared = cls.__new__(cls)
        shared._view = view.toreadonly()
        shared._hash = None
        return shared

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def as_memoryview(self) -> memoryview:
        """Read-only view of the contents (no copy)."""
        return self._view

    def __len__(self) -> int:
        return len(self._view)

    def __bool__(self) -> bool:
        return len(self._view) > 0

    def __bytes__(self) -> bytes:
        return self._view.tobytes()

    def __buffer__(self, flags: int) -> memoryview:
        return self._view

    def __iter__(self) -> Iterator[int]:
        return iter(self._view)

    def __getitem__(self, key):
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("SharedBytes only supports contiguous slices")
            return SharedBytes._adopt(self._view[key])
        return self._view[key]

    # ------------------------------------------------------------------
    # Zero-copy splitting
    # ------------------------------------------------------------------

    def slice(self, start: int, end: int | None = None) -> "SharedBytes":
        """
        Return the sub-range [start, end) as a new window.

        Raises ValueError if the range falls outside this window.
        """
        if end is None:
            end = len(self)
        if not 0 <= start <= end <= len(self):
            raise ValueError(
                f"range [{start}, {end}) out of bounds for length {len(self)}"
            )
        return SharedBytes._adopt(self._view[start:end])

    def split_at(self, at: int) -> tuple["SharedBytes", "SharedBytes"]:
        """Split into [0, at) and [at, len)."""
        return self.slice(0, at), self.slice(at)

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    @staticmethod
    def _contents(other: object) -> bytes | None:
        if isinstance(other, SharedBytes):
            return other._view.tobytes()
        if isinstance(other, (bytes, bytearray)):
            return bytes(other)
        return None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SharedBytes):
            return self._view == other._view
        if isinstance(other, (bytes, bytearray)):
            return self._view == memoryview(other)
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        contents = self._contents(other)
        if contents is None:
            return NotImplemented
        return self._view.tobytes() < contents

    def __hash__(self) -> int:
        # Consistent with hash(bytes(self)), so b"x" and SharedBytes(b"x")
        # collide in dicts as their equality requires.
        if self._hash is None:
            self._hash = hash(self._view.tobytes())
        return self._hash

    def __copy__(self) -> "SharedBytes":
        return self

    def __deepcopy__(self, memo: dict) -> "SharedBytes":
        return self

    def __repr__(self) -> str:
        return f"SharedBytes({self._view.tobytes()!r})"
