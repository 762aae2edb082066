"""
Validated UTF-8 text chunks.

A StrChunk wraps a SharedBytes range under one invariant: the bytes decode
as UTF-8, end to end, with no partial trailing sequence.

The invariant is established only at the construction sites in this
module (and StrChunkMut.freeze). Everything else reads the bytes as
trusted text:

- from_static / from_str: the bytes come from encoding a Python str
- extract_utf8: the bytes were checked by the UTF-8 codec
- _from_trusted: internal, for callers that already hold valid bytes
"""

from __future__ import annotations

import codecs
from functools import lru_cache, total_ordering
from typing import TYPE_CHECKING, Iterable

from strchunk.app.buffers.bytes_mut import BytesMut
from strchunk.app.buffers.shared_bytes import SharedBytes

if TYPE_CHECKING:
    from strchunk.app.chunk.result import Utf8Extraction


@total_ordering
class StrChunk:
    """
    Immutable, cheaply-shareable valid UTF-8 text.

    Copying a StrChunk shares its storage. Equality, ordering and hashing
    are byte-wise over the contents, which for UTF-8 matches code point
    order of the decoded text.
    """

    __slots__ = ("_bytes",)

    def __init__(self) -> None:
        self._bytes = _EMPTY

    @classmethod
    def _from_trusted(cls, data: SharedBytes) -> "StrChunk":
        chunk = cls.__new__(cls)
        chunk._bytes = data
        return chunk

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_static(cls, text: str) -> "StrChunk":
        """
        Chunk for a constant string.

        Chunks are cached per literal, so repeated calls share one encoded
        copy of the text.
        """
        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")
        return _static_chunk(text)

    @classmethod
    def from_str(cls, text: str) -> "StrChunk":
        """
        Chunk holding a UTF-8 copy of `text`.

        Raises UnicodeEncodeError if `text` contains lone surrogates, which
        have no UTF-8 encoding.
        """
        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")
        return cls._from_trusted(SharedBytes(text.encode("utf-8")))

    @classmethod
    def from_chars(cls, chars: Iterable[str]) -> "StrChunk":
        """Collect characters through a StrChunkMut builder."""
        from strchunk.app.chunk.str_chunk_mut import StrChunkMut

        builder = StrChunkMut()
        builder.extend(chars)
        return builder.freeze()

    @classmethod
    def extract_utf8(cls, src: BytesMut) -> "Utf8Extraction":
        """
        Remove the longest valid UTF-8 prefix from the front of `src`.

        - Whole buffer valid: `src` is drained, status COMPLETE.
        - Buffer ends inside a multi-byte sequence that could still become
          valid: the prefix before it is extracted, the tail stays in
          `src`, status INCOMPLETE.
        - Malformed sequence: the prefix before it is extracted, the
          malformed bytes stay at the front of `src`, status INVALID with
          an ExtractUtf8Error giving their length.

        The prefix is split off `src` without copying it.
        """
        from strchunk.app.chunk.result import Utf8Extraction

        if not isinstance(src, BytesMut):
            raise TypeError(f"expected BytesMut, got {type(src).__name__}")

        with src.view() as data:
            valid_len, error_len = _scan_utf8(data)
            total = len(data)

        if valid_len == total:
            if total == 0:
                return Utf8Extraction.complete(None)
            return Utf8Extraction.complete(cls._from_trusted(src.take()))

        extracted = None
        if valid_len > 0:
            extracted = cls._from_trusted(src.split_to(valid_len))

        if error_len:
            return Utf8Extraction.invalid(extracted, error_len)
        return Utf8Extraction.incomplete(extracted)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def as_bytes(self) -> memoryview:
        """Read-only view of the UTF-8 bytes (no copy)."""
        return self._bytes.as_memoryview()

    def as_str(self) -> str:
        return codecs.utf_8_decode(self._bytes.as_memoryview(), "strict", True)[0]

    def __str__(self) -> str:
        return self.as_str()

    def __len__(self) -> int:
        """Length in bytes, not characters."""
        return len(self._bytes)

    def __bool__(self) -> bool:
        return bool(self._bytes)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, StrChunk):
            item = item.as_str()
        if not isinstance(item, str):
            raise TypeError(
                f"'in <StrChunk>' requires str or StrChunk, "
                f"not {type(item).__name__}"
            )
        return item in self.as_str()

    def startswith(self, prefix: str | StrChunk) -> bool:
        return bytes(self._bytes).startswith(_encoded(prefix))

    def endswith(self, suffix: str | StrChunk) -> bool:
        return bytes(self._bytes).endswith(_encoded(suffix))

    # ------------------------------------------------------------------
    # Conversion out
    # ------------------------------------------------------------------

    def to_str(self) -> str:
        """Copy the text out into a new str."""
        return self.as_str()

    def into_bytes(self) -> SharedBytes:
        """The underlying byte range (shared, not copied)."""
        return self._bytes

    def __bytes__(self) -> bytes:
        return bytes(self._bytes)

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StrChunk):
            return NotImplemented
        return self._bytes == other._bytes

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StrChunk):
            return NotImplemented
        return self._bytes < other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __copy__(self) -> "StrChunk":
        return self

    def __deepcopy__(self, memo: dict) -> "StrChunk":
        return self

    def __reduce__(self):
        return (StrChunk.from_str, (self.as_str(),))

    def __repr__(self) -> str:
        return f"StrChunk({self.as_str()!r})"


_SCAN_WINDOW = 256


def _scan_utf8(data: memoryview) -> tuple[int, int]:
    """
    Return (valid_len, error_len) for `data`.

    error_len is 0 when there is no determinate error: either everything
    is valid or the bytes after valid_len are an incomplete sequence.

    The codec copies its whole input into every UnicodeDecodeError, so
    the scan runs over windows that double while they decode cleanly.
    The window holding an error is at most twice the valid bytes scanned
    before it (plus _SCAN_WINDOW), which keeps repeated extraction over
    interleaved corruption linear.
    """
    total = len(data)
    pos = 0
    window = _SCAN_WINDOW

    while True:
        end = min(pos + window, total)
        try:
            # final=False: a truncated sequence at the end of the window is
            # reported as unconsumed input rather than as an error.
            _, consumed = codecs.utf_8_decode(data[pos:end], "strict", False)
        except UnicodeDecodeError as exc:
            return pos + exc.start, exc.end - exc.start

        pos += consumed
        if end == total:
            return pos, 0
        window *= 2


def _encoded(value: str | StrChunk) -> bytes:
    if isinstance(value, StrChunk):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"expected str or StrChunk, got {type(value).__name__}")


_EMPTY = SharedBytes.from_static(b"")


@lru_cache(maxsize=1024)
def _static_chunk(text: str) -> StrChunk:
    return StrChunk._from_trusted(SharedBytes.from_static(text.encode("utf-8")))
