from __future__ import annotations

from typing import Iterable

from strchunk.app.buffers.bytes_mut import BytesMut
from strchunk.app.chunk.str_chunk import StrChunk


class StrChunkMut:
    """
    Mutable text builder that finalizes into a StrChunk.

    Only whole characters are ever appended, so the accumulated bytes are
    valid UTF-8 at every point and freezing needs no validation.
    """

    __slots__ = ("_buf",)

    def __init__(self, text: str = "") -> None:
        self._buf = BytesMut()
        if text:
            self.push_str(text)

    def __len__(self) -> int:
        """Length in bytes."""
        return len(self._buf)

    def __bool__(self) -> bool:
        return bool(self._buf)

    def push(self, ch: str) -> None:
        if not isinstance(ch, str) or len(ch) != 1:
            raise ValueError(f"push expects a single character, got {ch!r}")
        self._buf.extend(ch.encode("utf-8"))

    def push_str(self, text: str | StrChunk) -> None:
        if isinstance(text, StrChunk):
            self._buf.extend(text.into_bytes())
            return
        if not isinstance(text, str):
            raise TypeError(f"expected str or StrChunk, got {type(text).__name__}")
        self._buf.extend(text.encode("utf-8"))

    def extend(self, chars: Iterable[str]) -> None:
        for ch in chars:
            self.push(ch)

    def clear(self) -> None:
        self._buf.clear()

    def as_str(self) -> str:
        return bytes(self._buf).decode("utf-8")

    def freeze(self) -> StrChunk:
        """Hand the accumulated bytes to a StrChunk and reset the builder."""
        return StrChunk._from_trusted(self._buf.take())

    def __repr__(self) -> str:
        return f"StrChunkMut({self.as_str()!r})"
