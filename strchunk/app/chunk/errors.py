from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from strchunk.app.chunk.str_chunk import StrChunk


class ExtractUtf8Error(ValueError):
    """
    A determinate-length invalid UTF-8 sequence was found in the source.

    Carries the recovery data a caller needs to resume:
    - the valid prefix extracted before the corruption (already removed
      from the source buffer), if any
    - the length of the malformed run, which is still at the front of
      the source buffer

    Skipping or replacing the malformed bytes is left to the caller.
    """

    def __init__(self, extracted: Optional["StrChunk"], error_len: int) -> None:
        if error_len < 1:
            raise ValueError(f"error_len must be positive, got {error_len}")
        super().__init__("invalid UTF-8 sequence in input")
        self._extracted = extracted
        self._error_len = error_len

    def into_extracted(self) -> Optional["StrChunk"]:
        return self._extracted

    @property
    def error_len(self) -> int:
        return self._error_len

    def __reduce__(self):
        return (type(self), (self._extracted, self._error_len))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(extracted={self._extracted!r}, "
            f"error_len={self._error_len})"
        )
