"""
Tagged outcome of a single UTF-8 extraction.

Callers branch on all three outcomes as ordinary control flow, so the
outcome is a returned value rather than an exception:

- COMPLETE:   the whole buffer was valid and has been drained
- INCOMPLETE: a truncated multi-byte sequence is still buffered; feed
              more bytes and extract again
- INVALID:    a malformed sequence sits at the front of the buffer
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from strchunk.app.chunk.errors import ExtractUtf8Error
from strchunk.app.chunk.str_chunk import StrChunk


class ExtractStatus(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


class Utf8Extraction(BaseModel):
    """
    Result of StrChunk.extract_utf8.

    `extracted` is the valid prefix removed from the source buffer (None
    when nothing was removed). `error` is present iff status is INVALID.
    """

    status: ExtractStatus = Field(
        ...,
        description="Which of the three extraction outcomes occurred",
    )

    extracted: Optional[StrChunk] = Field(
        None,
        description="Valid UTF-8 prefix removed from the source buffer",
    )

    error: Optional[ExtractUtf8Error] = Field(
        None,
        description="Malformed sequence report (INVALID outcome only)",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    @model_validator(mode="after")
    def error_matches_status(self) -> "Utf8Extraction":
        if (self.status is ExtractStatus.INVALID) != (self.error is not None):
            raise ValueError(
                "error must be set exactly when status is INVALID"
            )
        if self.error is not None and self.error.into_extracted() is not self.extracted:
            raise ValueError("error must carry the same extracted prefix")
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def complete(cls, extracted: Optional[StrChunk]) -> "Utf8Extraction":
        return cls(status=ExtractStatus.COMPLETE, extracted=extracted)

    @classmethod
    def incomplete(cls, extracted: Optional[StrChunk]) -> "Utf8Extraction":
        return cls(status=ExtractStatus.INCOMPLETE, extracted=extracted)

    @classmethod
    def invalid(
        cls, extracted: Optional[StrChunk], error_len: int
    ) -> "Utf8Extraction":
        return cls(
            status=ExtractStatus.INVALID,
            extracted=extracted,
            error=ExtractUtf8Error(extracted, error_len),
        )

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def is_ok(self) -> bool:
        """True unless a malformed sequence was found."""
        return self.status is not ExtractStatus.INVALID

    @property
    def pending(self) -> bool:
        """True if undecoded bytes were left in the source buffer."""
        return self.status is not ExtractStatus.COMPLETE

    def unwrap(self) -> Optional[StrChunk]:
        """Return the extracted chunk, raising the error for INVALID."""
        if self.error is not None:
            raise self.error
        return self.extracted
