"""
Caller-side stream decoding built on StrChunk.extract_utf8.
"""

from .stream_decoder import (
    Utf8StreamDecoder,
    adecode_chunks,
    adecode_stream,
    decode_chunks,
)

__all__ = [
    "Utf8StreamDecoder",
    "adecode_chunks",
    "adecode_stream",
    "decode_chunks",
]
