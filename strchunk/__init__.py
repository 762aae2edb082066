from strchunk.app.buffers import BytesMut, SharedBytes
from strchunk.app.chunk import (
    ExtractStatus,
    ExtractUtf8Error,
    StrChunk,
    StrChunkMut,
    Utf8Extraction,
)
from strchunk.app.config import DecoderConfig, ErrorPolicy
from strchunk.app.decoder import (
    Utf8StreamDecoder,
    adecode_chunks,
    adecode_stream,
    decode_chunks,
)

__all__ = [
    "BytesMut",
    "SharedBytes",
    "ExtractStatus",
    "ExtractUtf8Error",
    "StrChunk",
    "StrChunkMut",
    "Utf8Extraction",
    "DecoderConfig",
    "ErrorPolicy",
    "Utf8StreamDecoder",
    "adecode_chunks",
    "adecode_stream",
    "decode_chunks",
]
