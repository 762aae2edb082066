"""
Validated UTF-8 text chunks and the incremental extraction algorithm.
"""

from .errors import ExtractUtf8Error
from .str_chunk import StrChunk
from .str_chunk_mut import StrChunkMut
from .result import ExtractStatus, Utf8Extraction

__all__ = [
    "ExtractUtf8Error",
    "StrChunk",
    "StrChunkMut",
    "ExtractStatus",
    "Utf8Extraction",
]
