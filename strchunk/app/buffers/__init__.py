"""
Byte storage primitives.

SharedBytes is the immutable, shareable range handed out to readers;
BytesMut is the caller-owned accumulation buffer it is carved from.
"""

from .shared_bytes import SharedBytes
from .bytes_mut import BytesMut

__all__ = [
    "SharedBytes",
    "BytesMut",
]
