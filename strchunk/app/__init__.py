"""
Boundary-safe UTF-8 slicing.

Carves validated, immutable text chunks out of a growing byte buffer as
data streams in, without ever splitting a multi-byte character and
without copying bytes that are already known to be valid.
"""
