"""
Incremental UTF-8 stream decoding with caller-selected recovery.

StrChunk.extract_utf8 never decides what to do with malformed bytes: it
reports them and leaves them in the buffer. Utf8StreamDecoder is the
caller side of that contract. It owns the accumulation buffer, repeatedly
extracts valid text as bytes arrive, and applies an ErrorPolicy to every
malformed run:

    STRICT   raise ExtractUtf8Error, bytes stay buffered
    REPLACE  skip exactly error_len bytes, emit the replacement text
    SKIP     skip exactly error_len bytes

Skipping exactly error_len bytes per run yields one replacement per
maximal subpart, which is the same output bytes.decode("utf-8", "replace")
produces for the whole input.

At end of stream a still-incomplete tail can no longer become valid and
is handled as one malformed run.
"""

from __future__ import annotations

import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, List

import anyio
from anyio.abc import ByteReceiveStream

from strchunk.app.buffers.bytes_mut import BytesMut
from strchunk.app.buffers.shared_bytes import BytesLike
from strchunk.app.chunk.errors import ExtractUtf8Error
from strchunk.app.chunk.result import ExtractStatus
from strchunk.app.chunk.str_chunk import StrChunk
from strchunk.app.config import DecoderConfig, ErrorPolicy

logger = logging.getLogger(__name__)


class Utf8StreamDecoder:
    """
    Turns a stream of arbitrarily split byte chunks into StrChunks.

    Never emits a chunk that ends inside a multi-byte character. Valid
    bytes are handed out without copying.

    NOT thread-safe: one decoder per stream.
    """

    def __init__(
        self,
        *,
        policy: ErrorPolicy = ErrorPolicy.REPLACE,
        replacement: str = "\ufffd",
        log_invalid: bool = True,
    ) -> None:
        self._policy = ErrorPolicy(policy)
        self._replacement = StrChunk.from_str(replacement) if replacement else None
        self._log_invalid = log_invalid

        self._buf = BytesMut()
        self._consumed = 0
        self._errors = 0
        self._finished = False

    @classmethod
    def from_config(cls, config: DecoderConfig) -> "Utf8StreamDecoder":
        return cls(
            policy=config.ERROR_POLICY,
            replacement=config.REPLACEMENT,
            log_invalid=config.LOG_INVALID_SEQUENCES,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def policy(self) -> ErrorPolicy:
        return self._policy

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet decoded."""
        return len(self._buf)

    @property
    def errors(self) -> int:
        """Number of malformed runs handled so far."""
        return self._errors

    @property
    def position(self) -> int:
        """Stream offset of the first buffered byte."""
        return self._consumed

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def feed(self, data: BytesLike) -> List[StrChunk]:
        """
        Append `data` and return every chunk that can be decoded so far.

        Under STRICT, raises ExtractUtf8Error on the first malformed run.
        The error carries any text decoded before the run in this call.
        """
        if self._finished:
            raise RuntimeError("feed() called after finish()")

        self._buf.extend(data)
        return self._drain()

    def skip(self, count: int) -> None:
        """
        Discard `count` buffered bytes.

        Under STRICT, malformed bytes stay buffered after feed() raises;
        skipping the error's error_len lets decoding resume.
        """
        self._buf.advance(count)
        self._consumed += count

    def finish(self) -> List[StrChunk]:
        """
        Signal end of stream and flush whatever is left in the buffer.

        Buffered bytes are decoded first, so the policy applies to any
        malformed run still waiting at the front. Only an incomplete tail
        left after that is treated as one malformed run of its own.
        """
        self._finished = True

        out = self._drain()

        tail = len(self._buf)
        if tail == 0:
            return out

        logger.debug(
            "Stream ended with %d undecoded byte(s) at offset %d",
            tail,
            self._consumed,
        )

        # STRICT never recovers, so the drain above yields at most one chunk.
        extracted = out[0] if self._policy is ErrorPolicy.STRICT and out else None
        self._recover(ExtractUtf8Error(extracted, tail), out)
        return out

    def _drain(self) -> List[StrChunk]:
        out: List[StrChunk] = []

        while True:
            result = StrChunk.extract_utf8(self._buf)

            if result.extracted is not None:
                self._consumed += len(result.extracted)
                out.append(result.extracted)

            if result.status is not ExtractStatus.INVALID:
                return out

            self._recover(result.error, out)

    def _recover(self, error: ExtractUtf8Error, out: List[StrChunk]) -> None:
        self._errors += 1

        if self._policy is ErrorPolicy.STRICT:
            raise error

        if self._log_invalid:
            logger.warning(
                "Malformed UTF-8 run of %d byte(s) at offset %d (policy=%s)",
                error.error_len,
                self._consumed,
                self._policy.value,
            )

        self._buf.advance(error.error_len)
        self._consumed += error.error_len

        if self._policy is ErrorPolicy.REPLACE and self._replacement is not None:
            out.append(self._replacement)


# ----------------------------------------------------------------------
# Stream helpers
# ----------------------------------------------------------------------


def _make_decoder(
    config: DecoderConfig | None,
    policy: ErrorPolicy,
    replacement: str,
) -> Utf8StreamDecoder:
    # A config, when given, takes precedence over the keyword defaults.
    if config is not None:
        return Utf8StreamDecoder.from_config(config)
    return Utf8StreamDecoder(policy=policy, replacement=replacement)


def decode_chunks(
    source: Iterable[BytesLike],
    *,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
    replacement: str = "\ufffd",
    config: DecoderConfig | None = None,
) -> Iterator[StrChunk]:
    """
    Decode an iterable of byte chunks (e.g. file reads) lazily.
    """
    decoder = _make_decoder(config, policy, replacement)
    for data in source:
        yield from decoder.feed(data)
    yield from decoder.finish()


async def adecode_chunks(
    source: AsyncIterable[BytesLike],
    *,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
    replacement: str = "\ufffd",
    config: DecoderConfig | None = None,
) -> AsyncIterator[StrChunk]:
    """
    Async variant of decode_chunks for any async byte iterator.
    """
    decoder = _make_decoder(config, policy, replacement)
    async for data in source:
        for chunk in decoder.feed(data):
            yield chunk
    for chunk in decoder.finish():
        yield chunk


async def adecode_stream(
    stream: ByteReceiveStream,
    *,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
    replacement: str = "\ufffd",
    config: DecoderConfig | None = None,
) -> AsyncIterator[StrChunk]:
    """
    Decode an anyio byte stream (socket, process pipe, ...) until it ends.
    """
    decoder = _make_decoder(config, policy, replacement)
    while True:
        try:
            data = await stream.receive()
        except anyio.EndOfStream:
            break
        for chunk in decoder.feed(data):
            yield chunk
    for chunk in decoder.finish():
        yield chunk
