"""
Tests for Utf8StreamDecoder recovery policies.

Coverage matrix:

  REPLACE  malformed runs     → same text as bytes.decode("utf-8", "replace")
  SKIP     malformed runs     → same text as bytes.decode("utf-8", "ignore")
  STRICT   malformed run      → ExtractUtf8Error carrying the valid prefix
  finish() truncated tail     → handled as one malformed run
"""

import logging

import pytest

from strchunk.app.chunk.errors import ExtractUtf8Error
from strchunk.app.config import DecoderConfig, ErrorPolicy
from strchunk.app.decoder.stream_decoder import Utf8StreamDecoder, decode_chunks

CORRUPT = (
    b"caf\xc3\xa9 \x80 ok "
    b"\xe2\x82( "
    b"\xf0\x9f\xa6\x80 "
    b"\xed\xa0\x80 end \xf0\x9f"
)


def _split(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


def _text(chunks) -> str:
    return "".join(str(c) for c in chunks)


@pytest.mark.parametrize("size", [1, 2, 3, 5, 64])
def test_replace_matches_builtin_decoder(size):
    decoded = _text(decode_chunks(_split(CORRUPT, size)))

    assert decoded == CORRUPT.decode("utf-8", "replace")


@pytest.mark.parametrize("size", [1, 4, 64])
def test_skip_matches_builtin_ignore(size):
    decoded = _text(decode_chunks(_split(CORRUPT, size), policy=ErrorPolicy.SKIP))

    assert decoded == CORRUPT.decode("utf-8", "ignore")


def test_custom_replacement_text():
    decoded = _text(decode_chunks([b"a\xffb"], replacement="?"))

    assert decoded == "a?b"


def test_strict_raises_with_prefix_and_keeps_bytes():
    decoder = Utf8StreamDecoder(policy=ErrorPolicy.STRICT)

    assert _text(decoder.feed(b"abc")) == "abc"

    with pytest.raises(ExtractUtf8Error) as excinfo:
        decoder.feed(b"def\x80ghi")

    assert str(excinfo.value.into_extracted()) == "def"
    assert excinfo.value.error_len == 1
    assert decoder.pending == 4
    assert decoder.position == 6
    assert decoder.errors == 1


def test_strict_finish_reports_truncated_tail():
    decoder = Utf8StreamDecoder(policy=ErrorPolicy.STRICT)
    decoder.feed(b"ok\xe2\x82")

    with pytest.raises(ExtractUtf8Error) as excinfo:
        decoder.finish()

    assert excinfo.value.into_extracted() is None
    assert excinfo.value.error_len == 2


def test_incomplete_tail_is_held_back():
    decoder = Utf8StreamDecoder()

    assert _text(decoder.feed(b"x\xe2\x82")) == "x"
    assert decoder.pending == 2
    assert _text(decoder.feed(b"\xac")) == "€"
    assert decoder.pending == 0
    assert decoder.finish() == []
    assert decoder.errors == 0


def test_feed_after_finish_is_rejected():
    decoder = Utf8StreamDecoder()
    decoder.finish()

    with pytest.raises(RuntimeError):
        decoder.feed(b"late")


def test_recovered_runs_are_logged(caplog):
    decoder = Utf8StreamDecoder()

    with caplog.at_level(logging.WARNING, logger="strchunk.app.decoder.stream_decoder"):
        decoder.feed(b"ab\xff")

    assert decoder.errors == 1
    assert any(
        "Malformed UTF-8 run of 1 byte(s) at offset 2" in record.getMessage()
        for record in caplog.records
    )


def test_logging_can_be_disabled(caplog):
    decoder = Utf8StreamDecoder(log_invalid=False)

    with caplog.at_level(logging.WARNING, logger="strchunk.app.decoder.stream_decoder"):
        decoder.feed(b"\xff")

    assert not caplog.records


def test_from_config():
    config = DecoderConfig(ERROR_POLICY=ErrorPolicy.SKIP, LOG_INVALID_SEQUENCES=False)

    decoder = Utf8StreamDecoder.from_config(config)

    assert decoder.policy is ErrorPolicy.SKIP
    assert _text(decoder.feed(b"a\x80b")) == "ab"


# ---------------------------------------------------------------------------
# Storage pinned by emitted chunks
# ---------------------------------------------------------------------------

def _pinned_bytes(chunks) -> int:
    backings = {id(c.as_bytes().obj): c.as_bytes().obj for c in chunks}
    return sum(len(b) for b in backings.values())


def test_interleaved_corruption_pins_storage_linear_in_input():
    data = b"a\x80" * 20_000

    chunks = list(decode_chunks([data], policy=ErrorPolicy.SKIP))

    assert len(chunks) == 20_000
    assert _pinned_bytes(chunks) <= len(data)


def test_interleaved_corruption_across_feeds_pins_storage_linear_in_input():
    data = b"ab\xff" * 5_000

    chunks = list(decode_chunks(_split(data, 1_000), policy=ErrorPolicy.SKIP))

    assert _text(chunks) == "ab" * 5_000
    assert _pinned_bytes(chunks) <= 2 * len(data)


# ---------------------------------------------------------------------------
# finish() after a STRICT failure
# ---------------------------------------------------------------------------

def test_strict_finish_reports_buffered_run_not_whole_buffer():
    decoder = Utf8StreamDecoder(policy=ErrorPolicy.STRICT)

    with pytest.raises(ExtractUtf8Error):
        decoder.feed(b"\x80abc")

    with pytest.raises(ExtractUtf8Error) as excinfo:
        decoder.finish()

    assert excinfo.value.error_len == 1
    assert excinfo.value.into_extracted() is None
    assert decoder.pending == 4

    decoder.skip(excinfo.value.error_len)

    assert _text(decoder.finish()) == "abc"
    assert decoder.pending == 0


def test_strict_finish_carries_text_before_truncated_tail():
    decoder = Utf8StreamDecoder(policy=ErrorPolicy.STRICT)

    with pytest.raises(ExtractUtf8Error):
        decoder.feed(b"\xffok\xe2\x82")

    decoder.skip(1)

    with pytest.raises(ExtractUtf8Error) as excinfo:
        decoder.finish()

    assert str(excinfo.value.into_extracted()) == "ok"
    assert excinfo.value.error_len == 2


# ---------------------------------------------------------------------------
# Stream helpers honour DecoderConfig
# ---------------------------------------------------------------------------

def test_decode_chunks_uses_config(caplog):
    config = DecoderConfig(
        ERROR_POLICY=ErrorPolicy.REPLACE,
        REPLACEMENT="?",
        LOG_INVALID_SEQUENCES=False,
    )

    with caplog.at_level(logging.WARNING, logger="strchunk.app.decoder.stream_decoder"):
        decoded = _text(decode_chunks([b"a\xff", b"b"], config=config))

    assert decoded == "a?b"
    assert not caplog.records


def test_config_takes_precedence_over_keywords():
    config = DecoderConfig(ERROR_POLICY=ErrorPolicy.SKIP)

    decoded = _text(
        decode_chunks([b"a\x80b"], policy=ErrorPolicy.STRICT, config=config)
    )

    assert decoded == "ab"
