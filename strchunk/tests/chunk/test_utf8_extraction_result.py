import pickle

import pytest
from pydantic import ValidationError

from strchunk.app.chunk.errors import ExtractUtf8Error
from strchunk.app.chunk.result import ExtractStatus, Utf8Extraction
from strchunk.app.chunk.str_chunk import StrChunk


def test_error_requires_invalid_status():
    error = ExtractUtf8Error(None, 1)

    with pytest.raises(ValidationError):
        Utf8Extraction(status=ExtractStatus.COMPLETE, error=error)

    with pytest.raises(ValidationError):
        Utf8Extraction(status=ExtractStatus.INVALID)


def test_error_must_carry_the_same_prefix():
    chunk = StrChunk.from_str("abc")

    with pytest.raises(ValidationError):
        Utf8Extraction(
            status=ExtractStatus.INVALID,
            extracted=chunk,
            error=ExtractUtf8Error(None, 1),
        )


def test_result_is_frozen():
    result = Utf8Extraction.complete(None)

    with pytest.raises(ValidationError):
        result.status = ExtractStatus.INVALID


def test_invalid_builder():
    chunk = StrChunk.from_str("ok")

    result = Utf8Extraction.invalid(chunk, 2)

    assert result.status is ExtractStatus.INVALID
    assert result.error.error_len == 2
    assert result.error.into_extracted() is chunk


def test_error_description_and_bounds():
    error = ExtractUtf8Error(StrChunk.from_str("pre"), 3)

    assert str(error) == "invalid UTF-8 sequence in input"
    assert isinstance(error, ValueError)
    assert "error_len=3" in repr(error)

    with pytest.raises(ValueError):
        ExtractUtf8Error(None, 0)


def test_error_pickles_with_recovery_data():
    error = ExtractUtf8Error(StrChunk.from_str("pre"), 2)

    restored = pickle.loads(pickle.dumps(error))

    assert restored.error_len == 2
    assert restored.into_extracted() == StrChunk.from_str("pre")
