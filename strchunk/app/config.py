"""
Runtime configuration for stream decoding.

This module centralizes the environment-driven settings that decide how a
Utf8StreamDecoder treats malformed input. The extraction core itself has
no configuration: what to do with a malformed run is always the caller's
policy, and this is where a deployment chooses it.

Configuration is read once and is immutable afterwards.
"""

from __future__ import annotations

import os
from enum import Enum

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class ErrorPolicy(str, Enum):
    """
    What a stream decoder does with a malformed UTF-8 run.
    """

    STRICT = "strict"    # raise ExtractUtf8Error
    REPLACE = "replace"  # skip the run, emit the replacement text
    SKIP = "skip"        # skip the run silently


class DecoderConfig(BaseModel):
    """
    Settings for Utf8StreamDecoder.
    """

    ERROR_POLICY: ErrorPolicy = Field(
        ErrorPolicy.REPLACE,
        description="Handling of malformed UTF-8 runs",
    )

    REPLACEMENT: str = Field(
        "\ufffd",
        description="Text emitted for each malformed run under the replace policy",
    )

    LOG_INVALID_SEQUENCES: bool = Field(
        True,
        description="Log a warning for every malformed run that is recovered",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("REPLACEMENT")
    @classmethod
    def replacement_required_for_replace(
        cls, v: str, info: ValidationInfo
    ) -> str:
        if not v and info.data.get("ERROR_POLICY") is ErrorPolicy.REPLACE:
            raise ValueError(
                "REPLACEMENT must be non-empty when ERROR_POLICY is 'replace'. "
                "Use ERROR_POLICY 'skip' to drop malformed runs."
            )
        try:
            v.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError(
                f"REPLACEMENT is not encodable as UTF-8: {exc}"
            ) from exc
        return v

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "DecoderConfig":
        """
        Load configuration from STRCHUNK_* environment variables.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        return cls(
            ERROR_POLICY=os.getenv(
                "STRCHUNK_ERROR_POLICY", ErrorPolicy.REPLACE.value
            ).lower(),
            REPLACEMENT=os.getenv(
                "STRCHUNK_REPLACEMENT", "\ufffd"
            ),
            LOG_INVALID_SEQUENCES=env_bool(
                "STRCHUNK_LOG_INVALID_SEQUENCES", True
            ),
        )

    model_config = {
        "frozen": True,
    }
