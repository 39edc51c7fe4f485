"""
Error kinds raised by the multiformats codecs.

Every parse, decode and encode path raises a subclass of
MultiformatsError. The `.kind` attribute is a stable string suitable for
comparisons in callers and tests; `.protocol` and `.stage` say where the
failure happened.
"""

from __future__ import annotations

from typing import Optional

# Stages at which a failure can be reported.
STAGE_TEXT: str = "text"        # parsing text tokens
STAGE_BINARY: str = "binary"    # decoding bytes
STAGE_RENDER: str = "render"    # producing text
STAGE_ENCODE: str = "encode"    # producing bytes


class MultiformatsError(Exception):
    """
    Base class for all errors raised by this package.

    A failing segment aborts the whole address: there is no partial result
    attached to the exception.
    """

    kind: str = "Fatal"

    def __init__(
        self,
        msg: str = "",
        *,
        protocol: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> None:
        super().__init__(msg or self.kind)
        self.msg = msg
        self.protocol = protocol
        self.stage = stage

    def __str__(self) -> str:
        if self.protocol:
            return f"{self.kind}: [{self.protocol}] {self.msg}"
        return f"{self.kind}: {self.msg}"


class BadAddr(MultiformatsError):
    """Text address violates a protocol's grammar."""
    kind = "BadAddr"


class BadInput(MultiformatsError):
    """Base-encoded text (multibase, base58) could not be decoded."""
    kind = "BadInput"


class DecodeError(MultiformatsError):
    """Binary input is truncated, malformed or carries an unknown tag."""
    kind = "DecodeError"


class Invalid(MultiformatsError):
    """A structural precondition was violated."""
    kind = "Invalid"


class NotImplementedCodec(MultiformatsError):
    """The codec is known but not supported by this implementation."""
    kind = "NotImplemented"
