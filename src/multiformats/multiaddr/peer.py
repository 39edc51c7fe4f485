"""
Peer identity carried by the /p2p segment.

A peer id is held either as text, exactly as it appeared in a text address,
or as the binary multihash read from a binary address. Text is not
validated until it has to be converted; conversion in either direction goes
through Multihash, so a normalised binary form always re-encodes the same.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import base58

from .. import multicodec
from ..errors import BadInput, Invalid
from ..multibase import Multibase
from ..multicodec import Multicodec
from ..multihash import Multihash


@dataclass(frozen=True)
class PeerId:
    """Exactly one of `text` or `binary` is set."""
    text: Optional[str] = None
    binary: Optional[bytes] = None

    def __post_init__(self):
        if (self.text is None) == (self.binary is None):
            raise Invalid("peer id needs exactly one of text or binary", protocol="p2p")

    @classmethod
    def from_text(cls, text: str) -> 'PeerId':
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'PeerId':
        return cls(binary=bytes(data))

    @classmethod
    def from_multihash(cls, mh: Multihash) -> 'PeerId':
        return cls(binary=mh.encode())

    def is_text(self) -> bool:
        return self.text is not None

    def to_text(self) -> str:
        """Text form; binary ids render as legacy base58."""
        if self.text is not None:
            return self.text
        return bytes_to_text(self.binary)

    def to_bytes(self) -> bytes:
        """Binary multihash form; text ids are decoded and normalised."""
        if self.binary is not None:
            return self.binary
        return text_to_bytes(self.text)

    def normalize(self) -> 'PeerId':
        """Binary form of this id."""
        if self.binary is not None:
            return self
        return PeerId(binary=self.to_bytes())

    def to_multihash(self) -> Multihash:
        mh, _ = Multihash.decode(self.to_bytes())
        return mh


def text_to_bytes(text: str) -> bytes:
    """
    Decode a peer id from text into its multihash bytes.

    Legacy ids ("Qm...", "1...") are bare base58btc multihashes. Anything
    else must be a multibase CID: <cidv1><libp2p-key><multihash>.
    """
    if text.startswith("Qm") or (text.startswith("1") and len(text) > 1):
        try:
            raw = base58.b58decode(text)
        except ValueError as exc:
            raise BadInput(f"base58 peer id {text!r}: {exc}", protocol="p2p", stage="text") from exc
        mh, _ = Multihash.decode(raw)
        return mh.encode()

    raw = Multibase.from_text(text).to_bytes()

    codec, rest = Multicodec.decode(raw)
    if codec.code != multicodec.CID_V1:
        raise Invalid(f"CID {codec} in peer id {text!r}", protocol="p2p", stage="text")
    codec, rest = Multicodec.decode(rest)
    if codec.code != multicodec.LIBP2P_KEY:
        raise Invalid(f"codec {codec} in peer id {text!r}", protocol="p2p", stage="text")

    mh, _ = Multihash.decode(rest)
    return mh.encode()


def bytes_to_text(data: bytes) -> str:
    """Render multihash bytes as a legacy base58btc peer id."""
    mh, _ = Multihash.decode(data)
    return base58.b58encode(mh.encode()).decode("ascii")
