"""
Multibase: self-describing base encodings.

Text form is <base-prefix-char><base-encoded data>. The prefix identifies
one of the bases in TABLE, so any multibase string can be decoded without
out-of-band knowledge of its encoding.

Reference: https://github.com/multiformats/multibase
"""

from __future__ import annotations
import base64
import binascii
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple, Union

import base58

from .errors import BadInput


# =============================================================================
# BASE TABLE
# =============================================================================

@dataclass(frozen=True)
class Base:
    """One row of the multibase table."""
    name: str
    prefix: str
    description: str


TABLE: List[Base] = [
    Base("identity", "\0", "8-bit binary (encoder and decoder keeps data unmodified)"),
    Base("base2", "0", "binary (01010101)"),
    Base("base8", "7", "octal"),
    Base("base10", "9", "decimal"),
    Base("base16", "f", "hexadecimal"),
    Base("base16upper", "F", "hexadecimal"),
    Base("base32hex", "v", "rfc4648 case-insensitive - no padding - highest char"),
    Base("base32hexupper", "V", "rfc4648 case-insensitive - no padding - highest char"),
    Base("base32hexpad", "t", "rfc4648 case-insensitive - with padding"),
    Base("base32hexpadupper", "T", "rfc4648 case-insensitive - with padding"),
    Base("base32", "b", "rfc4648 case-insensitive - no padding"),
    Base("base32upper", "B", "rfc4648 case-insensitive - no padding"),
    Base("base32pad", "c", "rfc4648 case-insensitive - with padding"),
    Base("base32padupper", "C", "rfc4648 case-insensitive - with padding"),
    Base("base32z", "h", "z-base-32 (used by Tahoe-LAFS)"),
    Base("base36", "k", "base36 [0-9a-z] case-insensitive - no padding"),
    Base("base36upper", "K", "base36 [0-9a-z] case-insensitive - no padding"),
    Base("base58btc", "z", "base58 bitcoin"),
    Base("base58flickr", "Z", "base58 flicker"),
    Base("base64", "m", "rfc4648 no padding"),
    Base("base64pad", "M", "rfc4648 with padding - MIME encoding"),
    Base("base64url", "u", "rfc4648 no padding"),
    Base("base64urlpad", "U", "rfc4648 with padding"),
]

_BY_NAME: Dict[str, Base] = {b.name: b for b in TABLE}
_BY_PREFIX: Dict[str, Base] = {b.prefix: b for b in TABLE}


# =============================================================================
# ENCODERS
# =============================================================================

_B32 = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_B32Z = "ybndrfg8ejkmcpqxot1uwisza345h769"
_TO_B32Z = str.maketrans(_B32, _B32Z)
_FROM_B32Z = str.maketrans(_B32Z, _B32)

_B36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_B58_FLICKR = b"123456789abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ"


def _encode_bits(data: bytes, bits: int, alphabet: str) -> str:
    """MSB-first bit grouping, final group zero-padded, no pad chars."""
    if not data:
        return ""
    nbits = len(data) * 8
    pad = -nbits % bits
    acc = int.from_bytes(data, "big") << pad
    count = (nbits + pad) // bits
    mask = (1 << bits) - 1
    return "".join(
        alphabet[(acc >> (bits * (count - 1 - i))) & mask] for i in range(count)
    )


def _decode_bits(text: str, bits: int, alphabet: str) -> bytes:
    if not text:
        return b""
    acc = 0
    for ch in text:
        idx = alphabet.find(ch)
        if idx < 0:
            raise ValueError(f"invalid symbol {ch!r}")
        acc = (acc << bits) | idx
    total = len(text) * bits
    nbytes = total // 8
    extra = total - nbytes * 8
    if extra >= bits or acc & ((1 << extra) - 1):
        raise ValueError("invalid length or trailing bits")
    return (acc >> extra).to_bytes(nbytes, "big")


def _encode_radix(data: bytes, alphabet: str) -> str:
    """Big-integer radix conversion; leading zero bytes become zero digits."""
    zeros = len(data) - len(data.lstrip(b"\0"))
    n = int.from_bytes(data, "big")
    radix = len(alphabet)
    out = []
    while n:
        n, rem = divmod(n, radix)
        out.append(alphabet[rem])
    return alphabet[0] * zeros + "".join(reversed(out))


def _decode_radix(text: str, alphabet: str) -> bytes:
    zeros = len(text) - len(text.lstrip(alphabet[0]))
    radix = len(alphabet)
    n = 0
    for ch in text:
        idx = alphabet.find(ch)
        if idx < 0:
            raise ValueError(f"invalid symbol {ch!r}")
        n = n * radix + idx
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    return b"\0" * zeros + body


def _pad(text: str, block: int) -> str:
    return text + "=" * (-len(text) % block)


_Codec = Tuple[Callable[[bytes], str], Callable[[str], bytes]]

_CODECS: Dict[str, _Codec] = {
    "identity": (
        lambda d: d.decode("utf-8"),
        lambda t: t.encode("utf-8"),
    ),
    "base2": (
        lambda d: _encode_bits(d, 1, "01"),
        lambda t: _decode_bits(t, 1, "01"),
    ),
    "base8": (
        lambda d: _encode_bits(d, 3, "01234567"),
        lambda t: _decode_bits(t, 3, "01234567"),
    ),
    "base10": (
        lambda d: _encode_radix(d, "0123456789"),
        lambda t: _decode_radix(t, "0123456789"),
    ),
    "base16": (
        lambda d: base64.b16encode(d).decode("ascii").lower(),
        lambda t: base64.b16decode(t, casefold=True),
    ),
    "base16upper": (
        lambda d: base64.b16encode(d).decode("ascii"),
        lambda t: base64.b16decode(t, casefold=True),
    ),
    "base32hex": (
        lambda d: base64.b32hexencode(d).decode("ascii").rstrip("=").lower(),
        lambda t: base64.b32hexdecode(_pad(t, 8), casefold=True),
    ),
    "base32hexupper": (
        lambda d: base64.b32hexencode(d).decode("ascii").rstrip("="),
        lambda t: base64.b32hexdecode(_pad(t, 8), casefold=True),
    ),
    "base32hexpad": (
        lambda d: base64.b32hexencode(d).decode("ascii").lower(),
        lambda t: base64.b32hexdecode(t, casefold=True),
    ),
    "base32hexpadupper": (
        lambda d: base64.b32hexencode(d).decode("ascii"),
        lambda t: base64.b32hexdecode(t, casefold=True),
    ),
    "base32": (
        lambda d: base64.b32encode(d).decode("ascii").rstrip("=").lower(),
        lambda t: base64.b32decode(_pad(t, 8), casefold=True),
    ),
    "base32upper": (
        lambda d: base64.b32encode(d).decode("ascii").rstrip("="),
        lambda t: base64.b32decode(_pad(t, 8), casefold=True),
    ),
    "base32pad": (
        lambda d: base64.b32encode(d).decode("ascii").lower(),
        lambda t: base64.b32decode(t, casefold=True),
    ),
    "base32padupper": (
        lambda d: base64.b32encode(d).decode("ascii"),
        lambda t: base64.b32decode(t, casefold=True),
    ),
    "base32z": (
        lambda d: base64.b32encode(d).decode("ascii").rstrip("=").translate(_TO_B32Z),
        lambda t: base64.b32decode(_pad(t.translate(_FROM_B32Z), 8)),
    ),
    "base36": (
        lambda d: _encode_radix(d, _B36),
        lambda t: _decode_radix(t.lower(), _B36),
    ),
    "base36upper": (
        lambda d: _encode_radix(d, _B36).upper(),
        lambda t: _decode_radix(t.lower(), _B36),
    ),
    "base58btc": (
        lambda d: base58.b58encode(d).decode("ascii"),
        lambda t: base58.b58decode(t),
    ),
    "base58flickr": (
        lambda d: base58.b58encode(d, alphabet=_B58_FLICKR).decode("ascii"),
        lambda t: base58.b58decode(t, alphabet=_B58_FLICKR),
    ),
    "base64": (
        lambda d: base64.b64encode(d).decode("ascii").rstrip("="),
        lambda t: base64.b64decode(_pad(t, 4), validate=True),
    ),
    "base64pad": (
        lambda d: base64.b64encode(d).decode("ascii"),
        lambda t: base64.b64decode(t, validate=True),
    ),
    "base64url": (
        lambda d: base64.urlsafe_b64encode(d).decode("ascii").rstrip("="),
        lambda t: base64.b64decode(_pad(t, 4), altchars=b"-_", validate=True),
    ),
    "base64urlpad": (
        lambda d: base64.urlsafe_b64encode(d).decode("ascii"),
        lambda t: base64.b64decode(t, altchars=b"-_", validate=True),
    ),
}


# =============================================================================
# MULTIBASE VALUE
# =============================================================================

@dataclass(frozen=True)
class Multibase:
    """
    Binary data paired with the base used to render it as text.

    Usage:
        text = Multibase.with_char('z', data).to_text()
        data = Multibase.from_text(text).to_bytes()
    """
    base: Base
    data: bytes

    @classmethod
    def with_base(cls, base: Union[Base, str], data: bytes) -> 'Multibase':
        """Encoder for a base given by table row or by name."""
        if isinstance(base, str):
            try:
                base = _BY_NAME[base]
            except KeyError:
                raise BadInput(f"unknown base {base!r}", protocol="multibase") from None
        return cls(base, bytes(data))

    @classmethod
    def with_char(cls, ch: str, data: bytes) -> 'Multibase':
        """Encoder for a base given by its prefix character."""
        try:
            base = _BY_PREFIX[ch]
        except KeyError:
            raise BadInput(f"bad char {ch!r}", protocol="multibase") from None
        return cls(base, bytes(data))

    @classmethod
    def from_text(cls, text: str) -> 'Multibase':
        """Decode <base-prefix><payload> into raw data."""
        if not text:
            raise BadInput("empty multibase text", protocol="multibase", stage="text")
        base = _BY_PREFIX.get(text[0])
        if base is None:
            raise BadInput(
                f"unknown base prefix {text[0]!r}", protocol="multibase", stage="text"
            )
        _, decode = _CODECS[base.name]
        try:
            data = decode(text[1:])
        except (ValueError, binascii.Error) as exc:
            raise BadInput(
                f"{base.name}: {exc}", protocol="multibase", stage="text"
            ) from exc
        return cls(base, data)

    def to_text(self) -> str:
        encode, _ = _CODECS[self.base.name]
        try:
            return self.base.prefix + encode(self.data)
        except UnicodeDecodeError as exc:
            raise BadInput(
                f"{self.base.name}: {exc}", protocol="multibase", stage="render"
            ) from exc

    def to_base(self) -> Base:
        return self.base

    def to_bytes(self) -> bytes:
        return self.data


def lookup_name(name: str) -> Base:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise BadInput(f"unknown base {name!r}", protocol="multibase") from None
