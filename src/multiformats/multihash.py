"""
Multihash: self-describing hash digests.

Binary form:

    <varint hash-func-code><varint digest-length><digest-value>

The function code is a multicodec entry tagged "multihash". Digests are
computed with hashlib, with the blake3 package for blake3 and with
pycryptodome for keccak, md4 and ripemd-160. Data can be hashed in one
call through Multihash.new or fed in pieces through MultihashWriter.

Reference: https://multiformats.io/multihash/
"""

from __future__ import annotations
import hashlib
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

import blake3
from Crypto.Hash import MD4, RIPEMD160, keccak

from . import multicodec, varint
from .errors import DecodeError, Invalid, NotImplementedCodec
from .multicodec import Multicodec


# =============================================================================
# HASH STATES
# =============================================================================

class _Identity:
    """Collects the input; the digest is the data itself."""

    def __init__(self):
        self._buf = bytearray()

    def update(self, data: bytes) -> None:
        self._buf += data

    def digest(self) -> bytes:
        return bytes(self._buf)


class _DoubleSha256:
    def __init__(self):
        self._inner = hashlib.sha256()

    def update(self, data: bytes) -> None:
        self._inner.update(data)

    def digest(self) -> bytes:
        return hashlib.sha256(self._inner.digest()).digest()


class _Shake:
    """Extendable output cut to a fixed length."""

    def __init__(self, factory, length: int):
        self._inner = factory()
        self._length = length

    def update(self, data: bytes) -> None:
        self._inner.update(data)

    def digest(self) -> bytes:
        return self._inner.digest(self._length)


# Any object with update(bytes) and digest() -> bytes.
HashFactory = Callable[[], object]


def _keccak(bits: int) -> HashFactory:
    return lambda: keccak.new(digest_bits=bits)


def _blake2(factory, size: int) -> HashFactory:
    return lambda: factory(digest_size=size)


# None marks a code that decodes but has no local hash function.
_HASHERS: Dict[int, Optional[HashFactory]] = {
    multicodec.IDENTITY: _Identity,
    multicodec.SHA1: hashlib.sha1,
    multicodec.SHA2_256: hashlib.sha256,
    multicodec.SHA2_512: hashlib.sha512,
    multicodec.DBL_SHA2_256: _DoubleSha256,
    multicodec.SHA3_224: hashlib.sha3_224,
    multicodec.SHA3_256: hashlib.sha3_256,
    multicodec.SHA3_384: hashlib.sha3_384,
    multicodec.SHA3_512: hashlib.sha3_512,
    multicodec.SHAKE_128: lambda: _Shake(hashlib.shake_128, 32),
    multicodec.SHAKE_256: lambda: _Shake(hashlib.shake_256, 64),
    multicodec.KECCAK_224: _keccak(224),
    multicodec.KECCAK_256: _keccak(256),
    multicodec.KECCAK_384: _keccak(384),
    multicodec.KECCAK_512: _keccak(512),
    multicodec.BLAKE3: blake3.blake3,
    multicodec.MD4: MD4.new,
    multicodec.MD5: hashlib.md5,
    multicodec.RIPEMD_160: RIPEMD160.new,
    multicodec.RIPEMD_128: None,
    multicodec.RIPEMD_256: None,
    multicodec.RIPEMD_320: None,
}

for _i in range(64):
    _HASHERS[multicodec.BLAKE2B_8 + _i] = _blake2(hashlib.blake2b, _i + 1)
for _i in range(32):
    _HASHERS[multicodec.BLAKE2S_8 + _i] = _blake2(hashlib.blake2s, _i + 1)
for _i in range(224):
    _HASHERS[multicodec.SKEIN256_8 + _i] = None
del _i


def is_supported(code: int) -> bool:
    """True if digests under `code` can be decoded and re-encoded."""
    return code in _HASHERS


def can_compute(code: int) -> bool:
    """True if new digests under `code` can be computed locally."""
    return _HASHERS.get(code) is not None


def _as_codec(codec: Union[Multicodec, int]) -> Multicodec:
    return codec if isinstance(codec, Multicodec) else Multicodec(codec)


# =============================================================================
# INCREMENTAL HASHING
# =============================================================================

class MultihashWriter:
    """
    Feed data in pieces, then take the multihash.

    Usage:
        w = MultihashWriter(multicodec.SHA2_256)
        w.write(b"hello ").write(b"world")
        mh = w.finish()

    After finish() the writer refuses more data until reset() is called.
    Calling finish() again returns the same multihash.
    """

    def __init__(self, codec: Union[Multicodec, int]):
        self.codec = _as_codec(codec)
        self._factory = _HASHERS.get(self.codec.code)
        if self._factory is None:
            raise NotImplementedCodec(f"codec {self.codec}", protocol="multihash")
        self.reset()

    def write(self, data: bytes) -> 'MultihashWriter':
        if self._result is not None:
            raise Invalid("finalized", protocol="multihash")
        self._state.update(bytes(data))
        return self

    def finish(self) -> 'Multihash':
        if self._result is None:
            self._result = Multihash(self.codec, self._state.digest())
        return self._result

    def reset(self) -> 'MultihashWriter':
        self._state = self._factory()
        self._result = None
        return self


# =============================================================================
# MULTIHASH VALUE
# =============================================================================

@dataclass(frozen=True)
class Multihash:
    """
    A digest tagged with the algorithm that produced it.

    Usage:
        mh = Multihash.new(multicodec.SHA2_256, b"hello world")
        data = mh.encode()
        mh2, rest = Multihash.decode(data)
    """
    codec: Multicodec
    digest: bytes

    @classmethod
    def new(cls, codec: Union[Multicodec, int], data: bytes) -> 'Multihash':
        """Compute the digest of `data` with the algorithm named by `codec`."""
        return MultihashWriter(codec).write(data).finish()

    @classmethod
    def writer(cls, codec: Union[Multicodec, int]) -> MultihashWriter:
        """Incremental hasher for `codec`, see MultihashWriter."""
        return MultihashWriter(codec)

    @classmethod
    def from_digest(cls, codec: Union[Multicodec, int], digest: bytes) -> 'Multihash':
        """Wrap an existing digest."""
        codec = _as_codec(codec)
        if codec.code not in _HASHERS:
            raise NotImplementedCodec(f"codec {codec}", protocol="multihash")
        return cls(codec, bytes(digest))

    @classmethod
    def decode(cls, buf: bytes) -> Tuple['Multihash', bytes]:
        """
        Decode <hash-func-type><digest-length><digest-value>.

        Returns (multihash, remaining).
        """
        codec, rest = Multicodec.decode(buf)
        n, rest = varint.decode(rest)
        if n > len(rest):
            raise DecodeError(
                f"hash-len {n} exceeds {len(rest)} bytes",
                protocol="multihash", stage="binary",
            )
        return cls.from_digest(codec, rest[:n]), rest[n:]

    @classmethod
    def decode_lazy(cls, buf: bytes) -> 'LazyMultihash':
        """Defer decoding of `buf` until parse() is called."""
        return LazyMultihash(bytes(buf))

    def encode(self) -> bytes:
        return self.codec.encode() + varint.encode(len(self.digest)) + self.digest

    def to_codec(self) -> Multicodec:
        return self.codec

    def to_digest(self) -> bytes:
        return self.digest

    def unwrap(self) -> Tuple[Multicodec, bytes]:
        return self.codec, self.digest

    def __str__(self) -> str:
        # human readable form: <name>-<bits>-<hex digest>
        return f"{self.codec.name}-{len(self.digest) * 8}-{self.digest.hex()}"


@dataclass(frozen=True)
class LazyMultihash:
    """Encoded multihash bytes held without validation."""
    data: bytes

    def parse(self) -> Multihash:
        mh, _ = Multihash.decode(self.data)
        return mh

    def encode(self) -> bytes:
        return self.data
