"""
Tests for Multihash: digest computation, wire format and error cases.
"""

import hashlib

import pytest

from multiformats import multicodec
from multiformats.errors import DecodeError, Invalid, NotImplementedCodec
from multiformats.multibase import Multibase
from multiformats.multicodec import Multicodec
from multiformats.multihash import Multihash, MultihashWriter, can_compute, is_supported


def base16(data: bytes) -> str:
    return Multibase.with_base("base16", data).to_text()


# =============================================================================
# REFERENCE VECTORS
# =============================================================================

class TestVectors:
    """Encodings rendered as base16 multibase."""

    def test_sha1(self):
        mh = Multihash.new(multicodec.SHA1, b"Hello world")
        assert base16(mh.encode()) == "f11147b502c3a1f48c8609ae212cdfb639dee39673f5e"
        assert base16(mh.to_digest()) == "f7b502c3a1f48c8609ae212cdfb639dee39673f5e"

    def test_sha2_256(self):
        mh = Multihash.new(multicodec.SHA2_256, b"Hello world")
        assert base16(mh.encode()) == (
            "f122064ec88ca00b268e5ba1a35678a1b5316d212f4f366b2477232534a8aeca37f3c"
        )
        mh = Multihash.new(multicodec.SHA2_256, b"hello world")
        assert base16(mh.encode()) == (
            "f1220b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
        )

    def test_pretty(self):
        mh = Multihash.new(multicodec.SHA2_256, b"hello world")
        assert str(mh) == (
            "sha2-256-256-b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
        )

    def test_blake3_empty(self):
        mh = Multihash.new(multicodec.BLAKE3, b"")
        assert mh.to_digest().hex() == (
            "af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9adc112b7cc9a93cae41f3262"
        )

    def test_identity(self):
        mh = Multihash.new(multicodec.IDENTITY, b"abcd")
        assert mh.encode() == b"\x00\x04abcd"

    def test_keccak_256_empty(self):
        mh = Multihash.new(multicodec.KECCAK_256, b"")
        assert mh.to_digest().hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )
        assert mh.encode()[:2] == b"\x1b\x20"

    def test_ripemd_160_empty(self):
        mh = Multihash.new(multicodec.RIPEMD_160, b"")
        assert mh.to_digest().hex() == "9c1185a5c5e9fc54612808977ee8f548b2258d31"

    def test_md4_empty(self):
        mh = Multihash.new(multicodec.MD4, b"")
        assert mh.to_digest().hex() == "31d6cfe0d16ae931b73c59d7e0c089c0"


# =============================================================================
# ALGORITHM FAMILIES
# =============================================================================

class TestFamilies:
    """Digest sizes follow the code."""

    @pytest.mark.parametrize("code, size", [
        (multicodec.SHA2_512, 64),
        (multicodec.DBL_SHA2_256, 32),
        (multicodec.SHA3_224, 28),
        (multicodec.SHA3_512, 64),
        (multicodec.SHAKE_128, 32),
        (multicodec.SHAKE_256, 64),
        (multicodec.MD5, 16),
        (multicodec.BLAKE2B_256, 32),
        (multicodec.BLAKE2B_512, 64),
        (multicodec.BLAKE2S_128, 16),
        (multicodec.BLAKE2S_256, 32),
        (multicodec.BLAKE2B_8, 1),
        (multicodec.KECCAK_224, 28),
        (multicodec.KECCAK_384, 48),
        (multicodec.KECCAK_512, 64),
        (multicodec.MD4, 16),
        (multicodec.RIPEMD_160, 20),
    ])
    def test_digest_size(self, code, size):
        assert len(Multihash.new(code, b"data").to_digest()) == size

    def test_dbl_sha2(self):
        once = hashlib.sha256(b"x").digest()
        mh = Multihash.new(multicodec.DBL_SHA2_256, b"x")
        assert mh.to_digest() == hashlib.sha256(once).digest()

    def test_blake2b_matches_hashlib(self):
        mh = Multihash.new(multicodec.BLAKE2B_256, b"abc")
        assert mh.to_digest() == hashlib.blake2b(b"abc", digest_size=32).digest()

    @pytest.mark.parametrize("code, size", [
        (multicodec.RIPEMD_320, 40),
        (multicodec.RIPEMD_128, 16),
        (multicodec.SKEIN256_256, 32),
        (multicodec.SKEIN512_512, 64),
        (multicodec.SKEIN1024_1024, 128),
    ])
    def test_decode_only(self, code, size):
        """ripemd-128/256/320 and skein decode but cannot be computed."""
        assert is_supported(code)
        assert not can_compute(code)
        with pytest.raises(NotImplementedCodec):
            Multihash.new(code, b"data")
        mh = Multihash.from_digest(code, b"\x01" * size)
        assert Multihash.decode(mh.encode()) == (mh, b"")

    def test_skein_name(self):
        mh = Multihash.from_digest(multicodec.SKEIN256_256, b"\x00" * 32)
        assert str(mh).startswith("skein256-256-256-")

    def test_unsupported(self):
        """murmur3 is in the table but not supported at all."""
        assert not is_supported(multicodec.MURMUR3_32)
        with pytest.raises(NotImplementedCodec):
            Multihash.from_digest(multicodec.MURMUR3_32, b"\x00" * 4)

    def test_non_hash_code(self):
        with pytest.raises(NotImplementedCodec):
            Multihash.new(multicodec.TCP, b"data")


# =============================================================================
# WIRE FORMAT
# =============================================================================

class TestDecode:
    """<code><length><digest>, remainder returned."""

    def test_round_trip_with_rest(self):
        mh = Multihash.new(multicodec.SHA1, b"abc")
        decoded, rest = Multihash.decode(mh.encode() + b"\xff")
        assert decoded == mh
        assert rest == b"\xff"
        assert decoded.unwrap() == (Multicodec(multicodec.SHA1), mh.to_digest())
        assert decoded.to_codec().name == "sha1"

    def test_truncated_digest(self):
        data = Multihash.new(multicodec.SHA2_256, b"abc").encode()
        with pytest.raises(DecodeError):
            Multihash.decode(data[:-1])

    def test_missing_length(self):
        with pytest.raises(DecodeError):
            Multihash.decode(b"\x12")

    def test_empty(self):
        with pytest.raises(DecodeError):
            Multihash.decode(b"")

    def test_lazy(self):
        data = Multihash.new(multicodec.SHA2_256, b"abc").encode()
        lazy = Multihash.decode_lazy(data)
        assert lazy.encode() == data
        assert lazy.parse().encode() == data

    def test_lazy_defers_errors(self):
        lazy = Multihash.decode_lazy(b"\x12\x20\x00")
        with pytest.raises(DecodeError):
            lazy.parse()


# =============================================================================
# INCREMENTAL HASHING
# =============================================================================

class TestWriter:
    """write() in pieces equals new() over the whole buffer."""

    @pytest.mark.parametrize("code", [
        multicodec.IDENTITY,
        multicodec.SHA2_256,
        multicodec.DBL_SHA2_256,
        multicodec.SHAKE_128,
        multicodec.KECCAK_256,
        multicodec.RIPEMD_160,
        multicodec.BLAKE2S_128,
        multicodec.BLAKE3,
    ])
    def test_pieces(self, code):
        w = Multihash.writer(code)
        w.write(b"hello ").write(b"wor").write(b"ld")
        assert w.finish() == Multihash.new(code, b"hello world")

    def test_finish_is_stable(self):
        w = MultihashWriter(multicodec.SHA1)
        w.write(b"abc")
        assert w.finish() is w.finish()

    def test_write_after_finish(self):
        w = MultihashWriter(multicodec.SHA1).write(b"abc")
        w.finish()
        with pytest.raises(Invalid):
            w.write(b"d")

    def test_reset(self):
        w = MultihashWriter(multicodec.KECCAK_512).write(b"first")
        w.finish()
        w.reset().write(b"second")
        assert w.finish() == Multihash.new(multicodec.KECCAK_512, b"second")

    def test_empty_input(self):
        assert MultihashWriter(multicodec.MD5).finish() == Multihash.new(multicodec.MD5, b"")

    def test_not_computable(self):
        with pytest.raises(NotImplementedCodec):
            MultihashWriter(multicodec.SKEIN512_512)
