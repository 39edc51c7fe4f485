"""
Multicodec: the agreed-upon table of numeric codes.

A code identifies a protocol, an encoding or a hash algorithm. On the wire
it is written as an unsigned varint (see varint.py). This module carries the
subset of the public table that the address, base and hash layers use.

Reference: https://github.com/multiformats/multicodec/blob/master/table.csv
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import varint


# =============================================================================
# CODE POINTS
# =============================================================================

@dataclass(frozen=True)
class Codepoint:
    """One row of the codec table."""
    code: int
    name: str
    tag: str


# -- ipld / multiformat --------------------------------------------------------
IDENTITY = 0x00
CID_V1 = 0x01
CID_V2 = 0x02
CID_V3 = 0x03
MULTICODEC = 0x30
MULTIHASH = 0x31
MULTIADDR = 0x32
MULTIBASE = 0x33
RAW = 0x55
DAG_PB = 0x70
DAG_CBOR = 0x71
LIBP2P_KEY = 0x72
DAG_JSON = 0x0129
LIBP2P_PEER_RECORD = 0x0301

# -- multiaddr -----------------------------------------------------------------
IP4 = 0x04
TCP = 0x06
DCCP = 0x21
IP6 = 0x29
IP6ZONE = 0x2A
DNS = 0x35
DNS4 = 0x36
DNS6 = 0x37
DNSADDR = 0x38
SCTP = 0x84
UDP = 0x0111
P2P_WEBRTC_STAR = 0x0113
P2P_WEBRTC_DIRECT = 0x0114
P2P_STARDUST = 0x0115
P2P_CIRCUIT = 0x0122
UDT = 0x012D
UTP = 0x012E
UNIX = 0x0190
P2P = 0x01A5
HTTPS = 0x01BB
ONION = 0x01BC
ONION3 = 0x01BD
GARLIC64 = 0x01BE
GARLIC32 = 0x01BF
TLS = 0x01C0
QUIC = 0x01CC
WS = 0x01DD
WSS = 0x01DE
P2P_WEBSOCKET_STAR = 0x01DF
HTTP = 0x01E0

# Deprecated name for P2P, accepted in text addresses.
IPFS = P2P

# -- multihash -----------------------------------------------------------------
SHA1 = 0x11
SHA2_256 = 0x12
SHA2_512 = 0x13
SHA3_512 = 0x14
SHA3_384 = 0x15
SHA3_256 = 0x16
SHA3_224 = 0x17
SHAKE_128 = 0x18
SHAKE_256 = 0x19
KECCAK_224 = 0x1A
KECCAK_256 = 0x1B
KECCAK_384 = 0x1C
KECCAK_512 = 0x1D
BLAKE3 = 0x1E
MURMUR3_128 = 0x22
MURMUR3_32 = 0x23
DBL_SHA2_256 = 0x56
MD4 = 0xD4
MD5 = 0xD5
BMT = 0xD6
RIPEMD_128 = 0x1052
RIPEMD_160 = 0x1053
RIPEMD_256 = 0x1054
RIPEMD_320 = 0x1055
X11 = 0x1100
KANGAROOTWELVE = 0x1D01
SM3_256 = 0x534D

# blake2b-8 .. blake2b-512 and blake2s-8 .. blake2s-256, one code per 8 bits.
BLAKE2B_8 = 0xB201
BLAKE2B_256 = 0xB220
BLAKE2B_512 = 0xB240
BLAKE2S_8 = 0xB241
BLAKE2S_128 = 0xB250
BLAKE2S_256 = 0xB260

# skein256-8 .. skein256-256, skein512-8 .. skein512-512 and
# skein1024-8 .. skein1024-1024, one code per 8 bits.
SKEIN256_8 = 0xB301
SKEIN256_256 = 0xB320
SKEIN512_8 = 0xB321
SKEIN512_512 = 0xB360
SKEIN1024_8 = 0xB361
SKEIN1024_1024 = 0xB3E0


_ROWS: List[Tuple[int, str, str]] = [
    (IDENTITY, "identity", "multihash"),
    (CID_V1, "cidv1", "ipld"),
    (CID_V2, "cidv2", "ipld"),
    (CID_V3, "cidv3", "ipld"),
    (IP4, "ip4", "multiaddr"),
    (TCP, "tcp", "multiaddr"),
    (SHA1, "sha1", "multihash"),
    (SHA2_256, "sha2-256", "multihash"),
    (SHA2_512, "sha2-512", "multihash"),
    (SHA3_512, "sha3-512", "multihash"),
    (SHA3_384, "sha3-384", "multihash"),
    (SHA3_256, "sha3-256", "multihash"),
    (SHA3_224, "sha3-224", "multihash"),
    (SHAKE_128, "shake-128", "multihash"),
    (SHAKE_256, "shake-256", "multihash"),
    (KECCAK_224, "keccak-224", "multihash"),
    (KECCAK_256, "keccak-256", "multihash"),
    (KECCAK_384, "keccak-384", "multihash"),
    (KECCAK_512, "keccak-512", "multihash"),
    (BLAKE3, "blake3", "multihash"),
    (DCCP, "dccp", "multiaddr"),
    (MURMUR3_128, "murmur3-128", "multihash"),
    (MURMUR3_32, "murmur3-32", "multihash"),
    (IP6, "ip6", "multiaddr"),
    (IP6ZONE, "ip6zone", "multiaddr"),
    (MULTICODEC, "multicodec", "multiformat"),
    (MULTIHASH, "multihash", "multiformat"),
    (MULTIADDR, "multiaddr", "multiformat"),
    (MULTIBASE, "multibase", "multiformat"),
    (DNS, "dns", "multiaddr"),
    (DNS4, "dns4", "multiaddr"),
    (DNS6, "dns6", "multiaddr"),
    (DNSADDR, "dnsaddr", "multiaddr"),
    (RAW, "raw", "ipld"),
    (DBL_SHA2_256, "dbl-sha2-256", "multihash"),
    (DAG_PB, "dag-pb", "ipld"),
    (DAG_CBOR, "dag-cbor", "ipld"),
    (LIBP2P_KEY, "libp2p-key", "ipld"),
    (SCTP, "sctp", "multiaddr"),
    (MD4, "md4", "multihash"),
    (MD5, "md5", "multihash"),
    (BMT, "bmt", "multihash"),
    (UDP, "udp", "multiaddr"),
    (P2P_WEBRTC_STAR, "p2p-webrtc-star", "multiaddr"),
    (P2P_WEBRTC_DIRECT, "p2p-webrtc-direct", "multiaddr"),
    (P2P_STARDUST, "p2p-stardust", "multiaddr"),
    (P2P_CIRCUIT, "p2p-circuit", "multiaddr"),
    (DAG_JSON, "dag-json", "ipld"),
    (UDT, "udt", "multiaddr"),
    (UTP, "utp", "multiaddr"),
    (UNIX, "unix", "multiaddr"),
    (P2P, "p2p", "multiaddr"),
    (HTTPS, "https", "multiaddr"),
    (ONION, "onion", "multiaddr"),
    (ONION3, "onion3", "multiaddr"),
    (GARLIC64, "garlic64", "multiaddr"),
    (GARLIC32, "garlic32", "multiaddr"),
    (TLS, "tls", "multiaddr"),
    (QUIC, "quic", "multiaddr"),
    (WS, "ws", "multiaddr"),
    (WSS, "wss", "multiaddr"),
    (P2P_WEBSOCKET_STAR, "p2p-websocket-star", "multiaddr"),
    (HTTP, "http", "multiaddr"),
    (LIBP2P_PEER_RECORD, "libp2p-peer-record", "libp2p"),
    (RIPEMD_128, "ripemd-128", "multihash"),
    (RIPEMD_160, "ripemd-160", "multihash"),
    (RIPEMD_256, "ripemd-256", "multihash"),
    (RIPEMD_320, "ripemd-320", "multihash"),
    (X11, "x11", "multihash"),
    (KANGAROOTWELVE, "kangarootwelve", "multihash"),
    (SM3_256, "sm3-256", "multihash"),
]
_ROWS += [(BLAKE2B_8 + i, f"blake2b-{8 * (i + 1)}", "multihash") for i in range(64)]
_ROWS += [(BLAKE2S_8 + i, f"blake2s-{8 * (i + 1)}", "multihash") for i in range(32)]
_ROWS += [(SKEIN256_8 + i, f"skein256-{8 * (i + 1)}", "multihash") for i in range(32)]
_ROWS += [(SKEIN512_8 + i, f"skein512-{8 * (i + 1)}", "multihash") for i in range(64)]
_ROWS += [(SKEIN1024_8 + i, f"skein1024-{8 * (i + 1)}", "multihash") for i in range(128)]

TABLE: List[Codepoint] = sorted(
    (Codepoint(code, name, tag) for code, name, tag in _ROWS),
    key=lambda cp: cp.code,
)

_BY_CODE: Dict[int, Codepoint] = {cp.code: cp for cp in TABLE}
_BY_NAME: Dict[str, Codepoint] = {cp.name: cp for cp in TABLE}

if len(_BY_CODE) != len(TABLE) or len(_BY_NAME) != len(TABLE):
    raise RuntimeError("multicodec table has duplicate codes or names")


def lookup_code(code: int) -> Optional[Codepoint]:
    """Return the table row for `code`, or None."""
    return _BY_CODE.get(code)


def lookup_name(name: str) -> Optional[Codepoint]:
    """Return the table row named `name`, or None."""
    return _BY_NAME.get(name)


def multihash_codes() -> List[int]:
    """Codes tagged as multihash, in ascending order."""
    return [cp.code for cp in TABLE if cp.tag == "multihash"]


# =============================================================================
# MULTICODEC VALUE
# =============================================================================

@dataclass(frozen=True)
class Multicodec:
    """
    A code value, encodable as an unsigned varint.

    The code need not be present in TABLE; unknown codes still round trip
    through encode/decode, they just have no name.
    """
    code: int

    @classmethod
    def from_code(cls, code: int) -> 'Multicodec':
        return cls(code)

    @classmethod
    def decode(cls, buf: bytes) -> Tuple['Multicodec', bytes]:
        """Read one varint code from `buf`, return (codec, remaining)."""
        code, rest = varint.decode(buf)
        return cls(code), rest

    def encode(self) -> bytes:
        return varint.encode(self.code)

    def to_code(self) -> int:
        return self.code

    @property
    def name(self) -> str:
        cp = _BY_CODE.get(self.code)
        return cp.name if cp else "@#bad-code#@"

    @property
    def tag(self) -> Optional[str]:
        cp = _BY_CODE.get(self.code)
        return cp.tag if cp else None

    def __int__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Multicodec<{self.code:#x}>"
