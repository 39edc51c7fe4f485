"""
Protocol segments of a multiaddr.

Each supported protocol is one frozen dataclass deriving from Segment. A
segment knows four things about itself:

    from_text(tokens) -> (segment, remaining tokens)
    to_text()         -> "/<name>[/<value>]"
    decode(data)      -> (segment, remaining bytes)   # after the code prefix
    encode()          -> <varint code><payload>

Payload families:
    marker    no payload                         (ws, quic, p2p-circuit, ...)
    port      16-bit big-endian                  (tcp, udp, dccp, sctp)
    name      varint length + utf-8              (dns*, ip6zone)
    fixed     4 or 16 raw bytes                  (ip4, ip6)
    hidden    raw hash + 16-bit port             (onion, onion3)
    buffer    varint length + bytes              (garlic32, garlic64, p2p, unix)

Segments are looked up by text name and by multicodec code through the
registries at the bottom of this module.
"""

from __future__ import annotations
import base64
import binascii
import ipaddress
import re
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple, Type

from .. import multicodec, varint
from ..errors import BadAddr, DecodeError, Invalid, STAGE_BINARY, STAGE_TEXT
from ..multicodec import Multicodec
from .peer import PeerId, bytes_to_text

Tokens = Sequence[str]


# =============================================================================
# HELPERS
# =============================================================================

def _take(parts: Tokens, name: str) -> Tuple[str, Tokens]:
    """Split off the value token that follows a protocol name."""
    if not parts:
        raise BadAddr("missing value", protocol=name, stage=STAGE_TEXT)
    return parts[0], parts[1:]


def _read(data: bytes, n: int, what: str) -> Tuple[bytes, bytes]:
    if len(data) < n:
        raise DecodeError(
            f"insufficient bytes, need {n} have {len(data)}",
            protocol=what, stage=STAGE_BINARY,
        )
    return data[:n], data[n:]


def parse_port(token: str, name: str) -> int:
    """Decimal 16-bit port, ascii digits only."""
    if not (token.isascii() and token.isdigit()):
        raise BadAddr(f"port {token!r} not a number", protocol=name, stage=STAGE_TEXT)
    port = int(token)
    if port > 0xFFFF:
        raise BadAddr(f"port {port} out of range", protocol=name, stage=STAGE_TEXT)
    return port


def _check_port(port: int, name: str) -> None:
    if not isinstance(port, int) or isinstance(port, bool) or not 0 <= port <= 0xFFFF:
        raise Invalid(f"port {port!r} not a 16-bit unsigned", protocol=name)


# =============================================================================
# SEGMENT BASE
# =============================================================================

class Segment(ABC):
    """
    One protocol layer of an address.

    Subclasses set NAME and CODE, the text token and the multicodec code
    that identify the protocol.
    """
    NAME: ClassVar[str]
    CODE: ClassVar[int]

    @classmethod
    @abstractmethod
    def from_text(cls, parts: Tokens) -> Tuple['Segment', Tokens]:
        """Consume this protocol's value tokens, the name already removed."""
        pass

    @classmethod
    @abstractmethod
    def decode(cls, data: bytes) -> Tuple['Segment', bytes]:
        """Read this protocol's payload, the code prefix already removed."""
        pass

    @abstractmethod
    def value_text(self) -> Optional[str]:
        """Text of the value after the name, None for marker protocols."""
        pass

    @abstractmethod
    def payload(self) -> bytes:
        """Binary payload that follows the code prefix."""
        pass

    def to_text(self) -> str:
        value = self.value_text()
        if value is None:
            return f"/{self.NAME}"
        return f"/{self.NAME}/{value}"

    def encode(self) -> bytes:
        return varint.encode(self.CODE) + self.payload()

    def to_multicodec(self) -> Multicodec:
        return Multicodec(self.CODE)

    def __str__(self) -> str:
        return self.to_text()


# =============================================================================
# MARKER PROTOCOLS
# =============================================================================

@dataclass(frozen=True)
class Marker(Segment):
    """Protocol without payload; only its code appears on the wire."""

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['Marker', Tokens]:
        return cls(), parts

    @classmethod
    def decode(cls, data: bytes) -> Tuple['Marker', bytes]:
        return cls(), data

    def value_text(self) -> Optional[str]:
        return None

    def payload(self) -> bytes:
        return b""


@dataclass(frozen=True)
class Utp(Marker):
    NAME = "utp"
    CODE = multicodec.UTP


@dataclass(frozen=True)
class Udt(Marker):
    NAME = "udt"
    CODE = multicodec.UDT


@dataclass(frozen=True)
class Quic(Marker):
    NAME = "quic"
    CODE = multicodec.QUIC


@dataclass(frozen=True)
class Http(Marker):
    NAME = "http"
    CODE = multicodec.HTTP


@dataclass(frozen=True)
class Https(Marker):
    NAME = "https"
    CODE = multicodec.HTTPS


@dataclass(frozen=True)
class Ws(Marker):
    NAME = "ws"
    CODE = multicodec.WS


@dataclass(frozen=True)
class Wss(Marker):
    NAME = "wss"
    CODE = multicodec.WSS


@dataclass(frozen=True)
class P2pCircuit(Marker):
    NAME = "p2p-circuit"
    CODE = multicodec.P2P_CIRCUIT


@dataclass(frozen=True)
class P2pWebRtcDirect(Marker):
    NAME = "p2p-webrtc-direct"
    CODE = multicodec.P2P_WEBRTC_DIRECT


# =============================================================================
# PORT PROTOCOLS
# =============================================================================

@dataclass(frozen=True)
class PortSegment(Segment):
    """Transport protocol carrying a 16-bit port."""
    port: int

    def __post_init__(self):
        _check_port(self.port, self.NAME)

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['PortSegment', Tokens]:
        token, rest = _take(parts, cls.NAME)
        return cls(parse_port(token, cls.NAME)), rest

    @classmethod
    def decode(cls, data: bytes) -> Tuple['PortSegment', bytes]:
        raw, rest = _read(data, 2, cls.NAME)
        return cls(struct.unpack('>H', raw)[0]), rest

    def value_text(self) -> Optional[str]:
        return str(self.port)

    def payload(self) -> bytes:
        return struct.pack('>H', self.port)


@dataclass(frozen=True)
class Tcp(PortSegment):
    NAME = "tcp"
    CODE = multicodec.TCP


@dataclass(frozen=True)
class Udp(PortSegment):
    NAME = "udp"
    CODE = multicodec.UDP


@dataclass(frozen=True)
class Dccp(PortSegment):
    NAME = "dccp"
    CODE = multicodec.DCCP


@dataclass(frozen=True)
class Sctp(PortSegment):
    NAME = "sctp"
    CODE = multicodec.SCTP


# =============================================================================
# NAME PROTOCOLS
# =============================================================================

@dataclass(frozen=True)
class NameSegment(Segment):
    """Length-prefixed utf-8 name (DNS names, IPv6 zone ids)."""
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise Invalid(f"name must be str, got {type(self.name).__name__}", protocol=self.NAME)

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['NameSegment', Tokens]:
        token, rest = _take(parts, cls.NAME)
        if not token:
            raise BadAddr("empty name", protocol=cls.NAME, stage=STAGE_TEXT)
        return cls(token), rest

    @classmethod
    def decode(cls, data: bytes) -> Tuple['NameSegment', bytes]:
        raw, rest = varint.read_prefixed(data, cls.NAME)
        try:
            name = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(str(exc), protocol=cls.NAME, stage=STAGE_BINARY) from exc
        # neither would survive the text form
        if not name or "/" in name:
            raise DecodeError(f"name {name!r} cannot be rendered", protocol=cls.NAME, stage=STAGE_BINARY)
        return cls(name), rest

    def value_text(self) -> Optional[str]:
        return self.name

    def payload(self) -> bytes:
        return varint.write_prefixed(self.name.encode("utf-8"))


@dataclass(frozen=True)
class Dns(NameSegment):
    NAME = "dns"
    CODE = multicodec.DNS


@dataclass(frozen=True)
class Dns4(NameSegment):
    NAME = "dns4"
    CODE = multicodec.DNS4


@dataclass(frozen=True)
class Dns6(NameSegment):
    NAME = "dns6"
    CODE = multicodec.DNS6


@dataclass(frozen=True)
class Dnsaddr(NameSegment):
    NAME = "dnsaddr"
    CODE = multicodec.DNSADDR


@dataclass(frozen=True)
class Ip6zone(NameSegment):
    NAME = "ip6zone"
    CODE = multicodec.IP6ZONE


# =============================================================================
# IP ADDRESSES
# =============================================================================

@dataclass(frozen=True)
class Ip4(Segment):
    """IPv4 address, 4 bytes on the wire, dotted quad in text."""
    NAME = "ip4"
    CODE = multicodec.IP4
    addr: ipaddress.IPv4Address

    def __post_init__(self):
        if not isinstance(self.addr, ipaddress.IPv4Address):
            raise Invalid(f"not an IPv4Address: {self.addr!r}", protocol=self.NAME)

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['Ip4', Tokens]:
        token, rest = _take(parts, cls.NAME)
        try:
            addr = ipaddress.IPv4Address(token)
        except ValueError as exc:
            raise BadAddr(str(exc), protocol=cls.NAME, stage=STAGE_TEXT) from exc
        return cls(addr), rest

    @classmethod
    def decode(cls, data: bytes) -> Tuple['Ip4', bytes]:
        raw, rest = _read(data, 4, cls.NAME)
        return cls(ipaddress.IPv4Address(raw)), rest

    def value_text(self) -> Optional[str]:
        return str(self.addr)

    def payload(self) -> bytes:
        return self.addr.packed

    def to_addr(self) -> ipaddress.IPv4Address:
        return self.addr


@dataclass(frozen=True)
class Ip6(Segment):
    """IPv6 address, 16 bytes on the wire. Zone ids travel in /ip6zone."""
    NAME = "ip6"
    CODE = multicodec.IP6
    addr: ipaddress.IPv6Address

    def __post_init__(self):
        if not isinstance(self.addr, ipaddress.IPv6Address):
            raise Invalid(f"not an IPv6Address: {self.addr!r}", protocol=self.NAME)
        if self.addr.scope_id is not None:
            raise Invalid("scoped address, use /ip6zone", protocol=self.NAME)

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['Ip6', Tokens]:
        token, rest = _take(parts, cls.NAME)
        if "%" in token:
            raise BadAddr(f"zone id in {token!r}", protocol=cls.NAME, stage=STAGE_TEXT)
        try:
            addr = ipaddress.IPv6Address(token)
        except ValueError as exc:
            raise BadAddr(str(exc), protocol=cls.NAME, stage=STAGE_TEXT) from exc
        return cls(addr), rest

    @classmethod
    def decode(cls, data: bytes) -> Tuple['Ip6', bytes]:
        raw, rest = _read(data, 16, cls.NAME)
        return cls(ipaddress.IPv6Address(raw)), rest

    def value_text(self) -> Optional[str]:
        return str(self.addr)

    def payload(self) -> bytes:
        return self.addr.packed

    def to_addr(self) -> ipaddress.IPv6Address:
        return self.addr


# =============================================================================
# TOR HIDDEN SERVICES
# =============================================================================

@dataclass(frozen=True)
class HiddenService(Segment):
    """
    Tor onion service: fixed-size hash followed by a 16-bit port.

    Text form is <base32 label>:<port>, the label lowercase and unpadded.
    The port must be at least 1 in text; binary input is taken as is.
    """
    HASH_LEN: ClassVar[int]
    LABEL_LEN: ClassVar[int]

    hash: bytes
    port: int

    def __post_init__(self):
        if not isinstance(self.hash, bytes) or len(self.hash) != self.HASH_LEN:
            raise Invalid(f"hash must be {self.HASH_LEN} bytes", protocol=self.NAME)
        _check_port(self.port, self.NAME)

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['HiddenService', Tokens]:
        token, rest = _take(parts, cls.NAME)
        fields = token.split(":")
        if len(fields) != 2:
            raise BadAddr(f"expected <label>:<port>, got {token!r}", protocol=cls.NAME, stage=STAGE_TEXT)
        label, port_text = fields

        if len(label) != cls.LABEL_LEN:
            raise BadAddr(
                f"label must be {cls.LABEL_LEN} chars, got {len(label)}",
                protocol=cls.NAME, stage=STAGE_TEXT,
            )
        try:
            hash_ = base64.b32decode(label, casefold=True)
        except (ValueError, binascii.Error) as exc:
            raise BadAddr(f"label {label!r}: {exc}", protocol=cls.NAME, stage=STAGE_TEXT) from exc
        if len(hash_) != cls.HASH_LEN:
            raise BadAddr(f"label {label!r} decodes to {len(hash_)} bytes", protocol=cls.NAME, stage=STAGE_TEXT)

        port = parse_port(port_text, cls.NAME)
        if port < 1:
            raise BadAddr(f"port {port}", protocol=cls.NAME, stage=STAGE_TEXT)
        return cls(hash_, port), rest

    @classmethod
    def decode(cls, data: bytes) -> Tuple['HiddenService', bytes]:
        hash_, rest = _read(data, cls.HASH_LEN, f"{cls.NAME}-addr")
        raw, rest = _read(rest, 2, f"{cls.NAME}-port")
        return cls(hash_, struct.unpack('>H', raw)[0]), rest

    def value_text(self) -> Optional[str]:
        label = base64.b32encode(self.hash).decode("ascii").lower()
        return f"{label}:{self.port}"

    def payload(self) -> bytes:
        return self.hash + struct.pack('>H', self.port)


@dataclass(frozen=True)
class Onion(HiddenService):
    NAME = "onion"
    CODE = multicodec.ONION
    HASH_LEN = 10
    LABEL_LEN = 16


@dataclass(frozen=True)
class Onion3(HiddenService):
    NAME = "onion3"
    CODE = multicodec.ONION3
    HASH_LEN = 35
    LABEL_LEN = 56


# =============================================================================
# I2P GARLIC ADDRESSES
# =============================================================================

# Character counts from the i2p naming rules: 52 is a plain b32 address,
# 55 and longer is an encrypted leaseset v2 address.
GARLIC32_PLAIN_LEN = 52
GARLIC32_ELS2_MIN_LEN = 55
# Destination sizes in base64 text.
GARLIC64_MIN_LEN = 516
GARLIC64_MAX_LEN = 616

_GARLIC64_ALTCHARS = b"-~"
_GARLIC32_TEXT = re.compile(r"[a-z2-7]+")
_GARLIC64_TEXT = re.compile(r"[A-Za-z0-9\-~]+={0,2}")


@dataclass(frozen=True)
class BufferSegment(Segment):
    """Opaque length-prefixed byte payload."""
    addr: bytes

    def __post_init__(self):
        if not isinstance(self.addr, bytes):
            raise Invalid(f"payload must be bytes, got {type(self.addr).__name__}", protocol=self.NAME)

    @classmethod
    def decode(cls, data: bytes) -> Tuple['BufferSegment', bytes]:
        raw, rest = varint.read_prefixed(data, cls.NAME)
        return cls(raw), rest

    def payload(self) -> bytes:
        return varint.write_prefixed(self.addr)


@dataclass(frozen=True)
class Garlic32(BufferSegment):
    """i2p base32 address, lowercase and unpadded in text."""
    NAME = "garlic32"
    CODE = multicodec.GARLIC32

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['Garlic32', Tokens]:
        token, rest = _take(parts, cls.NAME)
        n = len(token)
        if n != GARLIC32_PLAIN_LEN and n < GARLIC32_ELS2_MIN_LEN:
            raise BadAddr(f"invalid i2p base32 length {n}", protocol=cls.NAME, stage=STAGE_TEXT)
        # lowercase only, so that the rendered text matches the input
        if not _GARLIC32_TEXT.fullmatch(token):
            raise BadAddr(f"invalid i2p base32 text {token!r}", protocol=cls.NAME, stage=STAGE_TEXT)
        padded = token + "=" * (-n % 8)
        try:
            addr = base64.b32decode(padded, casefold=True)
        except (ValueError, binascii.Error) as exc:
            raise BadAddr(f"invalid i2p base32: {exc}", protocol=cls.NAME, stage=STAGE_TEXT) from exc
        return cls(addr), rest

    def value_text(self) -> Optional[str]:
        return base64.b32encode(self.addr).decode("ascii").rstrip("=").lower()


@dataclass(frozen=True)
class Garlic64(BufferSegment):
    """i2p destination in base64 with '-' and '~' as the last two symbols."""
    NAME = "garlic64"
    CODE = multicodec.GARLIC64

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['Garlic64', Tokens]:
        token, rest = _take(parts, cls.NAME)
        n = len(token)
        if n < GARLIC64_MIN_LEN or n > GARLIC64_MAX_LEN:
            raise BadAddr(f"invalid i2p base64 length {n}", protocol=cls.NAME, stage=STAGE_TEXT)
        # b64decode maps altchars before validating, so '+' and '/' would slip through
        if not _GARLIC64_TEXT.fullmatch(token):
            raise BadAddr(f"invalid i2p base64 text {token[:16]!r}...", protocol=cls.NAME, stage=STAGE_TEXT)
        try:
            addr = base64.b64decode(token, altchars=_GARLIC64_ALTCHARS, validate=True)
        except (ValueError, binascii.Error) as exc:
            raise BadAddr(f"invalid i2p base64: {exc}", protocol=cls.NAME, stage=STAGE_TEXT) from exc
        return cls(addr), rest

    def value_text(self) -> Optional[str]:
        return base64.b64encode(self.addr, altchars=_GARLIC64_ALTCHARS).decode("ascii")


# =============================================================================
# PATHS AND PEERS
# =============================================================================

@dataclass(frozen=True)
class Unix(Segment):
    """
    Unix domain socket path.

    The path is always the last segment in text: every remaining token is
    joined back into the path.
    """
    NAME = "unix"
    CODE = multicodec.UNIX
    path: str

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['Unix', Tokens]:
        if not parts:
            raise BadAddr("missing path", protocol=cls.NAME, stage=STAGE_TEXT)
        return cls("/" + "/".join(parts)), parts[len(parts):]

    @classmethod
    def decode(cls, data: bytes) -> Tuple['Unix', bytes]:
        raw, rest = varint.read_prefixed(data, cls.NAME)
        try:
            path = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(str(exc), protocol=cls.NAME, stage=STAGE_BINARY) from exc
        if not path.startswith("/"):
            raise DecodeError(f"path {path!r} is not absolute", protocol=cls.NAME, stage=STAGE_BINARY)
        return cls(path), rest

    def to_text(self) -> str:
        return f"/{self.NAME}{self.path}"

    def value_text(self) -> Optional[str]:
        return self.path.lstrip("/")

    def payload(self) -> bytes:
        return varint.write_prefixed(self.path.encode("utf-8"))

    def to_path(self) -> str:
        return self.path


@dataclass(frozen=True)
class P2p(Segment):
    """
    Peer identity. Text ids are kept verbatim until the address is encoded;
    decoded ids are kept as multihash bytes and render as base58btc.
    """
    NAME = "p2p"
    CODE = multicodec.P2P
    peer_id: PeerId

    @classmethod
    def from_text(cls, parts: Tokens) -> Tuple['P2p', Tokens]:
        token, rest = _take(parts, cls.NAME)
        if not token:
            raise BadAddr("empty peer id", protocol=cls.NAME, stage=STAGE_TEXT)
        return cls(PeerId.from_text(token)), rest

    @classmethod
    def decode(cls, data: bytes) -> Tuple['P2p', bytes]:
        raw, rest = varint.read_prefixed(data, cls.NAME)
        return cls(PeerId.from_bytes(raw)), rest

    def value_text(self) -> Optional[str]:
        return self.peer_id.to_text()

    def payload(self) -> bytes:
        return varint.write_prefixed(self.peer_id.to_bytes())

    def to_peer_id(self) -> str:
        """Peer id as legacy base58btc text, whatever form it was given in."""
        return bytes_to_text(self.peer_id.to_bytes())


# =============================================================================
# REGISTRY
# =============================================================================

SEGMENT_TYPES: List[Type[Segment]] = [
    Ip4, Ip6, Tcp, Udp, Dccp, Sctp,
    Dns, Dns4, Dns6, Dnsaddr, Ip6zone,
    Onion, Onion3, Garlic32, Garlic64,
    P2p, Unix,
    Utp, Udt, Quic, Http, Https, Ws, Wss, P2pCircuit, P2pWebRtcDirect,
]

# Deprecated spellings accepted in text addresses.
ALIASES: Dict[str, Type[Segment]] = {
    "ipfs": P2p,
}

_BY_NAME: Dict[str, Type[Segment]] = {t.NAME: t for t in SEGMENT_TYPES}
_BY_CODE: Dict[int, Type[Segment]] = {t.CODE: t for t in SEGMENT_TYPES}


def lookup_name(name: str) -> Optional[Type[Segment]]:
    """Segment type for a text token, aliases included."""
    return _BY_NAME.get(name) or ALIASES.get(name)


def lookup_code(code: int) -> Optional[Type[Segment]]:
    """Segment type for a multicodec code."""
    return _BY_CODE.get(code)
