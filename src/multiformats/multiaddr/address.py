"""
Multiaddr: composable, self-describing network addresses.

An address is one of three variants:

    MultiaddrText    text kept as given, parsed on demand
    MultiaddrBinary  bytes kept as given, decoded on demand
    MultiaddrChain   ordered tuple of protocol segments; () is the empty address

Text form:    /<name>[/<value>]/<name>[/<value>]...
Binary form:  <varint code><payload><varint code><payload>...

The parse and decode drivers walk the token or byte stream recursively, one
frame per segment, bounded by Limits.max_segments.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from ..config import DEFAULT_LIMITS, Limits
from ..errors import BadAddr, DecodeError, Invalid, STAGE_BINARY, STAGE_TEXT
from ..multicodec import Multicodec
from . import protocols
from .protocols import Ip4, Ip6, Segment, Tcp, Udp

logger = logging.getLogger(__name__)


# =============================================================================
# DRIVERS
# =============================================================================

def _parse_ip(parts: Sequence[str]) -> Tuple[Segment, Sequence[str]]:
    """`ip` is IPv4 if the value parses as one, IPv6 otherwise."""
    try:
        return Ip4.from_text(parts)
    except BadAddr as exc:
        logger.debug("ip: not ip4 (%s), trying ip6", exc)
    return Ip6.from_text(parts)


def _parse_parts(
    parts: Sequence[str], depth: int, limits: Limits
) -> Tuple[Tuple[Segment, ...], Sequence[str]]:
    if not parts:
        return (), parts
    if depth >= limits.max_segments:
        raise BadAddr(f"more than {limits.max_segments} segments", stage=STAGE_TEXT)

    name, rest = parts[0], parts[1:]
    if name == "ip":
        segment, rest = _parse_ip(rest)
    else:
        kind = protocols.lookup_name(name)
        if kind is None:
            logger.debug("unknown protocol token %r", name)
            raise BadAddr(f"unknown protocol {name!r}", stage=STAGE_TEXT)
        segment, rest = kind.from_text(rest)

    tail, rest = _parse_parts(rest, depth + 1, limits)
    return (segment,) + tail, rest


def _decode_parts(
    data: bytes, depth: int, limits: Limits
) -> Tuple[Tuple[Segment, ...], bytes]:
    if not data:
        return (), data
    if depth >= limits.max_segments:
        raise DecodeError(f"more than {limits.max_segments} segments", stage=STAGE_BINARY)

    codec, rest = Multicodec.decode(data)
    kind = protocols.lookup_code(codec.code)
    if kind is None:
        logger.debug("unknown protocol code %#x", codec.code)
        raise DecodeError(f"unknown protocol code {codec.code:#x}", stage=STAGE_BINARY)
    segment, rest = kind.decode(rest)

    tail, rest = _decode_parts(rest, depth + 1, limits)
    return (segment,) + tail, rest


# =============================================================================
# ADDRESS VARIANTS
# =============================================================================

class Multiaddr(ABC):
    """
    Base of the three address variants.

    Usage:
        addr = Multiaddr.from_text("/ip4/127.0.0.1/tcp/4001")
        data = addr.encode()
        same, _ = Multiaddr.decode(data)
        parts = addr.split()
        assert Multiaddr.join(parts) == addr
    """

    # -- constructors ----------------------------------------------------------

    @classmethod
    def from_text(cls, text: str, *, limits: Limits = DEFAULT_LIMITS) -> 'MultiaddrChain':
        """Parse a text address into a chain of segments."""
        if len(text) > limits.max_text_length:
            raise BadAddr(f"address longer than {limits.max_text_length} chars", stage=STAGE_TEXT)

        parts = text.split("/")
        if parts[0] != "":
            raise BadAddr(f"address must start with '/': {text!r}", stage=STAGE_TEXT)
        if len(parts) < 2 or parts[1:] == [""]:
            raise BadAddr("empty address", stage=STAGE_TEXT)

        segments, rest = _parse_parts(parts[1:], 0, limits)
        if rest:
            raise BadAddr(f"unconsumed tokens {list(rest)}", stage=STAGE_TEXT)
        return MultiaddrChain(segments)

    @classmethod
    def decode(
        cls, data: bytes, *, limits: Limits = DEFAULT_LIMITS
    ) -> Tuple['MultiaddrChain', bytes]:
        """
        Decode a binary address.

        The whole buffer is consumed; the remainder is always empty and is
        returned to match the other decode functions.
        """
        data = bytes(data)
        if len(data) > limits.max_binary_length:
            raise DecodeError(
                f"address longer than {limits.max_binary_length} bytes", stage=STAGE_BINARY
            )
        segments, rest = _decode_parts(data, 0, limits)
        return MultiaddrChain(segments), rest

    @classmethod
    def lazy_text(cls, text: str) -> 'MultiaddrText':
        """Hold `text` unparsed; validation happens on first use."""
        return MultiaddrText(text)

    @classmethod
    def lazy_binary(cls, data: bytes) -> 'MultiaddrBinary':
        """Hold `data` undecoded; validation happens on first use."""
        return MultiaddrBinary(bytes(data))

    @classmethod
    def from_segments(cls, segments: Sequence[Segment]) -> 'MultiaddrChain':
        return MultiaddrChain(tuple(segments))

    @classmethod
    def empty(cls) -> 'MultiaddrChain':
        return MultiaddrChain(())

    @classmethod
    def join(cls, components: Sequence['Multiaddr']) -> 'MultiaddrChain':
        """
        Concatenate single-segment addresses, as produced by split(), back
        into one address. Anything else in `components` is Invalid.
        """
        segments: List[Segment] = []
        for i, comp in enumerate(components):
            if not isinstance(comp, MultiaddrChain) or len(comp.segments) != 1:
                raise Invalid(f"component {i} is not a single segment: {comp!r}")
            segments.append(comp.segments[0])
        return MultiaddrChain(tuple(segments))

    # -- operations ------------------------------------------------------------

    @abstractmethod
    def parse(self, *, limits: Limits = DEFAULT_LIMITS) -> 'MultiaddrChain':
        """Structured form of this address. Never modifies the receiver."""
        pass

    def to_text(self) -> str:
        return self.parse().to_text()

    def encode(self) -> bytes:
        return self.parse().encode()

    def split(self) -> List['MultiaddrChain']:
        return self.parse().split()

    def is_thin_wait(self) -> bool:
        """Unparsed addresses are never reported as thin waist."""
        return False

    def to_multicodec(self) -> Optional[Multicodec]:
        return None


@dataclass(frozen=True)
class MultiaddrText(Multiaddr):
    """Text address not yet parsed."""
    text: str

    def parse(self, *, limits: Limits = DEFAULT_LIMITS) -> 'MultiaddrChain':
        logger.debug("parsing deferred text address %r", self.text)
        return Multiaddr.from_text(self.text, limits=limits)


@dataclass(frozen=True)
class MultiaddrBinary(Multiaddr):
    """Binary address not yet decoded."""
    data: bytes

    def parse(self, *, limits: Limits = DEFAULT_LIMITS) -> 'MultiaddrChain':
        logger.debug("decoding deferred binary address (%d bytes)", len(self.data))
        chain, _ = Multiaddr.decode(self.data, limits=limits)
        return chain


@dataclass(frozen=True)
class MultiaddrChain(Multiaddr):
    """Parsed address: segments in left to right order."""
    segments: Tuple[Segment, ...] = ()

    def __post_init__(self):
        if not isinstance(self.segments, tuple):
            raise Invalid(f"segments must be a tuple, got {type(self.segments).__name__}")
        for seg in self.segments:
            if not isinstance(seg, Segment):
                raise Invalid(f"not a protocol segment: {seg!r}")

    def parse(self, *, limits: Limits = DEFAULT_LIMITS) -> 'MultiaddrChain':
        return self

    def to_text(self) -> str:
        return "".join(seg.to_text() for seg in self.segments)

    def encode(self) -> bytes:
        return b"".join(seg.encode() for seg in self.segments)

    def split(self) -> List['MultiaddrChain']:
        return [MultiaddrChain((seg,)) for seg in self.segments]

    def is_thin_wait(self) -> bool:
        """
        True for a bare IP address, optionally followed by exactly one
        tcp or udp port.
        """
        if not self.segments or not isinstance(self.segments[0], (Ip4, Ip6)):
            return False
        tail = self.segments[1:]
        return not tail or (len(tail) == 1 and isinstance(tail[0], (Tcp, Udp)))

    def to_multicodec(self) -> Optional[Multicodec]:
        if not self.segments:
            return None
        return self.segments[0].to_multicodec()

    @property
    def head(self) -> Optional[Segment]:
        return self.segments[0] if self.segments else None

    @property
    def tail(self) -> 'MultiaddrChain':
        return MultiaddrChain(self.segments[1:])

    def is_empty(self) -> bool:
        return not self.segments

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)
