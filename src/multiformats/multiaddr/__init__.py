"""
Multiaddr: network addresses as chains of protocol segments.

Usage:
    from multiformats.multiaddr import Multiaddr

    addr = Multiaddr.from_text("/ip4/127.0.0.1/tcp/4001")
    addr.encode()          # b'\\x04\\x7f\\x00\\x00\\x01\\x06\\x0f\\xa1'
    addr.is_thin_wait()    # True
    [c.to_text() for c in addr.split()]
"""

from .address import (
    Multiaddr,
    MultiaddrText,
    MultiaddrBinary,
    MultiaddrChain,
)

from .peer import PeerId

from .protocols import (
    Segment,
    Marker,
    PortSegment,
    NameSegment,
    HiddenService,
    BufferSegment,
    Ip4,
    Ip6,
    Tcp,
    Udp,
    Dccp,
    Sctp,
    Dns,
    Dns4,
    Dns6,
    Dnsaddr,
    Ip6zone,
    Onion,
    Onion3,
    Garlic32,
    Garlic64,
    P2p,
    Unix,
    Utp,
    Udt,
    Quic,
    Http,
    Https,
    Ws,
    Wss,
    P2pCircuit,
    P2pWebRtcDirect,
    SEGMENT_TYPES,
    lookup_name,
    lookup_code,
)

__all__ = [
    # Addresses
    "Multiaddr",
    "MultiaddrText",
    "MultiaddrBinary",
    "MultiaddrChain",
    # Peers
    "PeerId",
    # Segment families
    "Segment",
    "Marker",
    "PortSegment",
    "NameSegment",
    "HiddenService",
    "BufferSegment",
    # Segments
    "Ip4",
    "Ip6",
    "Tcp",
    "Udp",
    "Dccp",
    "Sctp",
    "Dns",
    "Dns4",
    "Dns6",
    "Dnsaddr",
    "Ip6zone",
    "Onion",
    "Onion3",
    "Garlic32",
    "Garlic64",
    "P2p",
    "Unix",
    "Utp",
    "Udt",
    "Quic",
    "Http",
    "Https",
    "Ws",
    "Wss",
    "P2pCircuit",
    "P2pWebRtcDirect",
    # Registry
    "SEGMENT_TYPES",
    "lookup_name",
    "lookup_code",
]
