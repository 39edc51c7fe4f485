"""
Multiformats: self-describing values for peer-to-peer networking.

- varint / Multicodec: the numeric code table and its wire encoding
- Multibase: text encodings that name their own base
- Multihash: digests that name their own algorithm
- Multiaddr: network addresses built from protocol segments

Usage:
    from multiformats import Multiaddr, Multihash, multicodec

    addr = Multiaddr.from_text("/ip4/127.0.0.1/tcp/4001/p2p/QmYyQSo1c1Ym7orWxLYvCrM2EmxFTANf8wXmmE7DWjhx5N")
    data = addr.encode()
    addr2, _ = Multiaddr.decode(data)

    mh = Multihash.new(multicodec.SHA2_256, b"hello world")
    str(mh)   # 'sha2-256-256-b94d27b9...'
"""

from . import multicodec, varint

# Errors
from .errors import (
    MultiformatsError,
    BadAddr,
    BadInput,
    DecodeError,
    Invalid,
    NotImplementedCodec,
)

# Configuration
from .config import Limits, DEFAULT_LIMITS

# Codecs
from .multicodec import Multicodec, Codepoint
from .multibase import Multibase, Base
from .multihash import Multihash, LazyMultihash, MultihashWriter

# Addresses
from .multiaddr import (
    Multiaddr,
    MultiaddrText,
    MultiaddrBinary,
    MultiaddrChain,
    PeerId,
    Segment,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Modules
    "multicodec",
    "varint",
    # Errors
    "MultiformatsError",
    "BadAddr",
    "BadInput",
    "DecodeError",
    "Invalid",
    "NotImplementedCodec",
    # Configuration
    "Limits",
    "DEFAULT_LIMITS",
    # Codecs
    "Multicodec",
    "Codepoint",
    "Multibase",
    "Base",
    "Multihash",
    "LazyMultihash",
    "MultihashWriter",
    # Addresses
    "Multiaddr",
    "MultiaddrText",
    "MultiaddrBinary",
    "MultiaddrChain",
    "PeerId",
    "Segment",
]
