"""
Tests for the individual protocol segments: text grammar, binary layout and
payload validation.
"""

import ipaddress

import pytest

from multiformats import multicodec
from multiformats.errors import BadAddr, BadInput, DecodeError, Invalid
from multiformats.multiaddr import protocols
from multiformats.multiaddr.peer import PeerId
from multiformats.multiaddr.protocols import (
    Dccp, Dns, Dns4, Dns6, Dnsaddr, Garlic32, Garlic64, Http, Ip4, Ip6, Ip6zone,
    Onion, Onion3, P2p, P2pCircuit, Quic, Sctp, Segment, Tcp, Udp, Unix, Ws,
    Wss,
)


ONION_LABEL = "timaq4ygg2iegci7"
ONION_HASH = bytes.fromhex("9a18087306369043091f")
ONION3_LABEL = "vww6ybal4bd7szmgncyruucpgfkqahzddi37ktceo3ah7ngmcopnpyyd"
GARLIC32_LABEL = "566niximlxdzpanmn4qouucvua3k7neniwss47li5r6ugoertzuq"

PEER_B58 = "QmaozNR7DZHQK1ZcU9p7QdrshMvXqWK6gpu5rmrkPdT3L4"
PEER_CID = "bafzbeifzjut3te2nhyekklss27nh3k72ysco7y32koao5eei66wof36n5e"
PEER_BYTES = bytes.fromhex(
    "1220b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
)


def roundtrip(segment: Segment) -> None:
    """Binary and text forms both reproduce the segment."""
    data = segment.encode()
    code, rest = multicodec.Multicodec.decode(data)
    assert code.code == segment.CODE
    kind = protocols.lookup_code(code.code)
    assert kind.decode(rest) == (segment, b"")

    tokens = segment.to_text().split("/")[1:]
    assert protocols.lookup_name(tokens[0]) is type(segment)
    assert kind.from_text(tokens[1:]) == (segment, [])


# =============================================================================
# IP ADDRESSES
# =============================================================================

class TestIp:
    """IPv4 and IPv6 address segments."""

    def test_ip4(self):
        seg, rest = Ip4.from_text(["127.0.0.1", "tcp", "80"])
        assert seg.to_addr() == ipaddress.IPv4Address("127.0.0.1")
        assert rest == ["tcp", "80"]
        assert seg.encode() == b"\x04\x7f\x00\x00\x01"
        assert seg.to_text() == "/ip4/127.0.0.1"
        roundtrip(seg)

    def test_ip6(self):
        seg, _ = Ip6.from_text(["2001:db8::1"])
        assert seg.encode() == b"\x29" + ipaddress.IPv6Address("2001:db8::1").packed
        assert seg.to_text() == "/ip6/2001:db8::1"
        roundtrip(seg)

    def test_ip6_canonical_text(self):
        """Text renders in compressed form."""
        seg, _ = Ip6.from_text(["0:0:0:0:0:0:0:1"])
        assert seg.to_text() == "/ip6/::1"

    @pytest.mark.parametrize("token", ["256.0.0.1", "1.2.3", "::1", "", "01.2.3.4"])
    def test_ip4_bad(self, token):
        with pytest.raises(BadAddr):
            Ip4.from_text([token])

    @pytest.mark.parametrize("token", ["1.2.3.4", "::g", "fe80::1%eth0", ""])
    def test_ip6_bad(self, token):
        with pytest.raises(BadAddr):
            Ip6.from_text([token])

    def test_missing_value(self):
        with pytest.raises(BadAddr):
            Ip4.from_text([])

    def test_truncated(self):
        with pytest.raises(DecodeError):
            Ip4.decode(b"\x7f\x00\x00")
        with pytest.raises(DecodeError):
            Ip6.decode(b"\x00" * 15)

    def test_wrong_type(self):
        with pytest.raises(Invalid):
            Ip4(ipaddress.IPv6Address("::1"))


# =============================================================================
# PORTS
# =============================================================================

class TestPorts:
    """tcp, udp, dccp and sctp carry a 16-bit big-endian port."""

    @pytest.mark.parametrize("kind", [Tcp, Udp, Dccp, Sctp])
    def test_round_trip(self, kind):
        for port in (0, 1, 4001, 65535):
            roundtrip(kind(port))

    def test_layout(self):
        assert Tcp(4001).encode() == b"\x06\x0f\xa1"
        assert Udp(53).encode() == b"\x91\x02\x00\x35"

    @pytest.mark.parametrize("token", ["65536", "-1", "+80", "8o", "", "١٢"])
    def test_bad_text(self, token):
        with pytest.raises(BadAddr):
            Tcp.from_text([token])

    def test_out_of_range_value(self):
        with pytest.raises(Invalid):
            Udp(70000)

    def test_truncated(self):
        with pytest.raises(DecodeError):
            Tcp.decode(b"\x0f")


# =============================================================================
# NAMES
# =============================================================================

class TestNames:
    """dns family and ip6zone carry a length-prefixed utf-8 name."""

    @pytest.mark.parametrize("kind", [Dns, Dns4, Dns6, Dnsaddr, Ip6zone])
    def test_round_trip(self, kind):
        roundtrip(kind("example.com"))

    def test_layout(self):
        assert Dns4("a.io").encode() == b"\x36\x04a.io"

    def test_unicode(self):
        seg = Dns("bücher.example")
        assert seg.encode() == b"\x35\x0f" + "bücher.example".encode("utf-8")
        roundtrip(seg)

    def test_empty_name(self):
        with pytest.raises(BadAddr):
            Dns4.from_text([""])

    def test_bad_utf8(self):
        with pytest.raises(DecodeError):
            Dns.decode(b"\x02\xff\xfe")

    def test_short_buffer(self):
        with pytest.raises(DecodeError):
            Dnsaddr.decode(b"\x10abc")

    @pytest.mark.parametrize("raw", [b"\x00", b"\x03a/b"])
    def test_decode_rejects_unrenderable(self, raw):
        """An empty name or one holding a slash has no text form."""
        with pytest.raises(DecodeError):
            Dns4.decode(raw)


# =============================================================================
# TOR
# =============================================================================

class TestOnion:
    """Onion services: base32 label plus port."""

    def test_parse(self):
        seg, rest = Onion.from_text([f"{ONION_LABEL}:80"])
        assert seg == Onion(ONION_HASH, 80)
        assert rest == []
        assert seg.to_text() == f"/onion/{ONION_LABEL}:80"
        assert seg.encode() == b"\xbc\x03" + ONION_HASH + b"\x00\x50"
        roundtrip(seg)

    def test_upper_case_label(self):
        seg, _ = Onion.from_text([f"{ONION_LABEL.upper()}:80"])
        assert seg.to_text() == f"/onion/{ONION_LABEL}:80"

    @pytest.mark.parametrize("port", ["0", "65536", "", "x"])
    def test_bad_port(self, port):
        with pytest.raises(BadAddr):
            Onion.from_text([f"{ONION_LABEL}:{port}"])

    @pytest.mark.parametrize("token", [
        ONION_LABEL,
        f"{ONION_LABEL}:80:1",
        f"{ONION_LABEL[:-1]}:80",
        f"{ONION_LABEL}a:80",
        f"{ONION_LABEL[:-1]}1:80",
    ])
    def test_bad_label(self, token):
        with pytest.raises(BadAddr):
            Onion.from_text([token])

    def test_hash_size_enforced(self):
        with pytest.raises(Invalid):
            Onion(b"\x00" * 9, 80)
        with pytest.raises(Invalid):
            Onion3(b"\x00" * 10, 80)

    def test_onion3(self):
        seg, _ = Onion3.from_text([f"{ONION3_LABEL}:1234"])
        assert len(seg.hash) == 35
        assert seg.port == 1234
        assert seg.to_text() == f"/onion3/{ONION3_LABEL}:1234"
        roundtrip(seg)

    def test_truncated(self):
        with pytest.raises(DecodeError):
            Onion.decode(ONION_HASH + b"\x00")


# =============================================================================
# I2P
# =============================================================================

class TestGarlic:
    """i2p addresses and their character-length rules."""

    def test_garlic32(self):
        seg, _ = Garlic32.from_text([GARLIC32_LABEL])
        assert len(seg.addr) == 32
        assert seg.to_text() == f"/garlic32/{GARLIC32_LABEL}"
        roundtrip(seg)

    @pytest.mark.parametrize("n", [51, 53, 54])
    def test_garlic32_bad_length(self, n):
        with pytest.raises(BadAddr):
            Garlic32.from_text(["a" * n])

    def test_garlic32_long_form(self):
        """55 characters and up are accepted."""
        seg, _ = Garlic32.from_text(["a" * 56])
        assert seg.addr == b"\x00" * 35

    def test_garlic64_boundary(self):
        with pytest.raises(BadAddr):
            Garlic64.from_text(["A" * 515])
        seg, _ = Garlic64.from_text(["A" * 516])
        assert seg.addr == b"\x00" * 387
        assert seg.to_text() == "/garlic64/" + "A" * 516
        roundtrip(seg)

    def test_garlic64_upper_bound(self):
        Garlic64.from_text(["A" * 616])
        with pytest.raises(BadAddr):
            Garlic64.from_text(["A" * 620])

    def test_garlic64_alphabet(self):
        """'-' and '~' replace '+' and '/'."""
        token = "-~" * 258
        seg, _ = Garlic64.from_text([token])
        assert seg.to_text() == "/garlic64/" + token
        with pytest.raises(BadAddr):
            Garlic64.from_text(["A" * 515 + "!"])
        with pytest.raises(BadAddr):
            Garlic64.from_text(["A" * 515 + "+"])
        with pytest.raises(BadAddr):
            Garlic64.from_text(["A" * 515 + "/"])

    def test_garlic32_lower_case_only(self):
        with pytest.raises(BadAddr):
            Garlic32.from_text(["A" * 52])
        with pytest.raises(BadAddr):
            Garlic32.from_text([GARLIC32_LABEL.upper()])


# =============================================================================
# PATHS, PEERS, MARKERS
# =============================================================================

class TestUnix:
    """The unix path swallows every remaining token."""

    def test_consumes_rest(self):
        seg, rest = Unix.from_text(["tmp", "p2p", "sock"])
        assert seg.to_path() == "/tmp/p2p/sock"
        assert rest == []
        assert seg.to_text() == "/unix/tmp/p2p/sock"
        roundtrip(seg)

    def test_missing(self):
        with pytest.raises(BadAddr):
            Unix.from_text([])

    def test_relative_path_rejected(self):
        with pytest.raises(DecodeError):
            Unix.decode(b"\x08tmp/sock")


class TestP2p:
    """Peer ids in legacy base58 and CID text forms."""

    def test_legacy_text(self):
        seg, _ = P2p.from_text([PEER_B58])
        assert seg.to_text() == f"/p2p/{PEER_B58}"
        assert seg.encode() == b"\xa5\x03\x22" + PEER_BYTES
        assert seg.to_peer_id() == PEER_B58

    def test_cid_text(self):
        """CID ids encode to the same bytes as the legacy form."""
        seg, _ = P2p.from_text([PEER_CID])
        assert seg.encode() == P2p.from_text([PEER_B58])[0].encode()
        assert seg.to_peer_id() == PEER_B58

    def test_binary_renders_base58(self):
        seg, rest = P2p.decode(b"\x22" + PEER_BYTES + b"\x06")
        assert seg.peer_id == PeerId.from_bytes(PEER_BYTES)
        assert rest == b"\x06"
        assert seg.to_text() == f"/p2p/{PEER_B58}"

    def test_text_is_lazy(self):
        """Malformed ids parse, and fail once converted."""
        seg, _ = P2p.from_text(["Qm0000"])
        with pytest.raises(BadInput):
            seg.encode()

    def test_wrong_cid_codec(self):
        from multiformats.multibase import Multibase
        text = Multibase.with_base("base32", b"\x01\x70" + PEER_BYTES).to_text()
        with pytest.raises(Invalid):
            P2p.from_text([text])[0].encode()

    def test_peer_id_forms(self):
        with pytest.raises(Invalid):
            PeerId()
        with pytest.raises(Invalid):
            PeerId(text=PEER_B58, binary=PEER_BYTES)
        assert PeerId.from_text(PEER_CID).normalize() == PeerId.from_bytes(PEER_BYTES)
        assert PeerId.from_bytes(PEER_BYTES).to_multihash().to_codec().name == "sha2-256"


class TestMarkers:
    """Marker protocols have no payload."""

    @pytest.mark.parametrize("kind", [Quic, Http, Ws, Wss, P2pCircuit])
    def test_round_trip(self, kind):
        seg = kind()
        assert seg.to_text() == f"/{kind.NAME}"
        assert seg.encode() == multicodec.Multicodec(kind.CODE).encode()
        roundtrip(seg)

    def test_consumes_nothing(self):
        assert Ws.from_text(["tcp", "1"]) == (Ws(), ["tcp", "1"])

    def test_distinct(self):
        assert Ws() != Wss()


class TestRegistry:
    """Name and code lookup."""

    def test_every_type_registered(self):
        for kind in protocols.SEGMENT_TYPES:
            assert protocols.lookup_name(kind.NAME) is kind
            assert protocols.lookup_code(kind.CODE) is kind
            assert multicodec.lookup_code(kind.CODE).name == kind.NAME

    def test_ipfs_alias(self):
        assert protocols.lookup_name("ipfs") is P2p

    def test_unknown(self):
        assert protocols.lookup_name("ip") is None
        assert protocols.lookup_code(0x55) is None
