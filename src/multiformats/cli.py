"""
multiformats: inspect multiaddr values from the command line.

Usage:
    multiformats parse       /ip4/127.0.0.1/tcp/4001
    multiformats decode      047f000001060fa1
    multiformats split       /ip4/127.0.0.1/tcp/4001/ws
    multiformats thin-waist  /ip6/::1/udp/53
    multiformats -v parse    /ip/::1

Exit status is 0 on success, 1 when thin-waist answers false and 2 when the
input is rejected.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .errors import BadInput, MultiformatsError
from .multiaddr import Multiaddr

logger = logging.getLogger(__name__)


def cmd_parse(args: argparse.Namespace) -> int:
    addr = Multiaddr.from_text(args.address)
    print(addr.to_text())
    print(addr.encode().hex())
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    try:
        data = bytes.fromhex(args.hex)
    except ValueError as exc:
        raise BadInput(f"not hex: {args.hex!r}", stage="binary") from exc
    addr, _ = Multiaddr.decode(data)
    print(addr.to_text())
    return 0


def cmd_split(args: argparse.Namespace) -> int:
    for part in Multiaddr.from_text(args.address).split():
        print(part.to_text())
    return 0


def cmd_thin_waist(args: argparse.Namespace) -> int:
    ok = Multiaddr.from_text(args.address).is_thin_wait()
    print("true" if ok else "false")
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multiformats",
        description="Parse, decode and inspect multiaddr values",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('parse', help='Print canonical text and hex binary of a text address')
    p.add_argument('address')
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser('decode', help='Print the text form of a hex binary address')
    p.add_argument('hex')
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser('split', help='Print each segment of a text address')
    p.add_argument('address')
    p.set_defaults(func=cmd_split)

    p = sub.add_parser('thin-waist', help='Check for a bare IP address with at most one tcp/udp port')
    p.add_argument('address')
    p.set_defaults(func=cmd_thin_waist)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except MultiformatsError as err:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"error: {err}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
