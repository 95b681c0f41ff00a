"""Command-line interface for resolving token prices.

Examples:
  pricer price 0x64aa3364f17a4d01c6f1751fd97c2bd3d7e7f1d5 \\
      --venues venues/ethereum.json --rpc-url https://eth.llamarpc.com --block 19000000

  pricer liquidity 0x88051b0eea095007d3bef21ab287be961f3d8598 \\
      --venues venues/ethereum.json --wallet 0x18a3...58f5

  pricer venues --venues venues/ethereum.json
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from pricer import __version__
from pricer.config import DEFAULT_MAX_DEPTH, CycleGuard, build_pricing_config, load_venue_set
from pricer.errors import ConfigurationError, PricingError
from pricer.liquidity import get_owned_liquidity
from pricer.models.types import is_valid_address, normalize_address
from pricer.routing.router import PriceRouter

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


def _address(value: str) -> str:
    addr = normalize_address(value)
    if not is_valid_address(addr):
        raise argparse.ArgumentTypeError(f"invalid address: {value}")
    return addr


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pricer",
        description="Resolve USD prices of on-chain tokens across liquidity venues",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--venues",
        type=Path,
        default=os.environ.get("PRICER_VENUES_FILE"),
        help="Venue configuration JSON (default: $PRICER_VENUES_FILE)",
    )

    chain = argparse.ArgumentParser(add_help=False)
    chain.add_argument(
        "--rpc-url",
        type=str,
        default=os.environ.get("PRICER_RPC_URL"),
        help="JSON-RPC endpoint (default: $PRICER_RPC_URL)",
    )
    chain.add_argument(
        "--block",
        type=int,
        default=None,
        help="Block height (default: latest)",
    )
    chain.add_argument(
        "--cycle-guard",
        type=str,
        choices=[g.value for g in CycleGuard],
        default=CycleGuard.PATH.value,
        help="Cycle avoidance mode (default: path)",
    )
    chain.add_argument(
        "--max-depth",
        type=int,
        default=os.environ.get("PRICER_MAX_DEPTH", str(DEFAULT_MAX_DEPTH)),
        help=f"Maximum nested lookups (default: $PRICER_MAX_DEPTH or {DEFAULT_MAX_DEPTH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    price = subparsers.add_parser("price", parents=[common, chain], help="Price a token")
    price.add_argument("token", type=_address, help="Token address")

    liquidity = subparsers.add_parser(
        "liquidity", parents=[common, chain], help="Value wallet holdings in a venue"
    )
    liquidity.add_argument("venue_id", type=str, help="Venue id (pool address, pool id, ...)")
    liquidity.add_argument(
        "--wallet",
        type=_address,
        action="append",
        required=True,
        help="Wallet address (repeatable)",
    )
    liquidity.add_argument(
        "--exclude",
        type=_address,
        action="append",
        default=[],
        help="Token to exclude from the valuation (repeatable)",
    )

    subparsers.add_parser("venues", parents=[common], help="List configured venues")
    return parser


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )


def _make_router(args: argparse.Namespace, reader: ChainReader | None) -> PriceRouter:
    if reader is None:
        if not args.rpc_url:
            raise ConfigurationError("--rpc-url or PRICER_RPC_URL is required")
        from pricer.chain.web3_reader import Web3ChainReader

        reader = Web3ChainReader(args.rpc_url)
    config = build_pricing_config(
        load_venue_set(args.venues),
        reader,
        cycle_guard=CycleGuard(args.cycle_guard),
        max_depth=args.max_depth,
    )
    return PriceRouter(config)


def _cmd_price(args: argparse.Namespace, reader: ChainReader | None) -> int:
    router = _make_router(args, reader)
    block = args.block if args.block is not None else router.latest_block()
    result = router.get_price_result(args.token, block)
    if result is None:
        print(f"{args.token} @ {block}: unresolved")
        return 1
    print(f"{args.token} @ {block}: {result.price} USD (liquidity {result.liquidity})")
    return 0


def _cmd_liquidity(args: argparse.Namespace, reader: ChainReader | None) -> int:
    router = _make_router(args, reader)
    handler = router.config.handler_by_id(args.venue_id.lower())
    if handler is None:
        print(f"Unknown venue: {args.venue_id}")
        return 1

    block = args.block if args.block is not None else router.latest_block()
    records = get_owned_liquidity(handler, args.wallet, router.lookup, block, args.exclude)
    if not records:
        print(f"No holdings in {handler.get_id()} @ {block}")
        return 0
    for record in records:
        print(f"{record.wallet}: {record.value} USD")
        for token, amount in record.token_amounts.items():
            print(f"    {token}: {amount}")
    return 0


def _cmd_venues(args: argparse.Namespace) -> int:
    venue_set = load_venue_set(args.venues)
    print(f"Network: {venue_set.network}")
    for venue in venue_set.venues:
        tokens = getattr(venue, "tokens", None)
        if tokens is None:
            tokens = [getattr(venue, "asset", None) or getattr(venue, "token", None) or venue.vault]
        print(f"  {venue.kind:<18} {', '.join(tokens)}")
    return 0


def main(argv: list[str] | None = None, reader: ChainReader | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments (default: sys.argv[1:])
        reader: Chain reader to use instead of one built from --rpc-url
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.venues is None:
        parser.error("--venues or PRICER_VENUES_FILE is required")

    try:
        if args.command == "price":
            return _cmd_price(args, reader)
        if args.command == "liquidity":
            return _cmd_liquidity(args, reader)
        return _cmd_venues(args)
    except PricingError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
