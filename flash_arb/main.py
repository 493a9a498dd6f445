# flash_arb/main.py
"""
Flash Loan Arbitrage Receiver - Entry Point

Run with: python -m flash_arb.main

MODES:
1. simulate: run one borrow -> swap -> swap -> repay cycle on an in-process host
2. encode: print the hex params blob for a planned cycle
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from flash_arb.config import LOG_LEVEL, LOG_TO_FILE
from flash_arb.connectors import HostLendingPool, HostRouter, StaticProviderResolver
from flash_arb.errors import FlashArbError, ParamsDecodeError
from flash_arb.events import LoanExecuted
from flash_arb.host import HostChain
from flash_arb.params import ExecutionRequest
from flash_arb.system import FlashArbSystem

logger = logging.getLogger(__name__)

# =============================================================================
# SIMULATION ACCOUNTS
# =============================================================================

OWNER = "0x00000000000000000000000000000000000000A1"
RECEIVER = "0x00000000000000000000000000000000000000A2"
POOL = "0x00000000000000000000000000000000000000B1"
PROVIDER = "0x00000000000000000000000000000000000000B2"
ROUTER_1 = "0x00000000000000000000000000000000000000C1"
ROUTER_2 = "0x00000000000000000000000000000000000000C2"
TOKEN_B = "0x00000000000000000000000000000000000000D2"

SEED_LIQUIDITY = 10**24


def setup_logging(level: str = LOG_LEVEL) -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    if LOG_TO_FILE:
        log_dir = Path(__file__).parent.parent / "logs"
        log_dir.mkdir(exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / f"flash_arb_{datetime.now().strftime('%Y%m%d')}.log")
        )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s | %(levelname)-8s | %(message)s',
        handlers=handlers,
    )


# =============================================================================
# MODES
# =============================================================================

def run_simulation(args: argparse.Namespace) -> FlashArbSystem:
    """
    Deploy a receiver, a pool and two venues on a fresh host, then run
    one cycle borrowing the wrapped native asset.
    """
    host = HostChain()
    asset = host.wrapped_native

    pool = HostLendingPool(host, POOL, fee_bps=args.fee_bps)
    router1 = HostRouter(host, ROUTER_1)
    router2 = HostRouter(host, ROUTER_2)
    for contract in (pool, router1, router2):
        host.deploy(contract)

    host.mint(asset, POOL, SEED_LIQUIDITY)
    host.mint(TOKEN_B, ROUTER_1, SEED_LIQUIDITY)
    host.mint(asset, ROUTER_2, SEED_LIQUIDITY)

    router1.set_rate(asset, TOKEN_B, args.leg1_out, args.amount)
    router2.set_rate(TOKEN_B, asset, args.leg2_out, args.leg1_out)

    system = FlashArbSystem(host, RECEIVER, OWNER)
    system.update_provider(OWNER, StaticProviderResolver(PROVIDER, POOL))
    system.set_router(OWNER, ROUTER_1, True)
    system.set_router(OWNER, ROUTER_2, True)
    system.set_tokens(OWNER, [asset, TOKEN_B], True)

    request = ExecutionRequest(
        venue1=ROUTER_1,
        venue2=ROUTER_2,
        path1=[asset, TOKEN_B],
        path2=[TOKEN_B, asset],
        min_out1=args.min_out1,
        min_out2=args.min_out2,
        min_profit=args.min_profit,
        unwrap_to_native=args.unwrap,
        originator=OWNER,
    )

    system.start(OWNER, asset, args.amount, request)

    executed = host.events.of_type(LoanExecuted)[-1]
    logger.info(
        f"Profit {executed.profit} | ledger[{asset}]={system.ledger.balance_of(asset)} "
        f"| native={system.ledger.native}"
    )
    return system


def encode_params(args: argparse.Namespace) -> str:
    request = ExecutionRequest(
        venue1=args.venue1,
        venue2=args.venue2,
        path1=_split(args.path1),
        path2=_split(args.path2),
        min_out1=args.min_out1,
        min_out2=args.min_out2,
        min_profit=args.min_profit,
        unwrap_to_native=args.unwrap,
        originator=args.originator,
    )
    return "0x" + request.encode().hex()


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


# =============================================================================
# ENTRY POINT
# =============================================================================

def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Flash Loan Arbitrage Receiver")
    parser.add_argument(
        "--mode",
        choices=["simulate", "encode"],
        default="simulate",
        help="simulate (one cycle on an in-process host) or encode (print params blob)",
    )
    parser.add_argument("--amount", type=_positive_int, default=1000, help="Principal in base units")
    parser.add_argument("--fee-bps", type=_non_negative_int, default=30, help="Pool premium in bps")
    parser.add_argument("--leg1-out", type=_positive_int, default=1100, help="Leg 1 output for the full principal")
    parser.add_argument("--leg2-out", type=_positive_int, default=1010, help="Leg 2 output for the full leg 1 output")
    parser.add_argument("--min-out1", type=_non_negative_int, default=1050)
    parser.add_argument("--min-out2", type=_non_negative_int, default=990)
    parser.add_argument("--min-profit", type=_non_negative_int, default=5)
    parser.add_argument("--unwrap", action="store_true", help="Book wrapped native profit as native")

    parser.add_argument("--venue1", help="encode: leg 1 router")
    parser.add_argument("--venue2", help="encode: leg 2 router")
    parser.add_argument("--path1", help="encode: comma-separated leg 1 path")
    parser.add_argument("--path2", help="encode: comma-separated leg 2 path")
    parser.add_argument("--originator", default=OWNER, help="encode: originator address")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()

    if args.mode == "encode":
        if not all((args.venue1, args.venue2, args.path1, args.path2)):
            parser.error("encode needs --venue1, --venue2, --path1 and --path2")
        print(encode_params(args))
        return 0

    try:
        run_simulation(args)
    except (FlashArbError, ParamsDecodeError) as e:
        logger.error(f"❌ Cycle reverted: {e}")
        return 1

    logger.info("✅ Simulation complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
