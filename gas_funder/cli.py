"""
Command line entry point.

    fund-gas <network> <gas_amount> <receiver> [diff]

Sends the funder's native currency to <receiver> so it can pay for
<gas_amount> gas units at the current gas price. With "diff", only the part
the receiver is missing is sent.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from gas_funder.core.exceptions.handler import EXIT_OK, handle_error
from gas_funder.core.logger.logger import get_logger
from gas_funder.core.service.funding.funding_service import FundingService
from gas_funder.core.service.funding.models import FundingConfig, FundingMode, FundingRequest, FundingResult
from gas_funder.core.service.funding.networks import get_network_by_name
from gas_funder.core.service.funding.node_client import NodeClient
from gas_funder.core.service.funding.price_service import PriceService
from gas_funder.infra.config.settings import Settings, get_settings

logger = get_logger(__name__)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fund-gas",
        description="Fund an account with enough native currency to pay for a given amount of gas.",
        epilog=(
            "Environment: PRIVATE_KEY, RPC or PROVIDER_URL_TEMPLATE "
            "(with {{NETWORK}} placeholder), DRY_RUN (if set, no tx is sent)."
        ),
    )
    parser.add_argument("network", help="Network name, e.g. eth-mainnet")
    parser.add_argument(
        "gas_amount",
        type=positive_int,
        help="Gas units to fund, e.g. 50000000 for 100 txs of 500k gas each",
    )
    parser.add_argument("receiver", help="Address of the account to fund")
    parser.add_argument(
        "mode",
        nargs="?",
        default=None,
        help='Pass "diff" to send only the amount the receiver is missing',
    )
    return parser


def parse_request(argv: Optional[List[str]] = None) -> FundingRequest:
    args = build_parser().parse_args(argv)
    return FundingRequest(
        network=args.network,
        gas_amount=args.gas_amount,
        receiver=args.receiver,
        mode=FundingMode.from_flag(args.mode),
    )


async def run(request: FundingRequest, settings: Settings) -> FundingResult:
    """Resolve configuration and collaborators, then run one funding decision."""
    network = get_network_by_name(request.network)
    config = FundingConfig.from_settings(settings, network.name)

    service = FundingService(
        config=config,
        node_client=NodeClient.from_config(config),
        price_service=PriceService(api_url=settings.PRICE_API_URL, timeout=settings.HTTP_PRICE_TIMEOUT),
    )
    return await service.fund(request)


def main(argv: Optional[List[str]] = None) -> int:
    request = parse_request(argv)
    logger.info(
        f"requested: network {request.network}, gas amount: {request.gas_amount} "
        f"for receiver: {request.receiver}"
        f"{' only difference' if request.mode == FundingMode.DIFFERENCE else ''}"
    )

    try:
        asyncio.run(run(request, get_settings()))
    except (Exception, KeyboardInterrupt) as e:
        return handle_error(e)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
