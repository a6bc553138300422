"""Funding service: decides how much gas money a receiver needs and sends it."""

import asyncio
from typing import Awaitable, Callable, Optional

from gas_funder.core.logger.logger import get_logger
from .models import (
    CostEstimate,
    DecisionKind,
    FundingConfig,
    FundingDecision,
    FundingMode,
    FundingRequest,
    FundingResult,
    NetworkInfo,
    PriceQuote,
    format_gwei,
    format_native,
)
from .networks import get_network_by_name
from .node_client import NodeClient, normalize_address
from .price_service import PriceService

logger = get_logger(__name__)

SEPARATOR = "=" * 48


def compute_required_cost(gas_price: int, gas_amount: int) -> int:
    """Native cost in wei of `gas_amount` units at `gas_price`. Exact, no rounding."""
    if gas_price < 0 or gas_amount < 0:
        raise ValueError("gas price and gas amount must be non-negative")
    return CostEstimate(gas_price=gas_price, gas_amount=gas_amount).required_cost


def decide(
    funder_balance: int,
    required_cost: int,
    receiver_balance: Optional[int] = None
) -> FundingDecision:
    """
    Pick the single terminal outcome for a funding run.

    Args:
        funder_balance: Funding account balance in wei
        required_cost: Cost of the requested gas in wei
        receiver_balance: Receiver balance in wei, only given in difference mode

    Returns:
        FundingDecision of kind insufficient balance, already funded or send
    """
    if funder_balance < required_cost:
        return FundingDecision.insufficient(required_cost, funder_balance)

    if receiver_balance is None:
        amount_to_send = required_cost
    else:
        amount_to_send = max(0, required_cost - receiver_balance)

    if amount_to_send <= 0:
        return FundingDecision.already_funded(required_cost)

    return FundingDecision.send(required_cost, amount_to_send)


class FundingService:
    """Runs a single funding decision against one network."""

    def __init__(
        self,
        config: FundingConfig,
        node_client: NodeClient,
        price_service: Optional[PriceService] = None,
        get_network: Callable[[str], NetworkInfo] = get_network_by_name,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.config = config
        self.node = node_client
        self.price_service = price_service or PriceService()
        self.get_network = get_network
        self.sleep = sleep

    async def fund(self, request: FundingRequest) -> FundingResult:
        """
        Fund the receiver with enough native currency for the requested gas.

        Args:
            request: Network, gas amount, receiver and mode

        Returns:
            FundingResult describing the decision and any transaction sent

        Raises:
            UnknownNetworkError: If the network name is not registered
            NodeError: If any RPC call fails
        """
        network = self.get_network(request.network)
        symbol = network.native_token_symbol
        receiver = normalize_address(request.receiver)
        diff_mode = request.mode == FundingMode.DIFFERENCE

        chain_id = await self.node.get_chain_id()
        logger.info(f"Connected to chain with id {chain_id}")
        if chain_id != network.chain_id:
            logger.warning(
                f"Chain id {chain_id} does not match {network.name} (expected {network.chain_id})",
                extra={"network": network.name, "expected_chain_id": network.chain_id, "chain_id": chain_id}
            )

        price = await self.price_service.get_price(symbol)
        logger.info(f"1 {symbol} = {price.format_price()}")

        funder_balance = await self.node.get_balance(self.node.address)
        logger.info(
            f"funder's address: {self.node.address}, balance: {format_native(funder_balance)} {symbol} "
            f"({price.format_usd(funder_balance)})"
        )

        gas_price = await self.node.get_gas_price()
        cost = CostEstimate(gas_price=gas_price, gas_amount=request.gas_amount)
        required_cost = cost.required_cost
        logger.info(f"Gas price: {format_gwei(gas_price)} gwei")
        logger.info(
            f"Estimated cost on {network.name} at {format_gwei(gas_price)} gwei: "
            f"{format_native(required_cost)} {symbol} ({price.format_usd(required_cost)})"
        )

        receiver_balance = None
        if diff_mode and funder_balance >= required_cost:
            receiver_balance = await self.node.get_balance(receiver)
            logger.info(f"Receiver's balance: {format_native(receiver_balance)} {symbol}")

        decision = decide(funder_balance, required_cost, receiver_balance)

        result = FundingResult(
            network=network,
            funder_address=self.node.address,
            receiver=receiver,
            mode=request.mode,
            chain_id=chain_id,
            price=price,
            cost=cost,
            decision=decision,
            dry_run=self.config.dry_run,
        )

        if decision.kind == DecisionKind.INSUFFICIENT_BALANCE:
            logger.error(
                f"### Funder's balance {format_native(funder_balance)} is not enough, missing amount: "
                f"{format_native(decision.shortfall)} {symbol} ({price.format_usd(decision.shortfall)}) ###",
                extra={"shortfall_wei": decision.shortfall, "required_cost_wei": required_cost}
            )
        elif decision.kind == DecisionKind.ALREADY_FUNDED:
            logger.info(
                f"Receiver's balance is enough to cover requested amount {format_native(required_cost)} {symbol}"
            )
        else:
            result = await self._send(result, price, symbol, gas_price)

        logger.info(SEPARATOR)
        return result

    async def _send(self, result: FundingResult, price: PriceQuote, symbol: str, gas_price: int) -> FundingResult:
        amount = result.decision.amount_to_send
        logger.info(f"Amount to send to receiver: {format_native(amount)} {symbol} ({price.format_usd(amount)})")

        if self.config.dry_run:
            logger.info("Dry run, not sending the tx", extra={"amount_wei": amount, "receiver": result.receiver})
            return result

        delay = self.config.grace_delay_seconds
        logger.warning(
            f"!!! Waiting {delay:g} seconds before sending. Interrupt with Ctrl+C if you don't want to proceed !!!"
        )
        await self.sleep(delay)

        tx_hash = await self.node.send_transaction(to=result.receiver, value=amount, gas_price=gas_price)
        logger.info(f"Sent tx: {tx_hash}...")

        outcome = await self.node.wait_for_receipt(tx_hash)
        logger.info("Tx confirmed", extra={"tx_hash": tx_hash, "block_number": outcome.block_number})

        return result.model_copy(update={"transaction": outcome})
