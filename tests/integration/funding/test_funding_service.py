"""Integration tests for funding service."""

import logging
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from pydantic import SecretStr
from web3 import Web3

from gas_funder.core.exceptions.base import NodeError, UnknownNetworkError
from gas_funder.core.service.funding.funding_service import FundingService, compute_required_cost
from gas_funder.core.service.funding.models import (
    DecisionKind,
    FundingConfig,
    FundingMode,
    FundingRequest,
    PriceQuote,
    TransactionOutcome,
)
from gas_funder.core.service.funding.node_client import NodeClient
from gas_funder.core.service.funding.price_service import PriceService


FUNDER = Web3.to_checksum_address("0x" + "12" * 20)
RECEIVER = Web3.to_checksum_address("0x" + "ab" * 20)
TX_HASH = "0x" + "a" * 64

GAS_PRICE = Web3.to_wei(20, "gwei")
GAS_AMOUNT = 50_000_000  # at 20 gwei this costs exactly 1 native coin


def make_config(dry_run: bool = False) -> FundingConfig:
    return FundingConfig(
        private_key=SecretStr("0x" + "1" * 64),
        rpc_url="http://localhost:8545",
        dry_run=dry_run,
        grace_delay_seconds=10,
    )


@pytest.mark.asyncio
class TestFundingService:
    """Test funding decision and transfer flow."""

    @pytest.fixture
    def balances(self):
        return {FUNDER: Web3.to_wei("2", "ether"), RECEIVER: 0}

    @pytest.fixture
    def mock_node(self, balances):
        """Create mock node client."""
        node = MagicMock(spec=NodeClient)
        node.address = FUNDER
        node.get_chain_id = AsyncMock(return_value=1)
        node.get_gas_price = AsyncMock(return_value=GAS_PRICE)
        node.get_balance = AsyncMock(side_effect=lambda address: balances[address])
        node.send_transaction = AsyncMock(return_value=TX_HASH)
        node.wait_for_receipt = AsyncMock(return_value=TransactionOutcome(
            tx_hash=TX_HASH,
            confirmed=True,
            block_number=12345,
            gas_used=21000
        ))
        return node

    @pytest.fixture
    def mock_prices(self):
        """Create mock price service."""
        prices = MagicMock(spec=PriceService)
        prices.get_price = AsyncMock(return_value=PriceQuote(symbol="ETH", usd_price=Decimal("2000")))
        return prices

    @pytest.fixture
    def mock_sleep(self):
        return AsyncMock()

    def make_service(self, mock_node, mock_prices, mock_sleep, dry_run=False):
        return FundingService(
            config=make_config(dry_run=dry_run),
            node_client=mock_node,
            price_service=mock_prices,
            sleep=mock_sleep,
        )

    def make_request(self, mode=FundingMode.ABSOLUTE):
        return FundingRequest(
            network="eth-mainnet",
            gas_amount=GAS_AMOUNT,
            receiver=RECEIVER,
            mode=mode
        )

    async def test_sends_full_cost_in_absolute_mode(self, mock_node, mock_prices, mock_sleep):
        """Funder holds 2, cost is 1: exactly 1 is sent after the grace delay."""
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        result = await service.fund(self.make_request())

        assert result.cost.required_cost == Web3.to_wei("1", "ether")
        assert result.decision.kind == DecisionKind.SEND
        assert result.decision.amount_to_send == Web3.to_wei("1", "ether")
        mock_sleep.assert_awaited_once_with(10)
        mock_node.send_transaction.assert_awaited_once_with(
            to=RECEIVER,
            value=Web3.to_wei("1", "ether"),
            gas_price=GAS_PRICE
        )
        mock_node.wait_for_receipt.assert_awaited_once_with(TX_HASH)
        assert result.sent is True
        assert result.transaction.block_number == 12345

    async def test_absolute_mode_does_not_query_receiver(self, mock_node, mock_prices, mock_sleep):
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        await service.fund(self.make_request())

        mock_node.get_balance.assert_awaited_once_with(FUNDER)

    async def test_insufficient_funder_balance(self, mock_node, mock_prices, mock_sleep, balances, caplog):
        """Funder holds 0.5, cost is 1: shortfall 0.5 and nothing sent."""
        balances[FUNDER] = Web3.to_wei("0.5", "ether")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with caplog.at_level(logging.INFO):
            result = await service.fund(self.make_request(FundingMode.DIFFERENCE))

        assert result.decision.kind == DecisionKind.INSUFFICIENT_BALANCE
        assert result.decision.shortfall == Web3.to_wei("0.5", "ether")
        assert result.sent is False
        mock_node.send_transaction.assert_not_awaited()
        mock_sleep.assert_not_awaited()
        assert "missing amount: 0.5 ETH ($1000.00)" in caplog.text

    async def test_difference_mode_receiver_already_funded(self, mock_node, mock_prices, mock_sleep, balances, caplog):
        balances[RECEIVER] = Web3.to_wei("1", "ether")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with caplog.at_level(logging.INFO):
            result = await service.fund(self.make_request(FundingMode.DIFFERENCE))

        assert result.decision.kind == DecisionKind.ALREADY_FUNDED
        assert result.decision.amount_to_send == 0
        mock_node.send_transaction.assert_not_awaited()
        assert "Receiver's balance is enough" in caplog.text

    async def test_difference_mode_receiver_above_target(self, mock_node, mock_prices, mock_sleep, balances):
        balances[RECEIVER] = Web3.to_wei("5", "ether")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        result = await service.fund(self.make_request(FundingMode.DIFFERENCE))

        assert result.decision.kind == DecisionKind.ALREADY_FUNDED
        mock_node.send_transaction.assert_not_awaited()

    async def test_difference_mode_sends_only_missing_part(self, mock_node, mock_prices, mock_sleep, balances):
        balances[RECEIVER] = Web3.to_wei("0.3", "ether")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        result = await service.fund(self.make_request(FundingMode.DIFFERENCE))

        assert result.decision.amount_to_send == Web3.to_wei("0.7", "ether")
        mock_node.send_transaction.assert_awaited_once_with(
            to=RECEIVER,
            value=Web3.to_wei("0.7", "ether"),
            gas_price=GAS_PRICE
        )

    async def test_price_outage_renders_placeholder(self, mock_node, mock_prices, mock_sleep, caplog):
        mock_prices.get_price.return_value = PriceQuote.unavailable("ETH")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with caplog.at_level(logging.INFO):
            result = await service.fund(self.make_request())

        assert result.price.available is False
        assert result.decision.kind == DecisionKind.SEND
        mock_node.send_transaction.assert_awaited_once()
        assert "1 ETH = $?" in caplog.text
        assert "($?)" in caplog.text
        assert "$2000" not in caplog.text

    async def test_dry_run_logs_amount_without_sending(self, mock_node, mock_prices, mock_sleep, caplog):
        service = self.make_service(mock_node, mock_prices, mock_sleep, dry_run=True)

        with caplog.at_level(logging.INFO):
            result = await service.fund(self.make_request())

        assert result.dry_run is True
        assert result.decision.kind == DecisionKind.SEND
        assert result.sent is False
        mock_sleep.assert_not_awaited()
        mock_node.send_transaction.assert_not_awaited()
        assert "Amount to send to receiver: 1 ETH ($2000.00)" in caplog.text
        assert "Dry run, not sending the tx" in caplog.text

    async def test_chain_id_mismatch_only_warns(self, mock_node, mock_prices, mock_sleep, caplog):
        mock_node.get_chain_id.return_value = 5
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with caplog.at_level(logging.INFO):
            result = await service.fund(self.make_request())

        assert result.chain_id == 5
        assert result.sent is True
        assert "does not match eth-mainnet" in caplog.text

    async def test_unknown_network_fails_before_rpc(self, mock_node, mock_prices, mock_sleep):
        service = self.make_service(mock_node, mock_prices, mock_sleep)
        request = FundingRequest(network="no-such-net", gas_amount=1, receiver=RECEIVER)

        with pytest.raises(UnknownNetworkError):
            await service.fund(request)

        mock_node.get_chain_id.assert_not_awaited()

    async def test_gas_price_failure_is_fatal(self, mock_node, mock_prices, mock_sleep):
        mock_node.get_gas_price.side_effect = NodeError("get_gas_price", "connection refused")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with pytest.raises(NodeError):
            await service.fund(self.make_request())

        mock_node.send_transaction.assert_not_awaited()

    async def test_submission_failure_propagates(self, mock_node, mock_prices, mock_sleep):
        mock_node.send_transaction.side_effect = NodeError("send_transaction", "nonce too low")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with pytest.raises(NodeError, match="nonce too low"):
            await service.fund(self.make_request())

        mock_node.send_transaction.assert_awaited_once()
        mock_node.wait_for_receipt.assert_not_awaited()

    async def test_chain_id_failure_is_fatal(self, mock_node, mock_prices, mock_sleep):
        mock_node.get_chain_id.side_effect = NodeError("get_chain_id", "connection refused")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with pytest.raises(NodeError, match="get_chain_id"):
            await service.fund(self.make_request())

        mock_node.get_balance.assert_not_awaited()
        mock_node.send_transaction.assert_not_awaited()

    async def test_funder_balance_failure_is_fatal(self, mock_node, mock_prices, mock_sleep):
        mock_node.get_balance.side_effect = NodeError("get_balance", "timeout")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with pytest.raises(NodeError, match="get_balance"):
            await service.fund(self.make_request())

        mock_node.get_balance.assert_awaited_once_with(FUNDER)
        mock_node.get_gas_price.assert_not_awaited()
        mock_node.send_transaction.assert_not_awaited()

    async def test_receiver_balance_failure_is_fatal(self, mock_node, mock_prices, mock_sleep, balances):
        def get_balance(address):
            if address == RECEIVER:
                raise NodeError("get_balance", "rpc error")
            return balances[address]

        mock_node.get_balance.side_effect = get_balance
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with pytest.raises(NodeError, match="rpc error"):
            await service.fund(self.make_request(FundingMode.DIFFERENCE))

        mock_sleep.assert_not_awaited()
        mock_node.send_transaction.assert_not_awaited()

    async def test_receipt_failure_propagates_after_single_submission(self, mock_node, mock_prices, mock_sleep):
        mock_node.wait_for_receipt.side_effect = NodeError("wait_for_receipt", "timed out")
        service = self.make_service(mock_node, mock_prices, mock_sleep)

        with pytest.raises(NodeError, match="timed out"):
            await service.fund(self.make_request())

        mock_node.send_transaction.assert_awaited_once()
        mock_node.wait_for_receipt.assert_awaited_once_with(TX_HASH)

    async def test_cost_and_decision_agree(self, mock_node, mock_prices, mock_sleep):
        service = self.make_service(mock_node, mock_prices, mock_sleep, dry_run=True)

        result = await service.fund(self.make_request())

        assert result.cost.required_cost == compute_required_cost(GAS_PRICE, GAS_AMOUNT)
        assert result.decision.required_cost == result.cost.required_cost
