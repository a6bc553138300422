"""Thin async wrapper around the node JSON-RPC interface."""

from typing import Any, Awaitable, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address
from web3 import AsyncWeb3, Web3

from gas_funder.core.exceptions.base import ConfigurationError, NodeError, TransactionFailedError
from gas_funder.core.logger.logger import get_logger
from .models import FundingConfig, TransactionOutcome

logger = get_logger(__name__)


def normalize_address(address: str) -> str:
    """Checksum valid hex addresses; leave anything else for the node to reject."""
    if is_address(address):
        return Web3.to_checksum_address(address)
    return address


class NodeClient:
    """Node collaborator bound to the funding account. Errors are never retried."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        tx_receipt_timeout: float = 300.0,
        web3: Optional[AsyncWeb3] = None
    ):
        try:
            self.account: LocalAccount = Account.from_key(private_key)
        except Exception as e:
            raise ConfigurationError("PRIVATE_KEY is not a valid private key") from e

        self.rpc_url = rpc_url
        self.tx_receipt_timeout = tx_receipt_timeout
        self.w3 = web3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))

    @classmethod
    def from_config(cls, config: FundingConfig) -> "NodeClient":
        return cls(
            rpc_url=config.rpc_url,
            private_key=config.private_key.get_secret_value(),
            tx_receipt_timeout=config.tx_receipt_timeout,
        )

    @property
    def address(self) -> str:
        return self.account.address

    async def _call(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except NodeError:
            raise
        except Exception as e:
            logger.debug(f"RPC {operation} failed", extra={"rpc_url": self.rpc_url, "error": str(e)})
            raise NodeError(operation, str(e) or type(e).__name__) from e

    async def get_chain_id(self) -> int:
        return await self._call("get_chain_id", self.w3.eth.chain_id)

    async def get_gas_price(self) -> int:
        return await self._call("get_gas_price", self.w3.eth.gas_price)

    async def get_balance(self, address: str) -> int:
        return await self._call("get_balance", self.w3.eth.get_balance(normalize_address(address)))

    async def send_transaction(self, to: str, value: int, gas_price: int) -> str:
        """
        Sign and submit a legacy native transfer from the funding account.

        Args:
            to: Receiver address
            value: Amount in wei
            gas_price: Gas price in wei

        Returns:
            Transaction hash as 0x-prefixed hex
        """
        transaction = {
            "from": self.address,
            "to": normalize_address(to),
            "value": value,
            "gasPrice": gas_price,
        }

        transaction["nonce"] = await self._call(
            "get_transaction_count",
            self.w3.eth.get_transaction_count(self.address, "pending")
        )
        transaction["chainId"] = await self.get_chain_id()
        transaction["gas"] = await self._call("estimate_gas", self.w3.eth.estimate_gas(transaction))

        try:
            signed_txn = self.account.sign_transaction(transaction)
        except Exception as e:
            raise NodeError("sign_transaction", str(e)) from e

        tx_hash = await self._call("send_transaction", self.w3.eth.send_raw_transaction(signed_txn.raw_transaction))
        return Web3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> TransactionOutcome:
        """
        Block until the transaction is mined.

        Raises:
            TransactionFailedError: If the receipt reports a reverted transaction
        """
        receipt = await self._call(
            "wait_for_receipt",
            self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_receipt_timeout)
        )

        if receipt["status"] != 1:
            raise TransactionFailedError(tx_hash, details={"block_number": receipt.get("blockNumber")})

        return TransactionOutcome(
            tx_hash=tx_hash,
            confirmed=True,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )
