"""Models for funding service."""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from web3 import Web3

from gas_funder.core.exceptions.base import ConfigurationError
from gas_funder.infra.config.settings import Settings


USD_PLACEHOLDER = "$?"
NETWORK_PLACEHOLDER = "{{NETWORK}}"


def format_native(amount_wei: int) -> str:
    """Render a wei amount in whole native units without trailing zeros."""
    value = Web3.from_wei(amount_wei, "ether")
    return format(value.normalize(), "f") if value else "0"


def format_gwei(amount_wei: int) -> str:
    value = Web3.from_wei(amount_wei, "gwei")
    return format(value.normalize(), "f") if value else "0"


class FundingMode(str, Enum):
    """How the amount to send is derived from the required cost."""
    ABSOLUTE = "absolute"
    DIFFERENCE = "diff"

    @classmethod
    def from_flag(cls, flag: Optional[str]) -> "FundingMode":
        # Only the literal "diff" selects difference mode
        return cls.DIFFERENCE if flag == cls.DIFFERENCE.value else cls.ABSOLUTE


class FundingRequest(BaseModel):
    """Request model for one funding run."""
    network: str = Field(..., description="Network name, e.g. eth-mainnet")
    gas_amount: int = Field(..., gt=0, description="Gas units to pay for")
    receiver: str = Field(..., description="Account to fund")
    mode: FundingMode = FundingMode.ABSOLUTE


class NetworkInfo(BaseModel):
    """Static metadata for a supported network."""
    model_config = ConfigDict(frozen=True)

    name: str
    chain_id: int
    native_token_symbol: str
    human_readable_name: Optional[str] = None


class FundingConfig(BaseModel):
    """Immutable process configuration handed to the funding service."""
    model_config = ConfigDict(frozen=True)

    private_key: SecretStr
    rpc_url: str
    dry_run: bool = False
    grace_delay_seconds: float = Field(default=10.0, ge=0)
    tx_receipt_timeout: float = 300.0

    @classmethod
    def from_settings(cls, settings: Settings, network: str) -> "FundingConfig":
        """
        Build the run configuration from environment settings.

        Args:
            settings: Loaded application settings
            network: Network name substituted into PROVIDER_URL_TEMPLATE

        Raises:
            ConfigurationError: If the private key or the RPC endpoint is missing
        """
        if not settings.PRIVATE_KEY:
            raise ConfigurationError("PRIVATE_KEY is not set")

        if settings.RPC:
            rpc_url = settings.RPC
        elif settings.PROVIDER_URL_TEMPLATE:
            rpc_url = settings.PROVIDER_URL_TEMPLATE.replace(NETWORK_PLACEHOLDER, network)
        else:
            raise ConfigurationError("Neither RPC nor PROVIDER_URL_TEMPLATE is set")

        return cls(
            private_key=SecretStr(settings.PRIVATE_KEY),
            rpc_url=rpc_url,
            dry_run=settings.dry_run,
            grace_delay_seconds=settings.GRACE_DELAY_SECONDS,
            tx_receipt_timeout=settings.TX_RECEIPT_TIMEOUT,
        )


class PriceQuote(BaseModel):
    """Native coin price in USD, or unavailable when the lookup failed."""
    model_config = ConfigDict(frozen=True)

    symbol: Optional[str] = None
    usd_price: Optional[Decimal] = None

    @classmethod
    def unavailable(cls, symbol: Optional[str] = None) -> "PriceQuote":
        return cls(symbol=symbol, usd_price=None)

    @property
    def available(self) -> bool:
        return self.usd_price is not None

    def format_price(self) -> str:
        return USD_PLACEHOLDER if self.usd_price is None else f"${self.usd_price}"

    def format_usd(self, amount_wei: int) -> str:
        if self.usd_price is None:
            return USD_PLACEHOLDER
        value = Web3.from_wei(amount_wei, "ether") * self.usd_price
        return f"${value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


class CostEstimate(BaseModel):
    """Native currency needed to pay for the requested gas."""
    model_config = ConfigDict(frozen=True)

    gas_price: int = Field(..., ge=0)
    gas_amount: int = Field(..., ge=0)

    @property
    def required_cost(self) -> int:
        return self.gas_price * self.gas_amount


class DecisionKind(str, Enum):
    INSUFFICIENT_BALANCE = "insufficient_balance"
    ALREADY_FUNDED = "already_funded"
    SEND = "send"


class FundingDecision(BaseModel):
    """Exactly one terminal outcome of the funding checks."""
    model_config = ConfigDict(frozen=True)

    kind: DecisionKind
    required_cost: int = Field(..., ge=0)
    shortfall: int = Field(default=0, ge=0)
    amount_to_send: int = Field(default=0, ge=0)

    @classmethod
    def insufficient(cls, required_cost: int, funder_balance: int) -> "FundingDecision":
        return cls(
            kind=DecisionKind.INSUFFICIENT_BALANCE,
            required_cost=required_cost,
            shortfall=required_cost - funder_balance,
        )

    @classmethod
    def already_funded(cls, required_cost: int) -> "FundingDecision":
        return cls(kind=DecisionKind.ALREADY_FUNDED, required_cost=required_cost)

    @classmethod
    def send(cls, required_cost: int, amount_to_send: int) -> "FundingDecision":
        return cls(
            kind=DecisionKind.SEND,
            required_cost=required_cost,
            amount_to_send=amount_to_send,
        )


class TransactionOutcome(BaseModel):
    """Submitted transfer and its receipt."""
    tx_hash: str
    confirmed: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


class FundingResult(BaseModel):
    """Everything a funding run produced."""
    network: NetworkInfo
    funder_address: str
    receiver: str
    mode: FundingMode
    chain_id: int
    price: PriceQuote
    cost: CostEstimate
    decision: FundingDecision
    dry_run: bool = False
    transaction: Optional[TransactionOutcome] = None

    @property
    def sent(self) -> bool:
        return self.transaction is not None
