"""Best-effort native coin price lookup against CoinGecko."""

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import httpx

from gas_funder.core.http_client import create_temp_client
from gas_funder.core.logger.logger import get_logger
from gas_funder.infra.config.settings import get_settings
from .models import PriceQuote

logger = get_logger(__name__)
settings = get_settings()


class PriceService:
    """Resolves a native coin symbol to its USD price. Never raises."""

    SYMBOL_TO_COIN_ID: Dict[str, str] = {
        "ETH": "ethereum",
        "MATIC": "matic-network",
        "POL": "polygon-ecosystem-token",
        "CELO": "celo",
        "AVAX": "avalanche-2",
        "xDAI": "xdai",
        "BNB": "binancecoin",
        "DEGEN": "degen-base",
    }

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = api_url or settings.PRICE_API_URL
        self.timeout = timeout if timeout is not None else settings.HTTP_PRICE_TIMEOUT
        self.transport = transport

    async def get_price(self, symbol: Optional[str]) -> PriceQuote:
        """
        Fetch the USD price for a native coin.

        Args:
            symbol: Native token symbol, e.g. ETH

        Returns:
            PriceQuote, unavailable on any failure
        """
        if symbol is None:
            return PriceQuote.unavailable()

        coin_id = self.SYMBOL_TO_COIN_ID.get(symbol)
        if coin_id is None:
            logger.error(f"Error fetching price: no price source for {symbol}")
            return PriceQuote.unavailable(symbol)

        client_kwargs = {}
        if self.transport is not None:
            client_kwargs["transport"] = self.transport

        try:
            async with create_temp_client(self.timeout, **client_kwargs) as client:
                response = await client.get(
                    self.api_url,
                    params={"ids": coin_id, "vs_currencies": "usd"}
                )
                response.raise_for_status()
                usd_price = Decimal(str(response.json()[coin_id]["usd"]))
        except (httpx.HTTPError, ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.error(f"Error fetching price: {e}", extra={"symbol": symbol, "coin_id": coin_id})
            return PriceQuote.unavailable(symbol)

        return PriceQuote(symbol=symbol, usd_price=usd_price)
