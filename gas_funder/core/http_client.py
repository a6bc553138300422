"""HTTP client setup for outbound API calls. No retries: a failed call is the caller's to handle."""

import httpx
from typing import Dict, Optional

from gas_funder.infra.config.settings import get_settings

settings = get_settings()


def get_base_headers() -> Dict[str, str]:
    return {
        "User-Agent": f"{settings.APP_NAME}/{settings.APP_VERSION}",
        "Accept": "application/json",
    }


def create_temp_client(timeout: Optional[float] = None, **kwargs) -> httpx.AsyncClient:
    """
    Create a one-off client; use it as an async context manager.

    Args:
        timeout: Seconds per request, HTTP_PRICE_TIMEOUT when omitted
        **kwargs: Additional httpx.AsyncClient arguments, e.g. transport
    """
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.HTTP_PRICE_TIMEOUT,
        headers=get_base_headers(),
        follow_redirects=False,
        **kwargs
    )
