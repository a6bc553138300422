from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "gas-funder"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_FORMAT: str = "text"  # text or json

    # Funder Settings
    PRIVATE_KEY: Optional[str] = None  # Private key of the funding account

    # Node Settings
    RPC: Optional[str] = None  # Takes precedence over PROVIDER_URL_TEMPLATE
    PROVIDER_URL_TEMPLATE: Optional[str] = None  # e.g. https://{{NETWORK}}.rpc.example.org
    TX_RECEIPT_TIMEOUT: float = 300.0

    # Execution Settings
    DRY_RUN: Optional[str] = None  # Any value, even empty, enables dry run
    GRACE_DELAY_SECONDS: float = 10.0

    # Price Quote Settings
    PRICE_API_URL: str = "https://api.coingecko.com/api/v3/simple/price"
    HTTP_PRICE_TIMEOUT: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def dry_run(self) -> bool:
        return self.DRY_RUN is not None

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
