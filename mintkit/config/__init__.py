"""
SDK Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List, Optional


class Settings(BaseSettings):
    """SDK settings from environment"""

    # ======================
    # Logging
    # ======================
    LOG_LEVEL: str = "INFO"

    # ======================
    # RPC / Reads
    # ======================
    # JSON map of network id -> ordered list of read-only RPC urls,
    # e.g. RPC_URLS='{"1": ["https://eth.llamarpc.com"]}'
    RPC_URLS: Dict[int, List[str]] = {}
    READ_TIMEOUT_SECONDS: float = 4.0
    NETWORKS_FILE: Optional[str] = None

    # ======================
    # Gas
    # ======================
    # Percentage applied to raw estimates when no buffer is given (120 = +20%)
    DEFAULT_GAS_MULTIPLIER: int = 120
    APPROVE_GAS_FALLBACK: int = 60_000
    MINT_GAS_FALLBACK: int = 200_000

    # ======================
    # Execution
    # ======================
    DEFAULT_CONFIRMATIONS: int = 1
    TX_RECEIPT_TIMEOUT_SECONDS: float = 300.0
    NETWORK_SWITCH_POLL_INTERVAL: float = 0.5
    NETWORK_SWITCH_MAX_ATTEMPTS: int = 20

    # ======================
    # Allowlist API
    # ======================
    ALLOWLIST_API_BASE_URL: str = "https://apps.api.manifoldxyz.dev/public"
    ALLOWLIST_TIMEOUT_SECONDS: float = 10.0

    # ======================
    # USD prices
    # ======================
    FETCH_USD_PRICES: bool = False
    PRICE_API_BASE_URL: str = "https://api.coinbase.com/v2"
    PRICE_CACHE_TTL: int = 60

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MINTKIT_",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
