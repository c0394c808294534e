from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Ledger JSON-RPC endpoint (liveness + balance only)
    RPC_ENDPOINT: str = "https://solana.publicnode.com"
    RPC_TIMEOUT_SECONDS: float = 30.0

    # AMM bridge: HTTP sidecar wrapping the DLMM SDK and the signing key
    AMM_BRIDGE_URL: str = "http://localhost:8787"
    AMM_BRIDGE_TIMEOUT_SECONDS: float = 90.0

    # Managed wallet — empty means startup aborts
    WALLET_ADDRESS: str = ""

    # Pools making up the chain, any order (sorted by bin range after discovery)
    POOL_ADDRESSES: list[str] = []

    # Monitoring
    PRICE_CHECK_INTERVAL_MS: int = 3000
    PERIODIC_CHECK_INTERVAL_MS: int = 3000
    POST_REMOVE_SETTLE_MS: int = 2000

    # Retry policy shared by the connection and bridge adapters
    RETRY_MAX_RETRIES: int = 3
    RETRY_INITIAL_DELAY_MS: int = 1000
    RETRY_BACKOFF_FACTOR: float = 2.0
    MAX_POOL_FETCH_RETRIES: int = 3
    MAX_POSITION_FETCH_RETRIES: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str | None = "./logs/dlmm-manager.log"

    # App
    APP_NAME: str = "DLMM Chain Pools Manager"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False  # forces DEBUG log level when True


settings = Settings()
