import os
from dotenv import load_dotenv

load_dotenv()


def _float_env(name: str, default: str) -> float:
    return float(os.getenv(name, default))


class Settings:
    # Upstream shop API
    api_base_url: str = os.getenv("LEDGER_API_URL", "http://localhost:3001")
    api_timeout: float = _float_env("LEDGER_API_TIMEOUT", "10")
    api_retry_delay: float = _float_env("LEDGER_API_RETRY_DELAY", "1.0")
    api_max_retries: int = int(os.getenv("LEDGER_API_MAX_RETRIES", "1"))

    # Business day
    business_timezone: str = os.getenv("BUSINESS_TIMEZONE", "Asia/Kolkata")
    business_day_start: str = os.getenv("BUSINESS_DAY_START", "11:30")

    # Tax rates used by the indent estimate
    tcs_rate: float = _float_env("TCS_RATE", "0.01")
    legacy_tcs_rate: float = _float_env("LEGACY_TCS_RATE", "0.01175")
    retail_excise_rate: float = _float_env("RETAIL_EXCISE_RATE", "0.10")

    search_debounce_ms: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "150"))
    search_cache_size: int = int(os.getenv("SEARCH_CACHE_SIZE", "500"))
    search_cache_ttl: float = _float_env("SEARCH_CACHE_TTL", "300")
    report_fetch_workers: int = int(os.getenv("REPORT_FETCH_WORKERS", "8"))

    shop_name: str = os.getenv("SHOP_NAME", "Liquor Ledger")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: list = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


settings = Settings()
