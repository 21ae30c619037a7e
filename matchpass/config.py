# matchpass/config.py

import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite:///./matchpass.db"


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.
    Built once at startup and handed to whatever needs it.
    """

    database_url: str = DEFAULT_DATABASE_URL
    storage_backend: str = "sql"
    db_connect_max_retries: int = 30
    db_connect_retry_delay: float = 1.5
    gst_rate_percent: int = 18
    service_fee_percent: int = 2
    booking_reference_prefix: str = "IPLBK"
    bcrypt_rounds: int = 12
    log_level: str = "INFO"


def load_settings() -> Settings:
    load_dotenv()

    storage_backend = os.getenv("STORAGE_BACKEND", "sql").lower()
    if storage_backend not in {"sql", "memory"}:
        raise ValueError(
            f"STORAGE_BACKEND must be 'sql' or 'memory', got {storage_backend!r}"
        )

    return Settings(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        storage_backend=storage_backend,
        db_connect_max_retries=int(os.getenv("DB_CONNECT_MAX_RETRIES", "30")),
        db_connect_retry_delay=float(os.getenv("DB_CONNECT_RETRY_DELAY", "1.5")),
        gst_rate_percent=int(os.getenv("GST_RATE_PERCENT", "18")),
        service_fee_percent=int(os.getenv("SERVICE_FEE_PERCENT", "2")),
        booking_reference_prefix=os.getenv("BOOKING_REFERENCE_PREFIX", "IPLBK"),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
