import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            value = default
    if min_value is not None:
        return max(min_value, value)
    return value


def _env_list(name: str, default: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in os.getenv(name, default).split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    database_sslmode: str
    auto_create_tables: bool
    cors_origins: tuple[str, ...]
    log_level: str
    log_file: str
    low_stock_threshold: int
    block_sizes: tuple[str, ...]
    seed_default_materials: bool
    business_name: str
    business_address: str


settings = Settings(
    app_name=os.getenv("APP_NAME", "Block Stock API"),
    database_url=os.getenv("DATABASE_URL", "sqlite:///./blockstock.db"),
    database_sslmode=os.getenv("DATABASE_SSLMODE", "prefer"),
    auto_create_tables=_env_bool("AUTO_CREATE_TABLES", True),
    cors_origins=tuple(
        origin.rstrip("/") for origin in _env_list("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
    ),
    log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    log_file=os.getenv("LOG_FILE", ""),
    low_stock_threshold=_env_int("LOW_STOCK_THRESHOLD", 50, min_value=0),
    block_sizes=_env_list("BLOCK_SIZES", "4 inch,6 inch,8 inch"),
    seed_default_materials=_env_bool("SEED_DEFAULT_MATERIALS", True),
    business_name=os.getenv("BUSINESS_NAME", "GHIMIRE TRADES"),
    business_address=os.getenv("BUSINESS_ADDRESS", "Itahari, Sunsari"),
)
