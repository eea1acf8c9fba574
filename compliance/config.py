import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file in the project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / '.env')

DEFAULT_USDA_BASE_URL = "https://api.nal.usda.gov/fdc/v1"


@dataclass(frozen=True)
class Settings:
    usda_api_key: Optional[str]
    usda_base_url: str
    food_search_limit: int
    food_search_timeout_seconds: float
    default_locale: str
    log_level: str


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings from the environment once; call get_settings.cache_clear() to reload."""
    locale = (os.getenv("DEFAULT_LOCALE") or "en").strip().lower()
    return Settings(
        usda_api_key=os.getenv("USDA_API_KEY") or None,
        usda_base_url=(os.getenv("USDA_BASE_URL") or DEFAULT_USDA_BASE_URL).rstrip("/"),
        food_search_limit=_env_int("FOOD_SEARCH_LIMIT", 10),
        food_search_timeout_seconds=_env_float("FOOD_SEARCH_TIMEOUT_SECONDS", 8.0),
        default_locale=locale if locale in ("en", "fr") else "en",
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once for scripts and the API process."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
