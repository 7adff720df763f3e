"""Configuration.

All environment variables and constants for the data layer live here.
A .env file next to the working directory is loaded before defaults are read.
"""
import os
from dataclasses import dataclass
import logging

from dotenv import load_dotenv

load_dotenv(override=False)

logger = logging.getLogger(__name__)


@dataclass
class OpenFDAConfig:
    """openFDA (drugs@FDA + enforcement reports) settings"""

    API_KEY: str = os.getenv("OPENFDA_API_KEY", "").strip()
    DRUGSFDA_URL: str = "https://api.fda.gov/drug/drugsfda.json"
    ENFORCEMENT_URL: str = "https://api.fda.gov/drug/enforcement.json"
    RECALLS_LINK: str = "https://www.accessdata.fda.gov/scripts/ires/index.cfm"
    TIMEOUT: float = float(os.getenv("OPENFDA_TIMEOUT", "20"))

    def __post_init__(self):
        if self.API_KEY:
            logger.info("openFDA API key configured (length: %d)", len(self.API_KEY))
        else:
            logger.warning("OPENFDA_API_KEY not set - requests are unauthenticated (1000 req/day per IP)")


@dataclass
class FinnhubConfig:
    """Finnhub market data settings"""

    API_KEY: str = os.getenv("FINNHUB_API_KEY", "").strip()
    BASE_URL: str = "https://finnhub.io/api/v1"
    TIMEOUT: float = float(os.getenv("FINNHUB_TIMEOUT", "15"))

    def __post_init__(self):
        self.BASE_URL = self.BASE_URL.rstrip("/")
        if not self.API_KEY:
            logger.warning("FINNHUB_API_KEY not set - symbol search disabled, market calls will fail")
        elif not self.has_search:
            logger.warning("FINNHUB_API_KEY is the demo key - symbol search disabled")

    @property
    def has_search(self) -> bool:
        """Symbol search needs a real (non-demo) key."""
        return bool(self.API_KEY) and self.API_KEY.upper() != "DEMO"


@dataclass
class CacheConfig:
    """In-memory response cache"""

    TTL_SECONDS: float = float(os.getenv("FDA_NEWS_CACHE_TTL", "300"))

    def __post_init__(self):
        if self.TTL_SECONDS <= 0:
            raise ValueError("FDA_NEWS_CACHE_TTL must be > 0")


@dataclass
class RetryConfig:
    """HTTP retry policy"""

    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "2"))
    RETRY_SLEEP: float = float(os.getenv("RETRY_SLEEP", "0.5"))

    def __post_init__(self):
        if self.MAX_RETRIES < 1:
            raise ValueError("MAX_RETRIES must be >= 1")


@dataclass
class WindowConfig:
    """Reporting year and fan-out width"""

    YEAR: int = int(os.getenv("FDA_NEWS_YEAR", "2026"))
    MAX_WORKERS: int = int(os.getenv("FDA_NEWS_MAX_WORKERS", "20"))

    def __post_init__(self):
        if self.MAX_WORKERS < 1:
            raise ValueError("FDA_NEWS_MAX_WORKERS must be >= 1")


class Config:
    """Global configuration singleton"""

    openfda: OpenFDAConfig = OpenFDAConfig()
    finnhub: FinnhubConfig = FinnhubConfig()
    cache: CacheConfig = CacheConfig()
    retry: RetryConfig = RetryConfig()
    window: WindowConfig = WindowConfig()

    @classmethod
    def summary(cls) -> dict:
        """Non-secret configuration summary (for logs)"""
        return {
            "openfda": {
                "has_api_key": bool(cls.openfda.API_KEY),
                "timeout": cls.openfda.TIMEOUT,
            },
            "finnhub": {
                "has_api_key": bool(cls.finnhub.API_KEY),
                "has_search": cls.finnhub.has_search,
                "timeout": cls.finnhub.TIMEOUT,
            },
            "cache": {"ttl_seconds": cls.cache.TTL_SECONDS},
            "retry": {
                "max_retries": cls.retry.MAX_RETRIES,
                "retry_sleep": cls.retry.RETRY_SLEEP,
            },
            "window": {
                "year": cls.window.YEAR,
                "max_workers": cls.window.MAX_WORKERS,
            },
        }
