"""fda-news data layer: openFDA approvals/recalls and Finnhub pharma market data."""

from .cache import TTLCache
from .service import PharmaDataService, build_service

__all__ = ["TTLCache", "PharmaDataService", "build_service"]
__version__ = "0.3.0"
