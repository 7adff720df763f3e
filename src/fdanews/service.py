"""Composition root for the page layer.

One PharmaDataService owns the TTL cache and hands it to both clients, so
pages share cached results without touching module-level state.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .cache import TTLCache
from .common.concurrency import fan_out
from .config import Config
from .logger import get_logger
from .models import ApprovalRecord, CompanyNewsItem, Quote, RecallNewsItem
from .retrieval.finnhub import FinnhubClient
from .retrieval.openfda import DEFAULT_APPROVALS_LIMIT, DEFAULT_NEWS_LIMIT, OpenFDAClient

logger = get_logger(__name__)


class PharmaDataService:
    """Page-facing operations over openFDA and Finnhub.

    Example:
        >>> service = build_service()
        >>> service.recent_approvals(limit=5)
        >>> service.pharma_quotes()
        >>> service.company_snapshot("Novo Nordisk A/S")
    """

    def __init__(
        self,
        cache: TTLCache,
        openfda: OpenFDAClient,
        finnhub: FinnhubClient,
    ):
        self.cache = cache
        self.openfda = openfda
        self.finnhub = finnhub

    def recent_approvals(self, limit: int = DEFAULT_APPROVALS_LIMIT) -> List[ApprovalRecord]:
        return self.openfda.get_recent_approvals(limit)

    def latest_recalls(self, limit: int = DEFAULT_NEWS_LIMIT) -> List[RecallNewsItem]:
        return self.openfda.get_latest_news(limit)

    def pharma_quotes(self) -> List[Quote]:
        return self.finnhub.get_pharma_quotes()

    def market_news(self) -> List[CompanyNewsItem]:
        return self.finnhub.get_pharma_market_news()

    def company_snapshot(self, company_name: str) -> Dict[str, Any]:
        """Everything a sponsor page shows for one company.

        The symbol is resolved first; quote, profile, price history and news
        are then fetched concurrently. Parts that fail come back as None/[].

        Returns:
            {"company": str, "symbol": str|None, "quote": Quote|None,
             "profile": CompanyProfile|None, "history": [ChartPoint],
             "news": [CompanyNewsItem]}
        """
        snapshot: Dict[str, Any] = {
            "company": company_name,
            "symbol": None,
            "quote": None,
            "profile": None,
            "history": [],
            "news": [],
        }
        symbol = self.finnhub.resolve_symbol(company_name)
        if not symbol:
            logger.info("No ticker for %r, snapshot has no market data", company_name)
            return snapshot

        snapshot["symbol"] = symbol
        quote, profile, history, news = fan_out(
            [
                lambda: self.finnhub.get_quote(symbol),
                lambda: self.finnhub.get_company_profile(symbol),
                lambda: self.finnhub.get_price_history(symbol),
                lambda: self.finnhub.get_company_news(symbol),
            ],
            default=None,
            max_workers=4,
            operation="company_snapshot",
        )
        snapshot["quote"] = quote
        snapshot["profile"] = profile
        snapshot["history"] = history or []
        snapshot["news"] = news or []
        return snapshot

    def cache_summary(self) -> Dict[str, Any]:
        return self.cache.summary()


def build_service(
    clock: Optional[Callable[[], float]] = None,
    ttl_seconds: Optional[float] = None,
) -> PharmaDataService:
    """Wire a service from Config.

    Args:
        clock: Cache clock override (tests)
        ttl_seconds: Cache TTL override (default Config.cache.TTL_SECONDS)
    """
    cache = TTLCache(
        ttl_seconds=ttl_seconds if ttl_seconds is not None else Config.cache.TTL_SECONDS,
        clock=clock,
    )
    logger.info("Building data service: %s", Config.summary())
    return PharmaDataService(
        cache=cache,
        openfda=OpenFDAClient(cache=cache),
        finnhub=FinnhubClient(cache=cache),
    )
