"""Finnhub market data client

API docs: https://finnhub.io/docs/api

Features:
- company name -> ticker via a static override table, symbol search as fallback
- quotes, company profiles, daily candles, company news
- dashboard aggregations (pharma quotes, pharma market news) fanned out over
  a thread pool, joined in roster order
- every public method is total: failures become None or []
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..aggregation import (
    KEY_MOVER_SYMBOLS,
    MARKET_NEWS_KEYWORDS,
    MARKET_NEWS_LIMIT,
    PHARMA_SYMBOLS,
    match_override,
    merge_quote_and_profile,
    pick_search_symbol,
    select_market_news,
)
from ..cache import MISSING, TTLCache
from ..common.concurrency import fan_out
from ..common.http import request_with_retries
from ..config import Config, FinnhubConfig, RetryConfig
from ..contracts import (
    validate_candles,
    validate_news_item,
    validate_profile,
    validate_quote,
    validate_symbol_search,
)
from ..logger import get_logger
from ..models import ChartPoint, CompanyNewsItem, CompanyProfile, Quote
from ..monitoring.metrics import track_upstream_request

logger = get_logger(__name__)

HISTORY_DAYS = 90
NEWS_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FinnhubClient:
    """Finnhub client

    Example:
        >>> client = FinnhubClient(cache=TTLCache())
        >>> client.resolve_symbol("Eli Lilly and Company")
        'LLY'
        >>> quotes = client.get_pharma_quotes()
        >>> [q.symbol for q in quotes]
        ['LLY', 'NVO', ...]
    """

    def __init__(
        self,
        cache: TTLCache,
        config: Optional[FinnhubConfig] = None,
        retry: Optional[RetryConfig] = None,
        year: Optional[int] = None,
        max_workers: Optional[int] = None,
        now: Optional[Callable[[], datetime]] = None,
        restrict_news_to_year: bool = False,
    ):
        """
        Args:
            cache: Shared TTL cache (owned by the composition root)
            config: Finnhub settings (default Config.finnhub)
            retry: Retry policy (default Config.retry)
            year: Reporting year used in dashboard cache keys (default Config.window.YEAR)
            max_workers: Fan-out width (default Config.window.MAX_WORKERS)
            now: Returns the current UTC datetime (injectable for tests)
            restrict_news_to_year: Drop market news published outside ``year``
        """
        self.config = config or Config.finnhub
        self.retry = retry or Config.retry
        self.cache = cache
        self.year = int(year if year is not None else Config.window.YEAR)
        self.max_workers = int(max_workers or Config.window.MAX_WORKERS)
        self._now = now or _utcnow
        self.restrict_news_to_year = restrict_news_to_year

    def _get(self, operation: str, path: str, params: Dict[str, Any]) -> Any:
        """GET {BASE_URL}{path} with the token appended; returns decoded JSON."""
        query = dict(params)
        if self.config.API_KEY:
            query["token"] = self.config.API_KEY
        with track_upstream_request("finnhub", operation):
            resp = request_with_retries(
                method="GET",
                url=f"{self.config.BASE_URL}{path}",
                params=query,
                timeout=self.config.TIMEOUT,
                max_retries=self.retry.MAX_RETRIES,
                retry_sleep=self.retry.RETRY_SLEEP,
            )
            return resp.json()

    # ============================================================
    # Symbols
    # ============================================================

    def resolve_symbol(self, company_name: str) -> Optional[str]:
        """Ticker for a sponsor/company name, or None.

        Order: cache -> override table (case-insensitive substring) ->
        symbol search (only with a non-demo key). Search outcomes, None
        included, are cached so a failed lookup is not repeated within the TTL.
        """
        cache_key = f"symbol_{company_name}"
        cached = self.cache.get(cache_key, MISSING)
        if cached is not MISSING:
            return cached

        override = match_override(company_name)
        if override:
            self.cache.set(cache_key, override)
            return override

        if not self.config.has_search:
            return None

        symbol = None
        try:
            data = self._get("search", "/search", {"q": company_name})
            issues = validate_symbol_search(data)
            if issues:
                raise ValueError("; ".join(issues))
            symbol = pick_search_symbol(data.get("result") or [])
        except Exception as e:
            logger.error("Error searching symbol for %r: %s", company_name, e)

        if symbol is None:
            logger.info("No symbol found for %r", company_name)
        self.cache.set(cache_key, symbol)
        return symbol

    # ============================================================
    # Single-symbol endpoints
    # ============================================================

    def get_price_history(self, symbol: str, days: int = HISTORY_DAYS) -> List[ChartPoint]:
        """Daily candles for the trailing ``days`` days, oldest first."""
        to_ts = int(self._now().timestamp())
        from_ts = to_ts - days * 24 * 60 * 60
        try:
            data = self._get(
                "candles",
                "/stock/candle",
                {"symbol": symbol, "resolution": "D", "from": from_ts, "to": to_ts},
            )
        except Exception as e:
            logger.error("Error fetching candles for %s: %s", symbol, e)
            return []

        issues = validate_candles(data)
        if issues:
            logger.info("No candles for %s: %s", symbol, "; ".join(issues))
            return []
        try:
            return [ChartPoint.from_candle(data, i) for i in range(len(data["t"]))]
        except (TypeError, ValueError, OverflowError) as e:
            logger.error("Malformed candles for %s: %s", symbol, e)
            return []

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """Real-time quote; None when Finnhub has no price for the symbol."""
        try:
            data = self._get("quote", "/quote", {"symbol": symbol})
            issues = validate_quote(data)
            if issues:
                logger.info("No quote for %s: %s", symbol, "; ".join(issues))
                return None
            return Quote.from_api(symbol, data)
        except Exception as e:
            logger.error("Error fetching quote for %s: %s", symbol, e)
        return None

    def get_company_profile(self, symbol: str) -> Optional[CompanyProfile]:
        """Logo/name profile; None only when the call itself failed."""
        try:
            data = self._get("profile", "/stock/profile2", {"symbol": symbol})
            issues = validate_profile(data)
            if issues:
                raise ValueError("; ".join(issues))
            return CompanyProfile.from_api(data)
        except Exception as e:
            logger.error("Error fetching profile for %s: %s", symbol, e)
            return None

    def get_company_news(self, symbol: str, days: int = NEWS_DAYS) -> List[CompanyNewsItem]:
        """Company news for the trailing ``days`` days, upstream order."""
        now = self._now()
        to_date = now.strftime("%Y-%m-%d")
        from_date = (now - timedelta(days=days)).strftime("%Y-%m-%d")
        try:
            data = self._get(
                "company_news",
                "/company-news",
                {"symbol": symbol, "from": from_date, "to": to_date},
            )
        except Exception as e:
            logger.error("Error fetching news for %s: %s", symbol, e)
            return []

        if not isinstance(data, list):
            logger.warning("News for %s is not a list (%s)", symbol, type(data).__name__)
            return []

        items = []
        for raw in data:
            issues = validate_news_item(raw)
            if issues:
                logger.debug("Skipping news item for %s: %s", symbol, "; ".join(issues))
                continue
            try:
                items.append(CompanyNewsItem.from_api(raw))
            except (TypeError, ValueError) as e:
                logger.debug("Skipping news item for %s: %s", symbol, e)
        return items

    # ============================================================
    # Dashboards
    # ============================================================

    def get_pharma_quotes(self) -> List[Quote]:
        """Quotes with logo/name for the pharma roster, roster order.

        Quote and profile for every symbol go out at once (20 requests).
        A failed quote drops its symbol; a failed profile only leaves
        logo/name unset.
        """
        cache_key = f"pharma_quotes_{self.year}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        calls = []
        for sym in PHARMA_SYMBOLS:
            calls.append(lambda s=sym: self.get_quote(s))
            calls.append(lambda s=sym: self.get_company_profile(s))

        results = fan_out(calls, default=None, max_workers=self.max_workers, operation="pharma_quotes")

        quotes = []
        for i, sym in enumerate(PHARMA_SYMBOLS):
            merged = merge_quote_and_profile(results[2 * i], results[2 * i + 1])
            if merged is None:
                logger.warning("Dropping %s from pharma quotes (no quote)", sym)
                continue
            quotes.append(merged)

        logger.info("Pharma quotes: %d/%d symbols", len(quotes), len(PHARMA_SYMBOLS))
        self.cache.set(cache_key, list(quotes))
        return quotes

    def get_pharma_market_news(self) -> List[CompanyNewsItem]:
        """Regulatory headlines across the key movers, newest first, max 15."""
        cache_key = f"pharma_market_news_{self.year}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        calls = [lambda s=sym: self.get_company_news(s) for sym in KEY_MOVER_SYMBOLS]
        per_symbol = fan_out(calls, default=[], max_workers=self.max_workers, operation="market_news")
        all_news = [item for items in per_symbol for item in (items or [])]

        news = select_market_news(
            all_news,
            keywords=MARKET_NEWS_KEYWORDS,
            limit=MARKET_NEWS_LIMIT,
            year=self.year if self.restrict_news_to_year else None,
        )
        logger.info("Pharma market news: %d of %d items kept", len(news), len(all_news))
        self.cache.set(cache_key, list(news))
        return news
