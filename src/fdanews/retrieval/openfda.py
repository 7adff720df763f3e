"""openFDA client (drugs@FDA approvals + drug enforcement reports)

API docs: https://open.fda.gov/apis/drug/

Features:
- year-window range search, newest first
- optional api_key (unauthenticated requests are allowed, with a lower quota)
- validated mapping into ApprovalRecord / RecallNewsItem
- TTL cache shared with the rest of the data layer
- total operations: any failure becomes []
"""
from typing import Any, Dict, List, Optional

from ..cache import TTLCache
from ..common.http import UpstreamError, request_with_retries
from ..common.text import date_range_search, in_year
from ..config import Config, OpenFDAConfig, RetryConfig
from ..contracts import (
    validate_approval_result,
    validate_enforcement_result,
    validate_results_envelope,
)
from ..logger import get_logger
from ..models import ApprovalRecord, RecallNewsItem
from ..monitoring.metrics import track_upstream_request

logger = get_logger(__name__)

APPROVALS_SORT = "submissions.submission_status_date:desc"
APPROVALS_DATE_FIELD = "submissions.submission_status_date"
ENFORCEMENT_SORT = "report_date:desc"
ENFORCEMENT_DATE_FIELD = "report_date"

DEFAULT_APPROVALS_LIMIT = 5
DEFAULT_NEWS_LIMIT = 10


class OpenFDAClient:
    """openFDA client

    Example:
        >>> client = OpenFDAClient(cache=TTLCache())
        >>> for rec in client.get_recent_approvals(limit=5):
        ...     print(rec.sponsor_name, rec.latest_submission_date)
        >>> for item in client.get_latest_news():
        ...     print(item.title)
    """

    def __init__(
        self,
        cache: TTLCache,
        config: Optional[OpenFDAConfig] = None,
        retry: Optional[RetryConfig] = None,
        year: Optional[int] = None,
    ):
        """
        Args:
            cache: Shared TTL cache (owned by the composition root)
            config: openFDA settings (default Config.openfda)
            retry: Retry policy (default Config.retry)
            year: Reporting year for the date window (default Config.window.YEAR)
        """
        self.config = config or Config.openfda
        self.retry = retry or Config.retry
        self.cache = cache
        self.year = int(year if year is not None else Config.window.YEAR)

    def _params(self, limit: int, sort: str, search: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {"limit": int(limit), "sort": sort, "search": search}
        if self.config.API_KEY:
            params["api_key"] = self.config.API_KEY
        return params

    def _fetch_results(self, operation: str, url: str, params: Dict[str, Any]) -> List[Any]:
        """GET an openFDA endpoint and return its ``results`` list.

        Raises:
            UpstreamError: transport failure (404 "no matches" is returned as [])
            ValueError: body is not JSON or fails the envelope contract
        """
        try:
            with track_upstream_request("openfda", operation):
                resp = request_with_retries(
                    method="GET",
                    url=url,
                    params=params,
                    timeout=self.config.TIMEOUT,
                    max_retries=self.retry.MAX_RETRIES,
                    retry_sleep=self.retry.RETRY_SLEEP,
                )
                data = resp.json()
        except UpstreamError as e:
            # openFDA answers 404 NOT_FOUND when the search matches nothing
            if e.is_not_found:
                logger.info("openFDA %s: no matches for %s", operation, params.get("search"))
                return []
            raise

        issues = validate_results_envelope(data)
        if issues:
            raise ValueError(f"openFDA {operation} envelope invalid: {issues}")
        return data.get("results") or []

    def get_recent_approvals(self, limit: int = DEFAULT_APPROVALS_LIMIT) -> List[ApprovalRecord]:
        """Most recent drugs@FDA submissions within the reporting year.

        Args:
            limit: Maximum records to return

        Returns:
            ApprovalRecord list, newest first, at most ``limit`` long; [] on
            any failure or when nothing matches
        """
        cache_key = f"openfda_approvals_{limit}_{self.year}"
        cached = self.cache.get(cache_key)
        # callers get their own list; the records inside are frozen
        if cached is not None:
            return list(cached)

        params = self._params(
            limit, APPROVALS_SORT, date_range_search(APPROVALS_DATE_FIELD, self.year)
        )
        logger.info("Fetching %d recent approvals for %d", limit, self.year)

        try:
            rows = self._fetch_results("approvals", self.config.DRUGSFDA_URL, params)
        except Exception as e:
            logger.error("Error fetching approvals: %s", e)
            return []

        records = []
        for row in rows:
            issues = validate_approval_result(row)
            if issues:
                logger.warning("Skipping approval record: %s", "; ".join(issues))
                continue
            record = ApprovalRecord.from_api(row)
            if not in_year(record.latest_submission_date, self.year):
                logger.debug(
                    "Skipping %s: latest submission %s outside %d",
                    record.application_number, record.latest_submission_date, self.year,
                )
                continue
            records.append(record)

        records = records[: max(0, int(limit))]
        logger.info("Got %d approvals", len(records))
        self.cache.set(cache_key, list(records))
        return records

    def get_latest_news(self, limit: int = DEFAULT_NEWS_LIMIT) -> List[RecallNewsItem]:
        """Latest enforcement reports (recalls) of the reporting year as news items.

        Returns:
            RecallNewsItem list, newest report first; [] on any failure
        """
        cache_key = f"openfda_enforcement_{limit}_{self.year}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        params = self._params(
            limit, ENFORCEMENT_SORT, date_range_search(ENFORCEMENT_DATE_FIELD, self.year)
        )
        logger.info("Fetching %d enforcement reports for %d", limit, self.year)

        try:
            rows = self._fetch_results("enforcement", self.config.ENFORCEMENT_URL, params)
        except Exception as e:
            logger.error("Error fetching enforcement news: %s", e)
            return []

        items = []
        for row in rows:
            issues = validate_enforcement_result(row)
            if issues:
                logger.warning(
                    "Skipping enforcement report %s: %s",
                    row.get("recall_number", "?") if isinstance(row, dict) else "?",
                    "; ".join(issues),
                )
                continue
            item = RecallNewsItem.from_api(row, link=self.config.RECALLS_LINK)
            if not in_year(item.publication_date, self.year):
                continue
            items.append(item)

        logger.info("Got %d recall news items", len(items))
        self.cache.set(cache_key, list(items))
        return items
