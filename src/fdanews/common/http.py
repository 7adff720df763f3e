"""HTTP helpers.

Single entry point for every upstream call (openFDA, Finnhub) so retry,
timeout and error classification are handled in one place.

Credentials travel in the query string (openFDA ``api_key``, Finnhub
``token``) and requests puts the full URL into its exception text, so log
lines and UpstreamError messages only carry the bare URL plus a short
description of the failure.
"""
import time
import requests
from typing import Optional

from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 20
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_SLEEP = 0.5


class UpstreamError(RuntimeError):
    """An upstream request failed for good (retries exhausted or not retryable)."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def _is_retryable(exc: Exception) -> bool:
    """Decide whether a failed request is worth retrying.

    5xx, connection errors and timeouts are transient. 4xx (429 included)
    means the request itself or our quota is the problem, so retrying
    immediately only burns the rate limit.
    """
    if isinstance(exc, requests.HTTPError):
        resp = exc.response
        if resp is None:
            return True
        return resp.status_code >= 500
    if isinstance(exc, (requests.ConnectionError, requests.Timeout, TimeoutError)):
        return True
    return False


def _status_of(exc: Exception) -> Optional[int]:
    resp = getattr(exc, "response", None)
    return getattr(resp, "status_code", None) if resp is not None else None


def _describe(exc: Exception) -> str:
    """'403 Forbidden' for HTTP errors, the exception class otherwise.

    Never str(exc): requests embeds the request URL, query string included.
    """
    status = _status_of(exc)
    if status is not None:
        reason = getattr(exc.response, "reason", None) or ""
        return f"{status} {reason}".strip()
    return type(exc).__name__


def request_with_retries(
    method: str,
    url: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_sleep: float = DEFAULT_RETRY_SLEEP,
    **kwargs
) -> requests.Response:
    """HTTP request with retries and linear backoff.

    Args:
        method: HTTP method (GET/POST)
        url: Target URL
        max_retries: Maximum attempts (default 2)
        retry_sleep: Base backoff delay in seconds (default 0.5)
        **kwargs: Passed through to requests (params, timeout, headers...)

    Returns:
        requests.Response (raise_for_status already called)

    Raises:
        UpstreamError: Non-retryable failure or retries exhausted

    Example:
        >>> r = request_with_retries(
        ...     "GET",
        ...     "https://api.fda.gov/drug/drugsfda.json",
        ...     params={"limit": 5},
        ...     timeout=20
        ... )
        >>> data = r.json()

    Notes:
        - the timeout applies per attempt, it does not accumulate
        - backoff: attempt 1 fails -> sleep 1x, attempt 2 fails -> sleep 2x ...
    """
    last_exception = None
    timeout_default = kwargs.get("timeout", DEFAULT_TIMEOUT)

    for attempt in range(1, max_retries + 1):
        try:
            kw = dict(kwargs)
            timeout = kw.pop("timeout", timeout_default)

            with requests.Session() as sess:
                r = sess.request(method, url, timeout=timeout, **kw)

            r.raise_for_status()
            return r

        except requests.exceptions.RequestException as e:
            last_exception = e
            logger.warning(
                "HTTP %s %s failed on attempt %d/%d: %s",
                method, url, attempt, max_retries, _describe(e)
            )

            if not _is_retryable(e):
                raise UpstreamError(
                    f"HTTP {method} {url} failed: {_describe(e)}",
                    status_code=_status_of(e),
                    url=url,
                ) from e

            if attempt < max_retries:
                sleep_time = retry_sleep * attempt
                logger.debug("Retrying in %.1f seconds...", sleep_time)
                time.sleep(sleep_time)

    raise UpstreamError(
        f"HTTP {method} {url} failed after {max_retries} retries: "
        f"{_describe(last_exception) if last_exception else 'no attempt made'}",
        status_code=_status_of(last_exception) if last_exception else None,
        url=url,
    )
