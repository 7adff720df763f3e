"""Prometheus metrics for the fda-news data layer"""

from prometheus_client import Counter, Histogram, Info
import time
from contextlib import contextmanager

from ..logger import get_logger

logger = get_logger(__name__)

# Upstream API Metrics
upstream_requests_total = Counter(
    'fdanews_upstream_requests_total',
    'Total upstream API requests',
    ['api', 'operation', 'status']
)

upstream_request_duration_seconds = Histogram(
    'fdanews_upstream_request_duration_seconds',
    'Upstream API request duration',
    ['api', 'operation'],
    buckets=[0.1, 0.25, 0.5, 1, 2, 5, 10, 20]
)

# Cache Metrics
cache_lookups_total = Counter(
    'fdanews_cache_lookups_total',
    'Cache lookups by outcome',
    ['result']
)

# Fan-out Metrics
fanout_failures_total = Counter(
    'fdanews_fanout_failures_total',
    'Fan-out tasks that raised and were replaced by a sentinel',
    ['operation']
)

# System Metrics
errors_total = Counter(
    'fdanews_errors_total',
    'Total errors',
    ['module', 'error_type']
)

system_info = Info('fdanews_system_info', 'System information')


class MetricsTracker:
    def __init__(self):
        logger.debug("Metrics tracker initialized")
        system_info.info({
            'version': '0.3.0',
        })


@contextmanager
def track_upstream_request(api: str, operation: str):
    start_time = time.time()
    try:
        yield
        duration = time.time() - start_time
        upstream_requests_total.labels(api=api, operation=operation, status='success').inc()
        upstream_request_duration_seconds.labels(api=api, operation=operation).observe(duration)
    except Exception as e:
        upstream_requests_total.labels(api=api, operation=operation, status='error').inc()
        errors_total.labels(module=api, error_type=type(e).__name__).inc()
        raise


def record_cache_lookup(result: str):
    """result is one of hit|miss|expired"""
    cache_lookups_total.labels(result=result).inc()


def record_fanout_failure(operation: str, error_type: str = "unknown"):
    fanout_failures_total.labels(operation=operation).inc()
    errors_total.labels(module="fanout", error_type=str(error_type or "unknown")).inc()


metrics = MetricsTracker()


def collect_summary() -> dict[str, float]:
    """Collect current metric values as a flat dict.

    Returns:
        Dictionary with the cache hit rate and the per-API upstream failure
        rate, only for series that have seen traffic.
    """
    summary: dict[str, float] = {}

    try:
        hits = cache_lookups_total.labels(result="hit")._value.get()
        misses = cache_lookups_total.labels(result="miss")._value.get()
        expired = cache_lookups_total.labels(result="expired")._value.get()
        total = hits + misses + expired
        if total > 0:
            summary["cache_hit_rate"] = hits / total
    except (AttributeError, TypeError):
        pass

    for api in ("openfda", "finnhub"):
        ok = 0.0
        failed = 0.0
        try:
            for sample in upstream_requests_total.collect()[0].samples:
                if not sample.name.endswith("_total") or sample.labels.get("api") != api:
                    continue
                if sample.labels.get("status") == "success":
                    ok += sample.value
                else:
                    failed += sample.value
        except (AttributeError, IndexError, TypeError):
            continue
        if ok + failed > 0:
            summary[f"{api}_fail_rate"] = failed / (ok + failed)

    return summary
