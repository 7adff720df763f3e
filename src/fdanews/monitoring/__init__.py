"""Monitoring and metrics module"""

from .metrics import (
    metrics,
    track_upstream_request,
    record_cache_lookup,
    record_fanout_failure,
    collect_summary,
)

__all__ = [
    'metrics',
    'track_upstream_request',
    'record_cache_lookup',
    'record_fanout_failure',
    'collect_summary',
]
