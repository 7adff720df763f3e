"""Pytest configuration and shared fixtures for the fda-news data layer"""

from datetime import datetime, timezone
from typing import Any, Dict, List
from unittest.mock import Mock

import pytest

from fdanews.cache import TTLCache
from fdanews.config import FinnhubConfig, OpenFDAConfig, RetryConfig

# 2026-10-19 12:00:00 UTC
FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def mock_response(json_data: Any = None, json_error: Exception = None) -> Mock:
    """A requests.Response stand-in whose .json() returns json_data (or raises)."""
    resp = Mock()
    resp.status_code = 200
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    return resp


# ============================================================
# Fixtures: clock / cache / config
# ============================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(MAX_RETRIES=1, RETRY_SLEEP=0.0)


@pytest.fixture
def openfda_config() -> OpenFDAConfig:
    return OpenFDAConfig(API_KEY="test_fda_key")


@pytest.fixture
def finnhub_config() -> FinnhubConfig:
    return FinnhubConfig(API_KEY="test_finnhub_key")


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


# ============================================================
# Fixtures: upstream payloads
# ============================================================

@pytest.fixture
def sample_approval() -> Dict[str, Any]:
    """One drugs@FDA result"""
    return {
        "application_number": "NDA215866",
        "sponsor_name": "ELI LILLY AND CO",
        "products": [
            {
                "brand_name": "ZEPBOUND",
                "marketing_status": "Prescription",
                "active_ingredients": [{"name": "TIRZEPATIDE", "strength": "2.5MG/0.5ML"}],
            }
        ],
        "submissions": [
            {"submission_status_date": "20231108", "submission_type": "ORIG"},
            {"submission_status_date": "20260314", "submission_type": "SUPPL"},
        ],
    }


@pytest.fixture
def sample_enforcement() -> Dict[str, Any]:
    """One drug enforcement report"""
    return {
        "recall_number": "D-0123-2026",
        "reason_for_recall": "CGMP Deviations: presence of foreign particulates.",
        "status": "Ongoing",
        "distribution_pattern": "Nationwide",
        "product_description": (
            "Metformin Hydrochloride Extended-Release Tablets USP, 500 mg, "
            "100-count bottles, Rx only"
        ),
        "recall_initiation_date": "20260902",
        "report_date": "20260917",
        "recalling_firm": "Acme Pharma Inc.",
        "voluntary_mandated": "Voluntary: Firm initiated",
        "classification": "Class II",
    }


def make_news(symbol: str, ts: int, headline: str, summary: str = "", news_id: int = 1) -> Dict[str, Any]:
    return {
        "category": "company",
        "datetime": ts,
        "headline": headline,
        "id": news_id,
        "image": "",
        "related": symbol,
        "source": "Reuters",
        "summary": summary,
        "url": f"https://example.com/{symbol}/{news_id}",
    }


@pytest.fixture
def sample_candles() -> Dict[str, Any]:
    return {
        "s": "ok",
        # 2026-10-15, 2026-10-16 00:00 UTC
        "t": [1792022400, 1792108800],
        "o": [780.0, 790.5],
        "h": [795.0, 801.2],
        "l": [775.1, 788.0],
        "c": [790.0, 799.9],
        "v": [1000, 1200],
    }


@pytest.fixture
def sample_news_batch() -> List[Dict[str, Any]]:
    return [
        make_news("LLY", 1760000000, "FDA approves new obesity drug", news_id=1),
        make_news("LLY", 1760100000, "Lilly raises guidance", "Sales beat estimates", news_id=2),
        make_news("LLY", 1760200000, "Phase 3 readout", "Clinical trial meets endpoint", news_id=3),
    ]
