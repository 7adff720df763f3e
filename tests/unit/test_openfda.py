"""Unit tests for the openFDA client."""

import logging

import pytest
import requests
from unittest.mock import MagicMock, patch

from fdanews.common.http import UpstreamError
from fdanews.config import OpenFDAConfig
from fdanews.retrieval.openfda import OpenFDAClient

from conftest import mock_response


@pytest.fixture
def client(cache, openfda_config, retry_config):
    return OpenFDAClient(cache=cache, config=openfda_config, retry=retry_config, year=2026)


def _approval(app_no, *dates):
    return {
        "application_number": app_no,
        "sponsor_name": "SPONSOR",
        "products": [],
        "submissions": [
            {"submission_status_date": d, "submission_type": "SUPPL"} for d in dates
        ],
    }


class TestRecentApprovals:
    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_builds_year_window_query(self, mock_request, client, sample_approval):
        mock_request.return_value = mock_response({"results": [sample_approval]})

        records = client.get_recent_approvals(limit=5)

        assert [r.application_number for r in records] == ["NDA215866"]
        kwargs = mock_request.call_args.kwargs
        assert kwargs["url"] == "https://api.fda.gov/drug/drugsfda.json"
        assert kwargs["params"]["limit"] == 5
        assert kwargs["params"]["sort"] == "submissions.submission_status_date:desc"
        assert kwargs["params"]["search"] == (
            "submissions.submission_status_date:[20260101 TO 20261231]"
        )
        assert kwargs["params"]["api_key"] == "test_fda_key"

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_no_api_key_is_not_an_error(self, mock_request, cache, retry_config, sample_approval):
        client = OpenFDAClient(cache=cache, config=OpenFDAConfig(API_KEY=""), retry=retry_config, year=2026)
        mock_request.return_value = mock_response({"results": [sample_approval]})

        assert len(client.get_recent_approvals(limit=5)) == 1
        assert "api_key" not in mock_request.call_args.kwargs["params"]

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_never_more_than_limit(self, mock_request, client):
        rows = [_approval(f"NDA{i}", "20260301") for i in range(8)]
        mock_request.return_value = mock_response({"results": rows})

        assert len(client.get_recent_approvals(limit=5)) == 5

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_records_outside_year_dropped(self, mock_request, client):
        rows = [
            _approval("NDA1", "20260301"),
            _approval("NDA2", "20251230"),
            _approval("NDA3", "20190101", "20260601"),
        ]
        mock_request.return_value = mock_response({"results": rows})

        records = client.get_recent_approvals(limit=5)

        assert [r.application_number for r in records] == ["NDA1", "NDA3"]
        assert all(r.latest_submission_date.startswith("2026") for r in records)

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_invalid_rows_skipped(self, mock_request, client, sample_approval):
        mock_request.return_value = mock_response({"results": ["junk", {"sponsor_name": "X"}, sample_approval]})

        assert [r.application_number for r in client.get_recent_approvals()] == ["NDA215866"]

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_missing_results_returns_empty(self, mock_request, client):
        mock_request.return_value = mock_response({"meta": {}})
        assert client.get_recent_approvals() == []

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_transport_failure_returns_empty(self, mock_request, client):
        mock_request.side_effect = UpstreamError("network down")
        assert client.get_recent_approvals() == []

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_not_found_returns_empty(self, mock_request, client):
        mock_request.side_effect = UpstreamError("no matches", status_code=404)
        assert client.get_recent_approvals() == []

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_bad_json_returns_empty(self, mock_request, client):
        mock_request.return_value = mock_response(json_error=ValueError("not json"))
        assert client.get_recent_approvals() == []

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_failure_not_cached(self, mock_request, client, sample_approval):
        mock_request.side_effect = [
            UpstreamError("network down"),
            mock_response({"results": [sample_approval]}),
        ]
        assert client.get_recent_approvals() == []
        assert len(client.get_recent_approvals()) == 1

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_cache_hit_skips_network(self, mock_request, client, sample_approval):
        mock_request.return_value = mock_response({"results": [sample_approval]})

        first = client.get_recent_approvals(limit=5)
        second = client.get_recent_approvals(limit=5)

        assert first == second
        assert mock_request.call_count == 1

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_cache_key_includes_limit(self, mock_request, client, sample_approval):
        mock_request.return_value = mock_response({"results": [sample_approval]})

        client.get_recent_approvals(limit=5)
        client.get_recent_approvals(limit=3)

        assert mock_request.call_count == 2
        assert "openfda_approvals_5_2026" in client.cache
        assert "openfda_approvals_3_2026" in client.cache

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_refetch_after_ttl(self, mock_request, client, clock, sample_approval):
        mock_request.return_value = mock_response({"results": [sample_approval]})

        client.get_recent_approvals()
        clock.advance(301)
        client.get_recent_approvals()

        assert mock_request.call_count == 2


class TestLatestNews:
    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_maps_enforcement_reports(self, mock_request, client, sample_enforcement):
        mock_request.return_value = mock_response({"results": [sample_enforcement]})

        items = client.get_latest_news()

        assert len(items) == 1
        item = items[0]
        assert item.publication_date == "20260917"
        assert item.title.startswith("Recall: Acme Pharma Inc. - Metformin")
        assert item.title.endswith("...")
        assert item.snippet.startswith("Status: Ongoing. Reason: CGMP")
        assert item.link == "https://www.accessdata.fda.gov/scripts/ires/index.cfm"

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_query(self, mock_request, client, sample_enforcement):
        mock_request.return_value = mock_response({"results": [sample_enforcement]})

        client.get_latest_news()

        kwargs = mock_request.call_args.kwargs
        assert kwargs["url"] == "https://api.fda.gov/drug/enforcement.json"
        assert kwargs["params"]["limit"] == 10
        assert kwargs["params"]["sort"] == "report_date:desc"
        assert kwargs["params"]["search"] == "report_date:[20260101 TO 20261231]"

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_filters_other_years(self, mock_request, client, sample_enforcement):
        old = dict(sample_enforcement, report_date="20251231", recall_number="D-9")
        mock_request.return_value = mock_response({"results": [old, sample_enforcement]})

        items = client.get_latest_news()

        assert [i.recall_number for i in items] == ["D-0123-2026"]
        assert all(i.publication_date.startswith("2026") for i in items)

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_title_length_bounded(self, mock_request, client, sample_enforcement):
        mock_request.return_value = mock_response({"results": [sample_enforcement]})

        item = client.get_latest_news()[0]

        prefix = "Recall: Acme Pharma Inc. - "
        assert len(item.title) <= len(prefix) + 60 + 3

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_failure_returns_empty(self, mock_request, client):
        mock_request.side_effect = UpstreamError("boom", status_code=500)
        assert client.get_latest_news() == []

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_results_not_a_list(self, mock_request, client):
        mock_request.return_value = mock_response({"results": {"oops": 1}})
        assert client.get_latest_news() == []

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_cached_per_year(self, mock_request, cache, openfda_config, retry_config, sample_enforcement):
        mock_request.return_value = mock_response({"results": [sample_enforcement]})
        c2026 = OpenFDAClient(cache=cache, config=openfda_config, retry=retry_config, year=2026)
        c2025 = OpenFDAClient(cache=cache, config=openfda_config, retry=retry_config, year=2025)

        c2026.get_latest_news()
        c2026.get_latest_news()
        assert c2025.get_latest_news() == []

        assert mock_request.call_count == 2


class TestCachedResultsAreCopies:
    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_mutating_result_does_not_touch_cache(self, mock_request, client, sample_approval):
        mock_request.return_value = mock_response({"results": [sample_approval]})

        first = client.get_recent_approvals()
        first.clear()
        second = client.get_recent_approvals()
        second.append("page-local row")

        assert [r.application_number for r in client.get_recent_approvals()] == ["NDA215866"]
        assert mock_request.call_count == 1

    @patch("fdanews.retrieval.openfda.request_with_retries")
    def test_recall_list_is_a_copy(self, mock_request, client, sample_enforcement):
        mock_request.return_value = mock_response({"results": [sample_enforcement]})

        client.get_latest_news().pop()

        assert len(client.get_latest_news()) == 1


class TestApiKeyNotLogged:
    @patch("fdanews.common.http.requests.Session")
    def test_rejected_key_stays_out_of_logs(self, mock_session_cls, cache, retry_config, caplog):
        resp = requests.models.Response()
        resp.status_code = 403
        resp.reason = "Forbidden"
        resp.url = "https://api.fda.gov/drug/drugsfda.json?limit=5&api_key=SUPERSECRET123"
        sess = MagicMock()
        sess.__enter__.return_value = sess
        sess.request.return_value = resp
        mock_session_cls.return_value = sess
        client = OpenFDAClient(
            cache=cache, config=OpenFDAConfig(API_KEY="SUPERSECRET123"), retry=retry_config, year=2026,
        )

        with caplog.at_level(logging.DEBUG):
            assert client.get_recent_approvals() == []

        assert sess.request.call_args.kwargs["params"]["api_key"] == "SUPERSECRET123"
        assert any(r.levelno == logging.ERROR for r in caplog.records)
        assert all("SUPERSECRET123" not in r.getMessage() for r in caplog.records)
