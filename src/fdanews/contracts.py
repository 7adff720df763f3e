"""Upstream payload contracts and validators.

Each validator takes one decoded JSON value and returns a list of issues;
an empty list means the payload can be mapped into a record. Clients log
the issues and skip (or sentinel) the payload instead of trusting
unchecked field access.
"""

from numbers import Real
from typing import Any, Dict, Iterable, List

OPENFDA_APPROVAL_REQUIRED = {"application_number", "sponsor_name"}

OPENFDA_ENFORCEMENT_REQUIRED = {
    "recalling_firm",
    "product_description",
    "report_date",
    "status",
    "reason_for_recall",
}

FINNHUB_CANDLE_SERIES = ("o", "h", "l", "c", "t")

FINNHUB_NEWS_REQUIRED = {"datetime"}


def _missing(payload: Dict[str, Any], required: Iterable[str]) -> List[str]:
    return [f"missing field: {k}" for k in sorted(required) if payload.get(k) in (None, "")]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_results_envelope(payload: Any) -> List[str]:
    """openFDA envelope: a dict whose ``results`` (when present) is a list."""
    if not isinstance(payload, dict):
        return [f"expected JSON object, got {type(payload).__name__}"]
    results = payload.get("results")
    if results is not None and not isinstance(results, list):
        return [f"results must be a list, got {type(results).__name__}"]
    return []


def validate_approval_result(row: Any) -> List[str]:
    if not isinstance(row, dict):
        return [f"expected JSON object, got {type(row).__name__}"]
    issues = _missing(row, OPENFDA_APPROVAL_REQUIRED)
    for field in ("products", "submissions"):
        value = row.get(field)
        if value is not None and not isinstance(value, list):
            issues.append(f"{field} must be a list")
    return issues


def validate_enforcement_result(row: Any) -> List[str]:
    if not isinstance(row, dict):
        return [f"expected JSON object, got {type(row).__name__}"]
    issues = _missing(row, OPENFDA_ENFORCEMENT_REQUIRED)
    report_date = str(row.get("report_date") or "")
    if report_date and (len(report_date) != 8 or not report_date.isdigit()):
        issues.append(f"report_date not YYYYMMDD: {report_date!r}")
    return issues


def validate_quote(payload: Any) -> List[str]:
    """A usable quote needs a non-zero numeric current price ``c``.

    Finnhub answers unknown symbols with all-zero fields, so ``c == 0`` is
    treated like a missing price.
    """
    if not isinstance(payload, dict):
        return [f"expected JSON object, got {type(payload).__name__}"]
    price = payload.get("c")
    if not _is_number(price) or price == 0:
        return ["no current price (c)"]
    issues = []
    for field in ("d", "dp"):
        value = payload.get(field)
        if value is not None and not _is_number(value):
            issues.append(f"{field} must be numeric")
    return issues


def validate_profile(payload: Any) -> List[str]:
    if not isinstance(payload, dict):
        return [f"expected JSON object, got {type(payload).__name__}"]
    return []


def validate_candles(payload: Any) -> List[str]:
    """Daily candles: status ``s == "ok"`` and equally long o/h/l/c/t arrays."""
    if not isinstance(payload, dict):
        return [f"expected JSON object, got {type(payload).__name__}"]
    if payload.get("s") != "ok":
        return [f"status is {payload.get('s')!r}, not 'ok'"]
    issues = []
    lengths = set()
    for key in FINNHUB_CANDLE_SERIES:
        series = payload.get(key)
        if not isinstance(series, list):
            issues.append(f"series {key} missing or not a list")
            continue
        lengths.add(len(series))
    if not issues and len(lengths) > 1:
        issues.append(f"series lengths differ: {sorted(lengths)}")
    if not issues and lengths == {0}:
        issues.append("empty series")
    return issues


def validate_news_item(item: Any) -> List[str]:
    if not isinstance(item, dict):
        return [f"expected JSON object, got {type(item).__name__}"]
    issues = _missing(item, FINNHUB_NEWS_REQUIRED)
    dt = item.get("datetime")
    if dt is not None and not _is_number(dt):
        issues.append("datetime must be unix seconds")
    return issues


def validate_symbol_search(payload: Any) -> List[str]:
    if not isinstance(payload, dict):
        return [f"expected JSON object, got {type(payload).__name__}"]
    result = payload.get("result")
    if result is not None and not isinstance(result, list):
        return ["result must be a list"]
    return []
