"""Text and date helpers shared by the openFDA and Finnhub clients."""
from datetime import datetime, timezone, timedelta
from typing import Iterable, Tuple


def truncate(text: str, max_len: int) -> str:
    """Cut text to at most max_len characters (no ellipsis added).

    Example:
        >>> truncate("Atorvastatin Calcium Tablets", 12)
        'Atorvastatin'
        >>> truncate(None, 10)
        ''
    """
    if not text:
        return ""
    return str(text)[:max_len]


def year_window(year: int) -> Tuple[str, str]:
    """First and last day of a calendar year as YYYYMMDD strings."""
    return f"{year:04d}0101", f"{year:04d}1231"


def date_range_search(field: str, year: int) -> str:
    """openFDA range expression for one calendar year.

    The space around TO is encoded as '+' by requests, which is the form
    openFDA documents.

    Example:
        >>> date_range_search("report_date", 2026)
        'report_date:[20260101 TO 20261231]'
    """
    start, end = year_window(year)
    return f"{field}:[{start} TO {end}]"


def in_year(yyyymmdd: str, year: int) -> bool:
    """True when a YYYYMMDD string belongs to the given year."""
    return bool(yyyymmdd) and str(yyyymmdd).startswith(f"{year:04d}")


def unix_to_iso_date(ts: float) -> str:
    """Unix seconds -> UTC calendar day (YYYY-MM-DD)."""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime("%Y-%m-%d")


def year_bounds_unix(year: int) -> Tuple[int, int]:
    """Inclusive unix-second bounds of a UTC calendar year."""
    start = datetime(year, 1, 1, tzinfo=timezone.utc)
    end = datetime(year + 1, 1, 1, tzinfo=timezone.utc) - timedelta(seconds=1)
    return int(start.timestamp()), int(end.timestamp())


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test against a keyword set.

    Example:
        >>> contains_any("FDA grants approval", {"APPROVAL"})
        True
    """
    upper = (text or "").upper()
    return any(k.upper() in upper for k in keywords)
