"""Dashboard rosters and the merge/filter/rank policy behind them."""
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence

from .common.text import contains_any, year_bounds_unix
from .models import CompanyNewsItem, CompanyProfile, Quote

# Top pharma by market cap, in display order
PHARMA_SYMBOLS = (
    "LLY",   # Eli Lilly
    "NVO",   # Novo Nordisk
    "JNJ",   # Johnson & Johnson
    "MRK",   # Merck
    "ABBV",  # AbbVie
    "PFE",   # Pfizer
    "AMGN",  # Amgen
    "VRTX",  # Vertex
    "GILD",  # Gilead
    "REGN",  # Regeneron
)

# Subset queried for market news, kept small for the free-tier rate limit
KEY_MOVER_SYMBOLS = ("LLY", "NVO", "PFE", "MRK", "VRTX")

MARKET_NEWS_KEYWORDS = frozenset({"FDA", "APPROVAL", "REJECT", "CLINICAL"})
MARKET_NEWS_LIMIT = 15

# Company name fragment (upper case) -> ticker
SYMBOL_OVERRIDES: Dict[str, str] = {
    "NOVO NORDISK": "NVO",
    "ELI LILLY": "LLY",
    "PFIZER": "PFE",
    "MODERNA": "MRNA",
    "ASTRAZENECA": "AZN",
    "MERCK": "MRK",
    "JOHNSON & JOHNSON": "JNJ",
    "BRISTOL MYERS SQUIBB": "BMY",
    "AMGEN": "AMGN",
    "GILEAD": "GILD",
    "REGENERON": "REGN",
    "SANOFI": "SNY",
    "VERTEX": "VRTX",
    "BIOGEN": "BIIB",
}


def match_override(company_name: str) -> Optional[str]:
    """First override whose key is a substring of the upper-cased name."""
    upper = (company_name or "").upper()
    for fragment, symbol in SYMBOL_OVERRIDES.items():
        if fragment in upper:
            return symbol
    return None


def pick_search_symbol(results: Sequence[dict]) -> Optional[str]:
    """Prefer a primary listing (no '.' suffix such as NOVO-B.CO), else the first hit."""
    symbols = [str(r.get("symbol")) for r in results if isinstance(r, dict) and r.get("symbol")]
    if not symbols:
        return None
    for symbol in symbols:
        if "." not in symbol:
            return symbol
    return symbols[0]


def merge_quote_and_profile(quote: Optional[Quote], profile: Optional[CompanyProfile]) -> Optional[Quote]:
    """Attach logo/name from the profile; a missing quote drops the symbol."""
    if quote is None:
        return None
    if profile is None:
        return quote
    return replace(quote, logo=profile.logo, name=profile.name)


def select_market_news(
    items: Iterable[CompanyNewsItem],
    keywords: Iterable[str] = MARKET_NEWS_KEYWORDS,
    limit: int = MARKET_NEWS_LIMIT,
    year: Optional[int] = None,
) -> List[CompanyNewsItem]:
    """Keep regulatory-flavoured headlines, newest first, at most ``limit``.

    Args:
        items: Flattened company news
        keywords: Case-insensitive match against headline + summary
        limit: Maximum items returned
        year: When given, only items published in that UTC calendar year
    """
    keywords = list(keywords)
    if year is not None:
        start, end = year_bounds_unix(year)
        items = [i for i in items if start <= i.datetime <= end]
    kept = [i for i in items if contains_any(i.text, keywords)]
    kept.sort(key=lambda i: i.datetime, reverse=True)
    return kept[: max(0, int(limit))]
