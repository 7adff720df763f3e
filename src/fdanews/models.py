"""Display records built from openFDA and Finnhub payloads.

Each record is frozen and built by ``from_api`` from one upstream JSON
object; ``to_dict`` returns the camelCase shape the page templates use.
Payloads are expected to have passed the matching validator in
``contracts`` first.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .common.text import truncate, unix_to_iso_date

RECALL_TITLE_MAX_CHARS = 60


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _opt_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


# ============================================================
# openFDA
# ============================================================

@dataclass(frozen=True)
class ActiveIngredient:
    name: str
    strength: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ActiveIngredient":
        return cls(name=_str(data.get("name")), strength=_str(data.get("strength")))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "strength": self.strength}


@dataclass(frozen=True)
class Product:
    brand_name: str
    marketing_status: str
    active_ingredients: Tuple[ActiveIngredient, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            brand_name=_str(data.get("brand_name")),
            marketing_status=_str(data.get("marketing_status")),
            active_ingredients=tuple(
                ActiveIngredient.from_api(i)
                for i in data.get("active_ingredients") or []
                if isinstance(i, dict)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brandName": self.brand_name,
            "marketingStatus": self.marketing_status,
            "activeIngredients": [i.to_dict() for i in self.active_ingredients],
        }


@dataclass(frozen=True)
class Submission:
    status_date: str
    submission_type: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Submission":
        return cls(
            status_date=_str(data.get("submission_status_date")),
            submission_type=_str(data.get("submission_type")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"statusDate": self.status_date, "submissionType": self.submission_type}


@dataclass(frozen=True)
class ApprovalRecord:
    """One drugs@FDA application with its products and submissions."""

    application_number: str
    sponsor_name: str
    products: Tuple[Product, ...] = ()
    submissions: Tuple[Submission, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ApprovalRecord":
        return cls(
            application_number=_str(data.get("application_number")),
            sponsor_name=_str(data.get("sponsor_name")),
            products=tuple(
                Product.from_api(p) for p in data.get("products") or [] if isinstance(p, dict)
            ),
            submissions=tuple(
                Submission.from_api(s) for s in data.get("submissions") or [] if isinstance(s, dict)
            ),
        )

    @property
    def latest_submission_date(self) -> str:
        """Most recent submission status date (YYYYMMDD), or '' if none."""
        dates = [s.status_date for s in self.submissions if s.status_date]
        return max(dates) if dates else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applicationNumber": self.application_number,
            "sponsorName": self.sponsor_name,
            "products": [p.to_dict() for p in self.products],
            "submissions": [s.to_dict() for s in self.submissions],
        }


@dataclass(frozen=True)
class RecallNewsItem:
    """An enforcement report rendered as a news item."""

    title: str
    link: str
    publication_date: str  # YYYYMMDD
    snippet: str
    recall_number: str = ""
    recalling_firm: str = ""
    classification: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any], link: str) -> "RecallNewsItem":
        """Map an enforcement report.

        title   = "Recall: {firm} - {first 60 chars of product_description}..."
        snippet = "Status: {status}. Reason: {reason_for_recall}"
        """
        firm = _str(data.get("recalling_firm"))
        description = truncate(data.get("product_description"), RECALL_TITLE_MAX_CHARS)
        return cls(
            title=f"Recall: {firm} - {description}...",
            link=link,
            publication_date=_str(data.get("report_date")),
            snippet=f"Status: {_str(data.get('status'))}. Reason: {_str(data.get('reason_for_recall'))}",
            recall_number=_str(data.get("recall_number")),
            recalling_firm=firm,
            classification=_str(data.get("classification")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "pubDate": self.publication_date,
            "contentSnippet": self.snippet,
            "recallNumber": self.recall_number,
            "recallingFirm": self.recalling_firm,
            "classification": self.classification,
        }


# ============================================================
# Finnhub
# ============================================================

@dataclass(frozen=True)
class CompanyProfile:
    logo: Optional[str] = None
    name: Optional[str] = None
    ticker: Optional[str] = None
    industry: Optional[str] = None
    weburl: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CompanyProfile":
        # Finnhub answers {} for unknown symbols: every field stays None
        return cls(
            logo=_opt_str(data.get("logo")),
            name=_opt_str(data.get("name")),
            ticker=_opt_str(data.get("ticker")),
            industry=_opt_str(data.get("finnhubIndustry")),
            weburl=_opt_str(data.get("weburl")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logo": self.logo,
            "name": self.name,
            "ticker": self.ticker,
            "industry": self.industry,
            "weburl": self.weburl,
        }


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: float
    change: Optional[float]
    percent_change: Optional[float]
    logo: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_api(cls, symbol: str, data: Dict[str, Any]) -> "Quote":
        # c: current price, d: change, dp: percent change
        return cls(
            symbol=symbol,
            price=float(data["c"]),
            change=None if data.get("d") is None else float(data["d"]),
            percent_change=None if data.get("dp") is None else float(data["dp"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change": self.change,
            "percentChange": self.percent_change,
            "logo": self.logo,
            "name": self.name,
        }


@dataclass(frozen=True)
class ChartPoint:
    date: str  # YYYY-MM-DD (UTC)
    open: float
    high: float
    low: float
    close: float

    @classmethod
    def from_candle(cls, candles: Dict[str, Any], i: int) -> "ChartPoint":
        return cls(
            date=unix_to_iso_date(candles["t"][i]),
            open=float(candles["o"][i]),
            high=float(candles["h"][i]),
            low=float(candles["l"][i]),
            close=float(candles["c"][i]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }


@dataclass(frozen=True)
class CompanyNewsItem:
    category: str
    datetime: int  # unix seconds
    headline: str
    id: int
    image: str
    related: str
    source: str
    summary: str
    url: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CompanyNewsItem":
        return cls(
            category=_str(data.get("category")),
            datetime=int(data["datetime"]),
            headline=_str(data.get("headline")),
            id=int(data.get("id") or 0),
            image=_str(data.get("image")),
            related=_str(data.get("related")),
            source=_str(data.get("source")),
            summary=_str(data.get("summary")),
            url=_str(data.get("url")),
        )

    @property
    def text(self) -> str:
        """Headline and summary joined, the text keyword filters look at."""
        return f"{self.headline} {self.summary}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "datetime": self.datetime,
            "headline": self.headline,
            "id": self.id,
            "image": self.image,
            "related": self.related,
            "source": self.source,
            "summary": self.summary,
            "url": self.url,
        }
