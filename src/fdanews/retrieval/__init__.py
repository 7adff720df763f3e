"""Upstream data access

- openFDA (drug approvals, enforcement reports)
- Finnhub (quotes, profiles, candles, company news, symbol search)
"""
from .openfda import OpenFDAClient
from .finnhub import FinnhubClient

__all__ = ["OpenFDAClient", "FinnhubClient"]
