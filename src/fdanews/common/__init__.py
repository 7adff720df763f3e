"""Shared helpers: HTTP, concurrency, text/date handling."""
