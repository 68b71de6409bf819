"""Fetchers package for retrieving Notion pages."""

from .base_fetcher import BaseFetcher, FetcherError
from .api_fetcher import ApiFetcher

__all__ = [
    'BaseFetcher',
    'FetcherError',
    'ApiFetcher',
]
