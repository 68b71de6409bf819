"""Abstract base fetcher interface."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from models import ManifestEntry, PulledDocument


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""
    pass


class BaseFetcher(ABC):
    """Abstract base class for Notion page fetchers."""

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        """
        Initialize base fetcher with configuration and logger.

        Args:
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.config = config
        self.logger = logger or logging.getLogger('spoketome.fetcher')

    @abstractmethod
    def fetch_document(self, entry: ManifestEntry) -> PulledDocument:
        """
        Fetch a page and render it to markdown.

        Args:
            entry: Manifest entry naming the page

        Returns:
            PulledDocument with markdown and extracted properties

        Raises:
            FetcherError: If the page could not be fetched
        """
        pass
