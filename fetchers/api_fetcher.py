"""API fetcher implementation for retrieving Notion pages via the REST API."""

import logging
from typing import Any, Dict, List, Optional

import requests

from converters import MarkdownConverter, extract_properties, extract_title
from exporters.markdown_exporter import sanitize_filename
from models import Block, ManifestEntry, PulledDocument
from notion_api import NotionClient
from .base_fetcher import BaseFetcher, FetcherError


class ApiFetcher(BaseFetcher):
    """Fetches Notion pages and their full block trees through the REST API."""

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        client: Optional[NotionClient] = None
    ):
        """
        Initialize API fetcher.

        Args:
            config: Configuration dictionary with notion and advanced settings
            logger: Logger instance (optional)
            client: Pre-built client (optional, built from config otherwise)
        """
        super().__init__(config, logger)
        self.client = client or NotionClient.from_config(config)
        self.converter = MarkdownConverter(logger=self.logger)

    def fetch_block_tree(self, block_id: str) -> List[Block]:
        """
        Fetch all children of block_id, recursing depth-first.

        Child pages and child databases are left unexpanded.

        Args:
            block_id: Page or block ID

        Returns:
            Ordered list of blocks with children attached
        """
        blocks = []

        for data in self.client.iter_block_children(block_id):
            block = Block.from_api(data)
            if block.has_children and not block.is_boundary:
                block.children = self.fetch_block_tree(block.id)
            blocks.append(block)

        return blocks

    def fetch_document(self, entry: ManifestEntry) -> PulledDocument:
        """
        Fetch page metadata and content, then render markdown.

        Args:
            entry: Manifest entry naming the page

        Returns:
            PulledDocument

        Raises:
            FetcherError: If any API call fails
        """
        self.logger.debug(f"Fetching page {entry.page_id} ({entry.url})")

        try:
            page = self.client.retrieve_page(entry.page_id)
            blocks = self.fetch_block_tree(entry.page_id)
        except requests.exceptions.RequestException as e:
            raise FetcherError(f"Failed to fetch page {entry.page_id}: {e}") from e

        properties = page.get('properties') or {}
        title = extract_title(properties)

        return PulledDocument(
            title=title,
            page_id=entry.page_id,
            url=entry.url,
            markdown=self.converter.render_document(blocks, title),
            last_edited_time=page.get('last_edited_time', ''),
            sanitized_filename=sanitize_filename(title),
            properties=extract_properties(properties),
        )
