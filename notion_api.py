"""Notion REST API client with retry logic and error handling."""

import json
import logging
import time
from typing import Any, Dict, Iterator, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger('spoketome.client')

DEFAULT_BASE_URL = 'https://api.notion.com/v1'
DEFAULT_NOTION_VERSION = '2022-06-28'
MAX_PAGE_SIZE = 100


class NotionClient:
    """Notion REST API client with bearer authentication, retries and rate limiting."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_factor: float = 2.0,
        rate_limit: float = 0.0
    ):
        """
        Initialize the client with authentication and retry configuration.

        Args:
            token: Notion integration token
            base_url: API base URL
            notion_version: Value of the Notion-Version header
            timeout: HTTP request timeout in seconds
            max_retries: Maximum retry attempts for transient errors
            retry_backoff_factor: Exponential backoff factor
            rate_limit: Minimum seconds between requests (0.0 = no rate limiting)
        """
        if not token:
            raise ValueError("Notion client requires an integration token")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff_factor = retry_backoff_factor
        self.rate_limit = rate_limit
        self.last_request_time = 0.0

        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Notion-Version': notion_version,
            'Content-Type': 'application/json',
        })

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff_factor,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"]
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        logger.debug(f"Client configured for {self.base_url} with timeout={timeout}s, "
                     f"max_retries={max_retries}, backoff_factor={retry_backoff_factor}, "
                     f"rate_limit={rate_limit}s")

    def _enforce_rate_limit(self) -> None:
        """Enforce rate limiting if configured."""
        if self.rate_limit <= 0:
            return

        time_since_last = time.time() - self.last_request_time
        if time_since_last < self.rate_limit:
            sleep_time = self.rate_limit - time_since_last
            logger.debug(f"Rate limiting: sleeping for {sleep_time:.2f}s")
            time.sleep(sleep_time)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make an HTTP request to the Notion API.

        Args:
            method: HTTP method
            endpoint: API path (e.g. "/pages/<id>")
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            requests.exceptions.HTTPError: For HTTP errors
            requests.exceptions.Timeout: For timeout errors
            requests.exceptions.RequestException: For other request errors
        """
        self._enforce_rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        start_time = time.time()
        logger.debug(f"API Request: {method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            logger.debug(f"API Response: {response.status_code} {url} ({time.time() - start_time:.3f}s)")

            # Notion rate limits with 429 and a Retry-After header
            retry_count = 0
            while response.status_code == 429 and retry_count < self.max_retries:
                retry_after = response.headers.get('Retry-After', '1')
                try:
                    wait_time = float(retry_after)
                except ValueError:
                    wait_time = 1.0

                retry_count += 1
                logger.warning(f"Rate limited (429): attempt {retry_count}/{self.max_retries}, "
                               f"waiting {wait_time}s before retry")
                response.close()
                time.sleep(wait_time)
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)

            if response.status_code == 429:
                logger.error(f"Rate limit exceeded after {self.max_retries} attempts: {url}")

            response.raise_for_status()
            return response

        except requests.exceptions.Timeout:
            logger.error(f"Request timeout after {self.timeout}s: {method} {url}")
            raise

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"HTTP Error {status_code}: {method} {url}")

            if e.response is not None:
                try:
                    error_data = e.response.json()
                    logger.error(f"Error details: {json.dumps(error_data, indent=2)}")
                except ValueError:
                    logger.error(f"Error response: {e.response.text[:500]}")

            raise

        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {method} {url} - {str(e)}")
            raise

        finally:
            self.last_request_time = time.time()

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        """
        Fetch page metadata (properties, last_edited_time, ...).

        Args:
            page_id: Dashed page ID

        Returns:
            Page object dictionary
        """
        response = self._make_request('GET', f'/pages/{page_id}')
        return response.json()

    def list_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE
    ) -> Dict[str, Any]:
        """
        Fetch one page of a block's children.

        Args:
            block_id: Parent block or page ID
            start_cursor: Continuation cursor from a previous response
            page_size: Number of children per page (max 100)

        Returns:
            List response with 'results', 'has_more' and 'next_cursor'
        """
        params: Dict[str, Any] = {'page_size': min(page_size, MAX_PAGE_SIZE)}
        if start_cursor:
            params['start_cursor'] = start_cursor

        response = self._make_request('GET', f'/blocks/{block_id}/children', params=params)
        return response.json()

    def iter_block_children(self, block_id: str) -> Iterator[Dict[str, Any]]:
        """Yield every child block of block_id, following pagination cursors."""
        cursor = None
        fetched = 0

        while True:
            data = self.list_block_children(block_id, start_cursor=cursor)
            for block in data.get('results', []):
                fetched += 1
                yield block

            cursor = data.get('next_cursor') if data.get('has_more') else None
            if not cursor:
                break

        logger.debug(f"Fetched {fetched} children for block {block_id}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'NotionClient':
        """
        Initialize client from configuration dictionary.

        Args:
            config: Configuration dictionary with notion and advanced settings

        Returns:
            NotionClient instance
        """
        notion_config = config.get('notion', {})
        advanced_config = config.get('advanced', {})

        return cls(
            token=notion_config.get('token'),
            base_url=notion_config.get('base_url', DEFAULT_BASE_URL),
            notion_version=notion_config.get('version', DEFAULT_NOTION_VERSION),
            timeout=advanced_config.get('request_timeout', 30),
            max_retries=advanced_config.get('max_retries', 3),
            retry_backoff_factor=advanced_config.get('retry_backoff_factor', 2.0),
            rate_limit=advanced_config.get('rate_limit', 0.0)
        )


__all__ = ['NotionClient', 'DEFAULT_BASE_URL', 'DEFAULT_NOTION_VERSION']
