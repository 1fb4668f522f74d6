"""Notion REST API client with retry logic and cursor pagination."""

import json
import logging
import time
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger('notion_markdown_exporter.client')

DEFAULT_BASE_URL = 'https://api.notion.com'
DEFAULT_NOTION_VERSION = '2022-06-28'
PAGE_SIZE = 100


class NotionClient:
    """Notion REST API client with bearer authentication and retrying session."""

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_factor: float = 2.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Notion client.

        Args:
            api_token: Integration token sent as a Bearer token
            base_url: API base URL
            notion_version: Value of the ``Notion-Version`` header
            timeout: HTTP request timeout in seconds
            max_retries: Maximum retry attempts for 429 and 5xx responses
            retry_backoff_factor: Exponential backoff factor
            session: Optional pre-built session (tests inject mocks here)
        """
        if not api_token:
            raise ValueError("Notion client requires an api_token")

        self.base_url = base_url.rstrip('/') + '/'
        self.timeout = timeout
        self.max_retries = max_retries

        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_token}',
            'Notion-Version': notion_version,
            'Content-Type': 'application/json',
        })

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        logger.debug(f"Client configured for {self.base_url} with timeout={timeout}s, "
                     f"max_retries={max_retries}, backoff_factor={retry_backoff_factor}")

    def _make_request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        """
        Make an HTTP request to the Notion API and decode the JSON body.

        Raises:
            requests.exceptions.HTTPError: For HTTP errors
            requests.exceptions.Timeout: For timeout errors
            requests.exceptions.RequestException: For other request errors
        """
        url = urljoin(self.base_url, endpoint.lstrip('/'))

        start_time = time.time()
        logger.debug(f"API Request: {method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            logger.debug(f"API Response: {response.status_code} {url} ({time.time() - start_time:.3f}s)")
            response.raise_for_status()
            return response.json()

        except requests.exceptions.Timeout:
            logger.error(f"Request timeout after {self.timeout}s: {method} {url}")
            raise

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"HTTP Error {status_code}: {method} {url}")
            if e.response is not None:
                try:
                    logger.error(f"Error details: {json.dumps(e.response.json(), indent=2)}")
                except ValueError:
                    logger.error(f"Error response: {e.response.text[:500]}")
            raise

        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {method} {url} - {e}")
            raise

    def get_page(self, page_id: str) -> Dict[str, Any]:
        """
        Fetch a page object with its properties and cover.

        Args:
            page_id: Notion page ID

        Returns:
            Page dictionary

        Raises:
            requests.exceptions.HTTPError: For 404 or other HTTP errors
        """
        return self._make_request('GET', f'/v1/pages/{page_id}')

    def iter_block_children(self, block_id: str, page_size: int = PAGE_SIZE) -> Iterator[Dict[str, Any]]:
        """Yield the direct children of a block, following ``next_cursor``."""
        cursor: Optional[str] = None

        while True:
            params: Dict[str, Any] = {'page_size': page_size}
            if cursor:
                params['start_cursor'] = cursor

            data = self._make_request('GET', f'/v1/blocks/{block_id}/children', params=params)
            yield from data.get('results', [])

            if not data.get('has_more'):
                break
            cursor = data.get('next_cursor')
            if not cursor:
                break

    def list_block_children(self, block_id: str, page_size: int = PAGE_SIZE) -> List[Dict[str, Any]]:
        """
        Get all direct children of a block or page.

        Args:
            block_id: Parent block or page ID
            page_size: Number of children per request

        Returns:
            List of raw block dictionaries
        """
        children = list(self.iter_block_children(block_id, page_size))
        logger.debug(f"Fetched {len(children)} children for block {block_id}")
        return children

    def fetch_block_tree(self, block_id: str) -> List[Dict[str, Any]]:
        """
        Fetch the complete block tree below a block.

        Each block with ``has_children`` gets its descendants attached under
        a ``children`` key, depth-first and in document order.
        """
        blocks = self.list_block_children(block_id)
        for block in blocks:
            if block.get('has_children'):
                block['children'] = self.fetch_block_tree(block['id'])
        return blocks

    @classmethod
    def from_config(cls, config: Dict[str, Any], session: Optional[requests.Session] = None) -> 'NotionClient':
        """
        Initialize the Notion client from a configuration dictionary.

        Args:
            config: Configuration dictionary with a ``notion`` section
            session: Optional session to reuse

        Returns:
            NotionClient instance
        """
        notion_config = config.get('notion', {}) or {}

        return cls(
            api_token=notion_config.get('api_token'),
            base_url=notion_config.get('base_url', DEFAULT_BASE_URL),
            notion_version=notion_config.get('notion_version', DEFAULT_NOTION_VERSION),
            timeout=notion_config.get('timeout', 30),
            max_retries=notion_config.get('max_retries', 3),
            retry_backoff_factor=notion_config.get('retry_backoff_factor', 2.0),
            session=session,
        )
