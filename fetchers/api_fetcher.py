"""API fetcher implementation for retrieving Notion pages via the REST API."""

import logging
from typing import Any, Dict, List, Optional

import requests

from models import NotionPage
from notion_client import NotionClient
from .base_fetcher import BaseFetcher, FetcherError


class ApiFetcher(BaseFetcher):
    """Fetches pages and their block trees from the Notion API."""

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        client: Optional[NotionClient] = None
    ):
        """
        Initialize API fetcher with configuration.

        Args:
            config: Configuration dictionary with notion and source settings
            logger: Logger instance (optional)
            client: Pre-built client; one is created from ``config`` otherwise
        """
        super().__init__(config, logger or logging.getLogger('notion_markdown_exporter.fetcher.api'))
        self.client = client or NotionClient.from_config(config)
        self.stats = {'pages_fetched': 0, 'blocks_fetched': 0}
        self.logger.info(f"Initialized ApiFetcher for {self.client.base_url}")

    def list_sources(self) -> List[str]:
        return list(self.config.get('source', {}).get('page_ids') or [])

    def fetch_page(self, source: str) -> NotionPage:
        self.logger.info(f"Fetching page {source}")
        try:
            page_data = self.client.get_page(source)
            blocks = self.client.fetch_block_tree(source)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Failed to fetch page {source}: {e}")
            raise FetcherError(f"Failed to fetch page {source}: {e}") from e

        self.stats['pages_fetched'] += 1
        self.stats['blocks_fetched'] += _count_blocks(blocks)
        return NotionPage.from_dict(page_data, blocks=blocks)

    def get_stats(self) -> Dict[str, int]:
        """Get fetch statistics."""
        return self.stats.copy()


def _count_blocks(blocks: List[Dict[str, Any]]) -> int:
    return sum(1 + _count_blocks(block.get('children') or []) for block in blocks)
