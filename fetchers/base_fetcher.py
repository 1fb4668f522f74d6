"""Abstract base fetcher interface and common functionality."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from models import NotionPage


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""
    pass


class BaseFetcher(ABC):
    """Abstract base class for Notion page sources."""

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        """
        Initialize base fetcher with configuration and logger.

        Args:
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.config = config
        self.logger = logger or logging.getLogger('notion_markdown_exporter.fetcher')

    @abstractmethod
    def list_sources(self) -> List[str]:
        """
        List the configured page sources.

        Returns:
            Page IDs (API mode) or dump file paths (JSON mode)
        """
        pass

    @abstractmethod
    def fetch_page(self, source: str) -> NotionPage:
        """
        Load one page with its complete block tree.

        Args:
            source: Page ID or dump file path

        Returns:
            NotionPage with nested blocks

        Raises:
            FetcherError: If the page cannot be loaded
        """
        pass

    def iter_pages(self) -> Iterator[Tuple[str, NotionPage]]:
        """Yield ``(source, page)`` for every configured source, in order."""
        for source in self.list_sources():
            yield source, self.fetch_page(source)
