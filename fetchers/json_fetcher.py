"""JSON fetcher: reads pages from exported Notion API dumps."""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from models import NotionPage
from .base_fetcher import BaseFetcher, FetcherError


class JsonFetcher(BaseFetcher):
    """
    Loads pages from JSON files.

    Two layouts are accepted: ``{"page": {...}, "blocks": [...]}`` and a
    page object carrying its nested blocks under ``blocks``.
    """

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        super().__init__(config, logger or logging.getLogger('notion_markdown_exporter.fetcher.json'))

    def list_sources(self) -> List[str]:
        return list(self.config.get('source', {}).get('json_paths') or [])

    def fetch_page(self, source: str) -> NotionPage:
        if not os.path.isfile(source):
            raise FetcherError(f"JSON dump not found: {source}")

        self.logger.info(f"Loading page dump {source}")
        try:
            with open(source, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FetcherError(f"Failed to read JSON dump {source}: {e}") from e

        if not isinstance(data, dict):
            raise FetcherError(f"JSON dump {source} must contain an object")

        if 'page' in data:
            page_data = data['page']
            blocks = data.get('blocks')
        else:
            page_data = data
            blocks = data.get('blocks')

        if not isinstance(page_data, dict):
            raise FetcherError(f"JSON dump {source} has no page object")
        if blocks is not None and not isinstance(blocks, list):
            raise FetcherError(f"JSON dump {source}: 'blocks' must be a list")

        return NotionPage.from_dict(page_data, blocks=blocks or [])
