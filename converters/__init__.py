"""Converters package for Notion block tree to Hugo Markdown conversion."""

import logging
from typing import Any, Dict, Optional, Tuple

from models import FrontMatterRecord, NotionPage
from .annotations import apply_format, emphasis_format, text_color
from .block_info import BlockInfoInjector
from .block_walker import MarkdownConverter
from .errors import ConversionError, MissingMediaError
from .front_matter import FrontMatterExtractor, convert_property
from .gallery import gallery_action
from .renderer import BlockRenderer
from .rich_text import rich_text_to_markdown, table_to_markdown


def convert_page(
    page: NotionPage,
    config: Optional[Dict[str, Any]] = None,
    media_resolver=None,
    link_preview_fetcher=None,
    logger: Optional[logging.Logger] = None
) -> Tuple[FrontMatterRecord, str]:
    """
    Convenience function to convert a NotionPage to front matter and Markdown.

    This orchestrates the full conversion pipeline:
    1. Front matter extraction from the page properties and cover
    2. Block tree walk with side-information injection
    3. Template rendering of every block

    Args:
        page: NotionPage with its block tree attached
        config: Optional configuration dictionary
        media_resolver: Optional MediaResolver; media URLs are kept when omitted
        link_preview_fetcher: Optional LinkPreviewFetcher for bookmark blocks
        logger: Optional logger instance

    Returns:
        Tuple of (FrontMatterRecord, Markdown body)

    Example:
        >>> from converters import convert_page
        >>> from models import NotionPage
        >>> page = NotionPage.from_dict(raw_page, blocks=raw_blocks)
        >>> front_matter, body = convert_page(page)
    """
    if logger is None:
        logger = logging.getLogger('notion_markdown_exporter.converters')
    config = config or {}
    export_config = config.get('export', {}) or {}

    extractor = FrontMatterExtractor(
        media_resolver=media_resolver,
        title_property=export_config.get('title_property', 'Name'),
        logger=logger,
    )
    front_matter = extractor.extract(page)

    converter = MarkdownConverter(
        injector=BlockInfoInjector(media_resolver, link_preview_fetcher, logger=logger),
        config=config,
        logger=logger,
    )
    return front_matter, converter.convert(page.blocks, front_matter)


__all__ = [
    'convert_page',
    'apply_format',
    'emphasis_format',
    'text_color',
    'BlockInfoInjector',
    'BlockRenderer',
    'ConversionError',
    'FrontMatterExtractor',
    'MarkdownConverter',
    'MissingMediaError',
    'convert_property',
    'gallery_action',
    'rich_text_to_markdown',
    'table_to_markdown',
]
