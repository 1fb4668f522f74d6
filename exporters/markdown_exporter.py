"""Markdown exporter: converts Notion pages and writes Hugo content files."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests
import yaml
from jinja2 import Environment, FileSystemLoader

from converters import BlockInfoInjector, FrontMatterExtractor, MarkdownConverter
from converters.front_matter import is_deferred_image
from fetchers.link_preview import LinkPreviewFetcher
from logger import ProgressTracker
from models import FrontMatterRecord, NotionPage
from .media_resolver import MediaResolver

FRONT_MATTER_DELIMITER = '---'


def serialize_front_matter(record: FrontMatterRecord) -> str:
    """
    Serialize a front matter record as a YAML block between ``---`` lines.

    Fields are dumped in insertion order with lists in flow style. Deferred
    image tags are left out of the dump; every resolved image whose key is
    not already in the dump follows as a ``key: "path"`` line.

    Args:
        record: Front matter of the page

    Returns:
        The front matter block, or '' for an empty record or a settings page
    """
    if record.is_setting or len(record) == 0:
        return ''

    fields = {key: value for key, value in record.fields.items() if not is_deferred_image(value)}

    lines = [FRONT_MATTER_DELIMITER]
    if fields:
        yaml_str = yaml.dump(
            fields,
            default_flow_style=None,  # scalars lists inline: tags: [a, b]
            allow_unicode=True,
            sort_keys=False,
            width=1000  # Prevent line wrapping
        )
        lines.append(yaml_str.rstrip('\n'))
    for key, path in record.images.items():
        if key not in fields:
            lines.append(f'{key}: "{path}"')
    lines.append(FRONT_MATTER_DELIMITER)

    return '\n'.join(lines) + '\n'


class MarkdownExporter:
    """
    Orchestrates export of Notion pages to Hugo Markdown files.

    This exporter:
    1. Extracts the front matter of each page
    2. Converts the block tree, downloading media on the way
    3. Wraps the body in the optional content template
    4. Writes one Markdown file per page into the output directory
    """

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        output_dir: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the markdown exporter.

        Args:
            config: Configuration dictionary with export settings
            logger: Logger instance
            output_dir: Optional output directory override (takes precedence over config)
            session: HTTP session shared by media downloads and link previews
        """
        self.config = config
        self.logger = logger or logging.getLogger('notion_markdown_exporter.exporters.markdown_exporter')

        export_config = config.get('export', {}) or {}
        self.output_directory = Path(output_dir or export_config.get('output_directory', 'content/posts'))
        self.dry_run = export_config.get('dry_run', False)

        self.session = session or requests.Session()
        self.media_resolver = MediaResolver(config, session=self.session, logger=self.logger)
        self.link_preview_fetcher = LinkPreviewFetcher(
            session=self.session,
            timeout=config.get('notion', {}).get('timeout', 30),
            logger=self.logger
        )
        self.extractor = FrontMatterExtractor(
            media_resolver=self.media_resolver,
            title_property=export_config.get('title_property', 'Name'),
            logger=self.logger
        )
        self.converter = MarkdownConverter(
            injector=BlockInfoInjector(self.media_resolver, self.link_preview_fetcher, logger=self.logger),
            config=config,
            logger=self.logger
        )

        self.content_template = None
        template_path = export_config.get('content_template')
        if template_path:
            template_path = Path(template_path)
            env = Environment(loader=FileSystemLoader(str(template_path.parent)), autoescape=False)
            self.content_template = env.get_template(template_path.name)
            self.logger.info(f"Using content template {template_path}")

        self.stats = {
            'pages_exported': 0,
            'pages_unchanged': 0,
            'pages_failed': 0,
            'errors': []
        }

        self.logger.info("MarkdownExporter initialized")

    def export_pages(self, fetcher) -> Dict[str, Any]:
        """
        Fetch and export every page a fetcher is configured for.

        A failing page is logged and recorded; the remaining pages are still
        exported.

        Args:
            fetcher: BaseFetcher instance

        Returns:
            Statistics dictionary with export results
        """
        sources = fetcher.list_sources()
        self.logger.info(f"Starting markdown export of {len(sources)} pages to {self.output_directory}")

        with ProgressTracker(total_items=len(sources), item_type='pages') as tracker:
            for source in sources:
                try:
                    page = fetcher.fetch_page(source)
                    self.export_page(page)
                except Exception as e:
                    self.logger.error(f"Failed to export page '{source}': {e}", exc_info=True)
                    self.stats['pages_failed'] += 1
                    self.stats['errors'].append({'source': source, 'error': str(e)})
                    tracker.increment(success=False)
                else:
                    tracker.increment(success=True)

        self._log_export_summary()
        return self.get_stats()

    def export_page(self, page: NotionPage) -> Tuple[Optional[Path], str]:
        """
        Convert a page and write it to the output directory.

        Args:
            page: NotionPage with its block tree

        Returns:
            Tuple of (written file path or None in dry-run mode, document text)

        Raises:
            Any conversion, download or write error; nothing is written then
        """
        record, document = self.render_page(page)

        if self.dry_run:
            self.logger.info(f"Dry run: not writing page {page.id}")
            return None, document

        page_file = self.output_directory / f"{self._page_filename(page, record)}.md"
        page_file.parent.mkdir(parents=True, exist_ok=True)

        if page_file.exists() and page_file.read_text(encoding='utf-8') == document:
            self.logger.debug(f"Markdown unchanged for page {page.id}, skipping write")
            self.stats['pages_unchanged'] += 1
            return page_file, document

        page_file.write_text(document, encoding='utf-8')
        self.stats['pages_exported'] += 1
        self.logger.debug(f"Successfully wrote {len(document)} bytes to {page_file}")
        return page_file, document

    def render_page(self, page: NotionPage) -> Tuple[FrontMatterRecord, str]:
        """Convert a page into its front matter record and full document text."""
        record = self.extractor.extract(page)
        body = self.converter.convert(page.blocks, record)
        return record, self.render_document(record, body)

    def render_document(self, record: FrontMatterRecord, body: str) -> str:
        """Assemble front matter and body, applying the content template if any."""
        if self.content_template is not None:
            body = self.content_template.render(front_matter=record.to_dict(), content=body)
        return serialize_front_matter(record) + body

    def _page_filename(self, page: NotionPage, record: FrontMatterRecord) -> str:
        name = record.fields.get('slug') or record.fields.get('title')
        sanitized = self._sanitize_filename(str(name)) if name else ''
        return sanitized or page.id.replace('-', '')

    def _sanitize_filename(self, title: str) -> str:
        """
        Convert page title to filesystem-safe filename.

        Args:
            title: Page title or slug

        Returns:
            Sanitized filename, '' when nothing usable remains
        """
        sanitized = title.lower()

        # Replace spaces and special characters with hyphens (letters of any script are kept)
        sanitized = re.sub(r'[^\w\-]', '-', sanitized)
        sanitized = re.sub(r'-+', '-', sanitized)
        sanitized = sanitized.strip('-_')

        max_len = 100
        if len(sanitized) > max_len:
            sanitized = sanitized[:max_len]

        return sanitized

    def get_stats(self) -> Dict[str, Any]:
        """Get export statistics merged with media and conversion statistics."""
        stats = dict(self.stats)
        stats['errors'] = list(self.stats['errors'])
        stats['media'] = self.media_resolver.get_stats()
        stats['conversion'] = self.converter.get_stats()
        return stats

    def _log_export_summary(self) -> None:
        """Log final export statistics."""
        media = self.media_resolver.get_stats()
        self.logger.info("=" * 60)
        self.logger.info("MARKDOWN EXPORT SUMMARY")
        self.logger.info("=" * 60)
        self.logger.info(f"Pages exported: {self.stats['pages_exported']}")
        if self.stats['pages_unchanged'] > 0:
            self.logger.info(f"Pages unchanged: {self.stats['pages_unchanged']}")
        self.logger.info(f"Pages failed: {self.stats['pages_failed']}")
        self.logger.info(f"Media downloaded: {media['downloaded']}")
        self.logger.info(f"Total media size: {self._format_bytes(media['total_size_bytes'])}")
        self.logger.info(f"Output directory: {self.output_directory}")
        self.logger.info("=" * 60)

    def _format_bytes(self, bytes_val: float) -> str:
        """Format bytes to human-readable string."""
        if bytes_val == 0:
            return "0 B"

        for unit in ['B', 'KB', 'MB', 'GB']:
            if bytes_val < 1024.0:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024.0

        return f"{bytes_val:.1f} TB"


__all__: List[str] = ['MarkdownExporter', 'serialize_front_matter']
