"""Front matter extractor: maps Notion page properties to a metadata record."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from dateutil.parser import isoparse

from models import FrontMatterRecord, NotionPage, rich_text_list
from .rich_text import rich_text_to_markdown

logger = logging.getLogger('notion_markdown_exporter.converters.front_matter')

DEFERRED_IMAGE_PREFIX = 'image|'
TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S+07:00'


def format_timestamp(value: Any) -> Optional[str]:
    """Format an ISO-8601 string or datetime with the fixed front matter layout."""
    if value is None or value == '':
        return None
    if not isinstance(value, datetime):
        value = isoparse(value)
    return value.strftime(TIMESTAMP_FORMAT)


def is_deferred_image(value: Any) -> bool:
    """Check whether a value is a not-yet-downloaded image tag."""
    return isinstance(value, str) and value.startswith(DEFERRED_IMAGE_PREFIX)


def _file_url(file_obj: Dict[str, Any]) -> str:
    file_type = file_obj.get('type', 'file')
    return (file_obj.get(file_type) or {}).get('url', '')


def convert_property(name: str, prop: Dict[str, Any]) -> Any:
    """
    Coerce one typed property value into a front matter value.

    Args:
        name: Property name (used for diagnostics only)
        prop: Raw Notion property object (``{"type": ..., <type>: value}``)

    Returns:
        The front matter value, or None when the field should be omitted
    """
    prop_type = prop.get('type')
    value = prop.get(prop_type)

    if prop_type in ('select', 'status'):
        return value.get('name') if value else None

    if prop_type == 'multi_select':
        return [option.get('name') for option in value or []]

    if prop_type in ('title', 'rich_text'):
        return rich_text_to_markdown(rich_text_list(value))

    if prop_type == 'date':
        return format_timestamp(value.get('start')) if value else None

    if prop_type in ('created_time', 'last_edited_time'):
        return format_timestamp(value)

    if prop_type in ('created_by', 'last_edited_by'):
        return value.get('name') if value else None

    if prop_type == 'files':
        # the last file acts as the banner image
        if not value:
            return None
        return f"{DEFERRED_IMAGE_PREFIX}{_file_url(value[-1])}"

    if prop_type in ('url', 'email', 'phone_number', 'number'):
        return value

    if prop_type == 'checkbox':
        return bool(value)

    logger.warning(f"Unsupported property '{name}' of type '{prop_type}' - dropped from front matter")
    return None


class FrontMatterExtractor:
    """Builds the front matter record of a page before its blocks are rendered."""

    def __init__(self, media_resolver=None, title_property: str = 'Name', logger: Optional[logging.Logger] = None):
        """
        Initialize the extractor.

        Args:
            media_resolver: Resolver used for the cover and deferred image fields
            title_property: Property holding the page title
            logger: Logger instance
        """
        self.media_resolver = media_resolver
        self.title_property = title_property
        self.logger = logger or logging.getLogger('notion_markdown_exporter.converters.front_matter')

    def extract(self, page: NotionPage) -> FrontMatterRecord:
        """
        Extract the front matter record of a page.

        Args:
            page: NotionPage with properties and optional cover

        Returns:
            Populated FrontMatterRecord
        """
        record = FrontMatterRecord()

        for name, prop in page.properties.items():
            value = convert_property(name, prop)
            if value is None:
                continue
            record.fields[name.lower()] = value

        for key, value in list(record.fields.items()):
            if is_deferred_image(value):
                record.images[key] = self._resolve(value[len(DEFERRED_IMAGE_PREFIX):])

        if page.cover is not None and page.cover.url:
            record.fields['image'] = self._resolve(page.cover.url)

        title = page.properties.get(self.title_property)
        if title is None:
            self.logger.debug(f"Page {page.id} has no '{self.title_property}' property")
            title = {}
        record.fields['title'] = rich_text_to_markdown(rich_text_list(title.get('title')))

        return record

    def _resolve(self, url: str) -> str:
        if self.media_resolver is None:
            return url
        return self.media_resolver.resolve(url)
