"""Exporters package for writing Hugo content files and media."""

from .markdown_exporter import MarkdownExporter, serialize_front_matter
from .media_resolver import MediaResolutionError, MediaResolver, local_filename

__all__ = [
    'MarkdownExporter',
    'MediaResolutionError',
    'MediaResolver',
    'local_filename',
    'serialize_front_matter',
]
