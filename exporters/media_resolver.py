"""Media reference resolver: downloads remote assets and rewrites references."""

import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

import requests

from converters.errors import ConversionError

UNTITLED_PREFIX = 'Untitled.'


class MediaResolutionError(ConversionError):
    """Raised when an asset URL cannot be turned into a local file."""
    pass


def local_filename(url: str) -> str:
    """
    Derive a stable local filename from an asset URL.

    The name is ``<host>_<last path segment>``. Notion names pasted images
    ``Untitled.png``; for those the parent segment (a per-file UUID) plus the
    original extension is used instead so files never collide.

    Args:
        url: Remote asset URL

    Returns:
        Filename without directory

    Raises:
        MediaResolutionError: If the URL has no host or no path
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise MediaResolutionError(f"malformed url: {url!r}")

    segments = unquote(parsed.path).split('/')
    tail = segments[-1]
    if not tail:
        raise MediaResolutionError(f"url has no file name: {url!r}")

    if tail.startswith(UNTITLED_PREFIX) and len(segments) >= 2:
        tail = segments[-2] + posixpath.splitext(parsed.path)[1]

    return f"{parsed.hostname}_{tail}"


class MediaResolver:
    """
    Downloads media referenced by a page and hands back local paths.

    This resolver:
    1. Derives a stable filename from the URL host and path tail
    2. Creates the destination directory when missing
    3. Streams the asset to disk with the shared HTTP session
    4. Returns the path the generated site serves the file from
    """

    def __init__(
        self,
        config: Dict[str, Any],
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the media resolver.

        Args:
            config: Configuration dictionary
            session: HTTP session used for downloads
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('notion_markdown_exporter.exporters.media_resolver')
        self.session = session or requests.Session()

        export_config = config.get('export', {})
        # dry runs leave the file system untouched
        self.download_media = export_config.get('download_media', True) and not export_config.get('dry_run', False)
        self.save_path = Path(export_config.get('image_save_path', 'static/images'))
        self.visit_path = export_config.get('image_visit_path', '/images')
        self.timeout = config.get('notion', {}).get('timeout', 30)

        self._resolved: Dict[Tuple[str, Optional[str]], str] = {}
        self.stats = {
            'downloaded': 0,
            'reused': 0,
            'total_size_bytes': 0
        }

    def resolve(self, url: str, subfolder: Optional[str] = None) -> str:
        """
        Download an asset and return its local visit path.

        Args:
            url: Remote asset URL
            subfolder: Optional folder below the save/visit roots (e.g. ``gallery``)

        Returns:
            Path to reference from the generated Markdown

        Raises:
            MediaResolutionError: If the URL is malformed
            requests.RequestException: If the download fails
            OSError: If the file cannot be written
        """
        if not self.download_media:
            return url

        key = (url, subfolder)
        if key in self._resolved:
            self.stats['reused'] += 1
            return self._resolved[key]

        filename = local_filename(url)
        dist_dir = self.save_path / subfolder if subfolder else self.save_path
        dist_dir.mkdir(parents=True, exist_ok=True)

        self.logger.debug(f"Downloading {url} -> {dist_dir / filename}")
        size = self._download(url, dist_dir / filename)

        parts = [self.visit_path, subfolder, filename] if subfolder else [self.visit_path, filename]
        visit = posixpath.join(*parts).replace('\\', '/')

        self._resolved[key] = visit
        self.stats['downloaded'] += 1
        self.stats['total_size_bytes'] += size
        return visit

    def _download(self, url: str, target: Path) -> int:
        """Stream a URL to a file and return the number of bytes written."""
        written = 0
        with self.session.get(url, timeout=self.timeout, stream=True) as response:
            response.raise_for_status()
            with open(target, 'wb') as out:
                for chunk in response.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        out.write(chunk)
                        written += len(chunk)
        return written

    def get_stats(self) -> Dict[str, int]:
        """Get download statistics."""
        return self.stats.copy()
