"""OpenGraph link preview fetcher used for bookmark blocks."""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (compatible; notion-markdown-exporter)',
    'Accept': 'text/html,application/xhtml+xml',
}


@dataclass(frozen=True)
class LinkPreview:
    """Title, description and image advertised by a web page."""

    url: str
    title: str = ''
    description: str = ''
    image: str = ''


def _meta_content(soup: BeautifulSoup, *names: str) -> str:
    """Return the first non-empty ``content`` of a meta tag by property or name."""
    for name in names:
        tag = soup.find('meta', attrs={'property': name}) or soup.find('meta', attrs={'name': name})
        if tag and tag.get('content'):
            return tag['content'].strip()
    return ''


def parse_link_preview(html_content: str, url: str) -> LinkPreview:
    """
    Extract OpenGraph metadata from an HTML document.

    Falls back to ``<title>`` and ``<meta name="description">`` when the
    OpenGraph tags are missing. Relative image URLs are made absolute.

    Args:
        html_content: Raw HTML of the page
        url: URL the HTML was served from

    Returns:
        LinkPreview with whatever metadata was found
    """
    soup = BeautifulSoup(html_content, 'lxml')

    title = _meta_content(soup, 'og:title', 'twitter:title')
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()

    description = _meta_content(soup, 'og:description', 'description', 'twitter:description')

    image = _meta_content(soup, 'og:image', 'og:image:url', 'twitter:image')
    if image:
        image = urljoin(url, image)

    return LinkPreview(url=url, title=title, description=description, image=image)


class LinkPreviewFetcher:
    """Fetches bookmark targets and reads their OpenGraph metadata."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger('notion_markdown_exporter.fetcher.link_preview')

    def fetch(self, url: str) -> LinkPreview:
        """
        Fetch a URL and parse its link preview.

        Raises:
            requests.RequestException: If the page cannot be retrieved
        """
        self.logger.debug(f"Fetching link preview: {url}")
        response = self.session.get(url, headers=DEFAULT_HEADERS, timeout=self.timeout)
        response.raise_for_status()
        return parse_link_preview(response.text, response.url or url)
