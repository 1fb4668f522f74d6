"""Per-type side information injected into a block's render context."""

import logging
import posixpath
import re
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from models import Block, BlockType
from .errors import MissingMediaError
from .rich_text import plain_text

YOUTUBE_PATTERN = re.compile(r'(?:youtube\.com/(?:watch\?(?:[^#]*&)?v=|embed/|shorts/|live/)|youtu\.be/)([\w-]{11})')
BILIBILI_PATTERN = re.compile(r'(BV[0-9A-Za-z]{10})')
TWITTER_USER_PATTERN = re.compile(r'(?:twitter|x)\.com/([^/?#]+)/status')
TWITTER_ID_PATTERN = re.compile(r'/status(?:es)?/(\d+)')

BILIBILI_HOST = 'bilibili.com'
TWITTER_HOSTS = ('twitter.com', 'x.com')
GIST_HOST = 'gist.github.com'


def find_url_context(pattern: re.Pattern, url: str) -> str:
    """Return the first capture group of a pattern in a URL, or ''."""
    match = pattern.search(url)
    return match.group(1) if match else ''


def video_platform(url: str) -> Dict[str, str]:
    """Detect the hosting platform of a video URL and its embed id."""
    if 'youtube' in url or 'youtu.be' in url:
        return {'Plat': 'youtube', 'Id': find_url_context(YOUTUBE_PATTERN, url)}
    if BILIBILI_HOST in url:
        return {'Plat': 'bilibili', 'Id': find_url_context(BILIBILI_PATTERN, url)}
    return {'Plat': '', 'Id': ''}


def embed_platform(url: str) -> Dict[str, str]:
    """
    Detect an embed's platform among bilibili, twitter and gist.

    ``Url`` holds what the platform shortcode needs: the BV id for
    bilibili, the status id for twitter (plus ``User``) and ``user id`` for
    gist. Unknown platforms keep the URL untouched.
    """
    if BILIBILI_HOST in url:
        return {'Plat': 'bilibili', 'Url': find_url_context(BILIBILI_PATTERN, url)}

    host = urlparse(url).hostname or ''
    if '.'.join(host.split('.')[-2:]) in TWITTER_HOSTS:
        return {
            'Plat': 'twitter',
            'User': find_url_context(TWITTER_USER_PATTERN, url),
            'Url': find_url_context(TWITTER_ID_PATTERN, url),
        }

    if GIST_HOST in url:
        tail = url.split(GIST_HOST, 1)[1]
        return {'Plat': 'gist', 'Url': ' '.join(part for part in tail.split('/') if part)}

    return {'Plat': '', 'Url': url}


def file_name(url: str) -> str:
    """Base name of a URL or path without its extension."""
    base = posixpath.basename(urlparse(url).path)
    return posixpath.splitext(base)[0]


class BlockInfoInjector:
    """
    Resolves type-specific side information for a block.

    Each injector returns the block to render (media blocks come back with
    their reference rewritten to a local path) and fills the ``extra`` dict
    the render context is built from. Errors propagate to the caller.
    """

    def __init__(self, media_resolver=None, link_preview_fetcher=None, logger: Optional[logging.Logger] = None):
        self.media_resolver = media_resolver
        self.link_preview_fetcher = link_preview_fetcher
        self.logger = logger or logging.getLogger('notion_markdown_exporter.converters.block_info')

        self._injectors: Dict[str, Callable[..., Block]] = {
            BlockType.IMAGE.value: self._inject_image,
            BlockType.BOOKMARK.value: self._inject_bookmark,
            BlockType.VIDEO.value: self._inject_video,
            BlockType.EMBED.value: self._inject_embed,
            BlockType.FILE.value: self._inject_file,
            BlockType.PDF.value: self._inject_file,
            BlockType.AUDIO.value: self._inject_file,
            BlockType.CALLOUT.value: self._inject_callout,
        }

    def inject(self, block: Block, extra: Dict[str, Any], media_subfolder: Optional[str] = None) -> Block:
        """
        Populate ``extra`` for a block and return the block to render.

        Args:
            block: Block being visited
            extra: Mutable side-information dict for this block only
            media_subfolder: Folder for downloaded media (gallery runs)

        Returns:
            The block, possibly with a rewritten media reference
        """
        injector = self._injectors.get(block.type)
        if injector is None:
            return block
        return injector(block, extra, media_subfolder)

    def resolve_media(self, block: Block, subfolder: Optional[str] = None) -> Block:
        """Download a media block's asset and point the block at the local copy."""
        file_ref = block.file
        if file_ref is None or not file_ref.url:
            raise MissingMediaError(f"{block.type} block {block.id} has no media url")
        if self.media_resolver is None:
            self.logger.debug(f"No media resolver, keeping remote url for block {block.id}")
            return block
        local = self.media_resolver.resolve(file_ref.url, subfolder)
        return block.with_file(file_ref.with_url(local))

    def _inject_image(self, block: Block, extra: Dict[str, Any], subfolder: Optional[str]) -> Block:
        return self.resolve_media(block, subfolder)

    def _inject_bookmark(self, block: Block, extra: Dict[str, Any], subfolder: Optional[str]) -> Block:
        extra['Url'] = block.url
        if self.link_preview_fetcher is None or not block.url:
            return block
        self.logger.debug(f"Fetching link preview for bookmark {block.id}: {block.url}")
        preview = self.link_preview_fetcher.fetch(block.url)
        if preview.image:
            extra['Image'] = preview.image
        extra['Title'] = preview.title
        extra['Description'] = preview.description
        return block

    def _inject_video(self, block: Block, extra: Dict[str, Any], subfolder: Optional[str]) -> Block:
        file_ref = block.file
        if file_ref is None or not file_ref.url:
            raise MissingMediaError(f"video block {block.id} has no media url")
        if file_ref.type == 'external':
            extra.update(video_platform(file_ref.url))
            extra['Url'] = file_ref.url
            return block
        block = self.resolve_media(block, subfolder)
        extra.update({'Plat': '', 'Id': '', 'Url': block.file.url})
        return block

    def _inject_embed(self, block: Block, extra: Dict[str, Any], subfolder: Optional[str]) -> Block:
        if not block.url:
            return block
        extra.update(embed_platform(block.url))
        self.logger.debug(f"Embed {block.id} detected as platform '{extra['Plat'] or 'unknown'}'")
        return block

    def _inject_file(self, block: Block, extra: Dict[str, Any], subfolder: Optional[str]) -> Block:
        block = self.resolve_media(block, subfolder)
        url = block.file.url
        extra['Url'] = url
        extra['FileName'] = file_name(url)
        return block

    def _inject_callout(self, block: Block, extra: Dict[str, Any], subfolder: Optional[str]) -> Block:
        extra['Text'] = plain_text(block.rich_text)
        extra['Emoji'] = block.icon_emoji
        return block
