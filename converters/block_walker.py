"""
Block tree walker.

Walks a page's block tree depth-first, resolves per-block side information,
collapses image runs into galleries and renders every block through the
template renderer into one Markdown body.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence

from models import (
    DEFAULT_EXTENDED_SYNTAX_BLOCKS, GALLERY_RENDER_TYPE, Block, BlockType, FrontMatterRecord, GalleryAction, MdBlock,
    children_of,
)
from .block_info import BlockInfoInjector
from .gallery import GALLERY_FOLDER, gallery_action
from .renderer import BlockRenderer

MORE_TAG = '<!--more-->'
DEFAULT_MORE_THRESHOLD = 60
DEFAULT_EXTENDED_SYNTAX_TARGET = 'hugo'


class MarkdownConverter:
    """Converts a Notion block tree to Hugo-flavoured Markdown."""

    def __init__(
        self,
        renderer: Optional[BlockRenderer] = None,
        injector: Optional[BlockInfoInjector] = None,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the converter.

        Args:
            renderer: Template renderer (bundled templates when omitted)
            injector: Side-information injector (no downloads when omitted)
            config: Configuration dictionary, ``export`` section is read
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger('notion_markdown_exporter.converters.block_walker')

        export_config = (config or {}).get('export', {}) or {}
        self.renderer = renderer or BlockRenderer(export_config.get('templates_dir'), logger=self.logger)
        self.injector = injector or BlockInfoInjector(logger=self.logger)
        self.more_threshold = export_config.get('more_threshold', DEFAULT_MORE_THRESHOLD)

        extended = export_config.get('extended_syntax', {}) or {}
        self.extended_syntax_enabled = bool(extended.get('enabled', False))
        self.extended_syntax_target = extended.get('target', DEFAULT_EXTENDED_SYNTAX_TARGET)
        blocks = extended.get('blocks')
        self.extended_syntax_blocks = frozenset(blocks) if blocks is not None else DEFAULT_EXTENDED_SYNTAX_BLOCKS

        self.stats = {
            'blocks_rendered': 0,
            'blocks_skipped': 0,
            'galleries': 0,
        }
        self._reset(FrontMatterRecord())

    def enable_extended_syntax(self, target: str = DEFAULT_EXTENDED_SYNTAX_TARGET):
        """Render the extended syntax blocks with the given target's syntax."""
        self.extended_syntax_enabled = True
        self.extended_syntax_target = target

    def _reset(self, front_matter: FrontMatterRecord):
        self._buffer: List[str] = []
        self._length = 0
        self._has_more = False
        self._pending_images: List[Block] = []
        self._gallery_mode = front_matter.is_gallery
        self._setting_mode = front_matter.is_setting

    def convert(self, blocks: Sequence[Block], front_matter: Optional[FrontMatterRecord] = None) -> str:
        """
        Convert a top-level block sequence to Markdown.

        Args:
            blocks: Top-level blocks of the page, children attached
            front_matter: Page front matter; selects gallery and settings modes

        Returns:
            Markdown body

        Raises:
            ConversionError, requests.RequestException, OSError,
            jinja2.TemplateError: The first failure aborts the conversion
        """
        self._reset(front_matter or FrontMatterRecord())
        self.gen_content_blocks(blocks, depth=0)
        return ''.join(self._buffer)

    def gen_content_blocks(self, blocks: Sequence[Block], depth: int):
        """Render a sibling sequence at ``depth``, recursing into children."""
        last_type: Optional[str] = None
        same_block_idx = 0

        for index, block in enumerate(blocks):
            if block.type in self.extended_syntax_blocks and not self.extended_syntax_enabled:
                self.logger.debug(f"Skipping {block.type} block {block.id}: extended syntax disabled")
                self.stats['blocks_skipped'] += 1
                continue

            # the run index only advances on blocks that are actually rendered
            block_idx = same_block_idx + 1 if block.type == last_type else 0

            if self._setting_mode and block.type == BlockType.CODE.value:
                self._write(block.type, MdBlock(
                    block=block,
                    depth=depth,
                    extra=self._extra(block_idx),
                    same_block_idx=block_idx,
                ))
                last_type, same_block_idx = block.type, block_idx
                continue

            action = gallery_action(blocks, index, self._gallery_mode)
            subfolder = GALLERY_FOLDER if action is not GalleryAction.NOTHING else None

            extra = self._base_extra(block_idx)
            block = self.injector.inject(block, extra, media_subfolder=subfolder)

            if action is GalleryAction.SKIP:
                self.logger.debug(f"Queued image {block.id} for gallery")
                self._pending_images.append(block)
                continue

            last_type, same_block_idx = block.type, block_idx

            render_type = block.type
            if action is GalleryAction.WRITE:
                render_type = GALLERY_RENDER_TYPE
                extra['Images'] = tuple(self._pending_images) + (block,)
                self._pending_images = []
                self.stats['galleries'] += 1

            more = False
            if not self._has_more and self._length > self.more_threshold:
                more = True
                self._has_more = True

            self.logger.debug(f"Rendering {index}th {render_type} block at depth {depth} -> {block.id}")
            self._write(render_type, MdBlock(
                block=block,
                depth=depth,
                extra=MappingProxyType(extra),
                same_block_idx=block_idx,
                more=more,
            ))
            if more:
                self._append(MORE_TAG + '\n\n')

            children = children_of(block)
            if children:
                self.gen_content_blocks(children, depth + 1)

    def _base_extra(self, same_block_idx: int) -> Dict[str, Any]:
        return {
            'ExtendedSyntaxEnabled': self.extended_syntax_enabled,
            'ExtendedSyntaxTarget': self.extended_syntax_target,
            'SameBlockIdx': same_block_idx,
        }

    def _extra(self, same_block_idx: int):
        return MappingProxyType(self._base_extra(same_block_idx))

    def _write(self, render_type: str, md_block: MdBlock):
        self._append(self.renderer.render(render_type, md_block))
        self.stats['blocks_rendered'] += 1

    def _append(self, text: str):
        self._buffer.append(text)
        self._length += len(text)

    def get_stats(self) -> Dict[str, int]:
        """Get conversion statistics."""
        return self.stats.copy()
