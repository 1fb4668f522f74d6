"""Block renderer: per-type Jinja2 templates producing Markdown fragments."""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from jinja2 import ChoiceLoader, Environment, FileSystemLoader

from models import MdBlock
from .rich_text import plain_text, rich_text_to_markdown, table_to_markdown

BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent / 'templates'
TEMPLATE_SUFFIX = '.md.j2'
BLOCK_SEPARATOR = '\n\n'


def hugo_shortcode(name: str, *args: Any, **params: Any) -> str:
    """
    Build a Hugo shortcode call such as ``{{< youtube abc >}}``.

    Templates use this instead of writing ``{{<`` literally, which would
    clash with Jinja2's own delimiters.
    """
    parts: List[str] = [name]
    parts.extend(str(arg) for arg in args)
    for key, value in params.items():
        escaped = str(value if value is not None else '').replace('"', '\\"')
        parts.append(f'{key}="{escaped}"')
    return '{{< ' + ' '.join(parts) + ' >}}'


def to_json(value: Any) -> str:
    """Debug filter: dump a value as JSON."""
    return json.dumps(value, default=str, ensure_ascii=False)


class BlockRenderer:
    """Renders one block's render context through the template of its type."""

    def __init__(self, templates_dir: Optional[Union[str, Path]] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize the renderer.

        Args:
            templates_dir: Optional directory whose templates override the bundled ones
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger('notion_markdown_exporter.converters.renderer')

        loaders = []
        if templates_dir:
            loaders.append(FileSystemLoader(str(templates_dir)))
            self.logger.info(f"Using custom block templates from {templates_dir}")
        loaders.append(FileSystemLoader(str(BUNDLED_TEMPLATES_DIR)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters['rich2md'] = rich_text_to_markdown
        self.env.filters['table2md'] = table_to_markdown
        self.env.filters['plain'] = plain_text
        self.env.filters['log'] = to_json
        self.env.globals['shortcode'] = hugo_shortcode

    def render(self, render_type: str, md_block: MdBlock) -> str:
        """
        Render a block.

        Args:
            render_type: Block type tag, or ``gallery`` for a collapsed image run
            md_block: Render context of the block

        Returns:
            Markdown fragment followed by a blank line, or '' for empty output

        Raises:
            jinja2.TemplateNotFound: If no template exists for the render type
        """
        template = self.env.get_template(f'{render_type}{TEMPLATE_SUFFIX}')
        output = template.render(
            block=md_block.block,
            depth=md_block.depth,
            extra=md_block.extra,
            same_block_idx=md_block.same_block_idx,
            more=md_block.more,
            children=md_block.children,
        )
        if not output.strip():
            return ''
        return output.rstrip('\n') + BLOCK_SEPARATOR
