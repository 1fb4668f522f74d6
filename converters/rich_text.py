"""Rich text composer: turns Notion rich text runs into inline Markdown."""

from typing import Iterable, List, Sequence

from models import Block, RichText
from .annotations import apply_format, emphasis_format


def convert_rich(run: RichText) -> str:
    """Format a single run; only text runs produce output."""
    if run.type != 'text':
        return ''

    pattern = emphasis_format(run.annotations)
    if run.link:
        return apply_format(pattern, f'[{run.content}]({run.link})')

    content = run.content.strip()
    if not content:
        return ''
    return apply_format(pattern, content)


def rich_text_to_markdown(runs: Iterable[RichText]) -> str:
    """Concatenate formatted runs with no separator."""
    return ''.join(convert_rich(run) for run in runs or ())


def plain_text(runs: Iterable[RichText]) -> str:
    """Raw run contents, unformatted."""
    return ''.join(run.content for run in runs or ())


def row_to_markdown(row: Block) -> str:
    """Render one table row as ``| a | b |``."""
    cells = row.cells
    if not cells:
        return ''
    parts: List[str] = ['|']
    for cell in cells:
        parts.append(f' {rich_text_to_markdown(cell)} |')
    return ''.join(parts) + '\n'


def table_to_markdown(rows: Sequence[Block]) -> str:
    """
    Render table rows as a Markdown table.

    The header row is left empty so every Notion row, including a column
    header row, lands in the body in source order.

    Args:
        rows: ``table_row`` blocks

    Returns:
        Markdown table, or an empty string when there are no rows
    """
    if not rows:
        return ''

    width = len(rows[0].cells)
    lines = ['| ' * width + '|\n', '| - ' * width + '|\n']
    lines.extend(row_to_markdown(row) for row in rows)
    return ''.join(lines)
