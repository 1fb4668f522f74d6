"""Annotation formatter: maps rich text style flags to a format pattern."""

from typing import Dict, Optional

from models import Annotations

# Notion palette, keyed by color name
FOREGROUND_COLORS: Dict[str, str] = {
    'gray': 'rgba(120, 119, 116, 1)',
    'brown': 'rgba(159, 107, 83, 1)',
    'orange': 'rgba(217, 115, 13, 1)',
    'yellow': 'rgba(203, 145, 47, 1)',
    'green': 'rgba(68, 131, 97, 1)',
    'blue': 'rgba(51, 126, 169, 1)',
    'purple': 'rgba(144, 101, 176, 1)',
    'pink': 'rgba(193, 76, 138, 1)',
    'red': 'rgba(212, 76, 71, 1)',
}

BACKGROUND_COLORS: Dict[str, str] = {
    'gray': 'rgba(241, 241, 239, 1)',
    'brown': 'rgba(244, 238, 238, 1)',
    'orange': 'rgba(251, 236, 221, 1)',
    'yellow': 'rgba(251, 243, 219, 1)',
    'green': 'rgba(237, 243, 236, 1)',
    'blue': 'rgba(231, 243, 248, 1)',
    'purple': 'rgba(244, 240, 247, 0.8)',
    'pink': 'rgba(249, 238, 243, 0.8)',
    'red': 'rgba(253, 235, 236, 1)',
}

BACKGROUND_SUFFIX = '_background'
SLOT = '%s'


def emphasis_format(annotations: Optional[Annotations]) -> str:
    """
    Build the format pattern for a run's annotations.

    The result always contains exactly one ``%s`` slot. Inline code wins
    over every other style; underline wins over strikethrough.

    Args:
        annotations: Style flags of the run, or None

    Returns:
        Format pattern such as ``" **%s**"`` or ``"`%s`"``
    """
    if annotations is None:
        return SLOT

    if annotations.code:
        return '`%s`'

    if annotations.bold and annotations.italic:
        pattern = ' ***%s***'
    elif annotations.bold:
        pattern = ' **%s**'
    elif annotations.italic:
        pattern = ' *%s*'
    else:
        pattern = SLOT

    if annotations.underline:
        pattern = f'<u>{pattern}</u>'
    elif annotations.strikethrough:
        pattern = f'~~{pattern}~~'

    return text_color(annotations.color, pattern)


def text_color(color: Optional[str], text: str) -> str:
    """Wrap text in a colored span unless the color is the default one."""
    if not color or color == 'default':
        return text

    if BACKGROUND_SUFFIX in color:
        name = color.split('_')[0]
        return f'<span style="background-color: {BACKGROUND_COLORS.get(name, "")};">{text}</span>'

    return f'<span style="color: {FOREGROUND_COLORS.get(color, "")};">{text}</span>'


def apply_format(pattern: str, text: str) -> str:
    """Substitute text into a pattern without interpreting ``%`` in the text."""
    return pattern.replace(SLOT, text, 1)
