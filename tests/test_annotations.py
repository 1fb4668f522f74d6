"""Tests for the annotation formatter."""

import pytest

from converters.annotations import BACKGROUND_COLORS, FOREGROUND_COLORS, apply_format, emphasis_format, text_color
from models import Annotations


class TestEmphasisFormat:
    """Pattern selection from style flags."""

    def test_no_annotations_is_bare_slot(self):
        assert emphasis_format(None) == '%s'

    def test_plain_annotations_is_bare_slot(self):
        assert emphasis_format(Annotations()) == '%s'

    @pytest.mark.parametrize('flags, expected', [
        ({'bold': True}, ' **%s**'),
        ({'italic': True}, ' *%s*'),
        ({'bold': True, 'italic': True}, ' ***%s***'),
        ({'strikethrough': True}, '~~%s~~'),
        ({'underline': True}, '<u>%s</u>'),
    ])
    def test_single_styles(self, flags, expected):
        assert emphasis_format(Annotations(**flags)) == expected

    def test_code_suppresses_bold(self):
        assert emphasis_format(Annotations(code=True, bold=True)) == '`%s`'

    def test_code_ignores_color(self):
        assert emphasis_format(Annotations(code=True, color='red')) == '`%s`'

    def test_underline_wins_over_strikethrough(self):
        pattern = emphasis_format(Annotations(underline=True, strikethrough=True))
        assert pattern == '<u>%s</u>'

    def test_triple_emphasis_in_underline_regardless_of_color(self):
        plain = emphasis_format(Annotations(bold=True, italic=True, underline=True))
        colored = emphasis_format(Annotations(bold=True, italic=True, underline=True, color='red'))

        assert plain == '<u> ***%s***</u>'
        assert '<u> ***%s***</u>' in colored
        assert colored.startswith('<span style="color: rgba(212, 76, 71, 1);">')

    def test_pattern_has_exactly_one_slot(self):
        pattern = emphasis_format(Annotations(bold=True, strikethrough=True, color='blue_background'))
        assert pattern.count('%s') == 1


class TestTextColor:
    """Colored span wrapping."""

    def test_default_color_is_untouched(self):
        assert text_color('default', 'x') == 'x'

    def test_foreground_color(self):
        assert text_color('green', 'x') == '<span style="color: rgba(68, 131, 97, 1);">x</span>'

    def test_background_color(self):
        assert text_color('purple_background', 'x') == (
            '<span style="background-color: rgba(244, 240, 247, 0.8);">x</span>'
        )

    @pytest.mark.parametrize('color, expected', [
        ('teal', '<span style="color: ;">x</span>'),
        ('teal_background', '<span style="background-color: ;">x</span>'),
    ])
    def test_unknown_color_gives_empty_declaration(self, color, expected):
        assert text_color(color, 'x') == expected

    def test_palette_covers_all_colors(self):
        names = {'gray', 'brown', 'orange', 'yellow', 'green', 'blue', 'purple', 'pink', 'red'}
        assert set(FOREGROUND_COLORS) == names
        assert set(BACKGROUND_COLORS) == names


def test_apply_format_keeps_percent_signs_in_text():
    assert apply_format(' **%s**', '100%s done') == ' **100%s done**'
