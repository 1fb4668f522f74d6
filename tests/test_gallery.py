"""Tests for the gallery grouping policy."""

import pytest

from converters.gallery import gallery_action
from models import Block, GalleryAction

SKIP = GalleryAction.SKIP
WRITE = GalleryAction.WRITE
NOTHING = GalleryAction.NOTHING


def sequence(*types):
    return [Block(id=f'b{index}', type=block_type) for index, block_type in enumerate(types)]


def classify(blocks, gallery_mode=True):
    return [gallery_action(blocks, index, gallery_mode) for index in range(len(blocks))]


class TestGalleryAction:
    """Rule evaluation over sibling sequences."""

    def test_gallery_mode_off(self):
        blocks = sequence('paragraph', 'image', 'image', 'image')
        assert classify(blocks, gallery_mode=False) == [NOTHING] * 4

    def test_paragraph_then_two_images(self):
        blocks = sequence('paragraph', 'image', 'image')
        assert classify(blocks) == [NOTHING, SKIP, WRITE]

    def test_run_at_start(self):
        blocks = sequence('image', 'image', 'image', 'paragraph')
        assert classify(blocks) == [SKIP, SKIP, WRITE, NOTHING]

    def test_lone_image_between_paragraphs(self):
        blocks = sequence('paragraph', 'image', 'paragraph')
        assert classify(blocks) == [NOTHING, NOTHING, NOTHING]

    def test_single_block(self):
        assert classify(sequence('image')) == [NOTHING]

    def test_first_image_without_image_neighbour(self):
        assert classify(sequence('image', 'paragraph')) == [NOTHING, NOTHING]

    def test_last_image_without_image_neighbour(self):
        assert classify(sequence('paragraph', 'image')) == [NOTHING, NOTHING]

    def test_two_images(self):
        assert classify(sequence('image', 'image')) == [SKIP, WRITE]

    def test_two_separate_runs(self):
        blocks = sequence('image', 'image', 'paragraph', 'image', 'image')
        assert classify(blocks) == [SKIP, WRITE, NOTHING, SKIP, WRITE]

    @pytest.mark.parametrize('run_length', [2, 3, 4, 7])
    def test_run_yields_one_write(self, run_length):
        blocks = sequence('paragraph', *(['image'] * run_length), 'quote')
        actions = classify(blocks)

        assert actions.count(WRITE) == 1
        assert actions.count(SKIP) == run_length - 1
        assert actions[run_length] is WRITE

    def test_sequence_is_not_modified(self):
        blocks = sequence('image', 'image')
        snapshot = list(blocks)
        classify(blocks)
        assert blocks == snapshot
