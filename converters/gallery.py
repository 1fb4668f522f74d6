"""Gallery grouping policy for runs of adjacent image blocks."""

from typing import Sequence

from models import Block, BlockType, GalleryAction

GALLERY_FOLDER = 'gallery'


def _is_image(block: Block) -> bool:
    return block.type == BlockType.IMAGE.value


def gallery_action(blocks: Sequence[Block], index: int, gallery_mode: bool) -> GalleryAction:
    """
    Classify the block at ``index`` within its sibling sequence.

    A run of adjacent images collapses into one gallery: every image of the
    run but the last is skipped, and the last one writes the gallery. Rules
    are evaluated in order and the first match wins; the first/last element
    rules short-circuit before the general neighbour comparisons.

    Args:
        blocks: Full sibling sequence (never modified)
        index: Position of the current block
        gallery_mode: Whether the document collapses image runs at all

    Returns:
        GalleryAction.SKIP, GalleryAction.WRITE or GalleryAction.NOTHING
    """
    if not gallery_mode:
        return GalleryAction.NOTHING
    if not _is_image(blocks[index]):
        return GalleryAction.NOTHING
    if len(blocks) == 1:
        return GalleryAction.NOTHING

    last = len(blocks) - 1
    if index == 0 and _is_image(blocks[index + 1]):
        return GalleryAction.SKIP
    if index == last and _is_image(blocks[index - 1]):
        return GalleryAction.WRITE
    if index == 0 or index == last:
        return GalleryAction.NOTHING

    prev_is_image = _is_image(blocks[index - 1])
    next_is_image = _is_image(blocks[index + 1])

    if not prev_is_image and next_is_image:
        return GalleryAction.SKIP
    if prev_is_image and next_is_image:
        return GalleryAction.SKIP
    if prev_is_image and not next_is_image:
        return GalleryAction.WRITE

    return GalleryAction.NOTHING
