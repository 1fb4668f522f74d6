"""Data models for the Notion to Markdown conversion pipeline."""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple


class BlockType(Enum):
    """Closed set of Notion block type tags the converter understands."""
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    QUOTE = "quote"
    CALLOUT = "callout"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CODE = "code"
    EQUATION = "equation"
    DIVIDER = "divider"
    TABLE_OF_CONTENTS = "table_of_contents"
    TABLE = "table"
    TABLE_ROW = "table_row"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"
    PDF = "pdf"
    AUDIO = "audio"
    BOOKMARK = "bookmark"
    EMBED = "embed"
    LINK_PREVIEW = "link_preview"
    LINK_TO_PAGE = "link_to_page"
    BREADCRUMB = "breadcrumb"
    CHILD_DATABASE = "child_database"
    CHILD_PAGE = "child_page"
    SYNCED_BLOCK = "synced_block"
    TEMPLATE = "template"
    COLUMN = "column"
    COLUMN_LIST = "column_list"
    UNSUPPORTED = "unsupported"


# Synthetic render type used for a collapsed run of images
GALLERY_RENDER_TYPE = "gallery"


class BlockCapability(NamedTuple):
    """Per-type traits resolved by table lookup."""
    has_children: bool = False
    is_media: bool = False
    is_extended_syntax: bool = False


_NO_CAPABILITY = BlockCapability()

_CONTAINER_TYPES = {
    BlockType.PARAGRAPH,
    BlockType.HEADING_1,
    BlockType.HEADING_2,
    BlockType.HEADING_3,
    BlockType.QUOTE,
    BlockType.CALLOUT,
    BlockType.BULLETED_LIST_ITEM,
    BlockType.NUMBERED_LIST_ITEM,
    BlockType.TO_DO,
    BlockType.TOGGLE,
    BlockType.COLUMN_LIST,
    BlockType.COLUMN,
    BlockType.SYNCED_BLOCK,
    BlockType.TEMPLATE,
}
_MEDIA_TYPES = {BlockType.IMAGE, BlockType.VIDEO, BlockType.FILE, BlockType.PDF, BlockType.AUDIO}
_EXTENDED_SYNTAX_TYPES = {BlockType.BOOKMARK, BlockType.CALLOUT}

BLOCK_CAPABILITIES: Mapping[str, BlockCapability] = MappingProxyType({
    block_type.value: BlockCapability(
        has_children=block_type in _CONTAINER_TYPES,
        is_media=block_type in _MEDIA_TYPES,
        is_extended_syntax=block_type in _EXTENDED_SYNTAX_TYPES,
    )
    for block_type in BlockType
})


# Blocks only rendered when extended syntax is on, unless configured otherwise
DEFAULT_EXTENDED_SYNTAX_BLOCKS = frozenset(
    name for name, capability in BLOCK_CAPABILITIES.items() if capability.is_extended_syntax
)


def capabilities_of(block_type: str) -> BlockCapability:
    """Return the capabilities of a type tag; unknown tags have none."""
    return BLOCK_CAPABILITIES.get(block_type, _NO_CAPABILITY)


@dataclass(frozen=True)
class Annotations:
    """Style flags of a rich text run."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Annotations']:
        if data is None:
            return None
        return cls(
            bold=bool(data.get('bold', False)),
            italic=bool(data.get('italic', False)),
            strikethrough=bool(data.get('strikethrough', False)),
            underline=bool(data.get('underline', False)),
            code=bool(data.get('code', False)),
            color=data.get('color') or "default",
        )


@dataclass(frozen=True)
class RichText:
    """A styled text run: content, style flags and an optional link."""

    content: str
    type: str = "text"
    link: Optional[str] = None
    annotations: Optional[Annotations] = None
    plain_text: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RichText':
        run_type = data.get('type', 'text')
        content = ''
        link = None
        if run_type == 'text':
            text = data.get('text') or {}
            content = text.get('content', '')
            link = (text.get('link') or {}).get('url')
        elif run_type == 'equation':
            content = (data.get('equation') or {}).get('expression', '')
        return cls(
            content=content,
            type=run_type,
            link=link,
            annotations=Annotations.from_dict(data.get('annotations')),
            plain_text=data.get('plain_text', content),
        )


def rich_text_list(data: Optional[List[Dict[str, Any]]]) -> Tuple[RichText, ...]:
    """Parse a list of Notion rich text objects."""
    return tuple(RichText.from_dict(item) for item in data or [])


@dataclass(frozen=True)
class FileReference:
    """A Notion-hosted ("file") or external asset reference."""

    type: str
    url: str
    name: Optional[str] = None
    caption: Tuple[RichText, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['FileReference']:
        if not data:
            return None
        file_type = data.get('type', 'external')
        url = (data.get(file_type) or {}).get('url', '')
        return cls(
            type=file_type,
            url=url,
            name=data.get('name'),
            caption=rich_text_list(data.get('caption')),
        )

    def with_url(self, url: str) -> 'FileReference':
        """Return a copy pointing at another URL."""
        return replace(self, url=url)


@dataclass(frozen=True)
class Block:
    """A node of a Notion page's content tree."""

    id: str
    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    has_children: bool = False
    children: Tuple['Block', ...] = ()
    file_override: Optional[FileReference] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """Build a block (and its nested ``children``) from Notion API JSON."""
        block_type = data.get('type', BlockType.UNSUPPORTED.value)
        children = tuple(cls.from_dict(child) for child in data.get('children') or [])
        return cls(
            id=data.get('id', ''),
            type=block_type,
            payload=data.get(block_type) or {},
            has_children=bool(data.get('has_children', False)) or bool(children),
            children=children,
        )

    @property
    def capabilities(self) -> BlockCapability:
        return capabilities_of(self.type)

    @property
    def rich_text(self) -> Tuple[RichText, ...]:
        return rich_text_list(self.payload.get('rich_text'))

    @property
    def caption(self) -> Tuple[RichText, ...]:
        return rich_text_list(self.payload.get('caption'))

    @property
    def file(self) -> Optional[FileReference]:
        if self.file_override is not None:
            return self.file_override
        if not self.capabilities.is_media:
            return None
        return FileReference.from_dict(self.payload)

    @property
    def url(self) -> str:
        return self.payload.get('url') or ''

    @property
    def checked(self) -> bool:
        return bool(self.payload.get('checked', False))

    @property
    def language(self) -> str:
        return self.payload.get('language') or ''

    @property
    def color(self) -> str:
        return self.payload.get('color') or 'default'

    @property
    def icon_emoji(self) -> str:
        icon = self.payload.get('icon') or {}
        if icon.get('type') == 'emoji':
            return icon.get('emoji', '')
        return ''

    @property
    def expression(self) -> str:
        return self.payload.get('expression') or ''

    @property
    def title(self) -> str:
        return self.payload.get('title') or ''

    @property
    def cells(self) -> Tuple[Tuple[RichText, ...], ...]:
        return tuple(rich_text_list(cell) for cell in self.payload.get('cells') or [])

    @property
    def table_width(self) -> int:
        return int(self.payload.get('table_width') or 0)

    @property
    def has_column_header(self) -> bool:
        return bool(self.payload.get('has_column_header', False))

    def with_file(self, file_ref: FileReference) -> 'Block':
        """Return a copy whose media reference is replaced."""
        return replace(self, file_override=file_ref)


def children_of(block: Block) -> Tuple[Block, ...]:
    """Children the walker descends into; empty for types that carry none."""
    if not block.capabilities.has_children:
        return ()
    return block.children


@dataclass(frozen=True)
class NotionPage:
    """A Notion database page: properties, cover and block tree."""

    id: str
    properties: Mapping[str, Dict[str, Any]] = field(default_factory=dict)
    blocks: Tuple[Block, ...] = ()
    cover: Optional[FileReference] = None
    url: Optional[str] = None
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], blocks: Optional[List[Dict[str, Any]]] = None) -> 'NotionPage':
        """Build a page from Notion API JSON plus its (already nested) blocks."""
        raw_blocks = blocks if blocks is not None else data.get('blocks') or []
        return cls(
            id=data.get('id', ''),
            properties=dict(data.get('properties') or {}),
            blocks=tuple(Block.from_dict(item) for item in raw_blocks),
            cover=FileReference.from_dict(data.get('cover')),
            url=data.get('url'),
            created_time=data.get('created_time'),
            last_edited_time=data.get('last_edited_time'),
        )


@dataclass(frozen=True)
class MdBlock:
    """Render context for one visited block.

    ``extra`` is a read-only snapshot; the renderer cannot write back into
    the converter's state through it.
    """

    block: Block
    depth: int = 0
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    same_block_idx: int = 0
    more: bool = False

    @property
    def children(self) -> Tuple[Block, ...]:
        return children_of(self.block)


@dataclass
class FrontMatterRecord:
    """Front matter of one document, keys already lower-cased."""

    fields: Dict[str, Any] = field(default_factory=dict)
    images: Dict[str, str] = field(default_factory=dict)

    @property
    def is_gallery(self) -> bool:
        return self.fields.get('type') == GALLERY_RENDER_TYPE

    @property
    def is_setting(self) -> bool:
        return self.fields.get('issetting') is True

    def __len__(self) -> int:
        return len(self.fields) + len(self.images)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten fields and resolved images into one mapping."""
        merged = dict(self.fields)
        for key, path in self.images.items():
            merged.setdefault(key, path)
        return merged


class GalleryAction(Enum):
    """Classification of an image block within a run of images."""
    SKIP = "skip"
    WRITE = "write"
    NOTHING = "nothing"


__all__ = [
    'Annotations',
    'BLOCK_CAPABILITIES',
    'Block',
    'BlockCapability',
    'BlockType',
    'FileReference',
    'FrontMatterRecord',
    'GALLERY_RENDER_TYPE',
    'GalleryAction',
    'MdBlock',
    'NotionPage',
    'RichText',
    'capabilities_of',
    'children_of',
    'rich_text_list',
]
