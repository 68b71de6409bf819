"""Data models for the Notion pull pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class DocumentReference:
    """A raw Notion URL paired with its canonical dashed page ID."""

    url: str
    page_id: str


# One line of a manifest file
ManifestEntry = DocumentReference


@dataclass
class DirectoryManifestSet:
    """Base and override manifest files found in one directory."""

    directory: Path
    base_path: Optional[Path] = None
    override_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.base_path is None and self.override_path is None:
            raise ValueError(f"No manifest files for directory: {self.directory}")

    @property
    def sources(self) -> List[Path]:
        return [p for p in (self.base_path, self.override_path) if p is not None]


@dataclass
class ResolvedManifest:
    """Final ordered, deduplicated set of pages to pull for one directory."""

    directory: Path
    output_dir: Path
    entries: List[ManifestEntry] = field(default_factory=list)
    sources: List[Path] = field(default_factory=list)

    @property
    def label(self) -> str:
        if self.sources:
            return ', '.join(str(s) for s in self.sources)
        return str(self.directory)


@dataclass
class RichTextRun:
    """A span of styled text from a Notion rich_text array."""

    text: str
    href: Optional[str] = None
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'RichTextRun':
        """Build a run from a Notion rich text object."""
        annotations = data.get('annotations') or {}
        text = data.get('plain_text')
        if text is None:
            text = (data.get('text') or {}).get('content', '')
        return cls(
            text=text or '',
            href=data.get('href'),
            bold=bool(annotations.get('bold')),
            italic=bool(annotations.get('italic')),
            strikethrough=bool(annotations.get('strikethrough')),
            underline=bool(annotations.get('underline')),
            code=bool(annotations.get('code')),
        )

    @classmethod
    def list_from_api(cls, items: Optional[List[Dict[str, Any]]]) -> List['RichTextRun']:
        return [cls.from_api(item) for item in (items or []) if isinstance(item, dict)]


@dataclass
class Block:
    """
    One node of a Notion page's content tree.

    ``payload`` holds the type-specific object (``block[block['type']]`` in the
    API response). ``children`` is filled in by the fetcher for every type
    except child pages and child databases.
    """

    id: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    children: List['Block'] = field(default_factory=list)
    has_children: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Block':
        """Build a block (without children) from a Notion block object."""
        block_type = data.get('type') or 'unknown'
        payload = data.get(block_type)
        return cls(
            id=data.get('id', ''),
            type=block_type,
            payload=payload if isinstance(payload, dict) else {},
            has_children=bool(data.get('has_children')),
        )

    @property
    def is_boundary(self) -> bool:
        """Child pages and databases are never descended into."""
        return self.type in ('child_page', 'child_database')

    def rich_text(self, key: str = 'rich_text') -> List[RichTextRun]:
        return RichTextRun.list_from_api(self.payload.get(key))


class PropertyKind(Enum):
    """Variants of an extracted page property value."""
    NULL = "null"
    SCALAR = "scalar"
    LIST = "list"


Scalar = Union[str, int, float, bool]


@dataclass(frozen=True)
class PropertyValue:
    """Uniform projection of a Notion property: scalar, list of strings, or null."""

    kind: PropertyKind
    value: Any = None

    @classmethod
    def null(cls) -> 'PropertyValue':
        return cls(PropertyKind.NULL)

    @classmethod
    def scalar(cls, value: Optional[Scalar]) -> 'PropertyValue':
        if value is None:
            return cls.null()
        return cls(PropertyKind.SCALAR, value)

    @classmethod
    def of_list(cls, items: List[Any]) -> 'PropertyValue':
        return cls(PropertyKind.LIST, tuple(str(item) for item in items))

    @property
    def is_null(self) -> bool:
        return self.kind is PropertyKind.NULL

    def to_plain(self) -> Union[Scalar, List[str], None]:
        """Return the plain Python value for serialization."""
        if self.kind is PropertyKind.LIST:
            return list(self.value)
        if self.kind is PropertyKind.SCALAR:
            return self.value
        return None


@dataclass
class PulledDocument:
    """A fetched and rendered Notion page ready to be written."""

    title: str
    page_id: str
    url: str
    markdown: str
    last_edited_time: str
    sanitized_filename: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)


@dataclass
class RunManifestRecord:
    """Per-page record written to context.yaml."""

    title: str
    url: str
    page_id: str
    file_path: str
    last_pulled_at: str
    last_edited_at: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize record using the context.yaml field names and order."""
        data: Dict[str, Any] = {
            'title': self.title,
            'notionUrl': self.url,
            'notionPageId': self.page_id,
            'filePath': self.file_path,
            'lastPulledAt': self.last_pulled_at,
            'notionLastEditedAt': self.last_edited_at,
        }
        if self.properties:
            data['properties'] = {
                name: value.to_plain() for name, value in self.properties.items()
            }
        return data


@dataclass
class RunManifest:
    """Summary of one pull run for a single output directory."""

    generated_by: str
    last_run_at: str
    pages: List[RunManifestRecord] = field(default_factory=list)
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'generatedBy': self.generated_by,
            'lastRunAt': self.last_run_at,
            'pages': [page.to_dict() for page in self.pages],
        }


__all__ = [
    'DocumentReference',
    'ManifestEntry',
    'DirectoryManifestSet',
    'ResolvedManifest',
    'RichTextRun',
    'Block',
    'PropertyKind',
    'PropertyValue',
    'PulledDocument',
    'RunManifestRecord',
    'RunManifest',
]
