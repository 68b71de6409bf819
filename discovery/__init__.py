"""Discovery package: locating manifest files and resolving the pages they reference."""

from .notion_url import extract_page_id, is_valid_notion_url
from .manifest_parser import parse_manifest
from .manifest_resolver import parse_override, resolve_manifest
from .project_root import ROOT_MARKER, find_project_root
from .tree_walker import (
    BASE_MANIFEST,
    OVERRIDE_MANIFEST,
    OUTPUT_DIRNAME,
    SKIP_DIRS,
    discover_manifests,
    find_manifest_sets,
)

__all__ = [
    'extract_page_id',
    'is_valid_notion_url',
    'parse_manifest',
    'parse_override',
    'resolve_manifest',
    'ROOT_MARKER',
    'find_project_root',
    'BASE_MANIFEST',
    'OVERRIDE_MANIFEST',
    'OUTPUT_DIRNAME',
    'SKIP_DIRS',
    'discover_manifests',
    'find_manifest_sets',
]
