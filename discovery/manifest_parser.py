"""Parser for .spoketome manifest files."""

import logging
from typing import List

from models import ManifestEntry
from .notion_url import extract_page_id

logger = logging.getLogger('spoketome.discovery')

COMMENT_PREFIX = '#'


def parse_manifest(content: str, source: str, verbose: bool = False) -> List[ManifestEntry]:
    """
    Parse manifest text into entries, one per valid Notion URL line.

    Blank lines and '#' comments are skipped. Lines that are not Notion page
    URLs are dropped; they are reported only when verbose is set. Duplicates
    are kept, deduplication happens in the resolver.

    Args:
        content: Raw manifest text
        source: Label for diagnostics (usually the file path)
        verbose: Whether to warn about unparseable lines

    Returns:
        Entries in file order
    """
    entries = []

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        entry = parse_entry(line, source, verbose)
        if entry is not None:
            entries.append(entry)

    return entries


def parse_entry(line: str, source: str, verbose: bool = False):
    """Turn one stripped manifest line into an entry, or None."""
    page_id = extract_page_id(line)
    if page_id is None:
        if verbose:
            logger.warning(f"Invalid Notion URL in {source}: {line}")
        return None
    return ManifestEntry(url=line, page_id=page_id)


__all__ = ['parse_manifest', 'parse_entry', 'COMMENT_PREFIX']
