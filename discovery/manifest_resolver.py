"""
Resolution of a directory's base manifest and local override manifest.

The base file (.spoketome) is shared; the override file (.spoketome.local)
is meant to stay out of version control and can both drop entries from the
base list ('!<url>' lines) and add new ones.
"""

import logging
from typing import List, Optional, Set, Tuple

from models import ManifestEntry
from .manifest_parser import COMMENT_PREFIX, parse_entry, parse_manifest

logger = logging.getLogger('spoketome.discovery')

EXCLUSION_PREFIX = '!'


def parse_override(
    content: str,
    source: str,
    verbose: bool = False
) -> Tuple[Set[str], List[ManifestEntry]]:
    """
    Split override manifest text into exclusions and inclusions.

    Args:
        content: Raw override manifest text
        source: Label for diagnostics
        verbose: Whether to warn about unparseable lines

    Returns:
        Tuple of (raw URLs to exclude, inclusion entries in file order)
    """
    exclusions: Set[str] = set()
    inclusions: List[ManifestEntry] = []

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        if line.startswith(EXCLUSION_PREFIX):
            excluded = line[len(EXCLUSION_PREFIX):].strip()
            if excluded:
                exclusions.add(excluded)
            continue

        entry = parse_entry(line, source, verbose)
        if entry is not None:
            inclusions.append(entry)

    return exclusions, inclusions


def _drop_duplicate_ids(entries: List[ManifestEntry], seen_ids: Set[str]) -> List[ManifestEntry]:
    """Keep the first entry per page ID; seen_ids is updated in place."""
    kept = []
    for entry in entries:
        if entry.page_id in seen_ids:
            continue
        seen_ids.add(entry.page_id)
        kept.append(entry)
    return kept


def resolve_manifest(
    base_content: Optional[str],
    override_content: Optional[str],
    directory: str,
    verbose: bool = False
) -> List[ManifestEntry]:
    """
    Compute the final entry list for one directory.

    Base entries keep their file order minus any whose raw URL is excluded
    by the override; override inclusions follow. A page ID appears at most
    once, at its first position. Exclusions compare raw URL strings, not
    page IDs.

    Args:
        base_content: Text of the base manifest, or None if absent
        override_content: Text of the override manifest, or None if absent
        directory: Directory label for diagnostics
        verbose: Whether to log warnings and exclusion counts

    Returns:
        Ordered, deduplicated entries (empty if neither file exists)
    """
    if base_content is None and override_content is None:
        return []

    base_entries: List[ManifestEntry] = []
    if base_content is not None:
        base_entries = parse_manifest(base_content, f"{directory} (base)", verbose)

    seen_ids: Set[str] = set()

    if override_content is None:
        return _drop_duplicate_ids(base_entries, seen_ids)

    exclusions, inclusions = parse_override(override_content, f"{directory} (override)", verbose)

    kept = [entry for entry in base_entries if entry.url not in exclusions]

    excluded_count = len(base_entries) - len(kept)
    if verbose and excluded_count > 0:
        logger.info(f"Excluded {excluded_count} entr{'y' if excluded_count == 1 else 'ies'} in {directory}")

    resolved = _drop_duplicate_ids(kept, seen_ids)
    resolved.extend(_drop_duplicate_ids(inclusions, seen_ids))

    return resolved


__all__ = ['EXCLUSION_PREFIX', 'parse_override', 'resolve_manifest']
