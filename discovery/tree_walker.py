"""Recursive discovery of manifest files under a project root."""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from models import DirectoryManifestSet, ResolvedManifest
from .manifest_resolver import resolve_manifest

logger = logging.getLogger('spoketome.discovery')

BASE_MANIFEST = '.spoketome'
OVERRIDE_MANIFEST = '.spoketome.local'
OUTPUT_DIRNAME = 'spoketome'

SKIP_DIRS = frozenset({
    '.git', '.hg', '.svn',
    'node_modules', '__pycache__', '.venv', 'venv',
    OUTPUT_DIRNAME,
})


def _is_skipped(relative: Path, skip_dirs: Iterable[str]) -> bool:
    return any(part in skip_dirs for part in relative.parts)


def find_manifest_sets(
    root: Union[str, Path],
    extra_skip_dirs: Optional[Iterable[str]] = None
) -> List[DirectoryManifestSet]:
    """
    Group base and override manifest files by directory.

    Args:
        root: Search root (never skipped itself)
        extra_skip_dirs: Additional directory names to skip

    Returns:
        One DirectoryManifestSet per directory holding at least one manifest
    """
    root = Path(root)
    skip_dirs = set(SKIP_DIRS) | set(extra_skip_dirs or ())
    found: Dict[Path, Dict[str, Path]] = {}

    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        relative = current.relative_to(root)

        # Prune in place; compare against the path relative to root
        dirnames[:] = sorted(
            d for d in dirnames if not _is_skipped(relative / d, skip_dirs)
        )

        for name in (BASE_MANIFEST, OVERRIDE_MANIFEST):
            if name in filenames:
                found.setdefault(current, {})[name] = current / name

    return [
        DirectoryManifestSet(
            directory=directory,
            base_path=files.get(BASE_MANIFEST),
            override_path=files.get(OVERRIDE_MANIFEST),
        )
        for directory, files in found.items()
    ]


def _read_manifest(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read manifest {path}: {e}")
        return None


def discover_manifests(
    root: Union[str, Path],
    verbose: bool = False,
    extra_skip_dirs: Optional[Iterable[str]] = None
) -> List[ResolvedManifest]:
    """
    Find every manifest directory under root and resolve its entries.

    Directories whose manifests resolve to zero entries are dropped.

    Args:
        root: Project root (see find_project_root)
        verbose: Whether to log parser warnings and exclusion counts
        extra_skip_dirs: Additional directory names to skip

    Returns:
        List of ResolvedManifest in traversal order
    """
    results = []

    for manifest_set in find_manifest_sets(root, extra_skip_dirs):
        entries = resolve_manifest(
            base_content=_read_manifest(manifest_set.base_path),
            override_content=_read_manifest(manifest_set.override_path),
            directory=str(manifest_set.directory),
            verbose=verbose,
        )

        if not entries:
            logger.debug(f"No pages resolved in {manifest_set.directory}")
            continue

        results.append(ResolvedManifest(
            directory=manifest_set.directory,
            output_dir=manifest_set.directory / OUTPUT_DIRNAME,
            entries=entries,
            sources=manifest_set.sources,
        ))

    return results


__all__ = [
    'BASE_MANIFEST',
    'OVERRIDE_MANIFEST',
    'OUTPUT_DIRNAME',
    'SKIP_DIRS',
    'find_manifest_sets',
    'discover_manifests',
]
