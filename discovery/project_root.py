"""Locate the project root marked by a .spoketome-root file."""

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger('spoketome.discovery')

ROOT_MARKER = '.spoketome-root'


def find_project_root(start: Union[str, Path], verbose: bool = False) -> Path:
    """
    Walk up from start to the closest directory containing the root marker.

    Args:
        start: Directory to start from (checked itself first)
        verbose: Whether to log the outcome

    Returns:
        The marked directory, or start (resolved) if no ancestor is marked
    """
    start_dir = Path(start).resolve()

    current = start_dir
    while True:
        if (current / ROOT_MARKER).is_file():
            if verbose:
                logger.info(f"Found project root marker in {current}")
            return current

        parent = current.parent
        if parent == current:
            break
        current = parent

    if verbose:
        logger.info(f"No {ROOT_MARKER} marker found; searching from {start_dir}")
    return start_dir


__all__ = ['ROOT_MARKER', 'find_project_root']
