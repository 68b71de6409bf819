"""Markdown file writer for pulled Notion pages."""

import logging
import re
from pathlib import Path
from typing import Optional, Set, Union

from .context_writer import CONTEXT_FILENAME, ContextWriter

MAX_FILENAME_LENGTH = 100
MARKDOWN_SUFFIX = '.md'


def sanitize_filename(title: str) -> str:
    """
    Convert a page title to a filesystem-safe markdown filename.

    Args:
        title: Page title

    Returns:
        Sanitized filename ending in .md ("untitled.md" if nothing survives)
    """
    sanitized = title.lower()

    # Keep ASCII letters, digits, whitespace and hyphens
    sanitized = re.sub(r'[^a-z0-9\s-]', '', sanitized)

    sanitized = re.sub(r'\s+', '-', sanitized)
    sanitized = re.sub(r'-+', '-', sanitized)
    sanitized = sanitized.strip('-')
    sanitized = sanitized[:MAX_FILENAME_LENGTH]

    return (sanitized or 'untitled') + MARKDOWN_SUFFIX


class MarkdownExporter:
    """
    Writes rendered pages into a manifest directory's output subdirectory.

    Output directories are owned by the tool: files recorded by the previous
    run's context.yaml may be overwritten, and once a run has written new
    pages the ones it did not rewrite are removed, so renamed or dropped
    pages do not linger. Files the tool did not write are left alone and are
    treated as taken names when choosing new filenames.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, context_writer: Optional[ContextWriter] = None):
        self.logger = logger or logging.getLogger('spoketome.exporters.markdown_exporter')
        self.context_writer = context_writer or ContextWriter(logger=self.logger)
        self.stats = {
            'files_written': 0,
            'stale_files_removed': 0,
        }

    def prepare_output_dir(self, output_dir: Union[str, Path]) -> Path:
        """Create the output directory if needed and return it as a Path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    def previous_files(self, output_dir: Union[str, Path]) -> Set[str]:
        """
        Names of the files recorded by the previous run's context.yaml.

        Entries that are not plain names inside output_dir are ignored.
        """
        files = set()

        previous = self.context_writer.read_previous(Path(output_dir))
        for page in previous.get('pages') or []:
            file_path = page.get('filePath') if isinstance(page, dict) else None
            if not isinstance(file_path, str):
                continue

            # Only plain names inside the output directory are ours to delete
            if not file_path or Path(file_path).name != file_path:
                self.logger.warning(f"Ignoring unexpected path in previous {CONTEXT_FILENAME}: {file_path}")
                continue

            files.add(file_path)

        return files

    def remove_stale(self, output_dir: Union[str, Path], previous: Set[str], keep: Set[str]) -> int:
        """
        Delete previously generated files that this run did not rewrite.

        Args:
            output_dir: Output directory
            previous: Names from previous_files()
            keep: Names written by the current run

        Returns:
            Number of files removed
        """
        removed = 0

        for name in sorted(previous - keep):
            stale = Path(output_dir) / name
            if stale.is_file():
                stale.unlink()
                removed += 1
                self.logger.debug(f"Removed stale file {stale}")

        self.stats['stale_files_removed'] += removed
        return removed

    def list_files(self, output_dir: Union[str, Path]) -> Set[str]:
        """Return names already present in output_dir (empty if missing)."""
        try:
            return {p.name for p in Path(output_dir).iterdir() if p.name != CONTEXT_FILENAME}
        except OSError:
            return set()

    def write_markdown(
        self,
        output_dir: Union[str, Path],
        filename: str,
        content: str,
        existing: Set[str]
    ) -> str:
        """
        Write content under a name not yet in existing.

        Repeated names get a numeric suffix before the extension
        (notes.md, notes-1.md, notes-2.md, ...).

        Args:
            output_dir: Directory to write into
            filename: Desired filename
            content: File content
            existing: Names already taken in this directory; updated in place

        Returns:
            The filename actually written
        """
        base = filename[:-len(MARKDOWN_SUFFIX)] if filename.endswith(MARKDOWN_SUFFIX) else filename
        candidate = filename
        suffix = 1

        while candidate in existing:
            candidate = f"{base}-{suffix}{MARKDOWN_SUFFIX}"
            suffix += 1

        existing.add(candidate)
        (Path(output_dir) / candidate).write_text(content, encoding='utf-8')
        self.stats['files_written'] += 1
        self.logger.debug(f"Wrote {Path(output_dir) / candidate}")

        return candidate


__all__ = ['MarkdownExporter', 'sanitize_filename', 'MAX_FILENAME_LENGTH']
