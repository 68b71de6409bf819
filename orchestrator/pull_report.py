"""
Pull report for aggregating per-directory statistics and formatting a summary.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from logger import format_elapsed


@dataclass
class DirectoryStats:
    """Outcome of processing one manifest directory."""

    directory: Path
    output_dir: Path
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    files: List[str] = field(default_factory=list)
    planned: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)
    context_written: bool = False

    def record_failure(self, url: str, error: Exception) -> None:
        self.failed += 1
        self.errors.append({'url': url, 'error': str(error)})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'directory': str(self.directory),
            'output_dir': str(self.output_dir),
            'total': self.total,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'files': list(self.files),
            'planned': list(self.planned),
            'errors': list(self.errors),
            'context_written': self.context_written,
        }


@dataclass
class PullReport:
    """Aggregated result of a pull run."""

    root: Optional[Path] = None
    directories: List[DirectoryStats] = field(default_factory=list)
    dry_run: bool = False
    duration: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def succeeded(self) -> int:
        return sum(d.succeeded for d in self.directories)

    @property
    def failed(self) -> int:
        return sum(d.failed for d in self.directories)

    @property
    def total(self) -> int:
        return sum(d.total for d in self.directories)

    @property
    def exit_code(self) -> int:
        """1 if any entry failed anywhere in the run, otherwise 0."""
        return 1 if self.failed > 0 else 0

    def summary_line(self) -> str:
        if self.dry_run:
            count = len(self.directories)
            noun = 'directory' if count == 1 else 'directories'
            return f"Dry run: {self.total} page(s) in {count} {noun} would be pulled."
        return f"Done: {self.succeeded} page(s) pulled, {self.failed} failed."

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': {
                'root': str(self.root) if self.root else None,
                'directories': len(self.directories),
                'total': self.total,
                'succeeded': self.succeeded,
                'failed': self.failed,
                'dry_run': self.dry_run,
                'duration_seconds': self.duration,
                'duration_formatted': format_elapsed(self.duration),
            },
            'directories': [d.to_dict() for d in self.directories],
            'timestamp': self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def format_console_report(self) -> str:
        """
        Format report for console display.

        Returns:
            Multi-line summary; failures are listed with their URLs
        """
        sections = []

        for stats in self.directories:
            status = f"{stats.succeeded}/{stats.total} pulled"
            if stats.failed:
                status += f", {stats.failed} failed"
            if self.dry_run:
                status = f"{stats.total} page(s) planned"
            sections.append(f"  {stats.output_dir}: {status}")
            for url in stats.planned:
                sections.append(f"    Would pull: {url}")
            for error in stats.errors:
                sections.append(f"    ✗ {error['url']}: {error['error']}")

        sections.append(self.summary_line())

        return "\n".join(sections)


__all__ = ['DirectoryStats', 'PullReport']
