"""
Pull orchestrator coordinating discovery, fetching, rendering and writing.

Pipeline: resolve root → discover manifests → per directory, per entry:
fetch (renders markdown and extracts properties) → write → record. After each
directory, the run manifest (context.yaml) is rewritten from the records of
the entries that succeeded.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from tqdm import tqdm

from config_loader import get_nested
from discovery import discover_manifests, find_project_root
from exporters import ContextWriter, MarkdownExporter, build_context
from fetchers import BaseFetcher
from logger import ProgressTracker, log_section
from models import PulledDocument, ResolvedManifest
from orchestrator.pull_report import DirectoryStats, PullReport


class PullOrchestrator:
    """Runs one pull over a project tree."""

    def __init__(
        self,
        config: Dict[str, Any],
        fetcher: BaseFetcher,
        exporter: Optional[MarkdownExporter] = None,
        context_writer: Optional[ContextWriter] = None,
        logger: Optional[logging.Logger] = None,
        dry_run: bool = False,
        verbose: bool = False,
        version: str = '0.0.0',
        show_progress: bool = False
    ):
        """
        Initialize pull orchestrator.

        Args:
            config: Configuration dictionary
            fetcher: Fetcher turning manifest entries into PulledDocuments
            exporter: Markdown file writer (default built here)
            context_writer: Run manifest writer (default built here)
            logger: Optional logger instance
            dry_run: Only report what would be pulled
            verbose: Report skipped manifest lines and exclusions
            version: Tool version recorded in context.yaml
            show_progress: Show a tqdm bar per directory
        """
        self.config = config
        self.fetcher = fetcher
        self.logger = logger or logging.getLogger('spoketome.orchestrator')
        self.context_writer = context_writer or ContextWriter(logger=self.logger)
        self.exporter = exporter or MarkdownExporter(logger=self.logger, context_writer=self.context_writer)
        self.dry_run = dry_run
        self.verbose = verbose
        self.version = version
        self.show_progress = show_progress

    def run(self, start_dir: Union[str, Path] = '.') -> PullReport:
        """
        Pull every page referenced by manifests under the project root.

        Args:
            start_dir: Directory to start the project-root search from

        Returns:
            PullReport; its exit_code is 1 if any entry failed
        """
        start_time = time.time()

        root = find_project_root(start_dir, verbose=self.verbose)
        report = PullReport(root=root, dry_run=self.dry_run)

        log_section("Discovery")
        manifests = discover_manifests(
            root,
            verbose=self.verbose,
            extra_skip_dirs=get_nested(self.config, 'discovery.extra_skip_dirs', []),
        )

        if not manifests:
            self.logger.warning(f"No manifest files found under {root}")
            report.duration = time.time() - start_time
            return report

        self.logger.info(f"Found {len(manifests)} manifest director{'y' if len(manifests) == 1 else 'ies'} under {root}")

        log_section("Dry Run" if self.dry_run else "Pull")
        for manifest in manifests:
            if self.dry_run:
                report.directories.append(self._preview_directory(manifest))
            else:
                report.directories.append(self._pull_directory(manifest))

        report.duration = time.time() - start_time
        self.logger.info(report.summary_line())

        return report

    def _preview_directory(self, manifest: ResolvedManifest) -> DirectoryStats:
        stats = DirectoryStats(directory=manifest.directory, output_dir=manifest.output_dir, total=len(manifest.entries))

        self.logger.info(f"{manifest.label} → {manifest.output_dir}")
        for entry in manifest.entries:
            self.logger.info(f"Would pull: {entry.url}")
            stats.planned.append(entry.url)

        return stats

    def _pull_directory(self, manifest: ResolvedManifest) -> DirectoryStats:
        """
        Pull all entries of one manifest directory.

        Failures are contained per entry. Previous output is only replaced
        when at least one entry succeeded; otherwise it is left untouched.
        """
        stats = DirectoryStats(directory=manifest.directory, output_dir=manifest.output_dir, total=len(manifest.entries))

        try:
            output_dir = self.exporter.prepare_output_dir(manifest.output_dir)
        except OSError as e:
            self.logger.error(f"Cannot prepare {manifest.output_dir}: {e}")
            for entry in manifest.entries:
                stats.record_failure(entry.url, e)
            return stats

        # Files from the previous run may be overwritten in place
        previous = self.exporter.previous_files(output_dir)
        existing = self.exporter.list_files(output_dir) - previous
        pulled: List[Tuple[PulledDocument, str]] = []

        with ProgressTracker(total_items=len(manifest.entries), item_type='pages', label=str(manifest.directory)) as tracker:
            entries = tqdm(
                manifest.entries,
                desc=manifest.directory.name or str(manifest.directory),
                unit='page',
                disable=not self.show_progress,
                file=sys.stderr,
            )
            for entry in entries:
                try:
                    document = self.fetcher.fetch_document(entry)
                    filename = self.exporter.write_markdown(
                        output_dir, document.sanitized_filename, document.markdown, existing
                    )
                except Exception as e:
                    self.logger.error(f"Failed to pull {entry.url}: {e}")
                    stats.record_failure(entry.url, e)
                    tracker.increment(success=False)
                    continue

                pulled.append((document, filename))
                stats.succeeded += 1
                stats.files.append(filename)
                tracker.increment(success=True)
                self.logger.info(f"Pulled '{document.title}' → {output_dir / filename}")

        if pulled:
            self.exporter.remove_stale(output_dir, previous, keep=set(stats.files))
            self.context_writer.write(output_dir, build_context(pulled, self.version))
            stats.context_written = True
        elif previous:
            self.logger.warning(f"No pages pulled for {manifest.label}; keeping previous output in {output_dir}")

        return stats


__all__ = ['PullOrchestrator']
