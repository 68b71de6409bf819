#!/usr/bin/env python3
"""
spoketome - Main CLI Entry Point

Finds .spoketome manifests under a project tree, pulls every Notion page they
reference and writes the pages as markdown into a spoketome/ directory next
to each manifest, together with a context.yaml run manifest.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config_loader import DEFAULT_CONFIG_FILENAME, ConfigLoader, get_nested
from fetchers import ApiFetcher
from logger import log_config, log_section, setup_logging
from orchestrator import PullOrchestrator

# Version
__version__ = "0.1.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='spoketome',
        description="Pull Notion pages listed in .spoketome manifests into local markdown files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pull everything under the current project
  NOTION_TOKEN=secret_... spoketome

  # Search another directory
  spoketome --dir path/to/project

  # Preview without fetching or writing
  spoketome --dry-run

  # Keep a machine-readable report
  spoketome --report-file pull-report.json

  # Verbose logging
  spoketome -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '-d', '--dir',
        type=str,
        default='.',
        help='Base directory to search (default: .)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_FILENAME} in --dir, optional)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be pulled without fetching or writing files'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--report-file',
        type=str,
        help='Write the run report as JSON to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Only report errors'
    )

    return parser


def run_pull(config: dict, args: argparse.Namespace, logger: logging.Logger) -> int:
    """
    Build the pipeline from config and run it.

    Returns:
        Exit code (0 on success, 1 if any page failed)
    """
    fetcher = ApiFetcher(config, logger=logging.getLogger('spoketome.fetcher'))

    orchestrator = PullOrchestrator(
        config,
        fetcher,
        dry_run=bool(config.get('dry_run')),
        verbose=args.verbose > 0,
        version=__version__,
        show_progress=not args.quiet and sys.stderr.isatty(),
    )

    report = orchestrator.run(Path(args.dir).resolve())

    if not args.quiet:
        print(report.format_console_report())

    if args.report_file:
        try:
            Path(args.report_file).write_text(report.to_json(), encoding='utf-8')
            logger.info(f"Pull report saved to {args.report_file}")
        except OSError as e:
            logger.warning(f"Failed to export JSON report: {e}")

    logger.debug(f"Run finished in {report.duration:.2f}s")

    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        logger = setup_logging(verbosity=args.verbose, quiet=args.quiet)

        log_section("spoketome")
        logger.info(f"Version: {__version__}")

        config_path = args.config or str(Path(args.dir) / DEFAULT_CONFIG_FILENAME)
        logger.info(f"Loading configuration from {config_path}")
        config = ConfigLoader.load(config_path, required=args.config is not None)

        # CLI arguments take precedence
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        # Reconfigure logging with config file settings
        logger = setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level') if not args.verbose else None,
            quiet=args.quiet,
        )
        log_config(config)

        return run_pull(config, args, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nPull interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
