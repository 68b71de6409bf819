"""Export package for writing pulled pages and run manifests to disk.

Package Structure:
- markdown_exporter: Filename sanitizing, output directory preparation and
  collision-safe markdown writes
- context_writer: Builds and serializes the context.yaml run manifest
"""

from .context_writer import (
    CONTEXT_FILENAME,
    ContextWriter,
    build_context,
    serialize_context,
    utc_timestamp,
)
from .markdown_exporter import MarkdownExporter, sanitize_filename

__all__ = [
    'CONTEXT_FILENAME',
    'ContextWriter',
    'MarkdownExporter',
    'build_context',
    'sanitize_filename',
    'serialize_context',
    'utc_timestamp',
]
