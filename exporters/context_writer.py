"""Builds and writes the context.yaml run manifest for an output directory."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from models import PulledDocument, RunManifest, RunManifestRecord

CONTEXT_FILENAME = 'context.yaml'
GENERATOR_NAME = 'spoketome'


class ContextDumper(yaml.SafeDumper):
    """YAML dumper writing scalar lists inline ([a, b]) and nested data in block style."""
    pass


def _represent_list(dumper: yaml.SafeDumper, data: list) -> yaml.Node:
    flow = all(not isinstance(item, (dict, list)) for item in data)
    return dumper.represent_sequence('tag:yaml.org,2002:seq', data, flow_style=flow)


ContextDumper.add_representer(list, _represent_list)


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def build_context(
    pulled: List[Tuple[PulledDocument, str]],
    version: str,
    now: Optional[str] = None
) -> RunManifest:
    """
    Build the run manifest for one output directory.

    Args:
        pulled: (document, written filename) pairs in processing order
        version: Tool version for the generatedBy field
        now: Run timestamp (defaults to the current UTC time)

    Returns:
        RunManifest
    """
    now = now or utc_timestamp()

    return RunManifest(
        generated_by=f"{GENERATOR_NAME}@{version}",
        last_run_at=now,
        pages=[
            RunManifestRecord(
                title=document.title,
                url=document.url,
                page_id=document.page_id,
                file_path=filename,
                last_pulled_at=now,
                last_edited_at=document.last_edited_time,
                properties=dict(document.properties),
            )
            for document, filename in pulled
        ],
    )


def serialize_context(manifest: RunManifest) -> str:
    """Render a run manifest as YAML with a fixed field order."""
    return yaml.dump(
        manifest.to_dict(),
        Dumper=ContextDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=1000  # Prevent line wrapping
    )


class ContextWriter:
    """Reads and writes context.yaml files."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('spoketome.exporters.context_writer')

    def write(self, output_dir: Union[str, Path], manifest: RunManifest) -> Path:
        """Write manifest to output_dir/context.yaml, replacing any previous file."""
        path = Path(output_dir) / CONTEXT_FILENAME
        path.write_text(serialize_context(manifest), encoding='utf-8')
        self.logger.debug(f"Wrote {path} with {len(manifest.pages)} page(s)")
        return path

    def read_previous(self, output_dir: Union[str, Path]) -> Dict[str, Any]:
        """
        Load the previous run's context.yaml.

        Returns:
            Parsed mapping, or an empty dict if missing or unreadable
        """
        path = Path(output_dir) / CONTEXT_FILENAME
        if not path.is_file():
            return {}

        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8'))
        except (OSError, yaml.YAMLError) as e:
            self.logger.warning(f"Could not read previous {path}: {e}")
            return {}

        return data if isinstance(data, dict) else {}


__all__ = [
    'CONTEXT_FILENAME',
    'ContextWriter',
    'build_context',
    'serialize_context',
    'utc_timestamp',
]
