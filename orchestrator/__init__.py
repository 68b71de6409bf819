"""
Orchestration package for coordinating a pull run.

A run resolves the project root, discovers manifests, then fetches, renders
and writes every referenced page, directory by directory.
"""

from .pull_orchestrator import PullOrchestrator
from .pull_report import DirectoryStats, PullReport

__all__ = [
    'PullOrchestrator',
    'DirectoryStats',
    'PullReport'
]
