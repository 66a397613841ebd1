"""Viewport synchronization engine: snapshot extraction, classification and execution."""

from .classifier import classify, classify_with_rule
from .executor import CommandExecutor, MapHandle
from .scheduler import ThreadingScheduler
from .snapshot import extract_snapshot
from .synchronizer import ViewportSynchronizer

__all__ = [
    'classify',
    'classify_with_rule',
    'CommandExecutor',
    'MapHandle',
    'ThreadingScheduler',
    'extract_snapshot',
    'ViewportSynchronizer',
]
