"""
Backing stores for StreamingStore.
"""

from .base import QuadSource, SnapshotCursor
from .memory_store import MemoryQuadStore, QuadCursor

__all__ = [
    "QuadSource",
    "SnapshotCursor",
    "MemoryQuadStore",
    "QuadCursor",
]
