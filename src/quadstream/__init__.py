"""
quadstream - live pattern reads over a quad store that is still being written.

Reads stay open and receive matching quads written after them until the store
is finalized.
"""

__version__ = "1.0.0"

# Core exports
from quadstream.backing import MemoryQuadStore, QuadSource, SnapshotCursor
from quadstream.channel import ChannelState, PendingChannel, StreamEvents
from quadstream.config import StreamingStoreConfig, get_config, reset_config
from quadstream.exceptions import QuadStreamError, StoreFinalizedError, QuadSyntaxError
from quadstream.pattern_index import PatternIndex, pattern_key
from quadstream.schemas import (
    Quad,
    QuadPattern,
    Term,
    blank_node,
    default_graph,
    literal,
    named_node,
    quad,
    variable,
)
from quadstream.stream import LiveQuadStream
from quadstream.streaming_store import StoreState, StreamingStore

__all__ = [
    "__version__",
    "StreamingStore",
    "StoreState",
    "LiveQuadStream",
    "PatternIndex",
    "pattern_key",
    "PendingChannel",
    "ChannelState",
    "StreamEvents",
    "MemoryQuadStore",
    "QuadSource",
    "SnapshotCursor",
    "StreamingStoreConfig",
    "get_config",
    "reset_config",
    "QuadStreamError",
    "StoreFinalizedError",
    "QuadSyntaxError",
    "Quad",
    "QuadPattern",
    "Term",
    "quad",
    "named_node",
    "blank_node",
    "literal",
    "variable",
    "default_graph",
]
