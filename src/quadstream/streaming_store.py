"""
StreamingStore: quad lookup and insertion running side by side.

Reads issued before writes still see the quads written later, because the
streams returned by read() stay open until finalize() is called. Only then do
all streams end and the store become immutable.

finalize() MUST be called at some point, otherwise every live read stays open.
"""

import asyncio
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, Optional, Set, Union

from quadstream.backing import MemoryQuadStore, QuadSource
from quadstream.channel import PendingChannel, StreamEvents
from quadstream.config import StreamingStoreConfig, get_config
from quadstream.exceptions import StoreFinalizedError
from quadstream.logging_config import logger
from quadstream.pattern_index import PatternIndex, pattern_key
from quadstream.schemas import Quad, TermLike, as_term
from quadstream.stream import LiveQuadStream
from quadstream.utils import as_async_iterator


class StoreState(str, Enum):
    OPEN = "open"
    ENDED = "ended"


@dataclass
class WriteProgress:
    """Per-write counters, reported when the write completes."""
    received: int = 0
    inserted: int = 0
    duplicates: int = 0
    dropped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "received": self.received,
            "inserted": self.inserted,
            "duplicates": self.duplicates,
            "dropped": self.dropped,
        }


class StreamingStore:
    """
    Concurrency layer over a backing quad store.

    Args:
        store: Backing store (defaults to an empty MemoryQuadStore)
        config: Store configuration (defaults to the global config)
    """

    def __init__(
        self,
        store: Optional[QuadSource] = None,
        config: Optional[StreamingStoreConfig] = None,
    ):
        self._store = store if store is not None else MemoryQuadStore()
        self._config = (config or get_config()).validate()
        self._index = PatternIndex()
        self.state = StoreState.OPEN
        # Quads handed to the backing store by a write but not yet forwarded
        self._claimed: Set[Quad] = set()
        self.quads_written = 0
        self.quads_forwarded = 0

    def __enter__(self) -> "StreamingStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.ended:
            self.finalize()

    @property
    def ended(self) -> bool:
        return self.state is StoreState.ENDED

    @property
    def index(self) -> PatternIndex:
        return self._index

    def get_store(self) -> QuadSource:
        """The backing store with every quad written so far."""
        return self._store

    def finalize(self) -> None:
        """
        Mark this store as ended.

        Every running and future read ends, and every later write raises
        StoreFinalizedError. Calling it again closes the channels again, which
        is harmless.
        """
        if self.ended:
            logger.warning("finalize() called on a store that is already finalized")
        self.state = StoreState.ENDED

        for channel in self._index.all_channels:
            channel.close()
        logger.info(
            f"Store finalized: closed {len(self._index)} live reads "
            f"({self.quads_written} quads written, {self.quads_forwarded} live deliveries)"
        )

    def read(
        self,
        subject: TermLike = None,
        predicate: TermLike = None,
        object: TermLike = None,
        graph: TermLike = None,
    ) -> LiveQuadStream:
        """
        Match a quad pattern.

        None and variable terms are wildcards; strings are read as canonical
        term strings. While the store is open the result also receives every
        matching quad written later, until finalize().
        """
        subject, predicate, object, graph = (as_term(term) for term in (subject, predicate, object, graph))
        snapshot = self._store.match(subject, predicate, object, graph)

        if self.ended:
            return LiveQuadStream(snapshot)

        events = StreamEvents()
        channel = PendingChannel(
            pattern_key(subject, predicate, object, graph),
            events,
            backlog_warn_threshold=self._config.backlog_warn_threshold,
        )
        self._index.register(channel, subject, predicate, object, graph)
        logger.debug(f"Registered live read {channel.key!r} ({len(self._index)} open)")
        return LiveQuadStream(snapshot, channel, events)

    def write(self, quads: Union[Iterable[Quad], AsyncIterable[Quad]]) -> "asyncio.Task[int]":
        """
        Import a (possibly live) stream of quads.

        Quads already in the store are skipped. Every new quad is inserted into
        the backing store and pushed to every initialized live read matching
        it, together with a "quad" event.

        Returns:
            Task resolving to the number of quads this call inserted. It raises
            whatever the input stream raises; quads processed before the error
            stay inserted.

        Raises:
            StoreFinalizedError: if the store has been finalized
            RuntimeError: if called without a running event loop
        """
        if self.ended:
            raise StoreFinalizedError()
        loop = asyncio.get_running_loop()
        return loop.create_task(self._write(quads))

    async def _write(self, quads: Union[Iterable[Quad], AsyncIterable[Quad]]) -> int:
        progress = WriteProgress()
        try:
            # Closing the feed releases the claim on a quad the backing store
            # failed to apply
            async with aclosing(self._import_to_listeners(quads, progress)) as feed:
                await self._store.import_stream(feed)
        except Exception as exc:
            logger.error(f"Write aborted after {progress.received} quads: {exc!r}")
            raise
        if progress.dropped:
            logger.debug(f"Dropped {progress.dropped} quads that arrived after finalize()")
        logger.debug(f"Write complete: {progress.to_dict()}")
        return progress.inserted

    async def _import_to_listeners(
        self,
        quads: Union[Iterable[Quad], AsyncIterable[Quad]],
        progress: WriteProgress,
    ) -> AsyncIterator[Quad]:
        """
        Feed the backing store with the quads it does not hold yet.

        Each yielded quad has been applied by the backing store by the time this
        generator resumes, which is when it is forwarded to the live reads.
        """
        async for item in as_async_iterator(quads):
            progress.received += 1
            if self.ended:
                progress.dropped += 1
                continue

            if item not in self._claimed:
                exists = await self._store.count(*item.terms()) > 0
            else:
                exists = True
            # State may have changed while waiting on the existence check
            if self.ended:
                progress.dropped += 1
                continue
            if exists or item in self._claimed:
                progress.duplicates += 1
                continue

            self._claimed.add(item)
            try:
                yield item
            finally:
                self._claimed.discard(item)
            progress.inserted += 1
            self.quads_written += 1
            self._forward(item)

    def _forward(self, item: Quad) -> int:
        if self.ended:
            return 0
        delivered = 0
        for channel in self._index.lookup(item):
            if channel.initialized:
                channel.push(item)
                channel.notify_new(item)
                delivered += 1
        self.quads_forwarded += delivered
        return delivered

    def stats(self) -> Dict[str, Any]:
        size = getattr(self._store, "size", None)
        return {
            "state": self.state.value,
            "live_reads": len(self._index),
            "pattern_buckets": self._index.buckets,
            "store_size": size,
            "quads_written": self.quads_written,
            "quads_forwarded": self.quads_forwarded,
        }
