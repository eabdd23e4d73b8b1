"""
Consumer side of a StreamingStore read.
"""

from typing import Any, Callable, List, Optional

from quadstream.backing.base import SnapshotCursor
from quadstream.channel import PendingChannel, StreamEvents
from quadstream.exceptions import ChannelClosed
from quadstream.logging_config import logger
from quadstream.schemas import Quad


class LiveQuadStream:
    """
    Async iterator over a snapshot followed by live quads.

    Yields every snapshot quad in the backing store's order, then every quad
    pushed into the channel in arrival order, and stops once the channel is
    closed and drained. Without a channel (store already finalized) it yields
    the snapshot only.

    The stream starts on the first pull, or as soon as a "quad" listener is
    attached, whichever comes first. Starting resolves the snapshot cursor and
    initializes the channel in one synchronous step, so a quad written before
    the start is part of the snapshot and a quad written after it is pushed
    live and announced on "quad".

    Usage:
        stream = store.read(subject=named_node("s1"))
        stream.on("quad", lambda q: print("new", q))
        async for item in stream:
            ...
    """

    def __init__(
        self,
        snapshot: SnapshotCursor,
        channel: Optional[PendingChannel] = None,
        events: Optional[StreamEvents] = None,
    ):
        self._snapshot: Optional[SnapshotCursor] = snapshot
        self._channel = channel
        if events is None:
            events = channel.events if channel is not None else StreamEvents()
        self.events = events
        self._started = False
        self._ended = False

    @property
    def channel(self) -> Optional[PendingChannel]:
        return self._channel

    @property
    def started(self) -> bool:
        return self._started

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def live(self) -> bool:
        """True if the stream will receive quads written after it was opened."""
        return self._channel is not None

    def start(self) -> None:
        """
        Take the snapshot and open the channel for live quads.

        Called by the first pull and by attaching a "quad" listener. Starting
        twice is a no-op.
        """
        if self._started:
            return
        self._started = True
        self._snapshot.resolve()
        if self._channel is not None:
            self._channel.initialize()

    def _listening(self, event: str) -> None:
        if event == "quad" and self._channel is not None:
            self.start()

    def on(self, event: str, callback: Callable[..., Any]) -> "LiveQuadStream":
        self.events.on(event, callback)
        self._listening(event)
        return self

    def once(self, event: str, callback: Callable[..., Any]) -> "LiveQuadStream":
        self.events.once(event, callback)
        self._listening(event)
        return self

    def off(self, event: str, callback: Callable[..., Any]) -> "LiveQuadStream":
        self.events.off(event, callback)
        return self

    def __aiter__(self) -> "LiveQuadStream":
        return self

    async def __anext__(self) -> Quad:
        if self._ended:
            raise StopAsyncIteration

        if self._snapshot is not None:
            try:
                self.start()
                item = await self._snapshot.__anext__()
            except StopAsyncIteration:
                self._snapshot = None
            except Exception as exc:
                logger.error(f"Snapshot cursor failed: {exc!r}")
                self.events.emit("error", exc)
                raise
            else:
                self.events.emit("data", item)
                return item

        if self._channel is not None:
            try:
                item = await self._channel.get()
            except ChannelClosed:
                pass
            else:
                self.events.emit("data", item)
                return item

        self._ended = True
        self.events.emit("end")
        raise StopAsyncIteration

    async def to_list(self) -> List[Quad]:
        """Drain the stream. Waits for the store to be finalized if it is live."""
        return [item async for item in self]
