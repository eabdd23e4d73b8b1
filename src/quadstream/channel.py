"""
Live delivery channels.

A PendingChannel is the producer side of one live read: the StreamingStore
pushes newly inserted quads into it, and the LiveQuadStream wrapping it hands
them to the consumer in FIFO order until the channel is closed.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from quadstream.logging_config import logger

from quadstream.config import get_config
from quadstream.exceptions import ChannelClosed, ChannelStateError
from quadstream.schemas import Quad

# data: every quad handed to the consumer
# quad: a freshly written quad, raised at insert time
# end: the consumer observed termination
# error: a listener or the snapshot cursor failed
STREAM_EVENTS = ("data", "quad", "end", "error")

_CLOSE = object()


class StreamEvents:
    """
    Listener registry for the events of one live stream.

    A listener that raises never breaks the code emitting the event; its error
    is logged and re-emitted to the "error" listeners instead.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable[..., Any]]] = {name: [] for name in STREAM_EVENTS}

    def _check(self, event: str) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown stream event '{event}', expected one of {', '.join(STREAM_EVENTS)}")

    def on(self, event: str, callback: Callable[..., Any]) -> "StreamEvents":
        self._check(event)
        self._listeners[event].append(callback)
        return self

    def once(self, event: str, callback: Callable[..., Any]) -> "StreamEvents":
        def wrapper(*args):
            self.off(event, wrapper)
            callback(*args)

        return self.on(event, wrapper)

    def off(self, event: str, callback: Callable[..., Any]) -> "StreamEvents":
        self._check(event)
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)
        return self

    def listener_count(self, event: str) -> int:
        self._check(event)
        return len(self._listeners[event])

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of an event. Returns True if there were any."""
        self._check(event)
        listeners = list(self._listeners[event])
        for callback in listeners:
            try:
                callback(*args)
            except Exception as exc:
                if event == "error":
                    logger.opt(exception=exc).error(f"Error listener failed: {exc!r}")
                    continue
                logger.warning(f"Listener for '{event}' raised {exc!r}")
                self.emit("error", exc)
        return bool(listeners)


class ChannelState(str, Enum):
    REGISTERED = "registered"
    INITIALIZED = "initialized"
    CLOSED = "closed"


class PendingChannel:
    """
    Single-producer/single-consumer FIFO for one live read.

    States move REGISTERED -> INITIALIZED -> CLOSED (or straight to CLOSED).
    Only INITIALIZED channels accept pushes; pushes after closing are ignored.
    The buffer is unbounded: a consumer that stops pulling makes it grow until
    the store is finalized, which is logged once past the backlog threshold.
    """

    def __init__(
        self,
        key: str,
        events: Optional[StreamEvents] = None,
        backlog_warn_threshold: Optional[int] = None,
    ):
        self.key = key
        self.events = events if events is not None else StreamEvents()
        self.state = ChannelState.REGISTERED
        self.pushed = 0
        self._queue: asyncio.Queue = asyncio.Queue()
        if backlog_warn_threshold is None:
            backlog_warn_threshold = get_config().backlog_warn_threshold
        self._backlog_warn_threshold = backlog_warn_threshold
        self._backlog_warned = False

    def __repr__(self) -> str:
        return f"PendingChannel(key={self.key!r}, state={self.state.value}, backlog={self.backlog})"

    @property
    def backlog(self) -> int:
        """Quads pushed but not yet taken by the consumer."""
        size = self._queue.qsize()
        if self.state is ChannelState.CLOSED:
            size -= 1
        return size

    @property
    def initialized(self) -> bool:
        return self.state is ChannelState.INITIALIZED

    @property
    def closed(self) -> bool:
        return self.state is ChannelState.CLOSED

    def initialize(self) -> None:
        """Start accepting live quads. A closed channel stays closed."""
        if self.state is ChannelState.REGISTERED:
            self.state = ChannelState.INITIALIZED

    def push(self, item: Quad) -> bool:
        """Buffer a quad for the consumer. Returns False if the channel is closed."""
        if self.state is ChannelState.CLOSED:
            logger.debug(f"Dropping push to closed channel {self.key!r}")
            return False
        if self.state is ChannelState.REGISTERED:
            raise ChannelStateError(self.key, self.state.value, "push to")

        self._queue.put_nowait(item)
        self.pushed += 1
        if not self._backlog_warned and self.backlog > self._backlog_warn_threshold:
            self._backlog_warned = True
            logger.warning(
                f"Channel {self.key!r} has {self.backlog} undelivered quads; "
                f"its consumer is not keeping up"
            )
        return True

    def notify_new(self, item: Quad) -> None:
        """Raise the new-fact event for a quad that was just written."""
        if self.state is ChannelState.CLOSED:
            return
        self.events.emit("quad", item)

    def close(self) -> None:
        if self.state is ChannelState.CLOSED:
            logger.debug(f"Channel {self.key!r} already closed")
            return
        self.state = ChannelState.CLOSED
        self._queue.put_nowait(_CLOSE)

    async def get(self) -> Quad:
        """
        Wait for the next quad.

        Raises:
            ChannelClosed: once the channel is closed and every buffered quad
                has been taken.
        """
        item = await self._queue.get()
        if item is _CLOSE:
            # Keep the marker so every later read ends too
            self._queue.put_nowait(_CLOSE)
            raise ChannelClosed(self.key)
        return item
