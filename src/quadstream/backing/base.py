"""
Contract required of the store a StreamingStore writes into and reads from.
"""

from typing import AsyncIterable, AsyncIterator, Optional, Protocol, runtime_checkable

from quadstream.schemas import Quad, Term


@runtime_checkable
class SnapshotCursor(Protocol):
    """
    Finite async cursor over a pattern match.

    ``resolve()`` fixes the result set without suspending. It is called
    implicitly by the first pull, and may be called earlier so that a live
    read can take its snapshot in the same step as it opens its channel.
    """

    def resolve(self) -> None:
        ...

    def __aiter__(self) -> AsyncIterator[Quad]:
        ...

    async def __anext__(self) -> Quad:
        ...


@runtime_checkable
class QuadSource(Protocol):
    """
    Point-in-time quad store used as the backing store of a StreamingStore.

    Implementations must honour two ordering rules the StreamingStore relies on:
    ``import_stream`` applies every quad it pulls before pulling the next one,
    and a cursor returned by ``match`` fixes its result set in ``resolve()``,
    before any suspension point.
    """

    def match(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
        graph: Optional[Term] = None,
    ) -> SnapshotCursor:
        """Snapshot cursor over the quads matching the pattern."""
        ...

    async def import_stream(self, quads: AsyncIterable[Quad]) -> int:
        """Insert every quad of a live stream, returning how many were new."""
        ...

    async def count(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
        graph: Optional[Term] = None,
    ) -> int:
        """Number of stored quads matching the pattern."""
        ...
