"""
In-memory backing store for StreamingStore.

Quads are kept with set semantics in insertion order, with one term index per
quad position so pattern matches only scan the smallest matching bucket.
"""

import asyncio
from typing import AsyncIterable, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from quadstream.logging_config import logger

from quadstream.schemas import Quad, QuadPattern, Term


class QuadCursor:
    """
    Snapshot cursor over a pattern match.

    The result set is resolved on the first pull and fixed from then on; later
    inserts into the store are not visible through this cursor.
    """

    def __init__(self, resolve: Callable[[], List[Quad]]):
        self._resolve = resolve
        self._items: Optional[Iterator[Quad]] = None

    @property
    def started(self) -> bool:
        return self._items is not None

    def resolve(self) -> None:
        """Fix the result set now. Later calls are no-ops."""
        if self._items is None:
            self._items = iter(self._resolve())

    def __aiter__(self) -> "QuadCursor":
        return self

    async def __anext__(self) -> Quad:
        self.resolve()
        try:
            return next(self._items)
        except StopIteration:
            raise StopAsyncIteration from None


class MemoryQuadStore:
    """
    Insertion-ordered in-memory quad store.

    Satisfies the QuadSource contract: cursors resolve without suspending, and
    import_stream applies each quad before pulling the next.
    """

    def __init__(self, quads: Optional[Iterable[Quad]] = None):
        self._quads: Dict[Quad, None] = {}
        # subject, predicate, object, graph
        self._indexes: Tuple[Dict[Term, Dict[Quad, None]], ...] = ({}, {}, {}, {})
        for item in quads or ():
            self.add(item)

    @property
    def size(self) -> int:
        return len(self._quads)

    def __len__(self) -> int:
        return len(self._quads)

    def __contains__(self, item: object) -> bool:
        return item in self._quads

    def __iter__(self) -> Iterator[Quad]:
        return iter(list(self._quads))

    def add(self, item: Quad) -> bool:
        """Insert a quad. Returns False if it was already stored."""
        if item in self._quads:
            return False
        self._quads[item] = None
        for index, term in zip(self._indexes, item.terms()):
            index.setdefault(term, {})[item] = None
        return True

    def _select(self, pattern: QuadPattern) -> List[Quad]:
        bound = list(pattern.bound())
        if not bound:
            return list(self._quads)
        if len(bound) == 4:
            candidate = Quad(subject=bound[0][1], predicate=bound[1][1], object=bound[2][1], graph=bound[3][1])
            return [candidate] if candidate in self._quads else []

        buckets = []
        for position, term in bound:
            bucket = self._indexes[position].get(term)
            if not bucket:
                return []
            buckets.append(bucket)
        smallest = min(buckets, key=len)
        return [item for item in smallest if pattern.matches(item)]

    def match(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
        graph: Optional[Term] = None,
    ) -> QuadCursor:
        pattern = QuadPattern(subject=subject, predicate=predicate, object=object, graph=graph)
        return QuadCursor(lambda: self._select(pattern))

    async def count(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
        graph: Optional[Term] = None,
    ) -> int:
        # Yield once so callers always see the existence check as a suspension
        # point; the answer is computed after resuming.
        await asyncio.sleep(0)
        pattern = QuadPattern(subject=subject, predicate=predicate, object=object, graph=graph)
        return len(self._select(pattern))

    async def import_stream(self, quads: AsyncIterable[Quad]) -> int:
        added = 0
        async for item in quads:
            if self.add(item):
                added += 1
        logger.debug(f"Imported {added} quads (store size {len(self._quads)})")
        return added
