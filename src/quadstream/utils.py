"""
Small helpers shared across the package.
"""

from typing import AsyncIterable, AsyncIterator, Iterable, List, TypeVar, Union

T = TypeVar("T")


async def as_async_iterator(items: Union[Iterable[T], AsyncIterable[T]]) -> AsyncIterator[T]:
    """
    Iterate a sync or async iterable asynchronously.

    Plain iterables are not given extra suspension points: each item is
    produced as soon as it is requested.
    """
    if hasattr(items, "__aiter__"):
        async for item in items:
            yield item
    else:
        for item in items:
            yield item


async def collect(items: Union[Iterable[T], AsyncIterable[T]]) -> List[T]:
    """Drain an iterable into a list."""
    return [item async for item in as_async_iterator(items)]
