"""
Per-request batch loading with an explicit level barrier.

Every resolver invocation is counted as in flight from the moment it is called
until its result (or awaitable) completes. A loader call that needs keys not
yet fetched parks its caller. Once every in-flight resolution is parked, no
further key can be registered without a fetch, so all pending keys of all
loaders are dispatched together, one batch call per loader.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..logging import get_logger

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class DispatchStatistics:
    """Counters reported once per request."""

    dispatches: int = 0
    batches: int = 0
    keys: int = 0


class BatchDispatcher:
    """Level barrier shared by all loaders of one request."""

    def __init__(self) -> None:
        self._loaders: list[BatchLoader[Any, Any]] = []
        self._in_flight = 0
        self._parked = 0
        self._settle_scheduled = False
        self._tasks: set[asyncio.Task[None]] = set()
        self.statistics = DispatchStatistics()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def parked(self) -> int:
        return self._parked

    def register(self, loader: BatchLoader[Any, Any]) -> None:
        self._loaders.append(loader)

    def enter(self) -> None:
        """A resolver has been invoked."""
        self._in_flight += 1

    def leave(self) -> None:
        """A resolver has produced its value."""
        self._in_flight -= 1
        self._schedule_settle()

    def park(self) -> None:
        """A resolution is blocked on keys that are not dispatched yet."""
        self._parked += 1
        self._schedule_settle()

    def _schedule_settle(self) -> None:
        # Settling runs after the current synchronous step so that resolvers
        # invoked in that step are already counted as in flight.
        if not self._parked or self._settle_scheduled:
            return
        self._settle_scheduled = True
        asyncio.get_running_loop().call_soon(self._settle)

    def _settle(self) -> None:
        self._settle_scheduled = False
        if self._parked and self._parked >= self._in_flight:
            self.dispatch()

    def dispatch(self) -> asyncio.Task[None] | None:
        """Dispatch all pending keys of every registered loader."""
        batches = [(loader, loader.drain()) for loader in self._loaders]
        batches = [(loader, batch) for loader, batch in batches if batch]
        self._parked = 0
        if not batches:
            return None

        self.statistics.dispatches += 1
        task = asyncio.get_running_loop().create_task(self._run(batches))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self, batches: list[tuple[BatchLoader[Any, Any], list[tuple[Any, asyncio.Future[Any]]]]]
    ) -> None:
        await asyncio.gather(*(loader.load_batch(batch) for loader, batch in batches))


class BatchLoader(Generic[K, V]):
    """Request-scoped loader with a per-key future cache.

    ``load_fn`` receives the list of keys of one batch and must return a
    sequence of the same length, aligned with the keys.
    """

    def __init__(
        self,
        load_fn: Callable[[list[K]], Awaitable[Sequence[V]]],
        dispatcher: BatchDispatcher,
        name: str | None = None,
    ) -> None:
        self.name = name or getattr(load_fn, "__name__", "loader")
        self._load_fn = load_fn
        self._dispatcher = dispatcher
        self._cache: dict[K, asyncio.Future[V]] = {}
        self._pending: dict[K, asyncio.Future[V]] = {}
        dispatcher.register(self)

    def load(self, key: K) -> Awaitable[V]:
        future = self._future_for(key)
        if key in self._pending:
            self._dispatcher.park()
        return future

    def load_many(self, keys: Iterable[K]) -> Awaitable[list[V]]:
        keys = list(keys)
        futures = [self._future_for(key) for key in keys]
        if any(key in self._pending for key in keys):
            self._dispatcher.park()
        return asyncio.gather(*futures)

    def prime(self, key: K, value: V) -> None:
        if key in self._cache:
            return
        future: asyncio.Future[V] = asyncio.get_running_loop().create_future()
        future.set_result(value)
        self._cache[key] = future

    def clear(self, key: K) -> None:
        self._cache.pop(key, None)

    def clear_all(self) -> None:
        self._cache.clear()

    def drain(self) -> list[tuple[K, asyncio.Future[V]]]:
        """Take every pending key out of the queue."""
        batch = list(self._pending.items())
        self._pending.clear()
        return batch

    async def load_batch(self, batch: list[tuple[K, asyncio.Future[V]]]) -> None:
        keys = [key for key, _ in batch]
        statistics = self._dispatcher.statistics
        statistics.batches += 1
        statistics.keys += len(keys)

        try:
            values = await self._load_fn(keys)
            if len(values) != len(keys):
                raise ValueError(
                    f"Loader '{self.name}' returned {len(values)} values for {len(keys)} keys"
                )
        except Exception as e:
            logger.error("Batch load failed", loader=self.name, keys=len(keys), error=str(e))
            for key, future in batch:
                if self._cache.get(key) is future:
                    del self._cache[key]
                if not future.done():
                    future.set_exception(e)
            return

        for (_, future), value in zip(batch, values, strict=True):
            if not future.done():
                future.set_result(value)

    def _future_for(self, key: K) -> asyncio.Future[V]:
        future = self._cache.get(key)
        if future is None:
            # A cleared key may still be queued for the next dispatch
            future = self._pending.get(key)
            if future is None:
                future = asyncio.get_running_loop().create_future()
                self._pending[key] = future
            self._cache[key] = future
        return future
