"""Bounded asynchronous worker pool used for enrichment fan-out."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Generic, Iterable, Optional, TypeVar

from . import observability
from .config.constants import DEFAULT_MAX_CONCURRENCY

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


@dataclass(slots=True)
class WorkOutcome(Generic[ItemT, ResultT]):
    """Result of running one item through the pool.

    ``skipped`` is set when the item never started because the pool was
    told to stop; ``error`` holds the exception raised by the work function.
    """

    item: ItemT
    result: Optional[ResultT] = None
    error: Optional[BaseException] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return not self.skipped and self.error is None


class BoundedWorkerPool:
    """Run work items concurrently with at most ``max_workers`` in flight.

    Excess items wait for a permit instead of starting. Synchronous work
    functions are executed in a thread so the event loop stays responsive.
    """

    mode = "async"

    def __init__(self, *, max_workers: int = DEFAULT_MAX_CONCURRENCY) -> None:
        self.max_workers = max(1, int(max_workers))
        self._in_flight = 0
        self._peak_in_flight = 0
        observability.worker_pool_event(
            "created", max_workers=self.max_workers, attributes={"mode": self.mode}
        )

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of simultaneously running items seen so far."""
        return self._peak_in_flight

    async def _run_one(
        self,
        semaphore: asyncio.Semaphore,
        func: Callable[[ItemT], Any],
        item: ItemT,
        should_start: Optional[Callable[[], bool]],
    ) -> WorkOutcome:
        async with semaphore:
            if should_start is not None and not should_start():
                return WorkOutcome(item=item, skipped=True)
            self._in_flight += 1
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
            try:
                if inspect.iscoroutinefunction(func):
                    result = await func(item)
                else:
                    result = await asyncio.to_thread(func, item)
                    if inspect.isawaitable(result):
                        result = await result
            except Exception as exc:
                return WorkOutcome(item=item, error=exc)
            finally:
                self._in_flight -= 1
            return WorkOutcome(item=item, result=result)

    async def map_unordered(
        self,
        func: Callable[[ItemT], Any],
        items: Iterable[ItemT],
        *,
        should_start: Optional[Callable[[], bool]] = None,
    ) -> AsyncIterator[WorkOutcome]:
        """Yield a :class:`WorkOutcome` per item as soon as it finishes.

        ``should_start`` is consulted right before an item would begin; once
        it returns ``False`` the remaining items are reported as skipped.
        """

        semaphore = asyncio.Semaphore(self.max_workers)
        tasks = [
            asyncio.ensure_future(self._run_one(semaphore, func, item, should_start))
            for item in items
        ]
        observability.record_metric(
            "worker_pool.tasks_submitted",
            float(len(tasks)),
            {"mode": self.mode, "max_workers": self.max_workers},
        )
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    def shutdown(self) -> None:
        observability.worker_pool_event(
            "shutdown", max_workers=self.max_workers, attributes={"mode": self.mode}
        )


__all__ = ["BoundedWorkerPool", "WorkOutcome"]
