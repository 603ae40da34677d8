"""Progress tracking for the enrichment stage of a scan."""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import AsyncIterator, Callable, Dict, Mapping, Optional, Sequence, Tuple

from . import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("progress")


@dataclass(frozen=True)
class EnrichmentProgress:
    """Payload handed to progress callbacks after every enrichment request."""

    completed: int
    total: int
    word: str
    error_count: int

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0


@dataclass(frozen=True)
class ProgressSnapshot:
    """Immutable view of the current progress statistics."""

    completed: int
    total: Optional[int]
    error_count: int
    current_word: Optional[str]
    elapsed: float
    speed: float
    eta: Optional[float]


@dataclass(frozen=True)
class ProgressEvent:
    """Structured message emitted by :class:`ProgressTracker`."""

    event_type: str
    snapshot: ProgressSnapshot
    timestamp: float
    metadata: Mapping[str, object]
    error: Optional[BaseException] = None


class ProgressEventStream:
    """Asynchronous iterator that yields :class:`ProgressEvent` objects."""

    _SENTINEL = object()

    def __init__(self, tracker: "ProgressTracker", loop: asyncio.AbstractEventLoop):
        self._tracker = tracker
        self._loop = loop
        self._queue: "asyncio.Queue[object]" = asyncio.Queue()
        self._closed = False
        self._unsubscribe = tracker.register_observer(self._on_event)

    def _on_event(self, event: ProgressEvent) -> None:
        if self._closed:
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Loop already closed; nothing left to deliver to.
            self._closed = True
        if event.event_type == "complete":
            self.close()

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        return self

    async def __anext__(self) -> ProgressEvent:
        item = await self._queue.get()
        if item is self._SENTINEL:
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    async def aclose(self) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, self._SENTINEL)
        except RuntimeError:
            self._closed = True


class ProgressTracker:
    """Count completed and failed enrichment requests for one scan."""

    def __init__(self, total: Optional[int] = None) -> None:
        self._lock = threading.Lock()
        self._start_time = time.perf_counter()
        self._completed = 0
        self._errors = 0
        self._total: Optional[int] = total
        self._current_word: Optional[str] = None
        self._observers: Sequence[Callable[[ProgressEvent], None]] = []
        self._finished_event = threading.Event()
        self._completion_emitted = False

    def set_total(self, total: int) -> None:
        """Set the number of words to enrich and emit a ``start`` event."""

        new_total = max(0, total)
        with self._lock:
            self._total = new_total
            self._start_time = time.perf_counter()
        self._emit_event("start", metadata={"total": new_total})
        if new_total == 0:
            self.mark_finished(reason="no_work")

    def record_word(self, word: str, *, failed: bool = False) -> EnrichmentProgress:
        """Record one finished enrichment request and return the new progress."""

        with self._lock:
            self._completed += 1
            if failed:
                self._errors += 1
            self._current_word = word
            progress = EnrichmentProgress(
                completed=self._completed,
                total=self._total or 0,
                word=word,
                error_count=self._errors,
            )
        self._emit_event(
            "progress",
            metadata={"word": word, "failed": failed, "completed": progress.completed},
        )
        return progress

    def record_error(self, error: BaseException, metadata: Optional[Dict[str, object]] = None) -> None:
        """Emit an ``error`` event describing ``error``."""

        self._emit_event("error", metadata=dict(metadata or {}), error=error)

    def snapshot(self) -> ProgressSnapshot:
        """Return a snapshot of the current progress statistics."""

        with self._lock:
            completed = self._completed
            total = self._total
            errors = self._errors
            current = self._current_word
        elapsed = max(0.0, time.perf_counter() - self._start_time)
        speed = completed / elapsed if elapsed > 0 and completed > 0 else 0.0
        eta: Optional[float]
        if speed > 0 and total is not None:
            remaining = max(total - completed, 0)
            eta = remaining / speed if remaining > 0 else 0.0
        else:
            eta = None
        return ProgressSnapshot(
            completed=completed,
            total=total,
            error_count=errors,
            current_word=current,
            elapsed=elapsed,
            speed=speed,
            eta=eta,
        )

    def is_complete(self) -> bool:
        with self._lock:
            return self._total is not None and self._completed >= self._total

    def mark_finished(self, *, reason: Optional[str] = None) -> None:
        """Signal that no more progress will be reported."""

        self._finished_event.set()
        with self._lock:
            if self._completion_emitted:
                return
            self._completion_emitted = True
            forced = self._total is None or self._completed < self._total
        metadata: Dict[str, object] = {"forced": forced}
        if reason:
            metadata["reason"] = reason
        self._emit_event("complete", metadata=metadata)

    def wait(self, timeout: float) -> bool:
        return self._finished_event.wait(timeout)

    def register_observer(self, callback: Callable[[ProgressEvent], None]) -> Callable[[], None]:
        """Register ``callback`` to receive :class:`ProgressEvent` notifications."""

        with self._lock:
            observers = list(self._observers)
            observers.append(callback)
            self._observers = observers

        def _unregister() -> None:
            with self._lock:
                observers_inner = list(self._observers)
                try:
                    observers_inner.remove(callback)
                except ValueError:
                    return
                self._observers = observers_inner

        return _unregister

    def stream(self, *, loop: Optional[asyncio.AbstractEventLoop] = None) -> ProgressEventStream:
        """Return an asynchronous iterator of :class:`ProgressEvent` objects."""

        return ProgressEventStream(self, loop or asyncio.get_running_loop())

    def _emit_event(
        self,
        event_type: str,
        *,
        metadata: Optional[Dict[str, object]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        event = ProgressEvent(
            event_type=event_type,
            snapshot=self.snapshot(),
            timestamp=time.perf_counter(),
            metadata=MappingProxyType(dict(metadata or {})),
            error=error,
        )
        with self._lock:
            observers: Tuple[Callable[[ProgressEvent], None], ...] = tuple(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.debug(
                    "Progress observer failed",
                    exc_info=True,
                    extra={"event": "progress.observer_error"},
                )


__all__ = [
    "EnrichmentProgress",
    "ProgressEvent",
    "ProgressEventStream",
    "ProgressSnapshot",
    "ProgressTracker",
]
