"""Tests for the document model, worker pool and progress tracker used by scans."""

from __future__ import annotations

import asyncio
import threading

import pytest

from wordgloss.document import (
    AnnotationFragment,
    InMemoryDocument,
    TextFragment,
    default_exclude,
)
from wordgloss.progress import ProgressTracker
from wordgloss.workers import BoundedWorkerPool

pytestmark = pytest.mark.scanner


def test_annotation_fragment_metadata_defaults_to_empty_mapping():
    fragment = AnnotationFragment("apple", "苹果", "apple")
    tagged = AnnotationFragment("apple", "苹果", "apple", metadata={"tags": ["cet4"]})

    assert dict(fragment.metadata) == {}
    assert fragment == tagged
    assert hash(fragment) == hash(tagged)


class TestInMemoryDocument:
    def test_units_and_content(self):
        document = InMemoryDocument(["First.", ("alert(1)", "script")])
        ref = document.add_unit("Third.", ref="custom")

        assert document.refs == [0, 1, "custom"]
        assert ref == "custom"
        assert document.get_unit(1).region == "script"
        assert document.text(" | ") == "First. | alert(1) | Third."
        with pytest.raises(KeyError):
            document.add_unit("dup", ref="custom")

    def test_replace_unit_keeps_original_text_recoverable(self):
        document = InMemoryDocument(["An apple."])

        document.replace_unit(
            0,
            [TextFragment("An "), AnnotationFragment("apple", "苹果", "apple"), TextFragment(".")],
        )

        unit = document.get_unit(0)
        assert unit.content() == "An apple."
        assert unit.annotated
        assert document.replace_calls == 1
        with pytest.raises(KeyError):
            document.replace_unit(42, [TextFragment("x")])

    def test_default_exclude(self):
        document = InMemoryDocument(["Prose.", ("x = 1", "style"), "  ", "More prose."])
        document.replace_unit(3, [AnnotationFragment("More", "hint", "more"), TextFragment(" prose.")])

        included = [unit.ref for unit in document.enumerate_text_units(default_exclude)]

        assert included == [0]
        assert len(list(document.enumerate_text_units())) == 4

    def test_removed_units_no_longer_exist(self):
        document = InMemoryDocument(["a", "b"])
        document.remove_unit(0)

        assert not document.unit_exists(0)
        assert document.get_unit(0) is None
        assert document.unit_exists(1)


class TestBoundedWorkerPool:
    def test_runs_every_item_and_isolates_errors(self):
        pool = BoundedWorkerPool(max_workers=3)

        async def work(item: int) -> int:
            await asyncio.sleep(0.001 * (5 - item))
            if item == 2:
                raise ValueError("bad item")
            return item * 10

        async def _run():
            return [outcome async for outcome in pool.map_unordered(work, range(5))]

        outcomes = asyncio.run(_run())

        assert sorted(outcome.item for outcome in outcomes) == [0, 1, 2, 3, 4]
        failed = [outcome for outcome in outcomes if outcome.error is not None]
        assert len(failed) == 1 and failed[0].item == 2
        assert isinstance(failed[0].error, ValueError)
        assert sorted(outcome.result for outcome in outcomes if outcome.ok) == [0, 10, 30, 40]
        assert pool.peak_in_flight <= 3
        pool.shutdown()

    def test_sync_callables_run_in_threads(self):
        pool = BoundedWorkerPool(max_workers=2)
        main_thread = threading.get_ident()

        def work(item: str) -> int:
            return threading.get_ident()

        async def _run():
            return [outcome async for outcome in pool.map_unordered(work, ["a", "b"])]

        outcomes = asyncio.run(_run())

        assert all(outcome.ok for outcome in outcomes)
        assert all(outcome.result != main_thread for outcome in outcomes)

    def test_should_start_skips_remaining_items(self):
        pool = BoundedWorkerPool(max_workers=1)
        started: list[int] = []

        async def work(item: int) -> int:
            started.append(item)
            return item

        async def _run():
            return [
                outcome
                async for outcome in pool.map_unordered(
                    work, range(4), should_start=lambda: len(started) < 2
                )
            ]

        outcomes = asyncio.run(_run())

        assert len(started) == 2
        assert sum(1 for outcome in outcomes if outcome.skipped) == 2

    def test_worker_count_is_at_least_one(self):
        assert BoundedWorkerPool(max_workers=0).max_workers == 1


class TestProgressTracker:
    def test_record_word_tracks_errors(self):
        tracker = ProgressTracker()
        tracker.set_total(2)

        first = tracker.record_word("apple")
        second = tracker.record_word("pear", failed=True)

        assert (first.completed, first.total, first.error_count) == (1, 2, 0)
        assert (second.completed, second.error_count, second.word) == (2, 1, "pear")
        assert tracker.is_complete()
        snapshot = tracker.snapshot()
        assert snapshot.current_word == "pear"
        assert snapshot.error_count == 1

    def test_zero_total_finishes_immediately(self):
        tracker = ProgressTracker()
        events: list[str] = []
        tracker.register_observer(lambda event: events.append(event.event_type))

        tracker.set_total(0)
        tracker.mark_finished(reason="done")

        assert events == ["start", "complete"]
        assert tracker.wait(0)

    def test_failing_observer_does_not_break_tracking(self):
        tracker = ProgressTracker(total=1)
        seen: list[str] = []

        def broken(event):
            raise RuntimeError("observer bug")

        tracker.register_observer(broken)
        unregister = tracker.register_observer(lambda event: seen.append(event.event_type))

        tracker.record_word("apple")
        unregister()
        tracker.record_word("pear")

        assert seen == ["progress"]
