"""Annotation scanner: collect, match, enrich and apply over a document."""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional

from . import logging_manager as log_mgr
from . import observability
from .config.constants import DEFAULT_MAX_CONCURRENCY
from .document import (
    AnnotationFragment,
    DocumentModel,
    ExcludePredicate,
    Fragment,
    TextFragment,
    default_exclude,
)
from .exceptions import MissingCollaboratorError, TranslationError
from .progress import EnrichmentProgress, ProgressTracker
from .text.context import ContextExtractor
from .text.tokenizer import iter_word_matches
from .translation.base import Translator
from .vocabulary.models import VocabularyEntry
from .vocabulary.service import VocabularyService
from .workers import BoundedWorkerPool

logger = log_mgr.get_logger().getChild("scanner")

ProgressCallback = Callable[[EnrichmentProgress], None]


class ScanStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    ERROR = "error"


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    ENRICHING = "enriching"
    APPLYING = "applying"


@dataclass(frozen=True, slots=True)
class ScanError:
    """A word whose enrichment failed during a scan."""

    word: str
    message: str


@dataclass(frozen=True, slots=True)
class WordOccurrence:
    """One match of a word inside a text unit, relative to the unit content at collection time."""

    word: str
    normalized: str
    ref: Hashable
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(slots=True)
class ScanResult:
    """Summary returned by :meth:`AnnotationScanner.scan_page`."""

    status: ScanStatus = ScanStatus.COMPLETED
    text_units_scanned: int = 0
    unique_words: int = 0
    words_to_annotate: int = 0
    annotations_applied: int = 0
    skipped_occurrences: int = 0
    duration_ms: float = 0.0
    errors: List[ScanError] = field(default_factory=list)
    reason: Optional[str] = None
    fatal_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status.value
        return payload


@dataclass(slots=True)
class _Annotation:
    text: str
    metadata: Dict[str, Any]


class AnnotationScanner:
    """Annotate vocabulary words found in a :class:`DocumentModel`.

    A scan runs four stages. *Collect* walks the document's text units and
    records every word occurrence. *Match* asks the vocabulary service which
    unique words need a hint. *Enrich* fetches a translation per word with
    bounded concurrency, isolating failures to the word that caused them.
    *Apply* rewrites each affected unit once, splicing from the last
    occurrence to the first so earlier offsets stay valid.

    Only one scan may run at a time; overlapping calls return a ``skipped``
    result without touching the document.
    """

    def __init__(
        self,
        vocabulary: VocabularyService,
        translator: Optional[Translator],
        *,
        source_lang: str = "en",
        target_lang: str = "zh-CN",
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        context_extractor: Optional[ContextExtractor] = None,
        exclude: Optional[ExcludePredicate] = default_exclude,
        fetch_translation: bool = True,
        tracker_factory: Callable[[], ProgressTracker] = ProgressTracker,
    ) -> None:
        if vocabulary is None:
            raise MissingCollaboratorError("AnnotationScanner", "vocabulary service")
        if translator is None and fetch_translation:
            raise MissingCollaboratorError("AnnotationScanner", "translator")
        self.vocabulary = vocabulary
        self.translator = translator
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.context_extractor = context_extractor or ContextExtractor()
        self.exclude = exclude
        self.fetch_translation = fetch_translation
        self.pool = BoundedWorkerPool(max_workers=max_concurrency)
        self._tracker_factory = tracker_factory
        self._tracker: Optional[ProgressTracker] = None
        self._state = ScanState.IDLE
        self._abort_requested = False
        self._originals: Dict[Hashable, str] = {}
        self._applied: Dict[Hashable, int] = {}

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state is not ScanState.IDLE

    @property
    def progress_tracker(self) -> Optional[ProgressTracker]:
        """Tracker of the current (or most recent) scan."""
        return self._tracker

    def abort(self) -> None:
        """Stop starting new enrichment requests and skip the apply stage."""

        if self.is_scanning:
            self._abort_requested = True
            logger.info("Scan abort requested", extra={"event": "scanner.abort"})

    async def scan_page(
        self,
        document: DocumentModel,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ScanResult:
        if self.is_scanning:
            logger.info(
                "Scan already in progress; skipping",
                extra={"event": "scanner.skipped", "state": self._state.value},
            )
            return ScanResult(status=ScanStatus.SKIPPED, reason="already_scanning")

        self._state = ScanState.SCANNING
        self._abort_requested = False
        tracker = self._tracker_factory()
        self._tracker = tracker
        result = ScanResult()
        start = time.perf_counter()
        with log_mgr.log_context(scan_id=uuid.uuid4().hex[:12]):
            try:
                await self._run(document, result, tracker, on_progress)
            except Exception as exc:
                logger.exception(
                    "Scan failed",
                    extra={"event": "scanner.failed", "status": ScanStatus.ERROR.value},
                )
                result.status = ScanStatus.ERROR
                result.fatal_error = f"{exc.__class__.__name__}: {exc}"
            finally:
                self._state = ScanState.IDLE
                tracker.mark_finished(reason=result.reason or result.status.value)
                result.duration_ms = round((time.perf_counter() - start) * 1000.0, 2)

            observability.record_metric(
                "scanner.duration", result.duration_ms, {"status": result.status.value}
            )
            logger.info(
                "Scan finished",
                extra={
                    "event": "scanner.finished",
                    "status": result.status.value,
                    "duration_ms": result.duration_ms,
                    "attributes": {
                        "units": result.text_units_scanned,
                        "unique_words": result.unique_words,
                        "words_to_annotate": result.words_to_annotate,
                        "annotations": result.annotations_applied,
                        "errors": len(result.errors),
                        "skipped_occurrences": result.skipped_occurrences,
                    },
                },
            )
        return result

    async def _run(
        self,
        document: DocumentModel,
        result: ScanResult,
        tracker: ProgressTracker,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        with observability.pipeline_stage("collect"):
            occurrences, contents = self._collect(document)
        result.text_units_scanned = len(contents)
        result.unique_words = len(occurrences)

        with observability.pipeline_stage("match", {"unique_words": len(occurrences)}):
            flags = self.vocabulary.batch_check(occurrences) if occurrences else {}
        words = [word for word in occurrences if flags.get(word, False)]
        result.words_to_annotate = len(words)
        if not words:
            tracker.set_total(0)
            return

        self._state = ScanState.ENRICHING
        with observability.pipeline_stage("enrich", {"words": len(words)}):
            annotations = await self._enrich(words, occurrences, contents, result, tracker, on_progress)

        if self._abort_requested:
            result.reason = "aborted"
            logger.info(
                "Scan aborted before apply",
                extra={"event": "scanner.aborted", "attributes": {"enriched": len(annotations)}},
            )
            return

        self._state = ScanState.APPLYING
        with observability.pipeline_stage("apply", {"words": len(annotations)}):
            self._apply(document, occurrences, annotations, result)

    def _collect(self, document: DocumentModel):
        occurrences: Dict[str, List[WordOccurrence]] = {}
        contents: Dict[Hashable, str] = {}
        for unit in document.enumerate_text_units(self.exclude):
            content = unit.content()
            contents[unit.ref] = content
            for match in iter_word_matches(content):
                occurrences.setdefault(match.normalized, []).append(
                    WordOccurrence(
                        word=match.word,
                        normalized=match.normalized,
                        ref=unit.ref,
                        offset=match.offset,
                        length=match.length,
                    )
                )
        return occurrences, contents

    async def _enrich(
        self,
        words: List[str],
        occurrences: Dict[str, List[WordOccurrence]],
        contents: Dict[Hashable, str],
        result: ScanResult,
        tracker: ProgressTracker,
        on_progress: Optional[ProgressCallback],
    ) -> Dict[str, _Annotation]:
        tracker.set_total(len(words))
        annotations: Dict[str, _Annotation] = {}

        async def _enrich_word(word: str) -> Optional[_Annotation]:
            entry = self.vocabulary.get_metadata(word)
            if not self.fetch_translation:
                return _metadata_annotation(entry)
            first = occurrences[word][0]
            context = self.context_extractor.extract(
                contents[first.ref], first.word, first.offset
            )
            translation = await self.translator.translate(  # type: ignore[union-attr]
                word, self.source_lang, self.target_lang, context=context
            )
            if not translation.display_text:
                raise TranslationError("Empty translation", word=word, provider=translation.provider)
            metadata: Dict[str, Any] = {
                "translation": translation.translated_text,
                "provider": translation.provider,
            }
            if entry is not None:
                metadata.update(entry.to_dict())
            return _Annotation(text=translation.display_text, metadata=metadata)

        async for outcome in self.pool.map_unordered(
            _enrich_word, words, should_start=lambda: not self._abort_requested
        ):
            if outcome.skipped:
                continue
            word = outcome.item
            if outcome.error is not None:
                message = str(outcome.error) or outcome.error.__class__.__name__
                result.errors.append(ScanError(word=word, message=message))
                tracker.record_error(outcome.error, {"word": word})
                logger.warning(
                    "Enrichment failed for word",
                    extra={"event": "scanner.enrich.failed", "word": word, "error": message},
                )
            elif outcome.result is not None:
                annotations[word] = outcome.result
            progress = tracker.record_word(word, failed=outcome.error is not None)
            if on_progress is not None:
                try:
                    on_progress(progress)
                except Exception:
                    logger.debug(
                        "Progress callback failed",
                        exc_info=True,
                        extra={"event": "scanner.progress_callback_error"},
                    )
        return annotations

    def _apply(
        self,
        document: DocumentModel,
        occurrences: Dict[str, List[WordOccurrence]],
        annotations: Dict[str, _Annotation],
        result: ScanResult,
    ) -> None:
        by_unit: Dict[Hashable, List[WordOccurrence]] = {}
        for word, annotation in annotations.items():
            for occurrence in occurrences[word]:
                by_unit.setdefault(occurrence.ref, []).append(occurrence)

        for ref, unit_occurrences in by_unit.items():
            unit = document.get_unit(ref) if document.unit_exists(ref) else None
            if unit is None:
                result.skipped_occurrences += len(unit_occurrences)
                continue
            content = unit.content()
            tail = content
            pieces: List[Fragment] = []
            applied = 0
            for occurrence in sorted(unit_occurrences, key=lambda item: item.offset, reverse=True):
                if (
                    occurrence.offset < 0
                    or occurrence.end > len(tail)
                    or tail[occurrence.offset : occurrence.end] != occurrence.word
                ):
                    result.skipped_occurrences += 1
                    continue
                annotation = annotations[occurrence.normalized]
                pieces.append(TextFragment(tail[occurrence.end :]))
                pieces.append(
                    AnnotationFragment(
                        base_text=occurrence.word,
                        annotation_text=annotation.text,
                        word=occurrence.normalized,
                        metadata=annotation.metadata,
                    )
                )
                tail = tail[: occurrence.offset]
                applied += 1
            if not applied:
                continue
            pieces.append(TextFragment(tail))
            pieces.reverse()
            try:
                document.replace_unit(ref, pieces)
            except KeyError:
                result.skipped_occurrences += applied
                continue
            # A rescan rebuilds the unit from plain content, so its count replaces the old one.
            self._originals.setdefault(ref, content)
            self._applied[ref] = applied
            result.annotations_applied += applied

    def remove_annotations(self, document: DocumentModel) -> int:
        """Restore the original text of every tracked unit; returns annotations removed."""

        if self.is_scanning:
            logger.warning(
                "Cannot remove annotations while a scan is running",
                extra={"event": "scanner.remove.rejected", "state": self._state.value},
            )
            return 0
        removed = 0
        for ref, original in self._originals.items():
            if not document.unit_exists(ref):
                continue
            document.replace_unit(ref, [TextFragment(original)])
            removed += self._applied.get(ref, 0)
        self._originals.clear()
        self._applied.clear()
        logger.info(
            "Annotations removed",
            extra={"event": "scanner.annotations_removed", "attributes": {"removed": removed}},
        )
        return removed

    def stats(self) -> Dict[str, Any]:
        return {
            "annotated_units": len(self._originals),
            "annotations": sum(self._applied.values()),
            "state": self._state.value,
            "is_scanning": self.is_scanning,
        }

    def close(self) -> None:
        self.pool.shutdown()


def _metadata_annotation(entry: Optional[VocabularyEntry]) -> Optional[_Annotation]:
    if entry is None:
        return None
    if entry.tags:
        text = " ".join(sorted(entry.tags))
    elif entry.frequency_rank is not None:
        text = f"#{entry.frequency_rank}"
    else:
        return None
    return _Annotation(text=text, metadata=entry.to_dict())


__all__ = [
    "AnnotationScanner",
    "ScanError",
    "ScanResult",
    "ScanState",
    "ScanStatus",
    "WordOccurrence",
]
