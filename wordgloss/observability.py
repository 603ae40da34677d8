"""Observability utilities for structured logging and telemetry."""

from __future__ import annotations

import contextlib
import time
from typing import Dict, Iterator, Mapping, Optional

from opentelemetry import metrics, trace

from . import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("observability")

_tracer = trace.get_tracer("wordgloss.pipeline")
_meter = metrics.get_meter("wordgloss.pipeline")
_histograms: Dict[str, object] = {}


def _get_histogram(name: str):  # pragma: no cover - simple helper
    histogram = _histograms.get(name)
    if histogram is None:
        histogram = _meter.create_histogram(name)
        _histograms[name] = histogram
    return histogram


def record_metric(
    name: str,
    value: float,
    attributes: Optional[Mapping[str, object]] = None,
) -> None:
    """Record a numeric observation through the OpenTelemetry meter."""

    attrs = {key: _coerce_attribute(val) for key, val in dict(attributes or {}).items()}
    try:
        _get_histogram(name).record(value, attributes=attrs)
    except Exception as exc:  # pragma: no cover - exporter specific
        logger.debug(
            "Failed to export metric via OpenTelemetry",
            extra={"event": "observability.metric_export_error", "metric": name, "error": str(exc)},
        )

    logger.debug(
        "Metric recorded",
        extra={
            "event": "observability.metric_recorded",
            "metric": name,
            "value": value,
            "attributes": attrs,
        },
    )


def _coerce_attribute(value: object) -> object:
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


@contextlib.contextmanager
def pipeline_stage(stage: str, attributes: Optional[Mapping[str, object]] = None) -> Iterator[None]:
    """Instrument a pipeline stage with structured logging and a tracing span."""

    attrs = dict(attributes or {})

    with log_mgr.log_context(stage=stage):
        start = time.perf_counter()
        logger.debug(
            "Stage started",
            extra={"event": "pipeline.stage.start", "attributes": attrs},
        )
        with _tracer.start_as_current_span(
            f"pipeline.stage.{stage}",
            attributes={key: _coerce_attribute(val) for key, val in attrs.items()},
        ):
            yield
        duration_ms = (time.perf_counter() - start) * 1000.0
        record_metric("pipeline.stage.duration", duration_ms, {**attrs, "stage": stage})
        logger.info(
            "Stage completed",
            extra={
                "event": "pipeline.stage.complete",
                "duration_ms": round(duration_ms, 2),
                "attributes": attrs,
            },
        )


def worker_pool_event(
    action: str,
    *,
    max_workers: int,
    attributes: Optional[Mapping[str, object]] = None,
) -> None:
    """Emit a structured log for worker pool lifecycle transitions."""

    attrs: Dict[str, object] = {"max_workers": max_workers}
    if attributes:
        attrs.update(dict(attributes))
    logger.debug(
        "Worker pool event",
        extra={
            "event": "worker_pool.%s" % action,
            "stage": "worker_pool",
            "attributes": attrs,
        },
    )
    record_metric(f"worker_pool.{action}", float(max_workers), {**attrs, "action": action})


__all__ = ["pipeline_stage", "record_metric", "worker_pool_event"]
