"""
OTel span event emission helpers for field lineage.

Events are attached to the current span and are a no-op when that span is
not recording or when ``emit_span_events`` is disabled in the config.

Usage::

    from fieldlineage.otel import emit_snapshot_built, emit_sort_result

    emit_snapshot_built(info)
    emit_sort_result(ordered)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from opentelemetry import trace as otel_trace

from fieldlineage.config import get_config
from fieldlineage.errors import CycleDetectedError, LineageValidationError
from fieldlineage.operations import EndPointField, Operation

if TYPE_CHECKING:
    from fieldlineage.info import FieldLineageInfo

logger = logging.getLogger(__name__)


def add_span_event(
    name: str, attributes: dict[str, str | int | float | bool]
) -> None:
    """Add an event to the current OTel span if it is recording.

    Args:
        name: Event name (e.g. ``"lineage.snapshot.built"``).
        attributes: Flat dict of span event attributes.
    """
    if not get_config().emit_span_events:
        return
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)


def emit_snapshot_built(info: FieldLineageInfo) -> None:
    """Emit a span event once a snapshot has been validated.

    Event name: ``lineage.snapshot.built``
    """
    attrs: dict[str, str | int | float | bool] = {
        "lineage.checksum": info.checksum,
        "lineage.operations": len(info.operations),
        "lineage.sources": len(info.sources),
        "lineage.destinations": len(info.destinations),
        "lineage.dropped_fields": len(info.dropped_fields),
    }
    add_span_event("lineage.snapshot.built", attrs)


def emit_validation_failure(error: LineageValidationError) -> None:
    """Emit a span event for a rejected operation collection.

    Event name: ``lineage.validation.failed``
    """
    logger.warning("Field lineage validation failed: %s", error)
    add_span_event(
        "lineage.validation.failed",
        {
            "lineage.error": type(error).__name__,
            "lineage.message": str(error),
        },
    )


def emit_sort_result(ordered: list[Operation]) -> None:
    """Event name: ``lineage.sort.complete``"""
    add_span_event(
        "lineage.sort.complete",
        {
            "lineage.operations": len(ordered),
            "lineage.order": ",".join(op.name for op in ordered),
        },
    )


def emit_cycle(error: CycleDetectedError) -> None:
    """Event name: ``lineage.sort.cycle``"""
    logger.warning("%s", error)
    add_span_event(
        "lineage.sort.cycle",
        {
            "lineage.cycle_operations": ",".join(sorted(error.residual)),
            "lineage.message": str(error),
        },
    )


def emit_query_result(
    direction: str, field: EndPointField, operations: Iterable[Operation]
) -> None:
    """Emit a span event for a field query.

    Event name: ``lineage.query.complete``
    """
    names = sorted(op.name for op in operations)
    logger.debug(
        "Lineage %s query for %s matched %d operation(s)",
        direction,
        field,
        len(names),
    )
    add_span_event(
        "lineage.query.complete",
        {
            "lineage.direction": direction,
            "lineage.field": str(field),
            "lineage.matched": len(names),
            "lineage.operations": ",".join(names),
        },
    )
