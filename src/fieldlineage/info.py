"""
Field lineage snapshot of a single program run.

``FieldLineageInfo`` is the aggregate root: it owns the deduplicated
operation set, validates it once at construction, and exposes the derived
views (destination fields, incoming/outgoing summaries, dropped fields) plus
the content checksum.

Derived views are computed eagerly when ``compute_summaries`` is true, or on
first access otherwise, and are cached for the lifetime of the instance.
Each view is a pure function of the operations, so two callers racing on a
first access compute the same value and neither result is wrong.

Two instances are equal iff their checksums are equal.

Usage::

    from fieldlineage import EndPoint, EndPointField, FieldLineageInfo

    info = FieldLineageInfo(operations)
    info.incoming_summary[EndPointField.of(EndPoint.of("ns", "out"), "id")]
    info.incoming_operations_for(EndPointField.of(EndPoint.of("ns", "out"), "id"))
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Any, Iterable, Optional

from fieldlineage.checksum import canonicalize, compute_checksum
from fieldlineage.config import get_config
from fieldlineage.graph import LineageGraph, build_graph
from fieldlineage.operations import EndPoint, EndPointField, Operation
from fieldlineage.ordering import topological_sort
from fieldlineage.otel import emit_snapshot_built
from fieldlineage.queries import FieldQueryEngine
from fieldlineage.summary import Summary, SummaryComputer

logger = logging.getLogger(__name__)

# cached views that survive pickling; the graph indices are rebuilt instead
_PERSISTED_VIEWS = ("destination_fields", "incoming_summary", "outgoing_summary")


class FieldLineageInfo:
    """Validated, immutable field lineage snapshot.

    Args:
        operations: The operations of one program run.  Structurally equal
            operations collapse into one.
        compute_summaries: Compute destination fields and summaries now
            (``True``) or on first access (``False``).  ``None`` uses the
            ``compute_summaries`` config setting.

    Raises:
        LineageValidationError: If the operations do not form a well-formed
            lineage graph.
    """

    def __init__(
        self,
        operations: Iterable[Operation],
        compute_summaries: Optional[bool] = None,
    ) -> None:
        self._operations = frozenset(operations)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Received field lineage operations %s", canonicalize(self._operations))

        # cached_property slot, filled here so validation happens up front
        self.__dict__["graph"] = build_graph(self._operations)
        self._checksum = compute_checksum(self._operations)

        if compute_summaries is None:
            compute_summaries = get_config().compute_summaries
        if compute_summaries:
            for view in _PERSISTED_VIEWS:
                getattr(self, view)

        logger.info(
            "Built field lineage snapshot: checksum=%d operations=%d summaries=%s",
            self._checksum,
            len(self._operations),
            "eager" if compute_summaries else "lazy",
        )
        emit_snapshot_built(self)

    # -- identity --------------------------------------------------------

    @property
    def operations(self) -> frozenset[Operation]:
        return self._operations

    @property
    def checksum(self) -> int:
        """64-bit fingerprint of the canonical form of the operations."""
        return self._checksum

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, FieldLineageInfo):
            return NotImplemented
        return self._checksum == other._checksum

    def __hash__(self) -> int:
        return hash(self._checksum)

    def __repr__(self) -> str:
        return (
            f"FieldLineageInfo(checksum={self._checksum}, "
            f"operations={sorted(op.name for op in self._operations)})"
        )

    # -- pickling --------------------------------------------------------

    def __getstate__(self) -> dict[str, Any]:
        state = {
            "_operations": self._operations,
            "_checksum": self._checksum,
        }
        for view in _PERSISTED_VIEWS:
            if view in self.__dict__:
                state[view] = self.__dict__[view]
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)

    # -- indices and derived views ---------------------------------------

    @cached_property
    def graph(self) -> LineageGraph:
        """Validated graph indices, rebuilt from the operations if absent."""
        return build_graph(self._operations)

    @cached_property
    def _summaries(self) -> SummaryComputer:
        return SummaryComputer(self.graph)

    @property
    def sources(self) -> frozenset[EndPoint]:
        """Source endpoints of all read operations."""
        return frozenset(read.source for read in self.graph.reads)

    @property
    def destinations(self) -> frozenset[EndPoint]:
        """Destination endpoints of all write operations."""
        return frozenset(write.destination for write in self.graph.writes)

    @property
    def dropped_fields(self) -> frozenset[str]:
        """Field names consumed by a transform but not emitted by it."""
        return self.graph.dropped_fields

    @cached_property
    def destination_fields(self) -> dict[EndPoint, frozenset[str]]:
        """Destination endpoint -> fields written to it (dropped fields included)."""
        return self._summaries.destination_fields()

    @cached_property
    def incoming_summary(self) -> Summary:
        """Destination field -> source fields that fed it."""
        return self._summaries.incoming_summary()

    @cached_property
    def outgoing_summary(self) -> Summary:
        """Source field -> destination fields fed by it."""
        return self._summaries.outgoing_summary(self.incoming_summary)

    # -- queries ---------------------------------------------------------

    def incoming_operations_for(self, destination_field: EndPointField) -> set[Operation]:
        """Subset of operations responsible for computing *destination_field*."""
        return FieldQueryEngine(self.graph).incoming_operations_for(destination_field)

    def outgoing_operations_for(self, source_field: EndPointField) -> set[Operation]:
        """Subset of operations that used *source_field*."""
        return FieldQueryEngine(self.graph).outgoing_operations_for(source_field)

    @staticmethod
    def topologically_sorted(operations: Iterable[Operation]) -> list[Operation]:
        """Order *operations* so producers precede consumers.

        Raises:
            CycleDetectedError: If the operations form a cycle.
        """
        return topological_sort(operations)
