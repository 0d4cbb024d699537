"""
Lineage graph builder.

Turns a collection of operations into a ``LineageGraph``: the deduplicated
operation set plus the indices every traversal needs (name lookup, read and
write sets, consumer adjacency, dropped fields).

Two entry points:

- ``build_graph()`` validates a complete snapshot and raises a
  ``LineageValidationError`` subclass on the first structural problem.
- ``LineageGraph.index()`` indexes without validating.  It is meant for
  partial subsets (e.g. query results) whose inputs may reference origins
  that are not part of the subset.

Usage::

    from fieldlineage.graph import build_graph

    graph = build_graph(operations)
    graph.consumers_of("pRead")   # operations reading pRead's outputs
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from fieldlineage.errors import (
    DuplicateOperationNameError,
    EmptyReadSetError,
    EmptyWriteSetError,
    LineageValidationError,
    MissingDestinationEndpointError,
    MissingSourceEndpointError,
    UnknownOriginError,
)
from fieldlineage.operations import (
    Operation,
    ReadOperation,
    TransformOperation,
    WriteOperation,
)
from fieldlineage.otel import emit_validation_failure

logger = logging.getLogger(__name__)

_EMPTY: frozenset[Operation] = frozenset()


@dataclass(frozen=True)
class LineageGraph:
    """Indexed view over a set of operations.

    Attributes:
        operations: Deduplicated operations.
        by_name: Operation name -> operation.
        reads: All read operations.
        writes: All write operations.
        consumers: Operation name -> operations consuming its output.  Every
            indexed operation has an entry, possibly empty.
        dropped_by: Transform name -> field names it consumed but did not emit.
    """

    operations: frozenset[Operation]
    by_name: Mapping[str, Operation]
    reads: frozenset[ReadOperation]
    writes: frozenset[WriteOperation]
    consumers: Mapping[str, frozenset[Operation]]
    dropped_by: Mapping[str, frozenset[str]]

    @property
    def dropped_fields(self) -> frozenset[str]:
        """Field names consumed by some transform but not re-emitted by it."""
        return frozenset().union(*self.dropped_by.values())

    def operation(self, name: str) -> Optional[Operation]:
        """Look up an operation by name; ``None`` if it is not indexed."""
        return self.by_name.get(name)

    def consumers_of(self, name: str) -> frozenset[Operation]:
        """Operations that take *name*'s output as input."""
        return self.consumers.get(name, _EMPTY)

    @classmethod
    def index(cls, operations: Iterable[Operation]) -> LineageGraph:
        """Index *operations* without validating them.

        Duplicate names are not rejected here; the first operation in name
        order wins the name lookup.
        """
        ops = frozenset(operations)
        by_name: dict[str, Operation] = {}
        reads: set[ReadOperation] = set()
        writes: set[WriteOperation] = set()
        consumers: dict[str, set[Operation]] = {}
        dropped_by: dict[str, frozenset[str]] = {}

        for op in sorted(ops, key=lambda o: (o.name, o.type)):
            by_name.setdefault(op.name, op)
            if isinstance(op, ReadOperation):
                reads.add(op)
                continue

            for origin in op.origins:
                consumers.setdefault(origin, set()).add(op)

            if isinstance(op, WriteOperation):
                writes.add(op)
            elif isinstance(op, TransformOperation):
                dropped = _dropped_by_transform(op)
                if dropped:
                    dropped_by[op.name] = dropped

        # operations nobody consumes still get an (empty) entry
        for name in by_name:
            consumers.setdefault(name, set())

        return cls(
            operations=ops,
            by_name=by_name,
            reads=frozenset(reads),
            writes=frozenset(writes),
            consumers={name: frozenset(ops_) for name, ops_ in consumers.items()},
            dropped_by=dropped_by,
        )


def _dropped_by_transform(transform: TransformOperation) -> frozenset[str]:
    consumed = frozenset(f.name for f in transform.inputs)
    produced = transform.outputs
    if consumed > produced:
        return consumed - produced
    return frozenset()


def _reject(error: LineageValidationError) -> LineageValidationError:
    emit_validation_failure(error)
    return error


def build_graph(operations: Iterable[Operation]) -> LineageGraph:
    """Validate a complete operation snapshot and index it.

    Checks, in order: unique names, read sources, write destinations, at
    least one read, at least one write, and that every input origin names an
    operation of the snapshot.  Paths from sources to destinations are not
    checked; a snapshot without them simply has incomplete lineage.

    Args:
        operations: Operations of one snapshot.  Structurally equal
            operations collapse into one.

    Returns:
        The indexed ``LineageGraph``.

    Raises:
        LineageValidationError: One of its subclasses, describing the first
            failed check.
    """
    ops = frozenset(operations)

    names = Counter(op.name for op in ops)
    repeated = sorted(name for name, count in names.items() if count > 1)
    if repeated:
        raise _reject(DuplicateOperationNameError(repeated[0]))

    for op in sorted(ops, key=lambda o: o.name):
        if isinstance(op, ReadOperation) and op.source is None:
            raise _reject(MissingSourceEndpointError(op.name))

    for op in sorted(ops, key=lambda o: o.name):
        if isinstance(op, WriteOperation) and op.destination is None:
            raise _reject(MissingDestinationEndpointError(op.name))

    graph = LineageGraph.index(ops)

    if not graph.reads:
        raise _reject(EmptyReadSetError())
    if not graph.writes:
        raise _reject(EmptyWriteSetError())

    all_origins: set[str] = set()
    for op in ops:
        all_origins.update(op.origins)
    unknown = all_origins - graph.by_name.keys()
    if unknown:
        raise _reject(UnknownOriginError(unknown))

    logger.debug(
        "Validated %d operation(s): %d read, %d write, %d dropped field(s)",
        len(ops),
        len(graph.reads),
        len(graph.writes),
        len(graph.dropped_fields),
    )
    return graph
