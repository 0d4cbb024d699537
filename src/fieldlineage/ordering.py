"""
Topological ordering of lineage operations.

Orders a (possibly partial) operation set so that every operation comes
before any operation that consumes its output.  Uses Kahn's algorithm over
the edges implied by input origins.

Input fields whose origin is not part of the given set are ignored for
ordering: subsets returned by field queries routinely contain a write whose
other inputs came from operations outside the subset.

Operations that become ready at the same time are taken in name order, so
the result is deterministic for a given set.

Usage::

    from fieldlineage.ordering import topological_sort

    ordered = topological_sort(info.incoming_operations_for(field))
"""

from __future__ import annotations

import heapq
import logging
from typing import Iterable

from fieldlineage.errors import CycleDetectedError
from fieldlineage.operations import Operation, input_fields
from fieldlineage.otel import emit_cycle, emit_sort_result

logger = logging.getLogger(__name__)


def topological_sort(operations: Iterable[Operation]) -> list[Operation]:
    """Sort *operations* so producers precede their consumers.

    For the graph::

        read-----------------------write
           \\                        /
            ----parse----normalize--

    the result is ``[read, parse, normalize, write]``.

    Args:
        operations: Operations to order; names must be unique within the set.

    Returns:
        The operations in topological order.

    Raises:
        CycleDetectedError: If edges remain once no operation is ready.
    """
    by_name: dict[str, Operation] = {op.name: op for op in operations}

    # operation name -> names of operations consuming its output
    outgoing: dict[str, set[str]] = {name: set() for name in by_name}
    # operation name -> names of operations whose output it consumes
    incoming: dict[str, set[str]] = {name: set() for name in by_name}

    for op in by_name.values():
        for input_field in input_fields(op):
            if input_field.origin not in by_name:
                continue
            outgoing[input_field.origin].add(op.name)
            incoming[op.name].add(input_field.origin)

    ready = [name for name, origins in incoming.items() if not origins]
    heapq.heapify(ready)

    ordered: list[Operation] = []
    while ready:
        current = heapq.heappop(ready)
        ordered.append(by_name[current])
        for consumer in sorted(outgoing[current]):
            incoming[consumer].discard(current)
            if not incoming[consumer]:
                heapq.heappush(ready, consumer)
        outgoing[current].clear()

    residual = {name: targets for name, targets in outgoing.items() if targets}
    if residual:
        error = CycleDetectedError(residual)
        emit_cycle(error)
        raise error

    logger.debug("Sorted %d operation(s): %s", len(ordered), [op.name for op in ordered])
    emit_sort_result(ordered)
    return ordered
