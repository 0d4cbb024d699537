"""
Point queries over a lineage graph.

- ``incoming_operations_for(field)``: the operations that causally
  contributed to a destination field (backward walk from writes to reads).
- ``outgoing_operations_for(field)``: the operations that causally depend on
  a source field (forward walk from reads to writes).

Both walks use an explicit work list and a visited set, so deep chains do
not grow the call stack and malformed (cyclic) subsets still terminate.
Origins missing from the graph end the walk at that point, which lets the
engine run over partial subsets indexed with ``LineageGraph.index()``.

Example, for the operations::

    pRead: personFile -> (offset, body)
    parse: body -> (id, name, address)
    cRead: codeFile -> id
    codeGen: (parse.id, cRead.id) -> id
    sWrite: (codeGen.id, parse.name, parse.address) -> secureStore
    iWrite: (parse.id, parse.name, parse.address) -> insecureStore

``incoming_operations_for(secureStore.id)`` is
``{sWrite, codeGen, parse, pRead, cRead}`` and
``outgoing_operations_for(personFile.offset)`` is ``{pRead}``, because no
operation consumes ``pRead.offset``.
"""

from __future__ import annotations

from fieldlineage.graph import LineageGraph
from fieldlineage.operations import (
    EndPointField,
    InputField,
    Operation,
    TransformOperation,
    input_fields,
)
from fieldlineage.otel import emit_query_result


class FieldQueryEngine:
    """Answers incoming/outgoing operation queries for single fields."""

    def __init__(self, graph: LineageGraph) -> None:
        self.graph = graph

    def incoming_operations_for(self, destination_field: EndPointField) -> set[Operation]:
        """Operations responsible for computing *destination_field*.

        Args:
            destination_field: A field of a write destination.

        Returns:
            The visited writes, transforms and reads; empty if no write
            produced the field.
        """
        visited: set[Operation] = set()
        pending: list[str] = []

        for write in self.graph.writes:
            if write.destination != destination_field.endpoint:
                continue
            matching = [f for f in write.inputs if f.name == destination_field.field]
            if not matching:
                continue
            visited.add(write)
            pending.extend(f.origin for f in matching)

        while pending:
            current = self.graph.operation(pending.pop())
            if current is None or current in visited:
                continue
            visited.add(current)
            # reads are the leaves of the backward walk
            if isinstance(current, TransformOperation):
                pending.extend(f.origin for f in current.inputs)

        emit_query_result("incoming", destination_field, visited)
        return visited

    def outgoing_operations_for(self, source_field: EndPointField) -> set[Operation]:
        """Operations that used *source_field*, directly or transitively.

        Only consumers that actually list the read's field among their
        inputs are followed out of a read; an adjacent operation that reads
        other fields of the same read is not part of the result.

        Args:
            source_field: A field of a read source.

        Returns:
            The visited reads, transforms and writes; empty if no read
            produced the field.
        """
        visited: set[Operation] = set()
        pending: list[Operation] = []

        for read in self.graph.reads:
            if read.source != source_field.endpoint or source_field.field not in read.outputs:
                continue
            visited.add(read)
            used = InputField(origin=read.name, name=source_field.field)
            pending.extend(
                consumer
                for consumer in self.graph.consumers_of(read.name)
                if used in input_fields(consumer)
            )

        while pending:
            current = pending.pop()
            if current in visited:
                continue
            visited.add(current)
            # writes are the leaves of the forward walk
            if isinstance(current, TransformOperation):
                pending.extend(self.graph.consumers_of(current.name))

        emit_query_result("outgoing", source_field, visited)
        return visited


def incoming_operations_for(graph: LineageGraph, destination_field: EndPointField) -> set[Operation]:
    return FieldQueryEngine(graph).incoming_operations_for(destination_field)


def outgoing_operations_for(graph: LineageGraph, source_field: EndPointField) -> set[Operation]:
    return FieldQueryEngine(graph).outgoing_operations_for(source_field)
