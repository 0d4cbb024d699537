"""
Field-level lineage summaries.

For every destination field, the *incoming* summary lists the source fields
that influenced it; the *outgoing* summary is its inverse, keyed by source
field.  Both are derived by walking the graph backward from each write.

A transform mixes all of its inputs, so every output of a transform is
treated as depending on every input.  The source fields reachable through a
transform are therefore a property of the transform alone and are memoized
per transform name, which keeps shared upstream chains from being walked
once per destination field.

Usage::

    from fieldlineage.graph import build_graph
    from fieldlineage.summary import SummaryComputer

    computer = SummaryComputer(build_graph(operations))
    incoming = computer.incoming_summary()
    outgoing = computer.outgoing_summary(incoming)
"""

from __future__ import annotations

import logging
from typing import Optional

from fieldlineage.graph import LineageGraph
from fieldlineage.operations import (
    EndPoint,
    EndPointField,
    InputField,
    ReadOperation,
    TransformOperation,
)

logger = logging.getLogger(__name__)

Summary = dict[EndPointField, frozenset[EndPointField]]


class SummaryComputer:
    """Derives destination fields and incoming/outgoing summaries of a graph.

    Args:
        graph: A validated ``LineageGraph``.
    """

    def __init__(self, graph: LineageGraph) -> None:
        self._graph = graph
        self._through: dict[str, frozenset[EndPointField]] = {}

    def destination_fields(self) -> dict[EndPoint, frozenset[str]]:
        """Destination endpoint -> field names written to it.

        Dropped fields are reported under every destination as well.
        """
        fields: dict[EndPoint, set[str]] = {}
        dropped = self._graph.dropped_fields
        for write in self._graph.writes:
            names = fields.setdefault(write.destination, set())
            names.update(f.name for f in write.inputs)
            names.update(dropped)
        return {endpoint: frozenset(names) for endpoint, names in fields.items()}

    def incoming_summary(self) -> Summary:
        """Destination field -> source fields it was computed from."""
        summary: dict[EndPointField, set[EndPointField]] = {}
        for write in sorted(self._graph.writes, key=lambda w: w.name):
            for input_field in sorted(write.inputs, key=InputField.sort_key):
                destination = EndPointField(
                    endpoint=write.destination, field=input_field.name
                )
                origin = self._graph.operation(input_field.origin)
                if isinstance(origin, ReadOperation):
                    # a write mixes its inputs like a transform does
                    summary.setdefault(destination, set()).update(
                        EndPointField(endpoint=origin.source, field=f.name)
                        for f in write.inputs
                        if f.origin == origin.name
                    )
                elif isinstance(origin, TransformOperation):
                    sources = self.sources_through(origin.name)
                    if sources:
                        summary.setdefault(destination, set()).update(sources)

        logger.debug("Computed incoming summary for %d destination field(s)", len(summary))
        return {key: frozenset(values) for key, values in summary.items()}

    def outgoing_summary(self, incoming: Optional[Summary] = None) -> Summary:
        """Source field -> destination fields computed from it.

        Each dropped field additionally gets an empty entry under every
        source endpoint it could have been read from, unless that source
        field already has real outgoing lineage.
        """
        if incoming is None:
            incoming = self.incoming_summary()

        outgoing: dict[EndPointField, set[EndPointField]] = {}
        for destination, sources in incoming.items():
            for source in sources:
                outgoing.setdefault(source, set()).add(destination)

        for transform_name, dropped in sorted(self._graph.dropped_by.items()):
            transform = self._graph.operation(transform_name)
            for field_name in sorted(dropped):
                for endpoint in self._endpoints_feeding(transform, field_name):
                    outgoing.setdefault(
                        EndPointField(endpoint=endpoint, field=field_name), set()
                    )

        return {key: frozenset(values) for key, values in outgoing.items()}

    def sources_through(self, transform_name: str) -> frozenset[EndPointField]:
        """Source fields reaching any output of the named transform.

        Upstream transforms are grouped into strongly connected components
        (Tarjan, with an explicit stack).  A component is closed only after
        every component upstream of it, and all members of a cyclic
        component share one result, so the memo never depends on which
        member was asked for first.
        """
        if transform_name in self._through:
            return self._through[transform_name]
        if not isinstance(self._graph.operation(transform_name), TransformOperation):
            return frozenset()

        index: dict[str, int] = {transform_name: 0}
        low: dict[str, int] = {transform_name: 0}
        component_stack: list[str] = [transform_name]
        on_stack: set[str] = {transform_name}
        work = [(transform_name, iter(self._pending_upstream(transform_name)))]

        while work:
            name, upstream = work[-1]
            for origin in upstream:
                if origin not in index:
                    index[origin] = low[origin] = len(index)
                    component_stack.append(origin)
                    on_stack.add(origin)
                    work.append((origin, iter(self._pending_upstream(origin))))
                    break
                if origin in on_stack:
                    low[name] = min(low[name], index[origin])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[name])
                if low[name] == index[name]:
                    members = []
                    while True:
                        member = component_stack.pop()
                        on_stack.discard(member)
                        members.append(member)
                        if member == name:
                            break
                    self._close_component(members)

        return self._through[transform_name]

    def _pending_upstream(self, name: str) -> list[str]:
        transform = self._graph.operation(name)
        return [
            origin
            for origin in sorted(transform.origins)
            if isinstance(self._graph.operation(origin), TransformOperation)
            and origin not in self._through
        ]

    def _close_component(self, members: list[str]) -> None:
        member_names = set(members)
        sources: set[EndPointField] = set()
        for name in members:
            transform = self._graph.operation(name)
            for origin in transform.origins:
                upstream = self._graph.operation(origin)
                if isinstance(upstream, ReadOperation):
                    sources.update(
                        EndPointField(endpoint=upstream.source, field=f.name)
                        for f in transform.inputs
                        if f.origin == origin
                    )
                elif isinstance(upstream, TransformOperation) and origin not in member_names:
                    sources.update(self._through[origin])
        closed = frozenset(sources)
        for name in members:
            self._through[name] = closed

    def _endpoints_feeding(
        self, transform: TransformOperation, field_name: str
    ) -> set[EndPoint]:
        """Source endpoints that can reach *transform*'s input *field_name*."""
        endpoints: set[EndPoint] = set()
        for input_field in transform.inputs:
            if input_field.name != field_name:
                continue
            upstream = self._graph.operation(input_field.origin)
            if isinstance(upstream, ReadOperation):
                endpoints.add(upstream.source)
            elif isinstance(upstream, TransformOperation):
                endpoints.update(s.endpoint for s in self.sources_through(upstream.name))
        return endpoints
