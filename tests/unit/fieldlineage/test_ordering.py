"""Tests for topological ordering of operations."""

from __future__ import annotations

import pytest

from fieldlineage.errors import CycleDetectedError, LineageError
from fieldlineage.graph import build_graph
from fieldlineage.operations import (
    EndPoint,
    EndPointField,
    InputField,
    ReadOperation,
    TransformOperation,
    WriteOperation,
)
from fieldlineage.ordering import topological_sort
from fieldlineage.queries import FieldQueryEngine


def position(ordered) -> dict[str, int]:
    return {op.name: i for i, op in enumerate(ordered)}


class TestTopologicalSort:
    def test_read_parse_normalize_write(self, normalize_operations):
        ordered = topological_sort(set(normalize_operations))
        pos = position(ordered)
        assert pos["read"] < pos["parse"] < pos["normalize"] < pos["write"]
        assert [op.name for op in ordered] == ["read", "parse", "normalize", "write"]

    def test_person_pipeline(self, person_operations):
        ordered = topological_sort(person_operations)
        pos = position(ordered)
        assert len(ordered) == len(person_operations)
        for op in person_operations:
            for origin in op.origins:
                assert pos[origin] < pos[op.name]

    def test_deterministic(self, person_operations):
        first = [op.name for op in topological_sort(person_operations)]
        second = [op.name for op in topological_sort(list(reversed(person_operations)))]
        assert first == second == ["cRead", "pRead", "parse", "codeGen", "iWrite", "sWrite"]

    def test_empty(self):
        assert topological_sort([]) == []


class TestSubsets:
    def test_dangling_origin_ignored(self, normalize_operations):
        engine = FieldQueryEngine(build_graph(normalize_operations))
        subset = engine.incoming_operations_for(EndPointField.of(EndPoint.of("ns", "table"), "offset"))
        ordered = topological_sort(subset)
        assert [op.name for op in ordered] == ["read", "write"]

    def test_subset_without_reads(self, normalize_operations):
        subset = [op for op in normalize_operations if op.name in {"parse", "normalize"}]
        assert [op.name for op in topological_sort(subset)] == ["parse", "normalize"]

    def test_sorting_query_result(self, person_operations):
        engine = FieldQueryEngine(build_graph(person_operations))
        subset = engine.incoming_operations_for(EndPointField.of(EndPoint.of("ns", "secureStore"), "id"))
        names = [op.name for op in topological_sort(subset)]
        assert names[-1] == "sWrite"
        assert names.index("parse") < names.index("codeGen")
        assert names.index("pRead") < names.index("parse")


class TestCycles:
    def test_two_operation_cycle(self):
        ops = [
            TransformOperation(name="A", inputs={InputField.of("B", "x")}, outputs={"x"}),
            TransformOperation(name="B", inputs={InputField.of("A", "x")}, outputs={"x"}),
        ]
        with pytest.raises(CycleDetectedError) as exc_info:
            topological_sort(ops)
        assert exc_info.value.residual == {"A": {"B"}, "B": {"A"}}

    def test_cycle_behind_read(self):
        ops = [
            ReadOperation(name="read", source=EndPoint.of("ns", "in"), outputs={"v"}),
            TransformOperation(
                name="a", inputs={InputField.of("read", "v"), InputField.of("b", "v")}, outputs={"v"}
            ),
            TransformOperation(name="b", inputs={InputField.of("a", "v")}, outputs={"v"}),
            WriteOperation(name="w", destination=EndPoint.of("ns", "out"), inputs={InputField.of("b", "v")}),
        ]
        with pytest.raises(CycleDetectedError) as exc_info:
            topological_sort(ops)
        assert set(exc_info.value.residual) == {"a", "b"}
        assert "Cycle detected" in str(exc_info.value)

    def test_self_loop(self):
        ops = [TransformOperation(name="t", inputs={InputField.of("t", "x")}, outputs={"x"})]
        with pytest.raises(LineageError):
            topological_sort(ops)
