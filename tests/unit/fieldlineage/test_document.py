"""Tests for the lineage document model and its loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from fieldlineage.document import SCHEMA_VERSION, LineageDocument
from fieldlineage.errors import ChecksumMismatchError, UnknownOriginError
from fieldlineage.info import FieldLineageInfo
from fieldlineage.loader import LineageLoader
from fieldlineage.operations import (
    EndPoint,
    EndPointField,
    ReadOperation,
    TransformOperation,
    WriteOperation,
)


MINIMAL_YAML = """\
schema_version: "1.0"
program_run: run-1
operations:
  - type: read
    name: read
    source: {namespace: ns, name: file}
    outputs: [offset, body]
  - type: transform
    name: parse
    inputs:
      - {origin: read, name: body}
    outputs: [name]
  - type: write
    name: write
    destination: {namespace: ns, name: table}
    inputs:
      - {origin: read, name: offset}
      - {origin: parse, name: name}
"""


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


class TestLineageDocument:
    def test_from_info(self, person_operations):
        info = FieldLineageInfo(person_operations)
        doc = LineageDocument.from_info(info, program_run="run-42")
        assert doc.schema_version == SCHEMA_VERSION
        assert doc.program_run == "run-42"
        assert doc.checksum == info.checksum
        assert [op.name for op in doc.operations] == sorted(op.name for op in person_operations)

    def test_json_round_trip(self, person_operations):
        info = FieldLineageInfo(person_operations)
        payload = LineageDocument.from_info(info).model_dump_json()
        restored = LineageDocument.model_validate_json(payload).to_info()
        assert restored == info
        assert restored.checksum == info.checksum
        assert restored.incoming_summary == info.incoming_summary

    def test_operation_types_discriminated(self, person_operations):
        payload = LineageDocument.from_info(FieldLineageInfo(person_operations)).model_dump_json()
        doc = LineageDocument.model_validate_json(payload)
        by_name = {op.name: op for op in doc.operations}
        assert isinstance(by_name["pRead"], ReadOperation)
        assert isinstance(by_name["parse"], TransformOperation)
        assert isinstance(by_name["sWrite"], WriteOperation)

    def test_checksum_optional(self, normalize_operations):
        doc = LineageDocument(operations=normalize_operations)
        assert doc.checksum is None
        assert doc.to_info() == FieldLineageInfo(normalize_operations)

    def test_checksum_mismatch(self, normalize_operations):
        info = FieldLineageInfo(normalize_operations)
        doc = LineageDocument(operations=normalize_operations, checksum=info.checksum + 1)
        with pytest.raises(ChecksumMismatchError) as exc_info:
            doc.to_info()
        assert exc_info.value.expected == info.checksum + 1
        assert exc_info.value.actual == info.checksum

    def test_invalid_operations_rejected_on_to_info(self):
        payload = {
            "operations": [
                {"type": "read", "name": "r", "source": {"namespace": "ns", "name": "in"}, "outputs": ["a"]},
                {
                    "type": "write",
                    "name": "w",
                    "destination": {"namespace": "ns", "name": "out"},
                    "inputs": [{"origin": "ghost", "name": "a"}],
                },
            ]
        }
        doc = LineageDocument.model_validate(payload)
        with pytest.raises(UnknownOriginError):
            doc.to_info()

    def test_unknown_operation_type(self):
        with pytest.raises(ValidationError):
            LineageDocument.model_validate({"operations": [{"type": "merge", "name": "m"}]})

    def test_extra_keys_forbidden(self):
        with pytest.raises(ValidationError):
            LineageDocument.model_validate({"operations": [], "owner": "me"})


# ---------------------------------------------------------------------------
# Loader tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_cache():
    LineageLoader.clear_cache()
    yield
    LineageLoader.clear_cache()


class TestLoader:
    def test_load_from_string(self):
        doc = LineageLoader().load_from_string(MINIMAL_YAML)
        assert doc.program_run == "run-1"
        assert len(doc.operations) == 3

    def test_load_from_file(self, tmp_path: Path):
        f = tmp_path / "run.lineage.yaml"
        f.write_text(MINIMAL_YAML)
        doc = LineageLoader().load(f)
        assert {op.name for op in doc.operations} == {"read", "parse", "write"}

    def test_load_json_file(self, tmp_path: Path, person_operations):
        info = FieldLineageInfo(person_operations)
        f = tmp_path / "run.lineage.json"
        f.write_text(LineageDocument.from_info(info).model_dump_json())
        assert LineageLoader().load_info(f) == info

    def test_load_info(self, tmp_path: Path):
        f = tmp_path / "run.lineage.yaml"
        f.write_text(MINIMAL_YAML)
        info = LineageLoader().load_info(f, compute_summaries=False)
        table_name = EndPointField.of(EndPoint.of("ns", "table"), "name")
        assert info.incoming_summary[table_name] == {EndPointField.of(EndPoint.of("ns", "file"), "body")}

    def test_caching(self, tmp_path: Path):
        f = tmp_path / "run.lineage.yaml"
        f.write_text(MINIMAL_YAML)
        loader = LineageLoader()
        assert loader.load(f) is loader.load(f)

    def test_cache_shared_between_loaders(self, tmp_path: Path):
        f = tmp_path / "run.lineage.yaml"
        f.write_text(MINIMAL_YAML)
        assert LineageLoader().load(f) is LineageLoader().load(f)

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            LineageLoader().load(Path("/nonexistent.lineage.yaml"))

    def test_non_mapping_root(self, tmp_path: Path):
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(TypeError, match="Expected YAML mapping"):
            LineageLoader().load(f)

    def test_schema_error(self):
        bad = json.dumps({"operations": [{"type": "read", "name": "r", "outputs": "not-a-list"}]})
        with pytest.raises(ValidationError):
            LineageLoader().load_from_string(bad)
