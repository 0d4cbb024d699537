"""
Pydantic v2 value types for field-level lineage operations.

An operation set describes how individual fields flow from source endpoints,
through transforms, into destination endpoints:

- ``ReadOperation`` reads fields from a source ``EndPoint``.
- ``TransformOperation`` consumes ``InputField``s and emits new field names.
- ``WriteOperation`` writes ``InputField``s to a destination ``EndPoint``.

Operations reference each other by *name*: an ``InputField`` records the name
of the operation that produced it (its origin), not the operation itself.

All models are frozen and use ``extra="forbid"``, so operations are hashable,
compare by value, and reject unknown keys when parsed from YAML/JSON.

Usage::

    from fieldlineage.operations import EndPoint, InputField, ReadOperation

    read = ReadOperation(
        name="pRead",
        source=EndPoint.of("ns", "personFile"),
        outputs={"offset", "body"},
    )
    body = InputField.of("pRead", "body")
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class OperationType(str, Enum):
    """Kind of a lineage operation."""

    READ = "read"
    TRANSFORM = "transform"
    WRITE = "write"


# ---------------------------------------------------------------------------
# Endpoints and fields
# ---------------------------------------------------------------------------


class EndPoint(BaseModel):
    """An external data resource at the boundary of the lineage graph."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    namespace: str = Field(..., min_length=1, description="Owning namespace")
    name: str = Field(..., min_length=1, description="Resource name, e.g. a dataset")

    @classmethod
    def of(cls, namespace: str, name: str) -> EndPoint:
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.name}"


class EndPointField(BaseModel):
    """A single field of an endpoint; the key type of the lineage summaries."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    endpoint: EndPoint
    field: str = Field(..., min_length=1)

    @classmethod
    def of(cls, endpoint: EndPoint, field: str) -> EndPointField:
        return cls(endpoint=endpoint, field=field)

    def sort_key(self) -> tuple[str, str, str]:
        return (self.endpoint.namespace, self.endpoint.name, self.field)

    def __str__(self) -> str:
        return f"{self.endpoint}.{self.field}"


class InputField(BaseModel):
    """A field consumed by an operation, tagged with the name of its producer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    origin: str = Field(..., min_length=1, description="Name of the producing operation")
    name: str = Field(..., min_length=1, description="Field name as produced by the origin")

    @classmethod
    def of(cls, origin: str, name: str) -> InputField:
        return cls(origin=origin, name=name)

    def sort_key(self) -> tuple[str, str]:
        return (self.origin, self.name)

    def __str__(self) -> str:
        return f"{self.origin}.{self.name}"


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class Operation(BaseModel):
    """Common base of all lineage operations.

    ``name`` must be unique within one lineage snapshot.  Subclasses pin
    ``type`` to a single literal so a list of operations can be parsed as a
    discriminated union (see ``AnyOperation``).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Unique operation name")
    description: str = Field("", description="Free-text description")

    @property
    def origins(self) -> frozenset[str]:
        """Distinct origin names referenced by this operation's inputs."""
        return frozenset(f.origin for f in input_fields(self))


class ReadOperation(Operation):
    """Reads ``outputs`` from the ``source`` endpoint."""

    type: Literal["read"] = "read"
    source: Optional[EndPoint] = Field(None, description="Endpoint the fields are read from")
    outputs: frozenset[str] = Field(default_factory=frozenset)

    @field_serializer("outputs")
    def _serialize_outputs(self, outputs: frozenset[str]) -> list[str]:
        return sorted(outputs)


class TransformOperation(Operation):
    """Consumes ``inputs`` and produces ``outputs``."""

    type: Literal["transform"] = "transform"
    inputs: frozenset[InputField] = Field(default_factory=frozenset)
    outputs: frozenset[str] = Field(default_factory=frozenset)

    @field_serializer("inputs")
    def _serialize_inputs(self, inputs: frozenset[InputField]) -> list[dict[str, str]]:
        return _serialize_input_fields(inputs)

    @field_serializer("outputs")
    def _serialize_outputs(self, outputs: frozenset[str]) -> list[str]:
        return sorted(outputs)


class WriteOperation(Operation):
    """Writes ``inputs`` to the ``destination`` endpoint."""

    type: Literal["write"] = "write"
    destination: Optional[EndPoint] = Field(None, description="Endpoint the fields are written to")
    inputs: frozenset[InputField] = Field(default_factory=frozenset)

    @field_serializer("inputs")
    def _serialize_inputs(self, inputs: frozenset[InputField]) -> list[dict[str, str]]:
        return _serialize_input_fields(inputs)


AnyOperation = Annotated[
    Union[ReadOperation, TransformOperation, WriteOperation],
    Field(discriminator="type"),
]


def _serialize_input_fields(inputs: frozenset[InputField]) -> list[dict[str, str]]:
    return [
        {"origin": f.origin, "name": f.name}
        for f in sorted(inputs, key=InputField.sort_key)
    ]


def input_fields(operation: Operation) -> frozenset[InputField]:
    """Inputs of *operation*; empty for reads."""
    if isinstance(operation, (TransformOperation, WriteOperation)):
        return operation.inputs
    return frozenset()


def output_fields(operation: Operation) -> frozenset[str]:
    """Output field names of *operation*; empty for writes."""
    if isinstance(operation, (ReadOperation, TransformOperation)):
        return operation.outputs
    return frozenset()
