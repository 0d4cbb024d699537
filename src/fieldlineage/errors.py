"""
Exceptions raised while building, validating and ordering lineage graphs.

Every construction-time failure derives from ``LineageValidationError`` (also
a ``ValueError``), so callers that only care whether a snapshot is valid can
catch a single type.  ``CycleDetectedError`` is raised only when an ordering
is explicitly requested.
"""

from __future__ import annotations

from typing import Iterable, Mapping


class LineageError(Exception):
    """Base class for all field lineage errors."""


class LineageValidationError(LineageError, ValueError):
    """An operation collection does not form a well-formed lineage graph."""


class DuplicateOperationNameError(LineageValidationError):
    """Two distinct operations share the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            "All operations provided for creating field level lineage info "
            f"must have unique names. Operation name '{name}' is repeated."
        )


class MissingSourceEndpointError(LineageValidationError):
    """A read operation has no source endpoint."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Source endpoint cannot be null for the read operation '{operation}'."
        )


class MissingDestinationEndpointError(LineageValidationError):
    """A write operation has no destination endpoint."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Destination endpoint cannot be null for the write operation '{operation}'."
        )


class EmptyReadSetError(LineageValidationError):
    def __init__(self) -> None:
        super().__init__(
            "Field level lineage requires at least one operation of type 'READ'."
        )


class EmptyWriteSetError(LineageValidationError):
    def __init__(self) -> None:
        super().__init__(
            "Field level lineage requires at least one operation of type 'WRITE'."
        )


class UnknownOriginError(LineageValidationError):
    """Input fields reference origins that are not operations of the snapshot."""

    def __init__(self, origins: Iterable[str]) -> None:
        self.origins = sorted(origins)
        super().__init__(
            f"No operation is associated with the origins {self.origins}."
        )


class ChecksumMismatchError(LineageValidationError):
    """A stored checksum does not match the checksum of the stored operations."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Stored checksum {expected} does not match computed checksum {actual}."
        )


class CycleDetectedError(LineageError):
    """Topological sorting left edges behind, so the operations form a cycle.

    Attributes:
        residual: Operation name -> names of operations still waiting on it.
    """

    def __init__(self, residual: Mapping[str, Iterable[str]]) -> None:
        self.residual = {name: set(targets) for name, targets in residual.items()}
        rendered = ", ".join(
            f"{name} -> {sorted(targets)}"
            for name, targets in sorted(self.residual.items())
        )
        super().__init__(f"Cycle detected in graph for operations {{{rendered}}}")
