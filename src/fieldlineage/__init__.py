"""
Field-level data lineage.

Validates sets of read/transform/write operations, derives which destination
fields were computed from which source fields, answers per-field operation
queries, orders operations topologically and fingerprints operation sets.

Public API::

    from fieldlineage import (
        # Operation model
        EndPoint,
        EndPointField,
        InputField,
        OperationType,
        ReadOperation,
        TransformOperation,
        WriteOperation,
        # Snapshot
        FieldLineageInfo,
        LineageDocument,
        LineageLoader,
        # Algorithms
        build_graph,
        topological_sort,
        compute_checksum,
        # Errors
        LineageError,
        LineageValidationError,
        CycleDetectedError,
    )
"""

from fieldlineage.checksum import canonicalize, compute_checksum, fingerprint64
from fieldlineage.document import LineageDocument
from fieldlineage.errors import (
    ChecksumMismatchError,
    CycleDetectedError,
    DuplicateOperationNameError,
    EmptyReadSetError,
    EmptyWriteSetError,
    LineageError,
    LineageValidationError,
    MissingDestinationEndpointError,
    MissingSourceEndpointError,
    UnknownOriginError,
)
from fieldlineage.graph import LineageGraph, build_graph
from fieldlineage.info import FieldLineageInfo
from fieldlineage.loader import LineageLoader
from fieldlineage.operations import (
    AnyOperation,
    EndPoint,
    EndPointField,
    InputField,
    Operation,
    OperationType,
    ReadOperation,
    TransformOperation,
    WriteOperation,
)
from fieldlineage.ordering import topological_sort
from fieldlineage.queries import FieldQueryEngine
from fieldlineage.summary import SummaryComputer

__version__ = "0.1.0"

__all__ = [
    # Operation model
    "AnyOperation",
    "EndPoint",
    "EndPointField",
    "InputField",
    "Operation",
    "OperationType",
    "ReadOperation",
    "TransformOperation",
    "WriteOperation",
    # Graph and algorithms
    "LineageGraph",
    "build_graph",
    "SummaryComputer",
    "FieldQueryEngine",
    "topological_sort",
    "canonicalize",
    "compute_checksum",
    "fingerprint64",
    # Snapshot
    "FieldLineageInfo",
    "LineageDocument",
    "LineageLoader",
    # Errors
    "LineageError",
    "LineageValidationError",
    "DuplicateOperationNameError",
    "MissingSourceEndpointError",
    "MissingDestinationEndpointError",
    "EmptyReadSetError",
    "EmptyWriteSetError",
    "UnknownOriginError",
    "ChecksumMismatchError",
    "CycleDetectedError",
]
