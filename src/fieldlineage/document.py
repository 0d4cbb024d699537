"""
Pydantic v2 model for the stored/transported form of a lineage snapshot.

A document is what a storage or messaging layer persists: the operation
list (a discriminated union on ``type``), an optional program run id and the
checksum of the operations.  Serializing a document and parsing it back
yields the same operations, hence the same checksum.

Usage::

    from fieldlineage.document import LineageDocument

    doc = LineageDocument.from_info(info, program_run="run-42")
    payload = doc.model_dump_json()

    info = LineageDocument.model_validate_json(payload).to_info()
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fieldlineage.errors import ChecksumMismatchError
from fieldlineage.info import FieldLineageInfo
from fieldlineage.operations import AnyOperation
from fieldlineage.otel import emit_validation_failure

SCHEMA_VERSION = "1.0"


class LineageDocument(BaseModel):
    """Root model of a serialized field lineage snapshot."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(
        SCHEMA_VERSION, min_length=1, description="Document schema version"
    )
    program_run: Optional[str] = Field(
        None, description="Identifier of the program run that emitted the lineage"
    )
    operations: list[AnyOperation] = Field(
        default_factory=list, description="Operations of the snapshot"
    )
    checksum: Optional[int] = Field(
        None, description="Checksum of the operations; verified when present"
    )

    @classmethod
    def from_info(
        cls, info: FieldLineageInfo, program_run: Optional[str] = None
    ) -> LineageDocument:
        """Build a document with operations in name order and the checksum set."""
        return cls(
            program_run=program_run,
            operations=sorted(info.operations, key=lambda op: op.name),
            checksum=info.checksum,
        )

    def to_info(self, compute_summaries: Optional[bool] = None) -> FieldLineageInfo:
        """Validate the operations into a ``FieldLineageInfo``.

        Raises:
            LineageValidationError: If the operations are not a valid snapshot.
            ChecksumMismatchError: If ``checksum`` is set and differs from the
                checksum of the operations.
        """
        info = FieldLineageInfo(self.operations, compute_summaries=compute_summaries)
        if self.checksum is not None and self.checksum != info.checksum:
            error = ChecksumMismatchError(self.checksum, info.checksum)
            emit_validation_failure(error)
            raise error
        return info
