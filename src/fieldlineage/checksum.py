"""
Canonical form and checksum of an operation set.

The canonical form is the compact JSON array of all operations sorted by
name.  Each operation is serialized through its pydantic model, so key order
follows the model's field declaration order and every set-valued field is
emitted sorted.  Insertion order of the operations therefore never affects
the result.

The checksum is the 64-bit Rabin fingerprint (the algorithm Avro uses for
schema fingerprints, see AVRO-1006) of the UTF-8 encoded canonical form,
returned as a signed 64-bit integer.

Checksums are persisted by downstream storage: any change to the canonical
form or to the fingerprint algorithm requires migrating stored checksums.
"""

from __future__ import annotations

import json
from typing import Iterable

from fieldlineage.operations import Operation

EMPTY_64 = 0xC15D213AA4D7A795

_MASK_64 = 0xFFFFFFFFFFFFFFFF


def _build_table() -> tuple[int, ...]:
    table = []
    for i in range(256):
        fp = i
        for _ in range(8):
            fp = (fp >> 1) ^ (EMPTY_64 & -(fp & 1))
        table.append(fp & _MASK_64)
    return tuple(table)


_FP_TABLE = _build_table()


def fingerprint64(data: bytes) -> int:
    """64-bit Rabin fingerprint of *data*, as a signed 64-bit integer."""
    fp = EMPTY_64
    for byte in data:
        fp = (fp >> 8) ^ _FP_TABLE[(fp ^ byte) & 0xFF]
    if fp >= 1 << 63:
        fp -= 1 << 64
    return fp


def canonicalize(operations: Iterable[Operation]) -> str:
    """Deterministic JSON rendering of *operations*."""
    ordered = sorted(operations, key=lambda op: op.name)
    return json.dumps(
        [op.model_dump(mode="json") for op in ordered],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_checksum(operations: Iterable[Operation]) -> int:
    """Checksum of the canonical form of *operations*."""
    return fingerprint64(canonicalize(operations).encode("utf-8"))
