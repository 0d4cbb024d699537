"""
YAML lineage document loader with per-path caching.

JSON is a subset of YAML, so documents written by ``model_dump_json()`` load
the same way as hand-written YAML files.

Usage::

    from fieldlineage.loader import LineageLoader

    loader = LineageLoader()
    document = loader.load(Path("run-42.lineage.yaml"))
    info = loader.load_info(Path("run-42.lineage.yaml"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Optional

import yaml

from fieldlineage.document import LineageDocument
from fieldlineage.info import FieldLineageInfo

logger = logging.getLogger(__name__)


class LineageLoader:
    """Loads and caches lineage documents from YAML/JSON files."""

    _cache: ClassVar[dict[str, LineageDocument]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the document cache (useful in tests)."""
        cls._cache.clear()

    def load(self, path: Path) -> LineageDocument:
        """Load a lineage document from a file.

        Args:
            path: Path to the YAML or JSON document.

        Returns:
            Validated ``LineageDocument`` instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeError: If the document root is not a mapping.
            yaml.YAMLError: If the file contains invalid YAML.
            pydantic.ValidationError: If the document does not match the schema.
        """
        key = str(path.resolve())
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Lineage document cache hit: %s", key)
            return cached

        if not path.exists():
            raise FileNotFoundError(f"Lineage document not found: {path}")

        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)

        document = self._validate(raw, source=str(path))
        self._cache[key] = document

        logger.debug(
            "Loaded lineage document: run=%s, operations=%d",
            document.program_run,
            len(document.operations),
        )
        return document

    def load_from_string(self, yaml_str: str) -> LineageDocument:
        """Load a lineage document from a YAML string (not cached).

        Raises:
            TypeError: If the document root is not a mapping.
            pydantic.ValidationError: If the document does not match the schema.
        """
        return self._validate(yaml.safe_load(yaml_str))

    def load_info(
        self, path: Path, compute_summaries: Optional[bool] = None
    ) -> FieldLineageInfo:
        """Load a document and build its ``FieldLineageInfo``."""
        return self.load(path).to_info(compute_summaries=compute_summaries)

    @staticmethod
    def _validate(raw: object, source: Optional[str] = None) -> LineageDocument:
        if not isinstance(raw, dict):
            where = f" at root of {source}" if source else ""
            raise TypeError(
                f"Expected YAML mapping{where}, got {type(raw).__name__}"
            )
        return LineageDocument.model_validate(raw)
