"""
Logging setup for the ``fieldlineage`` logger hierarchy.

Modules log through ``logging.getLogger(__name__)``; this module only decides
where those records go.  ``json`` format emits one JSON object per line for
log pipelines, ``text`` is meant for a console.

Usage:
    from fieldlineage.log import configure_logging

    configure_logging()                      # from FIELDLINEAGE_* settings
    configure_logging(get_config(log_format="text"))
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from fieldlineage.config import FieldLineageConfig, get_config

LOGGER_NAME = "fieldlineage"

_HANDLER_ATTR = "_fieldlineage_handler"


class JsonFormatter(logging.Formatter):
    """Render a record as a single-line JSON object."""

    def __init__(self, service_name: str = "fieldlineage") -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(config: Optional[FieldLineageConfig] = None) -> logging.Logger:
    """Install a stdout handler on the ``fieldlineage`` logger.

    Calling it again replaces the handler installed by a previous call, so
    level and format always follow the latest config.

    Args:
        config: Settings to apply; defaults to ``get_config()``.

    Returns:
        The configured ``fieldlineage`` logger.
    """
    config = config or get_config()
    root = logging.getLogger(LOGGER_NAME)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    setattr(handler, _HANDLER_ATTR, True)
    if config.log_format == "json":
        handler.setFormatter(JsonFormatter(config.service_name))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    root.addHandler(handler)
    root.setLevel(config.log_level.upper())
    return root
