"""
Logging setup for EMS Tracker.

Call ``configure_logging(config)`` once per CLI command, before the store is
opened. Library modules only call ``logging.getLogger(__name__)`` and never
configure handlers themselves.

Store, reconciler, and ledger log calls attach the record they touched via
``extra=`` (``order_id``, ``rider_code``, ``supervisor_code``, ``shortfall``
...). Both formats carry that context:

  text::

    2026-02-24T15:00:00Z [INFO] ems_tracker.store.reconciliation: Order 17... approved. {order_id=17...}

  JSON (``json_format = true`` under ``[logging]``)::

    {"ts": "...", "level": "INFO", "logger": "...", "msg": "...", "context": {"order_id": 17...}}

Output goes to stderr so tables and ``[OK]`` lines on stdout can be piped.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ems_tracker.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields attached to ``record``, in call order."""
    return {
        key: val
        for key, val in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class _TextFormatter(logging.Formatter):
    """Plain log line followed by ``{key=value, ...}`` when context is present."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = ", ".join(f"{key}={val}" for key, val in context.items())
        return f"{line} {{{pairs}}}"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields go under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        context = record_context(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Installs a stderr handler and, when ``config.log_file`` is set, a UTF-8
    file handler (parent directories created). Both use the JSON formatter if
    ``config.json_format`` is true, otherwise the text formatter. Replaces any
    handlers installed by a previous call.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = _TextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
