"""
Logging - Structured logging scoped to generation runs.

While a run is active, every record carries the run's ID, target and
insurance line, plus the template position the driver is working on
(template, line number, marker keyword). Concurrent runs on a thread
pool therefore produce records that can be told apart and traced back
to the template line that caused them.
"""

import logging
import json
import sys
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


POSITION_FIELDS = ("template", "line", "keyword")


@dataclass
class RunScope:
    """Logging view of one run; position fields move as the run advances."""
    run_id: str
    target: str = "-"
    ins_line: str = "-"
    template: str | None = None
    line: int | None = None
    keyword: str | None = None


_run_scope: ContextVar[RunScope | None] = ContextVar("run_scope", default=None)


def current_scope() -> RunScope | None:
    return _run_scope.get()


def set_position(template: str | None, line: int | None = None, keyword: str | None = None) -> None:
    """Move the active run to a template position. No-op outside a run."""
    scope = _run_scope.get()
    if scope is not None:
        scope.template = template
        scope.line = line
        scope.keyword = keyword


class RunScopeFilter(logging.Filter):
    """
    Copies the active run scope onto each record.

    Position values given explicitly through `extra=` win over the scope,
    so an error logged after the run unwound still points at the failing
    marker.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        scope = _run_scope.get()
        record.run_id = scope.run_id if scope else "-"
        record.target = scope.target if scope else "-"
        record.ins_line = scope.ins_line if scope else "-"
        for name in POSITION_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, getattr(scope, name) if scope else None)
        return True


def _position(record: logging.LogRecord) -> str:
    template = getattr(record, "template", None)
    if not template:
        return ""
    where = template
    line = getattr(record, "line", None)
    if line is not None:
        where += f":{line}"
    keyword = getattr(record, "keyword", None)
    if keyword:
        where += f" &{keyword}|"
    return where


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, for batch and CI runs.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
            "target": getattr(record, "target", "-"),
            "ins_line": getattr(record, "ins_line", "-"),
        }
        for name in POSITION_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class ReadableFormatter(logging.Formatter):
    """
    Terminal format: `LEVEL [run ins_line] logger: message (template:line &KW|)`.
    """

    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "run_id", "-")
        rid_short = rid[:8] if rid and rid != "-" else "-"
        ins_line = getattr(record, "ins_line", "-")

        base = f"{record.levelname:<7} [{rid_short} {ins_line}] {record.name}: {record.getMessage()}"
        where = _position(record)
        if where:
            base += f" ({where})"

        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)

        return base


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: Any = None,
) -> None:
    """
    Configure genowa logging.

    Args:
        level: Logging level (int or name such as "DEBUG")
        json_format: Use JSON format (for batch/CI runs)
        stream: Output stream (default: stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(RunScopeFilter())

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ReadableFormatter())

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    genowa_logger = logging.getLogger("genowa")
    genowa_logger.setLevel(level)
    genowa_logger.handlers.clear()
    genowa_logger.addHandler(handler)
    genowa_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a genowa component."""
    return logging.getLogger(f"genowa.{name}")


class LogContext:
    """
    Context manager scoping log records to one generation run.

    Usage:
        with LogContext(run_id, target="cobol_rating", ins_line="BOP"):
            set_position("cobol/main.tpl", 12, "WSVARS")
            logger.info("Dispatch")  # carries run, ins line and position
    """

    def __init__(self, run_id: UUID | str, target: str | None = None, ins_line: str | None = None):
        self.scope = RunScope(
            run_id=str(run_id),
            target=target or "-",
            ins_line=ins_line or "-",
        )
        self._token = None

    def __enter__(self) -> RunScope:
        self._token = _run_scope.set(self.scope)
        return self.scope

    def __exit__(self, *args):
        if self._token is not None:
            _run_scope.reset(self._token)
            self._token = None
