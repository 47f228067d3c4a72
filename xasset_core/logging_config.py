"""
Logging setup for the XAsset client.

Two console formats are offered:
  - **human** – coloured single line, correlation ids appended in brackets
  - **json**  – newline-delimited JSON for log aggregators

Envelope and client records carry ``operation``, ``request_id`` and
``trace_id`` extras so a failed call can be matched with the service's logs.
A file target, when configured, always receives JSON.

Usage:
    from xasset_core.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", log_file="xasset.log")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from xasset_core.config import LoggingConfig

_CORRELATION_FIELDS = ("operation", "request_id", "trace_id")


def correlation_of(record: logging.LogRecord) -> dict[str, str]:
    """Non-empty correlation extras attached to ``record``."""
    return {
        name: value
        for name in _CORRELATION_FIELDS
        if (value := getattr(record, name, None))
    }


class _JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **correlation_of(record),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class _HumanFormatter(logging.Formatter):
    """``HH:MM:SS [LEVEL] logger <operation>: message [request_id: ..] [trace_id: ..]``."""

    COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, colour: bool = True):
        super().__init__()
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"[{record.levelname:<7}]"
        if self.colour:
            level = f"{self.COLOURS.get(record.levelname, '')}{level}{self.RESET}"
        op = getattr(record, "operation", None)
        tag = f" <{op}>" if op else ""
        ids = "".join(
            f" [{name}: {value}]"
            for name, value in correlation_of(record).items()
            if name != "operation"
        )
        line = f"{ts} {level} {record.name}{tag}: {record.getMessage()}{ids}"
        if record.exc_info and record.exc_info[1]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    fmt: str = "human",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level : str
        DEBUG, INFO, WARNING, ERROR or CRITICAL; anything else means INFO.
    fmt : str
        ``"human"`` or ``"json"`` for the console handler.
    log_file : str, optional
        Extra JSON-formatted file target; parent directories are created.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        console.setFormatter(_JSONFormatter())
    else:
        console.setFormatter(_HumanFormatter(colour=sys.stderr.isatty()))
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setFormatter(_JSONFormatter())
        root.addHandler(fh)


def setup_from_config(cfg: LoggingConfig) -> None:
    """Apply the ``[logging]`` section of an ``XassetConfig``."""
    setup_logging(level=cfg.level, fmt=cfg.format, log_file=cfg.file)
