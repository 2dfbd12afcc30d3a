# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Structured logging configuration for the SSI registry.

Provides:
- JSON formatter for machine-parseable output
- Standard formatter for development (human-readable)
- A transaction context so every line logged while a transaction executes
  carries that transaction's hash
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Hash of the transaction currently executing (thread/async-safe)
_current_tx: ContextVar[str | None] = ContextVar("current_tx", default=None)


def get_current_tx() -> str | None:
    """Return the hash of the transaction being executed, if any."""
    return _current_tx.get()


@contextmanager
def transaction_context(tx_hash: str) -> Generator[str, None, None]:
    """Scope log records to a transaction.

    Example:
        with transaction_context(tx_hash):
            logger.info("DID created")  # Will include the tx hash
    """
    token = _current_tx.set(tx_hash)
    try:
        yield tx_hash
    finally:
        _current_tx.reset(token)


class JSONFormatter(logging.Formatter):
    """JSON log formatter.

    Includes the transaction hash when present in context.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        tx_hash = get_current_tx()
        if tx_hash:
            log_data["tx_hash"] = tx_hash

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable formatter with optional colors for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    TX_COLOR = "\033[90m"  # Gray

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        # Copy so other handlers see the original record
        record = logging.makeLogRecord(record.__dict__)

        tx_hash = get_current_tx()
        if tx_hash:
            short_tx = tx_hash[:10]
            if self.use_colors:
                tx_str = f"{self.TX_COLOR}[{short_tx}]{self.RESET} "
            else:
                tx_str = f"[{short_tx}] "
            record.msg = tx_str + str(record.msg)

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"

        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure root logging for the registry and its CLI.

    Args:
        level: Log level; defaults to ``SSI_LOG_LEVEL``.
        json_format: Use JSON format (auto-detect from ``SSI_LOG_FORMAT`` or TTY if None).
        log_file: Optional file to write logs to; defaults to ``SSI_LOG_FILE``.
    """
    from .config import get_config

    config = get_config()

    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        format_env = config.log_format.lower()
        if format_env == "json":
            json_format = True
        elif format_env == "text":
            json_format = False
        else:
            json_format = not sys.stderr.isatty()

    log_file = config.log_file if log_file is None else log_file

    formatter: logging.Formatter
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = StandardFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        # Always use JSON for file output
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)
