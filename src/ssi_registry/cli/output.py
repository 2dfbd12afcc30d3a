# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Output formatting for CLI commands."""

from __future__ import annotations

import json
import sys
from typing import Any

from ..chain.ledger import Receipt
from ..core.exceptions import SSIException


def output_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def output_receipt(receipt: Receipt, as_json: bool) -> None:
    """Print a mined transaction: full receipt as JSON, or a summary line per event."""
    if as_json:
        output_json(receipt.to_dict())
        return
    print(f"✅ {receipt.function} mined in block {receipt.block_number} (tx {receipt.tx_hash[:18]}...)")
    for log in receipt.logs:
        args = ", ".join(f"{k}={v}" for k, v in log.event.to_dict()["args"].items())
        print(f"   {log.event.name}({args})")


def output_error(error: SSIException | str, as_json: bool = False) -> None:
    """Print an error to stderr."""
    if as_json and isinstance(error, SSIException):
        print(json.dumps(error.to_dict(), indent=2, default=str), file=sys.stderr)
        return
    message = error.message if isinstance(error, SSIException) else error
    print(f"Error: {message}", file=sys.stderr)
