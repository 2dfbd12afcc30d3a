"""Helpers shared by CLI commands."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from ..chain.signing import (
    OperationSignature,
    address_of,
    sign_operation_hash,
    signed_operation_hash,
)
from ..core.exceptions import ConfigException, ValidationException


def add_signing_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sender", help="Transaction sender (relayer when --signer-key is given)")
    parser.add_argument(
        "--signer-key",
        help="Hex private key; submits the signed variant with the key's address as actor",
    )


def resolve_signing(
    args: argparse.Namespace,
    contract_address: str,
    identity: str,
    operation: str,
    *payload: bytes | str,
) -> tuple[str, OperationSignature | None]:
    """Work out the sender and, for signed operations, the signature.

    Without ``--signer-key`` the sender acts directly. With it, the operation
    hash is signed locally and the sender (defaulting to the signer itself)
    only relays it.
    """
    if not args.signer_key:
        if not args.sender:
            raise ValidationException("--sender is required unless --signer-key is given", field="sender")
        return args.sender, None

    message_hash = signed_operation_hash(contract_address, identity, operation, *payload)
    signature = sign_operation_hash(args.signer_key, message_hash)
    return args.sender or address_of(args.signer_key), signature


def read_json_file(path: str) -> tuple[bytes, Any]:
    """Raw bytes and parsed content of a JSON document."""
    raw = Path(path).read_bytes()
    try:
        return raw, json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigException(f"{path} is not valid JSON: {e}") from e
