"""Execution environment for the registries: ledger, events and signed operations."""

from .events import Event, LogEntry
from .ledger import Block, CallContext, Contract, Ledger, Receipt, create_address
from .signing import (
    OperationSignature,
    address_of,
    recover_signer,
    sign_operation_hash,
    signed_operation_hash,
)

__all__ = [
    "Block",
    "CallContext",
    "Contract",
    "Event",
    "Ledger",
    "LogEntry",
    "OperationSignature",
    "Receipt",
    "address_of",
    "create_address",
    "recover_signer",
    "sign_operation_hash",
    "signed_operation_hash",
]
