# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""In-process ledger giving the registries their execution semantics.

The registries are written against a small slice of what a smart-contract
chain offers: the transaction sender, the current block number and
timestamp, event logs, and whole-transaction rollback. :class:`Ledger`
provides exactly that, in memory:

- Every call to :meth:`Ledger.transact` is one transaction. Storage of every
  deployed contract is snapshotted first; if the call raises, all snapshots
  are restored and the original exception propagates. Nothing partial is
  ever committed.
- Transactions are totally ordered. Each successful transaction is mined in
  its own block (automine), so block numbers and timestamps strictly
  increase from one successful transaction to the next.
- Contracts are deployed at Ethereum CREATE addresses derived from the
  deployer and its nonce.

Typical use::

    ledger = Ledger()
    role_control, _ = ledger.deploy(deployer, RoleControl)
    receipt = ledger.transact(deployer, role_control.assign_role, Role.ISSUER, alice)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import rlp
from eth_utils import keccak, to_checksum_address

from ..core.config import get_config
from ..core.exceptions import SSIException, ValidationException
from ..core.logging import transaction_context
from ..core.types import address_bytes, normalize_address
from .events import Event, LogEntry

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="Contract")


@dataclass(frozen=True)
class Block:
    """A mined block header: just what contracts can observe."""

    number: int
    timestamp: int


@dataclass
class CallContext:
    """Execution context of one transaction (``msg`` and ``block`` in Solidity)."""

    sender: str
    block: Block
    tx_hash: str
    logs: list[LogEntry] = field(default_factory=list)

    @property
    def timestamp(self) -> int:
        return self.block.timestamp

    @property
    def block_number(self) -> int:
        return self.block.number

    def emit(self, address: str, event: Event) -> None:
        self.logs.append(
            LogEntry(
                address=address,
                event=event,
                block_number=self.block.number,
                tx_hash=self.tx_hash,
                log_index=len(self.logs),
            )
        )


@dataclass(frozen=True)
class Receipt:
    """Result of a mined transaction."""

    tx_hash: str
    block_number: int
    timestamp: int
    sender: str
    to: str | None
    function: str
    return_value: Any = None
    logs: tuple[LogEntry, ...] = ()
    contract_address: str | None = None

    def events(self, name: str | None = None) -> list[Event]:
        """Events emitted by the transaction, optionally filtered by event name."""
        return [log.event for log in self.logs if name is None or log.event.name == name]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "block_number": self.block_number,
            "timestamp": self.timestamp,
            "sender": self.sender,
            "to": self.to,
            "function": self.function,
            "return_value": _jsonable(self.return_value),
            "contract_address": self.contract_address,
            "logs": [log.to_dict() for log in self.logs],
        }


class Contract:
    """Base class for contracts deployed on a :class:`Ledger`.

    Subclasses list the attributes holding their storage in ``_storage_fields``.
    Each of those must be a dict whose values are immutable, so a shallow copy
    is a complete snapshot.
    """

    _storage_fields: tuple[str, ...] = ()

    def __init__(self, ctx: CallContext, address: str) -> None:
        self.address = address
        self.deployer = ctx.sender

    @classmethod
    def _blank(cls: type[C], address: str, deployer: str) -> C:
        """An instance with identity but no storage, for restoring saved state."""
        contract = cls.__new__(cls)
        contract.address = address
        contract.deployer = deployer
        return contract

    def _emit(self, ctx: CallContext, event: Event) -> None:
        ctx.emit(self.address, event)

    def snapshot(self) -> dict[str, dict]:
        return {name: dict(getattr(self, name)) for name in self._storage_fields}

    def restore(self, snapshot: dict[str, dict]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, dict(value))


def create_address(sender: str, nonce: int) -> str:
    """Ethereum CREATE address: ``keccak256(rlp([sender, nonce]))[12:]``."""
    return to_checksum_address(keccak(rlp.encode([address_bytes(sender), nonce]))[12:])


class Ledger:
    """Single-node, automining, in-memory ledger."""

    def __init__(
        self,
        chain_id: int | None = None,
        genesis_timestamp: int | None = None,
        block_time: int | None = None,
    ) -> None:
        config = get_config()
        self.chain_id = config.chain_id if chain_id is None else chain_id
        self.block_time = config.block_time_seconds if block_time is None else block_time
        if self.block_time < 1:
            raise ValidationException("block_time must be at least 1", field="block_time", value=self.block_time)
        if genesis_timestamp is None:
            genesis_timestamp = config.genesis_timestamp
        if genesis_timestamp is None:
            genesis_timestamp = int(time.time())

        self.blocks: list[Block] = [Block(number=0, timestamp=genesis_timestamp)]
        self.nonces: dict[str, int] = {}
        self.contracts: dict[str, Contract] = {}
        self.logs: list[LogEntry] = []

    # -- chain state --------------------------------------------------------

    @property
    def head(self) -> Block:
        return self.blocks[-1]

    def get_nonce(self, account: str) -> int:
        return self.nonces.get(normalize_address(account), 0)

    def get_contract(self, address: str) -> Contract:
        address = normalize_address(address)
        try:
            return self.contracts[address]
        except KeyError:
            raise ValidationException(f"No contract deployed at {address}", field="address", value=address) from None

    def get_logs(
        self,
        address: str | None = None,
        event: str | None = None,
        from_block: int = 0,
    ) -> list[LogEntry]:
        """Query past events, like ``getPastEvents`` on a node."""
        if address is not None:
            address = normalize_address(address)
        return [
            log
            for log in self.logs
            if log.block_number >= from_block
            and (address is None or log.address == address)
            and (event is None or log.event.name == event)
        ]

    # -- persistence --------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        """Chain head and nonces. Block history and the event log are not kept."""
        return {
            "chain_id": self.chain_id,
            "block_time": self.block_time,
            "head": {"number": self.head.number, "timestamp": self.head.timestamp},
            "nonces": dict(self.nonces),
        }

    @classmethod
    def from_state(cls, state: dict[str, Any]) -> Ledger:
        ledger = cls(
            chain_id=state["chain_id"],
            genesis_timestamp=state["head"]["timestamp"],
            block_time=state["block_time"],
        )
        ledger.blocks = [Block(number=state["head"]["number"], timestamp=state["head"]["timestamp"])]
        ledger.nonces = dict(state["nonces"])
        return ledger

    def attach(self, contract: Contract) -> None:
        """Register a contract restored from saved state at its existing address."""
        self.contracts[contract.address] = contract

    # -- transactions -------------------------------------------------------

    def deploy(self, sender: str, contract_cls: type[C], *args: Any) -> tuple[C, Receipt]:
        """Deploy ``contract_cls`` from ``sender`` and mine the deployment block."""
        sender = normalize_address(sender, field="sender")
        address = create_address(sender, self.get_nonce(sender))

        def construct(ctx: CallContext) -> C:
            return contract_cls(ctx, address, *args)

        receipt = self._execute(sender, None, contract_cls.__name__, construct)
        contract = receipt.return_value
        self.contracts[address] = contract
        logger.info(f"Deployed {contract_cls.__name__} at {address} (block {receipt.block_number})")
        return contract, receipt

    def transact(self, sender: str, method: Callable[..., Any], *args: Any, **kwargs: Any) -> Receipt:
        """Run ``method`` (a bound method of a deployed contract) as one transaction.

        Raises:
            SSIException: Whatever the contract raised; all state is rolled back.
        """
        sender = normalize_address(sender, field="sender")
        contract = getattr(method, "__self__", None)
        if not isinstance(contract, Contract) or self.contracts.get(contract.address) is not contract:
            raise ValidationException(
                "Transactions must target a method of a contract deployed on this ledger",
                field="method",
                value=getattr(method, "__qualname__", method),
            )

        def call(ctx: CallContext) -> Any:
            return method(ctx, *args, **kwargs)

        return self._execute(sender, contract.address, method.__name__, call)

    def _execute(
        self,
        sender: str,
        to: str | None,
        function: str,
        body: Callable[[CallContext], Any],
    ) -> Receipt:
        nonce = self.get_nonce(sender)
        tx_hash = self._tx_hash(sender, nonce, to, function)
        block = Block(number=self.head.number + 1, timestamp=self.head.timestamp + self.block_time)
        ctx = CallContext(sender=sender, block=block, tx_hash=tx_hash)
        snapshots = {address: contract.snapshot() for address, contract in self.contracts.items()}

        with transaction_context(tx_hash):
            try:
                result = body(ctx)
            except SSIException as e:
                self._rollback(snapshots)
                logger.info(f"Transaction {function} from {sender} reverted: {e.__class__.__name__}: {e.message}")
                raise
            except Exception:
                self._rollback(snapshots)
                logger.exception(f"Transaction {function} from {sender} failed unexpectedly")
                raise

            self.blocks.append(block)
            self.nonces[sender] = nonce + 1
            self.logs.extend(ctx.logs)
            logger.debug(f"Mined block {block.number} with {function} ({len(ctx.logs)} events)")

        return Receipt(
            tx_hash=tx_hash,
            block_number=block.number,
            timestamp=block.timestamp,
            sender=sender,
            to=to,
            function=function,
            return_value=result,
            logs=tuple(ctx.logs),
            contract_address=result.address if to is None else None,
        )

    def _rollback(self, snapshots: dict[str, dict[str, dict]]) -> None:
        for address, snapshot in snapshots.items():
            self.contracts[address].restore(snapshot)

    def _tx_hash(self, sender: str, nonce: int, to: str | None, function: str) -> str:
        encoded = rlp.encode(
            [
                self.chain_id,
                address_bytes(sender),
                nonce,
                address_bytes(to) if to else b"",
                function.encode("utf-8"),
            ]
        )
        return "0x" + keccak(encoded).hex()


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, tuple | list):
        return [_jsonable(v) for v in value]
    if isinstance(value, Contract):
        return value.address
    return value
