"""Tests for ssi_registry.chain.ledger - transactions, blocks and rollback."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from ssi_registry.chain.events import Event
from ssi_registry.chain.ledger import CallContext, Contract, Ledger, create_address
from ssi_registry.core.exceptions import SSIException, ValidationException
from ssi_registry.core.logging import get_current_tx

GENESIS = 1_700_000_000


@dataclass(frozen=True)
class Incremented(Event):
    key: str
    value: int


class Counter(Contract):
    """Minimal contract used to exercise the ledger."""

    _storage_fields = ("_counts",)

    def __init__(self, ctx: CallContext, address: str, start: int = 0) -> None:
        super().__init__(ctx, address)
        self._counts: dict[str, int] = {"total": start}

    def increment(self, ctx: CallContext, key: str, fail: bool = False) -> int:
        self._counts[key] = self._counts.get(key, 0) + 1
        self._emit(ctx, Incremented(key=key, value=self._counts[key]))
        if fail:
            raise SSIException("boom")
        return self._counts[key]

    def crash(self, ctx: CallContext) -> None:
        self._counts["total"] = -1
        raise RuntimeError("unexpected")

    def seen_tx(self, ctx: CallContext) -> tuple[str, str | None]:
        return ctx.tx_hash, get_current_tx()

    def get(self, key: str) -> int:
        return self._counts.get(key, 0)


@pytest.fixture
def counter(ledger, deployer) -> Counter:
    contract, _ = ledger.deploy(deployer.address, Counter, 10)
    return contract


class TestCreateAddress:
    def test_known_vector(self):
        """CREATE address of the first contract from the well-known dev account."""
        assert (
            create_address("0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", 0)
            == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
        )

    def test_depends_on_nonce(self, deployer):
        assert create_address(deployer.address, 0) != create_address(deployer.address, 1)


class TestDeploy:
    def test_deploy_mines_block_and_uses_create_address(self, ledger, deployer):
        expected = create_address(deployer.address, 0)
        contract, receipt = ledger.deploy(deployer.address, Counter)

        assert contract.address == expected
        assert receipt.contract_address == expected
        assert receipt.to is None
        assert receipt.block_number == 1
        assert receipt.timestamp == GENESIS + 1
        assert contract.deployer == deployer.address
        assert ledger.get_contract(expected) is contract
        assert ledger.get_nonce(deployer.address) == 1

    def test_constructor_arguments(self, counter):
        assert counter.get("total") == 10

    def test_unknown_contract(self, ledger):
        with pytest.raises(ValidationException):
            ledger.get_contract("0x" + "12" * 20)


class TestTransact:
    def test_blocks_strictly_increase(self, ledger, deployer, counter):
        first = ledger.transact(deployer.address, counter.increment, "a")
        second = ledger.transact(deployer.address, counter.increment, "a")

        assert second.block_number == first.block_number + 1
        assert second.timestamp > first.timestamp
        assert second.return_value == 2
        assert ledger.head.number == second.block_number

    def test_receipt_contents(self, ledger, deployer, counter):
        receipt = ledger.transact(deployer.address, counter.increment, "a")

        assert receipt.function == "increment"
        assert receipt.to == counter.address
        assert receipt.sender == deployer.address
        assert receipt.events("Incremented") == [Incremented(key="a", value=1)]
        assert receipt.logs[0].log_index == 0
        assert receipt.logs[0].tx_hash == receipt.tx_hash

    def test_sender_is_checksummed(self, ledger, deployer, counter):
        receipt = ledger.transact(deployer.address.lower(), counter.increment, "a")
        assert receipt.sender == deployer.address

    def test_tx_hashes_unique(self, ledger, deployer, counter):
        hashes = {ledger.transact(deployer.address, counter.increment, "a").tx_hash for _ in range(3)}
        assert len(hashes) == 3

    def test_rejects_foreign_contract(self, ledger, deployer, counter):
        other = Ledger(genesis_timestamp=GENESIS)
        with pytest.raises(ValidationException):
            other.transact(deployer.address, counter.increment, "a")

    def test_rejects_plain_function(self, ledger, deployer):
        with pytest.raises(ValidationException):
            ledger.transact(deployer.address, print, "a")

    def test_transaction_context_set_during_execution(self, ledger, deployer, counter):
        receipt = ledger.transact(deployer.address, counter.seen_tx)
        tx_hash, current = receipt.return_value
        assert tx_hash == current == receipt.tx_hash
        assert get_current_tx() is None


class TestRollback:
    """A failing transaction leaves no trace."""

    def test_revert_restores_storage(self, ledger, deployer, counter):
        ledger.transact(deployer.address, counter.increment, "a")
        head = ledger.head
        nonce = ledger.get_nonce(deployer.address)

        with pytest.raises(SSIException, match="boom"):
            ledger.transact(deployer.address, counter.increment, "a", fail=True)

        assert counter.get("a") == 1
        assert ledger.head == head
        assert ledger.get_nonce(deployer.address) == nonce
        assert len(ledger.get_logs(event="Incremented")) == 1

    def test_unexpected_error_also_rolls_back(self, ledger, deployer, counter):
        with pytest.raises(RuntimeError):
            ledger.transact(deployer.address, counter.crash)
        assert counter.get("total") == 10

    def test_revert_logged(self, ledger, deployer, counter, caplog):
        caplog.set_level(logging.INFO, logger="ssi_registry.chain.ledger")
        with pytest.raises(SSIException):
            ledger.transact(deployer.address, counter.increment, "a", fail=True)
        assert "reverted: SSIException: boom" in caplog.text


class TestLogs:
    def test_filters(self, ledger, deployer, counter):
        other, _ = ledger.deploy(deployer.address, Counter)
        ledger.transact(deployer.address, counter.increment, "a")
        receipt = ledger.transact(deployer.address, other.increment, "b")

        assert [log.event.key for log in ledger.get_logs(address=counter.address)] == ["a"]
        assert [log.event.key for log in ledger.get_logs(from_block=receipt.block_number)] == ["b"]
        assert ledger.get_logs(event="Nothing") == []

    def test_event_to_dict(self):
        assert Incremented(key="a", value=1).to_dict() == {"event": "Incremented", "args": {"key": "a", "value": 1}}


class TestPersistence:
    def test_export_and_restore_head(self, ledger, deployer, counter):
        ledger.transact(deployer.address, counter.increment, "a")
        restored = Ledger.from_state(ledger.export_state())

        assert restored.head == ledger.head
        assert restored.chain_id == ledger.chain_id
        assert restored.get_nonce(deployer.address) == ledger.get_nonce(deployer.address)

    def test_block_time_must_be_positive(self):
        with pytest.raises(ValidationException):
            Ledger(block_time=0)

    def test_defaults_from_config(self, clean_env, monkeypatch):
        monkeypatch.setenv("SSI_CHAIN_ID", "99")
        monkeypatch.setenv("SSI_GENESIS_TIMESTAMP", "1234")
        ledger = Ledger()
        assert ledger.chain_id == 99
        assert ledger.head.timestamp == 1234
