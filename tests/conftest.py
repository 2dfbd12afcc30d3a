"""Global test fixtures for the SSI registry test suite."""

from __future__ import annotations

import os
from dataclasses import dataclass

import pytest
from eth_keys import keys

from ssi_registry.chain.ledger import Ledger
from ssi_registry.contracts.deployment import SSIDeployment, deploy_ssi_system
from ssi_registry.contracts.models import Role
from ssi_registry.core.config import clear_config_cache

GENESIS_TIMESTAMP = 1_700_000_000


@dataclass(frozen=True)
class Account:
    """A dev account with a known private key."""

    key: keys.PrivateKey

    @property
    def address(self) -> str:
        return self.key.public_key.to_checksum_address()

    @property
    def key_bytes(self) -> bytes:
        return self.key.to_bytes()


def make_account(seed: int) -> Account:
    return Account(keys.PrivateKey(bytes([seed]) * 32))


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from a fresh settings instance."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all SSI_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("SSI_"):
            monkeypatch.delenv(key, raising=False)


# ============================================================================
# Accounts
# ============================================================================


@pytest.fixture
def deployer() -> Account:
    return make_account(1)


@pytest.fixture
def issuer() -> Account:
    return make_account(2)


@pytest.fixture
def holder() -> Account:
    return make_account(3)


@pytest.fixture
def outsider() -> Account:
    """An account with no role."""
    return make_account(4)


@pytest.fixture
def relayer() -> Account:
    return make_account(5)


# ============================================================================
# Ledger and deployed system
# ============================================================================


@pytest.fixture
def ledger() -> Ledger:
    return Ledger(chain_id=1337, genesis_timestamp=GENESIS_TIMESTAMP, block_time=1)


@pytest.fixture
def system(ledger, deployer) -> SSIDeployment:
    """Freshly deployed RoleControl, DidRegistry and CredentialRegistry."""
    return deploy_ssi_system(ledger, deployer.address)


@pytest.fixture
def roles_assigned(system, deployer, issuer, holder) -> SSIDeployment:
    """Deployed system with ISSUER and HOLDER assigned."""
    rc = system.role_control
    system.ledger.transact(deployer.address, rc.assign_role, Role.ISSUER, issuer.address)
    system.ledger.transact(deployer.address, rc.assign_role, Role.HOLDER, holder.address)
    return system


@pytest.fixture
def with_dids(roles_assigned, issuer, holder) -> SSIDeployment:
    """Issuer and holder each own an active DID."""
    dids = roles_assigned.did_registry
    for account, seed in ((issuer, 0xA1), (holder, 0xB2)):
        roles_assigned.ledger.transact(
            account.address, dids.create_did, account.address, bytes([seed]) * 32, f"cid-{seed:x}"
        )
    return roles_assigned
