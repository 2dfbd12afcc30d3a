"""Deployment of the three SSI contracts in dependency order.

RoleControl has no dependencies; DidRegistry needs RoleControl;
CredentialRegistry needs both. The deployer becomes the first TRUSTEE.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..chain.ledger import Ledger, Receipt
from ..core.types import normalize_address
from .credential_registry import CredentialRegistry
from .did_registry import DidRegistry
from .role_control import RoleControl

logger = logging.getLogger(__name__)


@dataclass
class SSIDeployment:
    """A deployed SSI system and the ledger it lives on."""

    ledger: Ledger
    deployer: str
    role_control: RoleControl
    did_registry: DidRegistry
    credential_registry: CredentialRegistry
    receipts: list[Receipt] = field(default_factory=list)

    @property
    def addresses(self) -> dict[str, str]:
        return {
            "RoleControl": self.role_control.address,
            "DidRegistry": self.did_registry.address,
            "CredentialRegistry": self.credential_registry.address,
        }

    # -- serialisation --

    def to_dict(self) -> dict[str, Any]:
        return {
            "deployer": self.deployer,
            "ledger": self.ledger.export_state(),
            "contracts": {
                "RoleControl": {
                    "address": self.role_control.address,
                    "state": self.role_control.export_state(),
                },
                "DidRegistry": {
                    "address": self.did_registry.address,
                    "state": self.did_registry.export_state(),
                },
                "CredentialRegistry": {
                    "address": self.credential_registry.address,
                    "state": self.credential_registry.export_state(),
                },
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SSIDeployment:
        ledger = Ledger.from_state(data["ledger"])
        deployer = data["deployer"]
        contracts = data["contracts"]

        role_control = RoleControl.from_state(
            contracts["RoleControl"]["address"], deployer, contracts["RoleControl"]["state"]
        )
        did_registry = DidRegistry.from_state(
            contracts["DidRegistry"]["address"], deployer, contracts["DidRegistry"]["state"], role_control
        )
        credential_registry = CredentialRegistry.from_state(
            contracts["CredentialRegistry"]["address"],
            deployer,
            contracts["CredentialRegistry"]["state"],
            role_control,
            did_registry,
        )
        for contract in (role_control, did_registry, credential_registry):
            ledger.attach(contract)
        return cls(
            ledger=ledger,
            deployer=deployer,
            role_control=role_control,
            did_registry=did_registry,
            credential_registry=credential_registry,
        )


def deploy_ssi_system(ledger: Ledger, deployer: str) -> SSIDeployment:
    """Deploy RoleControl, DidRegistry and CredentialRegistry from ``deployer``."""
    deployer = normalize_address(deployer, field="deployer")
    logger.info(f"Starting SSI deployment from {deployer}")

    role_control, rc_receipt = ledger.deploy(deployer, RoleControl)
    did_registry, did_receipt = ledger.deploy(deployer, DidRegistry, role_control)
    credential_registry, cred_receipt = ledger.deploy(deployer, CredentialRegistry, role_control, did_registry)

    deployment = SSIDeployment(
        ledger=ledger,
        deployer=deployer,
        role_control=role_control,
        did_registry=did_registry,
        credential_registry=credential_registry,
        receipts=[rc_receipt, did_receipt, cred_receipt],
    )
    logger.info(f"SSI deployment complete: {deployment.addresses}")
    return deployment
