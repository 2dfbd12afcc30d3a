# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""SSI Registry - role control, DID registry and credential registry.

A self-sovereign identity system built from three contracts running on an
in-process ledger:

  RoleControl         who may do what (ISSUER / HOLDER / TRUSTEE)
    → DidRegistry     DID document commitments per identity address
    → CredentialRegistry
                      credential ids, their issuer and status

Each contract call is an atomic transaction: it either completes and emits
its events, or raises and leaves every contract untouched.

CLI entry point: ``ssi-registry``
"""

__version__ = "0.1.0"

from .chain import Ledger, Receipt
from .contracts import (
    CredentialRegistry,
    CredentialStatus,
    DidRegistry,
    DidStatus,
    Role,
    RoleControl,
    SSIDeployment,
    deploy_ssi_system,
)

__all__ = [
    "CredentialRegistry",
    "CredentialStatus",
    "DidRegistry",
    "DidStatus",
    "Ledger",
    "Receipt",
    "Role",
    "RoleControl",
    "SSIDeployment",
    "__version__",
    "deploy_ssi_system",
]
