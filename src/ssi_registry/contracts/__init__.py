"""The SSI contract system: RoleControl, DidRegistry and CredentialRegistry.

Key concepts:
- **RoleControl**: one role per account (ISSUER, HOLDER, TRUSTEE); TRUSTEE manages all roles.
- **DidRegistry**: DID records keyed by identity address; ACTIVE -> DEACTIVATED, terminal.
- **CredentialRegistry**: credential ids with issuer and status;
  ACTIVE <-> SUSPENDED, either -> REVOKED, terminal.
"""

from .credential_registry import STATUS_TRANSITIONS, CredentialRegistry
from .deployment import SSIDeployment, deploy_ssi_system
from .did_registry import DidRegistry
from .models import (
    CredentialMetadata,
    CredentialRecord,
    CredentialStatus,
    DidMetadata,
    DidRecord,
    DidStatus,
    DidValidation,
    Role,
)
from .role_control import ROLE_OWNERS, RoleControl

__all__ = [
    "CredentialMetadata",
    "CredentialRecord",
    "CredentialRegistry",
    "CredentialStatus",
    "DidMetadata",
    "DidRecord",
    "DidRegistry",
    "DidStatus",
    "DidValidation",
    "ROLE_OWNERS",
    "Role",
    "RoleControl",
    "SSIDeployment",
    "STATUS_TRANSITIONS",
    "deploy_ssi_system",
]
