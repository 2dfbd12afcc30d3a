"""Events emitted by the registries."""

from __future__ import annotations

from dataclasses import dataclass

from ..chain.events import Event
from .models import CredentialStatus, Role

# -- RoleControl ------------------------------------------------------------


@dataclass(frozen=True)
class RoleAssigned(Event):
    role: Role
    account: str
    sender: str


@dataclass(frozen=True)
class RoleRevoked(Event):
    role: Role
    account: str
    sender: str


# -- DidRegistry ------------------------------------------------------------


@dataclass(frozen=True)
class DIDCreated(Event):
    identity: str
    doc_hash: bytes
    doc_cid: str


@dataclass(frozen=True)
class DIDUpdated(Event):
    identity: str
    doc_hash: bytes
    doc_cid: str
    version_id: int


@dataclass(frozen=True)
class DIDDeactivated(Event):
    identity: str
    version_id: int


# -- CredentialRegistry -----------------------------------------------------


@dataclass(frozen=True)
class CredentialIssued(Event):
    credential_id: bytes
    actor: str
    identity: str
    credential_cid: str


@dataclass(frozen=True)
class CredentialStatusUpdated(Event):
    credential_id: bytes
    previous_status: CredentialStatus
    new_status: CredentialStatus
    updated_by: str


@dataclass(frozen=True)
class CredentialRevoked(Event):
    credential_id: bytes
    revoked_by: str


@dataclass(frozen=True)
class CredentialSuspended(Event):
    credential_id: bytes
    suspended_by: str


@dataclass(frozen=True)
class CredentialReactivated(Event):
    credential_id: bytes
    reactivated_by: str
