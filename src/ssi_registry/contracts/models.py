# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Records, roles and lifecycle states stored by the registries.

Enum values match the Solidity ordinals so they can be passed through to
existing clients unchanged. Records are frozen: a registry replaces a record
on every write rather than mutating it, so anything a view returns is a
value, never a handle on internal storage.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, NamedTuple

from ..core.types import ZERO_ADDRESS


class Role(enum.IntEnum):
    """SSI roles. Each account holds exactly one (NONE by default)."""

    NONE = 0
    ISSUER = 1
    HOLDER = 2
    TRUSTEE = 3


class DidStatus(enum.IntEnum):
    """Lifecycle status of a DID. DEACTIVATED is terminal."""

    NONE = 0
    ACTIVE = 1
    DEACTIVATED = 2


class CredentialStatus(enum.IntEnum):
    """Lifecycle status of a credential. REVOKED is terminal."""

    NONE = 0
    ACTIVE = 1
    REVOKED = 2
    SUSPENDED = 3


# ---------------------------------------------------------------------------
# DID records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DidMetadata:
    """Lifecycle metadata of a DID.

    Attributes:
        owner: Fixed at creation to the identity address.
        created: Block timestamp of creation; 0 means the record does not exist.
        updated: Block timestamp of the last write.
        version_id: Block number of the last write.
        status: Current lifecycle status.
    """

    owner: str = ZERO_ADDRESS
    created: int = 0
    updated: int = 0
    version_id: int = 0
    status: DidStatus = DidStatus.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "created": self.created,
            "updated": self.updated,
            "version_id": self.version_id,
            "status": self.status.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DidMetadata:
        return cls(
            owner=data["owner"],
            created=data["created"],
            updated=data["updated"],
            version_id=data["version_id"],
            status=DidStatus[data["status"]],
        )


@dataclass(frozen=True)
class DidRecord:
    """A DID: commitment to the off-chain document plus metadata."""

    doc_hash: bytes
    metadata: DidMetadata

    @property
    def exists(self) -> bool:
        return self.metadata.created != 0

    @property
    def is_active(self) -> bool:
        return self.metadata.status == DidStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_hash": "0x" + self.doc_hash.hex(),
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DidRecord:
        return cls(
            doc_hash=bytes.fromhex(data["doc_hash"].removeprefix("0x")),
            metadata=DidMetadata.from_dict(data["metadata"]),
        )


class DidValidation(NamedTuple):
    """Result of :meth:`DidRegistry.validate_did`: everything a caller needs in one call."""

    exists: bool
    active: bool
    owner: str


# ---------------------------------------------------------------------------
# Credential records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CredentialMetadata:
    """Lifecycle metadata of a credential.

    Attributes:
        issuance_date: Block timestamp of issuance (uint40 on-chain).
        expiration_date: Expiry timestamp (uint32 on-chain); 0 means unset.
        status: Current lifecycle status.
    """

    issuance_date: int = 0
    expiration_date: int = 0
    status: CredentialStatus = CredentialStatus.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "issuance_date": self.issuance_date,
            "expiration_date": self.expiration_date,
            "status": self.status.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CredentialMetadata:
        return cls(
            issuance_date=data["issuance_date"],
            expiration_date=data["expiration_date"],
            status=CredentialStatus[data["status"]],
        )


@dataclass(frozen=True)
class CredentialRecord:
    """A verifiable credential as stored on-chain: its issuer and status only."""

    issuer: str
    metadata: CredentialMetadata

    @property
    def status(self) -> CredentialStatus:
        return self.metadata.status

    def to_dict(self) -> dict[str, Any]:
        return {
            "issuer": self.issuer,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CredentialRecord:
        return cls(issuer=data["issuer"], metadata=CredentialMetadata.from_dict(data["metadata"]))
