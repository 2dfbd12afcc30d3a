# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""CredentialRegistry: verifiable-credential issuance and status.

Only a credential's id (a content hash of the canonical credential), its
issuer and its status live here; the credential itself stays off-chain.

Status machine::

    Absent --issue--> ACTIVE <--> SUSPENDED
                        |            |
                        +--> REVOKED <+      (REVOKED is terminal)

Issuance re-checks, on every call, that issuer and holder each control an
active DID of their own; no "verified" flag is cached. Status updates use
optimistic concurrency: the caller states the status it read, and the update
fails if another transaction changed it first.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any

from ..chain.ledger import CallContext, Contract
from ..chain.signing import ISSUE_CREDENTIAL, recover_signer, signed_operation_hash
from ..core.exceptions import (
    CredentialAlreadyExistsError,
    CredentialNotFoundError,
    CredentialRevokedError,
    IdentityValidationError,
    InvalidStatusTransitionError,
    SelfIssuanceError,
    UnauthorizedCallerError,
    ValidationException,
)
from ..core.types import hex32, normalize_address, to_bytes32
from .events import (
    CredentialIssued,
    CredentialReactivated,
    CredentialRevoked,
    CredentialStatusUpdated,
    CredentialSuspended,
)
from .interfaces import DidRegistryInterface, RoleControlInterface
from .models import CredentialMetadata, CredentialRecord, CredentialStatus

logger = logging.getLogger(__name__)

# current status -> statuses it may move to
STATUS_TRANSITIONS = MappingProxyType(
    {
        CredentialStatus.NONE: frozenset(),
        CredentialStatus.ACTIVE: frozenset({CredentialStatus.SUSPENDED, CredentialStatus.REVOKED}),
        CredentialStatus.SUSPENDED: frozenset({CredentialStatus.ACTIVE, CredentialStatus.REVOKED}),
        CredentialStatus.REVOKED: frozenset(),
    }
)


def _parse_status(value: CredentialStatus | int, field: str) -> CredentialStatus:
    if isinstance(value, bool):
        raise ValidationException(f"Invalid credential status: {value}", field=field, value=value)
    try:
        return CredentialStatus(value)
    except ValueError:
        raise ValidationException(f"Invalid credential status: {value}", field=field, value=value) from None


class CredentialRegistry(Contract):
    """Registry of credential records, gated by RoleControl and DidRegistry."""

    _storage_fields = ("_credentials",)

    def __init__(
        self,
        ctx: CallContext,
        address: str,
        role_control: RoleControlInterface,
        did_registry: DidRegistryInterface,
    ) -> None:
        super().__init__(ctx, address)
        self._role_control = role_control
        self._did_registry = did_registry
        self._credentials: dict[bytes, CredentialRecord] = {}

    @property
    def role_control(self) -> RoleControlInterface:
        return self._role_control

    @property
    def did_registry(self) -> DidRegistryInterface:
        return self._did_registry

    # -- issuance -----------------------------------------------------------

    def issue_credential(
        self,
        ctx: CallContext,
        identity: str,
        credential_id: bytes | str,
        credential_cid: str,
    ) -> None:
        """Issue credential ``credential_id`` from the sender to holder ``identity``.

        Raises:
            UnauthorizedCallerError: The sender is neither TRUSTEE nor ISSUER.
            CredentialAlreadyExistsError: ``credential_id`` is taken.
            SelfIssuanceError: Sender and holder are the same account.
            IdentityValidationError: Sender or holder lacks an active, self-owned DID.
        """
        self._issue_credential(ctx, ctx.sender, identity, to_bytes32(credential_id, field="credential_id"), credential_cid)

    def issue_credential_signed(
        self,
        ctx: CallContext,
        identity: str,
        sig_v: int,
        sig_r: bytes,
        sig_s: bytes,
        credential_id: bytes | str,
        credential_cid: str,
    ) -> None:
        """Like :meth:`issue_credential`, with the signer of the operation as issuer."""
        identity = normalize_address(identity, field="identity")
        credential_id = to_bytes32(credential_id, field="credential_id")
        signer = recover_signer(
            signed_operation_hash(self.address, identity, ISSUE_CREDENTIAL, credential_id, credential_cid),
            sig_v,
            sig_r,
            sig_s,
        )
        self._issue_credential(ctx, signer, identity, credential_id, credential_cid)

    def _issue_credential(
        self,
        ctx: CallContext,
        actor: str,
        identity: str,
        credential_id: bytes,
        credential_cid: str,
    ) -> None:
        identity = normalize_address(identity, field="identity")
        self._role_control.is_trustee_or_issuer(actor)
        if credential_id in self._credentials:
            raise CredentialAlreadyExistsError(hex32(credential_id))
        if actor == identity:
            raise SelfIssuanceError(actor)
        self._require_self_owned_did(actor)
        self._require_self_owned_did(identity)

        self._credentials[credential_id] = CredentialRecord(
            issuer=actor,
            metadata=CredentialMetadata(
                issuance_date=ctx.timestamp,
                expiration_date=0,
                status=CredentialStatus.ACTIVE,
            ),
        )
        self._emit(
            ctx,
            CredentialIssued(
                credential_id=credential_id,
                actor=actor,
                identity=identity,
                credential_cid=credential_cid,
            ),
        )
        logger.info(f"Credential {hex32(credential_id)} issued by {actor} to {identity}")

    # -- status -------------------------------------------------------------

    def update_credential_status(
        self,
        ctx: CallContext,
        credential_id: bytes | str,
        previous_status: CredentialStatus | int,
        new_status: CredentialStatus | int,
    ) -> None:
        """Move a credential to ``new_status``.

        ``previous_status`` must equal the stored status, so an update based on
        a stale read fails instead of overwriting a newer status. Setting the
        current status again is a successful no-op with no events.

        Raises:
            CredentialNotFoundError: No such credential.
            InvalidStatusTransitionError: Stale ``previous_status`` or illegal move.
            UnauthorizedCallerError: The sender is not the credential's issuer.
            IdentityValidationError: The issuer's DID is no longer active.
            CredentialRevokedError: The credential is revoked.
        """
        credential_id = to_bytes32(credential_id, field="credential_id")
        previous_status = _parse_status(previous_status, "previous_status")
        new_status = _parse_status(new_status, "new_status")

        record = self._credentials.get(credential_id)
        if record is None:
            raise CredentialNotFoundError(hex32(credential_id))
        current = record.status
        if current != previous_status:
            raise InvalidStatusTransitionError(hex32(credential_id), current.name, previous_status.name, new_status.name)
        if record.issuer != ctx.sender:
            raise UnauthorizedCallerError(ctx.sender, ["credential issuer"])
        self._require_self_owned_did(ctx.sender)
        if current == CredentialStatus.REVOKED:
            raise CredentialRevokedError(hex32(credential_id))
        if new_status == CredentialStatus.NONE:
            raise InvalidStatusTransitionError(hex32(credential_id), current.name, previous_status.name, new_status.name)
        if new_status == current:
            return
        if new_status not in STATUS_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(hex32(credential_id), current.name, previous_status.name, new_status.name)

        self._credentials[credential_id] = CredentialRecord(
            issuer=record.issuer,
            metadata=CredentialMetadata(
                issuance_date=record.metadata.issuance_date,
                expiration_date=record.metadata.expiration_date,
                status=new_status,
            ),
        )

        self._emit(
            ctx,
            CredentialStatusUpdated(
                credential_id=credential_id,
                previous_status=current,
                new_status=new_status,
                updated_by=ctx.sender,
            ),
        )
        if new_status == CredentialStatus.REVOKED:
            self._emit(ctx, CredentialRevoked(credential_id=credential_id, revoked_by=ctx.sender))
        elif new_status == CredentialStatus.SUSPENDED:
            self._emit(ctx, CredentialSuspended(credential_id=credential_id, suspended_by=ctx.sender))
        elif current == CredentialStatus.SUSPENDED and new_status == CredentialStatus.ACTIVE:
            self._emit(ctx, CredentialReactivated(credential_id=credential_id, reactivated_by=ctx.sender))

        logger.info(f"Credential {hex32(credential_id)} status {current.name} -> {new_status.name}")

    # -- views --------------------------------------------------------------

    def resolve_credential(self, credential_id: bytes | str) -> CredentialRecord:
        """Return a credential that exists and is not revoked (suspended is fine)."""
        credential_id = to_bytes32(credential_id, field="credential_id")
        record = self._credentials.get(credential_id)
        if record is None:
            raise CredentialNotFoundError(hex32(credential_id))
        if record.status == CredentialStatus.REVOKED:
            raise CredentialRevokedError(hex32(credential_id))
        return record

    def credential_exists(self, credential_id: bytes | str) -> bool:
        return to_bytes32(credential_id, field="credential_id") in self._credentials

    def get_credential_status(self, credential_id: bytes | str) -> CredentialStatus:
        """Stored status, NONE for an unknown id. Revoked credentials are reported too."""
        record = self._credentials.get(to_bytes32(credential_id, field="credential_id"))
        return CredentialStatus.NONE if record is None else record.status

    # -- helpers ------------------------------------------------------------

    def _require_self_owned_did(self, account: str) -> None:
        exists, active, owner = self._did_registry.validate_did(account)
        if not exists:
            raise IdentityValidationError(account, IdentityValidationError.NOT_FOUND)
        if not active:
            raise IdentityValidationError(account, IdentityValidationError.DEACTIVATED)
        if owner != account:
            raise IdentityValidationError(account, IdentityValidationError.NOT_SELF_OWNED)

    # -- persistence --------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        return {"credentials": {hex32(cid): record.to_dict() for cid, record in self._credentials.items()}}

    @classmethod
    def from_state(
        cls,
        address: str,
        deployer: str,
        state: dict[str, Any],
        role_control: RoleControlInterface,
        did_registry: DidRegistryInterface,
    ) -> CredentialRegistry:
        contract = cls._blank(address, deployer)
        contract._role_control = role_control
        contract._did_registry = did_registry
        contract._credentials = {
            to_bytes32(cid, field="credential_id"): CredentialRecord.from_dict(data)
            for cid, data in state["credentials"].items()
        }
        return contract
