# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""DidRegistry: DID lifecycle keyed by identity address.

Each identity moves through ``Absent -> ACTIVE -> DEACTIVATED``. There is no
way back from DEACTIVATED, and an identity whose DID was ever created can
never be created again. The record commits to an off-chain DID document by
its 32-byte hash; the document's CID is only carried in events.

Authorization:
- create: the actor must hold ISSUER, HOLDER or TRUSTEE in RoleControl.
- update / deactivate: the actor must be the identity itself or a TRUSTEE.

Every operation has a ``*_signed`` variant where the actor is the address
recovered from an ECDSA signature instead of the transaction sender, so a
third party can relay it.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from ..chain.ledger import CallContext, Contract
from ..chain.signing import CREATE_DID, DEACTIVATE_DID, UPDATE_DID, recover_signer, signed_operation_hash
from ..core.exceptions import (
    DidAlreadyExistsError,
    DidDeactivatedError,
    DidNotFoundError,
    IdentityMismatchError,
    InvalidDocumentHashError,
    ValidationException,
)
from ..core.types import ZERO_ADDRESS, ZERO_HASH, normalize_address, to_bytes32
from .events import DIDCreated, DIDDeactivated, DIDUpdated
from .interfaces import RoleControlInterface
from .models import DidMetadata, DidRecord, DidStatus, DidValidation, Role

logger = logging.getLogger(__name__)


def _as_doc_hash(value: bytes | str) -> bytes:
    try:
        return to_bytes32(value, field="doc_hash")
    except ValidationException:
        raise InvalidDocumentHashError(value) from None


class DidRegistry(Contract):
    """Registry of DID records, gated by a :class:`RoleControlInterface`."""

    _storage_fields = ("_dids",)

    def __init__(self, ctx: CallContext, address: str, role_control: RoleControlInterface) -> None:
        super().__init__(ctx, address)
        self._role_control = role_control
        self._dids: dict[str, DidRecord] = {}

    @property
    def role_control(self) -> RoleControlInterface:
        return self._role_control

    # -- create -------------------------------------------------------------

    def create_did(self, ctx: CallContext, identity: str, doc_hash: bytes | str, doc_cid: str) -> None:
        """Register ``identity``'s DID with the sender as actor.

        Raises:
            DidAlreadyExistsError: A DID was already created for ``identity``.
            UnauthorizedCallerError: The sender holds no SSI role.
            InvalidDocumentHashError: ``doc_hash`` is zero or malformed.
        """
        self._create_did(ctx, ctx.sender, identity, _as_doc_hash(doc_hash), doc_cid)

    def create_did_signed(
        self,
        ctx: CallContext,
        identity: str,
        sig_v: int,
        sig_r: bytes,
        sig_s: bytes,
        doc_hash: bytes | str,
        doc_cid: str,
    ) -> None:
        """Like :meth:`create_did`, with the signer of the operation as actor."""
        identity = normalize_address(identity, field="identity")
        doc_hash = _as_doc_hash(doc_hash)
        signer = recover_signer(
            signed_operation_hash(self.address, identity, CREATE_DID, doc_hash, doc_cid), sig_v, sig_r, sig_s
        )
        self._create_did(ctx, signer, identity, doc_hash, doc_cid)

    def _create_did(self, ctx: CallContext, actor: str, identity: str, doc_hash: bytes, doc_cid: str) -> None:
        identity = normalize_address(identity, field="identity")
        if identity in self._dids:
            raise DidAlreadyExistsError(identity)
        self._role_control.is_trustee_or_issuer_or_holder(actor)
        self._require_nonzero(doc_hash)

        self._dids[identity] = DidRecord(
            doc_hash=doc_hash,
            metadata=DidMetadata(
                owner=identity,
                created=ctx.timestamp,
                updated=ctx.timestamp,
                version_id=ctx.block_number,
                status=DidStatus.ACTIVE,
            ),
        )
        self._emit(ctx, DIDCreated(identity=identity, doc_hash=doc_hash, doc_cid=doc_cid))
        logger.info(f"DID created for {identity} by {actor}")

    # -- update -------------------------------------------------------------

    def update_did(self, ctx: CallContext, identity: str, doc_hash: bytes | str, doc_cid: str) -> None:
        """Replace the document commitment of an active DID.

        Raises:
            DidNotFoundError / DidDeactivatedError: ``identity`` is not active.
            IdentityMismatchError: The sender is neither ``identity`` nor a TRUSTEE.
            InvalidDocumentHashError: ``doc_hash`` is zero or malformed.
        """
        self._update_did(ctx, ctx.sender, identity, _as_doc_hash(doc_hash), doc_cid)

    def update_did_signed(
        self,
        ctx: CallContext,
        identity: str,
        sig_v: int,
        sig_r: bytes,
        sig_s: bytes,
        doc_hash: bytes | str,
        doc_cid: str,
    ) -> None:
        identity = normalize_address(identity, field="identity")
        doc_hash = _as_doc_hash(doc_hash)
        signer = recover_signer(
            signed_operation_hash(self.address, identity, UPDATE_DID, doc_hash, doc_cid), sig_v, sig_r, sig_s
        )
        self._update_did(ctx, signer, identity, doc_hash, doc_cid)

    def _update_did(self, ctx: CallContext, actor: str, identity: str, doc_hash: bytes, doc_cid: str) -> None:
        identity = normalize_address(identity, field="identity")
        record = self._require_active(identity)
        self._require_owner_or_trustee(actor, record, identity)
        self._require_nonzero(doc_hash)

        metadata = dataclasses.replace(record.metadata, updated=ctx.timestamp, version_id=ctx.block_number)
        self._dids[identity] = DidRecord(doc_hash=doc_hash, metadata=metadata)
        self._emit(
            ctx,
            DIDUpdated(identity=identity, doc_hash=doc_hash, doc_cid=doc_cid, version_id=metadata.version_id),
        )
        logger.info(f"DID updated for {identity} by {actor} (version {metadata.version_id})")

    # -- deactivate ---------------------------------------------------------

    def deactivate_did(self, ctx: CallContext, identity: str) -> None:
        """Permanently deactivate an active DID."""
        self._deactivate_did(ctx, ctx.sender, identity)

    def deactivate_did_signed(self, ctx: CallContext, identity: str, sig_v: int, sig_r: bytes, sig_s: bytes) -> None:
        identity = normalize_address(identity, field="identity")
        signer = recover_signer(signed_operation_hash(self.address, identity, DEACTIVATE_DID), sig_v, sig_r, sig_s)
        self._deactivate_did(ctx, signer, identity)

    def _deactivate_did(self, ctx: CallContext, actor: str, identity: str) -> None:
        identity = normalize_address(identity, field="identity")
        record = self._require_active(identity)
        self._require_owner_or_trustee(actor, record, identity)

        metadata = dataclasses.replace(
            record.metadata,
            updated=ctx.timestamp,
            version_id=ctx.block_number,
            status=DidStatus.DEACTIVATED,
        )
        self._dids[identity] = dataclasses.replace(record, metadata=metadata)
        self._emit(ctx, DIDDeactivated(identity=identity, version_id=metadata.version_id))
        logger.info(f"DID deactivated for {identity} by {actor}")

    # -- views --------------------------------------------------------------

    def resolve_did(self, identity: str) -> DidRecord:
        """Return the record of an active DID.

        Raises:
            DidNotFoundError: No DID was ever created for ``identity``.
            DidDeactivatedError: The DID was deactivated.
        """
        return self._require_active(normalize_address(identity, field="identity"))

    def validate_did(self, identity: str) -> DidValidation:
        """Existence, activity and owner of ``identity``'s DID in one call. Never raises
        for a well-formed address."""
        record = self._dids.get(normalize_address(identity, field="identity"))
        if record is None:
            return DidValidation(exists=False, active=False, owner=ZERO_ADDRESS)
        return DidValidation(exists=True, active=record.is_active, owner=record.metadata.owner)

    def validate_document_hash(self, identity: str, doc_hash: bytes | str) -> bool:
        """Whether ``doc_hash`` matches the stored commitment (deactivated DIDs included)."""
        identity = normalize_address(identity, field="identity")
        record = self._dids.get(identity)
        if record is None:
            raise DidNotFoundError(identity)
        return record.doc_hash == _as_doc_hash(doc_hash)

    def did_exists(self, identity: str) -> bool:
        return normalize_address(identity, field="identity") in self._dids

    # -- helpers ------------------------------------------------------------

    def _require_active(self, identity: str) -> DidRecord:
        record = self._dids.get(identity)
        if record is None:
            raise DidNotFoundError(identity)
        if record.metadata.status == DidStatus.DEACTIVATED:
            raise DidDeactivatedError(identity)
        return record

    def _require_owner_or_trustee(self, actor: str, record: DidRecord, identity: str) -> None:
        if actor == record.metadata.owner:
            return
        if self._role_control.has_role(Role.TRUSTEE, actor):
            return
        raise IdentityMismatchError(identity, actor)

    @staticmethod
    def _require_nonzero(doc_hash: bytes) -> None:
        if doc_hash == ZERO_HASH:
            raise InvalidDocumentHashError("0x" + doc_hash.hex())

    # -- persistence --------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        return {"dids": {identity: record.to_dict() for identity, record in self._dids.items()}}

    @classmethod
    def from_state(
        cls,
        address: str,
        deployer: str,
        state: dict[str, Any],
        role_control: RoleControlInterface,
    ) -> DidRegistry:
        contract = cls._blank(address, deployer)
        contract._role_control = role_control
        contract._dids = {identity: DidRecord.from_dict(data) for identity, data in state["dids"].items()}
        return contract
