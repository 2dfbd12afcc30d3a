"""Tests for ssi_registry.contracts.credential_registry."""

from __future__ import annotations

import itertools

import pytest

from ssi_registry.chain.signing import ISSUE_CREDENTIAL, sign_operation_hash, signed_operation_hash
from ssi_registry.contracts.credential_registry import STATUS_TRANSITIONS
from ssi_registry.contracts.events import (
    CredentialIssued,
    CredentialReactivated,
    CredentialRevoked,
    CredentialStatusUpdated,
    CredentialSuspended,
)
from ssi_registry.contracts.models import CredentialStatus, Role
from ssi_registry.core.exceptions import (
    CredentialAlreadyExistsError,
    CredentialNotFoundError,
    CredentialRevokedError,
    IdentityValidationError,
    InvalidStatusTransitionError,
    SelfIssuanceError,
    UnauthorizedCallerError,
    ValidationException,
)

CRED_ID = bytes([0xC1]) * 32
OTHER_ID = bytes([0xC2]) * 32

ACTIVE = CredentialStatus.ACTIVE
SUSPENDED = CredentialStatus.SUSPENDED
REVOKED = CredentialStatus.REVOKED
NONE = CredentialStatus.NONE


@pytest.fixture
def creds(with_dids):
    return with_dids.credential_registry


@pytest.fixture
def issued(ledger, creds, issuer, holder):
    """CRED_ID issued by ``issuer`` to ``holder``."""
    return ledger.transact(issuer.address, creds.issue_credential, holder.address, CRED_ID, "cid3")


def _set_status(ledger, creds, sender, previous, new, credential_id=CRED_ID):
    return ledger.transact(sender.address, creds.update_credential_status, credential_id, previous, new)


class TestIssueCredential:
    def test_issue(self, creds, issuer, holder, issued):
        record = creds.resolve_credential(CRED_ID)

        assert record.issuer == issuer.address
        assert record.status == ACTIVE
        assert record.metadata.issuance_date == issued.timestamp
        assert record.metadata.expiration_date == 0
        assert creds.credential_exists(CRED_ID)
        assert issued.events() == [
            CredentialIssued(credential_id=CRED_ID, actor=issuer.address, identity=holder.address, credential_cid="cid3")
        ]

    def test_trustee_may_issue(self, ledger, creds, deployer, holder):
        ledger.transact(deployer.address, creds.did_registry.create_did, deployer.address, bytes([7]) * 32, "")
        ledger.transact(deployer.address, creds.issue_credential, holder.address, CRED_ID, "")
        assert creds.resolve_credential(CRED_ID).issuer == deployer.address

    def test_holder_role_may_not_issue(self, ledger, creds, holder, issuer):
        with pytest.raises(UnauthorizedCallerError) as exc_info:
            ledger.transact(holder.address, creds.issue_credential, issuer.address, CRED_ID, "")
        assert exc_info.value.required_roles == ["TRUSTEE", "ISSUER"]
        assert not creds.credential_exists(CRED_ID)

    def test_duplicate_id(self, ledger, creds, issuer, holder, issued):
        with pytest.raises(CredentialAlreadyExistsError):
            ledger.transact(issuer.address, creds.issue_credential, holder.address, CRED_ID, "")

    def test_self_issuance(self, ledger, creds, issuer):
        with pytest.raises(SelfIssuanceError):
            ledger.transact(issuer.address, creds.issue_credential, issuer.address, CRED_ID, "")

    def test_issuer_without_did(self, ledger, roles_assigned, deployer, holder):
        """Issuer holds the role but never registered a DID."""
        creds = roles_assigned.credential_registry
        dids = roles_assigned.did_registry
        ledger.transact(holder.address, dids.create_did, holder.address, bytes([1]) * 32, "")
        with pytest.raises(IdentityValidationError) as exc_info:
            ledger.transact(deployer.address, creds.issue_credential, holder.address, CRED_ID, "")
        assert exc_info.value.identity == deployer.address
        assert exc_info.value.reason == IdentityValidationError.NOT_FOUND

    def test_holder_without_did(self, ledger, creds, issuer, outsider):
        with pytest.raises(IdentityValidationError) as exc_info:
            ledger.transact(issuer.address, creds.issue_credential, outsider.address, CRED_ID, "")
        assert exc_info.value.identity == outsider.address
        assert exc_info.value.reason == IdentityValidationError.NOT_FOUND

    def test_holder_did_deactivated(self, ledger, creds, issuer, holder):
        ledger.transact(holder.address, creds.did_registry.deactivate_did, holder.address)
        with pytest.raises(IdentityValidationError) as exc_info:
            ledger.transact(issuer.address, creds.issue_credential, holder.address, CRED_ID, "")
        assert exc_info.value.reason == IdentityValidationError.DEACTIVATED

    def test_invalid_credential_id(self, ledger, creds, issuer, holder):
        with pytest.raises(ValidationException):
            ledger.transact(issuer.address, creds.issue_credential, holder.address, b"short", "")

    def test_issue_signed(self, ledger, creds, issuer, holder, relayer):
        message_hash = signed_operation_hash(creds.address, holder.address, ISSUE_CREDENTIAL, CRED_ID, "cid3")
        sig = sign_operation_hash(issuer.key, message_hash)
        receipt = ledger.transact(relayer.address, creds.issue_credential_signed, holder.address, *sig, CRED_ID, "cid3")

        assert creds.resolve_credential(CRED_ID).issuer == issuer.address
        assert receipt.events()[0].actor == issuer.address

    def test_issue_signed_by_holder_role(self, ledger, creds, issuer, holder, relayer):
        message_hash = signed_operation_hash(creds.address, issuer.address, ISSUE_CREDENTIAL, CRED_ID, "")
        sig = sign_operation_hash(holder.key, message_hash)
        with pytest.raises(UnauthorizedCallerError):
            ledger.transact(relayer.address, creds.issue_credential_signed, issuer.address, *sig, CRED_ID, "")


class TestStatusTransitions:
    def test_suspend(self, ledger, creds, issuer, issued):
        receipt = _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)

        assert creds.get_credential_status(CRED_ID) == SUSPENDED
        assert receipt.events() == [
            CredentialStatusUpdated(
                credential_id=CRED_ID, previous_status=ACTIVE, new_status=SUSPENDED, updated_by=issuer.address
            ),
            CredentialSuspended(credential_id=CRED_ID, suspended_by=issuer.address),
        ]

    def test_reactivate(self, ledger, creds, issuer, issued):
        _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        receipt = _set_status(ledger, creds, issuer, SUSPENDED, ACTIVE)

        assert creds.get_credential_status(CRED_ID) == ACTIVE
        assert receipt.events("CredentialReactivated") == [
            CredentialReactivated(credential_id=CRED_ID, reactivated_by=issuer.address)
        ]

    @pytest.mark.parametrize("via_suspension", [False, True])
    def test_revoke(self, ledger, creds, issuer, issued, via_suspension):
        previous = ACTIVE
        if via_suspension:
            _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
            previous = SUSPENDED
        receipt = _set_status(ledger, creds, issuer, previous, REVOKED)

        assert creds.get_credential_status(CRED_ID) == REVOKED
        assert [e.name for e in receipt.events()] == ["CredentialStatusUpdated", "CredentialRevoked"]
        assert receipt.events("CredentialRevoked") == [CredentialRevoked(credential_id=CRED_ID, revoked_by=issuer.address)]
        with pytest.raises(CredentialRevokedError):
            creds.resolve_credential(CRED_ID)

    def test_revoked_is_terminal(self, ledger, creds, issuer, issued):
        _set_status(ledger, creds, issuer, ACTIVE, REVOKED)
        for new in (ACTIVE, SUSPENDED, REVOKED):
            with pytest.raises(CredentialRevokedError):
                _set_status(ledger, creds, issuer, REVOKED, new)

    def test_same_status_is_noop(self, ledger, creds, issuer, issued):
        receipt = _set_status(ledger, creds, issuer, ACTIVE, ACTIVE)
        assert receipt.logs == ()
        assert creds.get_credential_status(CRED_ID) == ACTIVE

    def test_none_rejected(self, ledger, creds, issuer, issued):
        with pytest.raises(InvalidStatusTransitionError):
            _set_status(ledger, creds, issuer, ACTIVE, NONE)

    def test_suspended_credential_resolves(self, ledger, creds, issuer, issued):
        _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        assert creds.resolve_credential(CRED_ID).status == SUSPENDED

    def test_integer_statuses(self, ledger, creds, issuer, issued):
        _set_status(ledger, creds, issuer, 1, 3)
        assert creds.get_credential_status(CRED_ID) == SUSPENDED

    def test_unknown_status_value(self, ledger, creds, issuer, issued):
        with pytest.raises(ValidationException):
            _set_status(ledger, creds, issuer, ACTIVE, 9)

    def test_bool_status_rejected(self, ledger, creds, issuer, issued):
        with pytest.raises(ValidationException):
            _set_status(ledger, creds, issuer, True, SUSPENDED)
        assert creds.get_credential_status(CRED_ID) == ACTIVE


class TestStatusAuthorization:
    def test_only_issuer(self, ledger, creds, deployer, holder, issued):
        for sender in (deployer, holder):
            with pytest.raises(UnauthorizedCallerError):
                _set_status(ledger, creds, sender, ACTIVE, REVOKED)
        assert creds.get_credential_status(CRED_ID) == ACTIVE

    def test_issuer_did_revalidated(self, ledger, creds, issuer, issued):
        ledger.transact(issuer.address, creds.did_registry.deactivate_did, issuer.address)
        with pytest.raises(IdentityValidationError) as exc_info:
            _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        assert exc_info.value.reason == IdentityValidationError.DEACTIVATED

    def test_holder_did_not_revalidated(self, ledger, creds, issuer, holder, issued):
        ledger.transact(holder.address, creds.did_registry.deactivate_did, holder.address)
        _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        assert creds.get_credential_status(CRED_ID) == SUSPENDED

    def test_issuer_losing_role_keeps_control(self, ledger, creds, deployer, issuer, issued):
        ledger.transact(deployer.address, creds.role_control.revoke_role, Role.ISSUER, issuer.address)
        _set_status(ledger, creds, issuer, ACTIVE, REVOKED)
        assert creds.get_credential_status(CRED_ID) == REVOKED

    def test_unknown_credential(self, ledger, creds, issuer):
        with pytest.raises(CredentialNotFoundError):
            _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED, credential_id=OTHER_ID)


class TestOptimisticConcurrency:
    def test_stale_previous_status(self, ledger, creds, issuer, issued):
        _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        head = ledger.head

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            _set_status(ledger, creds, issuer, ACTIVE, REVOKED)

        assert exc_info.value.current == "SUSPENDED"
        assert exc_info.value.expected == "ACTIVE"
        assert creds.get_credential_status(CRED_ID) == SUSPENDED
        assert ledger.head == head

    def test_stale_read_checked_before_sender(self, ledger, creds, holder, issuer, issued):
        _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        with pytest.raises(InvalidStatusTransitionError):
            _set_status(ledger, creds, holder, ACTIVE, REVOKED)

    def test_competing_updates(self, ledger, creds, issuer, issued):
        """Two updates based on the same read: the first mined wins."""
        observed = creds.get_credential_status(CRED_ID)
        _set_status(ledger, creds, issuer, observed, REVOKED)
        with pytest.raises(CredentialRevokedError):
            _set_status(ledger, creds, issuer, REVOKED, SUSPENDED)
        with pytest.raises(InvalidStatusTransitionError):
            _set_status(ledger, creds, issuer, observed, SUSPENDED)


class TestTransitionTable:
    def test_covers_every_status(self):
        assert set(STATUS_TRANSITIONS) == set(CredentialStatus)

    def test_allowed_moves(self):
        assert STATUS_TRANSITIONS[ACTIVE] == {SUSPENDED, REVOKED}
        assert STATUS_TRANSITIONS[SUSPENDED] == {ACTIVE, REVOKED}
        assert STATUS_TRANSITIONS[REVOKED] == frozenset()
        assert STATUS_TRANSITIONS[NONE] == frozenset()

    @pytest.mark.parametrize(
        "current, new",
        [(c, n) for c, n in itertools.product((ACTIVE, SUSPENDED), CredentialStatus) if c != n],
    )
    def test_contract_follows_table(self, ledger, creds, issuer, issued, current, new):
        if current == SUSPENDED:
            _set_status(ledger, creds, issuer, ACTIVE, SUSPENDED)
        if new in STATUS_TRANSITIONS[current]:
            _set_status(ledger, creds, issuer, current, new)
            assert creds.get_credential_status(CRED_ID) == new
        else:
            with pytest.raises(InvalidStatusTransitionError):
                _set_status(ledger, creds, issuer, current, new)
            assert creds.get_credential_status(CRED_ID) == current


class TestViews:
    def test_unknown(self, creds):
        assert not creds.credential_exists(OTHER_ID)
        assert creds.get_credential_status(OTHER_ID) == NONE
        with pytest.raises(CredentialNotFoundError):
            creds.resolve_credential(OTHER_ID)

    def test_hex_id(self, creds, issued):
        assert creds.credential_exists("0x" + CRED_ID.hex())


class TestPersistence:
    def test_round_trip(self, creds, issued):
        restored = type(creds).from_state(
            creds.address, creds.deployer, creds.export_state(), creds.role_control, creds.did_registry
        )
        assert restored.resolve_credential(CRED_ID) == creds.resolve_credential(CRED_ID)
