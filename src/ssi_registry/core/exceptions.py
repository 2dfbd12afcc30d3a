# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Exception hierarchy for the SSI registry.

Every contract failure is raised as one of these exceptions. Raising is the
revert: :meth:`ssi_registry.chain.ledger.Ledger.transact` rolls back all
storage touched by the transaction and re-raises the exception unchanged.

Categories:
- Authorization: the caller or signer lacks the required role / ownership.
- Existence: a record is missing, or already present.
- State: the record is in a terminal or unexpected lifecycle state.
- Validation: an argument is malformed.
- Identity validation: a cross-contract DID check failed.
"""

from __future__ import annotations

from typing import Any


class SSIException(Exception):  # noqa: N818
    """Base exception for all SSI registry errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# Authorization
# ============================================================================


class AuthorizationException(SSIException):
    """Raised when the acting account is not allowed to perform an operation."""


class UnauthorizedCallerError(AuthorizationException):
    """The account does not hold any of the roles the operation requires."""

    def __init__(self, account: str, required_roles: list[str] | None = None):
        required = required_roles or []
        message = f"Unauthorized caller: {account}"
        if required:
            message += f" (requires {' or '.join(required)})"
        super().__init__(message, {"account": account, "required_roles": required})
        self.account = account
        self.required_roles = required


class InvalidSignatureError(AuthorizationException):
    """A signed operation's signature could not be recovered to a signer."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid signature: {reason}", {"reason": reason})
        self.reason = reason


# ============================================================================
# Existence
# ============================================================================


class NotFoundError(SSIException):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class DidNotFoundError(NotFoundError):
    def __init__(self, identity: str):
        super().__init__("DID", identity)
        self.identity = identity


class CredentialNotFoundError(NotFoundError):
    def __init__(self, credential_id: str):
        super().__init__("Credential", credential_id)
        self.credential_id = credential_id


class ConflictError(SSIException):
    """Exception for duplicate creation of a record."""

    def __init__(self, message: str, existing_id: str | None = None):
        details = {}
        if existing_id:
            details["existing_id"] = existing_id
        super().__init__(message, details)
        self.existing_id = existing_id


class DidAlreadyExistsError(ConflictError):
    def __init__(self, identity: str):
        super().__init__(f"DID already exists: {identity}", existing_id=identity)
        self.identity = identity


class CredentialAlreadyExistsError(ConflictError):
    def __init__(self, credential_id: str):
        super().__init__(f"Credential already exists: {credential_id}", existing_id=credential_id)
        self.credential_id = credential_id


# ============================================================================
# Lifecycle state
# ============================================================================


class StateException(SSIException):
    """Raised when a record's lifecycle state forbids the operation."""


class DidDeactivatedError(StateException):
    def __init__(self, identity: str):
        super().__init__(f"DID is deactivated: {identity}", {"identity": identity})
        self.identity = identity


class CredentialRevokedError(StateException):
    def __init__(self, credential_id: str):
        super().__init__(f"Credential is revoked: {credential_id}", {"credential_id": credential_id})
        self.credential_id = credential_id


class InvalidStatusTransitionError(StateException):
    """Illegal credential status change, or a stale ``previous_status``.

    ``expected`` is the status the caller believed current; ``current`` is the
    stored one. They differ when another transaction was mined first.
    """

    def __init__(self, credential_id: str, current: str, expected: str, requested: str):
        if current != expected:
            message = f"Credential {credential_id} status is {current}, caller expected {expected}"
        else:
            message = f"Credential {credential_id} cannot move from {current} to {requested}"
        super().__init__(
            message,
            {
                "credential_id": credential_id,
                "current": current,
                "expected": expected,
                "requested": requested,
            },
        )
        self.credential_id = credential_id
        self.current = current
        self.expected = expected
        self.requested = requested


# ============================================================================
# Validation
# ============================================================================


class ValidationException(SSIException):
    """Exception for malformed arguments."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidDocumentHashError(ValidationException):
    def __init__(self, value: Any = None):
        super().__init__("Document hash must be a non-zero 32-byte value", field="doc_hash", value=value)


class InvalidRoleError(ValidationException):
    def __init__(self, value: Any):
        super().__init__(f"Invalid role: {value}", field="role", value=value)


class InvalidAddressError(ValidationException):
    def __init__(self, value: Any, field: str = "address"):
        super().__init__(f"Invalid address: {value!r}", field=field, value=value)


class SelfIssuanceError(ValidationException):
    def __init__(self, account: str):
        super().__init__(f"Issuer and holder must differ: {account}", field="identity", value=account)
        self.account = account


class IdentityMismatchError(ValidationException):
    """The acting account is neither the identity itself nor a trustee."""

    def __init__(self, identity: str, actor: str):
        super().__init__(f"Actor {actor} may not act for identity {identity}", field="identity", value=identity)
        self.details["actor"] = actor
        self.identity = identity
        self.actor = actor


# ============================================================================
# Cross-contract identity validation
# ============================================================================


class IdentityValidationError(SSIException):
    """A party to a credential does not control an active DID of its own."""

    NOT_FOUND = "not_found"
    DEACTIVATED = "deactivated"
    NOT_SELF_OWNED = "not_self_owned"

    def __init__(self, identity: str, reason: str):
        super().__init__(
            f"Identity {identity} failed DID validation: {reason}",
            {"identity": identity, "reason": reason},
        )
        self.identity = identity
        self.reason = reason


# ============================================================================
# Configuration
# ============================================================================


class ConfigException(SSIException):
    """Exception for configuration errors."""

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []
