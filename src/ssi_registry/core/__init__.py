"""SSI registry core - configuration, errors, logging and primitive types."""

from .config import RegistrySettings, clear_config_cache, get_config
from .exceptions import (
    AuthorizationException,
    ConfigException,
    ConflictError,
    CredentialAlreadyExistsError,
    CredentialNotFoundError,
    CredentialRevokedError,
    DidAlreadyExistsError,
    DidDeactivatedError,
    DidNotFoundError,
    IdentityMismatchError,
    IdentityValidationError,
    InvalidAddressError,
    InvalidDocumentHashError,
    InvalidRoleError,
    InvalidSignatureError,
    InvalidStatusTransitionError,
    NotFoundError,
    SelfIssuanceError,
    SSIException,
    StateException,
    UnauthorizedCallerError,
    ValidationException,
)
from .logging import configure_logging, transaction_context
from .types import ZERO_ADDRESS, ZERO_HASH, normalize_address, to_bytes32

__all__ = [
    "AuthorizationException",
    "ConfigException",
    "ConflictError",
    "CredentialAlreadyExistsError",
    "CredentialNotFoundError",
    "CredentialRevokedError",
    "DidAlreadyExistsError",
    "DidDeactivatedError",
    "DidNotFoundError",
    "IdentityMismatchError",
    "IdentityValidationError",
    "InvalidAddressError",
    "InvalidDocumentHashError",
    "InvalidRoleError",
    "InvalidSignatureError",
    "InvalidStatusTransitionError",
    "NotFoundError",
    "RegistrySettings",
    "SSIException",
    "SelfIssuanceError",
    "StateException",
    "UnauthorizedCallerError",
    "ValidationException",
    "ZERO_ADDRESS",
    "ZERO_HASH",
    "clear_config_cache",
    "configure_logging",
    "get_config",
    "normalize_address",
    "to_bytes32",
    "transaction_context",
]
