# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Signed operations (meta-transactions).

A signed variant of a registry operation lets anyone relay a transaction on
behalf of the real signer. The signer signs a domain-separated hash::

    keccak256(0x19 || 0x00 || registry || identity || operation || payload...)

packed the way Solidity's ``abi.encodePacked`` does it: addresses as 20 raw
bytes, 32-byte words as-is, strings as UTF-8 with no length prefix. The
registry recovers the signer with ``ecrecover`` semantics and authorizes the
operation as if the signer had sent it.
"""

from __future__ import annotations

from typing import NamedTuple

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import keccak

from ..core.exceptions import InvalidSignatureError, ValidationException
from ..core.types import address_bytes, normalize_address, to_bytes32

SIGNED_OPERATION_PREFIX = b"\x19\x00"

CREATE_DID = "createDid"
UPDATE_DID = "updateDid"
DEACTIVATE_DID = "deactivateDid"
ISSUE_CREDENTIAL = "issueCredential"


class OperationSignature(NamedTuple):
    """ECDSA signature split the way the signed entry points take it."""

    v: int
    r: bytes
    s: bytes


def signed_operation_hash(
    contract_address: str,
    identity: str,
    operation: str,
    *payload: bytes | str,
) -> bytes:
    """Build the 32-byte hash a signer must sign for ``operation``.

    Args:
        contract_address: Address of the registry that will verify the signature.
        identity: The identity the operation targets.
        operation: Operation tag, e.g. ``"createDid"``.
        payload: Remaining arguments; ``bytes`` appended raw, ``str`` as UTF-8.
    """
    packed = bytearray(SIGNED_OPERATION_PREFIX)
    packed += address_bytes(normalize_address(contract_address, field="contract_address"))
    packed += address_bytes(normalize_address(identity, field="identity"))
    packed += operation.encode("utf-8")
    for item in payload:
        if isinstance(item, bytes):
            packed += item
        elif isinstance(item, str):
            packed += item.encode("utf-8")
        else:
            raise ValidationException(
                f"Unsupported payload type: {type(item).__name__}", field="payload", value=item
            )
    return keccak(bytes(packed))


def recover_signer(message_hash: bytes, v: int, r: bytes | str, s: bytes | str) -> str:
    """Recover the address that signed ``message_hash``.

    ``v`` must be 27 or 28 as with Solidity's ``ecrecover``.

    Raises:
        InvalidSignatureError: If no signer can be recovered.
    """
    if v not in (27, 28):
        raise InvalidSignatureError(f"v must be 27 or 28, got {v}")
    r_int = int.from_bytes(to_bytes32(r, field="sig_r"), "big")
    s_int = int.from_bytes(to_bytes32(s, field="sig_s"), "big")
    try:
        signature = keys.Signature(vrs=(v - 27, r_int, s_int))
        public_key = signature.recover_public_key_from_msg_hash(to_bytes32(message_hash, field="message_hash"))
    except (BadSignature, KeyValidationError) as e:
        raise InvalidSignatureError(str(e) or "unrecoverable signature") from e
    return public_key.to_checksum_address()


def _private_key(value: bytes | str | keys.PrivateKey) -> keys.PrivateKey:
    if isinstance(value, keys.PrivateKey):
        return value
    try:
        return keys.PrivateKey(to_bytes32(value, field="private_key"))
    except KeyValidationError:
        raise ValidationException("private_key is not a valid secp256k1 key", field="private_key") from None


def sign_operation_hash(private_key: bytes | str | keys.PrivateKey, message_hash: bytes) -> OperationSignature:
    """Sign a signed-operation hash with a secp256k1 private key (client side)."""
    private_key = _private_key(private_key)
    signature = private_key.sign_msg_hash(message_hash)
    return OperationSignature(
        v=signature.v + 27,
        r=signature.r.to_bytes(32, "big"),
        s=signature.s.to_bytes(32, "big"),
    )


def address_of(private_key: bytes | str | keys.PrivateKey) -> str:
    """Checksummed address controlled by ``private_key``."""
    return _private_key(private_key).public_key.to_checksum_address()
