# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Off-chain documents and the values the registries commit to.

The registries only store 32-byte commitments: a DID's ``doc_hash`` and a
credential's ``credential_id`` are both ``keccak256`` of the document's
canonical JSON. This module builds the documents (W3C DID Core v1.0 and VC
Data Model v2.0 shapes for ``did:ethr`` identifiers), canonicalizes and hashes
them, and computes a CIDv1 for content-addressed storage. The CID is opaque
to the registries.
"""

from __future__ import annotations

import base64
import hashlib
import json
import uuid
from datetime import UTC, datetime
from typing import Any

from eth_utils import keccak

from .core.types import address_bytes, normalize_address

DID_METHOD_PREFIX = "did:ethr:"

DID_CONTEXT = [
    "https://www.w3.org/ns/did/v1",
    "https://w3id.org/security/suites/ed25519-2020/v1",
]
CREDENTIAL_CONTEXT = [
    "https://www.w3.org/ns/credentials/v2",
    "https://www.w3.org/ns/credentials/examples/v2",
]

# CIDv1 header: version 1, dag-pb codec, sha2-256 multihash of 32 bytes
_CID_PREFIX = bytes([0x01, 0x70, 0x12, 0x20])


def _normalize_numbers(value: Any) -> Any:
    # Integral floats serialize without a fraction, as JavaScript does
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _normalize_numbers(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_normalize_numbers(v) for v in value]
    return value


def canonicalize_json(obj: Any) -> str:
    """Canonical JSON: keys sorted at every level, no whitespace, UTF-8 kept as-is."""
    return json.dumps(
        _normalize_numbers(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def hash_document(obj: Any) -> bytes:
    """``keccak256`` of the canonical JSON of ``obj``."""
    return keccak(canonicalize_json(obj).encode("utf-8"))


def compute_cid(content: bytes) -> str:
    """CIDv1 (dag-pb, sha2-256) of ``content``, multibase base32 lowercase."""
    digest = hashlib.sha256(content).digest()
    body = base64.b32encode(_CID_PREFIX + digest).decode("ascii").lower().rstrip("=")
    return "b" + body


def did_for_address(address: str) -> str:
    return DID_METHOD_PREFIX + normalize_address(address)


def did_hash(address: str) -> bytes:
    """``keccak256("did:ethr:" || address)`` with the address packed as 20 bytes."""
    return keccak(DID_METHOD_PREFIX.encode("utf-8") + address_bytes(normalize_address(address)))


def build_did_document(
    address: str,
    public_key_multibase: str = "z6MkpTHR8VNsBxYAAWHut2Geadd9jSwuBV8xRoAnwWsdvktH",
    service_endpoint: str = "https://example.com/endpoint",
) -> dict[str, Any]:
    """A minimal DID Core v1.0 document for ``address``."""
    did = did_for_address(address)
    return {
        "@context": list(DID_CONTEXT),
        "id": did,
        "verificationMethod": [
            {
                "id": f"{did}#keys-1",
                "type": "Ed25519VerificationKey2020",
                "controller": did,
                "publicKeyMultibase": public_key_multibase,
            }
        ],
        "authentication": [f"{did}#keys-1"],
        "service": [
            {
                "id": f"{did}#endpoint-1",
                "type": "DIDCommMessaging",
                "serviceEndpoint": service_endpoint,
            }
        ],
    }


def _iso_now() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_credential(
    issuer: str,
    holder: str,
    subject: dict[str, Any] | None = None,
    issuer_name: str | None = None,
    credential_type: str = "IdentityCredential",
    issuance_date: str | None = None,
    credential_uri: str | None = None,
) -> dict[str, Any]:
    """A VC Data Model v2.0 credential from ``issuer`` about ``holder``.

    The credential's on-chain id is :func:`hash_document` of the result, so two
    credentials differ on-chain as long as their ``id`` (a fresh ``urn:uuid``
    unless ``credential_uri`` is given) differs.
    """
    issuer_obj: dict[str, Any] = {"id": did_for_address(issuer)}
    if issuer_name:
        issuer_obj["name"] = issuer_name
    return {
        "@context": list(CREDENTIAL_CONTEXT),
        "id": credential_uri or f"urn:uuid:{uuid.uuid4()}",
        "type": ["VerifiableCredential", credential_type],
        "issuer": issuer_obj,
        "validFrom": issuance_date or _iso_now(),
        "credentialSubject": {"id": did_for_address(holder), **(subject or {})},
    }
