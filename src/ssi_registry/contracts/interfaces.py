"""Interfaces the registries depend on.

DidRegistry and CredentialRegistry receive these at construction and keep
them for life; they only ever call read-only methods through them.
"""

from __future__ import annotations

from typing import Protocol

from .models import DidValidation, Role


class RoleControlInterface(Protocol):
    """Authorization authority. Guard methods raise instead of returning False."""

    address: str

    def has_role(self, role: Role | int, account: str) -> bool: ...
    def get_role(self, account: str) -> Role: ...
    def is_trustee(self, account: str) -> None: ...
    def is_issuer(self, account: str) -> None: ...
    def is_holder(self, account: str) -> None: ...
    def is_trustee_or_issuer(self, account: str) -> None: ...
    def is_trustee_or_issuer_or_holder(self, account: str) -> None: ...


class DidRegistryInterface(Protocol):
    """The single cross-contract view the credential registry needs."""

    address: str

    def validate_did(self, identity: str) -> DidValidation: ...
