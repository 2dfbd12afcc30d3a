# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""RoleControl: the authorization authority of the SSI system.

Maps every account to exactly one :class:`Role` (NONE unless assigned) and
keeps a per-role head count. Which role may assign or revoke which other
role is fixed at deployment: TRUSTEE manages TRUSTEE, ISSUER and HOLDER.
The deployer starts out as the first TRUSTEE.

The ``is_*`` guards do not return booleans: they raise
:class:`UnauthorizedCallerError` so a registry calling one aborts (and rolls
back) the whole transaction, exactly like a Solidity modifier.
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from ..chain.ledger import CallContext, Contract
from ..core.exceptions import InvalidRoleError, UnauthorizedCallerError
from ..core.types import normalize_address
from .events import RoleAssigned, RoleRevoked
from .models import Role

logger = logging.getLogger(__name__)

# role -> the role allowed to manage it
ROLE_OWNERS = MappingProxyType(
    {
        Role.TRUSTEE: Role.TRUSTEE,
        Role.ISSUER: Role.TRUSTEE,
        Role.HOLDER: Role.TRUSTEE,
    }
)


def _parse_role(role: Role | int, allow_none: bool = False) -> Role:
    if isinstance(role, bool):
        raise InvalidRoleError(role)
    try:
        parsed = Role(role)
    except ValueError:
        raise InvalidRoleError(role) from None
    if parsed == Role.NONE and not allow_none:
        raise InvalidRoleError(role)
    return parsed


class RoleControl(Contract):
    """Account → role assignments with a fixed role-management table."""

    _storage_fields = ("_roles", "_role_counts")

    def __init__(self, ctx: CallContext, address: str) -> None:
        super().__init__(ctx, address)
        self._roles: dict[str, Role] = {ctx.sender: Role.TRUSTEE}
        self._role_counts: dict[Role, int] = {Role.TRUSTEE: 1}
        self._emit(ctx, RoleAssigned(role=Role.TRUSTEE, account=ctx.sender, sender=ctx.sender))

    # -- transactions -------------------------------------------------------

    def assign_role(self, ctx: CallContext, role: Role | int, account: str) -> Role:
        """Give ``account`` the role ``role``, replacing whatever it held.

        Returns:
            The assigned role. Re-assigning the role an account already holds
            is a successful no-op with no event.

        Raises:
            InvalidRoleError: ``role`` is NONE or not a known role.
            UnauthorizedCallerError: The sender does not hold ``role``'s manager role.
        """
        role = _parse_role(role)
        self._check_role_owner(role, ctx.sender)
        account = normalize_address(account, field="account")

        current = self._roles.get(account, Role.NONE)
        if current == role:
            return role

        if current != Role.NONE:
            self._role_counts[current] -= 1
        self._roles[account] = role
        self._role_counts[role] = self._role_counts.get(role, 0) + 1

        self._emit(ctx, RoleAssigned(role=role, account=account, sender=ctx.sender))
        logger.info(f"Assigned {role.name} to {account} (was {current.name})")
        return role

    def revoke_role(self, ctx: CallContext, role: Role | int, account: str) -> bool:
        """Clear ``role`` from ``account``.

        Returns:
            True if the account held exactly ``role`` and it was cleared,
            False (not an error) otherwise.
        """
        role = _parse_role(role)
        self._check_role_owner(role, ctx.sender)
        account = normalize_address(account, field="account")

        if self._roles.get(account, Role.NONE) != role:
            return False

        del self._roles[account]
        self._role_counts[role] -= 1

        self._emit(ctx, RoleRevoked(role=role, account=account, sender=ctx.sender))
        logger.info(f"Revoked {role.name} from {account}")
        return True

    # -- views --------------------------------------------------------------

    def has_role(self, role: Role | int, account: str) -> bool:
        role = _parse_role(role, allow_none=True)
        return self.get_role(account) == role

    def get_role(self, account: str) -> Role:
        return self._roles.get(normalize_address(account, field="account"), Role.NONE)

    def get_role_count(self, role: Role | int) -> int:
        return self._role_counts.get(_parse_role(role, allow_none=True), 0)

    def get_role_owner(self, role: Role | int) -> Role:
        """The role allowed to assign and revoke ``role``."""
        return ROLE_OWNERS[_parse_role(role)]

    # -- guards -------------------------------------------------------------

    def is_trustee(self, account: str) -> None:
        self._require_any(account, Role.TRUSTEE)

    def is_issuer(self, account: str) -> None:
        self._require_any(account, Role.ISSUER)

    def is_holder(self, account: str) -> None:
        self._require_any(account, Role.HOLDER)

    def is_trustee_or_issuer(self, account: str) -> None:
        self._require_any(account, Role.TRUSTEE, Role.ISSUER)

    def is_trustee_or_issuer_or_holder(self, account: str) -> None:
        self._require_any(account, Role.TRUSTEE, Role.ISSUER, Role.HOLDER)

    def _require_any(self, account: str, *roles: Role) -> None:
        account = normalize_address(account, field="account")
        if self._roles.get(account, Role.NONE) not in roles:
            raise UnauthorizedCallerError(account, [r.name for r in roles])

    def _check_role_owner(self, role: Role, sender: str) -> None:
        self._require_any(sender, ROLE_OWNERS[role])

    # -- persistence --------------------------------------------------------

    def export_state(self) -> dict:
        return {
            "roles": {account: role.name for account, role in self._roles.items()},
            "role_counts": {role.name: count for role, count in self._role_counts.items()},
        }

    @classmethod
    def from_state(cls, address: str, deployer: str, state: dict) -> RoleControl:
        contract = cls._blank(address, deployer)
        contract._roles = {account: Role[name] for account, name in state["roles"].items()}
        contract._role_counts = {Role[name]: count for name, count in state["role_counts"].items()}
        return contract
