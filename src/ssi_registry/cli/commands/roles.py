"""Role management commands."""

from __future__ import annotations

import argparse

from ...contracts.models import Role
from ..output import output_json, output_receipt
from ..state import load_deployment, save_deployment


def parse_role(value: str) -> Role:
    try:
        return Role[value.upper()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"unknown role: {value}") from None


def cmd_role_assign(args: argparse.Namespace) -> int:
    """Assign a role: ``ssi-registry role assign ISSUER 0xabc... --sender 0xtrustee...``"""
    deployment = load_deployment(args.state)
    rc = deployment.role_control
    receipt = deployment.ledger.transact(args.sender, rc.assign_role, args.role, args.account)
    save_deployment(deployment, args.state)
    output_receipt(receipt, args.json)
    return 0


def cmd_role_revoke(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    rc = deployment.role_control
    receipt = deployment.ledger.transact(args.sender, rc.revoke_role, args.role, args.account)
    save_deployment(deployment, args.state)
    if not receipt.return_value and not args.json:
        print(f"ℹ️  {args.account} did not hold {args.role.name}; nothing revoked")
    output_receipt(receipt, args.json)
    return 0


def cmd_role_get(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    role = deployment.role_control.get_role(args.account)
    if args.json:
        output_json({"account": args.account, "role": role.name})
    else:
        print(f"{args.account}: {role.name}")
    return 0


def register(subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser) -> None:
    role_parser = subparsers.add_parser("role", help="Assign, revoke and query roles")
    role_sub = role_parser.add_subparsers(dest="role_command", required=True)

    assign = role_sub.add_parser("assign", parents=[parent], help="Assign a role to an account")
    assign.add_argument("role", type=parse_role, help="ISSUER, HOLDER or TRUSTEE")
    assign.add_argument("account", help="Account address")
    assign.add_argument("--sender", required=True, help="Transaction sender (must be TRUSTEE)")
    assign.set_defaults(func=cmd_role_assign)

    revoke = role_sub.add_parser("revoke", parents=[parent], help="Revoke a role from an account")
    revoke.add_argument("role", type=parse_role, help="ISSUER, HOLDER or TRUSTEE")
    revoke.add_argument("account", help="Account address")
    revoke.add_argument("--sender", required=True, help="Transaction sender (must be TRUSTEE)")
    revoke.set_defaults(func=cmd_role_revoke)

    get = role_sub.add_parser("get", parents=[parent], help="Show an account's role")
    get.add_argument("account", help="Account address")
    get.set_defaults(func=cmd_role_get)
