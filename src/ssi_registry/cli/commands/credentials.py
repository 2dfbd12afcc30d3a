"""Credential issuance and status commands."""

from __future__ import annotations

import argparse

from ...chain.signing import ISSUE_CREDENTIAL
from ...contracts.models import CredentialStatus
from ...core.exceptions import ValidationException
from ...core.types import hex32, normalize_address, to_bytes32
from ...documents import compute_cid, hash_document
from ..output import output_json, output_receipt
from ..state import load_deployment, save_deployment
from ..utils import add_signing_arguments, read_json_file, resolve_signing


def parse_status(value: str) -> CredentialStatus:
    try:
        return CredentialStatus[value.upper()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"unknown credential status: {value}") from None


def cmd_credential_issue(args: argparse.Namespace) -> int:
    """Issue a credential, identified by ``--credential FILE`` or ``--credential-id``."""
    deployment = load_deployment(args.state)
    registry = deployment.credential_registry
    identity = normalize_address(args.identity, field="identity")

    if args.credential:
        raw, credential = read_json_file(args.credential)
        credential_id = hash_document(credential)
        credential_cid = args.cid or compute_cid(raw)
    elif args.credential_id:
        credential_id = to_bytes32(args.credential_id, field="credential_id")
        credential_cid = args.cid or ""
    else:
        raise ValidationException("Provide --credential or --credential-id", field="credential_id")

    sender, sig = resolve_signing(args, registry.address, identity, ISSUE_CREDENTIAL, credential_id, credential_cid)
    if sig is None:
        receipt = deployment.ledger.transact(sender, registry.issue_credential, identity, credential_id, credential_cid)
    else:
        receipt = deployment.ledger.transact(
            sender,
            registry.issue_credential_signed,
            identity,
            sig.v,
            sig.r,
            sig.s,
            credential_id,
            credential_cid,
        )
    save_deployment(deployment, args.state)
    output_receipt(receipt, args.json)
    return 0


def cmd_credential_status(args: argparse.Namespace) -> int:
    """Change status; ``--from`` defaults to the status read just before sending."""
    deployment = load_deployment(args.state)
    registry = deployment.credential_registry
    previous = args.previous if args.previous is not None else registry.get_credential_status(args.credential_id)
    receipt = deployment.ledger.transact(
        args.sender, registry.update_credential_status, args.credential_id, previous, args.new_status
    )
    save_deployment(deployment, args.state)
    if not receipt.logs and not args.json:
        print(f"ℹ️  Credential already {args.new_status.name}; nothing changed")
    output_receipt(receipt, args.json)
    return 0


def cmd_credential_resolve(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    record = deployment.credential_registry.resolve_credential(args.credential_id)
    if args.json:
        output_json({"credential_id": hex32(to_bytes32(args.credential_id)), **record.to_dict()})
    else:
        meta = record.metadata
        print(f"Credential {args.credential_id}")
        print(f"  issuer:     {record.issuer}")
        print(f"  status:     {meta.status.name}")
        print(f"  issued:     {meta.issuance_date}")
        print(f"  expires:    {meta.expiration_date or 'never'}")
    return 0


def register(subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser) -> None:
    cred_parser = subparsers.add_parser("credential", help="Issue credentials and manage their status")
    cred_sub = cred_parser.add_subparsers(dest="credential_command", required=True)

    issue = cred_sub.add_parser("issue", parents=[parent], help="Issue a credential to a holder")
    issue.add_argument("identity", help="Holder address")
    issue.add_argument("--credential", help="Credential JSON file (id and CID are computed)")
    issue.add_argument("--credential-id", help="0x-prefixed 32-byte credential id")
    issue.add_argument("--cid", help="Content identifier of the stored credential")
    add_signing_arguments(issue)
    issue.set_defaults(func=cmd_credential_issue)

    status = cred_sub.add_parser("status", parents=[parent], help="Change a credential's status")
    status.add_argument("credential_id", help="0x-prefixed 32-byte credential id")
    status.add_argument("new_status", type=parse_status, help="active, suspended or revoked")
    status.add_argument(
        "--from",
        dest="previous",
        type=parse_status,
        default=None,
        help="Expected current status (default: read it first)",
    )
    status.add_argument("--sender", required=True, help="Transaction sender (must be the issuer)")
    status.set_defaults(func=cmd_credential_status)

    resolve = cred_sub.add_parser("resolve", parents=[parent], help="Show a credential")
    resolve.add_argument("credential_id", help="0x-prefixed 32-byte credential id")
    resolve.set_defaults(func=cmd_credential_resolve)
