"""DID lifecycle commands."""

from __future__ import annotations

import argparse

from ...chain.signing import CREATE_DID, DEACTIVATE_DID, UPDATE_DID
from ...core.exceptions import ValidationException
from ...core.types import normalize_address, to_bytes32
from ...documents import compute_cid, hash_document
from ..output import output_json, output_receipt
from ..state import load_deployment, save_deployment
from ..utils import add_signing_arguments, read_json_file, resolve_signing


def _document_args(args: argparse.Namespace) -> tuple[bytes, str]:
    """Document hash and CID from ``--document FILE`` or ``--doc-hash``/``--cid``."""
    if args.document:
        raw, document = read_json_file(args.document)
        doc_hash = hash_document(document)
        return doc_hash, args.cid or compute_cid(raw)
    if not args.doc_hash:
        raise ValidationException("Provide --document or --doc-hash", field="doc_hash")
    return to_bytes32(args.doc_hash, field="doc_hash"), args.cid or ""


def cmd_did_create(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    registry = deployment.did_registry
    identity = normalize_address(args.identity, field="identity")
    doc_hash, doc_cid = _document_args(args)

    sender, sig = resolve_signing(args, registry.address, identity, CREATE_DID, doc_hash, doc_cid)
    if sig is None:
        receipt = deployment.ledger.transact(sender, registry.create_did, identity, doc_hash, doc_cid)
    else:
        receipt = deployment.ledger.transact(
            sender, registry.create_did_signed, identity, sig.v, sig.r, sig.s, doc_hash, doc_cid
        )
    save_deployment(deployment, args.state)
    output_receipt(receipt, args.json)
    return 0


def cmd_did_update(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    registry = deployment.did_registry
    identity = normalize_address(args.identity, field="identity")
    doc_hash, doc_cid = _document_args(args)

    sender, sig = resolve_signing(args, registry.address, identity, UPDATE_DID, doc_hash, doc_cid)
    if sig is None:
        receipt = deployment.ledger.transact(sender, registry.update_did, identity, doc_hash, doc_cid)
    else:
        receipt = deployment.ledger.transact(
            sender, registry.update_did_signed, identity, sig.v, sig.r, sig.s, doc_hash, doc_cid
        )
    save_deployment(deployment, args.state)
    output_receipt(receipt, args.json)
    return 0


def cmd_did_deactivate(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    registry = deployment.did_registry
    identity = normalize_address(args.identity, field="identity")

    sender, sig = resolve_signing(args, registry.address, identity, DEACTIVATE_DID)
    if sig is None:
        receipt = deployment.ledger.transact(sender, registry.deactivate_did, identity)
    else:
        receipt = deployment.ledger.transact(sender, registry.deactivate_did_signed, identity, sig.v, sig.r, sig.s)
    save_deployment(deployment, args.state)
    output_receipt(receipt, args.json)
    return 0


def cmd_did_resolve(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    record = deployment.did_registry.resolve_did(args.identity)
    if args.json:
        output_json({"identity": args.identity, **record.to_dict()})
    else:
        meta = record.metadata
        print(f"DID for {meta.owner}")
        print(f"  doc_hash:  0x{record.doc_hash.hex()}")
        print(f"  status:    {meta.status.name}")
        print(f"  created:   {meta.created}")
        print(f"  updated:   {meta.updated}")
        print(f"  version:   {meta.version_id}")
    return 0


def cmd_did_validate(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    exists, active, owner = deployment.did_registry.validate_did(args.identity)
    if args.json:
        output_json({"identity": args.identity, "exists": exists, "active": active, "owner": owner})
    else:
        print(f"exists={exists} active={active} owner={owner}")
    return 0


def register(subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser) -> None:
    did_parser = subparsers.add_parser("did", help="Create, update, deactivate and resolve DIDs")
    did_sub = did_parser.add_subparsers(dest="did_command", required=True)

    for name, func, help_text in (
        ("create", cmd_did_create, "Create a DID for an identity"),
        ("update", cmd_did_update, "Replace the document of an active DID"),
    ):
        p = did_sub.add_parser(name, parents=[parent], help=help_text)
        p.add_argument("identity", help="Identity address")
        p.add_argument("--document", help="DID document JSON file (hash and CID are computed)")
        p.add_argument("--doc-hash", help="0x-prefixed 32-byte document hash")
        p.add_argument("--cid", help="Content identifier of the stored document")
        add_signing_arguments(p)
        p.set_defaults(func=func)

    deactivate = did_sub.add_parser("deactivate", parents=[parent], help="Permanently deactivate a DID")
    deactivate.add_argument("identity", help="Identity address")
    add_signing_arguments(deactivate)
    deactivate.set_defaults(func=cmd_did_deactivate)

    resolve = did_sub.add_parser("resolve", parents=[parent], help="Show an active DID")
    resolve.add_argument("identity", help="Identity address")
    resolve.set_defaults(func=cmd_did_resolve)

    validate = did_sub.add_parser("validate", parents=[parent], help="Existence/activity/owner of a DID")
    validate.add_argument("identity", help="Identity address")
    validate.set_defaults(func=cmd_did_validate)
