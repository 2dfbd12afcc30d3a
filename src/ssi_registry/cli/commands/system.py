"""System commands: init, status, hash and demo."""

from __future__ import annotations

import argparse
import json

from ...chain.ledger import Ledger
from ...chain.signing import UPDATE_DID, address_of, sign_operation_hash, signed_operation_hash
from ...contracts.deployment import deploy_ssi_system
from ...contracts.models import CredentialStatus, Role
from ...core.exceptions import ConfigException, SSIException
from ...documents import build_credential, build_did_document, compute_cid, hash_document
from ..output import output_json
from ..state import load_deployment, resolve_state_path, save_deployment
from ..utils import read_json_file

# Fixed dev keys so the demo prints the same addresses every run
DEMO_KEYS = {
    "trustee": bytes([0x11]) * 32,
    "issuer": bytes([0x22]) * 32,
    "holder": bytes([0x33]) * 32,
    "relayer": bytes([0x44]) * 32,
}


def cmd_init(args: argparse.Namespace) -> int:
    """Deploy RoleControl, DidRegistry and CredentialRegistry into a new state file."""
    state_path = resolve_state_path(args.state)
    if state_path.exists() and not args.force:
        raise ConfigException(f"State file {state_path} already exists; use --force to replace it")

    deployment = deploy_ssi_system(Ledger(), args.deployer)
    save_deployment(deployment, state_path)

    if args.json:
        output_json(
            {
                "state_file": str(state_path),
                "deployer": deployment.deployer,
                "contracts": deployment.addresses,
                "receipts": [r.to_dict() for r in deployment.receipts],
            }
        )
    else:
        print(f"✅ SSI system deployed (state: {state_path})")
        for name, address in deployment.addresses.items():
            print(f"   {name:<20} {address}")
        print(f"   Trustee: {deployment.deployer}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    deployment = load_deployment(args.state)
    ledger = deployment.ledger
    rc = deployment.role_control
    counts = {role.name: rc.get_role_count(role) for role in (Role.TRUSTEE, Role.ISSUER, Role.HOLDER)}
    if args.json:
        output_json(
            {
                "chain_id": ledger.chain_id,
                "block_number": ledger.head.number,
                "timestamp": ledger.head.timestamp,
                "contracts": deployment.addresses,
                "role_counts": counts,
            }
        )
    else:
        print(f"Chain {ledger.chain_id} at block {ledger.head.number} (timestamp {ledger.head.timestamp})")
        for name, address in deployment.addresses.items():
            print(f"   {name:<20} {address}")
        print("   Roles: " + ", ".join(f"{name}={count}" for name, count in counts.items()))
    return 0


def cmd_hash(args: argparse.Namespace) -> int:
    """Print the on-chain commitment and CID of a JSON document."""
    raw, document = read_json_file(args.file)
    doc_hash = "0x" + hash_document(document).hex()
    cid = compute_cid(raw)
    if args.json:
        output_json({"file": args.file, "hash": doc_hash, "cid": cid})
    else:
        print(f"hash: {doc_hash}")
        print(f"cid:  {cid}")
    return 0


def run_demo() -> list[str]:
    """Walk through the reference lifecycle on a throwaway ledger.

    Returns the narration lines. The last step is a stale status update that
    must be rejected.
    """
    lines: list[str] = []
    trustee, issuer, holder, relayer = (address_of(key) for key in DEMO_KEYS.values())

    ledger = Ledger(genesis_timestamp=1_700_000_000)
    system = deploy_ssi_system(ledger, trustee)
    rc, dids, creds = system.role_control, system.did_registry, system.credential_registry
    lines.append(f"Deployed RoleControl {rc.address}; {trustee} is TRUSTEE")

    ledger.transact(trustee, rc.assign_role, Role.ISSUER, issuer)
    ledger.transact(trustee, rc.assign_role, Role.HOLDER, holder)
    lines.append(f"Assigned ISSUER to {issuer} and HOLDER to {holder}")

    for account in (issuer, holder):
        document = build_did_document(account)
        raw = json.dumps(document).encode("utf-8")
        receipt = ledger.transact(account, dids.create_did, account, hash_document(document), compute_cid(raw))
        lines.append(f"{receipt.events()[0].name} for {account} in block {receipt.block_number}")

    # Holder rotates its document through a relayer
    document = build_did_document(holder, service_endpoint="https://holder.example/inbox")
    new_hash = hash_document(document)
    signature = sign_operation_hash(
        DEMO_KEYS["holder"], signed_operation_hash(dids.address, holder, UPDATE_DID, new_hash, "")
    )
    receipt = ledger.transact(relayer, dids.update_did_signed, holder, *signature, new_hash, "")
    lines.append(f"Relayer {relayer} submitted the holder's signed update (version {receipt.events()[0].version_id})")

    credential = build_credential(
        issuer,
        holder,
        {"name": "Demo Holder"},
        issuance_date="2024-01-01T00:00:00Z",
        credential_uri="urn:example:demo-credential",
    )
    credential_id = hash_document(credential)
    ledger.transact(issuer, creds.issue_credential, holder, credential_id, compute_cid(json.dumps(credential).encode()))
    record = creds.resolve_credential(credential_id)
    lines.append(f"Issued credential 0x{credential_id.hex()[:16]}... issuer={record.issuer} status={record.status.name}")

    receipt = ledger.transact(
        issuer, creds.update_credential_status, credential_id, CredentialStatus.ACTIVE, CredentialStatus.SUSPENDED
    )
    lines.append("Suspended: " + ", ".join(e.name for e in receipt.events()))

    try:
        ledger.transact(
            issuer, creds.update_credential_status, credential_id, CredentialStatus.ACTIVE, CredentialStatus.REVOKED
        )
    except SSIException as e:
        lines.append(f"Stale revoke rejected with {e.__class__.__name__}: {e.message}")
    else:
        raise RuntimeError("stale status update was accepted")

    lines.append(f"Final status: {creds.get_credential_status(credential_id).name} at block {ledger.head.number}")
    return lines


def cmd_demo(args: argparse.Namespace) -> int:
    lines = run_demo()
    if args.json:
        output_json({"steps": lines})
    else:
        for line in lines:
            print(f"• {line}")
    return 0


def register(subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser) -> None:
    init_parser = subparsers.add_parser("init", parents=[parent], help="Deploy the SSI contracts")
    init_parser.add_argument("--deployer", required=True, help="Deployer address (becomes the first TRUSTEE)")
    init_parser.add_argument("--force", action="store_true", help="Replace an existing state file")
    init_parser.set_defaults(func=cmd_init)

    status_parser = subparsers.add_parser("status", parents=[parent], help="Show chain head and contracts")
    status_parser.set_defaults(func=cmd_status)

    hash_parser = subparsers.add_parser("hash", parents=[parent], help="Hash and CID of a JSON document")
    hash_parser.add_argument("file", help="JSON document")
    hash_parser.set_defaults(func=cmd_hash)

    demo_parser = subparsers.add_parser("demo", parents=[parent], help="Run the lifecycle demo in memory")
    demo_parser.set_defaults(func=cmd_demo)
