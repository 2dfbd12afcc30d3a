#!/usr/bin/env python3
"""
ssi-registry - role control, DIDs and verifiable credentials on a local ledger.

Commands:
  ssi-registry init --deployer ADDR           Deploy the three contracts
  ssi-registry role assign ROLE ACCOUNT       Assign ISSUER, HOLDER or TRUSTEE
  ssi-registry did create IDENTITY            Register a DID document hash
  ssi-registry credential issue HOLDER        Issue a credential
  ssi-registry credential status ID STATUS    Suspend, reactivate or revoke
  ssi-registry demo                           Run the lifecycle demo in memory
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..core.exceptions import SSIException
from ..core.logging import configure_logging
from .commands import COMMAND_MODULES
from .output import output_error

logger = logging.getLogger(__name__)


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--state", help="State file (default: SSI_STATE_FILE or .ssi-registry/state.json)")
    parent.add_argument("--json", action="store_true", help="Machine-readable output")

    parser = argparse.ArgumentParser(
        prog="ssi-registry",
        description="Self-sovereign identity registries on an in-process ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ssi-registry init --deployer 0xf39F...2266
  ssi-registry role assign issuer 0x7099...79C8 --sender 0xf39F...2266
  ssi-registry did create 0x7099...79C8 --document did.json --sender 0x7099...79C8
  ssi-registry did update 0x7099...79C8 --document did.json --signer-key 0x59c6... --sender 0x3C44...93BC
  ssi-registry credential issue 0x3C44...93BC --credential vc.json --sender 0x7099...79C8
  ssi-registry credential status 0xabcd... suspended --sender 0x7099...79C8
  ssi-registry hash vc.json
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers, parent)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)
    configure_logging(level="DEBUG" if args.verbose else None)

    as_json = getattr(args, "json", False)
    try:
        return args.func(args)
    except SSIException as e:
        logger.debug(f"{args.command} failed: {e.to_dict()}")
        output_error(e, as_json)
        return 1
    except OSError as e:
        output_error(str(e), as_json)
        return 1


if __name__ == "__main__":
    sys.exit(main())
