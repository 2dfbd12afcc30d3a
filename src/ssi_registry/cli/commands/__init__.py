"""CLI command modules for ssi-registry.

Each module exposes a ``register(subparsers, parent)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import credentials, dids, roles, system

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    system,
    roles,
    dids,
    credentials,
]

__all__ = ["COMMAND_MODULES"]
