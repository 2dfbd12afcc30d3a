"""Command line interface: ``ssi-registry`` (entry point ``ssi_registry.cli.main:main``)."""
