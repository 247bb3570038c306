"""artreg CLI — Typer-based command-line interface.

Provides the ``artreg`` command with subcommands to add, tag, list and
remove artifacts in the local registry and to push/pull them to and from
remote registries.

All output uses Rich for formatted terminal display.
"""
