"""asmforge CLI — Typer-based command-line interface.

Provides the ``asmforge`` command with subcommands for processing and
publishing assemblies, inspecting the fingerprint ledger, checking whether
a version was already published, and fingerprinting files.  ``process`` is
also installed standalone as ``process-assemblies``.

All output uses Rich for formatted terminal display.
"""
