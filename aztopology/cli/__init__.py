"""aztopology command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``aztopology`` script).
"""

from aztopology.cli.main import cli

__all__ = ["cli"]
