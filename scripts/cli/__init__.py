"""
Approval-chain CLI -- operate a submission store from the terminal.

List a role's dashboard views, print a proposal's verification trail,
and approve / reject / forward proposals.  Each invocation loads a store
file, runs one command through the command facade, and writes the store
back.

Entry point: python -m scripts.cli
"""

from scripts.cli.main import main

__all__ = ["main"]
