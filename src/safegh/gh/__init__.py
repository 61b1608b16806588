"""
GitHub boundary for safe-gh.

Everything that talks to GitHub lives here. The decision engine depends
only on the ABCs in safegh.gh.base; the implementations shell out to the
gh CLI.

Architecture:
    - GhClient: Runs gh (subprocess, never through a shell)
    - GhContextProvider: Fetches issue / pull request contexts via GraphQL
    - GhDispatcher: Executes allowed operations and enforcement edits
"""

from safegh.gh.base import ContextProvider, Dispatcher, OperationRequest
from safegh.gh.client import GhClient
from safegh.gh.dispatcher import GhDispatcher
from safegh.gh.provider import GhContextProvider

__all__ = [
    "ContextProvider",
    "Dispatcher",
    "GhClient",
    "GhContextProvider",
    "GhDispatcher",
    "OperationRequest",
]
