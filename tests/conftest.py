"""
Pytest configuration and fixtures for safe-gh tests.

This module provides shared fixtures and in-memory fakes of the GitHub
boundary used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from safegh.errors import SafeGhError
from safegh.gh.base import ContextProvider, Dispatcher, OperationRequest
from safegh.schema import OperationContext, ResourceType


class FakeProvider(ContextProvider):
    """Context provider that returns canned contexts and records fetches."""

    def __init__(
        self,
        context: OperationContext | None = None,
        error: SafeGhError | None = None,
    ) -> None:
        self.context = context or OperationContext()
        self.error = error
        self.fetches: list[tuple[ResourceType, str | None, int]] = []

    def fetch(self, resource: ResourceType, repo: str | None, number: int) -> OperationContext:
        self.fetches.append((resource, repo, number))
        if self.error is not None:
            raise self.error
        return self.context


class FakeDispatcher(Dispatcher):
    """Dispatcher that records calls instead of running gh."""

    def __init__(
        self,
        output: str = "",
        error: Exception | None = None,
        enforce_error: Exception | None = None,
    ) -> None:
        self.output = output
        self.error = error
        self.enforce_error = enforce_error
        self.executed: list[OperationRequest] = []
        self.enforced: list[tuple[ResourceType, str | None, int, list[str]]] = []

    def execute(self, request: OperationRequest) -> str:
        self.executed.append(request)
        if self.error is not None:
            raise self.error
        return self.output

    def apply_enforcement(
        self,
        resource: ResourceType,
        repo: str | None,
        number: int,
        args: list[str],
    ) -> str:
        self.enforced.append((resource, repo, number, args))
        if self.enforce_error is not None:
            raise self.enforce_error
        return ""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a config with one rule per resource."""
    return """
allowedOwners: [my-org]
selfUserId: bot
defaultPermission: deny
issueRules:
  - name: Close my issues
    operations: [close, comment]
    condition:
      createdBy: self
  - name: Create tracked issues
    operations: [create]
    enforce:
      addLabels: [bot-created]
prRules:
  - name: Draft feature PRs
    operations: [create]
    condition:
      draft: true
      headBranch: ["feature/*"]
searchRules:
  - name: Org search
    operations: [code, issues]
    condition:
      owners: [my-org]
projectRules:
  - name: Board 1
    operations: [view, item:add]
    condition:
      owner: [my-org]
      projectNumbers: [1]
"""


@pytest.fixture
def config_file(temp_dir: Path, sample_config_yaml: str) -> Path:
    """Write the sample config to disk."""
    path = temp_dir / "config.yaml"
    path.write_text(sample_config_yaml, encoding="utf-8")
    return path
