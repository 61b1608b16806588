"""
Base classes for the GitHub boundary.

This module defines the core abstractions between the decision engine
and GitHub:
- OperationRequest: One requested operation with its inputs
- ContextProvider: Fetches the context a decision is evaluated against
- Dispatcher: Executes an allowed operation and applies enforcement

Design Principles:
    - The engine only talks to these ABCs; the gh-backed implementations
      live in safegh.gh.provider and safegh.gh.dispatcher
    - Implementations raise SafeGhError subclasses for every expected
      failure (GH_CLI_ERROR, GRAPHQL_ERROR, NOT_FOUND, ...)
    - Exactly one attempt per call; no retries at this layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from safegh.refs import IssueRef
from safegh.schema import Operation, OperationContext, ResourceType


@dataclass(frozen=True)
class OperationRequest:
    """
    A single operation requested by the caller.

    Attributes:
        resource: Resource type (issue, pr, search, project)
        operation: Operation enum member of the resource
        repo: owner/repo the operation targets, if given
        number: Issue, pull request or project number, if any
        owner: Project owner (projects only)
        related: Linked issue for sub-issue and dependency operations
        args: Operation-specific inputs (title, body, labels, query, ...)
    """

    resource: ResourceType
    operation: Operation
    repo: str | None = None
    number: int | None = None
    owner: str | None = None
    related: IssueRef | None = None
    args: dict[str, Any] = field(default_factory=dict)

    @property
    def command(self) -> str:
        """Command name as reported in payloads, e.g. "issue close"."""
        return f"{self.resource.value} {self.operation.value}"


class ContextProvider(ABC):
    """
    Source of fetched operation contexts.

    Subclasses must implement fetch(). Only issue and pull request
    contexts are ever fetched; everything else is synthesized locally.
    """

    @abstractmethod
    def fetch(
        self,
        resource: ResourceType,
        repo: str | None,
        number: int,
    ) -> OperationContext:
        """
        Fetch the current state of an issue or pull request.

        Args:
            resource: ResourceType.ISSUE or ResourceType.PR
            repo: owner/repo, or None to use the current repository
            number: Issue or pull request number

        Returns:
            OperationContext describing the target

        Raises:
            GhCliError: gh exited non-zero
            GraphQLError: The response carried errors
            NotFoundError: The target does not exist
        """
        ...

    def __repr__(self) -> str:
        return f"<ContextProvider: {self.__class__.__name__}>"


class Dispatcher(ABC):
    """
    Executor of allowed operations.

    Example:
        class EchoDispatcher(Dispatcher):
            def execute(self, request):
                return request.command

            def apply_enforcement(self, resource, repo, number, args):
                return ""
    """

    @abstractmethod
    def execute(self, request: OperationRequest) -> str:
        """
        Perform the primary action of a request.

        Called only after the decision allowed the request.

        Returns:
            Trimmed stdout of the action
        """
        ...

    @abstractmethod
    def apply_enforcement(
        self,
        resource: ResourceType,
        repo: str | None,
        number: int,
        args: list[str],
    ) -> str:
        """
        Apply enforce arguments to an issue or pull request.

        Args:
            resource: ResourceType.ISSUE or ResourceType.PR
            repo: owner/repo of the target
            number: Target number
            args: Prebuilt --add-label/--remove-label/... arguments

        Returns:
            Trimmed stdout of the edit
        """
        ...

    def __repr__(self) -> str:
        return f"<Dispatcher: {self.__class__.__name__}>"
