"""
Context acquisition for safe-gh decisions.

Before a decision can be made, the engine needs an OperationContext. A
static table says which (resource, operation) pairs must fetch the live
state of their target; every other pair builds its context locally from
the request alone.

Rules:
    - At most one fetch per request, never retried
    - Fetch failures propagate (GH_CLI_ERROR, GRAPHQL_ERROR, NOT_FOUND)
    - create is synthesized: the author is "" and assignees are [], so a
      createdBy/assignee "self" condition can never match a create
"""

import logging

from safegh.errors import InputValidationError
from safegh.gh.base import ContextProvider, OperationRequest
from safegh.schema import (
    IssueOperation,
    Operation,
    OperationContext,
    PrOperation,
    ResourceType,
)

logger = logging.getLogger(__name__)

# Operations whose decision depends on the current state of the target.
# Sub-issue and dependency operations fetch the parent / blocked issue.
CONTEXT_REQUIRED: dict[ResourceType, frozenset[Operation]] = {
    ResourceType.ISSUE: frozenset(
        {
            IssueOperation.UPDATE,
            IssueOperation.CLOSE,
            IssueOperation.REOPEN,
            IssueOperation.DELETE,
            IssueOperation.COMMENT,
            IssueOperation.COMMENT_EDIT,
            IssueOperation.COMMENT_DELETE,
            IssueOperation.SUB_ISSUE_ADD,
            IssueOperation.SUB_ISSUE_REMOVE,
            IssueOperation.DEPENDENCY_ADD,
            IssueOperation.DEPENDENCY_REMOVE,
        }
    ),
    ResourceType.PR: frozenset(
        {
            PrOperation.UPDATE,
            PrOperation.CLOSE,
            PrOperation.REOPEN,
            PrOperation.MERGE,
            PrOperation.REVIEW,
            PrOperation.UPDATE_BRANCH,
            PrOperation.COMMENT,
            PrOperation.COMMENT_EDIT,
            PrOperation.COMMENT_DELETE,
        }
    ),
    ResourceType.SEARCH: frozenset(),
    ResourceType.PROJECT: frozenset(),
}


def operation_needs_context(resource: ResourceType, operation: Operation) -> bool:
    """Whether the decision for this pair needs a fetched context."""
    return operation in CONTEXT_REQUIRED.get(resource, frozenset())


class ContextResolver:
    """
    Produce the OperationContext for a request.

    Usage:
        resolver = ContextResolver(provider)
        context = resolver.resolve(request)
    """

    def __init__(self, provider: ContextProvider) -> None:
        self.provider = provider

    def resolve(self, request: OperationRequest) -> OperationContext:
        """
        Fetch or synthesize the context for a request.

        Raises:
            InputValidationError: A fetch is needed but no number was given
            GhCliError, GraphQLError, NotFoundError: From the provider
        """
        if operation_needs_context(request.resource, request.operation):
            if request.number is None:
                raise InputValidationError(
                    message=f"{request.command} requires a {request.resource.value} number",
                )
            logger.debug("Fetching context for %s #%d", request.command, request.number)
            return self.provider.fetch(request.resource, request.repo, request.number)

        return synthesize_context(request)


def synthesize_context(request: OperationRequest) -> OperationContext:
    """Build a context from the request alone, without any network call."""
    resource = request.resource
    op = request.operation
    args = request.args

    if resource == ResourceType.ISSUE:
        if op == IssueOperation.CREATE:
            return OperationContext(
                repo=request.repo,
                issue_author="",
                labels=list(args.get("labels") or []),
                assignees=[],
            )
        return OperationContext(repo=request.repo, issue_number=request.number)

    if resource == ResourceType.PR:
        if op == PrOperation.CREATE:
            return OperationContext(
                repo=request.repo,
                pr_author="",
                labels=list(args.get("labels") or []),
                assignees=[],
                draft=bool(args.get("draft")),
                base_branch=args.get("base"),
                head_branch=args.get("head"),
            )
        return OperationContext(repo=request.repo, pr_number=request.number)

    if resource == ResourceType.SEARCH:
        return OperationContext(repo=request.repo)

    return OperationContext(
        project_owner=request.owner,
        project_number=request.number,
    )
