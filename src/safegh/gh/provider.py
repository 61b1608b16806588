"""
gh-backed context provider.

Issue and pull request contexts are fetched with one GraphQL query each.
The issue query also reads the parent issue, which needs the sub_issues
GraphQL feature header.
"""

import logging
from typing import Any

from safegh.errors import InputValidationError, NotFoundError
from safegh.gh.base import ContextProvider
from safegh.gh.client import GhClient
from safegh.refs import split_repo
from safegh.schema import OperationContext, ParentIssueContext, ResourceType

logger = logging.getLogger(__name__)

SUB_ISSUE_HEADERS = {"GraphQL-Features": "sub_issues"}

ISSUE_CONTEXT_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      number
      title
      author { login }
      labels(first: 50) { nodes { name } }
      assignees(first: 20) { nodes { login } }
      parent {
        number
        title
        labels(first: 50) { nodes { name } }
        assignees(first: 20) { nodes { login } }
      }
    }
  }
}"""

PR_CONTEXT_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      number
      author { login }
      labels(first: 50) { nodes { name } }
      assignees(first: 20) { nodes { login } }
      isDraft
      baseRefName
      headRefName
      reviewDecision
    }
  }
}"""


class GhContextProvider(ContextProvider):
    """
    Fetch issue and pull request contexts through `gh api graphql`.

    When no repository is given, the repository of the working directory
    is resolved with `gh repo view` first.
    """

    def __init__(self, client: GhClient) -> None:
        self.client = client

    def fetch(
        self,
        resource: ResourceType,
        repo: str | None,
        number: int,
    ) -> OperationContext:
        if repo is None:
            repo = self.client.current_repo()
        owner, name = split_repo(repo)
        variables: dict[str, str | int] = {"owner": owner, "repo": name, "number": number}

        logger.debug("Fetching %s context for %s#%d", resource.value, repo, number)

        if resource == ResourceType.ISSUE:
            response = self.client.graphql(
                ISSUE_CONTEXT_QUERY,
                variables,
                headers=SUB_ISSUE_HEADERS,
            )
            node = _target(response, "issue")
            if node is None:
                raise NotFoundError(resource=resource.value, repo=repo, number=number)
            return _issue_context(node, repo, number)

        if resource == ResourceType.PR:
            response = self.client.graphql(PR_CONTEXT_QUERY, variables)
            node = _target(response, "pullRequest")
            if node is None:
                raise NotFoundError(resource=resource.value, repo=repo, number=number)
            return _pr_context(node, repo, number)

        raise InputValidationError(
            message=f"Context cannot be fetched for resource: {resource.value}",
            value=resource.value,
        )


def _target(response: dict[str, Any], key: str) -> dict[str, Any] | None:
    """Pull data.repository.<key> out of a response, or None."""
    data = response.get("data") or {}
    repository = data.get("repository") or {}
    return repository.get(key)


def _login(node: dict[str, Any]) -> str | None:
    author = node.get("author")
    if not author:
        return None
    return author.get("login")


def _names(node: dict[str, Any], key: str, attr: str) -> list[str]:
    connection = node.get(key) or {}
    return [item[attr] for item in connection.get("nodes") or [] if item]


def _issue_context(node: dict[str, Any], repo: str, number: int) -> OperationContext:
    parent = node.get("parent")
    parent_context = None
    if parent:
        parent_context = ParentIssueContext(
            number=parent["number"],
            title=parent.get("title") or "",
            labels=_names(parent, "labels", "name"),
            assignees=_names(parent, "assignees", "login"),
        )

    return OperationContext(
        repo=repo,
        issue_number=number,
        issue_author=_login(node),
        issue_title=node.get("title"),
        labels=_names(node, "labels", "name"),
        assignees=_names(node, "assignees", "login"),
        parent_issue=parent_context,
    )


def _pr_context(node: dict[str, Any], repo: str, number: int) -> OperationContext:
    return OperationContext(
        repo=repo,
        pr_number=number,
        pr_author=_login(node),
        labels=_names(node, "labels", "name"),
        assignees=_names(node, "assignees", "login"),
        draft=node.get("isDraft"),
        base_branch=node.get("baseRefName"),
        head_branch=node.get("headRefName"),
        review_decision=node.get("reviewDecision"),
    )
