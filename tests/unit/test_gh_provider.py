"""
Unit tests for the gh-backed context provider.

Tests cover:
- Issue contexts, including the parent issue
- Pull request contexts
- Null targets becoming NOT_FOUND
- Resolving the current repository when none is given
"""

from unittest.mock import MagicMock

import pytest

from safegh.errors import InputValidationError, NotFoundError
from safegh.gh.client import GhClient
from safegh.gh.provider import SUB_ISSUE_HEADERS, GhContextProvider
from safegh.schema import ResourceType


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=GhClient)


def _issue_response(parent: dict | None = None) -> dict:
    return {
        "data": {
            "repository": {
                "issue": {
                    "number": 5,
                    "title": "[bot] cleanup",
                    "author": {"login": "bot"},
                    "labels": {"nodes": [{"name": "chore"}]},
                    "assignees": {"nodes": [{"login": "alice"}]},
                    "parent": parent,
                }
            }
        }
    }


class TestIssueContext:
    """Issue fetches."""

    def test_fields(self, client: MagicMock) -> None:
        client.graphql.return_value = _issue_response()
        context = GhContextProvider(client).fetch(ResourceType.ISSUE, "my-org/app", 5)

        assert context.repo == "my-org/app"
        assert context.issue_number == 5
        assert context.issue_author == "bot"
        assert context.issue_title == "[bot] cleanup"
        assert context.labels == ["chore"]
        assert context.assignees == ["alice"]
        assert context.parent_issue is None

        _, variables = client.graphql.call_args[0]
        assert variables == {"owner": "my-org", "repo": "app", "number": 5}
        assert client.graphql.call_args[1]["headers"] == SUB_ISSUE_HEADERS

    def test_parent(self, client: MagicMock) -> None:
        client.graphql.return_value = _issue_response(
            parent={
                "number": 1,
                "title": "Epic",
                "labels": {"nodes": [{"name": "epic"}]},
                "assignees": {"nodes": []},
            }
        )
        context = GhContextProvider(client).fetch(ResourceType.ISSUE, "my-org/app", 5)
        assert context.parent_issue.number == 1
        assert context.parent_issue.labels == ["epic"]
        assert context.parent_issue.assignees == []

    def test_ghost_author(self, client: MagicMock) -> None:
        response = _issue_response()
        response["data"]["repository"]["issue"]["author"] = None
        client.graphql.return_value = response
        context = GhContextProvider(client).fetch(ResourceType.ISSUE, "my-org/app", 5)
        assert context.issue_author is None

    def test_not_found(self, client: MagicMock) -> None:
        client.graphql.return_value = {"data": {"repository": {"issue": None}}}
        with pytest.raises(NotFoundError) as exc_info:
            GhContextProvider(client).fetch(ResourceType.ISSUE, "my-org/app", 99)
        assert exc_info.value.details["number"] == 99

    def test_current_repo(self, client: MagicMock) -> None:
        client.current_repo.return_value = "my-org/app"
        client.graphql.return_value = _issue_response()
        context = GhContextProvider(client).fetch(ResourceType.ISSUE, None, 5)
        assert context.repo == "my-org/app"

    def test_invalid_repo(self, client: MagicMock) -> None:
        with pytest.raises(InputValidationError):
            GhContextProvider(client).fetch(ResourceType.ISSUE, "not-a-repo", 5)
        client.graphql.assert_not_called()


class TestPrContext:
    """Pull request fetches."""

    def test_fields(self, client: MagicMock) -> None:
        client.graphql.return_value = {
            "data": {
                "repository": {
                    "pullRequest": {
                        "number": 8,
                        "author": {"login": "bot"},
                        "labels": {"nodes": []},
                        "assignees": {"nodes": [{"login": "bot"}]},
                        "isDraft": True,
                        "baseRefName": "main",
                        "headRefName": "feature/x",
                        "reviewDecision": None,
                    }
                }
            }
        }
        context = GhContextProvider(client).fetch(ResourceType.PR, "my-org/app", 8)
        assert context.pr_number == 8
        assert context.pr_author == "bot"
        assert context.draft is True
        assert context.base_branch == "main"
        assert context.head_branch == "feature/x"
        assert context.review_decision is None

    def test_not_found(self, client: MagicMock) -> None:
        client.graphql.return_value = {"data": {"repository": {"pullRequest": None}}}
        with pytest.raises(NotFoundError):
            GhContextProvider(client).fetch(ResourceType.PR, "my-org/app", 8)

    def test_other_resource_rejected(self, client: MagicMock) -> None:
        with pytest.raises(InputValidationError):
            GhContextProvider(client).fetch(ResourceType.SEARCH, "my-org/app", 1)
