"""
Unit tests for the gh-backed dispatcher.

Tests cover:
- gh argument lists per resource and operation
- Comment marking on create and edit
- Sub-issue / dependency GraphQL mutations
- Enforcement edits
"""

import json
from unittest.mock import MagicMock

import pytest

from safegh.errors import NotFoundError
from safegh.gh.base import OperationRequest
from safegh.gh.client import GhClient
from safegh.gh.dispatcher import ADD_BLOCKED_BY_MUTATION, ADD_SUB_ISSUE_MUTATION, GhDispatcher
from safegh.marker import INVISIBLE_MARKER
from safegh.refs import IssueRef
from safegh.schema import (
    AiMarkerConfig,
    IssueOperation,
    PrOperation,
    ProjectOperation,
    ResourceType,
    SearchOperation,
)


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock(spec=GhClient)
    mock.run.return_value = " out \n"
    return mock


def _issue(operation: IssueOperation, **kwargs) -> OperationRequest:
    return OperationRequest(resource=ResourceType.ISSUE, operation=operation, **kwargs)


def _pr(operation: PrOperation, **kwargs) -> OperationRequest:
    return OperationRequest(resource=ResourceType.PR, operation=operation, **kwargs)


def _project(operation: ProjectOperation, **kwargs) -> OperationRequest:
    return OperationRequest(resource=ResourceType.PROJECT, operation=operation, **kwargs)


def _cmd(client: MagicMock) -> list[str]:
    return client.run.call_args[0][0]


# =============================================================================
# Issues
# =============================================================================


class TestIssues:
    """Issue commands."""

    def test_list(self, client: MagicMock) -> None:
        request = _issue(
            IssueOperation.LIST,
            repo="a/b",
            args={"state": "open", "limit": 5, "labels": ["bug", "ui"]},
        )
        assert GhDispatcher(client).execute(request) == "out"
        cmd = _cmd(client)
        assert cmd[:3] == ["issue", "list", "--json"]
        assert cmd[4:] == ["--state", "open", "--limit", "5", "--label", "bug,ui", "-R", "a/b"]

    def test_create(self, client: MagicMock) -> None:
        request = _issue(
            IssueOperation.CREATE,
            repo="a/b",
            args={"title": "T", "labels": ["bug"], "assignees": ["bot"]},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "issue", "create", "--title", "T", "--body", "",
            "--label", "bug", "--assignee", "bot", "-R", "a/b",
        ]

    def test_create_marked(self, client: MagicMock) -> None:
        marker = AiMarkerConfig(enabled=True)
        request = _issue(IssueOperation.CREATE, repo="a/b", args={"title": "T", "body": "B"})
        GhDispatcher(client, marker).execute(request)
        body = _cmd(client)[5]
        assert body.startswith("B\n<!-- safe-gh: ")
        assert body.endswith("Z -->")
        assert INVISIBLE_MARKER not in body

    def test_edit(self, client: MagicMock) -> None:
        request = _issue(
            IssueOperation.UPDATE,
            repo="a/b",
            number=3,
            args={"title": "New", "add_labels": ["x"], "remove_assignees": ["y"]},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "issue", "edit", "3", "--title", "New",
            "--add-label", "x", "--remove-assignee", "y", "-R", "a/b",
        ]

    def test_close_with_comment(self, client: MagicMock) -> None:
        request = _issue(IssueOperation.CLOSE, repo="a/b", number=3, args={"comment": "done"})
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["issue", "close", "3", "--comment", "done", "-R", "a/b"]

    def test_delete_confirms(self, client: MagicMock) -> None:
        GhDispatcher(client).execute(_issue(IssueOperation.DELETE, number=3))
        assert _cmd(client) == ["issue", "delete", "3", "--yes"]

    def test_comment_marked(self, client: MagicMock) -> None:
        marker = AiMarkerConfig(enabled=True, visible_prefix="[ai] ")
        request = _issue(IssueOperation.COMMENT, repo="a/b", number=3, args={"body": "hi"})
        GhDispatcher(client, marker).execute(request)
        assert _cmd(client)[4] == f"[ai] hi{INVISIBLE_MARKER}"

    def test_comment_unmarked_by_default(self, client: MagicMock) -> None:
        request = _issue(IssueOperation.COMMENT, repo="a/b", number=3, args={"body": "hi"})
        GhDispatcher(client).execute(request)
        assert _cmd(client)[4] == "hi"

    def test_list_comments(self, client: MagicMock) -> None:
        GhDispatcher(client).execute(_issue(IssueOperation.LIST_COMMENTS, repo="a/b", number=3))
        assert _cmd(client) == ["api", "/repos/a/b/issues/3/comments"]

    def test_list_comments_current_repo(self, client: MagicMock) -> None:
        GhDispatcher(client).execute(_issue(IssueOperation.LIST_COMMENTS, number=3))
        assert _cmd(client) == ["api", "/repos/{owner}/{repo}/issues/3/comments"]

    def test_edit_comment(self, client: MagicMock) -> None:
        request = _issue(
            IssueOperation.COMMENT_EDIT,
            repo="a/b",
            number=3,
            args={"comment_id": 77, "body": "new"},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "api", "/repos/a/b/issues/comments/77", "-X", "PATCH", "-f", "body=new",
        ]

    def test_delete_comment(self, client: MagicMock) -> None:
        request = _issue(IssueOperation.COMMENT_DELETE, repo="a/b", number=3, args={"comment_id": 77})
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["api", "/repos/a/b/issues/comments/77", "-X", "DELETE"]


class TestIssueLinks:
    """Sub-issue and dependency mutations."""

    @staticmethod
    def _graphql(query: str, variables: dict, headers: dict | None = None) -> dict:
        if "issue(number" in query:
            return {"data": {"repository": {"issue": {"id": f"ID_{variables['repo']}_{variables['number']}"}}}}
        return {"data": {"linked": True}}

    def test_sub_issue_add_same_repo(self, client: MagicMock) -> None:
        client.graphql.side_effect = self._graphql
        request = _issue(
            IssueOperation.SUB_ISSUE_ADD,
            repo="a/b",
            number=1,
            related=IssueRef(repo=None, number=2),
        )
        output = GhDispatcher(client).execute(request)

        assert json.loads(output) == {"linked": True}
        mutation_call = client.graphql.call_args_list[-1]
        assert mutation_call[0][0] == ADD_SUB_ISSUE_MUTATION
        assert mutation_call[0][1] == {"issueId": "ID_b_1", "subIssueId": "ID_b_2"}

    def test_dependency_cross_repo(self, client: MagicMock) -> None:
        client.graphql.side_effect = self._graphql
        request = _issue(
            IssueOperation.DEPENDENCY_ADD,
            repo="a/b",
            number=1,
            related=IssueRef(repo="a/lib", number=9),
        )
        GhDispatcher(client).execute(request)
        mutation_call = client.graphql.call_args_list[-1]
        assert mutation_call[0][0] == ADD_BLOCKED_BY_MUTATION
        assert mutation_call[0][1] == {"issueId": "ID_b_1", "blockingIssueId": "ID_lib_9"}

    def test_missing_linked_issue(self, client: MagicMock) -> None:
        client.graphql.return_value = {"data": {"repository": {"issue": None}}}
        request = _issue(
            IssueOperation.SUB_ISSUE_ADD,
            repo="a/b",
            number=1,
            related=IssueRef(repo=None, number=2),
        )
        with pytest.raises(NotFoundError):
            GhDispatcher(client).execute(request)


# =============================================================================
# Pull Requests
# =============================================================================


class TestPullRequests:
    """Pull request commands."""

    def test_create_draft(self, client: MagicMock) -> None:
        request = _pr(
            PrOperation.CREATE,
            repo="a/b",
            args={"title": "T", "body": "B", "base": "main", "head": "feature/x", "draft": True},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "pr", "create", "--title", "T", "--body", "B",
            "--base", "main", "--head", "feature/x", "--draft", "-R", "a/b",
        ]

    def test_merge(self, client: MagicMock) -> None:
        request = _pr(
            PrOperation.MERGE,
            repo="a/b",
            number=4,
            args={"method": "squash", "delete_branch": True},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["pr", "merge", "4", "--squash", "--delete-branch", "-R", "a/b"]

    def test_review(self, client: MagicMock) -> None:
        request = _pr(
            PrOperation.REVIEW,
            repo="a/b",
            number=4,
            args={"action": "request-changes", "body": "fix"},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "pr", "review", "4", "--request-changes", "--body", "fix", "-R", "a/b",
        ]

    def test_update_branch_rebase(self, client: MagicMock) -> None:
        request = _pr(PrOperation.UPDATE_BRANCH, repo="a/b", number=4, args={"rebase": True})
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["pr", "update-branch", "4", "--rebase", "-R", "a/b"]

    def test_diff_not_trimmed(self, client: MagicMock) -> None:
        client.run.return_value = "diff --git a b\n"
        output = GhDispatcher(client).execute(_pr(PrOperation.DIFF, repo="a/b", number=4))
        assert output == "diff --git a b\n"


# =============================================================================
# Search and Projects
# =============================================================================


class TestSearch:
    """Search commands."""

    def test_scoped(self, client: MagicMock) -> None:
        request = OperationRequest(
            resource=ResourceType.SEARCH,
            operation=SearchOperation.CODE,
            repo="a/b",
            args={"query": "TODO", "limit": 10},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["search", "code", "TODO repo:a/b", "--limit", "10"]

    def test_unscoped(self, client: MagicMock) -> None:
        request = OperationRequest(
            resource=ResourceType.SEARCH,
            operation=SearchOperation.REPOS,
            args={"query": "cli"},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["search", "repos", "cli"]


class TestProjects:
    """Project commands."""

    def test_view_json(self, client: MagicMock) -> None:
        GhDispatcher(client).execute(_project(ProjectOperation.VIEW, number=1, owner="my-org"))
        assert _cmd(client) == ["project", "view", "1", "--owner", "my-org", "--format", "json"]

    def test_item_add(self, client: MagicMock) -> None:
        request = _project(
            ProjectOperation.ITEM_ADD,
            number=1,
            owner="my-org",
            args={"url": "https://github.com/a/b/issues/1"},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "project", "item-add", "1", "--url", "https://github.com/a/b/issues/1",
            "--owner", "my-org", "--format", "json",
        ]

    def test_field_delete_by_id(self, client: MagicMock) -> None:
        request = _project(
            ProjectOperation.FIELD_DELETE, number=1, owner="my-org", args={"field_id": "F1"}
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == ["project", "field-delete", "--id", "F1"]

    def test_item_edit(self, client: MagicMock) -> None:
        request = _project(
            ProjectOperation.ITEM_EDIT,
            number=1,
            owner="my-org",
            args={"item_id": "I1", "field_id": "F1", "project_id": "P1", "text": "hello"},
        )
        GhDispatcher(client).execute(request)
        assert _cmd(client) == [
            "project", "item-edit", "--id", "I1", "--project-id", "P1",
            "--field-id", "F1", "--text", "hello",
        ]

    def test_close_without_owner(self, client: MagicMock) -> None:
        GhDispatcher(client).execute(_project(ProjectOperation.CLOSE, number=2))
        assert _cmd(client) == ["project", "close", "2"]


class TestApplyEnforcement:
    """Enforcement edits."""

    def test_issue_edit(self, client: MagicMock) -> None:
        GhDispatcher(client).apply_enforcement(
            ResourceType.ISSUE, "a/b", 5, ["--add-label", "x"]
        )
        assert _cmd(client) == ["issue", "edit", "5", "--add-label", "x", "-R", "a/b"]

    def test_pr_edit(self, client: MagicMock) -> None:
        GhDispatcher(client).apply_enforcement(ResourceType.PR, None, 5, ["--add-assignee", "bot"])
        assert _cmd(client) == ["pr", "edit", "5", "--add-assignee", "bot"]
