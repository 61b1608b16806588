"""
gh-backed execution dispatcher.

Translates an allowed OperationRequest into gh arguments and runs them.
Sub-issue and dependency links go through GraphQL mutations after the
node ids of both issues are resolved.
"""

import json
import logging
from typing import Any

from safegh.errors import InputValidationError, NotFoundError
from safegh.gh.base import Dispatcher, OperationRequest
from safegh.gh.client import GhClient
from safegh.gh.provider import SUB_ISSUE_HEADERS
from safegh.marker import add_marker, add_provenance, remark
from safegh.refs import split_repo
from safegh.schema import (
    AiMarkerConfig,
    IssueOperation,
    PrOperation,
    ProjectOperation,
    ResourceType,
)

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "number,title,state,author,labels,assignees,body,url,createdAt,updatedAt"
PR_FIELDS = (
    "number,title,state,author,labels,assignees,isDraft,baseRefName,"
    "headRefName,reviewDecision,body,url,createdAt,updatedAt"
)

ISSUE_NODE_ID_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) { id }
  }
}"""

ADD_SUB_ISSUE_MUTATION = """
mutation($issueId: ID!, $subIssueId: ID!) {
  addSubIssue(input: { issueId: $issueId, subIssueId: $subIssueId }) {
    issue { id number }
    subIssue { id number }
  }
}"""

REMOVE_SUB_ISSUE_MUTATION = """
mutation($issueId: ID!, $subIssueId: ID!) {
  removeSubIssue(input: { issueId: $issueId, subIssueId: $subIssueId }) {
    issue { id number }
    subIssue { id number }
  }
}"""

ADD_BLOCKED_BY_MUTATION = """
mutation($issueId: ID!, $blockingIssueId: ID!) {
  addBlockedBy(input: { issueId: $issueId, blockingIssueId: $blockingIssueId }) {
    issue { id number }
    blockingIssue { id number }
  }
}"""

REMOVE_BLOCKED_BY_MUTATION = """
mutation($issueId: ID!, $blockingIssueId: ID!) {
  removeBlockedBy(input: { issueId: $issueId, blockingIssueId: $blockingIssueId }) {
    issue { id number }
    blockingIssue { id number }
  }
}"""

# operation -> (mutation, variable name of the linked issue)
_LINK_MUTATIONS = {
    IssueOperation.SUB_ISSUE_ADD: (ADD_SUB_ISSUE_MUTATION, "subIssueId"),
    IssueOperation.SUB_ISSUE_REMOVE: (REMOVE_SUB_ISSUE_MUTATION, "subIssueId"),
    IssueOperation.DEPENDENCY_ADD: (ADD_BLOCKED_BY_MUTATION, "blockingIssueId"),
    IssueOperation.DEPENDENCY_REMOVE: (REMOVE_BLOCKED_BY_MUTATION, "blockingIssueId"),
}


class GhDispatcher(Dispatcher):
    """
    Execute operations with the gh CLI.

    Attributes:
        client: GhClient used for every call
        ai_marker: Marking applied to comment and issue bodies
    """

    def __init__(
        self,
        client: GhClient,
        ai_marker: AiMarkerConfig | None = None,
    ) -> None:
        self.client = client
        self.ai_marker = ai_marker or AiMarkerConfig()

    def execute(self, request: OperationRequest) -> str:
        logger.debug("Executing %s", request.command)

        if request.resource == ResourceType.ISSUE:
            return self._execute_issue(request)
        elif request.resource == ResourceType.PR:
            return self._execute_pr(request)
        elif request.resource == ResourceType.SEARCH:
            return self._execute_search(request)
        else:
            return self._execute_project(request)

    def apply_enforcement(
        self,
        resource: ResourceType,
        repo: str | None,
        number: int,
        args: list[str],
    ) -> str:
        logger.debug("Enforcing on %s #%d: %s", resource.value, number, " ".join(args))
        cmd = [resource.value, "edit", str(number), *args]
        return self.client.run(_with_repo(cmd, repo)).strip()

    # =========================================================================
    # Issues
    # =========================================================================

    def _execute_issue(self, request: OperationRequest) -> str:
        op = request.operation
        args = request.args

        if op in _LINK_MUTATIONS:
            return self._link_issues(request)

        if op == IssueOperation.LIST:
            cmd = ["issue", "list", "--json", ISSUE_FIELDS]
            cmd += _list_filters(args)
        elif op == IssueOperation.VIEW:
            cmd = ["issue", "view", _number(request), "--json", ISSUE_FIELDS]
        elif op == IssueOperation.LIST_COMMENTS:
            return self._list_comments(request)
        elif op == IssueOperation.CREATE:
            body = add_provenance(args.get("body") or "", self.ai_marker)
            cmd = ["issue", "create", "--title", args["title"], "--body", body]
            cmd += _joined("--label", args.get("labels"))
            cmd += _joined("--assignee", args.get("assignees"))
        elif op == IssueOperation.UPDATE:
            cmd = ["issue", "edit", _number(request)] + _edit_flags(args)
        elif op == IssueOperation.CLOSE:
            cmd = ["issue", "close", _number(request)]
            if args.get("comment"):
                cmd += ["--comment", args["comment"]]
        elif op == IssueOperation.REOPEN:
            cmd = ["issue", "reopen", _number(request)]
        elif op == IssueOperation.DELETE:
            cmd = ["issue", "delete", _number(request), "--yes"]
        elif op == IssueOperation.COMMENT:
            body = add_marker(args["body"], self.ai_marker)
            cmd = ["issue", "comment", _number(request), "--body", body]
        elif op == IssueOperation.COMMENT_EDIT:
            return self._edit_comment(request)
        else:
            return self._delete_comment(request)

        return self.client.run(_with_repo(cmd, request.repo)).strip()

    def _link_issues(self, request: OperationRequest) -> str:
        if request.related is None:
            raise InputValidationError(message=f"{request.command} requires a linked issue")
        mutation, related_key = _LINK_MUTATIONS[request.operation]

        repo = request.repo or self.client.current_repo()
        related = request.related.resolve(repo)
        issue_id = self._issue_node_id(repo, _require_number(request))
        related_id = self._issue_node_id(related.repo or repo, related.number)

        response = self.client.graphql(
            mutation,
            {"issueId": issue_id, related_key: related_id},
            headers=SUB_ISSUE_HEADERS,
        )
        return json.dumps(response.get("data") or {})

    def _issue_node_id(self, repo: str, number: int) -> str:
        owner, name = split_repo(repo)
        response = self.client.graphql(
            ISSUE_NODE_ID_QUERY,
            {"owner": owner, "repo": name, "number": number},
        )
        repository = (response.get("data") or {}).get("repository") or {}
        issue = repository.get("issue")
        if not issue:
            raise NotFoundError(resource=ResourceType.ISSUE.value, repo=repo, number=number)
        return issue["id"]

    # =========================================================================
    # Pull requests
    # =========================================================================

    def _execute_pr(self, request: OperationRequest) -> str:
        op = request.operation
        args = request.args

        if op == PrOperation.LIST:
            cmd = ["pr", "list", "--json", PR_FIELDS] + _list_filters(args)
            if args.get("base"):
                cmd += ["--base", args["base"]]
        elif op == PrOperation.VIEW:
            cmd = ["pr", "view", _number(request), "--json", PR_FIELDS]
        elif op == PrOperation.LIST_COMMENTS:
            return self._list_comments(request)
        elif op == PrOperation.CREATE:
            cmd = ["pr", "create", "--title", args["title"], "--body", args.get("body") or ""]
            if args.get("base"):
                cmd += ["--base", args["base"]]
            if args.get("head"):
                cmd += ["--head", args["head"]]
            if args.get("draft"):
                cmd.append("--draft")
            cmd += _joined("--label", args.get("labels"))
            cmd += _joined("--assignee", args.get("assignees"))
        elif op == PrOperation.UPDATE:
            cmd = ["pr", "edit", _number(request)]
            if args.get("base"):
                cmd += ["--base", args["base"]]
            cmd += _edit_flags(args)
        elif op == PrOperation.CLOSE:
            cmd = ["pr", "close", _number(request)]
            if args.get("comment"):
                cmd += ["--comment", args["comment"]]
        elif op == PrOperation.REOPEN:
            cmd = ["pr", "reopen", _number(request)]
        elif op == PrOperation.MERGE:
            cmd = ["pr", "merge", _number(request), f"--{args.get('method') or 'merge'}"]
            if args.get("delete_branch"):
                cmd.append("--delete-branch")
        elif op == PrOperation.REVIEW:
            cmd = ["pr", "review", _number(request), f"--{args.get('action') or 'comment'}"]
            if args.get("body"):
                cmd += ["--body", args["body"]]
        elif op == PrOperation.DIFF:
            cmd = ["pr", "diff", _number(request)]
        elif op == PrOperation.CHECKS:
            cmd = ["pr", "checks", _number(request)]
        elif op == PrOperation.UPDATE_BRANCH:
            cmd = ["pr", "update-branch", _number(request)]
            if args.get("rebase"):
                cmd.append("--rebase")
        elif op == PrOperation.COMMENT:
            body = add_marker(args["body"], self.ai_marker)
            cmd = ["pr", "comment", _number(request), "--body", body]
        elif op == PrOperation.COMMENT_EDIT:
            return self._edit_comment(request)
        else:
            return self._delete_comment(request)

        # diff output is passed through untouched
        stdout = self.client.run(_with_repo(cmd, request.repo))
        return stdout if op == PrOperation.DIFF else stdout.strip()

    # =========================================================================
    # Comments (issues and pull requests share the issue comments API)
    # =========================================================================

    def _list_comments(self, request: OperationRequest) -> str:
        path = f"{_repo_path(request.repo)}/issues/{_number(request)}/comments"
        return self.client.run(["api", path]).strip()

    def _edit_comment(self, request: OperationRequest) -> str:
        body = remark(request.args["body"], self.ai_marker)
        path = _comment_path(request)
        return self.client.run(["api", path, "-X", "PATCH", "-f", f"body={body}"]).strip()

    def _delete_comment(self, request: OperationRequest) -> str:
        return self.client.run(["api", _comment_path(request), "-X", "DELETE"]).strip()

    # =========================================================================
    # Search
    # =========================================================================

    def _execute_search(self, request: OperationRequest) -> str:
        query = request.args["query"]
        if request.repo:
            query = f"{query} repo:{request.repo}"
        cmd = ["search", request.operation.value, query]
        if request.args.get("limit"):
            cmd += ["--limit", str(request.args["limit"])]
        return self.client.run(cmd).strip()

    # =========================================================================
    # Projects
    # =========================================================================

    def _execute_project(self, request: OperationRequest) -> str:
        op = request.operation
        args = request.args
        json_format = False

        if op == ProjectOperation.LIST:
            cmd = ["project", "list"]
            json_format = True
        elif op == ProjectOperation.VIEW:
            cmd = ["project", "view", _number(request)]
            json_format = True
        elif op == ProjectOperation.CREATE:
            cmd = ["project", "create", "--title", args["title"]]
            json_format = True
        elif op == ProjectOperation.EDIT:
            cmd = ["project", "edit", _number(request)]
            for key, flag in (
                ("title", "--title"),
                ("description", "--description"),
                ("visibility", "--visibility"),
            ):
                if args.get(key):
                    cmd += [flag, args[key]]
        elif op == ProjectOperation.CLOSE:
            cmd = ["project", "close", _number(request)]
        elif op == ProjectOperation.DELETE:
            cmd = ["project", "delete", _number(request)]
        elif op == ProjectOperation.FIELD_LIST:
            cmd = ["project", "field-list", _number(request)]
            json_format = True
        elif op == ProjectOperation.FIELD_CREATE:
            cmd = [
                "project", "field-create", _number(request),
                "--name", args["name"],
                "--data-type", args["data_type"],
            ]
        elif op == ProjectOperation.FIELD_DELETE:
            # fields are addressed by id alone
            return self.client.run(["project", "field-delete", "--id", args["field_id"]]).strip()
        elif op == ProjectOperation.ITEM_LIST:
            cmd = ["project", "item-list", _number(request)]
            json_format = True
        elif op == ProjectOperation.ITEM_ADD:
            cmd = ["project", "item-add", _number(request), "--url", args["url"]]
            json_format = True
        elif op == ProjectOperation.ITEM_CREATE:
            cmd = ["project", "item-create", _number(request), "--title", args["title"]]
            if args.get("body"):
                cmd += ["--body", args["body"]]
            json_format = True
        elif op == ProjectOperation.ITEM_EDIT:
            # item-edit addresses the item and project by id and takes no --owner
            return self.client.run(_item_edit_args(request)).strip()
        elif op == ProjectOperation.ITEM_DELETE:
            cmd = ["project", "item-delete", _number(request), "--id", args["item_id"]]
        else:
            cmd = ["project", "item-archive", _number(request), "--id", args["item_id"]]

        if request.owner:
            cmd += ["--owner", request.owner]
        if json_format:
            cmd += ["--format", "json"]
        return self.client.run(cmd).strip()


# =============================================================================
# Argument helpers
# =============================================================================


def _require_number(request: OperationRequest) -> int:
    if request.number is None:
        raise InputValidationError(message=f"{request.command} requires a number")
    return request.number


def _number(request: OperationRequest) -> str:
    return str(_require_number(request))


def _with_repo(cmd: list[str], repo: str | None) -> list[str]:
    if repo:
        return [*cmd, "-R", repo]
    return cmd


def _repo_path(repo: str | None) -> str:
    """REST path prefix; gh fills {owner}/{repo} from the working directory."""
    return f"/repos/{repo}" if repo else "/repos/{owner}/{repo}"


def _comment_path(request: OperationRequest) -> str:
    return f"{_repo_path(request.repo)}/issues/comments/{request.args['comment_id']}"


def _joined(flag: str, values: list[str] | None) -> list[str]:
    if not values:
        return []
    return [flag, ",".join(values)]


def _list_filters(args: dict[str, Any]) -> list[str]:
    cmd: list[str] = []
    if args.get("state"):
        cmd += ["--state", args["state"]]
    if args.get("limit"):
        cmd += ["--limit", str(args["limit"])]
    cmd += _joined("--label", args.get("labels"))
    return cmd


def _edit_flags(args: dict[str, Any]) -> list[str]:
    cmd: list[str] = []
    if args.get("title"):
        cmd += ["--title", args["title"]]
    if args.get("body"):
        cmd += ["--body", args["body"]]
    cmd += _joined("--add-label", args.get("add_labels"))
    cmd += _joined("--remove-label", args.get("remove_labels"))
    cmd += _joined("--add-assignee", args.get("add_assignees"))
    cmd += _joined("--remove-assignee", args.get("remove_assignees"))
    return cmd


def _item_edit_args(request: OperationRequest) -> list[str]:
    args = request.args
    cmd = [
        "project", "item-edit",
        "--id", args["item_id"],
        "--project-id", args.get("project_id") or _number(request),
        "--field-id", args["field_id"],
    ]
    for key, flag in (
        ("text", "--text"),
        ("number_value", "--number"),
        ("date", "--date"),
        ("single_select_option_id", "--single-select-option-id"),
        ("iteration_id", "--iteration-id"),
    ):
        if args.get(key) is not None:
            cmd += [flag, str(args[key])]
    return cmd
