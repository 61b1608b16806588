"""
CLI entry point for safe-gh.

This module provides the Typer-based command-line interface for safe-gh.
Every operation command prints exactly one JSON document on stdout and
exits 0 (success or dry-run) or 1 (denied or failed).

Commands:
    issue       Issue operations, including sub-issues and dependencies
    pr          Pull request operations
    search      GitHub search
    project     GitHub Projects operations
    config      Create, show and validate the configuration
    doctor      Check the environment

Architecture Note:
    The CLI is intentionally thin - it parses arguments into an
    OperationRequest and hands it to the Engine. Numbers are taken as
    strings and parsed by safe-gh so that bad input yields a
    VALIDATION_ERROR payload rather than a usage error.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from safegh import __version__
from safegh.config import init_config, load_config, resolve_config_path
from safegh.engine import Engine
from safegh.errors import GhCliError, InputValidationError, SafeGhError, UnknownError
from safegh.gh import GhClient, GhContextProvider, GhDispatcher, OperationRequest
from safegh.log import configure_logging
from safegh.refs import parse_issue_ref, parse_number, split_list
from safegh.report import DoctorCheck, print_config, print_doctor, render_outcome
from safegh.report.json import dumps, error_payload
from safegh.schema import (
    IssueOperation,
    PrOperation,
    ProjectOperation,
    ResourceType,
    SearchOperation,
)

# Initialize Typer app with metadata
app = typer.Typer(
    name="safe-gh",
    help="Permission-checked gh CLI for automated agents.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for human-facing output (config show, doctor)
console = Console()


@dataclass
class AppState:
    """Global options shared by every command."""

    dry_run: bool = False
    config_path: Path | None = None
    verbose: bool = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]safe-gh[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Report the decision without executing anything.",
        ),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            help="Path to the config file (default: $SAFE_GH_CONFIG or ~/.config/safe-gh/config.yaml).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log decisions and gh calls to stderr.",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    safe-gh - Permission-checked gateway between agents and GitHub.

    Every issue, pull request, search and project operation is checked
    against the configured rules before it reaches the gh CLI.
    """
    configure_logging(verbose)
    ctx.obj = AppState(dry_run=dry_run, config_path=config_path, verbose=verbose)


# =============================================================================
# Shared plumbing
# =============================================================================

RepoOption = Annotated[
    Optional[str],
    typer.Option("--repo", "-R", help="Repository in owner/repo format."),
]
OwnerOption = Annotated[
    Optional[str],
    typer.Option("--owner", help="Login of the project owner (user or org)."),
]
BodyOption = Annotated[
    Optional[str],
    typer.Option("--body", "-b", help="Body text."),
]
LimitOption = Annotated[
    Optional[str],
    typer.Option("--limit", "-L", help="Maximum number of results."),
]


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj if isinstance(ctx.obj, AppState) else AppState()


def _emit(text: str) -> None:
    typer.echo(text)


def _fail(error: SafeGhError) -> None:
    _emit(dumps(error_payload(error)))
    raise typer.Exit(code=1)


def _run(ctx: typer.Context, build: Callable[[], OperationRequest]) -> None:
    """
    Build a request, run it through the engine, print the result and exit.

    Args:
        ctx: Typer context carrying AppState
        build: Builds the request; may raise InputValidationError
    """
    state = _state(ctx)
    try:
        request = build()
        config = load_config(state.config_path)
    except SafeGhError as e:
        _fail(e)
    except Exception as e:
        _fail(UnknownError(message=str(e) or type(e).__name__))

    client = GhClient()
    engine = Engine(
        config,
        GhContextProvider(client),
        GhDispatcher(client, config.ai_marker),
    )
    outcome = engine.run(request, dry_run=state.dry_run)
    _emit(render_outcome(outcome))
    raise typer.Exit(code=outcome.exit_code)


def _request(
    resource: ResourceType,
    operation: Any,
    repo: str | None = None,
    number: str | None = None,
    owner: str | None = None,
    label: str = "number",
    **args: Any,
) -> OperationRequest:
    """Build a request, parsing the number and dropping unset arguments."""
    return OperationRequest(
        resource=resource,
        operation=operation,
        repo=repo,
        number=parse_number(number, label) if number is not None else None,
        owner=owner,
        args={key: value for key, value in args.items() if value is not None},
    )


def _optional_number(value: str | None, label: str) -> int | None:
    if value is None:
        return None
    return parse_number(value, label)


# =============================================================================
# Issue Subcommand Group
# =============================================================================

issue_app = typer.Typer(
    name="issue",
    help="Issue operations.",
    no_args_is_help=True,
)
app.add_typer(issue_app, name="issue")


def _issue(operation: IssueOperation, **kwargs: Any) -> OperationRequest:
    return _request(ResourceType.ISSUE, operation, label="issue number", **kwargs)


@issue_app.command("list")
def issue_list(
    ctx: typer.Context,
    repo: RepoOption = None,
    state: Annotated[Optional[str], typer.Option("--state", "-s", help="open, closed or all.")] = None,
    limit: LimitOption = None,
    label: Annotated[Optional[str], typer.Option("--label", "-l", help="Comma-separated labels.")] = None,
) -> None:
    """List issues."""
    _run(ctx, lambda: _issue(
        IssueOperation.LIST,
        repo=repo,
        state=state,
        limit=_optional_number(limit, "limit"),
        labels=split_list(label),
    ))


@issue_app.command("view")
def issue_view(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    repo: RepoOption = None,
) -> None:
    """View an issue."""
    _run(ctx, lambda: _issue(IssueOperation.VIEW, repo=repo, number=number))


@issue_app.command("create")
def issue_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", help="Issue title.")],
    body: BodyOption = None,
    label: Annotated[Optional[str], typer.Option("--label", "-l", help="Comma-separated labels.")] = None,
    assignee: Annotated[Optional[str], typer.Option("--assignee", "-a", help="Comma-separated assignees.")] = None,
    repo: RepoOption = None,
) -> None:
    """Create an issue."""
    _run(ctx, lambda: _issue(
        IssueOperation.CREATE,
        repo=repo,
        title=title,
        body=body,
        labels=split_list(label),
        assignees=split_list(assignee),
    ))


@issue_app.command("edit")
def issue_edit(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="New title.")] = None,
    body: BodyOption = None,
    add_label: Annotated[Optional[str], typer.Option("--add-label", help="Comma-separated labels to add.")] = None,
    remove_label: Annotated[Optional[str], typer.Option("--remove-label", help="Comma-separated labels to remove.")] = None,
    add_assignee: Annotated[Optional[str], typer.Option("--add-assignee", help="Comma-separated assignees to add.")] = None,
    remove_assignee: Annotated[Optional[str], typer.Option("--remove-assignee", help="Comma-separated assignees to remove.")] = None,
    repo: RepoOption = None,
) -> None:
    """Edit an issue."""
    _run(ctx, lambda: _issue(
        IssueOperation.UPDATE,
        repo=repo,
        number=number,
        title=title,
        body=body,
        add_labels=split_list(add_label),
        remove_labels=split_list(remove_label),
        add_assignees=split_list(add_assignee),
        remove_assignees=split_list(remove_assignee),
    ))


@issue_app.command("close")
def issue_close(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    comment: Annotated[Optional[str], typer.Option("--comment", "-c", help="Leave a closing comment.")] = None,
    repo: RepoOption = None,
) -> None:
    """Close an issue."""
    _run(ctx, lambda: _issue(IssueOperation.CLOSE, repo=repo, number=number, comment=comment))


@issue_app.command("reopen")
def issue_reopen(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    repo: RepoOption = None,
) -> None:
    """Reopen an issue."""
    _run(ctx, lambda: _issue(IssueOperation.REOPEN, repo=repo, number=number))


@issue_app.command("delete")
def issue_delete(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    repo: RepoOption = None,
) -> None:
    """Delete an issue."""
    _run(ctx, lambda: _issue(IssueOperation.DELETE, repo=repo, number=number))


@issue_app.command("comment")
def issue_comment(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    body: Annotated[str, typer.Option("--body", "-b", help="Comment body.")],
    repo: RepoOption = None,
) -> None:
    """Comment on an issue."""
    _run(ctx, lambda: _issue(IssueOperation.COMMENT, repo=repo, number=number, body=body))


@issue_app.command("comments")
def issue_comments(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    repo: RepoOption = None,
) -> None:
    """List the comments of an issue."""
    _run(ctx, lambda: _issue(IssueOperation.LIST_COMMENTS, repo=repo, number=number))


@issue_app.command("edit-comment")
def issue_edit_comment(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    comment_id: Annotated[str, typer.Argument(help="Comment id.")],
    body: Annotated[str, typer.Option("--body", "-b", help="New comment body.")],
    repo: RepoOption = None,
) -> None:
    """Edit a comment on an issue."""
    _run(ctx, lambda: _issue(
        IssueOperation.COMMENT_EDIT,
        repo=repo,
        number=number,
        comment_id=parse_number(comment_id, "comment id"),
        body=body,
    ))


@issue_app.command("delete-comment")
def issue_delete_comment(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number.")],
    comment_id: Annotated[str, typer.Argument(help="Comment id.")],
    repo: RepoOption = None,
) -> None:
    """Delete a comment on an issue."""
    _run(ctx, lambda: _issue(
        IssueOperation.COMMENT_DELETE,
        repo=repo,
        number=number,
        comment_id=parse_number(comment_id, "comment id"),
    ))


sub_issue_app = typer.Typer(
    name="sub-issue",
    help="Manage sub-issues.",
    no_args_is_help=True,
)
issue_app.add_typer(sub_issue_app, name="sub-issue")


def _linked(operation: IssueOperation, repo: str | None, number: str, ref: str) -> OperationRequest:
    request = _issue(operation, repo=repo, number=number)
    return OperationRequest(
        resource=request.resource,
        operation=request.operation,
        repo=request.repo,
        number=request.number,
        related=parse_issue_ref(ref),
    )


@sub_issue_app.command("add")
def sub_issue_add(
    ctx: typer.Context,
    parent: Annotated[str, typer.Argument(help="Parent issue number.")],
    child: Annotated[str, typer.Argument(help="Child issue: number or owner/repo#number.")],
    repo: RepoOption = None,
) -> None:
    """Add a sub-issue to a parent issue."""
    _run(ctx, lambda: _linked(IssueOperation.SUB_ISSUE_ADD, repo, parent, child))


@sub_issue_app.command("remove")
def sub_issue_remove(
    ctx: typer.Context,
    parent: Annotated[str, typer.Argument(help="Parent issue number.")],
    child: Annotated[str, typer.Argument(help="Child issue: number or owner/repo#number.")],
    repo: RepoOption = None,
) -> None:
    """Remove a sub-issue from a parent issue."""
    _run(ctx, lambda: _linked(IssueOperation.SUB_ISSUE_REMOVE, repo, parent, child))


dependency_app = typer.Typer(
    name="dependency",
    help="Manage blocked-by relationships.",
    no_args_is_help=True,
)
issue_app.add_typer(dependency_app, name="dependency")


@dependency_app.command("add")
def dependency_add(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number that is blocked.")],
    blocked_by: Annotated[str, typer.Argument(help="Blocking issue: number or owner/repo#number.")],
    repo: RepoOption = None,
) -> None:
    """Mark an issue as blocked by another issue."""
    _run(ctx, lambda: _linked(IssueOperation.DEPENDENCY_ADD, repo, number, blocked_by))


@dependency_app.command("remove")
def dependency_remove(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Issue number that is blocked.")],
    blocked_by: Annotated[str, typer.Argument(help="Blocking issue: number or owner/repo#number.")],
    repo: RepoOption = None,
) -> None:
    """Remove a blocked-by relationship."""
    _run(ctx, lambda: _linked(IssueOperation.DEPENDENCY_REMOVE, repo, number, blocked_by))


# =============================================================================
# Pull Request Subcommand Group
# =============================================================================

pr_app = typer.Typer(
    name="pr",
    help="Pull request operations.",
    no_args_is_help=True,
)
app.add_typer(pr_app, name="pr")


def _pr(operation: PrOperation, **kwargs: Any) -> OperationRequest:
    return _request(ResourceType.PR, operation, label="pull request number", **kwargs)


@pr_app.command("list")
def pr_list(
    ctx: typer.Context,
    repo: RepoOption = None,
    state: Annotated[Optional[str], typer.Option("--state", "-s", help="open, closed, merged or all.")] = None,
    limit: LimitOption = None,
    label: Annotated[Optional[str], typer.Option("--label", "-l", help="Comma-separated labels.")] = None,
    base: Annotated[Optional[str], typer.Option("--base", "-B", help="Filter by base branch.")] = None,
) -> None:
    """List pull requests."""
    _run(ctx, lambda: _pr(
        PrOperation.LIST,
        repo=repo,
        state=state,
        limit=_optional_number(limit, "limit"),
        labels=split_list(label),
        base=base,
    ))


@pr_app.command("view")
def pr_view(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    repo: RepoOption = None,
) -> None:
    """View a pull request."""
    _run(ctx, lambda: _pr(PrOperation.VIEW, repo=repo, number=number))


@pr_app.command("create")
def pr_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", help="Pull request title.")],
    body: BodyOption = None,
    base: Annotated[Optional[str], typer.Option("--base", "-B", help="Base branch.")] = None,
    head: Annotated[Optional[str], typer.Option("--head", "-H", help="Head branch.")] = None,
    draft: Annotated[bool, typer.Option("--draft", "-d", help="Open as a draft.")] = False,
    label: Annotated[Optional[str], typer.Option("--label", "-l", help="Comma-separated labels.")] = None,
    assignee: Annotated[Optional[str], typer.Option("--assignee", "-a", help="Comma-separated assignees.")] = None,
    repo: RepoOption = None,
) -> None:
    """Create a pull request."""
    _run(ctx, lambda: _pr(
        PrOperation.CREATE,
        repo=repo,
        title=title,
        body=body,
        base=base,
        head=head,
        draft=draft,
        labels=split_list(label),
        assignees=split_list(assignee),
    ))


@pr_app.command("edit")
def pr_edit(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="New title.")] = None,
    body: BodyOption = None,
    base: Annotated[Optional[str], typer.Option("--base", "-B", help="New base branch.")] = None,
    add_label: Annotated[Optional[str], typer.Option("--add-label", help="Comma-separated labels to add.")] = None,
    remove_label: Annotated[Optional[str], typer.Option("--remove-label", help="Comma-separated labels to remove.")] = None,
    add_assignee: Annotated[Optional[str], typer.Option("--add-assignee", help="Comma-separated assignees to add.")] = None,
    remove_assignee: Annotated[Optional[str], typer.Option("--remove-assignee", help="Comma-separated assignees to remove.")] = None,
    repo: RepoOption = None,
) -> None:
    """Edit a pull request."""
    _run(ctx, lambda: _pr(
        PrOperation.UPDATE,
        repo=repo,
        number=number,
        title=title,
        body=body,
        base=base,
        add_labels=split_list(add_label),
        remove_labels=split_list(remove_label),
        add_assignees=split_list(add_assignee),
        remove_assignees=split_list(remove_assignee),
    ))


@pr_app.command("close")
def pr_close(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    comment: Annotated[Optional[str], typer.Option("--comment", "-c", help="Leave a closing comment.")] = None,
    repo: RepoOption = None,
) -> None:
    """Close a pull request."""
    _run(ctx, lambda: _pr(PrOperation.CLOSE, repo=repo, number=number, comment=comment))


@pr_app.command("reopen")
def pr_reopen(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    repo: RepoOption = None,
) -> None:
    """Reopen a pull request."""
    _run(ctx, lambda: _pr(PrOperation.REOPEN, repo=repo, number=number))


def _merge_method(squash: bool, rebase: bool) -> str:
    if squash and rebase:
        raise InputValidationError(message="Specify only one of --squash and --rebase")
    if squash:
        return "squash"
    if rebase:
        return "rebase"
    return "merge"


@pr_app.command("merge")
def pr_merge(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    squash: Annotated[bool, typer.Option("--squash", "-s", help="Squash the commits.")] = False,
    rebase: Annotated[bool, typer.Option("--rebase", "-r", help="Rebase the commits.")] = False,
    delete_branch: Annotated[bool, typer.Option("--delete-branch", "-d", help="Delete the head branch after merging.")] = False,
    repo: RepoOption = None,
) -> None:
    """Merge a pull request (merge commit unless --squash or --rebase)."""
    _run(ctx, lambda: _pr(
        PrOperation.MERGE,
        repo=repo,
        number=number,
        method=_merge_method(squash, rebase),
        delete_branch=delete_branch or None,
    ))


def _review_action(approve: bool, request_changes: bool, comment: bool) -> str:
    chosen = [
        name
        for name, flag in (
            ("approve", approve),
            ("request-changes", request_changes),
            ("comment", comment),
        )
        if flag
    ]
    if len(chosen) != 1:
        raise InputValidationError(
            message="Specify exactly one of --approve, --request-changes or --comment",
        )
    return chosen[0]


@pr_app.command("review")
def pr_review(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    approve: Annotated[bool, typer.Option("--approve", "-a", help="Approve the pull request.")] = False,
    request_changes: Annotated[bool, typer.Option("--request-changes", "-r", help="Request changes.")] = False,
    comment: Annotated[bool, typer.Option("--comment", "-c", help="Leave a review comment.")] = False,
    body: BodyOption = None,
    repo: RepoOption = None,
) -> None:
    """Review a pull request."""
    _run(ctx, lambda: _pr(
        PrOperation.REVIEW,
        repo=repo,
        number=number,
        action=_review_action(approve, request_changes, comment),
        body=body,
    ))


@pr_app.command("diff")
def pr_diff(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    repo: RepoOption = None,
) -> None:
    """Show the diff of a pull request."""
    _run(ctx, lambda: _pr(PrOperation.DIFF, repo=repo, number=number))


@pr_app.command("checks")
def pr_checks(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    repo: RepoOption = None,
) -> None:
    """Show CI checks of a pull request."""
    _run(ctx, lambda: _pr(PrOperation.CHECKS, repo=repo, number=number))


@pr_app.command("update-branch")
def pr_update_branch(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    rebase: Annotated[bool, typer.Option("--rebase", help="Rebase instead of merging the base branch.")] = False,
    repo: RepoOption = None,
) -> None:
    """Bring a pull request branch up to date with its base."""
    _run(ctx, lambda: _pr(PrOperation.UPDATE_BRANCH, repo=repo, number=number, rebase=rebase or None))


@pr_app.command("comment")
def pr_comment(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    body: Annotated[str, typer.Option("--body", "-b", help="Comment body.")],
    repo: RepoOption = None,
) -> None:
    """Comment on a pull request."""
    _run(ctx, lambda: _pr(PrOperation.COMMENT, repo=repo, number=number, body=body))


@pr_app.command("comments")
def pr_comments(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    repo: RepoOption = None,
) -> None:
    """List the comments of a pull request."""
    _run(ctx, lambda: _pr(PrOperation.LIST_COMMENTS, repo=repo, number=number))


@pr_app.command("edit-comment")
def pr_edit_comment(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    comment_id: Annotated[str, typer.Argument(help="Comment id.")],
    body: Annotated[str, typer.Option("--body", "-b", help="New comment body.")],
    repo: RepoOption = None,
) -> None:
    """Edit a comment on a pull request."""
    _run(ctx, lambda: _pr(
        PrOperation.COMMENT_EDIT,
        repo=repo,
        number=number,
        comment_id=parse_number(comment_id, "comment id"),
        body=body,
    ))


@pr_app.command("delete-comment")
def pr_delete_comment(
    ctx: typer.Context,
    number: Annotated[str, typer.Argument(help="Pull request number.")],
    comment_id: Annotated[str, typer.Argument(help="Comment id.")],
    repo: RepoOption = None,
) -> None:
    """Delete a comment on a pull request."""
    _run(ctx, lambda: _pr(
        PrOperation.COMMENT_DELETE,
        repo=repo,
        number=number,
        comment_id=parse_number(comment_id, "comment id"),
    ))


# =============================================================================
# Search Subcommand Group
# =============================================================================

search_app = typer.Typer(
    name="search",
    help="Search GitHub.",
    no_args_is_help=True,
)
app.add_typer(search_app, name="search")

QueryArgument = Annotated[str, typer.Argument(help="Search query.")]


def _search(
    ctx: typer.Context,
    operation: SearchOperation,
    query: str,
    repo: str | None,
    limit: str | None,
) -> None:
    _run(ctx, lambda: _request(
        ResourceType.SEARCH,
        operation,
        repo=repo,
        query=query,
        limit=_optional_number(limit, "limit"),
    ))


@search_app.command("code")
def search_code(ctx: typer.Context, query: QueryArgument, repo: RepoOption = None, limit: LimitOption = None) -> None:
    """Search code."""
    _search(ctx, SearchOperation.CODE, query, repo, limit)


@search_app.command("issues")
def search_issues(ctx: typer.Context, query: QueryArgument, repo: RepoOption = None, limit: LimitOption = None) -> None:
    """Search issues."""
    _search(ctx, SearchOperation.ISSUES, query, repo, limit)


@search_app.command("prs")
def search_prs(ctx: typer.Context, query: QueryArgument, repo: RepoOption = None, limit: LimitOption = None) -> None:
    """Search pull requests."""
    _search(ctx, SearchOperation.PRS, query, repo, limit)


@search_app.command("repos")
def search_repos(ctx: typer.Context, query: QueryArgument, limit: LimitOption = None) -> None:
    """Search repositories."""
    _search(ctx, SearchOperation.REPOS, query, None, limit)


@search_app.command("commits")
def search_commits(ctx: typer.Context, query: QueryArgument, repo: RepoOption = None, limit: LimitOption = None) -> None:
    """Search commits."""
    _search(ctx, SearchOperation.COMMITS, query, repo, limit)


# =============================================================================
# Project Subcommand Group
# =============================================================================

project_app = typer.Typer(
    name="project",
    help="GitHub Projects operations.",
    no_args_is_help=True,
)
app.add_typer(project_app, name="project")

ProjectNumber = Annotated[str, typer.Argument(help="Project number.")]
ItemIdOption = Annotated[str, typer.Option("--id", help="Item id.")]


def _project(operation: ProjectOperation, **kwargs: Any) -> OperationRequest:
    return _request(ResourceType.PROJECT, operation, label="project number", **kwargs)


@project_app.command("list")
def project_list(ctx: typer.Context, owner: OwnerOption = None) -> None:
    """List projects."""
    _run(ctx, lambda: _project(ProjectOperation.LIST, owner=owner))


@project_app.command("view")
def project_view(ctx: typer.Context, number: ProjectNumber, owner: OwnerOption = None) -> None:
    """View a project."""
    _run(ctx, lambda: _project(ProjectOperation.VIEW, number=number, owner=owner))


@project_app.command("create")
def project_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", help="Project title.")],
    owner: OwnerOption = None,
) -> None:
    """Create a project."""
    _run(ctx, lambda: _project(ProjectOperation.CREATE, owner=owner, title=title))


@project_app.command("edit")
def project_edit(
    ctx: typer.Context,
    number: ProjectNumber,
    title: Annotated[Optional[str], typer.Option("--title", help="New title.")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="New description.")] = None,
    visibility: Annotated[Optional[str], typer.Option("--visibility", help="PUBLIC or PRIVATE.")] = None,
    owner: OwnerOption = None,
) -> None:
    """Edit a project."""
    _run(ctx, lambda: _project(
        ProjectOperation.EDIT,
        number=number,
        owner=owner,
        title=title,
        description=description,
        visibility=visibility,
    ))


@project_app.command("close")
def project_close(ctx: typer.Context, number: ProjectNumber, owner: OwnerOption = None) -> None:
    """Close a project."""
    _run(ctx, lambda: _project(ProjectOperation.CLOSE, number=number, owner=owner))


@project_app.command("delete")
def project_delete(ctx: typer.Context, number: ProjectNumber, owner: OwnerOption = None) -> None:
    """Delete a project."""
    _run(ctx, lambda: _project(ProjectOperation.DELETE, number=number, owner=owner))


@project_app.command("field-list")
def project_field_list(ctx: typer.Context, number: ProjectNumber, owner: OwnerOption = None) -> None:
    """List the fields of a project."""
    _run(ctx, lambda: _project(ProjectOperation.FIELD_LIST, number=number, owner=owner))


@project_app.command("field-create")
def project_field_create(
    ctx: typer.Context,
    number: ProjectNumber,
    name: Annotated[str, typer.Option("--name", help="Field name.")],
    data_type: Annotated[str, typer.Option("--data-type", help="TEXT, SINGLE_SELECT, DATE or NUMBER.")],
    owner: OwnerOption = None,
) -> None:
    """Create a project field."""
    _run(ctx, lambda: _project(
        ProjectOperation.FIELD_CREATE,
        number=number,
        owner=owner,
        name=name,
        data_type=data_type,
    ))


@project_app.command("field-delete")
def project_field_delete(
    ctx: typer.Context,
    number: ProjectNumber,
    field_id: Annotated[str, typer.Option("--id", help="Field id.")],
    owner: OwnerOption = None,
) -> None:
    """Delete a project field."""
    _run(ctx, lambda: _project(ProjectOperation.FIELD_DELETE, number=number, owner=owner, field_id=field_id))


@project_app.command("item-list")
def project_item_list(ctx: typer.Context, number: ProjectNumber, owner: OwnerOption = None) -> None:
    """List the items of a project."""
    _run(ctx, lambda: _project(ProjectOperation.ITEM_LIST, number=number, owner=owner))


@project_app.command("item-add")
def project_item_add(
    ctx: typer.Context,
    number: ProjectNumber,
    url: Annotated[str, typer.Option("--url", help="URL of the issue or pull request to add.")],
    owner: OwnerOption = None,
) -> None:
    """Add an issue or pull request to a project."""
    _run(ctx, lambda: _project(ProjectOperation.ITEM_ADD, number=number, owner=owner, url=url))


@project_app.command("item-create")
def project_item_create(
    ctx: typer.Context,
    number: ProjectNumber,
    title: Annotated[str, typer.Option("--title", help="Draft item title.")],
    body: BodyOption = None,
    owner: OwnerOption = None,
) -> None:
    """Create a draft item in a project."""
    _run(ctx, lambda: _project(ProjectOperation.ITEM_CREATE, number=number, owner=owner, title=title, body=body))


def _field_number(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        float(value)
    except ValueError:
        raise InputValidationError(message=f"Invalid number value: '{value}'", value=value) from None
    return value


@project_app.command("item-edit")
def project_item_edit(
    ctx: typer.Context,
    number: ProjectNumber,
    item_id: ItemIdOption,
    field_id: Annotated[str, typer.Option("--field-id", help="Field id.")],
    project_id: Annotated[Optional[str], typer.Option("--project-id", help="Project node id (defaults to the number).")] = None,
    text: Annotated[Optional[str], typer.Option("--text", help="Text value.")] = None,
    number_value: Annotated[Optional[str], typer.Option("--number", help="Number value.")] = None,
    date: Annotated[Optional[str], typer.Option("--date", help="Date value (YYYY-MM-DD).")] = None,
    single_select_option_id: Annotated[Optional[str], typer.Option("--single-select-option-id", help="Single select option id.")] = None,
    iteration_id: Annotated[Optional[str], typer.Option("--iteration-id", help="Iteration id.")] = None,
    owner: OwnerOption = None,
) -> None:
    """Edit a field value of a project item."""
    _run(ctx, lambda: _project(
        ProjectOperation.ITEM_EDIT,
        number=number,
        owner=owner,
        item_id=item_id,
        field_id=field_id,
        project_id=project_id,
        text=text,
        number_value=_field_number(number_value),
        date=date,
        single_select_option_id=single_select_option_id,
        iteration_id=iteration_id,
    ))


@project_app.command("item-delete")
def project_item_delete(ctx: typer.Context, number: ProjectNumber, item_id: ItemIdOption, owner: OwnerOption = None) -> None:
    """Delete an item from a project."""
    _run(ctx, lambda: _project(ProjectOperation.ITEM_DELETE, number=number, owner=owner, item_id=item_id))


@project_app.command("item-archive")
def project_item_archive(ctx: typer.Context, number: ProjectNumber, item_id: ItemIdOption, owner: OwnerOption = None) -> None:
    """Archive an item of a project."""
    _run(ctx, lambda: _project(ProjectOperation.ITEM_ARCHIVE, number=number, owner=owner, item_id=item_id))


# =============================================================================
# Config Subcommand Group
# =============================================================================

config_app = typer.Typer(
    name="config",
    help="Create, show and validate the configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


@config_app.command("init")
def config_init(ctx: typer.Context) -> None:
    """
    Write a commented config template.

    selfUserId is filled in from the logged-in gh user when available.
    Refuses to overwrite an existing file.
    """
    state = _state(ctx)
    try:
        self_user_id = GhClient().current_login()
    except GhCliError:
        self_user_id = ""

    try:
        path = init_config(state.config_path, self_user_id)
    except SafeGhError as e:
        _fail(e)

    _emit(dumps({"success": True, "path": str(path)}))


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the loaded configuration as tables."""
    state = _state(ctx)
    try:
        config = load_config(state.config_path)
    except SafeGhError as e:
        _fail(e)

    print_config(console, config, str(resolve_config_path(state.config_path)))


@config_app.command("validate")
def config_validate(ctx: typer.Context) -> None:
    """Validate the configuration file."""
    state = _state(ctx)
    path = resolve_config_path(state.config_path)
    try:
        config = load_config(path)
    except SafeGhError as e:
        _fail(e)

    _emit(dumps({
        "valid": True,
        "path": str(path),
        "rules": {resource.value: len(config.rules_for(resource)) for resource in ResourceType},
    }))


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    """Print the config path in use."""
    _emit(str(resolve_config_path(_state(ctx).config_path)))


# =============================================================================
# Doctor
# =============================================================================


@app.command()
def doctor(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
) -> None:
    """
    Check the environment.

    Verifies that:
    - the gh CLI is installed
    - the config file loads
    - selfUserId is set (otherwise every "self" condition is false)

    Example:
        $ safe-gh doctor
    """
    state = _state(ctx)
    client = GhClient()
    checks: list[DoctorCheck] = []

    gh_ok = client.available()
    checks.append(DoctorCheck(
        name="gh CLI",
        ok=gh_ok,
        value=client.executable,
        message="Found on PATH" if gh_ok else "Not found. Install from https://cli.github.com",
    ))

    path = resolve_config_path(state.config_path)
    config = None
    try:
        config = load_config(path)
        checks.append(DoctorCheck(name="Config", ok=True, value=str(path), message="Loaded"))
    except SafeGhError as e:
        checks.append(DoctorCheck(name="Config", ok=False, value=str(path), message=e.message))

    self_ok = config is not None and bool(config.self_user_id)
    checks.append(DoctorCheck(
        name="selfUserId",
        ok=self_ok,
        value=(config.self_user_id or "") if config else "",
        message="Set" if self_ok else "Not set; \"self\" conditions will never match",
    ))

    all_ok = all(check.ok for check in checks)
    if json_output:
        _emit(dumps({
            "ok": all_ok,
            "version": __version__,
            "checks": [check.to_dict() for check in checks],
        }))
    else:
        print_doctor(console, __version__, checks)

    raise typer.Exit(code=0 if all_ok else 1)


if __name__ == "__main__":
    app()
