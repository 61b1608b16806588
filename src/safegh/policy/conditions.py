"""
Condition evaluation for safe-gh rules.

A condition is a set of AND-combined predicates over an OperationContext.
Every field that is present must hold; absent fields impose nothing.

Each resource has its own condition model. evaluate_condition() selects the
evaluator for the variant once and the per-variant evaluators never inspect
shapes at runtime.

Fail-closed rules:
    - "self" predicates are False when selfUserId is not configured
    - A predicate over a context field that is unknown (None) is False
    - An unrecognized condition variant is False

Nothing in this module raises.
"""

import re

from safegh.schema import (
    Condition,
    IssueCondition,
    LabelCondition,
    OperationContext,
    ParentIssueCondition,
    PrCondition,
    ProjectCondition,
    SearchCondition,
)


def evaluate_condition(
    condition: Condition,
    context: OperationContext,
    self_user_id: str | None,
) -> bool:
    """
    Evaluate a rule condition against a context.

    Args:
        condition: The rule's condition (one of the per-resource variants)
        context: Snapshot of the target resource
        self_user_id: Login "self" refers to, or None if not configured

    Returns:
        True if every predicate in the condition holds
    """
    if isinstance(condition, IssueCondition):
        return _evaluate_issue(condition, context, self_user_id)
    if isinstance(condition, PrCondition):
        return _evaluate_pr(condition, context, self_user_id)
    if isinstance(condition, SearchCondition):
        return _evaluate_search(condition, context)
    if isinstance(condition, ProjectCondition):
        return _evaluate_project(condition, context)
    return False


# =============================================================================
# Per-variant evaluators
# =============================================================================


def _evaluate_issue(
    condition: IssueCondition,
    context: OperationContext,
    self_user_id: str | None,
) -> bool:
    if not _check_common(condition, context, self_user_id):
        return False

    if condition.title_prefix is not None:
        if context.issue_title is None:
            return False
        if not context.issue_title.startswith(condition.title_prefix):
            return False

    if condition.parent_issue is not None:
        if not _check_parent(condition.parent_issue, context, self_user_id):
            return False

    return True


def _evaluate_pr(
    condition: PrCondition,
    context: OperationContext,
    self_user_id: str | None,
) -> bool:
    if not _check_common(condition, context, self_user_id):
        return False

    if condition.draft is not None:
        if context.draft is None or context.draft != condition.draft:
            return False

    if condition.base_branch:
        if not _any_branch_matches(context.base_branch, condition.base_branch):
            return False

    if condition.head_branch:
        if not _any_branch_matches(context.head_branch, condition.head_branch):
            return False

    if condition.review_decision is not None:
        if context.review_decision != condition.review_decision.value:
            return False

    return True


def _evaluate_search(condition: SearchCondition, context: OperationContext) -> bool:
    if condition.repos:
        if context.repo is None or context.repo not in condition.repos:
            return False

    if condition.owners:
        owner = owner_of(context)
        if not owner or owner not in condition.owners:
            return False

    return True


def _evaluate_project(condition: ProjectCondition, context: OperationContext) -> bool:
    if condition.owner:
        if not context.project_owner or context.project_owner not in condition.owner:
            return False

    if condition.project_numbers:
        if context.project_number is None:
            return False
        if context.project_number not in condition.project_numbers:
            return False

    return True


# =============================================================================
# Shared predicates
# =============================================================================


def _check_common(
    condition: IssueCondition | PrCondition,
    context: OperationContext,
    self_user_id: str | None,
) -> bool:
    """Predicates shared by issue and pull request conditions."""
    if condition.created_by == "self":
        author = context.author
        if not self_user_id or not author or author != self_user_id:
            return False

    if condition.assignee == "self":
        if not _is_self_in(context.assignees, self_user_id):
            return False

    if condition.labels is not None:
        if not _check_labels(condition.labels, context.labels):
            return False

    if condition.repos:
        if context.repo is None or context.repo not in condition.repos:
            return False

    if condition.owners:
        owner = owner_of(context)
        if not owner or owner not in condition.owners:
            return False

    return True


def _check_parent(
    condition: ParentIssueCondition,
    context: OperationContext,
    self_user_id: str | None,
) -> bool:
    """Apply a parentIssue condition; no parent means no match."""
    parent = context.parent_issue
    if parent is None:
        return False

    if condition.number is not None and parent.number != condition.number:
        return False

    if condition.assignee == "self":
        if not _is_self_in(parent.assignees, self_user_id):
            return False

    if condition.labels is not None:
        if not _check_labels(condition.labels, parent.labels):
            return False

    if condition.title_prefix is not None:
        if not parent.title.startswith(condition.title_prefix):
            return False

    return True


def _check_labels(condition: LabelCondition, labels: list[str] | None) -> bool:
    """
    Check include/exclude label lists.

    include is an OR and is vacuously true when empty; exclude fails on any
    overlap.
    """
    present = set(labels or [])

    if condition.include:
        if present.isdisjoint(condition.include):
            return False

    if condition.exclude:
        if not present.isdisjoint(condition.exclude):
            return False

    return True


def _is_self_in(logins: list[str] | None, self_user_id: str | None) -> bool:
    if not self_user_id:
        return False
    return self_user_id in (logins or [])


def _any_branch_matches(branch: str | None, patterns: list[str]) -> bool:
    if branch is None:
        return False
    return any(match_branch_pattern(branch, pattern) for pattern in patterns)


# =============================================================================
# Helpers
# =============================================================================


def match_branch_pattern(branch: str, pattern: str) -> bool:
    """
    Match a branch name against a pattern.

    "*" matches any run of characters (including none and including "/").
    Everything else is literal. Matching is anchored and case-sensitive.

    Examples:
        feature/abc matches feature/*
        feature/ matches feature/*
        hotfix/abc does not match feature/*
        main matches main only
    """
    if "*" not in pattern:
        return branch == pattern
    regex = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, branch) is not None


def owner_of(context: OperationContext) -> str | None:
    """
    Owner of the context's target: first segment of repo, else projectOwner.
    """
    if context.repo:
        owner = context.repo.split("/")[0]
        return owner or None
    return context.project_owner or None
