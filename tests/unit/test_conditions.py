"""
Unit tests for condition evaluation.

Tests cover:
- createdBy / assignee "self" predicates, including the unset selfUserId case
- Label include (OR) and exclude semantics
- repos / owners / titlePrefix / parentIssue
- PR draft, branch glob and reviewDecision predicates
- Search and project conditions
"""

import pytest

from safegh.policy.conditions import evaluate_condition, match_branch_pattern, owner_of
from safegh.schema import (
    IssueCondition,
    LabelCondition,
    OperationContext,
    ParentIssueCondition,
    ParentIssueContext,
    PrCondition,
    ProjectCondition,
    SearchCondition,
)


# =============================================================================
# Branch Patterns
# =============================================================================


class TestMatchBranchPattern:
    """Tests for the "*" glob used by baseBranch/headBranch."""

    @pytest.mark.parametrize(
        ("branch", "pattern", "expected"),
        [
            ("feature/abc", "feature/*", True),
            ("feature/", "feature/*", True),
            ("feature/a/b", "feature/*", True),
            ("hotfix/abc", "feature/*", False),
            ("main", "main", True),
            ("main2", "main", False),
            ("release-1.2", "release-*", True),
            ("my-feature-x", "*feature*", True),
            ("release.1", "release?1", False),
        ],
    )
    def test_patterns(self, branch: str, pattern: str, expected: bool) -> None:
        assert match_branch_pattern(branch, pattern) is expected

    def test_regex_characters_are_literal(self) -> None:
        """Dots and brackets in patterns are not regex syntax."""
        assert match_branch_pattern("v1.0", "v1.0") is True
        assert match_branch_pattern("v1x0", "v1.*") is False
        assert match_branch_pattern("v1.0-rc", "v1.*") is True


# =============================================================================
# Self Predicates
# =============================================================================


class TestSelfPredicates:
    """createdBy and assignee "self" checks."""

    def test_created_by_self_matches_author(self) -> None:
        condition = IssueCondition(created_by="self")
        context = OperationContext(issue_author="bot")
        assert evaluate_condition(condition, context, "bot") is True

    def test_created_by_self_other_author(self) -> None:
        condition = IssueCondition(created_by="self")
        context = OperationContext(issue_author="alice")
        assert evaluate_condition(condition, context, "bot") is False

    def test_created_by_self_without_self_user_id(self) -> None:
        """Fail closed when selfUserId is not configured."""
        condition = IssueCondition(created_by="self")
        context = OperationContext(issue_author="")
        assert evaluate_condition(condition, context, None) is False
        assert evaluate_condition(condition, context, "") is False

    def test_created_by_self_unknown_author(self) -> None:
        condition = IssueCondition(created_by="self")
        assert evaluate_condition(condition, OperationContext(), "bot") is False

    def test_created_by_self_uses_pr_author(self) -> None:
        condition = PrCondition(created_by="self")
        context = OperationContext(pr_author="bot")
        assert evaluate_condition(condition, context, "bot") is True

    def test_assignee_self(self) -> None:
        condition = IssueCondition(assignee="self")
        assert evaluate_condition(
            condition, OperationContext(assignees=["alice", "bot"]), "bot"
        ) is True
        assert evaluate_condition(
            condition, OperationContext(assignees=["alice"]), "bot"
        ) is False
        assert evaluate_condition(
            condition, OperationContext(assignees=["bot"]), None
        ) is False


# =============================================================================
# Labels and Scope
# =============================================================================


class TestLabels:
    """Label include/exclude semantics."""

    def test_include_is_or(self) -> None:
        condition = IssueCondition(labels=LabelCondition(include=["bug", "chore"]))
        assert evaluate_condition(condition, OperationContext(labels=["chore"]), None) is True
        assert evaluate_condition(condition, OperationContext(labels=["docs"]), None) is False

    def test_exclude_any_overlap_fails(self) -> None:
        condition = IssueCondition(labels=LabelCondition(exclude=["protected"]))
        assert evaluate_condition(condition, OperationContext(labels=["bug"]), None) is True
        assert evaluate_condition(
            condition, OperationContext(labels=["bug", "protected"]), None
        ) is False

    def test_empty_include_is_vacuous(self) -> None:
        condition = IssueCondition(labels=LabelCondition(include=[]))
        assert evaluate_condition(condition, OperationContext(labels=[]), None) is True

    def test_include_with_unknown_labels(self) -> None:
        condition = IssueCondition(labels=LabelCondition(include=["bug"]))
        assert evaluate_condition(condition, OperationContext(), None) is False


class TestScope:
    """repos, owners and titlePrefix predicates."""

    def test_repos_exact_match(self) -> None:
        condition = IssueCondition(repos=["my-org/app"])
        assert evaluate_condition(condition, OperationContext(repo="my-org/app"), None) is True
        assert evaluate_condition(condition, OperationContext(repo="my-org/other"), None) is False
        assert evaluate_condition(condition, OperationContext(), None) is False

    def test_owners_uses_first_segment(self) -> None:
        condition = PrCondition(owners=["my-org"])
        assert evaluate_condition(condition, OperationContext(repo="my-org/app"), None) is True
        assert evaluate_condition(condition, OperationContext(repo="evil/app"), None) is False

    def test_title_prefix(self) -> None:
        condition = IssueCondition(title_prefix="[bot]")
        assert evaluate_condition(
            condition, OperationContext(issue_title="[bot] cleanup"), None
        ) is True
        assert evaluate_condition(
            condition, OperationContext(issue_title="cleanup [bot]"), None
        ) is False
        assert evaluate_condition(condition, OperationContext(), None) is False

    @pytest.mark.parametrize(
        "labels,repo,expected",
        [
            (["x"], "o/r", True),
            (["y"], "o/r", False),
            (["x"], "p/r", False),
            (["y"], "p/r", False),
        ],
    )
    def test_predicates_are_anded(self, labels: list[str], repo: str, expected: bool) -> None:
        condition = IssueCondition(labels=LabelCondition(include=["x"]), owners=["o"])
        context = OperationContext(repo=repo, labels=labels)
        assert evaluate_condition(condition, context, None) is expected

    def test_empty_condition_matches(self) -> None:
        assert evaluate_condition(IssueCondition(), OperationContext(), None) is True

    def test_owner_of_falls_back_to_project_owner(self) -> None:
        assert owner_of(OperationContext(repo="a/b", project_owner="c")) == "a"
        assert owner_of(OperationContext(project_owner="c")) == "c"
        assert owner_of(OperationContext()) is None


# =============================================================================
# Parent Issue
# =============================================================================


class TestParentIssue:
    """parentIssue nested condition."""

    @pytest.fixture
    def context(self) -> OperationContext:
        return OperationContext(
            repo="my-org/app",
            parent_issue=ParentIssueContext(
                number=7,
                title="Epic: billing",
                labels=["epic"],
                assignees=["bot"],
            ),
        )

    def test_all_fields_match(self, context: OperationContext) -> None:
        condition = IssueCondition(
            parent_issue=ParentIssueCondition(
                number=7,
                assignee="self",
                labels=LabelCondition(include=["epic"]),
                title_prefix="Epic:",
            )
        )
        assert evaluate_condition(condition, context, "bot") is True

    def test_number_mismatch(self, context: OperationContext) -> None:
        condition = IssueCondition(parent_issue=ParentIssueCondition(number=8))
        assert evaluate_condition(condition, context, "bot") is False

    def test_no_parent_never_matches(self) -> None:
        condition = IssueCondition(parent_issue=ParentIssueCondition())
        assert evaluate_condition(condition, OperationContext(), "bot") is False

    def test_parent_assignee_self_without_self_user_id(self, context: OperationContext) -> None:
        condition = IssueCondition(parent_issue=ParentIssueCondition(assignee="self"))
        assert evaluate_condition(condition, context, None) is False


# =============================================================================
# Pull Request Predicates
# =============================================================================


class TestPrPredicates:
    """draft, branch and reviewDecision predicates."""

    def test_draft(self) -> None:
        condition = PrCondition(draft=True)
        assert evaluate_condition(condition, OperationContext(draft=True), None) is True
        assert evaluate_condition(condition, OperationContext(draft=False), None) is False
        assert evaluate_condition(condition, OperationContext(), None) is False

    def test_draft_false_requires_known_value(self) -> None:
        condition = PrCondition(draft=False)
        assert evaluate_condition(condition, OperationContext(draft=False), None) is True
        assert evaluate_condition(condition, OperationContext(), None) is False

    def test_head_branch_any_pattern(self) -> None:
        condition = PrCondition(head_branch=["feature/*", "fix/*"])
        assert evaluate_condition(condition, OperationContext(head_branch="fix/x"), None) is True
        assert evaluate_condition(condition, OperationContext(head_branch="main"), None) is False
        assert evaluate_condition(condition, OperationContext(), None) is False

    def test_base_branch(self) -> None:
        condition = PrCondition(base_branch=["main"])
        assert evaluate_condition(condition, OperationContext(base_branch="main"), None) is True
        assert evaluate_condition(condition, OperationContext(base_branch="dev"), None) is False

    def test_review_decision(self) -> None:
        condition = PrCondition.model_validate({"reviewDecision": "APPROVED"})
        assert evaluate_condition(
            condition, OperationContext(review_decision="APPROVED"), None
        ) is True
        assert evaluate_condition(
            condition, OperationContext(review_decision="REVIEW_REQUIRED"), None
        ) is False
        assert evaluate_condition(condition, OperationContext(), None) is False


# =============================================================================
# Search and Project
# =============================================================================


class TestSearchAndProject:
    """Search and project condition variants."""

    def test_search_owners(self) -> None:
        condition = SearchCondition(owners=["my-org"])
        assert evaluate_condition(condition, OperationContext(repo="my-org/app"), None) is True
        assert evaluate_condition(condition, OperationContext(), None) is False

    def test_search_repos(self) -> None:
        condition = SearchCondition(repos=["my-org/app"])
        assert evaluate_condition(condition, OperationContext(repo="my-org/app"), None) is True
        assert evaluate_condition(condition, OperationContext(repo="my-org/x"), None) is False

    def test_project_owner_and_numbers(self) -> None:
        condition = ProjectCondition(owner=["my-org"], project_numbers=[1, 2])
        assert evaluate_condition(
            condition, OperationContext(project_owner="my-org", project_number=2), None
        ) is True
        assert evaluate_condition(
            condition, OperationContext(project_owner="my-org", project_number=3), None
        ) is False
        assert evaluate_condition(
            condition, OperationContext(project_owner="other", project_number=1), None
        ) is False

    def test_project_number_unknown(self) -> None:
        condition = ProjectCondition(project_numbers=[1])
        assert evaluate_condition(condition, OperationContext(project_owner="my-org"), None) is False

    def test_unrecognized_variant_is_false(self) -> None:
        assert evaluate_condition("not a condition", OperationContext(), None) is False  # type: ignore[arg-type]
