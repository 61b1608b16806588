"""
Schema definitions for safe-gh.

This module defines all the Pydantic models used throughout safe-gh:
- ResourceType and the per-resource operation enums
- Conditions: one model per resource, AND-combined predicates
- Rules: name + operations + optional condition + optional enforce
- Config: ordered rule lists per resource plus global settings
- OperationContext: point-in-time snapshot a decision is made against
- Decision: the allow/deny verdict

Design Decisions:
    - Models are frozen; a loaded Config and a computed Decision never change
    - Unknown keys are rejected (extra="forbid") so typos fail loudly
    - Field names are snake_case; camelCase aliases match the config file
      and the JSON payloads
    - Rules and conditions are one class per resource (tagged variants)
      rather than one shape probed at runtime
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class ResourceType(str, Enum):
    """The four resource domains safe-gh mediates."""

    ISSUE = "issue"
    PR = "pr"
    SEARCH = "search"
    PROJECT = "project"


class IssueOperation(str, Enum):
    LIST = "list"
    VIEW = "view"
    LIST_COMMENTS = "list:comments"
    CREATE = "create"
    UPDATE = "update"
    CLOSE = "close"
    REOPEN = "reopen"
    DELETE = "delete"
    COMMENT = "comment"
    COMMENT_EDIT = "comment:edit"
    COMMENT_DELETE = "comment:delete"
    SUB_ISSUE_ADD = "sub-issue:add"
    SUB_ISSUE_REMOVE = "sub-issue:remove"
    DEPENDENCY_ADD = "dependency:add"
    DEPENDENCY_REMOVE = "dependency:remove"


class PrOperation(str, Enum):
    LIST = "list"
    VIEW = "view"
    LIST_COMMENTS = "list:comments"
    CREATE = "create"
    UPDATE = "update"
    CLOSE = "close"
    REOPEN = "reopen"
    MERGE = "merge"
    REVIEW = "review"
    DIFF = "diff"
    CHECKS = "checks"
    UPDATE_BRANCH = "update-branch"
    COMMENT = "comment"
    COMMENT_EDIT = "comment:edit"
    COMMENT_DELETE = "comment:delete"


class SearchOperation(str, Enum):
    CODE = "code"
    ISSUES = "issues"
    PRS = "prs"
    REPOS = "repos"
    COMMITS = "commits"


class ProjectOperation(str, Enum):
    LIST = "list"
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    CLOSE = "close"
    DELETE = "delete"
    FIELD_LIST = "field:list"
    FIELD_CREATE = "field:create"
    FIELD_DELETE = "field:delete"
    ITEM_LIST = "item:list"
    ITEM_ADD = "item:add"
    ITEM_CREATE = "item:create"
    ITEM_EDIT = "item:edit"
    ITEM_DELETE = "item:delete"
    ITEM_ARCHIVE = "item:archive"


Operation = IssueOperation | PrOperation | SearchOperation | ProjectOperation


class ReviewDecision(str, Enum):
    """Review state of a pull request as reported by GitHub."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


class DefaultPermission(str, Enum):
    """
    Fallback applied when no rule matches.

    DENY denies everything. READ allows only the fixed read operation names.
    """

    DENY = "deny"
    READ = "read"


# =============================================================================
# Condition Models
# =============================================================================

_MODEL_CONFIG = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class LabelCondition(BaseModel):
    """
    Label predicate.

    Attributes:
        include: At least one of these labels must be present (OR)
        exclude: None of these labels may be present
    """

    model_config = _MODEL_CONFIG

    include: list[str] | None = None
    exclude: list[str] | None = None


class ParentIssueCondition(BaseModel):
    """Predicate over the parent issue of the target issue."""

    model_config = _MODEL_CONFIG

    number: int | None = None
    assignee: Literal["self"] | None = None
    labels: LabelCondition | None = None
    title_prefix: str | None = Field(default=None, alias="titlePrefix")


class IssueCondition(BaseModel):
    """
    Condition for issue rules. All present fields must hold.

    Attributes:
        created_by: "self" requires the issue author to be selfUserId
        assignee: "self" requires selfUserId among the assignees
        labels: Include/exclude label predicate
        repos: Exact owner/repo allow list
        owners: Owner allow list (first segment of repo)
        title_prefix: Issue title must start with this string
        parent_issue: Nested predicate over the parent issue
    """

    model_config = _MODEL_CONFIG

    created_by: Literal["self"] | None = Field(default=None, alias="createdBy")
    assignee: Literal["self"] | None = None
    labels: LabelCondition | None = None
    repos: list[str] | None = None
    owners: list[str] | None = None
    title_prefix: str | None = Field(default=None, alias="titlePrefix")
    parent_issue: ParentIssueCondition | None = Field(default=None, alias="parentIssue")


class PrCondition(BaseModel):
    """
    Condition for pull request rules. All present fields must hold.

    Branch fields take glob patterns where "*" matches any run of characters.
    """

    model_config = _MODEL_CONFIG

    created_by: Literal["self"] | None = Field(default=None, alias="createdBy")
    assignee: Literal["self"] | None = None
    labels: LabelCondition | None = None
    repos: list[str] | None = None
    owners: list[str] | None = None
    draft: bool | None = None
    base_branch: list[str] | None = Field(default=None, alias="baseBranch")
    head_branch: list[str] | None = Field(default=None, alias="headBranch")
    review_decision: ReviewDecision | None = Field(default=None, alias="reviewDecision")


class SearchCondition(BaseModel):
    model_config = _MODEL_CONFIG

    repos: list[str] | None = None
    owners: list[str] | None = None


class ProjectCondition(BaseModel):
    model_config = _MODEL_CONFIG

    owner: list[str] | None = None
    project_numbers: list[int] | None = Field(default=None, alias="projectNumbers")


Condition = IssueCondition | PrCondition | SearchCondition | ProjectCondition


# =============================================================================
# Enforce and Rule Models
# =============================================================================


class Enforce(BaseModel):
    """
    Post-action mutation attached to a rule.

    Applied with `gh issue edit` / `gh pr edit` after the primary action
    succeeds. "self" in the assignee lists resolves to selfUserId.
    """

    model_config = _MODEL_CONFIG

    add_labels: list[str] | None = Field(default=None, alias="addLabels")
    remove_labels: list[str] | None = Field(default=None, alias="removeLabels")
    add_assignees: list[str] | None = Field(default=None, alias="addAssignees")
    remove_assignees: list[str] | None = Field(default=None, alias="removeAssignees")


class IssueRule(BaseModel):
    """
    A policy rule for issues.

    Attributes:
        name: Rule name, cited in decisions
        operations: Operations this rule covers
        condition: Optional condition; absent means unconditional
        enforce: Optional post-action mutation
    """

    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    operations: list[IssueOperation] = Field(..., min_length=1)
    condition: IssueCondition | None = None
    enforce: Enforce | None = None


class PrRule(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    operations: list[PrOperation] = Field(..., min_length=1)
    condition: PrCondition | None = None
    enforce: Enforce | None = None


class SearchRule(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    operations: list[SearchOperation] = Field(..., min_length=1)
    condition: SearchCondition | None = None


class ProjectRule(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    operations: list[ProjectOperation] = Field(..., min_length=1)
    condition: ProjectCondition | None = None


Rule = IssueRule | PrRule | SearchRule | ProjectRule


# =============================================================================
# Config
# =============================================================================


class AiMarkerConfig(BaseModel):
    """
    Marking of comments written through safe-gh.

    Attributes:
        enabled: Whether comment and issue bodies get marked
        visible_prefix: Prefix prepended to marked bodies
    """

    model_config = _MODEL_CONFIG

    enabled: bool = False
    visible_prefix: str = Field(default="\U0001f916 ", alias="visiblePrefix")


class Config(BaseModel):
    """
    Complete safe-gh configuration.

    Loaded once per process and passed explicitly to whoever needs it.

    Attributes:
        allowed_owners: Global owner allow list (None/empty = no restriction)
        issue_rules: Ordered issue rules
        pr_rules: Ordered pull request rules
        search_rules: Ordered search rules
        project_rules: Ordered project rules
        self_user_id: Login that "self" refers to
        default_permission: Fallback when no rule matches
        ai_marker: Comment marking settings
    """

    model_config = _MODEL_CONFIG

    allowed_owners: list[str] | None = Field(default=None, alias="allowedOwners")
    issue_rules: list[IssueRule] = Field(default_factory=list, alias="issueRules")
    pr_rules: list[PrRule] = Field(default_factory=list, alias="prRules")
    search_rules: list[SearchRule] = Field(default_factory=list, alias="searchRules")
    project_rules: list[ProjectRule] = Field(default_factory=list, alias="projectRules")
    self_user_id: str | None = Field(default=None, alias="selfUserId")
    default_permission: DefaultPermission = Field(
        default=DefaultPermission.DENY,
        alias="defaultPermission",
    )
    ai_marker: AiMarkerConfig = Field(default_factory=AiMarkerConfig, alias="aiMarker")

    def rules_for(self, resource: ResourceType) -> list[Rule]:
        """Return the ordered rule list for a resource."""
        if resource == ResourceType.ISSUE:
            return list(self.issue_rules)
        if resource == ResourceType.PR:
            return list(self.pr_rules)
        if resource == ResourceType.SEARCH:
            return list(self.search_rules)
        return list(self.project_rules)


# =============================================================================
# Runtime Models
# =============================================================================


class ParentIssueContext(BaseModel):
    """Snapshot of the parent issue of the target issue."""

    model_config = _MODEL_CONFIG

    number: int
    title: str = ""
    labels: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list)


class OperationContext(BaseModel):
    """
    Point-in-time snapshot a decision is evaluated against.

    Every field is optional; None means unknown, which makes any condition
    on that field unsatisfiable.
    """

    model_config = _MODEL_CONFIG

    repo: str | None = None
    issue_number: int | None = Field(default=None, alias="issueNumber")
    pr_number: int | None = Field(default=None, alias="prNumber")
    issue_author: str | None = Field(default=None, alias="issueAuthor")
    pr_author: str | None = Field(default=None, alias="prAuthor")
    issue_title: str | None = Field(default=None, alias="issueTitle")
    labels: list[str] | None = None
    assignees: list[str] | None = None
    draft: bool | None = None
    base_branch: str | None = Field(default=None, alias="baseBranch")
    head_branch: str | None = Field(default=None, alias="headBranch")
    review_decision: str | None = Field(default=None, alias="reviewDecision")
    project_number: int | None = Field(default=None, alias="projectNumber")
    project_owner: str | None = Field(default=None, alias="projectOwner")
    parent_issue: ParentIssueContext | None = Field(default=None, alias="parentIssue")

    @property
    def author(self) -> str | None:
        """Author of the target issue or pull request."""
        if self.issue_author is not None:
            return self.issue_author
        return self.pr_author

    def to_payload(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unknown fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Decision(BaseModel):
    """
    Result of evaluating an operation against the config.

    Attributes:
        allowed: Whether the operation is permitted
        rule_name: Name of the matched rule, if one matched
        reason: Human-readable explanation
        enforce: Enforce directive copied from the matched rule
    """

    model_config = _MODEL_CONFIG

    allowed: bool
    rule_name: str | None = Field(default=None, alias="ruleName")
    reason: str
    enforce: Enforce | None = None

    @classmethod
    def allow(
        cls,
        reason: str,
        rule: str | None = None,
        enforce: Enforce | None = None,
    ) -> "Decision":
        """Create an ALLOW decision."""
        return cls(allowed=True, reason=reason, rule_name=rule, enforce=enforce)

    @classmethod
    def deny(cls, reason: str, rule: str | None = None) -> "Decision":
        """Create a DENY decision."""
        return cls(allowed=False, reason=reason, rule_name=rule)

    def to_payload(self) -> dict[str, Any]:
        """Serialize as {allowed, ruleName?, reason, enforce?}."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
