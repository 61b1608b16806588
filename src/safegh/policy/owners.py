"""
Global owner gate.

allowedOwners is a coarse allow list on the account that owns the target,
checked before any rule. A deny here is final; rule matching never runs.
"""

from safegh.schema import Decision, OperationContext, ResourceType

MISSING_REPO_REASON = (
    "Repository must be specified with -R owner/repo when allowedOwners is configured"
)


def check_allowed_owners(
    allowed_owners: list[str] | None,
    resource: ResourceType,
    context: OperationContext,
) -> Decision | None:
    """
    Check the context's owner against the global allow list.

    Args:
        allowed_owners: Configured allow list (None or empty = no restriction)
        resource: Resource type of the request
        context: Context the decision is being made against

    Returns:
        None if there is no objection, otherwise a deny Decision
    """
    if not allowed_owners:
        return None

    if resource == ResourceType.PROJECT:
        if not context.project_owner:
            return None
        owner = context.project_owner
    elif resource == ResourceType.SEARCH:
        # Unscoped search is cross-account by nature
        if not context.repo:
            return None
        owner = repo_owner(context.repo)
    else:
        if not context.repo:
            return Decision.deny(MISSING_REPO_REASON)
        owner = repo_owner(context.repo)

    if not owner:
        return None

    return check_owner(allowed_owners, owner)


def check_owner(allowed_owners: list[str] | None, owner: str) -> Decision | None:
    """Deny if owner is not in a non-empty allow list."""
    if not allowed_owners or owner in allowed_owners:
        return None
    return Decision.deny(
        f"Blocked by global allowedOwners: owner '{owner}' is not in "
        f"[{', '.join(allowed_owners)}]"
    )


def repo_owner(repo: str) -> str:
    """First path segment of owner/repo."""
    return repo.split("/")[0]
