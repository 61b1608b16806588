"""
Parsing of user-supplied numbers and issue references.

Numbers come in as strings from the command line and are parsed here so
that malformed input surfaces as a VALIDATION_ERROR payload rather than a
usage error.
"""

import re
from dataclasses import dataclass

from safegh.errors import InputValidationError

_CROSS_REPO_REF = re.compile(r"^([^/]+/[^#]+)#([0-9]+)$")
_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class IssueRef:
    """
    Reference to an issue, possibly in another repository.

    Attributes:
        repo: owner/repo, or None for "same repository as the request"
        number: Issue number
    """

    repo: str | None
    number: int

    def resolve(self, default_repo: str | None) -> "IssueRef":
        """Fill in the repository from the request when the ref had none."""
        if self.repo is not None:
            return self
        return IssueRef(repo=default_repo, number=self.number)

    def __str__(self) -> str:
        if self.repo:
            return f"{self.repo}#{self.number}"
        return str(self.number)


def parse_number(value: str, label: str = "number") -> int:
    """
    Parse a positive integer.

    Raises:
        InputValidationError: If value is not a positive integer
    """
    text = value.strip()
    if not _DIGITS.fullmatch(text) or int(text) <= 0:
        raise InputValidationError(
            message=f"Invalid {label}: '{value}'",
            value=value,
            suggestion=f"{label.capitalize()} must be a positive integer",
        )
    return int(text)


def parse_issue_ref(ref: str) -> IssueRef:
    """
    Parse "123" or "owner/repo#123".

    Raises:
        InputValidationError: If the reference is malformed or the number
            is not positive
    """
    text = ref.strip()

    if _DIGITS.fullmatch(text):
        number = int(text)
        if number <= 0:
            raise InputValidationError(
                message=f"Invalid issue reference: '{ref}'. Expected a positive integer or owner/repo#123 format.",
                value=ref,
            )
        return IssueRef(repo=None, number=number)

    match = _CROSS_REPO_REF.match(text)
    if match:
        number = int(match.group(2))
        if number <= 0:
            raise InputValidationError(
                message=f"Invalid issue reference: '{ref}'. Issue number must be a positive integer.",
                value=ref,
            )
        return IssueRef(repo=match.group(1), number=number)

    raise InputValidationError(
        message=f"Invalid issue reference: '{ref}'. Expected a number (e.g. 123) or owner/repo#123 format.",
        value=ref,
    )


def split_repo(repo: str) -> tuple[str, str]:
    """
    Split owner/repo into its two parts.

    Raises:
        InputValidationError: If repo is not of the form owner/repo
    """
    owner, _, name = repo.partition("/")
    if not owner or not name or "/" in name:
        raise InputValidationError(
            message=f"Invalid repo format: {repo}. Expected owner/repo",
            value=repo,
        )
    return owner, name


def split_list(value: str | None) -> list[str] | None:
    """Split a comma-separated option into trimmed, non-empty items."""
    if value is None:
        return None
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]
