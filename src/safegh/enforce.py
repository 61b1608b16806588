"""
Enforcement of rule-mandated mutations.

A matched rule may carry an enforce directive (labels and assignees to add
or remove). Its arguments are built before the primary action runs, so a
configuration problem stops the request before anything is mutated. After
the primary action succeeds, one `gh issue|pr edit` applies them.

A failed enforcement never undoes the primary action. It is reported as an
EnforceError whose details carry the primary output.
"""

import logging
import re

from safegh.errors import ConfigError, EnforceError, SafeGhError
from safegh.gh.base import Dispatcher, OperationRequest
from safegh.schema import Enforce, IssueOperation, PrOperation, ResourceType

logger = logging.getLogger(__name__)

_TRAILING_NUMBER = re.compile(r"/(\d+)$")

SELF_NOT_CONFIGURED = (
    'enforce uses "self" but selfUserId is not configured. Set selfUserId in config.'
)


def build_enforce_args(enforce: Enforce | None, self_user_id: str | None) -> list[str]:
    """
    Turn an enforce directive into gh edit arguments.

    "self" in the assignee lists resolves to self_user_id.

    Returns:
        Flat argument list, empty when there is nothing to enforce

    Raises:
        ConfigError: If "self" is used but self_user_id is not configured
    """
    if enforce is None:
        return []

    def resolve(value: str) -> str:
        if value != "self":
            return value
        if not self_user_id:
            raise ConfigError(message=SELF_NOT_CONFIGURED)
        return self_user_id

    args: list[str] = []
    for label in enforce.add_labels or []:
        args += ["--add-label", label]
    for label in enforce.remove_labels or []:
        args += ["--remove-label", label]
    for assignee in enforce.add_assignees or []:
        args += ["--add-assignee", resolve(assignee)]
    for assignee in enforce.remove_assignees or []:
        args += ["--remove-assignee", resolve(assignee)]
    return args


def number_from_url(url: str) -> int | None:
    """Trailing number of a created issue / pull request URL."""
    match = _TRAILING_NUMBER.search(url.strip())
    if match is None:
        return None
    return int(match.group(1))


class EnforcementApplier:
    """
    Apply prebuilt enforce arguments after a successful primary action.

    Attributes:
        dispatcher: Dispatcher that performs the edit
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher

    def apply(
        self,
        request: OperationRequest,
        args: list[str],
        primary_output: str,
    ) -> None:
        """
        Apply enforcement for a request whose primary action succeeded.

        Args:
            request: The executed request
            args: Output of build_enforce_args()
            primary_output: Trimmed stdout of the primary action

        Raises:
            EnforceError: If the target cannot be determined or the edit fails
        """
        if not args:
            return

        created = request.operation in (IssueOperation.CREATE, PrOperation.CREATE)
        if created:
            number = number_from_url(primary_output)
            if number is None:
                raise EnforceError(
                    message=f"Failed to extract {_noun(request.resource)} number from created {_noun(request.resource)} URL",
                    primary_output=primary_output,
                    details={"url": primary_output},
                )
        else:
            number = request.number

        if number is None:
            raise EnforceError(
                message="Primary action succeeded but enforce target is unknown",
                primary_output=primary_output,
            )

        try:
            self.dispatcher.apply_enforcement(request.resource, request.repo, number, args)
        except SafeGhError as e:
            logger.warning("Enforcement failed for %s #%d: %s", request.command, number, e.message)
            message = None
            if created:
                message = f"{_noun(request.resource).capitalize()} was created but enforce failed"
            raise EnforceError(
                message=message or "",
                primary_output=primary_output,
                underlying_error=e.message,
            ) from e

        logger.debug("Enforcement applied to %s #%d", request.resource.value, number)


def _noun(resource: ResourceType) -> str:
    return "pull request" if resource == ResourceType.PR else "issue"
