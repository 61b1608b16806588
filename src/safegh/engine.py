"""
Execution Engine for safe-gh.

The Engine is the orchestration layer that runs one requested operation
under the configured rules. It coordinates between:
- Context resolution: Fetches or synthesizes the OperationContext
- Policy Engine: Decides if the operation is allowed
- Dispatcher: Executes the primary action and enforcement

Execution Flow:
    1. Resolve the context (at most one fetch)
    2. Evaluate the decision (owner gate, rules, default permission)
    3. Dry-run: report the decision and stop
    4. Denied: stop with PERMISSION_DENIED
    5. Check the linked issue's owner for cross-repo links (NOT_OWNER)
    6. Build enforce arguments (CONFIG_ERROR stops before any mutation)
    7. Execute the primary action
    8. Apply enforcement (failure = partial outcome)

Design Principles:
    - Fail-closed: Denials stop execution
    - One result: every failure becomes exactly one Outcome with one error
    - No hidden state: config and collaborators are passed in explicitly
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum

from safegh.context import ContextResolver
from safegh.enforce import EnforcementApplier, build_enforce_args
from safegh.errors import (
    EnforceError,
    NotOwnerError,
    PermissionDeniedError,
    SafeGhError,
    UnknownError,
)
from safegh.gh.base import ContextProvider, Dispatcher, OperationRequest
from safegh.policy import PolicyEngine
from safegh.policy.owners import check_owner, repo_owner
from safegh.schema import Config, Decision, OperationContext

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    """How a request ended."""

    EXECUTED = "executed"
    DRY_RUN = "dry_run"
    DENIED = "denied"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class Outcome:
    """
    Result of running one request.

    Attributes:
        kind: How the request ended
        request: The request as executed (repo filled in from the context)
        decision: The decision, if one was reached
        context: The context the decision was made against, if resolved
        output: Trimmed stdout of the primary action, if it ran
        error: The single error of a denied, failed or partial outcome
    """

    kind: OutcomeKind
    request: OperationRequest
    decision: Decision | None = None
    context: OperationContext | None = None
    output: str | None = None
    error: SafeGhError | None = None

    @property
    def exit_code(self) -> int:
        """0 for dry-runs and successful executions, 1 otherwise."""
        if self.kind in (OutcomeKind.EXECUTED, OutcomeKind.DRY_RUN):
            return 0
        return 1

    @property
    def success(self) -> bool:
        return self.kind == OutcomeKind.EXECUTED


class Engine:
    """
    Main execution engine for safe-gh.

    Usage:
        engine = Engine(config, GhContextProvider(client), GhDispatcher(client))
        outcome = engine.run(request, dry_run=False)
        print(outcome.kind, outcome.exit_code)

    Attributes:
        config: The loaded Config
        resolver: Context resolver over the given provider
        policy: PolicyEngine over the config
        dispatcher: Executor of allowed operations
        enforcer: Applier of enforce directives
    """

    def __init__(
        self,
        config: Config,
        provider: ContextProvider,
        dispatcher: Dispatcher,
    ) -> None:
        self.config = config
        self.resolver = ContextResolver(provider)
        self.policy = PolicyEngine(config)
        self.dispatcher = dispatcher
        self.enforcer = EnforcementApplier(dispatcher)

    def run(self, request: OperationRequest, dry_run: bool = False) -> Outcome:
        """
        Run one request under the configured rules.

        Never raises for expected failures; they come back as an Outcome
        of kind FAILED (or DENIED / PARTIAL).

        Args:
            request: The operation to run
            dry_run: Compute and report the decision without executing

        Returns:
            Outcome describing how the request ended
        """
        context: OperationContext | None = None
        decision: Decision | None = None

        try:
            context = self.resolver.resolve(request)
            if context.repo and not request.repo:
                request = dataclasses.replace(request, repo=context.repo)

            decision = self.policy.evaluate(request.resource, request.operation, context)

            if dry_run:
                return Outcome(
                    kind=OutcomeKind.DRY_RUN,
                    request=request,
                    decision=decision,
                    context=context,
                )

            if not decision.allowed:
                return Outcome(
                    kind=OutcomeKind.DENIED,
                    request=request,
                    decision=decision,
                    context=context,
                    error=PermissionDeniedError(
                        resource=request.resource.value,
                        operation=request.operation.value,
                        reason=decision.reason,
                        rule=decision.rule_name,
                        context=context.to_payload(),
                    ),
                )

            self._check_related_owner(request)
            enforce_args = build_enforce_args(decision.enforce, self.config.self_user_id)

            output = self.dispatcher.execute(request)
        except SafeGhError as e:
            return Outcome(
                kind=OutcomeKind.FAILED,
                request=request,
                decision=decision,
                context=context,
                error=e,
            )
        except Exception as e:
            logger.debug("Unexpected error running %s", request.command, exc_info=True)
            return Outcome(
                kind=OutcomeKind.FAILED,
                request=request,
                decision=decision,
                context=context,
                error=UnknownError(message=str(e) or type(e).__name__),
            )

        try:
            self.enforcer.apply(request, enforce_args, output)
        except SafeGhError as e:
            return Outcome(
                kind=OutcomeKind.PARTIAL,
                request=request,
                decision=decision,
                context=context,
                output=output,
                error=e,
            )
        except Exception as e:
            return Outcome(
                kind=OutcomeKind.PARTIAL,
                request=request,
                decision=decision,
                context=context,
                output=output,
                error=EnforceError(primary_output=output, underlying_error=str(e)),
            )

        return Outcome(
            kind=OutcomeKind.EXECUTED,
            request=request,
            decision=decision,
            context=context,
            output=output,
        )

    def _check_related_owner(self, request: OperationRequest) -> None:
        """
        Apply allowedOwners to a linked issue in another repository.

        Raises:
            NotOwnerError: If the linked repository's owner is not allowed
        """
        related = request.related
        if related is None or related.repo is None or related.repo == request.repo:
            return

        blocked = check_owner(self.config.allowed_owners, repo_owner(related.repo))
        if blocked is not None:
            raise NotOwnerError(message=blocked.reason, target_repo=related.repo)
