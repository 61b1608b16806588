"""
Policy Engine for safe-gh.

The Policy Engine is the security boundary of safe-gh. Every operation
must pass through the policy engine before it reaches the gh CLI.

Design Principles:
    - Deny-by-default: Nothing is allowed unless a rule or the read
      fallback allows it
    - Fail-closed: Unknown context makes conditions false, never true
    - Predictable: Same config + context always produce the same decision
    - Auditable: All decisions include clear reasons

How it works:
    1. Engine receives (resource, operation, context)
    2. The global allowedOwners gate runs first; a deny there is final
    3. Rules for the resource are scanned in declaration order
    4. The first rule covering the operation whose condition holds wins
    5. With no match, defaultPermission decides
"""

import logging

from safegh.policy.conditions import evaluate_condition
from safegh.policy.owners import check_allowed_owners
from safegh.schema import (
    Config,
    Decision,
    DefaultPermission,
    Operation,
    OperationContext,
    ResourceType,
)

logger = logging.getLogger(__name__)

# Operation names allowed by defaultPermission "read". Matched by name alone,
# whatever the resource, so project "view" and pr "diff" both qualify.
READ_OPERATIONS = frozenset(
    {
        "list",
        "view",
        "list:comments",
        "diff",
        "checks",
        "field:list",
        "item:list",
    }
)

NO_MATCH_DENY_REASON = "No matching rule and default permission is deny"
DEFAULT_READ_REASON = "Allowed by default read permission"


class PolicyEngine:
    """
    Central policy evaluator for safe-gh.

    Usage:
        engine = PolicyEngine(config)
        decision = engine.evaluate(ResourceType.ISSUE, IssueOperation.CLOSE, context)
        if decision.allowed:
            # proceed with execution
        else:
            # report the denial

    Attributes:
        config: The Config to enforce
    """

    def __init__(self, config: Config) -> None:
        self.config = config

    def evaluate(
        self,
        resource: ResourceType,
        operation: Operation,
        context: OperationContext,
    ) -> Decision:
        """
        Decide whether an operation is allowed.

        Args:
            resource: Resource type of the request
            operation: Operation being requested (an enum of the resource)
            context: Snapshot of the target, fetched or synthesized

        Returns:
            Decision indicating allow/deny with reason
        """
        owner_decision = check_allowed_owners(
            self.config.allowed_owners,
            resource,
            context,
        )
        if owner_decision is not None:
            decision = owner_decision
        else:
            decision = self._match_rules(resource, operation, context)

        logger.debug(
            "Decision for %s %s: allowed=%s rule=%s reason=%s",
            resource.value,
            operation.value,
            decision.allowed,
            decision.rule_name,
            decision.reason,
        )
        return decision

    def _match_rules(
        self,
        resource: ResourceType,
        operation: Operation,
        context: OperationContext,
    ) -> Decision:
        """Scan the resource's rules in order; first survivor wins."""
        for rule in self.config.rules_for(resource):
            if operation not in rule.operations:
                continue

            if rule.condition is not None:
                if not evaluate_condition(
                    rule.condition,
                    context,
                    self.config.self_user_id,
                ):
                    continue

            return Decision.allow(
                f"Allowed by rule '{rule.name}'",
                rule=rule.name,
                enforce=getattr(rule, "enforce", None),
            )

        return self._default_decision(operation)

    def _default_decision(self, operation: Operation) -> Decision:
        """Apply defaultPermission when no rule matched."""
        if self.config.default_permission == DefaultPermission.READ:
            if operation.value in READ_OPERATIONS:
                return Decision.allow(DEFAULT_READ_REASON)
        return Decision.deny(NO_MATCH_DENY_REASON)
