"""
Policy module for safe-gh.

This module implements the authorization decision: ordered rule matching
over per-resource rules, with a global owner gate in front and a
default-permission fallback behind.

Key concepts:
    - Decision: The result of evaluating an operation (allow/deny + reason)
    - PolicyEngine: Central evaluator that checks operations against rules
    - Conditions: AND-combined predicates over the operation context

The policy engine must be:
    - Fail-closed: Unknown facts never satisfy a condition
    - Predictable: Same inputs always produce same decisions
    - Auditable: All decisions carry a reason
"""

from safegh.policy.conditions import evaluate_condition, match_branch_pattern
from safegh.policy.engine import READ_OPERATIONS, PolicyEngine
from safegh.policy.owners import check_allowed_owners

__all__ = [
    "PolicyEngine",
    "READ_OPERATIONS",
    "check_allowed_owners",
    "evaluate_condition",
    "match_branch_pattern",
]
