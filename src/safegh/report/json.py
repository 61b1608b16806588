"""
JSON payloads for safe-gh.

Every command prints exactly one JSON document on stdout. This module
builds those documents from engine outcomes.

Payload shapes:
    - Decision: {allowed, ruleName?, reason, enforce?}
    - Dry-run: {dryRun: true, command, context, allowed, ruleName?, reason, enforce?}
    - Error: {error, code, details?}
    - Success: {success: true, command, ...} for mutations; read operations
      print gh's own output unchanged

Design Principles:
    - camelCase keys, matching the config file
    - Optional keys are omitted rather than null
"""

import json
from typing import Any

from safegh.engine import Outcome, OutcomeKind
from safegh.errors import SafeGhError, UnknownError
from safegh.gh.base import OperationRequest
from safegh.policy import READ_OPERATIONS
from safegh.schema import Decision, OperationContext, ResourceType


def decision_payload(decision: Decision) -> dict[str, Any]:
    """Serialize a decision as {allowed, ruleName?, reason, enforce?}."""
    return decision.to_payload()


def dry_run_payload(
    request: OperationRequest,
    context: OperationContext,
    decision: Decision,
) -> dict[str, Any]:
    """Build the dry-run report for a request."""
    payload: dict[str, Any] = {
        "dryRun": True,
        "command": request.command,
        "context": context.to_payload(),
    }
    payload.update(decision_payload(decision))
    return payload


def error_payload(error: SafeGhError) -> dict[str, Any]:
    return error.to_payload()


def success_payload(request: OperationRequest, output: str | None) -> dict[str, Any]:
    """Build the payload reported after a successful mutation."""
    payload: dict[str, Any] = {"success": True, "command": request.command}
    if request.repo:
        payload["repo"] = request.repo
    if request.number is not None:
        payload["number"] = request.number
    if request.related is not None:
        payload["related"] = str(request.related)
    if output:
        payload["output"] = _maybe_json(output)
    return payload


def is_passthrough(request: OperationRequest) -> bool:
    """Whether gh's output is printed as-is instead of wrapped in a payload."""
    if request.resource == ResourceType.SEARCH:
        return True
    return request.operation.value in READ_OPERATIONS


def render_outcome(outcome: Outcome) -> str:
    """
    Render an outcome as the text printed on stdout.

    Returns:
        A JSON document, or gh's raw output for executed read operations
    """
    if outcome.kind == OutcomeKind.DRY_RUN:
        # a dry-run always has a context and a decision
        return dumps(dry_run_payload(outcome.request, outcome.context, outcome.decision))

    if outcome.kind == OutcomeKind.EXECUTED:
        if is_passthrough(outcome.request):
            return outcome.output or ""
        return dumps(success_payload(outcome.request, outcome.output))

    error = outcome.error or UnknownError(message="Unknown failure")
    return dumps(error_payload(error))


def dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _maybe_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text
