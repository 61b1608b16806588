"""
Marking of comments written through safe-gh.

When aiMarker is enabled, a comment body gets the configured visible
prefix in front and an invisible zero-width marker at the end, so that
both people and tools can tell the comment was machine-written. Issue
bodies instead get a timestamped HTML comment appended.
"""

from datetime import datetime, timezone

from safegh.schema import AiMarkerConfig

# ZWSP ZWNJ ZWSP ZWNJ ZWSP
INVISIBLE_MARKER = "\u200b\u200c\u200b\u200c\u200b"


def add_marker(body: str, config: AiMarkerConfig) -> str:
    """Mark a body; a no-op when marking is disabled."""
    if not config.enabled:
        return body
    return f"{config.visible_prefix}{body}{INVISIBLE_MARKER}"


def has_marker(body: str) -> bool:
    return INVISIBLE_MARKER in body


def strip_marker(body: str, config: AiMarkerConfig) -> str:
    """Remove the invisible marker and the visible prefix, if present."""
    result = body.replace(INVISIBLE_MARKER, "")
    if config.visible_prefix and result.startswith(config.visible_prefix):
        result = result[len(config.visible_prefix):]
    return result


def remark(body: str, config: AiMarkerConfig) -> str:
    """Mark a body for an edit, dropping any marker it already carries."""
    if has_marker(body):
        body = strip_marker(body, config)
    return add_marker(body, config)


def add_provenance(body: str, config: AiMarkerConfig, now: datetime | None = None) -> str:
    """Append an HTML comment recording when safe-gh wrote the body."""
    if not config.enabled:
        return body
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"{body}\n<!-- safe-gh: {stamp} -->"
