"""Structured logging helpers (PII-safe)."""

from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    org_id: str | None = None,
    project_id: str | None = None,
    action: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict for `logger.info(..., extra=...)`."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if org_id:
        context["org_id"] = org_id
    if project_id:
        context["project_id"] = project_id
    if action:
        context["action"] = action
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
