"""Cross-app service helpers."""
from __future__ import annotations

from typing import Any

from core.middleware import get_current_ip, get_current_user
from core.models import AuditLog


def create_audit_log(
    action: str,
    entity_type: str,
    entity_id: str,
    actor=None,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
    ip: str | None = None,
) -> AuditLog:
    """Create and return a new :class:`~core.models.AuditLog` entry.

    ``actor`` and ``ip`` fall back to the user / address of the request
    being served, when there is one.
    """
    return AuditLog.objects.create(
        actor=actor or get_current_user(),
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=before,
        after_json=after,
        ip_address=ip or get_current_ip(),
    )
