"""Celery tasks for the targets module."""
from __future__ import annotations

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def sweep_overdue_assignments(today: str | None = None) -> int:
    """
    Scheduled daily (Celery Beat).
    Move past-deadline assignments that are neither Completed nor Overdue
    through the status machine.
    """
    from datetime import date

    from targets.engine import TargetReconciliationEngine

    run_date = date.fromisoformat(today) if today else None
    changed = TargetReconciliationEngine().sweep_overdue(today=run_date)
    logger.info("sweep_overdue_assignments: %d assignments updated", changed)
    return changed


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def reconcile_user_target(self, *, user_id: str, subscription_code: str, evaluation_date: str):
    """Re-run reconciliation for one user, e.g. after a subscription is verified by hand."""
    from datetime import date

    from targets.engine import VALIDATION_ERROR, reconcile

    result = reconcile(user_id, subscription_code, date.fromisoformat(evaluation_date))
    if result.code == VALIDATION_ERROR:
        logger.warning(
            "reconcile_user_target user=%s subscription=%s failed (attempt %d): %s",
            user_id, subscription_code, self.request.retries + 1, result.error,
        )
        raise self.retry()
    return {"success": result.success, "code": result.code}
