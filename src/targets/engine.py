"""Target reconciliation engine for intern subscription targets.

Core design principles:
- The active assignment for a date is chosen deterministically: latest
  start date first, then the most recently created row.
- Subscription verification status is re-read on every evaluation, never
  cached on the submission.
- Completion compares verified submissions against the sum of all plan
  quotas (AGGREGATE) unless settings.TARGET_COMPLETION_POLICY is PER_PLAN.
- The resolve -> evaluate -> transition sequence runs in one transaction
  with the assignment row locked, so concurrent submissions serialise.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.services import create_audit_log
from notifications.services import notify_assignment_status_change
from subscriptions.models import Subscription, SubscriptionSubmission
from targets.catalog import TargetCatalog
from targets.models import TargetAssignment

logger = logging.getLogger("internhub")

NO_TARGET_FOUND = "NO_TARGET_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
NO_TARGET_MESSAGE = "No assigned target found for the given date range"

AGGREGATE = "AGGREGATE"
PER_PLAN = "PER_PLAN"
COMPLETION_POLICIES = (AGGREGATE, PER_PLAN)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    return value


# ----------------------------------------------------------------------
# Result types
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedSubmission:
    """A submission paired with its subscription's current verification status."""

    submission: SubscriptionSubmission
    verification_status: str | None

    @property
    def is_verified(self) -> bool:
        return self.verification_status == Subscription.VerificationStatus.VERIFIED


@dataclass
class CompletionResult:
    total_count: int
    verified_count: int
    verified_submissions: list[dict]
    required_count: int
    is_completed: bool
    per_plan: dict[str, dict] = field(default_factory=dict)


@dataclass(frozen=True)
class StatusTransition:
    assignment_id: str
    previous_status: str
    new_status: str
    updated: bool


@dataclass
class ReconciliationResult:
    success: bool
    error: str | None = None
    code: str | None = None
    target_details: dict | None = None
    plan_counts: dict | None = None
    subscription_statistics: dict | None = None
    target_completion: dict | None = None

    @classmethod
    def no_target(cls) -> "ReconciliationResult":
        return cls(success=False, error=NO_TARGET_MESSAGE, code=NO_TARGET_FOUND)

    @classmethod
    def failure(cls, message: str) -> "ReconciliationResult":
        return cls(success=False, error=message, code=VALIDATION_ERROR)

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


# ----------------------------------------------------------------------
# Components
# ----------------------------------------------------------------------

class AssignmentResolver:
    """Find the single assignment of a user overlapping a date window."""

    def candidates(self, user_id, window_start: date, window_end: date):
        return (
            TargetAssignment.objects.filter(
                user_id=user_id,
                start_date__lte=window_end,
            )
            .filter(Q(end_date__isnull=True) | Q(end_date__gte=window_start))
            .order_by("-start_date", "-created_at", "-pk")
        )

    def resolve(
        self,
        user_id,
        window_start: date,
        window_end: date,
        lock: bool = False,
    ) -> TargetAssignment | None:
        """Return the active assignment, or None when nothing overlaps.

        With ``lock=True`` the chosen row is re-read with SELECT ... FOR
        UPDATE; the caller must already be inside a transaction.
        """
        assignment = (
            self.candidates(user_id, window_start, window_end)
            .select_related("template")
            .first()
        )
        if assignment is None or not lock:
            return assignment
        return (
            TargetAssignment.objects.select_for_update()
            .select_related("template", "user")
            .get(pk=assignment.pk)
        )


class SubmissionAggregator:
    """Collect a user's submissions in a window with their verification status."""

    def collect(self, user_id, window_start: date, window_end: date) -> list[ResolvedSubmission]:
        submissions = list(
            SubscriptionSubmission.objects.filter(
                user_id=user_id,
                submission_date__gte=window_start,
                submission_date__lte=window_end,
            ).order_by("-submission_date", "-created_at")
        )
        codes = {s.subscription_code for s in submissions}
        statuses = dict(
            Subscription.objects.filter(code__in=codes).values_list("code", "verification_status")
        )
        # Submissions without a subscription of record stay in the list
        # with a None status.
        return [
            ResolvedSubmission(submission=s, verification_status=statuses.get(s.subscription_code))
            for s in submissions
        ]


class CompletionEvaluator:
    """Decide whether verified submissions satisfy a template's quotas."""

    def __init__(self, catalog: TargetCatalog | None = None, policy: str | None = None) -> None:
        self.catalog = catalog or TargetCatalog()
        policy = (policy or getattr(settings, "TARGET_COMPLETION_POLICY", AGGREGATE)).upper()
        if policy not in COMPLETION_POLICIES:
            raise ValueError(f"Unknown target completion policy: {policy}")
        self.policy = policy

    def evaluate(self, template_id, submissions: list[ResolvedSubmission]) -> CompletionResult:
        quotas = self.catalog.get_quotas(template_id)
        required_count = sum(quotas.values())

        verified = [s for s in submissions if s.is_verified]
        verified_by_plan = Counter(str(s.submission.plan_id) for s in verified)
        per_plan = {
            plan_id: {
                "target_count": quota,
                "verified_count": verified_by_plan.get(plan_id, 0),
            }
            for plan_id, quota in quotas.items()
        }

        if self.policy == PER_PLAN:
            is_completed = all(
                entry["verified_count"] >= entry["target_count"] for entry in per_plan.values()
            )
        else:
            is_completed = len(verified) >= required_count

        return CompletionResult(
            total_count=len(submissions),
            verified_count=len(verified),
            verified_submissions=[
                {
                    "id": str(s.submission.pk),
                    "subscription_code": s.submission.subscription_code,
                    "plan_id": str(s.submission.plan_id),
                    "submission_date": s.submission.submission_date,
                    "validation_status": s.submission.validation_status,
                }
                for s in verified
            ],
            required_count=required_count,
            is_completed=is_completed,
            per_plan=per_plan,
        )


class StatusTransitioner:
    """Apply the assignment state machine.

    Assigned -> In Progress -> Completed, with Overdue reachable from any
    non-terminal state. Completed never regresses.
    """

    def next_status(self, current: str, is_completed: bool, end_date: date | None, today: date) -> str:
        if is_completed:
            return TargetAssignment.Status.COMPLETED
        if (
            end_date is not None
            and end_date < today
            and current != TargetAssignment.Status.COMPLETED
        ):
            return TargetAssignment.Status.OVERDUE
        return current

    def apply(
        self,
        assignment: TargetAssignment,
        is_completed: bool,
        today: date | None = None,
        actor=None,
    ) -> StatusTransition:
        today = _as_date(today) if today else timezone.localdate()
        previous = assignment.status
        new_status = self.next_status(previous, is_completed, assignment.end_date, today)
        updated = new_status != previous

        if updated:
            TargetAssignment.objects.filter(pk=assignment.pk).update(
                status=new_status,
                updated_at=timezone.now(),
            )
            assignment.status = new_status
            create_audit_log(
                action="TARGET_STATUS_CHANGE",
                entity_type="TargetAssignment",
                entity_id=str(assignment.pk),
                actor=actor,
                before={"status": previous},
                after={"status": new_status},
            )
            notify_assignment_status_change(assignment, previous, new_status)
            logger.info(
                "Target assignment %s: %s -> %s",
                assignment.pk, previous, new_status,
            )

        return StatusTransition(
            assignment_id=str(assignment.pk),
            previous_status=previous,
            new_status=new_status,
            updated=updated,
        )


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------

class TargetReconciliationEngine:
    """Recompute progress for one intern's active target and update its status."""

    def __init__(
        self,
        resolver: AssignmentResolver | None = None,
        aggregator: SubmissionAggregator | None = None,
        evaluator: CompletionEvaluator | None = None,
        transitioner: StatusTransitioner | None = None,
        catalog: TargetCatalog | None = None,
    ) -> None:
        self.catalog = catalog or TargetCatalog()
        self.resolver = resolver or AssignmentResolver()
        self.aggregator = aggregator or SubmissionAggregator()
        self.evaluator = evaluator or CompletionEvaluator(catalog=self.catalog)
        self.transitioner = transitioner or StatusTransitioner()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def reconcile(
        self,
        user_id,
        subscription_code: str,
        evaluation_date,
        today=None,
        actor=None,
    ) -> ReconciliationResult:
        """Reconcile the target active on *evaluation_date* for *user_id*.

        *today* is the date used for the overdue check and defaults to the
        current local date. *actor* is recorded on the status-change
        audit entry. Failures never propagate: they come back as a
        VALIDATION_ERROR result and no status is written.
        """
        try:
            evaluation_date = _as_date(evaluation_date)
            with transaction.atomic():
                assignment = self.resolver.resolve(
                    user_id, evaluation_date, evaluation_date, lock=True,
                )
                if assignment is None:
                    logger.warning(
                        "No target assignment for user=%s on %s (subscription=%s)",
                        user_id, evaluation_date, subscription_code,
                    )
                    return ReconciliationResult.no_target()

                return self._evaluate(
                    assignment,
                    window_end=assignment.end_date or evaluation_date,
                    today=today,
                    write=True,
                    actor=actor,
                )
        except Exception as exc:
            logger.exception(
                "Target reconciliation failed for user=%s subscription=%s: %s",
                user_id, subscription_code, exc,
            )
            return ReconciliationResult.failure(str(exc))

    def progress(self, assignment: TargetAssignment, today=None) -> ReconciliationResult:
        """Same statistics as :meth:`reconcile` for *assignment*, without writing."""
        today = _as_date(today) if today else timezone.localdate()
        return self._evaluate(
            assignment,
            window_end=assignment.end_date or today,
            today=today,
            write=False,
        )

    def sweep_overdue(self, today=None) -> int:
        """Re-evaluate every open assignment whose end date has passed.

        Returns the number of assignments whose status changed.
        """
        today = _as_date(today) if today else timezone.localdate()
        pending_ids = list(
            TargetAssignment.objects.filter(end_date__lt=today)
            .exclude(
                status__in=[
                    TargetAssignment.Status.COMPLETED,
                    TargetAssignment.Status.OVERDUE,
                ]
            )
            .values_list("pk", flat=True)
        )

        changed = 0
        for assignment_id in pending_ids:
            try:
                with transaction.atomic():
                    assignment = (
                        TargetAssignment.objects.select_for_update()
                        .select_related("template", "user")
                        .get(pk=assignment_id)
                    )
                    result = self._evaluate(
                        assignment,
                        window_end=assignment.end_date,
                        today=today,
                        write=True,
                    )
            except Exception as exc:
                logger.warning("Overdue sweep failed for assignment=%s: %s", assignment_id, exc)
                continue
            if result.target_completion["status_updated"]:
                changed += 1

        logger.info("Overdue sweep on %s: %d of %d assignments changed", today, changed, len(pending_ids))
        return changed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evaluate(
        self,
        assignment: TargetAssignment,
        window_end: date,
        today,
        write: bool,
        actor=None,
    ) -> ReconciliationResult:
        submissions = self.aggregator.collect(
            assignment.user_id, assignment.start_date, window_end,
        )

        template = self.catalog.get_template(assignment.template_id)
        plan_counts = self.catalog.plan_counts(template)

        completion = self.evaluator.evaluate(assignment.template_id, submissions)
        for entry in plan_counts.values():
            entry["verified_count"] = completion.per_plan.get(entry["plan_id"], {}).get(
                "verified_count", 0
            )

        if write:
            transition = self.transitioner.apply(
                assignment, completion.is_completed, today=today, actor=actor,
            )
        else:
            new_status = self.transitioner.next_status(
                assignment.status,
                completion.is_completed,
                assignment.end_date,
                _as_date(today) if today else timezone.localdate(),
            )
            transition = StatusTransition(
                assignment_id=str(assignment.pk),
                previous_status=assignment.status,
                new_status=new_status,
                updated=False,
            )

        return ReconciliationResult(
            success=True,
            target_details={
                "target_id": str(assignment.pk),
                "target_description": template.description,
                "start_date": assignment.start_date,
                "end_date": assignment.end_date,
            },
            plan_counts=plan_counts,
            subscription_statistics={
                "total_in_range": completion.total_count,
                "verified_count": completion.verified_count,
                "required_count": completion.required_count,
            },
            target_completion={
                "is_completed": completion.is_completed,
                "previous_status": transition.previous_status,
                "new_status": transition.new_status,
                "status_updated": transition.updated,
            },
        )


def reconcile(
    user_id, subscription_code: str, evaluation_date, today=None, actor=None,
) -> ReconciliationResult:
    """Module-level shortcut for :meth:`TargetReconciliationEngine.reconcile`."""
    return TargetReconciliationEngine().reconcile(
        user_id, subscription_code, evaluation_date, today=today, actor=actor,
    )
