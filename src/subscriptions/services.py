"""Business logic / service layer for subscription submissions.

Submitting proof of a subscription and reconciling the intern's target
happen here, inside one transaction, so that views stay thin.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from django.db import transaction
from django.utils import timezone

from core.services import create_audit_log
from subscriptions.models import Subscription, SubscriptionSubmission
from targets.engine import VALIDATION_ERROR, ReconciliationResult, TargetReconciliationEngine

logger = logging.getLogger("internhub")

DUPLICATE_MESSAGE = "This subscription is already verified and cannot be submitted again."


# ----------------------------------------------------------------------
# Exceptions
# ----------------------------------------------------------------------

class SubmissionError(Exception):
    """Base class for submission workflow failures."""

    status_code = 400

    def to_dict(self) -> dict:
        return {"error": str(self)}


class MissingSubmissionField(SubmissionError):
    pass


class SubscriptionNotFound(SubmissionError):
    status_code = 404

    def __init__(self, code: str):
        self.code = code
        super().__init__("Subscription not found")


class SubmissionMismatch(SubmissionError):
    def __init__(self, mismatches: list[str]):
        self.mismatches = mismatches
        super().__init__("Provided details do not match our subscription records.")

    def to_dict(self) -> dict:
        return {"error": str(self), "mismatches": self.mismatches}


class ReconciliationFailed(SubmissionError):
    def __init__(self, result: ReconciliationResult):
        self.result = result
        super().__init__("Subscription validation failed")

    def to_dict(self) -> dict:
        return {"error": str(self), "details": self.result.error, "code": self.result.code}


# ----------------------------------------------------------------------
# Workflow
# ----------------------------------------------------------------------

@dataclass
class SubmissionOutcome:
    submission: SubscriptionSubmission
    target_info: dict
    duplicate: bool


def find_mismatches(subscription: Subscription, *, email: str = "", phone: str = "", plan_id=None) -> list[str]:
    """Compare the claimed details with the subscription of record.

    E-mail and phone are only compared when both sides have a value.
    """
    mismatches = []
    email = (email or "").strip()
    phone = (phone or "").strip()
    if email and subscription.email and email.lower() != subscription.email.strip().lower():
        mismatches.append("Email does not match.")
    if phone and subscription.phone and phone != subscription.phone.strip():
        mismatches.append("Phone does not match.")
    if str(plan_id) != str(subscription.plan_id):
        mismatches.append("Subscription Plan does not match.")
    return mismatches


def create_submission(
    user,
    *,
    subscription_code: str,
    plan_id,
    subscriber_email: str = "",
    subscriber_phone: str = "",
    proof_file_url: str = "",
    proof_file_name: str = "",
    submission_date: date | None = None,
    engine: TargetReconciliationEngine | None = None,
) -> SubmissionOutcome:
    """Record an intern's subscription proof and reconcile their target.

    Parameters
    ----------
    user : accounts.models.User
        The intern submitting the proof.
    subscription_code : str
        Human-readable id of the subscription of record.
    plan_id : UUID | str
        Plan the intern claims the subscription is on.
    submission_date : date, optional
        Defaults to today; also used as the reconciliation evaluation date.

    Returns
    -------
    SubmissionOutcome
        The stored submission, the reconciliation result as a dict, and
        whether the submission was flagged as a duplicate.

    Raises
    ------
    MissingSubmissionField
        If the code or plan is missing.
    SubscriptionNotFound
        If no subscription of record has this code.
    SubmissionMismatch
        If e-mail, phone or plan disagree with the record.
    ReconciliationFailed
        If reconciliation returned VALIDATION_ERROR. Nothing is saved.
    """
    subscription_code = (subscription_code or "").strip()
    if not subscription_code or not plan_id:
        raise MissingSubmissionField("Subscription ID and Subscription Plan are required.")

    submission_date = submission_date or timezone.localdate()
    engine = engine or TargetReconciliationEngine()

    with transaction.atomic():
        subscription = (
            Subscription.objects.select_for_update()
            .filter(code=subscription_code)
            .first()
        )
        if subscription is None:
            raise SubscriptionNotFound(subscription_code)

        mismatches = find_mismatches(
            subscription,
            email=subscriber_email,
            phone=subscriber_phone,
            plan_id=plan_id,
        )
        if mismatches:
            raise SubmissionMismatch(mismatches)

        duplicate = subscription.is_verified
        now = timezone.now()
        submission = SubscriptionSubmission.objects.create(
            user=user,
            subscription_code=subscription_code,
            subscriber_email=(subscriber_email or "").strip(),
            subscriber_phone=(subscriber_phone or "").strip(),
            plan_id=subscription.plan_id,
            submission_date=submission_date,
            proof_file_url=proof_file_url or "",
            proof_file_name=proof_file_name or "",
            validation_status=(
                SubscriptionSubmission.ValidationStatus.DUPLICATE
                if duplicate
                else SubscriptionSubmission.ValidationStatus.VERIFIED
            ),
            validation_reason=DUPLICATE_MESSAGE if duplicate else "",
            verified_at=None if duplicate else now,
        )

        if not duplicate:
            subscription.verification_status = Subscription.VerificationStatus.VERIFIED
            subscription.verified_by = user
            subscription.verified_at = now
            subscription.save(update_fields=[
                "verification_status", "verified_by", "verified_at", "updated_at",
            ])

        result = engine.reconcile(user.pk, subscription_code, submission_date, actor=user)
        if not result.success and result.code == VALIDATION_ERROR:
            # Raising inside the atomic block discards the submission too.
            raise ReconciliationFailed(result)

        create_audit_log(
            action="SUBSCRIPTION_SUBMITTED",
            entity_type="SubscriptionSubmission",
            entity_id=str(submission.pk),
            actor=user,
            after={
                "subscription_code": subscription_code,
                "validation_status": submission.validation_status,
                "target_code": result.code,
            },
        )

    logger.info(
        "Submission %s by user=%s for subscription=%s (%s)",
        submission.pk, user.pk, subscription_code, submission.validation_status,
    )
    return SubmissionOutcome(
        submission=submission,
        target_info=result.to_dict(),
        duplicate=duplicate,
    )


def delete_submission(submission: SubscriptionSubmission, user) -> None:
    """Delete *submission*; only its owner may do so.

    Raises
    ------
    PermissionError
        If *user* did not create the submission.
    """
    if submission.user_id != user.pk:
        raise PermissionError("Not authorized to delete this submission")
    submission_id = str(submission.pk)
    submission.delete()
    create_audit_log(
        action="SUBSCRIPTION_SUBMISSION_DELETED",
        entity_type="SubscriptionSubmission",
        entity_id=submission_id,
        actor=user,
    )
