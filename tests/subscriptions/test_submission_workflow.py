"""Tests for the submission service and its reconciliation hook."""
from datetime import date

import pytest

from core.models import AuditLog
from subscriptions.models import Subscription, SubscriptionSubmission
from subscriptions.services import (
    MissingSubmissionField,
    ReconciliationFailed,
    SubmissionMismatch,
    SubscriptionNotFound,
    create_submission,
    delete_submission,
    find_mismatches,
)
from targets.catalog import TargetCatalog
from targets.exceptions import TemplateNotFound
from targets.models import TargetAssignment

Pending = Subscription.VerificationStatus.PENDING


@pytest.mark.django_db
class TestCreateSubmission:
    def test_first_submission_verifies_record(self, intern_user, january_assignment, make_subscription, plan_a):
        record = make_subscription("S-1", status=Pending)

        outcome = create_submission(
            intern_user,
            subscription_code="S-1",
            plan_id=plan_a.pk,
            submission_date=date(2026, 1, 10),
        )

        assert outcome.duplicate is False
        assert outcome.submission.validation_status == SubscriptionSubmission.ValidationStatus.VERIFIED
        record.refresh_from_db()
        assert record.verification_status == Subscription.VerificationStatus.VERIFIED
        assert record.verified_by == intern_user
        assert outcome.target_info["success"] is True
        assert outcome.target_info["subscription_statistics"]["verified_count"] == 1
        assert AuditLog.objects.filter(action="SUBSCRIPTION_SUBMITTED").count() == 1

    def test_second_submission_completes_target(self, intern_user, january_assignment, make_subscription, plan_a):
        make_subscription("S-1", status=Pending)
        make_subscription("S-2", status=Pending)
        create_submission(intern_user, subscription_code="S-1", plan_id=plan_a.pk, submission_date=date(2026, 1, 5))

        outcome = create_submission(
            intern_user, subscription_code="S-2", plan_id=plan_a.pk, submission_date=date(2026, 1, 12),
        )

        assert outcome.target_info["target_completion"]["new_status"] == "Completed"
        january_assignment.refresh_from_db()
        assert january_assignment.status == TargetAssignment.Status.COMPLETED

    def test_status_change_audited_with_submitting_intern(
        self, intern_user, january_assignment, make_subscription, plan_a,
    ):
        make_subscription("S-1", status=Pending)
        make_subscription("S-2", status=Pending)
        create_submission(intern_user, subscription_code="S-1", plan_id=plan_a.pk, submission_date=date(2026, 1, 5))
        create_submission(intern_user, subscription_code="S-2", plan_id=plan_a.pk, submission_date=date(2026, 1, 12))

        entry = AuditLog.objects.get(action="TARGET_STATUS_CHANGE", entity_id=str(january_assignment.pk))
        assert entry.actor == intern_user
        assert entry.after_json == {"status": "Completed"}

    def test_already_verified_record_is_flagged_duplicate(self, intern_user, january_assignment, make_subscription, plan_a):
        make_subscription("S-1")

        outcome = create_submission(
            intern_user, subscription_code="S-1", plan_id=plan_a.pk, submission_date=date(2026, 1, 10),
        )

        assert outcome.duplicate is True
        assert outcome.submission.validation_status == SubscriptionSubmission.ValidationStatus.DUPLICATE
        assert outcome.submission.verified_at is None

    def test_no_target_does_not_block(self, intern_user, make_subscription, plan_a):
        make_subscription("S-1", status=Pending)

        outcome = create_submission(
            intern_user, subscription_code="S-1", plan_id=plan_a.pk, submission_date=date(2026, 1, 10),
        )

        assert SubscriptionSubmission.objects.filter(pk=outcome.submission.pk).exists()
        assert outcome.target_info["code"] == "NO_TARGET_FOUND"

    def test_validation_error_rolls_everything_back(
        self, monkeypatch, intern_user, january_assignment, make_subscription, plan_a,
    ):
        record = make_subscription("S-1", status=Pending)

        def _missing(self, template_id):
            raise TemplateNotFound(template_id)

        monkeypatch.setattr(TargetCatalog, "get_template", _missing)

        with pytest.raises(ReconciliationFailed) as excinfo:
            create_submission(
                intern_user, subscription_code="S-1", plan_id=plan_a.pk, submission_date=date(2026, 1, 10),
            )

        assert excinfo.value.to_dict()["code"] == "VALIDATION_ERROR"
        assert not SubscriptionSubmission.objects.exists()
        record.refresh_from_db()
        assert record.verification_status == Pending

    def test_unknown_code(self, intern_user, plan_a):
        with pytest.raises(SubscriptionNotFound) as excinfo:
            create_submission(intern_user, subscription_code="NOPE", plan_id=plan_a.pk)
        assert excinfo.value.status_code == 404

    @pytest.mark.parametrize("code, plan", [("", "x"), ("S-1", None), ("   ", "x")])
    def test_required_fields(self, intern_user, code, plan):
        with pytest.raises(MissingSubmissionField):
            create_submission(intern_user, subscription_code=code, plan_id=plan)

    def test_mismatch_reports_every_field(self, intern_user, make_subscription, plan_b):
        make_subscription("S-1", status=Pending, email="a@example.com", phone="0711111111")

        with pytest.raises(SubmissionMismatch) as excinfo:
            create_submission(
                intern_user,
                subscription_code="S-1",
                plan_id=plan_b.pk,
                subscriber_email="b@example.com",
                subscriber_phone="0722222222",
            )

        assert excinfo.value.to_dict() == {
            "error": "Provided details do not match our subscription records.",
            "mismatches": [
                "Email does not match.",
                "Phone does not match.",
                "Subscription Plan does not match.",
            ],
        }
        assert not SubscriptionSubmission.objects.exists()


@pytest.mark.django_db
class TestFindMismatches:
    def test_email_comparison_ignores_case(self, make_subscription, plan_a):
        record = make_subscription("S-1", email="Jane@Example.com")
        assert find_mismatches(record, email="jane@example.com ", plan_id=plan_a.pk) == []

    def test_blank_claims_are_not_compared(self, make_subscription, plan_a):
        record = make_subscription("S-1")
        assert find_mismatches(record, plan_id=str(plan_a.pk)) == []


@pytest.mark.django_db
class TestDeleteSubmission:
    def test_owner_can_delete(self, intern_user, make_submission):
        submission = make_submission(intern_user, "S-1", date(2026, 1, 5))
        delete_submission(submission, intern_user)
        assert not SubscriptionSubmission.objects.exists()

    def test_other_user_refused(self, intern_user, manager_user, make_submission):
        submission = make_submission(intern_user, "S-1", date(2026, 1, 5))
        with pytest.raises(PermissionError):
            delete_submission(submission, manager_user)
        assert SubscriptionSubmission.objects.exists()
