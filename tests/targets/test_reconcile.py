"""End-to-end reconciliation scenarios."""
from datetime import date

import pytest

from subscriptions.models import Subscription
from targets.catalog import TargetCatalog
from targets.engine import (
    NO_TARGET_FOUND,
    NO_TARGET_MESSAGE,
    VALIDATION_ERROR,
    TargetReconciliationEngine,
    reconcile,
)
from targets.exceptions import TemplateNotFound
from targets.models import TargetAssignment

Status = TargetAssignment.Status


@pytest.mark.django_db
class TestReconcileScenarios:
    def test_quota_met_completes_target(
        self, intern_user, january_assignment, make_subscription, make_submission, plan_a,
    ):
        make_subscription("S-1")
        make_subscription("S-2")
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        make_submission(intern_user, "S-2", date(2026, 1, 10))

        result = reconcile(intern_user.pk, "S-2", date(2026, 1, 10), today=date(2026, 1, 10))

        assert result.success is True
        assert result.subscription_statistics == {
            "total_in_range": 2,
            "verified_count": 2,
            "required_count": 2,
        }
        assert result.target_completion == {
            "is_completed": True,
            "previous_status": Status.ASSIGNED,
            "new_status": Status.COMPLETED,
            "status_updated": True,
        }
        assert result.target_details["target_id"] == str(january_assignment.pk)
        assert result.target_details["target_description"] == "January subscriptions"
        assert result.plan_counts["Monthly Plan"]["target_count"] == 2
        assert result.plan_counts["Monthly Plan"]["verified_count"] == 2
        january_assignment.refresh_from_db()
        assert january_assignment.status == Status.COMPLETED

    def test_short_of_quota_after_deadline_goes_overdue(
        self, intern_user, january_assignment, make_subscription, make_submission,
    ):
        make_subscription("S-1")
        make_submission(intern_user, "S-1", date(2026, 1, 20))

        result = reconcile(intern_user.pk, "S-1", date(2026, 1, 20), today=date(2026, 2, 5))

        assert result.target_completion["is_completed"] is False
        assert result.target_completion["new_status"] == Status.OVERDUE
        january_assignment.refresh_from_db()
        assert january_assignment.status == Status.OVERDUE

    def test_no_assignment_returns_no_target(self, intern_user, january_assignment):
        result = reconcile(intern_user.pk, "S-9", date(2026, 3, 1))

        assert result.to_dict() == {
            "success": False,
            "error": NO_TARGET_MESSAGE,
            "code": NO_TARGET_FOUND,
        }

    def test_open_ended_assignment_never_overdue(
        self, intern_user, template, make_subscription, make_submission,
    ):
        assignment = TargetAssignment.objects.create(
            user=intern_user, template=template, start_date=date(2026, 1, 1), end_date=None,
        )
        make_subscription("S-1")
        make_submission(intern_user, "S-1", date(2026, 1, 5))

        far = date(2030, 6, 1)
        result = reconcile(intern_user.pk, "S-1", far, today=far)

        assert result.subscription_statistics["verified_count"] == 1
        assert result.target_completion["new_status"] == Status.ASSIGNED
        assert result.target_completion["status_updated"] is False
        assignment.refresh_from_db()
        assert assignment.status == Status.ASSIGNED


@pytest.mark.django_db
class TestReconcileProperties:
    def test_second_reconcile_is_idempotent(
        self, intern_user, january_assignment, make_subscription, make_submission,
    ):
        make_subscription("S-1")
        make_subscription("S-2")
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        make_submission(intern_user, "S-2", date(2026, 1, 10))
        engine = TargetReconciliationEngine()

        first = engine.reconcile(intern_user.pk, "S-2", date(2026, 1, 10), today=date(2026, 1, 10))
        second = engine.reconcile(intern_user.pk, "S-2", date(2026, 1, 10), today=date(2026, 1, 10))

        assert first.target_completion["status_updated"] is True
        assert second.target_completion["status_updated"] is False
        assert second.target_completion["previous_status"] == Status.COMPLETED

    def test_completed_target_does_not_regress(
        self, intern_user, january_assignment, make_subscription, make_submission,
    ):
        first = make_subscription("S-1")
        make_subscription("S-2")
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        make_submission(intern_user, "S-2", date(2026, 1, 10))
        reconcile(intern_user.pk, "S-2", date(2026, 1, 10), today=date(2026, 1, 10))

        Subscription.objects.filter(pk=first.pk).update(
            verification_status=Subscription.VerificationStatus.INVALID,
        )
        result = reconcile(intern_user.pk, "S-2", date(2026, 1, 10), today=date(2026, 3, 1))

        assert result.target_completion["is_completed"] is False
        assert result.target_completion["new_status"] == Status.COMPLETED
        assert result.target_completion["status_updated"] is False

    def test_unverified_and_unknown_records_do_not_count(
        self, intern_user, january_assignment, make_subscription, make_submission,
    ):
        make_subscription("S-1")
        make_subscription("S-2", status=Subscription.VerificationStatus.PENDING)
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        make_submission(intern_user, "S-2", date(2026, 1, 6))
        make_submission(intern_user, "S-404", date(2026, 1, 7))

        result = reconcile(intern_user.pk, "S-1", date(2026, 1, 7), today=date(2026, 1, 7))

        assert result.subscription_statistics == {
            "total_in_range": 3,
            "verified_count": 1,
            "required_count": 2,
        }
        assert result.target_completion["new_status"] == Status.ASSIGNED

    def test_submissions_outside_window_ignored(
        self, intern_user, january_assignment, make_subscription, make_submission,
    ):
        make_subscription("S-1")
        make_subscription("S-2")
        make_submission(intern_user, "S-1", date(2025, 12, 31))
        make_submission(intern_user, "S-2", date(2026, 2, 1))

        result = reconcile(intern_user.pk, "S-2", date(2026, 1, 15), today=date(2026, 1, 15))

        assert result.subscription_statistics["total_in_range"] == 0

    def test_failure_becomes_validation_error(self, monkeypatch, intern_user, january_assignment):
        def _missing(self, template_id):
            raise TemplateNotFound(template_id)

        monkeypatch.setattr(TargetCatalog, "get_template", _missing)

        result = reconcile(intern_user.pk, "S-1", date(2026, 1, 10), today=date(2026, 2, 5))

        assert result.success is False
        assert result.code == VALIDATION_ERROR
        assert "not found" in result.error
        january_assignment.refresh_from_db()
        assert january_assignment.status == Status.ASSIGNED

    def test_accepts_datetime_evaluation(self, intern_user, january_assignment):
        from datetime import datetime

        result = reconcile(intern_user.pk, "S-1", datetime(2026, 1, 10, 15, 30), today=date(2026, 1, 10))
        assert result.success is True


@pytest.mark.django_db
class TestProgressPreview:
    def test_progress_does_not_write(
        self, intern_user, january_assignment, make_subscription, make_submission,
    ):
        make_subscription("S-1")
        make_subscription("S-2")
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        make_submission(intern_user, "S-2", date(2026, 1, 10))

        result = TargetReconciliationEngine().progress(january_assignment, today=date(2026, 1, 15))

        assert result.target_completion["is_completed"] is True
        assert result.target_completion["new_status"] == Status.COMPLETED
        assert result.target_completion["status_updated"] is False
        january_assignment.refresh_from_db()
        assert january_assignment.status == Status.ASSIGNED
