"""Tests for quota evaluation and submission aggregation."""
from datetime import date

import pytest

from subscriptions.models import Subscription, SubscriptionSubmission
from targets.engine import (
    AGGREGATE,
    PER_PLAN,
    CompletionEvaluator,
    ResolvedSubmission,
    SubmissionAggregator,
)
from targets.models import TargetTemplate


def _resolved(user, plan, status, code="S-1"):
    submission = SubscriptionSubmission(
        user=user,
        subscription_code=code,
        plan=plan,
        submission_date=date(2026, 1, 5),
    )
    return ResolvedSubmission(submission=submission, verification_status=status)


@pytest.mark.django_db
class TestCompletionEvaluator:
    def test_aggregate_counts_verified_only(self, template, intern_user, plan_a):
        submissions = [
            _resolved(intern_user, plan_a, "Verified", "S-1"),
            _resolved(intern_user, plan_a, "Pending", "S-2"),
            _resolved(intern_user, plan_a, None, "S-3"),
        ]
        result = CompletionEvaluator(policy=AGGREGATE).evaluate(template.pk, submissions)
        assert result.total_count == 3
        assert result.verified_count == 1
        assert result.required_count == 2
        assert result.is_completed is False
        assert [s["subscription_code"] for s in result.verified_submissions] == ["S-1"]

    def test_aggregate_counts_any_plan_toward_total(self, template, intern_user, plan_b):
        submissions = [
            _resolved(intern_user, plan_b, "Verified", "S-1"),
            _resolved(intern_user, plan_b, "Verified", "S-2"),
        ]
        result = CompletionEvaluator(policy=AGGREGATE).evaluate(template.pk, submissions)
        assert result.is_completed is True
        assert result.per_plan[str(plan_b.pk)]["verified_count"] == 2

    def test_per_plan_requires_each_quota(self, template, intern_user, plan_a, plan_b):
        submissions = [
            _resolved(intern_user, plan_b, "Verified", "S-1"),
            _resolved(intern_user, plan_b, "Verified", "S-2"),
        ]
        result = CompletionEvaluator(policy=PER_PLAN).evaluate(template.pk, submissions)
        assert result.is_completed is False
        assert result.per_plan[str(plan_a.pk)] == {"target_count": 2, "verified_count": 0}

    def test_per_plan_met(self, template, intern_user, plan_a):
        submissions = [
            _resolved(intern_user, plan_a, "Verified", "S-1"),
            _resolved(intern_user, plan_a, "Verified", "S-2"),
        ]
        assert CompletionEvaluator(policy=PER_PLAN).evaluate(template.pk, submissions).is_completed

    def test_all_zero_quotas_are_vacuously_complete(self, plan_a):
        empty = TargetTemplate.objects.create(
            description="Nothing required", plans={str(plan_a.pk): 0}, deadline_days=7,
        )
        result = CompletionEvaluator().evaluate(empty.pk, [])
        assert result.required_count == 0
        assert result.is_completed is True

    def test_policy_read_from_settings(self, settings):
        settings.TARGET_COMPLETION_POLICY = "per_plan"
        assert CompletionEvaluator().policy == PER_PLAN

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            CompletionEvaluator(policy="MOST")


@pytest.mark.django_db
class TestSubmissionAggregator:
    def test_collects_window_with_current_status(
        self, intern_user, other_intern, make_subscription, make_submission,
    ):
        make_subscription("S-1", status=Subscription.VerificationStatus.VERIFIED)
        make_subscription("S-2", status=Subscription.VerificationStatus.PENDING)
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        make_submission(intern_user, "S-2", date(2026, 1, 31))
        make_submission(intern_user, "S-GHOST", date(2026, 1, 10))
        make_submission(intern_user, "S-1", date(2026, 2, 1))
        make_submission(other_intern, "S-1", date(2026, 1, 6))

        collected = SubmissionAggregator().collect(intern_user.pk, date(2026, 1, 1), date(2026, 1, 31))

        assert [r.submission.subscription_code for r in collected] == ["S-2", "S-GHOST", "S-1"]
        statuses = {r.submission.subscription_code: r.verification_status for r in collected}
        assert statuses == {"S-1": "Verified", "S-2": "Pending", "S-GHOST": None}
        assert [r.is_verified for r in collected] == [False, False, True]

    def test_status_is_read_fresh(self, intern_user, make_subscription, make_submission):
        record = make_subscription("S-1", status=Subscription.VerificationStatus.VERIFIED)
        make_submission(intern_user, "S-1", date(2026, 1, 5))
        aggregator = SubmissionAggregator()
        assert aggregator.collect(intern_user.pk, date(2026, 1, 1), date(2026, 1, 31))[0].is_verified

        Subscription.objects.filter(pk=record.pk).update(
            verification_status=Subscription.VerificationStatus.INVALID,
        )
        assert not aggregator.collect(intern_user.pk, date(2026, 1, 1), date(2026, 1, 31))[0].is_verified
