from datetime import date

import pytest
from rest_framework.test import APIClient

from accounts.models import User
from subscriptions.models import Subscription, SubscriptionSubmission
from targets.models import Plan, TargetAssignment, TargetTemplate


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        first_name="Admin",
        last_name="User",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def manager_user(db):
    return User.objects.create_user(
        email="manager@test.com",
        password="testpass123",
        first_name="Manager",
        last_name="User",
        role=User.Role.MANAGER,
    )


@pytest.fixture
def recruiter_user(db):
    return User.objects.create_user(
        email="recruiter@test.com",
        password="testpass123",
        first_name="Recruiter",
        last_name="User",
        role=User.Role.RECRUITER,
    )


@pytest.fixture
def intern_user(db):
    return User.objects.create_user(
        email="intern@test.com",
        password="testpass123",
        first_name="Intern",
        last_name="User",
        role=User.Role.INTERN,
    )


@pytest.fixture
def other_intern(db):
    return User.objects.create_user(
        email="intern2@test.com",
        password="testpass123",
        first_name="Second",
        last_name="Intern",
        role=User.Role.INTERN,
    )


@pytest.fixture
def plan_a(db):
    return Plan.objects.create(name="Monthly Plan")


@pytest.fixture
def plan_b(db):
    return Plan.objects.create(name="Flex Saver")


@pytest.fixture
def template(plan_a, plan_b, manager_user):
    return TargetTemplate.objects.create(
        description="January subscriptions",
        plans={str(plan_a.pk): 2, str(plan_b.pk): 0},
        deadline_days=31,
        created_by=manager_user,
    )


@pytest.fixture
def january_assignment(intern_user, template, manager_user):
    return TargetAssignment.objects.create(
        user=intern_user,
        template=template,
        assigned_by=manager_user,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 1, 31),
    )


@pytest.fixture
def make_subscription(db, plan_a):
    def _make(code, *, plan=None, status=Subscription.VerificationStatus.VERIFIED, **extra):
        return Subscription.objects.create(
            code=code,
            subscriber_name=extra.pop("subscriber_name", f"Subscriber {code}"),
            email=extra.pop("email", f"{code.lower()}@example.com"),
            phone=extra.pop("phone", "0700000000"),
            plan=plan or plan_a,
            verification_status=status,
            **extra,
        )

    return _make


@pytest.fixture
def make_submission(db, plan_a):
    def _make(user, code, submitted_on, *, plan=None, **extra):
        return SubscriptionSubmission.objects.create(
            user=user,
            subscription_code=code,
            plan=plan or plan_a,
            submission_date=submitted_on,
            validation_status=extra.pop(
                "validation_status", SubscriptionSubmission.ValidationStatus.VERIFIED
            ),
            **extra,
        )

    return _make


@pytest.fixture
def api_client():
    return APIClient()
