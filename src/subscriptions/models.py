"""Subscriptions of record and the proofs interns submit against them."""
from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


class Subscription(TimeStampedModel):
    """Canonical subscription, looked up by its human-readable code.

    ``verification_status`` is owned by the verification workflow and is
    the fact target reconciliation counts against.
    """

    class VerificationStatus(models.TextChoices):
        PENDING = "Pending", "Pending"
        VERIFIED = "Verified", "Verified"
        INVALID = "Invalid", "Invalid"
        COMPLETED = "Completed", "Completed"

    code = models.CharField("subscription ID", max_length=100, unique=True)
    subscriber_name = models.CharField("subscriber name", max_length=150)
    email = models.EmailField("email", max_length=150, blank=True)
    phone = models.CharField("phone", max_length=20, blank=True)
    plan = models.ForeignKey(
        "targets.Plan",
        on_delete=models.PROTECT,
        related_name="subscriptions",
        verbose_name="plan",
    )
    is_active = models.BooleanField("active", default=True)
    verification_status = models.CharField(
        "verification status",
        max_length=10,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
        db_index=True,
    )
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_subscriptions",
    )
    verified_at = models.DateTimeField("verified at", null=True, blank=True)

    class Meta:
        verbose_name = "subscription"
        verbose_name_plural = "subscriptions"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.code} ({self.subscriber_name})"

    @property
    def is_verified(self):
        return self.verification_status == self.VerificationStatus.VERIFIED


class SubscriptionSubmission(TimeStampedModel):
    """An intern's claim of having sold a subscription, with proof.

    ``validation_status`` tracks the proof itself (accepted, flagged as a
    duplicate...). Whether it counts toward a target is decided by the
    linked subscription's verification status.
    """

    class ValidationStatus(models.TextChoices):
        PENDING = "PENDING", "Pending"
        VERIFIED = "VERIFIED", "Verified"
        DUPLICATE = "DUPLICATE", "Duplicate"
        INVALID = "INVALID", "Invalid"
        COMPLETED = "COMPLETED", "Completed"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="subscription_submissions",
        verbose_name="intern",
    )
    subscription_code = models.CharField("subscription ID", max_length=100, db_index=True)
    subscriber_email = models.EmailField("subscriber email", max_length=150, blank=True)
    subscriber_phone = models.CharField("subscriber phone", max_length=30, blank=True)
    plan = models.ForeignKey(
        "targets.Plan",
        on_delete=models.PROTECT,
        related_name="submissions",
        verbose_name="plan",
    )
    submission_date = models.DateField("submission date", default=timezone.localdate)
    proof_file_url = models.TextField("proof file URL", blank=True)
    proof_file_name = models.CharField("proof file name", max_length=255, blank=True)
    validation_status = models.CharField(
        "validation status",
        max_length=10,
        choices=ValidationStatus.choices,
        default=ValidationStatus.PENDING,
    )
    validation_reason = models.TextField("validation reason", blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_submissions",
    )
    verified_at = models.DateTimeField("verified at", null=True, blank=True)

    class Meta:
        verbose_name = "subscription submission"
        verbose_name_plural = "subscription submissions"
        ordering = ["-submission_date", "-created_at"]
        indexes = [
            models.Index(fields=["user", "submission_date"], name="submission_user_date_idx"),
        ]

    def __str__(self):
        return f"{self.subscription_code} by {self.user} on {self.submission_date}"
