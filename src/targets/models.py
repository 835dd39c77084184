"""Models for plans, target templates and per-intern target assignments."""
from __future__ import annotations

import uuid
from datetime import date

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel


class Plan(TimeStampedModel):
    """A subscription product an intern can sell (Monthly Plan, Flex Saver...)."""

    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        INACTIVE = "Inactive", "Inactive"

    name = models.CharField("plan name", max_length=120)
    status = models.CharField(
        "status",
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    class Meta:
        verbose_name = "plan"
        verbose_name_plural = "plans"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class TargetTemplate(TimeStampedModel):
    """Reusable performance goal: required subscription counts per plan.

    ``plans`` is stored as ``{plan_id: required_count}``. A zero count means
    the plan is not required; the sum of all counts is the total quota.
    """

    class Category(models.TextChoices):
        MONTHLY = "Monthly", "Monthly"
        QUARTERLY = "Quarterly", "Quarterly"
        ANNUAL = "Annual", "Annual"

    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        INACTIVE = "Inactive", "Inactive"

    description = models.TextField("target description")
    plans = models.JSONField("plan quotas", default=dict, blank=True)
    deadline_days = models.PositiveIntegerField(
        "deadline (days)",
        validators=[MinValueValidator(1)],
    )
    category = models.CharField(
        "category",
        max_length=10,
        choices=Category.choices,
        default=Category.MONTHLY,
    )
    status = models.CharField(
        "status",
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_target_templates",
    )

    class Meta:
        verbose_name = "target template"
        verbose_name_plural = "target templates"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.description[:60]

    @property
    def quotas(self) -> dict[str, int]:
        return {
            normalize_plan_id(plan_id): int(count)
            for plan_id, count in (self.plans or {}).items()
        }

    @property
    def total_quota(self) -> int:
        return sum(self.quotas.values())

    def clean(self) -> None:
        if not (self.description or "").strip():
            raise ValidationError({"description": "Target description is required."})
        if not isinstance(self.plans, dict):
            raise ValidationError({"plans": "Plans must be a mapping of plan ID to count."})

        for plan_id, count in self.plans.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise ValidationError(
                    {"plans": f"Count for plan {plan_id} must be a non-negative integer."}
                )

        missing = missing_plan_ids(self.plans.keys())
        if missing:
            raise ValidationError(
                {"plans": f"These plan IDs do not exist: {', '.join(missing)}"}
            )
        self.plans = {normalize_plan_id(plan_id): count for plan_id, count in self.plans.items()}


def normalize_plan_id(plan_id) -> str:
    """Canonical text form of a plan id (lowercase, hyphenated).

    Malformed ids are returned unchanged so they still surface as unknown.
    """
    try:
        return str(uuid.UUID(str(plan_id)))
    except ValueError:
        return str(plan_id)


def missing_plan_ids(plan_ids) -> list[str]:
    """Return the ids in *plan_ids* that do not reference an existing Plan."""
    wanted = []
    missing = []
    for plan_id in plan_ids:
        try:
            wanted.append(uuid.UUID(str(plan_id)))
        except ValueError:
            missing.append(str(plan_id))
    found = {
        str(pk) for pk in Plan.objects.filter(pk__in=wanted).values_list("pk", flat=True)
    }
    missing.extend(str(pk) for pk in wanted if str(pk) not in found)
    return missing


class TargetAssignment(TimeStampedModel):
    """One target template bound to one intern for a date window.

    Business rule: an intern cannot hold two overlapping assignments.
    Enforced in model validation; the resolver still breaks ties
    deterministically for rows that predate the rule.
    """

    class Status(models.TextChoices):
        ASSIGNED = "Assigned", "Assigned"
        IN_PROGRESS = "In Progress", "In Progress"
        COMPLETED = "Completed", "Completed"
        OVERDUE = "Overdue", "Overdue"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="target_assignments",
        verbose_name="intern",
    )
    template = models.ForeignKey(
        TargetTemplate,
        on_delete=models.PROTECT,
        related_name="assignments",
        verbose_name="target",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_targets",
    )
    start_date = models.DateField("start date")
    end_date = models.DateField("end date", null=True, blank=True)
    status = models.CharField(
        "status",
        max_length=20,
        choices=Status.choices,
        default=Status.ASSIGNED,
        db_index=True,
    )
    remarks = models.TextField("remarks", blank=True)

    class Meta:
        verbose_name = "target assignment"
        verbose_name_plural = "target assignments"
        ordering = ["-start_date", "-created_at"]
        indexes = [
            models.Index(fields=["user", "start_date"], name="assignment_user_start_idx"),
            models.Index(fields=["status", "end_date"], name="assignment_status_end_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user} - {self.template} ({self.start_date})"

    @property
    def is_terminal(self) -> bool:
        return self.status == self.Status.COMPLETED

    def clean(self) -> None:
        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError("End date must be on or after the start date.")
        if not self.user_id or not self.start_date:
            return

        this_end = self.end_date or date.max
        overlaps = (
            TargetAssignment.objects.filter(
                user_id=self.user_id,
                start_date__lte=this_end,
            )
            .filter(
                models.Q(end_date__isnull=True)
                | models.Q(end_date__gte=self.start_date)
            )
        )
        if self.pk and not self._state.adding:
            overlaps = overlaps.exclude(pk=self.pk)
        if overlaps.exists():
            raise ValidationError(
                "This intern already has a target assignment overlapping this period."
            )
