"""DRF Serializers for the targets module."""
from __future__ import annotations

from datetime import timedelta

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from targets.catalog import PlanCatalog
from targets.models import (
    Plan,
    TargetAssignment,
    TargetTemplate,
    missing_plan_ids,
    normalize_plan_id,
)


# ────────────────────────────────────────────────────────────
# Plans & templates
# ────────────────────────────────────────────────────────────

class PlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = Plan
        fields = ["id", "name", "status", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class TargetTemplateSerializer(serializers.ModelSerializer):
    plan_names = serializers.SerializerMethodField()
    total_quota = serializers.IntegerField(read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = TargetTemplate
        fields = [
            "id", "description", "plans", "plan_names", "total_quota",
            "deadline_days", "category", "status",
            "created_by", "created_by_name", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]

    def get_plan_names(self, obj) -> dict:
        return PlanCatalog().get_plan_names(obj.quotas.keys())

    def get_created_by_name(self, obj) -> str | None:
        if obj.created_by is None:
            return None
        return obj.created_by.get_full_name() or obj.created_by.email

    def validate_description(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Target description is required.")
        return value.strip()

    def validate_deadline_days(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("Deadline must be a positive number of days.")
        return value

    def validate_plans(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Plans must be an object mapping plan ID to count.")
        cleaned = {}
        for plan_id, count in value.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise serializers.ValidationError(
                    f"Count for plan {plan_id} must be a non-negative integer."
                )
            cleaned[normalize_plan_id(plan_id)] = count
        missing = missing_plan_ids(cleaned.keys())
        if missing:
            raise serializers.ValidationError(
                f"These plan IDs do not exist: {', '.join(missing)}"
            )
        return cleaned


# ────────────────────────────────────────────────────────────
# Assignments
# ────────────────────────────────────────────────────────────

class TargetAssignmentSerializer(serializers.ModelSerializer):
    """Assignment read/write serializer.

    ``status`` is read-only: it only moves through reconciliation.
    ``derive_end_date`` (write-only) fills a missing end date from the
    template's ``deadline_days``.
    """

    user_name = serializers.SerializerMethodField()
    template_description = serializers.CharField(source="template.description", read_only=True)
    assigned_by_name = serializers.SerializerMethodField()
    derive_end_date = serializers.BooleanField(write_only=True, required=False, default=False)

    class Meta:
        model = TargetAssignment
        fields = [
            "id", "user", "user_name", "template", "template_description",
            "assigned_by", "assigned_by_name", "start_date", "end_date",
            "status", "remarks", "derive_end_date", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "assigned_by", "status", "created_at", "updated_at"]

    def get_user_name(self, obj) -> str:
        return obj.user.get_full_name() or obj.user.email

    def get_assigned_by_name(self, obj) -> str | None:
        if obj.assigned_by is None:
            return None
        return obj.assigned_by.get_full_name() or obj.assigned_by.email

    def validate(self, attrs):
        derive = attrs.pop("derive_end_date", False)
        template = attrs.get("template") or getattr(self.instance, "template", None)
        start_date = attrs.get("start_date") or getattr(self.instance, "start_date", None)

        if derive and not attrs.get("end_date") and template and start_date:
            attrs["end_date"] = start_date + timedelta(days=template.deadline_days - 1)

        # Run model-level checks (date order, overlap) on an unsaved copy.
        if self.instance is not None:
            candidate = TargetAssignment(
                id=self.instance.pk,
                user=self.instance.user,
                template=self.instance.template,
                start_date=self.instance.start_date,
                end_date=self.instance.end_date,
            )
            candidate._state.adding = False
        else:
            candidate = TargetAssignment()
        for field, value in attrs.items():
            setattr(candidate, field, value)
        try:
            candidate.clean()
        except DjangoValidationError as exc:
            raise serializers.ValidationError(
                exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
            )
        return attrs

