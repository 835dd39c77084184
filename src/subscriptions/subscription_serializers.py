"""DRF Serializers for the subscriptions module."""
from rest_framework import serializers

from subscriptions.models import Subscription, SubscriptionSubmission


class SubscriptionSerializer(serializers.ModelSerializer):
    plan_name = serializers.CharField(source="plan.name", read_only=True)

    class Meta:
        model = Subscription
        fields = [
            "id", "code", "subscriber_name", "email", "phone",
            "plan", "plan_name", "is_active", "verification_status",
            "verified_at", "created_at",
        ]
        read_only_fields = fields


class SubscriptionSubmissionSerializer(serializers.ModelSerializer):
    plan_name = serializers.CharField(source="plan.name", read_only=True)
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = SubscriptionSubmission
        fields = [
            "id", "user", "user_name", "subscription_code",
            "subscriber_email", "subscriber_phone", "plan", "plan_name",
            "submission_date", "proof_file_url", "proof_file_name",
            "validation_status", "validation_reason", "verified_at", "created_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj) -> str:
        return obj.user.get_full_name() or obj.user.email


class SubmissionCreateSerializer(serializers.Serializer):
    """Input for the submission workflow.

    Required-field checks are left to the service so that the error body
    matches the other workflow errors.
    """

    subscription_code = serializers.CharField(required=False, allow_blank=True, max_length=100)
    plan = serializers.UUIDField(required=False, allow_null=True)
    subscriber_email = serializers.EmailField(required=False, allow_blank=True, max_length=150)
    subscriber_phone = serializers.CharField(required=False, allow_blank=True, max_length=30)
    proof_file_url = serializers.CharField(required=False, allow_blank=True)
    proof_file_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    submission_date = serializers.DateField(required=False, allow_null=True)
