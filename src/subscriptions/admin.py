"""Django admin for subscriptions and submissions."""
from django.contrib import admin
from django.db import transaction
from django.utils import timezone

from subscriptions.models import Subscription, SubscriptionSubmission


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("code", "subscriber_name", "plan", "verification_status", "is_active")
    list_filter = ("verification_status", "is_active", "plan")
    search_fields = ("code", "subscriber_name", "email", "phone")
    readonly_fields = ("verified_by", "verified_at", "created_at", "updated_at")
    actions = ("mark_verified",)

    @admin.action(description="Mark as verified and re-check interns' targets")
    def mark_verified(self, request, queryset):
        from targets.tasks import reconcile_user_target

        now = timezone.now()
        codes = list(queryset.values_list("code", flat=True))
        queryset.update(
            verification_status=Subscription.VerificationStatus.VERIFIED,
            verified_by=request.user,
            verified_at=now,
            updated_at=now,
        )
        jobs = [
            {
                "user_id": str(user_id),
                "subscription_code": code,
                "evaluation_date": submitted_on.isoformat(),
            }
            for user_id, code, submitted_on in SubscriptionSubmission.objects.filter(
                subscription_code__in=codes,
            ).values_list("user_id", "subscription_code", "submission_date")
        ]

        def _dispatch():
            for job in jobs:
                reconcile_user_target.delay(**job)

        # Workers must see the verified records.
        transaction.on_commit(_dispatch)
        self.message_user(request, f"{len(codes)} subscription(s) marked as verified.")


@admin.register(SubscriptionSubmission)
class SubscriptionSubmissionAdmin(admin.ModelAdmin):
    list_display = ("subscription_code", "user", "plan", "submission_date", "validation_status")
    list_filter = ("validation_status", "plan")
    search_fields = ("subscription_code", "user__email", "subscriber_email")
    date_hierarchy = "submission_date"
    readonly_fields = ("verified_by", "verified_at", "created_at", "updated_at")
