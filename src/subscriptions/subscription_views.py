"""API views for subscriptions of record and intern submissions."""
from __future__ import annotations

import logging
import uuid

from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from api.v1.pagination import SubmissionPagination
from api.v1.permissions import IsOwnerOrAdminOrManager
from subscriptions.models import Subscription, SubscriptionSubmission
from subscriptions.services import (
    DUPLICATE_MESSAGE,
    SubmissionError,
    create_submission,
    delete_submission,
)
from subscriptions.subscription_serializers import (
    SubmissionCreateSerializer,
    SubscriptionSerializer,
    SubscriptionSubmissionSerializer,
)

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────
# Subscriptions of record
# ────────────────────────────────────────────────────────────

class SubscriptionViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """GET /api/v1/subscriptions/{code}/"""

    queryset = Subscription.objects.select_related("plan")
    serializer_class = SubscriptionSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = "code"
    lookup_value_regex = "[^/]+"


# ────────────────────────────────────────────────────────────
# Submissions
# ────────────────────────────────────────────────────────────

class SubscriptionSubmissionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Intern submissions of subscription proof.

    Interns see only their own submissions; ADMIN / MANAGER / RECRUITER
    users see everyone's.
    """

    serializer_class = SubscriptionSubmissionSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdminOrManager]
    pagination_class = SubmissionPagination

    def get_queryset(self):
        user = self.request.user
        qs = SubscriptionSubmission.objects.select_related("user", "plan")
        if not getattr(user, "can_view_targets", False) or self.request.query_params.get("mine") in ("1", "true"):
            qs = qs.filter(user=user)
        code = self.request.query_params.get("subscription")
        if code:
            qs = qs.filter(subscription_code=code)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = SubmissionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            outcome = create_submission(
                request.user,
                subscription_code=data.get("subscription_code", ""),
                plan_id=data.get("plan"),
                subscriber_email=data.get("subscriber_email", ""),
                subscriber_phone=data.get("subscriber_phone", ""),
                proof_file_url=data.get("proof_file_url", ""),
                proof_file_name=data.get("proof_file_name", ""),
                submission_date=data.get("submission_date"),
            )
        except SubmissionError as exc:
            return Response(exc.to_dict(), status=exc.status_code)

        payload = self.get_serializer(outcome.submission).data
        if outcome.duplicate:
            return Response(
                {"message": DUPLICATE_MESSAGE, "data": payload, "target_info": outcome.target_info},
                status=status.HTTP_200_OK,
            )
        return Response(
            {"success": True, "data": payload, "target_info": outcome.target_info},
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, *args, **kwargs):
        submission = self.get_object()
        try:
            delete_submission(submission, request.user)
        except PermissionError as exc:
            return Response({"error": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        return Response({"message": "Submission deleted successfully"}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path=r"user/(?P<user_id>[^/.]+)")
    def by_user(self, request, user_id=None):
        """GET /api/v1/subscription-submissions/user/{user_id}/"""
        try:
            user_id = uuid.UUID(str(user_id))
        except ValueError:
            return Response({"error": "Invalid user ID"}, status=status.HTTP_400_BAD_REQUEST)
        if str(request.user.pk) != str(user_id) and not getattr(request.user, "can_view_targets", False):
            return Response(
                {"error": "Not authorized to view these submissions"},
                status=status.HTTP_403_FORBIDDEN,
            )
        qs = SubscriptionSubmission.objects.select_related("user", "plan").filter(user_id=user_id)
        page = self.paginate_queryset(qs)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(self.get_serializer(qs, many=True).data)
