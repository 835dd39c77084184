"""API views for the targets module."""
from __future__ import annotations

import logging

from django.db.models import ProtectedError
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from api.v1.pagination import StandardResultsSetPagination
from api.v1.permissions import CanViewTargets, ReadOnlyOrAdminOrManager
from core.services import create_audit_log
from notifications.services import notify_target_assigned
from targets.engine import TargetReconciliationEngine
from targets.models import Plan, TargetAssignment, TargetTemplate
from targets.target_serializers import (
    PlanSerializer,
    TargetAssignmentSerializer,
    TargetTemplateSerializer,
)

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────
# Plans
# ────────────────────────────────────────────────────────────

class PlanViewSet(viewsets.ModelViewSet):
    queryset = Plan.objects.all()
    serializer_class = PlanSerializer
    permission_classes = [permissions.IsAuthenticated, ReadOnlyOrAdminOrManager]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["status"]
    search_fields = ["name"]

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except ProtectedError:
            return Response(
                {"detail": "This plan is referenced by subscriptions and cannot be deleted."},
                status=status.HTTP_409_CONFLICT,
            )


# ────────────────────────────────────────────────────────────
# Target templates
# ────────────────────────────────────────────────────────────

class TargetTemplateViewSet(viewsets.ModelViewSet):
    queryset = TargetTemplate.objects.select_related("created_by")
    serializer_class = TargetTemplateSerializer
    permission_classes = [permissions.IsAuthenticated, ReadOnlyOrAdminOrManager]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status", "category"]
    search_fields = ["description"]
    ordering_fields = ["created_at", "deadline_days"]

    def perform_create(self, serializer):
        template = serializer.save(created_by=self.request.user)
        logger.info("Target template %s created by %s", template.pk, self.request.user.pk)

    @action(detail=False, methods=["get"])
    def active(self, request):
        """GET /api/v1/target-templates/active/"""
        qs = self.filter_queryset(
            self.get_queryset().filter(status=TargetTemplate.Status.ACTIVE)
        )
        serializer = self.get_serializer(qs, many=True)
        return Response(serializer.data)

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except ProtectedError:
            return Response(
                {"detail": "This target is assigned to interns and cannot be deleted."},
                status=status.HTTP_409_CONFLICT,
            )


# ────────────────────────────────────────────────────────────
# Target assignments
# ────────────────────────────────────────────────────────────

class TargetAssignmentViewSet(viewsets.ModelViewSet):
    """Assign targets to interns and inspect their progress.

    The ``status`` field is never writable here; it changes only when
    reconciliation runs.
    """

    serializer_class = TargetAssignmentSerializer
    permission_classes = [permissions.IsAuthenticated, CanViewTargets]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ["user", "status", "template"]
    ordering_fields = ["start_date", "end_date", "created_at"]

    def get_queryset(self):
        return TargetAssignment.objects.select_related("user", "template", "assigned_by")

    def get_permissions(self):
        if self.action == "mine":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def perform_create(self, serializer):
        assignment = serializer.save(assigned_by=self.request.user)
        create_audit_log(
            action="TARGET_ASSIGNED",
            entity_type="TargetAssignment",
            entity_id=str(assignment.pk),
            actor=self.request.user,
            after={
                "user": str(assignment.user_id),
                "template": str(assignment.template_id),
                "start_date": assignment.start_date.isoformat(),
                "end_date": assignment.end_date.isoformat() if assignment.end_date else None,
            },
        )
        notify_target_assigned(assignment)

    @action(detail=True, methods=["get"])
    def progress(self, request, pk=None):
        """GET /api/v1/target-assignments/{id}/progress/

        Read-only preview of the reconciliation statistics.
        """
        assignment = self.get_object()
        result = TargetReconciliationEngine().progress(assignment)
        return Response(result.to_dict())

    @action(detail=False, methods=["get"])
    def mine(self, request):
        """GET /api/v1/target-assignments/mine/"""
        qs = self.filter_queryset(self.get_queryset().filter(user=request.user))
        page = self.paginate_queryset(qs)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(qs, many=True)
        return Response(serializer.data)
