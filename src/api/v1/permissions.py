"""Custom DRF permissions for the internship management API."""
from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsAdminOrManager(BasePermission):
    """Allow access to users with the ADMIN or MANAGER role."""

    message = "Only administrators and managers can perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "can_manage_targets", False))


class CanViewTargets(BasePermission):
    """Read access for ADMIN, MANAGER and RECRUITER; writes need ADMIN or MANAGER."""

    message = "You do not have access to target assignments."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return bool(getattr(user, "can_view_targets", False))
        return bool(getattr(user, "can_manage_targets", False))


class ReadOnlyOrAdminOrManager(BasePermission):
    """Any authenticated user may read; ADMIN or MANAGER may write."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return bool(getattr(user, "can_manage_targets", False))


class IsOwnerOrAdminOrManager(BasePermission):
    """Object-level check: the submission owner, or an ADMIN/MANAGER."""

    def has_object_permission(self, request, view, obj):
        user = request.user
        if getattr(user, "can_manage_targets", False):
            return True
        return getattr(obj, "user_id", None) == user.pk
