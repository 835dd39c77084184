"""Django admin for the targets module."""
from django.contrib import admin

from targets.models import Plan, TargetAssignment, TargetTemplate


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name",)


@admin.register(TargetTemplate)
class TargetTemplateAdmin(admin.ModelAdmin):
    list_display = ("description", "category", "deadline_days", "total_quota", "status")
    list_filter = ("status", "category")
    search_fields = ("description",)
    readonly_fields = ("created_by", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(TargetAssignment)
class TargetAssignmentAdmin(admin.ModelAdmin):
    list_display = ("user", "template", "start_date", "end_date", "status")
    list_filter = ("status", "template")
    search_fields = ("user__email", "user__first_name", "user__last_name")
    readonly_fields = ("status", "assigned_by", "created_at", "updated_at")
    date_hierarchy = "start_date"
    actions = ("sweep_overdue",)

    def save_model(self, request, obj, form, change):
        if not change and obj.assigned_by_id is None:
            obj.assigned_by = request.user
        super().save_model(request, obj, form, change)

    @admin.action(description="Run the overdue check now")
    def sweep_overdue(self, request, queryset):
        from targets.engine import TargetReconciliationEngine

        changed = TargetReconciliationEngine().sweep_overdue()
        self.message_user(request, f"{changed} assignment(s) changed status.")
