"""Models for the notifications app."""
from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


class Notification(TimeStampedModel):
    """An in-app notice addressed to one user.

    Created by service functions when something the user should know
    about happens, such as a target being completed or going overdue.
    """

    class Type(models.TextChoices):
        TARGET_ASSIGNED = "TARGET_ASSIGNED", "Target assigned"
        TARGET_COMPLETED = "TARGET_COMPLETED", "Target completed"
        TARGET_OVERDUE = "TARGET_OVERDUE", "Target overdue"
        TARGET_STATUS = "TARGET_STATUS", "Target status changed"
        WARNING = "WARNING", "Warning"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    notification_type = models.CharField(
        "type",
        max_length=30,
        choices=Type.choices,
    )
    title = models.CharField("title", max_length=200)
    message = models.TextField("message")
    payload = models.JSONField(
        "extra data",
        default=dict,
        blank=True,
        help_text="Extra JSON data (e.g. assignment_id, previous_status).",
    )

    is_read = models.BooleanField("read", default=False)
    read_at = models.DateTimeField("read at", null=True, blank=True)

    class Meta:
        verbose_name = "notification"
        verbose_name_plural = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
        ]

    def __str__(self):
        return f"[{self.get_notification_type_display()}] {self.title}"

    def mark_as_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at", "updated_at"])
