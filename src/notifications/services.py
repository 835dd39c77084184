"""Service functions for the notifications app."""
import logging

from notifications.models import Notification

logger = logging.getLogger("internhub")

_STATUS_NOTICES = {
    "Completed": (
        Notification.Type.TARGET_COMPLETED,
        "Target completed",
        "Congratulations, you have reached your target \"{description}\".",
    ),
    "Overdue": (
        Notification.Type.TARGET_OVERDUE,
        "Target overdue",
        "Your target \"{description}\" ended on {end_date} without being completed.",
    ),
}


def create_notification(user, notification_type, title, message, payload=None):
    """Create and return a new Notification for *user*.

    Parameters
    ----------
    user : accounts.models.User
        Recipient.
    notification_type : str
        One of ``Notification.Type`` values.
    title : str
        Short human-readable title (max 200 chars).
    message : str
        Body text.
    payload : dict, optional
        Extra JSON-serialisable data to store on the notification.
    """
    notification = Notification.objects.create(
        user=user,
        notification_type=notification_type,
        title=title,
        message=message,
        payload=payload or {},
    )
    logger.info(
        "Notification created: [%s] %s for user %s",
        notification_type, title, user.pk,
    )
    return notification


def notify_assignment_status_change(assignment, previous_status, new_status):
    """Tell the intern that their target assignment changed status."""
    notification_type, title, template = _STATUS_NOTICES.get(
        new_status,
        (
            Notification.Type.TARGET_STATUS,
            "Target status changed",
            "Your target \"{description}\" is now {status}.",
        ),
    )
    message = template.format(
        description=assignment.template.description,
        end_date=assignment.end_date,
        status=new_status,
    )
    return create_notification(
        user=assignment.user,
        notification_type=notification_type,
        title=title,
        message=message,
        payload={
            "assignment_id": str(assignment.pk),
            "previous_status": previous_status,
            "new_status": new_status,
        },
    )


def notify_target_assigned(assignment):
    """Tell the intern that a new target has been assigned to them."""
    window = f"from {assignment.start_date}"
    if assignment.end_date:
        window += f" to {assignment.end_date}"
    return create_notification(
        user=assignment.user,
        notification_type=Notification.Type.TARGET_ASSIGNED,
        title="New target assigned",
        message=f"You have a new target \"{assignment.template.description}\" {window}.",
        payload={"assignment_id": str(assignment.pk)},
    )
