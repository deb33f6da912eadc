"""
Approval notification enqueue.

Messages are pushed to a Redis list for a separate mail worker. Enqueue is
fire-and-forget: a failure is logged and reported as ``False`` and never
affects the approval that triggered it.
"""

from datetime import UTC, datetime

from showfinder.config import settings
from showfinder.features.show_review.errors import TransientIOError
from showfinder.infrastructure.observability.logging import get_logger
from showfinder.services.redis_client import fast_redis

logger = get_logger(__name__)

APP_STORE_URL = "https://apps.apple.com/app/id6749461733"


def build_approval_email(organizer_name: str | None, show_title: str, start_date: datetime) -> dict[str, str]:
    """Subject and plain-text body for an approved show."""
    subject = f'Your show "{show_title}" has been approved!'
    body = (
        f"Hi {organizer_name or 'there'},\n\n"
        f'Great news! Your show "{show_title}" has been approved and is now live '
        "on the Card Show Finder app!\n\n"
        f"Show Date: {start_date.strftime('%A, %B %d, %Y')}\n\n"
        "Collectors can now find and save your show in the app. Here's what happens next:\n\n"
        "- Your show is now visible to card collectors\n"
        "- Users will receive notifications if they're near your show\n"
        "- Collectors can mark your show as a favorite\n"
        "- They'll get reminders before your show starts\n\n"
        "Tips for Success:\n"
        "- Share your show on social media and mention it's on Card Show Finder\n"
        "- Encourage attendees to leave reviews after the show\n"
        "- Update your show details if anything changes\n\n"
        "Questions? Just reply to this email.\n\n"
        "Best regards,\n"
        "The Card Show Finder Team\n\n"
        "---\n"
        f"iOS: {APP_STORE_URL}\n"
    )
    return {"subject": subject, "body": body}


class NotificationService:
    async def enqueue_approval(
        self,
        *,
        organizer_email: str,
        organizer_name: str | None,
        show_id: str,
        show_title: str,
        start_date: datetime,
        pending_id: str,
    ) -> bool:
        """
        Queue the approval email. Never raises.

        Returns:
            True when the message reached the queue
        """
        try:
            message = build_approval_email(organizer_name, show_title, start_date)
            message.update(
                {
                    "type": "show_approved",
                    "recipientEmail": organizer_email,
                    "showId": show_id,
                    "pendingId": pending_id,
                    "queuedAt": datetime.now(UTC).isoformat(),
                }
            )
            if not await fast_redis.push_json(settings.NOTIFICATION_QUEUE_KEY, message):
                raise TransientIOError("Notification queue unavailable", pending_id=pending_id)
        except TransientIOError as e:
            logger.warning("Approval notification not queued", pending_id=pending_id, show_id=show_id, error=e.message)
            return False
        except Exception as e:
            logger.error(
                "Approval notification enqueue failed",
                pending_id=pending_id,
                show_id=show_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logger.info("Approval notification queued", pending_id=pending_id, show_id=show_id)
        return True


notification_service = NotificationService()
