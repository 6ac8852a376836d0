from .dispatcher import NotificationDispatcher, get_notification_dispatcher
from .slack_service import SlackService, SlackAPIError

__all__ = [
    "NotificationDispatcher",
    "get_notification_dispatcher",
    "SlackService",
    "SlackAPIError",
]
