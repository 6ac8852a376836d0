import asyncio
import smtplib
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config.settings import get_settings
from services.dataclasses.auth import ResetRecipient
from services.notifications.slack_service import SlackService, SlackAPIError
from utils.email_utils import EmailNotConfiguredError, send_mail_async
from utils.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_ERRORS = (smtplib.SMTPException, OSError, httpx.HTTPError, SlackAPIError)

RESET_EMAIL_TEMPLATE = "reset_password.html.j2"


class NotificationDispatcher:
    """
    Fans out account notifications to email and Slack.
    Each channel is retried on transient errors; a channel that still fails
    is logged and reported as False, never raised to the caller.
    """

    def __init__(
        self,
        email_sender: Optional[Callable[..., Awaitable[Any]]] = None,
        slack_service: Optional[SlackService] = None,
        max_attempts: Optional[int] = None,
        retry_wait=None,
    ):
        settings = get_settings()
        self.email_sender = email_sender or send_mail_async
        self.slack_service = slack_service or SlackService()
        self.max_attempts = max_attempts or settings.NOTIFICATION_MAX_ATTEMPTS
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4)

    @staticmethod
    def build_reset_url(raw_token: str) -> str:
        settings = get_settings()
        return f"{settings.FRONTEND_URL}/reset-password?token={quote(raw_token, safe='')}"

    async def _deliver(self, channel: str, send: Callable[[], Awaitable[Any]]) -> bool:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    await send()
        except EmailNotConfiguredError as e:
            logger.warning(f"Skipping {channel} notification: {e}")
            return False
        except Exception as e:
            logger.error(f"{channel} notification failed after retries: {e}")
            return False
        return True

    async def send_password_reset(self, recipient: ResetRecipient, raw_token: str) -> Dict[str, bool]:
        settings = get_settings()
        reset_url = self.build_reset_url(raw_token)

        async def send_email():
            await self.email_sender(
                template_name=RESET_EMAIL_TEMPLATE,
                recipient_email=recipient.email,
                subject=f"Password recovery - {settings.EMAIL_FROM_NAME}",
                context={
                    "username": recipient.username,
                    "action_url": reset_url,
                    "expires_minutes": settings.RESET_TOKEN_TTL_MINUTES,
                },
            )

        async def send_slack():
            await self.slack_service.notify_password_reset_requested(recipient.username, recipient.email)

        channels = {"email": self._deliver("email", send_email)}
        if self.slack_service.enabled:
            channels["slack"] = self._deliver("slack", send_slack)
        else:
            logger.warning("Skipping slack notification: SLACK_BOT_TOKEN is not set")

        outcomes = await asyncio.gather(*channels.values())
        results = dict(zip(channels.keys(), outcomes))
        logger.info(f"Password reset notification for user {recipient.user_id}: {results}")
        return results


_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
