from typing import Any, Dict, List, Optional

import httpx

from config.settings import get_settings
from utils.logging import get_logger

logger = get_logger(__name__)


class SlackAPIError(Exception):
    """Slack answered with ok=false or a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SlackService:
    """
    Minimal chat.postMessage client
    """

    def __init__(
        self,
        token: Optional[str] = None,
        channel: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.token = token if token is not None else settings.SLACK_BOT_TOKEN
        self.channel = channel or settings.SLACK_CHANNEL
        self.api_url = api_url or settings.SLACK_API_URL
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.token)

    async def post_message(self, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"channel": self.channel, "text": text}
        if blocks:
            payload["blocks"] = blocks

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.api_url, json=payload, headers=headers)

        if response.status_code >= 400:
            raise SlackAPIError(f"Slack HTTP {response.status_code}", status_code=response.status_code)

        data = response.json()
        if not data.get("ok"):
            raise SlackAPIError(f"Slack error: {data.get('error', 'unknown')}", status_code=response.status_code)

        logger.debug(f"Slack message posted to {self.channel}")
        return data

    async def notify_password_reset_requested(self, username: str, email: str) -> Dict[str, Any]:
        text = f"Password reset requested for *{username}* ({email})"
        blocks = [
            {"type": "section", "text": {"type": "mrkdwn", "text": f":key: {text}"}},
        ]
        return await self.post_message(text, blocks=blocks)
