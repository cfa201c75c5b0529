"""
Webhook Notifier for goalpath.

Sends notifications via HTTP webhooks (e.g., Slack, Discord, custom endpoints).
"""
from typing import Any, Dict, Optional

import httpx

from goalpath.logger import get_logger
from interface.notifiers.base import BaseNotifier, Notification

logger = get_logger("notifiers.webhook")


class WebhookNotifier(BaseNotifier):
    """Send notifications via HTTP webhooks."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, client: Optional[httpx.Client] = None):
        super().__init__(config)
        self.webhook_url = self.config.get("webhook_url", "")
        self.webhook_format = self.config.get("format", "generic")  # generic, slack, discord
        self.timeout = float(self.config.get("timeout", 10.0))
        self._client = client

    def send(self, notification: Notification) -> bool:
        """Send a webhook notification."""
        if not self.is_available():
            return False

        payload = self._build_payload(notification)
        try:
            if self._client is not None:
                response = self._client.post(self.webhook_url, json=payload)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Webhook delivery to %s failed: %s", self.webhook_url, e)
            return False

        if response.status_code >= 400:
            logger.warning("Webhook %s answered %s", self.webhook_url, response.status_code)
            return False
        return True

    def _build_payload(self, notification: Notification) -> Dict[str, Any]:
        """Build webhook payload based on format."""
        if self.webhook_format == "slack":
            return {"text": f"*{notification.title}*\n{notification.message}"}
        if self.webhook_format == "discord":
            return {"content": f"**{notification.title}**\n{notification.message}"}
        return {
            "title": notification.title,
            "message": notification.message,
            "user_id": notification.user_id,
            "kind": notification.kind,
            "priority": notification.priority.value,
            "timestamp": notification.created_at,
        }

    def get_name(self) -> str:
        return "webhook"

    def is_available(self) -> bool:
        return bool(self.enabled and self.webhook_url)
