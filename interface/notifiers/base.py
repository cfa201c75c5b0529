"""
Base Notifier for goalpath.

Defines the base interface for all reminder notifiers.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class NotificationPriority(Enum):
    """Notification priority levels."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


@dataclass
class Notification:
    """A reminder to be delivered to one user."""
    title: str
    message: str
    user_id: str = ""
    kind: str = "generic"    # morning | evening | generic
    priority: NotificationPriority = NotificationPriority.NORMAL
    created_at: str = None
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now().isoformat()


class BaseNotifier(ABC):
    """Base class for all notifiers."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.enabled = self.config.get("enabled", True)

    @abstractmethod
    def send(self, notification: Notification) -> bool:
        """
        Send a notification.

        Args:
            notification: The notification to send.

        Returns:
            True if sent successfully, False otherwise.
        """

    @abstractmethod
    def get_name(self) -> str:
        """Return the notifier name."""

    def is_available(self) -> bool:
        """Check if this notifier is available for use."""
        return self.enabled
