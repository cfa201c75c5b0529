"""
Builds notifier instances from the NOTIFIERS config list and fans a
notification out to all of them.
"""
from typing import Any, Dict, List, Sequence

from goalpath.exceptions import ConfigError
from goalpath.logger import get_logger
from interface.notifiers.base import BaseNotifier, Notification
from interface.notifiers.desktop_notifier import DesktopNotifier
from interface.notifiers.webhook_notifier import WebhookNotifier

logger = get_logger("notifiers")

NOTIFIER_TYPES = {
    "desktop": DesktopNotifier,
    "webhook": WebhookNotifier,
}


def build_notifiers(configs: Sequence[Dict[str, Any]]) -> List[BaseNotifier]:
    notifiers = []
    for entry in configs or []:
        kind = entry.get("type")
        cls = NOTIFIER_TYPES.get(kind)
        if cls is None:
            raise ConfigError(f"Unknown notifier type: {kind}")
        notifiers.append(cls(entry))
    return notifiers


def send_all(notifiers: Sequence[BaseNotifier], notification: Notification) -> int:
    """Deliver to every available notifier; returns how many succeeded."""
    delivered = 0
    for notifier in notifiers:
        if not notifier.is_available():
            continue
        if notifier.send(notification):
            delivered += 1
        else:
            logger.warning("Notifier %s could not deliver '%s'", notifier.get_name(), notification.title)
    return delivered
