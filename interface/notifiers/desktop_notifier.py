"""
Desktop Notifier for goalpath.

Sends system notifications through plyer.
"""
from typing import Any, Dict, Optional

from plyer import notification as plyer_notification

from goalpath.logger import get_logger
from interface.notifiers.base import BaseNotifier, Notification

logger = get_logger("notifiers.desktop")

# 按优先级设置显示时长（秒）
TIMEOUTS = {"low": 3, "normal": 5, "high": 8}


class DesktopNotifier(BaseNotifier):
    """Send notifications via system desktop notifications."""

    def send(self, notification: Notification) -> bool:
        if not self.enabled:
            return False

        try:
            plyer_notification.notify(
                title=notification.title,
                message=notification.message,
                app_name=self.config.get("app_name", "goalpath"),
                timeout=TIMEOUTS.get(notification.priority.value, 5),
            )
            return True
        except (NotImplementedError, OSError, ValueError) as e:
            # 无桌面环境（如服务器）时 plyer 没有可用后端
            logger.warning("Desktop notification failed: %s", e)
            return False

    def get_name(self) -> str:
        return "desktop"
