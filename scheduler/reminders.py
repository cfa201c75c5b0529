"""
Reminder Scheduler for goalpath.

Each user may store a morning and an evening cron expression together with
a timezone. A tick compares every expression against the window
(last_reminder_check, now] in the user's timezone and emits one
notification per expression that fired inside it.

触发条件: cron 在窗口内至少触发一次
失效条件: 首次运行（仅记录检查时间）
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from croniter import croniter

from goalpath.exceptions import GoalPathError, ValidationError
from goalpath.goal_service import GoalService, check_timezone
from goalpath.i18n import translate
from goalpath.logger import get_logger
from goalpath.models import UserPreferences
from goalpath.storage import UserStore, list_user_ids
from interface.notifiers.base import BaseNotifier, Notification, NotificationPriority
from interface.notifiers.factory import build_notifiers, send_all

logger = get_logger("reminders")


def validate_cron(expression: str, field: str = "cron") -> str:
    if not expression or not croniter.is_valid(expression):
        raise ValidationError(f"Invalid cron expression: {expression!r}", field=field)
    return expression


def setup_reminders(
    service: GoalService,
    morning_cron: Optional[str] = None,
    evening_cron: Optional[str] = None,
    tz: Optional[str] = None,
) -> UserPreferences:
    """Validate and store the reminder schedule. Nothing is written on error."""
    prefs = service.get_preferences()
    morning = validate_cron(morning_cron or service.config.MORNING_REMINDER_CRON, "morning_cron")
    evening = validate_cron(evening_cron or service.config.EVENING_REMINDER_CRON, "evening_cron")
    tz_name = check_timezone(tz or prefs.timezone or service.config.DEFAULT_TIMEZONE)

    prefs.morning_cron = morning
    prefs.evening_cron = evening
    prefs.timezone = tz_name
    service.save_preferences(prefs)

    logger.info("Reminders set for %s: %s / %s (%s)", service.user_id, morning, evening, tz_name)
    return prefs


def remove_reminders(service: GoalService) -> UserPreferences:
    prefs = service.get_preferences()
    prefs.morning_cron = None
    prefs.evening_cron = None
    prefs.last_reminder_check = None
    service.save_preferences(prefs)

    logger.info("Reminders removed for %s", service.user_id)
    return prefs


def _as_utc(value: datetime) -> datetime:
    # naive datetimes are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def fired_between(expression: str, tz: ZoneInfo, start: datetime, end: datetime) -> bool:
    """True when the cron expression fires in (start, end], evaluated in tz."""
    local_start = _as_utc(start).astimezone(tz)
    local_end = _as_utc(end).astimezone(tz)
    upcoming = croniter(expression, local_start).get_next(datetime)
    return upcoming <= local_end


def morning_notification(service: GoalService, prefs: UserPreferences, now: datetime) -> Notification:
    locale = service.locale()
    today = _as_utc(now).astimezone(ZoneInfo(prefs.timezone)).date()
    due = service.goals_needing_attention(today)
    if due:
        body = translate(locale, "reminders.morningBody", {"titles": ", ".join(g.title for g in due)})
        priority = NotificationPriority.HIGH
    else:
        body = translate(locale, "reminders.morningNothing")
        priority = NotificationPriority.LOW

    return Notification(
        title=translate(locale, "reminders.morningTitle"),
        message=body,
        user_id=service.user_id,
        kind="morning",
        priority=priority,
        data={"goal_ids": [g.id for g in due]},
    )


def evening_notification(service: GoalService, prefs: UserPreferences) -> Notification:
    locale = service.locale()
    return Notification(
        title=translate(locale, "reminders.eveningTitle"),
        message=translate(locale, "reminders.eveningBody", {"name": f", {prefs.name}" if prefs.name else ""}),
        user_id=service.user_id,
        kind="evening",
    )


def due_reminders(service: GoalService, now: datetime) -> List[Notification]:
    """
    Notifications whose cron fired since the last check, then record now as
    the last check. The first run only records the check time.
    """
    prefs = service.get_preferences()
    if not prefs.reminders_enabled:
        return []

    now_utc = _as_utc(now)
    last_check = prefs.last_reminder_check
    prefs.last_reminder_check = now_utc.isoformat()

    notifications = []
    if last_check:
        tz = ZoneInfo(prefs.timezone)
        start = datetime.fromisoformat(last_check)
        if prefs.morning_cron and fired_between(prefs.morning_cron, tz, start, now_utc):
            notifications.append(morning_notification(service, prefs, now_utc))
        if prefs.evening_cron and fired_between(prefs.evening_cron, tz, start, now_utc):
            notifications.append(evening_notification(service, prefs))

    service.save_preferences(prefs)
    return notifications


def reminder_tick(
    service: GoalService,
    notifiers: Sequence[BaseNotifier],
    now: Optional[datetime] = None,
) -> List[Notification]:
    now = now or datetime.now(timezone.utc)
    notifications = due_reminders(service, now)
    for notification in notifications:
        delivered = send_all(notifiers, notification)
        logger.info(
            "Reminder '%s' for %s delivered via %d notifier(s)",
            notification.kind, service.user_id, delivered,
        )
    return notifications


def tick_all_users(
    base_dir: Optional[Path] = None,
    notifiers: Optional[Sequence[BaseNotifier]] = None,
    now: Optional[datetime] = None,
) -> List[Notification]:
    """Run one reminder tick for every stored user."""
    sent: List[Notification] = []
    for user_id in list_user_ids(base_dir):
        try:
            service = GoalService(UserStore(user_id, base_dir))
            if notifiers is None:
                notifiers = build_notifiers(service.config.NOTIFIERS)
            sent.extend(reminder_tick(service, notifiers, now))
        except GoalPathError as e:
            logger.error("Reminder tick skipped user %r: %s", user_id, e.message)
    return sent
