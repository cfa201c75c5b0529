import json
from datetime import datetime, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import httpx
import pytest

from goalpath.config_manager import SystemConfig
from goalpath.exceptions import ConfigError, ValidationError
from goalpath.goal_service import GoalService
from goalpath.storage import UserStore
from interface.notifiers.base import BaseNotifier, Notification
from interface.notifiers.desktop_notifier import DesktopNotifier
from interface.notifiers.factory import build_notifiers, send_all
from interface.notifiers.webhook_notifier import WebhookNotifier
from scheduler.reminders import (
    fired_between,
    reminder_tick,
    remove_reminders,
    setup_reminders,
    tick_all_users,
    validate_cron,
)

UTC = timezone.utc
MADRID = ZoneInfo("Europe/Madrid")


class RecordingNotifier(BaseNotifier):
    def __init__(self, ok=True):
        super().__init__()
        self.ok = ok
        self.sent = []

    def send(self, notification):
        self.sent.append(notification)
        return self.ok

    def get_name(self):
        return "recording"


def test_validate_cron():
    assert validate_cron("0 9 * * 1-5") == "0 9 * * 1-5"
    for bad in ("", "every day", "61 9 * * *"):
        with pytest.raises(ValidationError):
            validate_cron(bad)


def test_setup_uses_configured_defaults(service):
    prefs = setup_reminders(service)
    assert prefs.morning_cron == "0 9 * * *"
    assert prefs.evening_cron == "0 20 * * *"
    assert prefs.timezone == "UTC"
    assert service.get_preferences().reminders_enabled


def test_setup_rejects_bad_timezone_without_writing(service):
    with pytest.raises(ValidationError):
        setup_reminders(service, tz="Nowhere/City")
    assert not service.get_preferences().reminders_enabled


def test_fired_between_uses_user_timezone():
    # 09:00 in Madrid is 08:00 UTC in March
    start = datetime(2026, 3, 11, 7, 0, tzinfo=UTC)
    assert fired_between("0 9 * * *", MADRID, start, datetime(2026, 3, 11, 8, 30, tzinfo=UTC))
    assert not fired_between("0 9 * * *", MADRID, start, datetime(2026, 3, 11, 7, 30, tzinfo=UTC))
    assert not fired_between("0 9 * * *", ZoneInfo("UTC"), start, datetime(2026, 3, 11, 8, 30, tzinfo=UTC))


def test_reminder_tick_sends_due_notifications(service, make_draft):
    service.create_goal(make_draft("Run"))
    service.set_preference("name", "Ana")
    setup_reminders(service, "0 9 * * *", "0 20 * * *", "Europe/Madrid")
    notifier = RecordingNotifier()

    # first run only records the check time
    assert reminder_tick(service, [notifier], now=datetime(2026, 3, 19, 6, 0, tzinfo=UTC)) == []

    morning = reminder_tick(service, [notifier], now=datetime(2026, 3, 19, 8, 30, tzinfo=UTC))
    assert [n.kind for n in morning] == ["morning"]
    assert "Run" in morning[0].message
    assert morning[0].data == {"goal_ids": ["run"]}

    assert reminder_tick(service, [notifier], now=datetime(2026, 3, 19, 9, 0, tzinfo=UTC)) == []

    evening = reminder_tick(service, [notifier], now=datetime(2026, 3, 19, 19, 5, tzinfo=UTC))
    assert [n.kind for n in evening] == ["evening"]
    assert ", Ana" in evening[0].message
    assert len(notifier.sent) == 2


def test_morning_reminder_with_nothing_due(service, make_draft):
    service.create_goal(make_draft("Run"))
    setup_reminders(service, "0 9 * * *", "0 20 * * *", "UTC")
    reminder_tick(service, [], now=datetime(2026, 3, 11, 8, 0, tzinfo=UTC))

    sent = reminder_tick(service, [], now=datetime(2026, 3, 11, 9, 30, tzinfo=UTC))
    assert sent[0].message == "Nothing due today. Have a great day!"


def test_no_reminders_after_removal(service):
    setup_reminders(service)
    reminder_tick(service, [], now=datetime(2026, 3, 11, 8, 0, tzinfo=UTC))
    remove_reminders(service)

    assert reminder_tick(service, [], now=datetime(2026, 3, 11, 21, 0, tzinfo=UTC)) == []
    assert service.get_preferences().last_reminder_check is None


def test_tick_all_users(tmp_path, service):
    setup_reminders(service, tz="UTC")
    notifier = RecordingNotifier()
    tick_all_users(tmp_path, [notifier], now=datetime(2026, 3, 11, 8, 0, tzinfo=UTC))

    sent = tick_all_users(tmp_path, [notifier], now=datetime(2026, 3, 11, 9, 1, tzinfo=UTC))
    assert [(n.user_id, n.kind) for n in sent] == [("alice", "morning")]


def test_webhook_notifier_payload_formats():
    received = []

    def handler(request):
        received.append(json.loads(request.content))
        return httpx.Response(200)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    slack = WebhookNotifier({"webhook_url": "https://hooks.example/slack", "format": "slack"}, client=client)
    generic = WebhookNotifier({"webhook_url": "https://hooks.example/any"}, client=client)

    assert slack.send(Notification(title="Morning review", message="Run"))
    assert generic.send(Notification(title="T", message="M", user_id="alice", kind="evening"))

    assert received[0] == {"text": "*Morning review*\nRun"}
    assert received[1]["user_id"] == "alice"
    assert received[1]["kind"] == "evening"


def test_webhook_notifier_failures():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    assert not WebhookNotifier({"webhook_url": "https://hooks.example/x"}, client=client).send(
        Notification(title="T", message="M")
    )
    assert not WebhookNotifier({}).is_available()

    def boom(request):
        raise httpx.ConnectError("refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(boom))
    assert not WebhookNotifier({"webhook_url": "https://hooks.example/x"}, client=client).send(
        Notification(title="T", message="M")
    )


def test_desktop_notifier(monkeypatch):
    calls = []
    monkeypatch.setattr(
        "interface.notifiers.desktop_notifier.plyer_notification",
        SimpleNamespace(notify=lambda **kwargs: calls.append(kwargs)),
    )
    assert DesktopNotifier().send(Notification(title="T", message="M"))
    assert calls[0]["title"] == "T"

    def unsupported(**kwargs):
        raise NotImplementedError("no backend")

    monkeypatch.setattr(
        "interface.notifiers.desktop_notifier.plyer_notification",
        SimpleNamespace(notify=unsupported),
    )
    assert not DesktopNotifier().send(Notification(title="T", message="M"))
    assert not DesktopNotifier({"enabled": False}).send(Notification(title="T", message="M"))


def test_build_notifiers_and_send_all():
    notifiers = build_notifiers([{"type": "desktop"}, {"type": "webhook", "webhook_url": "https://x"}])
    assert [n.get_name() for n in notifiers] == ["desktop", "webhook"]

    with pytest.raises(ConfigError):
        build_notifiers([{"type": "pager"}])

    ok, failing = RecordingNotifier(), RecordingNotifier(ok=False)
    assert send_all([ok, failing], Notification(title="T", message="M")) == 1


def test_tick_all_users_skips_unreadable_users(tmp_path, clock):
    carol = GoalService(UserStore("carol", tmp_path), config=SystemConfig(), clock=clock)
    setup_reminders(carol, tz="UTC")

    bob_dir = tmp_path / "users" / "bob"
    bob_dir.mkdir(parents=True)
    (bob_dir / "preferences.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "users" / "-bad id").mkdir()

    tick_all_users(tmp_path, [], now=datetime(2026, 3, 11, 8, 0, tzinfo=UTC))
    sent = tick_all_users(tmp_path, [], now=datetime(2026, 3, 11, 9, 1, tzinfo=UTC))

    assert [(n.user_id, n.kind) for n in sent] == [("carol", "morning")]
