"""
CLI 命令：goalpath
目标、回顾、洞察与提醒的命令行入口
"""
import functools
import json
from pathlib import Path
from typing import Optional

import click

from goalpath.config_manager import config
from goalpath.exceptions import GoalPathError, ValidationError
from goalpath.goal_service import GoalService
from goalpath.i18n import translate
from goalpath.lifecycle import GoalDraft
from goalpath.logger import setup_logging
from goalpath.models import GoalFrequency, GoalStatus, GoalType, ReviewRating
from goalpath.storage import UserStore
from interface import presenter
from interface.notifiers.factory import build_notifiers
from interface.tool_dispatcher import ToolDispatcher
from scheduler.reminders import remove_reminders, reminder_tick, setup_reminders, tick_all_users


def _choices(enum_cls):
    return click.Choice([m.value for m in enum_cls])


def handle_errors(f):
    """Print known errors in the user's language and exit with status 1."""
    @functools.wraps(f)
    @click.pass_context
    def wrapper(ctx, *args, **kwargs):
        try:
            return f(ctx, *args, **kwargs)
        except GoalPathError as e:
            locale = ctx.obj.get("locale", config.DEFAULT_LOCALE) if ctx.obj else config.DEFAULT_LOCALE
            click.echo(f"❌ {e.get_user_message(locale)}", err=True)
            ctx.exit(1)
    return wrapper


def _service(ctx) -> GoalService:
    return ctx.obj["service"]


def _locale(ctx) -> str:
    return ctx.obj["locale"]


@click.group()
@click.option("--user", "user_id", envvar="GOALPATH_USER", default=None, help="User id (default from config)")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), envvar="GOALPATH_DATA_DIR", default=None)
@click.pass_context
def goals(ctx, user_id: Optional[str], data_dir: Optional[Path]):
    """goalpath: 个人目标追踪"""
    setup_logging()
    ctx.ensure_object(dict)
    try:
        service = GoalService(UserStore(user_id or config.DEFAULT_USER_ID, data_dir))
        locale = service.locale()
    except GoalPathError as e:
        click.echo(f"❌ {e.get_user_message()}", err=True)
        ctx.exit(1)
    ctx.obj.update(service=service, locale=locale, data_dir=data_dir)


@goals.command()
@click.argument("title")
@click.option("--type", "goal_type", type=_choices(GoalType), required=True)
@click.option("--frequency", type=_choices(GoalFrequency), required=True)
@click.option("--target", type=float, required=True)
@click.option("--unit", required=True)
@click.option("--why", required=True, help="为什么这个目标重要")
@click.option("--description", default=None)
@click.option("--identity", default=None, help='"I am someone who..."')
@click.option("--parent", "parent_id", default=None)
@click.option("--tag", "tags", multiple=True)
@click.option("--requires", "prerequisites", multiple=True, help="Prerequisite goal id (repeatable)")
@handle_errors
def add(ctx, title, goal_type, frequency, target, unit, why, description, identity, parent_id, tags, prerequisites):
    """创建目标"""
    draft = GoalDraft(
        title=title,
        type=GoalType(goal_type),
        frequency=GoalFrequency(frequency),
        target=target,
        unit=unit,
        why=why,
        description=description,
        identity=identity,
        parent_id=parent_id,
        tags=list(tags),
        prerequisites=list(prerequisites),
    )
    goal = _service(ctx).create_goal(draft)
    click.echo(presenter.render_created(_locale(ctx), goal))


@goals.command(name="list")
@click.option("--status", type=click.Choice([s.value for s in GoalStatus] + ["all"]), default=None)
@click.option("--tag", "tags", multiple=True)
@click.option("--parent", "parent_id", default=None)
@handle_errors
def list_cmd(ctx, status, tags, parent_id):
    """列出目标"""
    goals_ = _service(ctx).list_goals(status=status, tags=list(tags) or None, parent_id=parent_id)
    click.echo(presenter.render_goal_list(_locale(ctx), goals_))


@goals.command()
@click.argument("goal_id")
@handle_errors
def get(ctx, goal_id):
    """查看目标详情"""
    click.echo(presenter.render_goal(_locale(ctx), _service(ctx).get_goal(goal_id)))


@goals.command()
@click.argument("goal_id")
@click.option("--title", default=None)
@click.option("--description", default=None)
@click.option("--why", default=None)
@click.option("--identity", default=None)
@click.option("--target", type=float, default=None)
@click.option("--unit", default=None)
@click.option("--status", type=_choices(GoalStatus), default=None)
@click.option("--tag", "tags", multiple=True)
@handle_errors
def update(ctx, goal_id, title, description, why, identity, target, unit, status, tags):
    """修改目标字段"""
    goal = _service(ctx).update_goal(
        goal_id,
        title=title,
        description=description,
        why=why,
        identity=identity,
        target=target,
        unit=unit,
        status=status,
        tags=list(tags) or None,
    )
    click.echo(translate(_locale(ctx), "goals.updated", {"title": goal.title}))


@goals.command()
@click.argument("goal_id")
@click.confirmation_option(prompt="⚠️ 确认删除该目标？")
@handle_errors
def delete(ctx, goal_id):
    """删除目标"""
    goal = _service(ctx).delete_goal(goal_id)
    click.echo(translate(_locale(ctx), "goals.deleted", {"title": goal.title}))


@goals.command()
@click.argument("goal_id")
@click.option("--note", default=None)
@click.option("--date", "review_date", default=None, help="YYYY-MM-DD，可补记")
@handle_errors
def log(ctx, goal_id, note, review_date):
    """快速打卡"""
    outcome = _service(ctx).log_completion(goal_id, note=note, review_date=review_date)
    click.echo(presenter.render_logged(_locale(ctx), outcome))


@goals.command()
@click.argument("goal_id")
@click.option("--rating", type=_choices(ReviewRating), required=True)
@click.option("--evidence", required=True)
@click.option("--value", type=float, default=None)
@click.option("--date", "review_date", default=None, help="YYYY-MM-DD，可补记")
@click.option("--obstacle", "obstacles", multiple=True)
@click.option("--win", "wins", multiple=True)
@handle_errors
def review(ctx, goal_id, rating, evidence, value, review_date, obstacles, wins):
    """提交回顾"""
    outcome = _service(ctx).submit_review(
        goal_id,
        rating,
        evidence,
        value=value,
        review_date=review_date,
        obstacles=list(obstacles),
        wins=list(wins),
    )
    click.echo(presenter.render_review_outcome(_locale(ctx), outcome))


@goals.command()
@click.argument("goal_id")
@click.option("--limit", type=click.IntRange(min=1), default=None)
@handle_errors
def history(ctx, goal_id, limit):
    """回顾历史"""
    service = _service(ctx)
    goal = service.get_goal(goal_id)
    click.echo(presenter.render_history(_locale(ctx), goal, service.review_history(goal_id, limit)))


@goals.command()
@handle_errors
def unlock(ctx):
    """解锁所有前置已达成的目标"""
    click.echo(presenter.render_unlocked(_locale(ctx), _service(ctx).run_unlock_sweep()))


@goals.command(name="next")
@handle_errors
def next_cmd(ctx):
    """下一个需要回顾的目标"""
    click.echo(presenter.render_next(_locale(ctx), _service(ctx).next_goal_needing_attention()))


@goals.command()
@click.argument("goal_id")
@handle_errors
def achieve(ctx, goal_id):
    """标记目标达成"""
    result = _service(ctx).achieve_goal(goal_id)
    click.echo(presenter.render_achieved(_locale(ctx), result.goal, result.unlocked))


@goals.command()
@click.argument("goal_id")
@click.argument("description")
@handle_errors
def obstacle(ctx, goal_id, description):
    """记录障碍"""
    service = _service(ctx)
    goal = service.get_goal(goal_id)
    captured = service.capture_obstacle(goal_id, description)
    click.echo(presenter.render_obstacle_captured(_locale(ctx), goal, captured))
    click.echo(f"   id: {captured.id}")


@goals.command(name="resolve-obstacle")
@click.argument("obstacle_id")
@handle_errors
def resolve_obstacle(ctx, obstacle_id):
    """标记障碍已解决"""
    resolved = _service(ctx).resolve_obstacle(obstacle_id)
    click.echo(translate(_locale(ctx), "obstacles.resolved", {"description": resolved.description}))


@goals.command()
@click.option("--kind", type=click.Choice(["patterns", "analyze", "risks", "targets"]), default="patterns")
@handle_errors
def insights(ctx, kind):
    """模式 / 风险 / 目标调整建议"""
    service = _service(ctx)
    locale = _locale(ctx)
    if kind == "analyze":
        click.echo(presenter.render_patterns(locale, service.analyze_patterns()))
    elif kind == "risks":
        click.echo(presenter.render_risks(locale, service.predict_risks()))
    elif kind == "targets":
        click.echo(presenter.render_targets(locale, service.suggest_targets()))
    else:
        click.echo(presenter.render_patterns(locale, service.stored_patterns()))


@goals.command()
@click.argument("goal_id")
@handle_errors
def coaching(ctx, goal_id):
    """针对单个目标的教练建议"""
    click.echo(_service(ctx).coaching(goal_id, _locale(ctx)))


@goals.command(name="setup-reminders")
@click.option("--morning", "morning_cron", default=None, help='cron, e.g. "0 9 * * *"')
@click.option("--evening", "evening_cron", default=None, help='cron, e.g. "0 20 * * *"')
@click.option("--timezone", "tz", default=None)
@handle_errors
def setup_reminders_cmd(ctx, morning_cron, evening_cron, tz):
    """设置早晚提醒"""
    locale = _locale(ctx)
    try:
        prefs = setup_reminders(_service(ctx), morning_cron, evening_cron, tz)
    except ValidationError as e:
        click.echo(f"❌ {translate(locale, 'reminders.setupFailed', {'error': e.message})}", err=True)
        ctx.exit(1)
    click.echo(translate(locale, "reminders.setupSuccess", {
        "morning": prefs.morning_cron,
        "evening": prefs.evening_cron,
        "timezone": prefs.timezone,
    }))


@goals.command(name="remove-reminders")
@handle_errors
def remove_reminders_cmd(ctx):
    """关闭提醒"""
    remove_reminders(_service(ctx))
    click.echo(translate(_locale(ctx), "reminders.removeSuccess"))


@goals.command(name="set-pref")
@click.argument("key", type=click.Choice(["locale", "timezone", "reminderTime", "name"]))
@click.argument("value")
@handle_errors
def set_pref(ctx, key, value):
    """修改偏好"""
    prefs = _service(ctx).set_preference(key, value)
    click.echo(translate(prefs.locale, "preferences.updated", {"key": key, "value": value}))


@goals.command()
@handle_errors
def prefs(ctx):
    """查看偏好"""
    click.echo(presenter.render_preferences(_locale(ctx), _service(ctx).get_preferences()))


@goals.command()
@click.option("--all-users", is_flag=True, help="Tick every stored user")
@handle_errors
def remind(ctx, all_users):
    """执行一次提醒检查（供 cron / systemd timer 调用）"""
    notifiers = build_notifiers(config.NOTIFIERS)
    if all_users:
        sent = tick_all_users(ctx.obj["data_dir"], notifiers)
    else:
        sent = reminder_tick(_service(ctx), notifiers)
    for notification in sent:
        click.echo(f"🔔 [{notification.user_id}] {notification.title}: {notification.message}")
    if not sent:
        click.echo("No reminders due.")


@goals.command()
@click.argument("payload")
@handle_errors
def tool(ctx, payload):
    """以 JSON 调用工具动作，例如 '{"action": "list"}'"""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValidationError(f"payload is not valid JSON: {e}", field="payload") from e
    if not isinstance(data, dict):
        raise ValidationError("payload must be a JSON object", field="payload")

    result = ToolDispatcher(_service(ctx)).dispatch(data)
    click.echo(result.text, err=result.is_error)
    if result.is_error:
        ctx.exit(1)


if __name__ == "__main__":
    goals()
