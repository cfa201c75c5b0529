"""
Tool Dispatcher for goalpath.

Routes a validated tool action to exactly one handler and returns
localized text. Every action model in interface.schema must have a
handler; this is checked when the module is imported.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Type, get_args

from goalpath.exceptions import GoalPathError, StateError
from goalpath.goal_service import GoalService
from goalpath.i18n import translate
from goalpath.lifecycle import GoalDraft
from goalpath.logger import get_logger
from interface import presenter
from interface import schema
from scheduler.reminders import remove_reminders, setup_reminders

logger = get_logger("tool")

Handler = Callable[[GoalService, Any, str], str]


@dataclass
class ToolResult:
    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "is_error": self.is_error}


def _add(service: GoalService, a: schema.AddGoal, locale: str) -> str:
    draft = GoalDraft(
        title=a.title,
        type=a.type,
        frequency=a.frequency,
        target=a.target,
        unit=a.unit,
        why=a.why,
        description=a.description,
        identity=a.identity,
        parent_id=a.parent_id,
        tags=a.tags,
        prerequisites=a.prerequisites,
    )
    return presenter.render_created(locale, service.create_goal(draft))


def _list(service: GoalService, a: schema.ListGoals, locale: str) -> str:
    goals = service.list_goals(status=a.status, tags=a.tags, parent_id=a.parent_id)
    return presenter.render_goal_list(locale, goals)


def _get(service: GoalService, a: schema.GetGoal, locale: str) -> str:
    return presenter.render_goal(locale, service.get_goal(a.id))


def _update(service: GoalService, a: schema.UpdateGoal, locale: str) -> str:
    updates = a.model_dump(exclude={"action", "id"}, exclude_none=True)
    goal = service.update_goal(a.id, **updates)
    return translate(locale, "goals.updated", {"title": goal.title})


def _delete(service: GoalService, a: schema.DeleteGoal, locale: str) -> str:
    goal = service.delete_goal(a.id)
    return translate(locale, "goals.deleted", {"title": goal.title})


def _log(service: GoalService, a: schema.LogCompletion, locale: str) -> str:
    outcome = service.log_completion(a.goal_id, note=a.note, review_date=a.date)
    return presenter.render_logged(locale, outcome)


def _review(service: GoalService, a: schema.SubmitReview, locale: str) -> str:
    outcome = service.submit_review(
        a.goal_id,
        a.rating,
        a.evidence,
        value=a.value,
        review_date=a.date,
        obstacles=a.obstacles,
        wins=a.wins,
    )
    return presenter.render_review_outcome(locale, outcome)


def _history(service: GoalService, a: schema.ReviewHistory, locale: str) -> str:
    goal = service.get_goal(a.goal_id)
    return presenter.render_history(locale, goal, service.review_history(a.goal_id, a.limit))


def _unlock(service: GoalService, a: schema.UnlockSweep, locale: str) -> str:
    return presenter.render_unlocked(locale, service.run_unlock_sweep())


def _next(service: GoalService, a: schema.NextGoal, locale: str) -> str:
    return presenter.render_next(locale, service.next_goal_needing_attention())


def _achieve(service: GoalService, a: schema.AchieveGoal, locale: str) -> str:
    result = service.achieve_goal(a.id)
    return presenter.render_achieved(locale, result.goal, result.unlocked)


def _capture_obstacle(service: GoalService, a: schema.CaptureObstacle, locale: str) -> str:
    goal = service.get_goal(a.goal_id)
    obstacle = service.capture_obstacle(a.goal_id, a.description)
    return presenter.render_obstacle_captured(locale, goal, obstacle)


def _insights(service: GoalService, a: schema.Insights, locale: str) -> str:
    if a.kind == "analyze":
        return presenter.render_patterns(locale, service.analyze_patterns())
    if a.kind == "risks":
        return presenter.render_risks(locale, service.predict_risks())
    if a.kind == "targets":
        return presenter.render_targets(locale, service.suggest_targets())
    return presenter.render_patterns(locale, service.stored_patterns())


def _coaching(service: GoalService, a: schema.Coaching, locale: str) -> str:
    return service.coaching(a.goal_id, locale)


def _setup_reminders(service: GoalService, a: schema.SetupReminders, locale: str) -> str:
    prefs = setup_reminders(service, a.morning_cron, a.evening_cron, a.timezone)
    return translate(locale, "reminders.setupSuccess", {
        "morning": prefs.morning_cron,
        "evening": prefs.evening_cron,
        "timezone": prefs.timezone,
    })


def _remove_reminders(service: GoalService, a: schema.RemoveReminders, locale: str) -> str:
    remove_reminders(service)
    return translate(locale, "reminders.removeSuccess")


def _set_preference(service: GoalService, a: schema.SetPreference, locale: str) -> str:
    prefs = service.set_preference(a.key, a.value)
    # 切换语言后立即使用新语言回复
    return translate(prefs.locale, "preferences.updated", {"key": a.key, "value": a.value})


def _get_preferences(service: GoalService, a: schema.GetPreferences, locale: str) -> str:
    return presenter.render_preferences(locale, service.get_preferences())


HANDLERS: Dict[Type[schema.ActionInput], Handler] = {
    schema.AddGoal: _add,
    schema.ListGoals: _list,
    schema.GetGoal: _get,
    schema.UpdateGoal: _update,
    schema.DeleteGoal: _delete,
    schema.LogCompletion: _log,
    schema.SubmitReview: _review,
    schema.ReviewHistory: _history,
    schema.UnlockSweep: _unlock,
    schema.NextGoal: _next,
    schema.AchieveGoal: _achieve,
    schema.CaptureObstacle: _capture_obstacle,
    schema.Insights: _insights,
    schema.Coaching: _coaching,
    schema.SetupReminders: _setup_reminders,
    schema.RemoveReminders: _remove_reminders,
    schema.SetPreference: _set_preference,
    schema.GetPreferences: _get_preferences,
}

_declared = set(get_args(get_args(schema.ToolAction)[0]))
_missing = _declared - set(HANDLERS)
if _missing:
    raise RuntimeError(f"No handler for tool action(s): {sorted(m.__name__ for m in _missing)}")


class ToolDispatcher:
    """工具调用分发器：一个 action 对应一个 handler。"""

    def __init__(self, service: GoalService):
        self.service = service

    def dispatch(self, payload: Dict[str, Any]) -> ToolResult:
        locale = self.service.config.DEFAULT_LOCALE
        try:
            locale = self.service.locale()
            action = schema.parse_action(payload)
            text = HANDLERS[type(action)](self.service, action, locale)
        except StateError as e:
            logger.error("Tool action failed on stored data: %s", e.message)
            return ToolResult(text=e.get_user_message(locale), is_error=True)
        except GoalPathError as e:
            logger.info("Tool action rejected: %s", e.message)
            return ToolResult(text=e.get_user_message(locale), is_error=True)
        return ToolResult(text=text)
