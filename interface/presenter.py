"""
Localized text rendering for goals, reviews and insights.

Used by the tool dispatcher and the CLI; the HTTP API returns JSON instead.
"""
from datetime import date
from typing import Any, List, Optional, Sequence

from goalpath.i18n import translate
from goalpath.insights import RiskPrediction, TargetSuggestion
from goalpath.models import Goal, GoalFrequency, GoalType, Obstacle, Pattern, Review, UserPreferences
from goalpath.progress import ReviewOutcome

PERIOD_NAMES = {
    GoalFrequency.DAILY: "day",
    GoalFrequency.WEEKLY: "week",
    GoalFrequency.MONTHLY: "month",
    GoalFrequency.QUARTERLY: "quarter",
    GoalFrequency.YEARLY: "year",
}

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def fmt_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def status_label(locale: str, goal: Goal) -> str:
    return translate(locale, f"status.{goal.status.value}")


def day_label(locale: str, day: date) -> str:
    return f"{translate(locale, f'weekday.{WEEKDAY_KEYS[day.weekday()]}')} {day.day:02d}"


def render_created(locale: str, goal: Goal) -> str:
    lines = [
        translate(locale, "goals.created", {"title": goal.title}),
        "",
        f"{translate(locale, 'goals.idLabel')}: {goal.id}",
        f"{translate(locale, 'goals.statusLabel')}: {status_label(locale, goal)}",
        f"{translate(locale, 'goals.nextCheckInLabel')}: {goal.next_check_in}",
    ]
    return "\n".join(lines)


def render_goal_list(locale: str, goals: Sequence[Goal]) -> str:
    if not goals:
        return translate(locale, "goals.listEmpty")

    lines = [translate(locale, "goals.listHeader", {"count": len(goals)}), ""]
    for goal in goals:
        progress = ""
        if goal.type == GoalType.MEASURABLE:
            progress = f" ({fmt_number(goal.progress)}/{fmt_number(goal.target)} {goal.unit})"
        lines.append(f"• {goal.title} [{goal.id}] - {status_label(locale, goal)}{progress}")
        if goal.tags:
            lines.append(f"  Tags: {', '.join(goal.tags)}")
    return "\n".join(lines)


def render_goal(locale: str, goal: Goal) -> str:
    lines = [
        f"# {goal.title}",
        "",
        f"**ID:** {goal.id}",
        f"**Status:** {status_label(locale, goal)}",
        f"**Type:** {goal.type.value} ({goal.frequency.value})",
        f"**Target:** {fmt_number(goal.target)} {goal.unit}",
        f"**Progress:** {fmt_number(goal.progress)}",
        f"**Maturity:** {goal.maturity}/5",
        "",
        f"**Why:** {goal.why}",
    ]
    optional = [
        ("Identity", goal.identity),
        ("Description", goal.description),
        ("Tags", ", ".join(goal.tags)),
        ("Parent", goal.parent_id),
        ("Children", ", ".join(goal.children)),
        ("Last Review", goal.last_review),
        ("Next Check-in", goal.next_check_in),
        ("Prerequisites", ", ".join(goal.prerequisites)),
        ("Unlocks", ", ".join(goal.unlocks)),
    ]
    for label, value in optional:
        if value:
            lines.append(f"**{label}:** {value}")
    return "\n".join(lines)


def render_unlocked(locale: str, unlocked: Sequence[Goal]) -> str:
    if not unlocked:
        return translate(locale, "goals.noGoalsToUnlock")
    return translate(locale, "goals.unlocked", {"titles": ", ".join(g.title for g in unlocked)})


def render_achieved(locale: str, goal: Goal, unlocked: Sequence[Goal]) -> str:
    lines = [translate(locale, "goals.achieved", {"title": goal.title})]
    if unlocked:
        lines.append(render_unlocked(locale, unlocked))
    return "\n".join(lines)


def render_next(locale: str, goal: Optional[Goal]) -> str:
    if goal is None:
        return translate(locale, "goals.noGoalsNeedAttention")

    lines = [
        translate(locale, "goals.nextGoal", {"title": goal.title}),
        "",
        f"**{goal.title}** [{goal.id}]",
        f"Target: {fmt_number(goal.target)} {goal.unit} ({goal.frequency.value})",
        f"Why: {goal.why}",
    ]
    if goal.last_review:
        lines.append(f"Last review: {goal.last_review}")
    return "\n".join(lines)


def render_review_outcome(locale: str, outcome: ReviewOutcome) -> str:
    goal = outcome.goal
    period = outcome.period
    period_name = PERIOD_NAMES[goal.frequency]
    target = goal.target

    lines = [translate(locale, "review.registered")]
    lines.append(translate(locale, "review.periodProgress", {
        "period": translate(locale, f"period.{period_name}"),
        "current": fmt_number(period.current),
        "target": fmt_number(target),
        "unit": goal.unit,
    }))

    if period.unique_days and goal.type == GoalType.HABIT:
        lines.append("📅 " + ", ".join(day_label(locale, d) for d in period.unique_days))

    if period.streak > 1:
        lines.append(translate(locale, "review.streak", {
            "count": period.streak,
            "period": translate(locale, f"period.{period_name}s"),
        }))

    if period.current == target - 1:
        lines.append(translate(locale, "review.oneMoreToComplete", {
            "period": translate(locale, f"period.{period_name}"),
        }))
    elif period.current >= target:
        lines.append(translate(locale, "review.periodCompleted", {
            "period": translate(locale, f"period.{period_name}").upper(),
        }))

    if outcome.maturity_increased:
        lines.append(translate(locale, "review.maturityUp", {"level": goal.maturity}))

    lines.append(f"{translate(locale, 'review.rememberWhy')} {goal.why}")
    lines.append(translate(locale, "review.nextCheckIn", {"date": goal.next_check_in}))
    return "\n".join(lines)


def render_logged(locale: str, outcome: ReviewOutcome) -> str:
    review = outcome.review
    lines = [
        translate(locale, "review.logged", {"title": outcome.goal.title}),
        f"📅 {review.date}: {review.evidence}",
        "",
        render_review_outcome(locale, outcome),
    ]
    return "\n".join(lines)


def render_history(locale: str, goal: Goal, reviews: Sequence[Review]) -> str:
    if not reviews:
        return translate(locale, "history.empty", {"goal": goal.title})

    lines = [translate(locale, "history.header", {"goal": goal.title, "count": len(reviews)}), ""]
    for review in reviews:
        lines.append(f"📅 {review.date} | {translate(locale, f'rating.{review.rating.value}')}")
        lines.append(f"   {review.evidence}")
        if review.value is not None:
            lines.append(f"   {translate(locale, 'history.value')}: {fmt_number(review.value)}")
        lines.append("")
    return "\n".join(lines).rstrip()


def render_obstacle_captured(locale: str, goal: Goal, obstacle: Obstacle) -> str:
    return translate(locale, "obstacles.captured", {"goal": goal.title})


def render_patterns(locale: str, patterns: Sequence[Pattern]) -> str:
    if not patterns:
        return translate(locale, "insights.noPatterns")

    lines = [translate(locale, "insights.patternsHeader", {"count": len(patterns)}), ""]
    for pattern in patterns:
        lines.append(translate(locale, f"insights.{pattern.type.value}Pattern", {
            "description": pattern.description,
        }))
        if pattern.suggestion:
            lines.append(f"  → {pattern.suggestion}")
    return "\n".join(lines)


def render_risks(locale: str, risks: Sequence[RiskPrediction]) -> str:
    if not risks:
        return translate(locale, "insights.noRisks")

    lines = [translate(locale, "insights.risksHeader", {"count": len(risks)}), ""]
    for risk in risks:
        lines.append(f"• [{risk.risk_level}] {risk.goal_title}: {risk.reason}")
        lines.append(f"  → {risk.suggestion}")
    return "\n".join(lines)


def render_targets(locale: str, suggestions: Sequence[TargetSuggestion]) -> str:
    if not suggestions:
        return translate(locale, "insights.noTargets")

    lines = [translate(locale, "insights.targetsHeader", {"count": len(suggestions)}), ""]
    for s in suggestions:
        lines.append(
            f"• {s.goal_title}: {fmt_number(s.current_target)} → "
            f"{fmt_number(s.suggested_target)} {s.unit}"
        )
        lines.append(f"  {s.reason}")
    return "\n".join(lines)


def render_preferences(locale: str, prefs: UserPreferences) -> str:
    lines: List[str] = [
        translate(locale, "preferences.current"),
        "",
        f"locale: {prefs.locale}",
        f"timezone: {prefs.timezone}",
    ]
    if prefs.reminder_time:
        lines.append(f"reminderTime: {prefs.reminder_time}")
    if prefs.name:
        lines.append(f"name: {prefs.name}")
    if prefs.reminders_enabled:
        lines.append(f"morningCron: {prefs.morning_cron or '-'}")
        lines.append(f"eveningCron: {prefs.evening_cron or '-'}")
    return "\n".join(lines)
