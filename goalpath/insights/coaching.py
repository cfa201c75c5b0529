"""
Coaching text for a single goal, assembled from the other insight
projections plus the goal's own narrative (identity, why).
"""
from datetime import datetime
from typing import List, Optional, Sequence

from goalpath.i18n import translate
from goalpath.insights.risk import RiskPrediction
from goalpath.insights.targets import TargetSuggestion
from goalpath.models import Goal, Obstacle, Pattern, Review, ReviewRating
from goalpath.scheduling import days_since_last_review

RECENT_REVIEWS = 5
RISK_ALERT_DAYS = 3
MAX_WINS = 3


def generate_coaching(
    goal: Goal,
    reviews: Sequence[Review],
    obstacles: Sequence[Obstacle],
    patterns: Sequence[Pattern],
    now: datetime,
    locale: str = "en",
    risk: Optional[RiskPrediction] = None,
    target_suggestion: Optional[TargetSuggestion] = None,
    name: Optional[str] = None,
) -> str:
    lines: List[str] = [translate(locale, "coaching.title", {"title": goal.title}), ""]

    if goal.identity:
        lines.append(translate(locale, "coaching.identityReminder", {"identity": goal.identity}))
        lines.append("")

    if risk:
        days_since = days_since_last_review(goal.last_review, now)
        if days_since > RISK_ALERT_DAYS:
            shown = "∞" if days_since == float("inf") else days_since
            lines.append(translate(locale, "coaching.riskAlert", {
                "days": shown,
                "name": f", {name}" if name else "",
            }))
            lines.append(translate(locale, "coaching.suggestion"))
            lines.append("")

    recent = sorted(
        (r for r in reviews if r.goal_id == goal.id),
        key=lambda r: r.date,
        reverse=True,
    )[:RECENT_REVIEWS]

    if len(recent) >= 3:
        exceeding = sum(1 for r in recent if r.rating == ReviewRating.EXCEEDING)
        struggling = sum(1 for r in recent if not r.is_success)
        if exceeding >= 3:
            lines.append(translate(locale, "coaching.greatProgress"))
        elif struggling >= 3:
            lines.append(translate(locale, "coaching.needHelp"))
        else:
            lines.append(translate(locale, "coaching.keepGoing"))
        lines.append("")

    if target_suggestion:
        lines.append(translate(locale, "coaching.targetSuggestion", {
            "current": target_suggestion.current_target,
            "suggested": target_suggestion.suggested_target,
            "unit": target_suggestion.unit,
        }))
        lines.append(translate(locale, "coaching.targetReason", {"reason": target_suggestion.reason}))
        lines.append("")

    relevant = [p for p in patterns if goal.id in p.applies_to]
    if relevant:
        lines.append(translate(locale, "coaching.patternsHeader"))
        for pattern in relevant:
            lines.append(translate(locale, "coaching.patternDetected", {"description": pattern.description}))
            if pattern.suggestion:
                lines.append(translate(locale, "coaching.suggestionAction", {"suggestion": pattern.suggestion}))
        lines.append("")

    unresolved = [o for o in obstacles if o.goal_id == goal.id and not o.resolved]
    if unresolved:
        lines.append(translate(locale, "coaching.obstaclesHeader"))
        lines.extend(f"• {o.description}" for o in unresolved)
        lines.append("")

    wins = [win for r in recent for win in r.wins][:MAX_WINS]
    if wins:
        lines.append(translate(locale, "coaching.winsHeader"))
        lines.extend(f"• {win}" for win in wins)
        lines.append("")

    lines.append("---")
    lines.append(translate(locale, "coaching.rememberWhy", {"why": goal.why}))
    return "\n".join(lines)
