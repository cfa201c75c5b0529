"""
Target suggestions: raise the bar when a goal keeps being exceeded, lower
it when it keeps being missed.
"""
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from goalpath.models import Goal, GoalStatus, GoalType, Review, ReviewRating

MIN_RECENT_REVIEWS = 3
MIN_REVIEWS_FOR_CHANGE = 4
EXCEEDING_RATE_TO_INCREASE = 0.6
SUCCESS_RATE_TO_DECREASE = 0.3


@dataclass
class TargetSuggestion:
    goal_id: str
    goal_title: str
    current_target: float
    suggested_target: float
    unit: str
    reason: str
    direction: str  # increase | decrease

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def recent_performance(reviews: Sequence[Review], goal_id: str, today: date, weeks: int = 4) -> Counter:
    cutoff = today - timedelta(weeks=weeks)
    return Counter(r.rating for r in reviews if r.goal_id == goal_id and r.date >= cutoff)


def suggest_new_target(current: float, direction: str) -> float:
    if direction == "increase":
        if current <= 3:
            return current + 1
        return round(current * 1.2)
    if current <= 2:
        return 1
    if current <= 4:
        return current - 1
    return round(current * 0.8)


def suggest_targets(
    goals: Sequence[Goal],
    reviews: Sequence[Review],
    today: date,
    weeks: int = 4,
) -> List[TargetSuggestion]:
    suggestions = []
    for goal in goals:
        if goal.status != GoalStatus.ACTIVE or goal.type == GoalType.MILESTONE:
            continue

        counts = recent_performance(reviews, goal.id, today, weeks)
        total = sum(counts.values())
        if total < MIN_RECENT_REVIEWS:
            continue

        exceeding_rate = counts[ReviewRating.EXCEEDING] / total
        success_rate = (counts[ReviewRating.EXCEEDING] + counts[ReviewRating.ON_TRACK]) / total

        if exceeding_rate >= EXCEEDING_RATE_TO_INCREASE and total >= MIN_REVIEWS_FOR_CHANGE:
            direction = "increase"
            reason = f"You've been exceeding {round(exceeding_rate * 100)}% of the time. Time to level up!"
        elif success_rate <= SUCCESS_RATE_TO_DECREASE and total >= MIN_REVIEWS_FOR_CHANGE:
            direction = "decrease"
            reason = "Current target may be too ambitious. Consider a more achievable goal."
        else:
            continue

        suggestions.append(TargetSuggestion(
            goal_id=goal.id,
            goal_title=goal.title,
            current_target=goal.target,
            suggested_target=suggest_new_target(goal.target, direction),
            unit=goal.unit,
            reason=reason,
            direction=direction,
        ))
    return suggestions


def suggestion_for_goal(suggestions: Sequence[TargetSuggestion], goal_id: str) -> Optional[TargetSuggestion]:
    return next((s for s in suggestions if s.goal_id == goal_id), None)
