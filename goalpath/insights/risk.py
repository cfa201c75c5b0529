"""
Risk prediction for active goals, from check-in gaps and recent ratings.
"""
import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from goalpath.models import Goal, GoalStatus, Review, ReviewRating
from goalpath.scheduling import days_since_last_review

RISK_ORDER = {"high": 0, "medium": 1, "low": 2}
DIFFICULT_RATINGS = frozenset({ReviewRating.STRUGGLING, ReviewRating.SLOW})


@dataclass
class RiskPrediction:
    goal_id: str
    goal_title: str
    risk_level: str
    reason: str
    days_since_check_in: int  # -1 = never reviewed
    suggestion: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def assess_risk(
    goal: Goal,
    reviews: Sequence[Review],
    days_since: float,
    recent_limit: int = 5,
) -> Tuple[str, str]:
    expected = goal.check_in_interval or 7

    if days_since > expected * 2:
        if math.isinf(days_since):
            return "high", "No check-in recorded yet"
        return "high", f"No check-in for {days_since} days (expected every {expected} days)"

    if days_since > expected:
        return "medium", f"Check-in overdue by {days_since - expected} days"

    recent = sorted(
        (r for r in reviews if r.goal_id == goal.id),
        key=lambda r: r.date,
        reverse=True,
    )[:recent_limit]

    if len(recent) >= 3:
        difficult = sum(1 for r in recent if r.rating in DIFFICULT_RATINGS)
        if difficult >= 3:
            return "high", "Recent reviews show consistent difficulty"
        if difficult >= 2:
            return "medium", "Recent reviews show some difficulty"

    return "low", "On track"


def suggestion_for(risk_level: str, goal: Goal) -> str:
    if risk_level == "high":
        if goal.target > 1:
            return f"Consider reducing target from {goal.target} to {math.ceil(goal.target * 0.7)} {goal.unit}"
        return "Try breaking this into smaller milestones"
    if risk_level == "medium":
        return "Schedule a check-in today to get back on track"
    return "Keep up the good work!"


def predict_risks(
    goals: Sequence[Goal],
    reviews: Sequence[Review],
    now: datetime,
    recent_limit: int = 5,
) -> List[RiskPrediction]:
    predictions = []
    for goal in goals:
        if goal.status != GoalStatus.ACTIVE:
            continue

        days_since = days_since_last_review(goal.last_review, now)
        level, reason = assess_risk(goal, reviews, days_since, recent_limit)
        if level == "low":
            continue

        predictions.append(RiskPrediction(
            goal_id=goal.id,
            goal_title=goal.title,
            risk_level=level,
            reason=reason,
            days_since_check_in=-1 if math.isinf(days_since) else int(days_since),
            suggestion=suggestion_for(level, goal),
        ))

    predictions.sort(key=lambda p: RISK_ORDER[p.risk_level])
    return predictions


def risk_for_goal(predictions: Sequence[RiskPrediction], goal_id: str) -> Optional[RiskPrediction]:
    return next((p for p in predictions if p.goal_id == goal_id), None)
