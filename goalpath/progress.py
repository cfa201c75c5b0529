"""
Review accumulation: applies a rating event to a goal and recomputes its
check-in date, maturity, current-period progress and streak.

Periods are aligned to the goal frequency:
    daily     -> the calendar day
    weekly    -> Monday-aligned week
    monthly   -> calendar month
    quarterly -> Jan / Apr / Jul / Oct blocks
    yearly    -> calendar year
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from goalpath.models import Goal, GoalFrequency, GoalType, Review, ReviewRating
from goalpath.scheduling import (
    MATURITY_SUCCESS_THRESHOLD,
    count_consecutive_successes,
    maturity_increase,
    next_check_in_from_rating,
)


@dataclass
class PeriodProgress:
    period_start: date
    current: float
    streak: int
    unique_days: List[date]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period_start": self.period_start.isoformat(),
            "current": self.current,
            "streak": self.streak,
            "unique_days": [d.isoformat() for d in self.unique_days],
        }


@dataclass
class ReviewOutcome:
    review: Review
    goal: Goal
    period: PeriodProgress
    consecutive_successes: int
    maturity_increased: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "review": self.review.to_dict(),
            "goal": self.goal.to_dict(),
            "period": self.period.to_dict(),
            "consecutive_successes": self.consecutive_successes,
            "maturity_increased": self.maturity_increased,
        }


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def period_start(frequency: GoalFrequency, today: date) -> date:
    if frequency == GoalFrequency.WEEKLY:
        return week_start(today)
    if frequency == GoalFrequency.MONTHLY:
        return today.replace(day=1)
    if frequency == GoalFrequency.QUARTERLY:
        return date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
    if frequency == GoalFrequency.YEARLY:
        return date(today.year, 1, 1)
    return today


def period_key(frequency: GoalFrequency, day: date) -> str:
    """
    Key of the activity period a review falls into. Quarterly and yearly
    goals are keyed by day, same as daily ones.
    """
    if frequency == GoalFrequency.WEEKLY:
        return week_start(day).isoformat()
    if frequency == GoalFrequency.MONTHLY:
        return f"{day.year}-{day.month:02d}"
    return day.isoformat()


def calculate_period_progress(reviews: Iterable[Review], goal: Goal, today: date) -> PeriodProgress:
    goal_reviews = [r for r in reviews if r.goal_id == goal.id]
    start = period_start(goal.frequency, today)

    in_period = [r for r in goal_reviews if start <= r.date <= today]
    unique_days = sorted({r.date for r in in_period})

    if goal.type == GoalType.MEASURABLE:
        current = sum(r.value or 0 for r in in_period)
    else:
        current = len(unique_days)

    # Lifetime count of periods with any activity, not a consecutive run.
    streak = len({period_key(goal.frequency, r.date) for r in goal_reviews})

    return PeriodProgress(
        period_start=start,
        current=current,
        streak=streak,
        unique_days=unique_days,
    )


def new_review(
    goal_id: str,
    rating: ReviewRating,
    evidence: str,
    review_date: date,
    value: Optional[float] = None,
    obstacles: Optional[List[str]] = None,
    wins: Optional[List[str]] = None,
) -> Review:
    return Review(
        id=f"review_{uuid.uuid4().hex[:12]}",
        goal_id=goal_id,
        date=review_date,
        rating=ReviewRating(rating),
        evidence=evidence,
        value=value,
        obstacles=list(obstacles or []),
        wins=list(wins or []),
    )


def apply_review(goal: Goal, reviews: List[Review], review: Review, now: datetime) -> ReviewOutcome:
    """
    Append the review and recompute the goal in memory.

    The next check-in is based on today (not the possibly backdated review
    date) and on the maturity before this review. Maturity moves one step
    each time the success run reaches a multiple of the threshold.
    """
    today = now.date()
    reviews.append(review)

    goal.last_review = review.date
    goal.next_check_in = next_check_in_from_rating(today, review.rating, goal.maturity)
    goal.touch(now)

    consecutive = count_consecutive_successes(reviews, goal.id)
    previous_maturity = goal.maturity
    if consecutive and consecutive % MATURITY_SUCCESS_THRESHOLD == 0:
        goal.maturity = maturity_increase(goal.maturity, consecutive)

    period = calculate_period_progress(reviews, goal, today)

    if goal.type == GoalType.HABIT:
        goal.progress = period.current
    elif goal.type == GoalType.MEASURABLE and review.value is not None:
        goal.progress = review.value

    return ReviewOutcome(
        review=review,
        goal=goal,
        period=period,
        consecutive_successes=consecutive,
        maturity_increased=goal.maturity > previous_maturity,
    )
