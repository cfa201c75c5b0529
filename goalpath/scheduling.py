"""
Scheduling policy: pure functions mapping (rating, maturity, base interval)
to the next check-in date, plus the maturity progression rule.

Struggling shrinks the review horizon, exceeding extends it; every maturity
level stretches the interval by another 20%.
"""
import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Union

from goalpath.models import Review, ReviewRating

RATING_INTERVALS = {
    ReviewRating.STRUGGLING: 1,
    ReviewRating.SLOW: 3,
    ReviewRating.ON_TRACK: 7,
    ReviewRating.EXCEEDING: 14,
}

MATURITY_STRETCH = 0.2
MAX_MATURITY = 5
MATURITY_SUCCESS_THRESHOLD = 4

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def interval_for_rating(rating: Union[ReviewRating, str]) -> int:
    return RATING_INTERVALS[ReviewRating(rating)]


def next_check_in(from_date: DateLike, base_interval_days: int, maturity: int) -> date:
    """
    from_date + round(base * (1 + maturity * 0.2)) days, at date granularity.
    """
    adjusted = _round_half_up(base_interval_days * (1 + maturity * MATURITY_STRETCH))
    return _as_date(from_date) + timedelta(days=adjusted)


def next_check_in_from_rating(
    from_date: DateLike,
    rating: Union[ReviewRating, str],
    maturity: int,
) -> date:
    return next_check_in(from_date, interval_for_rating(rating), maturity)


def days_since_last_review(
    last_review: Optional[DateLike],
    now: Optional[datetime] = None,
) -> float:
    """
    Whole days since the last review (floored); infinity when never reviewed.
    """
    if last_review is None:
        return math.inf
    if now is None:
        now = datetime.now()

    if isinstance(last_review, datetime):
        delta = now - last_review.replace(tzinfo=now.tzinfo)
        return math.floor(delta.total_seconds() / 86400)
    return (_as_date(now) - last_review).days


def is_overdue(next_check_in_date: Optional[DateLike], now: Optional[datetime] = None) -> bool:
    """A check-in date is due from the start of that day; absent means overdue."""
    if next_check_in_date is None:
        return True
    if now is None:
        now = datetime.now()
    due_at = datetime.combine(_as_date(next_check_in_date), time.min)
    return now.replace(tzinfo=None) > due_at


def maturity_increase(current_maturity: int, consecutive_successes: int) -> int:
    if consecutive_successes >= MATURITY_SUCCESS_THRESHOLD and current_maturity < MAX_MATURITY:
        return min(current_maturity + 1, MAX_MATURITY)
    return current_maturity


def count_consecutive_successes(reviews: Iterable[Review], goal_id: str) -> int:
    """
    Walk the goal's reviews most recent first and count on-track/exceeding
    ratings until the first struggling/slow one. Reviews sharing a date are
    taken in reverse submission order.
    """
    goal_reviews = [r for r in reviews if r.goal_id == goal_id]
    ordered = sorted(
        enumerate(goal_reviews),
        key=lambda pair: (pair[1].date, pair[0]),
        reverse=True,
    )

    count = 0
    for _, review in ordered:
        if not review.is_success:
            break
        count += 1
    return count
