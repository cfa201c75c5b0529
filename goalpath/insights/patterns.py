"""
Pattern detection over review history: weekday success rates, long success
runs, and goal pairs that succeed together.
"""
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Sequence

from goalpath.models import Goal, GoalStatus, Pattern, PatternType, Review

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# 经验值：至少 3 次同一工作日的回顾才判断
WEEKDAY_MIN_REVIEWS = 3
WEEKDAY_RISK_MIN_REVIEWS = 5
WEEKDAY_SUCCESS_RATE = 0.8
WEEKDAY_RISK_RATE = 0.3
STREAK_MIN_REVIEWS = 5
STREAK_MIN_RUN = 7
PAIR_MIN_SHARED_DAYS = 5
PAIR_SUCCESS_RATE = 0.8


def _pattern(
    pattern_type: PatternType,
    description: str,
    confidence: float,
    applies_to: List[str],
    now: datetime,
    suggestion: str,
) -> Pattern:
    return Pattern(
        id=f"pattern_{uuid.uuid4().hex[:8]}",
        type=pattern_type,
        description=description,
        confidence=confidence,
        applies_to=applies_to,
        detected_at=now.isoformat(),
        suggestion=suggestion,
    )


def analyze_weekday_patterns(reviews: Sequence[Review], goal_ids: List[str], now: datetime) -> List[Pattern]:
    totals = [0] * 7
    successes = [0] * 7
    for review in reviews:
        if review.goal_id not in goal_ids:
            continue
        weekday = review.date.weekday()
        totals[weekday] += 1
        if review.is_success:
            successes[weekday] += 1

    patterns = []
    for weekday, total in enumerate(totals):
        if total < WEEKDAY_MIN_REVIEWS:
            continue
        rate = successes[weekday] / total
        name = DAY_NAMES[weekday]
        confidence = min(total / 10, 1)

        if rate >= WEEKDAY_SUCCESS_RATE:
            patterns.append(_pattern(
                PatternType.SUCCESS,
                f"You perform well on {name}s ({round(rate * 100)}% success rate)",
                confidence,
                list(goal_ids),
                now,
                f"Consider scheduling important goals on {name}s",
            ))
        elif rate <= WEEKDAY_RISK_RATE and total >= WEEKDAY_RISK_MIN_REVIEWS:
            patterns.append(_pattern(
                PatternType.RISK,
                f"{name}s are challenging ({round(rate * 100)}% success rate)",
                confidence,
                list(goal_ids),
                now,
                f"Consider lighter goals or rest on {name}s",
            ))
    return patterns


def analyze_streak_patterns(reviews: Sequence[Review], goals: Sequence[Goal], now: datetime) -> List[Pattern]:
    patterns = []
    for goal in goals:
        goal_reviews = sorted((r for r in reviews if r.goal_id == goal.id), key=lambda r: r.date)
        if len(goal_reviews) < STREAK_MIN_REVIEWS:
            continue

        current_run = 0
        max_run = 0
        for review in goal_reviews:
            if review.is_success:
                current_run += 1
                max_run = max(max_run, current_run)
            else:
                current_run = 0

        if max_run >= STREAK_MIN_RUN:
            patterns.append(_pattern(
                PatternType.SUCCESS,
                f'Strong consistency on "{goal.title}" ({max_run} day streak achieved)',
                0.9,
                [goal.id],
                now,
                "Keep momentum! Consider increasing the challenge.",
            ))
    return patterns


def analyze_correlations(reviews: Sequence[Review], goals: Sequence[Goal], now: datetime) -> List[Pattern]:
    by_date: Dict[str, Dict[str, Review]] = defaultdict(dict)
    for review in reviews:
        # 同一天多次回顾只取第一条
        by_date[review.date.isoformat()].setdefault(review.goal_id, review)

    patterns = []
    for i, first in enumerate(goals):
        for second in goals[i + 1:]:
            shared = 0
            both_success = 0
            for day_reviews in by_date.values():
                a = day_reviews.get(first.id)
                b = day_reviews.get(second.id)
                if a and b:
                    shared += 1
                    if a.is_success and b.is_success:
                        both_success += 1

            if shared >= PAIR_MIN_SHARED_DAYS and both_success / shared >= PAIR_SUCCESS_RATE:
                patterns.append(_pattern(
                    PatternType.OPPORTUNITY,
                    f'"{first.title}" and "{second.title}" work well together',
                    min(shared / 15, 1),
                    [first.id, second.id],
                    now,
                    "These goals reinforce each other. Keep them paired!",
                ))
    return patterns


def deduplicate_patterns(patterns: List[Pattern]) -> List[Pattern]:
    seen = set()
    result = []
    for pattern in patterns:
        key = (pattern.type, pattern.description)
        if key in seen:
            continue
        seen.add(key)
        result.append(pattern)
    return result


def analyze_patterns(
    goals: Sequence[Goal],
    reviews: Sequence[Review],
    now: datetime,
    min_reviews: int = 10,
) -> List[Pattern]:
    if len(reviews) < min_reviews:
        return []

    active_goals = [g for g in goals if g.status == GoalStatus.ACTIVE]
    goal_ids = [g.id for g in active_goals]

    found = (
        analyze_weekday_patterns(reviews, goal_ids, now)
        + analyze_streak_patterns(reviews, active_goals, now)
        + analyze_correlations(reviews, active_goals, now)
    )
    return deduplicate_patterns(found)
