"""
Unlock engine: promotes locked goals to available once every prerequisite
is achieved. Both sweeps are idempotent; an empty result is a normal outcome.
"""
from datetime import datetime
from typing import List

from goalpath.models import Goal, GoalStatus
from goalpath.registry import GoalRegistry


def can_unlock(goal: Goal, registry: GoalRegistry) -> bool:
    if goal.status != GoalStatus.LOCKED:
        return False
    if not goal.prerequisites:
        return True

    for prereq_id in goal.prerequisites:
        prereq = registry.get(prereq_id)
        if prereq is None or prereq.status != GoalStatus.ACHIEVED:
            return False
    return True


def _promote(goals: List[Goal], now: datetime) -> List[Goal]:
    for goal in goals:
        goal.status = GoalStatus.AVAILABLE
        goal.touch(now)
    return goals


def unlock_ready(registry: GoalRegistry, now: datetime) -> List[Goal]:
    """Scan the whole collection and promote every goal that can unlock."""
    ready = [g for g in registry if can_unlock(g, registry)]
    return _promote(ready, now)


def unlock_after_achievement(registry: GoalRegistry, achieved_goal_id: str, now: datetime) -> List[Goal]:
    """
    Narrow scan over the achieved goal's unlocks. A dependent goal may still
    wait on other prerequisites, so each candidate is re-checked.
    """
    achieved = registry.get(achieved_goal_id)
    if achieved is None or not achieved.unlocks:
        return []

    candidates = [
        g for g in registry
        if g.id in achieved.unlocks and g.status == GoalStatus.LOCKED
    ]
    ready = [g for g in candidates if can_unlock(g, registry)]
    return _promote(ready, now)
