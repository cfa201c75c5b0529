"""
Goal lifecycle: creation, field edits, achievement and deletion.

Status machine:
    locked -> available          (unlock engine, all prerequisites achieved)
    *      -> achieved           (explicit achievement, then unlock check)
    any field edit incl. status  (manual override, no cascading side effects)
A goal created with prerequisites starts locked, otherwise active.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from goalpath.exceptions import AlreadyExistsError, ValidationError
from goalpath.logger import get_logger
from goalpath.models import Goal, GoalFrequency, GoalStatus, GoalType
from goalpath.registry import GoalRegistry
from goalpath.scheduling import next_check_in

logger = get_logger("lifecycle")

UPDATABLE_FIELDS = ("title", "description", "why", "identity", "target", "unit", "status", "tags")
SLUG_MAX_LENGTH = 30


@dataclass
class GoalDraft:
    """Input for goal creation."""
    title: str
    type: GoalType
    frequency: GoalFrequency
    target: float
    unit: str
    why: str
    description: Optional[str] = None
    identity: Optional[str] = None
    parent_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)


def derive_goal_id(title: str, parent_id: Optional[str] = None) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower())
    slug = re.sub(r"^-|-$", "", slug)[:SLUG_MAX_LENGTH]
    if not slug:
        raise ValidationError("Goal title must contain at least one letter or digit", field="title")
    if parent_id:
        return f"{parent_id}/{slug}"
    return slug


def initial_status(prerequisites: List[str]) -> GoalStatus:
    return GoalStatus.LOCKED if prerequisites else GoalStatus.ACTIVE


def _coerce_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name)


def _check_target(target: Any) -> float:
    if isinstance(target, bool) or not isinstance(target, (int, float)):
        raise ValidationError("target must be a number", field="target")
    if target < 0:
        raise ValidationError("target must not be negative", field="target")
    return target


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def create_goal(
    registry: GoalRegistry,
    draft: GoalDraft,
    now: datetime,
    check_in_interval: int,
    owner: str = "",
) -> Goal:
    """
    Build a goal from a draft, add it to the registry and mirror its edges
    (parent.children, prerequisite.unlocks). Nothing is touched on error.
    """
    goal_type = _coerce_enum(GoalType, draft.type, "type")
    frequency = _coerce_enum(GoalFrequency, draft.frequency, "frequency")
    target = _check_target(draft.target)

    goal_id = derive_goal_id(draft.title, draft.parent_id)
    if goal_id in registry:
        raise AlreadyExistsError(goal_id)

    prerequisites = _unique(draft.prerequisites or [])
    if goal_id in prerequisites:
        raise ValidationError("A goal cannot be its own prerequisite", field="prerequisites")

    stamp = now.isoformat()
    goal = Goal(
        id=goal_id,
        title=draft.title,
        why=draft.why,
        type=goal_type,
        frequency=frequency,
        target=target,
        unit=draft.unit,
        status=initial_status(prerequisites),
        description=draft.description,
        identity=draft.identity,
        parent_id=draft.parent_id,
        prerequisites=prerequisites,
        check_in_interval=check_in_interval,
        next_check_in=next_check_in(now, check_in_interval, 0),
        owner=owner,
        tags=_unique(draft.tags or []),
        created_at=stamp,
        updated_at=stamp,
    )
    registry.add(goal)

    if draft.parent_id:
        parent = registry.get(draft.parent_id)
        if parent is None:
            logger.warning("Goal %s references unknown parent %s", goal_id, draft.parent_id)
        elif goal_id not in parent.children:
            parent.children.append(goal_id)

    for prereq_id in prerequisites:
        prereq = registry.get(prereq_id)
        if prereq is None:
            logger.warning("Goal %s references unknown prerequisite %s", goal_id, prereq_id)
        elif goal_id not in prereq.unlocks:
            prereq.unlocks.append(goal_id)

    # goals created earlier may already name this id
    for other in registry:
        if other.id == goal_id:
            continue
        if goal_id in other.prerequisites and other.id not in goal.unlocks:
            goal.unlocks.append(other.id)
        if other.parent_id == goal_id and other.id not in goal.children:
            goal.children.append(other.id)

    return goal


def apply_updates(goal: Goal, updates: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """
    Apply whitelisted field edits and refresh updated_at.

    A status given here is a plain override: no unlock check runs.
    Returns the normalized changes that were applied.
    """
    unknown = sorted(set(updates) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(unknown)}", field=unknown[0])

    changes: Dict[str, Any] = {}
    for key, value in updates.items():
        if value is None:
            continue
        if key == "status":
            value = _coerce_enum(GoalStatus, value, "status")
        elif key == "target":
            value = _check_target(value)
        elif key == "tags":
            value = _unique(list(value))
        changes[key] = value

    for key, value in changes.items():
        setattr(goal, key, value)
    goal.touch(now)
    return changes


def mark_achieved(goal: Goal, now: datetime) -> None:
    goal.status = GoalStatus.ACHIEVED
    goal.progress = 100
    goal.touch(now)


def remove_goal(registry: GoalRegistry, goal_id: str) -> Goal:
    """
    Hard delete. Strips the id from every other goal's children,
    prerequisites and unlocks and detaches the deleted goal's children.
    """
    goal = registry.remove(goal_id)

    for other in registry:
        if goal_id in other.children:
            other.children = [c for c in other.children if c != goal_id]
        if goal_id in other.prerequisites:
            other.prerequisites = [p for p in other.prerequisites if p != goal_id]
        if goal_id in other.unlocks:
            other.unlocks = [u for u in other.unlocks if u != goal_id]
        if other.parent_id == goal_id:
            other.parent_id = None

    return goal
