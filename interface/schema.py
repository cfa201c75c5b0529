"""
Input Schema for goalpath tool calls.

Defines strict input types for every tool action. A payload is a JSON
object tagged by "action"; keys may be given in snake_case or camelCase.
Unknown keys are rejected.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from goalpath.exceptions import ValidationError
from goalpath.models import GoalFrequency, GoalStatus, GoalType, ReviewRating


class ActionInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class AddGoal(ActionInput):
    action: Literal["add"]
    title: str = Field(min_length=1)
    type: GoalType
    frequency: GoalFrequency
    target: float
    unit: str
    why: str
    description: Optional[str] = None
    identity: Optional[str] = None
    parent_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    prerequisites: List[str] = Field(default_factory=list)


class ListGoals(ActionInput):
    action: Literal["list"]
    status: Optional[Literal["locked", "available", "active", "paused", "achieved", "all"]] = None
    tags: Optional[List[str]] = None
    parent_id: Optional[str] = None


class GetGoal(ActionInput):
    action: Literal["get"]
    id: str


class UpdateGoal(ActionInput):
    action: Literal["update"]
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    why: Optional[str] = None
    identity: Optional[str] = None
    target: Optional[float] = None
    unit: Optional[str] = None
    status: Optional[GoalStatus] = None
    tags: Optional[List[str]] = None


class DeleteGoal(ActionInput):
    action: Literal["delete"]
    id: str


class LogCompletion(ActionInput):
    action: Literal["log"]
    goal_id: str
    note: Optional[str] = None
    date: Optional[str] = None


class SubmitReview(ActionInput):
    action: Literal["review"]
    goal_id: str
    rating: ReviewRating
    evidence: str
    value: Optional[float] = None
    date: Optional[str] = None
    obstacles: Optional[List[str]] = None
    wins: Optional[List[str]] = None


class ReviewHistory(ActionInput):
    action: Literal["history"]
    goal_id: str
    limit: Optional[int] = Field(default=None, ge=1)


class UnlockSweep(ActionInput):
    action: Literal["unlock"]


class NextGoal(ActionInput):
    action: Literal["next"]


class AchieveGoal(ActionInput):
    action: Literal["achieve"]
    id: str


class CaptureObstacle(ActionInput):
    action: Literal["capture_obstacle"]
    goal_id: str
    description: str = Field(min_length=1)


class Insights(ActionInput):
    action: Literal["insights"]
    kind: Literal["patterns", "analyze", "risks", "targets"] = "patterns"


class Coaching(ActionInput):
    action: Literal["coaching"]
    goal_id: str


class SetupReminders(ActionInput):
    action: Literal["setup_reminders"]
    morning_cron: Optional[str] = None
    evening_cron: Optional[str] = None
    timezone: Optional[str] = None


class RemoveReminders(ActionInput):
    action: Literal["remove_reminders"]


class SetPreference(ActionInput):
    action: Literal["set_preference"]
    key: Literal["locale", "timezone", "reminderTime", "name"]
    value: str


class GetPreferences(ActionInput):
    action: Literal["get_preferences"]


ToolAction = Annotated[
    Union[
        AddGoal,
        ListGoals,
        GetGoal,
        UpdateGoal,
        DeleteGoal,
        LogCompletion,
        SubmitReview,
        ReviewHistory,
        UnlockSweep,
        NextGoal,
        AchieveGoal,
        CaptureObstacle,
        Insights,
        Coaching,
        SetupReminders,
        RemoveReminders,
        SetPreference,
        GetPreferences,
    ],
    Field(discriminator="action"),
]

_adapter = TypeAdapter(ToolAction)


def parse_action(payload: Dict[str, Any]) -> ActionInput:
    """Validate a raw payload into its action model; raises ValidationError."""
    try:
        return _adapter.validate_python(payload)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "action"
        raise ValidationError(f"{location}: {first.get('msg', 'invalid value')}", field=location) from e
