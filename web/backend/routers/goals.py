from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from goalpath.goal_service import GoalService
from goalpath.lifecycle import GoalDraft
from goalpath.models import GoalFrequency, GoalStatus, GoalType
from web.backend.deps import current_service

router = APIRouter()


class GoalCreateRequest(BaseModel):
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


class GoalUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    why: Optional[str] = None
    identity: Optional[str] = None
    target: Optional[float] = None
    unit: Optional[str] = None
    status: Optional[GoalStatus] = None
    tags: Optional[List[str]] = None


@router.get("")
def list_goals(
    status: Optional[str] = Query(default=None, pattern="^(locked|available|active|paused|achieved|all)$"),
    tag: Optional[List[str]] = Query(default=None),
    parent_id: Optional[str] = None,
    service: GoalService = Depends(current_service),
):
    goals = service.list_goals(status=status, tags=tag, parent_id=parent_id)
    return {"goals": [g.to_dict() for g in goals]}


@router.post("", status_code=201)
def create_goal(req: GoalCreateRequest, service: GoalService = Depends(current_service)):
    goal = service.create_goal(GoalDraft(**req.model_dump()))
    return {"goal": goal.to_dict()}


# 目标 id 可能含 "/"（子目标）；GET 只保留通用路由，层级查询见 hierarchy.py
@router.post("/{goal_id:path}/achieve")
def achieve_goal(goal_id: str, service: GoalService = Depends(current_service)):
    result = service.achieve_goal(goal_id)
    return {
        "goal": result.goal.to_dict(),
        "unlocked": [g.to_dict() for g in result.unlocked],
    }


@router.get("/{goal_id:path}")
def get_goal(goal_id: str, service: GoalService = Depends(current_service)):
    return {"goal": service.get_goal(goal_id).to_dict()}


@router.patch("/{goal_id:path}")
def update_goal(goal_id: str, req: GoalUpdateRequest, service: GoalService = Depends(current_service)):
    goal = service.update_goal(goal_id, **req.model_dump(exclude_none=True))
    return {"goal": goal.to_dict()}


@router.delete("/{goal_id:path}")
def delete_goal(goal_id: str, service: GoalService = Depends(current_service)):
    goal = service.delete_goal(goal_id)
    return {"deleted": goal.id}
