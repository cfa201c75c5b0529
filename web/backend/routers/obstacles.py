from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from goalpath.goal_service import GoalService
from web.backend.deps import current_service

router = APIRouter()


class ObstacleRequest(BaseModel):
    goal_id: str
    description: str = Field(min_length=1)


@router.post("", status_code=201)
def capture_obstacle(req: ObstacleRequest, service: GoalService = Depends(current_service)):
    obstacle = service.capture_obstacle(req.goal_id, req.description)
    return {"obstacle": obstacle.to_dict()}


@router.get("")
def list_obstacles(
    goal_id: Optional[str] = None,
    include_resolved: bool = False,
    service: GoalService = Depends(current_service),
):
    obstacles = service.list_obstacles(goal_id, include_resolved)
    return {"obstacles": [o.to_dict() for o in obstacles]}


@router.post("/{obstacle_id}/resolve")
def resolve_obstacle(obstacle_id: str, service: GoalService = Depends(current_service)):
    return {"obstacle": service.resolve_obstacle(obstacle_id).to_dict()}
