from fastapi import APIRouter, Depends

from goalpath.goal_service import GoalService
from web.backend.deps import current_service

router = APIRouter()


@router.get("/{goal_id:path}/children")
def child_goals(goal_id: str, service: GoalService = Depends(current_service)):
    service.get_goal(goal_id)
    return {"children": [g.to_dict() for g in service.child_goals(goal_id)]}


@router.get("/{goal_id:path}/progress")
def parent_progress(goal_id: str, service: GoalService = Depends(current_service)):
    service.get_goal(goal_id)
    return {"goal_id": goal_id, "progress": service.parent_progress(goal_id)}
