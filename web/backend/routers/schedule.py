from fastapi import APIRouter, Depends

from goalpath.goal_service import GoalService
from web.backend.deps import current_service

router = APIRouter()


@router.get("/next")
def next_goal(service: GoalService = Depends(current_service)):
    goal = service.next_goal_needing_attention()
    return {"goal": goal.to_dict() if goal else None}


@router.post("/unlock")
def unlock_sweep(service: GoalService = Depends(current_service)):
    unlocked = service.run_unlock_sweep()
    return {"unlocked": [g.to_dict() for g in unlocked]}
