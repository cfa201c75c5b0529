from typing import Optional

from fastapi import APIRouter, Depends

from goalpath.goal_service import GoalService
from web.backend.deps import current_service

router = APIRouter()


@router.get("/patterns")
def stored_patterns(service: GoalService = Depends(current_service)):
    return {"patterns": [p.to_dict() for p in service.stored_patterns()]}


@router.post("/patterns/analyze")
def analyze_patterns(service: GoalService = Depends(current_service)):
    return {"patterns": [p.to_dict() for p in service.analyze_patterns()]}


@router.get("/risks")
def predict_risks(service: GoalService = Depends(current_service)):
    return {"risks": [r.to_dict() for r in service.predict_risks()]}


@router.get("/targets")
def suggest_targets(service: GoalService = Depends(current_service)):
    return {"suggestions": [s.to_dict() for s in service.suggest_targets()]}


@router.get("/coaching/{goal_id:path}")
def coaching(goal_id: str, locale: Optional[str] = None, service: GoalService = Depends(current_service)):
    return {"goal_id": goal_id, "coaching": service.coaching(goal_id, locale)}
