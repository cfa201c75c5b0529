from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from goalpath.goal_service import GoalService
from goalpath.models import ReviewRating
from web.backend.deps import current_service

router = APIRouter()


class ReviewRequest(BaseModel):
    goal_id: str
    rating: ReviewRating
    evidence: str
    value: Optional[float] = None
    date: Optional[str] = None
    obstacles: Optional[List[str]] = None
    wins: Optional[List[str]] = None


class LogRequest(BaseModel):
    goal_id: str
    note: Optional[str] = None
    date: Optional[str] = None


@router.post("", status_code=201)
def submit_review(req: ReviewRequest, service: GoalService = Depends(current_service)):
    outcome = service.submit_review(
        req.goal_id,
        req.rating,
        req.evidence,
        value=req.value,
        review_date=req.date,
        obstacles=req.obstacles,
        wins=req.wins,
    )
    return outcome.to_dict()


@router.post("/log", status_code=201)
def log_completion(req: LogRequest, service: GoalService = Depends(current_service)):
    outcome = service.log_completion(req.goal_id, note=req.note, review_date=req.date)
    return outcome.to_dict()


@router.get("")
def review_history(
    goal_id: str,
    limit: Optional[int] = Query(default=None, ge=1),
    service: GoalService = Depends(current_service),
):
    reviews = service.review_history(goal_id, limit)
    return {"goal_id": goal_id, "reviews": [r.to_dict() for r in reviews]}
