from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from goalpath.goal_service import GoalService
from scheduler.reminders import remove_reminders, setup_reminders
from web.backend.deps import current_service

router = APIRouter()


class PreferenceRequest(BaseModel):
    key: Literal["locale", "timezone", "reminderTime", "name"]
    value: str


class ReminderRequest(BaseModel):
    morning_cron: Optional[str] = None
    evening_cron: Optional[str] = None
    timezone: Optional[str] = None


@router.get("")
def get_preferences(service: GoalService = Depends(current_service)):
    return {"preferences": service.get_preferences().to_dict()}


@router.put("")
def set_preference(req: PreferenceRequest, service: GoalService = Depends(current_service)):
    prefs = service.set_preference(req.key, req.value)
    return {"preferences": prefs.to_dict()}


@router.post("/reminders")
def create_reminders(req: ReminderRequest, service: GoalService = Depends(current_service)):
    prefs = setup_reminders(service, req.morning_cron, req.evening_cron, req.timezone)
    return {"preferences": prefs.to_dict()}


@router.delete("/reminders")
def delete_reminders(service: GoalService = Depends(current_service)):
    prefs = remove_reminders(service)
    return {"preferences": prefs.to_dict()}
