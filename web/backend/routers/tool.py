from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from goalpath.goal_service import GoalService
from interface.tool_dispatcher import ToolDispatcher
from web.backend.deps import current_service

router = APIRouter()


@router.post("")
def run_tool(payload: Dict[str, Any] = Body(...), service: GoalService = Depends(current_service)):
    """Tool-call entry: {"action": "...", ...} in, localized text out."""
    return ToolDispatcher(service).dispatch(payload).to_dict()
