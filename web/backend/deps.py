"""
Request-scoped collaborators for the HTTP API.

The user comes from the X-User-Id header; without it the configured
default user is served.
"""
from typing import Optional

from fastapi import Header

from goalpath.config_manager import config
from goalpath.goal_service import GoalService
from goalpath.storage import UserStore


def get_goal_service(user_id: Optional[str] = None) -> GoalService:
    return GoalService(UserStore(user_id or config.DEFAULT_USER_ID))


def current_service(x_user_id: Optional[str] = Header(default=None)) -> GoalService:
    # looked up at call time so tests can swap get_goal_service
    return get_goal_service(x_user_id)
