import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from goalpath.exceptions import (
    AlreadyExistsError,
    ConfigError,
    GoalPathError,
    NotFoundError,
    StateError,
    ValidationError,
)
from goalpath.logger import get_logger
from web.backend.routers import goals, hierarchy, insights, obstacles, preferences, reviews, schedule, tool

logger = get_logger("api")

STATUS_CODES = {
    NotFoundError: 404,
    AlreadyExistsError: 409,
    ValidationError: 422,
    StateError: 500,
    ConfigError: 500,
}


def status_for(exc: GoalPathError) -> int:
    for cls, code in STATUS_CODES.items():
        if isinstance(exc, cls):
            return code
    return 400


async def goalpath_error_handler(request: Request, exc: GoalPathError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, code, exc.message)

    return JSONResponse(
        status_code=code,
        content={
            "error": type(exc).__name__,
            "detail": exc.message,
            "hint": exc.hint,
        },
    )


def create_app() -> FastAPI:
    app = FastAPI(title="goalpath API", version="1.0")

    raw_origins = os.getenv("GOALPATH_ALLOWED_ORIGINS", "*")
    allow_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    allow_credentials = "*" not in allow_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GoalPathError, goalpath_error_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "goalpath"}

    app.include_router(goals.router, prefix="/api/v1/goals", tags=["goals"])
    app.include_router(hierarchy.router, prefix="/api/v1/hierarchy", tags=["goals"])
    app.include_router(schedule.router, prefix="/api/v1/schedule", tags=["schedule"])
    app.include_router(reviews.router, prefix="/api/v1/reviews", tags=["reviews"])
    app.include_router(obstacles.router, prefix="/api/v1/obstacles", tags=["obstacles"])
    app.include_router(insights.router, prefix="/api/v1/insights", tags=["insights"])
    app.include_router(preferences.router, prefix="/api/v1/preferences", tags=["preferences"])
    app.include_router(tool.router, prefix="/api/v1/tool", tags=["tool"])

    return app


app = create_app()
