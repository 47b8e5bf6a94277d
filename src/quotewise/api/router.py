"""Top-level router: probes at the root, everything else under ``/api``."""

import structlog
from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from quotewise import __version__
from quotewise.api.dependencies import DBSession
from quotewise.config import settings
from quotewise.core.auth.routes import router as auth_router
from quotewise.modules import discover_modules


logger = structlog.get_logger()


class LivenessResponse(BaseModel):
    status: str = "alive"


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


class InfoResponse(BaseModel):
    app: str
    version: str
    environment: str


probes = APIRouter(tags=["health"])


@probes.get("/health/live", response_model=LivenessResponse, summary="Liveness probe")
async def liveness() -> LivenessResponse:
    return LivenessResponse()


@probes.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness(db: DBSession, response: Response) -> ReadinessResponse:
    """Ready once the database answers; 503 with the failing check otherwise."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.warning("readiness_database_failed", error=str(exc))
        database = "unavailable"

    if database != "ok":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="degraded", checks={"database": database})
    return ReadinessResponse(status="ready", checks={"database": database})


@probes.get("/info", response_model=InfoResponse, summary="Application info")
async def info() -> InfoResponse:
    return InfoResponse(app=settings.app_name, version=__version__, environment=settings.environment)


api = APIRouter(prefix="/api")
api.include_router(auth_router)
for module_router in discover_modules():
    api.include_router(module_router)

api_router = APIRouter()
api_router.include_router(probes)
api_router.include_router(api)
