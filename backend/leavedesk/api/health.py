from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from leavedesk.config import get_settings
from leavedesk.db import SessionDep
from leavedesk.services.events import pending_event_count

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

DatabaseState = Literal["ok", "unreachable"]


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    environment: str
    database: DatabaseState
    pending_events: int


async def _check_database(session: SessionDep) -> DatabaseState:
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("Health check: database unreachable")
        return "unreachable"
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Liveness plus a database round trip; no auth headers required."""
    settings = get_settings()
    database = await _check_database(session)
    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        pending_events=pending_event_count(),
    )
