import asyncio
import json
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.api.deps import get_current_user
from app.core.event_bus import KeyEventStream
from app.models.user import User
from app.schemas.dashboard import DashboardResponse, ExpiringKeysNotification
from app.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    search: Optional[str] = Query(None, max_length=200),
    filters: List[str] = Query([]),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=settings.MAX_KEYS_PER_PAGE),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Dashboard statistics and one page of the user's keys.

    filters may be repeated; a key is listed when any filter matches
    (project, environment, key type, provider, expired, 30days or future)
    and the search term matches.
    """
    return await DashboardService.get_dashboard(
        db,
        current_user.id,
        search=search,
        filters=filters,
        page=page,
        page_size=page_size
    )


@router.get("/notifications/expiring", response_model=ExpiringKeysNotification)
async def get_expiring_keys(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Expired and soon-expiring keys, if the user allows expiration notifications.
    """
    return await DashboardService.get_expiring_keys(db, current_user.id)


def _format_event(event: dict) -> str:
    return f"event: {event['event']}\ndata: {json.dumps(event['data'])}\n\n"


async def _event_stream(request: Request, user_id: int):
    with KeyEventStream(user_id) as stream:
        logger.debug(f"Event stream opened for user {user_id}")
        try:
            # Initial comment so clients know the stream is live
            yield ": connected\n\n"
            while not await request.is_disconnected():
                event = await stream.get(timeout=settings.EVENT_STREAM_KEEPALIVE_SECONDS)
                yield _format_event(event) if event else ": keep-alive\n\n"
        except asyncio.CancelledError:
            logger.debug(f"Event stream cancelled for user {user_id}")
            raise
        finally:
            logger.debug(f"Event stream closed for user {user_id}")


@router.get("/events")
async def stream_events(
    request: Request,
    current_user: User = Depends(get_current_user)
):
    """
    Server-sent events telling the client its keys or projects changed.

    Events are key_updated and project_updated, with a JSON payload
    carrying the action and the affected ID.
    """
    return StreamingResponse(
        _event_stream(request, current_user.id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    )
