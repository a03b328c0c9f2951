import json
from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.deps import get_current_user, get_action_context
from app.core.expiration import utcnow
from app.models.key_history import HistoryAction
from app.models.user import User
from app.schemas.history import HistoryEntryResponse, HistoryListResponse, ClearHistoryResponse
from app.services.history_service import HistoryService, ActionContext, ACTION_LABELS, describe_entry

router = APIRouter()


@router.get("", response_model=HistoryListResponse)
async def get_history(
    action: Optional[HistoryAction] = Query(None),
    api_key_id: Optional[int] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Query the user's key history with filters, newest first.
    """
    rows, total = await HistoryService.list_history(
        db=db,
        user_id=current_user.id,
        action=action,
        api_key_id=api_key_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset
    )

    return HistoryListResponse(
        entries=[
            HistoryEntryResponse(
                id=row.entry.id,
                action=row.entry.action,
                action_label=ACTION_LABELS[row.entry.action],
                description=describe_entry(row.entry.action, row.entry.details, row.project_name),
                api_key_id=row.entry.api_key_id,
                key_name=row.key_name,
                project_name=row.project_name,
                environment=row.environment,
                details=row.entry.details,
                performed_at=row.entry.performed_at,
                ip_address=row.entry.ip_address,
                user_agent=row.entry.user_agent,
            )
            for row in rows
        ],
        total=total,
        limit=limit,
        offset=offset
    )


@router.get("/export")
async def export_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Download the whole history as a JSON file.
    """
    entries = await HistoryService.export_history(db, current_user.id)
    filename = f"safekey-history-{utcnow().strftime('%Y-%m-%d')}.json"
    return Response(
        content=json.dumps(entries, indent=2, ensure_ascii=False),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.delete("", response_model=ClearHistoryResponse)
async def clear_history(
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Delete every history entry of the user and report what was removed.
    """
    return await HistoryService.clear_history(db, context.user_id, request_id=context.request_id)
