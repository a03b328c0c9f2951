from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.deps import get_current_user, get_action_context
from app.models.user import User
from app.schemas.project import ProjectCreateRequest, ProjectUpdateRequest, ProjectResponse
from app.schemas.api_key import ApiKeyResponse
from app.services.history_service import ActionContext
from app.services.project_service import ProjectService
from app.services.settings_service import SettingsService

router = APIRouter()


def _project_response(project, key_count: int = 0) -> ProjectResponse:
    response = ProjectResponse.model_validate(project)
    response.key_count = key_count
    return response


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    List the user's projects (archived ones excluded) with their active key count.
    """
    projects = await ProjectService.list_projects(db, current_user.id)
    return [_project_response(project, count) for project, count in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreateRequest,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Create a project owned by the current user.
    """
    project = await ProjectService.create_project(
        db,
        context.user_id,
        payload.name,
        payload.description,
        request_id=context.request_id
    )
    return _project_response(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get a project. Archived or foreign projects return 404.
    """
    project = await ProjectService.get_project(db, current_user.id, project_id)
    _, keys = await ProjectService.get_project_keys(db, current_user.id, project_id)
    return _project_response(project, len(keys))


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    payload: ProjectUpdateRequest,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Rename or describe a project.
    Requires the owner or an admin member of the project.
    """
    project = await ProjectService.update_project(
        db,
        context.user_id,
        project_id,
        payload.model_dump(exclude_unset=True),
        request_id=context.request_id
    )
    _, keys = await ProjectService.get_project_keys(db, context.user_id, project_id)
    return _project_response(project, len(keys))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Archive a project. Its keys are kept.
    Requires the owner or an admin member of the project.
    """
    await ProjectService.archive_project(db, context.user_id, project_id, request_id=context.request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/keys", response_model=List[ApiKeyResponse])
async def list_project_keys(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Active keys of a project, newest first.
    """
    project, keys = await ProjectService.get_project_keys(db, current_user.id, project_id)
    user_settings = await SettingsService.get_or_create(db, current_user.id)
    return [
        ApiKeyResponse.from_key(
            key,
            project.name,
            threshold_days=user_settings.expiration_threshold,
            hide_secret=user_settings.hide_api_keys
        )
        for key in keys
    ]
