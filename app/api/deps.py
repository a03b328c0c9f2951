import uuid
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.core.security import decode_access_token
from app.external.provider_client import ProviderAPIClient
from app.services.history_service import ActionContext
from app.services.user_service import UserService


# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer(auto_error=True)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get current user from JWT token.
    Dependency for every endpoint scoped to a signed-in user.

    Raises:
        HTTPException: 401 if token is missing/invalid or the account is gone, 403 if inactive
    """
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token payload")

    try:
        user = await UserService.get_user_by_id(db, int(user_id))
    except ValueError:
        raise _unauthorized("Invalid user ID in token")

    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    return user


def get_request_id(request: Request) -> str:
    """Request ID set by LoggingMiddleware, generated here when logging is off."""
    if not hasattr(request.state, "request_id"):
        request.state.request_id = str(uuid.uuid4())
    return request.state.request_id


async def get_action_context(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> ActionContext:
    """
    Request-scoped context recorded with every key history entry.

    Usage:
        @router.post("/keys")
        async def create(context: ActionContext = Depends(get_action_context)):
            ...
    """
    return ActionContext(
        user_id=current_user.id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        request_id=get_request_id(request),
    )


def get_provider_client() -> ProviderAPIClient:
    """Get ProviderAPIClient instance."""
    return ProviderAPIClient()
