import logging
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.deps import get_current_user, get_request_id
from app.schemas.auth import SignUpRequest, SignInRequest, TokenResponse, UserResponse
from app.services.user_service import UserService
from app.core.security import create_access_token
from app.core.logging_utils import sanitize_log_message
from app.middleware.rate_limit import rate_limit_auth
from app.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(user: User) -> TokenResponse:
    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@rate_limit_auth()
async def sign_up(
    request: Request,
    payload: SignUpRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Create an account and sign it in.
    Returns 409 when the email is already registered.
    """
    user = await UserService.create_user(
        db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        request_id=get_request_id(request)
    )
    return _token_response(user)


@router.post("/signin", response_model=TokenResponse)
@rate_limit_auth()
async def sign_in(
    request: Request,
    payload: SignInRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Sign in with email and password and return a JWT token.
    """
    request_id = get_request_id(request)
    user = await UserService.authenticate(db, payload.email, payload.password, request_id=request_id)

    logger.info(sanitize_log_message("User signed in", UserID=user.id, RequestID=request_id))
    return _token_response(user)


@router.post("/demo", response_model=TokenResponse)
@rate_limit_auth()
async def demo_sign_in(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Sign in with the shared demo account, creating it on first use.
    Returns 403 when the demo account is disabled.
    """
    request_id = get_request_id(request)
    user = await UserService.ensure_demo_user(db, request_id=request_id)

    logger.info(sanitize_log_message("Demo account signed in", UserID=user.id, RequestID=request_id))
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: User = Depends(get_current_user)
):
    """
    Get current user information from JWT token.
    """
    return current_user
