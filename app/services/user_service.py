import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.user import User
from app.models.user_settings import UserSettings
from app.config import settings
from app.core.security import verify_password, get_password_hash
from app.core.exceptions import (
    EmailAlreadyRegisteredException,
    InvalidCredentialsException,
    DemoAccountDisabledException
)
from app.core.logging_utils import sanitize_log_message

logger = logging.getLogger(__name__)


class UserService:
    """Service for account creation, credential checks and the demo account."""

    @staticmethod
    async def get_user_by_email(
        db: AsyncSession,
        email: str
    ) -> Optional[User]:
        """
        Get user by email (case-insensitive).

        Args:
            db: Database session
            email: Email address

        Returns:
            User record or None
        """
        result = await db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(
        db: AsyncSession,
        user_id: int
    ) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> User:
        """
        Register a new account with default preferences.

        Args:
            db: Database session
            email: Email address, stored lowercased
            password: Plain password, stored as a bcrypt hash
            full_name: Optional display name
            request_id: Request ID (UUID) for request tracing

        Returns:
            Created User record

        Raises:
            EmailAlreadyRegisteredException: If the email already has an account
        """
        if await UserService.get_user_by_email(db, email):
            logger.warning(
                sanitize_log_message(
                    "Sign-up with already registered email",
                    Email=email,
                    RequestID=request_id
                )
            )
            raise EmailAlreadyRegisteredException()

        user = User(
            email=email.strip().lower(),
            hashed_password=get_password_hash(password),
            full_name=full_name,
        )
        db.add(user)
        await db.flush()

        db.add(UserSettings(user_id=user.id))
        await db.commit()
        await db.refresh(user)

        logger.info(
            sanitize_log_message(
                "User created",
                UserID=user.id,
                RequestID=request_id
            )
        )
        return user

    @staticmethod
    async def authenticate(
        db: AsyncSession,
        email: str,
        password: str,
        request_id: Optional[str] = None
    ) -> User:
        """
        Check email/password credentials.

        Raises:
            InvalidCredentialsException: If the account is unknown, inactive or the password is wrong
        """
        user = await UserService.get_user_by_email(db, email)
        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            logger.warning(
                sanitize_log_message(
                    "Failed sign-in attempt",
                    Email=email,
                    RequestID=request_id
                )
            )
            raise InvalidCredentialsException()
        return user

    @staticmethod
    async def ensure_demo_user(
        db: AsyncSession,
        request_id: Optional[str] = None
    ) -> User:
        """
        Return the shared demo account, creating it on first use.

        Raises:
            DemoAccountDisabledException: If the demo account is turned off
        """
        if not settings.DEMO_USER_ENABLED:
            raise DemoAccountDisabledException()

        user = await UserService.get_user_by_email(db, settings.DEMO_USER_EMAIL)
        if user:
            return user

        return await UserService.create_user(
            db,
            email=settings.DEMO_USER_EMAIL,
            password=settings.DEMO_USER_PASSWORD,
            full_name="Demo",
            request_id=request_id
        )
