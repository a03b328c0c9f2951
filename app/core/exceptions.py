from fastapi import HTTPException, status


class KeyNotFoundException(HTTPException):
    """Exception raised when an API key does not exist or is not visible to the user."""

    def __init__(self, detail: str = "API key not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )


class ProjectNotFoundException(HTTPException):
    """Exception raised when a project does not exist, is archived, or belongs to someone else."""

    def __init__(self, detail: str = "Project not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )


class InvalidCredentialsException(HTTPException):
    """Exception raised when sign-in credentials are wrong."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class EmailAlreadyRegisteredException(HTTPException):
    """Exception raised when signing up with an email that already has an account."""

    def __init__(self, detail: str = "An account with this email already exists"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class DemoAccountDisabledException(HTTPException):
    """Exception raised when demo sign-in is requested but disabled."""

    def __init__(self, detail: str = "Demo account is disabled"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class ExternalAPIException(HTTPException):
    """Exception raised when a provider API call fails."""

    def __init__(self, detail: str = "External API call failed"):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail
        )


class PermissionDeniedException(HTTPException):
    """Exception raised when user doesn't have permission."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )
