"""Shared API dependencies for authentication and error translation."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from sphere_stage.core.security import decode_access_token
from sphere_stage.db.session import get_db
from sphere_stage.models import User
from sphere_stage.services.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    RankingError,
    UnauthorizedError,
)
from sphere_stage.services.moderation import ModerationGate

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

_ERROR_STATUS: dict[type[RankingError], int] = {
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_http_error(err: RankingError) -> NoReturn:
    """Translate a service error into the matching HTTPException."""
    status_code = _ERROR_STATUS.get(type(err), status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise HTTPException(status_code=status_code, detail=str(err)) from err


def _load_user(db: Session, token: str) -> User:
    try:
        user_id = decode_access_token(token)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    return _load_user(db, credentials.credentials)


def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)
    ],
    db: SessionDep,
) -> User | None:
    """Return the caller when a bearer token is sent, None for anonymous reads."""
    if credentials is None:
        return None
    return _load_user(db, credentials.credentials)


def get_moderation_gate(db: SessionDep) -> ModerationGate:
    """Return a moderation gate bound to the request session."""
    return ModerationGate(db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
GateDep = Annotated[ModerationGate, Depends(get_moderation_gate)]
