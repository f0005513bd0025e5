from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.repositories.tracking import SqlTrackingRepository, TrackingRepository
from app.services import auth_service

# auto_error=False so a missing header is a 401, same as a bad token.
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    user = None
    if credentials is not None:
        user = auth_service.get_user_from_token(credentials.credentials, db)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verifies the current user has the admin role.
    Used on every /api/admin/ endpoint.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to access admin features",
        )
    return current_user


def get_tracking_repository(
    request: Request,
    db: Session = Depends(get_db),
) -> TrackingRepository:
    """
    Repository for reading history and favorites.
    With TRACKING_BACKEND=memory the app-wide in-memory store created at
    startup is used; otherwise rows go through the request's DB session.
    """
    if settings.TRACKING_BACKEND == "memory":
        return request.app.state.tracking_repository
    return SqlTrackingRepository(db)
