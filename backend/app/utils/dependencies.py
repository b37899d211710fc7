"""
Request authentication dependencies.

`get_current_user` resolves the bearer token to a live user and exposes only
non-secret columns. `get_active_user` additionally records the caller as
online once the response is sent.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from fastapi import BackgroundTasks, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..database import get_db
from ..models.user import User
from .error_handlers import UnauthorizedError, get_error_message, handle_database_error
from .jwt import TokenError, TokenService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str
    name: str
    user_type: str
    avatar: str | None
    is_verified: bool
    is_online: bool
    last_seen: datetime | None
    created_at: datetime | None


# Columns projected into the identity; the password hash is never loaded.
_IDENTITY_COLUMNS = (
    User.id,
    User.email,
    User.name,
    User.user_type,
    User.avatar,
    User.is_verified,
    User.is_online,
    User.last_seen,
    User.created_at,
)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(get_error_message("token_required"))

    try:
        user_id = tokens.verify(credentials.credentials)
    except TokenError as e:
        logger.info("Rejected bearer token: %s (%s)", type(e).__name__, e)
        raise UnauthorizedError(get_error_message("invalid_token")) from None

    try:
        row = db.query(*_IDENTITY_COLUMNS).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "loading current user") from e

    if row is None:
        # Token is still valid but the account is gone.
        raise UnauthorizedError(get_error_message("user_not_found"))

    return CurrentUser(**row._asdict())


def touch_user_status(session_factory: sessionmaker, user_id: int, *, online: bool = True) -> None:
    """Record online state and last-seen time. Failures are logged, never raised."""
    db = session_factory()
    try:
        db.query(User).filter(User.id == user_id).update(
            {User.is_online: online, User.last_seen: datetime.now(timezone.utc)},
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Failed to update status for user %s: %s", user_id, e)
    finally:
        db.close()


def get_active_user(
    request: Request,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    background_tasks.add_task(touch_user_status, request.app.state.session_factory, user.id)
    return user
