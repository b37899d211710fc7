from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.common import dump_json_list
from ..schemas.user import SigninRequest, SignupRequest, user_to_public
from ..utils.dependencies import CurrentUser, get_current_user, get_token_service, touch_user_status
from ..utils.error_handlers import (
    ConflictError,
    InvalidCredentialsError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.jwt import TokenService
from ..utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/signup", status_code=201)
def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    # Check if email already exists
    try:
        existing = db.query(User.id).filter(User.email == payload.email).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "checking existing user") from e
    if existing:
        raise ConflictError(get_error_message("email_exists"))

    # Hash password
    try:
        hashed = hash_password(payload.password)
    except ValueError as e:
        raise ValidationError(details=[{"field": "password", "message": str(e)}]) from e

    user = User(
        email=payload.email,
        password=hashed,
        name=payload.name,
        user_type=payload.user_type,
        avatar=payload.avatar,
        bio=payload.bio,
        location=payload.location,
        skills=dump_json_list(payload.skills),
        hourly_rate=payload.hourly_rate,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email.
        db.rollback()
        raise ConflictError(get_error_message("email_exists")) from None
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating user") from e

    logger.info("User %s signed up as %s", user.id, user.user_type)
    return {
        "message": "User created successfully",
        "token": tokens.issue(user.id),
        "user": user_to_public(user, include_private=True),
    }


@router.post("/signin")
def signin(
    payload: SigninRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        user = db.query(User).filter(User.email == payload.email).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "signin") from e

    # Unknown email and wrong password must look the same to the caller.
    if not user or not verify_password(payload.password, user.password):
        raise InvalidCredentialsError()

    user.is_online = True
    user.last_seen = datetime.now(timezone.utc)
    try:
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating online status") from e

    return {
        "message": "Login successful",
        "token": tokens.issue(user.id),
        "user": user_to_public(user, include_private=True),
    }


@router.post("/logout")
def logout(request: Request, user: CurrentUser = Depends(get_current_user)):
    touch_user_status(request.app.state.session_factory, user.id, online=False)
    return {"message": "Logged out successfully"}
