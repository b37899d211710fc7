from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..database import get_db
from ..models.job import Job
from ..models.proposal import Proposal
from ..models.user import User
from ..schemas.common import dump_json_list
from ..schemas.job import job_to_public
from ..schemas.user import ProfileUpdate, user_to_public
from ..utils.dependencies import CurrentUser, get_active_user
from ..utils.error_handlers import (
    UnauthorizedError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.validation import validate_job_status

router = APIRouter(prefix="/api/user", tags=["Profile"])


def _load_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError(get_error_message("user_not_found"))
    return user


@router.get("/profile")
def get_profile(
    db: Session = Depends(get_db),
    current: CurrentUser = Depends(get_active_user),
):
    user = _load_user(db, current.id)
    payload = user_to_public(user, include_private=True)
    payload["counts"] = {
        "jobs": db.query(Job).filter(Job.user_id == user.id).count(),
        "proposals": db.query(Proposal).filter(Proposal.freelancer_id == user.id).count(),
    }
    return {"user": payload}


@router.put("/profile")
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current: CurrentUser = Depends(get_active_user),
):
    user = _load_user(db, current.id)

    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        if not payload.name:
            raise ValidationError(details=[{"field": "name", "message": "Name cannot be empty"}])
        user.name = payload.name
    if "bio" in changes:
        user.bio = payload.bio
    if "location" in changes:
        user.location = payload.location
    if "skills" in changes and payload.skills is not None:
        user.skills = dump_json_list(payload.skills)
    if "hourly_rate" in changes:
        user.hourly_rate = payload.hourly_rate
    if "avatar" in changes:
        user.avatar = payload.avatar

    try:
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating profile") from e

    return {
        "message": "Profile updated successfully",
        "user": user_to_public(user, include_private=True),
    }


@router.get("/jobs")
def list_my_jobs(
    status: str | None = Query(default=None, description="open/in_progress/completed/cancelled"),
    db: Session = Depends(get_db),
    current: CurrentUser = Depends(get_active_user),
):
    q = db.query(Job).options(selectinload(Job.proposals)).filter(Job.user_id == current.id)

    if status:
        try:
            q = q.filter(Job.status == validate_job_status(status))
        except ValueError as e:
            raise ValidationError(details=[{"field": "status", "message": str(e)}]) from e

    jobs = q.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return {"jobs": [job_to_public(j, include_owner=False) for j in jobs]}
