from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.common import json_list_pattern, pagination_payload
from ..schemas.user import user_to_public
from ..utils.error_handlers import NotFoundError, get_error_message, handle_database_error
from ..utils.validation import parse_csv

router = APIRouter(prefix="/api/users", tags=["Freelancers"])


@router.get("/freelancers")
def list_freelancers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, max_length=200),
    skills: str | None = Query(default=None, description="Comma-separated, matches any"),
    location: str | None = Query(default=None, max_length=255),
    min_rating: float | None = Query(default=None, alias="minRating", ge=0),
    max_hourly_rate: float | None = Query(default=None, alias="maxHourlyRate", ge=0),
    is_verified: bool | None = Query(default=None, alias="isVerified"),
    db: Session = Depends(get_db),
):
    q = db.query(User).filter(User.user_type == "freelancer")

    term = (search or "").strip()
    if term:
        q = q.filter(
            or_(
                User.name.icontains(term, autoescape=True),
                User.bio.icontains(term, autoescape=True),
                User.skills.icontains(json_list_pattern(term), autoescape=True),
            )
        )

    # Skills are stored as a JSON list, so match the quoted element.
    wanted_skills = parse_csv(skills)
    if wanted_skills:
        q = q.filter(
            or_(
                *[
                    User.skills.icontains(json_list_pattern(skill, whole_element=True), autoescape=True)
                    for skill in wanted_skills
                ]
            )
        )

    loc = (location or "").strip()
    if loc:
        q = q.filter(User.location.icontains(loc, autoescape=True))

    if min_rating is not None:
        q = q.filter(User.rating >= min_rating)

    if max_hourly_rate is not None:
        q = q.filter(User.hourly_rate <= max_hourly_rate)

    if is_verified is not None:
        q = q.filter(User.is_verified == is_verified)

    try:
        total = q.count()
        freelancers = (
            q.order_by(User.rating.desc(), User.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        raise handle_database_error(e, "listing freelancers") from e

    return {
        "freelancers": [user_to_public(u) for u in freelancers],
        "pagination": pagination_payload(page=page, limit=limit, total=total),
    }


@router.get("/freelancers/{user_id:int}")
def get_freelancer(user_id: int, db: Session = Depends(get_db)):
    user = (
        db.query(User)
        .filter(User.id == user_id, User.user_type == "freelancer")
        .first()
    )
    if not user:
        raise NotFoundError(get_error_message("freelancer_not_found"))
    return {"freelancer": user_to_public(user)}
