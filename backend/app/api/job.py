import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from ..database import get_db
from ..models.job import Job
from ..models.proposal import Proposal
from ..schemas.common import dump_json_list, json_list_pattern, pagination_payload
from ..schemas.job import JobCreate, JobUpdate, ProposalCreate, job_to_public, proposal_to_public
from ..utils.dependencies import CurrentUser
from ..utils.error_handlers import (
    ConflictError,
    NotFoundError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.ownership import get_owned_job
from ..utils.roles import client_only, freelancer_only
from ..utils.validation import normalize_job_sort, validate_budget_range, validate_job_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


def _job_query(db: Session):
    return db.query(Job).options(joinedload(Job.user), selectinload(Job.proposals))


@router.post("", status_code=201)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(client_only),
):
    job = Job(
        user_id=user.id,
        title=payload.title,
        description=payload.description,
        budget=payload.budget,
        min_budget=payload.min_budget,
        max_budget=payload.max_budget,
        budget_type=payload.budget_type,
        duration=payload.duration or None,
        location=payload.location or None,
        category=payload.category or None,
        tags=dump_json_list(payload.tags),
        status="open",
    )

    try:
        db.add(job)
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating job") from e

    logger.info("User %s created job %s", user.id, job.id)
    return {"message": "Job created successfully", "job": job_to_public(job)}


@router.get("")
def list_jobs(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, max_length=200),
    category: str | None = Query(default=None, max_length=100),
    location: str | None = Query(default=None, max_length=255),
    min_budget: float | None = Query(default=None, alias="minBudget", ge=0),
    max_budget: float | None = Query(default=None, alias="maxBudget", ge=0),
    status: str | None = Query(default=None, description="open/in_progress/completed/cancelled"),
    is_featured: bool | None = Query(default=None, alias="isFeatured"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    db: Session = Depends(get_db),
):
    q = db.query(Job)

    term = (search or "").strip()
    if term:
        q = q.filter(
            or_(
                Job.title.icontains(term, autoescape=True),
                Job.description.icontains(term, autoescape=True),
                Job.tags.icontains(json_list_pattern(term), autoescape=True),
            )
        )

    if category:
        q = q.filter(Job.category == category.strip())

    loc = (location or "").strip()
    if loc:
        q = q.filter(Job.location.icontains(loc, autoescape=True))

    if min_budget is not None:
        q = q.filter(Job.budget >= min_budget)
    if max_budget is not None:
        q = q.filter(Job.budget <= max_budget)

    if status:
        try:
            q = q.filter(Job.status == validate_job_status(status))
        except ValueError as e:
            raise ValidationError(details=[{"field": "status", "message": str(e)}]) from e

    if is_featured is not None:
        q = q.filter(Job.is_featured == is_featured)

    attribute, direction = normalize_job_sort(sort_by, sort_order)
    column = getattr(Job, attribute)
    ordering = column.asc() if direction == "asc" else column.desc()

    try:
        total = q.count()
        jobs = (
            q.options(joinedload(Job.user), selectinload(Job.proposals))
            .order_by(ordering, Job.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        raise handle_database_error(e, "listing jobs") from e

    return {
        "jobs": [job_to_public(j) for j in jobs],
        "pagination": pagination_payload(page=page, limit=limit, total=total),
    }


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    job_count = func.count(Job.id)
    rows = (
        db.query(Job.category, job_count)
        .filter(Job.category.isnot(None))
        .group_by(Job.category)
        .order_by(job_count.desc(), Job.category.asc())
        .all()
    )
    return {"categories": [{"category": category, "count": count} for category, count in rows]}


@router.get("/{job_id:int}")
def get_job(job_id: int, db: Session = Depends(get_db)):
    job = _job_query(db).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))

    # Increment in SQL; concurrent readers may still race with the refresh below.
    try:
        db.query(Job).filter(Job.id == job_id).update(
            {Job.view_count: Job.view_count + 1},
            synchronize_session=False,
        )
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "incrementing view count") from e

    return {"job": job_to_public(job)}


@router.put("/{job_id:int}")
def update_job(
    payload: JobUpdate,
    job: Job = Depends(get_owned_job),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)

    for field in ("title", "description", "budget", "budget_type", "status"):
        if field in changes:
            value = getattr(payload, field)
            if value is None:
                raise ValidationError(details=[{"field": field, "message": f"{field} cannot be null"}])
            setattr(job, field, value)

    for field in ("min_budget", "max_budget", "duration", "location", "category"):
        if field in changes:
            setattr(job, field, getattr(payload, field) or None)

    if "tags" in changes:
        job.tags = dump_json_list(payload.tags)

    # Range check against the merged values, not just the submitted ones.
    try:
        validate_budget_range(job.min_budget, job.max_budget)
    except ValueError as e:
        db.rollback()
        raise ValidationError(details=[{"field": "minBudget", "message": str(e)}]) from e

    try:
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating job") from e

    return {"message": "Job updated successfully", "job": job_to_public(job)}


@router.delete("/{job_id:int}", status_code=200)
def delete_job(
    job: Job = Depends(get_owned_job),
    db: Session = Depends(get_db),
):
    job_id = job.id
    try:
        db.delete(job)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "deleting job") from e

    logger.info("Job %s deleted", job_id)
    return {"message": "Job deleted successfully"}


@router.post("/{job_id:int}/proposals", status_code=201)
def submit_proposal(
    job_id: int,
    payload: ProposalCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(freelancer_only),
):
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))

    if job.status != "open":
        raise ValidationError(get_error_message("job_not_open"))

    existing = (
        db.query(Proposal.id)
        .filter(Proposal.job_id == job_id, Proposal.freelancer_id == user.id)
        .first()
    )
    if existing:
        raise ConflictError(get_error_message("already_proposed"))

    proposal = Proposal(
        job_id=job_id,
        freelancer_id=user.id,
        cover_letter=payload.cover_letter,
        bid_amount=payload.bid_amount,
        status="pending",
    )
    try:
        db.add(proposal)
        db.commit()
        db.refresh(proposal)
    except IntegrityError:
        db.rollback()
        raise ConflictError(get_error_message("already_proposed")) from None
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "submitting proposal") from e

    return {"message": "Proposal submitted successfully", "proposal": proposal_to_public(proposal)}
