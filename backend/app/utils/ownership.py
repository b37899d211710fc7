import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.job import Job
from .dependencies import CurrentUser, get_active_user
from .error_handlers import ForbiddenError, NotFoundError, get_error_message

logger = logging.getLogger(__name__)


def get_owned_job(
    job_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_active_user),
) -> Job:
    """Load a job the caller owns, checked against current persisted state on every call.

    Runs before the request body is validated, so a non-owner gets 403 whatever
    the payload looks like.
    """
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))

    if job.user_id != user.id:
        logger.warning("User %s denied %s on job %s", user.id, request.method, job_id)
        key = "job_delete_forbidden" if request.method == "DELETE" else "job_update_forbidden"
        raise ForbiddenError(get_error_message(key))

    return job
