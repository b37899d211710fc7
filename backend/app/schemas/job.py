from pydantic import Field, field_validator, model_validator

from ..models.job import Job
from ..models.proposal import Proposal
from ..utils.validation import (
    clean_string_list,
    validate_budget_range,
    validate_budget_type,
    validate_job_status,
    validate_string_field,
)
from .common import CamelModel, isoformat, load_json_list


class JobCreate(CamelModel):
    title: str
    description: str
    budget: float = Field(gt=0)
    min_budget: float | None = Field(default=None, gt=0)
    max_budget: float | None = Field(default=None, gt=0)
    budget_type: str = "fixed"
    duration: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = Field(default=None, max_length=30)

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str) -> str:
        return validate_string_field(v, "Title", min_length=5, max_length=150)

    @field_validator("description")
    @classmethod
    def _check_description(cls, v: str) -> str:
        return validate_string_field(v, "Description", min_length=20, max_length=10000)

    @field_validator("budget_type")
    @classmethod
    def _check_budget_type(cls, v: str) -> str:
        return validate_budget_type(v)

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else clean_string_list(v)

    @model_validator(mode="after")
    def _check_range(self):
        validate_budget_range(self.min_budget, self.max_budget)
        return self


class JobUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    budget: float | None = Field(default=None, gt=0)
    min_budget: float | None = Field(default=None, gt=0)
    max_budget: float | None = Field(default=None, gt=0)
    budget_type: str | None = None
    duration: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = Field(default=None, max_length=30)
    status: str | None = None

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str | None) -> str | None:
        return validate_string_field(v, "Title", min_length=5, max_length=150, required=False)

    @field_validator("description")
    @classmethod
    def _check_description(cls, v: str | None) -> str | None:
        return validate_string_field(v, "Description", min_length=20, max_length=10000, required=False)

    @field_validator("budget_type")
    @classmethod
    def _check_budget_type(cls, v: str | None) -> str | None:
        return None if v is None else validate_budget_type(v)

    @field_validator("status")
    @classmethod
    def _check_status(cls, v: str | None) -> str | None:
        return None if v is None else validate_job_status(v)

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else clean_string_list(v)

    @model_validator(mode="after")
    def _check_range(self):
        validate_budget_range(self.min_budget, self.max_budget)
        return self


class ProposalCreate(CamelModel):
    cover_letter: str
    bid_amount: float = Field(gt=0)

    @field_validator("cover_letter")
    @classmethod
    def _check_cover_letter(cls, v: str) -> str:
        return validate_string_field(v, "Cover letter", min_length=20, max_length=5000)


def _owner_summary(job: Job) -> dict | None:
    owner = getattr(job, "user", None)
    if owner is None:
        return None
    return {
        "id": owner.id,
        "name": owner.name,
        "avatar": owner.avatar,
        "isVerified": bool(owner.is_verified),
        "rating": owner.rating or 0.0,
        "reviewCount": owner.review_count or 0,
    }


def job_to_public(job: Job, *, include_owner: bool = True) -> dict:
    payload = {
        "id": job.id,
        "userId": job.user_id,
        "title": job.title,
        "description": job.description,
        "budget": job.budget,
        "minBudget": job.min_budget,
        "maxBudget": job.max_budget,
        "budgetType": job.budget_type or "fixed",
        "duration": job.duration,
        "category": job.category,
        "location": job.location,
        "tags": load_json_list(job.tags),
        "status": job.status or "open",
        "isFeatured": bool(job.is_featured),
        "viewCount": job.view_count or 0,
        "proposalCount": len(job.proposals),
        "createdAt": isoformat(job.created_at),
        "updatedAt": isoformat(job.updated_at),
    }
    if include_owner:
        payload["user"] = _owner_summary(job)
    return payload


def proposal_to_public(proposal: Proposal) -> dict:
    return {
        "id": proposal.id,
        "jobId": proposal.job_id,
        "freelancerId": proposal.freelancer_id,
        "coverLetter": proposal.cover_letter,
        "bidAmount": proposal.bid_amount,
        "status": proposal.status,
        "createdAt": isoformat(proposal.created_at),
    }
