from pydantic import Field, field_validator

from ..models.user import User
from ..utils.validation import (
    clean_string_list,
    validate_email,
    validate_password,
    validate_string_field,
    validate_user_type,
)
from .common import CamelModel, isoformat, load_json_list


class SignupRequest(CamelModel):
    email: str
    password: str
    name: str
    user_type: str  # client / freelancer
    avatar: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=5000)
    location: str | None = Field(default=None, max_length=255)
    skills: list[str] | None = Field(default=None, max_length=50)
    hourly_rate: float | None = Field(default=None, ge=0)

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return validate_string_field(v, "Name", min_length=2, max_length=255)

    @field_validator("user_type")
    @classmethod
    def _check_user_type(cls, v: str) -> str:
        return validate_user_type(v)

    @field_validator("skills")
    @classmethod
    def _dedupe_skills(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else clean_string_list(v, unique=True)


class SigninRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str) -> str:
        return validate_password(v)


class ProfileUpdate(CamelModel):
    # Email and user type are not editable here.
    name: str | None = None
    bio: str | None = Field(default=None, max_length=5000)
    location: str | None = Field(default=None, max_length=255)
    skills: list[str] | None = Field(default=None, max_length=50)
    hourly_rate: float | None = Field(default=None, ge=0)
    avatar: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return validate_string_field(v, "Name", min_length=2, max_length=255, required=False)

    @field_validator("skills")
    @classmethod
    def _dedupe_skills(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else clean_string_list(v, unique=True)


def user_to_public(user: User, *, include_private: bool = False) -> dict:
    """Shape a user for responses. The password hash is never included."""
    payload = {
        "id": user.id,
        "name": user.name,
        "userType": user.user_type,
        "avatar": user.avatar,
        "bio": user.bio,
        "location": user.location,
        "skills": load_json_list(user.skills),
        "hourlyRate": user.hourly_rate,
        "rating": user.rating or 0.0,
        "reviewCount": user.review_count or 0,
        "isVerified": bool(user.is_verified),
        "isOnline": bool(user.is_online),
        "lastSeen": isoformat(user.last_seen),
        "createdAt": isoformat(user.created_at),
    }
    if include_private:
        payload["email"] = user.email
        payload["updatedAt"] = isoformat(user.updated_at)
    return payload
