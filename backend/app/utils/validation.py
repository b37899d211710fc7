"""
Validation utilities shared by request schemas and list endpoints.

The checks raise ValueError so they can be called from pydantic validators;
pydantic turns them into field-level errors and the app reports those as 400.
"""
import re
from typing import Any, Iterable

USER_TYPES = ("client", "freelancer")
JOB_STATUSES = ("open", "in_progress", "completed", "cancelled")
BUDGET_TYPES = ("fixed", "hourly")

# camelCase query value -> Job attribute name
JOB_SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "budget": "budget",
    "title": "title",
    "viewCount": "view_count",
}
DEFAULT_JOB_SORT = ("created_at", "desc")

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_email(email: Any) -> str:
    """Validate email format. Case is preserved; uniqueness follows the DB collation."""
    if not email or not isinstance(email, str):
        raise ValueError("Email is required")

    email = email.strip()
    if len(email) > 255:
        raise ValueError("Email too long (max 255 characters)")

    if not _EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def validate_password(password: Any) -> str:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise ValueError("Password is required")

    if len(password) < 6:
        raise ValueError("Password must be at least 6 characters")

    if len(password) > 128:
        raise ValueError("Password too long (max 128 characters)")

    return password


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValueError(f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise ValueError(f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise ValueError(f"{field_name} must be at least {min_length} characters")

    if len(value) > max_length:
        raise ValueError(f"{field_name} must not exceed {max_length} characters")

    return value


def validate_user_type(user_type: Any) -> str:
    """Validate account role."""
    if not user_type or not isinstance(user_type, str):
        raise ValueError("User type is required")

    user_type = user_type.strip().lower()
    if user_type not in USER_TYPES:
        raise ValueError(f"Invalid user type. Must be one of: {', '.join(USER_TYPES)}")

    return user_type


def validate_job_status(status: Any) -> str:
    """Validate job status. Any allowed status may follow any other."""
    if not status or not isinstance(status, str):
        raise ValueError("Status is required")

    status = status.strip().lower()
    if status not in JOB_STATUSES:
        raise ValueError(f"Invalid status. Must be one of: {', '.join(JOB_STATUSES)}")

    return status


def validate_budget_type(budget_type: Any) -> str:
    if not budget_type or not isinstance(budget_type, str):
        raise ValueError("Budget type is required")

    budget_type = budget_type.strip().lower()
    if budget_type not in BUDGET_TYPES:
        raise ValueError(f"Invalid budget type. Must be one of: {', '.join(BUDGET_TYPES)}")

    return budget_type


def validate_budget_range(min_budget: float | None, max_budget: float | None) -> None:
    if min_budget is not None and max_budget is not None and min_budget > max_budget:
        raise ValueError("minBudget must not exceed maxBudget")


def clean_string_list(values: Iterable[Any] | None, *, unique: bool = False) -> list[str]:
    """Strip entries and drop blanks. With unique=True, keep first occurrences only."""
    if values is None:
        return []

    cleaned: list[str] = []
    seen: set[str] = set()
    for raw in values:
        item = str(raw).strip()
        if not item:
            continue
        if unique:
            if item in seen:
                continue
            seen.add(item)
        cleaned.append(item)
    return cleaned


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated query value like `python,django`."""
    if not value:
        return []
    return clean_string_list(value.split(","), unique=True)


def normalize_job_sort(sort_by: str | None, sort_order: str | None) -> tuple[str, str]:
    """Map caller sort params to (attribute, direction); unknown values fall back to newest first."""
    attribute = JOB_SORT_FIELDS.get((sort_by or "").strip())
    if attribute is None:
        return DEFAULT_JOB_SORT

    direction = (sort_order or "").strip().lower()
    if direction not in ("asc", "desc"):
        direction = DEFAULT_JOB_SORT[1]

    return attribute, direction
