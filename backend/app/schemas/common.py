import json
import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body accepting camelCase keys (snake_case also accepted)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def isoformat(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def load_json_list(raw: Any) -> list[str]:
    """Decode a JSON string list column; anything unreadable becomes []."""
    if isinstance(raw, list):
        return [str(x) for x in raw]
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return [str(x) for x in parsed] if isinstance(parsed, list) else []


def dump_json_list(values: list[str] | None) -> str:
    return json.dumps(values or [], ensure_ascii=False)


def json_list_pattern(value: str, *, whole_element: bool = False) -> str:
    """Escape `value` the way `dump_json_list` stores it, for LIKE matching.

    With `whole_element` the quotes are kept so only an exact element matches.
    """
    encoded = json.dumps(value, ensure_ascii=False)
    return encoded if whole_element else encoded[1:-1]


def pagination_payload(*, page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
