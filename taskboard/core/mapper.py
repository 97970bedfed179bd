"""
Record mapping between request payloads and stored todo documents.

Stored documents are JSON-native: dates as ``YYYY-MM-DD`` and timestamps
as microsecond ISO strings in UTC, so documents sort by ``createdAt``
as plain strings. Reads return the stored shape unchanged.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from taskboard.config import DEFAULT_PRIORITY
from taskboard.models import TodoCreate, TodoUpdate
from taskboard.utils.datetime_utils import format_timestamp, utcnow
from .exceptions import ValidationError

# Fields a client can never set
PROTECTED_FIELDS = ("id", "createdAt")

# Python attribute -> stored document key
_STORED_KEYS = {
    "title": "title",
    "description": "description",
    "completed": "completed",
    "priority": "priority",
    "category": "category",
    "tags": "tags",
    "due_date": "dueDate",
}


def _describe(error: PydanticValidationError) -> str:
    """Collapse pydantic errors into one readable line"""
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item.get("loc", ())) or "body"
        if item.get("type") == "missing":
            parts.append(f"{field} is required")
        else:
            parts.append(f"{field}: {item.get('msg')}")
    return "; ".join(parts)


def _ensure_mapping(request: Any) -> Dict[str, Any]:
    if not isinstance(request, dict):
        raise ValidationError("Request body must be a JSON object")
    return request


def parse_create(request: Dict[str, Any]) -> TodoCreate:
    try:
        return TodoCreate.model_validate(_ensure_mapping(request))
    except PydanticValidationError as e:
        missing_text = any(
            item.get("loc", ("",))[0] in ("title", "description") for item in e.errors()
        )
        if missing_text:
            raise ValidationError("Title and description are required") from e
        raise ValidationError(_describe(e)) from e


def parse_update(request: Dict[str, Any]) -> TodoUpdate:
    try:
        return TodoUpdate.model_validate(_ensure_mapping(request))
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _stored_value(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field == "priority":
        return value.value
    if field == "due_date":
        return value.isoformat()
    if field == "tags":
        return list(value)
    return value


def to_stored_on_create(request: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Validate a creation request and build the document to insert (no id yet)"""
    data = parse_create(request)
    timestamp = format_timestamp(now or utcnow())

    return {
        "title": data.title,
        "description": data.description,
        "completed": False,
        "priority": data.priority.value if data.priority else DEFAULT_PRIORITY,
        "category": data.category,
        "tags": list(data.tags or []),
        "dueDate": _stored_value("due_date", data.due_date),
        "createdAt": timestamp,
        "updatedAt": timestamp,
    }


def update_fields(changes: TodoUpdate, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Stored fields to overwrite: only those present in the request, plus updatedAt"""
    fields = {
        _STORED_KEYS[name]: _stored_value(name, getattr(changes, name))
        for name in changes.model_fields_set
        if name in _STORED_KEYS
    }
    fields["updatedAt"] = format_timestamp(now or utcnow())
    return fields


def to_stored_on_update(existing: Dict[str, Any], changes: TodoUpdate,
                        now: Optional[datetime] = None) -> Dict[str, Any]:
    merged = {**existing, **update_fields(changes, now)}
    for key in PROTECTED_FIELDS:
        if key in existing:
            merged[key] = existing[key]
    # updatedAt never moves backwards, even if the clock does
    previous = existing.get("updatedAt")
    if isinstance(previous, str) and previous > merged["updatedAt"]:
        merged["updatedAt"] = previous
    return merged
