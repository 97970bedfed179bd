from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any
from datetime import date, datetime
from enum import Enum

from taskboard.utils.datetime_utils import parse_due_date


# Enumerations
class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StatusFilter(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _required_text(v):
    if v is None or not isinstance(v, str) or not v.strip():
        raise ValueError("must be a non-empty string")
    return v.strip()


def _unique_tags(v):
    if v is None:
        return []
    seen = []
    for tag in v:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _optional_category(v):
    if v is None:
        return None
    v = str(v).strip()
    return v or None


# Request models
class TodoCreate(WireModel):
    title: str
    description: str
    priority: Optional[Priority] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[date] = Field(None, alias="dueDate")

    @field_validator('title', 'description', mode='before')
    @classmethod
    def validate_text(cls, v):
        return _required_text(v)

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        return _optional_category(v)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return _unique_tags(v)

    @field_validator('due_date', mode='before')
    @classmethod
    def validate_due_date(cls, v):
        return parse_due_date(v)


class TodoUpdate(WireModel):
    """Partial update; ``model_fields_set`` tells which fields were sent"""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[date] = Field(None, alias="dueDate")

    @field_validator('title', 'description', mode='before')
    @classmethod
    def validate_text(cls, v):
        return _required_text(v)

    @field_validator('completed', 'priority', mode='before')
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        return _optional_category(v)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return _unique_tags(v)

    @field_validator('due_date', mode='before')
    @classmethod
    def validate_due_date(cls, v):
        return parse_due_date(v)


class BulkCompleteRequest(BaseModel):
    ids: List[str]
    completed: bool = True


class BulkDeleteRequest(BaseModel):
    ids: List[str]


# Stored / response models
class Todo(WireModel):
    id: str
    title: str
    description: str
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: Optional[str] = None
    tags: List[str] = []
    due_date: Optional[date] = Field(None, alias="dueDate")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PriorityCounts(BaseModel):
    low: int = 0
    medium: int = 0
    high: int = 0


class TodoAnalytics(WireModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    completion_rate: int = Field(0, alias="completionRate", ge=0, le=100)
    overdue: int = 0
    priorities: PriorityCounts = PriorityCounts()
    created_today: int = Field(0, alias="createdToday")
    created_this_week: int = Field(0, alias="createdThisWeek")
    created_this_month: int = Field(0, alias="createdThisMonth")
    completed_today: int = Field(0, alias="completedToday")
    recent_completions: int = Field(0, alias="recentCompletions")
    productivity_score: int = Field(0, alias="productivityScore", ge=0, le=100)
    categories: Dict[str, int] = {}


class TodoView(WireModel):
    todos: List[Todo] = []
    categories: List[str] = []
    analytics: TodoAnalytics = TodoAnalytics()


class MessageResponse(BaseModel):
    message: str


class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    data: Dict[str, Any] = {}
