import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..core.analytics import TodoFilter, TodoSnapshot
from ..core.exceptions import TodoError
from ..core.service import TodoService
from ..dependencies import get_todo_service
from ..models import StatusFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


async def _load_snapshot(service: TodoService) -> TodoSnapshot:
    try:
        return TodoSnapshot.from_records(await service.list())
    except TodoError as e:
        logger.error(f"❌ Failed to load todos for analytics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch todos") from e
    except PydanticValidationError as e:
        # Hand-edited or foreign documents in the store
        logger.exception(f"❌ Stored todo failed validation: {e.error_count()} error(s)")
        raise HTTPException(status_code=500, detail="Failed to fetch todos") from e


@router.get("", response_model=Dict[str, Any])
async def get_analytics(service: TodoService = Depends(get_todo_service)):
    """
    Summary statistics over every todo
    """
    snapshot = await _load_snapshot(service)
    view = snapshot.project(tz=settings.tz, week_start=settings.WEEK_START)
    return view.analytics.model_dump(mode="json", by_alias=True)


@router.get("/view", response_model=Dict[str, Any])
async def get_filtered_view(
    search: str = Query(""),
    status: StatusFilter = Query(StatusFilter.ALL),
    priority: str = Query("all", pattern="^(all|low|medium|high)$"),
    category: str = Query("all"),
    service: TodoService = Depends(get_todo_service)
):
    """
    Filtered todos plus the category list and statistics for the whole set
    """
    snapshot = await _load_snapshot(service)
    criteria = TodoFilter(search=search, status=status, priority=priority, category=category)
    view = snapshot.project(criteria, tz=settings.tz, week_start=settings.WEEK_START)

    result = view.model_dump(mode="json", by_alias=True)
    result["filters"] = {
        "search": search,
        "status": status.value,
        "priority": priority,
        "category": category
    }
    return result
