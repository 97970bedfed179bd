import logging
from typing import Any, Dict, List, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from ..config import settings
from ..core.exceptions import StoreError, TodoError
from ..core.service import TodoService
from ..dependencies import get_todo_service
from ..models import BulkCompleteRequest, BulkDeleteRequest, ExportFormat, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])


def _raise_http(error: TodoError, failure_message: str) -> NoReturn:
    """Domain error -> HTTP error; store details never reach the client"""
    if isinstance(error, StoreError):
        logger.debug(f"{failure_message}: {error}")
        raise HTTPException(status_code=500, detail=failure_message) from error
    raise HTTPException(status_code=error.status_code, detail=str(error)) from error


@router.get("", response_model=List[Dict[str, Any]])
async def list_todos(service: TodoService = Depends(get_todo_service)):
    """
    All todos, newest first
    """
    try:
        return await service.list()
    except TodoError as e:
        _raise_http(e, "Failed to fetch todos")


@router.post("", status_code=201, response_model=Dict[str, Any])
async def create_todo(
    body: Any = Body(...),
    service: TodoService = Depends(get_todo_service)
):
    """
    Create a todo; title and description are required
    """
    try:
        return await service.create(body)
    except TodoError as e:
        _raise_http(e, "Failed to create todo")


@router.post("/bulk/complete", response_model=Dict[str, int])
async def bulk_complete_todos(
    body: BulkCompleteRequest,
    service: TodoService = Depends(get_todo_service)
):
    try:
        matched = await service.bulk_complete(body.ids, body.completed)
        return {"matched": matched}
    except TodoError as e:
        _raise_http(e, "Failed to update todos")


@router.post("/bulk/delete", response_model=Dict[str, int])
async def bulk_delete_todos(
    body: BulkDeleteRequest,
    service: TodoService = Depends(get_todo_service)
):
    try:
        deleted = await service.bulk_delete(body.ids)
        return {"deleted": deleted}
    except TodoError as e:
        _raise_http(e, "Failed to delete todos")


@router.get("/export")
async def export_todos(
    format: ExportFormat = Query(ExportFormat.JSON),
    service: TodoService = Depends(get_todo_service)
):
    """
    Download every todo as JSON or CSV
    """
    if format.value not in settings.EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail=f"Export format '{format.value}' is disabled")

    try:
        content, media_type, filename = await service.export(format)
    except TodoError as e:
        _raise_http(e, "Failed to export todos")

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/{todo_id}", response_model=Dict[str, Any])
async def get_todo(
    todo_id: str,
    service: TodoService = Depends(get_todo_service)
):
    try:
        return await service.get(todo_id)
    except TodoError as e:
        _raise_http(e, "Failed to fetch todo")


@router.put("/{todo_id}", response_model=Dict[str, Any])
async def update_todo(
    todo_id: str,
    body: Any = Body(...),
    service: TodoService = Depends(get_todo_service)
):
    """
    Merge the given fields into the todo and return the stored result
    """
    try:
        return await service.update(todo_id, body)
    except TodoError as e:
        _raise_http(e, "Failed to update todo")


@router.delete("/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: str,
    service: TodoService = Depends(get_todo_service)
):
    try:
        return await service.delete(todo_id)
    except TodoError as e:
        _raise_http(e, "Failed to delete todo")
