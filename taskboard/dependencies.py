#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TaskBoard - Dependencies
Store and service providers for the FastAPI application
"""

import logging
from typing import Optional

from taskboard.config import settings
from taskboard.core.exceptions import TodoError
from taskboard.core.service import TodoService
from taskboard.core.store import TodoStore

logger = logging.getLogger(__name__)

# ===== SINGLETONS =====

_todo_store: Optional[TodoStore] = None

_todo_service: Optional[TodoService] = None

# ===== INITIALIZATION =====

async def init_todo_store() -> TodoStore:
    global _todo_store

    if _todo_store is None:
        logger.info("🔄 Initializing TodoStore...")
        store = TodoStore(settings.todos_path)
        await store.initialize()
        _todo_store = store
        logger.info(f"✅ TodoStore ready at {settings.todos_path}")

    return _todo_store

async def init_todo_service() -> TodoService:
    global _todo_service

    if _todo_service is None:
        _todo_service = TodoService(await get_todo_store())

    return _todo_service

# ===== PROVIDERS =====

async def get_todo_store() -> TodoStore:
    if _todo_store is None:
        return await init_todo_store()
    return _todo_store

async def get_todo_service() -> TodoService:
    if _todo_service is None:
        return await init_todo_service()
    return _todo_service

async def get_todo_service_if_ready() -> Optional[TodoService]:
    """Service for health probes; None when the store cannot be opened"""
    try:
        return await get_todo_service()
    except TodoError as e:
        logger.error(f"❌ Todo store unavailable: {e}")
        return None
